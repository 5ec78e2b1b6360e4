# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

from pandaflow.network.pi_model import PiModel, TapStep, Direction
from pandaflow.network.controls import TransformerPhaseControl, TransformerVoltageControl, \
    ShuntVoltageControl, PhaseControlMode, PhaseControlUnit, SecondaryVoltageControl, \
    StandbyAutomaton
from pandaflow.network.elements import LfBus, LfGenerator, LfBranch, LfShunt, LfHvdc, \
    AcEmulationStatus
from pandaflow.network.network import LfNetwork
from pandaflow.network.graph import create_nxgraph, select_most_meshed_bus, \
    find_energized_buses, zero_impedance_components
from pandaflow.network.voltage_targets import fix_incompatible_voltage_targets
