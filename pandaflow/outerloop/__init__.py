# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

from pandaflow.outerloop.base import OuterLoop, OuterLoopStatus, OuterLoopContext
from pandaflow.outerloop.incremental import ControllerContext, IncrementalContextData, \
    compute_sensitivities, calculate_term_sensitivity, calculate_variable_sensitivity
from pandaflow.outerloop.active_power_distribution import ActivePowerDistribution, \
    ActivePowerDistributionStep, GenerationActivePowerDistributionStep, \
    LoadActivePowerDistributionStep, create_active_power_distribution
from pandaflow.outerloop.distributed_slack import DistributedSlackOuterLoop
from pandaflow.outerloop.incremental_phase_control import IncrementalPhaseControlOuterLoop
from pandaflow.outerloop.incremental_voltage_control import \
    IncrementalTransformerVoltageControlOuterLoop, IncrementalShuntVoltageControlOuterLoop
from pandaflow.outerloop.hvdc_ac_emulation import HvdcAcEmulationOuterLoop
from pandaflow.outerloop.reactive_limits import ReactiveLimitsOuterLoop
from pandaflow.outerloop.secondary_voltage_control import SecondaryVoltageControlOuterLoop
from pandaflow.outerloop.voltage_monitoring import VoltageMonitoringOuterLoop
from pandaflow.outerloop.factory import OUTER_LOOP_FACTORIES, create_outer_loops
from pandaflow.outerloop.engine import AcLoadFlowContext, AcLoadFlowEngine, AcLoadFlowResult
