# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

from pandaflow.auxiliary import ConfigurationError
from pandaflow.outerloop.active_power_distribution import create_active_power_distribution
from pandaflow.outerloop.distributed_slack import DistributedSlackOuterLoop
from pandaflow.outerloop.hvdc_ac_emulation import HvdcAcEmulationOuterLoop
from pandaflow.outerloop.incremental_phase_control import IncrementalPhaseControlOuterLoop
from pandaflow.outerloop.incremental_voltage_control import \
    IncrementalTransformerVoltageControlOuterLoop, IncrementalShuntVoltageControlOuterLoop
from pandaflow.outerloop.reactive_limits import ReactiveLimitsOuterLoop
from pandaflow.outerloop.secondary_voltage_control import SecondaryVoltageControlOuterLoop
from pandaflow.outerloop.voltage_monitoring import VoltageMonitoringOuterLoop

logger = logging.getLogger(__name__)


def _distributed_slack(parameters):
    return DistributedSlackOuterLoop(
        create_active_power_distribution(parameters),
        slack_bus_p_max_mismatch=parameters["slack_bus_p_max_mismatch"] / parameters["base_mva"],
        failure_behavior=parameters["slack_distribution_failure_behavior"])


def _incremental_phase_control(parameters):
    return IncrementalPhaseControlOuterLoop(
        max_tap_shift=parameters["incremental_transformer_max_tap_shift"],
        max_direction_change=parameters["max_direction_change"])


def _reactive_limits(parameters):
    return ReactiveLimitsOuterLoop(max_pv_pq_switch=parameters["max_pv_pq_switch"])


def _secondary_voltage_control(parameters):
    return SecondaryVoltageControlOuterLoop(
        min_plausible_target_voltage=parameters["min_plausible_target_voltage"],
        max_plausible_target_voltage=parameters["max_plausible_target_voltage"],
        max_reenable=parameters["max_pv_pq_switch"])


def _voltage_monitoring(parameters):
    return VoltageMonitoringOuterLoop()


def _incremental_transformer_voltage_control(parameters):
    return IncrementalTransformerVoltageControlOuterLoop(
        max_tap_shift=parameters["incremental_transformer_max_tap_shift"],
        max_direction_change=parameters["max_direction_change"])


def _incremental_shunt_voltage_control(parameters):
    return IncrementalShuntVoltageControlOuterLoop(
        max_direction_change=parameters["max_direction_change"])


def _hvdc_ac_emulation(parameters):
    return HvdcAcEmulationOuterLoop(max_mode_switch=parameters["max_hvdc_mode_switch"])


# name -> (factory, parameter enabling the outer loop), in the default order
OUTER_LOOP_FACTORIES = {
    DistributedSlackOuterLoop.name: (_distributed_slack, "distributed_slack"),
    IncrementalPhaseControlOuterLoop.name: (_incremental_phase_control, "phase_shifter_control"),
    ReactiveLimitsOuterLoop.name: (_reactive_limits, "enforce_q_lims"),
    SecondaryVoltageControlOuterLoop.name: (_secondary_voltage_control,
                                            "secondary_voltage_control"),
    VoltageMonitoringOuterLoop.name: (_voltage_monitoring, "voltage_monitoring"),
    IncrementalTransformerVoltageControlOuterLoop.name: (_incremental_transformer_voltage_control,
                                                         "transformer_voltage_control"),
    IncrementalShuntVoltageControlOuterLoop.name: (_incremental_shunt_voltage_control,
                                                   "shunt_voltage_control"),
    HvdcAcEmulationOuterLoop.name: (_hvdc_ac_emulation, "hvdc_ac_emulation"),
}


def create_outer_loops(parameters, factories=None):
    """
    Creates the outer loops of a load flow.

    If parameters["outer_loops"] is None, the outer loops enabled by their parameter are created
    in the default order. Otherwise the given list of names is created in the given order.

    INPUT:
        **parameters** (ADict) - load flow parameters

    OPTIONAL:
        **factories** (dict, None) - name -> (factory(parameters), enabling parameter or None)
        mapping, OUTER_LOOP_FACTORIES if None

    OUTPUT:
        **outer_loops** (list) - the outer loops

    EXAMPLE:
        parameters = create_parameters(outer_loops=["ReactiveLimits", "DistributedSlack"])
        outer_loops = create_outer_loops(parameters)
    """
    if factories is None:
        factories = OUTER_LOOP_FACTORIES
    names = parameters["outer_loops"]
    if names is None:
        names = [name for name, (_, flag) in factories.items()
                 if flag is None or parameters[flag]]
    outer_loops = list()
    for name in names:
        if name not in factories:
            raise ConfigurationError("Unknown outer loop %s, available are %s"
                                     % (name, list(factories.keys())))
        if any(outer_loop.name == name for outer_loop in outer_loops):
            raise ConfigurationError("Outer loop %s is configured twice" % name)
        factory, _ = factories[name]
        outer_loops.append(factory(parameters))
    logger.debug("outer loops: %s" % [outer_loop.name for outer_loop in outer_loops])
    return outer_loops
