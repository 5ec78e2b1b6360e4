# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

from pandaflow.network.graph import zero_impedance_components

logger = logging.getLogger(__name__)

TARGET_V_EPS = 1e-6


def fix_incompatible_voltage_targets(network):
    """
    Buses connected by zero impedance branches share the same voltage, so only one of them may
    keep its generator voltage control. The slack bus (or else the bus with the lowest number) is
    kept, the voltage control of the other buses is disabled.

    INPUT:
        **network** (LfNetwork) - the network to check

    OUTPUT:
        **disabled** (list) - buses whose voltage control has been disabled
    """
    disabled = []
    for component in zero_impedance_components(network):
        controlled = [network.buses[num] for num in component
                      if network.buses[num].is_voltage_controlled]
        if len(controlled) < 2:
            continue
        controlled.sort(key=lambda b: (not b.slack, b.num))
        kept = controlled[0]
        for bus in controlled[1:]:
            if abs(bus.target_v - kept.target_v) > TARGET_V_EPS:
                logger.warning("Buses %s and %s are connected by zero impedance branches with "
                               "incompatible voltage targets (%.4f and %.4f pu), voltage control "
                               "of bus %s is disabled"
                               % (kept.id, bus.id, kept.target_v, bus.target_v, bus.id))
            else:
                logger.info("Voltage control of bus %s is disabled, it is already controlled "
                            "through bus %s" % (bus.id, kept.id))
            bus.generator_voltage_control_enabled = False
            disabled.append(bus)
    return disabled
