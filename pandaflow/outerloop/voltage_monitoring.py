# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

from pandaflow.outerloop.base import OuterLoop, OuterLoopStatus

logger = logging.getLogger(__name__)


def standby_generator(bus):
    for g in bus.generators:
        if g.standby_automaton is not None and not g.voltage_control:
            return g
    return None


class VoltageMonitoringOuterLoop(OuterLoop):
    """
    Activation of generators in stand-by, e.g. static var compensators.

    A generator with a stand-by automaton monitors the voltage of its bus. If the voltage gets
    above the high voltage threshold (below the low voltage threshold), the generator starts to
    control the voltage of its bus to the high (low) target voltage and the bus becomes a PV bus.
    An activated generator stays active for the rest of the run.
    """
    name = "VoltageMonitoring"

    def check(self, context):
        activated = 0
        for bus in context.network.buses:
            if not bus.active or bus.has_generator_voltage_control:
                continue
            generator = standby_generator(bus)
            if generator is None:
                continue
            automaton = generator.standby_automaton
            if bus.v > automaton.high_voltage_threshold:
                target_v = automaton.high_target_v
            elif bus.v < automaton.low_voltage_threshold:
                target_v = automaton.low_target_v
            else:
                continue
            generator.target_v = target_v
            generator.target_q = 0.
            bus.generator_voltage_control_enabled = True
            bus.generation_target_q = None
            logger.debug("Bus %s: voltage %.4f pu out of [%.4f, %.4f] pu, generator %s controls "
                         "%.4f pu" % (bus.id, bus.v, automaton.low_voltage_threshold,
                                      automaton.high_voltage_threshold, generator.id, target_v))
            activated += 1
        if activated:
            logger.info("%i stand-by generators activated" % activated)
            return OuterLoopStatus.UNSTABLE
        return OuterLoopStatus.STABLE
