# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

import numpy as np

from pandaflow.ac.types import AcEquationType, AcVariableType
from pandaflow.outerloop.base import OuterLoop, OuterLoopStatus
from pandaflow.outerloop.incremental import compute_sensitivities, calculate_term_sensitivity, \
    calculate_variable_sensitivity
from pandaflow.outerloop.reactive_limits import generation_q

logger = logging.getLogger(__name__)

DV_EPS = 1e-4
DK_DIFF_MAX_EPS = 1e-3
Q_LIMIT_EPS = 1e-4


def q_to_k(q, bus):
    """
    Position of a reactive power within the limits of a bus: -1 at min_q, 1 at max_q.
    """
    return (2 * q - bus.max_q - bus.min_q) / (bus.max_q - bus.min_q)


def calculate_k(bus):
    return q_to_k(generation_q(bus), bus)


class SecondaryVoltageControlContextData:

    def __init__(self):
        self.reenable_count = dict()


class SecondaryVoltageControlOuterLoop(OuterLoop):
    """
    Secondary voltage control of pilot buses.

    Each zone holds the voltage of its pilot bus at a target by shifting the target voltages of
    its controller buses, so that all controller buses of the zone work at the same position k
    within their reactive power limits (k = -1 at min_q, k = 1 at max_q). After a converged
    solve, the target voltage shifts dv of all enabled controller buses solve the linearized
    system

        A * dk/dv * dv = -A * k0       (same k for the controller buses of a zone)
        dvpilot/dv * dv = target - v   (one row per zone, replaces the last row of the zone)

    with A = I - 1/n per zone. The sensitivities come from one transposed solve of the jacobian
    with a unit target change of each controller bus voltage.

    Controller buses switched to PQ at a reactive power limit do not take part. They are enabled
    again when their limit does not prevent them from helping the pilot bus, at most
    max_reenable times per bus and run. If a new target voltage is out of
    [min_plausible_target_voltage, max_plausible_target_voltage], no target is changed and the
    outer loop fails.
    """
    name = "SecondaryVoltageControl"

    def __init__(self, min_plausible_target_voltage=0.8, max_plausible_target_voltage=1.2,
                 max_reenable=2):
        self.min_plausible_target_voltage = min_plausible_target_voltage
        self.max_plausible_target_voltage = max_plausible_target_voltage
        self.max_reenable = max_reenable

    def create_context_data(self):
        return SecondaryVoltageControlContextData()

    @staticmethod
    def active_controls(network):
        return [control for control in network.secondary_voltage_controls
                if control.pilot_bus.active]

    @staticmethod
    def pilot_dv(control):
        return control.target_value - control.pilot_bus.v

    def reenable_helpful_controller_buses(self, network, data):
        """
        Enables the voltage control of controller buses at a reactive power limit which is not in
        the way of the pilot bus voltage: at min_q if the pilot voltage has to rise, at max_q if
        it has to drop.

        OUTPUT:
            **reenabled** (list) - the buses whose voltage control has been enabled
        """
        reenabled = list()
        for control in self.active_controls(network):
            dv = self.pilot_dv(control)
            if abs(dv) <= DV_EPS:
                continue
            for bus in control.controller_buses:
                if not bus.active or bus.is_voltage_controlled:
                    continue
                q = bus.generation_target_q
                if not (dv > 0 and abs(q - bus.min_q) < Q_LIMIT_EPS
                        or dv < 0 and abs(q - bus.max_q) < Q_LIMIT_EPS):
                    continue
                count = data.reenable_count.get(bus.id, 0)
                if count >= self.max_reenable:
                    continue
                data.reenable_count[bus.id] = count + 1
                bus.generator_voltage_control_enabled = True
                bus.generation_target_q = None
                bus.target_v = bus.v
                logger.debug("Bus %s of zone %s enabled again at %.4f pu to help its pilot bus"
                             % (bus.id, control.zone_name, bus.v))
                reenabled.append(bus)
        return reenabled

    def _zones_to_adjust(self, controls):
        adjusted = list()
        for control in controls:
            dv = self.pilot_dv(control)
            ks = [calculate_k(bus) for bus in control.enabled_controller_buses]
            dk_diff_max = max(ks) - min(ks)
            all_at_limits = all(k > 1 for k in ks) or all(k < -1 for k in ks)
            if abs(dv) > DV_EPS or not all_at_limits and dk_diff_max > DK_DIFF_MAX_EPS:
                logger.debug("Secondary voltage control of zone %s: pilot bus dv %.6f pu, k diff "
                             "max %.4f (k average %.4f)" % (control.zone_name, dv, dk_diff_max,
                                                            np.mean(ks)))
                adjusted.append(control)
        return adjusted

    def calculate_target_v_shifts(self, context, controls):
        """
        Target voltage shift of all enabled controller buses of the given zones.

        OUTPUT:
            **buses** (list) - the controller buses

            **dv** (array) - their target voltage shifts
        """
        es = context.equation_system
        buses = [bus for control in controls for bus in control.enabled_controller_buses]
        index = {bus.num: i for i, bus in enumerate(buses)}
        equations = [es.get_equation(bus.num, AcEquationType.BUS_TARGET_V) for bus in buses]
        sensitivities = compute_sensitivities(context.jacobian, equations)

        n = len(buses)
        a = np.zeros((n, n))
        for control in controls:
            zone = [index[bus.num] for bus in control.enabled_controller_buses]
            for i in zone:
                for j in zone:
                    a[i, j] = 1. - 1. / len(zone) if i == j else -1. / len(zone)

        # dk[j, i]: change of k of controller bus j for a unit target change of bus i
        dk = np.zeros((n, n))
        for j, bus in enumerate(buses):
            dq = np.zeros(n)
            for term in bus.q.terms:
                if term.active:
                    dq += [calculate_term_sensitivity(term, sensitivities, i) for i in range(n)]
            dk[j, :] = 2 * dq / (bus.max_q - bus.min_q)

        k0 = np.array([calculate_k(bus) for bus in buses])
        rhs = -a.dot(k0)
        b = a.dot(dk)
        for control in controls:
            last = index[control.enabled_controller_buses[-1].num]
            v_var = es.get_variable(control.pilot_bus.num, AcVariableType.BUS_V)
            b[last, :] = [calculate_variable_sensitivity(v_var, sensitivities, i)
                          for i in range(n)]
            rhs[last] = self.pilot_dv(control)
        return buses, np.linalg.solve(b, rhs)

    def check(self, context):
        network = context.network
        reenabled = self.reenable_helpful_controller_buses(network, context.data)
        if len(reenabled):
            return OuterLoopStatus.UNSTABLE

        controls = self.active_controls(network)
        blocked = [control.zone_name for control in controls
                   if not len(control.enabled_controller_buses)]
        if len(blocked):
            logger.info("Controller buses of secondary voltage control zones %s cannot produce or "
                        "absorb more reactive power" % blocked)
        controls = [control for control in controls if len(control.enabled_controller_buses)]
        adjusted = self._zones_to_adjust(controls)
        if not len(adjusted):
            return OuterLoopStatus.STABLE

        buses, dv = self.calculate_target_v_shifts(context, controls)
        new_target_v = [bus.target_v + dv[i] for i, bus in enumerate(buses)]
        implausible = {bus.id: v for bus, v in zip(buses, new_target_v)
                       if not self.min_plausible_target_voltage <= v
                       <= self.max_plausible_target_voltage}
        if len(implausible):
            logger.error("Target voltages of the controller buses are not adjusted, some of the "
                         "new target voltages are not plausible: %s" % implausible)
            return OuterLoopStatus.FAILED
        for bus, target_v in zip(buses, new_target_v):
            logger.debug("Target voltage of bus %s: %.6f -> %.6f pu"
                         % (bus.id, bus.target_v, target_v))
            bus.target_v = target_v
        logger.info("%i secondary voltage control zones adjusted: %s"
                    % (len(adjusted), [control.zone_name for control in adjusted]))
        return OuterLoopStatus.UNSTABLE
