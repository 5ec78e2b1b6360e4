# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

from pandaflow.outerloop.base import OuterLoop, OuterLoopStatus

logger = logging.getLogger(__name__)

Q_EPS = 1e-5


class ReactiveLimitsContextData:

    def __init__(self):
        # bus id -> name of the violated limit
        self.switched_to_pq = dict()
        self.pq_to_pv_count = dict()
        self.locked = set()


def generation_q(bus):
    return bus.q.eval() + bus.load_target_q


class ReactiveLimitsOuterLoop(OuterLoop):
    """
    Enforces the reactive power limits of voltage controlling generators.

    A PV bus whose generation reactive power leaves [min_q, max_q] becomes a PQ bus with the
    reactive power fixed at the violated limit. A bus switched to PQ by this loop gets back to PV
    when its voltage is on the side of the target voltage the generator could hold again: above
    the target at the upper limit, below the target at the lower limit. A bus goes back to PV at
    most max_pv_pq_switch times per run, then it stays PQ. The slack bus is never switched.
    """
    name = "ReactiveLimits"

    def __init__(self, max_pv_pq_switch=2):
        self.max_pv_pq_switch = max_pv_pq_switch

    def create_context_data(self):
        return ReactiveLimitsContextData()

    def check(self, context):
        data = context.data
        pv_to_pq = self._check_pv_buses(context.network, data)
        pq_to_pv = self._check_pq_buses(context.network, data, pv_to_pq)
        if len(pv_to_pq) or pq_to_pv:
            logger.info("%i buses switched from PV to PQ, %i from PQ to PV"
                        % (len(pv_to_pq), pq_to_pv))
            return OuterLoopStatus.UNSTABLE
        return OuterLoopStatus.STABLE

    def _check_pv_buses(self, network, data):
        switched = set()
        for bus in network.buses:
            if not bus.active or bus.slack or not bus.is_voltage_controlled:
                continue
            q = generation_q(bus)
            if q > bus.max_q + Q_EPS:
                limit, q_limit = "max_q", bus.max_q
            elif q < bus.min_q - Q_EPS:
                limit, q_limit = "min_q", bus.min_q
            else:
                continue
            data.switched_to_pq[bus.id] = limit
            bus.generator_voltage_control_enabled = False
            bus.generation_target_q = q_limit
            logger.debug("Bus %s: generation q %.4f pu beyond %s %.4f pu, switched to PQ"
                         % (bus.id, q, limit, q_limit))
            switched.add(bus.id)
        return switched

    def _check_pq_buses(self, network, data, just_switched):
        count = 0
        for bus_id, limit in list(data.switched_to_pq.items()):
            bus = network.get_bus(bus_id)
            if bus_id in just_switched or bus_id in data.locked:
                continue
            if not bus.active or bus.is_voltage_controlled:
                continue
            target_v = bus.target_v
            if limit == "max_q" and not bus.v > target_v \
                    or limit == "min_q" and not bus.v < target_v:
                continue
            switches = data.pq_to_pv_count.get(bus_id, 0)
            if switches >= self.max_pv_pq_switch:
                data.locked.add(bus_id)
                logger.warning("Bus %s switched %i times from PQ to PV, it stays PQ"
                               % (bus_id, switches))
                continue
            data.pq_to_pv_count[bus_id] = switches + 1
            del data.switched_to_pq[bus_id]
            bus.generator_voltage_control_enabled = True
            bus.generation_target_q = None
            logger.debug("Bus %s: voltage %.4f pu back on the controllable side of %.4f pu, "
                         "switched to PV" % (bus_id, bus.v, target_v))
            count += 1
        return count
