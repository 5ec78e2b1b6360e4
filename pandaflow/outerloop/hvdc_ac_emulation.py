# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

from pandaflow.network.elements import AcEmulationStatus
from pandaflow.outerloop.base import OuterLoop, OuterLoopStatus

logger = logging.getLogger(__name__)


class HvdcAcEmulationContextData:

    def __init__(self):
        self.mode_switch_count = dict()
        self.frozen = set()


class HvdcAcEmulationOuterLoop(OuterLoop):
    """
    Mode switching of the HVDC links in AC emulation.

    A FREE link transmits p0 + k * (ph1 - ph2). If this exceeds the maximum power of the feeding
    side, the link is BOUNDED to that maximum. A BOUNDED link gets FREE again as soon as the free
    power, evaluated at the current angles, is back within the limit. If the free power reverses
    beyond the maximum of the other side, the link is BOUNDED to the other side directly.

    A link switches at most max_mode_switch times per run, then its mode is frozen and it is
    treated as stable.
    """
    name = "HvdcAcEmulation"

    def __init__(self, max_mode_switch=2):
        self.max_mode_switch = max_mode_switch

    def create_context_data(self):
        return HvdcAcEmulationContextData()

    @staticmethod
    def ac_emulation_hvdcs(network):
        return [hvdc for hvdc in network.hvdcs if hvdc.p1 is not None and hvdc.active]

    def initialize(self, context):
        for hvdc in self.ac_emulation_hvdcs(context.network):
            hvdc.set_free()
            context.data.mode_switch_count[hvdc.id] = 0

    def check(self, context):
        data = context.data
        status = OuterLoopStatus.STABLE
        for hvdc in self.ac_emulation_hvdcs(context.network):
            if hvdc.id in data.frozen:
                continue
            p1 = hvdc.p1.free_p1()
            if hvdc.status is AcEmulationStatus.FREE:
                if p1 > hvdc.pmax_from_1_to_2:
                    new_side = 1
                elif -p1 > hvdc.pmax_from_2_to_1:
                    new_side = 2
                else:
                    continue
            elif hvdc.feeding_side == 1:
                if -p1 > hvdc.pmax_from_2_to_1:
                    new_side = 2
                elif p1 < hvdc.pmax_from_1_to_2:
                    new_side = None
                else:
                    continue
            elif p1 > hvdc.pmax_from_1_to_2:
                new_side = 1
            elif -p1 < hvdc.pmax_from_2_to_1:
                new_side = None
            else:
                continue

            count = data.mode_switch_count.get(hvdc.id, 0)
            if count >= self.max_mode_switch:
                data.frozen.add(hvdc.id)
                logger.warning("HVDC link %s switched its mode %i times, it is frozen in mode %s"
                               % (hvdc.id, count, hvdc.status.name))
                continue
            data.mode_switch_count[hvdc.id] = count + 1
            if new_side is None:
                hvdc.set_free()
                logger.info("HVDC link %s: free power %.4f pu within limits, mode FREE"
                            % (hvdc.id, p1))
            else:
                hvdc.set_bounded(new_side)
                logger.info("HVDC link %s: free power %.4f pu exceeds the limit of side %i, mode "
                            "BOUNDED to %.4f pu" % (hvdc.id, p1, new_side, hvdc.bounded_p1))
            status = OuterLoopStatus.UNSTABLE
        return status
