# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

from pandaflow.ac.types import AcEquationType
from pandaflow.auxiliary import ppException


class AcTargetFunction:
    """
    Reads the target of an AC equation from the network.

    HVDC links that are not in AC emulation are fixed active power setpoints from side 1 to
    side 2, they are part of the active power targets of their buses.
    """

    def __init__(self, network, parameters):
        self.network = network
        self.hvdc_ac_emulation = parameters["hvdc_ac_emulation"]

    def __call__(self, equation):
        return self.get_target(equation)

    def get_target(self, equation):
        type, num = equation.type, equation.element_num
        if type is AcEquationType.BUS_TARGET_P:
            bus = self.network.buses[num]
            return bus.target_p - self._fixed_hvdc_p(bus)
        elif type is AcEquationType.BUS_TARGET_Q:
            return self.network.buses[num].target_q
        elif type is AcEquationType.BUS_TARGET_V:
            return self.network.buses[num].target_v
        elif type is AcEquationType.BUS_TARGET_PHI:
            return 0.
        elif type is AcEquationType.BRANCH_TARGET_ALPHA1:
            return self.network.branches[num].pi_model.a1
        elif type is AcEquationType.BRANCH_TARGET_RHO1:
            return self.network.branches[num].pi_model.r1
        elif type is AcEquationType.SHUNT_TARGET_B:
            return self.network.shunts[num].b
        elif type is AcEquationType.ZERO_V or type is AcEquationType.ZERO_PHI:
            return 0.
        raise ppException("No target defined for equation type %s" % type)

    def _fixed_hvdc_p(self, bus):
        p = 0.
        for hvdc in bus.hvdcs:
            if hvdc.active and not (self.hvdc_ac_emulation and hvdc.ac_emulation):
                p += hvdc.p0 if hvdc.bus1 is bus else -hvdc.p0
        return p

    def slack_bus_active_power_mismatch(self, bus):
        """
        Calculated minus targeted active power of a bus whose active power equation is not
        solved, which is the power the slack bus takes above its target.
        """
        return bus.p.eval() - self.get_target(bus.p)
