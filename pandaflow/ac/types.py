# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

from enum import Enum

from pandaflow.equations.types import ElementType, MismatchType


class AcVariableType(Enum):
    BUS_V = ("v", ElementType.BUS)
    BUS_PHI = ("phi", ElementType.BUS)
    SHUNT_B = ("b", ElementType.SHUNT_COMPENSATOR)
    BRANCH_ALPHA1 = ("alpha1", ElementType.BRANCH)
    BRANCH_RHO1 = ("rho1", ElementType.BRANCH)
    DUMMY_P = ("dummy_p", ElementType.BRANCH)
    DUMMY_Q = ("dummy_q", ElementType.BRANCH)

    def __init__(self, symbol, element_type):
        self.symbol = symbol
        self.element_type = element_type


class AcEquationType(Enum):
    BUS_TARGET_P = ("bus_p", ElementType.BUS, MismatchType.ACTIVE_POWER)
    BUS_TARGET_Q = ("bus_q", ElementType.BUS, MismatchType.REACTIVE_POWER)
    BUS_TARGET_V = ("bus_v", ElementType.BUS, MismatchType.VOLTAGE)
    BUS_TARGET_PHI = ("bus_phi", ElementType.BUS, MismatchType.ANGLE)
    BRANCH_TARGET_ALPHA1 = ("branch_alpha1", ElementType.BRANCH, MismatchType.ANGLE)
    BRANCH_TARGET_RHO1 = ("branch_rho1", ElementType.BRANCH, MismatchType.RATIO)
    SHUNT_TARGET_B = ("shunt_b", ElementType.SHUNT_COMPENSATOR, MismatchType.SUSCEPTANCE)
    ZERO_V = ("zero_v", ElementType.BRANCH, MismatchType.VOLTAGE)
    ZERO_PHI = ("zero_phi", ElementType.BRANCH, MismatchType.ANGLE)

    def __init__(self, symbol, element_type, mismatch_type):
        self.symbol = symbol
        self.element_type = element_type
        self.mismatch_type = mismatch_type
