# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

from enum import Enum


class ElementType(Enum):
    BUS = 0
    BRANCH = 1
    SHUNT_COMPENSATOR = 2
    HVDC = 3


class MismatchType(Enum):
    """
    Physical kind of an equation mismatch, used to pick the convergence threshold of the
    per equation type stopping criteria.
    """
    ACTIVE_POWER = "active_power"
    REACTIVE_POWER = "reactive_power"
    VOLTAGE = "voltage"
    ANGLE = "angle"
    RATIO = "ratio"
    SUSCEPTANCE = "susceptance"


def type_order(quantity_type):
    """
    Position of a variable or equation type inside its enumeration. Used to get a stable
    ordering of the equation system rows and columns.
    """
    return type(quantity_type)._member_names_.index(quantity_type.name)
