# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging
import math

import numpy as np

from pandaflow.ac.types import AcVariableType
from pandaflow.equations.vectors import mismatch

logger = logging.getLogger(__name__)


class StateVectorScaling:
    """
    Base class of the Newton step scaling strategies. apply() may scale the step before it is
    applied to the state vector, apply_after() may correct the state once the new mismatch is
    known.
    """
    name = None

    def apply(self, dx, equation_system):
        pass

    def apply_after(self, equation_system, equation_vector, target_vector, stopping_criteria,
                    test_result):
        return test_result


class NoneStateVectorScaling(StateVectorScaling):
    name = "none"


class LineSearchStateVectorScaling(StateVectorScaling):
    """
    Shrinks the last step by step_fold as long as the mismatch norm is higher than the norm of
    the previous iterate, at most max_iteration times.
    """
    name = "line_search"

    def __init__(self, initial_test_result, max_iteration=10, step_fold=4. / 3.):
        self.max_iteration = max_iteration
        self.step_fold = step_fold
        self._last_dx = None
        self._last_norm = initial_test_result.norm

    def apply(self, dx, equation_system):
        self._last_dx = dx.copy()

    def apply_after(self, equation_system, equation_vector, target_vector, stopping_criteria,
                    test_result):
        if self._last_dx is not None and test_result.norm > self._last_norm:
            state_vector = equation_system.state_vector
            dx = self._last_dx
            x_before = state_vector.get() + dx
            step_size = 1.
            iteration = 0
            while test_result.norm > self._last_norm and iteration < self.max_iteration:
                step_size /= self.step_fold
                state_vector.set(x_before - dx * step_size)
                test_result = stopping_criteria.test(mismatch(equation_vector, target_vector),
                                                     equation_system)
                iteration += 1
            logger.debug("line search: step size %.4f after %i iterations, norm %.3e"
                         % (step_size, iteration, test_result.norm))
        self._last_norm = test_result.norm
        return test_result


class MaxVoltageChangeStateVectorScaling(StateVectorScaling):
    """
    Scales the whole step so that no voltage magnitude changes by more than max_dv and no angle by
    more than max_dphi in one iteration.
    """
    name = "max_voltage_change"

    def __init__(self, max_dv=0.1, max_dphi=math.radians(10.)):
        self.max_dv = max_dv
        self.max_dphi = max_dphi

    def apply(self, dx, equation_system):
        scale = 1.
        for variable in equation_system.sorted_variables:
            if variable.type is AcVariableType.BUS_V:
                limit = self.max_dv
            elif variable.type is AcVariableType.BUS_PHI:
                limit = self.max_dphi
            else:
                continue
            change = abs(dx[variable.row])
            if change > limit:
                scale = min(scale, limit / change)
        if scale < 1.:
            logger.debug("voltage change limited, step scaled by %.4f" % scale)
            dx *= scale


def create_state_vector_scaling(parameters, initial_test_result):
    mode = parameters["state_vector_scaling"]
    if mode == "line_search":
        return LineSearchStateVectorScaling(initial_test_result,
                                            parameters["line_search_max_iteration"],
                                            parameters["line_search_step_fold"])
    elif mode == "max_voltage_change":
        return MaxVoltageChangeStateVectorScaling(parameters["max_voltage_change"],
                                                  np.radians(parameters["max_angle_change"]))
    return NoneStateVectorScaling()
