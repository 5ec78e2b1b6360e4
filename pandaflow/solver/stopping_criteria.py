# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

from collections import namedtuple

import numpy as np
from numba import jit

from pandaflow.equations.types import MismatchType

TestResult = namedtuple("TestResult", ["stop", "norm"])


@jit(nopython=True, cache=False)
def _norm(mismatch):
    s = 0.
    for i in range(mismatch.shape[0]):
        s += mismatch[i] * mismatch[i]
    return np.sqrt(s)


@jit(nopython=True, cache=False)
def _all_within(mismatch, eps):
    for i in range(mismatch.shape[0]):
        if not abs(mismatch[i]) < eps[i]:
            return False
    return True


class StoppingCriteria:
    """
    Base class of the Newton stopping criteria.
    """

    def test(self, mismatch, equation_system):
        raise NotImplementedError

    @property
    def max_norm_tolerance(self):
        """
        Bound on the largest absolute mismatch that guarantees the criteria to be fulfilled.
        """
        raise NotImplementedError


class UniformCriteria(StoppingCriteria):
    """
    Stops when the L2 norm of the mismatch vector is strictly lower than
    conv_eps_per_eq * sqrt(number of equations).
    """

    def __init__(self, conv_eps_per_eq=1e-4):
        self.conv_eps_per_eq = conv_eps_per_eq

    def test(self, mismatch, equation_system=None):
        mismatch = np.asarray(mismatch, dtype=np.float64)
        norm = _norm(mismatch)
        return TestResult(bool(norm < self.conv_eps_per_eq * np.sqrt(len(mismatch))), norm)

    @property
    def max_norm_tolerance(self):
        return self.conv_eps_per_eq / 2


class PerEquationTypeCriteria(StoppingCriteria):
    """
    Stops when every single mismatch is strictly lower than the threshold of its equation type.
    Power thresholds are given in per unit.
    """

    def __init__(self, max_active_power_mismatch, max_reactive_power_mismatch,
                 max_voltage_mismatch, max_angle_mismatch, max_ratio_mismatch,
                 max_susceptance_mismatch):
        self.thresholds = {
            MismatchType.ACTIVE_POWER: max_active_power_mismatch,
            MismatchType.REACTIVE_POWER: max_reactive_power_mismatch,
            MismatchType.VOLTAGE: max_voltage_mismatch,
            MismatchType.ANGLE: max_angle_mismatch,
            MismatchType.RATIO: max_ratio_mismatch,
            MismatchType.SUSCEPTANCE: max_susceptance_mismatch,
        }

    def test(self, mismatch, equation_system):
        mismatch = np.asarray(mismatch, dtype=np.float64)
        eps = np.array([self.thresholds[eq.type.mismatch_type]
                        for eq in equation_system.sorted_equations], dtype=np.float64)
        return TestResult(bool(_all_within(mismatch, eps)), _norm(mismatch))

    @property
    def max_norm_tolerance(self):
        return min(self.thresholds.values()) / 2


def create_stopping_criteria(parameters):
    if parameters["stopping_criteria"] == "uniform":
        return UniformCriteria(parameters["conv_eps_per_eq"])
    base_mva = parameters["base_mva"]
    return PerEquationTypeCriteria(
        max_active_power_mismatch=parameters["max_active_power_mismatch"] / base_mva,
        max_reactive_power_mismatch=parameters["max_reactive_power_mismatch"] / base_mva,
        max_voltage_mismatch=parameters["max_voltage_mismatch"],
        max_angle_mismatch=parameters["max_angle_mismatch"],
        max_ratio_mismatch=parameters["max_ratio_mismatch"],
        max_susceptance_mismatch=parameters["max_susceptance_mismatch"])
