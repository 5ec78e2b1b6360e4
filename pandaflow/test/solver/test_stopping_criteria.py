# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import numpy as np
import pytest

from pandaflow.ac.equation_system_creator import create_ac_equation_system
from pandaflow.equations.types import MismatchType
from pandaflow.solver import UniformCriteria, PerEquationTypeCriteria, create_stopping_criteria
from pandaflow.parameters import create_parameters


def test_uniform_criteria_is_strict():
    criteria = UniformCriteria(0.5)
    # norm 1.0 equals 0.5 * sqrt(4)
    result = criteria.test(np.array([0.5] * 4))
    assert not result.stop
    assert result.norm == pytest.approx(1.)
    assert criteria.test(np.array([0.49] * 4)).stop
    assert criteria.test(np.zeros(4)).stop


def test_uniform_criteria_max_norm_tolerance():
    criteria = UniformCriteria(1e-4)
    mismatch = np.full(10, criteria.max_norm_tolerance)
    assert criteria.test(mismatch).stop


def _mismatch(es, values):
    return np.array([values[eq.type.mismatch_type] for eq in es.sorted_equations])


def test_per_equation_type_criteria(four_bus, parameters):
    es = create_ac_equation_system(four_bus, parameters)
    criteria = PerEquationTypeCriteria(max_active_power_mismatch=1e-4,
                                       max_reactive_power_mismatch=1e-3,
                                       max_voltage_mismatch=1e-5, max_angle_mismatch=1e-6,
                                       max_ratio_mismatch=1e-5, max_susceptance_mismatch=1e-4)
    values = {MismatchType.ACTIVE_POWER: 0.9e-4, MismatchType.REACTIVE_POWER: 0.9e-3,
              MismatchType.VOLTAGE: 0.9e-5, MismatchType.ANGLE: 0.}
    assert criteria.test(_mismatch(es, values), es).stop

    # a reactive power mismatch fine for the reactive threshold but above the active one
    values[MismatchType.ACTIVE_POWER] = 0.9e-3
    assert not criteria.test(_mismatch(es, values), es).stop

    values[MismatchType.ACTIVE_POWER] = 1e-4
    assert not criteria.test(_mismatch(es, values), es).stop
    assert criteria.max_norm_tolerance == pytest.approx(0.5e-6)


def test_create_stopping_criteria():
    assert isinstance(create_stopping_criteria(create_parameters()), UniformCriteria)
    criteria = create_stopping_criteria(create_parameters(stopping_criteria="per_equation_type",
                                                          max_active_power_mismatch=1.,
                                                          base_mva=100.))
    # power thresholds are given in MW and Mvar
    assert criteria.thresholds[MismatchType.ACTIVE_POWER] == pytest.approx(1e-2)
    assert criteria.thresholds[MismatchType.VOLTAGE] == 1e-4


if __name__ == '__main__':
    pytest.main([__file__, "-xs"])
