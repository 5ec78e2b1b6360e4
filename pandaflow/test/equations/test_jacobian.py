# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

import numpy as np
import pytest

from pandaflow.ac.types import AcEquationType, AcVariableType
from pandaflow.auxiliary import ppException, LinearSolveFailure
from pandaflow.equations import EquationSystem, JacobianMatrix, VariableTerm

logger = logging.getLogger(__name__)


def _perturbed_state(es, seed=1):
    rng = np.random.RandomState(seed)
    x = np.zeros(es.row_count)
    for variable in es.sorted_variables:
        if variable.type is AcVariableType.BUS_V:
            x[variable.row] = 1. + 0.05 * rng.uniform(-1, 1)
        else:
            x[variable.row] = 0.1 * rng.uniform(-1, 1)
    return x


def test_jacobian_matches_finite_differences(four_bus_system):
    net, es, jacobian, _ = four_bus_system
    x = _perturbed_state(es)
    es.state_vector.set(x)
    analytic = jacobian.matrix.toarray()
    assert analytic.shape == (es.row_count, es.column_count)

    h = 1e-6
    for row in range(es.row_count):
        dx = np.zeros_like(x)
        dx[row] = h
        numeric = (es.update_equations(x + dx) - es.update_equations(x - dx)) / (2 * h)
        assert np.allclose(analytic[row, :], numeric, atol=1e-5)


def test_solve_transposed(four_bus_system):
    net, es, jacobian, _ = four_bus_system
    es.state_vector.set(_perturbed_state(es))
    rhs = np.arange(es.column_count, dtype=np.float64)
    expected = np.linalg.solve(jacobian.matrix.toarray().T, rhs)

    x = jacobian.solve_transposed(rhs)
    assert x is rhs
    assert np.allclose(x, expected)

    # several right hand sides at once
    rhs2 = np.eye(es.column_count)[:, :2]
    x2 = jacobian.solve_transposed(rhs2)
    assert x2.shape == (es.row_count, 2)


def test_revalidation_on_read(four_bus_system):
    net, es, jacobian, _ = four_bus_system
    es.state_vector.set(_perturbed_state(es))
    jacobian.matrix
    assert (jacobian.rebuild_count, jacobian.update_count) == (1, 1)

    # reading again without any change
    jacobian.matrix
    jacobian.factorization()
    assert (jacobian.rebuild_count, jacobian.update_count) == (1, 1)

    # new state: values only
    es.state_vector.set(_perturbed_state(es, seed=2))
    jacobian.matrix
    assert (jacobian.rebuild_count, jacobian.update_count) == (1, 2)

    # new target values: values only
    es.mark_values_changed()
    jacobian.matrix
    assert (jacobian.rebuild_count, jacobian.update_count) == (1, 3)

    # deactivated terms: structure
    branch = net.get_branch("l24")
    for term in (branch.p1, branch.q1, branch.p2, branch.q2):
        term.active = False
    jacobian.matrix
    assert jacobian.rebuild_count == 2


def test_singular_jacobian():
    es = EquationSystem()
    v0 = es.get_variable(0, AcVariableType.BUS_V)
    v1 = es.get_variable(1, AcVariableType.BUS_V)
    es.create_equation(0, AcEquationType.BUS_TARGET_V).add_terms(
        [VariableTerm(v0), VariableTerm(v1)])
    es.create_equation(1, AcEquationType.BUS_TARGET_V).add_terms(
        [VariableTerm(v0, 2.), VariableTerm(v1, 2.)])
    es.state_vector.set([1., 1.])
    with JacobianMatrix(es) as jacobian:
        with pytest.raises(LinearSolveFailure):
            jacobian.solve_transposed(np.ones(2))


def test_not_square_jacobian():
    es = EquationSystem()
    v0 = es.get_variable(0, AcVariableType.BUS_V)
    es.create_equation(0, AcEquationType.BUS_TARGET_V).add_term(VariableTerm(v0))
    es.create_equation(0, AcEquationType.BUS_TARGET_Q).add_term(VariableTerm(v0))
    es.state_vector.set([1.])
    with JacobianMatrix(es) as jacobian:
        with pytest.raises(LinearSolveFailure):
            jacobian.factorization()


def test_closed_jacobian():
    es = EquationSystem()
    v0 = es.get_variable(0, AcVariableType.BUS_V)
    es.create_equation(0, AcEquationType.BUS_TARGET_V).add_term(VariableTerm(v0))
    es.state_vector.set([1.])
    with JacobianMatrix(es) as jacobian:
        assert np.allclose(jacobian.solve_transposed(np.array([2.])), [2.])
    assert jacobian.closed
    with pytest.raises(ppException):
        jacobian.matrix


if __name__ == '__main__':
    pytest.main([__file__, "-xs"])
