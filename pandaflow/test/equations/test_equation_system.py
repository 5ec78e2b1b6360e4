# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

import numpy as np
import pytest

from pandaflow.ac.types import AcEquationType, AcVariableType
from pandaflow.auxiliary import ppException
from pandaflow.equations import EquationSystem, VariableTerm, mismatch
from pandaflow.initializers import UniformValueVoltageInitializer

logger = logging.getLogger(__name__)


def _small_system():
    es = EquationSystem("test")
    v0 = es.get_variable(0, AcVariableType.BUS_V)
    v1 = es.get_variable(1, AcVariableType.BUS_V)
    phi1 = es.get_variable(1, AcVariableType.BUS_PHI)
    es.create_equation(1, AcEquationType.BUS_TARGET_Q).add_terms(
        [VariableTerm(v1, 2.), VariableTerm(phi1)])
    es.create_equation(0, AcEquationType.BUS_TARGET_V).add_term(VariableTerm(v0))
    es.create_equation(1, AcEquationType.BUS_TARGET_PHI).add_term(VariableTerm(phi1))
    return es, v0, v1, phi1


def test_variables_are_shared():
    es = EquationSystem()
    assert es.get_variable(3, AcVariableType.BUS_V) is es.get_variable(3, AcVariableType.BUS_V)
    assert es.get_variable(3, AcVariableType.BUS_V) is not \
        es.get_variable(3, AcVariableType.BUS_PHI)
    assert len(es.variable_set) == 2


def test_index_is_sorted_by_element_and_type():
    es, v0, v1, phi1 = _small_system()
    assert [(eq.element_num, eq.type) for eq in es.sorted_equations] == [
        (0, AcEquationType.BUS_TARGET_V),
        (1, AcEquationType.BUS_TARGET_Q),
        (1, AcEquationType.BUS_TARGET_PHI)]
    assert [eq.column for eq in es.sorted_equations] == [0, 1, 2]
    assert (v0.row, v1.row, phi1.row) == (0, 1, 2)
    assert es.row_count == es.column_count == 3


def test_deactivation_reindexes():
    es, v0, v1, phi1 = _small_system()
    es.index()
    structure_version = es.structure_version

    es.get_equation(0, AcEquationType.BUS_TARGET_V).active = False
    assert es.structure_version == structure_version + 1
    assert es.column_count == 2
    assert v0.row == -1
    assert es.get_equation(0, AcEquationType.BUS_TARGET_V).column == -1
    assert (v1.row, phi1.row) == (0, 1)

    # setting the same activation again is not a structural change
    es.get_equation(0, AcEquationType.BUS_TARGET_V).active = False
    assert es.structure_version == structure_version + 1


def test_term_deactivation_removes_variable():
    es, v0, v1, phi1 = _small_system()
    q_eq = es.get_equation(1, AcEquationType.BUS_TARGET_Q)
    q_eq.terms[0].active = False
    assert es.row_count == 2
    assert not v1.active


def test_update_equations_is_pure(two_bus, parameters):
    from pandaflow.ac.equation_system_creator import create_ac_equation_system
    es = create_ac_equation_system(two_bus, parameters)
    assert es.row_count == 4
    x = np.array([1.02, 0.01, 0.95, -0.08])
    first = es.update_equations(x.copy())
    second = es.update_equations(x.copy())
    assert np.array_equal(first, second)
    # evaluating elsewhere and coming back gives the same values
    es.update_equations(x + 0.05)
    assert np.array_equal(es.update_equations(x.copy()), first)


def test_vectors_revalidate_on_read(two_bus, parameters):
    from pandaflow.ac.equation_system_creator import create_ac_equation_system
    from pandaflow.ac.targets import AcTargetFunction
    es = create_ac_equation_system(two_bus, parameters)
    initializer = UniformValueVoltageInitializer()
    initializer.prepare(two_bus)
    es.create_state_vector(initializer)
    target_vector = es.create_target_vector(AcTargetFunction(two_bus, parameters))
    equation_vector = es.create_equation_vector()

    p_column = es.get_equation(1, AcEquationType.BUS_TARGET_P).column
    assert np.isclose(target_vector.array[p_column], -1.)
    assert np.isclose(equation_vector.array[p_column], 0.)

    two_bus.add_load("b2", p=0.5)
    # targets are only read again once the values are marked as changed
    assert np.isclose(target_vector.array[p_column], -1.)
    es.mark_values_changed()
    assert np.isclose(target_vector.array[p_column], -1.5)

    phi_row = es.get_variable(1, AcVariableType.BUS_PHI).row
    x = es.state_vector.get().copy()
    x[phi_row] = -0.1
    es.state_vector.set(x)
    assert not np.isclose(equation_vector.array[p_column], 0.)
    assert np.allclose(mismatch(equation_vector, target_vector),
                       equation_vector.array - target_vector.array)


def test_find_largest_mismatches():
    es, v0, v1, phi1 = _small_system()
    largest = es.find_largest_mismatches(np.array([0.1, -0.5, 0.2]), count=2)
    assert [(eq.type, m) for eq, m in largest] == [(AcEquationType.BUS_TARGET_Q, -0.5),
                                                   (AcEquationType.BUS_TARGET_PHI, 0.2)]


def test_inactive_variable_cannot_be_evaluated():
    es, v0, v1, phi1 = _small_system()
    es.get_equation(0, AcEquationType.BUS_TARGET_V).active = False
    es.index()
    term = VariableTerm(v0)
    es.attach(term)
    with pytest.raises(ppException):
        term.eval()


if __name__ == '__main__':
    pytest.main([__file__, "-xs"])
