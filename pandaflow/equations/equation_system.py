# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

import numpy as np

from pandaflow.equations.equation import Equation
from pandaflow.equations.variable import VariableSet
from pandaflow.equations.vectors import StateVector, TargetVector, EquationVector

logger = logging.getLogger(__name__)


class EquationSystem:
    """
    Container of the variables and equations of a load flow problem.

    Equations and variables are keyed by (element number, type). Active equations get a column and
    the variables referenced by their active terms get a row. Rows and columns are reassigned from
    scratch on the first read after a structural change (an equation or a term added or
    (de)activated). Value changes (new targets, new tap positions) only increment values_version
    and never touch the indexing.

    INPUT:
        **name** (str, "") - name used in log messages
    """

    def __init__(self, name=""):
        self.name = name
        self.variable_set = VariableSet()
        self.state_vector = StateVector()
        self._equations = dict()
        self.structure_version = 0
        self.values_version = 0
        self._index_version = -1
        self._sorted_equations = []
        self._sorted_variables = []

    # --- equations and variables

    def create_equation(self, element_num, type):
        key = (element_num, type)
        equation = self._equations.get(key)
        if equation is None:
            equation = Equation(element_num, type, self)
            self._equations[key] = equation
            self.notify_structure_change()
        return equation

    def get_equation(self, element_num, type):
        return self._equations.get((element_num, type))

    def has_equation(self, element_num, type):
        return (element_num, type) in self._equations

    def get_variable(self, element_num, type):
        return self.variable_set.get_variable(element_num, type)

    @property
    def equations(self):
        return list(self._equations.values())

    def attach(self, term):
        term.equation_system = self
        term.state_vector = self.state_vector

    # --- change tracking

    def notify_structure_change(self):
        self.structure_version += 1

    def mark_values_changed(self):
        self.values_version += 1

    # --- indexing

    def index(self):
        if self._index_version == self.structure_version:
            return
        for equation in self._equations.values():
            equation.column = -1
        for variable in self.variable_set:
            variable.row = -1

        equations = sorted((eq for eq in self._equations.values() if eq.active),
                           key=Equation.sort_key)
        variables = dict()
        for column, equation in enumerate(equations):
            equation.column = column
            for term in equation.terms:
                if term.active:
                    for variable in term.variables:
                        variables[variable] = None
        variables = sorted(variables, key=lambda v: v.sort_key())
        for row, variable in enumerate(variables):
            variable.row = row

        self._sorted_equations = equations
        self._sorted_variables = variables
        self._index_version = self.structure_version
        logger.debug("equation system %s indexed: %i equations, %i variables"
                     % (self.name, len(equations), len(variables)))

    @property
    def sorted_equations(self):
        self.index()
        return self._sorted_equations

    @property
    def sorted_variables(self):
        self.index()
        return self._sorted_variables

    @property
    def column_count(self):
        return len(self.sorted_equations)

    @property
    def row_count(self):
        return len(self.sorted_variables)

    # --- evaluation

    def update_equations(self, x=None):
        """
        Evaluates all active equations.

        OPTIONAL:
            **x** (array, None) - state to evaluate the equations at, the current state vector
            is used if None

        OUTPUT:
            **values** (array) - equation values indexed by column
        """
        if x is not None:
            self.state_vector.set(x)
        equations = self.sorted_equations
        return np.array([eq.eval() for eq in equations], dtype=np.float64)

    def create_state_vector(self, initializer):
        """
        Seeds the state vector with initializer.get_value(variable) for every active variable.
        """
        variables = self.sorted_variables
        x = np.array([initializer.get_value(variable) for variable in variables],
                     dtype=np.float64)
        self.state_vector.set(x)
        return self.state_vector

    def create_target_vector(self, target_function):
        return TargetVector(self, target_function)

    def create_equation_vector(self):
        return EquationVector(self)

    def find_largest_mismatches(self, mismatch, count=5):
        """
        Returns the (equation, mismatch) pairs of the count largest absolute mismatches.
        """
        equations = self.sorted_equations
        order = np.argsort(-np.abs(mismatch), kind="stable")[:count]
        return [(equations[i], mismatch[i]) for i in order]

    def __repr__(self):
        return "EquationSystem(%s: %i equations, %i variables)" % (
            self.name, len(self._equations), len(self.variable_set))
