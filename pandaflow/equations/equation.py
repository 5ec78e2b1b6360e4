# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

from pandaflow.auxiliary import ppException
from pandaflow.equations.types import type_order


class EquationTerm:
    """
    Base class of all equation terms.

    A term contributes a scalar value and the partial derivatives of that value with respect to a
    fixed list of variables. Terms read the current unknowns from the state vector of the equation
    system they are attached to. A term can be deactivated independently of its equation, e.g.
    when the branch it models is disabled.
    """

    def __init__(self):
        self._active = True
        self.equation = None
        self.equation_system = None
        self.state_vector = None

    @property
    def active(self):
        return self._active

    @active.setter
    def active(self, active):
        if active != self._active:
            self._active = active
            if self.equation_system is not None:
                self.equation_system.notify_structure_change()

    @property
    def variables(self):
        raise NotImplementedError("variables() has to be implemented by %s"
                                  % self.__class__.__name__)

    def eval(self):
        raise NotImplementedError("eval() has to be implemented by %s" % self.__class__.__name__)

    def der(self, variable):
        raise NotImplementedError("der() has to be implemented by %s" % self.__class__.__name__)

    def _x(self, variable):
        if variable.row < 0:
            raise ppException("%s cannot be evaluated, %s is not an active variable"
                              % (self.__class__.__name__, variable))
        return self.state_vector[variable.row]

    def __repr__(self):
        return "%s(%s)" % (self.__class__.__name__, ", ".join(str(v) for v in self.variables))


class VariableTerm(EquationTerm):
    """
    Term equal to a single variable multiplied by a constant coefficient.
    """

    def __init__(self, variable, coefficient=1.):
        super().__init__()
        self.variable = variable
        self.coefficient = coefficient

    @property
    def variables(self):
        return [self.variable]

    def eval(self):
        return self.coefficient * self._x(self.variable)

    def der(self, variable):
        return self.coefficient if variable is self.variable else 0.


class Equation:
    """
    Constraint of an equation system: the sum of its active terms has to be equal to a target.

    The column is only assigned while the equation is active.
    """

    def __init__(self, element_num, type, equation_system):
        self.element_num = element_num
        self.type = type
        self.equation_system = equation_system
        self.terms = []
        self._active = True
        self.column = -1

    @property
    def active(self):
        return self._active

    @active.setter
    def active(self, active):
        if active != self._active:
            self._active = active
            self.equation_system.notify_structure_change()

    def add_term(self, term):
        term.equation = self
        self.equation_system.attach(term)
        self.terms.append(term)
        self.equation_system.notify_structure_change()
        return self

    def add_terms(self, terms):
        for term in terms:
            self.add_term(term)
        return self

    def eval(self):
        value = 0.
        for term in self.terms:
            if term.active:
                value += term.eval()
        return value

    def derivatives(self):
        """
        Yields (variable, derivative) pairs of all active terms, a variable may appear several
        times.
        """
        for term in self.terms:
            if term.active:
                for variable in term.variables:
                    yield variable, term.der(variable)

    def sort_key(self):
        return self.type.element_type.value, self.element_num, type_order(self.type)

    def __repr__(self):
        return "Equation(element_num=%s, type=%s, column=%i)" % (self.element_num,
                                                                self.type.name, self.column)
