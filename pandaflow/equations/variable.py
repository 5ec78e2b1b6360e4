# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

from pandaflow.equations.types import type_order


class Variable:
    """
    Unknown of an equation system.

    A variable is identified by the number of the network element it belongs to and by its
    quantity type. The row is only assigned while the variable is referenced by an active term of
    an active equation, it is -1 otherwise.
    """

    def __init__(self, element_num, type):
        self.element_num = element_num
        self.type = type
        self.row = -1

    @property
    def active(self):
        return self.row >= 0

    def sort_key(self):
        return self.type.element_type.value, self.element_num, type_order(self.type)

    def __repr__(self):
        return "Variable(element_num=%s, type=%s, row=%i)" % (self.element_num, self.type.name,
                                                             self.row)


class VariableSet:
    """
    Creates variables once per (element number, type) so that every term referencing the same
    quantity shares the same variable object.
    """

    def __init__(self):
        self._variables = dict()

    def get_variable(self, element_num, type):
        key = (element_num, type)
        variable = self._variables.get(key)
        if variable is None:
            variable = Variable(element_num, type)
            self._variables[key] = variable
        return variable

    def __iter__(self):
        return iter(self._variables.values())

    def __len__(self):
        return len(self._variables)
