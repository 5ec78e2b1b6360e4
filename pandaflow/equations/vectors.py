# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import numpy as np


class StateVector:
    """
    Current values of the unknowns, indexed by variable row. Every modification increments the
    version, which is what dependent views (equation vector, jacobian) compare against to decide
    whether they have to be recomputed.
    """

    def __init__(self, array=None):
        self._array = np.zeros(0) if array is None else np.array(array, dtype=np.float64)
        self.version = 0

    def get(self):
        return self._array

    def set(self, array):
        self._array = np.array(array, dtype=np.float64)
        self.version += 1

    def minus(self, dx):
        self._array = self._array - dx
        self.version += 1

    def __getitem__(self, row):
        return self._array[row]

    def __len__(self):
        return len(self._array)


class TargetVector:
    """
    Right hand side constants of the active equations, indexed by equation column.

    The targets are read through target_function(equation) and recomputed on read whenever the
    structure or the values of the equation system changed.
    """

    def __init__(self, equation_system, target_function):
        self.equation_system = equation_system
        self._target_function = target_function
        self._array = None
        self._versions = None

    @property
    def array(self):
        es = self.equation_system
        es.index()
        versions = (es.structure_version, es.values_version)
        if self._array is None or versions != self._versions:
            self._array = np.array([self._target_function(eq) for eq in es.sorted_equations],
                                   dtype=np.float64)
            self._versions = versions
        return self._array


class EquationVector:
    """
    Active equations evaluated at the current state, indexed by equation column.
    """

    def __init__(self, equation_system):
        self.equation_system = equation_system
        self._array = None
        self._versions = None

    @property
    def array(self):
        es = self.equation_system
        versions = (es.structure_version, es.values_version, es.state_vector.version)
        if self._array is None or versions != self._versions:
            self._array = es.update_equations()
            self._versions = versions
        return self._array


def mismatch(equation_vector, target_vector):
    return equation_vector.array - target_vector.array
