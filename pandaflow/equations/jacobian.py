# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

import numpy as np
from scipy.sparse import csc_matrix
from scipy.sparse.linalg import splu

from pandaflow.auxiliary import ppException, LinearSolveFailure

logger = logging.getLogger(__name__)


class JacobianMatrix:
    """
    Sparse image of the partial derivatives of the active equations of an equation system.

    The matrix is stored with variables as rows and equations as columns, so the Newton system
    J * dx = f is solved with a transposed solve. The sparsity pattern is rebuilt when the
    structure of the equation system changed, the values are refilled and refactorized when the
    state or the values changed. Both are done lazily on the next read.

    The jacobian holds a sparse LU factorization and should be released with close() or used as a
    context manager.

    INPUT:
        **equation_system** (EquationSystem) - the equation system to differentiate
    """

    def __init__(self, equation_system):
        self.equation_system = equation_system
        self._rows = None
        self._columns = None
        self._derivatives = None
        self._matrix = None
        self._lu = None
        self._versions = None
        self.rebuild_count = 0
        self.update_count = 0
        self.closed = False

    def _build_structure(self):
        es = self.equation_system
        rows, columns, derivatives = list(), list(), list()
        for equation in es.sorted_equations:
            for term in equation.terms:
                if not term.active:
                    continue
                for variable in term.variables:
                    rows.append(variable.row)
                    columns.append(equation.column)
                    derivatives.append((term, variable))
        self._rows = np.array(rows, dtype=np.int64)
        self._columns = np.array(columns, dtype=np.int64)
        self._derivatives = derivatives
        self.rebuild_count += 1
        logger.debug("jacobian structure built with %i non zero elements" % len(derivatives))

    def _update_values(self):
        es = self.equation_system
        values = np.fromiter((term.der(variable) for term, variable in self._derivatives),
                             dtype=np.float64, count=len(self._derivatives))
        self._matrix = csc_matrix((values, (self._rows, self._columns)),
                                  shape=(es.row_count, es.column_count))
        self._lu = None
        self.update_count += 1

    def _revalidate(self):
        if self.closed:
            raise ppException("The jacobian has already been released")
        es = self.equation_system
        es.index()
        versions = (es.structure_version, es.values_version, es.state_vector.version)
        if self._versions is None or versions[0] != self._versions[0]:
            self._build_structure()
            self._update_values()
        elif versions != self._versions:
            self._update_values()
        self._versions = versions

    @property
    def matrix(self):
        self._revalidate()
        return self._matrix

    def factorization(self):
        """
        Returns the LU factorization of the current matrix. The returned object stays valid after
        the jacobian has been refactorized.
        """
        self._revalidate()
        if self._lu is None:
            row_count, column_count = self._matrix.shape
            if row_count != column_count:
                raise LinearSolveFailure("The jacobian is not square (%i variables, %i equations)"
                                         % (row_count, column_count))
            try:
                self._lu = splu(self._matrix)
            except RuntimeError as e:
                raise LinearSolveFailure("Factorization of the jacobian failed: %s" % e) from e
        return self._lu

    def solve_transposed(self, rhs):
        """
        Solves J^T * x = rhs, with J^T the matrix of the derivatives of the equations (rows) with
        respect to the variables (columns).

        INPUT:
            **rhs** (array) - right hand side indexed by equation column, may have several
            columns. A float array is overwritten with the solution.

        OUTPUT:
            **x** (array) - solution indexed by variable row
        """
        lu = self.factorization()
        b = np.asarray(rhs, dtype=np.float64)
        try:
            x = lu.solve(b, trans="T")
        except (RuntimeError, ValueError) as e:
            raise LinearSolveFailure("Solve of the jacobian failed: %s" % e) from e
        if not np.all(np.isfinite(x)):
            raise LinearSolveFailure("Solve of the jacobian returned non finite values")
        if b is rhs:
            rhs[...] = x
            return rhs
        return x

    def close(self):
        self._lu = None
        self._matrix = None
        self._derivatives = None
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
