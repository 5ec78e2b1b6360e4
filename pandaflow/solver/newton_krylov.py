# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

import numpy as np
from scipy.optimize import newton_krylov, NoConvergence
from scipy.sparse.linalg import LinearOperator

from pandaflow.auxiliary import LinearSolveFailure
from pandaflow.solver.base import AbstractAcSolver
from pandaflow.solver.result import SolverStatus

logger = logging.getLogger(__name__)


class JacobianPreconditioner(LinearOperator):
    """
    Inverse of the jacobian at the last accepted nonlinear iterate, used as preconditioner of the
    inner Krylov solves. scipy calls setup() once and update() after every nonlinear step.
    """

    def __init__(self, equation_system, jacobian):
        n = equation_system.row_count
        super().__init__(dtype=np.float64, shape=(n, n))
        self.equation_system = equation_system
        self.jacobian = jacobian
        self._lu = None

    def setup(self, x, f, func):
        self.update(x, f)

    def update(self, x, f):
        self.equation_system.state_vector.set(x)
        self._lu = self.jacobian.factorization()

    def _matvec(self, v):
        return self._lu.solve(np.asarray(v, dtype=np.float64).ravel(), trans="T")


class NewtonKrylov(AbstractAcSolver):
    """
    Solves the AC equation system with scipy's Newton-Krylov solver. The residual is the same
    mismatch as for Newton-Raphson, the jacobian of the equation system is used as preconditioner
    of the inner Krylov iterations.
    """
    name = "Newton-Krylov"

    def run(self, initializer):
        self._initialize_state(initializer)
        es = self.equation_system
        state_vector = es.state_vector

        f = self._mismatch(0)
        test = self.stopping_criteria.test(f, es)
        if test.stop:
            return self._finish(SolverStatus.CONVERGED, 0)

        iterations = [0]

        def residual(x):
            state_vector.set(x)
            return self._mismatch(iterations[0])

        def callback(x, fx):
            iterations[0] += 1
            logger.debug("%s iteration %i, largest mismatch %.3e"
                         % (self.name, iterations[0], np.max(np.abs(fx))))

        status = None
        x = state_vector.get().copy()
        try:
            preconditioner = JacobianPreconditioner(es, self.jacobian)
            x = newton_krylov(residual, x, f_tol=self.stopping_criteria.max_norm_tolerance,
                              maxiter=self.parameters["max_iteration"], inner_M=preconditioner,
                              callback=callback)
        except NoConvergence as e:
            x = e.args[0]
            status = SolverStatus.MAX_ITERATION_REACHED
        except (LinearSolveFailure, ValueError, np.linalg.LinAlgError) as e:
            logger.error("%s failed at iteration %i: %s" % (self.name, iterations[0], e))
            return self._finish(SolverStatus.SOLVER_FAILED, iterations[0])

        state_vector.set(np.asarray(x, dtype=np.float64))
        if status is None:
            test = self.stopping_criteria.test(self._mismatch(iterations[0]), es)
            status = SolverStatus.CONVERGED if test.stop else SolverStatus.MAX_ITERATION_REACHED
        return self._finish(status, iterations[0])
