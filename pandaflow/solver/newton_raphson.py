# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

from pandaflow.auxiliary import LinearSolveFailure
from pandaflow.solver.base import AbstractAcSolver
from pandaflow.solver.result import SolverStatus
from pandaflow.solver.state_vector_scaling import create_state_vector_scaling

logger = logging.getLogger(__name__)


class NewtonRaphson(AbstractAcSolver):
    """
    Solves the AC equation system with a full Newton method.

    Every iteration solves J * dx = f(x) - target with the jacobian refactorized at the current
    state, scales dx with the configured state vector scaling and moves the state to x - dx. The
    run stops with CONVERGED as soon as the stopping criteria are fulfilled,
    MAX_ITERATION_REACHED after max_iteration iterations, or SOLVER_FAILED if the linear solve
    fails.
    """
    name = "Newton-Raphson"

    def run(self, initializer):
        self._initialize_state(initializer)
        es = self.equation_system
        max_iteration = self.parameters["max_iteration"]

        f = self._mismatch(0)
        test = self.stopping_criteria.test(f, es)
        scaling = create_state_vector_scaling(self.parameters, test)
        logger.debug("%s initial mismatch norm %.3e" % (self.name, test.norm))

        iterations = 0
        status = SolverStatus.CONVERGED if test.stop else None
        while status is None:
            if iterations >= max_iteration:
                status = SolverStatus.MAX_ITERATION_REACHED
                break
            try:
                f, test = self._iterate(f, scaling, iterations)
            except LinearSolveFailure as e:
                logger.error("%s failed at iteration %i: %s" % (self.name, iterations, e))
                status = SolverStatus.SOLVER_FAILED
                break
            iterations += 1
            if test.stop:
                status = SolverStatus.CONVERGED

        if status is SolverStatus.MAX_ITERATION_REACHED:
            logger.debug("%s did not converge after %i iterations, mismatch norm %.3e"
                         % (self.name, iterations, test.norm))
        return self._finish(status, iterations)

    def _iterate(self, f, scaling, iteration):
        es = self.equation_system

        self.observer.before_linear_solve(iteration)
        dx = self.jacobian.solve_transposed(f.copy())
        self.observer.after_linear_solve(iteration)

        scaling.apply(dx, es)
        es.state_vector.minus(dx)

        f = self._mismatch(iteration + 1)
        test = self.stopping_criteria.test(f, es)
        test = scaling.apply_after(es, self.equation_vector, self.target_vector,
                                   self.stopping_criteria, test)
        f = self.equation_vector.array - self.target_vector.array

        logger.debug("%s iteration %i, mismatch norm %.3e" % (self.name, iteration + 1, test.norm))
        self._log_largest_mismatches(f, iteration + 1)
        return f, test
