# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

from enum import Enum


class SolverStatus(Enum):
    CONVERGED = "converged"
    MAX_ITERATION_REACHED = "max_iteration_reached"
    SOLVER_FAILED = "solver_failed"
    NO_CALCULATION = "no_calculation"


class SolverResult:
    """
    Outcome of one solver run.

    INPUT:
        **status** (SolverStatus) - final status of the run

        **iterations** (int) - number of iterations done

        **slack_bus_active_power_mismatch** (float) - active power taken by the slack bus above
        its target, in per unit
    """

    def __init__(self, status, iterations, slack_bus_active_power_mismatch=0.):
        self.status = status
        self.iterations = iterations
        self.slack_bus_active_power_mismatch = slack_bus_active_power_mismatch

    @property
    def converged(self):
        return self.status is SolverStatus.CONVERGED

    def __repr__(self):
        return "SolverResult(status=%s, iterations=%i, slack_bus_active_power_mismatch=%.6g)" % (
            self.status.name, self.iterations, self.slack_bus_active_power_mismatch)
