# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

from pandaflow.solver.result import SolverStatus, SolverResult
from pandaflow.solver.stopping_criteria import StoppingCriteria, UniformCriteria, \
    PerEquationTypeCriteria, create_stopping_criteria
from pandaflow.solver.state_vector_scaling import StateVectorScaling, NoneStateVectorScaling, \
    LineSearchStateVectorScaling, MaxVoltageChangeStateVectorScaling, \
    create_state_vector_scaling
from pandaflow.solver.base import AbstractAcSolver
from pandaflow.solver.newton_raphson import NewtonRaphson
from pandaflow.solver.newton_krylov import NewtonKrylov

SOLVERS = {"nr": NewtonRaphson, "newton_krylov": NewtonKrylov}


def create_solver(network, parameters, equation_system, jacobian, target_function,
                  observer=None):
    solver_class = SOLVERS[parameters["algorithm"]]
    return solver_class(network, parameters, equation_system, jacobian, target_function,
                        observer=observer)
