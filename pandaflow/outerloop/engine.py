# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

from pandaflow.ac.equation_system_creator import create_ac_equation_system, \
    AcEquationSystemUpdater
from pandaflow.ac.targets import AcTargetFunction
from pandaflow.auxiliary import ConfigurationError, OuterLoopNotConverged
from pandaflow.equations.jacobian import JacobianMatrix
from pandaflow.initializers import PreviousValueVoltageInitializer, \
    UniformValueVoltageInitializer
from pandaflow.network.graph import select_most_meshed_bus
from pandaflow.network.voltage_targets import fix_incompatible_voltage_targets
from pandaflow.observer import LoadFlowObserver
from pandaflow.outerloop.base import OuterLoopContext, OuterLoopStatus
from pandaflow.outerloop.factory import create_outer_loops
from pandaflow.parameters import create_parameters
from pandaflow.solver import create_solver
from pandaflow.solver.result import SolverStatus

logger = logging.getLogger(__name__)


class AcLoadFlowContext:
    """
    Everything a load flow run on a network needs: parameters, equation system, jacobian and
    target function. The equation system and the jacobian are created on first use. The
    jacobian holds a factorization and is released by close(), the context can be used in a
    with statement.

    INPUT:
        **network** (LfNetwork) - the network

    OPTIONAL:
        **parameters** (ADict, None) - load flow parameters, the defaults of create_parameters()
        if None

        **observer** (LoadFlowObserver, None) - notified during the run
    """

    def __init__(self, network, parameters=None, observer=None):
        self.network = network
        self.parameters = parameters if parameters is not None else create_parameters()
        self.observer = observer if observer is not None else LoadFlowObserver()
        self._equation_system = None
        self._jacobian = None
        self._target_function = None
        self.result = None

    @property
    def equation_system(self):
        if self._equation_system is None:
            self._equation_system = create_ac_equation_system(self.network, self.parameters)
        return self._equation_system

    @property
    def has_equation_system(self):
        return self._equation_system is not None

    @property
    def jacobian(self):
        if self._jacobian is None:
            self._jacobian = JacobianMatrix(self.equation_system)
        return self._jacobian

    @property
    def target_function(self):
        if self._target_function is None:
            self._target_function = AcTargetFunction(self.network, self.parameters)
        return self._target_function

    def update(self):
        """
        Aligns the equation system with discrete changes of the network: activation of equations
        and terms, and targets.
        """
        AcEquationSystemUpdater(self.network, self.equation_system).update()
        self.equation_system.mark_values_changed()

    def close(self):
        if self._jacobian is not None:
            self._jacobian.close()
            self._jacobian = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class AcLoadFlowResult:
    """
    Outcome of a load flow run.

    The run converged if the last solve converged and all outer loops are stable.
    """

    def __init__(self, network, solver_status, outer_loop_status, solver_iterations=0,
                 outer_loop_iterations=0, slack_bus_active_power_mismatch=0.,
                 distributed_active_power=0.):
        self.network = network
        self.solver_status = solver_status
        self.outer_loop_status = outer_loop_status
        self.solver_iterations = solver_iterations
        self.outer_loop_iterations = outer_loop_iterations
        self.slack_bus_active_power_mismatch = slack_bus_active_power_mismatch
        self.distributed_active_power = distributed_active_power

    @property
    def converged(self):
        return self.solver_status is SolverStatus.CONVERGED \
            and self.outer_loop_status is OuterLoopStatus.STABLE

    def __repr__(self):
        return "AcLoadFlowResult(solver_status=%s, outer_loop_status=%s, solver_iterations=%i, " \
               "outer_loop_iterations=%i, slack_bus_active_power_mismatch=%.6g, " \
               "distributed_active_power=%.6g)" % (
                   self.solver_status.name, self.outer_loop_status.name, self.solver_iterations,
                   self.outer_loop_iterations, self.slack_bus_active_power_mismatch,
                   self.distributed_active_power)


class AcLoadFlowEngine:
    """
    Runs the solver and the outer loops until the outer loops are stable:

        1. solve the equations from the initial state
        2. check the outer loops in their order
        3. if an outer loop is unstable: update the equation system, solve again from the last
           solution and restart at 2. with the first outer loop

    The run ends when all outer loops are stable, an outer loop failed, a solve did not converge
    or after max_outer_loop_iterations unstable checks. What happens then depends on
    outer_loop_exhaustion_behavior:

        - "fail": the outer loop status is FAILED
        - "throw": an OuterLoopNotConverged is raised
        - "continue": the last solution is accepted, the outer loop status is STABLE

    INPUT:
        **context** (AcLoadFlowContext) - the context of the run

    OPTIONAL:
        **outer_loops** (list, None) - outer loops in their order, created from the parameters
        with create_outer_loops() if None
    """

    def __init__(self, context, outer_loops=None):
        self.context = context
        self.outer_loops = outer_loops if outer_loops is not None \
            else create_outer_loops(context.parameters)
        names = [outer_loop.name for outer_loop in self.outer_loops]
        if len(set(names)) != len(names):
            raise ConfigurationError("Outer loops have to be unique: %s" % names)
        self.outer_loop_contexts = dict()

    def _prepare_network(self):
        network = self.context.network
        if not len(network.slack_buses):
            slack_bus = select_most_meshed_bus(network)
            slack_bus.slack = True
            logger.info("Bus %s selected as slack bus" % slack_bus.id)
        if self.context.parameters["check_target_voltage_compatibility"]:
            fix_incompatible_voltage_targets(network)

    def _solve(self, initializer):
        context = self.context
        solver = create_solver(context.network, context.parameters, context.equation_system,
                               context.jacobian, context.target_function, context.observer)
        return solver.run(initializer)

    def _distributed_active_power(self, outer_loop_contexts):
        return sum(getattr(c.data, "distributed_active_power", 0.)
                   for c in outer_loop_contexts.values())

    def run(self, initializer=None):
        """
        INPUT:
            **initializer** (VoltageInitializer, None) - initial state of the first solve, flat
            start if None

        OUTPUT:
            **result** (AcLoadFlowResult) - the result of the run
        """
        context = self.context
        network = context.network
        parameters = context.parameters
        observer = context.observer

        if not any(bus.active for bus in network.buses):
            logger.warning("Network %s has no active bus, nothing to calculate" % network.name)
            return self._result(SolverStatus.NO_CALCULATION, OuterLoopStatus.STABLE)

        self._prepare_network()
        context.update()
        if not context.equation_system.column_count:
            logger.warning("Network %s has no active equation, nothing to calculate"
                           % network.name)
            return self._result(SolverStatus.NO_CALCULATION, OuterLoopStatus.STABLE)

        outer_loop_contexts = dict()
        self.outer_loop_contexts = outer_loop_contexts
        for outer_loop in self.outer_loops:
            outer_loop_context = OuterLoopContext(context, outer_loop.create_context_data())
            outer_loop.initialize(outer_loop_context)
            outer_loop_contexts[outer_loop.name] = outer_loop_context
        if len(self.outer_loops):
            # outer loops may have changed discrete states while initializing
            context.update()

        solver_result = self._solve(initializer if initializer is not None
                                    else UniformValueVoltageInitializer())
        solver_iterations = solver_result.iterations
        outer_loop_iterations = 0
        outer_loop_status = OuterLoopStatus.STABLE
        max_outer_loop_iterations = parameters["max_outer_loop_iterations"]

        while solver_result.converged:
            outer_loop_status = OuterLoopStatus.STABLE
            for outer_loop in self.outer_loops:
                outer_loop_context = outer_loop_contexts[outer_loop.name]
                outer_loop_context.iteration = outer_loop_iterations
                outer_loop_context.last_solver_result = solver_result
                observer.before_outer_loop_check(outer_loop.name, outer_loop_iterations)
                outer_loop_status = outer_loop.check(outer_loop_context)
                observer.after_outer_loop_check(outer_loop.name, outer_loop_iterations,
                                                outer_loop_status)
                logger.debug("Outer loop %s check %i: %s" % (outer_loop.name,
                                                             outer_loop_iterations,
                                                             outer_loop_status.name))
                if outer_loop_status is not OuterLoopStatus.STABLE:
                    break

            if outer_loop_status is not OuterLoopStatus.UNSTABLE:
                break
            if outer_loop_iterations >= max_outer_loop_iterations:
                outer_loop_status = self._outer_loops_exhausted(outer_loop_iterations)
                break

            outer_loop_iterations += 1
            for outer_loop_context in outer_loop_contexts.values():
                outer_loop_context.outer_loop_total_iterations = outer_loop_iterations
            context.update()
            solver_result = self._solve(PreviousValueVoltageInitializer())
            solver_iterations += solver_result.iterations

        if outer_loop_status is OuterLoopStatus.FAILED:
            logger.error("An outer loop failed after %i outer loop iterations"
                         % outer_loop_iterations)
        for outer_loop in self.outer_loops:
            outer_loop.cleanup(outer_loop_contexts[outer_loop.name])

        return self._result(solver_result.status, outer_loop_status, solver_iterations,
                            outer_loop_iterations, solver_result.slack_bus_active_power_mismatch,
                            self._distributed_active_power(outer_loop_contexts))

    def _outer_loops_exhausted(self, outer_loop_iterations):
        behavior = self.context.parameters["outer_loop_exhaustion_behavior"]
        message = "Outer loops not stable after %i outer loop iterations" % outer_loop_iterations
        if behavior == "throw":
            raise OuterLoopNotConverged(message)
        elif behavior == "continue":
            logger.warning(message + ", the last solution is kept")
            return OuterLoopStatus.STABLE
        logger.error(message)
        return OuterLoopStatus.FAILED

    def _result(self, solver_status, outer_loop_status, solver_iterations=0,
                outer_loop_iterations=0, slack_bus_active_power_mismatch=0.,
                distributed_active_power=0.):
        result = AcLoadFlowResult(self.context.network, solver_status, outer_loop_status,
                                  solver_iterations, outer_loop_iterations,
                                  slack_bus_active_power_mismatch, distributed_active_power)
        self.context.result = result
        logger.info("Load flow of %s: %s" % (self.context.network.name, result))
        return result
