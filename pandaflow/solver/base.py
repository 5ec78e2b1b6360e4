# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

from pandaflow.ac.types import AcVariableType
from pandaflow.observer import LoadFlowObserver
from pandaflow.solver.result import SolverStatus, SolverResult
from pandaflow.solver.stopping_criteria import create_stopping_criteria

logger = logging.getLogger(__name__)


class AbstractAcSolver:
    """
    Common part of the AC solvers: mismatch evaluation, slack bus mismatch, and the update of the
    network from the state vector.

    Solvers implement run(initializer) and return a SolverResult. A solver never raises on non
    convergence or on a failed linear solve, both are reported through the status.

    INPUT:
        **network** (LfNetwork) - the network

        **parameters** (ADict) - load flow parameters

        **equation_system** (EquationSystem) - the AC equation system of the network

        **jacobian** (JacobianMatrix) - the jacobian of the equation system

        **target_function** (AcTargetFunction) - equation targets

    OPTIONAL:
        **observer** (LoadFlowObserver, None) - notified before and after equation updates and
        linear solves
    """
    name = None

    def __init__(self, network, parameters, equation_system, jacobian, target_function,
                 observer=None):
        self.network = network
        self.parameters = parameters
        self.equation_system = equation_system
        self.jacobian = jacobian
        self.target_function = target_function
        self.target_vector = equation_system.create_target_vector(target_function)
        self.equation_vector = equation_system.create_equation_vector()
        self.observer = observer if observer is not None else LoadFlowObserver()
        self.stopping_criteria = create_stopping_criteria(parameters)

    def run(self, initializer):
        raise NotImplementedError("run() has to be implemented by %s" % self.__class__.__name__)

    def _initialize_state(self, initializer):
        initializer.prepare(self.network)
        self.equation_system.create_state_vector(initializer)

    def _mismatch(self, iteration):
        self.observer.before_equation_vector_update(iteration)
        f = self.equation_vector.array - self.target_vector.array
        self.observer.after_equation_vector_update(iteration)
        return f

    def _log_largest_mismatches(self, f, iteration):
        if logger.isEnabledFor(logging.DEBUG):
            largest = self.equation_system.find_largest_mismatches(f, 3)
            logger.debug("%s iteration %i, largest mismatches: %s" % (
                self.name, iteration, ", ".join("%s %s: %.3e" % (eq.type.name, eq.element_num, m)
                                               for eq, m in largest)))

    def slack_bus_active_power_mismatch(self):
        return sum(self.target_function.slack_bus_active_power_mismatch(bus)
                   for bus in self.network.slack_buses if bus.active)

    def _finish(self, status, iterations):
        slack_mismatch = self.slack_bus_active_power_mismatch()
        if status is SolverStatus.CONVERGED or self.parameters["always_update_network"]:
            self._update_network()
        if status is SolverStatus.CONVERGED:
            self._check_realistic_voltages()
        result = SolverResult(status, iterations, slack_mismatch)
        logger.debug("%s finished: %s" % (self.name, result))
        return result

    def _update_network(self):
        es = self.equation_system
        x = es.state_vector.get()
        for bus in self.network.buses:
            if not bus.active:
                continue
            v_var = es.get_variable(bus.num, AcVariableType.BUS_V)
            phi_var = es.get_variable(bus.num, AcVariableType.BUS_PHI)
            if v_var.row >= 0:
                bus.v = x[v_var.row]
            if phi_var.row >= 0:
                bus.angle = x[phi_var.row]

    def _check_realistic_voltages(self):
        min_v = self.parameters["min_realistic_voltage"]
        max_v = self.parameters["max_realistic_voltage"]
        unrealistic = [bus.id for bus in self.network.buses
                       if bus.active and not min_v <= bus.v <= max_v]
        if len(unrealistic):
            logger.warning("%i buses have an unrealistic voltage magnitude outside [%.2f, %.2f] "
                           "pu: %s" % (len(unrealistic), min_v, max_v, unrealistic))
