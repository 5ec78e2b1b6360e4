# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

import numpy as np

logger = logging.getLogger(__name__)

SENSI_EPS = 1e-6


class ControllerContext:
    """
    Direction change budget of one discrete controller.

    Every move of the controller is registered with update(). A move opposite to the previous one
    is a direction change. Once max_direction_change direction changes are done, the controller
    is frozen and must not move anymore.
    """

    def __init__(self, max_direction_change=2):
        self.max_direction_change = max_direction_change
        self.last_direction = None
        self.direction_change_count = 0

    @property
    def frozen(self):
        return self.direction_change_count >= self.max_direction_change

    def update(self, direction):
        if self.last_direction is not None and direction is not self.last_direction:
            self.direction_change_count += 1
        self.last_direction = direction

    def __repr__(self):
        return "ControllerContext(last_direction=%s, direction_change_count=%i)" % (
            self.last_direction, self.direction_change_count)


class IncrementalContextData:
    """
    State of an incremental outer loop: one ControllerContext per controller id and the ids of
    the controllers already reported as frozen.
    """

    def __init__(self, max_direction_change=2):
        self.max_direction_change = max_direction_change
        self.controller_contexts = dict()
        self.frozen_logged = set()

    def get_controller_context(self, controller_id):
        context = self.controller_contexts.get(controller_id)
        if context is None:
            context = ControllerContext(self.max_direction_change)
            self.controller_contexts[controller_id] = context
        return context

    def is_frozen(self, controller_id):
        context = self.get_controller_context(controller_id)
        if context.frozen and controller_id not in self.frozen_logged:
            self.frozen_logged.add(controller_id)
            logger.warning("Controller %s changed its direction %i times, it is frozen"
                           % (controller_id, context.direction_change_count))
        return context.frozen


def compute_sensitivities(jacobian, equations):
    """
    Sensitivities of all variables to a unit change of the targets of the given equations.

    The jacobian is transposed solved for one unit right hand side per equation. The result
    column i holds d(variable)/d(target of equations[i]) indexed by variable row.

    INPUT:
        **jacobian** (JacobianMatrix) - jacobian of the last converged state

        **equations** (list) - active equations of the controller variables

    OUTPUT:
        **sensitivities** (array) - (number of variables, len(equations)) array
    """
    es = jacobian.equation_system
    rhs = np.zeros((es.column_count, len(equations)), dtype=np.float64)
    for i, equation in enumerate(equations):
        rhs[equation.column, i] = 1.
    return jacobian.solve_transposed(rhs)


def calculate_term_sensitivity(term, sensitivities, index):
    """
    Linearized change of the value of a term for a unit change of the controller target in
    column index of the sensitivities.
    """
    sensitivity = 0.
    for variable in term.variables:
        if variable.row >= 0:
            sensitivity += term.der(variable) * sensitivities[variable.row, index]
    return sensitivity


def calculate_variable_sensitivity(variable, sensitivities, index):
    if variable.row < 0:
        return 0.
    return sensitivities[variable.row, index]
