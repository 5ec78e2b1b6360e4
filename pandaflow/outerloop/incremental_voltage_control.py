# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

from pandaflow.ac.types import AcEquationType, AcVariableType
from pandaflow.outerloop.base import OuterLoop, OuterLoopStatus
from pandaflow.outerloop.incremental import IncrementalContextData, SENSI_EPS, \
    compute_sensitivities, calculate_variable_sensitivity

logger = logging.getLogger(__name__)


class AbstractIncrementalVoltageControlOuterLoop(OuterLoop):
    """
    Common part of the discrete voltage controls (ratio tap changers and sectioned shunts).

    The controller variable (r1 or b) is frozen at its current discrete value by a target
    equation. After a converged solve, the sensitivity of the voltage of the controlled bus to
    the controller variable comes from one transposed solve of the jacobian, and the controller
    is moved to the discrete value that brings the voltage closest to its target. Controlled
    buses which are already voltage controlled by a generator are left to the generator.

    Subclasses define the controllers, their target equation type and how they are moved.
    """
    equation_type = None

    def __init__(self, max_direction_change=2):
        self.max_direction_change = max_direction_change

    def create_context_data(self):
        return IncrementalContextData(self.max_direction_change)

    def controllers(self, network):
        raise NotImplementedError

    def move(self, controller, dx):
        raise NotImplementedError

    def describe(self, controller):
        raise NotImplementedError

    def initialize(self, context):
        for controller in self.controllers(context.network):
            context.data.get_controller_context(controller.id)
            bus = controller.voltage_control.controlled_bus
            if bus.is_voltage_controlled:
                logger.warning("Bus %s is voltage controlled by a generator, voltage control of "
                               "%s is ignored" % (bus.id, controller.id))

    def check(self, context):
        es = context.equation_system
        controllers, equations = list(), list()
        for controller in self.controllers(context.network):
            if controller.voltage_control.controlled_bus.is_voltage_controlled:
                continue
            equation = es.get_equation(controller.num, self.equation_type)
            if equation is None or not equation.active:
                continue
            if context.data.is_frozen(controller.id):
                continue
            controllers.append(controller)
            equations.append(equation)
        if not len(controllers):
            return OuterLoopStatus.STABLE

        sensitivities = compute_sensitivities(context.jacobian, equations)
        status = OuterLoopStatus.STABLE
        for i, controller in enumerate(controllers):
            voltage_control = controller.voltage_control
            bus = voltage_control.controlled_bus
            v_var = es.get_variable(bus.num, AcVariableType.BUS_V)
            v = es.state_vector[v_var.row] if v_var.row >= 0 else bus.v
            dv = voltage_control.target_value - v
            if abs(dv) <= voltage_control.target_deadband / 2:
                continue
            sensitivity = calculate_variable_sensitivity(v_var, sensitivities, i)
            if abs(sensitivity) < SENSI_EPS:
                logger.debug("Voltage of bus %s is not sensitive to %s" % (bus.id, controller.id))
                continue
            direction = self.move(controller, dv / sensitivity)
            if direction is None:
                continue
            context.data.get_controller_context(controller.id).update(direction)
            logger.info("%s: voltage of bus %s %.4f pu (target %.4f pu), moved to %s"
                        % (controller.id, bus.id, v, voltage_control.target_value,
                           self.describe(controller)))
            status = OuterLoopStatus.UNSTABLE
        return status


class IncrementalTransformerVoltageControlOuterLoop(AbstractIncrementalVoltageControlOuterLoop):
    """
    Ratio tap changers keeping the voltage of a bus within target +/- deadband / 2, moving by at
    most max_tap_shift positions per check.
    """
    name = "IncrementalTransformerVoltageControl"
    equation_type = AcEquationType.BRANCH_TARGET_RHO1

    def __init__(self, max_tap_shift=3, max_direction_change=2):
        super().__init__(max_direction_change)
        self.max_tap_shift = max_tap_shift

    def controllers(self, network):
        return [branch for branch in network.branches
                if branch.voltage_control is not None and branch.active
                and not branch.is_zero_impedance]

    def move(self, branch, dr1):
        return branch.pi_model.update_tap_position_to_reach_new_r1(dr1, self.max_tap_shift)

    def describe(self, branch):
        return "tap %i (r1=%.4f)" % (branch.pi_model.tap_position, branch.pi_model.r1)


class IncrementalShuntVoltageControlOuterLoop(AbstractIncrementalVoltageControlOuterLoop):
    """
    Sectioned shunts keeping the voltage of a bus within target +/- deadband / 2, moving by one
    section per check.
    """
    name = "IncrementalShuntVoltageControl"
    equation_type = AcEquationType.SHUNT_TARGET_B

    def controllers(self, network):
        return [shunt for shunt in network.shunts
                if shunt.voltage_control is not None and shunt.active]

    def move(self, shunt, db):
        return shunt.update_section_to_reach_new_b(db, max_section_shift=1)

    def describe(self, shunt):
        return "section %i (b=%.4f)" % (shunt.section, shunt.b)
