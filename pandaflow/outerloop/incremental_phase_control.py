# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

from pandaflow.ac.types import AcEquationType
from pandaflow.network.controls import PhaseControlMode, PhaseControlUnit
from pandaflow.outerloop.base import OuterLoop, OuterLoopStatus
from pandaflow.outerloop.incremental import IncrementalContextData, SENSI_EPS, \
    compute_sensitivities, calculate_term_sensitivity

logger = logging.getLogger(__name__)

MIN_TARGET_DEADBAND = 1.  # MW


def controlled_term(phase_control):
    branch = phase_control.controlled_branch
    if phase_control.unit is PhaseControlUnit.CURRENT:
        return branch.i1 if phase_control.controlled_side == 1 else branch.i2
    return branch.p1 if phase_control.controlled_side == 1 else branch.p2


class IncrementalPhaseControlOuterLoop(OuterLoop):
    """
    Discrete phase shifter control based on sensitivities.

    The phase shift of every controller branch is a variable of the equation system frozen at the
    phase shift of its current tap by a BRANCH_TARGET_ALPHA1 equation. After a converged solve,
    the sensitivities of the controlled active power or current to the phase shift come from one
    transposed solve of the jacobian. The tap is then moved by at most max_tap_shift positions to
    the position with the phase shift that brings the controlled quantity closest to its target:

        - CONTROLLER mode: active power within target +/- deadband / 2. The deadband is at least
          MIN_TARGET_DEADBAND.
        - LIMITER mode: current not above the target. Only a current above the target moves the
          tap, and it is moved at least until the linearized current is below the target.

    Every controller has a budget of max_direction_change direction changes. A controller with an
    exhausted budget keeps its tap and is treated as stable.

    OPTIONAL:
        **max_tap_shift** (int, 3) - maximum number of tap positions per check

        **max_direction_change** (int, 2) - direction changes allowed per controller and run
    """
    name = "IncrementalPhaseControl"

    def __init__(self, max_tap_shift=3, max_direction_change=2):
        self.max_tap_shift = max_tap_shift
        self.max_direction_change = max_direction_change

    def create_context_data(self):
        return IncrementalContextData(self.max_direction_change)

    @staticmethod
    def controller_branches(network):
        return [branch for branch in network.branches
                if branch.phase_control is not None and branch.active
                and not branch.is_zero_impedance]

    def initialize(self, context):
        for branch in self.controller_branches(context.network):
            context.data.get_controller_context(branch.id)

    def check(self, context):
        es = context.equation_system
        branches, equations = list(), list()
        for branch in self.controller_branches(context.network):
            equation = es.get_equation(branch.num, AcEquationType.BRANCH_TARGET_ALPHA1)
            if equation is None or not equation.active:
                continue
            if context.data.is_frozen(branch.id):
                continue
            branches.append(branch)
            equations.append(equation)
        if not len(branches):
            return OuterLoopStatus.STABLE

        sensitivities = compute_sensitivities(context.jacobian, equations)
        base_mva = context.network.base_mva
        status = OuterLoopStatus.STABLE
        for i, branch in enumerate(branches):
            phase_control = branch.phase_control
            term = controlled_term(phase_control)
            value = term.eval()
            target = phase_control.target_value
            sensitivity = calculate_term_sensitivity(term, sensitivities, i)

            if phase_control.mode is PhaseControlMode.CONTROLLER:
                half_deadband = max(phase_control.target_deadband,
                                    MIN_TARGET_DEADBAND / base_mva) / 2
                if abs(value - target) <= half_deadband:
                    continue
                if abs(sensitivity) < SENSI_EPS:
                    logger.debug("Active power of branch %s is not sensitive to the phase shift "
                                 "of branch %s" % (phase_control.controlled_branch.id, branch.id))
                    continue
                da1 = (target - value) / sensitivity
                direction = branch.pi_model.update_tap_position_to_reach_new_a1(
                    da1, self.max_tap_shift)
            else:
                if value <= target:
                    continue
                if abs(sensitivity) < SENSI_EPS:
                    logger.debug("Current of branch %s is not sensitive to the phase shift of "
                                 "branch %s" % (phase_control.controlled_branch.id, branch.id))
                    continue
                da1 = (target - value) / sensitivity
                direction = branch.pi_model.update_tap_position_to_exceed_new_a1(
                    da1, self.max_tap_shift)

            if direction is None:
                logger.debug("Tap of phase shifter %s already at its best position %i"
                             % (branch.id, branch.pi_model.tap_position))
                continue
            context.data.get_controller_context(branch.id).update(direction)
            logger.info("Phase shifter %s: %s %.4f pu (target %.4f pu), tap moved to %i "
                        "(a1=%.4f rad)" % (branch.id, phase_control.unit.name.lower(), value,
                                           target, branch.pi_model.tap_position,
                                           branch.pi_model.a1))
            status = OuterLoopStatus.UNSTABLE
        return status
