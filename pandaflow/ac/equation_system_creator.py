# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

from pandaflow.ac.terms import ClosedBranchSide1ActiveFlowTerm, \
    ClosedBranchSide1ReactiveFlowTerm, ClosedBranchSide2ActiveFlowTerm, \
    ClosedBranchSide2ReactiveFlowTerm, ClosedBranchSide1CurrentMagnitudeTerm, \
    ClosedBranchSide2CurrentMagnitudeTerm, ShuntCompensatorReactiveFlowTerm, \
    ShuntCompensatorActiveFlowTerm, HvdcAcEmulationSide1ActiveFlowTerm, \
    HvdcAcEmulationSide2ActiveFlowTerm
from pandaflow.ac.types import AcVariableType, AcEquationType
from pandaflow.equations.equation import VariableTerm
from pandaflow.equations.equation_system import EquationSystem
from pandaflow.network.graph import find_energized_buses

logger = logging.getLogger(__name__)


def create_ac_equation_system(network, parameters):
    """
    Creates the AC equation system of a network: active and reactive power balance of every bus,
    voltage and angle targets, branch, shunt and HVDC flow terms, and the target equations of the
    controller variables (phase shift, ratio, shunt susceptance) required by the options.

    INPUT:
        **network** (LfNetwork) - the network

        **parameters** (ADict) - load flow parameters, see create_parameters()

    OUTPUT:
        **equation_system** (EquationSystem) - the equation system with activation matching the
        current state of the network
    """
    es = EquationSystem(name="ac")
    for bus in network.buses:
        _create_bus_equations(bus, es, parameters["shunt_voltage_control"])
    for branch in network.branches:
        _create_branch_equations(branch, es, parameters["phase_shifter_control"],
                                 parameters["transformer_voltage_control"])
    if parameters["hvdc_ac_emulation"]:
        for hvdc in network.hvdcs:
            if hvdc.ac_emulation:
                _create_hvdc_equations(hvdc, es)
    AcEquationSystemUpdater(network, es).update()
    logger.debug("%s created for %s" % (es, network))
    return es


def _create_bus_equations(bus, es, shunt_voltage_control):
    vs = es.variable_set
    v_var = vs.get_variable(bus.num, AcVariableType.BUS_V)
    phi_var = vs.get_variable(bus.num, AcVariableType.BUS_PHI)
    bus.p = es.create_equation(bus.num, AcEquationType.BUS_TARGET_P)
    bus.q = es.create_equation(bus.num, AcEquationType.BUS_TARGET_Q)
    es.create_equation(bus.num, AcEquationType.BUS_TARGET_V).add_term(VariableTerm(v_var))
    es.create_equation(bus.num, AcEquationType.BUS_TARGET_PHI).add_term(VariableTerm(phi_var))

    for shunt in bus.shunts:
        deriv_b = shunt_voltage_control and shunt.voltage_control is not None
        shunt.q = ShuntCompensatorReactiveFlowTerm(shunt, vs, deriv_b=deriv_b)
        bus.q.add_term(shunt.q)
        if shunt.g != 0.:
            shunt.p = ShuntCompensatorActiveFlowTerm(shunt, vs)
            bus.p.add_term(shunt.p)
        if deriv_b:
            b_var = vs.get_variable(shunt.num, AcVariableType.SHUNT_B)
            es.create_equation(shunt.num, AcEquationType.SHUNT_TARGET_B) \
                .add_term(VariableTerm(b_var))


def _create_branch_equations(branch, es, phase_shifter_control, transformer_voltage_control):
    vs = es.variable_set
    bus1, bus2 = branch.bus1, branch.bus2
    if branch.is_zero_impedance:
        # flows of a zero impedance branch are free variables, voltages of both sides are equal
        dummy_p = vs.get_variable(branch.num, AcVariableType.DUMMY_P)
        dummy_q = vs.get_variable(branch.num, AcVariableType.DUMMY_Q)
        branch.p1 = VariableTerm(dummy_p, 1.)
        branch.p2 = VariableTerm(dummy_p, -1.)
        branch.q1 = VariableTerm(dummy_q, 1.)
        branch.q2 = VariableTerm(dummy_q, -1.)
        es.create_equation(branch.num, AcEquationType.ZERO_V).add_terms([
            VariableTerm(vs.get_variable(bus1.num, AcVariableType.BUS_V), 1.),
            VariableTerm(vs.get_variable(bus2.num, AcVariableType.BUS_V), -1.)])
        es.create_equation(branch.num, AcEquationType.ZERO_PHI).add_terms([
            VariableTerm(vs.get_variable(bus1.num, AcVariableType.BUS_PHI), 1.),
            VariableTerm(vs.get_variable(bus2.num, AcVariableType.BUS_PHI), -1.)])
    else:
        deriv_a1 = phase_shifter_control and branch.phase_control is not None
        deriv_r1 = transformer_voltage_control and branch.voltage_control is not None
        branch.p1 = ClosedBranchSide1ActiveFlowTerm(branch, vs, deriv_a1, deriv_r1)
        branch.q1 = ClosedBranchSide1ReactiveFlowTerm(branch, vs, deriv_a1, deriv_r1)
        branch.p2 = ClosedBranchSide2ActiveFlowTerm(branch, vs, deriv_a1, deriv_r1)
        branch.q2 = ClosedBranchSide2ReactiveFlowTerm(branch, vs, deriv_a1, deriv_r1)
        branch.i1 = ClosedBranchSide1CurrentMagnitudeTerm(branch, vs, deriv_a1, deriv_r1)
        branch.i2 = ClosedBranchSide2CurrentMagnitudeTerm(branch, vs, deriv_a1, deriv_r1)
        es.attach(branch.i1)
        es.attach(branch.i2)
        if deriv_a1:
            a1_var = vs.get_variable(branch.num, AcVariableType.BRANCH_ALPHA1)
            es.create_equation(branch.num, AcEquationType.BRANCH_TARGET_ALPHA1) \
                .add_term(VariableTerm(a1_var))
        if deriv_r1:
            r1_var = vs.get_variable(branch.num, AcVariableType.BRANCH_RHO1)
            es.create_equation(branch.num, AcEquationType.BRANCH_TARGET_RHO1) \
                .add_term(VariableTerm(r1_var))
    bus1.p.add_term(branch.p1)
    bus1.q.add_term(branch.q1)
    bus2.p.add_term(branch.p2)
    bus2.q.add_term(branch.q2)


def _create_hvdc_equations(hvdc, es):
    hvdc.p1 = HvdcAcEmulationSide1ActiveFlowTerm(hvdc, es.variable_set)
    hvdc.p2 = HvdcAcEmulationSide2ActiveFlowTerm(hvdc, es.variable_set)
    hvdc.bus1.p.add_term(hvdc.p1)
    hvdc.bus2.p.add_term(hvdc.p2)


class AcEquationSystemUpdater:
    """
    Aligns the activation of the equations and terms of an AC equation system with the state of
    the network: disabled or deenergized elements, slack bus, generator voltage control. Only
    actual activation changes increment the structure version of the equation system.
    """

    def __init__(self, network, equation_system):
        self.network = network
        self.equation_system = equation_system

    def update(self):
        energized = find_energized_buses(self.network, self.network.slack_bus)
        for bus in self.network.buses:
            bus.energized = bus.num in energized
        for bus in self.network.buses:
            self._update_bus(bus)
        for branch in self.network.branches:
            self._update_branch(branch)
        for shunt in self.network.shunts:
            self._update_shunt(shunt)
        for hvdc in self.network.hvdcs:
            if hvdc.p1 is not None:
                hvdc.p1.active = hvdc.active
                hvdc.p2.active = hvdc.active

    def _set_active(self, element_num, type, active):
        equation = self.equation_system.get_equation(element_num, type)
        if equation is not None:
            equation.active = active

    def _update_bus(self, bus):
        active = bus.active
        voltage_controlled = bus.is_voltage_controlled
        self._set_active(bus.num, AcEquationType.BUS_TARGET_P, active and not bus.slack)
        self._set_active(bus.num, AcEquationType.BUS_TARGET_PHI, active and bus.slack)
        self._set_active(bus.num, AcEquationType.BUS_TARGET_V, active and voltage_controlled)
        self._set_active(bus.num, AcEquationType.BUS_TARGET_Q, active and not voltage_controlled)

    def _update_branch(self, branch):
        active = branch.active
        for term in (branch.p1, branch.q1, branch.p2, branch.q2, branch.i1, branch.i2):
            if term is not None:
                term.active = active
        for type in (AcEquationType.BRANCH_TARGET_ALPHA1, AcEquationType.BRANCH_TARGET_RHO1,
                     AcEquationType.ZERO_V, AcEquationType.ZERO_PHI):
            self._set_active(branch.num, type, active)

    def _update_shunt(self, shunt):
        active = shunt.active
        for term in (shunt.p, shunt.q):
            if term is not None:
                term.active = active
        self._set_active(shunt.num, AcEquationType.SHUNT_TARGET_B, active)
