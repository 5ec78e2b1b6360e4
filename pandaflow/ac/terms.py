# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

from math import sin, cos, sqrt

from pandaflow.ac.types import AcVariableType
from pandaflow.equations.equation import EquationTerm
from pandaflow.network.elements import AcEmulationStatus


# --- closed branch pi model flows, see the class docstring of AbstractClosedBranchAcFlowTerm
# derivatives are returned in the order (v1, v2, ph1, ph2, a1, r1)

def p1(y, ksi, g1, v1, v2, ph1, ph2, a1, r1):
    theta1 = ksi - a1 - ph1 + ph2
    return r1 * v1 * (g1 * r1 * v1 + y * r1 * v1 * sin(ksi) - y * v2 * sin(theta1))


def dp1(y, ksi, g1, v1, v2, ph1, ph2, a1, r1):
    theta1 = ksi - a1 - ph1 + ph2
    sin_theta1, cos_theta1 = sin(theta1), cos(theta1)
    dr = 2 * g1 * r1 * v1 + 2 * y * r1 * v1 * sin(ksi) - y * v2 * sin_theta1
    dph = y * r1 * v1 * v2 * cos_theta1
    return r1 * dr, -y * r1 * v1 * sin_theta1, dph, -dph, dph, v1 * dr


def q1(y, ksi, b1, v1, v2, ph1, ph2, a1, r1):
    theta1 = ksi - a1 - ph1 + ph2
    return r1 * v1 * (-b1 * r1 * v1 + y * r1 * v1 * cos(ksi) - y * v2 * cos(theta1))


def dq1(y, ksi, b1, v1, v2, ph1, ph2, a1, r1):
    theta1 = ksi - a1 - ph1 + ph2
    sin_theta1, cos_theta1 = sin(theta1), cos(theta1)
    dr = -2 * b1 * r1 * v1 + 2 * y * r1 * v1 * cos(ksi) - y * v2 * cos_theta1
    dph = -y * r1 * v1 * v2 * sin_theta1
    return r1 * dr, -y * r1 * v1 * cos_theta1, dph, -dph, dph, v1 * dr


def p2(y, ksi, g2, v1, v2, ph1, ph2, a1, r1):
    theta2 = ksi + a1 + ph1 - ph2
    return v2 * (g2 * v2 - y * r1 * v1 * sin(theta2) + y * v2 * sin(ksi))


def dp2(y, ksi, g2, v1, v2, ph1, ph2, a1, r1):
    theta2 = ksi + a1 + ph1 - ph2
    sin_theta2, cos_theta2 = sin(theta2), cos(theta2)
    dph = -y * r1 * v1 * v2 * cos_theta2
    return (-y * r1 * v2 * sin_theta2,
            2 * g2 * v2 - y * r1 * v1 * sin_theta2 + 2 * y * v2 * sin(ksi),
            dph, -dph, dph,
            -y * v1 * v2 * sin_theta2)


def q2(y, ksi, b2, v1, v2, ph1, ph2, a1, r1):
    theta2 = ksi + a1 + ph1 - ph2
    return v2 * (-b2 * v2 - y * r1 * v1 * cos(theta2) + y * v2 * cos(ksi))


def dq2(y, ksi, b2, v1, v2, ph1, ph2, a1, r1):
    theta2 = ksi + a1 + ph1 - ph2
    sin_theta2, cos_theta2 = sin(theta2), cos(theta2)
    dph = y * r1 * v1 * v2 * sin_theta2
    return (-y * r1 * v2 * cos_theta2,
            -2 * b2 * v2 - y * r1 * v1 * cos_theta2 + 2 * y * v2 * cos(ksi),
            dph, -dph, dph,
            -y * v1 * v2 * cos_theta2)


class AbstractClosedBranchAcFlowTerm(EquationTerm):
    """
    Flow through a branch closed on both sides, modelled by a pi model with y = 1 / |z| and
    ksi = atan2(r, x):

        theta1 = ksi - a1 - ph1 + ph2
        p1 = r1 * v1 * (g1 * r1 * v1 + y * r1 * v1 * sin(ksi) - y * v2 * sin(theta1))
        q1 = r1 * v1 * (-b1 * r1 * v1 + y * r1 * v1 * cos(ksi) - y * v2 * cos(theta1))

        theta2 = ksi + a1 + ph1 - ph2
        p2 = v2 * (g2 * v2 - y * r1 * v1 * sin(theta2) + y * v2 * sin(ksi))
        q2 = v2 * (-b2 * v2 - y * r1 * v1 * cos(theta2) + y * v2 * cos(ksi))

    a1 and r1 are variables of the equation system if the branch is the controller of a phase
    control (a1) or of a voltage control (r1), they are read from the pi model otherwise.
    """

    def __init__(self, branch, variable_set, deriv_a1=False, deriv_r1=False):
        super().__init__()
        self.branch = branch
        self.v1_var = variable_set.get_variable(branch.bus1.num, AcVariableType.BUS_V)
        self.v2_var = variable_set.get_variable(branch.bus2.num, AcVariableType.BUS_V)
        self.ph1_var = variable_set.get_variable(branch.bus1.num, AcVariableType.BUS_PHI)
        self.ph2_var = variable_set.get_variable(branch.bus2.num, AcVariableType.BUS_PHI)
        self.a1_var = variable_set.get_variable(branch.num, AcVariableType.BRANCH_ALPHA1) \
            if deriv_a1 else None
        self.r1_var = variable_set.get_variable(branch.num, AcVariableType.BRANCH_RHO1) \
            if deriv_r1 else None
        self._variables = [self.v1_var, self.v2_var, self.ph1_var, self.ph2_var]
        if self.a1_var is not None:
            self._variables.append(self.a1_var)
        if self.r1_var is not None:
            self._variables.append(self.r1_var)

    @property
    def variables(self):
        return self._variables

    def _args(self):
        pi_model = self.branch.pi_model
        a1 = self._x(self.a1_var) if self.a1_var is not None else pi_model.a1
        r1 = self._x(self.r1_var) if self.r1_var is not None else pi_model.r1
        return (self._x(self.v1_var), self._x(self.v2_var), self._x(self.ph1_var),
                self._x(self.ph2_var), a1, r1)

    def _pick(self, derivatives, variable):
        if variable is self.v1_var:
            return derivatives[0]
        elif variable is self.v2_var:
            return derivatives[1]
        elif variable is self.ph1_var:
            return derivatives[2]
        elif variable is self.ph2_var:
            return derivatives[3]
        elif self.a1_var is not None and variable is self.a1_var:
            return derivatives[4]
        elif self.r1_var is not None and variable is self.r1_var:
            return derivatives[5]
        return 0.

    def eval(self):
        return self.flow(*self._args())

    def der(self, variable):
        return self._pick(self.flow_derivatives(*self._args()), variable)

    def flow(self, v1, v2, ph1, ph2, a1, r1):
        raise NotImplementedError

    def flow_derivatives(self, v1, v2, ph1, ph2, a1, r1):
        raise NotImplementedError


class ClosedBranchSide1ActiveFlowTerm(AbstractClosedBranchAcFlowTerm):

    def flow(self, v1, v2, ph1, ph2, a1, r1):
        pi = self.branch.pi_model
        return p1(pi.y, pi.ksi, pi.g1, v1, v2, ph1, ph2, a1, r1)

    def flow_derivatives(self, v1, v2, ph1, ph2, a1, r1):
        pi = self.branch.pi_model
        return dp1(pi.y, pi.ksi, pi.g1, v1, v2, ph1, ph2, a1, r1)


class ClosedBranchSide1ReactiveFlowTerm(AbstractClosedBranchAcFlowTerm):

    def flow(self, v1, v2, ph1, ph2, a1, r1):
        pi = self.branch.pi_model
        return q1(pi.y, pi.ksi, pi.b1, v1, v2, ph1, ph2, a1, r1)

    def flow_derivatives(self, v1, v2, ph1, ph2, a1, r1):
        pi = self.branch.pi_model
        return dq1(pi.y, pi.ksi, pi.b1, v1, v2, ph1, ph2, a1, r1)


class ClosedBranchSide2ActiveFlowTerm(AbstractClosedBranchAcFlowTerm):

    def flow(self, v1, v2, ph1, ph2, a1, r1):
        pi = self.branch.pi_model
        return p2(pi.y, pi.ksi, pi.g2, v1, v2, ph1, ph2, a1, r1)

    def flow_derivatives(self, v1, v2, ph1, ph2, a1, r1):
        pi = self.branch.pi_model
        return dp2(pi.y, pi.ksi, pi.g2, v1, v2, ph1, ph2, a1, r1)


class ClosedBranchSide2ReactiveFlowTerm(AbstractClosedBranchAcFlowTerm):

    def flow(self, v1, v2, ph1, ph2, a1, r1):
        pi = self.branch.pi_model
        return q2(pi.y, pi.ksi, pi.b2, v1, v2, ph1, ph2, a1, r1)

    def flow_derivatives(self, v1, v2, ph1, ph2, a1, r1):
        pi = self.branch.pi_model
        return dq2(pi.y, pi.ksi, pi.b2, v1, v2, ph1, ph2, a1, r1)


class AbstractClosedBranchCurrentMagnitudeTerm(AbstractClosedBranchAcFlowTerm):
    """
    Current magnitude i = sqrt(p^2 + q^2) / v on one side of the branch.
    """
    side = None

    def _pq(self, v1, v2, ph1, ph2, a1, r1):
        pi = self.branch.pi_model
        if self.side == 1:
            return (p1(pi.y, pi.ksi, pi.g1, v1, v2, ph1, ph2, a1, r1),
                    q1(pi.y, pi.ksi, pi.b1, v1, v2, ph1, ph2, a1, r1),
                    dp1(pi.y, pi.ksi, pi.g1, v1, v2, ph1, ph2, a1, r1),
                    dq1(pi.y, pi.ksi, pi.b1, v1, v2, ph1, ph2, a1, r1), v1, 0)
        return (p2(pi.y, pi.ksi, pi.g2, v1, v2, ph1, ph2, a1, r1),
                q2(pi.y, pi.ksi, pi.b2, v1, v2, ph1, ph2, a1, r1),
                dp2(pi.y, pi.ksi, pi.g2, v1, v2, ph1, ph2, a1, r1),
                dq2(pi.y, pi.ksi, pi.b2, v1, v2, ph1, ph2, a1, r1), v2, 1)

    def flow(self, v1, v2, ph1, ph2, a1, r1):
        p, q, _, _, v, _ = self._pq(v1, v2, ph1, ph2, a1, r1)
        return sqrt(p * p + q * q) / v

    def flow_derivatives(self, v1, v2, ph1, ph2, a1, r1):
        p, q, dp, dq, v, v_index = self._pq(v1, v2, ph1, ph2, a1, r1)
        s = sqrt(p * p + q * q)
        if s == 0.:
            return 0., 0., 0., 0., 0., 0.
        derivatives = [(p * dpi + q * dqi) / (v * s) for dpi, dqi in zip(dp, dq)]
        derivatives[v_index] -= s / (v * v)
        return tuple(derivatives)


class ClosedBranchSide1CurrentMagnitudeTerm(AbstractClosedBranchCurrentMagnitudeTerm):
    side = 1


class ClosedBranchSide2CurrentMagnitudeTerm(AbstractClosedBranchCurrentMagnitudeTerm):
    side = 2


class ShuntCompensatorReactiveFlowTerm(EquationTerm):
    """
    Reactive power q = -b * v^2 drawn by a shunt. b is a variable for voltage controlling shunts.
    """

    def __init__(self, shunt, variable_set, deriv_b=False):
        super().__init__()
        self.shunt = shunt
        self.v_var = variable_set.get_variable(shunt.bus.num, AcVariableType.BUS_V)
        self.b_var = variable_set.get_variable(shunt.num, AcVariableType.SHUNT_B) \
            if deriv_b else None
        self._variables = [self.v_var] if self.b_var is None else [self.v_var, self.b_var]

    @property
    def variables(self):
        return self._variables

    def _b(self):
        return self._x(self.b_var) if self.b_var is not None else self.shunt.b

    def eval(self):
        v = self._x(self.v_var)
        return -self._b() * v * v

    def der(self, variable):
        if variable is self.v_var:
            return -2 * self._b() * self._x(self.v_var)
        elif self.b_var is not None and variable is self.b_var:
            v = self._x(self.v_var)
            return -v * v
        return 0.


class ShuntCompensatorActiveFlowTerm(EquationTerm):
    """
    Active power p = g * v^2 drawn by a shunt.
    """

    def __init__(self, shunt, variable_set):
        super().__init__()
        self.shunt = shunt
        self.v_var = variable_set.get_variable(shunt.bus.num, AcVariableType.BUS_V)

    @property
    def variables(self):
        return [self.v_var]

    def eval(self):
        v = self._x(self.v_var)
        return self.shunt.g * v * v

    def der(self, variable):
        return 2 * self.shunt.g * self._x(self.v_var) if variable is self.v_var else 0.


class AbstractHvdcAcEmulationFlowTerm(EquationTerm):
    """
    Active power leaving the AC network into an HVDC link in AC emulation. The power from side 1
    to side 2 is p0 + k * (ph1 - ph2) in FREE mode and the maximum power of the feeding side in
    BOUNDED mode. The link is lossless, side 2 draws the opposite power.
    """
    sign = 1.

    def __init__(self, hvdc, variable_set):
        super().__init__()
        self.hvdc = hvdc
        self.ph1_var = variable_set.get_variable(hvdc.bus1.num, AcVariableType.BUS_PHI)
        self.ph2_var = variable_set.get_variable(hvdc.bus2.num, AcVariableType.BUS_PHI)

    @property
    def variables(self):
        return [self.ph1_var, self.ph2_var]

    def free_p1(self):
        return self.hvdc.p0 + self.hvdc.k * (self._x(self.ph1_var) - self._x(self.ph2_var))

    def eval(self):
        if self.hvdc.status is AcEmulationStatus.FREE:
            return self.sign * self.free_p1()
        return self.sign * self.hvdc.bounded_p1

    def der(self, variable):
        if self.hvdc.status is not AcEmulationStatus.FREE:
            return 0.
        if variable is self.ph1_var:
            return self.sign * self.hvdc.k
        elif variable is self.ph2_var:
            return -self.sign * self.hvdc.k
        return 0.


class HvdcAcEmulationSide1ActiveFlowTerm(AbstractHvdcAcEmulationFlowTerm):
    sign = 1.


class HvdcAcEmulationSide2ActiveFlowTerm(AbstractHvdcAcEmulationFlowTerm):
    sign = -1.
