# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

import numpy as np
from scipy.sparse import csr_matrix
from scipy.sparse.linalg import spsolve

from pandaflow.ac.types import AcVariableType
from pandaflow.auxiliary import ppException
from pandaflow.network.pi_model import LOW_IMPEDANCE_THRESHOLD

logger = logging.getLogger(__name__)


class VoltageInitializer:
    """
    Base class of the initial state strategies. Bus voltages come from get_magnitude() and
    get_angle(), the other variables are seeded from the current values of the network.
    """

    def __init__(self):
        self.network = None

    def prepare(self, network):
        self.network = network

    def get_magnitude(self, bus):
        raise NotImplementedError

    def get_angle(self, bus):
        raise NotImplementedError

    def get_value(self, variable):
        type, num = variable.type, variable.element_num
        if type is AcVariableType.BUS_V:
            return self.get_magnitude(self.network.buses[num])
        elif type is AcVariableType.BUS_PHI:
            return self.get_angle(self.network.buses[num])
        elif type is AcVariableType.BRANCH_ALPHA1:
            return self.network.branches[num].pi_model.a1
        elif type is AcVariableType.BRANCH_RHO1:
            return self.network.branches[num].pi_model.r1
        elif type is AcVariableType.SHUNT_B:
            return self.network.shunts[num].b
        elif type is AcVariableType.DUMMY_P or type is AcVariableType.DUMMY_Q:
            return 0.
        raise ppException("No initial value defined for variable type %s" % type)


class UniformValueVoltageInitializer(VoltageInitializer):
    """
    Flat start: all voltage magnitudes at 1 pu, all angles at 0.
    """

    def get_magnitude(self, bus):
        return 1.

    def get_angle(self, bus):
        return 0.


class PreviousValueVoltageInitializer(VoltageInitializer):
    """
    Starts from the voltages stored in the network, i.e. the last converged solution.
    """

    def get_magnitude(self, bus):
        return bus.v

    def get_angle(self, bus):
        return bus.angle


class DcValueVoltageInitializer(VoltageInitializer):
    """
    Voltage magnitudes at 1 pu and angles of a DC load flow: B * theta = P, solved for all
    energized buses but the slack bus, whose angle is 0.
    """

    def __init__(self):
        super().__init__()
        self._angles = None

    def prepare(self, network):
        super().prepare(network)
        self._angles = dc_angles(network)

    def get_magnitude(self, bus):
        return 1.

    def get_angle(self, bus):
        return self._angles[bus.num]


def dc_angles(network):
    """
    Solves the DC load flow of a network.

    INPUT:
        **network** (LfNetwork) - the network, bus.energized has to be up to date

    OUTPUT:
        **angles** (array) - bus voltage angles in radians indexed by bus number, 0 for not
        energized buses
    """
    n = len(network.buses)
    angles = np.zeros(n)
    p = np.array([bus.target_p for bus in network.buses], dtype=np.float64)
    rows, cols, values = [], [], []
    for branch in network.branches:
        if not branch.active:
            continue
        pi = branch.pi_model
        x = pi.x if abs(pi.x) > LOW_IMPEDANCE_THRESHOLD else pi.z
        b = pi.r1 / x if abs(x) > LOW_IMPEDANCE_THRESHOLD else 1. / LOW_IMPEDANCE_THRESHOLD
        f, t = branch.bus1.num, branch.bus2.num
        rows += [f, f, t, t]
        cols += [f, t, f, t]
        values += [b, -b, -b, b]
        # phase shift is an equivalent injection
        p[f] -= b * pi.a1
        p[t] += b * pi.a1
    for hvdc in network.hvdcs:
        if hvdc.active:
            p[hvdc.bus1.num] -= hvdc.p0
            p[hvdc.bus2.num] += hvdc.p0
    B = csr_matrix((values, (rows, cols)), shape=(n, n))

    slack = network.slack_bus.num
    pq = np.array([bus.num for bus in network.buses if bus.active and bus.num != slack],
                  dtype=np.int64)
    if not len(pq):
        return angles
    Bpq = B[pq, :][:, pq].tocsc()
    solution = np.atleast_1d(spsolve(Bpq, p[pq]))
    if not np.all(np.isfinite(solution)):
        logger.warning("DC load flow for the initial angles failed, a flat start is used")
        return angles
    angles[pq] = solution
    return angles
