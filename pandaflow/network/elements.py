# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging
from enum import Enum

from pandaflow.network.pi_model import Direction, closest_position

logger = logging.getLogger(__name__)


class LfBus:
    """
    Bus of a load flow network.

    Voltage magnitude v is per unit, the angle is in radians. The p and q attributes hold the
    active and reactive power balance equations once an equation system has been created.
    """

    def __init__(self, network, num, bus_id, nominal_v=1., v=1., angle=0., slack=False):
        self.network = network
        self.num = num
        self.id = bus_id
        self.nominal_v = nominal_v
        self.v = v
        self.angle = angle
        self.slack = slack
        self.disabled = False
        self.energized = True
        self.generators = []
        self.shunts = []
        self.branches = []
        self.hvdcs = []
        self.load_target_p = 0.
        self.load_target_q = 0.
        self._generation_target_q = None
        self.generator_voltage_control_enabled = False
        self.p = None
        self.q = None

    def add_generator(self, generator):
        self.generators.append(generator)
        if generator.voltage_control:
            self.generator_voltage_control_enabled = True

    @property
    def active(self):
        return not self.disabled and self.energized

    @property
    def generation_target_p(self):
        return sum(g.target_p for g in self.generators)

    @property
    def generation_target_q(self):
        """
        Sum of the generator reactive power targets, unless it has been fixed, e.g. at a reactive
        power limit.
        """
        if self._generation_target_q is not None:
            return self._generation_target_q
        return sum(g.target_q for g in self.generators)

    @generation_target_q.setter
    def generation_target_q(self, generation_target_q):
        # None gets back to the generator targets
        self._generation_target_q = generation_target_q

    @property
    def target_p(self):
        return self.generation_target_p - self.load_target_p

    @property
    def target_q(self):
        return self.generation_target_q - self.load_target_q

    @property
    def has_generator_voltage_control(self):
        return any(g.voltage_control for g in self.generators)

    @property
    def is_voltage_controlled(self):
        return self.has_generator_voltage_control and self.generator_voltage_control_enabled

    @property
    def target_v(self):
        for g in self.generators:
            if g.voltage_control:
                return g.target_v
        return None

    @target_v.setter
    def target_v(self, target_v):
        for g in self.generators:
            if g.voltage_control:
                g.target_v = target_v

    def _limit_q(self, limit):
        # generators without voltage control stay at their target
        return sum(getattr(g, limit) if g.voltage_control else g.target_q for g in self.generators)

    @property
    def min_q(self):
        return self._limit_q("min_q")

    @property
    def max_q(self):
        return self._limit_q("max_q")

    def __repr__(self):
        return "LfBus(%s)" % self.id


class LfGenerator:
    """
    Generator connected to a bus. A generator with a target_v controls the voltage of its bus. A
    generator with a stand-by automaton and without target_v only monitors the voltage of its bus.
    """

    def __init__(self, gen_id, bus, target_p=0., min_p=-9999., max_p=9999., target_q=0.,
                 min_q=-9999., max_q=9999., target_v=None, participating=True,
                 participation_factor=0., standby_automaton=None):
        self.id = gen_id
        self.bus = bus
        self.target_p = target_p
        self.initial_target_p = target_p
        self.min_p = min_p
        self.max_p = max_p
        self.target_q = target_q
        self.min_q = min_q
        self.max_q = max_q
        self.target_v = target_v
        self.participating = participating
        self.participation_factor = participation_factor
        self.standby_automaton = standby_automaton

    @property
    def voltage_control(self):
        return self.target_v is not None

    def __repr__(self):
        return "LfGenerator(%s)" % self.id


class LfBranch:
    """
    Branch between two buses modelled by a pi model. The flow terms p1, q1, p2, q2, i1 and i2 are
    set when an equation system is created.
    """

    def __init__(self, network, num, branch_id, bus1, bus2, pi_model):
        self.network = network
        self.num = num
        self.id = branch_id
        self.bus1 = bus1
        self.bus2 = bus2
        self.pi_model = pi_model
        self.disabled = False
        self.phase_control = None
        self.voltage_control = None
        self.p1 = None
        self.q1 = None
        self.p2 = None
        self.q2 = None
        self.i1 = None
        self.i2 = None

    @property
    def is_zero_impedance(self):
        return self.pi_model.is_zero_impedance

    @property
    def active(self):
        return not self.disabled and self.bus1.active and self.bus2.active

    def __repr__(self):
        return "LfBranch(%s)" % self.id


class LfShunt:
    """
    Shunt compensator. A sectioned shunt has a list of cumulated susceptances, one per section
    count, and the current section index.
    """

    def __init__(self, network, num, shunt_id, bus, b=0., g=0., sections=None, section=None):
        self.network = network
        self.num = num
        self.id = shunt_id
        self.bus = bus
        self._b = b
        self.g = g
        self.sections = list(sections) if sections is not None else None
        if self.sections is not None:
            if section is None:
                section = 0
            if not 0 <= section < len(self.sections):
                raise ValueError("Section %s out of range [0, %i]" % (section,
                                                                      len(self.sections) - 1))
        self.section = section
        self.disabled = False
        self.voltage_control = None
        self.p = None
        self.q = None

    @property
    def b(self):
        return self.sections[self.section] if self.sections is not None else self._b

    @property
    def active(self):
        return not self.disabled and self.bus.active

    def update_section_to_reach_new_b(self, db, max_section_shift=1):
        """
        Moves to the section whose susceptance is closest to b + db.

        OUTPUT:
            **direction** (Direction) - direction of the move, None if the section did not change
        """
        if self.sections is None:
            raise ValueError("Shunt %s has no sections" % self.id)
        position = closest_position(self.sections, self.section, self.b + db, max_section_shift)
        if position == self.section:
            return None
        direction = Direction.INCREASE if position > self.section else Direction.DECREASE
        self.section = position
        return direction

    def __repr__(self):
        return "LfShunt(%s)" % self.id


class AcEmulationStatus(Enum):
    FREE = "free"
    BOUNDED = "bounded"


class LfHvdc:
    """
    HVDC link between two AC buses. In AC emulation mode the transmitted power follows
    p = p0 + k * (phi1 - phi2) (FREE) until it is bounded to the maximum power of the feeding
    side (BOUNDED). Without AC emulation, p0 is a fixed setpoint from side 1 to side 2.
    """

    def __init__(self, network, num, hvdc_id, bus1, bus2, p0=0., k=0.,
                 pmax_from_1_to_2=9999., pmax_from_2_to_1=9999., ac_emulation=True):
        self.network = network
        self.num = num
        self.id = hvdc_id
        self.bus1 = bus1
        self.bus2 = bus2
        self.p0 = p0
        self.k = k
        self.pmax_from_1_to_2 = pmax_from_1_to_2
        self.pmax_from_2_to_1 = pmax_from_2_to_1
        self.ac_emulation = ac_emulation
        self.status = AcEmulationStatus.FREE
        self.feeding_side = None
        self.disabled = False
        self.p1 = None
        self.p2 = None

    @property
    def active(self):
        return not self.disabled and self.bus1.active and self.bus2.active

    def set_bounded(self, feeding_side):
        self.status = AcEmulationStatus.BOUNDED
        self.feeding_side = feeding_side

    def set_free(self):
        self.status = AcEmulationStatus.FREE
        self.feeding_side = None

    @property
    def bounded_p1(self):
        return self.pmax_from_1_to_2 if self.feeding_side == 1 else -self.pmax_from_2_to_1

    def __repr__(self):
        return "LfHvdc(%s)" % self.id
