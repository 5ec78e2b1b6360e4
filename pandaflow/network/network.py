# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

from pandaflow.auxiliary import NetworkError
from pandaflow.network.controls import TransformerPhaseControl, TransformerVoltageControl, \
    ShuntVoltageControl, SecondaryVoltageControl
from pandaflow.network.elements import LfBus, LfGenerator, LfBranch, LfShunt, LfHvdc
from pandaflow.network.pi_model import PiModel

logger = logging.getLogger(__name__)


class LfNetwork:
    """
    In memory model of a network for the load flow: numbered buses, branches, shunts, generators
    and HVDC links with their physical parameters and disabled flags. All values are per unit on
    base_mva.

    EXAMPLE:
        net = LfNetwork()
        b1 = net.add_bus("b1", slack=True)
        b2 = net.add_bus("b2")
        net.add_generator(b1, "g1", target_v=1.)
        net.add_load(b2, p=1., q=0.5)
        net.add_branch("l1", b1, b2, x=0.1)
    """

    def __init__(self, name="", base_mva=100.):
        self.name = name
        self.base_mva = base_mva
        self.buses = []
        self.branches = []
        self.shunts = []
        self.hvdcs = []
        self.secondary_voltage_controls = []
        self._elements_by_id = dict()
        self.res_bus = None
        self.res_branch = None
        self.res_hvdc = None

    def _register(self, element):
        if element.id in self._elements_by_id:
            raise NetworkError("An element with id %s already exists" % element.id)
        self._elements_by_id[element.id] = element
        return element

    def _get(self, element_id, cls):
        element = self._elements_by_id.get(element_id)
        if not isinstance(element, cls):
            raise NetworkError("%s %s not found" % (cls.__name__, element_id))
        return element

    def _bus(self, bus):
        return bus if isinstance(bus, LfBus) else self.get_bus(bus)

    def _branch(self, branch):
        return branch if isinstance(branch, LfBranch) else self.get_branch(branch)

    def get_bus(self, bus_id):
        return self._get(bus_id, LfBus)

    def get_branch(self, branch_id):
        return self._get(branch_id, LfBranch)

    def get_shunt(self, shunt_id):
        return self._get(shunt_id, LfShunt)

    def get_hvdc(self, hvdc_id):
        return self._get(hvdc_id, LfHvdc)

    def get_generator(self, gen_id):
        return self._get(gen_id, LfGenerator)

    # --- creation

    def add_bus(self, bus_id, nominal_v=1., v=1., angle=0., slack=False):
        bus = LfBus(self, len(self.buses), bus_id, nominal_v=nominal_v, v=v, angle=angle,
                    slack=slack)
        self._register(bus)
        self.buses.append(bus)
        return bus

    def add_generator(self, bus, gen_id=None, **kwargs):
        bus = self._bus(bus)
        if gen_id is None:
            gen_id = "%s_gen%i" % (bus.id, len(bus.generators))
        if kwargs.get("standby_automaton") is not None and kwargs.get("target_v") is not None:
            raise NetworkError("Generator %s with a stand-by automaton cannot have a target_v"
                               % gen_id)
        generator = self._register(LfGenerator(gen_id, bus, **kwargs))
        bus.add_generator(generator)
        return generator

    def add_load(self, bus, p=0., q=0.):
        bus = self._bus(bus)
        bus.load_target_p += p
        bus.load_target_q += q
        return bus

    def add_branch(self, branch_id, bus1, bus2, r=0., x=0., g1=0., b1=0., g2=0., b2=0., r1=1.,
                   a1=0., taps=None, tap_position=None):
        bus1, bus2 = self._bus(bus1), self._bus(bus2)
        if bus1 is bus2:
            raise NetworkError("Branch %s connects bus %s to itself" % (branch_id, bus1.id))
        pi_model = PiModel(r=r, x=x, g1=g1, b1=b1, g2=g2, b2=b2, r1=r1, a1=a1, taps=taps,
                           tap_position=tap_position)
        branch = self._register(LfBranch(self, len(self.branches), branch_id, bus1, bus2,
                                         pi_model))
        bus1.branches.append(branch)
        bus2.branches.append(branch)
        self.branches.append(branch)
        return branch

    def add_shunt(self, shunt_id, bus, b=0., g=0., sections=None, section=None):
        bus = self._bus(bus)
        shunt = self._register(LfShunt(self, len(self.shunts), shunt_id, bus, b=b, g=g,
                                       sections=sections, section=section))
        bus.shunts.append(shunt)
        self.shunts.append(shunt)
        return shunt

    def add_hvdc(self, hvdc_id, bus1, bus2, **kwargs):
        bus1, bus2 = self._bus(bus1), self._bus(bus2)
        hvdc = self._register(LfHvdc(self, len(self.hvdcs), hvdc_id, bus1, bus2, **kwargs))
        bus1.hvdcs.append(hvdc)
        bus2.hvdcs.append(hvdc)
        self.hvdcs.append(hvdc)
        return hvdc

    def add_phase_control(self, branch, **kwargs):
        branch = self._branch(branch)
        if not branch.pi_model.has_taps:
            raise NetworkError("Phase control of branch %s needs a tap changer" % branch.id)
        if "controlled_branch" in kwargs:
            kwargs["controlled_branch"] = self._branch(kwargs["controlled_branch"])
        branch.phase_control = TransformerPhaseControl(branch, **kwargs)
        return branch.phase_control

    def add_transformer_voltage_control(self, branch, controlled_bus, target_value,
                                        target_deadband=0.):
        branch = self._branch(branch)
        if not branch.pi_model.has_taps:
            raise NetworkError("Voltage control of branch %s needs a tap changer" % branch.id)
        branch.voltage_control = TransformerVoltageControl(branch, self._bus(controlled_bus),
                                                           target_value, target_deadband)
        return branch.voltage_control

    def add_shunt_voltage_control(self, shunt, controlled_bus, target_value, target_deadband=0.):
        shunt = shunt if isinstance(shunt, LfShunt) else self.get_shunt(shunt)
        if shunt.sections is None:
            raise NetworkError("Voltage control of shunt %s needs sections" % shunt.id)
        shunt.voltage_control = ShuntVoltageControl(shunt, self._bus(controlled_bus),
                                                    target_value, target_deadband)
        return shunt.voltage_control

    def add_secondary_voltage_control(self, zone_name, pilot_bus, target_value, controller_buses):
        """
        Adds a secondary voltage control zone.

        INPUT:
            **zone_name** (str) - name of the zone

            **pilot_bus** (LfBus, str) - the bus whose voltage is controlled

            **target_value** (float) - target voltage of the pilot bus in pu

            **controller_buses** (list) - buses (or bus ids) with generator voltage control, a
            bus belongs to one zone at most
        """
        if any(c.zone_name == zone_name for c in self.secondary_voltage_controls):
            raise NetworkError("Secondary voltage control zone %s already exists" % zone_name)
        controller_buses = [self._bus(bus) for bus in controller_buses]
        if not len(controller_buses):
            raise NetworkError("Secondary voltage control zone %s has no controller bus"
                               % zone_name)
        for bus in controller_buses:
            if not bus.has_generator_voltage_control:
                raise NetworkError("Bus %s of secondary voltage control zone %s has no generator "
                                   "voltage control" % (bus.id, zone_name))
            for control in self.secondary_voltage_controls:
                if bus in control.controller_buses:
                    raise NetworkError("Bus %s is already a controller bus of zone %s"
                                       % (bus.id, control.zone_name))
        control = SecondaryVoltageControl(zone_name, self._bus(pilot_bus), target_value,
                                          controller_buses)
        self.secondary_voltage_controls.append(control)
        return control

    # --- queries

    @property
    def generators(self):
        return [g for bus in self.buses for g in bus.generators]

    @property
    def slack_buses(self):
        return [bus for bus in self.buses if bus.slack]

    @property
    def slack_bus(self):
        slack_buses = self.slack_buses
        if not len(slack_buses):
            raise NetworkError("Network %s has no slack bus" % self.name)
        if len(slack_buses) > 1:
            raise NetworkError("Network %s has %i slack buses, only one is supported"
                               % (self.name, len(slack_buses)))
        return slack_buses[0]

    def __repr__(self):
        return "LfNetwork(%s: %i buses, %i branches, %i shunts, %i hvdc links)" % (
            self.name, len(self.buses), len(self.branches), len(self.shunts), len(self.hvdcs))
