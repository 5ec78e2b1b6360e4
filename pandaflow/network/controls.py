# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

from enum import Enum

from pandaflow.auxiliary import ConfigurationError


class PhaseControlMode(Enum):
    CONTROLLER = "controller"
    LIMITER = "limiter"


class PhaseControlUnit(Enum):
    ACTIVE_POWER = "active_power"
    CURRENT = "current"


_SUPPORTED_PHASE_CONTROLS = ((PhaseControlMode.CONTROLLER, PhaseControlUnit.ACTIVE_POWER),
                             (PhaseControlMode.LIMITER, PhaseControlUnit.CURRENT))


class TransformerPhaseControl:
    """
    Phase shifter controlling the active power (controller mode) or limiting the current (limiter
    mode) of a branch on a given side. Target values and deadband are per unit. An unknown or
    unsupported mode and unit raises a ConfigurationError.
    """

    def __init__(self, controller_branch, controlled_branch=None, controlled_side=1,
                 mode=PhaseControlMode.CONTROLLER, unit=PhaseControlUnit.ACTIVE_POWER,
                 target_value=0., target_deadband=0.):
        if controlled_side not in (1, 2):
            raise ConfigurationError("controlled_side has to be 1 or 2, not %s" % controlled_side)
        self.controller_branch = controller_branch
        self.controlled_branch = controlled_branch if controlled_branch is not None \
            else controller_branch
        self.controlled_side = controlled_side
        try:
            self.mode = PhaseControlMode(mode)
            self.unit = PhaseControlUnit(unit)
        except ValueError as e:
            raise ConfigurationError("Invalid phase control of branch %s: %s"
                                     % (controller_branch.id, e)) from e
        if (self.mode, self.unit) not in _SUPPORTED_PHASE_CONTROLS:
            raise ConfigurationError("Phase control of branch %s: mode %s is not supported with "
                                     "unit %s" % (controller_branch.id, self.mode.name,
                                                  self.unit.name))
        self.target_value = target_value
        self.target_deadband = target_deadband


class TransformerVoltageControl:
    """
    Ratio tap changer of a branch keeping the voltage of a (possibly remote) bus within a deadband
    around a target.
    """

    def __init__(self, controller_branch, controlled_bus, target_value, target_deadband=0.):
        self.controller_branch = controller_branch
        self.controlled_bus = controlled_bus
        self.target_value = target_value
        self.target_deadband = target_deadband


class ShuntVoltageControl:
    """
    Sectioned shunt keeping the voltage of a bus within a deadband around a target.
    """

    def __init__(self, controller_shunt, controlled_bus, target_value, target_deadband=0.):
        self.controller_shunt = controller_shunt
        self.controlled_bus = controlled_bus
        self.target_value = target_value
        self.target_deadband = target_deadband


class SecondaryVoltageControl:
    """
    Control zone keeping the voltage of a pilot bus at a target by shifting the target voltages of
    the generator buses of the zone (the controller buses), which share the reactive power
    effort.
    """

    def __init__(self, zone_name, pilot_bus, target_value, controller_buses):
        self.zone_name = zone_name
        self.pilot_bus = pilot_bus
        self.target_value = target_value
        self.controller_buses = list(controller_buses)

    @property
    def enabled_controller_buses(self):
        # buses switched to PQ at a reactive power limit do not control anymore
        return [bus for bus in self.controller_buses
                if bus.active and bus.is_voltage_controlled]

    def __repr__(self):
        return "SecondaryVoltageControl(%s, pilot_bus=%s)" % (self.zone_name, self.pilot_bus.id)


class StandbyAutomaton:
    """
    Stand-by automaton of a generator, e.g. a static var compensator: the generator does not
    control the voltage of its bus until the voltage leaves [low_voltage_threshold,
    high_voltage_threshold]. It then controls the voltage to low_target_v or high_target_v.
    """

    def __init__(self, low_voltage_threshold, high_voltage_threshold, low_target_v, high_target_v):
        if not low_voltage_threshold < high_voltage_threshold:
            raise ConfigurationError("Low voltage threshold %s has to be lower than high voltage "
                                     "threshold %s" % (low_voltage_threshold,
                                                       high_voltage_threshold))
        self.low_voltage_threshold = low_voltage_threshold
        self.high_voltage_threshold = high_voltage_threshold
        self.low_target_v = low_target_v
        self.high_target_v = high_target_v
