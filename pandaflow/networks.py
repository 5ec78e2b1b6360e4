# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

from pandaflow.network.controls import PhaseControlMode, PhaseControlUnit, StandbyAutomaton
from pandaflow.network.network import LfNetwork
from pandaflow.network.pi_model import TapStep


def phase_shifter_taps(count=21, step=0.02):
    """
    Symmetrical phase shifter tap table, the middle position has no phase shift.
    """
    middle = count // 2
    return [TapStep(a1=(i - middle) * step) for i in range(count)]


def ratio_taps(count=17, step=0.0125):
    """
    Symmetrical ratio tap table, the middle position has a ratio of 1.
    """
    middle = count // 2
    return [TapStep(r1=1. + (i - middle) * step) for i in range(count)]


def two_bus_network():
    """
    Slack bus at 1 pu and 0 rad feeding a load of 1 + j0.5 pu through a reactance of 0.1 pu.

    The voltage of the load bus is 0.941217 pu at -0.106454 rad.

    OUTPUT:
         **net** (LfNetwork) - the network

    EXAMPLE:
        >>> from pandaflow.networks import two_bus_network
        >>> net = two_bus_network()
    """
    net = LfNetwork(name="two_bus")
    b1 = net.add_bus("b1", slack=True)
    b2 = net.add_bus("b2")
    net.add_generator(b1, "g1", target_v=1.)
    net.add_load(b2, p=1., q=0.5)
    net.add_branch("l12", b1, b2, x=0.1)
    return net


def four_bus_mesh_network():
    """
    Meshed four bus network with two voltage controlled generators and two loads.

    OUTPUT:
         **net** (LfNetwork) - the network
    """
    net = LfNetwork(name="four_bus_mesh")
    b1 = net.add_bus("b1", slack=True)
    b2 = net.add_bus("b2")
    b3 = net.add_bus("b3")
    b4 = net.add_bus("b4")
    net.add_generator(b1, "g1", target_p=1., max_p=3., target_v=1.02)
    net.add_generator(b2, "g2", target_p=0.5, max_p=2., min_q=-1., max_q=1., target_v=1.01)
    net.add_load(b3, p=1., q=0.4)
    net.add_load(b4, p=0.6, q=0.2)
    net.add_branch("l12", b1, b2, r=0.01, x=0.1, b1=0.01, b2=0.01)
    net.add_branch("l13", b1, b3, r=0.02, x=0.15, b1=0.01, b2=0.01)
    net.add_branch("l23", b2, b3, r=0.01, x=0.1)
    net.add_branch("l24", b2, b4, r=0.015, x=0.12)
    net.add_branch("l34", b3, b4, r=0.01, x=0.08)
    return net


def distributed_slack_network():
    """
    Three bus network with a generation deficit of 1 pu: the slack generator and g2 have to
    share it.
    """
    net = LfNetwork(name="distributed_slack")
    b1 = net.add_bus("b1", slack=True)
    b2 = net.add_bus("b2")
    b3 = net.add_bus("b3")
    net.add_generator(b1, "g1", target_p=0., min_p=0., max_p=2., target_v=1.)
    net.add_generator(b2, "g2", target_p=0.5, min_p=0., max_p=1., target_v=1.)
    net.add_load(b3, p=1.5, q=0.3)
    net.add_branch("l12", b1, b2, r=0.01, x=0.1)
    net.add_branch("l13", b1, b3, r=0.01, x=0.1)
    net.add_branch("l23", b2, b3, r=0.01, x=0.1)
    return net


def phase_shifter_network(target_value=0.7, target_deadband=0.05):
    """
    A line and a phase shifter in parallel between a slack bus and a load of 1 pu. Without phase
    shift both carry half of the load, the phase shifter controls its active power on side 1.
    """
    net = LfNetwork(name="phase_shifter")
    b1 = net.add_bus("b1", slack=True)
    b2 = net.add_bus("b2")
    net.add_generator(b1, "g1", target_v=1.)
    net.add_load(b2, p=1., q=0.3)
    net.add_branch("l12", b1, b2, x=0.1)
    ps = net.add_branch("ps12", b1, b2, x=0.1, taps=phase_shifter_taps())
    net.add_phase_control(ps, mode=PhaseControlMode.CONTROLLER,
                          unit=PhaseControlUnit.ACTIVE_POWER, target_value=target_value,
                          target_deadband=target_deadband)
    return net


def current_limiter_network(target_value=0.4):
    """
    Same topology as phase_shifter_network, the phase shifter limits its current on side 1.
    """
    net = LfNetwork(name="current_limiter")
    b1 = net.add_bus("b1", slack=True)
    b2 = net.add_bus("b2")
    net.add_generator(b1, "g1", target_v=1.)
    net.add_load(b2, p=1., q=0.3)
    net.add_branch("l12", b1, b2, x=0.1)
    ps = net.add_branch("ps12", b1, b2, x=0.1, taps=phase_shifter_taps())
    net.add_phase_control(ps, mode=PhaseControlMode.LIMITER, unit=PhaseControlUnit.CURRENT,
                          target_value=target_value)
    return net


def transformer_voltage_control_network(target_value=1., target_deadband=0.01):
    """
    Slack bus feeding a load of 0.8 + j0.4 pu through a ratio tap changer controlling the voltage
    of the load bus.
    """
    net = LfNetwork(name="transformer_voltage_control")
    b1 = net.add_bus("b1", slack=True)
    b2 = net.add_bus("b2")
    net.add_generator(b1, "g1", target_v=1.)
    net.add_load(b2, p=0.8, q=0.4)
    t12 = net.add_branch("t12", b1, b2, r=0.005, x=0.1, taps=ratio_taps())
    net.add_transformer_voltage_control(t12, b2, target_value, target_deadband)
    return net


def shunt_voltage_control_network(target_value=1., target_deadband=0.02):
    """
    Slack bus feeding a load of 0.5 + j0.5 pu through a line, with a sectioned capacitor bank
    controlling the voltage of the load bus.
    """
    net = LfNetwork(name="shunt_voltage_control")
    b1 = net.add_bus("b1", slack=True)
    b2 = net.add_bus("b2")
    net.add_generator(b1, "g1", target_v=1.)
    net.add_load(b2, p=0.5, q=0.5)
    net.add_branch("l12", b1, b2, r=0.01, x=0.2)
    shunt = net.add_shunt("sh2", b2, sections=[0., 0.1, 0.2, 0.3, 0.4, 0.5, 0.6], section=0)
    net.add_shunt_voltage_control(shunt, b2, target_value, target_deadband)
    return net


def reactive_limits_network():
    """
    A generator at bus b2 that cannot hold 1.05 pu within its reactive power limits of +/- 0.2
    pu.
    """
    net = LfNetwork(name="reactive_limits")
    b1 = net.add_bus("b1", slack=True)
    b2 = net.add_bus("b2")
    net.add_generator(b1, "g1", target_v=1.)
    net.add_generator(b2, "g2", target_p=0., min_q=-0.2, max_q=0.2, target_v=1.05)
    net.add_load(b2, p=0.5, q=0.3)
    net.add_branch("l12", b1, b2, r=0.01, x=0.1)
    return net


def secondary_voltage_control_network(target_value=1.):
    """
    Zone z1 holding the voltage of the loaded pilot bus b4 with the generators at b2 and b3.
    """
    net = LfNetwork(name="secondary_voltage_control")
    b1 = net.add_bus("b1", slack=True)
    b2 = net.add_bus("b2")
    b3 = net.add_bus("b3")
    b4 = net.add_bus("b4")
    net.add_generator(b1, "g1", target_v=1.)
    net.add_generator(b2, "g2", target_p=0.3, min_q=-1., max_q=1., target_v=1.)
    net.add_generator(b3, "g3", target_p=0.3, min_q=-1., max_q=1., target_v=1.)
    net.add_load(b4, p=1., q=0.5)
    net.add_branch("l14", b1, b4, r=0.01, x=0.1)
    net.add_branch("l24", b2, b4, r=0.01, x=0.1)
    net.add_branch("l34", b3, b4, r=0.01, x=0.15)
    net.add_branch("l12", b1, b2, r=0.01, x=0.2)
    net.add_secondary_voltage_control("z1", b4, target_value, [b2, b3])
    return net


def standby_network(load_q=0.8):
    """
    A static var compensator in stand-by at the loaded bus b2. It controls 0.97 pu once the
    voltage drops below 0.95 pu and 1.03 pu once it rises above 1.05 pu.
    """
    net = LfNetwork(name="standby")
    b1 = net.add_bus("b1", slack=True)
    b2 = net.add_bus("b2")
    net.add_generator(b1, "g1", target_v=1.)
    net.add_generator(b2, "svc", min_q=-1., max_q=1.,
                      standby_automaton=StandbyAutomaton(0.95, 1.05, 0.97, 1.03))
    net.add_load(b2, p=0.2, q=load_q)
    net.add_branch("l12", b1, b2, r=0.01, x=0.1)
    return net


def hvdc_network(pmax=0.3, k=10.):
    """
    Slack bus feeding a load of 1 pu through a line and an HVDC link in AC emulation in parallel.
    """
    net = LfNetwork(name="hvdc")
    b1 = net.add_bus("b1", slack=True)
    b2 = net.add_bus("b2")
    net.add_generator(b1, "g1", target_v=1.)
    net.add_load(b2, p=1., q=0.2)
    net.add_branch("l12", b1, b2, x=0.1)
    net.add_hvdc("hvdc12", b1, b2, p0=0., k=k, pmax_from_1_to_2=pmax, pmax_from_2_to_1=pmax)
    return net


def zero_impedance_network():
    """
    Two voltage controlled generators with different targets on buses connected by a zero
    impedance branch.
    """
    net = LfNetwork(name="zero_impedance")
    b1 = net.add_bus("b1", slack=True)
    b2 = net.add_bus("b2")
    b3 = net.add_bus("b3")
    b4 = net.add_bus("b4")
    net.add_generator(b1, "g1", target_v=1.)
    net.add_generator(b2, "g2", target_p=0.3, target_v=1.02)
    net.add_generator(b3, "g3", target_p=0.2, target_v=1.03)
    net.add_load(b4, p=1., q=0.3)
    net.add_branch("l12", b1, b2, r=0.01, x=0.1)
    net.add_branch("z23", b2, b3)
    net.add_branch("l34", b3, b4, r=0.01, x=0.1)
    net.add_branch("l14", b1, b4, r=0.01, x=0.1)
    return net
