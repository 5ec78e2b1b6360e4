# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import pytest

from pandaflow.auxiliary import ConfigurationError, NetworkError
from pandaflow.network import StandbyAutomaton
from pandaflow.networks import secondary_voltage_control_network, standby_network
from pandaflow.outerloop import OuterLoopStatus, OUTER_LOOP_FACTORIES, create_outer_loops, \
    SecondaryVoltageControlOuterLoop, VoltageMonitoringOuterLoop
from pandaflow.outerloop.reactive_limits import generation_q
from pandaflow.outerloop.secondary_voltage_control import SecondaryVoltageControlContextData, \
    calculate_k
from pandaflow.parameters import create_parameters
from pandaflow.run import runlf


def test_pilot_bus_without_secondary_voltage_control():
    net = secondary_voltage_control_network()
    result = runlf(net, distributed_slack=False)
    assert result.converged
    assert net.get_bus("b4").v < 0.99
    assert net.get_bus("b2").target_v == 1.
    assert net.get_bus("b3").target_v == 1.


@pytest.mark.parametrize("target_value", [1., 1.02])
def test_pilot_bus_reaches_target(target_value):
    net = secondary_voltage_control_network(target_value)
    result = runlf(net, secondary_voltage_control=True, distributed_slack=False)
    assert result.converged
    assert result.outer_loop_iterations > 0
    b2 = net.get_bus("b2")
    b3 = net.get_bus("b3")
    assert net.get_bus("b4").v == pytest.approx(target_value, abs=1e-3)
    # both controller buses work at the same position within their reactive power limits
    assert calculate_k(b2) == pytest.approx(calculate_k(b3), abs=1e-2)
    assert generation_q(b2) == pytest.approx(generation_q(b3), abs=1e-2)
    assert b2.target_v > 1.
    assert b3.target_v > 1.
    assert b2.v == pytest.approx(b2.target_v, abs=1e-6)


def test_implausible_target_voltage(caplog):
    net = secondary_voltage_control_network(1.05)
    with caplog.at_level("ERROR"):
        result = runlf(net, secondary_voltage_control=True, distributed_slack=False,
                       max_plausible_target_voltage=1.01)
    assert not result.converged
    assert result.outer_loop_status is OuterLoopStatus.FAILED
    assert "not plausible" in caplog.text
    # targets are left unchanged
    assert net.get_bus("b2").target_v == 1.
    assert net.get_bus("b3").target_v == 1.


def test_plausible_target_voltage_range():
    with pytest.raises(ConfigurationError):
        create_parameters(min_plausible_target_voltage=1.1, max_plausible_target_voltage=1.)


def test_reenable_controller_buses():
    net = secondary_voltage_control_network()
    b2 = net.get_bus("b2")
    b3 = net.get_bus("b3")
    net.get_bus("b4").v = 0.95
    b2.v = 0.99
    for bus, limit in ((b2, b2.min_q), (b3, b3.max_q)):
        bus.generator_voltage_control_enabled = False
        bus.generation_target_q = limit

    loop = SecondaryVoltageControlOuterLoop(max_reenable=1)
    data = SecondaryVoltageControlContextData()
    # the pilot voltage has to rise: b2 at min_q can help, b3 at max_q cannot
    assert loop.reenable_helpful_controller_buses(net, data) == [b2]
    assert b2.is_voltage_controlled
    assert b2.target_v == 0.99
    assert b2.generation_target_q == pytest.approx(0.)
    assert not b3.is_voltage_controlled
    assert data.reenable_count == {"b2": 1}

    b2.generator_voltage_control_enabled = False
    b2.generation_target_q = b2.min_q
    assert loop.reenable_helpful_controller_buses(net, data) == []
    assert not b2.is_voltage_controlled


def test_all_controller_buses_blocked(caplog):
    net = secondary_voltage_control_network(1.3)
    for bus_id in ("b2", "b3"):
        bus = net.get_bus(bus_id)
        bus.generator_voltage_control_enabled = False
        bus.generation_target_q = bus.max_q
    with caplog.at_level("INFO"):
        result = runlf(net, secondary_voltage_control=True, distributed_slack=False)
    assert result.converged
    assert "cannot produce or absorb" in caplog.text
    assert result.outer_loop_iterations == 0
    assert not net.get_bus("b2").is_voltage_controlled
    assert net.get_bus("b4").v < 1.3


def test_secondary_voltage_control_zones():
    net = secondary_voltage_control_network()
    b1 = net.get_bus("b1")
    b4 = net.get_bus("b4")
    with pytest.raises(NetworkError):
        net.add_secondary_voltage_control("z1", b4, 1., [b1])
    with pytest.raises(NetworkError):
        net.add_secondary_voltage_control("z2", b4, 1., [])
    with pytest.raises(NetworkError):
        net.add_secondary_voltage_control("z2", b1, 1., [b4])
    with pytest.raises(NetworkError):
        net.add_secondary_voltage_control("z2", b4, 1., ["b2"])
    control = net.add_secondary_voltage_control("z2", "b4", 1., ["b1"])
    assert control.controller_buses == [b1]
    assert [c.zone_name for c in net.secondary_voltage_controls] == ["z1", "z2"]


def test_standby_generator_stays_in_standby():
    net = standby_network(load_q=0.2)
    result = runlf(net, voltage_monitoring=True, distributed_slack=False)
    assert result.converged
    assert result.outer_loop_iterations == 0
    b2 = net.get_bus("b2")
    assert not b2.is_voltage_controlled
    assert 0.95 < b2.v < 1.05


@pytest.mark.parametrize("load_q, target_v", [(0.8, 0.97), (-0.8, 1.03)])
def test_standby_generator_activation(load_q, target_v):
    net = standby_network(load_q)
    result = runlf(net, distributed_slack=False)
    assert result.converged
    b2 = net.get_bus("b2")
    assert not 0.95 < b2.v < 1.05

    result = runlf(net, voltage_monitoring=True, distributed_slack=False)
    assert result.converged
    assert result.outer_loop_iterations == 1
    assert b2.is_voltage_controlled
    assert net.get_generator("svc").target_v == target_v
    assert b2.v == pytest.approx(target_v, abs=1e-6)


def test_standby_automaton():
    with pytest.raises(ConfigurationError):
        StandbyAutomaton(1.05, 0.95, 0.97, 1.03)
    net = standby_network()
    with pytest.raises(NetworkError):
        net.add_generator("b2", "svc2", target_v=1.,
                          standby_automaton=StandbyAutomaton(0.95, 1.05, 0.97, 1.03))


def test_create_voltage_outer_loops():
    assert list(OUTER_LOOP_FACTORIES.keys()).index("SecondaryVoltageControl") \
        == list(OUTER_LOOP_FACTORIES.keys()).index("ReactiveLimits") + 1
    parameters = create_parameters(secondary_voltage_control=True, voltage_monitoring=True,
                                   max_pv_pq_switch=5)
    outer_loops = create_outer_loops(parameters)
    assert [o.name for o in outer_loops] == ["DistributedSlack", "SecondaryVoltageControl",
                                             "VoltageMonitoring", "HvdcAcEmulation"]
    assert isinstance(outer_loops[1], SecondaryVoltageControlOuterLoop)
    assert outer_loops[1].max_reenable == 5
    assert isinstance(outer_loops[2], VoltageMonitoringOuterLoop)


if __name__ == '__main__':
    pytest.main([__file__, "-xs"])
