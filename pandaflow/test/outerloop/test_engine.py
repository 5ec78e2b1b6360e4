# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import numpy as np
import pytest

from pandaflow.auxiliary import ConfigurationError, OuterLoopNotConverged
from pandaflow.network import Direction
from pandaflow.networks import two_bus_network, four_bus_mesh_network
from pandaflow.observer import LoadFlowObserver
from pandaflow.outerloop import AcLoadFlowContext, AcLoadFlowEngine, OuterLoop, \
    OuterLoopStatus, IncrementalContextData, create_outer_loops, OUTER_LOOP_FACTORIES
from pandaflow.parameters import create_parameters
from pandaflow.solver import SolverStatus


class OscillatingTapData(IncrementalContextData):

    def __init__(self, max_direction_change):
        super().__init__(max_direction_change)
        self.moves = []


class OscillatingTapOuterLoop(OuterLoop):
    """
    Tap that would move up and down forever.
    """
    name = "OscillatingTap"

    def create_context_data(self):
        return OscillatingTapData(max_direction_change=2)

    def check(self, context):
        data = context.data
        if data.is_frozen("tap"):
            return OuterLoopStatus.STABLE
        direction = Direction.DECREASE if len(data.moves) % 2 else Direction.INCREASE
        data.moves.append(direction)
        data.get_controller_context("tap").update(direction)
        return OuterLoopStatus.UNSTABLE


class AlwaysUnstableOuterLoop(OuterLoop):
    name = "AlwaysUnstable"

    def check(self, context):
        return OuterLoopStatus.UNSTABLE


class RecordingOuterLoop(OuterLoop):
    """
    Records its checks in a shared list and is unstable for the given number of checks.
    """

    def __init__(self, name, log, unstable_checks=0):
        self.name = name
        self.log = log
        self.unstable_checks = unstable_checks

    def create_context_data(self):
        return {"checks": 0}

    def check(self, context):
        self.log.append(self.name)
        context.data["checks"] += 1
        if context.data["checks"] <= self.unstable_checks:
            return OuterLoopStatus.UNSTABLE
        return OuterLoopStatus.STABLE


class CountingObserver(LoadFlowObserver):

    def __init__(self):
        self.checks = []

    def after_outer_loop_check(self, outer_loop_name, outer_loop_iteration, status):
        self.checks.append((outer_loop_name, outer_loop_iteration, status))


def _run(net, outer_loops, observer=None, **kwargs):
    with AcLoadFlowContext(net, create_parameters(**kwargs), observer) as context:
        engine = AcLoadFlowEngine(context, outer_loops)
        return engine.run(), engine


def test_no_outer_loop(two_bus):
    result, _ = _run(two_bus, [])
    assert result.converged
    assert result.outer_loop_status is OuterLoopStatus.STABLE
    assert result.outer_loop_iterations == 0
    assert np.isclose(two_bus.get_bus("b2").v, 0.941217, atol=1e-4)


def test_hunting_controller_is_frozen(two_bus):
    result, engine = _run(two_bus, [OscillatingTapOuterLoop()])
    data = engine.outer_loop_contexts["OscillatingTap"].data
    assert data.moves == [Direction.INCREASE, Direction.DECREASE, Direction.INCREASE]
    assert data.get_controller_context("tap").direction_change_count == 2
    assert result.outer_loop_status is OuterLoopStatus.STABLE
    assert result.outer_loop_iterations == 3
    assert result.converged


def test_outer_loops_exhausted_fail(two_bus):
    result, _ = _run(two_bus, [AlwaysUnstableOuterLoop()], max_outer_loop_iterations=3)
    assert result.solver_status is SolverStatus.CONVERGED
    assert result.outer_loop_status is OuterLoopStatus.FAILED
    assert result.outer_loop_iterations == 3
    assert not result.converged


def test_outer_loops_exhausted_throw(two_bus):
    with pytest.raises(OuterLoopNotConverged):
        _run(two_bus, [AlwaysUnstableOuterLoop()], max_outer_loop_iterations=3,
             outer_loop_exhaustion_behavior="throw")


def test_outer_loops_exhausted_continue(two_bus):
    result, _ = _run(two_bus, [AlwaysUnstableOuterLoop()], max_outer_loop_iterations=3,
                     outer_loop_exhaustion_behavior="continue")
    assert result.outer_loop_status is OuterLoopStatus.STABLE
    assert result.converged


def test_unstable_outer_loop_restarts_sequence(two_bus):
    log = []
    outer_loops = [RecordingOuterLoop("first", log), RecordingOuterLoop("second", log, 1),
                   RecordingOuterLoop("third", log)]
    result, _ = _run(two_bus, outer_loops)
    assert log == ["first", "second", "first", "second", "third"]
    assert result.outer_loop_iterations == 1
    assert result.converged


def test_observer_does_not_change_results():
    reference = four_bus_mesh_network()
    _run(reference, [OscillatingTapOuterLoop()])
    net = four_bus_mesh_network()
    observer = CountingObserver()
    result, _ = _run(net, [OscillatingTapOuterLoop()], observer)
    assert result.converged
    assert [c[0] for c in observer.checks] == ["OscillatingTap"] * 4
    assert [c[2] for c in observer.checks][-1] is OuterLoopStatus.STABLE
    for bus, ref_bus in zip(net.buses, reference.buses):
        assert bus.v == ref_bus.v
        assert bus.angle == ref_bus.angle


def test_no_calculation(two_bus):
    for bus in two_bus.buses:
        bus.disabled = True
    result, _ = _run(two_bus, [AlwaysUnstableOuterLoop()])
    assert result.solver_status is SolverStatus.NO_CALCULATION
    assert result.outer_loop_status is OuterLoopStatus.STABLE
    assert not result.converged


def test_solver_failure_stops_outer_loops(two_bus):
    log = []
    result, _ = _run(two_bus, [RecordingOuterLoop("never", log)], max_iteration=1)
    assert result.solver_status is SolverStatus.MAX_ITERATION_REACHED
    assert log == []
    assert not result.converged


def test_duplicate_outer_loops(two_bus):
    with AcLoadFlowContext(two_bus) as context:
        with pytest.raises(ConfigurationError):
            AcLoadFlowEngine(context, [AlwaysUnstableOuterLoop(), AlwaysUnstableOuterLoop()])


def test_create_outer_loops():
    names = [o.name for o in create_outer_loops(create_parameters())]
    assert names == ["DistributedSlack", "HvdcAcEmulation"]

    parameters = create_parameters(enforce_q_lims=True, phase_shifter_control=True,
                                   transformer_voltage_control=True, shunt_voltage_control=True,
                                   secondary_voltage_control=True, voltage_monitoring=True)
    names = [o.name for o in create_outer_loops(parameters)]
    assert names == list(OUTER_LOOP_FACTORIES.keys())

    parameters = create_parameters(outer_loops=["ReactiveLimits", "DistributedSlack"])
    names = [o.name for o in create_outer_loops(parameters)]
    assert names == ["ReactiveLimits", "DistributedSlack"]

    with pytest.raises(ConfigurationError):
        create_outer_loops(create_parameters(outer_loops=["Unknown"]))


def test_context_reuse_after_topology_change():
    net = four_bus_mesh_network()
    with AcLoadFlowContext(net, create_parameters(distributed_slack=False)) as context:
        engine = AcLoadFlowEngine(context)
        assert engine.run().converged
        v_reference = [bus.v for bus in net.buses]
        rebuild_count = context.jacobian.rebuild_count

        net.get_branch("l24").disabled = True
        result = engine.run()
        assert result.converged
        assert context.jacobian.rebuild_count > rebuild_count
        assert not np.isclose(net.get_bus("b4").v, v_reference[3], atol=1e-4)

        net.get_branch("l24").disabled = False
        assert engine.run().converged
        assert np.allclose([bus.v for bus in net.buses], v_reference, atol=1e-5)


def test_slack_bus_selection():
    net = four_bus_mesh_network()
    net.get_bus("b1").slack = False
    result, _ = _run(net, [])
    assert result.converged
    assert net.slack_bus is net.get_bus("b2")


if __name__ == '__main__':
    pytest.main([__file__, "-xs"])
