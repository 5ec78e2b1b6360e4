# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import numpy as np
import pytest

from pandaflow import runlf
from pandaflow.auxiliary import LoadflowNotConverged, OuterLoopNotConverged
from pandaflow.networks import four_bus_mesh_network
from pandaflow.observer import LoadFlowObserver, MultipleLoadFlowObserver
from pandaflow.outerloop import OuterLoop, OuterLoopStatus
from pandaflow.solver import SolverStatus


class CountingObserver(LoadFlowObserver):

    def __init__(self):
        self.linear_solves = 0

    def after_linear_solve(self, iteration):
        self.linear_solves += 1


class AlwaysUnstableOuterLoop(OuterLoop):
    name = "AlwaysUnstable"

    def check(self, context):
        return OuterLoopStatus.UNSTABLE


def test_result_tables(two_bus):
    result = runlf(two_bus)
    assert result.converged
    res_bus = two_bus.res_bus
    assert list(res_bus.columns) == ["vm_pu", "va_degree", "p_pu", "q_pu"]
    assert list(res_bus.index) == ["b1", "b2"]
    assert res_bus.at["b2", "vm_pu"] == pytest.approx(0.941217, abs=1e-4)
    assert res_bus.at["b2", "va_degree"] == pytest.approx(np.rad2deg(-0.106454), abs=1e-2)
    assert res_bus.at["b2", "p_pu"] == pytest.approx(-1., abs=1e-3)
    assert res_bus.at["b1", "p_pu"] == pytest.approx(1., abs=1e-3)

    res_branch = two_bus.res_branch
    assert res_branch.at["l12", "p1_pu"] == pytest.approx(1., abs=1e-3)
    assert res_branch.at["l12", "p2_pu"] == pytest.approx(-1., abs=1e-3)
    assert res_branch.at["l12", "i1_pu"] == pytest.approx(
        np.hypot(res_branch.at["l12", "p1_pu"], res_branch.at["l12", "q1_pu"]))
    assert two_bus.res_hvdc.empty


def test_inactive_elements_have_nan(four_bus):
    four_bus.get_branch("l24").disabled = True
    four_bus.get_branch("l34").disabled = True
    result = runlf(four_bus, distributed_slack=False)
    assert result.converged
    assert np.isnan(four_bus.res_bus.at["b4", "vm_pu"])
    assert np.isnan(four_bus.res_branch.at["l24", "p1_pu"])
    assert not four_bus.res_bus.loc[["b1", "b2", "b3"], "vm_pu"].isnull().any()


@pytest.mark.parametrize("init", ["flat", "dc", "results"])
def test_init(init):
    net = four_bus_mesh_network()
    result = runlf(net, init=init, distributed_slack=False)
    assert result.converged
    reference = four_bus_mesh_network()
    runlf(reference, distributed_slack=False)
    assert np.allclose(net.res_bus.vm_pu.values, reference.res_bus.vm_pu.values, atol=1e-5)


def test_init_results_starts_from_last_solution(two_bus):
    first = runlf(two_bus)
    second = runlf(two_bus, init="results")
    assert first.solver_iterations > 0
    assert second.solver_iterations == 0


@pytest.mark.parametrize("algorithm", ["nr", "newton_krylov"])
def test_algorithm(algorithm):
    net = four_bus_mesh_network()
    result = runlf(net, algorithm=algorithm)
    assert result.converged
    assert abs(result.slack_bus_active_power_mismatch) <= 1e-2


def test_parameters_dict_and_kwargs(two_bus):
    result = runlf(two_bus, {"max_iteration": 1}, max_iteration=10)
    assert result.converged


def test_raise_on_failure(two_bus):
    result = runlf(two_bus, max_iteration=1)
    assert result.solver_status is SolverStatus.MAX_ITERATION_REACHED
    with pytest.raises(LoadflowNotConverged):
        runlf(two_bus, max_iteration=1, raise_on_failure=True)


def test_raise_on_failure_outer_loops(two_bus):
    with pytest.raises(OuterLoopNotConverged):
        runlf(two_bus, outer_loops=[AlwaysUnstableOuterLoop()], max_outer_loop_iterations=2,
              raise_on_failure=True)


def test_multiple_observers(two_bus):
    observers = [CountingObserver(), CountingObserver()]
    result = runlf(two_bus, observer=MultipleLoadFlowObserver(observers))
    assert result.converged
    assert observers[0].linear_solves == observers[1].linear_solves == result.solver_iterations


def test_no_calculation(two_bus):
    for bus in two_bus.buses:
        bus.disabled = True
    result = runlf(two_bus)
    assert result.solver_status is SolverStatus.NO_CALCULATION
    assert two_bus.res_bus is None


if __name__ == '__main__':
    pytest.main([__file__, "-xs"])
