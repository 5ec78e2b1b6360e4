# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import pytest

from pandaflow.auxiliary import SlackDistributionFailure
from pandaflow.networks import distributed_slack_network, four_bus_mesh_network
from pandaflow.outerloop import ActivePowerDistribution, GenerationActivePowerDistributionStep, \
    LoadActivePowerDistributionStep, OuterLoopStatus, create_active_power_distribution
from pandaflow.parameters import create_parameters
from pandaflow.run import runlf


def test_distribution_on_generators():
    net = distributed_slack_network()
    result = runlf(net)
    assert result.converged
    assert abs(result.slack_bus_active_power_mismatch) <= 1e-2
    g1, g2 = net.get_generator("g1"), net.get_generator("g2")
    # all distributed power ends up in the generation targets
    assert g1.target_p + g2.target_p - 0.5 == pytest.approx(result.distributed_active_power)
    # the load and the losses are covered
    assert g1.target_p + g2.target_p > 1.5 - 1e-2
    # proportional to max_p: 2 to 1
    assert g1.target_p == pytest.approx(2 * (g2.target_p - 0.5), rel=1e-6)


def test_without_distribution():
    net = distributed_slack_network()
    result = runlf(net, distributed_slack=False)
    assert result.converged
    assert result.distributed_active_power == 0.
    assert result.slack_bus_active_power_mismatch > 1.
    assert net.get_generator("g2").target_p == 0.5


def test_normalized_participation_factors():
    net = four_bus_mesh_network()
    for balance_type in ("generation_p_max", "generation_p", "generation_remaining_margin"):
        step = GenerationActivePowerDistributionStep(balance_type)
        generators = step.participating_elements(net, 0.5)
        factors = step.normalized_participation_factors(generators, 0.5)
        assert sum(factors) == pytest.approx(1.)
    step = GenerationActivePowerDistributionStep("generation_p_max")
    assert step.normalized_participation_factors(net.generators, 0.5) == \
        pytest.approx([3. / 5., 2. / 5.])


def test_participation_factor_balance_type():
    net = distributed_slack_network()
    net.get_generator("g1").participation_factor = 3.
    net.get_generator("g2").participation_factor = 1.
    distribution = ActivePowerDistribution(
        GenerationActivePowerDistributionStep("generation_participation_factor"))
    result = distribution.run(net, 0.4)
    assert result.distributed == pytest.approx(0.4)
    assert net.get_generator("g1").target_p == pytest.approx(0.3)
    assert net.get_generator("g2").target_p == pytest.approx(0.6)


def test_active_limits():
    net = distributed_slack_network()
    distribution = ActivePowerDistribution(GenerationActivePowerDistributionStep())
    # g1 can take 2 pu, g2 0.5 pu
    result = distribution.run(net, 3.)
    assert result.distributed == pytest.approx(2.5)
    assert result.remaining_mismatch == pytest.approx(0.5)
    assert net.get_generator("g1").target_p == 2.
    assert net.get_generator("g2").target_p == 1.

    # reduction down to min_p
    result = distribution.run(net, -4.)
    assert result.distributed == pytest.approx(-3.)
    assert net.get_generator("g1").target_p == 0.
    assert net.get_generator("g2").target_p == 0.


def test_limit_reached_redistributes():
    net = distributed_slack_network()
    distribution = ActivePowerDistribution(GenerationActivePowerDistributionStep())
    # the first step gives g2 0.6 pu, it can only take 0.5
    result = distribution.run(net, 1.8)
    assert result.distributed == pytest.approx(1.8)
    assert result.iterations == 2
    assert net.get_generator("g2").target_p == 1.
    assert net.get_generator("g1").target_p == pytest.approx(1.3)


def test_without_active_limits():
    net = distributed_slack_network()
    distribution = ActivePowerDistribution(
        GenerationActivePowerDistributionStep(use_active_limits=False))
    result = distribution.run(net, 3.)
    assert result.distributed == pytest.approx(3.)
    assert net.get_generator("g1").target_p == pytest.approx(2.)
    assert net.get_generator("g2").target_p == pytest.approx(1.5)


def test_proportional_to_load():
    net = four_bus_mesh_network()
    distribution = create_active_power_distribution(
        create_parameters(balance_type="proportional_to_load"))
    assert isinstance(distribution.step, LoadActivePowerDistributionStep)
    # missing generation of 0.4 pu is taken from the loads of 1 and 0.6 pu
    result = distribution.run(net, 0.4)
    assert result.distributed == pytest.approx(0.4)
    assert net.get_bus("b3").load_target_p == pytest.approx(0.75)
    assert net.get_bus("b4").load_target_p == pytest.approx(0.45)


def _saturated_network():
    net = distributed_slack_network()
    net.get_generator("g1").max_p = 0.
    net.get_generator("g2").max_p = 0.5
    return net


def test_failure_leave_on_slack_bus():
    net = _saturated_network()
    result = runlf(net)
    assert result.converged
    assert result.distributed_active_power == 0.
    assert result.slack_bus_active_power_mismatch > 1.


def test_failure_fail():
    result = runlf(_saturated_network(), slack_distribution_failure_behavior="fail")
    assert result.outer_loop_status is OuterLoopStatus.FAILED
    assert not result.converged


def test_failure_throw():
    with pytest.raises(SlackDistributionFailure):
        runlf(_saturated_network(), slack_distribution_failure_behavior="throw")


if __name__ == '__main__':
    pytest.main([__file__, "-xs"])
