# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import numpy as np
import pytest

from pandaflow.network import PiModel, TapStep, Direction, LfNetwork
from pandaflow.networks import phase_shifter_taps, ratio_taps


@pytest.fixture
def phase_shifter():
    # 21 positions from -0.2 to 0.2 rad, the middle position 10 has no phase shift
    return PiModel(x=0.1, taps=phase_shifter_taps())


def test_default_tap_position(phase_shifter):
    assert phase_shifter.tap_position == 10
    assert phase_shifter.a1 == 0.
    assert np.isclose(phase_shifter.min_a1, -0.2)
    assert np.isclose(phase_shifter.max_a1, 0.2)


def test_reach_new_a1(phase_shifter):
    assert phase_shifter.update_tap_position_to_reach_new_a1(0.045, 3) is Direction.INCREASE
    assert phase_shifter.tap_position == 12
    assert phase_shifter.update_tap_position_to_reach_new_a1(-0.085, 3) is Direction.DECREASE
    assert phase_shifter.tap_position == 9
    # a change below half a tap step does not move the tap
    assert phase_shifter.update_tap_position_to_reach_new_a1(0.005, 3) is None
    assert phase_shifter.tap_position == 9


def test_reach_new_a1_max_tap_shift(phase_shifter):
    assert phase_shifter.update_tap_position_to_reach_new_a1(0.2, 3) is Direction.INCREASE
    assert phase_shifter.tap_position == 13
    assert phase_shifter.update_tap_position_to_reach_new_a1(1., 30) is Direction.INCREASE
    assert phase_shifter.tap_position == 20
    # already at the highest position
    assert phase_shifter.update_tap_position_to_reach_new_a1(0.1, 3) is None


def test_exceed_new_a1(phase_shifter):
    assert phase_shifter.update_tap_position_to_exceed_new_a1(0.025, 3) is Direction.INCREASE
    assert phase_shifter.tap_position == 12
    assert phase_shifter.a1 >= 0.025
    assert phase_shifter.update_tap_position_to_exceed_new_a1(-0.05, 3) is Direction.DECREASE
    assert phase_shifter.tap_position == 9
    # the target cannot be exceeded within the maximum shift, the farthest position is taken
    assert phase_shifter.update_tap_position_to_exceed_new_a1(-1., 2) is Direction.DECREASE
    assert phase_shifter.tap_position == 7


def test_reach_new_r1():
    pi_model = PiModel(r=0.005, x=0.1, taps=ratio_taps())
    assert pi_model.r1 == 1.
    assert pi_model.update_tap_position_to_reach_new_r1(0.026, 3) is Direction.INCREASE
    assert pi_model.tap_position == 10
    assert np.isclose(pi_model.r1, 1.025)


def test_tap_impedance():
    pi_model = PiModel(r=0.01, x=0.1, taps=[TapStep(r1=0.95, x=0.09), TapStep(r1=1.05)],
                       tap_position=0)
    assert pi_model.x == 0.09
    assert pi_model.r == 0.01
    pi_model.tap_position = 1
    assert pi_model.x == 0.1
    assert pi_model.r1 == 1.05


def test_taps_fix_ratio_and_phase(phase_shifter):
    with pytest.raises(ValueError):
        phase_shifter.a1 = 0.1
    with pytest.raises(ValueError):
        phase_shifter.r1 = 1.1
    with pytest.raises(ValueError):
        PiModel(x=0.1).update_tap_position_to_reach_new_a1(0.1, 1)
    with pytest.raises(ValueError):
        PiModel(x=0.1, taps=phase_shifter_taps(), tap_position=21)
    with pytest.raises(ValueError):
        PiModel(x=0.1, taps=[])


def test_admittance():
    pi_model = PiModel(r=0.03, x=0.04)
    assert np.isclose(pi_model.z, 0.05)
    assert np.isclose(pi_model.y, 20.)
    assert np.isclose(pi_model.ksi, np.arctan2(0.03, 0.04))
    assert not pi_model.is_zero_impedance
    assert PiModel().is_zero_impedance


def test_shunt_sections():
    net = LfNetwork()
    b1 = net.add_bus("b1", slack=True)
    shunt = net.add_shunt("sh1", b1, sections=[0., 0.1, 0.2, 0.3])
    assert shunt.section == 0 and shunt.b == 0.
    assert shunt.update_section_to_reach_new_b(0.25) is Direction.INCREASE
    assert shunt.section == 1
    assert shunt.update_section_to_reach_new_b(0.25, max_section_shift=3) is Direction.INCREASE
    assert shunt.section == 3
    assert shunt.update_section_to_reach_new_b(0.01) is None
    assert shunt.update_section_to_reach_new_b(-0.1) is Direction.DECREASE
    assert np.isclose(shunt.b, 0.2)

    fixed = net.add_shunt("sh2", b1, b=0.1)
    with pytest.raises(ValueError):
        fixed.update_section_to_reach_new_b(0.1)
    with pytest.raises(ValueError):
        net.add_shunt("sh3", b1, sections=[0., 0.1], section=2)


if __name__ == '__main__':
    pytest.main([__file__, "-xs"])
