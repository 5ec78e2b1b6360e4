# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import math
from enum import Enum

LOW_IMPEDANCE_THRESHOLD = 1e-8


class Direction(Enum):
    INCREASE = 1
    DECREASE = -1


class TapStep:
    """
    One position of a tap changer. r and x overwrite the series impedance of the pi model when
    given.
    """

    def __init__(self, r1=1., a1=0., r=None, x=None):
        self.r1 = r1
        self.a1 = a1
        self.r = r
        self.x = x

    def __repr__(self):
        return "TapStep(r1=%s, a1=%s)" % (self.r1, self.a1)


def position_range(position, count, max_shift):
    return range(max(0, position - max_shift), min(count - 1, position + max_shift) + 1)


def closest_position(values, position, target, max_shift):
    best = position
    best_distance = abs(values[position] - target)
    for p in position_range(position, len(values), max_shift):
        distance = abs(values[p] - target)
        if distance < best_distance - 1e-12:
            best, best_distance = p, distance
    return best


def exceeding_position(values, position, target, increase, max_shift):
    """
    Closest position whose value is beyond target in the direction of the change, or the
    farthest reachable position in that direction if target cannot be exceeded.
    """
    candidates = position_range(position, len(values), max_shift)
    best = None
    for p in candidates:
        beyond = values[p] >= target if increase else values[p] <= target
        if beyond and (best is None or abs(values[p] - target) < abs(values[best] - target)):
            best = p
    if best is None:
        key = (lambda p: values[p]) if increase else (lambda p: -values[p])
        best = max(candidates, key=key)
    return best


class PiModel:
    """
    Pi model of a branch: series impedance r + jx, shunt admittances g1 + jb1 and g2 + jb2 and a
    ratio r1 and phase shift a1 on side 1. If a list of TapStep is given, r1 and a1 (and optionally
    r and x) follow the tap position.

    All values are per unit, angles are in radians.
    """

    def __init__(self, r=0., x=0., g1=0., b1=0., g2=0., b2=0., r1=1., a1=0., taps=None,
                 tap_position=None):
        self._r = r
        self._x = x
        self.g1 = g1
        self.b1 = b1
        self.g2 = g2
        self.b2 = b2
        self._r1 = r1
        self._a1 = a1
        self.taps = list(taps) if taps is not None else None
        if self.taps is not None:
            if not len(self.taps):
                raise ValueError("A tap changer needs at least one tap step")
            if tap_position is None:
                tap_position = len(self.taps) // 2
            if not 0 <= tap_position < len(self.taps):
                raise ValueError("Tap position %s out of range [0, %i]"
                                 % (tap_position, len(self.taps) - 1))
        self.tap_position = tap_position

    @property
    def has_taps(self):
        return self.taps is not None

    @property
    def _tap(self):
        return self.taps[self.tap_position] if self.taps is not None else None

    @property
    def r(self):
        tap = self._tap
        return tap.r if tap is not None and tap.r is not None else self._r

    @property
    def x(self):
        tap = self._tap
        return tap.x if tap is not None and tap.x is not None else self._x

    @property
    def r1(self):
        tap = self._tap
        return tap.r1 if tap is not None else self._r1

    @r1.setter
    def r1(self, r1):
        if self.taps is not None:
            raise ValueError("r1 of a tap changer follows its tap position")
        self._r1 = r1

    @property
    def a1(self):
        tap = self._tap
        return tap.a1 if tap is not None else self._a1

    @a1.setter
    def a1(self, a1):
        if self.taps is not None:
            raise ValueError("a1 of a tap changer follows its tap position")
        self._a1 = a1

    @property
    def z(self):
        return math.hypot(self.r, self.x)

    @property
    def y(self):
        return 1. / self.z

    @property
    def ksi(self):
        return math.atan2(self.r, self.x)

    @property
    def is_zero_impedance(self):
        return self.z < LOW_IMPEDANCE_THRESHOLD

    @property
    def min_a1(self):
        return min(t.a1 for t in self.taps) if self.taps is not None else self.a1

    @property
    def max_a1(self):
        return max(t.a1 for t in self.taps) if self.taps is not None else self.a1

    def _move_to(self, position):
        if position == self.tap_position:
            return None
        direction = Direction.INCREASE if position > self.tap_position else Direction.DECREASE
        self.tap_position = position
        return direction

    def _check_taps(self):
        if self.taps is None:
            raise ValueError("The pi model has no tap changer")

    def update_tap_position_to_reach_new_a1(self, da1, max_tap_shift):
        """
        Moves the tap to the position whose a1 is closest to a1 + da1, by at most max_tap_shift
        positions.

        OUTPUT:
            **direction** (Direction) - direction of the move, None if the tap did not move
        """
        self._check_taps()
        values = [t.a1 for t in self.taps]
        position = closest_position(values, self.tap_position, self.a1 + da1, max_tap_shift)
        return self._move_to(position)

    def update_tap_position_to_exceed_new_a1(self, da1, max_tap_shift):
        """
        Moves the tap to the closest position whose a1 reaches at least a1 + da1 in the direction
        of da1.
        """
        self._check_taps()
        values = [t.a1 for t in self.taps]
        position = exceeding_position(values, self.tap_position, self.a1 + da1, da1 > 0,
                                       max_tap_shift)
        return self._move_to(position)

    def update_tap_position_to_reach_new_r1(self, dr1, max_tap_shift):
        self._check_taps()
        values = [t.r1 for t in self.taps]
        position = closest_position(values, self.tap_position, self.r1 + dr1, max_tap_shift)
        return self._move_to(position)

    def __repr__(self):
        return "PiModel(r=%s, x=%s, r1=%s, a1=%s, tap_position=%s)" % (
            self.r, self.x, self.r1, self.a1, self.tap_position)
