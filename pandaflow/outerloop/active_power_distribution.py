# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging
from collections import namedtuple

logger = logging.getLogger(__name__)

P_RESIDUE_EPS = 1e-5

DistributionResult = namedtuple("DistributionResult",
                                ["iterations", "distributed", "remaining_mismatch"])


class ActivePowerDistributionStep:
    """
    One step of the distribution of an active power mismatch on participating elements,
    proportionally to their normalized participation factors. A positive mismatch is missing
    generation.
    """

    def participating_elements(self, network, mismatch):
        raise NotImplementedError

    def participation_factor(self, element, mismatch):
        raise NotImplementedError

    def shift(self, element, dp):
        """
        Shifts the generation of element by dp, returns the shift actually done and whether the
        element reached a limit.
        """
        raise NotImplementedError

    def normalized_participation_factors(self, elements, mismatch):
        factors = [self.participation_factor(e, mismatch) for e in elements]
        factor_sum = sum(factors)
        if factor_sum <= 0:
            return [0.] * len(elements)
        return [f / factor_sum for f in factors]

    def step(self, elements, mismatch):
        """
        Distributes mismatch on elements in one step.

        OUTPUT:
            **done** (float) - active power actually distributed

            **remaining_elements** (list) - elements which did not reach a limit
        """
        factors = self.normalized_participation_factors(elements, mismatch)
        if not any(factors):
            return 0., []
        done = 0.
        remaining_elements = list()
        for element, factor in zip(elements, factors):
            shifted, at_limit = self.shift(element, mismatch * factor)
            done += shifted
            if not at_limit:
                remaining_elements.append(element)
        return done, remaining_elements


class GenerationActivePowerDistributionStep(ActivePowerDistributionStep):
    """
    Distributes on the participating generators. The participation factor is given by the
    balance type:

        - "generation_p_max": maximum active power
        - "generation_p": active power target
        - "generation_participation_factor": participation factor of the generator
        - "generation_remaining_margin": distance to max_p for a positive mismatch, to min_p for a
          negative one

    With use_active_limits, new targets are clamped to [min_p, max_p] and clamped generators do
    not take part in the following steps.
    """

    def __init__(self, balance_type="generation_p_max", use_active_limits=True):
        self.balance_type = balance_type
        self.use_active_limits = use_active_limits

    def participation_factor(self, generator, mismatch):
        if self.balance_type == "generation_p_max":
            return generator.max_p
        elif self.balance_type == "generation_p":
            return generator.target_p
        elif self.balance_type == "generation_participation_factor":
            return generator.participation_factor
        elif mismatch > 0:
            return generator.max_p - generator.target_p
        return generator.target_p - generator.min_p

    def participating_elements(self, network, mismatch):
        generators = list()
        for generator in network.generators:
            if not generator.participating or not generator.bus.active:
                continue
            if self.participation_factor(generator, mismatch) <= 0:
                continue
            if self.use_active_limits and (
                    mismatch > 0 and generator.target_p >= generator.max_p
                    or mismatch < 0 and generator.target_p <= generator.min_p):
                continue
            generators.append(generator)
        return generators

    def shift(self, generator, dp):
        target_p = generator.target_p + dp
        at_limit = False
        if self.use_active_limits:
            if target_p >= generator.max_p:
                target_p, at_limit = generator.max_p, True
            elif target_p <= generator.min_p:
                target_p, at_limit = generator.min_p, True
        shifted = target_p - generator.target_p
        generator.target_p = target_p
        return shifted, at_limit


class LoadActivePowerDistributionStep(ActivePowerDistributionStep):
    """
    Distributes on the loads of the active buses proportionally to their active power. Missing
    generation reduces the loads.
    """

    def participation_factor(self, bus, mismatch):
        return bus.load_target_p

    def participating_elements(self, network, mismatch):
        return [bus for bus in network.buses if bus.active and bus.load_target_p > 0]

    def shift(self, bus, dp):
        bus.load_target_p -= dp
        return dp, False


class ActivePowerDistribution:
    """
    Repeats distribution steps until the mismatch is distributed or no element can take more.
    """

    def __init__(self, step):
        self.step = step

    def run(self, network, mismatch):
        """
        INPUT:
            **network** (LfNetwork) - the network

            **mismatch** (float) - active power to distribute, in per unit. A positive mismatch
            is missing generation.

        OUTPUT:
            **result** (DistributionResult) - iterations, distributed active power and remaining
            mismatch
        """
        remaining = mismatch
        elements = self.step.participating_elements(network, mismatch)
        iterations = 0
        while len(elements) and abs(remaining) > P_RESIDUE_EPS:
            done, elements = self.step.step(elements, remaining)
            remaining -= done
            iterations += 1
        logger.debug("%.6f pu of %.6f pu distributed in %i iterations"
                     % (mismatch - remaining, mismatch, iterations))
        return DistributionResult(iterations, mismatch - remaining, remaining)


def create_active_power_distribution(parameters):
    balance_type = parameters["balance_type"]
    if balance_type == "proportional_to_load":
        step = LoadActivePowerDistributionStep()
    else:
        step = GenerationActivePowerDistributionStep(balance_type,
                                                     parameters["use_active_limits"])
    return ActivePowerDistribution(step)
