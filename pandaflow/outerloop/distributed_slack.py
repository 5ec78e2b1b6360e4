# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

from pandaflow.auxiliary import SlackDistributionFailure
from pandaflow.outerloop.active_power_distribution import P_RESIDUE_EPS
from pandaflow.outerloop.base import OuterLoop, OuterLoopStatus

logger = logging.getLogger(__name__)


class DistributedSlackContextData:

    def __init__(self):
        self.distributed_active_power = 0.


class DistributedSlackOuterLoop(OuterLoop):
    """
    Distributes the active power taken by the slack bus on the participating generators.

    The slack bus mismatch of the last solve is distributed as soon as it exceeds
    slack_bus_p_max_mismatch. If it cannot be distributed completely because all generators are
    at their limits, failure_behavior decides:

        - "throw": a SlackDistributionFailure is raised
        - "leave_on_slack_bus": the rest stays on the slack bus, a warning is logged
        - "fail": the outer loop fails

    INPUT:
        **active_power_distribution** (ActivePowerDistribution) - distribution strategy

    OPTIONAL:
        **slack_bus_p_max_mismatch** (float, 1e-2) - tolerated slack bus mismatch in per unit

        **failure_behavior** (str, "leave_on_slack_bus") - see above
    """
    name = "DistributedSlack"

    def __init__(self, active_power_distribution, slack_bus_p_max_mismatch=1e-2,
                 failure_behavior="leave_on_slack_bus"):
        self.active_power_distribution = active_power_distribution
        self.slack_bus_p_max_mismatch = slack_bus_p_max_mismatch
        self.failure_behavior = failure_behavior

    def create_context_data(self):
        return DistributedSlackContextData()

    def check(self, context):
        mismatch = context.last_solver_result.slack_bus_active_power_mismatch
        if abs(mismatch) <= self.slack_bus_p_max_mismatch:
            logger.debug("Slack bus active power mismatch %.6f pu within tolerance" % mismatch)
            return OuterLoopStatus.STABLE

        result = self.active_power_distribution.run(context.network, mismatch)
        context.data.distributed_active_power += result.distributed
        if abs(result.remaining_mismatch) <= P_RESIDUE_EPS:
            logger.info("Slack bus active power mismatch %.6f pu distributed in %i iterations"
                        % (mismatch, result.iterations))
            return OuterLoopStatus.UNSTABLE

        message = "Failed to distribute slack bus active power mismatch, %.6f pu remaining" \
                  % result.remaining_mismatch
        if self.failure_behavior == "throw":
            raise SlackDistributionFailure(message)
        elif self.failure_behavior == "fail":
            logger.error(message)
            return OuterLoopStatus.FAILED
        logger.warning(message + " on the slack bus")
        if abs(result.distributed) > P_RESIDUE_EPS:
            return OuterLoopStatus.UNSTABLE
        return OuterLoopStatus.STABLE
