# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class OuterLoopStatus(Enum):
    STABLE = "stable"
    UNSTABLE = "unstable"
    FAILED = "failed"


class OuterLoopContext:
    """
    State of one outer loop during one load flow run. It is created by the engine before the
    first solve and dropped at the end of the run.

    Outer loops keep their own per controller state in data, which is created by
    OuterLoop.create_context_data().

    INPUT:
        **load_flow_context** (AcLoadFlowContext) - the load flow context of the run

        **data** (object, None) - state of the outer loop
    """

    def __init__(self, load_flow_context, data=None):
        self.load_flow_context = load_flow_context
        self.data = data
        self.iteration = 0
        self.outer_loop_total_iterations = 0
        self.last_solver_result = None

    @property
    def network(self):
        return self.load_flow_context.network

    @property
    def parameters(self):
        return self.load_flow_context.parameters

    @property
    def equation_system(self):
        return self.load_flow_context.equation_system

    @property
    def jacobian(self):
        return self.load_flow_context.jacobian

    @property
    def target_function(self):
        return self.load_flow_context.target_function


class OuterLoop:
    """
    Base class of the outer loops. After every converged solve the engine calls check() of the
    outer loops in their order. A check compares the solution with the discrete controls it is
    responsible for and may change discrete network state (tap positions, generation, PV/PQ
    types...). It returns UNSTABLE if it changed anything, so that the equations are solved again.

    Outer loops must not keep state outside of their context, the same outer loop object can be
    used for several runs.
    """
    name = None

    def create_context_data(self):
        return None

    def initialize(self, context):
        pass

    def check(self, context):
        raise NotImplementedError("check() has to be implemented by %s"
                                  % self.__class__.__name__)

    def cleanup(self, context):
        pass

    def __repr__(self):
        return "%s()" % self.__class__.__name__
