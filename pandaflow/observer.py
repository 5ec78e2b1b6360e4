# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

logger = logging.getLogger(__name__)


class LoadFlowObserver:
    """
    Hooks called at defined points of a load flow run. Observers are only notified, they cannot
    influence the solver or the outer loops.
    """

    def before_equation_vector_update(self, iteration):
        pass

    def after_equation_vector_update(self, iteration):
        pass

    def before_linear_solve(self, iteration):
        pass

    def after_linear_solve(self, iteration):
        pass

    def before_outer_loop_check(self, outer_loop_name, outer_loop_iteration):
        pass

    def after_outer_loop_check(self, outer_loop_name, outer_loop_iteration, status):
        pass


class MultipleLoadFlowObserver(LoadFlowObserver):
    """
    Forwards every notification to a list of observers.
    """

    def __init__(self, observers=None):
        self.observers = list(observers) if observers is not None else []

    def add_observer(self, observer):
        self.observers.append(observer)

    def before_equation_vector_update(self, iteration):
        for observer in self.observers:
            observer.before_equation_vector_update(iteration)

    def after_equation_vector_update(self, iteration):
        for observer in self.observers:
            observer.after_equation_vector_update(iteration)

    def before_linear_solve(self, iteration):
        for observer in self.observers:
            observer.before_linear_solve(iteration)

    def after_linear_solve(self, iteration):
        for observer in self.observers:
            observer.after_linear_solve(iteration)

    def before_outer_loop_check(self, outer_loop_name, outer_loop_iteration):
        for observer in self.observers:
            observer.before_outer_loop_check(outer_loop_name, outer_loop_iteration)

    def after_outer_loop_check(self, outer_loop_name, outer_loop_iteration, status):
        for observer in self.observers:
            observer.after_outer_loop_check(outer_loop_name, outer_loop_iteration, status)
