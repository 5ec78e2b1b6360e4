# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

from pandaflow.ac.types import AcVariableType, AcEquationType
from pandaflow.ac.terms import *
from pandaflow.ac.equation_system_creator import create_ac_equation_system, \
    AcEquationSystemUpdater
from pandaflow.ac.targets import AcTargetFunction
