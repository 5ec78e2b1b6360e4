# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

from pandaflow.equations.types import ElementType, MismatchType
from pandaflow.equations.variable import Variable, VariableSet
from pandaflow.equations.equation import Equation, EquationTerm, VariableTerm
from pandaflow.equations.vectors import StateVector, TargetVector, EquationVector, mismatch
from pandaflow.equations.equation_system import EquationSystem
from pandaflow.equations.jacobian import JacobianMatrix
