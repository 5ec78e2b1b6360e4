# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import pytest

from pandaflow.ac.equation_system_creator import create_ac_equation_system
from pandaflow.ac.targets import AcTargetFunction
from pandaflow.equations.jacobian import JacobianMatrix
from pandaflow.networks import two_bus_network, four_bus_mesh_network
from pandaflow.parameters import create_parameters


@pytest.fixture
def parameters():
    return create_parameters()


@pytest.fixture
def two_bus():
    return two_bus_network()


@pytest.fixture
def four_bus():
    return four_bus_mesh_network()


@pytest.fixture
def four_bus_system(four_bus, parameters):
    """
    Equation system, jacobian and target function of the four bus mesh network.
    """
    es = create_ac_equation_system(four_bus, parameters)
    jacobian = JacobianMatrix(es)
    yield four_bus, es, jacobian, AcTargetFunction(four_bus, parameters)
    jacobian.close()
