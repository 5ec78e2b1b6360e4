# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

from pandaflow.auxiliary import LoadflowNotConverged, OuterLoopNotConverged
from pandaflow.initializers import UniformValueVoltageInitializer, DcValueVoltageInitializer, \
    PreviousValueVoltageInitializer
from pandaflow.outerloop.engine import AcLoadFlowContext, AcLoadFlowEngine
from pandaflow.parameters import create_parameters
from pandaflow.results import bus_results, branch_results, hvdc_results
from pandaflow.solver.result import SolverStatus

logger = logging.getLogger(__name__)

INITIALIZERS = {
    "flat": UniformValueVoltageInitializer,
    "dc": DcValueVoltageInitializer,
    "results": PreviousValueVoltageInitializer,
}


def runlf(network, parameters=None, observer=None, outer_loops=None, raise_on_failure=False,
          **kwargs):
    """
    Runs an AC load flow with outer loops.

    INPUT:
        **network** (LfNetwork) - the network. Bus voltages, tap positions, generation targets
        and the other discrete states are updated in place.

    OPTIONAL:
        **parameters** (dict, None) - load flow parameters, see create_parameters()

        **observer** (LoadFlowObserver, None) - notified during the run

        **outer_loops** (list, None) - outer loops, created from the parameters if None

        **raise_on_failure** (bool, False) - raise LoadflowNotConverged if the last solve did
        not converge and OuterLoopNotConverged if the outer loops are not stable

        **kwargs** - single load flow parameters, overwriting the ones of parameters

            - "algorithm" (str, "nr") - "nr" Newton-Raphson or "newton_krylov"
            - "init" (str, "flat") - "flat", "dc" or "results" (voltages stored in the network)
            - "max_iteration" (int, 15) - maximum number of iterations per solve
            - "enforce_q_lims" (bool, False) - enforce the reactive power limits of generators

            see DEFAULT_PARAMETERS for all parameters

    OUTPUT:
        **result** (AcLoadFlowResult) - the result of the run. The result tables are stored in
        network.res_bus, network.res_branch and network.res_hvdc.

    EXAMPLE:
        from pandaflow.networks import two_bus_network

        net = two_bus_network()
        result = runlf(net, algorithm="newton_krylov")
        print(net.res_bus)
    """
    parameters = create_parameters(parameters, **kwargs)
    initializer = INITIALIZERS[parameters["init"]]()
    with AcLoadFlowContext(network, parameters, observer) as context:
        engine = AcLoadFlowEngine(context, outer_loops)
        result = engine.run(initializer)
        if context.has_equation_system:
            network.res_bus = bus_results(network)
            network.res_branch = branch_results(network)
            network.res_hvdc = hvdc_results(network)

    if raise_on_failure and not result.converged:
        if result.solver_status is SolverStatus.CONVERGED:
            raise OuterLoopNotConverged("Load flow of %s: outer loops %s"
                                        % (network.name, result.outer_loop_status.name))
        raise LoadflowNotConverged("Load flow of %s did not converge: %s"
                                   % (network.name, result.solver_status.name))
    return result
