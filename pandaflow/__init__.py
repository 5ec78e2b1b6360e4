import os
pf_dir = os.path.dirname(os.path.realpath(__file__))

from pandaflow._version import __version__
from pandaflow.auxiliary import ADict, ppException, LinearSolveFailure, ConfigurationError, \
    NetworkError, SlackDistributionFailure, LoadflowNotConverged, OuterLoopNotConverged
from pandaflow.parameters import DEFAULT_PARAMETERS, create_parameters, check_parameters
from pandaflow.network import LfNetwork
from pandaflow.solver.result import SolverStatus, SolverResult
from pandaflow.outerloop import OuterLoop, OuterLoopStatus, AcLoadFlowContext, AcLoadFlowEngine, \
    AcLoadFlowResult, create_outer_loops
from pandaflow.observer import LoadFlowObserver, MultipleLoadFlowObserver
from pandaflow.run import runlf

# import pandaflow packages
import pandaflow.equations
import pandaflow.network
import pandaflow.ac
import pandaflow.solver
import pandaflow.outerloop
import pandaflow.networks
