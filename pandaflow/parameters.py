# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import copy
import logging
from numbers import Number

from pandaflow.auxiliary import ADict, ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PARAMETERS = {
    "algorithm": "nr",
    "init": "flat",
    "max_iteration": 15,
    "max_outer_loop_iterations": 20,
    "outer_loop_exhaustion_behavior": "fail",
    "stopping_criteria": "uniform",
    "conv_eps_per_eq": 1e-4,
    "max_active_power_mismatch": 1e-2,
    "max_reactive_power_mismatch": 1e-2,
    "max_voltage_mismatch": 1e-4,
    "max_angle_mismatch": 1e-5,
    "max_ratio_mismatch": 1e-5,
    "max_susceptance_mismatch": 1e-4,
    "state_vector_scaling": "none",
    "line_search_max_iteration": 10,
    "line_search_step_fold": 4. / 3.,
    "max_voltage_change": 0.1,
    "max_angle_change": 10.,
    "base_mva": 100.,
    "distributed_slack": True,
    "balance_type": "generation_p_max",
    "slack_bus_p_max_mismatch": 1.,
    "slack_distribution_failure_behavior": "leave_on_slack_bus",
    "use_active_limits": True,
    "enforce_q_lims": False,
    "phase_shifter_control": False,
    "transformer_voltage_control": False,
    "shunt_voltage_control": False,
    "secondary_voltage_control": False,
    "voltage_monitoring": False,
    "min_plausible_target_voltage": 0.8,
    "max_plausible_target_voltage": 1.2,
    "hvdc_ac_emulation": True,
    "incremental_transformer_max_tap_shift": 3,
    "max_direction_change": 2,
    "max_hvdc_mode_switch": 2,
    "max_pv_pq_switch": 2,
    "check_target_voltage_compatibility": True,
    "outer_loops": None,
    "always_update_network": False,
    "min_realistic_voltage": 0.5,
    "max_realistic_voltage": 1.5,
}

ALLOWED_VALUES = {
    "algorithm": ("nr", "newton_krylov"),
    "init": ("flat", "dc", "results"),
    "stopping_criteria": ("uniform", "per_equation_type"),
    "state_vector_scaling": ("none", "line_search", "max_voltage_change"),
    "balance_type": ("generation_p_max", "generation_p", "generation_participation_factor",
                     "generation_remaining_margin", "proportional_to_load"),
    "slack_distribution_failure_behavior": ("throw", "leave_on_slack_bus", "fail"),
    "outer_loop_exhaustion_behavior": ("fail", "throw", "continue"),
}

_POSITIVE = ("conv_eps_per_eq", "max_active_power_mismatch", "max_reactive_power_mismatch",
             "max_voltage_mismatch", "max_angle_mismatch", "max_ratio_mismatch",
             "max_susceptance_mismatch", "max_voltage_change", "max_angle_change", "base_mva",
             "min_plausible_target_voltage", "max_plausible_target_voltage")
_NON_NEGATIVE_INT = ("max_iteration", "max_outer_loop_iterations", "line_search_max_iteration",
                     "incremental_transformer_max_tap_shift", "max_direction_change",
                     "max_hvdc_mode_switch", "max_pv_pq_switch")
_FLAGS = ("distributed_slack", "use_active_limits", "enforce_q_lims", "phase_shifter_control",
          "transformer_voltage_control", "shunt_voltage_control", "secondary_voltage_control",
          "voltage_monitoring", "hvdc_ac_emulation",
          "check_target_voltage_compatibility", "always_update_network")


def create_parameters(parameters=None, **kwargs):
    """
    Creates the load flow parameters from the defaults, overwritten by the given parameters and
    keyword arguments. Invalid parameters raise a ConfigurationError before anything is
    calculated.

    OPTIONAL:
        **parameters** (dict, None) - parameters to start from, e.g. the result of an earlier
        call

        **kwargs** - single parameters, see DEFAULT_PARAMETERS for the keys and defaults

    OUTPUT:
        **parameters** (ADict) - the checked parameters

    EXAMPLE:
        parameters = create_parameters(algorithm="newton_krylov", enforce_q_lims=True)
    """
    options = ADict(copy.deepcopy(DEFAULT_PARAMETERS))
    if parameters is not None:
        _update_checked(options, parameters)
    _update_checked(options, kwargs)
    check_parameters(options)
    return options


def _update_checked(options, new_options):
    unknown = set(new_options.keys()) - set(DEFAULT_PARAMETERS.keys())
    if len(unknown):
        raise ConfigurationError("Unknown load flow parameters: %s" % sorted(unknown))
    options.update(new_options)


def check_parameters(parameters):
    for key, allowed in ALLOWED_VALUES.items():
        if parameters[key] not in allowed:
            raise ConfigurationError("Unknown value %r for parameter %s, allowed are %s"
                                     % (parameters[key], key, allowed))
    for key in _POSITIVE:
        value = parameters[key]
        if not isinstance(value, Number) or isinstance(value, bool) or not value > 0:
            raise ConfigurationError("Parameter %s has to be a positive number, not %r"
                                     % (key, value))
    for key in _NON_NEGATIVE_INT:
        value = parameters[key]
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ConfigurationError("Parameter %s has to be a non negative integer, not %r"
                                     % (key, value))
    for key in _FLAGS:
        if not isinstance(parameters[key], bool):
            raise ConfigurationError("Parameter %s has to be a bool, not %r"
                                     % (key, parameters[key]))
    if parameters["line_search_step_fold"] <= 1:
        raise ConfigurationError("line_search_step_fold has to be greater than 1")
    if parameters["slack_bus_p_max_mismatch"] < 0:
        raise ConfigurationError("slack_bus_p_max_mismatch has to be non negative")
    if not parameters["min_plausible_target_voltage"] < parameters["max_plausible_target_voltage"]:
        raise ConfigurationError("min_plausible_target_voltage has to be lower than "
                                 "max_plausible_target_voltage")
    if not parameters["min_realistic_voltage"] < parameters["max_realistic_voltage"]:
        raise ConfigurationError("min_realistic_voltage has to be lower than "
                                 "max_realistic_voltage")
    outer_loops = parameters["outer_loops"]
    if outer_loops is not None:
        if isinstance(outer_loops, str) or not all(isinstance(n, str) for n in outer_loops):
            raise ConfigurationError("outer_loops has to be a list of outer loop names")
        duplicates = sorted({n for n in outer_loops if list(outer_loops).count(n) > 1})
        if len(duplicates):
            raise ConfigurationError("Outer loops have to be unique, duplicated: %s" % duplicates)
