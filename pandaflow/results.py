# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def _eval(term):
    return term.eval() if term is not None and term.active else np.nan


def bus_results(network):
    """
    Voltages and calculated injections of the buses.

    INPUT:
        **network** (LfNetwork) - a network with an equation system

    OUTPUT:
        **res_bus** (DataFrame) - vm_pu, va_degree, p_pu, q_pu indexed by bus id. Inactive buses
        have NaN values.
    """
    res = pd.DataFrame(index=pd.Index([bus.id for bus in network.buses], name="bus"),
                       columns=["vm_pu", "va_degree", "p_pu", "q_pu"], dtype=np.float64)
    for bus in network.buses:
        if not bus.active:
            continue
        res.at[bus.id, "vm_pu"] = bus.v
        res.at[bus.id, "va_degree"] = np.rad2deg(bus.angle)
        if bus.p is not None:
            res.at[bus.id, "p_pu"] = bus.p.eval()
            res.at[bus.id, "q_pu"] = bus.q.eval()
    return res


def branch_results(network):
    """
    Flows and currents of the branches, NaN for inactive branches.
    """
    columns = ["p1_pu", "q1_pu", "p2_pu", "q2_pu", "i1_pu", "i2_pu"]
    data = [[_eval(branch.p1), _eval(branch.q1), _eval(branch.p2), _eval(branch.q2),
             _eval(branch.i1), _eval(branch.i2)] for branch in network.branches]
    return pd.DataFrame(data, index=pd.Index([b.id for b in network.branches], name="branch"),
                        columns=columns, dtype=np.float64)


def hvdc_results(network):
    """
    Active power of the HVDC links on both sides and their AC emulation mode. Links which are not
    in AC emulation transmit p0 and have no mode.
    """
    res = pd.DataFrame(index=pd.Index([hvdc.id for hvdc in network.hvdcs], name="hvdc"),
                       columns=["p1_pu", "p2_pu", "mode"])
    for hvdc in network.hvdcs:
        if not hvdc.active:
            continue
        if hvdc.p1 is not None:
            res.at[hvdc.id, "p1_pu"] = hvdc.p1.eval()
            res.at[hvdc.id, "p2_pu"] = hvdc.p2.eval()
            res.at[hvdc.id, "mode"] = hvdc.status.name
        else:
            res.at[hvdc.id, "p1_pu"] = hvdc.p0
            res.at[hvdc.id, "p2_pu"] = -hvdc.p0
    res[["p1_pu", "p2_pu"]] = res[["p1_pu", "p2_pu"]].astype(np.float64)
    return res
