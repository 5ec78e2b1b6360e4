# -*- coding: utf-8 -*-

# Copyright (c) 2016-2025 by University of Kassel and Fraunhofer Institute for Energy Economics
# and Energy System Technology (IEE), Kassel. All rights reserved.

import logging

import networkx as nx

logger = logging.getLogger(__name__)


def create_nxgraph(network, include_disabled=False):
    """
    Converts a load flow network into a NetworkX MultiGraph. Nodes are bus numbers, edges are
    branches keyed by branch number.

    INPUT:
        **network** (LfNetwork) - the network to convert

    OPTIONAL:
        **include_disabled** (bool, False) - also add disabled buses and branches

    OUTPUT:
        **mg** (MultiGraph) - the graph of the network
    """
    mg = nx.MultiGraph()
    for bus in network.buses:
        if include_disabled or not bus.disabled:
            mg.add_node(bus.num)
    for branch in network.branches:
        if include_disabled or not (branch.disabled or branch.bus1.disabled
                                    or branch.bus2.disabled):
            mg.add_edge(branch.bus1.num, branch.bus2.num, key=branch.num)
    return mg


def select_most_meshed_bus(network):
    """
    Returns the enabled bus with the highest number of connected branches, the first one in case
    of a tie.
    """
    mg = create_nxgraph(network)
    if not mg.number_of_nodes():
        return None
    num = max(mg.nodes, key=lambda n: (mg.degree(n), -n))
    return network.buses[num]


def find_energized_buses(network, slack_bus):
    """
    Returns the numbers of the buses connected to the slack bus through enabled branches.
    """
    mg = create_nxgraph(network)
    if slack_bus.num not in mg:
        return set()
    return nx.node_connected_component(mg, slack_bus.num)


def zero_impedance_components(network):
    """
    Groups buses connected by enabled zero impedance branches.
    """
    g = nx.Graph()
    for branch in network.branches:
        if branch.is_zero_impedance and not (branch.disabled or branch.bus1.disabled
                                             or branch.bus2.disabled):
            g.add_edge(branch.bus1.num, branch.bus2.num)
    return [sorted(c) for c in nx.connected_components(g)]
