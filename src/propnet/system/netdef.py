# Propnet drives propagator networks to a fixed point.
# Copyright (C) 2024 Josua Krause
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""JSON definitions of propagator networks."""
import copy
from typing import TypedDict

from typing_extensions import NotRequired

from propnet.system.cell import Payload
from propnet.system.network import Network
from propnet.system.transform.loader import load_transform
from propnet.system.transform.transform import (
    FunctionTransform,
    TransformArguments,
)


PropagatorDefJSON = TypedDict('PropagatorDefJSON', {
    "name": NotRequired[str],
    "kind": str,
    "args": NotRequired[TransformArguments],
    "inputs": list[str],
    "output": str,
})
"""
Propagator definition. `name` is a readable name. `kind` is the transform
kind (see ::py:function:`propnet.system.transform.loader.load_transform`).
`args` are the transform arguments. `inputs` are the names of the input cells
in the order the transform expects them. `output` is the name of the output
cell.
"""


NetworkDefJSON = TypedDict('NetworkDefJSON', {
    "name": str,
    "cells": NotRequired[list[str]],
    "initial": NotRequired[dict[str, Payload]],
    "propagators": list[PropagatorDefJSON],
})
"""
Network definition. `name` is for information purposes only. `cells`
optionally declares cells up front; cells referenced by propagators are
created automatically. `initial` is the initial assignment of leaf cells.
`propagators` lists all propagators. The order of propagators does not affect
the result of a run.
"""


def json_to_network(def_obj: NetworkDefJSON) -> Network:
    """
    Creates a network from its JSON definition and applies the initial
    assignment.

    Args:
        def_obj (NetworkDefJSON): The JSON definition.

    Raises:
        ValueError: If the definition is invalid.

    Returns:
        Network: The network.
    """
    network = Network(def_obj["name"])
    for cname in def_obj.get("cells", []):
        network.add_cell(cname)
    for pdef in def_obj["propagators"]:
        network.add_propagator(
            pdef["inputs"],
            pdef["output"],
            load_transform(pdef["kind"], pdef.get("args", {})),
            name=pdef.get("name"))
    network.assign(def_obj.get("initial", {}))
    return network


def network_to_json(network: Network) -> NetworkDefJSON:
    """
    Creates a JSON serializable representation of a network. Values of leaf
    cells that are set are reported as initial assignment.

    Args:
        network (Network): The network.

    Raises:
        ValueError: If a propagator uses a transform that cannot be
            represented as JSON.

    Returns:
        NetworkDefJSON: The JSON serializable object.
    """
    propagators: list[PropagatorDefJSON] = []
    for prop in network:
        transform = prop.get_transform()
        if isinstance(transform, FunctionTransform):
            raise ValueError(
                f"cannot represent {prop.get_name()} as JSON: {transform}")
        pdef: PropagatorDefJSON = {
            "name": prop.get_name(),
            "kind": transform.get_kind(),
            "inputs": [cell.get_name() for cell in prop.get_inputs()],
            "output": prop.get_output().get_name(),
        }
        args = transform.get_args()
        if args:
            pdef["args"] = args
        propagators.append(pdef)
    initial = {
        cell.get_name(): cell.get()
        for cell in network.get_cells()
        if cell.is_set() and network.get_producer(cell.get_name()) is None
    }
    return {
        "name": network.get_name(),
        "cells": [cell.get_name() for cell in network.get_cells()],
        "initial": initial,
        "propagators": propagators,
    }


CANONICAL_PROPAGATORS: dict[str, PropagatorDefJSON] = {
    "P1": {
        "name": "P1",
        "kind": "bin_op",
        "args": {"op": "add"},
        "inputs": ["a", "b"],
        "output": "c",
    },
    "P2": {
        "name": "P2",
        "kind": "bin_op",
        "args": {"op": "add"},
        "inputs": ["c", "d"],
        "output": "e",
    },
    "P3": {
        "name": "P3",
        "kind": "bin_op",
        "args": {"op": "mul"},
        "inputs": ["e", "d"],
        "output": "f",
    },
}
"""The propagators of the canonical network: `c = a + b`, `e = c + d`, and
`f = e * d`."""


def canonical_network_def(
        order: list[str] | None = None,
        *,
        initial: dict[str, Payload] | None = None) -> NetworkDefJSON:
    """
    The canonical network. With the default assignment `a=2`, `b=3`, `d=5`
    a complete run results in `c=5`, `e=10`, and `f=50`.

    Args:
        order (list[str] | None, optional): The order of the propagators by
            name. If None, the order `P2`, `P1`, `P3` is used, which lists a
            propagator before the propagator it depends on. Defaults to None.
        initial (dict[str, Payload] | None, optional): The initial assignment.
            If None, the default assignment is used. Defaults to None.

    Returns:
        NetworkDefJSON: The network definition.
    """
    if order is None:
        order = ["P2", "P1", "P3"]
    if initial is None:
        initial = {"a": 2, "b": 3, "d": 5}
    return {
        "name": "canonical",
        "initial": dict(initial),
        "propagators": [
            copy.deepcopy(CANONICAL_PROPAGATORS[pname])
            for pname in order
        ],
    }
