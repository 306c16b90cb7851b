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
"""Tests building networks and network definitions."""
import pytest

from propnet.system.logger.error import AlreadySetError
from propnet.system.netdef import (
    canonical_network_def,
    json_to_network,
    network_to_json,
)
from propnet.system.network import Network
from propnet.system.transform.loader import load_transform
from propnet.system.transform.transform import FunctionTransform


def test_network() -> None:
    """Test building a network programmatically."""
    network = Network("net")
    add = load_transform("bin_op", {"op": "add"})
    p_first = network.add_propagator(["c", "d"], "e", add)
    p_second = network.add_propagator(["a", "b"], "c", add, name="sum")
    assert len(network) == 2
    assert [prop.get_index() for prop in network] == [0, 1]
    assert network.get_propagator(1) is p_second
    assert network.get_producer("c") is p_second
    assert network.get_producer("a") is None
    assert p_first.get_inputs()[0] is p_second.get_output()
    assert network.get_cell("c") is p_second.get_output()
    assert network.has_cell("d")
    assert not network.has_cell("f")
    with pytest.raises(KeyError):
        network.get_cell("f")
    with pytest.raises(KeyError):
        network.get_propagator(2)
    with pytest.raises(KeyError):
        network.get_propagator(-1)
    assert network.unsettled() == [0, 1]
    assert not network.is_settled()
    network.assign({"a": 1, "b": 2, "d": 3})
    assert network.cell_values() == {
        "e": None,
        "c": None,
        "d": 3,
        "a": 1,
        "b": 2,
    }


def test_network_checks() -> None:
    """Test construction checks of networks."""
    network = Network("net")
    add = load_transform("bin_op", {"op": "add"})
    network.add_propagator(["a", "b"], "c", add)
    with pytest.raises(ValueError, match=r"cell c is already produced by P0"):
        network.add_propagator(["a", "d"], "c", add)
    with pytest.raises(ValueError, match=r"cannot assign cell c"):
        network.assign({"c": 5})
    network.assign({"a": 1})
    with pytest.raises(AlreadySetError):
        network.assign({"a": 2})
    with pytest.raises(ValueError, match=r"cell a is already assigned"):
        network.add_propagator(["b"], "a", load_transform(
            "constant_op", {"op": "add", "const": 1}))
    assert len(network) == 1


def test_netdef() -> None:
    """Test loading and storing network definitions."""
    netdef = canonical_network_def()
    assert [pdef["name"] for pdef in netdef["propagators"]] == [
        "P2",
        "P1",
        "P3",
    ]
    network = json_to_network(netdef)
    assert network.get_name() == "canonical"
    assert [prop.get_name() for prop in network] == ["P2", "P1", "P3"]
    assert network.cell_values() == {
        "a": 2,
        "b": 3,
        "c": None,
        "d": 5,
        "e": None,
        "f": None,
    }
    out = network_to_json(network)
    assert out["initial"] == {"a": 2, "b": 3, "d": 5}
    assert out["propagators"] == netdef["propagators"]
    other = json_to_network(out)
    assert network_to_json(other) == out
    reordered = canonical_network_def(["P3", "P2", "P1"], initial={"a": 1})
    assert [pdef["name"] for pdef in reordered["propagators"]] == [
        "P3",
        "P2",
        "P1",
    ]
    assert reordered["initial"] == {"a": 1}


def test_netdef_function() -> None:
    """Test that python callables cannot be stored."""
    network = Network("net")
    network.add_propagator(
        ["a"], "b", FunctionTransform(lambda val: val, arity=1))
    with pytest.raises(ValueError, match=r"cannot represent P0 as JSON"):
        network_to_json(network)


def test_netdef_invalid() -> None:
    """Test invalid network definitions."""
    with pytest.raises(ValueError, match=r"unknown transform nope"):
        json_to_network({
            "name": "invalid",
            "propagators": [
                {
                    "kind": "nope",
                    "inputs": ["a"],
                    "output": "b",
                },
            ],
        })
    with pytest.raises(ValueError, match=r"cannot assign cell b"):
        json_to_network({
            "name": "invalid",
            "cells": ["x"],
            "initial": {"b": 1},
            "propagators": [
                {
                    "kind": "constant_op",
                    "args": {"op": "add", "const": 1},
                    "inputs": ["a"],
                    "output": "b",
                },
            ],
        })
