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
"""Runs a network from the command line."""
import json
from collections.abc import Callable
from typing import cast

from propnet.system.config.loader import ConfigJSON, load_config
from propnet.system.netdef import NetworkDefJSON


def run_start(
        *,
        config_file: str,
        network_file: str,
        indent: int | None) -> Callable[[], int | None]:
    """
    Loads the configuration and the network and prepares the run.

    Args:
        config_file (str): The JSON configuration file.
        network_file (str): The JSON network definition file.
        indent (int | None): The indentation of the printed result. If None,
            the result is printed in a single line.

    Returns:
        Callable[[], int | None]: Function that runs the network, prints the
            result, and returns the exit code. The exit code is 1 if the run
            was incomplete.
    """
    with open(config_file, "rb") as fin:
        config_obj = cast(ConfigJSON, json.load(fin))
    with open(network_file, "rb") as fin:
        network_def = cast(NetworkDefJSON, json.load(fin))
    config = load_config(config_obj)
    network = config.load_network(network_def)

    def execute() -> int | None:
        result = config.run(network)
        print(json.dumps(result, indent=indent, sort_keys=True))
        if result["status"] != "complete":
            return 1
        return 0

    return execute
