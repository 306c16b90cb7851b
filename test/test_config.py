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
"""Tests configurations and the command line interface."""
import json
import os
import tomllib
from test.util import quiet_config, RecordingPool

import pytest

from propnet.app.args import parse_args
from propnet.system.base import L_REMOTE
from propnet.system.channel.local import LocalChannel
from propnet.system.config.config import Config
from propnet.system.config.loader import load_config
from propnet.system.logger.log import EventStream
from propnet.system.netdef import canonical_network_def
from propnet.system.scheduler.callback import CallbackScheduler
from propnet.system.scheduler.distributed import DistributedScheduler
from propnet.system.scheduler.loader import load_scheduler
from propnet.system.scheduler.round_robin import RoundRobinScheduler
from propnet.system.worker.loader import load_worker_pool


def test_load_config() -> None:
    """Test loading configurations."""
    config = load_config(quiet_config({
        "name": "round_robin",
        "attempt_factor": 3,
    }))
    scheduler = config.get_scheduler()
    assert isinstance(scheduler, RoundRobinScheduler)
    assert scheduler.get_logger() is config.get_logger()
    network = config.load_network(canonical_network_def())
    assert scheduler.max_passes(network) == 9
    assert config.run(network)["values"]["f"] == 50
    assert config.get_locality() == "either"

    config = load_config(quiet_config({"name": "callback"}))
    assert isinstance(config.get_scheduler(), CallbackScheduler)

    config = load_config(quiet_config({
        "name": "distributed",
        "channel": {"name": "local"},
        "workers": {"name": "thread"},
    }))
    scheduler = config.get_scheduler()
    assert isinstance(scheduler, DistributedScheduler)
    assert config.get_locality() == "local"
    assert scheduler.get_pool().get_logger() is config.get_logger()
    network = config.load_network(canonical_network_def())
    assert config.run(network)["values"]["f"] == 50
    assert scheduler.get_pool().active_count() == 0


def test_invalid_config() -> None:
    """Test invalid configurations."""
    with pytest.raises(ValueError, match=r"unknown scheduler"):
        load_scheduler({"name": "foo"})  # type: ignore
    with pytest.raises(ValueError, match=r"invalid attempt factor"):
        load_scheduler({"name": "round_robin", "attempt_factor": 0})
    with pytest.raises(ValueError, match=r"unknown worker pool"):
        load_worker_pool({"name": "process"})  # type: ignore
    config = Config()
    with pytest.raises(ValueError, match=r"logger not initialized"):
        config.get_logger()
    with pytest.raises(ValueError, match=r"scheduler not initialized"):
        config.get_scheduler()
    config.set_logger(EventStream())
    with pytest.raises(ValueError, match=r"logger already initialized"):
        config.set_logger(EventStream())
    with pytest.raises(ValueError, match=r"both local and remote"):
        config.set_scheduler(DistributedScheduler(
            channel=LocalChannel(reply_timeout=1.0),
            pool=RecordingPool(locality=L_REMOTE),
            poll_interval=0.1,
            report_progress=False,
            release_timeout=1.0))
    config = Config()
    config.set_logger(EventStream())
    config.set_scheduler(CallbackScheduler())
    with pytest.raises(ValueError, match=r"scheduler already initialized"):
        config.set_scheduler(CallbackScheduler())


@pytest.mark.parametrize("initial, code", [
    ({"a": 2, "b": 3, "d": 5}, 0),
    ({"a": 2, "b": 3}, 1),
])
def test_cli(
        tmp_path: str,
        capsys: pytest.CaptureFixture[str],
        initial: dict[str, int],
        code: int) -> None:
    """
    Test running a network from the command line.

    Args:
        tmp_path (str): A temporary folder.
        capsys (pytest.CaptureFixture[str]): Captures the output.
        initial (dict[str, int]): The initial assignment.
        code (int): The expected exit code.
    """
    config_file = os.path.join(tmp_path, "config.json")
    network_file = os.path.join(tmp_path, "network.json")
    with open(config_file, "w", encoding="utf-8") as fout:
        json.dump(quiet_config({
            "name": "distributed",
            "channel": {"name": "redis"},
            "workers": {"name": "thread"},
            "report_progress": True,
        }), fout)
    with open(network_file, "w", encoding="utf-8") as fout:
        json.dump(canonical_network_def(initial=initial), fout)
    args, func = parse_args([
        "--config",
        config_file,
        "--no-welcome",
        "run",
        "--network",
        network_file,
    ])
    execute = func(args)
    assert execute() == code
    result = json.loads(capsys.readouterr().out)
    assert result["status"] == ("complete" if code == 0 else "incomplete")
    assert result["values"]["c"] == 5
    if code == 0:
        assert result["values"]["f"] == 50
        assert result["passes"] == 12
    else:
        assert result["values"]["f"] is None
        assert result["unsettled"] == [0, 2]


def test_version() -> None:
    """Test the version field."""
    import propnet  # pylint: disable=import-outside-toplevel

    fname = os.path.join(os.path.dirname(__file__), "../pyproject.toml")
    with open(fname, "rb") as fin:
        pyproject = tomllib.load(fin)
    version = pyproject["project"]["version"]
    versions = (version, f"{version}*")
    assert propnet.__version__ in versions
    assert propnet.version in versions
