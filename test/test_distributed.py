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
"""Tests the distributed scheduler and its protocol."""
from collections.abc import Callable
from test.util import (
    CollectListener,
    finish,
    RecordingPool,
    start_run,
    wait_for_dispatch,
)
from typing import Any

import pytest

from propnet.system.base import WorkerId
from propnet.system.channel.channel import Channel
from propnet.system.channel.local import LocalChannel
from propnet.system.channel.redis import RedisChannel
from propnet.system.config.loader import load_test
from propnet.system.logger.error import (
    ProtocolViolationError,
    TransportFailureError,
    WorkerFailedError,
)
from propnet.system.logger.log import EventStream
from propnet.system.netdef import canonical_network_def, json_to_network
from propnet.system.network import Network
from propnet.system.scheduler.distributed import DistributedScheduler
from propnet.system.transform.transform import FunctionTransform
from propnet.system.worker.pool import WorkerJob


CHANNELS: dict[str, Callable[[float], Channel]] = {
    "local": lambda timeout: LocalChannel(reply_timeout=timeout),
    "redis": lambda timeout: RedisChannel(
        cfg=None,
        endpoint="proto",
        poll_interval=0.001,
        reply_timeout=timeout),
}


def manual_scheduler(
        channel_name: str,
        *,
        reply_timeout: float = 5.0,
        ) -> tuple[DistributedScheduler, RecordingPool, CollectListener]:
    """
    Creates a distributed scheduler whose workers are played by the test.

    Args:
        channel_name (str): The channel to use.
        reply_timeout (float, optional): The time clients wait for a reply.
            Defaults to 5.0.

    Returns:
        tuple[DistributedScheduler, RecordingPool, CollectListener]: The
            scheduler, its pool, and a listener capturing all events.
    """
    pool = RecordingPool()
    scheduler = DistributedScheduler(
        channel=CHANNELS[channel_name](reply_timeout),
        pool=pool,
        poll_interval=0.01,
        report_progress=False,
        release_timeout=1.0)
    listener = CollectListener()
    logger = EventStream()
    logger.add_listener(listener)
    scheduler.set_logger(logger)
    return scheduler, pool, listener


@pytest.mark.parametrize("channel_name", ["local", "redis"])
def test_protocol(channel_name: str) -> None:
    """
    Test results arriving in dependency order with an early result that
    gets rejected.

    Args:
        channel_name (str): The channel to use.
    """
    scheduler, pool, listener = manual_scheduler(channel_name)
    network = json_to_network(canonical_network_def(["P1", "P2", "P3"]))
    thread, outcome = start_run(scheduler, network)
    wait_for_dispatch(pool, 1)
    assert pool.started == [0]
    with scheduler.get_channel().connect() as client:
        assert client.request(["HELLO"]) == ["WORLD"]
        assert client.request(["PROGRESS", "50"]) == ["OK"]
        assert client.request(["DONE", "0", "5"]) == ["OK"]
        assert network.get_propagator(0).is_done()
        wait_for_dispatch(pool, 2)
        assert pool.started == [0, 1]
        assert client.request(["DONE", "2", "50"]) == ["REJECT"]
        assert network.get_propagator(2).get_state() == "waiting"
        assert not network.get_cell("f").is_set()
        assert client.request(["DONE", "1", "10"]) == ["OK"]
        wait_for_dispatch(pool, 3)
        assert pool.started == [0, 1, 2]
        assert network.get_propagator(2).get_state() == "dispatched"
        assert client.request(["DONE", "2", "50"]) == ["OK"]
    result = finish(thread, outcome)
    assert result["status"] == "complete"
    assert result["passes"] == 6
    assert result["values"]["c"] == 5
    assert result["values"]["e"] == 10
    assert result["values"]["f"] == 50
    names = listener.names()
    assert names[0] == "tally.scheduler.start"
    assert names[-1] == "tally.scheduler.stop"
    assert names.count("tally.message.reject") == 1
    assert names.count("tally.message.done") == 3
    assert names.count("debug.scheduler.dispatch") == 3


def test_duplicate() -> None:
    """Test that repeated results are acknowledged but ignored."""
    scheduler, pool, listener = manual_scheduler("local")
    network = json_to_network(canonical_network_def(["P1", "P2", "P3"]))
    thread, outcome = start_run(scheduler, network)
    wait_for_dispatch(pool, 1)
    with scheduler.get_channel().connect() as client:
        assert client.request(["DONE", "0", "5"]) == ["OK"]
        assert client.request(["DONE", "0", "7"]) == ["OK"]
        assert client.request(["DONE", "0", "9"]) == ["OK"]
        assert network.get_cell("c").get() == 5
        wait_for_dispatch(pool, 2)
        assert pool.started == [0, 1]
        assert client.request(["DONE", "1", "10"]) == ["OK"]
        assert client.request(["DONE", "2", "50"]) == ["OK"]
    result = finish(thread, outcome)
    assert result["values"]["c"] == 5
    assert result["values"]["f"] == 50
    names = listener.names()
    assert names.count("tally.message.duplicate") == 2
    assert names.count("warn.message.duplicate") == 1


@pytest.mark.parametrize("request_parts", [
    ["DONE", "x", "5"],
    ["DONE", "-1", "5"],
    ["DONE", "3", "5"],
    ["DONE", "0", "{invalid"],
    ["DONE", "0"],
    ["PROGRESS", "half"],
    ["HELLO", "again"],
    ["WORLD"],
    [],
])
def test_protocol_violation(request_parts: list[str]) -> None:
    """
    Test that malformed requests are rejected and stop the run.

    Args:
        request_parts (list[str]): The malformed request.
    """
    scheduler, pool, listener = manual_scheduler("local")
    network = json_to_network(canonical_network_def())
    thread, outcome = start_run(scheduler, network)
    wait_for_dispatch(pool, 1)
    with scheduler.get_channel().connect() as client:
        assert client.request(request_parts) == ["REJECT"]
    thread.join(10.0)
    assert not thread.is_alive()
    assert isinstance(outcome.get("error"), ProtocolViolationError)
    errors = [
        event["event"]
        for event in listener.events
        if event["name"] == "error.scheduler"
    ]
    assert len(errors) == 1
    assert errors[0]["name"] == "error"
    assert errors[0]["code"] == "protocol_violation"


@pytest.mark.parametrize("fun", [
    lambda val: val / 0,
    lambda val: object(),
])
def test_worker_failure(fun: Callable[[Any], Any]) -> None:
    """
    Test that workers terminating with an error stop the run.

    Args:
        fun (Callable[[Any], Any]): The failing computation.
    """
    config = load_test(scheduler="distributed")
    listener = CollectListener()
    config.get_logger().add_listener(listener)
    network = Network("failure")
    network.add_propagator(["a"], "b", FunctionTransform(fun, arity=1))
    network.assign({"a": 1})
    with pytest.raises(WorkerFailedError, match=r"\[0\]"):
        config.run(network)
    names = listener.names()
    assert "error.worker" in names
    assert "error.scheduler" in names
    assert "tally.worker.release" in names
    codes = [
        event["event"]["code"]  # type: ignore[typeddict-item]
        for event in listener.events
        if event["name"].startswith("error.")
    ]
    assert codes == ["uncaught_worker", "worker_failure"]
    assert network.get_propagator(0).get_state() == "dispatched"


def test_bound_once() -> None:
    """Test that a run binds the channel for its duration only."""
    scheduler, pool, _ = manual_scheduler("local")
    channel = scheduler.get_channel()
    with pytest.raises(TransportFailureError, match=r"not bound"):
        channel.connect()
    network = json_to_network(canonical_network_def())
    thread, outcome = start_run(scheduler, network)
    wait_for_dispatch(pool, 1)
    with pytest.raises(TransportFailureError, match=r"already bound"):
        channel.bind()
    with channel.connect() as client:
        assert client.request(["DONE", "1", "5"]) == ["OK"]
        assert client.request(["DONE", "0", "10"]) == ["OK"]
        assert client.request(["DONE", "2", "50"]) == ["OK"]
    result = finish(thread, outcome)
    assert result["status"] == "complete"
    with pytest.raises(TransportFailureError, match=r"not bound"):
        channel.connect()


class FailingPool(RecordingPool):
    """A worker pool that cannot start workers."""
    def start(self, index: int, job: WorkerJob) -> WorkerId:
        raise RuntimeError(f"cannot start worker for {index}")


def test_dispatch_failure() -> None:
    """Test that a propagator whose worker did not start is not dispatched."""
    scheduler = DistributedScheduler(
        channel=LocalChannel(reply_timeout=1.0),
        pool=FailingPool(),
        poll_interval=0.01,
        report_progress=False,
        release_timeout=1.0)
    listener = CollectListener()
    logger = EventStream()
    logger.add_listener(listener)
    scheduler.set_logger(logger)
    network = json_to_network(canonical_network_def())
    with pytest.raises(RuntimeError, match=r"cannot start worker for 1"):
        scheduler.run(network)
    assert network.get_propagator(1).get_state() == "ready_to_dispatch"
    assert all(
        prop.get_state() != "dispatched" for prop in network)
    codes = [
        event["event"]["code"]  # type: ignore[typeddict-item]
        for event in listener.events
        if event["name"] == "error.scheduler"
    ]
    assert codes == ["general_exception"]
    with pytest.raises(TransportFailureError, match=r"not bound"):
        scheduler.get_channel().connect()
