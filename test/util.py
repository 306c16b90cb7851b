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
"""Helpers shared by the tests."""
import threading
import time
from typing import Any

from propnet.system.base import L_LOCAL, Locality, WorkerId
from propnet.system.config.loader import ConfigJSON, SchedulerChoice
from propnet.system.logger.event import EventInfo
from propnet.system.logger.log import EventListener
from propnet.system.netdef import NetworkDefJSON
from propnet.system.network import Network
from propnet.system.scheduler.scheduler import RunResult, Scheduler
from propnet.system.worker.pool import WorkerJob, WorkerPool


SCHEDULERS: list[SchedulerChoice] = [
    "round_robin",
    "callback",
    "distributed",
    "distributed_redis",
]
"""All test scheduler configurations."""


def chain_network_def(length: int) -> NetworkDefJSON:
    """
    Creates a chain of increments listed in reverse dependency order.

    Args:
        length (int): The number of propagators.

    Returns:
        NetworkDefJSON: The network definition.
    """
    return {
        "name": "chain",
        "initial": {
            "x0": 1,
        },
        "propagators": [
            {
                "kind": "constant_op",
                "args": {
                    "op": "add",
                    "const": 1,
                },
                "inputs": [f"x{ix}"],
                "output": f"x{ix + 1}",
            }
            for ix in reversed(range(length))
        ],
    }


def flat_network_def(width: int) -> NetworkDefJSON:
    """
    Creates independent propagators that all read the same leaf cell.

    Args:
        width (int): The number of propagators.

    Returns:
        NetworkDefJSON: The network definition. `x{ix}` is `ix` once
            settled.
    """
    return {
        "name": "flat",
        "initial": {
            "a": 0,
        },
        "propagators": [
            {
                "kind": "constant_op",
                "args": {
                    "op": "add",
                    "const": ix,
                },
                "inputs": ["a"],
                "output": f"x{ix}",
            }
            for ix in range(width)
        ],
    }


def quiet_config(scheduler: dict) -> ConfigJSON:
    """
    Creates a configuration without log output.

    Args:
        scheduler (dict): The scheduler module.

    Returns:
        ConfigJSON: The configuration.
    """
    return {
        "scheduler": scheduler,  # type: ignore[typeddict-item]
        "logger": {
            "listeners": [],
            "disable_events": [],
        },
    }


class CollectListener(EventListener):
    """Collects all events. Events might arrive from worker threads."""
    def __init__(self, *, disable_events: list[str] | None = None) -> None:
        super().__init__(disable_events=disable_events)
        self.events: list[EventInfo] = []
        self._lock = threading.Lock()

    def log_event(self, event: EventInfo) -> None:
        with self._lock:
            self.events.append(event)

    def names(self) -> list[str]:
        """
        The names of all collected events.

        Returns:
            list[str]: The event names in order.
        """
        with self._lock:
            return [event["name"] for event in self.events]


class RecordingPool(WorkerPool):
    """A worker pool that never runs its jobs. Results are reported by the
    test instead."""
    def __init__(self, *, locality: Locality = L_LOCAL) -> None:
        super().__init__()
        self.started: list[int] = []
        self._locality = locality

    def locality(self) -> Locality:
        return self._locality

    def start(self, index: int, job: WorkerJob) -> WorkerId:
        self.started.append(index)
        return WorkerId.create()

    def failures(self) -> list[int]:
        return []

    def active_count(self) -> int:
        return 0

    def release_all(self, timeout: float | None) -> None:
        pass


def start_run(
        scheduler: Scheduler,
        network: Network) -> tuple[threading.Thread, dict[str, Any]]:
    """
    Runs a scheduler in a separate thread.

    Args:
        scheduler (Scheduler): The scheduler.
        network (Network): The network.

    Returns:
        tuple[threading.Thread, dict[str, Any]]: The thread and a dictionary
            that receives the `result` or the `error` of the run.
    """
    outcome: dict[str, Any] = {}

    def run() -> None:
        try:
            outcome["result"] = scheduler.run(network)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            outcome["error"] = exc

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    return thread, outcome


def wait_for_dispatch(pool: RecordingPool, count: int) -> None:
    """
    Waits until the scheduler has dispatched the given number of
    propagators.

    Args:
        pool (RecordingPool): The pool of the scheduler.
        count (int): The number of dispatches to wait for.
    """
    deadline = time.monotonic() + 5.0
    while len(pool.started) < count:
        assert time.monotonic() < deadline, "no dispatch"
        time.sleep(0.001)


def finish(thread: threading.Thread, outcome: dict[str, Any]) -> RunResult:
    """
    Waits for a run to finish successfully.

    Args:
        thread (threading.Thread): The thread of the run.
        outcome (dict[str, Any]): The outcome of the run.

    Returns:
        RunResult: The result.
    """
    thread.join(10.0)
    assert not thread.is_alive()
    assert "error" not in outcome, outcome.get("error")
    return outcome["result"]
