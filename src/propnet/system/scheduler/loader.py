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
"""Loads a scheduler."""
from typing import Literal, TypedDict

from typing_extensions import NotRequired

from propnet.system.channel.loader import ChannelModule, load_channel
from propnet.system.plugins import load_plugin
from propnet.system.scheduler.scheduler import Scheduler
from propnet.system.worker.loader import load_worker_pool, WorkerPoolModule


RoundRobinSchedulerModule = TypedDict('RoundRobinSchedulerModule', {
    "name": Literal["round_robin"],
    "attempt_factor": NotRequired[int],
})
"""Visits all propagators in full passes. The number of passes is bounded by
`attempt_factor` times the number of propagators."""
CallbackSchedulerModule = TypedDict('CallbackSchedulerModule', {
    "name": Literal["callback"],
})
"""Re-scans the network whenever a propagator completes."""
DistributedSchedulerModule = TypedDict('DistributedSchedulerModule', {
    "name": Literal["distributed"],
    "channel": ChannelModule,
    "workers": WorkerPoolModule,
    "poll_interval": NotRequired[float],
    "report_progress": NotRequired[bool],
    "release_timeout": NotRequired[float],
})
"""Computes propagators in workers which report over a channel.
`poll_interval` is the time in seconds between checks for failed workers
while no request arrives. `report_progress` lets workers report their
progress. `release_timeout` bounds the time to wait for each worker at the
end of a run."""


SchedulerModule = (
    RoundRobinSchedulerModule
    | CallbackSchedulerModule
    | DistributedSchedulerModule
)
"""Scheduler configuration."""


DEFAULT_ATTEMPT_FACTOR = 10
"""The default maximum number of round robin passes per propagator."""
DEFAULT_POLL_INTERVAL = 0.1
"""The default time in seconds between checks for failed workers."""
DEFAULT_RELEASE_TIMEOUT = 10.0
"""The default time in seconds to wait for a worker at the end of a run."""


def load_scheduler(module: SchedulerModule) -> Scheduler:
    """
    Load a scheduler for the given configuration. If `name` is set to a fully
    qualified python module the scheduler is loaded as plugin.

    Args:
        module (SchedulerModule): The configuration.

    Raises:
        ValueError: If the configuration is invalid.

    Returns:
        Scheduler: The scheduler.
    """
    # pylint: disable=import-outside-toplevel
    if "." in module["name"]:
        kwargs = dict(module)
        plugin = load_plugin(Scheduler, f"{kwargs.pop('name')}")
        return plugin(**kwargs)
    if module["name"] == "round_robin":
        from propnet.system.scheduler.round_robin import RoundRobinScheduler
        attempt_factor = module.get("attempt_factor", DEFAULT_ATTEMPT_FACTOR)
        if attempt_factor < 1:
            raise ValueError(f"invalid attempt factor: {attempt_factor}")
        return RoundRobinScheduler(attempt_factor=attempt_factor)
    if module["name"] == "callback":
        from propnet.system.scheduler.callback import CallbackScheduler
        return CallbackScheduler()
    if module["name"] == "distributed":
        from propnet.system.scheduler.distributed import DistributedScheduler
        return DistributedScheduler(
            channel=load_channel(module["channel"]),
            pool=load_worker_pool(module["workers"]),
            poll_interval=module.get("poll_interval", DEFAULT_POLL_INTERVAL),
            report_progress=module.get("report_progress", False),
            release_timeout=module.get(
                "release_timeout", DEFAULT_RELEASE_TIMEOUT))
    raise ValueError(f"unknown scheduler: {module['name']}")
