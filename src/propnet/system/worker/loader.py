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
"""Loads a worker pool."""
from typing import Literal, TypedDict

from propnet.system.plugins import load_plugin
from propnet.system.worker.pool import WorkerPool


ThreadWorkerPoolModule = TypedDict('ThreadWorkerPoolModule', {
    "name": Literal["thread"],
})
"""Runs each worker in a thread of the scheduler process."""


WorkerPoolModule = ThreadWorkerPoolModule
"""Worker pool configuration."""


def load_worker_pool(module: WorkerPoolModule) -> WorkerPool:
    """
    Load a worker pool for the given configuration. If `name` is set to a
    fully qualified python module the pool is loaded as plugin.

    Args:
        module (WorkerPoolModule): The configuration.

    Raises:
        ValueError: If the configuration is invalid.

    Returns:
        WorkerPool: The worker pool.
    """
    # pylint: disable=import-outside-toplevel
    if "." in module["name"]:
        kwargs = dict(module)
        plugin = load_plugin(WorkerPool, f"{kwargs.pop('name')}")
        return plugin(**kwargs)
    if module["name"] == "thread":
        from propnet.system.worker.thread import ThreadWorkerPool
        return ThreadWorkerPool()
    raise ValueError(f"unknown worker pool: {module['name']}")
