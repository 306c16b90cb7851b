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
"""The base class for worker pools."""
from collections.abc import Callable

from propnet.system.base import Module, WorkerId
from propnet.system.logger.log import EventStream


WorkerJob = Callable[[], None]
"""The work of a single worker. The job returns after the result has been
reported."""


class WorkerPool(Module):
    """
    Starts one worker per dispatched propagator and keeps track of them until
    they are released.
    """
    def __init__(self) -> None:
        self._logger: EventStream | None = None

    def set_logger(self, logger: EventStream) -> None:
        """
        Sets the logger used by the workers.

        Args:
            logger (EventStream): The logger.
        """
        self._logger = logger

    def get_logger(self) -> EventStream:
        """
        Retrieves the logger.

        Raises:
            ValueError: If no logger is set.

        Returns:
            EventStream: The logger.
        """
        if self._logger is None:
            raise ValueError("logger not initialized")
        return self._logger

    def start(self, index: int, job: WorkerJob) -> WorkerId:
        """
        Starts a worker.

        Args:
            index (int): The index of the propagator the worker computes.
            job (WorkerJob): The work.

        Returns:
            WorkerId: The id of the new worker.
        """
        raise NotImplementedError()

    def failures(self) -> list[int]:
        """
        The propagators whose worker terminated with an error.

        Returns:
            list[int]: The indices of the propagators.
        """
        raise NotImplementedError()

    def active_count(self) -> int:
        """
        The number of workers that are still running.

        Returns:
            int: The number of running workers.
        """
        raise NotImplementedError()

    def release_all(self, timeout: float | None) -> None:
        """
        Waits for all workers to terminate and forgets about them.

        Args:
            timeout (float | None): The maximum time in seconds to wait for
                each worker. If None, waits indefinitely.
        """
        raise NotImplementedError()
