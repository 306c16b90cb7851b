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
"""A worker pool that runs every worker in its own thread."""
import threading

from propnet.system.base import L_LOCAL, Locality, WorkerId
from propnet.system.logger.context import add_context, get_ctx
from propnet.system.worker.pool import WorkerJob, WorkerPool


class ThreadWorkerPool(WorkerPool):
    """Starts a (non-daemon) thread for each dispatched propagator. Uncaught
    exceptions of a worker are logged and recorded as failure."""
    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.RLock()
        self._threads: dict[WorkerId, threading.Thread] = {}
        self._failed: list[int] = []

    def locality(self) -> Locality:
        return L_LOCAL

    def start(self, index: int, job: WorkerJob) -> WorkerId:
        logger = self.get_logger()
        worker_id = WorkerId.create()
        ctx = get_ctx()
        ctx["propagator"] = index
        ctx["worker"] = worker_id

        def run() -> None:
            with add_context(ctx):
                logger.log_event(
                    "tally.worker.start",
                    {
                        "name": "worker",
                        "action": "start",
                        "index": index,
                    })
                try:
                    job()
                except Exception:  # pylint: disable=broad-exception-caught
                    logger.log_error("error.worker", "uncaught_worker")
                    with self._lock:
                        self._failed.append(index)
                finally:
                    logger.log_event(
                        "tally.worker.stop",
                        {
                            "name": "worker",
                            "action": "stop",
                            "index": index,
                        })

        thread = threading.Thread(
            target=run,
            daemon=False)
        with self._lock:
            self._threads[worker_id] = thread
        thread.start()
        return worker_id

    def failures(self) -> list[int]:
        with self._lock:
            return list(self._failed)

    def active_count(self) -> int:
        with self._lock:
            return sum(
                1 for thread in self._threads.values() if thread.is_alive())

    def release_all(self, timeout: float | None) -> None:
        logger = self.get_logger()
        with self._lock:
            threads = list(self._threads.items())
        for _, thread in threads:
            thread.join(timeout)
        with self._lock:
            for worker_id, thread in threads:
                if not thread.is_alive():
                    self._threads.pop(worker_id, None)
            remain = len(self._threads)
            self._failed = []
        logger.log_event(
            "tally.worker.release",
            {
                "name": "worker",
                "action": "release",
                "workers": len(threads),
            })
        if remain:
            logger.log_warning(
                "warn.worker.release",
                f"{remain} workers did not terminate within {timeout}s")
