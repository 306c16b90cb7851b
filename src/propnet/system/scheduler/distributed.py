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
"""A scheduler that delegates the computation of propagators to workers.
Workers report their results over a request / reply channel."""
import functools

from propnet.system.base import L_EITHER, Locality, Module
from propnet.system.channel.channel import Channel, ServerEndpoint
from propnet.system.channel.protocol import (
    MSG_DONE,
    MSG_HELLO,
    MSG_OK,
    MSG_PROGRESS,
    MSG_REJECT,
    MSG_WORLD,
    parse_done,
    parse_progress,
)
from propnet.system.logger.context import add_context
from propnet.system.logger.error import (
    ProtocolViolationError,
    WorkerFailedError,
)
from propnet.system.logger.log import EventStream
from propnet.system.network import Network
from propnet.system.scheduler.scheduler import Scheduler
from propnet.system.worker.pool import WorkerPool
from propnet.system.worker.worker import run_worker


class DistributedScheduler(Scheduler):
    """
    Dispatches every propagator whose inputs are set to a worker and waits
    for the workers to report. A propagator moves from `waiting` to
    `ready_to_dispatch` to `dispatched` and only becomes `done` when its
    result arrives on the channel. Requests are handled one at a time in the
    order they are received, so only the scheduler writes cells.
    """
    def __init__(
            self,
            *,
            channel: Channel,
            pool: WorkerPool,
            poll_interval: float,
            report_progress: bool,
            release_timeout: float | None) -> None:
        """
        Creates a distributed scheduler.

        Args:
            channel (Channel): The channel to bind for the duration of a run.
            pool (WorkerPool): The pool starting the workers.
            poll_interval (float): The time in seconds to wait for a request
                before checking for failed workers.
            report_progress (bool): Whether workers report their progress.
            release_timeout (float | None): The maximum time in seconds to
                wait for each worker when a run ends. If None, waits
                indefinitely.
        """
        super().__init__()
        self._channel = channel
        self._pool = pool
        self._poll_interval = poll_interval
        self._report_progress = report_progress
        self._release_timeout = release_timeout
        self._pool.set_logger(self.get_logger())

    @staticmethod
    def scheduler_name() -> str:
        return "distributed"

    def locality(self) -> Locality:
        return L_EITHER

    def set_logger(self, logger: EventStream) -> None:
        super().set_logger(logger)
        self._pool.set_logger(logger)

    def get_modules(self) -> list[Module]:
        return [self, self._channel, self._pool]

    def get_channel(self) -> Channel:
        """
        The channel workers connect to.

        Returns:
            Channel: The channel.
        """
        return self._channel

    def get_pool(self) -> WorkerPool:
        """
        The pool starting the workers.

        Returns:
            WorkerPool: The worker pool.
        """
        return self._pool

    def dispatch_ready(self, network: Network) -> int:
        """
        Starts a worker for every waiting propagator whose inputs are set.
        A propagator is only marked as dispatched once its worker has been
        started. If starting fails the propagator stays `ready_to_dispatch`.

        Args:
            network (Network): The network.

        Returns:
            int: The number of started workers.
        """
        logger = self.get_logger()
        count = 0
        for prop in network:
            if not prop.prepare_dispatch():
                continue
            index = prop.get_index()
            with add_context({"propagator": index}):
                job = functools.partial(
                    run_worker,
                    self._channel,
                    index,
                    prop.get_transform(),
                    prop.get_input_values(),
                    report_progress=self._report_progress)
                self._pool.start(index, job)
                prop.mark_dispatched()
                logger.log_event(
                    "debug.scheduler.dispatch",
                    {
                        "name": "scheduler",
                        "action": "dispatch",
                    })
            count += 1
        return count

    def check_workers(self) -> None:
        """
        Checks whether a worker terminated with an error.

        Raises:
            WorkerFailedError: If a worker failed.
        """
        failed = self._pool.failures()
        if failed:
            raise WorkerFailedError(
                f"workers for propagators {failed} failed")

    def handle_request(
            self,
            network: Network,
            server: ServerEndpoint,
            parts: list[str]) -> None:
        """
        Answers a single request of a worker.

        Args:
            network (Network): The network.
            server (ServerEndpoint): The bound endpoint.
            parts (list[str]): The message parts of the request.

        Raises:
            ProtocolViolationError: If the request is malformed or unknown.
        """
        logger = self.get_logger()
        kind = parts[0] if parts else None
        if kind == MSG_HELLO and len(parts) == 1:
            logger.log_event(
                "debug.message.hello",
                {
                    "name": "message",
                    "action": "hello",
                })
            server.reply([MSG_WORLD])
            return
        if kind == MSG_PROGRESS:
            progress = parse_progress(parts)
            logger.log_event(
                "debug.message.progress",
                {
                    "name": "message",
                    "action": "progress",
                    "progress": progress,
                })
            server.reply([MSG_OK])
            return
        if kind == MSG_DONE:
            index, value = parse_done(parts, len(network))
            prop = network.get_propagator(index)
            with add_context({"propagator": index}):
                state = prop.get_state()
                if state == "done":
                    logger.log_event(
                        "tally.message.duplicate",
                        {
                            "name": "message",
                            "action": "duplicate",
                            "index": index,
                        })
                    logger.log_warning(
                        "warn.message.duplicate",
                        f"ignoring repeated result for {prop.get_name()}")
                    server.reply([MSG_OK])
                    return
                if state != "dispatched":
                    logger.log_event(
                        "tally.message.reject",
                        {
                            "name": "message",
                            "action": "reject",
                            "index": index,
                        })
                    server.reply([MSG_REJECT])
                    return
                prop.apply_result(value)
                logger.log_event(
                    "tally.message.done",
                    {
                        "name": "message",
                        "action": "done",
                        "index": index,
                    })
                self.log_done(prop)
                server.reply([MSG_OK])
            self.dispatch_ready(network)
            return
        raise ProtocolViolationError(f"unknown request: {parts[:1]}")

    def do_run(self, network: Network) -> int:
        messages = 0
        with self._channel.bind() as server:
            try:
                self.dispatch_ready(network)
                while not network.is_settled():
                    if not any(
                            prop.get_state() == "dispatched"
                            for prop in network):
                        break
                    parts = server.receive(self._poll_interval)
                    if parts is None:
                        self.check_workers()
                        continue
                    messages += 1
                    try:
                        self.handle_request(network, server, parts)
                    except ProtocolViolationError:
                        # release the offending client before failing
                        if server.has_pending():
                            server.reply([MSG_REJECT])
                        raise
            finally:
                self._pool.release_all(self._release_timeout)
        return messages
