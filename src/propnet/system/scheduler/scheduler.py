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
"""The scheduler base class and the result of a run."""
from typing import Literal, TypedDict

from propnet.system.base import Module
from propnet.system.cell import Payload
from propnet.system.logger.context import add_context
from propnet.system.logger.error import IncompleteRunError
from propnet.system.logger.log import EventStream
from propnet.system.network import Network
from propnet.system.propagator import Propagator


RunStatus = Literal["complete", "incomplete"]
"""Whether a run settled every propagator."""


RunResult = TypedDict('RunResult', {
    "status": RunStatus,
    "values": dict[str, Payload | None],
    "unsettled": list[int],
    "passes": int,
})
"""The result of a run. `values` maps cell names to values with None for
unset cells. `unsettled` lists the indices of propagators that are not done.
`passes` counts the scans of a local scheduler or the messages processed by
the distributed scheduler."""


def result_ok(result: RunResult) -> RunResult:
    """
    Ensures that a run settled every propagator.

    Args:
        result (RunResult): The result of the run.

    Raises:
        IncompleteRunError: If the run was incomplete.

    Returns:
        RunResult: The unchanged result.
    """
    if result["status"] != "complete":
        raise IncompleteRunError(
            f"propagators {result['unsettled']} did not settle")
    return result


class Scheduler(Module):
    """
    Runs propagator networks. Errors during a run are logged and re-raised.
    """
    def __init__(self) -> None:
        self._logger: EventStream = EventStream()

    @staticmethod
    def scheduler_name() -> str:
        """
        The name of the scheduler as used in the configuration and in the
        log context.

        Returns:
            str: The name.
        """
        raise NotImplementedError()

    def set_logger(self, logger: EventStream) -> None:
        """
        Sets the logger. A scheduler without logger reports to an event stream
        without listeners.

        Args:
            logger (EventStream): The logger.
        """
        self._logger = logger

    def get_logger(self) -> EventStream:
        """
        Retrieves the logger.

        Returns:
            EventStream: The logger.
        """
        return self._logger

    def get_modules(self) -> list[Module]:
        """
        All modules used by the scheduler including the scheduler itself.

        Returns:
            list[Module]: The modules.
        """
        return [self]

    def log_done(self, prop: Propagator) -> None:
        """
        Reports that a propagator wrote its output cell.

        Args:
            prop (Propagator): The propagator.
        """
        self._logger.log_lazy(
            "debug.propagator.state",
            lambda: {
                "name": "propagator",
                "index": prop.get_index(),
                "state": prop.get_state(),
                "output": f"{prop.get_output()}",
            },
            adjust_ctx={"propagator": prop.get_index()})

    def do_run(self, network: Network) -> int:
        """
        Runs the network. This method is called by `run` and needs to be
        implemented by sub-classes.

        Args:
            network (Network): The network.

        Returns:
            int: The number of passes or processed messages.
        """
        raise NotImplementedError()

    def run(self, network: Network) -> RunResult:
        """
        Runs the network until every propagator is done or no more progress
        is possible. An incomplete run is reported through the result.

        Args:
            network (Network): The network.

        Raises:
            PropnetError: If the network or the workers fail. The error is
                logged before it is raised.

        Returns:
            RunResult: The result.
        """
        logger = self._logger
        with add_context({
                    "scheduler": self.scheduler_name(),
                    "network": network.get_name(),
                }):
            logger.log_event(
                "tally.scheduler.start",
                {
                    "name": "scheduler",
                    "action": "start",
                    "propagators": len(network),
                })
            try:
                passes = self.do_run(network)
            except Exception:
                logger.log_error("error.scheduler")
                logger.log_event(
                    "tally.scheduler.stop",
                    {
                        "name": "scheduler",
                        "action": "stop",
                        "status": "error",
                    })
                raise
            unsettled = network.unsettled()
            result: RunResult = {
                "status": "incomplete" if unsettled else "complete",
                "values": network.cell_values(),
                "unsettled": unsettled,
                "passes": passes,
            }
            logger.log_event(
                "tally.scheduler.stop",
                {
                    "name": "scheduler",
                    "action": "stop",
                    "status": result["status"],
                    "pass": passes,
                    "unsettled": unsettled,
                })
            return result
