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
"""A synchronous scheduler that visits all propagators in full passes."""
from propnet.system.base import L_EITHER, Locality
from propnet.system.logger.context import add_context
from propnet.system.network import Network
from propnet.system.scheduler.scheduler import Scheduler


class RoundRobinScheduler(Scheduler):
    """Steps every propagator in network order until a full pass reports every
    propagator as completed. The number of passes is bounded by
    `attempt_factor` times the size of the network."""
    def __init__(self, *, attempt_factor: int) -> None:
        """
        Creates a round robin scheduler.

        Args:
            attempt_factor (int): The maximum number of passes per
                propagator. At least one pass is performed.
        """
        super().__init__()
        self._attempt_factor = attempt_factor

    @staticmethod
    def scheduler_name() -> str:
        return "round_robin"

    def locality(self) -> Locality:
        return L_EITHER

    def max_passes(self, network: Network) -> int:
        """
        The pass budget for the given network.

        Args:
            network (Network): The network.

        Returns:
            int: The maximum number of passes.
        """
        return max(1, self._attempt_factor * len(network))

    def do_run(self, network: Network) -> int:
        logger = self.get_logger()
        max_passes = self.max_passes(network)
        size = len(network)
        passes = 0
        while passes < max_passes:
            passes += 1
            settled = 0
            for prop in network:
                if prop.is_done():
                    settled += 1
                    continue
                with add_context({"propagator": prop.get_index()}):
                    if prop.step(self.log_done) == "completed":
                        settled += 1
            logger.log_event(
                "debug.scheduler.pass",
                {
                    "name": "scheduler",
                    "action": "pass",
                    "pass": passes,
                    "settled": settled,
                })
            if settled == size:
                break
        return passes
