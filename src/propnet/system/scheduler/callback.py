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
"""A synchronous scheduler that re-scans the network whenever a propagator
completes."""
from propnet.system.base import L_EITHER, Locality
from propnet.system.logger.context import add_context
from propnet.system.network import Network
from propnet.system.propagator import Propagator
from propnet.system.scheduler.scheduler import Scheduler


class CallbackScheduler(Scheduler):
    """Performs a single scan over all propagators. The first completion of a
    propagator starts a nested scan which finishes before the outer scan
    continues. Nested scans are kept on an explicit stack of scan positions
    so the call stack does not grow with the size of the network."""
    @staticmethod
    def scheduler_name() -> str:
        return "callback"

    def locality(self) -> Locality:
        return L_EITHER

    def do_run(self, network: Network) -> int:
        logger = self.get_logger()
        props = list(network)
        scans = 0
        positions: list[int] = []
        completed: list[bool] = []

        def push_scan() -> None:
            nonlocal scans

            scans += 1
            logger.log_event(
                "debug.scheduler.scan",
                {
                    "name": "scheduler",
                    "action": "scan",
                    "pass": scans,
                    "depth": len(positions),
                })
            positions.append(0)
            completed.append(False)

        def on_done(prop: Propagator) -> None:
            self.log_done(prop)
            completed[-1] = True
            push_scan()

        push_scan()
        while positions:
            pos = positions[-1]
            if pos >= len(props):
                positions.pop()
                if not completed.pop():
                    # a full scan without completions: outer scans find
                    # nothing either
                    positions.clear()
                    completed.clear()
                continue
            positions[-1] = pos + 1
            prop = props[pos]
            if prop.is_done():
                continue
            with add_context({"propagator": prop.get_index()}):
                prop.step(on_done)
        return scans
