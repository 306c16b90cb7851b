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
"""The job of a worker: compute a propagator and report the result."""
from propnet.system.cell import Payload
from propnet.system.channel.channel import Channel
from propnet.system.channel.protocol import (
    done_msg,
    expect_reply,
    hello_msg,
    MSG_OK,
    MSG_WORLD,
    progress_msg,
)
from propnet.system.transform.transform import Transform


def run_worker(
        channel: Channel,
        index: int,
        transform: Transform,
        inputs: list[Payload],
        *,
        report_progress: bool) -> None:
    """
    Computes a propagator and reports the result to the scheduler. The worker
    connects to the channel, greets the scheduler, computes the value, reports
    it, and disconnects.

    Args:
        channel (Channel): The channel of the scheduler.
        index (int): The index of the propagator.
        transform (Transform): The transform of the propagator.
        inputs (list[Payload]): The resolved input values.
        report_progress (bool): Whether to report progress before and after
            computing.

    Raises:
        ProtocolViolationError: If the scheduler replies unexpectedly. This
            includes the scheduler rejecting the result.
        TransportFailureError: If the channel fails.
    """
    with channel.connect() as client:
        expect_reply(client.request(hello_msg()), MSG_WORLD)
        if report_progress:
            expect_reply(client.request(progress_msg(0)), MSG_OK)
        value = transform.compute(inputs)
        if report_progress:
            expect_reply(client.request(progress_msg(100)), MSG_OK)
        expect_reply(client.request(done_msg(index, value)), MSG_OK)
