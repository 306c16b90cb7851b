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
"""The messages exchanged between the distributed scheduler and its
workers. A worker greets the scheduler with `HELLO`, may report `PROGRESS`,
and finally reports its result with `DONE`. Results are JSON encoded."""
from propnet.system.cell import Payload
from propnet.system.logger.error import ProtocolViolationError
from propnet.system.util import json_compact, json_read


MSG_HELLO = "HELLO"
"""Handshake request. Answered by `MSG_WORLD`."""
MSG_WORLD = "WORLD"
"""Handshake acknowledgement."""
MSG_PROGRESS = "PROGRESS"
"""Progress report in percent. Answered by `MSG_OK`."""
MSG_DONE = "DONE"
"""Result report of a propagator. Answered by `MSG_OK` or `MSG_REJECT`."""
MSG_OK = "OK"
"""Acknowledgement."""
MSG_REJECT = "REJECT"
"""A result was reported for a propagator that was not dispatched."""


def hello_msg() -> list[str]:
    """
    Creates a handshake request.

    Returns:
        list[str]: The message parts.
    """
    return [MSG_HELLO]


def progress_msg(percent: float) -> list[str]:
    """
    Creates a progress report.

    Args:
        percent (float): The progress in percent.

    Returns:
        list[str]: The message parts.
    """
    return [MSG_PROGRESS, f"{percent:g}"]


def done_msg(index: int, value: Payload) -> list[str]:
    """
    Creates a result report.

    Args:
        index (int): The index of the propagator.
        value (Payload): The computed value. It must be JSON serializable.

    Returns:
        list[str]: The message parts.
    """
    return [MSG_DONE, f"{index}", json_compact(value)]


def parse_progress(parts: list[str]) -> float:
    """
    Parses a progress report.

    Args:
        parts (list[str]): The message parts.

    Raises:
        ProtocolViolationError: If the message is malformed.

    Returns:
        float: The progress in percent.
    """
    if len(parts) != 2:
        raise ProtocolViolationError(f"malformed progress: {parts}")
    try:
        return float(parts[1])
    except ValueError as exc:
        raise ProtocolViolationError(
            f"malformed progress: {parts[1]!r}") from exc


def parse_done(parts: list[str], size: int) -> tuple[int, Payload]:
    """
    Parses a result report.

    Args:
        parts (list[str]): The message parts.
        size (int): The number of propagators in the network.

    Raises:
        ProtocolViolationError: If the message is malformed, the index is not
            a decimal number within the network, or the value is not valid
            JSON.

    Returns:
        tuple[int, Payload]: The index of the propagator and the value.
    """
    if len(parts) != 3:
        raise ProtocolViolationError(f"malformed result: {parts}")
    index_str = parts[1]
    if not index_str.isdecimal() or not index_str.isascii():
        raise ProtocolViolationError(f"invalid index: {index_str!r}")
    index = int(index_str)
    if index >= size:
        raise ProtocolViolationError(
            f"index {index} outside network of size {size}")
    try:
        value = json_read(parts[2])
    except ValueError as exc:
        raise ProtocolViolationError(
            f"invalid value for #{index}: {parts[2]!r}") from exc
    return index, value


def expect_reply(reply: list[str], expected: str) -> None:
    """
    Checks a reply received by a worker.

    Args:
        reply (list[str]): The reply.
        expected (str): The expected reply.

    Raises:
        ProtocolViolationError: If the reply differs.
    """
    if reply != [expected]:
        raise ProtocolViolationError(
            f"unexpected reply {reply} expected {[expected]}")
