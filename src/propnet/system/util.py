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
"""Helpers for event names, plugin names, timestamps, and the JSON text used
in network definitions and channel messages."""
import json
from datetime import datetime, timezone
from typing import Any


def is_partial_match(target: str, pattern: str) -> bool:
    """
    Checks whether an event name matches a filter pattern. Both are dotted
    paths and only whole segments are compared. A plain pattern must match
    the leading segments of the event name. A pattern starting with `.`
    matches any run of segments after the first one.

    Examples:
    | Event name               | Pattern     | Match   |
    | ------------------------ | ----------- | ------- |
    | `tally.message.done`     | `tally`     | `True`  |
    | `tally.messages`         | `tally.msg` | `False` |
    | `tally.message.done`     | `message`   | `False` |
    | `tally.message.done`     | `.message`  | `True`  |
    | `debug.scheduler.pass`   | `.pass`     | `True`  |
    | `debug.scheduler.passes` | `.pass`     | `False` |

    Args:
        target (str): The event name.
        pattern (str): The pattern.

    Returns:
        bool: Whether the event name matches the pattern.
    """
    segments = target.split(".")
    if pattern.startswith("."):
        parts = pattern[1:].split(".")
        width = len(parts)
        return any(
            segments[ix:ix + width] == parts
            for ix in range(1, len(segments) - width + 1))
    parts = pattern.split(".")
    return segments[:len(parts)] == parts


def full_name(cls: type) -> str:
    """
    The qualified name of a type as used in plugin error messages, e.g.,
    `str` or `propnet.system.channel.channel.Channel`.

    Args:
        cls (type): The type.

    Returns:
        str: The name including the module unless it is a builtin.
    """
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def now() -> datetime:
    """
    The current time in the local timezone.

    Returns:
        datetime: A timezone aware timestamp.
    """
    return datetime.now(timezone.utc).astimezone()


def fmt_time(when: datetime) -> str:
    """
    Formats a timestamp for log output.

    Args:
        when (datetime): The timestamp.

    Returns:
        str: The ISO formatted timestamp.
    """
    return when.isoformat()


def json_compact(obj: Any) -> str:
    """
    Serializes a value without whitespace and with sorted keys so equal
    values produce equal text.

    Args:
        obj (Any): The value.

    Returns:
        str: The JSON text.
    """
    return json.dumps(
        obj,
        sort_keys=True,
        indent=None,
        separators=(",", ":"))


def json_read(data: str) -> Any:
    """
    Parses JSON text.

    Args:
        data (str): The text.

    Raises:
        ValueError: If the text is not valid JSON. The message contains the
            position of the error and the offending text.

    Returns:
        Any: The value. Callers validate its layout.
    """
    try:
        return json.loads(data)
    except json.JSONDecodeError as err:
        raise ValueError(
            f"JSON parse error ({err.lineno}:{err.colno}): "
            f"{data!r}") from err
