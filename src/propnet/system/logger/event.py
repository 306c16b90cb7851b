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
"""Events that can be logged to the event stream."""
import datetime
from typing import Literal, TypedDict

from typing_extensions import NotRequired

from propnet.system.logger.context import ContextInfo
from propnet.system.logger.error import ErrorCode


ErrorEvent = TypedDict('ErrorEvent', {
    "name": Literal["error"],
    "message": str,
    "traceback": list[str],
    "code": ErrorCode,
})
"""An event to report errors."""


WarningEvent = TypedDict('WarningEvent', {
    "name": Literal["warning"],
    "message": str,
})
"""A event to report warnings."""


SchedulerEvent = TypedDict('SchedulerEvent', {
    "name": Literal["scheduler"],
    "action": Literal["start", "stop", "pass", "scan", "dispatch"],
    "propagators": NotRequired[int],
    "settled": NotRequired[int],
    "pass": NotRequired[int],
    "depth": NotRequired[int],
    "status": NotRequired[Literal["complete", "incomplete", "error"]],
    "unsettled": NotRequired[list[int]],
})
"""Event to report the progress of a scheduler run. A `pass` is a full round
robin visit of all propagators. A `scan` is a (possibly nested) visit of
all propagators by the callback scheduler at the given `depth`."""


PropagatorEvent = TypedDict('PropagatorEvent', {
    "name": Literal["propagator"],
    "index": int,
    "state": str,
    "output": NotRequired[str],
})
"""Event to report a state change of a propagator."""


MessageEvent = TypedDict('MessageEvent', {
    "name": Literal["message"],
    "action": Literal["hello", "progress", "done", "duplicate", "reject"],
    "index": NotRequired[int],
    "progress": NotRequired[float],
})
"""Event to report a request received by the distributed scheduler."""


WorkerEvent = TypedDict('WorkerEvent', {
    "name": Literal["worker"],
    "action": Literal["start", "stop", "release"],
    "index": NotRequired[int],
    "workers": NotRequired[int],
})
"""Event to indicate that a worker has been started or stopped. `release`
reports joining all workers of a pool."""


AnyEvent = (
    ErrorEvent
    | WarningEvent
    | SchedulerEvent
    | PropagatorEvent
    | MessageEvent
    | WorkerEvent
)
"""An event that can be logged to the event stream."""


EventInfo = TypedDict('EventInfo', {
    "when": datetime.datetime,
    "name": str,
    "ctx": ContextInfo,
    "event": AnyEvent,
})
"""Full information and context for events that can be logged to the event
stream."""
