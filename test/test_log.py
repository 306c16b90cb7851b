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
"""Tests the event stream and its listeners."""
from test.util import CollectListener

import pytest

from propnet.system.base import WorkerId
from propnet.system.logger.context import (
    add_context,
    ctx_format,
    get_ctx,
    get_preexc_ctx,
)
from propnet.system.logger.error import (
    AlreadySetError,
    get_error_code,
    ProtocolViolationError,
    to_error_code,
)
from propnet.system.logger.listeners.stdout import StdoutListener
from propnet.system.logger.loader import load_event_listener
from propnet.system.logger.log import EventStream


def test_filters() -> None:
    """Test which events are captured by a listener."""
    listener = CollectListener(disable_events=[
        "debug",
        ".message",
        "!debug.scheduler",
    ])
    assert not listener.capture_event("debug.propagator.state")
    assert listener.capture_event("debug.scheduler.pass")
    assert not listener.capture_event("tally.message.done")
    assert not listener.capture_event("debug.message.hello")
    assert listener.capture_event("tally.messages")
    assert listener.capture_event("tally.scheduler.start")
    assert listener.capture_event("debugging")
    for invalid in ["", ".", "!", "!."]:
        with pytest.raises(ValueError, match=r"invalid filter"):
            CollectListener(disable_events=[invalid])

    listener = StdoutListener()
    assert not listener.capture_event("debug.scheduler.pass")
    assert listener.capture_event("tally.scheduler.start")
    listener = StdoutListener(show_debug=True)
    assert listener.capture_event("debug.scheduler.pass")


def test_stream(capsys: pytest.CaptureFixture[str]) -> None:
    """
    Test logging events to listeners.

    Args:
        capsys (pytest.CaptureFixture[str]): Captures the output.
    """
    logger = EventStream()
    logger.log_event("tally.worker.start", {"name": "worker"})
    collect = CollectListener(disable_events=["debug"])
    logger.add_listener(collect)
    logger.add_listener(load_event_listener({"name": "stdout"}, []))

    def fail() -> dict:
        raise AssertionError("event should not be created")

    logger.log_lazy("debug.scheduler.pass", fail)  # type: ignore[arg-type]
    assert not collect.events

    with add_context({"scheduler": "callback", "network": "net"}):
        logger.log_event(
            "tally.worker.start", {"name": "worker", "index": 3})
    assert len(collect.events) == 1
    event = collect.events[0]
    assert event["name"] == "tally.worker.start"
    assert event["ctx"] == {"scheduler": "callback", "network": "net"}
    assert event["event"] == {"name": "worker", "index": 3}
    out = capsys.readouterr().out
    assert "[callback] in net tally.worker.start: index=3" in out

    logger.log_warning("warn.message.duplicate", "first")
    logger.log_warning("warn.message.duplicate", "second")
    logger.log_warning("warn.worker.release", "other")
    warnings = [
        evt["event"] for evt in collect.events
        if evt["event"]["name"] == "warning"
    ]
    assert warnings == [
        {"name": "warning", "message": "first"},
        {"name": "warning", "message": "other"},
    ]


def test_errors() -> None:
    """Test logging errors."""
    logger = EventStream()
    collect = CollectListener()
    logger.add_listener(collect)
    try:
        with add_context({"scheduler": "distributed", "propagator": 1}):
            raise ProtocolViolationError("unknown request")
    except ProtocolViolationError:
        logger.log_error("error.scheduler")
    logger.log_error(
        "error.worker", "uncaught_worker", exc=ValueError("broken"))
    first, second = [evt for evt in collect.events]
    assert first["ctx"] == {"scheduler": "distributed", "propagator": 1}
    assert first["event"]["name"] == "error"
    assert first["event"]["code"] == "protocol_violation"  # type: ignore
    assert first["event"]["message"] == "unknown request"  # type: ignore
    assert second["event"]["code"] == "uncaught_worker"  # type: ignore
    assert second["event"]["message"] == "broken"  # type: ignore
    assert any(
        "ValueError: broken" in line
        for line in second["event"]["traceback"])  # type: ignore

    assert get_error_code(AlreadySetError("cell")) == "already_set"
    assert get_error_code(KeyError("cell")) == "general_exception"
    assert to_error_code("incomplete") == "incomplete"
    with pytest.raises(ValueError, match=r"invalid error code"):
        to_error_code("foo")
    with pytest.raises(ValueError, match=r"unknown event listener"):
        load_event_listener({"name": "file"}, [])  # type: ignore


def test_context() -> None:
    """Test the context of the current thread."""
    assert get_ctx() == {}
    assert ctx_format(get_ctx()) == "[unknown]"
    worker = WorkerId.create()
    with add_context({"scheduler": "distributed", "network": "net"}):
        with add_context({"propagator": 2, "worker": worker}):
            ctx = get_ctx()
            assert ctx["propagator"] == 2
            assert ctx_format(ctx) == (
                f"[distributed] in net at #2 by {worker}")
        assert get_ctx() == {"scheduler": "distributed", "network": "net"}
    assert get_ctx() == {}
    with pytest.raises(KeyError):
        with add_context({"scheduler": "round_robin"}):
            with add_context({"propagator": 0}):
                raise KeyError("cell")
    assert get_ctx() == {}
    assert get_preexc_ctx() == {"scheduler": "round_robin", "propagator": 0}
    with add_context({"scheduler": "callback"}):
        pass
    assert get_preexc_ctx() == {}
