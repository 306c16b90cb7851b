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
"""Provides context information for log events. The context is local to the
current thread, so workers computing propagators in parallel do not mix up
their information."""
import contextlib
import threading
from collections.abc import Iterator
from typing import TypedDict

from typing_extensions import NotRequired

from propnet.system.base import WorkerId


TH_LOCAL = threading.local()
"""The thread local holding the current context."""


ContextInfo = TypedDict('ContextInfo', {
    "scheduler": NotRequired[str | None],
    "network": NotRequired[str | None],
    "propagator": NotRequired[int | None],
    "worker": NotRequired[WorkerId | None],
})
"""Context of the current execution state. `propagator` is the index of the
propagator within its network."""


NAME_CTX = "ctx"
"""Name of the standard context."""
NAME_PREEXC_CTX = "preexc_ctx"
"""Name of the pre-exception context."""


def _get_context() -> ContextInfo:
    res: ContextInfo | None = getattr(TH_LOCAL, NAME_CTX, None)
    if res is None:
        res = {}
        setattr(TH_LOCAL, NAME_CTX, res)
    return res


def _set_context(ctx: ContextInfo) -> None:
    setattr(TH_LOCAL, NAME_CTX, ctx)


def _get_preexc_context() -> ContextInfo:
    res: ContextInfo | None = getattr(TH_LOCAL, NAME_PREEXC_CTX, None)
    if res is None:
        res = {}
        setattr(TH_LOCAL, NAME_PREEXC_CTX, res)
    return res


def _set_preexc_context(ctx: ContextInfo) -> None:
    setattr(TH_LOCAL, NAME_PREEXC_CTX, ctx)


@contextlib.contextmanager
def add_context(add_info: ContextInfo) -> Iterator[None]:
    """
    Provides a resource block with additional context information. If the
    block is left via an exception the context of the block is kept as
    pre-exception context so errors can be reported where they happened.

    Args:
        add_info (ContextInfo): The additional context information.
    """
    old_ctx = _get_context()
    new_ctx = old_ctx.copy()
    new_ctx.update(add_info)
    success = False
    try:
        _set_context(new_ctx)
        _set_preexc_context(new_ctx)
        yield
        success = True
    finally:
        _set_context(old_ctx)
        if success:
            _set_preexc_context(old_ctx)


def get_ctx() -> ContextInfo:
    """
    Retrieves the current context.

    Returns:
        ContextInfo: The context.
    """
    return _get_context().copy()


def get_preexc_ctx() -> ContextInfo:
    """
    Retrieves the context from before the exception was raised. If no exception
    was raised then the context is the same as the current context.

    Returns:
        ContextInfo: The pre-exception context.
    """
    return _get_preexc_context().copy()


def ctx_format(ctx: ContextInfo) -> str:
    """
    Formats a context.

    Args:
        ctx (ContextInfo): The context.

    Returns:
        str: The context as string.
    """
    scheduler = ctx.get("scheduler")
    network = ctx.get("network")
    propagator = ctx.get("propagator")
    worker = ctx.get("worker")
    scheduler_str = "[unknown]" if scheduler is None else f"[{scheduler}]"
    location = ""
    if network is not None:
        location = f" in {network}"
    if propagator is not None:
        location = f"{location} at #{propagator}"
    worker_str = "" if worker is None else f" by {worker}"
    return f"{scheduler_str}{location}{worker_str}"
