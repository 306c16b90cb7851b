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
"""Tests loading modules as plugins."""
import os
import shutil
import uuid
from collections.abc import Callable
from typing import Any, cast, TypeVar

import pytest

from propnet.system.channel.channel import Channel
from propnet.system.channel.loader import ChannelModule, load_channel
from propnet.system.logger.loader import EventListenerDef, load_event_listener
from propnet.system.logger.log import EventListener
from propnet.system.plugins import load_plugin
from propnet.system.scheduler.loader import load_scheduler, SchedulerModule
from propnet.system.scheduler.scheduler import Scheduler
from propnet.system.transform.loader import load_transform
from propnet.system.transform.transform import Transform
from propnet.system.worker.loader import load_worker_pool, WorkerPoolModule
from propnet.system.worker.pool import WorkerPool


T = TypeVar('T')


def test_plugins(tmp_path: str, monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Test loading plugins.

    Args:
        tmp_path (str): A temporary folder.
        monkeypatch (pytest.MonkeyPatch): Makes the folder importable.
    """
    root = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))
    plugins_id = f"plugins_{uuid.uuid4().hex}"
    plugins_folder = os.path.join(tmp_path, plugins_id)
    os.makedirs(plugins_folder, exist_ok=True)
    with open(os.path.join(plugins_folder, "__init__.py"), "wb") as fout:
        fout.flush()
    monkeypatch.syspath_prepend(str(tmp_path))
    test_ix = 0
    tests = []

    def do_test(
            base: type[T],
            name: str,
            load_fun: Callable[[dict[str, Any]], T],
            args: dict[str, Any]) -> None:
        nonlocal test_ix

        src_file = os.path.join(root, f"src/{name.replace('.', '/')}.py")
        dest_file = os.path.join(plugins_folder, f"test_{test_ix}.py")
        shutil.copy(src_file, dest_file)
        args["name"] = f"{plugins_id}.test_{test_ix}"
        tests.append((base, load_fun, args))
        test_ix += 1

    do_test(
        Channel,
        "propnet.system.channel.local",
        lambda args: load_channel(cast(ChannelModule, args)),
        {
            "reply_timeout": 1.0,
        })
    do_test(
        WorkerPool,
        "propnet.system.worker.thread",
        lambda args: load_worker_pool(cast(WorkerPoolModule, args)),
        {})
    do_test(
        Scheduler,
        "propnet.system.scheduler.round_robin",
        lambda args: load_scheduler(cast(SchedulerModule, args)),
        {
            "attempt_factor": 2,
        })
    do_test(
        Scheduler,
        "propnet.system.scheduler.callback",
        lambda args: load_scheduler(cast(SchedulerModule, args)),
        {})
    do_test(
        EventListener,
        "propnet.system.logger.listeners.stdout",
        lambda args: load_event_listener(
            cast(EventListenerDef, args), ["debug"]),
        {
            "show_debug": False,
        })
    do_test(
        Transform,
        "propnet.system.transform.ops.bin_op",
        lambda args: load_transform(args.pop("name"), args),
        {
            "op": "sub",
        })

    for base, load_fun, args in tests:
        success = False
        try:
            plugin = load_fun(args)
            assert isinstance(plugin, base)
            success = True
        finally:
            if not success:
                print(f"folder: {plugins_folder}")
                for fname in sorted(os.listdir(plugins_folder)):
                    print(fname)

    transform = load_transform(f"{plugins_id}.test_5", {"op": "sub"})
    assert transform.compute([5, 3]) == 2
    assert transform.get_kind() == f"{plugins_id}.test_5"
    channel_cls = load_plugin(Channel, f"{plugins_id}.test_0:LocalChannel")
    assert issubclass(channel_cls, Channel)
    with pytest.raises(ValueError, match=r"is not a plugin"):
        load_plugin(Channel, f"{plugins_id}.test_0:LocalRoutes")
    with pytest.raises(ModuleNotFoundError):
        load_transform(f"{plugins_id}.missing", {})


def test_invalid_plugins() -> None:
    """Test loading invalid plugins."""
    with pytest.raises(ValueError, match=r"ambiguous or missing plugin"):
        load_plugin(Transform, "propnet.system.transform.transform")
    with pytest.raises(ValueError, match=r"ambiguous or missing plugin"):
        load_plugin(Channel, "propnet.system.netdef")
