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
"""Loading of configurations."""
from typing import Literal, TypedDict

from propnet.system.channel.loader import ChannelModule
from propnet.system.config.config import Config
from propnet.system.logger.loader import (
    EventListenerDef,
    load_event_listener,
)
from propnet.system.logger.log import EventStream
from propnet.system.scheduler.loader import load_scheduler, SchedulerModule


LoggerDef = TypedDict('LoggerDef', {
    "listeners": list[EventListenerDef],
    "disable_events": list[str],
})
"""Define the logger. `listeners` is a list of all listeners that process the
logs. `disable_events` is list of patterns to filter or include certain log
types."""


ConfigJSON = TypedDict('ConfigJSON', {
    "scheduler": SchedulerModule,
    "logger": LoggerDef,
})
"""The configuration JSON."""


SchedulerChoice = Literal[
    "round_robin",
    "callback",
    "distributed",
    "distributed_redis",
]
"""Schedulers available for tests. `distributed` uses the local channel and
`distributed_redis` uses the redis channel with the in-memory backend."""


def load_config(config_obj: ConfigJSON) -> Config:
    """
    Load a configuration from a JSON.

    Args:
        config_obj (ConfigJSON): The configuration JSON.

    Returns:
        Config: The configuration.
    """
    config = Config()
    logger = EventStream()
    logger_obj = config_obj["logger"]
    for listener_def in logger_obj["listeners"]:
        logger.add_listener(
            load_event_listener(listener_def, logger_obj["disable_events"]))
    config.set_logger(logger)
    config.set_scheduler(load_scheduler(config_obj["scheduler"]))
    return config


def load_test(
        *,
        scheduler: SchedulerChoice,
        attempt_factor: int = 10,
        report_progress: bool = True,
        reply_timeout: float = 5.0) -> Config:
    """
    Load a configuration for unit tests.

    Args:
        scheduler (SchedulerChoice): The scheduler to use.
        attempt_factor (int, optional): The pass budget factor of the round
            robin scheduler. Defaults to 10.
        report_progress (bool, optional): Whether workers report progress.
            Defaults to True.
        reply_timeout (float, optional): The time in seconds workers wait for
            a reply. Defaults to 5.0.

    Returns:
        Config: The configuration.
    """
    scheduler_module: SchedulerModule
    channel: ChannelModule
    if scheduler == "round_robin":
        scheduler_module = {
            "name": "round_robin",
            "attempt_factor": attempt_factor,
        }
    elif scheduler == "callback":
        scheduler_module = {
            "name": "callback",
        }
    elif scheduler in ("distributed", "distributed_redis"):
        if scheduler == "distributed":
            channel = {
                "name": "local",
                "reply_timeout": reply_timeout,
            }
        else:
            channel = {
                "name": "redis",
                "endpoint": "test",
                "poll_interval": 0.001,
                "reply_timeout": reply_timeout,
            }
        scheduler_module = {
            "name": "distributed",
            "channel": channel,
            "workers": {
                "name": "thread",
            },
            "poll_interval": 0.01,
            "report_progress": report_progress,
            "release_timeout": reply_timeout * 2.0,
        }
    else:
        raise ValueError(f"invalid scheduler: {scheduler}")
    test_config: ConfigJSON = {
        "scheduler": scheduler_module,
        "logger": {
            "listeners": [
                {
                    "name": "stdout",
                    "show_debug": True,
                },
            ],
            "disable_events": [],
        },
    }
    return load_config(test_config)
