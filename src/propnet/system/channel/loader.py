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
"""Loads a channel."""
from typing import Literal, TypedDict

from redipy import RedisConfig
from typing_extensions import NotRequired

from propnet.system.channel.channel import Channel
from propnet.system.plugins import load_plugin


LocalChannelModule = TypedDict('LocalChannelModule', {
    "name": Literal["local"],
    "reply_timeout": NotRequired[float],
})
"""An in-process channel. Only usable with workers in the same process."""
RedisChannelModule = TypedDict('RedisChannelModule', {
    "name": Literal["redis"],
    "cfg": NotRequired[RedisConfig],
    "endpoint": NotRequired[str],
    "poll_interval": NotRequired[float],
    "reply_timeout": NotRequired[float],
})
"""A redis based channel. If `cfg` is missing the in-memory backend is used.
`endpoint` is the prefix of all keys. `poll_interval` is the time in seconds
to sleep when no message is available."""


ChannelModule = LocalChannelModule | RedisChannelModule
"""Channel configuration."""


DEFAULT_REPLY_TIMEOUT = 10.0
"""The default time in seconds a client waits for a reply."""
DEFAULT_POLL_INTERVAL = 0.01
"""The default time in seconds to sleep when no message is available."""


def load_channel(module: ChannelModule) -> Channel:
    """
    Load a channel for the given configuration. If `name` is set to a fully
    qualified python module the channel is loaded as plugin.

    Args:
        module (ChannelModule): The configuration.

    Raises:
        ValueError: If the configuration is invalid.

    Returns:
        Channel: The channel.
    """
    # pylint: disable=import-outside-toplevel
    if "." in module["name"]:
        kwargs = dict(module)
        plugin = load_plugin(Channel, f"{kwargs.pop('name')}")
        return plugin(**kwargs)
    if module["name"] == "local":
        from propnet.system.channel.local import LocalChannel
        return LocalChannel(
            reply_timeout=module.get("reply_timeout", DEFAULT_REPLY_TIMEOUT))
    if module["name"] == "redis":
        from propnet.system.channel.redis import RedisChannel
        return RedisChannel(
            cfg=module.get("cfg"),
            endpoint=module.get("endpoint", "propnet"),
            poll_interval=module.get("poll_interval", DEFAULT_POLL_INTERVAL),
            reply_timeout=module.get("reply_timeout", DEFAULT_REPLY_TIMEOUT))
    raise ValueError(f"unknown channel: {module['name']}")
