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
"""A channel on top of redis lists. Requests are pushed to the inbox list of
the endpoint and replies to a list per client. Without redis configuration
the in-memory backend of redipy is used, which only works within the same
process."""
import threading
import time

import redis as redis_lib
from redipy import Redis, RedisConfig

from propnet.system.base import ClientId, L_EITHER, L_LOCAL, Locality
from propnet.system.channel.channel import (
    Channel,
    ClientEndpoint,
    ServerEndpoint,
)
from propnet.system.logger.error import (
    ProtocolViolationError,
    TransportFailureError,
)
from propnet.system.util import json_compact, json_read


class RedisRoutes:
    """Access to the lists of an endpoint."""
    def __init__(
            self,
            rclient: Redis,
            endpoint: str,
            poll_interval: float) -> None:
        self._redis = rclient
        self._endpoint = endpoint
        self._poll_interval = poll_interval

    def inbox_key(self) -> str:
        """
        The list holding all requests.

        Returns:
            str: The key.
        """
        return f"{self._endpoint}:inbox"

    def reply_key(self, client_id: ClientId) -> str:
        """
        The list holding the replies for the given client.

        Args:
            client_id (ClientId): The client.

        Returns:
            str: The key.
        """
        return f"{self._endpoint}:reply:{client_id.to_parseable()}"

    def push(self, key: str, value: str) -> None:
        """
        Appends a message to a list.

        Args:
            key (str): The list.
            value (str): The framed message.

        Raises:
            TransportFailureError: If redis cannot be reached.
        """
        try:
            self._redis.rpush(key, value)
        except (ConnectionError, redis_lib.ConnectionError) as exc:
            raise TransportFailureError(f"cannot push to {key}") from exc

    def pop(self, key: str, timeout: float | None) -> str | None:
        """
        Takes the first message from a list. Waits for a message by polling.

        Args:
            key (str): The list.
            timeout (float | None): The maximum time to wait in seconds. If
                None, waits until a message arrives.

        Raises:
            TransportFailureError: If redis cannot be reached.

        Returns:
            str | None: The framed message or None if no message arrived in
                time.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            try:
                res = self._redis.lpop(key)
            except (ConnectionError, redis_lib.ConnectionError) as exc:
                raise TransportFailureError(
                    f"cannot pop from {key}") from exc
            if res is not None:
                return res
            wait = self._poll_interval
            if deadline is not None:
                remain = deadline - time.monotonic()
                if remain <= 0.0:
                    return None
                wait = min(wait, remain)
            time.sleep(wait)

    def clear(self, key: str) -> None:
        """
        Removes a list.

        Args:
            key (str): The list.

        Raises:
            TransportFailureError: If redis cannot be reached.
        """
        try:
            self._redis.delete(key)
        except (ConnectionError, redis_lib.ConnectionError) as exc:
            raise TransportFailureError(f"cannot delete {key}") from exc


class RedisServerEndpoint(ServerEndpoint):
    """The bound side of a redis channel."""
    def __init__(self, channel: 'RedisChannel', routes: RedisRoutes) -> None:
        super().__init__()
        self._channel = channel
        self._routes = routes

    def do_receive(
            self, timeout: float | None) -> tuple[ClientId, list[str]] | None:
        frame = self._routes.pop(self._routes.inbox_key(), timeout)
        if frame is None:
            return None
        try:
            obj = json_read(frame)
            client_id = ClientId.parse(obj["client"])
            parts = [f"{part}" for part in obj["parts"]]
        except (ValueError, KeyError, TypeError) as exc:
            raise ProtocolViolationError(
                f"malformed frame: {frame!r}") from exc
        return client_id, parts

    def do_reply(self, client_id: ClientId, parts: list[str]) -> None:
        self._routes.push(
            self._routes.reply_key(client_id), json_compact(parts))

    def do_close(self) -> None:
        self._channel.unbind(self._routes)


class RedisClientEndpoint(ClientEndpoint):
    """The connecting side of a redis channel."""
    def __init__(self, routes: RedisRoutes, reply_timeout: float) -> None:
        super().__init__(reply_timeout)
        self._routes = routes

    def do_send(self, parts: list[str]) -> None:
        self._routes.push(
            self._routes.inbox_key(),
            json_compact({
                "client": self.get_client_id().to_parseable(),
                "parts": parts,
            }))

    def do_wait_reply(self, timeout: float) -> list[str] | None:
        frame = self._routes.pop(
            self._routes.reply_key(self.get_client_id()), timeout)
        if frame is None:
            return None
        try:
            return [f"{part}" for part in json_read(frame)]
        except (ValueError, TypeError) as exc:
            raise TransportFailureError(
                f"malformed reply: {frame!r}") from exc

    def do_close(self) -> None:
        self._routes.clear(self._routes.reply_key(self.get_client_id()))


class RedisChannel(Channel):
    """A channel using redis lists."""
    def __init__(
            self,
            *,
            cfg: RedisConfig | None,
            endpoint: str,
            poll_interval: float,
            reply_timeout: float) -> None:
        """
        Creates a redis channel.

        Args:
            cfg (RedisConfig | None): The redis configuration. If None, the
                in-memory backend is used.
            endpoint (str): The name of the endpoint. All keys of the channel
                start with this name.
            poll_interval (float): The time to sleep in seconds when no
                message is available.
            reply_timeout (float): The maximum time a client waits for a reply
                in seconds.
        """
        if cfg is None:
            self._redis = Redis("memory")
        else:
            self._redis = Redis("redis", cfg=cfg, redis_module="channel")
        self._is_memory = cfg is None
        self._endpoint = endpoint
        self._poll_interval = poll_interval
        self._reply_timeout = reply_timeout
        self._lock = threading.RLock()
        self._bound: RedisRoutes | None = None

    def locality(self) -> Locality:
        if self._is_memory:
            return L_LOCAL
        return L_EITHER

    def _routes(self) -> RedisRoutes:
        return RedisRoutes(self._redis, self._endpoint, self._poll_interval)

    def bind(self) -> ServerEndpoint:
        with self._lock:
            if self._bound is not None:
                raise TransportFailureError(
                    f"endpoint {self._endpoint} is already bound")
            routes = self._routes()
            routes.clear(routes.inbox_key())
            self._bound = routes
        return RedisServerEndpoint(self, routes)

    def unbind(self, routes: RedisRoutes) -> None:
        """
        Unbinds the endpoint and drops unanswered requests.

        Args:
            routes (RedisRoutes): The lists of the bound endpoint.
        """
        with self._lock:
            if self._bound is routes:
                self._bound = None
                routes.clear(routes.inbox_key())

    def connect(self) -> ClientEndpoint:
        return RedisClientEndpoint(self._routes(), self._reply_timeout)
