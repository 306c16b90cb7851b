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
"""An in-process channel using queues. Only workers in the same process as
the scheduler can connect."""
import queue
import threading

from propnet.system.base import ClientId, L_LOCAL, Locality
from propnet.system.channel.channel import (
    Channel,
    ClientEndpoint,
    ServerEndpoint,
)
from propnet.system.logger.error import TransportFailureError


class LocalRoutes:  # pylint: disable=too-few-public-methods
    """The queues of a bound local endpoint."""
    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.inbox: queue.Queue[tuple[ClientId, list[str]]] = queue.Queue()
        self.replies: dict[ClientId, queue.Queue[list[str]]] = {}


class LocalServerEndpoint(ServerEndpoint):
    """The bound side of a local channel."""
    def __init__(self, channel: 'LocalChannel', routes: LocalRoutes) -> None:
        super().__init__()
        self._channel = channel
        self._routes = routes

    def do_receive(
            self, timeout: float | None) -> tuple[ClientId, list[str]] | None:
        try:
            return self._routes.inbox.get(timeout=timeout)
        except queue.Empty:
            return None

    def do_reply(self, client_id: ClientId, parts: list[str]) -> None:
        with self._routes.lock:
            reply_queue = self._routes.replies.get(client_id)
        if reply_queue is None:
            raise TransportFailureError(f"client {client_id} disconnected")
        reply_queue.put(list(parts))

    def do_close(self) -> None:
        self._channel.unbind(self._routes)


class LocalClientEndpoint(ClientEndpoint):
    """The connecting side of a local channel."""
    def __init__(self, routes: LocalRoutes, reply_timeout: float) -> None:
        super().__init__(reply_timeout)
        self._routes = routes
        self._replies: queue.Queue[list[str]] = queue.Queue()
        with routes.lock:
            routes.replies[self.get_client_id()] = self._replies

    def do_send(self, parts: list[str]) -> None:
        self._routes.inbox.put((self.get_client_id(), list(parts)))

    def do_wait_reply(self, timeout: float) -> list[str] | None:
        try:
            return self._replies.get(timeout=timeout)
        except queue.Empty:
            return None

    def do_close(self) -> None:
        with self._routes.lock:
            self._routes.replies.pop(self.get_client_id(), None)


class LocalChannel(Channel):
    """A channel that connects threads of the same process."""
    def __init__(self, *, reply_timeout: float) -> None:
        """
        Creates a local channel.

        Args:
            reply_timeout (float): The maximum time a client waits for a reply
                in seconds.
        """
        self._reply_timeout = reply_timeout
        self._lock = threading.RLock()
        self._routes: LocalRoutes | None = None

    def locality(self) -> Locality:
        return L_LOCAL

    def bind(self) -> ServerEndpoint:
        with self._lock:
            if self._routes is not None:
                raise TransportFailureError("channel is already bound")
            routes = LocalRoutes()
            self._routes = routes
        return LocalServerEndpoint(self, routes)

    def unbind(self, routes: LocalRoutes) -> None:
        """
        Unbinds the endpoint. Clients that are still connected do not receive
        any more replies.

        Args:
            routes (LocalRoutes): The queues of the bound endpoint.
        """
        with self._lock:
            if self._routes is routes:
                self._routes = None

    def connect(self) -> ClientEndpoint:
        with self._lock:
            routes = self._routes
        if routes is None:
            raise TransportFailureError("channel is not bound")
        return LocalClientEndpoint(routes, self._reply_timeout)
