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
"""Base classes of channels and their endpoints."""
from types import TracebackType

from propnet.system.base import ClientId, Module
from propnet.system.logger.error import TransportFailureError


class ServerEndpoint:
    """
    The bound side of a channel. Requests are received one at a time and each
    request must be answered before the next request can be received.
    """
    def __init__(self) -> None:
        self._pending: ClientId | None = None
        self._closed = False

    def do_receive(
            self, timeout: float | None) -> tuple[ClientId, list[str]] | None:
        """
        Waits for the next request.

        Args:
            timeout (float | None): The maximum time to wait in seconds. If
                None, waits until a request arrives.

        Returns:
            tuple[ClientId, list[str]] | None: The requesting client and the
                message parts or None if no request arrived in time.
        """
        raise NotImplementedError()

    def do_reply(self, client_id: ClientId, parts: list[str]) -> None:
        """
        Sends a reply to the given client.

        Args:
            client_id (ClientId): The client.
            parts (list[str]): The message parts.
        """
        raise NotImplementedError()

    def do_close(self) -> None:
        """
        Releases all resources of the endpoint.
        """
        raise NotImplementedError()

    def receive(self, timeout: float | None) -> list[str] | None:
        """
        Receives the next request.

        Args:
            timeout (float | None): The maximum time to wait in seconds. If
                None, waits until a request arrives.

        Raises:
            ValueError: If the previous request has not been answered yet or
                the endpoint is closed.
            TransportFailureError: If the underlying transport failed.

        Returns:
            list[str] | None: The message parts or None if no request arrived
                in time.
        """
        if self._closed:
            raise ValueError("endpoint is closed")
        if self._pending is not None:
            raise ValueError(
                f"reply to {self._pending} is outstanding")
        res = self.do_receive(timeout)
        if res is None:
            return None
        client_id, parts = res
        self._pending = client_id
        return parts

    def reply(self, parts: list[str]) -> None:
        """
        Answers the last received request.

        Args:
            parts (list[str]): The message parts.

        Raises:
            ValueError: If there is no request to answer.
            TransportFailureError: If the underlying transport failed.
        """
        client_id = self._pending
        if client_id is None:
            raise ValueError("no request to reply to")
        self._pending = None
        self.do_reply(client_id, parts)

    def has_pending(self) -> bool:
        """
        Whether the last received request still needs a reply.

        Returns:
            bool: True, if `reply` must be called before the next `receive`.
        """
        return self._pending is not None

    def close(self) -> None:
        """
        Closes the endpoint. Closing an endpoint multiple times is allowed.
        """
        if self._closed:
            return
        self._closed = True
        self.do_close()

    def __enter__(self) -> 'ServerEndpoint':
        return self

    def __exit__(
            self,
            exc_type: type[BaseException] | None,
            exc_value: BaseException | None,
            traceback: TracebackType | None) -> None:
        self.close()


class ClientEndpoint:
    """
    The connecting side of a channel. A client has at most one outstanding
    request.
    """
    def __init__(self, reply_timeout: float) -> None:
        """
        Creates a client endpoint.

        Args:
            reply_timeout (float): The maximum time to wait for a reply in
                seconds.
        """
        self._client_id = ClientId.create()
        self._reply_timeout = reply_timeout
        self._closed = False

    def get_client_id(self) -> ClientId:
        """
        The id of the client. Replies are routed by this id.

        Returns:
            ClientId: The client id.
        """
        return self._client_id

    def do_send(self, parts: list[str]) -> None:
        """
        Sends a request.

        Args:
            parts (list[str]): The message parts.
        """
        raise NotImplementedError()

    def do_wait_reply(self, timeout: float) -> list[str] | None:
        """
        Waits for the reply of the last request.

        Args:
            timeout (float): The maximum time to wait in seconds.

        Returns:
            list[str] | None: The reply or None if no reply arrived in time.
        """
        raise NotImplementedError()

    def do_close(self) -> None:
        """
        Releases all resources of the endpoint.
        """
        raise NotImplementedError()

    def request(self, parts: list[str]) -> list[str]:
        """
        Sends a request and waits for its reply.

        Args:
            parts (list[str]): The message parts.

        Raises:
            ValueError: If the endpoint is closed.
            TransportFailureError: If no reply arrived in time or the
                underlying transport failed.

        Returns:
            list[str]: The reply.
        """
        if self._closed:
            raise ValueError("endpoint is closed")
        self.do_send(parts)
        res = self.do_wait_reply(self._reply_timeout)
        if res is None:
            raise TransportFailureError(
                f"no reply for {parts[:1]} within {self._reply_timeout}s")
        return res

    def close(self) -> None:
        """
        Closes the endpoint. Closing an endpoint multiple times is allowed.
        """
        if self._closed:
            return
        self._closed = True
        self.do_close()

    def __enter__(self) -> 'ClientEndpoint':
        return self

    def __exit__(
            self,
            exc_type: type[BaseException] | None,
            exc_value: BaseException | None,
            traceback: TracebackType | None) -> None:
        self.close()


class Channel(Module):
    """
    A request / reply channel. The channel object is shared between the
    scheduler, which binds it, and the workers, which connect to it.
    """
    def bind(self) -> ServerEndpoint:
        """
        Binds the endpoint of the channel. Only one endpoint can be bound at
        a time.

        Raises:
            TransportFailureError: If the endpoint cannot be bound.

        Returns:
            ServerEndpoint: The endpoint. Use it as resource block to unbind
                when done.
        """
        raise NotImplementedError()

    def connect(self) -> ClientEndpoint:
        """
        Connects a client to the bound endpoint.

        Raises:
            TransportFailureError: If the client cannot connect.

        Returns:
            ClientEndpoint: The client. Use it as resource block to disconnect
                when done.
        """
        raise NotImplementedError()

