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
"""Functionality for error handling. All errors raised by propnet carry an
error code so they can be reported on the event stream."""
from typing import cast, get_args, Literal


ErrorCode = Literal[
    "unknown",
    "general_exception",
    "already_set",
    "unset_access",
    "protocol_violation",
    "incomplete",
    "transport_failure",
    "worker_failure",
    "uncaught_worker",
]
"""The type of error."""


ERROR_CODES: set[ErrorCode] = set(get_args(ErrorCode))
"""All types of errors."""


def to_error_code(text: str) -> ErrorCode:
    """
    Convert a string to an error code.

    Args:
        text (str): The error code.

    Raises:
        ValueError: If the provided string is not an error code.

    Returns:
        ErrorCode: The error code.
    """
    if text not in ERROR_CODES:
        raise ValueError(f"invalid error code {text}")
    return cast(ErrorCode, text)


class PropnetError(Exception):
    """Base class of all errors raised by propnet."""
    @staticmethod
    def error_code() -> ErrorCode:
        """
        The error code used when reporting the error.

        Returns:
            ErrorCode: The error code.
        """
        return "general_exception"


class AlreadySetError(PropnetError):
    """A cell was written to a second time. This indicates an error in the
    construction of the network, e.g., two producers for the same cell."""
    @staticmethod
    def error_code() -> ErrorCode:
        return "already_set"


class UnsetAccessError(PropnetError):
    """The value of an unset cell was read. The readiness check of a
    propagator prevents this from happening during scheduling."""
    @staticmethod
    def error_code() -> ErrorCode:
        return "unset_access"


class ProtocolViolationError(PropnetError):
    """The scheduler received a malformed or unknown request."""
    @staticmethod
    def error_code() -> ErrorCode:
        return "protocol_violation"


class IncompleteRunError(PropnetError):
    """A run ended without settling all propagators."""
    @staticmethod
    def error_code() -> ErrorCode:
        return "incomplete"


class TransportFailureError(PropnetError):
    """Sending or receiving on a channel failed."""
    @staticmethod
    def error_code() -> ErrorCode:
        return "transport_failure"


class WorkerFailedError(PropnetError):
    """A worker terminated without reporting its result."""
    @staticmethod
    def error_code() -> ErrorCode:
        return "worker_failure"


def get_error_code(exc: BaseException) -> ErrorCode:
    """
    Determines the error code of an exception.

    Args:
        exc (BaseException): The exception.

    Returns:
        ErrorCode: The error code. Exceptions not raised by propnet are
            reported as `general_exception`.
    """
    if isinstance(exc, PropnetError):
        return exc.error_code()
    return "general_exception"
