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
"""This module defines the ids used internally and the module base class for
environment dependent implementations."""
import uuid
from typing import Literal, TypeVar


SelfT = TypeVar('SelfT', bound='BaseId')
"""A `BaseId` subclass."""


DEBUG_OUTPUT_LENGTH: int | None = None
"""The length of the id shown when debugging. The id is truncated to this
length for easier readability. If it's set to None the full id is shown."""


def set_debug_output_length(output_length: int | None) -> None:
    """
    Sets the length of ids when shown in debug outputs.

    Args:
        output_length (int | None): The maximum display length. If None the
            full id is shown.
    """
    global DEBUG_OUTPUT_LENGTH  # pylint: disable=global-statement

    DEBUG_OUTPUT_LENGTH = output_length


def trim_id(text_id: str) -> str:
    """
    Prepares the text representation of an id for user output. The id might
    get truncated based on the debug settings.

    Args:
        text_id (str): The id representation to prepare.

    Returns:
        str: The potentially truncated id representation.
    """
    if DEBUG_OUTPUT_LENGTH is None:
        return text_id
    return text_id[:DEBUG_OUTPUT_LENGTH]


class BaseId:
    """
    A `UUID` based id. The id consists of a single character prefix to
    distinguish different id types and a uuid.
    """
    def __init__(self, raw_id: uuid.UUID) -> None:
        """
        Creates an id. Do not call this function directly.
        Use `parse` or the respective `create` method instead.

        Args:
            raw_id (uuid.UUID): The UUID.
        """
        self._id = raw_id

    @staticmethod
    def prefix() -> str:
        """
        The prefix to distinguish different id types.

        Returns:
            str: A single uppercase character prefix that is unique and
            identifies the given type.
        """
        raise NotImplementedError()

    @classmethod
    def parse(cls: type[SelfT], text: str) -> SelfT:
        """
        Parses a string into an id.
        Use `to_parseable` to obtain a parseable string.

        Args:
            cls (type[SelfT]): The id class.
            text (str): The parseable string.

        Raises:
            ValueError: If the string did not represent an id.

        Returns:
            SelfT: The id.
        """
        if not text.startswith(cls.prefix()):
            raise ValueError(f"invalid prefix for {cls.__name__}: {text}")
        if len(text) != 33 or "-" in text:
            raise ValueError(f"invalid {cls.__name__}: {text}")
        return cls(uuid.UUID(text[1:]))

    def to_parseable(self) -> str:
        """
        Creates a parseable representation of the id.

        Returns:
            str: A string that can be parsed by `parse`.
        """
        return f"{self.prefix()}{self._id.hex}"

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if not isinstance(other, BaseId):
            return False
        if self.prefix() != other.prefix():
            return False
        return self._id == other._id

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash(self._id)

    def __str__(self) -> str:
        return f"{self.prefix()}[{trim_id(self._id.hex)}]"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}[{self.__str__()}]"


class WorkerId(BaseId):
    """
    A `WorkerId` identifies a worker computing a single propagator. Each
    dispatch creates a new worker with a unique id.
    """
    @staticmethod
    def prefix() -> str:
        return "W"

    @staticmethod
    def create() -> 'WorkerId':
        """
        Creates a `WorkerId`.

        Returns:
            WorkerId: A unique `WorkerId`.
        """
        return WorkerId(uuid.uuid4())


class ClientId(BaseId):
    """
    A `ClientId` identifies one connection to a channel endpoint. Replies are
    routed back to the client by this id.
    """
    @staticmethod
    def prefix() -> str:
        return "C"

    @staticmethod
    def create() -> 'ClientId':
        """
        Creates a `ClientId`.

        Returns:
            ClientId: A unique `ClientId`.
        """
        return ClientId(uuid.uuid4())


Locality = Literal[
    "local",
    "remote",
    "either",
]
"""In which environment a module can be used. It can be 'local' only, 'remote'
only, or available in 'either' of those environments."""

L_LOCAL: Locality = "local"
"""Indicates that a module can only be used in a local environment, i.e.,
within the same process as the scheduler."""
L_REMOTE: Locality = "remote"
"""Indicates that a module can only be used in a remote environment."""
L_EITHER: Locality = "either"
"""
Indicates that a module can be used in either a local or remote environment.
"""


class Module:  # pylint: disable=too-few-public-methods
    """
    A module for environment dependent behavior. Module classes need to be
    subclassed to implement the respective behavior.
    """
    def locality(self) -> Locality:
        """
        Whether the module is for a local (same process) environment only, a
        possibly remote (other process / other node) environment, or either.
        All loaded modules must be either all local or all remote (not counting
        modules that indicate either). For example, an in-process channel
        cannot be reached by workers running in a different process.

        Returns:
            Locality: The locality mode.
        """
        raise NotImplementedError()
