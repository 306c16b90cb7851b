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
"""Cells are the shared state of a propagator network. A cell is either unset
or holds a value. Once set, the value never changes."""
from typing import Any, TypeAlias

from propnet.system.logger.error import AlreadySetError, UnsetAccessError


Payload: TypeAlias = Any
"""The value of a cell. Propagators never inspect the value beyond checking
whether the cell is set. For the distributed scheduler values need to be
JSON serializable."""


class Unset:  # pylint: disable=too-few-public-methods
    """The type of the `UNSET` marker."""
    def __repr__(self) -> str:
        return "UNSET"


UNSET = Unset()
"""Marker for a cell that has no value yet. `None` is a valid payload, so a
separate marker is used."""


class Cell:
    """
    A named single assignment value slot. A cell is written exactly once,
    either by the propagator that has the cell as output or, for input cells,
    by the initial assignment of the network.
    """
    def __init__(self, name: str) -> None:
        """
        Creates an unset cell.

        Args:
            name (str): The name of the cell.
        """
        self._name = name
        self._value: Payload | Unset = UNSET

    def get_name(self) -> str:
        """
        The name of the cell.

        Returns:
            str: The name.
        """
        return self._name

    def is_set(self) -> bool:
        """
        Whether the cell holds a value.

        Returns:
            bool: True, if the cell has been set.
        """
        return self._value is not UNSET

    def get(self) -> Payload:
        """
        Retrieves the value of the cell.

        Raises:
            UnsetAccessError: If the cell has not been set yet.

        Returns:
            Payload: The value.
        """
        if self._value is UNSET:
            raise UnsetAccessError(f"cell {self._name} is not set")
        return self._value

    def get_or_none(self) -> Payload | None:
        """
        Retrieves the value of the cell or None if it is unset.

        Returns:
            Payload | None: The value or None.
        """
        if self._value is UNSET:
            return None
        return self._value

    def set(self, value: Payload) -> None:
        """
        Sets the value of the cell.

        Args:
            value (Payload): The value.

        Raises:
            AlreadySetError: If the cell has already been set.
        """
        if self._value is not UNSET:
            raise AlreadySetError(
                f"cell {self._name} is already set to {self._value!r}")
        self._value = value

    def __str__(self) -> str:
        return f"{self._name}={self._value!r}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}[{self.__str__()}]"
