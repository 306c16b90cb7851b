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
"""This module defines the in-memory representation of a propagator
network."""
from collections.abc import Iterator

from propnet.system.cell import Cell, Payload
from propnet.system.propagator import Propagator
from propnet.system.transform.transform import Transform


class Network:
    """
    An ordered collection of propagators sharing cells by reference. The
    order of propagators is a scheduling convenience only. Any visiting order
    converges to the same cell values. The network does not check for cycles.
    """
    def __init__(self, name: str) -> None:
        self._name = name
        self._cells: dict[str, Cell] = {}
        self._producers: dict[str, int] = {}
        self._propagators: list[Propagator] = []

    def get_name(self) -> str:
        """
        The name of the network.

        Returns:
            str: The name.
        """
        return self._name

    def add_cell(self, name: str) -> Cell:
        """
        Adds a cell to the network. If a cell with the same name already
        exists the existing cell is returned.

        Args:
            name (str): The name of the cell.

        Returns:
            Cell: The cell.
        """
        res = self._cells.get(name)
        if res is None:
            res = Cell(name)
            self._cells[name] = res
        return res

    def get_cell(self, name: str) -> Cell:
        """
        Retrieves a cell by name.

        Args:
            name (str): The name of the cell.

        Raises:
            KeyError: If the cell does not exist.

        Returns:
            Cell: The cell.
        """
        return self._cells[name]

    def has_cell(self, name: str) -> bool:
        """
        Whether a cell with the given name exists.

        Args:
            name (str): The name of the cell.

        Returns:
            bool: True, if the cell exists.
        """
        return name in self._cells

    def get_cells(self) -> list[Cell]:
        """
        All cells in the order they were added.

        Returns:
            list[Cell]: The cells.
        """
        return list(self._cells.values())

    def get_producer(self, name: str) -> Propagator | None:
        """
        Retrieves the propagator that writes the given cell.

        Args:
            name (str): The name of the cell.

        Returns:
            Propagator | None: The propagator or None if the cell is a leaf
                cell.
        """
        index = self._producers.get(name)
        if index is None:
            return None
        return self._propagators[index]

    def add_propagator(
            self,
            inputs: list[str],
            output: str,
            transform: Transform,
            *,
            name: str | None = None) -> Propagator:
        """
        Adds a propagator to the end of the network. Cells are created as
        needed.

        Args:
            inputs (list[str]): The names of the input cells.
            output (str): The name of the output cell.
            transform (Transform): The computation.
            name (str | None, optional): A readable name of the propagator.
                Defaults to None.

        Raises:
            ValueError: If the output cell is already produced by another
                propagator, if the output cell already holds a value, or if
                the transform does not accept the number of inputs.

        Returns:
            Propagator: The new propagator.
        """
        if output in self._producers:
            other = self._propagators[self._producers[output]]
            raise ValueError(
                f"cell {output} is already produced by {other.get_name()}")
        out_cell = self.add_cell(output)
        if out_cell.is_set():
            raise ValueError(f"cell {output} is already assigned")
        index = len(self._propagators)
        prop = Propagator(
            index,
            [self.add_cell(cname) for cname in inputs],
            out_cell,
            transform,
            name=name)
        self._propagators.append(prop)
        self._producers[output] = index
        return prop

    def get_propagator(self, index: int) -> Propagator:
        """
        Retrieves a propagator by its index.

        Args:
            index (int): The index.

        Raises:
            KeyError: If the index is outside the network.

        Returns:
            Propagator: The propagator.
        """
        if index < 0 or index >= len(self._propagators):
            raise KeyError(f"no propagator #{index} in {self._name}")
        return self._propagators[index]

    def assign(self, values: dict[str, Payload]) -> None:
        """
        Sets the initial values of leaf cells.

        Args:
            values (dict[str, Payload]): A mapping of cell names to values.

        Raises:
            ValueError: If a cell is produced by a propagator.
            AlreadySetError: If a cell has already been assigned.
        """
        for name, value in values.items():
            if name in self._producers:
                prop = self._propagators[self._producers[name]]
                raise ValueError(
                    f"cannot assign cell {name} produced by {prop.get_name()}")
            self.add_cell(name).set(value)

    def cell_values(self) -> dict[str, Payload | None]:
        """
        The current values of all cells. Unset cells are reported as None.

        Returns:
            dict[str, Payload | None]: A mapping of cell names to values.
        """
        return {
            name: cell.get_or_none()
            for name, cell in self._cells.items()
        }

    def unsettled(self) -> list[int]:
        """
        The indices of all propagators that are not done.

        Returns:
            list[int]: The indices in network order.
        """
        return [
            prop.get_index()
            for prop in self._propagators
            if not prop.is_done()
        ]

    def is_settled(self) -> bool:
        """
        Whether every propagator is done.

        Returns:
            bool: True, if the network has reached its final state.
        """
        return all(prop.is_done() for prop in self._propagators)

    def __iter__(self) -> Iterator[Propagator]:
        return iter(list(self._propagators))

    def __len__(self) -> int:
        return len(self._propagators)

    def __str__(self) -> str:
        return f"{self._name}[{len(self._propagators)}]"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}[{self.__str__()}]"
