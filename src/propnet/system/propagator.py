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
"""A propagator computes the value of its output cell from the values of its
input cells. It computes exactly once and only after all of its inputs are
set."""
from collections.abc import Callable
from typing import get_args, Literal

from propnet.system.cell import Cell, Payload
from propnet.system.transform.transform import Transform


PropagatorState = Literal[
    "waiting",
    "computing",
    "ready_to_dispatch",
    "dispatched",
    "done",
]
"""The lifecycle state of a propagator. Local schedulers go through `waiting`,
`computing`, and `done`. The distributed scheduler goes through `waiting`,
`ready_to_dispatch`, `dispatched`, and `done`."""
ALL_STATES: set[PropagatorState] = set(get_args(PropagatorState))
"""All propagator states."""


StepResult = Literal["completed", "pending"]
"""The result of a local step. `completed` means the propagator is done."""


DoneCallback = Callable[['Propagator'], None]
"""Called when a propagator completes for the first time."""


class Propagator:
    """
    A computation node of a propagator network. The input cells and the
    output cell are shared with other propagators of the same network.
    """
    def __init__(
            self,
            index: int,
            inputs: list[Cell],
            output: Cell,
            transform: Transform,
            *,
            name: str | None = None) -> None:
        """
        Creates a propagator in the `waiting` state. Use
        `Network.add_propagator` instead of calling this directly.

        Args:
            index (int): The index of the propagator within its network.
            inputs (list[Cell]): The input cells in the order the transform
                expects them.
            output (Cell): The output cell.
            transform (Transform): The computation.
            name (str | None, optional): A readable name. If None, the name is
                derived from the index. Defaults to None.

        Raises:
            ValueError: If the transform does not accept the number of input
                cells.
        """
        transform.check_inputs(len(inputs))
        self._index = index
        self._inputs = list(inputs)
        self._output = output
        self._transform = transform
        self._name = f"P{index}" if name is None else name
        self._state: PropagatorState = "waiting"

    def get_index(self) -> int:
        """
        The index of the propagator within its network. This is also the
        correlation id of the distributed protocol.

        Returns:
            int: The index.
        """
        return self._index

    def get_name(self) -> str:
        """
        The readable name of the propagator.

        Returns:
            str: The name.
        """
        return self._name

    def get_inputs(self) -> list[Cell]:
        """
        The input cells.

        Returns:
            list[Cell]: The input cells in order.
        """
        return list(self._inputs)

    def get_output(self) -> Cell:
        """
        The output cell.

        Returns:
            Cell: The output cell.
        """
        return self._output

    def get_transform(self) -> Transform:
        """
        The transform computing the output value.

        Returns:
            Transform: The transform.
        """
        return self._transform

    def get_state(self) -> PropagatorState:
        """
        The current lifecycle state.

        Returns:
            PropagatorState: The state.
        """
        return self._state

    def is_done(self) -> bool:
        """
        Whether the propagator has written its output cell.

        Returns:
            bool: True, if the propagator is done.
        """
        return self._state == "done"

    def is_ready(self) -> bool:
        """
        Whether all input cells are set. Inputs are checked in order and the
        check stops at the first unset input.

        Returns:
            bool: True, if every input cell holds a value.
        """
        return all(cell.is_set() for cell in self._inputs)

    def get_input_values(self) -> list[Payload]:
        """
        Retrieves the values of all input cells.

        Raises:
            UnsetAccessError: If an input cell is not set.

        Returns:
            list[Payload]: The values in input order.
        """
        return [cell.get() for cell in self._inputs]

    def step(self, on_done: DoneCallback | None = None) -> StepResult:
        """
        Advances the propagator in a local scheduler. A waiting propagator
        whose inputs are all set moves to `computing` and computes within the
        same call. A done propagator does not access any cell.

        Args:
            on_done (DoneCallback | None, optional): Called after the output
                has been written. The callback is not called for propagators
                that were already done. Defaults to None.

        Raises:
            AlreadySetError: If the output cell has already been written by
                another writer.
            ValueError: If the propagator is in a distributed state.

        Returns:
            StepResult: `completed` if the propagator is done and `pending`
                otherwise.
        """
        if self._state == "done":
            return "completed"
        if self._state == "waiting":
            if not self.is_ready():
                return "pending"
            self._state = "computing"
        if self._state != "computing":
            raise ValueError(
                f"cannot step {self._name} in state {self._state}")
        self._output.set(self._transform.compute(self.get_input_values()))
        self._state = "done"
        if on_done is not None:
            on_done(self)
        return "completed"

    def prepare_dispatch(self) -> bool:
        """
        Moves a waiting propagator whose inputs are all set to
        `ready_to_dispatch`.

        Returns:
            bool: True, if the propagator is `ready_to_dispatch` after the
                call.
        """
        if self._state == "waiting" and self.is_ready():
            self._state = "ready_to_dispatch"
        return self._state == "ready_to_dispatch"

    def mark_dispatched(self) -> None:
        """
        Indicates that a worker has been started for the propagator.

        Raises:
            ValueError: If the propagator was not `ready_to_dispatch`.
        """
        if self._state != "ready_to_dispatch":
            raise ValueError(
                f"cannot dispatch {self._name} in state {self._state}")
        self._state = "dispatched"

    def apply_result(self, value: Payload) -> bool:
        """
        Writes a result reported by a worker. Results for propagators that
        are already done are ignored.

        Args:
            value (Payload): The reported value.

        Raises:
            ValueError: If the propagator was never dispatched.
            AlreadySetError: If the output cell has been written by another
                writer.

        Returns:
            bool: True, if the value was written. False, if the propagator was
                already done.
        """
        if self._state == "done":
            return False
        if self._state != "dispatched":
            raise ValueError(
                f"unexpected result for {self._name} in state {self._state}")
        self._output.set(value)
        self._state = "done"
        return True

    def __str__(self) -> str:
        ins = ",".join(cell.get_name() for cell in self._inputs)
        return (
            f"{self._name}#{self._index}"
            f"[{self._transform}({ins})->{self._output.get_name()}:"
            f"{self._state}]")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}[{self.__str__()}]"
