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
"""Reduces the values of any number of input cells to a single value."""
import functools
import operator
from collections.abc import Callable
from typing import cast, get_args, Literal

from propnet.system.cell import Payload
from propnet.system.transform.transform import Transform, TransformArguments


OpName = Literal[
    "sum",
    "product",
    "max",
    "min",
]
"""The operations supported by the `reduce_op` transform."""
ALL_OPS: set[OpName] = set(get_args(OpName))
"""All operations supported by the `reduce_op` transform."""


class ReduceOp(Transform):
    """Folds the input values from left to right."""
    def __init__(self, kind: str, args: TransformArguments) -> None:
        super().__init__(kind, args)
        op: OpName = cast(OpName, self.get_arg("op", "str"))
        self._op: Callable[[Payload, Payload], Payload]
        if op == "sum":
            self._op = operator.add
        elif op == "product":
            self._op = operator.mul
        elif op == "max":
            self._op = max
        elif op == "min":
            self._op = min
        else:
            raise ValueError(f"unknown op: {op} valid ops: {ALL_OPS}")

    def get_arity(self) -> int | None:
        return None

    def compute(self, inputs: list[Payload]) -> Payload:
        return functools.reduce(self._op, inputs)
