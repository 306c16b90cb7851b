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
"""Binary arithmetic on the values of two input cells."""
import operator
from collections.abc import Callable
from typing import cast, get_args, Literal

from propnet.system.cell import Payload
from propnet.system.transform.transform import Transform, TransformArguments


OpName = Literal[
    "add",
    "sub",
    "mul",
    "div",
    "max",
    "min",
]
"""The operations supported by the `bin_op` transform."""
ALL_OPS: set[OpName] = set(get_args(OpName))
"""All operations supported by the `bin_op` transform."""


class BinOp(Transform):
    """
    Binary operation on the values of exactly two input cells. The first
    input cell is the left operand.
    """
    def __init__(self, kind: str, args: TransformArguments) -> None:
        super().__init__(kind, args)
        op: OpName = cast(OpName, self.get_arg("op", "str"))
        self._op: Callable[[Payload, Payload], Payload]
        if op == "add":
            self._op = operator.add
        elif op == "sub":
            self._op = operator.sub
        elif op == "mul":
            self._op = operator.mul
        elif op == "div":
            self._op = operator.truediv
        elif op == "max":
            self._op = max
        elif op == "min":
            self._op = min
        else:
            raise ValueError(f"unknown op: {op} valid ops: {ALL_OPS}")

    def get_arity(self) -> int | None:
        return 2

    def compute(self, inputs: list[Payload]) -> Payload:
        left, right = inputs
        return self._op(left, right)
