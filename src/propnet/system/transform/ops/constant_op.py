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
"""Perform a binary operation with a constant operand on a single input."""
from collections.abc import Callable
from typing import cast, get_args, Literal

from propnet.system.cell import Payload
from propnet.system.transform.transform import Transform, TransformArguments


OpName = Literal[
    "add",
    "mul",
]
"""The operations supported by the `constant_op` transform."""
ALL_OPS: set[OpName] = set(get_args(OpName))
"""All operations supported by the `constant_op` transform."""


class ConstantOp(Transform):
    """Perform a binary operation with a constant operand on the value of a
    single input cell. Integral constants keep integer inputs integers."""
    def __init__(self, kind: str, args: TransformArguments) -> None:
        super().__init__(kind, args)
        raw = float(self.get_arg("const", "float"))
        val: int | float = int(raw) if raw.is_integer() else raw

        def add(val_in: Payload) -> Payload:
            return val_in + val

        def mul(val_in: Payload) -> Payload:
            return val_in * val

        op: OpName = cast(OpName, self.get_arg("op", "str"))
        self._op: Callable[[Payload], Payload]
        if op == "add":
            self._op = add
        elif op == "mul":
            self._op = mul
        else:
            raise ValueError(f"unknown op: {op} valid ops: {ALL_OPS}")

    def get_arity(self) -> int | None:
        return 1

    def compute(self, inputs: list[Payload]) -> Payload:
        return self._op(inputs[0])
