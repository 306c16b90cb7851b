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
"""The transform base class. A transform is the pure computation of a
propagator."""
from collections.abc import Callable
from typing import cast, Literal

from propnet.system.cell import Payload


INTERNAL_TRANSFORM_PREFIX = "propnet.system.transform.ops"
"""Python module prefix for built-in transforms."""


ArgType = Literal[
    "bool",
    "str",
    "int",
    "float",
]
"""Available argument types as string names."""


ArgumentType = bool | str | int | float
"""Available argument types as python types as seen in the JSON."""
TransformArguments = dict[str, ArgumentType]
"""A dictionary specifying all JSON transform argument values."""


class Transform:
    """
    Computes the output of a propagator from its input values. Overwrite this
    class to implement new functionality. A transform must be pure: the same
    inputs always produce the same output and no state is shared with other
    transforms.
    """
    def __init__(self, kind: str, args: TransformArguments) -> None:
        """
        Creates a transform. If overwriting this constructor keep the
        signature the same. Use transform arguments to provide customization.

        Args:
            kind (str): The kind of the transform.
            args (TransformArguments): The arguments of the transform.
        """
        self._kind = kind
        self._args = dict(args)

    def get_kind(self) -> str:
        """
        The kind of the transform.

        Returns:
            str: The kind.
        """
        return self._kind

    def get_args(self) -> TransformArguments:
        """
        Retrieves all arguments as they appear in the JSON.

        Returns:
            TransformArguments: A copy of the arguments.
        """
        return dict(self._args)

    def get_arg(self, name: str, arg_type: ArgType) -> ArgumentType:
        """
        Get an argument by name.

        Args:
            name (str): The name.
            arg_type (ArgType): The expected type of the argument.

        Raises:
            ValueError: If the argument is missing or cannot be converted to
                the expected type.

        Returns:
            ArgumentType: The argument value.
        """
        if name not in self._args:
            raise ValueError(
                f"missing argument {name} for transform {self._kind}")
        val = self._args[name]
        if arg_type == "bool":
            if not isinstance(val, bool):
                raise ValueError(f"argument {name} must be bool: {val!r}")
            return val
        if arg_type == "str":
            if not isinstance(val, str):
                raise ValueError(f"argument {name} must be str: {val!r}")
            return val
        if arg_type == "int":
            return int(val)
        if arg_type == "float":
            return float(val)
        raise ValueError(f"unknown argument type: {arg_type}")

    def get_arity(self) -> int | None:
        """
        The number of inputs the transform expects.

        Returns:
            int | None: The number of inputs or None if any positive number
                of inputs is accepted.
        """
        raise NotImplementedError()

    def check_inputs(self, count: int) -> None:
        """
        Verifies that the transform can be used with the given number of
        inputs.

        Args:
            count (int): The number of input cells of the propagator.

        Raises:
            ValueError: If the number of inputs does not match.
        """
        arity = self.get_arity()
        if arity is None:
            if count < 1:
                raise ValueError(
                    f"transform {self._kind} needs at least one input")
            return
        if count != arity:
            raise ValueError(
                f"transform {self._kind} expects {arity} inputs got {count}")

    def compute(self, inputs: list[Payload]) -> Payload:
        """
        Computes the output value.

        Args:
            inputs (list[Payload]): The values of the input cells in the order
                the input cells are listed by the propagator.

        Returns:
            Payload: The output value.
        """
        raise NotImplementedError()

    def __str__(self) -> str:
        return f"{self._kind}{self._args}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}[{self.__str__()}]"


class FunctionTransform(Transform):
    """
    Wraps a python callable as transform. This allows building networks
    programmatically without defining a transform class. Function transforms
    cannot be converted into a network definition.
    """
    def __init__(
            self,
            fun: Callable[..., Payload],
            *,
            arity: int | None = None) -> None:
        """
        Creates a transform from a callable. The callable receives the input
        values as positional arguments.

        Args:
            fun (Callable[..., Payload]): The function.
            arity (int | None, optional): The number of inputs. If None, any
                positive number of inputs is accepted. Defaults to None.
        """
        super().__init__("function", {})
        self._fun = fun
        self._arity = arity

    def get_arity(self) -> int | None:
        return self._arity

    def compute(self, inputs: list[Payload]) -> Payload:
        return self._fun(*inputs)

    def __str__(self) -> str:
        name = cast(str, getattr(self._fun, "__name__", "lambda"))
        return f"{self.get_kind()}[{name}]"
