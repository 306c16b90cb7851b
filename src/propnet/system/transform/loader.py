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
"""Loads transforms."""
from propnet.system.plugins import load_plugin
from propnet.system.transform.transform import (
    INTERNAL_TRANSFORM_PREFIX,
    Transform,
    TransformArguments,
)


def load_transform(kind: str, args: TransformArguments) -> Transform:
    """
    Load a transform.

    Args:
        kind (str): The kind of the transform. This can be built-in transform
            names or fully qualified python module names to load a transform
            via plugin.
        args (TransformArguments): The arguments of the transform.

    Raises:
        ModuleNotFoundError: If provided a python module name that cannot be
            resolved.
        ValueError: If the built-in name is not known or the arguments are
            invalid.

    Returns:
        Transform: The loaded transform.
    """
    kind_name = kind
    if "." not in kind:
        kind = f"{INTERNAL_TRANSFORM_PREFIX}.{kind}"
    try:
        transform_cls = load_plugin(Transform, kind)
    except ModuleNotFoundError as exc:
        if kind == kind_name:
            raise exc
        raise ValueError(f"unknown transform {kind_name}") from exc
    return transform_cls(kind_name, args)
