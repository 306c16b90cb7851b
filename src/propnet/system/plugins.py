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
"""Loads custom implementations (transforms, event listeners, schedulers,
channels, and worker pools) via plugin."""
import importlib
from typing import TypeVar

from propnet.system.util import full_name


T = TypeVar('T')


PLUGIN_CACHE: dict[str, dict[str, type]] = {}
"""Caches previously loaded types by base class name and plugin name."""


def load_plugin(base: type[T], name: str) -> type[T]:
    """
    Loads custom code as plugin. For a plugin to be loadable it must be visible
    as python module to the current process. The name is either a module name,
    in which case the module must contain exactly one sub-class of the base
    class, or a module name and a class name separated by `:` which picks the
    class directly.

    Args:
        base (type[T]): The expected base type.
        name (str): The fully qualified name of the plugin to load. The plugin
            must be accessible as python module from the cwd.

    Raises:
        ValueError: If the plugin cannot be determined. There might be no
            sub-class of the base class in the module, there might be multiple
            sub-classes, or the explicitly named class is not a sub-class of
            the base class.

    Returns:
        type[T]: The loaded plugin.
    """
    base_name = full_name(base)
    base_cache = PLUGIN_CACHE.setdefault(base_name, {})
    res = base_cache.get(name)
    if res is not None:
        return res
    mod_name, _, cls_name = name.partition(":")
    mod = importlib.import_module(mod_name)
    if cls_name:
        cls = getattr(mod, cls_name, None)
        if not isinstance(cls, type) or not issubclass(cls, base):
            raise ValueError(f"{name} is not a plugin for {base_name}")
        res = cls
    else:
        candidates = [
            cls
            for cls in mod.__dict__.values()
            if isinstance(cls, type)
            and cls.__module__ == mod_name
            and issubclass(cls, base)
        ]
        if len(candidates) != 1:
            cands = [
                can.__name__ for can in candidates
            ]
            raise ValueError(
                f"ambiguous or missing plugin for {base_name}: {cands}")
        res = candidates[0]
    base_cache[name] = res
    return res
