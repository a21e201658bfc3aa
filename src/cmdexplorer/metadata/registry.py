"""Out-of-band metadata table keyed by function identity.

Decorators populate the table at class-definition time and the explorer reads
it afterwards. Entries are keyed by ``(key, target)`` where *target* is the
function object itself, so two methods that share a name on different
classes never collide.

A module-level :data:`default_registry` backs :func:`define_metadata` and
:func:`get_metadata`; tests can create private :class:`MetadataRegistry`
instances to stay isolated.
"""

from __future__ import annotations

import inspect
import weakref
from typing import Any, Callable, Optional

COMMAND_HANDLER_METADATA = "cmdexplorer:command_handler"
"""Key of the :class:`~cmdexplorer.models.CommandMetadata` record of a handler."""

COMMAND_ARGS_METADATA = "cmdexplorer:command_args"
"""Key of the parameter bindings collected before ``@command`` is applied."""


class MetadataRegistry:
    """Mapping from ``(key, function)`` to a metadata value.

    Functions are held weakly so that classes defined in short-lived scopes
    (tests, plugins that get unloaded) do not leak through the table.
    """

    def __init__(self) -> None:
        self._tables: dict[str, weakref.WeakKeyDictionary[Callable[..., Any], Any]] = {}

    def define(self, key: str, target: Callable[..., Any], value: Any) -> None:
        """Attach *value* to *target* under *key*, replacing any previous value."""
        table = self._tables.setdefault(key, weakref.WeakKeyDictionary())
        table[_unwrap(target)] = value

    def get(self, key: str, target: Any) -> Optional[Any]:
        """Return the value attached to *target* under *key*, or ``None``.

        Non-callable or non-weak-referenceable targets (plain attributes
        found while scanning a class) simply have no metadata.
        """
        table = self._tables.get(key)
        if table is None or target is None:
            return None
        try:
            return table.get(_unwrap(target))
        except TypeError:
            return None

    def has(self, key: str, target: Any) -> bool:
        return self.get(key, target) is not None

    def clear(self) -> None:
        self._tables.clear()


def _unwrap(target: Any) -> Any:
    """Return the plain function behind bound methods and method descriptors."""
    if isinstance(target, (staticmethod, classmethod)) or inspect.ismethod(target):
        return target.__func__
    return target


default_registry = MetadataRegistry()


def define_metadata(key: str, target: Callable[..., Any], value: Any) -> None:
    """Attach *value* to *target* in the :data:`default_registry`."""
    default_registry.define(key, target, value)


def get_metadata(key: str, target: Any) -> Optional[Any]:
    """Read *target*'s value for *key* from the :data:`default_registry`."""
    return default_registry.get(key, target)
