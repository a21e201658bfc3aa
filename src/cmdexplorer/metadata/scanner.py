"""Enumerate the methods a component class exposes, own and inherited."""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

R = TypeVar("R")


class MetadataScanner:
    """Walks a class and its bases to list method names exactly once.

    The most-derived definition of a name wins: a subclass that redefines a
    method, or shadows it with a plain attribute, hides the base version.
    Dunder names and properties are skipped, and properties are never
    evaluated.
    """

    def scan_from_prototype(
        self,
        instance: Any,
        prototype: type,
        callback: Callable[[str], Optional[R]],
    ) -> list[R]:
        """Call *callback* for every method name of *prototype*.

        Args:
            instance: The component instance the prototype belongs to. Kept
                for callers that need it in their callback closure.
            prototype: The class to scan, usually ``type(instance)``.
            callback: Called once per method name.

        Returns:
            The callback results, in enumeration order, with ``None``
            results dropped.
        """
        results: list[R] = []
        for name in self.get_all_method_names(prototype):
            result = callback(name)
            if result is not None:
                results.append(result)
        return results

    def get_all_method_names(self, prototype: type) -> list[str]:
        """Return the de-duplicated method names reachable through the MRO.

        Names are ordered by class (most derived first), then by definition
        order within each class.
        """
        seen: set[str] = set()
        names: list[str] = []
        for klass in prototype.__mro__:
            if klass is object:
                continue
            for name, value in vars(klass).items():
                if name in seen or (name.startswith("__") and name.endswith("__")):
                    continue
                seen.add(name)
                if _is_method(value):
                    names.append(name)
        return names


def _is_method(value: Any) -> bool:
    if isinstance(value, property):
        return False
    return isinstance(value, (staticmethod, classmethod)) or callable(value)
