"""Component container -- modules of already constructed component instances.

The explorer treats the container as read-only: it enumerates modules, then
the components of each module, and reads each component's ``instance``. It
never constructs anything. A component may have no instance (a provider that
was declared but not instantiated, or a value/factory provider); such
components are carried through enumeration and skipped later.

Modules can also be contributed by installed packages through the
``cmdexplorer.modules`` entry-point group::

    [project.entry-points."cmdexplorer.modules"]
    files = "my_package.commands:create_module"

Each entry point loads a zero-argument callable returning a :class:`Module`.
See :func:`load_modules`.
"""

from __future__ import annotations

import importlib.metadata
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

from cmdexplorer.exceptions import DiscoveryError

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "cmdexplorer.modules"
"""The default entry-point group name used for module discovery."""


@dataclass
class InstanceWrapper:
    """A named component and its live instance, if one has been constructed."""

    name: str
    instance: Any = None


@dataclass
class Module:
    """A named group of components.

    Components are kept in registration order; that order is what the
    explorer follows when it lists commands.
    """

    name: str
    components: dict[str, InstanceWrapper] = field(default_factory=dict)

    def add_component(self, instance: Any, name: Optional[str] = None) -> InstanceWrapper:
        """Register a constructed component under *name* (default: its class name).

        Raises:
            DiscoveryError: If a component with the same name is already
                registered in this module.
        """
        component_name = name or type(instance).__name__
        return self.add_provider(component_name, instance)

    def add_provider(self, name: str, instance: Any = None) -> InstanceWrapper:
        """Register a provider that may not have an instance yet."""
        if name in self.components:
            raise DiscoveryError(
                f"Component '{name}' is already registered in module '{self.name}'"
            )
        wrapper = InstanceWrapper(name=name, instance=instance)
        self.components[name] = wrapper
        return wrapper


class ModulesContainer:
    """Ordered mapping of module name to :class:`Module`.

    Example::

        container = ModulesContainer()
        files = container.add_module(Module("files"))
        files.add_component(FileCommands())
    """

    def __init__(self) -> None:
        self._modules: dict[str, Module] = {}

    def add_module(self, module: Module) -> Module:
        """Register *module*.

        Raises:
            DiscoveryError: If a module with the same name is already
                registered.
        """
        if module.name in self._modules:
            raise DiscoveryError(f"Module '{module.name}' is already registered")
        self._modules[module.name] = module
        return module

    def get_module(self, name: str) -> Module:
        """Return the module registered as *name*.

        Raises:
            DiscoveryError: If no such module is registered.
        """
        try:
            return self._modules[name]
        except KeyError:
            raise DiscoveryError(f"Module '{name}' is not registered") from None

    def values(self) -> Iterator[Module]:
        return iter(list(self._modules.values()))

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, name: object) -> bool:
        return name in self._modules


def load_modules(
    container: ModulesContainer,
    group: str = ENTRY_POINT_GROUP,
) -> list[str]:
    """Populate *container* from the entry points registered under *group*.

    Each entry point must load a callable returning a :class:`Module`.
    Entry points that fail to load, raise, or return something other than a
    :class:`Module` are logged as warnings and skipped so that one broken
    package does not hide every other command.

    Returns:
        The names of the modules that were added.
    """
    loaded: list[str] = []
    for ep in importlib.metadata.entry_points().select(group=group):
        try:
            factory: Callable[[], Any] = ep.load()
            module = factory()
            if not isinstance(module, Module):
                raise DiscoveryError(
                    f"entry point returned {type(module).__name__}, expected Module"
                )
            container.add_module(module)
            loaded.append(module.name)
            logger.debug("Loaded module '%s' from entry point '%s'", module.name, ep.name)
        except Exception as exc:
            logger.warning("Failed to load module entry point '%s': %s", ep.name, exc)
    return loaded
