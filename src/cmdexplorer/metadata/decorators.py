"""Decorators that declare command handlers and their parameter bindings.

The decorators attach metadata to the method's function object through the
:mod:`~cmdexplorer.metadata.registry`; they never wrap or replace the method
itself, so a decorated class behaves exactly like an undecorated one.

Example::

    class FileCommands:
        @command("copy", describe="Copy a file", aliases=["cp"])
        @option("force", type="boolean", default=False)
        @positional("source")
        @positional("target", required=False)
        @argv()
        async def copy(self, force, source, target=None, argv=None):
            ...

Each binding records the zero-based index of the handler parameter it fills
(``self`` excluded). The index is resolved from the parameter name when not
given explicitly: ``param`` if passed, otherwise the option name with ``-``
replaced by ``_``.

Bindings may be applied above or below ``@command``; entries are stored in
top-to-bottom source order, grouped by :class:`~cmdexplorer.models.ParamKind`.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Optional, TypeVar, Union

from pydantic import ValidationError

from cmdexplorer.exceptions import CommandDefinitionError
from cmdexplorer.metadata.registry import (
    COMMAND_ARGS_METADATA,
    COMMAND_HANDLER_METADATA,
    MetadataRegistry,
    default_registry,
)
from cmdexplorer.models import (
    CommandMetadata,
    CommandOption,
    CommandParamItem,
    OptionConfig,
    ParamKind,
    PositionalConfig,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

ParamBindings = dict[ParamKind, list[CommandParamItem]]


# ---------------------------------------------------------------------------
# @command
# ---------------------------------------------------------------------------


def command(
    name: Optional[str] = None,
    *,
    describe: Optional[str] = None,
    aliases: Optional[list[str]] = None,
    deprecated: bool = False,
    hidden: bool = False,
    epilog: Optional[str] = None,
    registry: Optional[MetadataRegistry] = None,
    **extra: Any,
) -> Callable[[F], F]:
    """Mark a method as a CLI command handler.

    Args:
        name: Command name. Defaults to the method name with ``_`` replaced
            by ``-``.
        describe: Help text. Defaults to the first non-empty docstring line.
        aliases: Alternative command names.
        deprecated: Mark the command as deprecated in help output.
        hidden: Hide the command from help output.
        epilog: Text shown after the command's help.
        registry: Metadata registry to write to. Defaults to the shared
            :data:`~cmdexplorer.metadata.registry.default_registry`.
        **extra: Additional fields preserved on the command option and
            merged into the synthesized command.

    Returns:
        A decorator returning the method unchanged.
    """
    reg = registry or default_registry

    def decorator(func: F) -> F:
        target = _function_of(func)
        try:
            command_option = CommandOption(
                command=name or target.__name__.replace("_", "-"),
                describe=describe if describe is not None else _extract_help(target),
                aliases=aliases or [],
                deprecated=deprecated,
                hidden=hidden,
                epilog=epilog,
                **extra,
            )
        except ValidationError as exc:
            raise CommandDefinitionError(
                f"Invalid command declaration on '{target.__qualname__}': {exc}"
            ) from exc

        params: ParamBindings = reg.get(COMMAND_ARGS_METADATA, target) or {}
        reg.define(
            COMMAND_HANDLER_METADATA,
            target,
            CommandMetadata(option=command_option, params=params),
        )
        logger.debug("Declared command '%s' on %s", command_option.command, target.__qualname__)
        return func

    return decorator


# ---------------------------------------------------------------------------
# Parameter bindings
# ---------------------------------------------------------------------------


def option(
    name: str,
    *,
    index: Optional[int] = None,
    param: Optional[str] = None,
    registry: Optional[MetadataRegistry] = None,
    **config: Any,
) -> Callable[[F], F]:
    """Bind a ``--name`` option to a handler parameter.

    Args:
        name: Flag name without leading dashes.
        index: Zero-based handler parameter index (``self`` excluded).
        param: Handler parameter name used to resolve the index.
        registry: Metadata registry to write to.
        **config: Remaining :class:`~cmdexplorer.models.OptionConfig` fields
            (``type``, ``default``, ``required``, ``help``, ...).

    Raises:
        CommandDefinitionError: If the config is invalid, or a boolean
            option is declared required.
    """
    option_config = _build_config(OptionConfig, name, config)
    if option_config.type == "boolean" and option_config.required:
        raise CommandDefinitionError(f"Boolean option '{name}' cannot be required")
    return _binding(
        ParamKind.OPTION, option_config, index, param, registry, _param_name(name)
    )


def positional(
    name: str,
    *,
    index: Optional[int] = None,
    param: Optional[str] = None,
    registry: Optional[MetadataRegistry] = None,
    **config: Any,
) -> Callable[[F], F]:
    """Bind a positional argument to a handler parameter.

    Accepts the same arguments as :func:`option`, with
    :class:`~cmdexplorer.models.PositionalConfig` fields in ``config``.
    """
    positional_config = _build_config(PositionalConfig, name, config)
    return _binding(
        ParamKind.POSITIONAL, positional_config, index, param, registry, _param_name(name)
    )


def argv(
    *,
    index: Optional[int] = None,
    param: Optional[str] = None,
    registry: Optional[MetadataRegistry] = None,
) -> Callable[[F], F]:
    """Pass the whole parsed-arguments mapping to a handler parameter.

    The parameter is located by *index*, or by name (``param``, default
    ``"argv"``).
    """
    return _binding(ParamKind.ARGV, None, index, param, registry, "argv")


def _binding(
    kind: ParamKind,
    config: Optional[Union[OptionConfig, PositionalConfig]],
    index: Optional[int],
    param: Optional[str],
    registry: Optional[MetadataRegistry],
    default_param: str,
) -> Callable[[F], F]:
    reg = registry or default_registry

    def decorator(func: F) -> F:
        target = _function_of(func)
        resolved = _resolve_index(func, index, param, default_param)
        item = CommandParamItem(index=resolved, option=config)

        pending: ParamBindings = {
            k: list(v) for k, v in (reg.get(COMMAND_ARGS_METADATA, target) or {}).items()
        }
        # Decorators run bottom-up; prepend to keep source order.
        pending.setdefault(kind, []).insert(0, item)
        params = {k: pending[k] for k in ParamKind if k in pending}
        reg.define(COMMAND_ARGS_METADATA, target, params)

        # Applied above @command: refresh the already attached record.
        existing: Optional[CommandMetadata] = reg.get(COMMAND_HANDLER_METADATA, target)
        if existing is not None:
            reg.define(
                COMMAND_HANDLER_METADATA,
                target,
                CommandMetadata(option=existing.option, params=params),
            )
        return func

    return decorator


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _build_config(model: type, name: str, config: dict[str, Any]) -> Any:
    try:
        return model(name=name, **config)
    except ValidationError as exc:
        raise CommandDefinitionError(f"Invalid configuration for '{name}': {exc}") from exc


def _param_name(option_name: str) -> str:
    return option_name.lstrip("-").replace("-", "_")


def _function_of(func: Any) -> Callable[..., Any]:
    if isinstance(func, (staticmethod, classmethod)):
        return func.__func__
    return func


def _resolve_index(
    func: Any,
    index: Optional[int],
    param: Optional[str],
    default_param: str,
) -> int:
    """Return the handler parameter index a binding targets.

    Raises:
        CommandDefinitionError: If both *index* and *param* are given, the
            index is negative, or the named parameter cannot be reached by a
            positional call.
    """
    target = _function_of(func)
    if index is not None:
        if param is not None:
            raise CommandDefinitionError(
                f"'{target.__qualname__}': pass either index or param, not both"
            )
        if index < 0:
            raise CommandDefinitionError(
                f"'{target.__qualname__}': parameter index must be >= 0, got {index}"
            )
        return index

    name = param or default_param
    parameters = list(inspect.signature(target).parameters.values())
    if not isinstance(func, staticmethod):
        # Drop self / cls.
        parameters = parameters[1:]

    for position, parameter in enumerate(parameters):
        if parameter.name != name:
            continue
        if parameter.kind not in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            raise CommandDefinitionError(
                f"'{target.__qualname__}': parameter '{name}' must accept "
                "positional arguments"
            )
        return position

    raise CommandDefinitionError(
        f"'{target.__qualname__}' has no parameter named '{name}'"
    )


def _extract_help(func: Callable[..., Any]) -> str:
    """Extract short help text from function docstring."""
    if not func.__doc__:
        return ""

    for line in func.__doc__.strip().split("\n"):
        stripped = line.strip()
        if stripped:
            return stripped
    return ""
