"""Option schema that command builders register their parameters against.

:class:`CommandSchema` is the object handed to every
:attr:`~cmdexplorer.models.CommandModule.builder`. Builders call
:meth:`CommandSchema.option` and :meth:`CommandSchema.positional`; the CLI
runner then turns the recorded entries into Typer parameters.

**Mapping rules:**

* **Options** become ``--name`` flags via :func:`typer.Option`. Extra
  spellings from ``aliases`` are added as further declarations (``"f"``
  becomes ``-f``, ``"dry"`` becomes ``--dry``). Required options use ``...``
  (Typer's "required" sentinel). Boolean options are plain flags.
* **Positionals** become :func:`typer.Argument` values, required unless the
  config says otherwise.
* **Types** are mapped to Python annotations: ``string`` to ``str``,
  ``integer`` to ``int``, ``number`` to ``float``, ``boolean`` to ``bool``,
  ``array`` to ``list[str]``. Parsing and conversion are left to Click.
* **Names** are sanitised to valid Python identifiers via
  :func:`sanitize_param_name`; :meth:`CommandSchema.dest_map` maps them back
  to the declared names.
"""

from __future__ import annotations

import inspect
import keyword
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

import click
import typer

from cmdexplorer.exceptions import CommandDefinitionError
from cmdexplorer.models import OptionConfig, ParamKind, PositionalConfig


# ---------------------------------------------------------------------------
# Type mapping
# ---------------------------------------------------------------------------

_TYPE_MAP: dict[str, Any] = {
    "string": str,
    "integer": int,
    "number": float,
    "boolean": bool,
    "array": list[str],
}


def config_type_to_python(config_type: Optional[str]) -> Any:
    """Map a declared option type to a Python annotation.

    Example::

        >>> config_type_to_python("integer")
        <class 'int'>
        >>> config_type_to_python("unknown")
        <class 'str'>
    """
    return _TYPE_MAP.get(config_type or "string", str)


# ---------------------------------------------------------------------------
# Name sanitisation
# ---------------------------------------------------------------------------

# Matches any character that is not alphanumeric or underscore.
_INVALID_IDENT_RE = re.compile(r"[^a-zA-Z0-9_]")


def sanitize_param_name(name: str) -> str:
    """Convert a declared option or positional name to a valid Python identifier.

    1. Leading dashes are dropped and the string is lowercased.
    2. Hyphens, dots and any other invalid characters become underscores.
    3. Consecutive and leading/trailing underscores are collapsed.
    4. An empty result defaults to ``"param"``.
    5. A leading digit gets an underscore prefix.
    6. Python keywords get a trailing underscore (``"from"`` -> ``"from_"``).

    Example::

        >>> sanitize_param_name("dry-run")
        'dry_run'
        >>> sanitize_param_name("class")
        'class_'
    """
    result = name.lstrip("-").lower()
    result = _INVALID_IDENT_RE.sub("_", result)
    result = re.sub(r"_+", "_", result).strip("_")
    if not result:
        result = "param"
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result):
        result = f"{result}_"
    return result


def _flag_declarations(name: str, aliases: list[str]) -> list[str]:
    decls = [f"--{name.lstrip('-')}"]
    for alias in aliases:
        if alias.startswith("-"):
            decls.append(alias)
        elif len(alias) == 1:
            decls.append(f"-{alias}")
        else:
            decls.append(f"--{alias}")
    return decls


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SchemaEntry:
    """One registration made against a :class:`CommandSchema`."""

    kind: ParamKind
    name: str
    config: Union[OptionConfig, PositionalConfig]


class CommandSchema:
    """Collects the options and positionals of one command.

    Registration methods return the schema itself so builders can chain
    calls the way they would against a fluent parser API::

        schema.option("force", OptionConfig(name="force", type="boolean"))
              .positional("target", PositionalConfig(name="target"))
    """

    def __init__(self) -> None:
        self._entries: list[SchemaEntry] = []

    @property
    def entries(self) -> list[SchemaEntry]:
        return list(self._entries)

    def option(self, name: str, config: Optional[OptionConfig] = None) -> CommandSchema:
        """Register a ``--name`` option."""
        self._entries.append(
            SchemaEntry(ParamKind.OPTION, name, config or OptionConfig(name=name))
        )
        return self

    def positional(
        self, name: str, config: Optional[PositionalConfig] = None
    ) -> CommandSchema:
        """Register a positional argument."""
        self._entries.append(
            SchemaEntry(ParamKind.POSITIONAL, name, config or PositionalConfig(name=name))
        )
        return self

    def dest_map(self) -> dict[str, str]:
        """Map each Python identifier back to the declared name it came from."""
        return {sanitize_param_name(e.name): e.name for e in self._entries}

    def parameters(self) -> list[inspect.Parameter]:
        """Return Typer-ready keyword-only parameters, positionals first.

        Positionals keep their registration order so they are consumed from
        the command line in that order.

        Raises:
            CommandDefinitionError: If two registered names map to the same
                Python identifier.
        """
        ordered = [e for e in self._entries if e.kind == ParamKind.POSITIONAL] + [
            e for e in self._entries if e.kind == ParamKind.OPTION
        ]
        parameters: list[inspect.Parameter] = []
        seen: dict[str, str] = {}
        for entry in ordered:
            py_name = sanitize_param_name(entry.name)
            if py_name in seen:
                raise CommandDefinitionError(
                    f"Parameters '{seen[py_name]}' and '{entry.name}' both map "
                    f"to the identifier '{py_name}'"
                )
            seen[py_name] = entry.name
            if entry.kind == ParamKind.POSITIONAL:
                annotation, default = _map_positional(entry.name, entry.config)
            else:
                annotation, default = _map_option(entry.name, entry.config)
            parameters.append(
                inspect.Parameter(
                    py_name,
                    inspect.Parameter.KEYWORD_ONLY,
                    default=default,
                    annotation=annotation,
                )
            )
        return parameters


# ---------------------------------------------------------------------------
# Parameter mapping
# ---------------------------------------------------------------------------


def _map_option(name: str, config: Any) -> tuple[Any, Any]:
    """Return ``(annotation, typer.Option)`` for an option entry."""
    py_type = config_type_to_python(getattr(config, "type", None))
    decls = _flag_declarations(name, list(getattr(config, "aliases", None) or []))
    help_text = getattr(config, "help", None) or None
    choices = getattr(config, "choices", None)
    fallback = getattr(config, "default", None)

    extra: dict[str, Any] = {
        "help": help_text,
        "hidden": bool(getattr(config, "hidden", False)),
        "envvar": getattr(config, "envvar", None),
    }
    if choices:
        extra["click_type"] = click.Choice([str(c) for c in choices])

    if py_type is bool:
        return bool, typer.Option(bool(fallback), *decls, **extra)
    if getattr(config, "required", False):
        return py_type, typer.Option(..., *decls, **extra)
    if fallback is None:
        py_type = Optional[py_type]
    return py_type, typer.Option(fallback, *decls, **extra)


def _map_positional(name: str, config: Any) -> tuple[Any, Any]:
    """Return ``(annotation, typer.Argument)`` for a positional entry."""
    py_type = config_type_to_python(getattr(config, "type", None))
    help_text = getattr(config, "help", None) or None
    metavar = name.upper()

    if getattr(config, "required", True):
        return py_type, typer.Argument(..., help=help_text, metavar=metavar)
    fallback = getattr(config, "default", None)
    if fallback is None:
        py_type = Optional[py_type]
    return py_type, typer.Argument(fallback, help=help_text, metavar=metavar)
