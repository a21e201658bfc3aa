"""Command metadata -- decorators, the metadata table, and method enumeration.

Typical usage::

    from cmdexplorer.metadata import command, option, positional

    class Greeter:
        @command("greet", describe="Say hello")
        @option("shout", type="boolean", default=False)
        @positional("who")
        def greet(self, shout, who):
            ...

Sub-modules:

* :mod:`~cmdexplorer.metadata.decorators` -- ``@command``, ``@option``,
  ``@positional`` and ``@argv``.
* :mod:`~cmdexplorer.metadata.registry` -- The out-of-band table mapping
  function objects to their metadata records.
* :mod:`~cmdexplorer.metadata.scanner` -- De-duplicated enumeration of the
  methods a class exposes through its MRO.
"""

from cmdexplorer.metadata.decorators import argv, command, option, positional
from cmdexplorer.metadata.registry import (
    COMMAND_ARGS_METADATA,
    COMMAND_HANDLER_METADATA,
    MetadataRegistry,
    default_registry,
    define_metadata,
    get_metadata,
)
from cmdexplorer.metadata.scanner import MetadataScanner

__all__ = [
    "COMMAND_ARGS_METADATA",
    "COMMAND_HANDLER_METADATA",
    "MetadataRegistry",
    "MetadataScanner",
    "argv",
    "command",
    "default_registry",
    "define_metadata",
    "get_metadata",
    "option",
    "positional",
]
