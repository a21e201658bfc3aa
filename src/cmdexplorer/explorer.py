"""Turn decorated component methods into runnable command descriptors.

This is the core of cmdexplorer. Given a :class:`~cmdexplorer.container.ModulesContainer`
of already constructed components, :class:`CommandExplorer` produces one
:class:`~cmdexplorer.models.CommandModule` per method carrying
``@command`` metadata.

**Algorithm summary**

1. *Discover* -- flatten every component instance of every module, in
   container order. Nothing is filtered or constructed here.
2. *Extract* -- for each instance, list the method names of its class (own
   and inherited, each name once) and look up the metadata attached to the
   function object behind each name.
3. *Synthesize* -- for each method with metadata, bind it to the instance and
   build two functions:

   * ``builder(schema)`` registers every option and positional binding on
     the schema object and returns it;
   * ``handler(parsed_args)`` rebuilds the positional call arguments from
     the bindings' explicit indices and awaits the bound method.

Handler parameters are addressed by index rather than by name: each binding
carries the slot it fills, so the order in which options and positionals are
declared never has to match the method signature.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Iterator, Mapping, Optional, Sequence

from cmdexplorer.container import ModulesContainer
from cmdexplorer.exceptions import DuplicateIndexError
from cmdexplorer.metadata.registry import (
    COMMAND_HANDLER_METADATA,
    MetadataRegistry,
    default_registry,
)
from cmdexplorer.metadata.scanner import MetadataScanner
from cmdexplorer.models import (
    CommandCandidate,
    CommandMetadata,
    CommandModule,
    CommandParamItem,
    ExplorerConfig,
    ParamKind,
    ParsedArguments,
)

logger = logging.getLogger(__name__)

ParamBindings = Mapping[ParamKind, Sequence[CommandParamItem]]


class CommandExplorer:
    """Scans a component container for command handlers.

    Args:
        modules_container: The container holding the component instances.
        metadata_scanner: Method enumerator; a fresh
            :class:`~cmdexplorer.metadata.scanner.MetadataScanner` by default.
        registry: Metadata table to read from; the shared default registry
            unless given.
        config: Explorer configuration. Only ``duplicate_index`` is read here.

    Example::

        explorer = CommandExplorer(container)
        for cmd in explorer.explore():
            print(cmd.command, cmd.describe)
    """

    def __init__(
        self,
        modules_container: ModulesContainer,
        metadata_scanner: Optional[MetadataScanner] = None,
        registry: Optional[MetadataRegistry] = None,
        config: Optional[ExplorerConfig] = None,
    ) -> None:
        self._container = modules_container
        self._scanner = metadata_scanner or MetadataScanner()
        self._registry = registry or default_registry
        self._config = config or ExplorerConfig()

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def explore(self) -> list[CommandModule]:
        """Run discovery, extraction and synthesis over the whole container.

        Returns:
            Every synthesized command, ordered by module, then component,
            then method enumeration order.

        Raises:
            DuplicateIndexError: If a command binds two parameters to the
                same index and the ``duplicate_index`` policy is ``"error"``.
        """
        commands: list[CommandModule] = []
        for instance in self.discover():
            commands.extend(self.filter_commands(instance))
        logger.debug("Explored %d command(s)", len(commands))
        return commands

    def discover(self) -> list[Any]:
        """Return every component instance in container order, unfiltered.

        Components without an instance contribute ``None``.
        """
        return [
            wrapper.instance
            for module in self._container.values()
            for wrapper in module.components.values()
        ]

    def filter_commands(self, instance: Any) -> list[CommandModule]:
        """Extract and synthesize the commands of a single instance."""
        if instance is None:
            return []
        return self.synthesize(instance, self.extract(instance))

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def extract(self, instance: Any) -> list[CommandCandidate]:
        """Return one candidate per method name of *instance*'s class.

        Methods without metadata are included with ``metadata=None``.
        """
        if instance is None:
            return []
        prototype = type(instance)
        return self._scanner.scan_from_prototype(
            instance,
            prototype,
            lambda name: self.extract_metadata(instance, prototype, name),
        )

    def extract_metadata(
        self, instance: Any, prototype: type, method_name: str
    ) -> CommandCandidate:
        """Look up the metadata attached to ``prototype.method_name``.

        The lookup is keyed by the function object, so it reflects the
        most-derived definition of the name.
        """
        callback = inspect.getattr_static(prototype, method_name, None)
        metadata: Optional[CommandMetadata] = self._registry.get(
            COMMAND_HANDLER_METADATA, callback
        )
        return CommandCandidate(method_name=method_name, metadata=metadata)

    # ------------------------------------------------------------------
    # Synthesis
    # ------------------------------------------------------------------

    def synthesize(
        self, instance: Any, candidates: Sequence[CommandCandidate]
    ) -> list[CommandModule]:
        """Build a :class:`~cmdexplorer.models.CommandModule` per candidate with metadata."""
        return [
            self._create_command(instance, candidate)
            for candidate in candidates
            if candidate.metadata is not None
        ]

    def _create_command(
        self, instance: Any, candidate: CommandCandidate
    ) -> CommandModule:
        metadata = candidate.metadata
        assert metadata is not None
        option = metadata.option
        params = metadata.params

        self._check_indices(option.command, params)

        # Bind through the class so later instance attribute changes
        # cannot replace the handler.
        prototype = type(instance)
        exec_ = inspect.getattr_static(prototype, candidate.method_name).__get__(
            instance, prototype
        )
        defaults = _positional_defaults(exec_)

        def builder(schema: Any) -> Any:
            return self.generate_command_builder(params, schema)

        async def handler(args: ParsedArguments) -> None:
            call_args = self.generate_command_handler_params(params, args, defaults)
            result = exec_(*call_args)
            if inspect.isawaitable(result):
                await result

        logger.debug(
            "Discovered command '%s' -> %s.%s",
            option.command,
            prototype.__name__,
            candidate.method_name,
        )
        return CommandModule(
            command=option.command,
            describe=option.describe,
            aliases=list(option.aliases),
            deprecated=option.deprecated,
            hidden=option.hidden,
            epilog=option.epilog,
            extra=dict(option.model_extra or {}),
            builder=builder,
            handler=handler,
        )

    def _check_indices(self, command: str, params: ParamBindings) -> None:
        """Apply the ``duplicate_index`` policy to *params*."""
        policy = self._config.duplicate_index
        if policy == "overwrite":
            return
        seen: set[int] = set()
        for item, _ in self.iterate_param_metadata(params):
            if item.index in seen:
                if policy == "error":
                    raise DuplicateIndexError(command, item.index)
                logger.warning(
                    "Command '%s' binds more than one parameter to index %d; "
                    "the last binding wins",
                    command,
                    item.index,
                )
            seen.add(item.index)

    # ------------------------------------------------------------------
    # Parameter marshalling
    # ------------------------------------------------------------------

    def iterate_param_metadata(
        self, params: Optional[ParamBindings]
    ) -> Iterator[tuple[CommandParamItem, ParamKind]]:
        """Yield ``(item, kind)`` pairs in mapping order, then entry order."""
        if not params:
            return
        for kind, items in params.items():
            if not items or not isinstance(items, (list, tuple)):
                continue
            for item in items:
                yield item, kind

    def generate_command_builder(self, params: Optional[ParamBindings], schema: Any) -> Any:
        """Register the option and positional bindings of *params* on *schema*.

        ``ARGV`` bindings and unknown kinds register nothing.

        Returns:
            The same *schema* object.
        """
        for item, kind in self.iterate_param_metadata(params):
            if kind == ParamKind.OPTION and item.option is not None:
                schema.option(item.option.name, item.option)
            elif kind == ParamKind.POSITIONAL and item.option is not None:
                schema.positional(item.option.name, item.option)
        return schema

    def generate_command_handler_params(
        self,
        params: Optional[ParamBindings],
        argv: ParsedArguments,
        defaults: Sequence[Any] = (),
    ) -> list[Any]:
        """Build the positional call arguments for a handler invocation.

        The list is sized to the highest bound index. Slots that no binding
        fills, and slots whose name is missing from *argv*, take the handler
        parameter's default (``None`` when it has none). When two bindings
        share an index the later one wins.

        Args:
            params: The command's parameter bindings.
            argv: Parsed command-line values keyed by declared names.
            defaults: Default value of each handler parameter by position.
        """
        entries = list(self.iterate_param_metadata(params))
        size = max((item.index for item, _ in entries), default=-1) + 1
        call_args = [defaults[i] if i < len(defaults) else None for i in range(size)]

        for item, kind in entries:
            if kind in (ParamKind.OPTION, ParamKind.POSITIONAL) and item.option is not None:
                if item.option.name in argv:
                    call_args[item.index] = argv[item.option.name]
            elif kind == ParamKind.ARGV:
                call_args[item.index] = argv

        return call_args


def _positional_defaults(func: Any) -> list[Any]:
    """Return the default of each positional parameter of *func*, ``None`` if absent."""
    try:
        parameters = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return []
    defaults: list[Any] = []
    for parameter in parameters:
        if parameter.kind not in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            break
        defaults.append(
            None if parameter.default is inspect.Parameter.empty else parameter.default
        )
    return defaults
