"""cmdexplorer -- Turn decorated component methods into CLI commands.

Methods on components held by an application's object container are marked
with ``@command`` and bound to CLI values with ``@option``, ``@positional``
and ``@argv``. The explorer scans the container, and each marked method
becomes a command whose handler receives its arguments in the right order,
whatever order the options were declared in.

Typical workflow::

    from cmdexplorer.app import run
    from cmdexplorer.container import Module, ModulesContainer
    from cmdexplorer.metadata import command, option, positional

    class Greeter:
        @command("greet", describe="Say hello")
        @option("shout", type="boolean")
        @positional("who")
        def greet(self, shout, who):
            print(f"HELLO {who.upper()}" if shout else f"hello {who}")

    container = ModulesContainer()
    container.add_module(Module("main")).add_component(Greeter())
    run(container)

Modules:
    app: Typer application factory and CLI entry point.
    explorer: Discovery, metadata extraction and command synthesis.
    container: Modules and component instances scanned for commands.
    metadata: Decorators, metadata table and method enumeration.
    generator: Registration of synthesized commands on a Typer app.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
