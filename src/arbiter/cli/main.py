"""Arbiter CLI - Runtime overload resolution tool.

This module provides the command-line interface for Arbiter, enabling
overload resolution, accessibility and override lookups, annotation scans and
validation over a JSON type universe file.
"""

from __future__ import annotations

import json
import logging
import traceback
from dataclasses import asdict
from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from arbiter.core.typesystem import format_type

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="arbiter",
    help="Runtime overload resolution over a declared type lattice",
    no_args_is_help=True,
)

# Rich console for formatted output
console = Console()
err_console = Console(stderr=True)

# Global verbose flag
_verbose: bool = False

UniverseArg = Annotated[
    Path,
    typer.Argument(
        help="Path to the type universe JSON file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
]
TypeArg = Annotated[str, typer.Argument(help="Qualified type name")]
MethodArg = Annotated[str, typer.Argument(help="Method name")]
ParamsArg = Annotated[
    Optional[list[str]],
    typer.Argument(help="Parameter types, e.g. int java.lang.String..."),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Output machine-readable JSON"),
]


def set_verbose(verbose: bool) -> None:
    """Set global verbose mode."""
    global _verbose
    _verbose = verbose


def is_verbose() -> bool:
    """Check if verbose mode is enabled."""
    return _verbose


def print_exception(e: Exception) -> None:
    """Print exception details in verbose mode."""
    if _verbose:
        err_console.print("\n[dim]--- Traceback (verbose mode) ---[/dim]")
        err_console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")


def configure_logging(verbose: bool) -> None:
    """Route library logging to stderr through rich."""
    from arbiter.core.config import get_config

    level = logging.DEBUG if verbose else get_config().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output with full tracebacks"),
    ] = False,
) -> None:
    """Arbiter CLI - Runtime overload resolution."""
    set_verbose(verbose)
    configure_logging(verbose)


def load_client(universe: Path):
    """Load a type universe with error handling."""
    from arbiter.client import ArbiterClient
    from arbiter.core.serializer import SerializationError

    try:
        return ArbiterClient.from_file(universe)
    except SerializationError as e:
        err_console.print(f"[red]Error:[/red] {escape(e.message)}")
        if e.details:
            err_console.print(f"  {escape(e.details)}")
        print_exception(e)
        raise typer.Exit(1)


def fail(e: Exception) -> typer.Exit:
    """Report a library error and build the exit to raise."""
    from arbiter.core.errors import AmbiguousMethodError

    err_console.print(f"[red]Error:[/red] {escape(str(e))}")
    if isinstance(e, AmbiguousMethodError):
        for match in e.matches:
            err_console.print(f"  [yellow]-[/yellow] {escape(str(match))}")
    print_exception(e)
    return typer.Exit(1)


def signature_to_dict(method) -> dict[str, object]:
    """JSON view of a MethodSignature."""
    params = method.parameters
    return {
        "declaring_type": method.declaring_type,
        "name": method.name,
        "parameters": [
            format_type(tag, params.varargs and index == len(params) - 1)
            for index, tag in enumerate(params.types)
        ],
        "visibility": method.visibility.value,
        "static": method.is_static,
        "signature": str(method),
    }


@app.command()
def resolve(
    universe: UniverseArg,
    type_name: TypeArg,
    method: MethodArg,
    args: Annotated[
        Optional[list[str]],
        typer.Argument(help="Arguments as type:value (int:1, String:a, int[]:1,2) or null"),
    ] = None,
    static: Annotated[
        bool,
        typer.Option("--static", help="Resolve among static methods only"),
    ] = False,
    exact: Annotated[
        bool,
        typer.Option("--exact", help="Accept only exact parameter type matches"),
    ] = False,
    json_output: JsonOption = False,
) -> None:
    """Resolve which overload a call with the given arguments runs.

    Example:
        arbiter resolve universe.json com.example.Bean foo int:1 String:a
        arbiter resolve universe.json com.example.Util parse String:42 --static
    """
    from arbiter.core.errors import ArbiterError
    from arbiter.core.values import parse_argument

    client = load_client(universe)
    service = client.methods
    try:
        arguments = [parse_argument(text) for text in args or []]
        if static:
            lookup = service.resolve_exact_static_method if exact else service.resolve_static_method
        else:
            lookup = service.resolve_exact_instance_method if exact else service.resolve_instance_method
        result = lookup(type_name, method, arguments)
    except ArbiterError as e:
        raise fail(e)

    if json_output:
        typer.echo(json.dumps(signature_to_dict(result), ensure_ascii=False, indent=2))
        return
    console.print(f"[green]✓[/green] {escape(str(result))}")


@app.command()
def mirror(
    universe: UniverseArg,
    type_name: TypeArg,
    method: MethodArg,
    params: ParamsArg = None,
    json_output: JsonOption = False,
) -> None:
    """Find the publicly callable declaration of a method.

    Example:
        arbiter mirror universe.json com.example.HiddenImpl run int
    """
    from arbiter.core.errors import ArbiterError

    client = load_client(universe)
    service = client.methods
    try:
        declared = service.find_method(type_name, method, params or [])
        if declared is None:
            err_console.print(
                f"[red]Error:[/red] {escape(type_name)} has no method "
                f"{escape(method)}({escape(', '.join(params or []))})"
            )
            raise typer.Exit(1)
        result = service.accessible_mirror(declared)
    except ArbiterError as e:
        raise fail(e)

    if result is None:
        console.print(f"[yellow]![/yellow] {escape(str(declared))} is not accessible from outside")
        raise typer.Exit(1)
    if json_output:
        typer.echo(json.dumps(signature_to_dict(result), ensure_ascii=False, indent=2))
        return
    console.print(f"[green]✓[/green] {escape(str(result))}")


@app.command()
def hierarchy(
    universe: UniverseArg,
    type_name: TypeArg,
    method: MethodArg,
    params: ParamsArg = None,
    no_interfaces: Annotated[
        bool,
        typer.Option("--no-interfaces", help="Follow the superclass chain only"),
    ] = False,
    json_output: JsonOption = False,
) -> None:
    """List a method and every declaration it overrides, most derived first.

    Example:
        arbiter hierarchy universe.json com.example.Child consume java.lang.String
    """
    from arbiter.core.errors import ArbiterError
    from arbiter.cli._tables import build_signatures_table

    client = load_client(universe)
    service = client.methods
    try:
        declared = service.find_method(type_name, method, params or [])
        if declared is None:
            err_console.print(f"[red]Error:[/red] {escape(type_name)} has no method {escape(method)}")
            raise typer.Exit(1)
        chain = list(service.override_hierarchy(declared, include_interfaces=not no_interfaces))
    except ArbiterError as e:
        raise fail(e)

    if json_output:
        typer.echo(
            json.dumps([signature_to_dict(m) for m in chain], ensure_ascii=False, indent=2)
        )
        return
    console.print(build_signatures_table(chain, title=f"Override chain of {declared.short_form}"))


@app.command()
def annotated(
    universe: UniverseArg,
    type_name: TypeArg,
    marker: Annotated[str, typer.Argument(help="Annotation marker name")],
    json_output: JsonOption = False,
) -> None:
    """List the methods of a type that carry an annotation.

    Example:
        arbiter annotated universe.json com.example.Service Deprecated
    """
    from arbiter.core.errors import ArbiterError
    from arbiter.cli._tables import build_signatures_table

    client = load_client(universe)
    try:
        methods = client.methods.methods_list_with_annotation(type_name, marker)
    except ArbiterError as e:
        raise fail(e)

    if json_output:
        typer.echo(
            json.dumps([signature_to_dict(m) for m in methods], ensure_ascii=False, indent=2)
        )
        return
    if not methods:
        console.print(f"[dim]No methods of {escape(type_name)} carry @{escape(marker)}[/dim]")
        return
    console.print(build_signatures_table(methods, title=f"@{marker}"))


@app.command()
def validate(
    universe: UniverseArg,
    json_output: JsonOption = False,
) -> None:
    """Check a type universe for dangling references, cycles and duplicates.

    Example:
        arbiter validate universe.json
    """
    from arbiter.cli._tables import build_validation_table

    client = load_client(universe)
    result = client.validate()

    if json_output:
        typer.echo(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    elif result.is_valid:
        count = len(client.registry.user_types())
        console.print(f"[green]✓[/green] Type universe is valid ({count} types)")
    else:
        console.print(build_validation_table(result.errors))
    if not result.is_valid:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
