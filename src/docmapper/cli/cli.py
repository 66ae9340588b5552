"""Typer CLI entrypoint for docmapper."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
from rich.console import Console
from rich.json import JSON
from rich.markup import escape
from rich.table import Table

from docmapper.cli.bootstrap import configure_logging, import_target, read_document
from docmapper.config import MapperConfigError, configure, load_mapper_config
from docmapper.errors import MapperError
from docmapper.schema import is_accessor_safe

app = typer.Typer(help="docmapper CLI")
_CONSOLE = Console()

_TARGET_HELP = "Mapped class as 'package.module:ClassName'."


def _type_label(type_: Any) -> str:
    if type_ is None:
        return "any"
    return getattr(type_, "__name__", None) or repr(type_)


def _fail(exc: Exception) -> NoReturn:
    _CONSOLE.print(f"[bold red]{escape(str(exc))}[/bold red]", soft_wrap=True)
    raise typer.Exit(code=1) from exc


@app.command("keys")
def keys_command(
    target: Annotated[str, typer.Argument(help=_TARGET_HELP)],
) -> None:
    """Print the declared keys of a mapped class.

    Args:
        target: Import path of the mapped class.

    Raises:
        Exit: With code 1 when the target cannot be resolved.
    """
    configure_logging()
    try:
        mapped = import_target(target)
    except MapperError as exc:
        _fail(exc)
    table = Table(title=mapped.__qualname__, show_header=True, header_style="bold cyan")
    table.add_column("Key", style="bold")
    table.add_column("Type")
    table.add_column("Options")
    table.add_column("Accessor")
    for declared in mapped.schema().all_keys():
        options = declared.options.model_dump(by_alias=True, exclude_defaults=True)
        table.add_row(
            declared.name,
            _type_label(declared.type),
            ", ".join(f"{name}={value!r}" for name, value in options.items()),
            "yes" if is_accessor_safe(declared.name) else "no",
        )
    for association in mapped.schema().associations():
        kind = "one" if association.is_singular() else "many"
        table.add_row(
            association.name, f"embeds_{kind}({association.target.__name__})", "", "yes"
        )
    _CONSOLE.print(table)


@app.command("rules")
def rules_command(
    target: Annotated[str, typer.Argument(help=_TARGET_HELP)],
) -> None:
    """Print the validation rules registered for a mapped class.

    Args:
        target: Import path of the mapped class.

    Raises:
        Exit: With code 1 when the target cannot be resolved.
    """
    configure_logging()
    try:
        mapped = import_target(target)
    except MapperError as exc:
        _fail(exc)
    rules = mapped.validation_rules()
    if not rules:
        _CONSOLE.print(f"[yellow]No validation rules for {mapped.__qualname__}.[/yellow]")
        return
    table = Table(title=mapped.__qualname__, show_header=True, header_style="bold cyan")
    table.add_column("Field", style="bold")
    table.add_column("Rule")
    table.add_column("Options")
    for rule in rules:
        table.add_row(
            rule.field,
            rule.kind.value,
            ", ".join(f"{name}={value!r}" for name, value in rule.options.items()),
        )
    _CONSOLE.print(table)


@app.command("load")
def load_command(
    target: Annotated[str, typer.Argument(help=_TARGET_HELP)],
    document_file: Annotated[
        Path,
        typer.Argument(file_okay=True, dir_okay=False, help="JSON/YAML document."),
    ],
    config_file: Annotated[
        Path | None,
        typer.Option(
            file_okay=True,
            dir_okay=False,
            help="Path to mapper config YAML/JSON file.",
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Log coercion details.")
    ] = False,
) -> None:
    """Load a document as a mapped class and print its re-serialized form.

    Args:
        target: Import path of the mapped class.
        document_file: Document to load.
        config_file: Optional mapper config override.
        verbose: Whether to log at debug level.

    Raises:
        Exit: With code 1 when config, target or document are invalid.
    """
    configure_logging(verbose=verbose)
    try:
        if config_file is not None:
            configure(load_mapper_config(config_file))
        mapped = import_target(target)
        document = read_document(document_file)
    except (MapperConfigError, MapperError) as exc:
        _fail(exc)
    instance = mapped.load(document)
    _CONSOLE.print(f"[bold]{type(instance).__qualname__}[/bold]")
    _CONSOLE.print(JSON(json.dumps(instance.as_document(), default=str)))
