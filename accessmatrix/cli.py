"""CLI entry point for AccessMatrix."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from rich import print as rprint
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from accessmatrix.log import setup_logging
from accessmatrix.matrix_file import load_cases
from accessmatrix.stacks import YamlStackBackend
from accessmatrix_core.config import AccessMatrixConfig, load_config
from accessmatrix_core.config.loader import DEFAULT_CONFIG_TEMPLATE
from accessmatrix_core.deferred import Deferred, resolve_value
from accessmatrix_core.errors import AccessMatrixError
from accessmatrix_core.interfaces import BindingOperation
from accessmatrix_core.matrix import (
    AccessMatrix,
    ConfigResolver,
    PolicyRuleProcessor,
    build_processor,
    validate_access_matrix_cases,
)
from accessmatrix_core.plugins import PluginLoader
from accessmatrix_core.reference import RESOURCE_TYPE_ALIASES, SERVICE_ACCOUNT_ALIASES

app = typer.Typer(
    name="accessmatrix",
    help="Plan IAM bindings from a declarative access matrix.",
)

config_app = typer.Typer(help="Manage AccessMatrix configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: AccessMatrixConfig | None = None

DEFERRED_PLACEHOLDER = "<deferred>"


def _get_config() -> AccessMatrixConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to accessmatrix.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    setup_logging(_config.log_level, _config.log_format)


def _processor(cfg: AccessMatrixConfig, stacks_dir: str | None) -> PolicyRuleProcessor:
    backend = YamlStackBackend(stacks_dir or cfg.reference.state_dir)
    processor = build_processor(cfg, backend)
    PluginLoader(cfg).install(processor.resources, processor.builders, processor.principals)
    return processor


def _display_value(value: Any, resolve: bool) -> str:
    if isinstance(value, Deferred):
        return str(resolve_value(value)) if resolve else DEFERRED_PLACEHOLDER
    return str(value)


def _binding_row(op: BindingOperation, resolve: bool) -> dict[str, Any]:
    return {
        "name": op.name,
        "kind": op.kind,
        "resource_type": op.resource_type,
        "role": _display_value(op.role, resolve),
        "member": _display_value(op.member, resolve),
        "args": {k: _display_value(v, resolve) for k, v in op.args.items()},
    }


@app.command()
def plan(
    matrix_file: str = typer.Argument(..., help="Path to the access matrix YAML file"),
    stacks: str | None = typer.Option(
        None, "--stacks", help="Directory of stack outputs (<org>/<project>/<env>.yaml)"
    ),
    resolve: bool = typer.Option(
        False, "--resolve", help="Resolve deferred members and roles from stack outputs"
    ),
    format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: table or json")
    ] = "table",
) -> None:
    """Build the IAM bindings an access matrix would create."""
    cfg = _get_config()

    try:
        cases = load_cases(matrix_file)
        processor = _processor(cfg, stacks)
        resolver = ConfigResolver(cfg.access_matrix.principals, cfg.access_matrix)
        matrix = AccessMatrix(cases, processor, resolver, cfg.access_matrix)
        rows = [_binding_row(op, resolve) for op in matrix.bindings]
    except (AccessMatrixError, ValueError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if format == "json":
        typer.echo(json.dumps(rows, indent=2))
        return

    if not rows:
        rprint("[yellow]No bindings produced.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"IAM Bindings ({len(rows)})")
    table.add_column("Name", style="cyan")
    table.add_column("Binding", style="green")
    table.add_column("Role")
    table.add_column("Member", style="yellow")
    for row in rows:
        table.add_row(
            row["name"], row["kind"].rsplit(":", 1)[-1], row["role"], row["member"]
        )
    rprint(table)


@app.command()
def validate(
    matrix_file: str = typer.Argument(..., help="Path to the access matrix YAML file"),
    format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: table or json")
    ] = "table",
) -> None:
    """Check the structure of an access matrix without building anything."""
    cfg = _get_config()

    try:
        cases = load_cases(matrix_file)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    result = validate_access_matrix_cases(cases, cfg.validation)

    if format == "json":
        typer.echo(json.dumps(result.model_dump(), indent=2))
    else:
        status = "[green]PASS[/green]" if result.valid else "[red]FAIL[/red]"
        rprint(f"[bold]{matrix_file}[/bold] {status}")
        for err in result.errors:
            rprint(f"  [red]error:[/red] {err}")
        for warn in result.warnings:
            rprint(f"  [yellow]warn:[/yellow] {warn}")

    if not result.valid:
        raise typer.Exit(1)


@app.command()
def types() -> None:
    """List supported resource types, principal resolvers and type aliases."""
    cfg = _get_config()
    processor = _processor(cfg, None)

    table = Table(title="Resource Types")
    table.add_column("Type", style="cyan")
    table.add_column("Builder", justify="center")
    for resource_type in processor.resources.registered_types():
        has_builder = processor.builders.has_builder(resource_type)
        table.add_row(resource_type, "[green]yes[/green]" if has_builder else "[red]no[/red]")
    rprint(table)

    order = "\n".join(
        f"{i}. {name}" for i, name in enumerate(processor.principals.registered_types(), 1)
    )
    rprint(Panel(order, title="Principal Resolvers", border_style="blue"))

    aliases = Table(title="Reference Type Aliases")
    aliases.add_column("Alias", style="cyan")
    aliases.add_column("Type")
    for alias, full_type in RESOURCE_TYPE_ALIASES.items():
        marker = " [dim](service account)[/dim]" if alias in SERVICE_ACCOUNT_ALIASES else ""
        aliases.add_row(alias, full_type + marker)
    rprint(aliases)


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default accessmatrix.yaml in current directory."""
    target = Path("accessmatrix.yaml")
    if target.exists() and not force:
        rprint("[yellow]accessmatrix.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
