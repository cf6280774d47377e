#!/usr/bin/env python3
"""
CLI for validating data files against YAML schema documents.

Usage:
    typecheck validate data.json --schema schema.yaml --type Foo
    typecheck validate items.yaml --schema schema.yaml --type Bar --array
    typecheck inspect schema.yaml --format json
    typecheck --version
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
import yaml

from typechecker import __version__
from typechecker.validation import SchemaDefinitionError, SchemaRegistry, ValidationError, validate
from typechecker.yaml_schema import load_schemas

app = typer.Typer(
    name="typecheck",
    help="Validate JSON/YAML data against declarative type schemas",
    no_args_is_help=True,
    add_completion=False,
)


class OutputFormat(str, Enum):
    """Output format for inspect command."""
    text = "text"
    json = "json"


def setup_logging(verbose: int, quiet: bool):
    """Configure logging based on verbosity flags."""
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
    )


def load_data(path: Path) -> Any:
    """
    Load a JSON or YAML data file.

    Raises:
        typer.Exit: On missing file or parse error
    """
    if not path.exists():
        typer.echo(f"Error: File not found: {path}", err=True)
        raise typer.Exit(1)
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        typer.echo(f"Error: Invalid JSON/YAML in {path}: {e}", err=True)
        raise typer.Exit(1)


def load_schema_types(schema: Path, registry: SchemaRegistry) -> Dict[str, type]:
    try:
        return load_schemas(schema, registry=registry)
    except SchemaDefinitionError as e:
        typer.echo(f"Error: Invalid schema {schema}: {e}", err=True)
        raise typer.Exit(1)


def describe_types(types: Dict[str, type], registry: SchemaRegistry) -> List[Dict[str, Any]]:
    """Summarize the types of a schema document."""
    result = []
    for name, cls in types.items():
        parent = registry.parent_of(cls)
        fields = registry.lookup(cls) or {}
        result.append({
            "name": name,
            "extends": parent.__name__ if parent is not None else None,
            "fields": {field: rule.to_dict() for field, rule in fields.items()},
        })
    return result


@app.command(name="validate")
def validate_command(
    data: Path = typer.Argument(..., help="Path to JSON/YAML data file"),
    schema: Path = typer.Option(..., "--schema", "-s", help="Path to YAML schema document"),
    type_name: str = typer.Option(..., "--type", "-t", help="Name of the type to validate against"),
    array: bool = typer.Option(False, "--array", help="Data is a list of TYPE items"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase verbosity (-v, -vv)"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show errors"),
):
    """Validate a data file against a type of a schema document."""
    setup_logging(verbose, quiet)

    registry = SchemaRegistry()
    types = load_schema_types(schema, registry)
    if type_name not in types:
        typer.echo(
            f"Error: Unknown type '{type_name}'. Available: {', '.join(types)}", err=True
        )
        raise typer.Exit(1)

    value = load_data(data)
    try:
        if array:
            validate(value, list, types[type_name], registry=registry)
        else:
            validate(value, types[type_name], registry=registry)
    except ValidationError as e:
        typer.echo(f"✗ {data} is invalid", err=True)
        typer.echo(f"  field: {e.field or '-'}", err=True)
        typer.echo(f"  error: {e.error_type.value}", err=True)
        typer.echo(f"  message: {e.message}", err=True)
        raise typer.Exit(1)

    if not quiet:
        typer.echo(f"✓ {data} is valid")


@app.command()
def inspect(
    schema: Path = typer.Argument(..., help="Path to YAML schema document"),
    format: OutputFormat = typer.Option(OutputFormat.text, "--format", "-f", help="Output format (text, json)"),
):
    """Show the types and field rules of a schema document."""
    registry = SchemaRegistry()
    types = load_schema_types(schema, registry)
    summary = describe_types(types, registry)

    if format == OutputFormat.json:
        typer.echo(json.dumps(summary, indent=2))
        return

    for entry in summary:
        header = entry["name"]
        if entry["extends"]:
            header += f" (extends {entry['extends']})"
        typer.echo(header)
        for field, rule in entry["fields"].items():
            flags = []
            if not rule["required"]:
                flags.append("optional")
            if rule["nullable"]:
                flags.append("nullable")
            if rule["on_failure"] != "propagate":
                flags.append(f"on_failure={rule['on_failure']}")
            type_label = rule["type"]
            if "items" in rule:
                type_label += f"[{rule['items']}]"
            suffix = f" ({', '.join(flags)})" if flags else ""
            typer.echo(f"  - {field}: {type_label}{suffix}")


def version_callback(value: bool):
    """Handle --version flag."""
    if value:
        typer.echo(f"typecheck {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Optional[bool] = typer.Option(None, "--version", callback=version_callback, is_eager=True,
                                           help="Show version and exit"),
):
    """Validate JSON/YAML data against declarative type schemas."""


def main():
    """Entry point for the typecheck CLI."""
    app()


if __name__ == "__main__":
    main()
