from __future__ import annotations
import json
import logging
import pathlib
from typing import Any

import tomli
import typer
from rich import print as rprint
from rich.logging import RichHandler
from rich.markup import escape

from .engine import errors, resolve_levels
from .errors import ConfigError, ConformError
from .ir import plain, predicate_name
from .kinds import kind_of
from .loader import load_path
from .render import render_tree, report_to_json

app = typer.Typer(add_completion=False)

@app.callback()
def main(verbose: bool = typer.Option(False, "-v", "--verbose")):
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(message)s", handlers=[RichHandler()])

def _fail(e: ConformError) -> typer.Exit:
    where = f" ({e.path})" if e.path else ""
    rprint(f"[red]{escape(str(e))}{escape(where)}[/red]")
    return typer.Exit(code=2)

def _read_data(path: str) -> Any:
    p = pathlib.Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read data file: {getattr(e, 'strerror', None) or e}", path) from e
    try:
        if p.suffix == ".toml":
            return tomli.loads(text)
        return json.loads(text)
    except (tomli.TOMLDecodeError, json.JSONDecodeError) as e:
        raise ConfigError(f"Invalid data file: {e}", path) from e

@app.command()
def check(
    types_path: str,
    data_path: str,
    type_name: str = typer.Option(..., "-t", "--type"),
    as_json: bool = typer.Option(False, "--json"),
):
    try:
        config = load_path(types_path)
        value = _read_data(data_path)
        report = errors(value, type_name, registry=config.registry, max_depth=config.max_depth)
    except ConformError as e:
        raise _fail(e)
    if as_json:
        print(json.dumps(report_to_json(report), indent=2, default=repr))
    elif report:
        kind = kind_of(value)
        shown = kind.value if kind is not None else type(value).__name__
        rprint(render_tree(report, title=f"{data_path} ({shown}) is not a valid {type_name}"))
    else:
        rprint("[green]OK[/green]")
    if report:
        raise typer.Exit(code=1)

@app.command()
def explain(types_path: str, type_name: str):
    try:
        config = load_path(types_path)
        levels = resolve_levels(type_name, config.registry)
    except ConformError as e:
        raise _fail(e)
    for descriptor, refinements in levels:
        owner = descriptor.name or "<anonymous>"
        for refinement in refinements:
            args = json.dumps(plain(refinement.arguments), default=repr)
            print(f"{owner}: {predicate_name(refinement.predicate)} {args}")

@app.command()
def types(types_path: str):
    try:
        config = load_path(types_path)
    except ConformError as e:
        raise _fail(e)
    for name in config.registry.names(inherited=False):
        print(name)
