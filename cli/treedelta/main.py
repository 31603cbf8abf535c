from typing import Optional, Dict, Any
import json
import logging
import os
import pathlib

import typer
from rich import print
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from treedelta.config import DEFAULT_PATH, check_config_file, load_validated_config
from treedelta.delta.bounds import calculate_bounds
from treedelta.delta.delta import build_url_tree_delta
from treedelta.errors import EmptyBoundsError, TreeDeltaError
from treedelta.report.report import make_delta_report_md
from treedelta.tree.loader import load_passive_tree, load_url_tree, load_url_tree_delta
from treedelta.visual.delta import write_delta_svg


__version__ = "0.1.0"

logger = logging.getLogger(__name__)
console = Console(stderr=True)

app = typer.Typer(
    help="Tree delta CLI (tdelta): diff two passive tree builds and frame the change.",
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def _version_callback(value: bool):
    if value:
        console.print(f"tree-delta v{__version__}", style="bold cyan")
        raise typer.Exit(0)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
    config: str = typer.Option(DEFAULT_PATH, "--config", "-c", help="Config file"),
):
    """Diff two builds of a passive tree."""
    if ctx.invoked_subcommand == "config":
        ctx.obj = {"config_path": config}
        return
    try:
        cfg = load_validated_config(config)
    except TreeDeltaError as e:
        _fail(e)
    logging.basicConfig(level=cfg["log_level"])
    ctx.obj = {"config_path": config, "config": cfg}


def _fail(err: Exception):
    console.print(f"[red]error:[/red] {escape(str(err))}")
    raise typer.Exit(2)


def _compute(current: str, previous: str, tree_path: str):
    try:
        tree = load_passive_tree(tree_path)
        delta = build_url_tree_delta(load_url_tree(current), load_url_tree(previous), tree)
    except (TreeDeltaError, OSError) as e:
        _fail(e)
    return tree, delta


def _write(o: str, text: str):
    os.makedirs(pathlib.Path(o).parent, exist_ok=True)
    with open(o, "w", encoding="utf-8") as f:
        f.write(text)
    print(f"[green]Wrote[/green] {o}")


def _out(ctx: typer.Context, o: Optional[str], name: str) -> str:
    return o or os.path.join(ctx.obj["config"]["output_dir"], name)


@app.command()
def delta(
    ctx: typer.Context,
    current: str = typer.Argument(..., help="Current build JSON"),
    previous: str = typer.Argument(..., help="Previous build JSON"),
    tree: str = typer.Option(..., "--tree", "-t", help="Passive tree JSON"),
    o: Optional[str] = typer.Option(None, "--output", "-o"),
):
    """Compute the delta between two builds and its viewport."""
    passive_tree, d = _compute(current, previous, tree)
    payload: Dict[str, Any] = {"delta": d.to_dict(), "bounds": None}
    try:
        rect = calculate_bounds(d, passive_tree, padding=ctx.obj["config"]["padding"])
        payload["bounds"] = rect.to_dict()
    except EmptyBoundsError as e:
        logger.warning("no bounds: %s", e)
        console.print(f"[yellow]warning:[/yellow] {escape(str(e))}")
    except TreeDeltaError as e:
        _fail(e)

    table = Table(title="Tree delta", show_header=True, header_style="bold cyan")
    table.add_column("", style="cyan")
    table.add_column("nodes", justify="right")
    table.add_column("connections", justify="right")
    table.add_row("active", str(len(d.nodes_active)), str(len(d.connections_active)))
    table.add_row("added", str(len(d.nodes_added)), str(len(d.connections_added)), style="green")
    table.add_row("removed", str(len(d.nodes_removed)), str(len(d.connections_removed)), style="red")
    console.print(table)

    _write(_out(ctx, o, "delta.json"), json.dumps(payload, indent=2))


@app.command()
def bounds(
    ctx: typer.Context,
    delta_json: str = typer.Argument(..., help="Delta JSON written by `tdelta delta`"),
    tree: str = typer.Option(..., "--tree", "-t", help="Passive tree JSON"),
):
    """Print the viewport for a previously computed delta."""
    try:
        d = load_url_tree_delta(delta_json)
        rect = calculate_bounds(d, load_passive_tree(tree), padding=ctx.obj["config"]["padding"])
    except (TreeDeltaError, OSError) as e:
        _fail(e)
    typer.echo(json.dumps(rect.to_dict()))


@app.command()
def visual(
    ctx: typer.Context,
    current: str = typer.Argument(..., help="Current build JSON"),
    previous: str = typer.Argument(..., help="Previous build JSON"),
    tree: str = typer.Option(..., "--tree", "-t", help="Passive tree JSON"),
    o: Optional[str] = typer.Option(None, "--output", "-o"),
):
    """Render the delta as an SVG cropped to its viewport."""
    passive_tree, d = _compute(current, previous, tree)
    cfg = ctx.obj["config"]
    out = _out(ctx, o, "delta.svg")
    try:
        write_delta_svg(d, passive_tree, out, padding=cfg["padding"], **cfg["svg"])
    except TreeDeltaError as e:
        _fail(e)
    print(f"[green]Wrote[/green] {out}")


@app.command()
def report(
    ctx: typer.Context,
    current: str = typer.Argument(..., help="Current build JSON"),
    previous: str = typer.Argument(..., help="Previous build JSON"),
    tree: str = typer.Option(..., "--tree", "-t", help="Passive tree JSON"),
    o: Optional[str] = typer.Option(None, "--output", "-o"),
):
    """Write a Markdown summary of the delta."""
    passive_tree, d = _compute(current, previous, tree)
    rect = None
    try:
        rect = calculate_bounds(d, passive_tree, padding=ctx.obj["config"]["padding"])
    except EmptyBoundsError as e:
        logger.warning("no bounds: %s", e)
    _write(_out(ctx, o, "delta.md"), make_delta_report_md(d, passive_tree, rect))


# Config
config_app = typer.Typer(help="Configuration utilities")
app.add_typer(config_app, name="config")


@config_app.command("validate")
def config_validate(ctx: typer.Context, path: Optional[str] = typer.Argument(None)):
    """Validate a .tree-delta.yml file."""
    path = path or ctx.obj["config_path"]
    if not os.path.exists(path):
        console.print(f"[yellow]{path} not found, defaults apply[/yellow]")
        return
    try:
        errors = check_config_file(path)
    except TreeDeltaError as e:
        _fail(e)
    for err in errors:
        console.print(f"[red]-[/red] {escape(err)}")
    if errors:
        raise typer.Exit(1)
    print(f"[green]OK[/green] {path}")


if __name__ == "__main__":
    app()
