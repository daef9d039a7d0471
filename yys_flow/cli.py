"""CLI interface."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer

from yys_flow.diagram.group_rules import GroupRulesConfig, RulesConfigError
from yys_flow.services.flow_service import inspect_flow, prepare_preview, resolve_rules
from yys_flow.utils.config import settings
from yys_flow.utils.file_utils import read_json_file

app = typer.Typer(add_completion=False, help="Prepare and check onmyoji-editor flow diagrams.")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _load_graph(path: str) -> Any:
    try:
        return read_json_file(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Input file not found: {path}") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _load_rules(path: Optional[str]) -> GroupRulesConfig:
    try:
        return resolve_rules(path)
    except RulesConfigError as exc:
        raise typer.BadParameter(str(exc), param_hint="--rules") from exc


def _dump(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


@app.command()
def preview(
    file: str = typer.Argument(..., help="Diagram JSON (plain graph or fileList container)."),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Deployment base path, e.g. /wiki/."),
    policy: Optional[str] = typer.Option(None, "--policy", help="degrade | strict"),
    padding: Optional[float] = typer.Option(None, "--padding"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write result here instead of stdout."),
):
    """Rewrite asset URLs and re-center the diagram for preview rendering."""
    if policy is not None and policy not in ("degrade", "strict"):
        raise typer.BadParameter("Policy must be 'degrade' or 'strict'", param_hint="--policy")
    graph = prepare_preview(_load_graph(file), base_url=base_url, policy=policy, padding=padding)
    text = _dump(graph)
    if output is None:
        typer.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    typer.echo(f"Preview graph saved to: {output.resolve()}")


@app.command()
def inspect(
    file: str = typer.Argument(..., help="Diagram JSON (plain graph or fileList container)."),
    base_url: Optional[str] = typer.Option(None, "--base-url"),
    rules: Optional[str] = typer.Option(None, "--rules", help="Rules config JSON; defaults to built-in rules."),
    strict: bool = typer.Option(False, "--strict", help="Exit 1 when file:/blob: assets are found."),
):
    """Print asset issues and team-composition warnings as JSON."""
    report = inspect_flow(_load_graph(file), base_url=base_url, rules=_load_rules(rules))
    typer.echo(_dump(report.model_dump(mode="json", by_alias=True)))
    if strict and report.has_blocking_issues:
        raise typer.Exit(code=1)


@app.command("rules")
def show_rules(rules: Optional[str] = typer.Option(None, "--rules")):
    """Print the effective rules config."""
    typer.echo(_dump(_load_rules(rules).model_dump(mode="json", by_alias=True)))


if __name__ == "__main__":
    app()
