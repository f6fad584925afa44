"""CLI — check, explain, validate, roles."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import click
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from warden.config import Config
from warden.core.evaluator import PermissionEvaluator
from warden.core.templates import GLOBAL_ROLE_ORDER, PROJECT_ROLE_ORDER, default_grants_for_role
from warden.core.validation import find_grant_issues
from warden.models.catalog import CatalogError, PermissionCatalog
from warden.models.grant import Grant, Scope
from warden.models.principal import PrincipalPermissionState

_SCOPE_STYLES = {Scope.ALL: "green", Scope.OWN: "yellow", Scope.NONE: "red"}


def _read_yaml(path: str) -> Any:
    try:
        with open(path) as f:
            return yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        click.echo(f"Error: Cannot read {path}: {e}", err=True)
        sys.exit(1)


def _load_catalog(config: Config, catalog: str | None) -> PermissionCatalog:
    path = Path(catalog) if catalog else config.catalog_path
    if path is None:
        return PermissionCatalog.default()
    try:
        return PermissionCatalog.load(path)
    except CatalogError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _load_state(path: str) -> PrincipalPermissionState:
    data = _read_yaml(path) or {}
    try:
        return PrincipalPermissionState.model_validate(data)
    except ValidationError as e:
        click.echo(f"Error: Invalid principal state in {path}: {e}", err=True)
        sys.exit(1)


def _grant_table(title: str, grants: list[Grant]) -> Table:
    table = Table(title=title)
    table.add_column("Resource", style="cyan")
    table.add_column("Actions", style="magenta")
    table.add_column("Scope")
    for grant in sorted(grants, key=lambda g: g.resource):
        style = _SCOPE_STYLES[grant.scope]
        table.add_row(
            grant.resource,
            ", ".join(sorted(grant.actions)) or "-",
            f"[{style}]{grant.scope.value}[/{style}]",
        )
    return table


@click.group()
@click.version_option(package_name="warden-authz")
@click.option("--log-level", default=None, help="Override the configured log level")
@click.pass_context
def main(ctx: click.Context, log_level: str | None) -> None:
    """Warden — evaluate roles, permission sets and project grants."""
    config = Config.load()
    if log_level:
        config.log_level = log_level
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = config


@main.command()
@click.argument("state_file", type=click.Path(exists=True))
@click.argument("resource")
@click.argument("action")
@click.option("--project", "project_id", default=None, help="Evaluate inside this project")
@click.option("--scope", type=click.Choice([s.value for s in Scope]), default=None)
@click.option("--catalog", type=click.Path(exists=True), default=None, help="Catalog YAML")
@click.pass_obj
def check(
    config: Config,
    state_file: str,
    resource: str,
    action: str,
    project_id: str | None,
    scope: str | None,
    catalog: str | None,
) -> None:
    """Check whether a principal may perform ACTION on RESOURCE.

    Exits with status 0 when allowed and 2 when denied.
    """
    evaluator = PermissionEvaluator(_load_catalog(config, catalog), config=config)
    state = _load_state(state_file)

    allowed = evaluator.can(state, resource, action, project_id, scope=scope)
    where = f" in project {project_id}" if project_id else ""
    if allowed:
        click.echo(f"ALLOW {state.principal_id} {action} {resource}{where}")
        return
    click.echo(f"DENY {state.principal_id} {action} {resource}{where}")
    sys.exit(2)


@main.command()
@click.argument("state_file", type=click.Path(exists=True))
@click.option("--project", "project_id", default=None, help="Show the project table")
@click.option("--catalog", type=click.Path(exists=True), default=None, help="Catalog YAML")
@click.pass_obj
def explain(config: Config, state_file: str, project_id: str | None, catalog: str | None) -> None:
    """Show a principal's effective grant table."""
    evaluator = PermissionEvaluator(_load_catalog(config, catalog), config=config)
    state = _load_state(state_file)
    console = Console()

    if evaluator.is_bypass(state):
        console.print(
            Panel(
                f"[green]✓[/green] {state.principal_id} has global role "
                f"'{state.global_role}' and bypasses all grant checks",
                title="Bypass",
            )
        )
        return

    if project_id:
        table = evaluator.project_table(state, project_id)
        title = f"Effective grants for {state.principal_id} in {project_id}"
    else:
        table = evaluator.global_table(state)
        title = f"Effective grants for {state.principal_id}"
    console.print(_grant_table(title, list(table)))

    summary = table.summary()
    console.print(
        f"Resources with access: {summary.total_resources}  "
        f"Actions: {summary.total_actions}  "
        f"Most permissive: {summary.most_permissive_resource or '-'}"
    )


@main.command()
@click.argument("grants_file", type=click.Path(exists=True))
@click.option("--catalog", type=click.Path(exists=True), default=None, help="Catalog YAML")
@click.pass_obj
def validate(config: Config, grants_file: str, catalog: str | None) -> None:
    """Validate a YAML list of proposed grants against the catalog."""
    data = _read_yaml(grants_file) or []
    if not isinstance(data, list):
        click.echo("Error: Grants file must contain a list of grants", err=True)
        sys.exit(1)

    issues = find_grant_issues(data, _load_catalog(config, catalog))
    if not issues:
        click.echo(f"OK: {len(data)} grant(s) valid")
        return

    table = Table(title=f"{len(issues)} validation issue(s)")
    table.add_column("Row", justify="right")
    table.add_column("Field", style="cyan")
    table.add_column("Problem", style="red")
    for issue in issues:
        table.add_row(str(issue.index), issue.field, issue.message)
    Console().print(table)
    sys.exit(1)


@main.command()
@click.argument("role", required=False)
@click.option("--kind", type=click.Choice(["project", "global"]), default="project")
def roles(role: str | None, kind: str) -> None:
    """Show the default grants of role templates."""
    order = PROJECT_ROLE_ORDER if kind == "project" else GLOBAL_ROLE_ORDER
    names = [role] if role else list(order)
    console = Console()
    for name in names:
        grants = default_grants_for_role(name, kind=kind)  # type: ignore[arg-type]
        if not grants:
            click.echo(f"Error: Unknown {kind} role: {name}", err=True)
            sys.exit(1)
        console.print(_grant_table(f"{kind.capitalize()} role: {name}", list(grants)))


if __name__ == "__main__":
    main()
