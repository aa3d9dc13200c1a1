"""CLI entry point for selection-tracker."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import click

from selection_tracker import __version__
from selection_tracker.config.settings import TrackerConfig, load_config
from selection_tracker.models.entry import Entry
from selection_tracker.models.ref_state import RefState
from selection_tracker.preferences import keys
from selection_tracker.preferences.store import PreferenceStore
from selection_tracker.registry.persistence import ServiceRegistry
from selection_tracker.services.base import EntryService, visible_entries
from selection_tracker.services.favorites import FavoritesService
from selection_tracker.services.history import HistoryService
from selection_tracker.services.most_visited import MostVisitedService
from selection_tracker.utils.logging import configure_logging, get_logger

# Default paths
DEFAULT_PROJECT = "."


class Context:
    """CLI context for sharing state between commands."""

    def __init__(
        self,
        project_dir: Path,
        config_dir: Optional[Path],
        log_level: str,
        log_format: str,
    ) -> None:
        self.project_dir = project_dir
        self.config_dir = config_dir
        self.log_level = log_level
        self.log_format = log_format
        self.logger = get_logger("cli")

        self._config: Optional[TrackerConfig] = None
        self._preferences: Optional[PreferenceStore] = None
        self._registry: Optional[ServiceRegistry] = None

    @property
    def config(self) -> TrackerConfig:
        if self._config is None:
            result = load_config(self.config_dir, self.project_dir)
            if result.is_err():
                raise click.ClickException(str(result.unwrap_err()))
            self._config = result.unwrap()
        return self._config

    @property
    def preferences(self) -> PreferenceStore:
        if self._preferences is None:
            self._preferences = PreferenceStore.load(
                self.config.preferences_file,
                state_version=self.config.storage.state_version,
            )
        return self._preferences

    @property
    def registry(self) -> ServiceRegistry:
        if self._registry is None:
            self._registry = ServiceRegistry(
                self.config.registry_file,
                preferences=self.preferences,
                state_version=self.config.storage.state_version,
            )
            self._registry.load()
        return self._registry


pass_context = click.make_pass_decorator(Context)


def output_json(data) -> None:
    """Output JSON to stdout."""
    click.echo(json.dumps(data, indent=2, default=str))


def parse_states(states: tuple[str, ...]) -> RefState:
    try:
        return RefState.parse(states)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--state")


def describe_state(state: RefState) -> list[str]:
    return [flag.name.lower() for flag in RefState if flag and flag in state]


def entry_summary(entry: Entry, extra: Optional[dict] = None) -> dict:
    data = {
        "kind": entry.kind,
        "id": entry.id,
        "name": entry.display_name,
        "state": describe_state(entry.ref_state),
        "favorite": entry.is_favorite,
    }
    if extra:
        data.update(extra)
    return data


def list_entries(
    ctx: Context,
    service: EntryService,
    search: Optional[str],
    states: tuple[str, ...],
    output_format: str,
    extra=None,
) -> None:
    window_filter = parse_states(states) if states else None
    entries = visible_entries(service.entries, ctx.preferences, window_filter, search)
    rows = [entry_summary(entry, extra(entry) if extra else None) for entry in entries]

    if output_format == "json":
        output_json({"kind": service.kind, "count": len(rows), "entries": rows})
        return

    if not rows:
        click.echo(f"No {service.kind.replace('_', ' ')} entries")
        return

    for index, row in enumerate(rows):
        marker = "*" if row["favorite"] else " "
        suffix = f"  x{row['visits']}" if "visits" in row else ""
        click.echo(f"{index:>3} {marker} {row['name']:<40} {'|'.join(row['state'])}{suffix}")


def listing_options(fn):
    fn = click.option(
        "--format",
        "output_format",
        type=click.Choice(["table", "json"], case_sensitive=False),
        default="table",
        help="Output format",
    )(fn)
    fn = click.option(
        "--state",
        "states",
        multiple=True,
        help=(
            "Only show entries whose state flags are all in these (repeatable); "
            "'all' shows nothing while a preference filter is set"
        ),
    )(fn)
    fn = click.option("--search", default=None, help="Space-separated keywords")(fn)
    return fn


@click.group()
@click.option(
    "--project",
    type=click.Path(exists=False, file_okay=False, path_type=Path),
    default=DEFAULT_PROJECT,
    help="Project directory holding the persisted state",
)
@click.option(
    "--config",
    type=click.Path(exists=False, file_okay=False, path_type=Path),
    default=None,
    help="Directory containing tracker.yaml (defaults to the project)",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warn", "error"], case_sensitive=False),
    default="warn",
    help="Logging level",
)
@click.option(
    "--log-format",
    type=click.Choice(["json", "text"], case_sensitive=False),
    default="text",
    help="Log format",
)
@click.version_option(version=__version__)
@click.pass_context
def cli(
    ctx: click.Context,
    project: Path,
    config: Optional[Path],
    log_level: str,
    log_format: str,
) -> None:
    """
    Selection Tracker - history, ranking and favorites of editor selections.

    Inspects and edits the state the tracker persists inside a project:
    selection history, most visited objects, favorites and preferences.
    """
    # Configure logging
    configure_logging(level=log_level, format_type=log_format)

    ctx.obj = Context(
        project_dir=project,
        config_dir=config,
        log_level=log_level,
        log_format=log_format,
    )


@cli.command()
@listing_options
@pass_context
def history(ctx: Context, search: Optional[str], states: tuple[str, ...], output_format: str) -> None:
    """List the selection history, newest first."""
    service = ctx.registry.get_service(HistoryService)
    list_entries(ctx, service, search, states, output_format)


@cli.command("most-visited")
@listing_options
@pass_context
def most_visited(ctx: Context, search: Optional[str], states: tuple[str, ...], output_format: str) -> None:
    """List entries ranked by how often they were selected."""
    service = ctx.registry.get_service(MostVisitedService)
    list_entries(
        ctx,
        service,
        search,
        states,
        output_format,
        extra=lambda entry: {"visits": service.visit_count(entry.id)},
    )


@cli.command()
@listing_options
@pass_context
def favorites(ctx: Context, search: Optional[str], states: tuple[str, ...], output_format: str) -> None:
    """List favorite entries."""
    service = ctx.registry.get_service(FavoritesService)
    list_entries(ctx, service, search, states, output_format)


@cli.command()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format",
)
@pass_context
def status(ctx: Context, output_format: str) -> None:
    """Show where state is stored and how many entries each service holds."""
    registry = ctx.registry
    status_data = {
        "registry_file": str(ctx.config.registry_file),
        "registry_exists": ctx.config.registry_file.exists(),
        "preferences_file": str(ctx.config.preferences_file),
        "services": {service.kind: len(service) for service in registry.services},
    }

    if output_format == "json":
        output_json(status_data)
    else:
        click.echo("Selection Tracker Status")
        click.echo("=" * 40)
        click.echo(f"Registry: {status_data['registry_file']}")
        click.echo(f"Preferences: {status_data['preferences_file']}")
        for kind, count in status_data["services"].items():
            click.echo(f"  {kind}: {count}")


@cli.group()
def prefs() -> None:
    """Show and change preferences."""


@prefs.command("show")
@pass_context
def prefs_show(ctx: Context) -> None:
    """Print every toggle and the state filter."""
    store = ctx.preferences
    output_json({
        "toggles": dict(store.toggles),
        "ref_state_filter": describe_state(store.ref_state_filter) or ["all"],
    })


@prefs.command("set")
@click.argument("key", type=click.Choice([key for key, _ in keys.DEFAULT_TOGGLES]))
@click.argument("value", type=click.Choice(["on", "off"], case_sensitive=False))
@pass_context
def prefs_set(ctx: Context, key: str, value: str) -> None:
    """Turn the toggle KEY on or off."""
    ctx.preferences.set_toggle(key, value.lower() == "on")
    output_json({"status": "success", "key": key, "value": ctx.preferences.get_toggle(key)})


@prefs.command("filter")
@click.argument("states", nargs=-1)
@pass_context
def prefs_filter(ctx: Context, states: tuple[str, ...]) -> None:
    """Set the state filter; no STATES means no restriction."""
    try:
        value = RefState.parse(states)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="STATES")

    ctx.preferences.set_ref_state_filter(value)
    output_json({"status": "success", "ref_state_filter": describe_state(value) or ["all"]})


@cli.command()
@click.argument("kind", type=click.Choice(["history", "most_visited", "favorites"]))
@pass_context
def clear(ctx: Context, kind: str) -> None:
    """Remove every entry of the KIND service."""
    service = ctx.registry.service_by_kind(kind)
    removed = len(service)
    if kind == FavoritesService.kind:
        for entry in list(service.entries):
            ctx.registry.remove_from_favorites(entry)
    else:
        service.clear()

    ctx.logger.info("service_cleared", kind=kind, removed=removed)
    output_json({"status": "success", "kind": kind, "removed": removed})


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except Exception as e:
        logger = get_logger("cli")
        logger.error("cli_error", error=str(e))
        sys.exit(2)


if __name__ == "__main__":
    main()
