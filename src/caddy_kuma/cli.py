from __future__ import annotations

import dataclasses
import json
import time
from pathlib import Path
from typing import Any

import typer

from .caddy_api import CaddyApiError
from .configmanager import CaddySettings, ConfigManager
from .source import CaddySource
from .yaml_writer import prune_stale, write_entities

logger = ConfigManager.get_logger(__name__)

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_show_locals=False,
    pretty_exceptions_short=True,
)


def load_config_callback(value: str | None) -> str | None:
    """Eager callback to load env file before other options are processed."""
    ConfigManager.load_dotenv(value)
    return value


def print_json(value: Any) -> None:
    print(json.dumps(value, ensure_ascii=False, sort_keys=True, indent=2))


def _settings(url: str | None) -> CaddySettings:
    try:
        settings = ConfigManager.caddy_settings()
    except ValueError as e:
        raise typer.BadParameter(str(e)) from None
    if url and url.strip():
        settings = dataclasses.replace(settings, url=url.strip())
    return settings


_URL_OPTION = typer.Option(None, "--url", help="Caddy config URL (overrides CADDY_URL)")


@app.callback()
def _main(
    env_file: str | None = typer.Option(
        None,
        "--env-file",
        envvar="CADDY_KUMA_ENV_FILE",
        help="dotenv file to load (default: .env)",
        is_eager=True,
        callback=load_config_callback,
    ),
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        envvar="CADDY_KUMA_LOG_LEVEL",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
        show_default=True,
    ),
    log_file: str | None = typer.Option(None, "--log-file", envvar="CADDY_KUMA_LOG_FILE", help="Also log to this file"),
    log_file_level: str | None = typer.Option(None, "--log-file-level", help="Level for --log-file"),
) -> None:
    try:
        ConfigManager.configure_logging(log_level, log_file=log_file, file_level=log_file_level)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from None


@app.command("hosts")
def hosts(
    url: str | None = _URL_OPTION,
    json_out: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    """Print the hosts found in the Caddy config."""
    settings = _settings(url)
    source = CaddySource(settings)
    try:
        found = source.get_hosts()
    except CaddyApiError as e:
        typer.echo(f"Fetch failed: {e}", err=True)
        raise typer.Exit(code=2) from None
    if json_out:
        print_json(found)
        return
    for host in found:
        print(host)


@app.command("entities")
def entities(url: str | None = _URL_OPTION) -> None:
    """Run one cycle and print the monitor entities as JSON."""
    settings = _settings(url)
    if not settings.enabled:
        typer.echo("Caddy source is disabled (CADDY_ENABLED)", err=True)
    source = CaddySource(settings)
    print_json(dict(source.get_entities()))


@app.command("export")
def export(
    out: Path = typer.Option(Path("monitors"), "--out", help="Directory for one YAML file per monitor"),
    url: str | None = _URL_OPTION,
    prune: bool = typer.Option(False, "--prune", help="Remove files of hosts no longer in Caddy"),
) -> None:
    """Write monitor entities as YAML files."""
    settings = _settings(url)
    source = CaddySource(settings)
    found = source.get_entities()
    paths, wrote = write_entities(out, found)
    removed: list[Path] = []
    # An empty cycle may be a failed fetch; never prune on it.
    if prune and found:
        removed = prune_stale(out, paths)
    typer.echo(f"Exported {len(paths)} monitors ({wrote} written, {len(removed)} removed) to {out}")


@app.command("watch")
def watch(
    interval: float = typer.Option(60.0, "--interval", min=0.0, help="Seconds between cycles"),
    cycles: int = typer.Option(0, "--cycles", min=0, help="Stop after N cycles (0 = forever)"),
    url: str | None = _URL_OPTION,
) -> None:
    """Poll Caddy repeatedly and report each cycle."""
    settings = _settings(url)
    source = CaddySource(settings)
    source.init()
    done = 0
    try:
        while True:
            found = source.get_entities()
            done += 1
            typer.echo(f"Cycle {done}: {len(found)} monitors")
            if cycles and done >= cycles:
                break
            time.sleep(interval)
    except KeyboardInterrupt:
        logger.info("Interrupted after %s cycles", done)
    finally:
        source.shutdown()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
