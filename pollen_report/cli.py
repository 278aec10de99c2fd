"""CLI entry point — command definitions using Click.

Commands:
    init          Generate a template config file
    forecast      Ask the model for the pollen forecast at a postal code
    render        Render a saved forecast without calling the model
    legend        Print the 0–4 pollen scale
"""

import json
import sys
from typing import Any

import click

from pollen_report import __version__

FORMATS = ("json", "text", "html")


# ---------------------------------------------------------------------------
# Helpers shared by all data commands
# ---------------------------------------------------------------------------

def _verbose(ctx: click.Context, message: str) -> None:
    if ctx.obj["verbose"]:
        click.echo(f"[verbose] {message}", err=True)


def _make_client(ctx: click.Context):
    """Load config and return a ready GeminiClient. Exits on error."""
    from pollen_report.client import GeminiClient
    from pollen_report.config import ConfigError, load

    try:
        config = load(ctx.obj["config_path"])
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)

    _verbose(ctx, f"Using model {config.model} (timeout {config.timeout}s)")
    return config, GeminiClient(api_key=config.api_key, model=config.model, timeout=config.timeout)


def _emit(text: str, ctx: click.Context) -> None:
    """Write *text* to stdout or to the file specified by --output."""
    output_path: str | None = ctx.obj["output_path"]
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text)
        click.echo(f"Report written to '{output_path}'", err=True)
    else:
        click.echo(text, nl=not text.endswith("\n"))


def _emit_report(report: dict, fmt: str, ctx: click.Context, *, color: bool, expand_all: bool = False) -> None:
    from pollen_report.render import render_html, render_text

    if fmt == "json":
        indent = 2 if ctx.obj["pretty"] else None
        _emit(json.dumps(report, indent=indent, ensure_ascii=False), ctx)
    elif fmt == "html":
        _emit(render_html(report["view_model"], expand_all=expand_all), ctx)
    else:
        # no ANSI codes in files
        color = color and not ctx.obj["output_path"]
        _emit(render_text(report["view_model"], color=color, expand_all=expand_all), ctx)


def _handle_forecast_errors(func):
    """Decorator that maps client and parse failures to a localized message."""
    import functools

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from pollen_report.client import AuthenticationError, GeminiClientError
        from pollen_report.config import InvalidPostalCodeError
        from pollen_report.reports.forecast import (
            GENERIC_ERROR_MESSAGE,
            ForecastError,
            LocationError,
        )

        ctx = click.get_current_context()
        try:
            return func(*args, **kwargs)
        except InvalidPostalCodeError as exc:
            click.echo(f"Fehler: {exc}", err=True)
            sys.exit(1)
        except LocationError as exc:
            click.echo(f"Fehler: {exc}", err=True)
            sys.exit(1)
        except AuthenticationError as exc:
            click.echo(f"Authentication error: {exc}", err=True)
            sys.exit(1)
        except (GeminiClientError, ForecastError) as exc:
            _verbose(ctx, f"{type(exc).__name__}: {exc}")
            click.echo(f"Fehler: {GENERIC_ERROR_MESSAGE}", err=True)
            sys.exit(1)

    return wrapper


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default="pollen-config.yaml", show_default=True,
              help="Path to the configuration file.")
@click.option("--output", "output_path", default=None,
              help="Write output to a file instead of stdout.")
@click.option("--pretty", is_flag=True, default=False,
              help="Pretty-print JSON output.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="pollen-report")
@click.pass_context
def cli(ctx: click.Context, config_path: str, output_path: str | None,
        pretty: bool, verbose: bool) -> None:
    """Pollen forecast for Austrian postal codes, researched live by Gemini."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["output_path"] = output_path
    ctx.obj["pretty"] = pretty
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default="pollen-config.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template pollen-config.yaml file."""
    from pollen_report.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Edit it with your Gemini API key and location aliases.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# forecast
# ---------------------------------------------------------------------------

@cli.command("forecast")
@click.argument("location")
@click.option("--format", "fmt", type=click.Choice(FORMATS), default="text", show_default=True,
              help="Output format.")
@click.option("--no-color", is_flag=True, default=False,
              help="Disable ANSI colors in text output.")
@click.pass_context
@_handle_forecast_errors
def forecast_command(ctx: click.Context, location: str, fmt: str, no_color: bool) -> None:
    """Pollen forecast for LOCATION (a 4-digit PLZ or a configured alias)."""
    from pollen_report.reports.forecast import get_forecast

    config, client = _make_client(ctx)
    plz = config.resolve_plz(location)

    _verbose(ctx, f"Researching pollen situation for PLZ {plz} (live search, this can take a while)")

    report = get_forecast(client, plz)
    sources = report["view_model"].get("grounding_sources") or []
    _verbose(ctx, f"Received view-model with {len(sources)} grounding source(s)")

    _emit_report(report, fmt, ctx, color=not no_color)


# ---------------------------------------------------------------------------
# render
# ---------------------------------------------------------------------------

@cli.command("render")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "fmt", type=click.Choice(FORMATS), default="text", show_default=True,
              help="Output format.")
@click.option("--expand-all", is_flag=True, default=False,
              help="Ignore default-collapsed table categories.")
@click.option("--no-color", is_flag=True, default=False,
              help="Disable ANSI colors in text output.")
@click.pass_context
@_handle_forecast_errors
def render_command(ctx: click.Context, path: str, fmt: str, expand_all: bool, no_color: bool) -> None:
    """Render a forecast saved with `forecast --format json`."""
    from pollen_report.reports.forecast import load_forecast

    _verbose(ctx, f"Loading forecast from '{path}'")
    report: dict[str, Any] = load_forecast(path)
    _emit_report(report, fmt, ctx, color=not no_color, expand_all=expand_all)


# ---------------------------------------------------------------------------
# legend
# ---------------------------------------------------------------------------

@cli.command("legend")
@click.option("--no-color", is_flag=True, default=False,
              help="Disable ANSI colors.")
def legend_command(no_color: bool) -> None:
    """Print the meaning of the 0–4 pollen load levels."""
    from pollen_report.render import render_legend

    click.echo(render_legend(color=not no_color), nl=False)
