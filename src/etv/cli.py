"""Command-line interface for ETV heating efficacy analysis."""

import logging
import sys
from pathlib import Path

import click
import httpx
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import driver
from .analysis.household import compute
from .collectors import nbulk, open_meteo, valve_logs
from .collectors.hdd_csv import load_hdd
from .config import load_settings
from .errors import DriverError
from .models import DayStatus
from .reports.csv_output import float_str

console = Console()


def fail(message: str):
    """Report an error and exit non-zero."""
    console.print(f"[red]{message}[/red]")
    sys.exit(1)


@click.group()
@click.option("--config", "config_path", type=click.Path(), help="Path to etv.yaml settings")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx, config_path, verbose):
    """ETV analysis - heating energy per HDD and energy-saving efficacy."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    ctx.ensure_object(dict)
    try:
        ctx.obj["settings"] = load_settings(Path(config_path) if config_path else None)
    except (OSError, ValueError) as e:
        fail(f"Bad configuration: {e}")


@cli.command()
@click.argument("in_dir", type=click.Path(exists=True, file_okay=False))
@click.argument("out_dir", type=click.Path(file_okay=False))
@click.pass_context
def run(ctx, in_dir, out_dir):
    """Run the full analysis from IN_DIR, writing CSV reports to OUT_DIR.

    IN_DIR holds NkWh.csv and HDD.csv, plus optionally status.csv or
    valveLogs/grouping.csv for control/normal segmentation.
    """
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    try:
        report = driver.do_computation(Path(in_dir), out, ctx.obj["settings"])
    except DriverError as e:
        fail(str(e))
    except (OSError, ValueError) as e:
        fail(f"Analysis failed: {e}")

    table = Table(title="ETV Analysis")
    table.add_column("Stage", style="cyan")
    table.add_column("Households", justify="right")
    table.add_row("Input", str(report.households))
    table.add_row("Good daily data", str(report.filtered_households))
    if report.segmentation_source:
        table.add_row(f"Segmented ({report.segmentation_source})", str(report.segmented_households))
    console.print(table)

    summary = report.summary
    if summary is None:
        console.print("[yellow]No segmentation data, so no efficacy computed[/yellow]")
    else:
        stats = Table(title="Group Summary")
        stats.add_column("Metric", style="cyan")
        stats.add_column("Mean", justify="right")
        stats.add_column("SD", justify="right")
        stats.add_row("R^2", float_str(summary.rsquared.mean), float_str(summary.rsquared.sd))
        stats.add_row("kWh/HDD", float_str(summary.slope.mean), float_str(summary.slope.sd))
        stats.add_row("Efficacy", float_str(summary.efficacy.mean), float_str(summary.efficacy.sd))
        console.print(stats)
        console.print(f"Normal days: {summary.normal_day_count}")

    for path in report.files_written:
        console.print(f"[green]Wrote {path}[/green]")


@cli.command()
@click.argument("bulk_csv", type=click.Path(exists=True, dir_okay=False))
def ids(bulk_csv):
    """List the house IDs in an N-format bulk energy file."""
    try:
        house_ids = nbulk.extract_ids(nbulk.read_lines(Path(bulk_csv)))
    except ValueError as e:
        fail(f"Cannot read {bulk_csv}: {e}")
    for house_id in sorted(house_ids):
        console.print(str(house_id))


@cli.command()
@click.argument("bulk_csv", type=click.Path(exists=True, dir_okay=False))
@click.argument("hdd_csv", type=click.Path(exists=True, dir_okay=False))
@click.argument("house_id", type=int)
@click.pass_context
def household(ctx, bulk_csv, hdd_csv, house_id):
    """Show the unsegmented kWh/HDD fit for one house."""
    settings = ctx.obj["settings"]
    try:
        hdd = load_hdd(Path(hdd_csv), settings.base_temperature_c)
        data = nbulk.gather_data(
            house_id, Path(bulk_csv), hdd, settings.timezone, settings.midnight_tolerance_minutes
        )
    except ValueError as e:
        fail(f"Cannot read input: {e}")

    result = compute(data)
    if result.metrics is None:
        console.print(f"[yellow]No energy data for house {house_id}[/yellow]")
        return

    table = Table(title=f"House {house_id}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("kWh/HDD", float_str(result.metrics.slope))
    table.add_row("Baseload kWh/day", float_str(result.metrics.intercept))
    table.add_row("R^2", float_str(result.metrics.rsquared))
    table.add_row("Days", str(result.metrics.n))
    console.print(table)


@cli.command()
@click.argument("log_dir", type=click.Path(exists=True, file_okay=False))
@click.option("--house", "house_ids", multiple=True, help="House ID to include (repeatable)")
@click.pass_context
def segment(ctx, log_dir, house_ids):
    """Show control/normal/unusable day counts from valve logs in LOG_DIR."""
    settings = ctx.obj["settings"]
    try:
        statuses = valve_logs.load_and_parse_all_logs(
            Path(log_dir), settings.timezone, house_ids or None
        )
    except OSError as e:
        fail(f"Cannot read valve logs: {e}")

    if not statuses:
        console.print("[yellow]No households found[/yellow]")
        return

    table = Table(title="Segmentation")
    table.add_column("House", style="cyan")
    table.add_column("Control", justify="right")
    table.add_column("Normal", justify="right")
    table.add_column("Unusable", justify="right")
    for house_id, status in sorted(statuses.items()):
        table.add_row(
            house_id,
            str(status.count(DayStatus.DISABLED)),
            str(status.count(DayStatus.ENABLED)),
            str(status.count(DayStatus.DONT_USE)),
        )
    console.print(table)


@cli.command("fetch-hdd")
@click.argument("output_csv", type=click.Path(dir_okay=False))
@click.option("--from-date", type=click.DateTime(formats=["%Y-%m-%d"]), required=True, help="Start date (YYYY-MM-DD)")
@click.option("--to-date", type=click.DateTime(formats=["%Y-%m-%d"]), required=True, help="End date (YYYY-MM-DD)")
@click.option("--latitude", default=open_meteo.DEFAULT_LATITUDE, help="Location latitude")
@click.option("--longitude", default=open_meteo.DEFAULT_LONGITUDE, help="Location longitude")
@click.option("--base-temp", type=float, help="HDD base temperature in C (default from settings)")
@click.pass_context
def fetch_hdd(ctx, output_csv, from_date, to_date, latitude, longitude, base_temp):
    """Fetch daily HDD from Open-Meteo into an HDD CSV.

    Note: The Archive API has a 5-7 day delay.
    """
    settings = ctx.obj["settings"]
    base = settings.base_temperature_c if base_temp is None else base_temp
    console.print(f"[cyan]Fetching weather data for ({latitude}, {longitude})...[/cyan]")
    try:
        hdd = open_meteo.fetch_hdd(
            from_date.date(), to_date.date(), latitude, longitude, settings.timezone, base
        )
    except httpx.HTTPStatusError as e:
        fail(f"API error: {e}")
    except (httpx.HTTPError, ValueError) as e:
        fail(f"Failed to fetch weather data: {e}")

    count = open_meteo.write_hdd_csv(hdd, Path(output_csv))
    console.print(f"[green]Wrote {count} days of HDD to {output_csv}[/green]")


if __name__ == "__main__":
    cli()
