"""CLI for querying the airport lookup from a terminal."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING

import click

from airport_lookup.config import LookupSettings
from airport_lookup.exceptions import AirportLookupError
from airport_lookup.formatting import format_airport_display
from airport_lookup.service import AirportLookupService

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from airport_lookup.schemas import AirportOption

logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def _print_airports(airports: list[AirportOption], json_output: bool) -> None:
    if json_output:
        click.echo(json.dumps([a.model_dump(mode="json") for a in airports], indent=2))
        return
    if not airports:
        click.echo("No airports found.")
        return
    for i, airport in enumerate(airports, 1):
        click.echo(f"  {i:>2}. {format_airport_display(airport)} [{airport.source}]")


def _run(
    action: Callable[[AirportLookupService], Awaitable[list[AirportOption]]],
    json_output: bool,
) -> None:
    async def _main() -> list[AirportOption]:
        async with AirportLookupService(LookupSettings()) as service:
            return await action(service)

    _print_airports(asyncio.run(_main()), json_output)


@click.group()
@click.option("-v", "--verbose", count=True, help="-v for INFO, -vv for DEBUG logs")
def cli(verbose: int) -> None:
    """Airport lookup CLI."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG if verbose > 1 else logging.INFO)


@cli.command("search")
@click.argument("query")
@click.option("--wait", is_flag=True, help="Wait for background catalog refresh")
@click.option("--json-output", is_flag=True, help="Output as JSON")
def search(query: str, wait: bool, json_output: bool) -> None:
    """Search airports by code, city, name or country."""

    async def action(service: AirportLookupService) -> list[AirportOption]:
        results = await service.search(query)
        if wait:
            await service.wait_for_background()
            results = await service.search(query)
        return results

    _run(action, json_output)


@cli.command("nearest")
@click.argument("lat", type=float)
@click.argument("lon", type=float)
@click.option("--limit", default=5, show_default=True, help="Number of airports")
@click.option("--json-output", is_flag=True, help="Output as JSON")
def nearest(lat: float, lon: float, limit: int, json_output: bool) -> None:
    """List bundled airports closest to LAT LON."""

    async def action(service: AirportLookupService) -> list[AirportOption]:
        return service.nearest_airports(lat, lon, limit)

    _run(action, json_output)


@cli.command("top")
@click.option("--limit", default=20, show_default=True, help="Number of airports")
@click.option("--json-output", is_flag=True, help="Output as JSON")
def top(limit: int, json_output: bool) -> None:
    """Default airport list (major hubs once the catalog is cached)."""

    async def action(service: AirportLookupService) -> list[AirportOption]:
        await service.initialize()
        return service.get_top_airports(limit)

    _run(action, json_output)


@cli.command("select")
@click.argument("iata")
@click.option("--json-output", is_flag=True, help="Output as JSON")
def select(iata: str, json_output: bool) -> None:
    """Record IATA as a recent selection and print the recents list."""

    async def action(service: AirportLookupService) -> list[AirportOption]:
        code = iata.upper()
        matches = [a for a in await service.search(code) if a.iata == code]
        if not matches:
            raise click.ClickException(f"Unknown airport code: {code}")
        await service.save_recent_search(matches[0])
        return await service.get_recent_searches()

    _run(action, json_output)


@cli.command("recent")
@click.option("--json-output", is_flag=True, help="Output as JSON")
def recent(json_output: bool) -> None:
    """Show recently selected airports."""

    async def action(service: AirportLookupService) -> list[AirportOption]:
        return await service.get_recent_searches()

    _run(action, json_output)


@cli.command("warm")
def warm() -> None:
    """Download the Duffel catalog into the configured cache."""

    async def _main() -> int:
        async with AirportLookupService(LookupSettings()) as service:
            snapshot = await service.cache.refresh_catalog()
            return len(snapshot.airports)

    try:
        count = asyncio.run(_main())
    except AirportLookupError as exc:
        raise click.ClickException(str(exc)) from exc
    if count:
        click.echo(f"Cached {count} airports.")
    else:
        click.echo("No airports cached (is AIRPORTS_REMOTE_API_TOKEN set?).", err=True)


if __name__ == "__main__":
    cli()
