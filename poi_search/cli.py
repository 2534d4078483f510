"""Command-line entry point: run one search and print the places found.

    python -m poi_search "coffee" --provider geoapify --near "Pasadena, CA"
    python -m poi_search "gas stations" --lat 34.1478 --lon -118.1445 --radius 5
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional, Sequence

from .config import get_config
from .container import Container
from .domain.categories import LANDING_CATEGORIES
from .domain.models import Coordinate, PlaceRecord, ProviderSelection, SearchPhase
from .logging_config import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="poi_search",
        description="Search nearby points of interest.",
        epilog="Category shortcuts: " + ", ".join(LANDING_CATEGORIES),
    )
    parser.add_argument("query", nargs="+", help="Category label or free text")
    parser.add_argument(
        "--provider",
        choices=[s.value for s in ProviderSelection],
        help="Backend to search with (default from POI_PROVIDER_DEFAULT)",
    )
    parser.add_argument("--near", help="Address or place to search around")
    parser.add_argument("--lat", type=float, help="Latitude of the search origin")
    parser.add_argument("--lon", type=float, help="Longitude of the search origin")
    parser.add_argument("--radius", type=int, help="Search radius in miles")
    parser.add_argument("--open-now", action="store_true", help="Only places open now")
    parser.add_argument("--details", action="store_true", help="Fetch phone and hours per place")
    return parser


def format_place(place: PlaceRecord) -> str:
    lines = [place.name]
    if place.address.formatted:
        lines.append(f"  {place.address.formatted}")
    if place.phone:
        lines.append(f"  {place.phone}")
    if place.website:
        lines.append(f"  {place.website}")
    lines.extend(f"  {line}" for line in place.hours)
    return "\n".join(lines)


async def run_search(container: Container, args: argparse.Namespace) -> int:
    from .adapters.location import StaticLocationSource
    from .ports.location import DeviceLocationSourcePort
    from .ports.preferences import PreferencesPort
    from .services import SearchCoordinator

    if args.lat is not None and args.lon is not None:
        origin = Coordinate(args.lat, args.lon)
        container.register(DeviceLocationSourcePort, lambda: StaticLocationSource(origin))

    preferences = container.resolve(PreferencesPort)
    if args.provider:
        await preferences.save_provider(ProviderSelection(args.provider))
    if args.radius is not None:
        await preferences.save_search_radius(args.radius)
    if args.open_now:
        await preferences.save_open_now(True)
    if args.near:
        await preferences.save_default_location(args.near)
        await preferences.save_use_device_location(False)
    elif args.lat is not None and args.lon is not None:
        await preferences.save_use_device_location(True)

    try:
        async with container.resolve(SearchCoordinator) as coordinator:
            coordinator.on_query_changed(" ".join(args.query))
            await coordinator.wait_idle()

            if coordinator.phase.value is SearchPhase.FAILED:
                print(coordinator.location_error.value or "Search failed", file=sys.stderr)
                return 2

            places: List[PlaceRecord] = coordinator.results.value
            if args.details:
                places = [await coordinator.place_details(p) for p in places]
    finally:
        await container.aclose()

    if not places:
        print("No places found.")
        return 1
    for place in places:
        print(format_place(place))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if (args.lat is None) != (args.lon is None):
        print("--lat and --lon must be given together", file=sys.stderr)
        return 2

    config = get_config()
    configure_logging(config.observability)
    container = Container.create_default(config)
    try:
        return asyncio.run(run_search(container, args))
    except KeyboardInterrupt:
        return 130
