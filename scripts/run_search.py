"""Run one availability search from the command line and export the results."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

from cruise_engine.catalog import EnrichedShip
from cruise_engine.config.run_config import RunConfig
from cruise_engine.config.settings import Settings
from cruise_engine.core.logging import configure_logging
from cruise_engine.reconcile import cabin_departures
from cruise_engine.search import SearchCriteria, SearchResult, SearchSession, collect_destinations
from cruise_engine.storage import JsonStore

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/run_config.toml")


def _format_ship(index: int, ship_dict: dict[str, object]) -> str:
    price = ship_dict.get("start_from_price") or "-"
    flag = " (operator only)" if ship_dict.get("is_synthetic") else ""
    return (
        f"{index:3}. {ship_dict['name']:35} | cabins {ship_dict['available_cabins']:>3} "
        f"| from {price}{flag}"
    )


def _print_result(result: SearchResult) -> None:
    if result.is_empty:
        print("No cruises match the selected criteria.")
        return
    print(f"{len(result.ships)} ships, {result.total_available_cabins} cabins available")
    for index, ship in enumerate(result.ships, start=1):
        print(_format_ship(index, ship.to_dict()))
    destinations = collect_destinations(result.all_ships)
    if destinations:
        print(f"Destinations: {', '.join(destinations)}")
    if result.failed_sources:
        print(f"Warning: results are incomplete ({', '.join(result.failed_sources)} unavailable)")


def _print_ship_detail(ship: EnrichedShip) -> None:
    print(f"{ship.name} ({ship.trip_length_days} days, {ship.destinations or 'destinations unknown'})")
    for cabin in ship.cabins:
        departures = cabin_departures(cabin)
        price = cabin.price if cabin.cabin.has_valid_price else "-"
        print(f"  {cabin.cabin_name:30} | guests {cabin.total_capacity} | {price}")
        print(f"    departures: {', '.join(departures) if departures else 'none reported'}")


async def run(
    settings: Settings,
    criteria: SearchCriteria,
    *,
    ship_slug: Optional[str] = None,
) -> tuple[Optional[SearchResult], Optional[EnrichedShip]]:
    async with SearchSession.from_settings(settings) as session:
        result = await session.search(criteria)
        detail = session.ship_detail(ship_slug) if ship_slug and result else None
    return result, detail


def export_result(settings: Settings, result: SearchResult) -> Path:
    path = JsonStore(settings.export_dir).write_search(result)
    logger.info("Wrote %s ships to %s", len(result.ships), path)
    return path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search cruise availability")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=(
            "Path to a TOML run configuration file "
            "(defaults to config/run_config.toml when present)"
        ),
    )
    parser.add_argument(
        "--no-config",
        action="store_true",
        help="Ignore config/run_config.toml even if it exists",
    )
    parser.add_argument(
        "--query-string",
        default=None,
        metavar="QS",
        help="Results-page query string, e.g. 'destinations=labuan-bajo&dateFrom=2025-07-01&guests=2'",
    )
    parser.add_argument(
        "--ship",
        default=None,
        metavar="SLUG",
        help="Show cabins and weekly departures for one ship, e.g. 'aurora-liveaboard'",
    )
    parser.add_argument(
        "--no-export",
        action="store_true",
        help="Print results without writing a JSON export",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON instead of a table",
    )
    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    settings = Settings()
    config_path: Optional[Path] = None
    run_config: Optional[RunConfig] = None

    if not args.no_config:
        if args.config:
            config_path = args.config
            if not config_path.exists():
                raise FileNotFoundError(f"Config file not found: {config_path}")
        elif DEFAULT_CONFIG_PATH.exists():
            config_path = DEFAULT_CONFIG_PATH

    if config_path:
        run_config = RunConfig.load(config_path)
        run_config.apply_to(settings, base_dir=config_path.parent)

    configure_logging(settings.log_level, settings.log_dir)
    settings.ensure_directories()

    if args.query_string is not None:
        criteria = SearchCriteria.from_query_string(args.query_string)
    elif run_config:
        suffix = f" ({run_config.title})" if run_config.title else ""
        logger.info("Loaded run profile '%s'%s from %s", run_config.profile, suffix, config_path)
        criteria = run_config.criteria()
    else:
        logger.info("Running with environment-based settings (no run_config applied)")
        criteria = SearchCriteria()

    logger.info("Searching with %s", criteria.to_query_string() or "no filters")
    result, detail = asyncio.run(run(settings, criteria, ship_slug=args.ship))
    if result is None:
        logger.warning("Search was superseded before it completed")
        return
    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        _print_result(result)
    if args.ship:
        if detail is None:
            logger.warning("No ship with slug '%s' in the search results", args.ship)
        else:
            _print_ship_detail(detail)
    if not args.no_export:
        export_result(settings, result)


if __name__ == "__main__":
    main()
