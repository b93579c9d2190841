"""Utility CLI for inspecting and editing the locally stored itinerary."""
from __future__ import annotations

import argparse
import json
from typing import Optional, Sequence

from cruise_engine.config.settings import Settings
from cruise_engine.itinerary import ItineraryLineItem, ItineraryStore
from cruise_engine.search.criteria import parse_positive_int
from cruise_engine.storage import LocalStorage


def _format_item(index: int, item: ItineraryLineItem) -> str:
    price = f"{item.price:,.0f}" if item.price else "-"
    return f"{index:3} | {item.ship_name:30} | {item.cabin_name:30} | {item.date} | guests {item.guest_count} | {price}"


def _print_items(items: Sequence[ItineraryLineItem]) -> None:
    if not items:
        print("Itinerary is empty.")
        return
    for index, item in enumerate(items):
        print(_format_item(index, item))


def _prompt_guests(cabin_name: str, ship_name: str, date: str, guest_count: int) -> Optional[int]:
    answer = input(f"Guests for {cabin_name} on {ship_name} ({date}) [{guest_count}], 'n' to cancel: ").strip()
    if answer.lower() in {"n", "no"}:
        return None
    return parse_positive_int(answer, guest_count) if answer else guest_count


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect or edit the saved cruise itinerary.")
    parser.add_argument("--json", action="store_true", help="Print items as JSON instead of a table.")
    commands = parser.add_subparsers(dest="command")

    commands.add_parser("list", help="Show every reserved cabin and the totals.")

    toggle = commands.add_parser("toggle", help="Reserve a cabin, or drop it when already reserved.")
    toggle.add_argument("ship", help="Ship name as shown in search results.")
    toggle.add_argument("cabin", help="Cabin name.")
    toggle.add_argument("date", help="Departure date (YYYY-MM-DD).")
    toggle.add_argument("--price", type=float, default=0, help="Price recorded with the reservation.")
    toggle.add_argument("--guests", type=int, default=None, help="Guest count (defaults to settings).")
    toggle.add_argument("--yes", action="store_true", help="Skip the guest confirmation prompt.")

    remove = commands.add_parser("remove", help="Remove the item at a list index.")
    remove.add_argument("index", type=int)

    commands.add_parser("clear", help="Delete the whole itinerary.")
    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    settings = Settings()
    settings.ensure_directories()

    with LocalStorage.from_settings(settings) as storage:
        store = ItineraryStore.from_settings(storage, settings)

        if args.command == "toggle":
            guests = args.guests if args.guests and args.guests > 0 else settings.default_guests
            present = store.toggle(
                args.cabin,
                args.ship,
                args.date,
                price=args.price,
                guest_count=guests,
                confirm=None if args.yes else _prompt_guests,
            )
            print(f"{args.cabin} on {args.ship} ({args.date}) {'added' if present else 'not in itinerary'}.")
        elif args.command == "remove":
            removed = store.remove(args.index)
            if removed is None:
                parser.error(f"No itinerary item at index {args.index}")
            print(f"Removed {removed.cabin_name} on {removed.ship_name} ({removed.date}).")
        elif args.command == "clear":
            store.clear()
            print("Itinerary cleared.")

        items = store.items
        totals = store.totals()
        if args.json:
            print(
                json.dumps(
                    {"items": [item.to_dict() for item in items], "totals": totals.to_dict()},
                    indent=2,
                    ensure_ascii=False,
                )
            )
            return
        _print_items(items)
        print(
            f"Total: {totals.cabin_count} cabins, {totals.guest_count} guests, {totals.price_total:,.0f}"
        )


if __name__ == "__main__":
    main()
