from __future__ import annotations

import argparse
import csv
import json
from pathlib import Path

from .errors import SeatingError
from .grid import generate_grid
from .logging_config import configure_logging
from .overlay import occupancy_summary, overlay_bookings
from .render import render_ascii
from .selection import SelectionState
from .storage import load_bookings, load_layout


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--layout", help="Seat layout JSON file (omit for the default grid)")
    p.add_argument("--bookings", help="Booking list JSON file")
    p.add_argument("--session", default="", help="Session id the booking list is rendered for")


def _overlay(args: argparse.Namespace):
    seats = generate_grid(load_layout(args.layout))
    return overlay_bookings(seats, load_bookings(args.bookings), args.session)


def cmd_show(args: argparse.Namespace) -> int:
    result = _overlay(args)
    print(render_ascii(result.seats, cell_width=args.width))
    return 0


def cmd_summary(args: argparse.Namespace) -> int:
    result = _overlay(args)
    print(json.dumps(occupancy_summary(result), indent=2, sort_keys=True))
    return 0


def cmd_preview(args: argparse.Namespace) -> int:
    state = SelectionState.start(_overlay(args).seats)
    for seat_id in args.click or []:
        res = state.click(seat_id, authenticated=not args.anonymous)
        state = res.state
        print(f"{seat_id}: {res.outcome.value}")
    print(render_ascii(state.view(), cell_width=args.width))
    picked = state.selected_seat
    print(f"Selected: {picked.id if picked else '-'}")
    return 0


def cmd_export_csv(args: argparse.Namespace) -> int:
    result = _overlay(args)
    out = Path(args.output)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["id", "row", "column", "type", "status", "label", "credit_cost"])
        for s in result.seats:
            w.writerow([s.id, s.row, s.column, s.type.value, s.status.value, s.label or "", s.credit_cost or ""])
    print(f"Exported {len(result.seats)} seats to {out}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="studio_seating", description="Studio seat grid and occupancy tools.")
    p.add_argument("--log-level", default=None, help="Log level (default: $STUDIO_SEATING_LOG_LEVEL or INFO)")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_show = sub.add_parser("show", help="Print the seat grid with occupancy")
    _add_common_args(p_show)
    p_show.add_argument("--width", type=int, default=3, help="Cell width for display")
    p_show.set_defaults(func=cmd_show)

    p_summary = sub.add_parser("summary", help="Print occupancy counts as JSON")
    _add_common_args(p_summary)
    p_summary.set_defaults(func=cmd_summary)

    p_preview = sub.add_parser("preview", help="Replay seat clicks for one viewer and print the result")
    _add_common_args(p_preview)
    p_preview.add_argument("--click", action="append", help="Seat id to click (repeatable)")
    p_preview.add_argument("--anonymous", action="store_true", help="Click as a signed-out viewer")
    p_preview.add_argument("--width", type=int, default=3, help="Cell width for display")
    p_preview.set_defaults(func=cmd_preview)

    p_export = sub.add_parser("export-csv", help="Export the seat grid to a CSV file")
    _add_common_args(p_export)
    p_export.add_argument("--output", required=True)
    p_export.set_defaults(func=cmd_export_csv)

    return p


def main() -> int:
    p = build_parser()
    args = p.parse_args()
    configure_logging(args.log_level)
    try:
        return int(args.func(args))
    except SeatingError as e:
        print(f"Error: {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
