"""Command-line entry point: run one station simulation from the YAML config."""

from __future__ import annotations
import argparse
import json
import logging
from typing import Dict, List, Optional

from .config import ConfigError, apply_overrides, load_cfg, start_datetime, validate_cfg
from .simulation import run_simulation
from .tracelog import TraceLog


def _brand_values(pairs: List[str], flag: str, parser: argparse.ArgumentParser) -> Dict[str, float]:
    """Parse repeated BRAND=VALUE options."""
    out: Dict[str, float] = {}
    for item in pairs:
        brand, sep, raw = item.partition("=")
        if not sep or not brand:
            parser.error(f"{flag}: expected BRAND=VALUE, got {item!r}")
        try:
            out[brand] = float(raw.replace(",", "."))
        except ValueError:
            parser.error(f"{flag}: {raw!r} is not a number")
    return out


def build_overrides(args: argparse.Namespace, parser: argparse.ArgumentParser) -> Dict:
    sim: Dict = {}
    station: Dict = {}
    if args.days is not None:
        sim["days"] = args.days
    if args.seed is not None:
        sim["seed"] = args.seed
    if args.start_date is not None:
        sim["start_date"] = args.start_date
    if args.pumps is not None:
        station["pumps"] = args.pumps
    if args.max_queue is not None:
        station["max_queue"] = args.max_queue
    if args.markup:
        station["markup_percent"] = _brand_values(args.markup, "--markup", parser)
    if args.inventory:
        station["inventory"] = _brand_values(args.inventory, "--inventory", parser)
    return {"sim": sim, "station": station}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fuelsim",
        description="Discrete-event simulation of a multi-pump fuel station",
    )
    parser.add_argument("--config", default=None, help="YAML config (default: packaged baseline.yaml)")
    parser.add_argument("--days", type=int, default=None, help="simulated days (1..30)")
    parser.add_argument("--pumps", type=int, default=None, help="number of pumps (1..20)")
    parser.add_argument("--max-queue", type=int, default=None, help="waiting cars per pump (1..20)")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--start-date", default=None, help="calendar date of day 1, YYYY-MM-DD")
    parser.add_argument("--markup", action="append", default=[], metavar="BRAND=PCT",
                        help="markup percent for a brand (repeatable)")
    parser.add_argument("--inventory", action="append", default=[], metavar="BRAND=LITERS",
                        help="initial stock for a brand (repeatable)")
    parser.add_argument("--output", default="simulation_output.txt", help="trace file")
    parser.add_argument("--json", action="store_true", help="print the full summary as JSON")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = validate_cfg(apply_overrides(load_cfg(args.config), build_overrides(args, parser)))
    except ConfigError as exc:
        parser.error(str(exc))

    with open(args.output, "w", encoding="utf-8") as f:
        trace = TraceLog(start_datetime(cfg), stream=f, keep=False)
        res = run_simulation(cfg, trace)

    if args.json:
        print(json.dumps(res, indent=2))
        return
    print("=== Simulation Result ===")
    print(f"Config: pumps={cfg['station']['pumps']}, max_queue={cfg['station']['max_queue']}, "
          f"days={cfg['sim']['days']}, seed={cfg['sim'].get('seed')}")
    print(f"Arrivals: {res['arrivals']}")
    print(f"Served cars: {res['served_cars']}")
    print(f"Fuel sold: {res['served_liters']:.1f} L")
    print(f"Lost cars: {res['lost_cars']} {res['lost_by_reason']}")
    print(f"Avg wait: {res['avg_wait_minutes']:.2f} min")
    print(f"Profit: {res['profit']:,.2f}")
    print(f"Trace written to {args.output}")


if __name__ == "__main__":
    main()
