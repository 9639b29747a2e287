# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# config.py
# -----------------------------------------------------------------------------
# Purpose:
#   Load the YAML run configuration, merge scenario / command-line overrides
#   and check the values the simulation core relies on.
#
# Design notes:
#   - fuelsim/baseline.yaml (shipped as package data) is the single source of
#     defaults; it is read through importlib.resources so installed copies
#     find it too.
#   - apply_overrides() deep-copies, so scenarios never mutate the base cfg.
#   - validate_cfg() enforces the operator-facing ranges (1..20 pumps,
#     1..20 queue slots, 1..30 days). The engine itself does not re-check them.
#
# Usage:
#   cfg = validate_cfg(apply_overrides(load_cfg(), {"sim": {"days": 3}}))
# -----------------------------------------------------------------------------

from __future__ import annotations
import copy
from importlib import resources
from datetime import date, datetime
from typing import Dict, Optional

import yaml

from .entities import PumpAccess

DEFAULT_CONFIG = "baseline.yaml"

PUMPS_RANGE = (1, 20)
QUEUE_RANGE = (1, 20)
DAYS_RANGE = (1, 30)
DISTRIBUTIONS = ("uniform", "normal")


class ConfigError(ValueError):
    """Raised when a configuration value is missing or out of range."""


def load_cfg(path: Optional[str] = None) -> Dict:
    """Read `path`, or the packaged baseline when no path is given."""
    if path is None:
        text = resources.files(__package__).joinpath(DEFAULT_CONFIG).read_text(encoding="utf-8")
    else:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    cfg = yaml.safe_load(text) or {}
    if not isinstance(cfg, dict):
        raise ConfigError(f"{path or DEFAULT_CONFIG}: top level must be a mapping")
    return cfg


def apply_overrides(cfg: Dict, overrides: Dict) -> Dict:
    """Apply scenario overrides (recursive merge) on top of the base config."""
    new = copy.deepcopy(cfg)

    def _merge(dst: Dict, src: Dict):
        for key, val in src.items():
            if isinstance(val, dict) and isinstance(dst.get(key), dict):
                _merge(dst[key], val)
            else:
                dst[key] = copy.deepcopy(val)

    _merge(new, overrides)
    return new


def start_datetime(cfg: Dict) -> datetime:
    """Calendar instant of simulation time 0 (midnight of sim.start_date)."""
    raw = cfg.get("sim", {}).get("start_date", "2025-03-03")
    if isinstance(raw, datetime):
        return datetime(raw.year, raw.month, raw.day)
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day)
    try:
        return datetime.strptime(str(raw), "%Y-%m-%d")
    except ValueError as exc:
        raise ConfigError(f"sim.start_date: expected YYYY-MM-DD, got {raw!r}") from exc


def _int_in(value, lo: int, hi: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{name}: expected an integer, got {value!r}")
    if value < lo or value > hi:
        raise ConfigError(f"{name}: must be between {lo} and {hi}, got {value}")
    return value


def _non_negative(table: Dict, brands, name: str):
    for brand in brands:
        if brand not in table:
            raise ConfigError(f"{name}: missing entry for brand {brand!r}")
        val = table[brand]
        if not isinstance(val, (int, float)) or isinstance(val, bool):
            raise ConfigError(f"{name}.{brand}: expected a number, got {val!r}")
        if val < 0:
            raise ConfigError(f"{name}.{brand}: cannot be negative ({val})")


def validate_cfg(cfg: Dict) -> Dict:
    """Check ranges and cross-field consistency; returns cfg unchanged."""
    sim = cfg.get("sim", {})
    st = cfg.get("station")
    if not isinstance(st, dict):
        raise ConfigError("station: section is required")
    _int_in(sim.get("days"), *DAYS_RANGE, "sim.days")
    _int_in(st.get("pumps"), *PUMPS_RANGE, "station.pumps")
    _int_in(st.get("max_queue"), *QUEUE_RANGE, "station.max_queue")
    start_datetime(cfg)

    brands = st.get("brands") or []
    if not brands:
        raise ConfigError("station.brands: at least one brand is required")
    if len(set(brands)) != len(brands):
        raise ConfigError(f"station.brands: duplicate brand in {brands}")
    for table in ("base_price", "markup_percent", "inventory"):
        _non_negative(st.get(table) or {}, brands, f"station.{table}")
    for name in st.get("pump_access") or []:
        try:
            PumpAccess(name)
        except ValueError as exc:
            raise ConfigError(f"station.pump_access: unknown access {name!r}") from exc

    arr = cfg.get("arrivals", {})
    dist = arr.get("distribution", "uniform")
    if dist not in DISTRIBUTIONS:
        raise ConfigError(f"arrivals.distribution: expected one of {DISTRIBUTIONS}, got {dist!r}")
    uniform = arr.get("uniform", {})
    if float(uniform.get("a", 0.5)) > float(uniform.get("b", 4.0)):
        raise ConfigError("arrivals.uniform: a must not exceed b")
    if float(uniform.get("a", 0.5)) < 0:
        raise ConfigError("arrivals.uniform.a: cannot be negative")
    if float(arr.get("normal", {}).get("sigma", 3.0)) < 0:
        raise ConfigError("arrivals.normal.sigma: cannot be negative")

    cust = cfg.get("customers", {})
    lo, hi = float(cust.get("min_volume", 10.0)), float(cust.get("max_volume", 50.0))
    if lo <= 0 or lo > hi:
        raise ConfigError(f"customers: need 0 < min_volume <= max_volume, got {lo}..{hi}")
    return cfg
