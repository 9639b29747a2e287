# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# metrics.py
# -----------------------------------------------------------------------------
# Purpose:
#   Collect and summarize KPIs: arrivals, served/lost cars by reason, waits,
#   liters sold, profit, leftover stock and per-day snapshots.
#
# Design notes:
#   - Keep side-effect methods (note_*) for instrumentation from the engine.
#   - Metrics is not simulation state: day reports may write here without
#     touching pumps or inventory.
#   - Summaries return JSON-serializable dicts for easy tabulation.
#
# Usage:
#   M = Metrics(cfg); ...; M.summary(station)
# -----------------------------------------------------------------------------

from __future__ import annotations
from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple

from .entities import LossReason, Request
from .queues import Event, Pump

DAY_MINUTES = 1440.0


class Metrics:
    def __init__(self, cfg: Optional[dict] = None):
        cfg = cfg or {}
        self.keep_timeline = bool(cfg.get("sim", {}).get("record_timeline", False))
        self.arrivals = 0
        self.events_processed = 0
        self.lost_by_reason: Dict[str, int] = defaultdict(int)
        self.wait_total = 0.0                  # minutes between arrival and service start
        self.wait_count = 0
        self.max_queue_seen = 0
        self.timeline: List[Tuple[float, str]] = []   # processed (t, kind) when enabled
        self.daily: List[Dict[str, Any]] = []

    def note_event(self, ev: Event):
        self.events_processed += 1
        if self.keep_timeline:
            self.timeline.append((ev.t, ev.kind.value))

    def note_arrival(self, req: Request, pump: Pump):
        self.arrivals += 1
        self.max_queue_seen = max(self.max_queue_seen, len(pump.queue))

    def note_loss(self, req: Request, reason: LossReason):
        self.lost_by_reason[reason.value] += 1

    def note_service_start(self, req: Request, now: float):
        self.wait_total += max(now - req.arrival_time, 0.0)
        self.wait_count += 1

    def note_day(self, t: float, station):
        """Cumulative snapshot at a day boundary (used for profit curves)."""
        pumps = station.pumps
        self.daily.append({
            "day": int(round(t / DAY_MINUTES)),
            "time_minutes": t,
            "served_cars": sum(p.served_cars for p in pumps),
            "lost_cars": sum(p.lost_cars for p in pumps),
            "served_liters": sum(p.served_liters for p in pumps),
            "profit_total": station.total_profit(),
        })

    def summary(self, station) -> Dict:
        pumps = station.pumps
        served = sum(p.served_cars for p in pumps)
        lost = sum(p.lost_cars for p in pumps)
        liters = sum(p.served_liters for p in pumps)
        return {
            "arrivals": self.arrivals,
            "served_cars": served,
            "served_liters": liters,
            "lost_cars": lost,
            "lost_by_reason": {r.value: self.lost_by_reason.get(r.value, 0) for r in LossReason},
            "loss_rate": (lost / self.arrivals) if self.arrivals else 0.0,
            "side_fallbacks": station.side_fallbacks,
            "avg_wait_minutes": (self.wait_total / self.wait_count) if self.wait_count else 0.0,
            "max_queue_seen": self.max_queue_seen,
            "profit": station.total_profit(),
            "profit_by_brand": station.profit_by_brand(),
            "inventory_remaining": dict(station.inventory),
            "pumps": [p.snapshot() for p in pumps],
            "daily": list(self.daily),
            "events_processed": self.events_processed,
            "timeline": list(self.timeline),
        }
