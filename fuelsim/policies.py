# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# policies.py
# -----------------------------------------------------------------------------
# Purpose:
#   Pump allocation policy: which pump a newly arrived car drives up to,
#   given brand affinity, tank-side compatibility and queue balancing.
#
# Design notes:
#   - Keep pure functions to ease testing (policy -> decision); the policy
#     reads pump state but never mutates it.
#   - When no candidate pump can reach the car's tank side, the car still goes
#     to the globally shortest line, which may or may not serve that side.
#     The policy flags the decision in `last_fallback`; the station logs and
#     counts it.
#
# Usage:
#   from fuelsim.policies import AllocationPolicy
#   pump = AllocationPolicy().dispatch(req, station.pumps)
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import List, Sequence

from .entities import Request
from .queues import Pump

# Maximum tolerated spread between the longest and shortest candidate line.
BALANCE_SPREAD = 2


def shortest_queue(pumps: Sequence[Pump]) -> Pump:
    """First pump (station order) among those with the fewest waiting cars."""
    return min(pumps, key=lambda p: len(p.queue))


def balance(candidates: List[Pump], spread: int = BALANCE_SPREAD) -> List[Pump]:
    """Drop candidates whose line is more than one car above the shortest
    when the longest and shortest lines differ by more than `spread`."""
    lengths = [len(p.queue) for p in candidates]
    lo, hi = min(lengths), max(lengths)
    if hi - lo > spread:
        return [p for p in candidates if len(p.queue) <= lo + 1]
    return candidates


class AllocationPolicy:
    def __init__(self, spread: int = BALANCE_SPREAD):
        self.spread = spread
        # True when the most recent dispatch() found no side-compatible candidate
        self.last_fallback = False

    def dispatch(self, req: Request, pumps: Sequence[Pump]) -> Pump:
        self.last_fallback = False
        if not pumps:
            raise ValueError("station has no pumps")
        candidates = [p for p in pumps if p.brand == req.brand]
        if not candidates:
            candidates = list(pumps)

        candidates = [p for p in candidates if p.serves(req.side)]
        if not candidates:
            self.last_fallback = True
            return shortest_queue(pumps)

        candidates = balance(candidates, self.spread)
        return min(candidates, key=lambda p: (len(p.queue), p.number))
