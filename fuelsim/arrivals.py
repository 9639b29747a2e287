# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# arrivals.py
# -----------------------------------------------------------------------------
# Purpose:
#   Sampling model for the forecourt: inter-arrival gaps (uniform or folded
#   normal), time-of-day / day-of-week intensity, price elasticity of demand,
#   random car attributes and volume-driven service times.
#
# Design notes:
#   - The Sampler owns its own random.Random; nothing here touches the
#     module-level generator, so a seed fully determines a run.
#   - Draw order inside generate_request() is fixed (brand, volume, side);
#     changing it changes every trace for a given seed.
#   - Intensity windows use calendar hours, so the Sampler maps simulation
#     minutes onto the configured start date.
#
# Usage:
#   sampler = Sampler(seed=42, start=datetime(2025, 3, 3))
#   gap = sampler.sample_inter_arrival(now, markups)
# -----------------------------------------------------------------------------

from __future__ import annotations
import math, random
from datetime import datetime, timedelta
from typing import Dict, Optional, Sequence, Tuple

from .entities import Request, TankSide

# (first_hour, last_hour, factor); hours are inclusive
MORNING_PEAK: Tuple[int, int, float] = (7, 9, 1.6)
EVENING_PEAK: Tuple[int, int, float] = (17, 19, 1.4)
NIGHT_FACTOR = 0.4                 # hour >= 22 or hour <= 5
NIGHT_FROM, NIGHT_UNTIL = 22, 5
WEEKEND_FACTOR = 1.3

MIN_INTER_ARRIVAL = 0.1            # minutes
MIN_FACTOR = 0.01
SERVICE_BOUNDS = (0.5, 10.0)       # minutes


class Sampler:
    """Random source for arrivals, car attributes and service times.

    Parameters
    ----------
    seed : int | None
        Seed of the private generator.
    start : datetime
        Calendar instant of simulation time 0.
    distribution : str
        "uniform" on [uniform_a, uniform_b] or "normal" (mu, sigma), folded
        to non-negative values.
    price_elasticity : float
        Arrival reduction per markup percent (0.03 -> 3% fewer cars per 1%).
    """
    def __init__(
        self,
        seed: Optional[int] = None,
        start: datetime = datetime(2025, 3, 3),
        distribution: str = "uniform",
        uniform_a: float = 0.5,
        uniform_b: float = 4.0,
        normal_mu: float = 10.0,
        normal_sigma: float = 3.0,
        price_elasticity: float = 0.03,
        service_overhead: float = 0.5,
        minutes_per_liter: float = 0.03,
    ):
        if distribution not in ("uniform", "normal"):
            raise ValueError(f"Unknown inter-arrival distribution {distribution!r}")
        self.rng = random.Random(seed)
        self.start = start
        self.distribution = distribution
        self.uniform_a = uniform_a
        self.uniform_b = uniform_b
        self.normal_mu = normal_mu
        self.normal_sigma = normal_sigma
        self.price_elasticity = price_elasticity
        self.service_overhead = service_overhead
        self.minutes_per_liter = minutes_per_liter
        self._next_id = 0

    # -- inter-arrival -------------------------------------------------------

    def sample_base_inter_arrival(self) -> float:
        """Unadjusted gap in minutes drawn from the configured distribution."""
        if self.distribution == "uniform":
            return self.uniform_a + self.rng.random() * (self.uniform_b - self.uniform_a)
        # Box-Muller; 1 - U keeps log() away from zero
        u1 = 1.0 - self.rng.random()
        u2 = 1.0 - self.rng.random()
        z = math.sqrt(-2.0 * math.log(u1)) * math.sin(2.0 * math.pi * u2)
        return abs(self.normal_mu + self.normal_sigma * z)

    def arrival_factor(self, markups: Dict[str, float]) -> float:
        """Demand multiplier from the average markup across brands."""
        if not markups:
            return 1.0
        avg_markup = sum(markups.values()) / len(markups)
        return max(MIN_FACTOR, 1.0 - avg_markup * self.price_elasticity)

    def get_time_factor(self, t: float) -> float:
        """Arrival intensity at simulation time `t` (minutes)."""
        when = self.start + timedelta(minutes=t)
        hour = when.hour
        lo, hi, morning = MORNING_PEAK
        e_lo, e_hi, evening = EVENING_PEAK
        if lo <= hour <= hi:
            factor = morning
        elif e_lo <= hour <= e_hi:
            factor = evening
        elif hour >= NIGHT_FROM or hour <= NIGHT_UNTIL:
            factor = NIGHT_FACTOR
        else:
            factor = 1.0
        if when.weekday() >= 5:
            factor *= WEEKEND_FACTOR
        return factor

    def sample_inter_arrival(self, t: float, markups: Optional[Dict[str, float]] = None) -> float:
        base = self.sample_base_inter_arrival()
        adjusted = base / self.arrival_factor(markups or {}) / max(MIN_FACTOR, self.get_time_factor(t))
        return max(MIN_INTER_ARRIVAL, adjusted)

    # -- cars ----------------------------------------------------------------

    def generate_request(self, t: float, brands: Sequence[str], min_volume: float, max_volume: float) -> Request:
        self._next_id += 1
        brand = self.rng.choice(list(brands))
        volume = round(min_volume + self.rng.random() * (max_volume - min_volume), 1)
        side = TankSide.LEFT if self.rng.random() < 0.5 else TankSide.RIGHT
        return Request(self._next_id, t, brand, volume, side)

    def compute_service_time(self, volume: float) -> float:
        lo, hi = SERVICE_BOUNDS
        return max(lo, min(hi, self.service_overhead + self.minutes_per_liter * volume))

    @property
    def issued(self) -> int:
        """Number of requests generated so far."""
        return self._next_id
