# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# stations.py
# -----------------------------------------------------------------------------
# Purpose:
#   The Station aggregate: a fixed, indexed set of pumps, per-brand price,
#   markup and inventory tables, and the Sampler/AllocationPolicy it owns.
#   make_station(cfg) builds one from the YAML config.
#
# Design notes:
#   - Inventory is never replenished. withdraw() is only called after
#     has_stock() succeeded, so a brand's stock never goes negative.
#   - A brand missing from the inventory table has no stock at all.
#   - Profit is the markup earned on liters sold per pump brand:
#     liters * base_price * markup / 100.
#
# Usage:
#   from fuelsim.stations import make_station
#   station = make_station(cfg, trace)
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Dict, List, Optional, Sequence

from .arrivals import Sampler
from .config import start_datetime
from .entities import PumpAccess, Request
from .policies import AllocationPolicy
from .queues import Pump
from .tracelog import TraceLog


class Station:
    def __init__(
        self,
        sampler: Sampler,
        brands: Sequence[str],
        base_price: Dict[str, float],
        markup_percent: Dict[str, float],
        inventory: Dict[str, float],
        min_volume: float = 10.0,
        max_volume: float = 50.0,
        policy: Optional[AllocationPolicy] = None,
        trace: Optional[TraceLog] = None,
    ):
        self.sampler = sampler
        self.brands = list(brands)
        self.base_price = dict(base_price)
        self.markup_percent = dict(markup_percent)
        self.inventory = {b: float(v) for b, v in inventory.items()}
        self.min_volume = min_volume
        self.max_volume = max_volume
        self.policy = policy or AllocationPolicy()
        self.trace = trace
        self.pumps: List[Pump] = []
        self.side_fallbacks = 0

    def add_pump(self, pump: Pump):
        self.pumps.append(pump)

    def pump(self, index: int) -> Optional[Pump]:
        """Pump at `index`, or None when the index does not name a pump."""
        if 0 <= index < len(self.pumps):
            return self.pumps[index]
        return None

    def index_of(self, pump: Pump) -> int:
        return self.pumps.index(pump)

    # -- demand --------------------------------------------------------------

    def sample_inter_arrival(self, t: float) -> float:
        return self.sampler.sample_inter_arrival(t, self.markup_percent)

    def generate_request(self, t: float) -> Request:
        req = self.sampler.generate_request(t, self.brands, self.min_volume, self.max_volume)
        if self.trace is not None:
            self.trace.write(f"Created {req.describe(self.trace.stamp(t))}")
        return req

    def dispatch(self, req: Request) -> Pump:
        pump = self.policy.dispatch(req, self.pumps)
        if self.policy.last_fallback:
            self.side_fallbacks += 1
            if self.trace is not None:
                self.trace.write(f"No side-compatible pump for car {req.rid} (side={req.side.value}).")
        return pump

    def compute_service_time(self, volume: float) -> float:
        return self.sampler.compute_service_time(volume)

    # -- inventory & economics ----------------------------------------------

    def has_stock(self, brand: str, volume: float) -> bool:
        # shortfall is a strict less-than
        return self.inventory.get(brand, 0.0) >= volume

    def withdraw(self, brand: str, volume: float):
        if not self.has_stock(brand, volume):
            raise ValueError(f"cannot withdraw {volume} L of {brand}: only {self.inventory.get(brand, 0.0)} L left")
        self.inventory[brand] -= volume

    def profit_by_brand(self) -> Dict[str, float]:
        profit: Dict[str, float] = {}
        for p in self.pumps:
            if p.brand not in self.base_price or p.brand not in self.markup_percent:
                continue
            earned = p.served_liters * self.base_price[p.brand] * (self.markup_percent[p.brand] / 100.0)
            profit[p.brand] = profit.get(p.brand, 0.0) + earned
        return profit

    def total_profit(self) -> float:
        return sum(self.profit_by_brand().values())


def make_station(cfg: dict, trace: Optional[TraceLog] = None) -> Station:
    """
    Build a Station from a validated config dict.

    Pump i (0-based) gets number i+1, brand brands[i % len(brands)] and
    access pump_access[i % len(pump_access)].
    """
    sim = cfg.get("sim", {})
    st = cfg["station"]
    arr = cfg.get("arrivals", {})
    svc = cfg.get("service", {})
    cust = cfg.get("customers", {})

    uniform = arr.get("uniform", {})
    normal = arr.get("normal", {})
    sampler = Sampler(
        seed=sim.get("seed"),
        start=start_datetime(cfg),
        distribution=arr.get("distribution", "uniform"),
        uniform_a=float(uniform.get("a", 0.5)),
        uniform_b=float(uniform.get("b", 4.0)),
        normal_mu=float(normal.get("mu", 10.0)),
        normal_sigma=float(normal.get("sigma", 3.0)),
        price_elasticity=float(arr.get("price_elasticity", 0.03)),
        service_overhead=float(svc.get("overhead_minutes", 0.5)),
        minutes_per_liter=float(svc.get("minutes_per_liter", 0.03)),
    )
    brands = list(st["brands"])
    station = Station(
        sampler,
        brands,
        base_price=st.get("base_price", {}),
        markup_percent=st.get("markup_percent", {}),
        inventory=st.get("inventory", {}),
        min_volume=float(cust.get("min_volume", 10.0)),
        max_volume=float(cust.get("max_volume", 50.0)),
        trace=trace,
    )
    access = [PumpAccess(a) for a in st.get("pump_access") or ["Both"]]
    for i in range(int(st["pumps"])):
        station.add_pump(Pump(
            number=i + 1,
            brand=brands[i % len(brands)],
            max_queue=int(st["max_queue"]),
            access=access[i % len(access)],
            trace=trace,
        ))
    return station
