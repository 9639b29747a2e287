"""
experiments/optimize_markup.py

Grid sweep over a uniform markup level (the same percent applied to every
brand). A higher markup earns more per liter but, through price elasticity,
thins out arrivals; this walks the grid and reports the level with the best
average profit across a fixed block of seeds (common random numbers).
"""

from __future__ import annotations
import copy, math
from typing import Dict, List, Tuple

from fuelsim.config import apply_overrides, load_cfg, validate_cfg
from fuelsim.simulation import run_simulation
from .scenarios import SCENARIOS

SELECTED_SCENARIOS = ["baseline"]

# Monte Carlo controls: number of replications per candidate and the seed to start from.
SEARCH_ITERATIONS = 3
SEARCH_START_SEED = 3


def float_grid(lo: float, hi: float, step: float) -> List[float]:
    """
    Expand a closed interval [lo, hi] into evenly spaced values using the
    provided step. Example: (0, 4) with step 2 -> [0.0, 2.0, 4.0].
    """
    vals: List[float] = []
    if step <= 0:
        step = 1.0
    cur = lo
    while cur <= hi + 1e-9:
        vals.append(round(cur, 4))
        cur += step
    if vals and vals[-1] < hi - 1e-9:
        vals.append(round(hi, 4))
    return vals


def with_markup(cfg: Dict, level: float) -> Dict:
    brands = cfg["station"]["brands"]
    return apply_overrides(cfg, {"station": {"markup_percent": {b: level for b in brands}}})


def evaluate(cfg: Dict, iterations: int, start_seed: int) -> float:
    """Average profit over seeds start_seed..start_seed+iterations-1."""
    iterations = max(1, iterations)
    profits: List[float] = []
    for i in range(iterations):
        cand = copy.deepcopy(cfg)
        cand.setdefault("sim", {})["seed"] = start_seed + i
        res = run_simulation(cand)
        profits.append(float(res.get("profit", -math.inf)))
    return sum(profits) / len(profits)


def sweep(base_cfg: Dict, grid: List[float], iterations: int, start_seed: int) -> Tuple[float, float, List[Tuple[float, float]]]:
    """Return (best_level, best_profit, [(level, profit), ...])."""
    table: List[Tuple[float, float]] = []
    best_level, best_profit = grid[0], -math.inf
    for level in grid:
        profit = evaluate(with_markup(base_cfg, level), iterations, start_seed)
        table.append((level, profit))
        if profit > best_profit:
            best_level, best_profit = level, profit
    return best_level, best_profit, table


def search(
    iterations: int = SEARCH_ITERATIONS,
    start_seed: int = SEARCH_START_SEED,
    scenario_names: List[str] = SELECTED_SCENARIOS,
):
    base = load_cfg()
    grid_cfg = base.get("experiments", {}).get("markup_grid", {})
    grid = float_grid(float(grid_cfg.get("lo", 0.0)), float(grid_cfg.get("hi", 20.0)),
                      float(grid_cfg.get("step", 2.0)))
    sc_index = {sc["name"]: sc for sc in SCENARIOS}
    for sc_name in scenario_names or list(sc_index):
        sc = sc_index.get(sc_name)
        if sc is None:
            print(f"[warn] scenario '{sc_name}' not found; skipping.")
            continue
        print(f"\n=== Markup sweep: {sc['name']} ===")
        cfg = validate_cfg(apply_overrides(base, sc["overrides"]))
        best_level, best_profit, table = sweep(cfg, grid, iterations, start_seed)
        for level, profit in table:
            print(f"  markup {level:5.1f}% -> avg profit {profit:,.2f}")
        print(f"  Best uniform markup: {best_level:.1f}% (avg profit {best_profit:,.2f} over {iterations} seeds)")


if __name__ == "__main__":
    search()
