"""
experiments/run_experiments.py

Experiment harness that loads the baseline config, applies scenario overrides,
runs several independent replications per scenario, and reports KPIs with
confidence intervals. Optional common-random-number (CRN) comparisons pit two
scenarios against each other on shared seeds.
"""

from __future__ import annotations
import copy, math, os
from statistics import mean, stdev
from typing import Callable, Dict, List, Optional, Tuple

from scipy.stats import t as student_t

from fuelsim.config import apply_overrides, load_cfg, validate_cfg
from fuelsim.simulation import run_simulation
from .scenarios import SCENARIOS

OUT_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "output")


def mean_ci(values: List[float], confidence_level: float) -> Tuple[float, float]:
    """Return (mean, half-width) using a t-distribution critical value."""
    if not values:
        return 0.0, 0.0
    mu = mean(values)
    n = len(values)
    if n < 2:
        return mu, 0.0
    level = min(max(confidence_level, 0.0), 0.999999)
    alpha = 1.0 - level
    tcrit = student_t.ppf(1 - alpha / 2.0, n - 1)
    half = tcrit * (stdev(values) / math.sqrt(n))
    return mu, float(half)


def sample_stddev(values: List[float]) -> float:
    """Return sample standard deviation or 0 if insufficient data."""
    if len(values) < 2:
        return 0.0
    return stdev(values)


def series(results: List[Dict], extractor: Callable[[Dict], float]) -> List[float]:
    """Collect a numeric series from each replication result."""
    return [float(extractor(res)) for res in results]


def avg_nested(results: List[Dict], key: str) -> Dict[str, float]:
    """Average nested dictionaries (e.g., lost_by_reason) across replications."""
    if not results:
        return {}
    totals: Dict[str, float] = {}
    for res in results:
        nested = res.get(key, {})
        for subk, val in nested.items():
            totals[subk] = totals.get(subk, 0.0) + float(val)
    return {subk: totals[subk] / len(results) for subk in totals}


def run_replications(cfg: Dict, replications: int, base_seed: int) -> List[Dict]:
    """Run `replications` seeds starting at base_seed; one summary per seed."""
    results = []
    for rep in range(max(1, replications)):
        run_cfg = copy.deepcopy(cfg)
        run_cfg.setdefault("sim", {})["seed"] = base_seed + rep
        results.append(run_simulation(run_cfg))
    return results


def run_crn(cfg: Dict, sc_a: Dict, sc_b: Dict, replications: int, base_seed: int,
            confidence: float, comparisons: int = 1) -> Dict:
    """
    Run a common-random-number comparison between two scenarios, using the same
    seed stream per replication, and report paired profit differences with a
    Bonferroni-adjusted CI of the mean (alpha / comparisons).
    """
    cfg_a = validate_cfg(apply_overrides(cfg, sc_a["overrides"]))
    cfg_b = validate_cfg(apply_overrides(cfg, sc_b["overrides"]))
    res_a = run_replications(cfg_a, replications, base_seed)
    res_b = run_replications(cfg_b, replications, base_seed)
    rows = [
        (base_seed + i, a.get("profit", 0.0), b.get("profit", 0.0))
        for i, (a, b) in enumerate(zip(res_a, res_b))
    ]
    diffs = [p2 - p1 for (_, p1, p2) in rows]
    mean_diff = mean(diffs)
    sd_diff = sample_stddev(diffs)
    level = min(max(confidence, 0.0), 0.999999)
    alpha = (1.0 - level) / max(1, comparisons)
    half = 0.0
    if len(diffs) > 1:
        tcrit = student_t.ppf(1 - alpha / 2.0, len(diffs) - 1)
        half = float(tcrit * (sd_diff / math.sqrt(len(diffs))))

    print(f"CRN paired profit comparison ({sc_b['name']} - {sc_a['name']}):")
    print("  Replication | Seed | Profit1 | Profit2 | Difference")
    for idx, (seed, p1, p2) in enumerate(rows, start=1):
        print(f"    {idx:2d}        | {seed:4d} | {p1:,.2f} | {p2:,.2f} | {p2 - p1:,.2f}")
    print(f"  Mean difference: {mean_diff:,.2f}")
    print(f"  Std dev of differences: {sd_diff:,.2f}")
    print(f"  {(1.0 - alpha) * 100:.2f}% CI of mean diff: {mean_diff - half:,.2f} to {mean_diff + half:,.2f}")
    return {"rows": rows, "mean_diff": mean_diff, "half_width": half}


def mean_daily_profit(results: List[Dict]) -> List[Dict[str, float]]:
    """Average the cumulative day-boundary profit snapshots across replications."""
    by_day: Dict[int, List[float]] = {}
    for res in results:
        for point in res.get("daily", []):
            by_day.setdefault(point["day"], []).append(point["profit_total"])
    return [
        {"day": day, "profit_total": sum(vals) / len(vals)}
        for day, vals in sorted(by_day.items())
    ]


def plot_daily_profit(curves: List[Dict], out_dir: str = OUT_DIR) -> Optional[str]:
    """
    Persist a PNG plot of mean cumulative profit at each day boundary, one
    line per scenario. `curves` holds {"name": ..., "series": mean_daily_profit(...)}.
    """
    curves = [c for c in curves if c.get("series")]
    if not curves:
        return None
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    plt.figure(figsize=(9, 5))
    for entry in curves:
        x = [pt["day"] for pt in entry["series"]]
        y = [pt["profit_total"] for pt in entry["series"]]
        plt.plot(x, y, marker="o", linewidth=1.5, label=entry["name"])
    plt.xlabel("Day")
    plt.ylabel("Cumulative profit")
    plt.title("Mean cumulative profit by scenario")
    plt.grid(True, linestyle="--", alpha=0.4)
    plt.legend()
    os.makedirs(out_dir, exist_ok=True)
    out_path = os.path.join(out_dir, "all_scenarios_profit_by_day.png")
    plt.tight_layout()
    plt.savefig(out_path, dpi=160)
    plt.close()
    return out_path


def main():
    """Entry point: drive all scenarios, replications, and report KPIs."""
    cfg = load_cfg()
    exp_cfg = cfg.get("experiments", {})
    replications = max(1, int(exp_cfg.get("replications", 1)))
    confidence = float(exp_cfg.get("confidence_level", 0.95))
    level_pct = confidence * 100.0
    default_seed = cfg.get("sim", {}).get("seed", 0)

    curves: List[Dict] = []
    for sc in SCENARIOS:
        sc_cfg = validate_cfg(apply_overrides(cfg, sc["overrides"]))
        seed = sc_cfg.get("sim", {}).get("seed", default_seed)
        results = run_replications(sc_cfg, replications, seed)

        profit = mean_ci(series(results, lambda r: r.get("profit", 0.0)), confidence)
        profit_sd = sample_stddev(series(results, lambda r: r.get("profit", 0.0)))
        liters = mean_ci(series(results, lambda r: r.get("served_liters", 0.0)), confidence)
        served = mean_ci(series(results, lambda r: r.get("served_cars", 0)), confidence)
        lost = mean_ci(series(results, lambda r: r.get("lost_cars", 0)), confidence)
        loss_rate = mean_ci(series(results, lambda r: r.get("loss_rate", 0.0) * 100.0), confidence)
        wait = mean_ci(series(results, lambda r: r.get("avg_wait_minutes", 0.0)), confidence)
        reasons = avg_nested(results, "lost_by_reason")
        stock = avg_nested(results, "inventory_remaining")
        curves.append({"name": sc["name"], "series": mean_daily_profit(results)})

        print(f"Scenario: {sc['name']} (replications={replications}, {level_pct:.1f}% CI, "
              f"seeds {seed}-{seed + replications - 1})")
        print("  Profit by seed:")
        for i, res in enumerate(results):
            print(f"    seed {seed + i}: {res.get('profit', 0.0):,.2f}")
        print(f"  Profit std dev: {profit_sd:,.2f}")
        print(f"  Profit/run: {profit[0]:,.2f} ± {profit[1]:,.2f}")
        print(f"  Fuel sold: {liters[0]:,.1f} ± {liters[1]:,.1f} L")
        print(f"  Served cars: {served[0]:.1f} ± {served[1]:.1f}")
        print(f"  Lost cars: {lost[0]:.1f} ± {lost[1]:.1f} ({loss_rate[0]:.1f}% ± {loss_rate[1]:.1f}%)")
        print(f"  Lost by reason (mean): { {k: round(v, 1) for k, v in reasons.items()} }")
        print(f"  Avg wait: {wait[0]:.2f} ± {wait[1]:.2f} min")
        print(f"  Stock left (mean L): { {k: round(v, 1) for k, v in stock.items()} }")
        print("-")

    crn_pairs = exp_cfg.get("crn_compare") or []
    sc_index = {s["name"]: s for s in SCENARIOS}
    for pair in crn_pairs:
        if len(pair) != 2:
            print(f"[warn] skipping CRN entry (needs 2 names): {pair}")
            continue
        sc_a, sc_b = sc_index.get(pair[0]), sc_index.get(pair[1])
        if sc_a is None or sc_b is None:
            print(f"[warn] CRN pair not found: {pair}")
            continue
        print(f"\nCRN & Bonferroni comparison: {sc_a['name']} vs {sc_b['name']} "
              f"(replications={replications}, seeds shared)")
        run_crn(cfg, sc_a, sc_b, replications, default_seed, confidence, comparisons=len(crn_pairs))

    plot = plot_daily_profit(curves)
    if plot:
        print(f"\nAll-scenario profit plot saved to: {plot}")


if __name__ == "__main__":
    main()
