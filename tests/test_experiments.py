"""
Tests for the experiment harness helpers (statistics, replications, sweeps).
"""

import pytest

from experiments.optimize_markup import float_grid, sweep, with_markup
from experiments.run_experiments import (
    avg_nested,
    mean_ci,
    mean_daily_profit,
    plot_daily_profit,
    run_crn,
    run_replications,
    sample_stddev,
)
from experiments.scenarios import SCENARIOS
from fuelsim.config import apply_overrides, validate_cfg


def test_every_scenario_yields_a_valid_config(base_cfg):
    names = [sc["name"] for sc in SCENARIOS]
    assert len(names) == len(set(names))
    for sc in SCENARIOS:
        validate_cfg(apply_overrides(base_cfg, sc["overrides"]))


def test_mean_ci_edge_cases():
    assert mean_ci([], 0.95) == (0.0, 0.0)
    assert mean_ci([4.0], 0.95) == (4.0, 0.0)
    mu, half = mean_ci([3.0, 3.0, 3.0], 0.95)
    assert mu == 3.0 and half == pytest.approx(0.0)


def test_mean_ci_matches_t_interval():
    mu, half = mean_ci([1.0, 2.0, 3.0, 4.0], 0.95)
    assert mu == 2.5
    # t(0.975, 3) = 3.182446; s = 1.290994
    assert half == pytest.approx(3.182446 * 1.290994 / 2.0, rel=1e-5)


def test_sample_stddev_and_avg_nested():
    assert sample_stddev([1.0]) == 0.0
    assert sample_stddev([1.0, 3.0]) == pytest.approx(2 ** 0.5)
    results = [{"lost_by_reason": {"capacity": 2, "inventory": 0}},
               {"lost_by_reason": {"capacity": 4, "inventory": 6}}]
    assert avg_nested(results, "lost_by_reason") == {"capacity": 3.0, "inventory": 3.0}
    assert avg_nested([], "lost_by_reason") == {}


def test_mean_daily_profit_averages_by_day():
    results = [
        {"daily": [{"day": 1, "profit_total": 10.0}, {"day": 2, "profit_total": 30.0}]},
        {"daily": [{"day": 1, "profit_total": 20.0}, {"day": 2, "profit_total": 50.0}]},
    ]
    assert mean_daily_profit(results) == [
        {"day": 1, "profit_total": 15.0},
        {"day": 2, "profit_total": 40.0},
    ]


def test_replications_advance_the_seed(base_cfg):
    cfg = apply_overrides(base_cfg, {"sim": {"days": 1}})
    results = run_replications(cfg, 2, base_seed=10)
    assert len(results) == 2
    assert results[0]["arrivals"] != results[1]["arrivals"] or results[0]["profit"] != results[1]["profit"]
    again = run_replications(cfg, 1, base_seed=10)
    assert again[0] == results[0]


def test_crn_of_a_scenario_against_itself_is_zero(base_cfg, capsys):
    cfg = apply_overrides(base_cfg, {"sim": {"days": 1}})
    baseline = SCENARIOS[0]
    out = run_crn(cfg, baseline, baseline, replications=2, base_seed=1, confidence=0.95)
    assert out["mean_diff"] == 0.0
    assert out["half_width"] == 0.0
    assert "CRN paired profit comparison" in capsys.readouterr().out


def test_plot_daily_profit(tmp_path):
    assert plot_daily_profit([], out_dir=str(tmp_path)) is None
    path = plot_daily_profit(
        [{"name": "baseline", "series": [{"day": 1, "profit_total": 5.0}, {"day": 2, "profit_total": 9.0}]}],
        out_dir=str(tmp_path),
    )
    assert path.endswith("all_scenarios_profit_by_day.png")
    assert (tmp_path / "all_scenarios_profit_by_day.png").exists()


def test_float_grid():
    assert float_grid(0.0, 4.0, 2.0) == [0.0, 2.0, 4.0]
    assert float_grid(0.0, 5.0, 2.0) == [0.0, 2.0, 4.0, 5.0]


def test_markup_sweep_reports_every_level(base_cfg):
    cfg = apply_overrides(base_cfg, {"sim": {"days": 1}})
    assert with_markup(cfg, 3.0)["station"]["markup_percent"] == {"A92": 3.0, "A95": 3.0, "Diesel": 3.0}
    best, profit, table = sweep(cfg, [0.0, 5.0], iterations=1, start_seed=1)
    assert [lvl for lvl, _ in table] == [0.0, 5.0]
    assert table[0][1] == 0.0
    assert best == 5.0 and profit == table[1][1] > 0.0
