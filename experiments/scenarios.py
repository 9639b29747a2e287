"""
experiments/scenarios.py

Holds scenario definitions (decision variables) to sweep during experiments.
Add pump counts, queue space, markups and stock levels here; each override
block is merged on top of fuelsim/baseline.yaml.
"""

from __future__ import annotations

BASELINE = {
    "name": "baseline",
    "overrides": {},  # override config keys here per scenario
}

HIGH_MARKUP = {
    "name": "high_markup",
    "overrides": {
        "station": {
            "markup_percent": {"A92": 15.0, "A95": 16.0, "Diesel": 14.0},
        },
    },
}

EXTRA_PUMPS = {
    "name": "extra_pumps",
    "overrides": {
        "station": {
            "pumps": 9,
            "max_queue": 4,
        },
    },
}

LOW_STOCK = {
    "name": "low_stock",
    "overrides": {
        "station": {
            "inventory": {"A92": 1500.0, "A95": 1000.0, "Diesel": 800.0},
        },
    },
}

# Alternating single-sided islands; cars whose tank faces the wrong way must
# find a pump on their side.
ONE_SIDED = {
    "name": "one_sided",
    "overrides": {
        "station": {
            "pump_access": ["LeftOnly", "RightOnly"],
        },
    },
}

NORMAL_ARRIVALS = {
    "name": "normal_arrivals",
    "overrides": {
        "arrivals": {
            "distribution": "normal",
            "normal": {"mu": 2.5, "sigma": 1.0},
        },
    },
}

SCENARIOS = [BASELINE, HIGH_MARKUP, EXTRA_PUMPS, LOW_STOCK, ONE_SIDED, NORMAL_ARRIVALS]
