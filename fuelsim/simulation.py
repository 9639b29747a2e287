# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# simulation.py
# -----------------------------------------------------------------------------
# Purpose:
#   Simulate a single replication: build the station and engine from the
#   config, run the event loop over the configured days, return metrics.
#
# Design notes:
#   - Replications and scenario sweeps live outside, in experiments/.
#   - The seed in cfg["sim"]["seed"] drives the run's private generator.
#
# Usage:
#   from fuelsim.simulation import run_simulation
#   results = run_simulation(cfg)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from typing import Dict, Optional

from .config import start_datetime
from .engine import SimulationEngine
from .metrics import DAY_MINUTES, Metrics
from .stations import make_station
from .tracelog import TraceLog

logger = logging.getLogger(__name__)


def build_engine(cfg: Dict, trace: Optional[TraceLog] = None) -> SimulationEngine:
    trace = trace or TraceLog(start_datetime(cfg), keep=False)
    station = make_station(cfg, trace)
    end_time = cfg["sim"]["days"] * DAY_MINUTES
    return SimulationEngine(station, end_time, trace=trace, metrics=Metrics(cfg))


def run_simulation(cfg: Dict, trace: Optional[TraceLog] = None) -> Dict:
    engine = build_engine(cfg, trace)
    logger.debug("running %d day(s), %d pump(s), seed=%s",
                 cfg["sim"]["days"], len(engine.station.pumps), cfg["sim"].get("seed"))
    return engine.run()
