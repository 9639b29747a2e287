# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# tracelog.py
# -----------------------------------------------------------------------------
# Purpose:
#   Append-only, line-oriented trace of a run (arrivals, queueing, service,
#   shortfalls, daily and final reports). The engine only ever writes to it.
#
# Design notes:
#   - The clock is float minutes since `start`; stamps are rendered on the
#     calendar so time-of-day effects are readable in the trace.
#   - Lines are kept in memory (tests compare traces between seeds) and
#     optionally written to a text stream. Every line is also forwarded to
#     the `fuelsim.trace` logger at DEBUG.
#
# Usage:
#   trace = TraceLog(datetime(2025, 3, 3), stream=open("out.txt", "w"))
#   trace.event(12.5, "Pump 1 started fueling car 3 (25.0 L).")
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from datetime import datetime, timedelta
from typing import IO, List, Optional

logger = logging.getLogger("fuelsim.trace")

STAMP_FMT = "%Y-%m-%d %H:%M"


class TraceLog:
    def __init__(self, start: datetime, stream: Optional[IO[str]] = None, keep: bool = True):
        self.start = start
        self.stream = stream
        self.keep = keep
        self.lines: List[str] = []

    def at(self, t: float) -> datetime:
        """Calendar datetime for simulation time `t` (minutes)."""
        return self.start + timedelta(minutes=t)

    def stamp(self, t: float) -> str:
        return self.at(t).strftime(STAMP_FMT)

    def write(self, line: str):
        if self.keep:
            self.lines.append(line)
        if self.stream is not None:
            self.stream.write(line + "\n")
        logger.debug(line)

    def event(self, t: float, msg: str):
        self.write(f"[{self.stamp(t)}] {msg}")

    def flush(self):
        if self.stream is not None:
            self.stream.flush()
