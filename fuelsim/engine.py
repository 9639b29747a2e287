# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# engine.py
# -----------------------------------------------------------------------------
# Purpose:
#   The event loop and its handlers: arrivals are routed to pumps, pumps
#   start/finish fuelling, day boundaries produce reports, and a final
#   aggregate report closes the run.
#
# Design notes:
#   - The engine is the only place simulation time advances. Handlers read
#     and mutate the Station and schedule follow-up events.
#   - Follow-up service starts are scheduled one simulated second (EPSILON)
#     after the triggering event. Duplicate starts for the same pump are
#     harmless: a start on a busy pump is ignored.
#   - A car that cannot be fuelled for lack of stock is lost and the pump
#     moves straight on to the next car in line.
#   - The first event past end_time stops the run and is discarded.
#
# Usage:
#   engine = SimulationEngine(station, end_time=7 * 1440, trace=trace)
#   summary = engine.run()
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from typing import Callable, Dict, Optional

from .entities import LossReason
from .metrics import DAY_MINUTES, Metrics
from .queues import Event, EventKind, EventQueue, Pump, PayloadError
from .stations import Station
from .tracelog import TraceLog

logger = logging.getLogger(__name__)

EPSILON = 1.0 / 60.0               # one simulated second, in minutes


class SimulationEngine:
    """Discrete-event driver for one station run.

    Attributes
    ----------
    t : float
        Simulation time (minutes since the start date's midnight).
    FEL : EventQueue
        Future Event List.
    M : Metrics
        KPI collector fed by the handlers.
    """
    def __init__(self, station: Station, end_time: float,
                 trace: Optional[TraceLog] = None, metrics: Optional[Metrics] = None):
        self.station = station
        self.end_time = end_time
        self.trace = trace or TraceLog(station.sampler.start)
        self.M = metrics or Metrics()
        self.t: float = 0.0
        self.FEL = EventQueue()
        self._handlers: Dict[EventKind, Callable[[Event], None]] = {
            EventKind.ARRIVAL: self.on_arrival,
            EventKind.SERVICE_START: self.on_service_start,
            EventKind.SERVICE_END: self.on_service_end,
            EventKind.DAY_REPORT: self.on_day_report,
        }

    def schedule(self, ev: Event):
        self.FEL.push(ev)

    def prime(self):
        """Schedule the first arrival and a report at every midnight up to end_time."""
        self.schedule(Event.arrival(self.t + self.station.sample_inter_arrival(self.t)))
        day = 1
        while day * DAY_MINUTES <= self.end_time:
            self.schedule(Event.day_report(day * DAY_MINUTES))
            day += 1

    def run(self, prime: bool = True) -> Dict:
        start = self.trace.at(self.t)
        end = self.trace.at(self.end_time)
        self.trace.write(f"Simulation: {start:%Y-%m-%d} .. {end:%Y-%m-%d}")
        if prime:
            self.prime()
        while self.FEL:
            ev = self.FEL.pop_min()
            if ev.t > self.end_time:
                break
            self.t = ev.t
            self.M.note_event(ev)
            self.dispatch(ev)
        self.final_report()
        self.trace.flush()
        logger.info("run finished at t=%.2f min after %d events", self.t, self.M.events_processed)
        return self.M.summary(self.station)

    def dispatch(self, ev: Event):
        handler = self._handlers.get(ev.kind)
        if handler is None:
            raise PayloadError(f"no handler for event kind {ev.kind!r}")
        handler(ev)

    # -- handlers ------------------------------------------------------------

    def on_arrival(self, ev: Event):
        st = self.station
        req = st.generate_request(self.t)
        pump = st.dispatch(req)
        if not pump.try_enqueue(req):
            req.mark_lost(LossReason.CAPACITY)
            self.M.note_loss(req, LossReason.CAPACITY)
        self.M.note_arrival(req, pump)

        if not pump.busy and pump.queue:
            self._start_service_at(pump, self.t + EPSILON)

        self.schedule(Event.arrival(self.t + st.sample_inter_arrival(self.t)))

    def on_service_start(self, ev: Event):
        st = self.station
        pump = st.pump(ev.payload.pump)
        if pump is None or pump.busy:
            return

        req = pump.dequeue()
        if req is None:
            pump.busy = False
            return

        if not st.has_stock(req.brand, req.volume):
            req.mark_lost(LossReason.INVENTORY)
            pump.lost_cars += 1
            self.M.note_loss(req, LossReason.INVENTORY)
            self.trace.event(self.t, f"Car {req.rid} not served: insufficient fuel ({req.brand}).")
            if pump.queue:
                self._start_service_at(pump, self.t + EPSILON)
            return

        pump.busy = True
        st.withdraw(req.brand, req.volume)
        self.M.note_service_start(req, self.t)
        duration = st.compute_service_time(req.volume)
        self.trace.event(self.t, f"Pump {pump.number} started fueling car {req.rid} ({req.volume:.1f} L).")
        self.schedule(Event.service_end(self.t + duration, ev.payload.pump, req))

    def on_service_end(self, ev: Event):
        ref = ev.payload
        pump = self.station.pump(ref.pump)
        if pump is None:
            raise PayloadError(f"service end for unknown pump index {ref.pump}")
        req = ref.request

        pump.busy = False
        req.mark_served()
        pump.served_cars += 1
        pump.served_liters += req.volume
        self.trace.event(self.t, f"Pump {pump.number} finished serving car {req.rid}.")

        if pump.queue:
            self._start_service_at(pump, self.t + EPSILON)

    def on_day_report(self, ev: Event):
        self.trace.event(self.t, f"Daily report for {self.trace.at(self.t):%Y-%m-%d}")
        for p in self.station.pumps:
            self.trace.write(
                f"Pump {p.number}: served={p.served_cars}, lost={p.lost_cars}, "
                f"queue={len(p.queue)}, dispensed={p.served_liters:.1f} L"
            )
        self.M.note_day(self.t, self.station)

    # -- helpers -------------------------------------------------------------

    def _start_service_at(self, pump: Pump, t: float):
        self.schedule(Event.service_start(t, self.station.index_of(pump)))

    def final_report(self):
        self.trace.write("")
        self.trace.write("Final summary:")
        total_cars = total_lost = 0
        total_liters = 0.0
        for p in self.station.pumps:
            self.trace.write(
                f"Pump {p.number}: served={p.served_cars}, liters={p.served_liters:.1f}, lost={p.lost_cars}"
            )
            total_cars += p.served_cars
            total_liters += p.served_liters
            total_lost += p.lost_cars
        self.trace.write(f"Total cars served: {total_cars}")
        self.trace.write(f"Total fuel sold: {total_liters:.1f} L")
        self.trace.write(f"Total cars lost: {total_lost}")
        self.trace.write(f"Station profit: {self.station.total_profit():.2f}")
