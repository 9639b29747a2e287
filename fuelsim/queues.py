# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# queues.py
# -----------------------------------------------------------------------------
# Purpose:
#   Discrete-event primitives: Event (with a typed payload per kind), the
#   Future Event List (EventQueue) and Pump, a single-hose FIFO server with a
#   finite waiting line.
#
# Design notes:
#   - The FEL is a binary heap keyed by (t, seq). `seq` is a monotonically
#     increasing insertion counter, so same-time events pop in the order they
#     were scheduled and a fixed seed replays the same trace.
#   - Events refer to pumps by index into Station.pumps, never by object.
#   - A kind/payload mismatch is an engine bug and fails at construction.
#
# Usage:
#   from fuelsim.queues import Event, EventKind, EventQueue, Pump
# -----------------------------------------------------------------------------

from __future__ import annotations
import heapq, itertools
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, List, Optional, Tuple, Union

from .entities import PumpAccess, Request, TankSide
from .tracelog import TraceLog


class EmptyQueueError(IndexError):
    """pop_min() on an empty event queue."""


class PayloadError(TypeError):
    """Event payload does not match the event kind."""


class EventKind(str, Enum):
    ARRIVAL = "arrival"
    SERVICE_START = "service_start"
    SERVICE_END = "service_end"
    DAY_REPORT = "day_report"


@dataclass(frozen=True)
class PumpRef:
    pump: int                        # index into Station.pumps


@dataclass(frozen=True)
class ServiceRef:
    pump: int
    request: Request


Payload = Union[None, PumpRef, ServiceRef]

_PAYLOAD_TYPES = {
    EventKind.ARRIVAL: type(None),
    EventKind.DAY_REPORT: type(None),
    EventKind.SERVICE_START: PumpRef,
    EventKind.SERVICE_END: ServiceRef,
}


@dataclass(frozen=True)
class Event:
    """Immutable (t, kind, payload) entry of the Future Event List."""
    t: float
    kind: EventKind
    payload: Payload = None

    def __post_init__(self):
        expected = _PAYLOAD_TYPES.get(self.kind)
        if expected is None:
            raise PayloadError(f"unknown event kind {self.kind!r}")
        if type(self.payload) is not expected:
            raise PayloadError(
                f"{self.kind.value} event expects {expected.__name__}, got {type(self.payload).__name__}"
            )

    @classmethod
    def arrival(cls, t: float) -> "Event":
        return cls(t, EventKind.ARRIVAL)

    @classmethod
    def day_report(cls, t: float) -> "Event":
        return cls(t, EventKind.DAY_REPORT)

    @classmethod
    def service_start(cls, t: float, pump: int) -> "Event":
        return cls(t, EventKind.SERVICE_START, PumpRef(pump))

    @classmethod
    def service_end(cls, t: float, pump: int, request: Request) -> "Event":
        return cls(t, EventKind.SERVICE_END, ServiceRef(pump, request))


class EventQueue:
    """Min-heap of events ordered by time, FIFO among equal times."""

    def __init__(self):
        self._heap: List[Tuple[float, int, Event]] = []
        self._seq = itertools.count()

    def push(self, ev: Event):
        heapq.heappush(self._heap, (ev.t, next(self._seq), ev))

    def pop_min(self) -> Event:
        if not self._heap:
            raise EmptyQueueError("pop_min() on empty event queue")
        return heapq.heappop(self._heap)[2]

    def size(self) -> int:
        return len(self._heap)

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)


class Pump:
    """Single-hose fuel pump with a bounded FIFO queue.

    Parameters
    ----------
    number : int
        Stable pump number shown in the trace (1..K).
    brand : str
        Fuel brand dispensed by this pump.
    max_queue : int
        Capacity of the waiting line (0 means every arrival is turned away).
    access : PumpAccess
        Which tank sides the hose can reach.

    Notes
    -----
    - `routed_cars` counts every request offered to the pump; at any time
      routed = served + lost + queued + (1 if busy).
    - A request being fuelled is not in `queue`; the pump is `busy` instead.
    """
    def __init__(self, number: int, brand: str, max_queue: int,
                 access: PumpAccess = PumpAccess.BOTH, trace: Optional[TraceLog] = None):
        self.number = number
        self.brand = brand
        self.max_queue = max_queue
        self.access = access
        self.trace = trace
        self.queue: Deque[Request] = deque()
        self.busy: bool = False
        self.served_cars: int = 0
        self.served_liters: float = 0.0
        self.lost_cars: int = 0
        self.routed_cars: int = 0

    def serves(self, side: TankSide) -> bool:
        return self.access.serves(side)

    def try_enqueue(self, req: Request) -> bool:
        """Join the line, or count the car as lost when the line is full."""
        self.routed_cars += 1
        if len(self.queue) >= self.max_queue:
            self.lost_cars += 1
            self._log(req.arrival_time, f"Car {req.rid} left: queue full at pump {self.number}.")
            return False
        self.queue.append(req)
        self._log(req.arrival_time,
                  f"Car {req.rid} queued at pump {self.number}. Queue: {len(self.queue)}/{self.max_queue}")
        return True

    def dequeue(self) -> Optional[Request]:
        if not self.queue:
            return None
        return self.queue.popleft()

    def snapshot(self) -> dict:
        return {
            "pump": self.number,
            "brand": self.brand,
            "access": self.access.value,
            "served_cars": self.served_cars,
            "served_liters": self.served_liters,
            "lost_cars": self.lost_cars,
            "routed_cars": self.routed_cars,
            "queue_length": len(self.queue),
            "busy": self.busy,
        }

    def _log(self, t: float, msg: str):
        if self.trace is not None:
            self.trace.event(t, msg)
