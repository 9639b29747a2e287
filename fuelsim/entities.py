# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# entities.py
# -----------------------------------------------------------------------------
# Purpose:
#   Entity definitions for the fuel station DES: Request (one car at the
#   forecourt) plus the small enums describing tank sides and pump access.
#
# Design notes:
#   - A Request is resolved exactly once: served at service end, or lost on
#     capacity rejection / inventory shortfall. Resolving twice is a bug in
#     the scheduling discipline and raises.
#   - Pump access decides which tank sides a pump hose can reach.
#
# Usage:
#   from fuelsim.entities import Request, TankSide, PumpAccess
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TankSide(str, Enum):
    LEFT = "Left"
    RIGHT = "Right"


class PumpAccess(str, Enum):
    BOTH = "Both"
    LEFT_ONLY = "LeftOnly"
    RIGHT_ONLY = "RightOnly"

    def serves(self, side: TankSide) -> bool:
        if self is PumpAccess.BOTH:
            return True
        if self is PumpAccess.LEFT_ONLY:
            return side is TankSide.LEFT
        return side is TankSide.RIGHT


class LossReason(str, Enum):
    CAPACITY = "capacity"      # queue full at arrival
    INVENTORY = "inventory"    # not enough fuel at service start


class RequestStateError(RuntimeError):
    """Raised when a request is resolved (served/lost) more than once."""


@dataclass
class Request:
    rid: int
    arrival_time: float              # virtual minutes since run start
    brand: str
    volume: float                    # liters, one decimal
    side: TankSide
    served: bool = False
    lost: bool = False
    loss_reason: Optional[LossReason] = None

    @property
    def resolved(self) -> bool:
        return self.served or self.lost

    def mark_served(self):
        if self.resolved:
            raise RequestStateError(f"request {self.rid} already resolved")
        self.served = True

    def mark_lost(self, reason: LossReason):
        if self.resolved:
            raise RequestStateError(f"request {self.rid} already resolved")
        self.lost = True
        self.loss_reason = reason

    def describe(self, stamp: str) -> str:
        return f"Car#{self.rid} [{self.brand}] {self.volume:.1f} L, time {stamp}, side={self.side.value}"
