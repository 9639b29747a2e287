from datetime import datetime

import pytest

from fuelsim.arrivals import Sampler
from fuelsim.config import load_cfg
from fuelsim.entities import PumpAccess
from fuelsim.queues import Pump
from fuelsim.stations import Station
from fuelsim.tracelog import TraceLog

# Monday; simulation time 0 is midnight
START = datetime(2025, 3, 3)
NOON = 12 * 60.0


def build_station(
    pumps=(("A92", PumpAccess.BOTH),),
    brands=("A92",),
    max_queue=5,
    inventory=None,
    base_price=None,
    markup=None,
    volume=(10.0, 50.0),
    seed=1,
    a=2.0,
    b=2.0,
    trace=None,
):
    """Small hand-built station; the gap is a=b=2.0 minutes unless overridden."""
    trace = trace or TraceLog(START)
    sampler = Sampler(seed=seed, start=START, uniform_a=a, uniform_b=b)
    station = Station(
        sampler,
        brands,
        base_price=base_price or {b_: 50.0 for b_ in brands},
        markup_percent=markup or {},
        inventory=inventory if inventory is not None else {b_: 100000.0 for b_ in brands},
        min_volume=volume[0],
        max_volume=volume[1],
        trace=trace,
    )
    for i, (brand, access) in enumerate(pumps):
        station.add_pump(Pump(i + 1, brand, max_queue, access, trace=trace))
    return station


@pytest.fixture
def trace():
    return TraceLog(START)


@pytest.fixture
def base_cfg():
    return load_cfg()
