"""
Tests for the pump allocation policy.
"""

import pytest

from fuelsim.entities import PumpAccess, Request, TankSide
from fuelsim.policies import AllocationPolicy, balance, shortest_queue
from fuelsim.queues import Pump


def _pump(number, brand="A92", access=PumpAccess.BOTH, waiting=0):
    p = Pump(number, brand, max_queue=20, access=access)
    for i in range(waiting):
        p.queue.append(Request(1000 + i, 0.0, brand, 10.0, TankSide.LEFT))
    return p


def _req(brand="A92", side=TankSide.LEFT):
    return Request(1, 0.0, brand, 20.0, side)


def test_prefers_pump_of_requested_brand():
    pumps = [_pump(1, "A92"), _pump(2, "A95"), _pump(3, "Diesel", waiting=3)]
    chosen = AllocationPolicy().dispatch(_req("Diesel"), pumps)
    assert chosen.number == 3


def test_unknown_brand_falls_back_to_all_pumps():
    pumps = [_pump(1, "A92", waiting=2), _pump(2, "A95", waiting=1)]
    chosen = AllocationPolicy().dispatch(_req("Gas"), pumps)
    assert chosen.number == 2


def test_side_filter_skips_incompatible_pumps():
    pumps = [
        _pump(1, "A92", PumpAccess.RIGHT_ONLY),
        _pump(2, "A92", PumpAccess.LEFT_ONLY, waiting=4),
    ]
    chosen = AllocationPolicy().dispatch(_req("A92", TankSide.LEFT), pumps)
    assert chosen.number == 2


def test_no_compatible_side_goes_to_global_shortest_line():
    pumps = [
        _pump(1, "A92", PumpAccess.RIGHT_ONLY, waiting=3),
        _pump(2, "A95", PumpAccess.RIGHT_ONLY, waiting=0),
        _pump(3, "A92", PumpAccess.RIGHT_ONLY, waiting=1),
    ]
    policy = AllocationPolicy()
    chosen = policy.dispatch(_req("A92", TankSide.LEFT), pumps)
    # brand is ignored on this path and the pump cannot reach the tank
    assert chosen.number == 2
    assert not chosen.serves(TankSide.LEFT)
    assert policy.last_fallback is True


def test_fallback_flag_set_even_when_shortest_line_fits_the_side():
    pumps = [_pump(1, "A92", PumpAccess.LEFT_ONLY, waiting=1), _pump(2, "A95", PumpAccess.BOTH)]
    policy = AllocationPolicy()
    chosen = policy.dispatch(_req("A92", TankSide.RIGHT), pumps)
    assert chosen.number == 2
    assert chosen.serves(TankSide.RIGHT)
    assert policy.last_fallback is True

    policy.dispatch(_req("A92", TankSide.LEFT), pumps)
    assert policy.last_fallback is False


def test_ties_broken_by_lowest_pump_number():
    pumps = [_pump(3, waiting=1), _pump(1, waiting=1), _pump(2, waiting=1)]
    assert AllocationPolicy().dispatch(_req(), pumps).number == 1


def test_balance_keeps_lines_within_one_of_shortest():
    pumps = [_pump(1, waiting=5), _pump(2, waiting=1), _pump(3, waiting=2), _pump(4, waiting=3)]
    assert [p.number for p in balance(pumps)] == [2, 3]


def test_balance_leaves_even_lines_alone():
    pumps = [_pump(1, waiting=2), _pump(2, waiting=0), _pump(3, waiting=1)]
    assert balance(pumps) == pumps


def test_shortest_queue_first_in_station_order():
    pumps = [_pump(5, waiting=1), _pump(2, waiting=1)]
    assert shortest_queue(pumps).number == 5


def test_dispatch_does_not_mutate_pumps():
    pumps = [_pump(1, waiting=2), _pump(2, waiting=1)]
    AllocationPolicy().dispatch(_req(), pumps)
    assert [len(p.queue) for p in pumps] == [2, 1]
    assert all(p.routed_cars == 0 for p in pumps)


def test_dispatch_without_pumps_raises():
    with pytest.raises(ValueError):
        AllocationPolicy().dispatch(_req(), [])
