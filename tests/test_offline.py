import os
import sys

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from park import buildings, settings
from park.buildings import Infrastructure
from park.milestones import MilestoneProgress
from park.models import ParkState, Slot
from park.offline import equilibrium_guests, reconcile
from park.stats import calculate_park_stats


def make_slot(building_id, index=0, level=1):
    return Slot(id=f"s{index}", building_id=building_id, index=index, level=level)


def busy_park(guests=50.0, money=1000.0, **kwargs):
    slots = [
        make_slot("drop_tower", 0),
        make_slot("restaurant", 1),
        make_slot("security_post", 2),
        make_slot("bench_plaza", 3),
    ]
    return ParkState(money=money, slots=slots, guests=guests, last_save_time=1000.0, **kwargs)


def test_reconciled_guests_are_bounded():
    for guests in (0.0, 1.0, 10.0, 90.0, 150.0, 199.0, 500.0):
        for seconds in (0, 1, 60, 3600, 86_400 * 7):
            state = busy_park(guests=guests, money=1e9)
            result = reconcile(state, MilestoneProgress(), now=1000.0 + seconds)
            max_guests = state.unlocked_slots * settings.GUESTS_PER_SLOT
            assert result.state.guests <= max(guests * settings.OFFLINE_GROWTH_CEILING, guests)
            assert result.state.guests <= max_guests
            assert result.state.guests >= 0


def test_empty_park_does_not_grow_offline():
    state = busy_park(guests=0.0)
    assert equilibrium_guests(state) == 0


def test_unhappy_park_settles_lower(monkeypatch):
    monkeypatch.setattr(settings, "OFFLINE_GROWTH_CEILING", 100.0)
    # Only rides: every other need is unmet.
    state = ParkState(money=0, slots=[make_slot("carousel")], guests=12.0)
    stats = calculate_park_stats(state.slots, 4, state.ticket_price, state.guests)
    assert stats.overall_satisfaction < settings.SATISFACTION_THRESHOLD
    assert equilibrium_guests(state) == pytest.approx(stats.target_guests * stats.overall_satisfaction)


def test_offline_earnings_use_equilibrium_turnover():
    state = busy_park(guests=50.0, money=1e6)
    stats = calculate_park_stats(state.slots, state.unlocked_slots, state.ticket_price, state.guests)
    equilibrium = equilibrium_guests(state)

    result = reconcile(state, MilestoneProgress(), now=1000.0 + 600)

    per_second = (
        equilibrium * settings.GUEST_DEPARTURE_RATE * state.ticket_price
        + equilibrium * stats.total_spending_rate
        - stats.total_maintenance
    )
    assert result.offline_seconds == 600
    assert result.equilibrium_guests == equilibrium
    assert result.earnings_delta == pytest.approx(per_second * 600)
    assert result.state.money == pytest.approx(state.money + per_second * 600)
    assert result.state.guests == equilibrium
    assert result.state.last_save_time == 1600.0


def test_offline_bankruptcy(monkeypatch):
    pit = Infrastructure(
        id="money_pit", name="Money Pit", icon="🕳️", tier=buildings.BASIC,
        base_cost=100, maintenance_cost=20,
    )
    monkeypatch.setitem(buildings.BUILDING_ID_TO_DEFINITION, "money_pit", pit)
    state = ParkState(money=100, slots=[make_slot("money_pit")], guests=5.0, last_save_time=0.0)

    result = reconcile(state, MilestoneProgress(), now=3600.0)

    assert result.state.money == 0
    assert result.state.is_game_over
    assert result.state.guests == 5.0
    assert result.milestones_unlocked == []


def test_offline_bankruptcy_caps_an_overfull_park(monkeypatch):
    pit = Infrastructure(
        id="money_pit", name="Money Pit", icon="🕳️", tier=buildings.BASIC,
        base_cost=100, maintenance_cost=20,
    )
    monkeypatch.setitem(buildings.BUILDING_ID_TO_DEFINITION, "money_pit", pit)
    state = ParkState(money=100, slots=[make_slot("money_pit")], guests=500.0, last_save_time=0.0)

    result = reconcile(state, MilestoneProgress(), now=3600.0)

    assert result.state.is_game_over
    assert result.state.guests == state.unlocked_slots * settings.GUESTS_PER_SLOT


def test_no_gap_only_refreshes_save_time():
    state = busy_park()
    result = reconcile(state, MilestoneProgress(), now=900.0)
    assert result.earnings_delta == 0
    assert result.state.money == state.money
    assert result.state.guests == state.guests
    assert result.state.last_save_time == 900.0


def test_game_over_park_earns_nothing_offline():
    state = busy_park(money=0.0, is_game_over=True)
    result = reconcile(state, MilestoneProgress(), now=100_000.0)
    assert result.state.money == 0
    assert result.earnings_delta == 0


def test_offline_milestone_reward_folds_into_earnings(monkeypatch):
    monkeypatch.setattr(settings, "SATISFACTION_THRESHOLD", 0.0)
    state = busy_park(guests=95.0)

    result = reconcile(state, MilestoneProgress(peak_guests=95.0), now=1060.0)

    assert [m.id for m in result.milestones_unlocked] == ["peak_guests_100"]
    assert result.progress.peak_guests == result.equilibrium_guests
    assert result.earnings_delta == pytest.approx(result.state.money - state.money)
    assert result.state.total_earnings >= 5000


def test_offline_never_lowers_peak():
    state = busy_park(guests=10.0, money=1e6)
    result = reconcile(state, MilestoneProgress(peak_guests=300.0), now=5000.0)
    assert result.progress.peak_guests == 300.0
