import dataclasses
import json
import os
import sys

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from park import buildings, settings
from park.buildings import Infrastructure
from park.game import Park
from park.models import ParkState, Slot
from park.scheduler import ManualClock, Scheduler


@pytest.fixture
def save_file(tmp_path):
    return tmp_path / "save.json"


@pytest.fixture
def no_departures(monkeypatch):
    monkeypatch.setattr(settings, "GUEST_DEPARTURE_RATE", 0.0)
    monkeypatch.setattr(settings, "UNHAPPY_LEAVE_RATE", 0.0)


def make_park(state=None, start=1000.0, save_file=None, **kwargs):
    clock = ManualClock(start)
    return clock, Park(state, clock=clock, save_file=save_file, **kwargs)


def test_milestone_reward_is_paid_once(no_departures, save_file):
    state = ParkState(
        money=1000.0,
        slots=[Slot(id="t", building_id="drop_tower", index=0)],
        guests=90.0,
    )
    clock, park = make_park(state, save_file=save_file)

    outcome = park.step(1.0)

    assert park.state.guests == pytest.approx(101.0)
    assert [m.id for m in outcome.milestones_unlocked] == ["peak_guests_100"]
    assert outcome.reward == 5000
    assert park.state.money == pytest.approx(1000.0 + outcome.result.money_delta + 5000)
    assert park.state.total_earnings == pytest.approx(outcome.result.money_delta + 5000)
    # Unlocking a milestone saves right away.
    assert save_file.exists()

    park.state = dataclasses.replace(park.state, guests=50.0)
    for _ in range(30):
        clock.advance(1.0)
        assert park.step(1.0).milestones_unlocked == []
    assert park.state.guests > 100
    assert park.progress.completed == ["peak_guests_100"]
    assert park.acknowledge_milestones() == ["peak_guests_100"]
    assert park.acknowledge_milestones() == []


def test_bankruptcy_ends_game_and_saves(monkeypatch, save_file):
    pit = Infrastructure(
        id="money_pit", name="Money Pit", icon="🕳️", tier=buildings.BASIC,
        base_cost=100, maintenance_cost=20,
    )
    monkeypatch.setitem(buildings.BUILDING_ID_TO_DEFINITION, "money_pit", pit)
    state = ParkState(money=10.0, slots=[Slot(id="p", building_id="money_pit", index=0)])
    _, park = make_park(state, save_file=save_file)

    outcome = park.step(1.0)

    assert outcome.result.bankrupt
    assert park.state.money == 0
    assert park.state.is_game_over
    assert json.loads(save_file.read_text())["is_game_over"] is True
    assert not park.build(1, "carousel")
    assert park.step(1.0).result.state is park.state


def test_commands_save_and_round_trip(save_file):
    _, park = make_park(save_file=save_file)

    assert park.build(0, "carousel")
    saved = json.loads(save_file.read_text())
    assert saved["slots"][0]["building_id"] == "carousel"

    slot_id = park.state.slots[0].id
    assert park.demolish(slot_id)
    assert park.state.slots == []
    assert park.state.money == settings.STARTING_MONEY - 3000 + 1500

    assert not park.upgrade(slot_id)
    assert park.set_ticket_price(72)
    assert park.state.ticket_price == 72


def test_rejected_command_does_not_save(save_file):
    _, park = make_park(save_file=save_file)
    assert not park.build(0, "roller_coaster")
    assert not save_file.exists()


def test_dry_run_never_writes(save_file):
    _, park = make_park(save_file=save_file, autosave=False)
    assert park.build(0, "carousel")
    assert not save_file.exists()


def test_save_failure_is_reported(tmp_path):
    _, park = make_park(save_file=tmp_path / "missing" / "save.json")
    assert park.save() is False


def test_reset_all_starts_over(save_file):
    clock, park = make_park(save_file=save_file)
    park.build(0, "carousel")
    park.buy_perk("park_rank_2")
    clock.advance(500)

    park.reset_all()

    assert park.state.money == settings.STARTING_MONEY
    assert park.state.slots == []
    assert park.state.game_started_at == 1500.0
    assert park.progress.peak_guests == 0
    assert json.loads(save_file.read_text())["slots"] == []


def test_begin_catches_up_offline_time(save_file):
    state = ParkState(
        money=1e6,
        slots=[
            Slot(id="a", building_id="drop_tower", index=0),
            Slot(id="b", building_id="restaurant", index=1),
            Slot(id="c", building_id="security_post", index=2),
            Slot(id="d", building_id="bench_plaza", index=3),
        ],
        guests=50.0,
    )
    _, first = make_park(state, start=1000.0, save_file=save_file)
    assert first.save()

    clock, second = make_park(start=4600.0, save_file=save_file)
    result = second.begin()

    assert result.offline_seconds == 3600
    assert second.state.money == pytest.approx(1e6 + result.earnings_delta)
    assert second.state.last_save_time == 4600.0
    assert len(second.state.slots) == 4


def test_begin_with_corrupt_save_starts_fresh(save_file):
    save_file.write_text("{oops")
    _, park = make_park(save_file=save_file)
    result = park.begin()
    assert result.offline_seconds == 0
    assert park.state.money == settings.STARTING_MONEY


def test_attach_ticks_and_autosaves(save_file):
    clock, park = make_park(start=0.0, save_file=save_file)
    ticks, saves = [], []
    real_step, real_save = park.step, park.save

    def counting_step(elapsed):
        ticks.append(elapsed)
        return real_step(elapsed)

    def counting_save():
        saves.append(clock())
        return real_save()

    park.step = counting_step
    park.save = counting_save

    scheduler = Scheduler(clock=clock, sleep=clock.sleep)
    park.attach(scheduler, tick_seconds=1.0, save_seconds=30.0)
    scheduler.run(until=lambda: clock() >= 60)

    assert len(ticks) == 60
    assert saves == [30.0, 60.0]
    assert park.state.last_save_time == 60.0


def test_begin_with_old_overfull_snapshot_respects_capacity(save_file):
    save_file.write_text(json.dumps({"money": 1000, "guests": 500, "last_save_time": 1000.0}))
    _, park = make_park(start=1000.0, save_file=save_file)

    park.begin()

    assert park.state.guests <= park.compute_stats().max_guests


def test_compute_stats_is_idempotent():
    state = ParkState(
        money=5000.0,
        slots=[
            Slot(id="a", building_id="carousel", index=0, level=2),
            Slot(id="b", building_id="food_stand", index=1),
        ],
        guests=17.0,
    )
    _, park = make_park(state, autosave=False)

    first = park.compute_stats()
    second = park.compute_stats()

    assert first == second
    assert park.state is state
