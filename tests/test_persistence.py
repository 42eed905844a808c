import json
import os
import sys

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

import park.persistence as persistence
from park import settings
from park.milestones import MilestoneProgress
from park.models import ParkState, Slot


# --- Constants & Helpers ------------------------------------------------------

def make_state() -> ParkState:
    return ParkState(
        money=12345.5,
        ticket_price=75,
        slots=[
            Slot(id="a", building_id="carousel", index=0, level=3, created_at=10.0),
            Slot(id="b", building_id="food_stand", index=2, level=1, created_at=20.0),
        ],
        unlocked_slots=6,
        perks=["park_rank_2"],
        guests=42.5,
        total_earnings=99999.0,
        last_save_time=1000.0,
        game_started_at=500.0,
        is_game_over=False,
    )


@pytest.fixture
def save_file(tmp_path, monkeypatch):
    """Patches persistence.SAVE_FILE → tmp_path/"save.json"."""
    path = tmp_path / "save.json"
    monkeypatch.setattr(persistence, "SAVE_FILE", path)
    return path


# --- Tests --------------------------------------------------------------------


def test_save_and_load_restore_the_park(save_file):
    state = make_state()
    progress = MilestoneProgress(
        peak_guests=130.0,
        completed=["peak_guests_100"],
        completed_at={"peak_guests_100": 900.0},
        pending_unlocks=["peak_guests_100"],
    )
    persistence.save_state(state, progress)
    assert save_file.exists()
    assert not save_file.with_suffix(".json.tmp").exists()

    loaded_state, loaded_progress = persistence.load_state(now=2000.0)
    assert loaded_state == state
    assert loaded_progress.peak_guests == 130.0
    assert loaded_progress.completed == ["peak_guests_100"]
    assert loaded_progress.completed_at == {"peak_guests_100": 900.0}
    # Acknowledgment queue is session-only.
    assert loaded_progress.pending_unlocks == []


def test_load_without_save_returns_none(save_file):
    assert persistence.load_state(now=0.0) is None


def test_old_snapshot_gets_defaults(save_file):
    save_file.write_text(json.dumps({
        "money": 5000,
        "guests": 12,
        "slots": [{"id": "x", "building_id": "carousel", "index": 0, "level": 2}],
        "last_save_time": 100.0,
    }))

    state, progress = persistence.load_state(now=200.0)

    assert state.money == 5000
    assert state.ticket_price == settings.DEFAULT_TICKET_PRICE
    assert state.perks == []
    assert state.unlocked_slots == settings.STARTING_SLOTS
    assert state.total_earnings == 0
    assert state.game_started_at == 100.0
    assert state.is_game_over is False
    assert state.slots[0].level == 2
    assert progress == MilestoneProgress()


def test_malformed_entries_are_skipped(save_file):
    save_file.write_text(json.dumps({
        "money": "lots",
        "ticket_price": 10_000,
        "perks": "park_rank_2",
        "slots": [
            {"id": "ok", "building_id": "carousel", "index": 1},
            {"id": "no-building"},
            "garbage",
            {"id": "bad-level", "building_id": "carousel", "index": 2, "level": "high"},
        ],
    }))

    state, _ = persistence.load_state(now=50.0)

    assert state.money == settings.STARTING_MONEY
    assert state.ticket_price == settings.TICKET_PRICE_MAX
    assert state.perks == []
    assert [s.id for s in state.slots] == ["ok"]
    assert state.last_save_time == 50.0


def test_unparseable_file_raises_load_error(save_file):
    save_file.write_text("{not json")
    with pytest.raises(persistence.GameLoadError):
        persistence.load_state(now=0.0)


def test_non_object_snapshot_raises_load_error(save_file):
    save_file.write_text("[1, 2, 3]")
    with pytest.raises(persistence.GameLoadError):
        persistence.load_state(now=0.0)


def test_save_to_missing_directory_raises_save_error(tmp_path):
    target = tmp_path / "missing" / "save.json"
    with pytest.raises(persistence.GameSaveError):
        persistence.save_state(make_state(), MilestoneProgress(), file_path=target)


def test_clear_save_removes_file(save_file):
    persistence.save_state(make_state(), MilestoneProgress())
    persistence.clear_save()
    assert not save_file.exists()
    # Clearing twice is fine.
    persistence.clear_save()


def test_snapshot_is_flat_and_excludes_derived_stats():
    data = persistence.serialize_state(make_state(), MilestoneProgress())
    assert set(data) == {
        "money", "ticket_price", "slots", "unlocked_slots", "perks", "guests",
        "total_earnings", "last_save_time", "game_started_at", "is_game_over",
        "milestones",
    }


def test_load_clamps_values_to_park_limits(save_file):
    save_file.write_text(json.dumps({
        "money": 1000,
        "guests": 500,
        "unlocked_slots": 99,
        "perks": [],
        "slots": [
            {"id": "a", "building_id": "carousel", "index": 0, "level": 40},
            {"id": "b", "building_id": "carousel", "index": 0},
            {"id": "c", "building_id": "carousel", "index": settings.MAX_SLOTS},
            {"id": "d", "building_id": "carousel", "index": -1},
        ],
        "last_save_time": 100.0,
    }))

    state, _ = persistence.load_state(now=100.0)

    assert state.unlocked_slots == settings.MAX_SLOTS
    assert [s.id for s in state.slots] == ["a"]
    assert state.slots[0].level == settings.MAX_LEVEL
    assert state.guests == settings.MAX_SLOTS * settings.GUESTS_PER_SLOT


def test_load_raises_unlocked_slots_to_starting_count(save_file):
    save_file.write_text(json.dumps({"unlocked_slots": 1, "guests": 500}))
    state, _ = persistence.load_state(now=0.0)
    assert state.unlocked_slots == settings.STARTING_SLOTS
    assert state.guests == settings.STARTING_SLOTS * settings.GUESTS_PER_SLOT


def test_bonus_slot_perk_keeps_extra_slots_on_load(save_file):
    save_file.write_text(json.dumps({
        "unlocked_slots": settings.MAX_SLOTS + 2,
        "perks": ["extra_land"],
        "slots": [{"id": "x", "building_id": "carousel", "index": settings.MAX_SLOTS + 1}],
    }))
    state, _ = persistence.load_state(now=0.0)
    assert state.unlocked_slots == settings.MAX_SLOTS + 2
    assert [s.id for s in state.slots] == ["x"]
