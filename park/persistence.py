from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import settings
from .milestones import MilestoneProgress
from .models import ParkState, Slot
from .perks import slot_cap

logger = logging.getLogger("idlepark.Persistence")
logger.addHandler(logging.NullHandler())


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------
SAVE_FILE: Path = Path("save.json")


# -----------------------------------------------------------------------------
# Custom Exceptions
# -----------------------------------------------------------------------------
class GameSaveError(Exception):
    """Exception raised when saving the park state fails."""


class GameLoadError(Exception):
    """Exception raised when loading the park state fails."""


# -----------------------------------------------------------------------------
# Data Classes
# -----------------------------------------------------------------------------
@dataclass
class LoadResult:
    """Wrapper to allow unpacking ``load_state`` results flexibly."""
    state: ParkState
    progress: MilestoneProgress

    def __iter__(self):
        return iter((self.state, self.progress))


# -----------------------------------------------------------------------------
# Serialization / Deserialization Helpers
# -----------------------------------------------------------------------------
def _number(raw: Dict[str, Any], key: str, default: float) -> float:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        if key in raw:
            logger.warning("Invalid %r in save: %r; using %r", key, value, default)
        return default
    return float(value)


def serialize_slots(slots: List[Slot]) -> List[Dict[str, Any]]:
    return [
        {
            "id": s.id,
            "building_id": s.building_id,
            "index": int(s.index),
            "level": int(s.level),
            "created_at": float(s.created_at),
        }
        for s in slots
    ]


def deserialize_slots(data: Any) -> List[Slot]:
    """Rebuild slots from JSON, skipping entries that cannot be read."""
    slots: List[Slot] = []
    if not isinstance(data, list):
        logger.warning("'slots' in save file is not a list; starting empty.")
        return slots

    for position, entry in enumerate(data):
        if not isinstance(entry, dict):
            logger.warning("Skipping invalid slot entry: %r", entry)
            continue
        building_id = entry.get("building_id")
        if not isinstance(building_id, str):
            logger.warning("Skipping slot without building id: %r", entry)
            continue
        try:
            slots.append(
                Slot(
                    id=str(entry.get("id", f"slot-{position}")),
                    building_id=building_id,
                    index=int(entry.get("index", position)),
                    level=max(1, min(settings.MAX_LEVEL, int(entry.get("level", 1)))),
                    created_at=float(entry.get("created_at", 0.0)),
                )
            )
        except (ValueError, TypeError):
            logger.warning("Skipping invalid slot entry: %r", entry)
    return slots


def _slots_within(slots: List[Slot], unlocked_slots: int) -> List[Slot]:
    """Drop slots outside the unlocked range or sharing an index."""
    kept: List[Slot] = []
    taken = set()
    for slot in slots:
        if not 0 <= slot.index < unlocked_slots or slot.index in taken:
            logger.warning("Dropping slot %s at index %d", slot.id, slot.index)
            continue
        taken.add(slot.index)
        kept.append(slot)
    return kept


def serialize_progress(progress: MilestoneProgress) -> Dict[str, Any]:
    return {
        "peak_guests": float(progress.peak_guests),
        "completed": list(progress.completed),
        "completed_at": {str(k): float(v) for k, v in progress.completed_at.items()},
    }


def deserialize_progress(data: Any) -> MilestoneProgress:
    if not isinstance(data, dict):
        return MilestoneProgress()

    completed = data.get("completed", [])
    if not isinstance(completed, list):
        logger.warning("'completed' milestones in save file is not a list; resetting.")
        completed = []
    completed_at = data.get("completed_at", {})
    if not isinstance(completed_at, dict):
        completed_at = {}

    return MilestoneProgress(
        peak_guests=_number(data, "peak_guests", 0.0),
        completed=[str(m) for m in completed],
        completed_at={
            str(k): float(v) for k, v in completed_at.items() if isinstance(v, (int, float))
        },
    )


def serialize_state(state: ParkState, progress: MilestoneProgress) -> Dict[str, Any]:
    """Flat snapshot of every persisted field."""
    return {
        "money": float(state.money),
        "ticket_price": float(state.ticket_price),
        "slots": serialize_slots(state.slots),
        "unlocked_slots": int(state.unlocked_slots),
        "perks": list(state.perks),
        "guests": float(state.guests),
        "total_earnings": float(state.total_earnings),
        "last_save_time": float(state.last_save_time),
        "game_started_at": float(state.game_started_at),
        "is_game_over": bool(state.is_game_over),
        "milestones": serialize_progress(progress),
    }


def deserialize_state(raw: Dict[str, Any], now: float) -> LoadResult:
    """
    Rebuild state from a snapshot. Older snapshots miss newer fields;
    each missing field takes its default instead of failing the load.
    """
    perks = raw.get("perks", [])
    if not isinstance(perks, list):
        logger.warning("'perks' in save file is not a list; resetting.")
        perks = []

    perks = [str(p) for p in perks]
    unlocked_slots = int(_number(raw, "unlocked_slots", settings.STARTING_SLOTS))
    unlocked_slots = max(settings.STARTING_SLOTS, min(slot_cap(perks), unlocked_slots))
    slots = _slots_within(deserialize_slots(raw.get("slots", [])), unlocked_slots)
    max_guests = unlocked_slots * settings.GUESTS_PER_SLOT

    last_save_time = _number(raw, "last_save_time", now)
    ticket_price = _number(raw, "ticket_price", settings.DEFAULT_TICKET_PRICE)
    ticket_price = max(settings.TICKET_PRICE_MIN, min(settings.TICKET_PRICE_MAX, ticket_price))

    state = ParkState(
        money=max(0.0, _number(raw, "money", settings.STARTING_MONEY)),
        ticket_price=ticket_price,
        slots=slots,
        unlocked_slots=unlocked_slots,
        perks=perks,
        guests=max(0.0, min(max_guests, _number(raw, "guests", 0.0))),
        total_earnings=_number(raw, "total_earnings", 0.0),
        last_save_time=last_save_time,
        game_started_at=_number(raw, "game_started_at", last_save_time),
        is_game_over=bool(raw.get("is_game_over", False)),
    )
    progress = deserialize_progress(raw.get("milestones", {}))
    return LoadResult(state=state, progress=progress)


# -----------------------------------------------------------------------------
# Loading and Saving State
# -----------------------------------------------------------------------------
def load_state(*, now: float, file_path: Optional[Path] = None) -> Optional[LoadResult]:
    """
    Load the saved park, or None when there is no save yet.

    Raises:
        GameLoadError: if the file cannot be read or parsed.
    """
    path = file_path or SAVE_FILE
    if not path.exists():
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw_data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise GameLoadError(f"Failed to read or parse save file: {e}") from e

    if not isinstance(raw_data, dict):
        raise GameLoadError("Save file does not contain a JSON object")

    return deserialize_state(raw_data, now)


def save_state(
    state: ParkState,
    progress: MilestoneProgress,
    *,
    file_path: Optional[Path] = None,
) -> None:
    """
    Persist the park state to disk in an atomic manner.

    Raises:
        GameSaveError: if writing or renaming fails.
    """
    path = file_path or SAVE_FILE
    temp_file = path.with_suffix(".json.tmp")
    data = serialize_state(state, progress)

    # Write to a temporary file first
    try:
        with open(temp_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        raise GameSaveError(f"Failed to write to temporary save file: {e}") from e

    # Atomically move temp -> final
    try:
        shutil.move(str(temp_file), str(path))
    except OSError as e:
        # Attempt to remove leftover temp file, but do not mask original error
        try:
            temp_file.unlink(missing_ok=True)
        except OSError:
            pass
        raise GameSaveError(f"Failed to rename temporary save file to final: {e}") from e


def clear_save(*, file_path: Optional[Path] = None) -> None:
    path = file_path or SAVE_FILE
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        raise GameSaveError(f"Failed to delete save file: {e}") from e
