"""Player commands: build, upgrade, demolish, unlock slots, buy perks, pricing.

Every command returns a ``CommandResult``. A rejection is an ordinary
outcome, not an error, and carries the untouched input state.
"""
from __future__ import annotations

import dataclasses
import logging
import math
import uuid
from dataclasses import dataclass
from typing import Optional

from . import settings
from .buildings import get_building, is_available
from .models import ParkState, Slot
from .perks import get_perk, slot_cap

logger = logging.getLogger("idlepark.Operations")
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class CommandResult:
    ok: bool
    state: ParkState
    reason: str = ""

    def __bool__(self) -> bool:
        return self.ok


def _reject(state: ParkState, reason: str) -> CommandResult:
    logger.debug("Command rejected: %s", reason)
    return CommandResult(ok=False, state=state, reason=reason)


# -----------------------------------------------------------------------------
# Cost helpers
# -----------------------------------------------------------------------------
def upgrade_cost(slot: Slot) -> Optional[int]:
    """Cost to raise ``slot`` to its next level, or None for unknown buildings."""
    definition = get_building(slot.building_id)
    if definition is None:
        return None
    return math.floor(definition.base_cost * settings.UPGRADE_COST_MULTIPLIER ** slot.level)


def total_investment(slot: Slot) -> int:
    """Original cost plus every upgrade paid to reach the slot's level."""
    definition = get_building(slot.building_id)
    if definition is None:
        return 0
    total = definition.base_cost
    for level in range(1, slot.level):
        total += math.floor(definition.base_cost * settings.UPGRADE_COST_MULTIPLIER ** level)
    return total


def demolish_refund(slot: Slot) -> int:
    return math.floor(total_investment(slot) * settings.DEMOLISH_REFUND_RATE)


def next_slot_cost(state: ParkState) -> Optional[int]:
    """Cost of the next slot, or None once the cap is reached."""
    if state.unlocked_slots >= slot_cap(state.perks):
        return None
    index = state.unlocked_slots - settings.STARTING_SLOTS
    if index < 0 or index >= len(settings.SLOT_UNLOCK_COSTS):
        return None
    return settings.SLOT_UNLOCK_COSTS[index]


def clamp_ticket_price(price: float) -> float:
    return max(settings.TICKET_PRICE_MIN, min(settings.TICKET_PRICE_MAX, price))


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------
def build(state: ParkState, slot_index: int, building_id: str, now: float) -> CommandResult:
    if state.is_game_over:
        return _reject(state, "game over")
    if slot_index < 0 or slot_index >= state.unlocked_slots:
        return _reject(state, f"slot {slot_index} is not unlocked")
    if state.slot_at(slot_index) is not None:
        return _reject(state, f"slot {slot_index} is occupied")
    definition = get_building(building_id)
    if definition is None:
        return _reject(state, f"unknown building {building_id!r}")
    if not is_available(definition, state.perks):
        return _reject(state, f"{definition.name} needs the {definition.tier} tier unlocked")
    if state.money < definition.base_cost:
        return _reject(state, f"cannot afford {definition.name}")

    slot = Slot(
        id=uuid.uuid4().hex,
        building_id=building_id,
        index=slot_index,
        level=1,
        created_at=now,
    )
    logger.info("Built %s in slot %d for %d", definition.name, slot_index, definition.base_cost)
    return CommandResult(
        ok=True,
        state=dataclasses.replace(
            state,
            money=state.money - definition.base_cost,
            slots=state.slots + [slot],
        ),
    )


def upgrade(state: ParkState, slot_id: str) -> CommandResult:
    if state.is_game_over:
        return _reject(state, "game over")
    slot = state.slot_by_id(slot_id)
    if slot is None:
        return _reject(state, f"no slot {slot_id!r}")
    if slot.level >= settings.MAX_LEVEL:
        return _reject(state, "already at max level")
    cost = upgrade_cost(slot)
    if cost is None:
        return _reject(state, f"unknown building {slot.building_id!r}")
    if cost > state.money:
        return _reject(state, f"cannot afford upgrade ({cost})")

    upgraded = dataclasses.replace(slot, level=slot.level + 1)
    logger.info("Upgraded slot %s to level %d for %d", slot_id, upgraded.level, cost)
    return CommandResult(
        ok=True,
        state=dataclasses.replace(
            state,
            money=state.money - cost,
            slots=[upgraded if s.id == slot_id else s for s in state.slots],
        ),
    )


def demolish(state: ParkState, slot_id: str) -> CommandResult:
    slot = state.slot_by_id(slot_id)
    if slot is None:
        return _reject(state, f"no slot {slot_id!r}")

    refund = demolish_refund(slot)
    logger.info("Demolished slot %s, refunded %d", slot_id, refund)
    return CommandResult(
        ok=True,
        state=dataclasses.replace(
            state,
            money=state.money + refund,
            slots=[s for s in state.slots if s.id != slot_id],
        ),
    )


def unlock_next_slot(state: ParkState) -> CommandResult:
    if state.is_game_over:
        return _reject(state, "game over")
    cost = next_slot_cost(state)
    if cost is None:
        return _reject(state, "slot cap reached")
    if state.money < cost:
        return _reject(state, f"cannot afford slot ({cost})")

    logger.info("Unlocked slot %d for %d", state.unlocked_slots + 1, cost)
    return CommandResult(
        ok=True,
        state=dataclasses.replace(
            state,
            money=state.money - cost,
            unlocked_slots=state.unlocked_slots + 1,
        ),
    )


def buy_perk(state: ParkState, perk_id: str) -> CommandResult:
    if state.is_game_over:
        return _reject(state, "game over")
    perk = get_perk(perk_id)
    if perk is None:
        return _reject(state, f"unknown perk {perk_id!r}")
    if perk_id in state.perks:
        return _reject(state, f"already own {perk.name}")
    if state.money < perk.cost:
        return _reject(state, f"cannot afford {perk.name}")

    logger.info("Bought perk %s for %d", perk.name, perk.cost)
    return CommandResult(
        ok=True,
        state=dataclasses.replace(
            state,
            money=state.money - perk.cost,
            perks=state.perks + [perk_id],
        ),
    )


def set_ticket_price(state: ParkState, price: float) -> CommandResult:
    return CommandResult(
        ok=True,
        state=dataclasses.replace(state, ticket_price=clamp_ticket_price(price)),
    )
