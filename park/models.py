from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from . import settings


@dataclass(frozen=True)
class Slot:
    """A placed building occupying one park position."""

    id: str
    building_id: str
    index: int
    level: int = 1
    created_at: float = 0.0


@dataclass(frozen=True)
class ParkState:
    """Root aggregate of everything the simulation persists.

    Instances are never mutated; every operation, step and reconcile
    returns a new state.
    """

    money: float
    ticket_price: float = settings.DEFAULT_TICKET_PRICE
    slots: List[Slot] = field(default_factory=list)
    unlocked_slots: int = settings.STARTING_SLOTS
    perks: List[str] = field(default_factory=list)
    guests: float = 0.0
    total_earnings: float = 0.0
    last_save_time: float = 0.0
    game_started_at: float = 0.0
    is_game_over: bool = False

    def slot_by_id(self, slot_id: str) -> Optional[Slot]:
        for slot in self.slots:
            if slot.id == slot_id:
                return slot
        return None

    def slot_at(self, index: int) -> Optional[Slot]:
        for slot in self.slots:
            if slot.index == index:
                return slot
        return None


def new_park_state(now: float) -> ParkState:
    """Create the state of a freshly opened park."""
    return ParkState(
        money=settings.STARTING_MONEY,
        ticket_price=settings.DEFAULT_TICKET_PRICE,
        slots=[],
        unlocked_slots=settings.STARTING_SLOTS,
        perks=[],
        guests=0.0,
        total_earnings=0.0,
        last_save_time=now,
        game_started_at=now,
        is_game_over=False,
    )


@dataclass(frozen=True)
class ParkStats:
    """Park-wide figures derived from the slots; never persisted."""

    # Capacities
    max_guests: float
    ride_capacity: float
    hunger_capacity: float
    comfort_capacity: float
    safety_capacity: float

    # Attraction
    reputation: float
    total_spending_rate: float
    demand_multiplier: float
    target_guests: float
    current_guests: float

    # Satisfaction ratios, each in [0, 1]
    entertainment_satisfaction: float
    hunger_satisfaction: float
    comfort_satisfaction: float
    safety_satisfaction: float
    overall_satisfaction: float

    # Money rates, per second
    ticket_income: float
    shop_income: float
    total_maintenance: float
    net_income: float
