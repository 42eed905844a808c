from __future__ import annotations

import logging
from typing import Iterable

from . import settings
from .buildings import INFRASTRUCTURE, RIDE, SHOP, get_building
from .models import ParkStats, Slot

logger = logging.getLogger("idlepark.Stats")
logger.addHandler(logging.NullHandler())


def calculate_demand(ticket_price: float) -> float:
    """
    Fraction of the reputation-driven crowd willing to pay ``ticket_price``.

    Linear interpolation between the points of ``settings.DEMAND_CURVE``,
    flat outside them, and never below ``settings.DEMAND_FLOOR``.
    """
    curve = settings.DEMAND_CURVE
    if ticket_price <= curve[0][0]:
        demand = curve[0][1]
    elif ticket_price >= curve[-1][0]:
        demand = curve[-1][1]
    else:
        demand = curve[-1][1]
        for (p0, d0), (p1, d1) in zip(curve, curve[1:]):
            if p0 <= ticket_price <= p1:
                demand = d0 + (d1 - d0) * (ticket_price - p0) / (p1 - p0)
                break
    return min(1.0, max(settings.DEMAND_FLOOR, demand))


def _ratio(capacity: float, guests: float) -> float:
    # An empty park is fully satisfied.
    if guests <= 0:
        return 1.0
    return max(0.0, min(1.0, capacity / guests))


def calculate_park_stats(
    slots: Iterable[Slot],
    unlocked_slots: int,
    ticket_price: float,
    current_guests: float,
) -> ParkStats:
    """Fold the placed buildings into park-wide stats. Pure."""
    max_guests = unlocked_slots * settings.GUESTS_PER_SLOT

    reputation = 0.0
    ride_capacity = 0.0
    hunger_capacity = 0.0
    comfort_capacity = 0.0
    safety_capacity = 0.0
    total_spending_rate = 0.0
    total_maintenance = 0.0

    for slot in slots:
        definition = get_building(slot.building_id)
        if definition is None:
            logger.debug("Slot %s references unknown building %r; skipping", slot.id, slot.building_id)
            continue

        stat_mult = settings.STAT_LEVEL_MULTIPLIER ** (slot.level - 1)
        maint_mult = settings.MAINTENANCE_LEVEL_MULTIPLIER ** (slot.level - 1)

        total_maintenance += definition.maintenance_cost * maint_mult

        if definition.category == RIDE:
            reputation += definition.prestige * stat_mult
            ride_capacity += definition.ride_capacity * stat_mult
        elif definition.category == SHOP:
            total_spending_rate += definition.spending_rate * stat_mult
            hunger_capacity += definition.hunger_capacity * stat_mult
        elif definition.category == INFRASTRUCTURE:
            comfort_capacity += definition.comfort_capacity * stat_mult
            safety_capacity += definition.safety_capacity * stat_mult

    demand_multiplier = calculate_demand(ticket_price)
    target_guests = min(reputation * demand_multiplier, max_guests)

    entertainment = _ratio(ride_capacity, current_guests)
    hunger = _ratio(hunger_capacity, current_guests)
    comfort = _ratio(comfort_capacity, current_guests)
    safety = _ratio(safety_capacity, current_guests)

    weights = settings.SATISFACTION_WEIGHTS
    overall = (
        weights["entertainment"] * entertainment
        + weights["hunger"] * hunger
        + weights["comfort"] * comfort
        + weights["safety"] * safety
    )
    overall = max(0.0, min(1.0, overall))

    # Ambient replacement-rate proxy rather than literal per-guest billing.
    ticket_income = reputation * demand_multiplier * settings.GUEST_ARRIVAL_RATE * ticket_price
    shop_income = current_guests * total_spending_rate
    net_income = ticket_income + shop_income - total_maintenance

    return ParkStats(
        max_guests=max_guests,
        ride_capacity=ride_capacity,
        hunger_capacity=hunger_capacity,
        comfort_capacity=comfort_capacity,
        safety_capacity=safety_capacity,
        reputation=reputation,
        total_spending_rate=total_spending_rate,
        demand_multiplier=demand_multiplier,
        target_guests=target_guests,
        current_guests=current_guests,
        entertainment_satisfaction=entertainment,
        hunger_satisfaction=hunger,
        comfort_satisfaction=comfort,
        safety_satisfaction=safety,
        overall_satisfaction=overall,
        ticket_income=ticket_income,
        shop_income=shop_income,
        total_maintenance=total_maintenance,
        net_income=net_income,
    )
