from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

from . import settings
from .models import ParkState
from .stats import calculate_park_stats

logger = logging.getLogger("idlepark.Population")
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class StepResult:
    """Outcome of advancing the park by one time delta."""

    state: ParkState
    ticket_revenue: float = 0.0
    shop_revenue: float = 0.0
    maintenance_cost: float = 0.0
    arrivals: float = 0.0
    departures: float = 0.0
    bankrupt: bool = False

    @property
    def money_delta(self) -> float:
        return self.ticket_revenue + self.shop_revenue - self.maintenance_cost


def step(state: ParkState, elapsed: float) -> StepResult:
    """
    Advance guests and money by ``elapsed`` seconds.

    Guests first close part of the gap to the target, then a fixed share
    leaves, then unhappy guests leave on top of that. Tickets are billed to
    new arrivals only, shops to the resulting crowd, maintenance is flat.
    Money dropping below zero ends the game and nothing else is applied.
    """
    if state.is_game_over or elapsed <= 0:
        return StepResult(state=state)

    stats = calculate_park_stats(
        state.slots, state.unlocked_slots, state.ticket_price, state.guests
    )

    guests = state.guests

    if stats.target_guests > guests:
        approach = min(1.0, settings.GUEST_ARRIVAL_RATE * elapsed)
        guests += (stats.target_guests - guests) * approach

    natural = guests * min(1.0, settings.GUEST_DEPARTURE_RATE * elapsed)
    guests -= natural

    unhappy = 0.0
    if stats.overall_satisfaction < 1:
        leave = (1 - stats.overall_satisfaction) * settings.UNHAPPY_LEAVE_RATE * elapsed
        unhappy = guests * min(1.0, leave)
        guests -= unhappy

    guests = max(0.0, min(stats.max_guests, guests))

    # Departed guests replaced by newcomers still bought a ticket.
    arrivals = max(0.0, (guests - state.guests) + natural)

    ticket_revenue = arrivals * state.ticket_price
    shop_revenue = guests * stats.total_spending_rate * elapsed
    maintenance_cost = stats.total_maintenance * elapsed

    money = state.money + ticket_revenue + shop_revenue - maintenance_cost

    if money < 0:
        logger.info("Park went bankrupt (money would be %.2f)", money)
        return StepResult(
            state=dataclasses.replace(state, money=0.0, is_game_over=True),
            bankrupt=True,
        )

    net_change = ticket_revenue + shop_revenue - maintenance_cost
    new_state = dataclasses.replace(
        state,
        money=money,
        guests=guests,
        total_earnings=state.total_earnings + max(0.0, net_change),
    )
    return StepResult(
        state=new_state,
        ticket_revenue=ticket_revenue,
        shop_revenue=shop_revenue,
        maintenance_cost=maintenance_cost,
        arrivals=arrivals,
        departures=natural + unhappy,
    )
