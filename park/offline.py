"""Offline progress.

Instead of replaying every tick of a long absence, the park is assumed to
settle at an equilibrium population right away and earn at that
equilibrium's rate for the whole gap. This is a first-order estimate: the
ticket side uses guest turnover as the count of paying arrivals, which does
not match the real-time stepper exactly for short gaps.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import List

from . import settings
from .milestones import Milestone, MilestoneProgress, apply_rewards, evaluate, reward_money
from .models import ParkState
from .stats import calculate_park_stats

logger = logging.getLogger("idlepark.Offline")
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class OfflineResult:
    state: ParkState
    progress: MilestoneProgress
    earnings_delta: float = 0.0
    milestones_unlocked: List[Milestone] = field(default_factory=list)
    offline_seconds: float = 0.0
    equilibrium_guests: float = 0.0


def equilibrium_guests(state: ParkState) -> float:
    """Population the park would settle at, bounded by the growth ceiling."""
    stats = calculate_park_stats(
        state.slots, state.unlocked_slots, state.ticket_price, state.guests
    )
    if stats.overall_satisfaction >= settings.SATISFACTION_THRESHOLD:
        equilibrium = min(stats.target_guests, stats.max_guests)
    else:
        # Unhappy parks settle lower.
        equilibrium = min(stats.target_guests * stats.overall_satisfaction, stats.max_guests)

    ceiling = max(state.guests * settings.OFFLINE_GROWTH_CEILING, state.guests)
    return max(0.0, min(equilibrium, ceiling))


def _capped_guests(state: ParkState) -> float:
    return max(0.0, min(state.guests, state.unlocked_slots * settings.GUESTS_PER_SLOT))


def reconcile(state: ParkState, progress: MilestoneProgress, now: float) -> OfflineResult:
    """
    Apply the earnings of the gap between ``state.last_save_time`` and ``now``.

    Returns the new state and milestone progress along with the earnings
    delta to show the player, milestone rewards included.
    """
    offline_seconds = now - state.last_save_time
    guests = _capped_guests(state)
    if offline_seconds <= 0 or state.is_game_over:
        return OfflineResult(
            state=dataclasses.replace(state, guests=guests, last_save_time=now),
            progress=progress,
            equilibrium_guests=guests,
        )

    stats = calculate_park_stats(
        state.slots, state.unlocked_slots, state.ticket_price, state.guests
    )
    equilibrium = equilibrium_guests(state)

    turnover = equilibrium * settings.GUEST_DEPARTURE_RATE
    ticket_income = turnover * state.ticket_price
    shop_income = equilibrium * stats.total_spending_rate
    net_income = ticket_income + shop_income - stats.total_maintenance
    earnings = net_income * offline_seconds

    logger.info(
        "Offline for %.0fs: equilibrium %.1f guests, net %.2f/s",
        offline_seconds, equilibrium, net_income,
    )

    money = state.money + earnings
    if money < 0:
        logger.info("Park went bankrupt while offline")
        return OfflineResult(
            state=dataclasses.replace(
                state, money=0.0, guests=guests, is_game_over=True, last_save_time=now
            ),
            progress=progress,
            earnings_delta=earnings,
            offline_seconds=offline_seconds,
            equilibrium_guests=equilibrium,
        )

    new_state = dataclasses.replace(
        state,
        money=money,
        guests=equilibrium,
        total_earnings=state.total_earnings + max(0.0, earnings),
        last_save_time=now,
    )

    progress, unlocked = evaluate(progress, equilibrium, now)
    if unlocked:
        new_state = apply_rewards(new_state, unlocked)
        earnings += reward_money(unlocked)

    return OfflineResult(
        state=new_state,
        progress=progress,
        earnings_delta=earnings,
        milestones_unlocked=unlocked,
        offline_seconds=offline_seconds,
        equilibrium_guests=equilibrium,
    )
