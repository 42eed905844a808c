"""Milestone catalog and the evaluator that completes them.

A milestone moves from locked to completed exactly once. Requirements and
rewards are tagged by ``kind``; adding a new kind means adding a dataclass
and a registry entry, the evaluator itself never changes.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Union

from .models import ParkState

logger = logging.getLogger("idlepark.Milestones")
logger.addHandler(logging.NullHandler())


# -----------------------------------------------------------------------------
# Requirements and rewards
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class PeakGuestsRequirement:
    amount: float
    kind: str = "peak_guests"


@dataclass(frozen=True)
class MoneyReward:
    amount: float
    kind: str = "money"


MilestoneRequirement = Union[PeakGuestsRequirement]
MilestoneReward = Union[MoneyReward]


@dataclass(frozen=True)
class Milestone:
    id: str
    name: str
    description: str
    icon: str
    requirement: MilestoneRequirement
    reward: MilestoneReward


MILESTONES: List[Milestone] = [
    Milestone(
        id="peak_guests_100",
        name="Crowd Favorite",
        description="Have 100 guests in your park at once",
        icon="👥",
        requirement=PeakGuestsRequirement(100),
        reward=MoneyReward(5000),
    ),
    Milestone(
        id="peak_guests_250",
        name="Popular Destination",
        description="Have 250 guests in your park at once",
        icon="🎢",
        requirement=PeakGuestsRequirement(250),
        reward=MoneyReward(15000),
    ),
    Milestone(
        id="peak_guests_500",
        name="Theme Park Tycoon",
        description="Have 500 guests in your park at once",
        icon="👑",
        requirement=PeakGuestsRequirement(500),
        reward=MoneyReward(50000),
    ),
]

MILESTONE_ID_TO_MILESTONE: Dict[str, Milestone] = {m.id: m for m in MILESTONES}


def get_milestone(milestone_id: str) -> Optional[Milestone]:
    return MILESTONE_ID_TO_MILESTONE.get(milestone_id)


# -----------------------------------------------------------------------------
# Progress
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class MilestoneProgress:
    peak_guests: float = 0.0
    completed: List[str] = field(default_factory=list)
    completed_at: Dict[str, float] = field(default_factory=dict)
    # Completed milestones the player has not acknowledged yet
    pending_unlocks: List[str] = field(default_factory=list)


def _check_peak_guests(req: PeakGuestsRequirement, progress: MilestoneProgress) -> bool:
    return progress.peak_guests >= req.amount


def _apply_money(reward: MoneyReward, state: ParkState) -> ParkState:
    return dataclasses.replace(
        state,
        money=state.money + reward.amount,
        total_earnings=state.total_earnings + reward.amount,
    )


REQUIREMENT_CHECKS: Dict[str, Callable[..., bool]] = {
    "peak_guests": _check_peak_guests,
}

REWARD_APPLIERS: Dict[str, Callable[..., ParkState]] = {
    "money": _apply_money,
}


def requirement_met(requirement: MilestoneRequirement, progress: MilestoneProgress) -> bool:
    check = REQUIREMENT_CHECKS.get(requirement.kind)
    if check is None:
        logger.warning("No check registered for requirement kind %r", requirement.kind)
        return False
    return check(requirement, progress)


# -----------------------------------------------------------------------------
# Evaluator
# -----------------------------------------------------------------------------
def update_peak(progress: MilestoneProgress, candidate: float) -> MilestoneProgress:
    """Raise the observed peak to ``candidate``; the peak never decreases."""
    if candidate > progress.peak_guests:
        return dataclasses.replace(progress, peak_guests=candidate)
    return progress


def check_milestones(
    progress: MilestoneProgress,
    now: float,
    milestones: Optional[List[Milestone]] = None,
) -> Tuple[MilestoneProgress, List[Milestone]]:
    """
    Complete every locked milestone whose requirement now holds.

    Returns the updated progress and the newly completed milestones, so the
    caller can grant each reward exactly once.
    """
    catalog = MILESTONES if milestones is None else milestones
    newly: List[Milestone] = []
    for milestone in catalog:
        if milestone.id in progress.completed:
            continue
        if requirement_met(milestone.requirement, progress):
            newly.append(milestone)

    if not newly:
        return progress, []

    ids = [m.id for m in newly]
    completed_at = dict(progress.completed_at)
    for milestone_id in ids:
        completed_at[milestone_id] = now
        logger.info("Milestone completed: %s", milestone_id)

    progress = dataclasses.replace(
        progress,
        completed=progress.completed + ids,
        completed_at=completed_at,
        pending_unlocks=progress.pending_unlocks + ids,
    )
    return progress, newly


def evaluate(
    progress: MilestoneProgress,
    candidate: float,
    now: float,
    milestones: Optional[List[Milestone]] = None,
) -> Tuple[MilestoneProgress, List[Milestone]]:
    """Feed an observed guest count to the evaluator."""
    return check_milestones(update_peak(progress, candidate), now, milestones)


def apply_rewards(state: ParkState, milestones: List[Milestone]) -> ParkState:
    for milestone in milestones:
        applier = REWARD_APPLIERS.get(milestone.reward.kind)
        if applier is None:
            logger.warning("No applier registered for reward kind %r", milestone.reward.kind)
            continue
        state = applier(milestone.reward, state)
    return state


def reward_money(milestones: List[Milestone]) -> float:
    """Total currency granted by ``milestones``."""
    return sum(m.reward.amount for m in milestones if isinstance(m.reward, MoneyReward))


def is_completed(progress: MilestoneProgress, milestone_id: str) -> bool:
    return milestone_id in progress.completed


def clear_pending(progress: MilestoneProgress) -> MilestoneProgress:
    return dataclasses.replace(progress, pending_unlocks=[])
