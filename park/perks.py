from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Union

from . import settings


@dataclass(frozen=True)
class UnlockTier:
    """Makes every building of ``tier`` available to build."""

    tier: str
    kind: str = "unlock_tier"


@dataclass(frozen=True)
class BonusSlots:
    """Raises the slot cap by ``amount``."""

    amount: int
    kind: str = "bonus_slots"


PerkEffect = Union[UnlockTier, BonusSlots]


@dataclass(frozen=True)
class Perk:
    id: str
    name: str
    icon: str
    description: str
    cost: int
    effect: PerkEffect


PERKS: List[Perk] = [
    Perk(
        id="park_rank_2",
        name="Park Expansion I",
        icon="🌟",
        description="Unlock standard-tier attractions",
        cost=50000,
        effect=UnlockTier("standard"),
    ),
    Perk(
        id="park_rank_3",
        name="Park Expansion II",
        icon="✨",
        description="Unlock premium-tier attractions",
        cost=200000,
        effect=UnlockTier("premium"),
    ),
    Perk(
        id="extra_land",
        name="Extra Land",
        icon="🗺️",
        description="Two more building slots past the usual cap",
        cost=150000,
        effect=BonusSlots(2),
    ),
]

PERK_ID_TO_PERK: Dict[str, Perk] = {p.id: p for p in PERKS}


def get_perk(perk_id: str) -> Optional[Perk]:
    return PERK_ID_TO_PERK.get(perk_id)


def bonus_slots(perks: Iterable[str]) -> int:
    """Total slot-cap bonus granted by the owned perks."""
    total = 0
    for perk_id in perks:
        perk = get_perk(perk_id)
        if perk is not None and isinstance(perk.effect, BonusSlots):
            total += perk.effect.amount
    return total


def slot_cap(perks: Iterable[str]) -> int:
    return settings.MAX_SLOTS + bonus_slots(perks)


def unlocked_tiers(perks: Iterable[str]) -> Set[str]:
    """Building tiers opened up by the owned perks."""
    tiers: Set[str] = set()
    for perk_id in perks:
        perk = get_perk(perk_id)
        if perk is not None and isinstance(perk.effect, UnlockTier):
            tiers.add(perk.effect.tier)
    return tiers
