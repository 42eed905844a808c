from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional

from .models import ParkStats

GUEST_NAMES = [
    "Alex", "Jordan", "Sam", "Taylor", "Morgan", "Casey", "Riley", "Quinn",
    "Avery", "Jamie", "Drew", "Skyler", "Reese", "Charlie", "Frankie", "Jessie",
]

POSITIVE = "positive"
NEGATIVE = "negative"
NEUTRAL = "neutral"

POSITIVE_MESSAGES = [
    ("😍", "this park is incredible!"),
    ("🎉", "best day ever at this park!"),
    ("🌟", "definitely coming back again!"),
    ("👍", "great value for the ticket price!"),
    ("🤩", "the rides are amazing!"),
]

NEGATIVE_MESSAGES = [
    ("😡", "waited forever in line..."),
    ("🚫", "not enough restrooms!"),
    ("😞", "leaving early, not worth it"),
    ("🥵", "need more shade and benches!"),
    ("😒", "the queues are ridiculous"),
]

HIGH_PRICE_MESSAGES = [
    ("😤", "these ticket prices are insane!"),
    ("💸", "way too expensive here"),
]

LOW_PRICE_MESSAGES = [
    ("🤑", "can't believe how cheap the tickets are!"),
]

CROWDED_MESSAGES = [
    ("🙄", "overpriced and overcrowded"),
    ("😬", "so many people today!"),
]

NEUTRAL_MESSAGES = [
    ("🚶", "just arrived at the park!"),
    ("🎟️", "got my ticket, let's go!"),
    ("🗺️", "checking out the map..."),
    ("🤔", "where should we go first?"),
]

# Ticket price guests consider normal
REFERENCE_PRICE = 50


@dataclass(frozen=True)
class GuestMessage:
    name: str
    emoji: str
    text: str
    tone: str


def contextual_message(
    stats: ParkStats,
    ticket_price: float,
    rng: Optional[random.Random] = None,
) -> Optional[GuestMessage]:
    """Pick a guest comment matching the park's mood; None for an empty park."""
    if stats.current_guests < 1:
        return None
    rng = rng or random.Random()

    satisfaction = stats.overall_satisfaction
    price_ratio = ticket_price / REFERENCE_PRICE
    crowding = stats.current_guests / stats.max_guests if stats.max_guests else 0.0

    pool: List[tuple]
    if price_ratio > 2 and rng.random() < 0.3:
        pool, tone = HIGH_PRICE_MESSAGES, NEGATIVE
    elif price_ratio < 0.5 and rng.random() < 0.3:
        pool, tone = LOW_PRICE_MESSAGES, POSITIVE
    elif crowding > 0.9 and rng.random() < 0.3:
        pool, tone = CROWDED_MESSAGES, NEGATIVE
    elif satisfaction < 0.4:
        pool, tone = NEGATIVE_MESSAGES, NEGATIVE
    elif satisfaction > 0.7:
        pool, tone = POSITIVE_MESSAGES, POSITIVE
    else:
        pool, tone = NEUTRAL_MESSAGES, NEUTRAL

    emoji, text = rng.choice(pool)
    return GuestMessage(name=rng.choice(GUEST_NAMES), emoji=emoji, text=text, tone=tone)
