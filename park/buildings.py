from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Dict, Iterable, List, Optional

from .perks import unlocked_tiers

# Building categories (variant tags)
RIDE = "ride"
SHOP = "shop"
INFRASTRUCTURE = "infrastructure"

# Cost tiers
BASIC = "basic"
STANDARD = "standard"
PREMIUM = "premium"


@dataclass(frozen=True)
class BuildingDefinition:
    """Base catalog entry shared by every building category."""

    CATEGORY: ClassVar[str] = ""

    id: str
    name: str
    icon: str
    tier: str
    base_cost: int
    maintenance_cost: float
    description: str = ""

    @property
    def category(self) -> str:
        return self.CATEGORY


@dataclass(frozen=True)
class Ride(BuildingDefinition):
    """Draws guests to the park and keeps them entertained."""

    CATEGORY: ClassVar[str] = RIDE
    prestige: float = 0.0
    ride_capacity: float = 0.0


@dataclass(frozen=True)
class Shop(BuildingDefinition):
    """Earns money from guests already inside the park."""

    CATEGORY: ClassVar[str] = SHOP
    spending_rate: float = 0.0
    hunger_capacity: float = 0.0


@dataclass(frozen=True)
class Infrastructure(BuildingDefinition):
    """Keeps guests comfortable and safe."""

    CATEGORY: ClassVar[str] = INFRASTRUCTURE
    comfort_capacity: float = 0.0
    safety_capacity: float = 0.0


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

CAROUSEL = Ride(
    id="carousel",
    name="Carousel",
    icon="🎠",
    tier=BASIC,
    base_cost=3000,
    maintenance_cost=2,
    prestige=20,
    ride_capacity=12,
    description="A classic merry-go-round",
)

BUMPER_CARS = Ride(
    id="bumper_cars",
    name="Bumper Cars",
    icon="🚗",
    tier=BASIC,
    base_cost=8000,
    maintenance_cost=5,
    prestige=40,
    ride_capacity=8,
    description="Crash into your friends!",
)

FERRIS_WHEEL = Ride(
    id="ferris_wheel",
    name="Ferris Wheel",
    icon="🎡",
    tier=STANDARD,
    base_cost=25000,
    maintenance_cost=12,
    prestige=90,
    ride_capacity=20,
    description="See the whole park from above",
)

LOG_FLUME = Ride(
    id="log_flume",
    name="Log Flume",
    icon="🌊",
    tier=STANDARD,
    base_cost=45000,
    maintenance_cost=20,
    prestige=140,
    ride_capacity=12,
    description="Get soaked on this water ride",
)

ROLLER_COASTER = Ride(
    id="roller_coaster",
    name="Roller Coaster",
    icon="🎢",
    tier=PREMIUM,
    base_cost=150000,
    maintenance_cost=60,
    prestige=350,
    ride_capacity=24,
    description="The ultimate thrill ride",
)

DROP_TOWER = Ride(
    id="drop_tower",
    name="Drop Tower",
    icon="🗼",
    tier=PREMIUM,
    base_cost=200000,
    maintenance_cost=80,
    prestige=450,
    ride_capacity=16,
    description="Free fall from the sky",
)

FOOD_STAND = Shop(
    id="food_stand",
    name="Food Stand",
    icon="🌭",
    tier=BASIC,
    base_cost=2000,
    maintenance_cost=1,
    spending_rate=0.05,
    hunger_capacity=25,
    description="Hot dogs and lemonade",
)

GIFT_SHOP = Shop(
    id="gift_shop",
    name="Gift Shop",
    icon="🎁",
    tier=BASIC,
    base_cost=5000,
    maintenance_cost=3,
    spending_rate=0.12,
    description="Souvenirs for the trip home",
)

RESTAURANT = Shop(
    id="restaurant",
    name="Restaurant",
    icon="🍽️",
    tier=STANDARD,
    base_cost=30000,
    maintenance_cost=10,
    spending_rate=0.2,
    hunger_capacity=80,
    description="A proper sit-down meal",
)

RESTROOM = Infrastructure(
    id="restroom",
    name="Restroom",
    icon="🚻",
    tier=BASIC,
    base_cost=1500,
    maintenance_cost=1,
    comfort_capacity=30,
    description="Nobody builds a park without one",
)

BENCH_PLAZA = Infrastructure(
    id="bench_plaza",
    name="Shaded Plaza",
    icon="🌳",
    tier=BASIC,
    base_cost=2500,
    maintenance_cost=1,
    comfort_capacity=45,
    description="Benches and shade for tired feet",
)

FIRST_AID = Infrastructure(
    id="first_aid",
    name="First Aid Station",
    icon="⛑️",
    tier=BASIC,
    base_cost=3500,
    maintenance_cost=2,
    safety_capacity=40,
    description="Patches up scraped knees",
)

SECURITY_POST = Infrastructure(
    id="security_post",
    name="Security Post",
    icon="👮",
    tier=STANDARD,
    base_cost=12000,
    maintenance_cost=6,
    comfort_capacity=10,
    safety_capacity=100,
    description="Keeps the queues orderly",
)


# Convenience list of all buildable structures
ALL_BUILDINGS: List[BuildingDefinition] = [
    CAROUSEL,
    BUMPER_CARS,
    FERRIS_WHEEL,
    LOG_FLUME,
    ROLLER_COASTER,
    DROP_TOWER,
    FOOD_STAND,
    GIFT_SHOP,
    RESTAURANT,
    RESTROOM,
    BENCH_PLAZA,
    FIRST_AID,
    SECURITY_POST,
]

# Map ids to definitions for easy lookup
BUILDING_ID_TO_DEFINITION: Dict[str, BuildingDefinition] = {
    b.id: b for b in ALL_BUILDINGS
}


def get_building(building_id: str) -> Optional[BuildingDefinition]:
    return BUILDING_ID_TO_DEFINITION.get(building_id)


def is_available(definition: BuildingDefinition, perks: Iterable[str]) -> bool:
    """Return True if the building is basic or an owned perk unlocks its tier."""
    return definition.tier == BASIC or definition.tier in unlocked_tiers(perks)


def available_buildings(perks: Iterable[str]) -> List[BuildingDefinition]:
    owned = set(perks)
    return [b for b in ALL_BUILDINGS if is_available(b, owned)]


def buildings_by_category(category: str) -> List[BuildingDefinition]:
    return [b for b in ALL_BUILDINGS if b.category == category]
