"""Idle park package exposing the simulation core."""

from .game import Park, TickOutcome
from .models import ParkState, ParkStats, Slot, new_park_state
from .buildings import (
    BuildingDefinition,
    Ride,
    Shop,
    Infrastructure,
    ALL_BUILDINGS,
    get_building,
)
from .milestones import Milestone, MilestoneProgress, MILESTONES
from .perks import Perk, PERKS, get_perk
from .stats import calculate_park_stats, calculate_demand
from .population import StepResult, step
from .offline import OfflineResult, reconcile
from .operations import CommandResult

__all__ = [
    "Park",
    "TickOutcome",
    "ParkState",
    "ParkStats",
    "Slot",
    "new_park_state",
    "BuildingDefinition",
    "Ride",
    "Shop",
    "Infrastructure",
    "ALL_BUILDINGS",
    "get_building",
    "Milestone",
    "MilestoneProgress",
    "MILESTONES",
    "Perk",
    "PERKS",
    "get_perk",
    "calculate_park_stats",
    "calculate_demand",
    "StepResult",
    "step",
    "OfflineResult",
    "reconcile",
    "CommandResult",
]
