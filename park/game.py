import argparse
import dataclasses
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from . import milestones, operations, settings
from .formatters import format_duration, format_money, format_money_per_sec, format_number
from .milestones import Milestone, MilestoneProgress
from .models import ParkState, ParkStats, new_park_state
from .offline import OfflineResult, reconcile
from .operations import CommandResult
from .persistence import GameLoadError, GameSaveError, clear_save, load_state, save_state
from .population import StepResult, step
from .scheduler import Scheduler
from .stats import calculate_park_stats

logger = logging.getLogger("idlepark.Park")
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class TickOutcome:
    """A stepper result plus the milestones it completed."""

    result: StepResult
    milestones_unlocked: List[Milestone] = field(default_factory=list)

    @property
    def reward(self) -> float:
        return milestones.reward_money(self.milestones_unlocked)


# --------------------------------------------------------------------
# “Park” Class: single owner of the park state and the command surface
# --------------------------------------------------------------------
class Park:
    """
    Owns the current ``ParkState`` and ``MilestoneProgress`` and is the only
    writer of either. Handles:
      - Real-time stepping and milestone rewards
      - Player commands (build, upgrade, demolish, slots, perks, pricing)
      - One-shot offline reconciliation at load
      - Saving after every successful command and on a timer
    """
    def __init__(
        self,
        state: Optional[ParkState] = None,
        progress: Optional[MilestoneProgress] = None,
        *,
        clock: Callable[[], float] = time.time,
        save_file: Optional[Path] = None,
        autosave: bool = True,
    ):
        self.clock = clock
        self.save_file = save_file
        self.autosave = autosave
        self.state: ParkState = state or new_park_state(clock())
        self.progress: MilestoneProgress = progress or MilestoneProgress()
        self._ticking = False

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def save(self) -> bool:
        """Write a snapshot; failures are logged, never raised."""
        self.state = _with_save_time(self.state, self.clock())
        try:
            save_state(self.state, self.progress, file_path=self.save_file)
        except GameSaveError as e:
            logger.error("Failed to save park state: %s", e)
            return False
        logger.debug("Park saved")
        return True

    def _schedule_save(self) -> None:
        if self.autosave:
            self.save()

    def load(self) -> bool:
        """Replace the in-memory park with the saved one, if any."""
        try:
            loaded = load_state(now=self.clock(), file_path=self.save_file)
        except GameLoadError as e:
            logger.warning("Failed to load saved state: %s. Starting fresh.", e)
            return False
        if loaded is None:
            logger.info("No saved park found; starting fresh.")
            return False
        self.state, self.progress = loaded
        logger.info("Loaded park with %d buildings", len(self.state.slots))
        return True

    def begin(self) -> OfflineResult:
        """Load the saved park and catch up on the time spent offline."""
        self.load()
        return self.reconcile_offline(self.clock())

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------
    def compute_stats(self) -> ParkStats:
        return calculate_park_stats(
            self.state.slots,
            self.state.unlocked_slots,
            self.state.ticket_price,
            self.state.guests,
        )

    def step(self, elapsed: float) -> TickOutcome:
        """Advance the park by ``elapsed`` seconds of real time."""
        self._ticking = True
        result = step(self.state, elapsed)
        self.state = result.state

        if result.bankrupt:
            logger.warning("Game over: the park ran out of money")
            self._schedule_save()
            return TickOutcome(result=result)
        if self.state.is_game_over or elapsed <= 0:
            return TickOutcome(result=result)

        self.progress, unlocked = milestones.evaluate(
            self.progress, self.state.guests, self.clock()
        )
        if unlocked:
            self.state = milestones.apply_rewards(self.state, unlocked)
            self._schedule_save()
        return TickOutcome(result=result, milestones_unlocked=unlocked)

    def reconcile_offline(self, now: float) -> OfflineResult:
        """Apply offline earnings; must run before real-time stepping starts."""
        if self._ticking:
            logger.warning("Offline reconciliation requested after ticking started")
        result = reconcile(self.state, self.progress, now)
        self.state = result.state
        self.progress = result.progress
        if result.offline_seconds > 0:
            logger.info(
                "Welcome back after %s: %s earned",
                format_duration(result.offline_seconds),
                format_money(result.earnings_delta),
            )
            self._schedule_save()
        return result

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def _commit(self, result: CommandResult) -> bool:
        if result.ok:
            self.state = result.state
            self._schedule_save()
        else:
            logger.info("Command rejected: %s", result.reason)
        return result.ok

    def build(self, slot_index: int, building_id: str) -> bool:
        return self._commit(operations.build(self.state, slot_index, building_id, self.clock()))

    def upgrade(self, slot_id: str) -> bool:
        return self._commit(operations.upgrade(self.state, slot_id))

    def demolish(self, slot_id: str) -> bool:
        return self._commit(operations.demolish(self.state, slot_id))

    def unlock_next_slot(self) -> bool:
        return self._commit(operations.unlock_next_slot(self.state))

    def buy_perk(self, perk_id: str) -> bool:
        return self._commit(operations.buy_perk(self.state, perk_id))

    def set_ticket_price(self, price: float) -> bool:
        return self._commit(operations.set_ticket_price(self.state, price))

    def acknowledge_milestones(self) -> List[str]:
        """Return and clear the milestones waiting to be shown."""
        pending = list(self.progress.pending_unlocks)
        self.progress = milestones.clear_pending(self.progress)
        return pending

    def reset_all(self) -> None:
        """Throw the park away and start over."""
        try:
            clear_save(file_path=self.save_file)
        except GameSaveError as e:
            logger.error("Failed to clear save: %s", e)
        self.state = new_park_state(self.clock())
        self.progress = MilestoneProgress()
        self._ticking = False
        logger.info("Park reset")
        self._schedule_save()

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------
    def attach(
        self,
        scheduler: Scheduler,
        tick_seconds: float = settings.TICK_SECONDS,
        save_seconds: float = settings.AUTO_SAVE_SECONDS,
    ) -> None:
        """Register the real-time tick and the auto-save with ``scheduler``."""
        scheduler.add_task("tick", tick_seconds, self.step)
        if self.autosave:
            scheduler.add_task("autosave", save_seconds, lambda _elapsed: self.save())

    def summary(self) -> str:
        stats = self.compute_stats()
        return (
            f"{format_money(self.state.money)} "
            f"({format_money_per_sec(stats.net_income)}) | "
            f"guests {format_number(stats.current_guests)}/{format_number(stats.max_guests)} | "
            f"satisfaction {stats.overall_satisfaction:.0%}"
        )


def _with_save_time(state: ParkState, now: float) -> ParkState:
    return dataclasses.replace(state, last_save_time=now)


# --------------------------------------------------------------------
# Module-Level “main()” Function with CLI Support
# --------------------------------------------------------------------
def main() -> int:
    """
    Run the park in real time.
    Supports options:
      --save-file    : path of the save file
      --no-save      : never write to disk (dry-run mode)
      --ticks        : stop after this many ticks (0 runs until interrupted)
      --tick-seconds : real seconds per tick
    Returns exit code 0 on success.
    """
    parser = argparse.ArgumentParser(description="Run the idle park simulation.")
    parser.add_argument(
        "--save-file", type=str, default="save.json",
        help="Path of the save file (default: save.json)"
    )
    parser.add_argument(
        "--no-save", action="store_true",
        help="Run without writing back to disk (dry-run mode)"
    )
    parser.add_argument(
        "--ticks", type=int, default=0,
        help="Number of ticks to run before exiting (default: run until Ctrl+C)"
    )
    parser.add_argument(
        "--tick-seconds", type=float, default=settings.TICK_SECONDS,
        help="Seconds per simulation tick"
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level"
    )
    args = parser.parse_args()

    # Set up logging as early as possible
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    park = Park(save_file=Path(args.save_file), autosave=not args.no_save)
    park.begin()

    scheduler = Scheduler()
    park.attach(scheduler, tick_seconds=args.tick_seconds)

    ticks = 0

    def finished() -> bool:
        return park.state.is_game_over or (args.ticks > 0 and ticks >= args.ticks)

    def count_tick(_elapsed: float) -> None:
        nonlocal ticks
        ticks += 1
        if ticks % max(1, int(round(1 / args.tick_seconds))) == 0:
            logger.info("%s", park.summary())

    scheduler.add_task("status", args.tick_seconds, count_tick)

    try:
        scheduler.run(until=finished)
    except KeyboardInterrupt:
        logger.info("Stopping park...")
    finally:
        if not args.no_save:
            park.save()

    return 0


if __name__ == "__main__":
    import sys
    sys.exit(main())
