import argparse
import logging
import shlex
from pathlib import Path
from typing import List

from park.buildings import available_buildings
from park.formatters import format_duration, format_money
from park.game import Park
from park.guest_feed import contextual_message
from park.milestones import get_milestone
from park.operations import next_slot_cost, upgrade_cost
from park.perks import PERKS

HELP = """Commands:
  stats                     show park figures
  slots                     list placed buildings
  catalog                   list buildings you can place
  build <slot> <building>   place a building
  upgrade <slot-id>         raise a building's level
  demolish <slot-id>        remove a building for a partial refund
  unlock                    unlock the next slot
  perks / perk <perk-id>    list or buy perks
  price <amount>            set the ticket price
  wait <seconds>            let time pass
  reset                     start the park over
  quit                      save and exit"""


def show_stats(park: Park) -> None:
    stats = park.compute_stats()
    print(park.summary())
    print(f"  reputation {stats.reputation:.1f}, demand {stats.demand_multiplier:.0%}, "
          f"target guests {stats.target_guests:.1f}")
    print(f"  rides {stats.entertainment_satisfaction:.0%}, food {stats.hunger_satisfaction:.0%}, "
          f"comfort {stats.comfort_satisfaction:.0%}, safety {stats.safety_satisfaction:.0%}")
    print(f"  tickets {format_money(stats.ticket_income)}/s, shops {format_money(stats.shop_income)}/s, "
          f"upkeep {format_money(stats.total_maintenance)}/s")
    message = contextual_message(stats, park.state.ticket_price)
    if message:
        print(f"  {message.emoji} {message.name}: {message.text}")


def show_slots(park: Park) -> None:
    for index in range(park.state.unlocked_slots):
        slot = park.state.slot_at(index)
        if slot is None:
            print(f"  [{index}] empty")
            continue
        cost = upgrade_cost(slot)
        print(f"  [{index}] {slot.building_id} L{slot.level} id={slot.id[:8]} "
              f"upgrade {format_money(cost) if cost is not None else '-'}")
    cost = next_slot_cost(park.state)
    if cost is not None:
        print(f"  next slot: {format_money(cost)}")


def resolve_slot_id(park: Park, prefix: str) -> str:
    for slot in park.state.slots:
        if slot.id.startswith(prefix):
            return slot.id
    return prefix


def announce_milestones(park: Park) -> None:
    for milestone_id in park.acknowledge_milestones():
        milestone = get_milestone(milestone_id)
        if milestone:
            print(f"{milestone.icon} Milestone unlocked: {milestone.name}!")


def handle(park: Park, words: List[str]) -> bool:
    """Run one command; return False to quit."""
    cmd, args = words[0], words[1:]
    if cmd in ("quit", "exit"):
        return False
    if cmd == "help":
        print(HELP)
    elif cmd == "stats":
        show_stats(park)
    elif cmd == "slots":
        show_slots(park)
    elif cmd == "catalog":
        for b in available_buildings(park.state.perks):
            print(f"  {b.icon} {b.id:15} {b.category:15} {format_money(b.base_cost)}")
    elif cmd == "build" and len(args) == 2:
        print("Built." if park.build(int(args[0]), args[1]) else "Cannot build there.")
    elif cmd == "upgrade" and args:
        print("Upgraded." if park.upgrade(resolve_slot_id(park, args[0])) else "Cannot upgrade.")
    elif cmd == "demolish" and args:
        print("Demolished." if park.demolish(resolve_slot_id(park, args[0])) else "No such slot.")
    elif cmd == "unlock":
        print("Slot unlocked." if park.unlock_next_slot() else "Cannot unlock a slot.")
    elif cmd == "perks":
        for p in PERKS:
            owned = " (owned)" if p.id in park.state.perks else ""
            print(f"  {p.icon} {p.id:12} {p.name} {format_money(p.cost)}{owned}")
    elif cmd == "perk" and args:
        print("Perk bought." if park.buy_perk(args[0]) else "Cannot buy that perk.")
    elif cmd == "price" and args:
        park.set_ticket_price(float(args[0]))
        print(f"Ticket price is now {format_money(park.state.ticket_price)}.")
    elif cmd == "wait" and args:
        remaining = float(args[0])
        while remaining > 0 and not park.state.is_game_over:
            chunk = min(1.0, remaining)
            park.step(chunk)
            remaining -= chunk
        announce_milestones(park)
        print(park.summary())
    elif cmd == "reset":
        park.reset_all()
        print("Park reset.")
    else:
        print("Unknown command. Type 'help'.")
    if park.state.is_game_over:
        print("GAME OVER: the park ran out of money. Type 'reset' to start over.")
    return True


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run the idle park from a command prompt."
    )
    parser.add_argument(
        "--save-file",
        default="save.json",
        help="Path of the save file",
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Exit without saving the park state",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.WARNING)

    park = Park(save_file=Path(args.save_file), autosave=not args.no_save)
    offline = park.begin()
    if offline.offline_seconds > 0:
        print(f"You were away for {format_duration(offline.offline_seconds)} "
              f"and earned {format_money(offline.earnings_delta)}.")
        announce_milestones(park)
    print(HELP)

    try:
        while True:
            try:
                line = input("> ")
            except EOFError:
                break
            words = shlex.split(line)
            if not words:
                continue
            try:
                if not handle(park, words):
                    break
            except ValueError as e:
                print(f"Bad argument: {e}")
    except KeyboardInterrupt:
        print("\nStopping park...")
    finally:
        if not args.no_save:
            park.save()
        else:
            print("Skipping save (--no-save)")


if __name__ == "__main__":
    main()
