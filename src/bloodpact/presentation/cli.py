import argparse
import random
from pathlib import Path
from typing import List, Optional

from bloodpact.application.services.turn_service import (
    DecisionMaker,
    RandomLegalDecisionMaker,
    TurnOutcome,
    WaitingDecisionMaker,
    summarize_outcome,
)
from bloodpact.bootstrap import Runtime
from bloodpact.domain.models.world import World
from bloodpact.infrastructure.world_import.arena_builder import build_demo_arena, load_world_file, write_world_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bloodpact", description="Run a headless Bloodpact simulation")
    parser.add_argument("--world", type=Path, default=None, help="JSON world file; defaults to the built-in arena")
    parser.add_argument("--turns", type=int, default=5, help="Number of rounds to simulate")
    parser.add_argument("--seed", type=int, default=None, help="Seed for dice and decision making")
    parser.add_argument("--policy", choices=("random", "wait"), default="random", help="How characters choose actions")
    parser.add_argument("--save", type=Path, default=None, help="Write the final world to this JSON file")
    parser.add_argument("--undo", action="store_true", help="Roll back the last round before saving")
    return parser


def _decision_maker(policy: str, seed: Optional[int]) -> DecisionMaker:
    if policy == "wait":
        return WaitingDecisionMaker()
    return RandomLegalDecisionMaker(random.Random(seed))


def _print_outcome(world: World, outcome: TurnOutcome, turn: int) -> None:
    summary = summarize_outcome(outcome, turn)
    actor = world.character_by_id(summary.character_id)
    name = actor.name if actor is not None else summary.character_id
    marker = "!" if summary.replaced_illegal else ""
    status = "ok" if summary.success else "failed"
    print(f"[turn {summary.turn}] {name}: {summary.action_kind}{marker} ({status}) {summary.message}")
    for event in outcome.events:
        print(f"    - {event.description}")


def run(runtime: Runtime, argv: Optional[List[str]] = None) -> World:
    args = build_parser().parse_args(argv)
    world = load_world_file(args.world) if args.world else build_demo_arena()
    if args.seed is not None:
        runtime.action_service.set_seed(args.seed)

    print(f"World {world.width}x{world.height}, {len(world.living_characters())} characters alive, turn {world.turn}.")
    runtime.simulation.run(
        world,
        _decision_maker(args.policy, args.seed),
        args.turns,
        on_outcome=lambda outcome, turn: _print_outcome(world, outcome, turn),
    )

    if args.undo:
        restored = runtime.simulation.undo_round()
        if restored is not None:
            world = restored
            print(f"Rolled back to turn {world.turn}.")

    survivors = ", ".join(f"{c.name} ({c.hp}/{c.max_hp})" for c in world.living_characters()) or "none"
    print(f"Finished at turn {world.turn}. Survivors: {survivors}")

    if args.save is not None:
        target = write_world_file(world, args.save)
        print(f"Saved world to {target}")
    return world
