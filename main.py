from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from config import COLLECTOR, CONVEYOR, FACTORY, SAVE_FILE, UPGRADER
from coinfactory import (
    SimulationState,
    craft,
    generate_visible_chunks,
    place_building,
    rotate_building,
    run_tick,
)

logger = logging.getLogger("coinfactory.cli")

DEMO_VIEW_CELLS = 24


def build_demo_layout(sim: SimulationState) -> None:
    """Lay out a factory feeding an upgrader line into a collector.

    factory (0,0) -> conveyors (1..3,0) -> upgrader (4,0) -> conveyor (5,0) -> collector (6,0)
    """
    sim.inventory.iron += 15
    sim.inventory.copper += 7
    craft(sim, FACTORY)
    craft(sim, UPGRADER)

    place_building(sim, 0, 0, FACTORY)
    for x in range(1, 4):
        place_building(sim, x, 0, CONVEYOR)
        rotate_building(sim, x, 0)  # up -> right
    place_building(sim, 4, 0, UPGRADER)
    rotate_building(sim, 4, 0)
    place_building(sim, 5, 0, CONVEYOR)
    rotate_building(sim, 5, 0)
    place_building(sim, 6, 0, COLLECTOR)


def run_headless(ticks: int, seed: int | None, load_save: bool, save_path: Path | None) -> SimulationState:
    source = save_path or SAVE_FILE
    if load_save and source.exists():
        sim = SimulationState.load(source, seed=seed)
    else:
        sim = SimulationState(seed=seed)
        build_demo_layout(sim)

    half = DEMO_VIEW_CELLS // 2
    generate_visible_chunks(sim.world, -half, -half, half, half, sim.rng)

    for _ in range(ticks):
        run_tick(sim)

    if save_path is not None:
        sim.save(save_path)
    print(
        f"headless_done ticks={sim.tick_count} items={len(sim.items)} "
        f"score={sim.score} power={sim.upgrader_power} "
        f"buildings={len(sim.buildings)} resources={len(sim.resources)} "
        f"chunks={len(sim.world.generated_chunks)}"
    )
    return sim


def main() -> None:
    parser = argparse.ArgumentParser(description="Coin Factory headless simulation")
    parser.add_argument("--ticks", type=int, default=60, help="ticks to run")
    parser.add_argument("--seed", type=int, default=None, help="world generation seed")
    parser.add_argument("--load", action="store_true", help="load the save file before running")
    parser.add_argument("--save", type=Path, default=None, help="write the final state to this file")
    parser.add_argument("--log-level", default="WARNING", help="logging level (DEBUG, INFO, ...)")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.ticks < 0:
        print("Startup error: --ticks must be >= 0", file=sys.stderr)
        raise SystemExit(1)

    try:
        run_headless(args.ticks, args.seed, args.load, args.save)
    except OSError as exc:
        logger.error("Headless run failed: %s", exc)
        print(f"Startup error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
