"""Tick engine: advances a :class:`SimulationState` by one discrete step.

The engine is headless and deterministic for a given state. All tuning
constants are imported from ``config``.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from config import (
    COLLECTOR,
    FACTORY,
    FACTORY_COOLDOWN,
    FACTORY_NEIGHBOR_OFFSETS,
    FACTORY_OUTPUT_KINDS,
    GENERATOR,
    MOVER_KINDS,
    SPAWNED_ITEM_VALUE,
    UPGRADER,
)
from coinfactory.entities import Coord, Item
from coinfactory.state import SimulationState

logger = logging.getLogger(__name__)


def merge_at(state: SimulationState, x: int, y: int) -> Optional[Item]:
    """Fold every item on ``(x, y)`` into the first one in list order.

    Returns the surviving item, or ``None`` when the cell holds no items.
    """
    on_tile = state.items_at(Coord(x, y))
    if not on_tile:
        return None
    first = on_tile[0]
    if len(on_tile) == 1:
        return first

    first.value = sum(item.value for item in on_tile)
    absorbed = {id(item) for item in on_tile[1:]}
    state.items = [item for item in state.items if id(item) not in absorbed]
    return first


# ------------------------------------------------------------------
# Tick phases
# ------------------------------------------------------------------


def _collect_items(state: SimulationState) -> bool:
    changed = False
    for idx in range(len(state.items) - 1, -1, -1):
        item = state.items[idx]
        building = state.world.get_building(item.pos)
        if building is not None and building.kind == COLLECTOR:
            state.score += item.value
            del state.items[idx]
            changed = True
    return changed


def _plan_moves(state: SimulationState) -> List[Tuple[Item, Coord]]:
    moves: List[Tuple[Item, Coord]] = []
    for item in state.items:
        building = state.world.get_building(item.pos)
        if building is not None and building.kind in MOVER_KINDS:
            if building.kind == UPGRADER and not item.processed_this_tick:
                item.value += state.upgrader_power
                item.processed_this_tick = True
            moves.append((item, item.pos.step(building.direction)))
        item.processed_this_tick = False
        item.merged_this_tick = False
    return moves


def _apply_moves(state: SimulationState, moves: List[Tuple[Item, Coord]]) -> None:
    for item, target in moves:
        item.x, item.y = target.x, target.y
        merge_at(state, target.x, target.y)


def _find_factory_output(state: SimulationState, cell: Coord) -> Optional[Coord]:
    for dx, dy in FACTORY_NEIGHBOR_OFFSETS:
        neighbor = cell.offset(dx, dy)
        building = state.world.get_building(neighbor)
        if building is not None and building.kind in FACTORY_OUTPUT_KINDS:
            return neighbor
    return None


def _run_factories(state: SimulationState) -> None:
    # Relative order between factories follows grid insertion order and is
    # not part of the engine's contract.
    for cell, factory in state.world.buildings_of(FACTORY):
        factory.cooldown -= 1
        if factory.cooldown > 0:
            continue
        output = _find_factory_output(state, cell)
        if output is None:
            factory.cooldown = 0
            logger.debug("Factory at %s stalled: no adjacent conveyor or collector", cell.key)
            continue
        factory.cooldown = FACTORY_COOLDOWN
        state.spawn_item(output, SPAWNED_ITEM_VALUE)
        merge_at(state, output.x, output.y)


def _run_generators(state: SimulationState) -> bool:
    changed = False
    for _cell, generator in state.world.buildings_of(GENERATOR):
        state.inventory.add(generator.resource_type, 1)
        changed = True
    return changed


# ------------------------------------------------------------------
# Main tick
# ------------------------------------------------------------------


def run_tick(state: SimulationState) -> bool:
    """Advance the world by one tick.

    Phases run in a fixed order and later phases see the results of earlier
    ones: collection, movement with upgrades, applying moves (merging at
    each destination), factory production, generator production.

    Returns ``True`` when score or inventory changed, a hint for callers
    that refresh displays or persist after a tick.
    """
    changed = _collect_items(state)
    moves = _plan_moves(state)
    _apply_moves(state, moves)
    _run_factories(state)
    if _run_generators(state):
        changed = True
    state.tick_count += 1
    return changed
