"""Player actions: the only mutation surface besides :func:`run_tick`.

Every action validates before touching state. A rejected action returns
``False`` and records an advisory message on the state; no action raises
for a player mistake.
"""
from __future__ import annotations

import math
from typing import Dict, Mapping

from config import (
    BUILDING_KINDS,
    CONVEYOR,
    FACTORY,
    GENERATOR,
    INVENTORY_BUILDINGS,
    MOVER_KINDS,
    PLAYER_SPEED,
    TILE_SIZE,
    UPGRADER,
    UPGRADER_POWER_COST_GROWTH,
)
from crafting_catalog import CRAFTING_RECIPES
from coinfactory.entities import Building, Collector, Conveyor, Coord, Factory, Generator, Upgrader
from coinfactory.state import SimulationState
from coinfactory.world import chunk_of, generate_chunk

NO_STOCK_MESSAGES: Dict[str, str] = {
    FACTORY: "No factories in inventory!",
    UPGRADER: "No upgraders in inventory!",
    GENERATOR: "No generators in inventory!",
}


def _new_building(kind: str) -> Building:
    if kind == CONVEYOR:
        return Conveyor(direction=0)
    if kind == UPGRADER:
        return Upgrader(direction=0)
    if kind == FACTORY:
        return Factory(cooldown=0)
    return Collector()


# ------------------------------------------------------------------
# Building
# ------------------------------------------------------------------


def place_building(state: SimulationState, x: int, y: int, kind: str) -> bool:
    cell = Coord(x, y)
    if kind not in BUILDING_KINDS:
        state.log_event(f"Unknown building: {kind}")
        return False

    # The chunk is generated before the cell is checked.
    generate_chunk(state.world, *chunk_of(x, y), state.rng)
    existing = state.world.get_building(cell)
    resource = state.world.get_resource(cell)

    if kind == GENERATOR:
        if existing is not None:
            state.log_event("Cannot build here!")
            return False
        if resource is None:
            state.log_event("Must place on a resource node!")
            return False
        if state.inventory.generator <= 0:
            state.log_event(NO_STOCK_MESSAGES[GENERATOR])
            return False
        state.inventory.generator -= 1
        # The resource node stays under the generator.
        state.world.set_building(cell, Generator(resource_type=resource.type))
        return True

    if existing is not None or resource is not None:
        state.log_event("Cannot build here!")
        return False
    if kind in INVENTORY_BUILDINGS:
        if state.inventory.count(kind) <= 0:
            state.log_event(NO_STOCK_MESSAGES[kind])
            return False
        state.inventory.add(kind, -1)
    state.world.set_building(cell, _new_building(kind))
    return True


def remove_building(state: SimulationState, x: int, y: int) -> bool:
    """Remove the building at ``(x, y)``.

    Factories, upgraders and generators return to the inventory;
    conveyors and collectors are lost.
    """
    building = state.world.delete_building(Coord(x, y))
    if building is None:
        return False
    if building.kind in INVENTORY_BUILDINGS:
        state.inventory.add(building.kind, 1)
    return True


def rotate_building(state: SimulationState, x: int, y: int) -> bool:
    building = state.world.get_building(Coord(x, y))
    if building is None or building.kind not in MOVER_KINDS:
        state.log_event("Can only rotate conveyors/upgraders!")
        return False
    building.direction = (building.direction + 1) % 4
    return True


def mine_resource(state: SimulationState, x: int, y: int) -> bool:
    node = state.world.delete_resource(Coord(x, y))
    if node is None:
        state.log_event("Nothing to mine!")
        return False
    state.inventory.add(node.type, 1)
    return True


# ------------------------------------------------------------------
# Crafting / shop
# ------------------------------------------------------------------


def craft(state: SimulationState, recipe: str, recipes: Mapping[str, Mapping] = CRAFTING_RECIPES) -> bool:
    entry = recipes.get(recipe)
    if entry is None or recipe not in INVENTORY_BUILDINGS:
        state.log_event(f"Unknown recipe: {recipe}")
        return False

    iron_cost = int(entry["iron"])
    copper_cost = int(entry["copper"])
    if state.inventory.iron < iron_cost or state.inventory.copper < copper_cost:
        state.log_event(f"Need {iron_cost} Iron, {copper_cost} Copper!")
        return False

    state.inventory.iron -= iron_cost
    state.inventory.copper -= copper_cost
    state.inventory.add(recipe, 1)
    state.log_event(f"Crafted {entry['display_name']}!")
    return True


def purchase_upgrader_power(state: SimulationState) -> bool:
    if state.score < state.upgrader_power_cost:
        state.log_event("Not enough score!")
        return False
    state.score -= state.upgrader_power_cost
    state.upgrader_power += 1
    state.upgrader_power_cost = math.floor(state.upgrader_power_cost * UPGRADER_POWER_COST_GROWTH)
    state.log_event(f"Upgraders now add +{state.upgrader_power}!")
    return True


# ------------------------------------------------------------------
# Player movement
# ------------------------------------------------------------------


def move_player(state: SimulationState, joystick_x: float, joystick_y: float) -> None:
    """Move the player by a joystick vector, clamped to unit length."""
    length = math.hypot(joystick_x, joystick_y)
    if length > 1.0:
        joystick_x /= length
        joystick_y /= length
    state.player.x += joystick_x * PLAYER_SPEED
    state.player.y += joystick_y * PLAYER_SPEED


def player_cell(state: SimulationState) -> Coord:
    return Coord(math.floor(state.player.x / TILE_SIZE), math.floor(state.player.y / TILE_SIZE))
