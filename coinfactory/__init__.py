"""Coin Factory simulation package.

Public API:
    from coinfactory import SimulationState, run_tick, place_building, ...
"""
from coinfactory.actions import (
    craft,
    mine_resource,
    move_player,
    place_building,
    player_cell,
    purchase_upgrader_power,
    remove_building,
    rotate_building,
)
from coinfactory.entities import (
    Collector,
    Conveyor,
    Coord,
    Factory,
    Generator,
    Inventory,
    Item,
    Player,
    ResourceNode,
    Upgrader,
)
from coinfactory.scheduler import TickClock
from coinfactory.simulation import merge_at, run_tick
from coinfactory.state import SimulationState, SnapshotError
from coinfactory.world import WorldGrid, chunk_of, generate_chunk, generate_visible_chunks, visible_cell_bounds

__all__ = [
    "Collector",
    "Conveyor",
    "Coord",
    "Factory",
    "Generator",
    "Inventory",
    "Item",
    "Player",
    "ResourceNode",
    "SimulationState",
    "SnapshotError",
    "TickClock",
    "Upgrader",
    "WorldGrid",
    "chunk_of",
    "craft",
    "generate_chunk",
    "generate_visible_chunks",
    "merge_at",
    "mine_resource",
    "move_player",
    "place_building",
    "player_cell",
    "purchase_upgrader_power",
    "remove_building",
    "rotate_building",
    "run_tick",
    "visible_cell_bounds",
]
