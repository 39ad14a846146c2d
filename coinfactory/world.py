"""World grid storage and lazy procedural chunk generation."""
from __future__ import annotations

import logging
import math
import random
from typing import Dict, Iterator, Optional, Set, Tuple

from config import (
    CHUNK_SIZE,
    COPPER,
    COPPER_SPAWN_CHANCE,
    IRON,
    IRON_SPAWN_CHANCE,
    RESOURCE_COLORS,
    SAFE_ZONE_RADIUS,
    TILE_SIZE,
)
from coinfactory.entities import Building, Coord, ResourceNode

logger = logging.getLogger(__name__)

ChunkId = Tuple[int, int]


class WorldGrid:
    """Sparse keyed store of buildings, resource nodes and generated chunks.

    The grid has no knowledge of inventories or scores; callers that need
    those side effects go through :mod:`coinfactory.actions`.
    """

    def __init__(self) -> None:
        self.buildings: Dict[Coord, Building] = {}
        self.resources: Dict[Coord, ResourceNode] = {}
        self.generated_chunks: Set[ChunkId] = set()

    # ------------------------------------------------------------------
    # Buildings
    # ------------------------------------------------------------------

    def get_building(self, cell: Coord) -> Optional[Building]:
        return self.buildings.get(cell)

    def set_building(self, cell: Coord, building: Building) -> None:
        self.buildings[cell] = building

    def delete_building(self, cell: Coord) -> Optional[Building]:
        return self.buildings.pop(cell, None)

    def buildings_of(self, kind: str) -> Iterator[Tuple[Coord, Building]]:
        """Yield ``(cell, building)`` pairs of one kind in insertion order."""
        for cell, building in list(self.buildings.items()):
            if building.kind == kind:
                yield cell, building

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def get_resource(self, cell: Coord) -> Optional[ResourceNode]:
        return self.resources.get(cell)

    def set_resource(self, cell: Coord, node: ResourceNode) -> None:
        self.resources[cell] = node

    def delete_resource(self, cell: Coord) -> Optional[ResourceNode]:
        return self.resources.pop(cell, None)

    def is_chunk_generated(self, chunk_x: int, chunk_y: int) -> bool:
        return (chunk_x, chunk_y) in self.generated_chunks


# ---------------------------------------------------------------------------
# Chunk generation
# ---------------------------------------------------------------------------


def chunk_of(x: int, y: int) -> ChunkId:
    return x // CHUNK_SIZE, y // CHUNK_SIZE


def in_safe_zone(x: int, y: int) -> bool:
    return abs(x) < SAFE_ZONE_RADIUS and abs(y) < SAFE_ZONE_RADIUS


def generate_chunk(world: WorldGrid, chunk_x: int, chunk_y: int, rng: random.Random) -> bool:
    """Populate one chunk with resource nodes the first time it is seen.

    Returns ``False`` without touching the world when the chunk has already
    been generated.
    """
    chunk_id = (chunk_x, chunk_y)
    if chunk_id in world.generated_chunks:
        return False
    world.generated_chunks.add(chunk_id)

    start_x = chunk_x * CHUNK_SIZE
    start_y = chunk_y * CHUNK_SIZE
    placed = 0
    for dy in range(CHUNK_SIZE):
        for dx in range(CHUNK_SIZE):
            world_x = start_x + dx
            world_y = start_y + dy
            if in_safe_zone(world_x, world_y):
                continue

            if rng.random() < IRON_SPAWN_CHANCE:
                resource_type = IRON
            elif rng.random() < COPPER_SPAWN_CHANCE:
                resource_type = COPPER
            else:
                continue

            cell = Coord(world_x, world_y)
            if world.get_resource(cell) is None:
                world.set_resource(cell, ResourceNode(resource_type, RESOURCE_COLORS[resource_type]))
                placed += 1

    logger.debug("Generated chunk %s with %d resource nodes", chunk_id, placed)
    return True


def visible_cell_bounds(camera_x: float, camera_y: float, width: float, height: float) -> Tuple[int, int, int, int]:
    """Convert a pixel viewport into a half-open cell rectangle.

    One extra row and column is included so partially visible cells at the
    far edges are covered.
    """
    start_x = math.floor(camera_x / TILE_SIZE)
    start_y = math.floor(camera_y / TILE_SIZE)
    end_x = start_x + math.ceil(width / TILE_SIZE) + 1
    end_y = start_y + math.ceil(height / TILE_SIZE) + 1
    return start_x, start_y, end_x, end_y


def generate_visible_chunks(
    world: WorldGrid,
    start_x: int,
    start_y: int,
    end_x: int,
    end_y: int,
    rng: random.Random,
) -> int:
    """Generate every chunk touched by cells ``[start, end)``.

    Returns the number of chunks generated by this call.
    """
    if end_x <= start_x or end_y <= start_y:
        return 0
    first_cx, first_cy = chunk_of(start_x, start_y)
    last_cx, last_cy = chunk_of(end_x - 1, end_y - 1)
    generated = 0
    for chunk_y in range(first_cy, last_cy + 1):
        for chunk_x in range(first_cx, last_cx + 1):
            if generate_chunk(world, chunk_x, chunk_y, rng):
                generated += 1
    return generated
