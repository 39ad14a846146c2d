"""Centralised configuration constants for Coin Factory."""
from __future__ import annotations

from pathlib import Path

# ---------------------------------------------------------------------------
# Grid / world
# ---------------------------------------------------------------------------
TILE_SIZE: int = 48
CHUNK_SIZE: int = 16
SAFE_ZONE_RADIUS: int = 10          # no resources where |x| < r and |y| < r

# ---------------------------------------------------------------------------
# File paths
# ---------------------------------------------------------------------------
SAVE_FILE: Path = Path("coin_factory_save.json")
CRAFTING_FILE: Path = Path("data/crafting.json")

# ---------------------------------------------------------------------------
# Building kind constants
# ---------------------------------------------------------------------------
CONVEYOR: str = "conveyor"
FACTORY: str = "factory"
UPGRADER: str = "upgrader"
COLLECTOR: str = "collector"
GENERATOR: str = "generator"

BUILDING_KINDS: tuple[str, ...] = (CONVEYOR, FACTORY, UPGRADER, COLLECTOR, GENERATOR)

# Buildings that consume an inventory unit when placed and refund it on removal.
INVENTORY_BUILDINGS: tuple[str, ...] = (FACTORY, UPGRADER, GENERATOR)

# Buildings that carry items one cell along their direction each tick.
MOVER_KINDS: tuple[str, ...] = (CONVEYOR, UPGRADER)

# Buildings a factory may spawn onto.
FACTORY_OUTPUT_KINDS: tuple[str, ...] = (CONVEYOR, COLLECTOR)

# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------
IRON: str = "iron"
COPPER: str = "copper"

RESOURCE_COLORS: dict[str, str] = {
    IRON: "#7f8c8d",
    COPPER: "#e67e22",
}

IRON_SPAWN_CHANCE: float = 0.03     # tested first for every cell outside the safe zone
COPPER_SPAWN_CHANCE: float = 0.02   # tested only when the iron draw fails

# ---------------------------------------------------------------------------
# Directional movement vectors (direction index -> (dx, dy))
# ---------------------------------------------------------------------------
DIRS: dict[int, tuple[int, int]] = {
    0: (0, -1),   # up
    1: (1, 0),    # right
    2: (0, 1),    # down
    3: (-1, 0),   # left
}

# Order in which a factory scans its neighbours for an output cell.
FACTORY_NEIGHBOR_OFFSETS: tuple[tuple[int, int], ...] = (
    (0, -1),   # up
    (0, 1),    # down
    (1, 0),    # right
    (-1, 0),   # left
)

# ---------------------------------------------------------------------------
# Simulation tuning
# ---------------------------------------------------------------------------
TICK_INTERVAL_MS: int = 1000        # wall-clock milliseconds between ticks
FACTORY_COOLDOWN: int = 5           # ticks between spawns once an output exists
SPAWNED_ITEM_VALUE: int = 1
PLAYER_SPEED: float = 5.0           # pixels per frame at full joystick deflection
EVENT_LOG_LIMIT: int = 12

# ---------------------------------------------------------------------------
# Economy
# ---------------------------------------------------------------------------
STARTING_SCORE: int = 0
UPGRADER_POWER_START: int = 1
UPGRADER_POWER_COST_START: int = 100
UPGRADER_POWER_COST_GROWTH: float = 1.5
