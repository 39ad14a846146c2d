"""SimulationState: the single owned object holding all game state.

The tick engine and action layer take a state explicitly; nothing in the
package keeps module-level game state. The class is serialisable to/from
the flattened JSON-compatible snapshot a persistence layer stores.
"""
from __future__ import annotations

import json
import logging
import math
import random
from pathlib import Path
from typing import Any, Dict, List, Optional

from config import (
    BUILDING_KINDS,
    CONVEYOR,
    EVENT_LOG_LIMIT,
    FACTORY,
    GENERATOR,
    RESOURCE_COLORS,
    SAVE_FILE,
    STARTING_SCORE,
    UPGRADER,
    UPGRADER_POWER_COST_START,
    UPGRADER_POWER_START,
)
from coinfactory.entities import (
    BUILDING_TYPES,
    Building,
    Coord,
    Inventory,
    Item,
    Player,
    ResourceNode,
)
from coinfactory.world import WorldGrid

logger = logging.getLogger(__name__)

INVENTORY_FIELDS = ("iron", "copper", "factory", "upgrader", "generator")
CORRUPT_SAVE_MESSAGE = "Save data was corrupt, starting a new game"


class SnapshotError(ValueError):
    """Raised while parsing a snapshot that cannot be restored as a whole."""


class SimulationState:
    """Grid, items, player and economy for one game.

    ``seed`` feeds the chunk generator's RNG. ``None`` keeps generation
    unseeded for normal play; tests pass a fixed seed.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.rng = random.Random(seed)
        self.reset()

    def reset(self) -> None:
        """Restore new-game defaults in place. The RNG is kept."""
        self.world = WorldGrid()
        self.items: List[Item] = []
        self.player = Player()
        self.score: int = STARTING_SCORE
        self.upgrader_power: int = UPGRADER_POWER_START
        self.upgrader_power_cost: int = UPGRADER_POWER_COST_START
        self.tick_count: int = 0
        self.next_item_id: int = 1
        self.message: str = ""
        self.event_log: List[str] = []

    # ------------------------------------------------------------------
    # Convenience accessors
    # ------------------------------------------------------------------

    @property
    def inventory(self) -> Inventory:
        return self.player.inventory

    @property
    def buildings(self) -> Dict[Coord, Building]:
        return self.world.buildings

    @property
    def resources(self) -> Dict[Coord, ResourceNode]:
        return self.world.resources

    def items_at(self, cell: Coord) -> List[Item]:
        return [item for item in self.items if item.x == cell.x and item.y == cell.y]

    def spawn_item(self, cell: Coord, value: int) -> Item:
        item = Item(cell.x, cell.y, value=value, id=self.next_item_id)
        self.next_item_id += 1
        self.items.append(item)
        return item

    def log_event(self, message: str) -> None:
        """Record a player-facing advisory message."""
        self.message = message
        self.event_log.append(message)
        self.event_log = self.event_log[-EVENT_LOG_LIMIT:]

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "upgraderPower": self.upgrader_power,
            "upgraderPowerCost": self.upgrader_power_cost,
            "player": {
                "x": self.player.x,
                "y": self.player.y,
                "inventory": {name: self.inventory.count(name) for name in INVENTORY_FIELDS},
            },
            "grid": [_building_to_dict(cell, building) for cell, building in self.world.buildings.items()],
            "resources": [
                {"key": cell.key, "type": node.type, "color": node.color}
                for cell, node in self.world.resources.items()
            ],
            "items": [
                {
                    "x": item.x,
                    "y": item.y,
                    "value": item.value,
                    "id": item.id,
                    "processedThisTick": item.processed_this_tick,
                    "mergedThisTick": item.merged_this_tick,
                }
                for item in self.items
            ],
            "generatedChunks": [f"{cx},{cy}" for cx, cy in sorted(self.world.generated_chunks)],
            "tickCount": self.tick_count,
            "nextItemId": self.next_item_id,
        }

    @classmethod
    def from_dict(cls, data: Any, seed: Optional[int] = None) -> "SimulationState":
        """Restore a snapshot, or return a fresh game if any part is malformed."""
        state = cls(seed=seed)
        try:
            _restore(state, data)
        except SnapshotError as exc:
            logger.warning("Rejected snapshot: %s", exc)
            fresh = cls(seed=seed)
            fresh.log_event(CORRUPT_SAVE_MESSAGE)
            return fresh
        return state

    # ------------------------------------------------------------------
    # Save / Load helpers
    # ------------------------------------------------------------------

    def save(self, path: Path = SAVE_FILE) -> None:
        path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        logger.info("Saved game to %s", path)

    @classmethod
    def load(cls, path: Path = SAVE_FILE, seed: Optional[int] = None) -> "SimulationState":
        if not path.exists():
            logger.info("No save at %s, starting a new game", path)
            return cls(seed=seed)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (ValueError, OSError) as exc:
            logger.warning("Could not read save %s: %s", path, exc)
            fresh = cls(seed=seed)
            fresh.log_event(CORRUPT_SAVE_MESSAGE)
            return fresh
        logger.info("Loaded game from %s", path)
        return cls.from_dict(data, seed=seed)


# ---------------------------------------------------------------------------
# Snapshot helpers
# ---------------------------------------------------------------------------


def _building_to_dict(cell: Coord, building: Building) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"key": cell.key, "type": building.kind}
    if building.kind in (CONVEYOR, UPGRADER):
        entry["direction"] = building.direction
    elif building.kind == FACTORY:
        entry["cooldown"] = building.cooldown
    elif building.kind == GENERATOR:
        entry["resourceType"] = building.resource_type
    return entry


def _require_int(value: Any, name: str, *, minimum: Optional[int] = None, maximum: Optional[int] = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise SnapshotError(f"{name} must be an integer, got {value!r}")
    if minimum is not None and value < minimum:
        raise SnapshotError(f"{name} must be >= {minimum}, got {value}")
    if maximum is not None and value > maximum:
        raise SnapshotError(f"{name} must be <= {maximum}, got {value}")
    return value


def _require_number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SnapshotError(f"{name} must be a finite number, got {value!r}")
    try:
        number = float(value)
    except OverflowError as exc:
        raise SnapshotError(f"{name} is out of range") from exc
    if not math.isfinite(number):
        raise SnapshotError(f"{name} must be a finite number, got {value!r}")
    return number


def _require_list(data: Dict[str, Any], name: str) -> List[Any]:
    value = data.get(name, [])
    if not isinstance(value, list):
        raise SnapshotError(f"{name} must be a list")
    return value


def _require_dict(value: Any, name: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise SnapshotError(f"{name} must be an object")
    return value


def _parse_key(value: Any, name: str) -> Coord:
    if not isinstance(value, str):
        raise SnapshotError(f"{name} key must be a string")
    try:
        return Coord.parse(value)
    except ValueError as exc:
        raise SnapshotError(f"{name} key {value!r} is not 'x,y'") from exc


def _parse_building(entry: Any) -> tuple[Coord, Building]:
    entry = _require_dict(entry, "grid entry")
    cell = _parse_key(entry.get("key"), "grid")
    kind = entry.get("type")
    if kind not in BUILDING_KINDS:
        raise SnapshotError(f"unknown building type {kind!r} at {cell.key}")

    building_type = BUILDING_TYPES[kind]
    if kind in (CONVEYOR, UPGRADER):
        direction = _require_int(entry.get("direction", 0), "direction", minimum=0, maximum=3)
        return cell, building_type(direction=direction)
    if kind == FACTORY:
        cooldown = _require_int(entry.get("cooldown", 0), "cooldown", minimum=0)
        return cell, building_type(cooldown=cooldown)
    if kind == GENERATOR:
        resource_type = entry.get("resourceType")
        if resource_type not in RESOURCE_COLORS:
            raise SnapshotError(f"generator at {cell.key} has unknown resource {resource_type!r}")
        return cell, building_type(resource_type=resource_type)
    return cell, building_type()


def _parse_resource(entry: Any) -> tuple[Coord, ResourceNode]:
    entry = _require_dict(entry, "resource entry")
    cell = _parse_key(entry.get("key"), "resource")
    resource_type = entry.get("type")
    if resource_type not in RESOURCE_COLORS:
        raise SnapshotError(f"unknown resource type {resource_type!r} at {cell.key}")
    color = entry.get("color", RESOURCE_COLORS[resource_type])
    if not isinstance(color, str):
        raise SnapshotError(f"resource color at {cell.key} must be a string")
    return cell, ResourceNode(resource_type, color)


def _parse_item(entry: Any) -> Item:
    entry = _require_dict(entry, "item")
    processed = entry.get("processedThisTick", False)
    merged = entry.get("mergedThisTick", False)
    if not isinstance(processed, bool) or not isinstance(merged, bool):
        raise SnapshotError("item tick flags must be booleans")
    return Item(
        x=_require_int(entry.get("x"), "item x"),
        y=_require_int(entry.get("y"), "item y"),
        value=_require_int(entry.get("value"), "item value", minimum=1),
        id=_require_int(entry.get("id", 0), "item id", minimum=0),
        processed_this_tick=processed,
        merged_this_tick=merged,
    )


def _parse_chunk(value: Any) -> tuple[int, int]:
    cell = _parse_key(value, "chunk")
    return cell.x, cell.y


def _restore(state: SimulationState, data: Any) -> None:
    data = _require_dict(data, "snapshot")

    score = _require_int(data.get("score", STARTING_SCORE), "score", minimum=0)
    power = _require_int(data.get("upgraderPower", UPGRADER_POWER_START), "upgraderPower", minimum=1)
    cost = _require_int(data.get("upgraderPowerCost", UPGRADER_POWER_COST_START), "upgraderPowerCost", minimum=1)
    tick_count = _require_int(data.get("tickCount", 0), "tickCount", minimum=0)

    raw_player = _require_dict(data.get("player", {}), "player")
    raw_inventory = _require_dict(raw_player.get("inventory", {}), "inventory")
    player = Player(
        x=_require_number(raw_player.get("x", 0.0), "player x"),
        y=_require_number(raw_player.get("y", 0.0), "player y"),
        inventory=Inventory(
            **{name: _require_int(raw_inventory.get(name, 0), name, minimum=0) for name in INVENTORY_FIELDS}
        ),
    )

    world = WorldGrid()
    for entry in _require_list(data, "grid"):
        cell, building = _parse_building(entry)
        if cell in world.buildings:
            raise SnapshotError(f"two buildings share cell {cell.key}")
        world.set_building(cell, building)
    for entry in _require_list(data, "resources"):
        cell, node = _parse_resource(entry)
        if cell in world.resources:
            raise SnapshotError(f"two resources share cell {cell.key}")
        world.set_resource(cell, node)
    for cell, building in world.buildings.items():
        # Only generators sit on resource nodes.
        if building.kind != GENERATOR and cell in world.resources:
            raise SnapshotError(f"{building.kind} at {cell.key} sits on a resource node")
    world.generated_chunks = {_parse_chunk(value) for value in _require_list(data, "generatedChunks")}

    items = [_parse_item(entry) for entry in _require_list(data, "items")]
    next_item_id = max([item.id for item in items], default=0) + 1
    for item in items:
        # Older saves have no integer ids; issue fresh ones.
        if item.id == 0:
            item.id = next_item_id
            next_item_id += 1
    saved_next_id = _require_int(data.get("nextItemId", next_item_id), "nextItemId", minimum=1)

    state.world = world
    state.items = items
    state.player = player
    state.score = score
    state.upgrader_power = power
    state.upgrader_power_cost = cost
    state.tick_count = tick_count
    state.next_item_id = max(saved_next_id, next_item_id)
