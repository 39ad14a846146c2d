"""Core dataclasses for the Coin Factory simulation."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Union

from config import COLLECTOR, CONVEYOR, DIRS, FACTORY, GENERATOR, UPGRADER


@dataclass(frozen=True)
class Coord:
    """An integer grid cell. Used directly as the key of every grid map."""

    x: int
    y: int

    @property
    def key(self) -> str:
        return f"{self.x},{self.y}"

    @classmethod
    def parse(cls, key: str) -> "Coord":
        """Parse the canonical ``"x,y"`` form written by :attr:`key`."""
        raw_x, raw_y = key.split(",")
        return cls(int(raw_x), int(raw_y))

    def step(self, direction: int) -> "Coord":
        dx, dy = DIRS[direction % 4]
        return Coord(self.x + dx, self.y + dy)

    def offset(self, dx: int, dy: int) -> "Coord":
        return Coord(self.x + dx, self.y + dy)


# ---------------------------------------------------------------------------
# Buildings
# ---------------------------------------------------------------------------


@dataclass
class Conveyor:
    """Moves the item on it one cell along ``direction`` each tick."""

    kind: ClassVar[str] = CONVEYOR
    direction: int = 0


@dataclass
class Upgrader:
    """A conveyor that also adds the current upgrader power to passing items."""

    kind: ClassVar[str] = UPGRADER
    direction: int = 0


@dataclass
class Factory:
    """Spawns a value-1 item onto an adjacent conveyor or collector.

    ``cooldown`` counts ticks until the next spawn attempt. A fresh factory
    starts at 0 so it tries to spawn on its first tick.
    """

    kind: ClassVar[str] = FACTORY
    cooldown: int = 0


@dataclass
class Collector:
    kind: ClassVar[str] = COLLECTOR


@dataclass
class Generator:
    """Adds one unit of ``resource_type`` to the inventory every tick."""

    kind: ClassVar[str] = GENERATOR
    resource_type: str = "iron"


Building = Union[Conveyor, Upgrader, Factory, Collector, Generator]

BUILDING_TYPES: dict[str, type] = {
    CONVEYOR: Conveyor,
    UPGRADER: Upgrader,
    FACTORY: Factory,
    COLLECTOR: Collector,
    GENERATOR: Generator,
}


# ---------------------------------------------------------------------------
# World contents
# ---------------------------------------------------------------------------


@dataclass
class ResourceNode:
    """A minable deposit placed by chunk generation."""

    type: str
    color: str


@dataclass
class Item:
    """A coin travelling across conveyors toward a collector.

    ``processed_this_tick`` guards against upgrading the same item twice in
    one tick. ``merged_this_tick`` is never set by the engine; it is kept
    so saved snapshots round-trip unchanged.
    """

    x: int
    y: int
    value: int = 1
    id: int = 0
    processed_this_tick: bool = False
    merged_this_tick: bool = False

    @property
    def pos(self) -> Coord:
        return Coord(self.x, self.y)


# ---------------------------------------------------------------------------
# Player
# ---------------------------------------------------------------------------


@dataclass
class Inventory:
    iron: int = 0
    copper: int = 0
    factory: int = 0
    upgrader: int = 0
    generator: int = 0

    def count(self, name: str) -> int:
        return int(getattr(self, name))

    def add(self, name: str, amount: int = 1) -> None:
        setattr(self, name, self.count(name) + amount)


@dataclass
class Player:
    """Player avatar. ``x``/``y`` are continuous pixel coordinates."""

    x: float = 0.0
    y: float = 0.0
    inventory: Inventory = field(default_factory=Inventory)
