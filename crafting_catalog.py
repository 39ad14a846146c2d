from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable

from config import CRAFTING_FILE, FACTORY, GENERATOR, INVENTORY_BUILDINGS, UPGRADER


@dataclass(frozen=True)
class CraftingRecipe:
    """Resource cost of crafting one unit of an inventory building."""

    key: str
    display_name: str
    iron: int
    copper: int

    def to_runtime_dict(self) -> Dict[str, str | int]:
        return {
            "display_name": self.display_name,
            "iron": self.iron,
            "copper": self.copper,
        }


DEFAULT_CRAFTING_RECIPES: Dict[str, CraftingRecipe] = {
    FACTORY: CraftingRecipe(FACTORY, "Factory", iron=5, copper=2),
    UPGRADER: CraftingRecipe(UPGRADER, "Upgrader", iron=10, copper=5),
    GENERATOR: CraftingRecipe(GENERATOR, "Generator", iron=20, copper=10),
}


def _coerce_int(value: Any, *, minimum: int | None = None) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        result = value
    elif isinstance(value, float) and value.is_integer():
        result = int(value)
    else:
        return None

    if minimum is not None and result < minimum:
        return None
    return result


def _parse_crafting_entry(key: str, entry: Dict[str, Any]) -> CraftingRecipe | None:
    if key not in INVENTORY_BUILDINGS:
        return None

    display_name = entry.get("display_name", key.title())
    iron = _coerce_int(entry.get("iron", 0), minimum=0)
    copper = _coerce_int(entry.get("copper", 0), minimum=0)

    if not isinstance(display_name, str) or not display_name.strip():
        return None
    if iron is None or copper is None:
        return None
    # A free recipe would mint buildings out of nothing.
    if iron == 0 and copper == 0:
        return None

    return CraftingRecipe(key=key, display_name=display_name.strip(), iron=iron, copper=copper)


def _ordered_runtime_catalog(recipes: Iterable[CraftingRecipe]) -> Dict[str, Dict[str, str | int]]:
    ordered = sorted(recipes, key=lambda recipe: (recipe.iron + recipe.copper, recipe.key))
    return {recipe.key: recipe.to_runtime_dict() for recipe in ordered}


def load_crafting_catalog(path: Path = CRAFTING_FILE) -> Dict[str, Dict[str, str | int]]:
    """Load crafting costs from ``path``.

    Invalid entries are dropped. Recipes missing from the file keep their
    default cost, so every inventory building stays craftable.
    """
    defaults = _ordered_runtime_catalog(DEFAULT_CRAFTING_RECIPES.values())
    if not path.exists():
        return defaults

    try:
        raw = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError):
        return defaults

    if not isinstance(raw, dict):
        return defaults

    recipes: Dict[str, CraftingRecipe] = dict(DEFAULT_CRAFTING_RECIPES)
    for key, entry in raw.items():
        if not isinstance(key, str) or not isinstance(entry, dict):
            continue
        recipe = _parse_crafting_entry(key, entry)
        if recipe is None:
            continue
        recipes[key] = recipe

    return _ordered_runtime_catalog(recipes.values())


CRAFTING_RECIPES = load_crafting_catalog()
