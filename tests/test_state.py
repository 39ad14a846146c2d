from __future__ import annotations

import json

import pytest

from config import EVENT_LOG_LIMIT, IRON, RESOURCE_COLORS, UPGRADER_POWER_COST_START, UPGRADER_POWER_START
from coinfactory import SimulationState, place_building, run_tick
from coinfactory.entities import Coord, Factory, Generator, ResourceNode, Upgrader
from coinfactory.state import CORRUPT_SAVE_MESSAGE
from coinfactory.world import generate_chunk


def _busy_state() -> SimulationState:
    sim = SimulationState(seed=8)
    generate_chunk(sim.world, 1, 0, sim.rng)
    sim.world.set_building(Coord(0, 0), Factory(cooldown=3))
    sim.world.set_building(Coord(0, -1), Upgrader(direction=2))
    sim.world.set_resource(Coord(12, 12), ResourceNode(IRON, RESOURCE_COLORS[IRON]))
    sim.world.set_building(Coord(12, 12), Generator(resource_type=IRON))
    place_building(sim, 1, 0, "collector")
    sim.spawn_item(Coord(4, 4), 6)
    sim.score = 42
    sim.upgrader_power = 3
    sim.upgrader_power_cost = 225
    sim.player.x, sim.player.y = 12.5, -3.0
    sim.inventory.copper = 9
    return sim


def test_new_state_defaults():
    sim = SimulationState()

    assert sim.score == 0
    assert sim.upgrader_power == UPGRADER_POWER_START
    assert sim.upgrader_power_cost == UPGRADER_POWER_COST_START
    assert sim.buildings == {}
    assert sim.resources == {}
    assert sim.items == []
    assert sim.world.generated_chunks == set()
    assert (sim.player.x, sim.player.y) == (0.0, 0.0)
    assert sim.inventory.iron == sim.inventory.generator == 0


def test_reset_restores_new_game():
    sim = _busy_state()
    sim.reset()

    assert sim.score == 0
    assert sim.buildings == {}
    assert sim.items == []
    assert sim.inventory.copper == 0
    assert sim.next_item_id == 1


def test_to_dict_flattens_maps_into_keyed_lists():
    data = _busy_state().to_dict()

    grid = {entry["key"]: entry for entry in data["grid"]}
    assert grid["0,0"] == {"key": "0,0", "type": "factory", "cooldown": 3}
    assert grid["0,-1"] == {"key": "0,-1", "type": "upgrader", "direction": 2}
    assert grid["12,12"] == {"key": "12,12", "type": "generator", "resourceType": "iron"}
    assert grid["1,0"] == {"key": "1,0", "type": "collector"}

    resources = {entry["key"]: entry for entry in data["resources"]}
    assert resources["12,12"] == {"key": "12,12", "type": "iron", "color": "#7f8c8d"}
    assert data["generatedChunks"] == ["0,0", "1,0"]
    assert data["items"] == [
        {"x": 4, "y": 4, "value": 6, "id": 1, "processedThisTick": False, "mergedThisTick": False}
    ]
    assert data["player"]["inventory"]["copper"] == 9
    assert data["upgraderPowerCost"] == 225
    json.dumps(data)


def test_snapshot_restores_same_state():
    sim = _busy_state()
    run_tick(sim)
    data = sim.to_dict()

    restored = SimulationState.from_dict(json.loads(json.dumps(data)))

    assert restored.to_dict() == data
    assert restored.world.get_building(Coord(0, 0)).cooldown == 2
    assert restored.event_log == []


def test_restored_state_keeps_issuing_unique_item_ids():
    sim = _busy_state()
    restored = SimulationState.from_dict(sim.to_dict())
    item = restored.spawn_item(Coord(9, 9), 1)
    assert item.id not in {other.id for other in restored.items if other is not item}


def test_missing_sections_default():
    sim = SimulationState.from_dict({"score": 5})
    assert sim.score == 5
    assert sim.upgrader_power == UPGRADER_POWER_START
    assert sim.buildings == {}
    assert sim.event_log == []


def test_items_without_ids_get_fresh_ones():
    sim = SimulationState.from_dict(
        {"items": [{"x": 0, "y": 0, "value": 2}, {"x": 1, "y": 0, "value": 3, "id": 7}]}
    )
    ids = [item.id for item in sim.items]
    assert ids[1] == 7
    assert ids[0] not in (0, 7)
    assert sim.next_item_id > max(ids)


@pytest.mark.parametrize(
    "patch",
    [
        {"grid": "not-a-list"},
        {"grid": [{"key": "0,0", "type": "conveyor", "direction": 7}]},
        {"grid": [{"key": "0,0", "type": "teleporter"}]},
        {"grid": [{"key": "0,0", "type": "collector"}, {"key": "0,0", "type": "collector"}]},
        {"grid": [{"key": "zero", "type": "collector"}]},
        {"grid": [{"key": "3,3", "type": "generator", "resourceType": "gold"}]},
        {"resources": [{"key": "1,1", "type": "gold", "color": "#fff"}]},
        {"items": [{"x": 0, "y": 0, "value": 0}]},
        {"items": [{"x": "0", "y": 0, "value": 1}]},
        {"score": -1},
        {"upgraderPower": 0},
        {"player": {"x": 0, "y": 0, "inventory": {"iron": -2}}},
        {"generatedChunks": [[0, 0]]},
        {"player": {"x": 10**400, "y": 0}},
        {"grid": [{"key": "12,12", "type": "collector"}]},
    ],
)
def test_malformed_snapshot_is_rejected_whole(patch):
    data = _busy_state().to_dict()
    data.update(patch)

    sim = SimulationState.from_dict(data)

    assert sim.score == 0
    assert sim.buildings == {}
    assert sim.items == []
    assert sim.message == CORRUPT_SAVE_MESSAGE


def test_non_dict_snapshot_is_rejected():
    sim = SimulationState.from_dict(["score", 10])
    assert sim.score == 0
    assert sim.event_log == [CORRUPT_SAVE_MESSAGE]


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "save.json"
    sim = _busy_state()
    sim.save(path)

    loaded = SimulationState.load(path)

    assert loaded.to_dict() == sim.to_dict()


def test_load_missing_file_starts_new_game(tmp_path):
    sim = SimulationState.load(tmp_path / "missing.json")
    assert sim.score == 0
    assert sim.event_log == []


def test_load_unreadable_file_starts_new_game(tmp_path):
    path = tmp_path / "save.json"
    path.write_text("{not json")

    sim = SimulationState.load(path)

    assert sim.score == 0
    assert sim.message == CORRUPT_SAVE_MESSAGE


def test_load_non_utf8_file_starts_new_game(tmp_path):
    path = tmp_path / "save.json"
    path.write_bytes(b'{"score": 5, "name": "\xff\xfe"}')

    sim = SimulationState.load(path)

    assert sim.score == 0
    assert sim.message == CORRUPT_SAVE_MESSAGE


def test_event_log_keeps_latest_messages():
    sim = SimulationState()
    for idx in range(EVENT_LOG_LIMIT + 5):
        sim.log_event(f"event {idx}")

    assert len(sim.event_log) == EVENT_LOG_LIMIT
    assert sim.event_log[-1] == f"event {EVENT_LOG_LIMIT + 4}"
    assert sim.message == sim.event_log[-1]
