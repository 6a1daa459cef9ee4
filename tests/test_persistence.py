"""
test_persistence.py: pytest suite for core/persistence.py
==========================================================
Covers: the save payload shape, SQLite save/load through the Game facade,
validation failures, lenient phase parsing and indoor units.
"""

import json
import sqlite3

import pytest

from echoes_of_the_fall.config import SAVE_KEY
from echoes_of_the_fall.core.persistence import (
    SaveError, delete_save, from_json, has_save, read_save, restore_state,
    save_game, serialize_state,
)
from echoes_of_the_fall.core.state import Phase
from echoes_of_the_fall.engine.game import Game
from echoes_of_the_fall.engine.interiors import InteriorManager


# ─────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────

OX, OY = 300, 300


@pytest.fixture
def game():
    return Game(seed=42)


@pytest.fixture
def save_path(tmp_path):
    return str(tmp_path / "slot.db")


def write_raw(path, payload):
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE metadata (key TEXT PRIMARY KEY, value TEXT)")
    conn.execute("INSERT INTO metadata VALUES (?, ?)", (SAVE_KEY, payload))
    conn.commit()
    conn.close()


# ─────────────────────────────────────────────────────
# Payload
# ─────────────────────────────────────────────────────

class TestSerialize:
    def test_payload_keys(self, game):
        data = serialize_state(game.state)
        for key in ("seed", "turn", "phase", "units", "enemies", "globalResources",
                    "hand", "deckSize", "discardSize", "revealedTiles", "version"):
            assert key in data
        assert data["phase"] == "ACTIONS"
        assert data["seed"] == 42

    def test_payload_is_json(self, game):
        data = serialize_state(game.state)
        assert json.loads(json.dumps(data)) == data

    def test_unit_record(self, game):
        record = serialize_state(game.state)["units"][0]
        assert set(record) >= {"id", "name", "x", "y", "health", "actionPoints",
                               "radiationDose", "hydration", "nutrition"}

    def test_hand_holds_names_and_types(self, game):
        hand = serialize_state(game.state)["hand"]
        assert len(hand) == len(game.state.deck.hand)
        assert all(set(card) == {"name", "type"} for card in hand)

    def test_cured_survivor_reloads_with_same_ars_outcome(self, game):
        unit = game.state.unit_list[0]
        unit.add_radiation(80)
        unit.suffer_ars()
        unit.cure_radiation(80)
        loaded = restore_state(serialize_state(game.state)).units[unit.id]
        for survivor in (unit, loaded):
            survivor.add_radiation(80)
            survivor.suffer_ars()
        assert loaded.max_action_points == unit.max_action_points

    def test_restore_round_trip(self, game):
        game.end_turn_requested()
        data = serialize_state(game.state)
        assert serialize_state(restore_state(data)) == data


# ─────────────────────────────────────────────────────
# Save / load
# ─────────────────────────────────────────────────────

class TestSaveLoad:
    def test_save_then_load(self, game, save_path):
        state = game.state
        state.resources.add("scrap", 7)
        state.turn = 6
        game.save(save_path)
        assert has_save(save_path)

        other = Game(seed=7)
        assert other.load(save_path)
        loaded = other.state
        assert loaded.seed == 42
        assert loaded.turn == 6
        assert loaded.resources.to_dict() == state.resources.to_dict()
        assert [u.to_dict() for u in loaded.unit_list] == [u.to_dict() for u in state.unit_list]
        assert [c.name for c in loaded.deck.hand] == [c.name for c in state.deck.hand]
        assert loaded.fog.revealed_keys() == state.fog.revealed_keys()
        assert loaded.deck.total == state.deck.total

    def test_loaded_world_matches_seed(self, game, save_path):
        game.save(save_path)
        other = Game(seed=7)
        other.load(save_path)
        unit = game.state.unit_list[0]
        a = game.state.world.get_ready_tile(unit.x + 4, unit.y + 4)
        b = other.state.world.get_ready_tile(unit.x + 4, unit.y + 4)
        assert a.terrain is b.terrain

    def test_loaded_units_occupy_tiles(self, game, save_path):
        game.save(save_path)
        other = Game(seed=7)
        other.load(save_path)
        for unit in other.state.unit_list:
            tile = other.state.world.get_ready_tile(unit.x, unit.y)
            assert tile.occupant.entity_id == unit.id

    def test_overwrites_previous_save(self, game, save_path):
        game.save(save_path)
        game.state.turn = 9
        game.save(save_path)
        assert read_save(save_path)["turn"] == 9

    def test_missing_file(self, game, save_path):
        state = game.state
        assert game.load(save_path) is False
        assert game.state is state
        assert state.events.last_message() == "No save found"

    def test_malformed_payload_leaves_state(self, game, save_path):
        write_raw(save_path, "{}")
        state = game.state
        assert game.load(save_path) is False
        assert game.state is state
        assert state.events.last_message() == "Failed to load save"

    def test_delete(self, game, save_path):
        game.save(save_path)
        delete_save(save_path)
        assert not has_save(save_path)
        assert read_save(save_path) is None


# ─────────────────────────────────────────────────────
# Validation
# ─────────────────────────────────────────────────────

class TestValidation:
    def test_invalid_json(self):
        with pytest.raises(SaveError):
            from_json("not json")

    def test_missing_fields(self):
        with pytest.raises(SaveError):
            from_json("{}")

    def test_unknown_card(self, game):
        data = serialize_state(game.state)
        data["hand"] = [{"name": "Jetpack", "type": "action"}]
        with pytest.raises(SaveError):
            restore_state(data)

    def test_bad_revealed_key(self, game):
        data = serialize_state(game.state)
        data["revealedTiles"] = ["oops"]
        with pytest.raises(SaveError):
            restore_state(data)

    def test_unit_missing_field(self, game):
        data = serialize_state(game.state)
        del data["units"][0]["hydration"]
        with pytest.raises(SaveError):
            restore_state(data)

    def test_unknown_phase(self, game):
        data = serialize_state(game.state)
        data["phase"] = "LUNCH"
        with pytest.raises(SaveError):
            restore_state(data)

    @pytest.mark.parametrize("value", ["ACTIONS", Phase.ACTIONS.value])
    def test_phase_by_name_or_value(self, game, value):
        data = serialize_state(game.state)
        data["phase"] = value
        assert restore_state(data).phase is Phase.ACTIONS


# ─────────────────────────────────────────────────────
# Indoor units
# ─────────────────────────────────────────────────────

class TestIndoorUnits:
    def test_saved_at_return_position(self, building_state):
        state = building_state
        unit = state.selected_unit
        InteriorManager(state).enter_building(unit, state.world.get_ready_tile(OX, OY))
        record = serialize_state(state)["units"][0]
        assert (record["x"], record["y"]) == (OX + 1, OY + 1)

    def test_restored_outdoors(self, building_state):
        state = building_state
        unit = state.selected_unit
        InteriorManager(state).enter_building(unit, state.world.get_ready_tile(OX, OY))
        restored = restore_state(serialize_state(state))
        again = restored.unit_list[0]
        assert not restored.is_indoors(again)
        assert (again.x, again.y) == (OX + 1, OY + 1)
