"""
test_interactions.py: pytest suite for engine/interactions.py
==============================================================
Covers: roll_loot, the outdoor and indoor context menus, action guards
(reach, AP, wrong target), scavenging outcomes, doors, furniture,
windows, consumables and dispatch errors.
"""

import pytest

from echoes_of_the_fall.engine.interactions import InteractionSystem, roll_loot
from echoes_of_the_fall.entities.enemy import Enemy
from echoes_of_the_fall.world.interior import Furniture, InteriorTerrain
from echoes_of_the_fall.world.props import create_prop
from echoes_of_the_fall.world.terrain import TerrainType


# ─────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────

OX, OY = 300, 300
UX, UY = OX + 1, OY + 1          # Where building_state puts the survivor


class FixedRng:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value

    def randint(self, low, high):
        return low


def ids(actions):
    return [a.action_id for a in actions]


@pytest.fixture
def system(building_state):
    return InteractionSystem(building_state)


@pytest.fixture
def indoors(system):
    """The survivor standing on the entry tile of the house, AP topped up."""
    state = system.state
    system.execute("enter_building", OX, OY)
    state.selected_unit.reset_ap()
    return system


def beside_entry(system, dx):
    interior = system.state.current_interior
    tile = interior.get_tile(interior.entry_x + dx, interior.entry_y)
    tile.furniture = None
    return tile


# ─────────────────────────────────────────────────────
# roll_loot
# ─────────────────────────────────────────────────────

class TestRollLoot:
    def test_first_band(self):
        assert roll_loot("household", FixedRng(0.1)) == ("scrap", 1)

    def test_second_band(self):
        assert roll_loot("household", FixedRng(0.6)) == ("food", 1)

    def test_empty_band(self):
        assert roll_loot("valuable", FixedRng(0.95)) == (None, 0)

    def test_unknown_table(self):
        with pytest.raises(KeyError):
            roll_loot("armory", FixedRng(0.1))


# ─────────────────────────────────────────────────────
# Outdoor menu and handlers
# ─────────────────────────────────────────────────────

class TestOutdoor:
    def test_plain_ground(self, system):
        tile = system.tile_at(UX + 1, UY)
        assert ids(system.available_actions(tile)) == ["search_ground"]

    def test_diggable_ground(self, system):
        tile = system.tile_at(UX + 1, UY)
        tile.set_terrain(TerrainType.SAND)
        assert ids(system.available_actions(tile)) == ["search_ground", "dig"]

    def test_out_of_reach_has_no_menu(self, system):
        assert system.available_actions(system.tile_at(UX + 5, UY)) == []

    def test_out_of_reach_execute(self, system):
        assert system.execute("search_ground", UX + 5, UY) is False
        assert system.state.events.last_message() == "No unit nearby!"

    def test_search_ground_costs_one_ap(self, system):
        assert system.execute("search_ground", UX + 1, UY)
        assert system.state.selected_unit.action_points == 2

    def test_not_enough_ap(self, system):
        system.state.selected_unit.action_points = 0
        assert system.execute("search_ground", UX + 1, UY) is False
        assert system.state.events.last_message() == "Not enough AP!"

    def test_water(self, system):
        tile = system.tile_at(UX + 1, UY + 1)
        tile.set_terrain(TerrainType.WATER)
        assert ids(system.available_actions(tile)) == ["collect_water"]
        before = system.state.resources.water
        assert system.execute("collect_water", tile.x, tile.y)
        assert 1 <= system.state.resources.water - before <= 2

    def test_harvest_wood_removes_tree(self, system):
        tile = system.tile_at(UX, UY + 1)
        tile.props = [create_prop("Dead Tree", tile.x, tile.y)]
        assert ids(system.available_actions(tile)) == ["harvest_wood"]
        before = system.state.resources.scrap
        assert system.execute("harvest_wood", tile.x, tile.y)
        assert not tile.has_prop("Dead Tree")
        assert 2 <= system.state.resources.scrap - before <= 4

    def test_salvage_vehicle_costs_two(self, system):
        tile = system.tile_at(UX + 1, UY)
        tile.props = [create_prop("Car Wreck", tile.x, tile.y)]
        assert system.execute("salvage_vehicle", tile.x, tile.y)
        assert system.state.selected_unit.action_points == 1
        assert tile.times_salvaged == 1
        assert not tile.has_prop("Car Wreck")

    def test_toxic_barrel(self, system):
        tile = system.tile_at(UX + 1, UY)
        tile.props = [create_prop("Toxic Barrel", tile.x, tile.y)]
        assert "salvage_chemicals" in ids(system.available_actions(tile))
        assert system.execute("salvage_chemicals", tile.x, tile.y)
        assert not tile.has_prop("Toxic Barrel")

    def test_search_building_from_outside(self, system):
        anchor = system.tile_at(OX, OY)
        assert ids(system.available_actions(anchor)) == ["enter_building", "search_building"]
        assert system.execute("search_building", OX, OY)
        assert anchor.times_searched == 1
        assert system.state.selected_unit.action_points == 1

    def test_attack_menu_and_action(self, system):
        state = system.state
        enemy = state.add_enemy(Enemy(state.new_enemy_id(), UX + 1, UY))
        tile = system.tile_at(UX + 1, UY)
        assert ids(system.available_actions(tile)) == ["attack"]
        assert system.execute("attack", tile.x, tile.y)
        assert state.selected_unit.action_points == 2
        assert enemy.health < enemy.max_health

    def test_attack_empty_tile(self, system):
        assert system.execute("attack", UX + 1, UY) is False
        assert system.state.events.last_message() == "No enemy here!"

    def test_unknown_action(self, system):
        with pytest.raises(KeyError):
            system.execute("teleport", UX, UY)

    def test_prefers_selected_unit(self, building_state, helpers):
        system = InteractionSystem(building_state)
        other = helpers.add_unit(building_state, "Jordan", UX + 2, UY)
        tile = system.tile_at(UX + 1, UY)
        assert system.find_adjacent_unit(tile) is building_state.selected_unit
        building_state.selected_unit_id = None
        assert system.find_adjacent_unit(system.tile_at(UX + 3, UY)) is other


# ─────────────────────────────────────────────────────
# Consumables
# ─────────────────────────────────────────────────────

class TestConsumables:
    def test_use_water(self, system):
        state = system.state
        unit = state.selected_unit
        unit.adjust_hydration(-50)
        assert system.execute("use_water", 0, 0)
        assert state.resources.water == 4
        assert unit.hydration == 80

    def test_use_medicine_without_stock(self, system):
        system.state.resources.medicine = 0
        assert system.execute("use_medicine", 0, 0) is False
        assert system.state.events.last_message() == "No medicine left!"

    def test_needs_selection(self, system):
        system.state.selected_unit_id = None
        assert system.execute("use_food", 0, 0) is False


# ─────────────────────────────────────────────────────
# Indoors
# ─────────────────────────────────────────────────────

class TestIndoor:
    def test_enter_through_menu(self, indoors):
        assert indoors.indoors
        assert indoors.units_in_view() == [indoors.state.selected_unit]

    def test_exit_tile_menu(self, indoors):
        interior = indoors.state.current_interior
        exit_tile = interior.get_tile(interior.entry_x, interior.height - 1)
        assert "exit_building" in ids(indoors.available_actions(exit_tile))
        assert indoors.execute("exit_building", exit_tile.x, exit_tile.y)
        assert not indoors.indoors

    def test_exit_requires_exit_tile(self, indoors):
        tile = beside_entry(indoors, 1)
        tile.terrain = InteriorTerrain.FLOOR
        assert indoors.execute("exit_building", tile.x, tile.y) is False

    def test_window(self, indoors):
        tile = beside_entry(indoors, 1)
        tile.terrain = InteriorTerrain.WINDOW
        assert ids(indoors.available_actions(tile)) == ["exit_window"]
        assert indoors.execute("exit_window", tile.x, tile.y)
        assert indoors.state.events.last_message() == "Exited through a window"

    def test_locked_door(self, indoors):
        tile = beside_entry(indoors, 1)
        tile.terrain = InteriorTerrain.DOOR_LOCKED
        assert ids(indoors.available_actions(tile)) == ["unlock_door", "break_door"]
        assert indoors.execute("break_door", tile.x, tile.y)
        assert tile.terrain is InteriorTerrain.DOOR_OPEN
        assert indoors.state.selected_unit.action_points == 1

    def test_pick_lock_outcomes(self, indoors):
        tile = beside_entry(indoors, 1)
        tile.terrain = InteriorTerrain.DOOR_LOCKED
        indoors.execute("unlock_door", tile.x, tile.y)
        assert tile.terrain in (InteriorTerrain.DOOR_LOCKED, InteriorTerrain.DOOR_CLOSED)
        assert indoors.state.selected_unit.action_points == 2

    def test_open_and_close_are_free(self, indoors):
        tile = beside_entry(indoors, 1)
        tile.terrain = InteriorTerrain.DOOR_CLOSED
        assert ids(indoors.available_actions(tile)) == ["open_door"]
        assert indoors.execute("open_door", tile.x, tile.y)
        assert tile.terrain is InteriorTerrain.DOOR_OPEN
        assert indoors.execute("close_door", tile.x, tile.y)
        assert tile.terrain is InteriorTerrain.DOOR_CLOSED
        assert indoors.state.selected_unit.action_points == 3

    def test_open_wrong_door_state(self, indoors):
        tile = beside_entry(indoors, 1)
        tile.terrain = InteriorTerrain.DOOR_OPEN
        assert indoors.execute("open_door", tile.x, tile.y) is False

    def test_locked_furniture_flow(self, indoors):
        state = indoors.state
        tile = beside_entry(indoors, -1)
        tile.terrain = InteriorTerrain.FLOOR
        tile.furniture = Furniture(tile.x, tile.y, "SAFE", locked=True)
        assert ids(indoors.available_actions(tile)) == ["unlock_furniture", "break_furniture"]
        assert indoors.execute("search_furniture", tile.x, tile.y) is False
        assert state.events.last_message() == "This is locked! Unlock it first."

        assert indoors.execute("break_furniture", tile.x, tile.y)
        assert not tile.furniture.locked
        state.selected_unit.reset_ap()

        assert ids(indoors.available_actions(tile)) == ["search_furniture"]
        assert indoors.execute("search_furniture", tile.x, tile.y)
        assert tile.furniture.searched
        assert ids(indoors.available_actions(tile)) == ["search_furniture_again"]
        assert indoors.execute("search_furniture", tile.x, tile.y) is False

    def test_unsearchable_furniture_has_no_menu(self, indoors):
        tile = beside_entry(indoors, -1)
        tile.terrain = InteriorTerrain.FLOOR
        tile.furniture = Furniture(tile.x, tile.y, "TABLE")
        assert indoors.available_actions(tile) == []
