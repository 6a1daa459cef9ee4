"""
test_interiors.py: pytest suite for building interiors
=======================================================
Covers: generate_interior (determinism, layout rules, room connectivity,
serialization) and InteriorManager (entry, exit, caching and the
one-building-at-a-time rule).
"""

from collections import deque

import pytest

from echoes_of_the_fall.core.state import ViewMode
from echoes_of_the_fall.engine.interiors import InteriorManager, building_type_for
from echoes_of_the_fall.world.interior import (
    BUILDING_INTERIORS, BuildingInterior, InteriorTerrain, building_template,
)
from echoes_of_the_fall.world.interior_generator import (
    count_adjacent_walls, generate_interior,
)
from echoes_of_the_fall.world.props import create_prop


# ─────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────

OX, OY = 300, 300
BUILDING_TYPES = [name for name in BUILDING_INTERIORS if name != "default"]
WALKABLE = (InteriorTerrain.FLOOR, InteriorTerrain.EXIT, InteriorTerrain.DOOR_OPEN,
            InteriorTerrain.DOOR_CLOSED, InteriorTerrain.DOOR_LOCKED)


def reachable_rooms(interior, through_locked=True):
    """Room ids reachable from the entry, treating locked doors as openable.

    Locked doors can be picked or broken, so they do not cut a room off.
    This is looser than reading a locked door as a wall: with locked doors
    impassable, roughly a third of layouts have a room that can only be
    reached by unlocking or breaking a door.
    """
    start = (interior.entry_x, interior.entry_y)
    seen = {start}
    queue = deque([start])
    rooms = set()
    while queue:
        x, y = queue.popleft()
        tile = interior.get_tile(x, y)
        if tile.room_id is not None:
            rooms.add(tile.room_id)
        for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1)):
            nxt = interior.get_tile(x + dx, y + dy)
            if (nxt is None or (nxt.x, nxt.y) in seen or nxt.terrain not in WALKABLE
                    or nxt.furniture is not None):
                continue
            if not through_locked and nxt.terrain is InteriorTerrain.DOOR_LOCKED:
                continue
            seen.add((nxt.x, nxt.y))
            queue.append((nxt.x, nxt.y))
    return rooms


# ─────────────────────────────────────────────────────
# Generator
# ─────────────────────────────────────────────────────

class TestGenerateInterior:
    def test_deterministic(self):
        a = generate_interior(12, -7, "Ruined House", 42)
        b = generate_interior(12, -7, "Ruined House", 42)
        assert a.to_dict() == b.to_dict()

    def test_position_changes_layout_seed(self):
        a = generate_interior(1, 1, "Warehouse", 42)
        b = generate_interior(2, 1, "Warehouse", 42)
        assert a.seed != b.seed

    @pytest.mark.parametrize("building_type", BUILDING_TYPES)
    def test_dimensions_follow_template(self, building_type):
        interior = generate_interior(3, 4, building_type, 42)
        template = building_template(building_type)
        assert (interior.width, interior.height) == (template.width, template.height)
        assert len(interior.tiles) == template.height
        assert all(len(row) == template.width for row in interior.tiles)

    def test_unknown_type_uses_default_template(self):
        interior = generate_interior(0, 0, "Bunker", 42)
        assert (interior.width, interior.height) == (6, 6)

    @pytest.mark.parametrize("building_type", BUILDING_TYPES)
    def test_perimeter_is_closed(self, building_type):
        interior = generate_interior(5, 5, building_type, 42)
        for tile in interior.iter_tiles():
            edge = tile.x in (0, interior.width - 1) or tile.y in (0, interior.height - 1)
            if edge:
                assert tile.terrain in (InteriorTerrain.WALL, InteriorTerrain.EXIT,
                                        InteriorTerrain.WINDOW)

    @pytest.mark.parametrize("building_type", BUILDING_TYPES)
    def test_front_exit_and_entry(self, building_type):
        interior = generate_interior(8, 2, building_type, 42)
        bottom = interior.height - 1
        front = interior.get_tile(interior.entry_x, bottom)
        assert front.is_exit and front.terrain is InteriorTerrain.EXIT
        assert interior.entry_y == bottom - 1
        assert interior.entry_tile.is_passable

    @pytest.mark.parametrize("building_type", BUILDING_TYPES)
    def test_furniture_keeps_clear_of_openings(self, building_type):
        for seed in range(20):
            interior = generate_interior(seed, 0, building_type, 42)
            openings = [(d.x, d.y) for d in interior.doors]
            openings += [(t.x, t.y) for t in interior.exit_tiles()]
            for item in interior.furniture:
                assert interior.get_tile(item.x, item.y).furniture is item
                for ox, oy in openings:
                    assert max(abs(ox - item.x), abs(oy - item.y)) > 1

    def test_windows_on_walls(self):
        for seed in range(10):
            interior = generate_interior(seed, seed, "Office Building", 42)
            assert 1 <= len(interior.windows) <= 3
            for x, y in interior.windows:
                assert interior.get_tile(x, y).terrain is InteriorTerrain.WINDOW
                assert y < interior.height - 1

    def test_doors_match_tiles(self):
        interior = generate_interior(4, 9, "Office Building", 7)
        for door in interior.doors:
            tile = interior.get_tile(door.x, door.y)
            expected = InteriorTerrain.DOOR_LOCKED if door.locked else InteriorTerrain.DOOR_CLOSED
            assert tile.terrain is expected

    def test_houses_are_connected(self):
        connected = 0
        for seed in range(100):
            interior = generate_interior(seed * 3, -seed, "Ruined House", seed)
            rooms = {r.room_id for r in interior.rooms}
            if reachable_rooms(interior) == rooms and not interior.forced_connections:
                connected += 1
        assert connected >= 99

    @pytest.mark.parametrize("building_type", BUILDING_TYPES)
    def test_unreachable_rooms_are_recorded(self, building_type):
        for seed in range(40):
            interior = generate_interior(seed, 2 * seed, building_type, 42)
            rooms = {r.room_id for r in interior.rooms}
            if reachable_rooms(interior) != rooms:
                assert interior.forced_connections

    @pytest.mark.parametrize("building_type", BUILDING_TYPES)
    def test_only_locked_doors_cut_rooms_off(self, building_type):
        for seed in range(40):
            interior = generate_interior(seed, -seed, building_type, 42)
            rooms = {r.room_id for r in interior.rooms}
            if reachable_rooms(interior, through_locked=False) != rooms:
                assert any(d.locked for d in interior.doors) or interior.forced_connections

    def test_count_adjacent_walls_corner(self):
        interior = generate_interior(0, 0, "Ruined House", 42)
        assert count_adjacent_walls(interior, 0, 0) == 4
        assert count_adjacent_walls(interior, 1, 1) >= 1

    def test_round_trip_through_dict(self):
        interior = generate_interior(6, 6, "Gas Station", 42)
        restored = BuildingInterior.from_dict(interior.to_dict())
        assert restored.to_dict() == interior.to_dict()
        assert [(t.x, t.y) for t in restored.exit_tiles()] == \
            [(t.x, t.y) for t in interior.exit_tiles()]


# ─────────────────────────────────────────────────────
# Building type lookup
# ─────────────────────────────────────────────────────

class TestBuildingType:
    def test_known_props(self, state):
        tile = state.world.get_ready_tile(0, 0)
        tile.props = [create_prop("Gas Station", 0, 0)]
        assert building_type_for(tile) == "Gas Station"
        tile.props = [create_prop("Abandoned Shop", 0, 0)]
        assert building_type_for(tile) == "Abandoned Shop"

    def test_defaults_to_house(self, state):
        tile = state.world.get_ready_tile(0, 0)
        tile.props = []
        assert building_type_for(tile) == "Ruined House"


# ─────────────────────────────────────────────────────
# InteriorManager
# ─────────────────────────────────────────────────────

class TestInteriorManager:
    def test_enter_and_exit_round_trip(self, building_state):
        state = building_state
        unit = state.selected_unit
        manager = InteriorManager(state)
        anchor = state.world.get_ready_tile(OX, OY)

        assert manager.enter_building(unit, anchor)
        assert state.view_mode is ViewMode.INDOOR
        assert state.is_indoors(unit)
        assert state.current_building.anchor == (OX, OY)
        interior = state.current_interior
        assert (unit.x, unit.y) == (interior.entry_x, interior.entry_y)
        assert interior.entry_tile.occupant.entity_id == unit.id
        assert state.world.get_ready_tile(OX + 1, OY + 1).occupant.is_empty
        assert state.return_positions[unit.id] == (OX + 1, OY + 1)

        assert manager.exit_building(unit)
        assert state.view_mode is ViewMode.OUTDOOR
        assert state.current_interior is None
        assert not state.is_indoors(unit)
        assert (unit.x, unit.y) == (OX, OY + 1)
        assert state.world.get_ready_tile(OX, OY + 1).occupant.is_unit
        assert unit.action_points == 1

    def test_interior_is_cached(self, building_state):
        manager = InteriorManager(building_state)
        assert manager.get_interior((OX, OY)) is manager.get_interior((OX, OY))
        assert f"{OX},{OY}" in building_state.interior_cache

    def test_re_entry_yields_same_layout(self, building_state, helpers):
        state = building_state
        unit = state.selected_unit
        manager = InteriorManager(state)
        anchor = state.world.get_ready_tile(OX, OY)
        manager.enter_building(unit, anchor)
        layout = state.current_interior.to_dict()
        manager.exit_building(unit)
        state.interior_cache.clear()
        unit.reset_ap()
        manager.enter_building(unit, anchor)
        assert state.current_interior.to_dict() == layout

    def test_exit_search_order(self, building_state, helpers):
        state = building_state
        helpers.add_unit(state, "Jordan", OX, OY + 1)
        manager = InteriorManager(state)
        assert manager.find_exit_position((OX, OY), (0, 0)) == (OX, OY - 1)
        state.world.get_ready_tile(OX, OY - 1).has_building = True
        assert manager.find_exit_position((OX, OY), (0, 0)) == (OX + 1, OY)

    def test_exit_falls_back_to_return_position(self, building_state):
        state = building_state
        manager = InteriorManager(state)
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                if dx or dy:
                    state.world.get_ready_tile(OX + dx, OY + dy).has_building = True
        assert manager.find_exit_position((OX, OY), (OX + 5, OY)) == (OX + 5, OY)

    def test_needs_ap(self, building_state):
        state = building_state
        unit = state.selected_unit
        unit.action_points = 0
        manager = InteriorManager(state)
        assert not manager.enter_building(unit, state.world.get_ready_tile(OX, OY))
        assert state.events.last_message() == "Not enough AP to enter building!"
        assert state.view_mode is ViewMode.OUTDOOR

    def test_no_building_here(self, building_state):
        state = building_state
        manager = InteriorManager(state)
        tile = state.world.get_ready_tile(OX + 5, OY)
        assert not manager.enter_building(state.selected_unit, tile)

    def test_second_unit_joins_same_building(self, building_state, helpers):
        state = building_state
        first = state.selected_unit
        second = helpers.add_unit(state, "Jordan", OX - 1, OY - 1)
        manager = InteriorManager(state)
        anchor = state.world.get_ready_tile(OX, OY)
        manager.enter_building(first, anchor)
        assert manager.enter_building(second, anchor)
        assert (second.x, second.y) != (first.x, first.y)
        assert set(u.id for u in manager.units_inside()) == {first.id, second.id}

        manager.exit_building(first)
        assert state.view_mode is ViewMode.INDOOR
        manager.exit_building(second)
        assert state.view_mode is ViewMode.OUTDOOR

    def test_other_building_blocked_while_occupied(self, building_state, helpers):
        state = building_state
        helpers.plant_building(state, OX + 6, OY)
        first = state.selected_unit
        second = helpers.add_unit(state, "Jordan", OX + 7, OY + 1)
        manager = InteriorManager(state)
        manager.enter_building(first, state.world.get_ready_tile(OX, OY))
        assert not manager.enter_building(second, state.world.get_ready_tile(OX + 6, OY))
        assert state.events.last_message() == "Another building is already occupied"

    def test_death_indoors_restores_outdoor_view(self, building_state):
        state = building_state
        unit = state.selected_unit
        InteriorManager(state).enter_building(unit, state.world.get_ready_tile(OX, OY))
        state.damage_unit(unit, 1000)
        assert state.view_mode is ViewMode.OUTDOOR
        assert state.units_indoors == {}
