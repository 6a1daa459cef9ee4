"""
conftest.py: shared fixtures for the game-core suites.

Most rule tests need a predictable patch of ground. `flat_state` clears a
square of grass around ORIGIN (no props, roads, buildings or radiation) on
top of the seeded world, so pathing costs and spawn rules are easy to
reason about.
"""

from types import SimpleNamespace

import pytest

from echoes_of_the_fall.core.state import GameState
from echoes_of_the_fall.entities.unit import Unit
from echoes_of_the_fall.world.props import create_prop
from echoes_of_the_fall.world.terrain import TerrainType
from echoes_of_the_fall.world.tile import EMPTY

ORIGIN = (300, 300)
FLAT_RADIUS = 12


def clear_area(state, cx, cy, radius, terrain=TerrainType.GRASS):
    for y in range(cy - radius, cy + radius + 1):
        for x in range(cx - radius, cx + radius + 1):
            tile = state.world.get_ready_tile(x, y)
            tile.set_terrain(terrain)
            tile.props = []
            tile.has_building = False
            tile.building_anchor = None
            tile.has_road = False
            tile.road_links = set()
            tile.occupant = EMPTY


def plant_building(state, x, y, name="Ruined House"):
    tile = state.world.get_ready_tile(x, y)
    tile.set_terrain(TerrainType.CONCRETE)
    tile.props = [create_prop(name, x, y)]
    tile.has_building = True
    tile.building_anchor = (x, y)
    return tile


def add_unit(state, name, x, y):
    return state.add_unit(Unit(state.new_unit_id(), name, x, y))


@pytest.fixture
def state():
    return GameState(42)


@pytest.fixture
def flat_state(state):
    clear_area(state, ORIGIN[0], ORIGIN[1], FLAT_RADIUS)
    return state


@pytest.fixture
def building_state(flat_state):
    """A Ruined House anchored at ORIGIN with one survivor diagonally next to it."""
    plant_building(flat_state, *ORIGIN)
    unit = add_unit(flat_state, "Alex", ORIGIN[0] + 1, ORIGIN[1] + 1)
    flat_state.selected_unit_id = unit.id
    return flat_state


@pytest.fixture
def helpers():
    return SimpleNamespace(clear_area=clear_area, plant_building=plant_building,
                           add_unit=add_unit, origin=ORIGIN)
