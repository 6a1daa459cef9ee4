"""
test_pathfinding.py: pytest suite for engine/pathfinding.py
============================================================
Covers: distance helpers, generic astar, Pathfinder.find_path optimality
(checked against exhaustive relaxation), reachable_costs, movement_range
and the AP conversion.
"""

import math
import random
from dataclasses import dataclass

import pytest

from echoes_of_the_fall.config import DIAGONAL_COST
from echoes_of_the_fall.engine.pathfinding import (
    EIGHT_DIRECTIONS, Pathfinder, astar, chebyshev, euclidean, manhattan, step_cost,
)
from echoes_of_the_fall.world.tile import EMPTY, Occupant


# ─────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────

@dataclass
class GridTile:
    x: int
    y: int
    movement_cost: float = 1.0
    is_passable: bool = True
    occupant: Occupant = EMPTY


class Grid:
    """Minimal grid honouring the path_tile protocol."""

    def __init__(self, width, height, min_step_cost=1.0):
        self.width = width
        self.height = height
        self.min_step_cost = min_step_cost
        self.tiles = {(x, y): GridTile(x, y) for y in range(height) for x in range(width)}

    def path_tile(self, x, y):
        return self.tiles.get((x, y))


@dataclass
class Walker:
    x: int
    y: int
    action_points: int = 3
    move_range: int = 3


def random_grid(seed, size=6):
    rng = random.Random(seed)
    grid = Grid(size, size)
    for tile in grid.tiles.values():
        tile.movement_cost = rng.choice((1.0, 1.2, 1.5, 2.0, 3.0))
        tile.is_passable = rng.random() > 0.2
    grid.tiles[(0, 0)].is_passable = True
    return grid


def relaxed_costs(grid, start):
    """Bellman-Ford style relaxation until nothing improves."""
    costs = {start: 0.0}
    changed = True
    while changed:
        changed = False
        for (x, y), cost in list(costs.items()):
            for dx, dy in EIGHT_DIRECTIONS:
                tile = grid.path_tile(x + dx, y + dy)
                if tile is None or not tile.is_passable:
                    continue
                new = cost + step_cost(tile, dx, dy)
                if new < costs.get((tile.x, tile.y), math.inf) - 1e-12:
                    costs[(tile.x, tile.y)] = new
                    changed = True
    return costs


# ─────────────────────────────────────────────────────
# Distances
# ─────────────────────────────────────────────────────

class TestDistances:
    def test_manhattan(self):
        assert manhattan((0, 0), (3, -4)) == 7

    def test_chebyshev(self):
        assert chebyshev((0, 0), (3, -4)) == 4

    def test_euclidean(self):
        assert euclidean((0, 0), (3, -4)) == pytest.approx(5.0)

    def test_step_cost_diagonal_multiplier(self):
        tile = GridTile(1, 1, movement_cost=2.0)
        assert step_cost(tile, 1, 0) == 2.0
        assert step_cost(tile, 1, 1) == pytest.approx(2.0 * DIAGONAL_COST)


# ─────────────────────────────────────────────────────
# astar
# ─────────────────────────────────────────────────────

class TestAstar:
    def test_line_graph(self):
        def neighbors(n):
            for m in (n - 1, n + 1):
                if 0 <= m <= 5:
                    yield m, 1.0
        path, cost = astar(0, 5, neighbors, lambda n: 5 - n)
        assert path == [0, 1, 2, 3, 4, 5]
        assert cost == 5.0

    def test_unreachable_returns_none(self):
        assert astar(0, 9, lambda n: iter(()), lambda n: 0) is None

    def test_node_cap(self):
        def neighbors(n):
            yield n + 1, 1.0
        assert astar(0, 10_000, neighbors, lambda n: 0, max_nodes=50) is None


# ─────────────────────────────────────────────────────
# find_path
# ─────────────────────────────────────────────────────

class TestFindPath:
    def test_straight_line_prefers_orthogonal_steps(self):
        grid = Grid(6, 3)
        path = Pathfinder.find_path(grid, (0, 1), (5, 1))
        assert [(t.x, t.y) for t in path] == [(x, 1) for x in range(6)]
        assert Pathfinder.path_cost(path) == pytest.approx(5.0)

    def test_diagonal_when_cheaper(self):
        grid = Grid(4, 4)
        path = Pathfinder.find_path(grid, (0, 0), (3, 3))
        assert len(path) == 4
        assert Pathfinder.path_cost(path) == pytest.approx(3 * DIAGONAL_COST)

    def test_detours_around_wall(self):
        grid = Grid(5, 5)
        for y in range(4):
            grid.tiles[(2, y)].is_passable = False
        path = Pathfinder.find_path(grid, (0, 0), (4, 0))
        assert path is not None
        assert all(t.is_passable for t in path)
        assert any(t.y == 4 for t in path)

    def test_impassable_goal(self):
        grid = Grid(3, 3)
        grid.tiles[(2, 2)].is_passable = False
        assert Pathfinder.find_path(grid, (0, 0), (2, 2)) is None

    def test_off_grid_goal(self):
        assert Pathfinder.find_path(Grid(3, 3), (0, 0), (9, 9)) is None

    def test_walled_off_goal(self):
        grid = Grid(5, 5)
        for y in range(5):
            grid.tiles[(2, y)].is_passable = False
        assert Pathfinder.find_path(grid, (0, 0), (4, 4)) is None

    def test_blocked_filter_spares_goal(self):
        grid = Grid(3, 1)
        grid.tiles[(2, 0)].occupant = Occupant.enemy(1)
        path = Pathfinder.find_path(grid, (0, 0), (2, 0),
                                    blocked=lambda t: t.occupant.is_enemy)
        assert path[-1].occupant.is_enemy

    def test_blocked_filter_forces_detour(self):
        grid = Grid(3, 3)
        grid.tiles[(1, 1)].occupant = Occupant.enemy(1)
        path = Pathfinder.find_path(grid, (0, 1), (2, 1),
                                    blocked=lambda t: t.occupant.is_enemy)
        assert (1, 1) not in [(t.x, t.y) for t in path]

    def test_start_equals_goal(self):
        path = Pathfinder.find_path(Grid(2, 2), (1, 1), (1, 1))
        assert [(t.x, t.y) for t in path] == [(1, 1)]

    @pytest.mark.parametrize("seed", range(25))
    def test_optimal_against_relaxation(self, seed):
        grid = random_grid(seed)
        reference = relaxed_costs(grid, (0, 0))
        for goal, best in reference.items():
            path = Pathfinder.find_path(grid, (0, 0), goal)
            assert path is not None
            assert Pathfinder.path_cost(path) == pytest.approx(best)

    @pytest.mark.parametrize("seed", range(5))
    def test_unreachable_agrees_with_relaxation(self, seed):
        grid = random_grid(seed)
        reference = relaxed_costs(grid, (0, 0))
        for node, tile in grid.tiles.items():
            if tile.is_passable and node not in reference:
                assert Pathfinder.find_path(grid, (0, 0), node) is None


# ─────────────────────────────────────────────────────
# Reachable sets and movement range
# ─────────────────────────────────────────────────────

class TestMovementRange:
    def test_reachable_costs_match_relaxation(self):
        grid = random_grid(3)
        reference = relaxed_costs(grid, (0, 0))
        costs = Pathfinder.reachable_costs(grid, (0, 0), budget=4.0)
        for node, cost in costs.items():
            assert cost == pytest.approx(reference[node])
        for node, best in reference.items():
            if best <= 4.0:
                assert node in costs

    def test_range_respects_budget(self):
        grid = Grid(15, 15)
        unit = Walker(7, 7, action_points=1, move_range=3)
        tiles = Pathfinder.movement_range(grid, unit)
        assert tiles
        for tile in tiles:
            path = Pathfinder.find_path(grid, (7, 7), (tile.x, tile.y))
            assert Pathfinder.path_cost(path) <= 3 + 1e-9

    def test_range_excludes_own_tile(self):
        grid = Grid(5, 5)
        tiles = Pathfinder.movement_range(grid, Walker(2, 2))
        assert (2, 2) not in [(t.x, t.y) for t in tiles]

    def test_range_scales_with_action_points(self):
        grid = Grid(21, 21)
        one = Pathfinder.movement_range(grid, Walker(10, 10, action_points=1))
        three = Pathfinder.movement_range(grid, Walker(10, 10, action_points=3))
        assert len(three) > len(one)

    def test_no_action_points_no_range(self):
        assert Pathfinder.movement_range(Grid(5, 5), Walker(2, 2, action_points=0)) == []

    def test_enemies_block_units_do_not_end(self):
        grid = Grid(5, 1)
        grid.tiles[(1, 0)].occupant = Occupant.unit(2)
        grid.tiles[(3, 0)].occupant = Occupant.enemy(1)
        tiles = Pathfinder.movement_range(grid, Walker(0, 0))
        coords = [(t.x, t.y) for t in tiles]
        assert coords == [(2, 0)]


class TestApCost:
    def test_exact_multiple(self):
        assert Pathfinder.ap_cost(3.0, 3) == 1

    def test_rounds_up(self):
        assert Pathfinder.ap_cost(3.1, 3) == 2

    def test_float_noise_does_not_round_up(self):
        assert Pathfinder.ap_cost(1.4 + 1.6, 3) == 1

    def test_zero(self):
        assert Pathfinder.ap_cost(0.0, 3) == 0
