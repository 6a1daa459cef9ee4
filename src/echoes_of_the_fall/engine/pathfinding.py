"""
Pathfinder: A* shortest paths and cost-bounded reachable sets.

Works on any grid that offers `path_tile(x, y)` returning a tile with
`is_passable` and `movement_cost` (or None off the map) and, optionally,
`min_step_cost`. Both the chunk store and building interiors qualify.
"""

import heapq
import math
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Tuple

from echoes_of_the_fall.config import DIAGONAL_COST, PATHFINDING_MAX_NODES

Node = Tuple[int, int]
NeighborFn = Callable[[Node], Iterable[Tuple[Node, float]]]
BlockedFn = Callable[[Any], bool]

EIGHT_DIRECTIONS = (
    (0, -1), (1, 0), (0, 1), (-1, 0),
    (1, -1), (1, 1), (-1, 1), (-1, -1),
)

COST_EPSILON = 1e-9


def manhattan(a: Node, b: Node) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def chebyshev(a: Node, b: Node) -> int:
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def euclidean(a: Node, b: Node) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def astar(start: Hashable, goal: Hashable, neighbors: NeighborFn,
          heuristic: Callable[[Hashable], float],
          max_nodes: int = PATHFINDING_MAX_NODES) -> Optional[Tuple[List, float]]:
    """Generic A*. Returns (path including start, total cost) or None."""
    # open_heap entries: (f_score, tiebreaker, node)
    counter = 0
    open_heap: List = [(heuristic(start), counter, start)]
    came_from: Dict = {}
    g_cost: Dict = {start: 0.0}
    closed: set = set()

    while open_heap:
        _, _, current = heapq.heappop(open_heap)
        if current in closed:
            continue
        if current == goal:
            path = [current]
            while current in came_from:
                current = came_from[current]
                path.append(current)
            path.reverse()
            return path, g_cost[goal]
        closed.add(current)
        if len(closed) > max_nodes:
            return None

        for nxt, step in neighbors(current):
            if nxt in closed:
                continue
            new_g = g_cost[current] + step
            if new_g < g_cost.get(nxt, math.inf):
                g_cost[nxt] = new_g
                came_from[nxt] = current
                counter += 1
                heapq.heappush(open_heap, (new_g + heuristic(nxt), counter, nxt))
    return None


def step_cost(tile: Any, dx: int, dy: int) -> float:
    """Entering `tile`; diagonal steps cost more."""
    cost = tile.movement_cost
    if dx != 0 and dy != 0:
        cost *= DIAGONAL_COST
    return cost


class Pathfinder:
    """Static grid search utilities."""

    @staticmethod
    def find_path(grid: Any, start: Node, goal: Node,
                  blocked: Optional[BlockedFn] = None) -> Optional[List[Any]]:
        """Cheapest 8-directional path as a list of tiles, start included.

        `blocked` rejects intermediate tiles (never the goal). Returns None
        when the goal is impassable or unreachable.
        """
        start_tile = grid.path_tile(*start)
        goal_tile = grid.path_tile(*goal)
        if start_tile is None or goal_tile is None or not goal_tile.is_passable:
            return None

        min_step = getattr(grid, "min_step_cost", 1.0)

        def neighbors(node):
            x, y = node
            for dx, dy in EIGHT_DIRECTIONS:
                tile = grid.path_tile(x + dx, y + dy)
                if tile is None or not tile.is_passable:
                    continue
                nxt = (tile.x, tile.y)
                if blocked is not None and nxt != goal and blocked(tile):
                    continue
                yield nxt, step_cost(tile, dx, dy)

        result = astar(start, goal, neighbors,
                       lambda node: chebyshev(node, goal) * min_step)
        if result is None:
            return None
        nodes, _ = result
        return [grid.path_tile(x, y) for x, y in nodes]

    @staticmethod
    def path_cost(path: List[Any]) -> float:
        total = 0.0
        for prev, tile in zip(path, path[1:]):
            total += step_cost(tile, tile.x - prev.x, tile.y - prev.y)
        return total

    @staticmethod
    def reachable_costs(grid: Any, start: Node, budget: float,
                        blocked: Optional[BlockedFn] = None) -> Dict[Node, float]:
        """Dijkstra expansion: cheapest cost to every tile within budget.

        The start tile is included at cost 0.
        """
        costs: Dict[Node, float] = {start: 0.0}
        heap: List = [(0.0, 0, start)]
        counter = 0
        done: set = set()

        while heap:
            cost, _, node = heapq.heappop(heap)
            if node in done:
                continue
            done.add(node)
            x, y = node
            for dx, dy in EIGHT_DIRECTIONS:
                tile = grid.path_tile(x + dx, y + dy)
                if tile is None or not tile.is_passable:
                    continue
                if blocked is not None and blocked(tile):
                    continue
                nxt = (tile.x, tile.y)
                new_cost = cost + step_cost(tile, dx, dy)
                if new_cost > budget + COST_EPSILON:
                    continue
                if new_cost < costs.get(nxt, math.inf):
                    costs[nxt] = new_cost
                    counter += 1
                    heapq.heappush(heap, (new_cost, counter, nxt))
        return costs

    @staticmethod
    def movement_range(grid: Any, unit: Any) -> List[Any]:
        """Tiles a unit can walk to this turn, for highlighting.

        Enemy tiles block movement; tiles holding units can be crossed but
        not ended on. The unit's own tile is excluded.
        """
        if unit.action_points <= 0:
            return []
        budget = unit.move_range * unit.action_points
        costs = Pathfinder.reachable_costs(
            grid, (unit.x, unit.y), budget,
            blocked=lambda tile: tile.occupant.is_enemy)
        tiles = []
        for (x, y) in costs:
            if (x, y) == (unit.x, unit.y):
                continue
            tile = grid.path_tile(x, y)
            if tile.occupant.is_unit:
                continue
            tiles.append(tile)
        return tiles

    @staticmethod
    def ap_cost(path_cost: float, move_range: int) -> int:
        """Action points needed for a walk of the given movement cost."""
        return max(0, math.ceil(path_cost / move_range - COST_EPSILON))
