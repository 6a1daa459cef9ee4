"""
Enemy AI: one decision per enemy per end phase.

Each enemy looks for the nearest unit that is outdoors, picks a state
(flee when badly hurt, otherwise attack, chase or patrol by distance) and
acts on it. Distances are Chebyshev, matching 8-directional movement.
"""

from typing import Any, List, Optional, Tuple

from echoes_of_the_fall.config import (
    ENEMY_SPAWN_ATTEMPTS, ENEMY_SPAWN_MAX_DIST, ENEMY_SPAWN_MIN_DIST,
)
from echoes_of_the_fall.core.events import Event, EventType
from echoes_of_the_fall.core.logger import GameLogger
from echoes_of_the_fall.entities.enemy import AIState, Enemy
from .combat import resolve_combat
from .pathfinding import Pathfinder, chebyshev, euclidean


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def nearest_unit(state: Any, enemy: Enemy) -> Tuple[Optional[Any], Optional[int]]:
    best, best_dist = None, None
    for unit in state.unit_list:
        if state.is_indoors(unit):
            continue
        dist = chebyshev((enemy.x, enemy.y), (unit.x, unit.y))
        if best_dist is None or dist < best_dist:
            best, best_dist = unit, dist
    return best, best_dist


def update_enemies(state: Any) -> None:
    # Enemies can die mid-loop (e.g. a counterattack), so iterate a copy.
    for enemy in state.enemy_list:
        if enemy.id in state.enemies and not state.game_over:
            update_enemy(state, enemy)


def update_enemy(state: Any, enemy: Enemy) -> AIState:
    target, dist = nearest_unit(state, enemy)
    enemy.target_id = target.id if target else None
    ai_state = enemy.decide_state(dist)

    if ai_state is AIState.PATROL:
        _patrol(state, enemy)
    elif ai_state is AIState.CHASE:
        _move_toward(state, enemy, target.x, target.y)
    elif ai_state is AIState.ATTACK:
        resolve_combat(state, enemy, target)
    elif ai_state is AIState.FLEE:
        _flee(state, enemy, target)
    return ai_state


def _free(tile: Any) -> bool:
    return tile is not None and tile.is_passable and tile.occupant.is_empty


def _step(state: Any, enemy: Enemy, tile: Any) -> None:
    state.relocate(enemy, tile)
    enemy.move_to(tile.x, tile.y)


def _patrol(state: Any, enemy: Enemy) -> None:
    options = [t for t in state.world.neighbors(enemy.x, enemy.y) if _free(t)]
    if options:
        _step(state, enemy, state.rng.choice(options))


def _move_toward(state: Any, enemy: Enemy, x: int, y: int) -> bool:
    path = Pathfinder.find_path(state.world, (enemy.x, enemy.y), (x, y),
                                blocked=lambda tile: not tile.occupant.is_empty)
    if not path or len(path) < 2:
        return False
    # Never end on an occupied tile; stop short instead.
    for steps in range(min(enemy.move_range, len(path) - 1), 0, -1):
        if path[steps].occupant.is_empty:
            _step(state, enemy, path[steps])
            return True
    return False


def _flee(state: Any, enemy: Enemy, threat: Any) -> None:
    dx = _sign(enemy.x - threat.x)
    dy = _sign(enemy.y - threat.y)
    tile = state.world.get_ready_tile(enemy.x + dx, enemy.y + dy)
    if (dx or dy) and _free(tile):
        _step(state, enemy, tile)


def spawn_enemies(state: Any, count: int = 1) -> List[Enemy]:
    """Spawn raiders on the edge of the party's awareness."""
    outdoor = [u for u in state.unit_list if not state.is_indoors(u)]
    if not outdoor:
        return []
    cx = round(sum(u.x for u in outdoor) / len(outdoor))
    cy = round(sum(u.y for u in outdoor) / len(outdoor))

    spawned = []
    for _ in range(count):
        for _ in range(ENEMY_SPAWN_ATTEMPTS):
            x = cx + state.rng.randint(-ENEMY_SPAWN_MAX_DIST, ENEMY_SPAWN_MAX_DIST)
            y = cy + state.rng.randint(-ENEMY_SPAWN_MAX_DIST, ENEMY_SPAWN_MAX_DIST)
            tile = state.world.get_ready_tile(x, y)
            if not _free(tile) or tile.has_building:
                continue
            if any(euclidean((x, y), (u.x, u.y)) < ENEMY_SPAWN_MIN_DIST for u in outdoor):
                continue
            enemy = state.add_enemy(Enemy(state.new_enemy_id(), x, y))
            spawned.append(enemy)
            GameLogger().log_event("SPAWN", f"{enemy.name} #{enemy.id} at ({x}, {y})")
            state.events.message("A raider has appeared!")
            state.events.emit(Event(EventType.ENEMY_SPAWNED.value, origin=(x, y),
                                    data={"enemy_id": enemy.id}))
            break
    return spawned


def attack_range(state: Any, unit: Any, reach: int = 1) -> List[Any]:
    """Tiles holding enemies within `reach` of the unit."""
    tiles = []
    for dy in range(-reach, reach + 1):
        for dx in range(-reach, reach + 1):
            if dx == 0 and dy == 0:
                continue
            tile = state.world.peek_tile(unit.x + dx, unit.y + dy)
            if tile is not None and tile.occupant.is_enemy:
                tiles.append(tile)
    return tiles
