"""
Tile-contextual actions: scavenging, salvage, doors, furniture and
building entry/exit.

`available_actions(tile)` builds the context menu for a tile;
`execute(action_id, x, y)` runs one. Every handler receives the target tile
and the acting unit (the selected unit if adjacent, else any adjacent
unit on the same grid), checks AP, pays it and rolls the outcome with the
game's seeded RNG. Failed guards post a message and return False.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from echoes_of_the_fall.config import UNLOCK_DOOR_CHANCE, UNLOCK_FURNITURE_CHANCE
from echoes_of_the_fall.core.logger import GameLogger, get_logger
from echoes_of_the_fall.core.state import ViewMode
from echoes_of_the_fall.world.interior import LOOT_TABLES, InteriorTerrain
from echoes_of_the_fall.world.terrain import TerrainType
from .combat import perform_attack
from .interiors import InteriorManager
from .resources import use_food, use_medicine, use_water

log = get_logger("interactions")

DIG_TERRAIN = (TerrainType.DIRT, TerrainType.SAND, TerrainType.MUD)


@dataclass(frozen=True)
class Action:
    action_id: str
    label: str
    cost: int
    description: str = ""


def roll_loot(table_name: str, rng) -> Tuple[Optional[str], int]:
    """Roll a named loot table. Returns (resource, amount); (None, 0) for nothing."""
    table = LOOT_TABLES[table_name]
    roll = rng.random()
    for band in table:
        if roll < band.chance:
            if band.resource is None:
                return None, 0
            low, high = band.amount
            return band.resource, rng.randint(low, high)
    return None, 0


def within_reach(entity: Any, tile: Any) -> bool:
    return abs(entity.x - tile.x) <= 1 and abs(entity.y - tile.y) <= 1


class InteractionSystem:
    """Dispatches context actions against the current grid."""

    def __init__(self, state: Any, interiors: Optional[InteriorManager] = None):
        self.state = state
        self.interiors = interiors or InteriorManager(state)
        self.handlers: Dict[str, Callable[[Any, Any], bool]] = {
            "attack": self.attack,
            "collect_water": self.collect_water,
            "harvest_wood": self.harvest_wood,
            "search_building": self.search_building,
            "salvage_chemicals": self.salvage_chemicals,
            "salvage_vehicle": self.salvage_vehicle,
            "search_debris": self.search_debris,
            "search_ground": self.search_ground,
            "dig": self.dig,
            "enter_building": self.enter_building,
            "exit_building": self.exit_building,
            "exit_window": self.exit_window,
            "search_furniture": self.search_furniture,
            "search_furniture_again": self.search_furniture_again,
            "unlock_door": self.unlock_door,
            "break_door": self.break_door,
            "open_door": self.open_door,
            "close_door": self.close_door,
            "unlock_furniture": self.unlock_furniture,
            "break_furniture": self.break_furniture,
        }
        self.consumables: Dict[str, Callable[[Any, Any], bool]] = {
            "use_water": use_water,
            "use_food": use_food,
            "use_medicine": use_medicine,
        }

    # ------------------------------------------------------------------
    # Target resolution
    # ------------------------------------------------------------------

    @property
    def indoors(self) -> bool:
        return self.state.view_mode is ViewMode.INDOOR

    def tile_at(self, x: int, y: int) -> Any:
        """A tile on the grid currently in view."""
        if self.indoors:
            return self.state.current_interior.get_tile(x, y)
        return self.state.world.get_ready_tile(x, y)

    def units_in_view(self) -> List[Any]:
        state = self.state
        if self.indoors:
            key = state.current_interior.cache_key
            return [u for u in state.unit_list if state.units_indoors.get(u.id) == key]
        return [u for u in state.unit_list if not state.is_indoors(u)]

    def find_adjacent_unit(self, tile: Any) -> Optional[Any]:
        candidates = self.units_in_view()
        selected = self.state.selected_unit
        if selected is not None and selected in candidates and within_reach(selected, tile):
            return selected
        for unit in candidates:
            if within_reach(unit, tile):
                return unit
        return None

    # ------------------------------------------------------------------
    # Menu
    # ------------------------------------------------------------------

    def available_actions(self, tile: Any) -> List[Action]:
        if tile is None or self.find_adjacent_unit(tile) is None:
            return []
        if self.indoors:
            return self._indoor_actions(tile)
        return self._outdoor_actions(tile)

    def _outdoor_actions(self, tile: Any) -> List[Action]:
        if tile.occupant.is_enemy:
            enemy = self.state.resolve(tile.occupant)
            return [Action("attack", f"Attack {enemy.name}", 1,
                           f"{enemy.health:.0f}/{enemy.max_health:.0f} HP")]
        if tile.terrain is TerrainType.WATER:
            return [Action("collect_water", "Collect Water", 1, "Fill containers with water")]

        actions = []
        if tile.has_prop("Dead Tree"):
            actions.append(Action("harvest_wood", "Harvest Wood", 1, "Chop tree for scrap"))
        if tile.has_building:
            actions.append(Action("enter_building", "Enter Building", 1,
                                  "Explore the building interior"))
            actions.append(Action("search_building", "Search Outside", 2,
                                  "Quick search from outside"))
        if tile.has_prop("Toxic Barrel"):
            actions.append(Action("salvage_chemicals", "Salvage Chemicals", 1,
                                  "Extract chemicals (radiation risk!)"))
        if tile.has_prop("Car Wreck"):
            actions.append(Action("salvage_vehicle", "Salvage Parts", 2,
                                  "Scavenge vehicle for parts"))
        if tile.has_prop("Debris"):
            actions.append(Action("search_debris", "Search Debris", 1,
                                  "Dig through rubble for items"))

        if tile.is_passable and not actions:
            actions.append(Action("search_ground", "Search Area", 1,
                                  "Search the ground for resources"))
            if tile.terrain in DIG_TERRAIN:
                actions.append(Action("dig", "Dig", 2, "Dig for buried items"))
        return actions

    def _indoor_actions(self, tile: Any) -> List[Action]:
        actions = []
        if tile.is_exit:
            actions.append(Action("exit_building", "Exit Building", 1, "Return outside"))
        if tile.terrain is InteriorTerrain.WINDOW:
            actions.append(Action("exit_window", "Exit Through Window", 1,
                                  "Climb out through the window"))

        if tile.terrain is InteriorTerrain.DOOR_LOCKED:
            actions.append(Action("unlock_door", "Pick Lock", 1, "50% success"))
            actions.append(Action("break_door", "Break Door", 2, "Always succeeds"))
        elif tile.terrain is InteriorTerrain.DOOR_CLOSED:
            actions.append(Action("open_door", "Open Door", 0))
        elif tile.terrain is InteriorTerrain.DOOR_OPEN:
            actions.append(Action("close_door", "Close Door", 0))

        item = tile.furniture
        if item is not None:
            if item.searched:
                actions.append(Action("search_furniture_again", "Search Again", 1,
                                      "Lower chance"))
            elif item.kind.searchable and item.locked:
                actions.append(Action("unlock_furniture", f"Unlock {item.name}", 1,
                                      "60% success"))
                actions.append(Action("break_furniture", f"Break Open {item.name}", 2,
                                      "Always succeeds"))
            elif item.kind.searchable:
                actions.append(Action("search_furniture", f"Search {item.name}", 1,
                                      "Search for useful items"))
        return actions

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def execute(self, action_id: str, x: int, y: int) -> bool:
        if action_id in self.consumables:
            return self.use_consumable(action_id)
        if action_id not in self.handlers:
            raise KeyError(f"Unknown action: {action_id}")

        tile = self.tile_at(x, y)
        if tile is None:
            self.state.events.message("Nothing there")
            return False
        unit = self.find_adjacent_unit(tile)
        if unit is None:
            self.state.events.message("No unit nearby!")
            return False

        done = self.handlers[action_id](tile, unit)
        if done:
            GameLogger().log_event("ACTION", f"{unit.name} {action_id} at ({x}, {y})")
        return done

    def use_consumable(self, action_id: str) -> bool:
        unit = self.state.selected_unit
        if unit is None:
            self.state.events.message("Select a unit first")
            return False
        resource = action_id.split("_", 1)[1]
        if not self.consumables[action_id](self.state, unit):
            self.state.events.message(f"No {resource} left!")
            return False
        self.state.events.message(f"{unit.name} used {resource}")
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _pay(self, unit: Any, cost: int) -> bool:
        if not unit.spend_ap(cost):
            self.state.events.message("Not enough AP!")
            return False
        return True

    def _gain(self, kind: str, amount: int, text: str) -> None:
        self.state.resources.add(kind, amount)
        self.state.events.message(text)

    def _roll(self) -> float:
        return self.state.rng.random()

    def _amount(self, low: int, high: int) -> int:
        return self.state.rng.randint(low, high)

    # ------------------------------------------------------------------
    # Outdoor handlers
    # ------------------------------------------------------------------

    def attack(self, tile, unit) -> bool:
        enemy = self.state.resolve(tile.occupant)
        if enemy is None or not tile.occupant.is_enemy:
            self.state.events.message("No enemy here!")
            return False
        result = perform_attack(self.state, unit, enemy)
        if result is None:
            return False
        self.state.events.message(result.message)
        return True

    def collect_water(self, tile, unit) -> bool:
        if not self._pay(unit, 1):
            return False
        amount = self._amount(1, 2)
        self._gain("water", amount, f"Collected {amount} water!")
        return True

    def harvest_wood(self, tile, unit) -> bool:
        if not self._pay(unit, 1):
            return False
        amount = self._amount(2, 4)
        tile.remove_prop("Dead Tree")
        self._gain("scrap", amount, f"Harvested {amount} wood!")
        return True

    def search_building(self, tile, unit) -> bool:
        if not self._pay(unit, 2):
            return False
        roll = self._roll()
        if roll < 0.3:
            amount = self._amount(1, 2)
            self._gain("food", amount, f"Found {amount} food!")
        elif roll < 0.5:
            self._gain("medicine", 1, "Found 1 medicine!")
        elif roll < 0.7:
            amount = self._amount(1, 2)
            self._gain("water", amount, f"Found {amount} water!")
        elif roll < 0.9:
            amount = self._amount(2, 5)
            self._gain("scrap", amount, f"Found {amount} scrap!")
        else:
            self.state.events.message("Found nothing useful.")
        tile.times_searched += 1
        return True

    def salvage_chemicals(self, tile, unit) -> bool:
        if not self._pay(unit, 1):
            return False
        if self._roll() < 0.4:
            dose = self._amount(5, 14)
            unit.add_radiation(dose)
            self.state.events.message(f"Exposed to radiation! (+{dose} RAD)")
        if self._roll() < 0.6:
            self._gain("medicine", 1, "Salvaged chemical compounds! (+1 Medicine)")
        else:
            self._gain("scrap", 1, "Salvaged container for scrap.")
        tile.remove_prop("Toxic Barrel")
        return True

    def salvage_vehicle(self, tile, unit) -> bool:
        if not self._pay(unit, 2):
            return False
        amount = self._amount(3, 7)
        self._gain("scrap", amount, f"Salvaged {amount} scrap from vehicle!")
        if tile.times_salvaged == 0:
            tile.remove_prop("Car Wreck")
        tile.times_salvaged += 1
        return True

    def search_debris(self, tile, unit) -> bool:
        if not self._pay(unit, 1):
            return False
        roll = self._roll()
        if roll < 0.4:
            amount = self._amount(1, 2)
            self._gain("scrap", amount, f"Found {amount} scrap in debris!")
        elif roll < 0.5:
            self._gain("food", 1, "Found canned food!")
        else:
            self.state.events.message("Nothing useful in the rubble.")
        return True

    def search_ground(self, tile, unit) -> bool:
        if not self._pay(unit, 1):
            return False
        roll = self._roll()
        if roll < 0.15:
            self._gain("scrap", 1, "Found some scrap!")
        elif roll < 0.2:
            self._gain("food", 1, "Found edible plants!")
        else:
            self.state.events.message("Nothing here.")
        return True

    def dig(self, tile, unit) -> bool:
        if not self._pay(unit, 2):
            return False
        roll = self._roll()
        if roll < 0.2:
            amount = self._amount(2, 5)
            self._gain("scrap", amount, f"Dug up {amount} buried scrap!")
        elif roll < 0.3:
            self._gain("water", 1, "Found an underground water source!")
        elif roll < 0.35:
            self._gain("medicine", 1, "Dug up a buried med kit!")
        else:
            self.state.events.message("Just dirt.")
        return True

    # ------------------------------------------------------------------
    # Buildings
    # ------------------------------------------------------------------

    def enter_building(self, tile, unit) -> bool:
        return self.interiors.enter_building(unit, tile)

    def exit_building(self, tile, unit) -> bool:
        if not tile.is_exit:
            self.state.events.message("That is not an exit")
            return False
        return self.interiors.exit_building(unit, tile)

    def exit_window(self, tile, unit) -> bool:
        if tile.terrain is not InteriorTerrain.WINDOW:
            self.state.events.message("That is not a window")
            return False
        return self.interiors.exit_building(unit, tile, via_window=True)

    # ------------------------------------------------------------------
    # Doors
    # ------------------------------------------------------------------

    def _sync_door(self, tile) -> None:
        door = self.state.current_interior.door_at(tile.x, tile.y)
        if door is not None:
            door.locked = tile.terrain is InteriorTerrain.DOOR_LOCKED

    def unlock_door(self, tile, unit) -> bool:
        if tile.terrain is not InteriorTerrain.DOOR_LOCKED:
            self.state.events.message("That door isn't locked")
            return False
        if not self._pay(unit, 1):
            return False
        if self._roll() < UNLOCK_DOOR_CHANCE:
            tile.unlock()
            self._sync_door(tile)
            self.state.events.message("Lock picked successfully!")
        else:
            self.state.events.message("Failed to pick the lock.")
        return True

    def break_door(self, tile, unit) -> bool:
        if tile.terrain is not InteriorTerrain.DOOR_LOCKED:
            self.state.events.message("That door isn't locked")
            return False
        if not self._pay(unit, 2):
            return False
        tile.break_door()
        self._sync_door(tile)
        self.state.events.message("Door broken open!")
        return True

    def open_door(self, tile, unit) -> bool:
        if tile.terrain is not InteriorTerrain.DOOR_CLOSED:
            self.state.events.message("That door isn't closed")
            return False
        tile.toggle_door()
        self.state.events.message("Door opened.")
        return True

    def close_door(self, tile, unit) -> bool:
        if tile.terrain is not InteriorTerrain.DOOR_OPEN:
            self.state.events.message("That door isn't open")
            return False
        if not tile.occupant.is_empty:
            self.state.events.message("Something is in the way")
            return False
        tile.toggle_door()
        self.state.events.message("Door closed.")
        return True

    # ------------------------------------------------------------------
    # Furniture
    # ------------------------------------------------------------------

    def search_furniture(self, tile, unit) -> bool:
        item = tile.furniture
        if item is None or not item.kind.searchable:
            self.state.events.message("Nothing to search here.")
            return False
        if item.locked:
            self.state.events.message("This is locked! Unlock it first.")
            return False
        if item.searched:
            self.state.events.message("Already searched.")
            return False
        if not self._pay(unit, 1):
            return False

        kind, amount = roll_loot(item.kind.loot_table, self.state.rng)
        if kind is not None and amount > 0:
            self._gain(kind, amount, f"Found {amount} {kind}!")
        else:
            self.state.events.message("Nothing useful here.")
        item.searched = True
        return True

    def search_furniture_again(self, tile, unit) -> bool:
        item = tile.furniture
        if item is None or not item.searched:
            self.state.events.message("Search it first.")
            return False
        if not self._pay(unit, 1):
            return False
        if self._roll() < 0.3:
            amount = self._amount(1, 2)
            self._gain("scrap", amount, f"Found {amount} scrap!")
        else:
            self.state.events.message("Nothing more here.")
        return True

    def unlock_furniture(self, tile, unit) -> bool:
        item = tile.furniture
        if item is None or not item.locked:
            self.state.events.message("Nothing locked here.")
            return False
        if not self._pay(unit, 1):
            return False
        if self._roll() < UNLOCK_FURNITURE_CHANCE:
            tile.unlock()
            self.state.events.message(f"Unlocked the {item.name}!")
        else:
            self.state.events.message("Failed to unlock.")
        return True

    def break_furniture(self, tile, unit) -> bool:
        item = tile.furniture
        if item is None or not item.locked:
            self.state.events.message("Nothing locked here.")
            return False
        if not self._pay(unit, 2):
            return False
        item.locked = False
        self.state.events.message(f"Forced open the {item.name}!")
        return True
