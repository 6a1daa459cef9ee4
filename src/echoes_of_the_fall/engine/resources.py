from typing import Any, Dict, List

from echoes_of_the_fall.config import (
    FOOD_RESTORE, HUNGER_DAMAGE_EMPTY, HUNGER_DAMAGE_LOW, HUNGER_LOW,
    HYDRATION_DECAY, LOW_FOOD_WARNING, LOW_WATER_WARNING, MEDICINE_HEAL,
    NUTRITION_DECAY, THIRST_DAMAGE_EMPTY, THIRST_DAMAGE_LOW, THIRST_LOW,
    WATER_RESTORE,
)


def consume_resources(state: Any) -> None:
    """Per-turn thirst and hunger for every unit."""
    for unit in state.unit_list:
        unit.adjust_hydration(-HYDRATION_DECAY)
        unit.adjust_nutrition(-NUTRITION_DECAY)

        if unit.hydration <= 0:
            state.damage_unit(unit, THIRST_DAMAGE_EMPTY, cause="dehydration")
        elif unit.hydration < THIRST_LOW:
            state.damage_unit(unit, THIRST_DAMAGE_LOW, cause="dehydration")
        if not unit.is_alive:
            continue

        if unit.nutrition <= 0:
            state.damage_unit(unit, HUNGER_DAMAGE_EMPTY, cause="starvation")
        elif unit.nutrition < HUNGER_LOW:
            state.damage_unit(unit, HUNGER_DAMAGE_LOW, cause="starvation")


def use_water(state: Any, unit: Any) -> bool:
    if not state.resources.spend("water"):
        return False
    unit.adjust_hydration(WATER_RESTORE)
    return True


def use_food(state: Any, unit: Any) -> bool:
    if not state.resources.spend("food"):
        return False
    unit.adjust_nutrition(FOOD_RESTORE)
    return True


def use_medicine(state: Any, unit: Any) -> bool:
    if not state.resources.spend("medicine"):
        return False
    unit.heal(MEDICINE_HEAL)
    return True


def resource_warnings(state: Any) -> List[str]:
    res = state.resources
    warnings = []
    if res.water < LOW_WATER_WARNING:
        warnings.append("Water supplies critical!")
    if res.food < LOW_FOOD_WARNING:
        warnings.append("Food supplies low!")
    if res.medicine == 0:
        warnings.append("No medicine remaining!")
    return warnings


def resource_status(state: Any) -> Dict[str, Any]:
    return {"resources": state.resources.to_dict(), "warnings": resource_warnings(state)}
