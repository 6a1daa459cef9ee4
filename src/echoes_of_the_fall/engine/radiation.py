from typing import Any

from echoes_of_the_fall.config import ARS_DRAIN, DOSE_PER_TURN, MOVE_DOSE_FACTOR


def apply_radiation(state: Any, unit: Any) -> float:
    """End-of-turn exposure from the unit's tile, then ARS effects. Returns the dose."""
    dose = 0.0
    if not state.is_indoors(unit):
        tile = state.world.get_ready_tile(unit.x, unit.y)
        if tile is not None and tile.radiation_level > 0:
            dose = tile.radiation_level * DOSE_PER_TURN
            unit.add_radiation(dose)
    apply_ars_effects(state, unit)
    return dose


def apply_ars_effects(state: Any, unit: Any) -> int:
    """HP drain and max-AP loss for the unit's current stage. Returns damage dealt."""
    drain = ARS_DRAIN.get(unit.ars_stage, 0)
    if drain:
        state.damage_unit(unit, drain, cause="radiation sickness")
    unit.suffer_ars()
    return drain


def movement_dose(tile: Any) -> float:
    """Dose for walking through a tile."""
    return tile.radiation_level * DOSE_PER_TURN * MOVE_DOSE_FACTOR
