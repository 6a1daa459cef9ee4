"""
Cards: immutable templates, deck instances, and effect resolution.

Every card instance is always in exactly one of draw pile, hand or
discard pile, so their sizes always sum to the deck's original size.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from echoes_of_the_fall.config import DECK_COPIES, MAX_HAND_SIZE
from echoes_of_the_fall.core.events import Event, EventType
from echoes_of_the_fall.core.logger import get_logger
from echoes_of_the_fall.entities.enemy import Enemy
from echoes_of_the_fall.entities.modifiers import create_modifier

log = get_logger("cards")


class CardType(Enum):
    ACTION = "action"
    SKILL = "skill"
    ITEM = "item"
    EVENT = "event"


@dataclass(frozen=True)
class CardEffect:
    kind: str             # heal, move_bonus, ap_restore, damage, radiation_cure,
    value: float          # hydration, nutrition, scrap


@dataclass(frozen=True)
class CardTemplate:
    name: str
    card_type: CardType
    description: str
    cost: int
    effects: Tuple[CardEffect, ...]
    target_type: str = "self"         # self, unit, enemy


@dataclass
class Card:
    """One physical copy of a template."""
    id: int
    template: CardTemplate

    @property
    def name(self) -> str:
        return self.template.name

    @property
    def cost(self) -> int:
        return self.template.cost

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "type": self.template.card_type.value}


STARTER_CARDS: Tuple[CardTemplate, ...] = (
    CardTemplate("Sprint", CardType.ACTION, "+2 movement range this turn", 1,
                 (CardEffect("move_bonus", 2),)),
    CardTemplate("First Aid", CardType.ITEM, "Heal 25 HP", 1,
                 (CardEffect("heal", 25),)),
    CardTemplate("Scavenge", CardType.ACTION, "Gain 5 scrap", 1,
                 (CardEffect("scrap", 5),)),
    CardTemplate("Rad-Away", CardType.ITEM, "Remove 30 radiation", 1,
                 (CardEffect("radiation_cure", 30),)),
    CardTemplate("Purified Water", CardType.ITEM, "+40 hydration", 0,
                 (CardEffect("hydration", 40),)),
    CardTemplate("Canned Food", CardType.ITEM, "+30 nutrition", 0,
                 (CardEffect("nutrition", 30),)),
    CardTemplate("Second Wind", CardType.SKILL, "+1 AP", 0,
                 (CardEffect("ap_restore", 1),)),
    CardTemplate("Combat Stim", CardType.ITEM, "+2 AP, take 10 damage", 0,
                 (CardEffect("ap_restore", 2), CardEffect("damage", -10))),
    CardTemplate("Bandage", CardType.ITEM, "Heal 15 HP", 0,
                 (CardEffect("heal", 15),)),
    CardTemplate("Emergency Ration", CardType.ITEM, "+20 nutrition, +20 hydration", 1,
                 (CardEffect("nutrition", 20), CardEffect("hydration", 20))),
)

CARD_TEMPLATES: Dict[str, CardTemplate] = {t.name: t for t in STARTER_CARDS}


def apply_effect(state: Any, effect: CardEffect, unit: Any, target: Any = None) -> None:
    kind, value = effect.kind, effect.value
    if kind == "heal":
        unit.heal(value)
    elif kind == "move_bonus":
        unit.modifiers.add(create_modifier("sprint", value))
    elif kind == "ap_restore":
        unit.restore_ap(int(value))
    elif kind == "damage":
        # Negative damage hurts the card's user.
        if value < 0:
            state.damage_unit(unit, -value, cause="a combat stim")
        elif target is not None:
            if isinstance(target, Enemy):
                state.damage_enemy(target, value)
            else:
                state.damage_unit(target, value)
    elif kind == "radiation_cure":
        unit.cure_radiation(value)
    elif kind == "hydration":
        unit.adjust_hydration(value)
    elif kind == "nutrition":
        unit.adjust_nutrition(value)
    elif kind == "scrap":
        state.resources.add("scrap", int(value))
    else:
        raise ValueError(f"Unknown card effect: {kind}")


class Deck:
    """Draw pile, hand and discard pile for the party."""

    def __init__(self, rng):
        self.rng = rng
        self.draw_pile: List[Card] = []
        self.hand: List[Card] = []
        self.discard_pile: List[Card] = []
        self._next_id = 1

    @property
    def total(self) -> int:
        return len(self.draw_pile) + len(self.hand) + len(self.discard_pile)

    def init_cards(self, templates: Tuple[CardTemplate, ...] = STARTER_CARDS,
                   copies: int = DECK_COPIES) -> None:
        self.draw_pile, self.hand, self.discard_pile = [], [], []
        for _ in range(copies):
            for template in templates:
                self.draw_pile.append(Card(self._next_id, template))
                self._next_id += 1
        self.shuffle()

    def shuffle(self) -> None:
        """Fisher-Yates over the draw pile."""
        pile = self.draw_pile
        for i in range(len(pile) - 1, 0, -1):
            j = int(self.rng.random() * (i + 1))
            pile[i], pile[j] = pile[j], pile[i]

    def draw(self, count: int = 1) -> List[Card]:
        """Draw up to `count` cards. Draws past the hand limit go to the discard pile."""
        drawn = []
        for _ in range(count):
            if not self.draw_pile:
                if not self.discard_pile:
                    break
                self.draw_pile = self.discard_pile
                self.discard_pile = []
                self.shuffle()
            card = self.draw_pile.pop()
            if len(self.hand) < MAX_HAND_SIZE:
                self.hand.append(card)
                drawn.append(card)
            else:
                self.discard_pile.append(card)
        return drawn

    def find_in_hand(self, card_id: int) -> Optional[Card]:
        for card in self.hand:
            if card.id == card_id:
                return card
        return None

    def discard(self, card: Card) -> bool:
        if card not in self.hand:
            return False
        self.hand.remove(card)
        self.discard_pile.append(card)
        return True

    def play(self, state: Any, card: Card, unit: Any, target: Any = None) -> bool:
        """Pay the card's cost, resolve its effects in order, discard it."""
        if card not in self.hand:
            return False
        if unit is None:
            state.events.message("Select a unit first")
            return False
        if unit.action_points < card.cost:
            state.events.message(f"Not enough AP to play {card.name}")
            return False

        unit.spend_ap(card.cost)
        self.discard(card)
        for effect in card.template.effects:
            apply_effect(state, effect, unit, target)
            if not unit.is_alive:
                break
        log.info("%s played %s", unit.name, card.name)
        state.events.emit(Event(EventType.CARD_PLAYED.value, origin=(unit.x, unit.y),
                                data={"card": card.name, "unit_id": unit.id}))
        return True

    # ------------------------------------------------------------------
    # Save support
    # ------------------------------------------------------------------

    def restore(self, hand_names: List[str], discard_size: int) -> None:
        """Rebuild piles from a save: pull the hand by name, then fill the discard."""
        for name in hand_names:
            for card in self.draw_pile:
                if card.name == name:
                    self.draw_pile.remove(card)
                    self.hand.append(card)
                    break
            else:
                log.warning("Saved hand card %r not in deck", name)
        while len(self.discard_pile) < discard_size and self.draw_pile:
            self.discard_pile.append(self.draw_pile.pop())
