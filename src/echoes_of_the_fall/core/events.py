"""
Event Bus: decoupled notifications between the simulation and its
presentation layer.

The simulation never talks to a HUD directly. Systems emit events
(a unit died, an enemy spawned, a search found loot) and any number of
listeners subscribe to them. Guard rejections and loot reports travel as
MESSAGE events, which a HUD shows as transient text.

Usage:
    from echoes_of_the_fall.core.events import EventBus, EventType

    bus = EventBus()
    bus.subscribe(EventType.MESSAGE.value, lambda event: print(event.text))
    bus.message("Not enough AP")
    bus.process(turn=1)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from .logger import GameLogger, get_logger

log = get_logger("events")

EVENT_HISTORY_CAP = 200


class EventType(Enum):
    """Categories of events in the game."""
    UNIT_MOVED = "unit_moved"
    UNIT_DIED = "unit_died"
    ENEMY_SPAWNED = "enemy_spawned"
    ENEMY_DIED = "enemy_died"
    COMBAT = "combat"
    CARD_PLAYED = "card_played"
    TURN_ENDED = "turn_ended"
    GAME_OVER = "game_over"
    BUILDING_ENTERED = "building_entered"
    BUILDING_EXITED = "building_exited"
    MESSAGE = "message"


@dataclass
class Event:
    """A single thing that happened."""
    event_type: str                     # EventType value
    origin: Optional[Tuple[int, int]] = None
    data: Dict[str, Any] = field(default_factory=dict)
    turn: int = 0

    @property
    def text(self) -> str:
        return self.data.get("text", self.event_type)


class EventBus:
    """Central event dispatcher."""

    def __init__(self) -> None:
        self.pending: List[Event] = []
        self.history: List[Event] = []
        self._listeners: Dict[str, List[Callable]] = {}
        self._history_cap: int = EVENT_HISTORY_CAP

    def emit(self, event: Event) -> None:
        """Queue an event for the next process() call."""
        self.pending.append(event)

    def message(self, text: str, origin: Optional[Tuple[int, int]] = None) -> None:
        """Queue a transient user-facing message."""
        GameLogger().log_event("MSG", text)
        self.emit(Event(EventType.MESSAGE.value, origin=origin, data={"text": text}))

    def subscribe(self, event_type: str, callback: Callable) -> None:
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        self._listeners[event_type].append(callback)

    def process(self, turn: int = 0) -> List[Event]:
        """Deliver all pending events to listeners and archive them."""
        events = list(self.pending)
        self.pending = []

        for event in events:
            event.turn = turn
            for callback in self._listeners.get(event.event_type, []):
                try:
                    callback(event)
                except Exception as e:
                    log.warning("Listener error for %s: %s", event.event_type, e)
            self.history.append(event)

        if len(self.history) > self._history_cap:
            self.history = self.history[-self._history_cap:]
        return events

    def drain_messages(self) -> List[str]:
        """Pending and processed MESSAGE texts, oldest first; clears pending."""
        processed = self.process()
        return [e.text for e in processed if e.event_type == EventType.MESSAGE.value]

    def get_recent_events(self, n: int = 10,
                          event_type: Optional[str] = None) -> List[Event]:
        if event_type:
            filtered = [e for e in self.history if e.event_type == event_type]
            return filtered[-n:]
        return self.history[-n:]

    def last_message(self) -> Optional[str]:
        """Most recent message, whether processed yet or not."""
        for event in reversed(self.pending):
            if event.event_type == EventType.MESSAGE.value:
                return event.text
        for event in reversed(self.history):
            if event.event_type == EventType.MESSAGE.value:
                return event.text
        return None
