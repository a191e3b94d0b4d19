from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, DefaultDict, List, Type

from models import ProgressSnapshot


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimerTick:
    remaining: int


@dataclass(frozen=True)
class TimerExpired:
    pass


@dataclass(frozen=True)
class LevelStarted:
    level: int
    has_timer: bool
    timer_seconds: int


@dataclass(frozen=True)
class Death:
    level: int  # level the player will replay
    penalty_applied: bool
    cause: str


@dataclass(frozen=True)
class LevelCompleted:
    level: int


@dataclass(frozen=True)
class Victory:
    pass


@dataclass(frozen=True)
class ProgressOffered:
    snapshot: ProgressSnapshot


@dataclass(frozen=True)
class ProgressCleared:
    pass


Handler = Callable[[Any], None]


class EventBus:
    """Synchronous publish/subscribe keyed by event class."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[type, List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: Type[Any], handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: Type[Any], handler: Handler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: Any) -> None:
        logger.debug("event %s", event)
        for handler in list(self._handlers.get(type(event), ())):
            handler(event)
