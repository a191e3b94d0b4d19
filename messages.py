from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


@dataclass
class _Channel:
    texts: Sequence[str]
    every_ms: float
    show_ms: float
    until_next_ms: float
    visible_for_ms: float = 0.0
    text: Optional[str] = None


class MessageFlicker:
    """Haunting text and subliminal flashes on a per-level random cadence.

    Each channel draws its interval once when armed and then repeats it,
    showing a random line for a fixed time. Driven by update(dt) from the
    frame loop; nothing advances while disarmed.
    """

    def __init__(
        self,
        haunting: Sequence[str],
        subliminal: Sequence[str],
        rng: random.Random,
        haunting_every_ms: Tuple[int, int] = (8000, 15000),
        haunting_show_ms: int = 3000,
        subliminal_every_ms: Tuple[int, int] = (15000, 35000),
        subliminal_show_ms: int = 200,
    ) -> None:
        self.rng = rng
        self._haunting_texts = tuple(haunting)
        self._subliminal_texts = tuple(subliminal)
        self._haunting_every = haunting_every_ms
        self._haunting_show = haunting_show_ms
        self._subliminal_every = subliminal_every_ms
        self._subliminal_show = subliminal_show_ms
        self.haunting: Optional[_Channel] = None
        self.subliminal: Optional[_Channel] = None

    def arm(self) -> None:
        self.haunting = self._new_channel(self._haunting_texts, self._haunting_every, self._haunting_show)
        self.subliminal = self._new_channel(
            self._subliminal_texts, self._subliminal_every, self._subliminal_show
        )

    def disarm(self) -> None:
        self.haunting = None
        self.subliminal = None

    def _new_channel(self, texts: Sequence[str], every: Tuple[int, int], show: int) -> Optional[_Channel]:
        if not texts:
            return None
        interval = self.rng.uniform(every[0], every[1])
        return _Channel(texts=texts, every_ms=interval, show_ms=float(show), until_next_ms=interval)

    def update(self, dt_ms: float) -> None:
        for channel in (self.haunting, self.subliminal):
            if channel is not None:
                self._advance(channel, dt_ms)

    def _advance(self, ch: _Channel, dt_ms: float) -> None:
        if ch.visible_for_ms > 0:
            ch.visible_for_ms -= dt_ms
            if ch.visible_for_ms <= 0:
                ch.text = None
        ch.until_next_ms -= dt_ms
        if ch.until_next_ms <= 0:
            ch.until_next_ms += ch.every_ms
            ch.text = self.rng.choice(list(ch.texts))
            ch.visible_for_ms = ch.show_ms

    def haunting_text(self) -> Optional[str]:
        return self.haunting.text if self.haunting else None

    def subliminal_text(self) -> Optional[str]:
        return self.subliminal.text if self.subliminal else None
