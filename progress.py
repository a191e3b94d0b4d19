from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Optional

from models import ProgressSnapshot


logger = logging.getLogger(__name__)


class ProgressFile:
    """Single-slot save file holding the latest ProgressSnapshot as JSON.

    Every failure is logged and reported as "nothing saved"; nothing here
    raises into the game loop.
    """

    def __init__(
        self,
        path: Path,
        max_age: timedelta = timedelta(days=7),
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.path = path
        self.max_age = max_age
        self._now = now

    def save(self, snapshot: ProgressSnapshot) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(snapshot.to_dict(), indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("failed to save progress to %s: %s", self.path, e)
            return False
        logger.debug("progress saved: %s", snapshot)
        return True

    def load(self) -> Optional[ProgressSnapshot]:
        if not self.path.exists():
            return None
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            snapshot = ProgressSnapshot.from_dict(raw)
            age = self._now() - datetime.fromisoformat(snapshot.timestamp)
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning("failed to load progress from %s: %s", self.path, e)
            return None

        if age >= self.max_age:
            logger.info("saved progress is %s old, discarding", age)
            return None
        logger.info("progress loaded: level %s", snapshot.level)
        return snapshot

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            logger.warning("failed to clear progress at %s: %s", self.path, e)
            return
        logger.info("progress cleared")
