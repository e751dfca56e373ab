"""
Persistent high scores and leaderboards.

``KeyValueStore`` keeps string values in one JSON file, the way the browser
build keeps them in local storage. ``ScoreBook`` is the bridge the games call
on game over: ``record_score`` and ``best_score``. Unreadable or malformed
data is discarded and replaced with defaults; it never stops a game.
"""

from __future__ import annotations
import json
import logging
import os
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional

from . import tuning
from .intent import BACK, CONFIRM, DOWN, ERASE, LEFT, RIGHT, UP, InputIntent

logger = logging.getLogger(__name__)


class KeyValueStore:
    """String key/value map persisted as a JSON object on disk"""

    def __init__(self, path: Optional[str] = None):
        self.path = path
        self._data: Dict[str, str] = {}
        self.load()

    def load(self):
        self._data = {}
        if self.path is None or not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Discarding unreadable store %s: %s", self.path, e)
            return
        if not isinstance(data, dict):
            logger.warning("Discarding store %s: expected a JSON object", self.path)
            return
        self._data = {str(k): v for k, v in data.items() if isinstance(v, str)}

    def save(self):
        if self.path is None:
            return
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2)
        except OSError as e:
            logger.warning("Could not write store %s: %s", self.path, e)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._data.get(key, default)

    def set(self, key: str, value: str):
        self._data[key] = value
        self.save()

    def remove(self, key: str):
        if self._data.pop(key, None) is not None:
            self.save()


@dataclass
class LeaderboardEntry:
    initials: str
    score: int


def normalize_initials(initials: str) -> str:
    """Uppercase, trimmed to 3 characters, padded with '-'"""
    text = "".join(ch for ch in str(initials).upper() if not ch.isspace())
    return text[:tuning.INITIALS_LEN].ljust(tuning.INITIALS_LEN, "-")


class ScoreBook:
    """Best score and top-N leaderboard of one game.

    Keys are versioned so a future format change does not collide with
    older saved data.
    """

    def __init__(self, store: KeyValueStore, best_key: str, table_key: str,
                 size: int = tuning.LEADERBOARD_SIZE):
        self.store = store
        self.best_key = best_key
        self.table_key = table_key
        self.size = size
        self._best = self._load_best()
        self._table = self._load_table()

    @classmethod
    def for_breakout(cls, store: KeyValueStore) -> "ScoreBook":
        return cls(store, "tenebris_breakout_best_v3", "tenebris_breakout_table_v3")

    @classmethod
    def for_snake(cls, store: KeyValueStore) -> "ScoreBook":
        return cls(store, "tenebris_snake_best_v1", "tenebris_snake_table_v1")

    def _load_best(self) -> int:
        raw = self.store.get(self.best_key, "0")
        try:
            return max(0, int(raw))
        except (TypeError, ValueError):
            logger.warning("Discarding malformed best score %r", raw)
            return 0

    def _load_table(self) -> List[LeaderboardEntry]:
        raw = self.store.get(self.table_key)
        if raw is None:
            return []
        try:
            rows = json.loads(raw)
        except ValueError:
            logger.warning("Discarding malformed leaderboard under %s", self.table_key)
            return []
        if not isinstance(rows, list):
            logger.warning("Discarding malformed leaderboard under %s", self.table_key)
            return []

        table = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            initials, score = row.get("initials"), row.get("score")
            if not isinstance(initials, str) or isinstance(score, bool) or not isinstance(score, int):
                continue
            table.append(LeaderboardEntry(normalize_initials(initials), max(0, score)))
        table.sort(key=lambda e: e.score, reverse=True)
        return table[:self.size]

    def best_score(self) -> int:
        return max([self._best] + [e.score for e in self._table])

    def leaderboard(self) -> List[LeaderboardEntry]:
        return list(self._table)

    def qualifies(self, score: int) -> bool:
        """Would ``score`` earn a leaderboard slot"""
        return len(self._table) < self.size or score > self._table[-1].score

    def submit_best(self, score: int) -> bool:
        """Raise the stored best score; True when it changed"""
        score = max(0, int(score))
        if score <= self._best:
            return False
        self._best = score
        self.store.set(self.best_key, str(score))
        return True

    def record_score(self, initials: str, score: int) -> List[LeaderboardEntry]:
        """Insert into the top-N table (sorted descending) and persist"""
        score = max(0, int(score))
        self._table.append(LeaderboardEntry(normalize_initials(initials), score))
        # stable sort keeps earlier entries ahead on ties
        self._table.sort(key=lambda e: e.score, reverse=True)
        del self._table[self.size:]
        self.store.set(self.table_key, json.dumps([asdict(e) for e in self._table]))
        self.submit_best(score)
        return self.leaderboard()


class InitialsEntry:
    """
    3-letter initials entry used after a game ends.

    Left/right move the cursor, up/down cycle the letter A..Z, confirm
    returns the initials, back cancels.
    """

    def __init__(self, default: str = "AAA"):
        default = normalize_initials(default).replace("-", "A")
        self.letters = [ch if "A" <= ch <= "Z" else "A" for ch in default]
        self.idx = 0

    @property
    def text(self) -> str:
        return "".join(self.letters)

    def move(self, step: int):
        self.idx = max(0, min(len(self.letters) - 1, self.idx + step))

    def cycle(self, step: int):
        c = ord(self.letters[self.idx]) - ord("A")
        self.letters[self.idx] = chr(ord("A") + (c + step) % 26)

    def type_letter(self, ch: str):
        ch = ch.upper()
        if len(ch) == 1 and "A" <= ch <= "Z":
            self.letters[self.idx] = ch
            self.move(1)

    def feed(self, intent: InputIntent) -> Optional[str]:
        """Apply one tick of input. Returns CONFIRM or BACK when the entry ends"""
        for ch in intent.text:
            self.type_letter(ch)
        # typed letters may also be bound to movement keys
        if not intent.text:
            if intent.was_pressed(LEFT):
                self.move(-1)
            if intent.was_pressed(RIGHT):
                self.move(1)
        if intent.was_pressed(ERASE):
            self.move(-1)
        if intent.was_pressed(UP):
            self.cycle(1)
        if intent.was_pressed(DOWN):
            self.cycle(-1)
        if intent.was_pressed(CONFIRM):
            return CONFIRM
        if intent.was_pressed(BACK):
            return BACK
        return None
