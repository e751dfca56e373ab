"""
Input funnelling.

Window callbacks push raw events into an ``InputQueue``. At the top of each
tick the game drains the queue through an ``IntentSampler`` into one
immutable ``InputIntent`` snapshot, so input never interleaves with the
simulation step.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, FrozenSet, Iterable, List, Optional

# Actions
LEFT = "left"
RIGHT = "right"
UP = "up"
DOWN = "down"
LAUNCH = "launch"
FIRE = "fire"
PAUSE = "pause"
CONFIRM = "confirm"
BACK = "back"
ERASE = "erase"

DESKTOP_KEY_MODES = ("ad", "arrows", "both")

# Event kinds
KEY_DOWN = "key_down"
KEY_UP = "key_up"
POINTER_DOWN = "pointer_down"
POINTER_MOVE = "pointer_move"
POINTER_UP = "pointer_up"
TOUCH_HOLD = "touch_hold"
TEXT = "text"


def breakout_bindings(desktop_keys: str = "ad") -> Dict[str, str]:
    """Map raw key names to actions for the chosen desktop key mode"""
    if desktop_keys not in DESKTOP_KEY_MODES:
        raise ValueError(f"Unknown desktop key mode: {desktop_keys}")
    bindings = {
        "space": LAUNCH, "f": FIRE, "p": PAUSE, "up": UP, "down": DOWN,
        "enter": CONFIRM, "escape": BACK, "backspace": ERASE,
    }
    if desktop_keys in ("ad", "both"):
        bindings.update({"a": LEFT, "d": RIGHT})
    if desktop_keys in ("arrows", "both"):
        bindings.update({"left": LEFT, "right": RIGHT})
    return bindings


def snake_bindings() -> Dict[str, str]:
    return {
        "up": UP, "down": DOWN, "left": LEFT, "right": RIGHT,
        "p": PAUSE, "enter": CONFIRM, "space": CONFIRM, "escape": BACK,
        "backspace": ERASE,
    }


@dataclass(frozen=True)
class InputEvent:
    kind: str
    key: Optional[str] = None
    x: Optional[float] = None
    held: bool = False


@dataclass(frozen=True)
class InputIntent:
    """Per-tick input snapshot"""
    left: bool = False
    right: bool = False
    pressed: FrozenSet[str] = field(default_factory=frozenset)
    pointer_down_x: Optional[float] = None
    pointer_x: Optional[float] = None
    pointer_up: bool = False
    text: str = ""

    def was_pressed(self, action: str) -> bool:
        return action in self.pressed

    @property
    def axis(self) -> int:
        """-1 left, 0 none or both, +1 right"""
        if self.left and not self.right:
            return -1
        if self.right and not self.left:
            return 1
        return 0


class InputQueue:
    """FIFO of raw input events, drained once per tick"""

    def __init__(self):
        self._events: Deque[InputEvent] = deque()

    def __len__(self):
        return len(self._events)

    def push(self, event: InputEvent):
        self._events.append(event)

    def key_down(self, key: str):
        self.push(InputEvent(KEY_DOWN, key=key.lower()))

    def key_up(self, key: str):
        self.push(InputEvent(KEY_UP, key=key.lower()))

    def pointer_down(self, x: float):
        self.push(InputEvent(POINTER_DOWN, x=x))

    def pointer_move(self, x: float):
        self.push(InputEvent(POINTER_MOVE, x=x))

    def pointer_up(self):
        self.push(InputEvent(POINTER_UP))

    def touch_hold(self, action: str, held: bool):
        self.push(InputEvent(TOUCH_HOLD, key=action, held=held))

    def text(self, chars: str):
        self.push(InputEvent(TEXT, key=chars))

    def drain(self) -> List[InputEvent]:
        events = list(self._events)
        self._events.clear()
        return events


class IntentSampler:
    """Folds drained events into held/pressed state.

    Held keys persist across ticks; a press counts once, auto-repeat of an
    already held key is ignored.
    """

    def __init__(self, bindings: Dict[str, str]):
        self.bindings = dict(bindings)
        self._keys_held: set = set()
        self._touch_held: set = set()

    def release_all(self):
        self._keys_held.clear()
        self._touch_held.clear()

    def sample(self, events: Iterable[InputEvent]) -> InputIntent:
        pressed = set()
        pointer_down_x = None
        pointer_x = None
        pointer_up = False
        text = []

        for ev in events:
            if ev.kind == KEY_DOWN:
                action = self.bindings.get(ev.key)
                if action is None:
                    continue
                if action not in self._keys_held:
                    pressed.add(action)
                self._keys_held.add(action)
            elif ev.kind == KEY_UP:
                action = self.bindings.get(ev.key)
                if action is not None:
                    self._keys_held.discard(action)
            elif ev.kind == TOUCH_HOLD:
                if ev.held:
                    if ev.key not in self._touch_held:
                        pressed.add(ev.key)
                    self._touch_held.add(ev.key)
                else:
                    self._touch_held.discard(ev.key)
            elif ev.kind == POINTER_DOWN:
                pointer_down_x = ev.x
                pointer_x = ev.x
            elif ev.kind == POINTER_MOVE:
                pointer_x = ev.x
            elif ev.kind == POINTER_UP:
                pointer_up = True
            elif ev.kind == TEXT:
                text.append(ev.key or "")

        held = self._keys_held | self._touch_held
        return InputIntent(
            left=LEFT in held,
            right=RIGHT in held,
            pressed=frozenset(pressed),
            pointer_down_x=pointer_down_x,
            pointer_x=pointer_x,
            pointer_up=pointer_up,
            text="".join(text),
        )
