"""
Utility functions for game mechanics
"""

from __future__ import annotations
import random
from typing import Callable, List, Optional, TypeVar

import numpy as np

from .entities import Rect

T = TypeVar("T")


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp value between low and high bounds"""
    return lo if x < lo else hi if x > hi else x


def rand(rng, lo: float, hi: float) -> float:
    """Uniform float in [lo, hi) drawn from ``rng``"""
    return rng.random() * (hi - lo) + lo


def rect_intersects(a: Rect, b: Rect) -> bool:
    """Strict axis-aligned overlap (touching edges do not count)"""
    return a.x < b.x + b.w and a.x + a.w > b.x and a.y < b.y + b.h and a.y + a.h > b.y


def circle_box(x: float, y: float, r: float) -> Rect:
    """Bounding box of a circle"""
    return Rect(x - r, y - r, r * 2, r * 2)


def compact(items: List[T], keep: Callable[[T], bool]) -> None:
    """Remove items failing ``keep`` in place, preserving order.

    Avoids rebuilding the list every tick.
    """
    j = 0
    for item in items:
        if keep(item):
            items[j] = item
            j += 1
    del items[j:]


def seed_everything(py_seed: Optional[int]):
    """Seed all random number generators"""
    if py_seed is None:
        return
    random.seed(py_seed)
    np.random.seed(py_seed)
