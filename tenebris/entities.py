"""
Game entity dataclasses
"""

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from . import tuning


@dataclass
class Rect:
    """Axis-aligned rectangle, y grows downwards"""
    x: float
    y: float
    w: float
    h: float


@dataclass
class Paddle:
    """Player paddle; ``w`` eases toward the buff-driven target width"""
    x: float = 0.0
    y: float = 0.0
    w: float = float(tuning.PADDLE_BASE_WIDTH)
    h: float = float(tuning.PADDLE_HEIGHT)
    speed: float = float(tuning.PADDLE_SPEED)  # px/s

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.w, self.h)

    @property
    def center_x(self) -> float:
        return self.x + self.w / 2


@dataclass
class Ball:
    """Ball entity. A stuck ball rides on the paddle until launched"""
    x: float
    y: float
    r: float = 7.0
    vx: float = 0.0
    vy: float = 0.0
    stuck_to_paddle: bool = False


@dataclass
class Brick:
    """Brick; hp <= 0 marks a destroyed brick kept until the next layout"""
    rect: Rect
    hp: int = 1
    points: int = 10

    @property
    def alive(self) -> bool:
        return self.hp > 0


class PowerUpType(str, Enum):
    WIDEN = "WIDEN"
    SLOW = "SLOW"
    MULTI = "MULTI"
    LASER = "LASER"
    SHIELD = "SHIELD"


@dataclass
class PowerUpDrop:
    """Falling power-up capsule"""
    x: float
    y: float
    type: PowerUpType
    r: float = 11.0
    vy: float = 220.0  # px/s


@dataclass
class Laser:
    """Laser bolt fired upwards from the paddle"""
    x: float
    y: float
    vy: float = -880.0  # px/s
    alive: bool = True

    @property
    def rect(self) -> Rect:
        return Rect(self.x - 2, self.y - 10, 4, 12)


class GameEvent(str, Enum):
    """Things that happened during a tick, for sound and scoring hooks"""
    LAUNCH = "launch"
    WALL_BOUNCE = "wall_bounce"
    PADDLE_BOUNCE = "paddle_bounce"
    BRICK_HIT = "brick_hit"
    BRICK_DESTROYED = "brick_destroyed"
    POWERUP_SPAWNED = "powerup_spawned"
    POWERUP_CAUGHT = "powerup_caught"
    LASER_FIRED = "laser_fired"
    SHIELD_USED = "shield_used"
    LIFE_LOST = "life_lost"
    LEVEL_UP = "level_up"
    FOOD_EATEN = "food_eaten"
    GAME_OVER = "game_over"
    PAUSED = "paused"
    RESUMED = "resumed"


class Cell(NamedTuple):
    """Snake grid cell"""
    x: int
    y: int


class Direction(Enum):
    UP = (0, -1)
    RIGHT = (1, 0)
    DOWN = (0, 1)
    LEFT = (-1, 0)

    @property
    def opposite(self) -> "Direction":
        dx, dy = self.value
        return Direction((-dx, -dy))
