"""
Power-ups and timed buffs for Breakout.

Timed buffs are expiry timestamps polled against the game clock every tick;
re-collecting one overwrites its expiry rather than stacking duration.
Shield is a charge counter.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Optional

from . import tuning
from .entities import Ball, PowerUpType
from .utils import clamp, rand

if TYPE_CHECKING:
    from .breakout_env import BreakoutGame


@dataclass
class Buffs:
    """Active buff state of one Breakout session"""
    widen_until: float = 0.0
    slow_until: float = 0.0
    laser_until: float = 0.0
    laser_ammo: int = 0
    laser_cooldown: float = 0.0  # seconds
    shield_charges: int = 0

    def widen_active(self, now_ms: float) -> bool:
        return now_ms < self.widen_until

    def slow_active(self, now_ms: float) -> bool:
        return now_ms < self.slow_until

    def laser_active(self, now_ms: float) -> bool:
        return now_ms < self.laser_until

    def tick(self, dt: float):
        self.laser_cooldown = max(0.0, self.laser_cooldown - dt)

    def can_fire(self, now_ms: float) -> bool:
        return self.laser_active(now_ms) and self.laser_ammo > 0 and self.laser_cooldown <= 0


def roll_drop(rng, difficulty: str) -> Optional[PowerUpType]:
    """Roll whether a destroyed brick drops a power-up, and which one"""
    if rng.random() > tuning.DROP_CHANCE[difficulty]:
        return None
    roll = rng.random()
    for bound, name in tuning.DROP_WEIGHTS:
        if roll < bound:
            return PowerUpType(name)
    return PowerUpType.LASER


def target_paddle_width(buffs: Buffs, now_ms: float, difficulty: str) -> float:
    if buffs.widen_active(now_ms):
        return clamp(tuning.PADDLE_BASE_WIDTH + tuning.WIDEN_BONUS, tuning.WIDEN_MIN, tuning.WIDEN_MAX)
    return tuning.BREAKOUT_DIFFICULTY[difficulty]["paddle_w"]


# ----------------------------
# Effect handlers
# ----------------------------

def _widen(game: "BreakoutGame", now_ms: float):
    game.session.buffs.widen_until = now_ms + tuning.WIDEN_MS


def _slow(game: "BreakoutGame", now_ms: float):
    game.session.buffs.slow_until = now_ms + tuning.SLOW_MS


def _shield(game: "BreakoutGame", now_ms: float):
    buffs = game.session.buffs
    buffs.shield_charges = int(clamp(buffs.shield_charges + 1, 0, tuning.SHIELD_MAX))


def _laser(game: "BreakoutGame", now_ms: float):
    buffs = game.session.buffs
    buffs.laser_until = now_ms + tuning.LASER_MS
    buffs.laser_ammo = int(clamp(buffs.laser_ammo + tuning.LASER_AMMO_GRANT, 0, tuning.LASER_AMMO_MAX))


def _multi(game: "BreakoutGame", now_ms: float):
    balls = game.session.balls
    if not balls or len(balls) >= tuning.MAX_BALLS:
        return

    to_spawn = 2 if len(balls) == 1 and tuning.MAX_BALLS >= 3 else 1
    spawn_count = int(clamp(to_spawn, 1, tuning.MAX_BALLS - len(balls)))

    base = balls[0]
    for _ in range(spawn_count):
        angle = rand(game.rng, -tuning.MULTI_ANGLE, tuning.MULTI_ANGLE)
        speed = game.ball_speed()
        balls.append(Ball(
            x=base.x,
            y=base.y,
            r=base.r,
            vx=math.sin(angle) * speed,
            vy=-math.cos(angle) * speed,
        ))


POWER_UP_HANDLERS: Dict[PowerUpType, Callable[["BreakoutGame", float], None]] = {
    PowerUpType.WIDEN: _widen,
    PowerUpType.SLOW: _slow,
    PowerUpType.MULTI: _multi,
    PowerUpType.LASER: _laser,
    PowerUpType.SHIELD: _shield,
}


def apply_power_up(game: "BreakoutGame", kind: PowerUpType, now_ms: float):
    POWER_UP_HANDLERS[kind](game, now_ms)
