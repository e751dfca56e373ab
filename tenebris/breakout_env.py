"""
Breakout - paddle, multi-ball and power-up brick breaker
---------------------------------------------------------
- BreakoutGame: the simulation controller. Owns one BreakoutSession and
  advances it one clamped tick per frame callback.
- BreakoutEnv: Gymnasium wrapper for headless runs and agents
- Rendering lives in tenebris.windows (Arcade), imported lazily

Coordinates are in view pixels with y growing downwards.

Quick test:
    python -m tenebris.breakout_env
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from . import tuning
from .clock import FrameClock, ManualClock, monotonic_ms
from .entities import Ball, Brick, GameEvent, Laser, Paddle, PowerUpDrop, Rect
from .intent import (
    BACK, CONFIRM, FIRE, LAUNCH, PAUSE,
    InputIntent, InputQueue, IntentSampler, breakout_bindings,
)
from .powerups import Buffs, apply_power_up, roll_drop, target_paddle_width
from .scores import InitialsEntry, ScoreBook
from .settings import Settings
from .utils import circle_box, clamp, compact, rand, rect_intersects, seed_everything


@dataclass
class BreakoutSession:
    """Everything one game owns; discarded on return to menu or a new game"""
    score: int = 0
    level: int = 1
    lives: int = 3
    paddle: Paddle = field(default_factory=Paddle)
    balls: List[Ball] = field(default_factory=list)
    bricks: List[Brick] = field(default_factory=list)
    drops: List[PowerUpDrop] = field(default_factory=list)
    lasers: List[Laser] = field(default_factory=list)
    buffs: Buffs = field(default_factory=Buffs)

    def bricks_left(self) -> int:
        return sum(1 for b in self.bricks if b.alive)


class BreakoutGame:
    """Breakout simulation controller"""

    def __init__(
        self,
        width: float = tuning.VIEW_WIDTH,
        height: float = tuning.VIEW_HEIGHT,
        difficulty: str = "normal",
        mode: str = "arcade",
        clock: Optional[Callable[[], float]] = None,
        rng=None,
        scores: Optional[ScoreBook] = None,
        settings: Optional[Settings] = None,
    ):
        if difficulty not in tuning.BREAKOUT_DIFFICULTY:
            raise ValueError(f"Unknown difficulty: {difficulty}")
        if mode not in tuning.BREAKOUT_MODES:
            raise ValueError(f"Unknown mode: {mode}")

        self.width = width
        self.height = height
        self.difficulty = difficulty
        self.mode = mode

        # clock() returns milliseconds; buff expiry is polled against it
        self.clock = clock or monotonic_ms
        self.rng = rng if rng is not None else random
        self.scores = scores
        self.settings = settings or Settings()

        self.frame_clock = FrameClock(tuning.MAX_STEP)
        self.queue = InputQueue()
        self.sampler = IntentSampler(breakout_bindings(self.settings.desktop_keys))

        self.screen = "menu"
        self.session = BreakoutSession()
        self.initials: Optional[InitialsEntry] = None

        self._dragging = False
        self._drag_offset_x = 0.0
        self._events: List[GameEvent] = []

        self.apply_difficulty_tuning()
        self.reset_round(full_reset_paddle=True)

    # ----------------------------
    # Session lifecycle
    # ----------------------------

    def start_game(self):
        tune = tuning.BREAKOUT_DIFFICULTY[self.difficulty]
        self.session = BreakoutSession(lives=tune["lives"])
        self.initials = None
        self._dragging = False
        self.sampler.release_all()

        self.apply_difficulty_tuning()
        self.reset_round(full_reset_paddle=True)
        self.build_level(self.session.level)

        self.screen = "playing"
        self.frame_clock.reset()

    def apply_difficulty_tuning(self):
        self.session.paddle.w = tuning.BREAKOUT_DIFFICULTY[self.difficulty]["paddle_w"]

    @property
    def base_ball_speed(self) -> float:
        return tuning.BREAKOUT_DIFFICULTY[self.difficulty]["ball_speed"]

    def ball_speed(self) -> float:
        """Launch speed; the slow buff scales it down while active"""
        if self.session.buffs.slow_active(self.clock()):
            return self.base_ball_speed * tuning.SLOW_FACTOR
        return self.base_ball_speed

    def reset_round(self, full_reset_paddle: bool):
        p = self.session.paddle
        if full_reset_paddle:
            p.x = (self.width - p.w) / 2
            p.y = self.height - tuning.PADDLE_FLOOR_OFFSET

        # One main ball, stuck
        self.session.balls = [Ball(
            x=p.center_x,
            y=p.y - tuning.BALL_RADIUS - tuning.STUCK_GAP,
            r=tuning.BALL_RADIUS,
            stuck_to_paddle=True,
        )]

    def launch_stuck_balls(self) -> bool:
        launched = False
        for b in self.session.balls:
            if not b.stuck_to_paddle:
                continue
            angle = rand(self.rng, -tuning.LAUNCH_ANGLE, tuning.LAUNCH_ANGLE)
            speed = self.ball_speed()
            b.vx = math.sin(angle) * speed
            b.vy = -math.cos(angle) * speed
            b.stuck_to_paddle = False
            launched = True
        if launched:
            self._events.append(GameEvent.LAUNCH)
        return launched

    def build_level(self, level: int):
        self.session.bricks = []

        cols = tuning.BRICK_COLS
        gap = tuning.BRICK_GAP
        margin_x = tuning.BRICK_MARGIN_X
        rows_base = tuning.BRICK_ROWS_BASE[self.mode]
        extra_rows = (level - 1) // 2 if self.mode == "arcade" else 0
        rows = int(clamp(rows_base + extra_rows, tuning.BRICK_ROWS_MIN, tuning.BRICK_ROWS_MAX))

        brick_w = math.floor((self.width - margin_x * 2 - gap * (cols - 1)) / cols)
        brick_h = tuning.BRICK_HEIGHT
        tough_chance = clamp((level - 1) * tuning.TOUGH_CHANCE_PER_LEVEL, 0, tuning.TOUGH_CHANCE_MAX)

        for r in range(rows):
            for c in range(cols):
                x = margin_x + c * (brick_w + gap)
                y = tuning.BRICK_TOP_Y + r * (brick_h + gap)

                hp = 1
                if self.mode == "arcade":
                    if self.rng.random() < tough_chance:
                        hp = 2
                    if self.difficulty == "hard" and self.rng.random() < tough_chance * 0.5:
                        hp = 3

                # rows nearer the top are worth more
                points = (rows - r) * 10
                self.session.bricks.append(Brick(Rect(x, y, brick_w, brick_h), hp=hp, points=points))

    def resize(self, width: float, height: float):
        self.width = width
        self.height = height
        p = self.session.paddle
        p.y = height - tuning.PADDLE_FLOOR_OFFSET
        p.x = clamp(p.x, tuning.SIDE_MARGIN, width - p.w - tuning.SIDE_MARGIN)

    # ----------------------------
    # Screens
    # ----------------------------

    def pause(self):
        if self.screen != "playing":
            return
        self.screen = "paused"
        self._dragging = False
        self._events.append(GameEvent.PAUSED)

    def resume(self):
        if self.screen != "paused":
            return
        self.screen = "playing"
        # no catch-up jump after the pause
        self.frame_clock.reset()
        self._events.append(GameEvent.RESUMED)

    def toggle_pause(self):
        if self.screen == "playing":
            self.pause()
        elif self.screen == "paused":
            self.resume()

    def submit_initials(self, initials: Optional[str]):
        """Finish the post-game entry; None skips the leaderboard"""
        if initials and self.scores is not None:
            self.scores.record_score(initials, self.session.score)
        self.initials = None
        self.screen = "menu"

    def _end_game(self):
        self.screen = "gameover"
        self._events.append(GameEvent.GAME_OVER)
        if self.scores is not None:
            self.scores.submit_best(self.session.score)
            if self.session.score > 0 and self.scores.qualifies(self.session.score):
                self.initials = InitialsEntry("TNB")

    # ----------------------------
    # Frame driver
    # ----------------------------

    def frame(self, now_s: float) -> List[GameEvent]:
        """One animation callback: drain input, tick if playing"""
        intent = self.sampler.sample(self.queue.drain())
        dt = self.frame_clock.tick(now_s)

        if intent.was_pressed(PAUSE):
            self.toggle_pause()

        if self.screen == "menu":
            if intent.was_pressed(CONFIRM) or intent.was_pressed(LAUNCH):
                self.start_game()
            return self._take_events()

        if self.screen == "gameover":
            if self.initials is not None:
                result = self.initials.feed(intent)
                if result == CONFIRM:
                    self.submit_initials(self.initials.text)
                elif result == BACK:
                    self.submit_initials(None)
            elif intent.was_pressed(CONFIRM) or intent.was_pressed(BACK):
                self.screen = "menu"
            return self._take_events()

        if self.screen == "playing":
            return self.update(dt, intent)
        return self._take_events()

    def _take_events(self) -> List[GameEvent]:
        events, self._events = self._events, []
        return events

    # ----------------------------
    # Core mechanics
    # ----------------------------

    def update(self, dt: float, intent: InputIntent = InputIntent()) -> List[GameEvent]:
        """Advance the session by ``dt`` seconds; returns the tick's events"""
        s = self.session
        p = s.paddle
        now = self.clock()

        self._apply_intent(intent)

        # Paddle width eases toward the buff target
        target_w = target_paddle_width(s.buffs, now, self.difficulty)
        p.w += (target_w - p.w) * clamp(dt * tuning.WIDTH_EASING, 0, 1)

        p.x += intent.axis * p.speed * dt
        p.x = clamp(p.x, tuning.SIDE_MARGIN, self.width - p.w - tuning.SIDE_MARGIN)

        s.buffs.tick(dt)

        self._update_lasers(dt)
        self._stick_balls()
        self._update_drops(dt)

        # All balls waiting for launch: no ball physics
        if all(b.stuck_to_paddle for b in s.balls):
            self._check_level_clear()
            return self._take_events()

        self._update_balls(dt)
        self._handle_falls()

        if not s.balls:
            self._lose_life()
            return self._take_events()

        self._check_level_clear()
        return self._take_events()

    def _apply_intent(self, intent: InputIntent):
        p = self.session.paddle
        any_stuck = any(b.stuck_to_paddle for b in self.session.balls)

        if intent.pointer_down_x is not None:
            x = intent.pointer_down_x
            if p.x <= x <= p.x + p.w:
                self._dragging = True
                self._drag_offset_x = x - p.x
            elif any_stuck:
                # tap off the paddle launches
                self.launch_stuck_balls()

        if self._dragging and intent.pointer_x is not None:
            p.x = clamp(intent.pointer_x - self._drag_offset_x,
                        tuning.SIDE_MARGIN, self.width - p.w - tuning.SIDE_MARGIN)
        if intent.pointer_up:
            self._dragging = False

        if intent.was_pressed(LAUNCH) and any(b.stuck_to_paddle for b in self.session.balls):
            self.launch_stuck_balls()
        if intent.was_pressed(FIRE):
            self.try_fire_laser()

    def try_fire_laser(self) -> bool:
        s = self.session
        if not s.buffs.can_fire(self.clock()):
            return False

        # two shots from the paddle edges
        p = s.paddle
        s.lasers.append(Laser(x=p.x + tuning.LASER_EDGE_INSET, y=p.y, vy=tuning.LASER_SPEED))
        s.lasers.append(Laser(x=p.x + p.w - tuning.LASER_EDGE_INSET, y=p.y, vy=tuning.LASER_SPEED))

        s.buffs.laser_ammo -= 2
        s.buffs.laser_cooldown = tuning.LASER_COOLDOWN
        self._events.append(GameEvent.LASER_FIRED)
        return True

    def _hit_brick(self, brick: Brick, can_drop: bool = True):
        """One hit: hp - 1, full points on destruction else a third.

        Only ball kills roll for a power-up drop.
        """
        brick.hp -= 1
        if brick.hp <= 0:
            self.session.score += brick.points
            self._events.append(GameEvent.BRICK_DESTROYED)
            if can_drop:
                self.maybe_spawn_drop(brick.rect.x + brick.rect.w / 2, brick.rect.y + brick.rect.h / 2)
        else:
            self.session.score += brick.points // 3
            self._events.append(GameEvent.BRICK_HIT)

    def _update_lasers(self, dt: float):
        s = self.session
        for laser in s.lasers:
            laser.y += laser.vy * dt
            if laser.y <= tuning.LASER_CEILING:
                laser.alive = False

        for laser in s.lasers:
            if not laser.alive:
                continue
            lr = laser.rect
            for b in s.bricks:
                if not b.alive or not rect_intersects(lr, b.rect):
                    continue
                self._hit_brick(b, can_drop=False)
                # retire at once so it cannot multi-hit
                laser.alive = False
                break

        compact(s.lasers, lambda l: l.alive)

    def _stick_balls(self):
        p = self.session.paddle
        for b in self.session.balls:
            if not b.stuck_to_paddle:
                continue
            b.x = p.center_x
            b.y = p.y - b.r - tuning.STUCK_GAP
            b.vx = 0.0
            b.vy = 0.0

    def _update_drops(self, dt: float):
        s = self.session
        paddle_rect = s.paddle.rect
        caught = []
        for d in s.drops:
            d.y += d.vy * dt
            if rect_intersects(circle_box(d.x, d.y, d.r), paddle_rect):
                caught.append(d)

        despawn_y = self.height + tuning.DROP_DESPAWN_OFFSET
        compact(s.drops, lambda d: d.y < despawn_y and all(d is not c for c in caught))

        now = self.clock()
        for d in caught:
            apply_power_up(self, d.type, now)
            self._events.append(GameEvent.POWERUP_CAUGHT)

    def maybe_spawn_drop(self, x: float, y: float) -> Optional[PowerUpDrop]:
        kind = roll_drop(self.rng, self.difficulty)
        if kind is None:
            return None
        drop = PowerUpDrop(x=x, y=y, type=kind, r=tuning.DROP_RADIUS, vy=tuning.DROP_SPEED)
        self.session.drops.append(drop)
        self._events.append(GameEvent.POWERUP_SPAWNED)
        return drop

    def _update_balls(self, dt: float):
        s = self.session
        p = s.paddle
        left = tuning.SIDE_MARGIN
        right = self.width - tuning.SIDE_MARGIN
        top = tuning.CEILING_Y

        for ball in s.balls:
            if ball.stuck_to_paddle:
                continue

            ball.x += ball.vx * dt
            ball.y += ball.vy * dt

            # Walls: reflect and clamp back inside on the same tick
            if ball.x - ball.r < left:
                ball.x = left + ball.r
                ball.vx *= -1
                self._events.append(GameEvent.WALL_BOUNCE)
            if ball.x + ball.r > right:
                ball.x = right - ball.r
                ball.vx *= -1
                self._events.append(GameEvent.WALL_BOUNCE)
            if ball.y - ball.r < top:
                ball.y = top + ball.r
                ball.vy *= -1
                self._events.append(GameEvent.WALL_BOUNCE)

            br = circle_box(ball.x, ball.y, ball.r)

            # Paddle, only while falling so an embedded ball cannot re-trigger
            if ball.vy > 0 and rect_intersects(br, p.rect):
                ball.y = p.y - ball.r - 0.5

                hit = (ball.x - p.center_x) / (p.w / 2)
                angle = clamp(hit, -1, 1) * tuning.PADDLE_MAX_ANGLE

                speed = math.hypot(ball.vx, ball.vy) or self.ball_speed()
                ball.vx = math.sin(angle) * speed
                ball.vy = -math.cos(angle) * speed
                self._events.append(GameEvent.PADDLE_BOUNCE)

            # Bricks: first hit in array order, one per ball per tick
            for b in s.bricks:
                if not b.alive or not rect_intersects(br, b.rect):
                    continue

                prev = circle_box(ball.x - ball.vx * dt, ball.y - ball.vy * dt, ball.r)
                was_left = prev.x + prev.w <= b.rect.x
                was_right = prev.x >= b.rect.x + b.rect.w
                if was_left or was_right:
                    ball.vx *= -1
                else:
                    ball.vy *= -1

                self._hit_brick(b)
                break

    def _handle_falls(self):
        s = self.session
        floor = self.height + tuning.BALL_LOSS_OFFSET
        lost = []
        for ball in s.balls:
            if ball.stuck_to_paddle or ball.y - ball.r <= floor:
                continue
            # a shield charge saves one fall
            if s.buffs.shield_charges > 0:
                s.buffs.shield_charges -= 1
                ball.y = self.height - tuning.SHIELD_BOUNCE_OFFSET
                ball.vy = -abs(ball.vy)
                self._events.append(GameEvent.SHIELD_USED)
                continue
            lost.append(ball)

        if lost:
            compact(s.balls, lambda b: all(b is not l for l in lost))

    def _lose_life(self):
        s = self.session
        s.lives -= 1
        self._events.append(GameEvent.LIFE_LOST)
        if s.lives <= 0:
            self._end_game()
            return
        self.reset_round(full_reset_paddle=False)

    def _check_level_clear(self):
        s = self.session
        if any(b.alive for b in s.bricks):
            return
        s.level += 1
        self.apply_difficulty_tuning()
        self.build_level(s.level)
        self.reset_round(full_reset_paddle=True)
        self._events.append(GameEvent.LEVEL_UP)


class BreakoutEnv(gym.Env):
    """Gymnasium wrapper around BreakoutGame"""

    metadata = {"render_modes": ["human"], "render_fps": 60}

    def __init__(
        self,
        render_mode: Optional[str] = None,
        width: int = tuning.VIEW_WIDTH,
        height: int = tuning.VIEW_HEIGHT,
        difficulty: str = "normal",
        mode: str = "arcade",
        dt: float = 1 / 60,
        max_steps: int = 20000,
        auto_launch: bool = False,
    ):
        super().__init__()
        self.render_mode = render_mode
        self.width = width
        self.height = height
        self.dt = dt
        self.max_steps = max_steps
        self.auto_launch = auto_launch

        # Simulated clock so buff timers follow env time, not wall time
        self._clock = ManualClock()
        self.game = BreakoutGame(width, height, difficulty=difficulty, mode=mode, clock=self._clock)

        # Action space:
        # move: 0 stay, 1 left, 2 right
        # launch: 0/1
        # fire: 0/1
        self.action_space = spaces.MultiDiscrete([3, 2, 2])

        # Paddle: x(1) w(1)
        # Each ball slot: pos(2) vel(2) stuck(1)
        # Bricks left(1) shield(1) laser(1) ammo(1) widen(1) slow(1) lives(1)
        obs_dim = 2 + tuning.MAX_BALLS * 5 + 7
        self.observation_space = spaces.Box(low=-1.0, high=1.0, shape=(obs_dim,), dtype=np.float32)

        self._window = None
        self._step_count = 0
        self._bricks_total = 1

    # ----------------------------
    # Gym API
    # ----------------------------

    def reset(self, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)
        seed_everything(seed)

        self._step_count = 0
        self._clock.now_ms = 0.0
        self.game.start_game()
        self._bricks_total = max(1, len(self.game.session.bricks))

        return self._get_obs(), self._get_info()

    def step(self, action):
        move, launch, fire = int(action[0]), int(action[1]), int(action[2])

        s = self.game.session
        pressed = set()
        if launch or self.auto_launch:
            pressed.add(LAUNCH)
        if fire:
            pressed.add(FIRE)
        intent = InputIntent(left=move == 1, right=move == 2, pressed=frozenset(pressed))

        prev_score, prev_lives, prev_level = s.score, s.lives, s.level
        self._clock.advance(self.dt * 1000.0)
        events = self.game.update(self.dt, intent)

        s = self.game.session
        if s.level != prev_level:
            self._bricks_total = max(1, len(s.bricks))

        reward = self._compute_reward(s.score - prev_score, prev_lives - s.lives, s.level - prev_level)

        terminated = GameEvent.GAME_OVER in events or self.game.screen == "gameover"
        self._step_count += 1
        truncated = self._step_count >= self.max_steps

        if self.render_mode == "human":
            self.render()

        return self._get_obs(), reward, terminated, truncated, self._get_info()

    # ----------------------------
    # Observation / reward / info
    # ----------------------------

    def _get_obs(self) -> np.ndarray:
        s = self.game.session
        p = s.paddle
        now = self._clock()
        speed = max(1e-6, self.game.base_ball_speed)

        obs_parts = [
            (p.x / self.width) * 2 - 1,
            (p.w / self.width) * 2 - 1,
        ]
        for i in range(tuning.MAX_BALLS):
            if i < len(s.balls):
                b = s.balls[i]
                obs_parts += [
                    (b.x / self.width) * 2 - 1,
                    (b.y / self.height) * 2 - 1,
                    b.vx / speed,
                    b.vy / speed,
                    1.0 if b.stuck_to_paddle else -1.0,
                ]
            else:
                obs_parts += [0.0, 0.0, 0.0, 0.0, 0.0]

        obs_parts += [
            (s.bricks_left() / self._bricks_total) * 2 - 1,
            (s.buffs.shield_charges / tuning.SHIELD_MAX) * 2 - 1,
            1.0 if s.buffs.laser_active(now) else -1.0,
            (s.buffs.laser_ammo / tuning.LASER_AMMO_MAX) * 2 - 1,
            1.0 if s.buffs.widen_active(now) else -1.0,
            1.0 if s.buffs.slow_active(now) else -1.0,
            (s.lives / 5.0) * 2 - 1,
        ]

        obs = np.clip(np.array(obs_parts, dtype=np.float32), -1.0, 1.0)
        return obs

    def _compute_reward(self, score_delta: int, lives_lost: int, levels_gained: int) -> float:
        R_SCORE = 0.01
        R_LEVEL = 1.0
        R_LIFE = 1.0
        R_TIME = 0.0005

        reward = 0.0
        reward += R_SCORE * score_delta
        reward += R_LEVEL * levels_gained
        reward -= R_LIFE * lives_lost
        reward -= R_TIME
        return float(reward)

    def _get_info(self) -> Dict[str, Any]:
        s = self.game.session
        return {
            "score": s.score,
            "level": s.level,
            "lives": s.lives,
            "num_balls": len(s.balls),
            "bricks_left": s.bricks_left(),
            "shield": s.buffs.shield_charges,
            "step": self._step_count,
        }

    # ----------------------------
    # Rendering with Arcade
    # ----------------------------

    def render(self):
        if self.render_mode is None:
            return None

        if self._window is None:
            from .windows import BreakoutWindow
            self._window = BreakoutWindow(self.game, interactive=False)

        self._window.on_draw()
        return None

    def close(self):
        if self._window is not None:
            self._window.close()
            self._window = None


# ----------------------------
# Quick sanity test
# ----------------------------

def run_random_episode(render: bool = True, seed: int = 42):
    """Run a random episode for testing"""
    env = BreakoutEnv(render_mode="human" if render else None, auto_launch=True)
    obs, info = env.reset(seed=seed)

    terminated = False
    truncated = False
    total = 0.0

    print("Running episode... Close the window to exit early.")

    import time
    while not (terminated or truncated):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total += reward

        if render and env._window:
            env._window.dispatch_events()
            env._window.flip()
            time.sleep(env.dt)

    print(f"Random episode return: {total:.2f}  score: {info['score']}  level: {info['level']}")
    env.close()


if __name__ == "__main__":
    run_random_episode(render=True)
