"""
Snake - grid snake on a fixed-period tick
-----------------------------------------
- SnakeGame: state machine menu -> countdown -> playing <-> paused ->
  gameover -> menu. The tick runs on a FixedIntervalTimer whose period is
  chosen by difficulty, not by the display refresh rate.
- SnakeEnv: Gymnasium wrapper, one tick per step

Quick test:
    python -m tenebris.snake_env
"""

from __future__ import annotations

import random
from collections import deque
from typing import Any, Deque, Dict, List, Optional

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from . import tuning
from .clock import FixedIntervalTimer
from .entities import Cell, Direction, GameEvent
from .intent import (
    BACK, CONFIRM, DOWN, LEFT, PAUSE, RIGHT, UP,
    InputIntent, InputQueue, IntentSampler, snake_bindings,
)
from .scores import InitialsEntry, ScoreBook
from .utils import seed_everything

_ACTION_DIRECTIONS = {UP: Direction.UP, RIGHT: Direction.RIGHT, DOWN: Direction.DOWN, LEFT: Direction.LEFT}

# Longest frame gap honoured by the tick timer (tab suspend and the like)
MAX_FRAME_GAP_MS = 250.0


class SnakeGame:
    """Snake simulation controller"""

    def __init__(
        self,
        grid: int = tuning.SNAKE_GRID,
        difficulty: str = "normal",
        rng=None,
        scores: Optional[ScoreBook] = None,
        tick_ms: Optional[float] = None,
    ):
        if difficulty not in tuning.SNAKE_TICK_MS:
            raise ValueError(f"Unknown difficulty: {difficulty}")

        self.grid = grid
        self.difficulty = difficulty
        self.rng = rng if rng is not None else random
        self.scores = scores
        self.tick_ms = tick_ms
        self.timer = FixedIntervalTimer(tick_ms or tuning.SNAKE_TICK_MS[difficulty])

        self.queue = InputQueue()
        self.sampler = IntentSampler(snake_bindings())

        self.state = "menu"
        self.snake: Deque[Cell] = deque()
        self.food: Optional[Cell] = None
        self.score = 0
        # direction is latched from input; heading is the last committed move
        self.direction = Direction.RIGHT
        self.heading = Direction.RIGHT

        self.countdown = 0
        self.flash_visible = True
        self.initials: Optional[InitialsEntry] = None

        self._phase_ms = 0.0
        self._flash_toggles = 0
        self._last_frame_ms: Optional[float] = None

    # ----------------------------
    # Lifecycle
    # ----------------------------

    def initiate_start(self):
        """Begin the 3-2-1 countdown that precedes play"""
        self.state = "countdown"
        self.countdown = tuning.SNAKE_COUNTDOWN
        self._phase_ms = 0.0

    def start_game(self):
        self.state = "playing"
        self.score = 0
        self.direction = Direction.RIGHT
        self.heading = Direction.RIGHT
        self.snake = deque([Cell(*tuning.SNAKE_START)])
        self.food = self.random_food()
        self.flash_visible = True
        self.initials = None
        self.sampler.release_all()
        self.timer.rearm(self.tick_ms or tuning.SNAKE_TICK_MS[self.difficulty])

    def random_food(self) -> Optional[Cell]:
        """A free cell, interior first, then anywhere; None when the board is full"""
        occupied = set(self.snake)
        interior = [
            Cell(x, y)
            for y in range(1, self.grid - 1)
            for x in range(1, self.grid - 1)
            if Cell(x, y) not in occupied
        ]
        if interior:
            return self.rng.choice(interior)
        anywhere = [
            Cell(x, y)
            for y in range(self.grid)
            for x in range(self.grid)
            if Cell(x, y) not in occupied
        ]
        return self.rng.choice(anywhere) if anywhere else None

    def set_direction(self, direction: Direction) -> bool:
        """Latch a turn; reversing straight into the body is ignored"""
        if direction == self.heading.opposite:
            return False
        self.direction = direction
        return True

    def toggle_pause(self):
        if self.state == "playing":
            self.state = "paused"
            self.timer.stop()
        elif self.state == "paused":
            self.state = "playing"
            self.timer.start()

    def submit_initials(self, initials: Optional[str]):
        if initials and self.scores is not None:
            self.scores.record_score(initials, self.score)
        self.initials = None
        self.state = "menu"

    def in_bounds(self, cell: Cell) -> bool:
        return 0 <= cell.x < self.grid and 0 <= cell.y < self.grid

    # ----------------------------
    # Tick
    # ----------------------------

    def step(self) -> List[GameEvent]:
        """Advance the snake one cell"""
        events: List[GameEvent] = []
        head = self.snake[0]
        dx, dy = self.direction.value
        new_head = Cell(head.x + dx, head.y + dy)
        self.heading = self.direction

        ate = new_head == self.food
        # the tail cell is vacated this tick unless the snake grows
        body = list(self.snake) if ate else list(self.snake)[:-1]

        if not self.in_bounds(new_head) or new_head in body:
            self._game_over()
            events.append(GameEvent.GAME_OVER)
            return events

        if ate:
            self.score += 1
            events.append(GameEvent.FOOD_EATEN)
        else:
            self.snake.pop()
        self.snake.appendleft(new_head)
        if ate:
            self.food = self.random_food()
        return events

    def _game_over(self):
        self.timer.stop()
        self.state = "gameover"
        self._phase_ms = 0.0
        self._flash_toggles = 0
        self.flash_visible = True
        if self.scores is not None:
            self.scores.submit_best(self.score)

    # ----------------------------
    # Frame driver
    # ----------------------------

    def frame(self, now_s: float) -> List[GameEvent]:
        """One host-loop callback: drain input, run due ticks and phases"""
        now_ms = now_s * 1000.0
        elapsed = 0.0 if self._last_frame_ms is None else now_ms - self._last_frame_ms
        elapsed = max(0.0, min(MAX_FRAME_GAP_MS, elapsed))
        self._last_frame_ms = now_ms

        intent = self.sampler.sample(self.queue.drain())
        events: List[GameEvent] = []

        if self.state == "menu":
            if intent.was_pressed(CONFIRM):
                self.initiate_start()
        elif self.state == "countdown":
            self._run_countdown(elapsed)
        elif self.state in ("playing", "paused"):
            if intent.was_pressed(PAUSE):
                self.toggle_pause()
                events.append(GameEvent.PAUSED if self.state == "paused" else GameEvent.RESUMED)
            if self.state == "playing":
                self._apply_turns(intent)
                for _ in range(self.timer.advance(elapsed)):
                    events += self.step()
                    if self.state != "playing":
                        break
        elif self.state == "gameover":
            self._run_gameover(elapsed, intent)

        return events

    def _apply_turns(self, intent: InputIntent):
        for action in (UP, RIGHT, DOWN, LEFT):
            if intent.was_pressed(action):
                self.set_direction(_ACTION_DIRECTIONS[action])

    def _run_countdown(self, elapsed: float):
        self._phase_ms += elapsed
        while self._phase_ms >= tuning.SNAKE_COUNTDOWN_STEP_MS and self.state == "countdown":
            self._phase_ms -= tuning.SNAKE_COUNTDOWN_STEP_MS
            self.countdown -= 1
            if self.countdown <= 0:
                self.start_game()

    def _run_gameover(self, elapsed: float, intent: InputIntent):
        self._phase_ms += elapsed

        # brief flash of the board
        due = min(tuning.SNAKE_FLASH_TOGGLES, int(self._phase_ms // tuning.SNAKE_FLASH_MS))
        while self._flash_toggles < due:
            self._flash_toggles += 1
            self.flash_visible = not self.flash_visible
        if self._flash_toggles >= tuning.SNAKE_FLASH_TOGGLES:
            self.flash_visible = True

        if self._phase_ms < tuning.SNAKE_GAMEOVER_DELAY_MS:
            return

        if self.initials is None:
            if self.scores is None:
                self.state = "menu"
                return
            self.initials = InitialsEntry("YOU")
            return

        result = self.initials.feed(intent)
        if result == CONFIRM:
            self.submit_initials(self.initials.text)
        elif result == BACK:
            self.submit_initials(None)


class SnakeEnv(gym.Env):
    """Gymnasium wrapper around SnakeGame"""

    metadata = {"render_modes": ["human"], "render_fps": 10}

    def __init__(
        self,
        render_mode: Optional[str] = None,
        grid: int = tuning.SNAKE_GRID,
        difficulty: str = "normal",
        max_steps: int = 2000,
    ):
        super().__init__()
        self.render_mode = render_mode
        self.grid = grid
        self.max_steps = max_steps
        self.game = SnakeGame(grid=grid, difficulty=difficulty)

        # 0 up, 1 right, 2 down, 3 left
        self.action_space = spaces.Discrete(4)
        self._directions = [Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT]

        # head(2) food delta(2) heading one-hot(4) danger ahead/left/right(3) length(1)
        self.observation_space = spaces.Box(low=-1.0, high=1.0, shape=(12,), dtype=np.float32)

        self._window = None
        self._step_count = 0

    def reset(self, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)
        seed_everything(seed)
        self._step_count = 0
        self.game.start_game()
        return self._get_obs(), self._get_info()

    def step(self, action):
        self.game.set_direction(self._directions[int(action)])
        events = self.game.step()

        terminated = GameEvent.GAME_OVER in events
        reward = self._compute_reward(events)

        self._step_count += 1
        truncated = self._step_count >= self.max_steps

        if self.render_mode == "human":
            self.render()

        return self._get_obs(), reward, terminated, truncated, self._get_info()

    def _danger(self, direction: Direction) -> float:
        head = self.game.snake[0]
        dx, dy = direction.value
        cell = Cell(head.x + dx, head.y + dy)
        body = list(self.game.snake)[:-1]
        return 1.0 if (not self.game.in_bounds(cell) or cell in body) else -1.0

    def _get_obs(self) -> np.ndarray:
        g = self.game
        n = max(1, self.grid - 1)
        head = g.snake[0]
        food = g.food or head

        heading = g.heading
        order = self._directions
        i = order.index(heading)
        left_of = order[(i - 1) % 4]
        right_of = order[(i + 1) % 4]

        obs_parts = [
            (head.x / n) * 2 - 1,
            (head.y / n) * 2 - 1,
            (food.x - head.x) / n,
            (food.y - head.y) / n,
        ]
        obs_parts += [1.0 if heading == d else -1.0 for d in order]
        obs_parts += [self._danger(heading), self._danger(left_of), self._danger(right_of)]
        obs_parts.append((len(g.snake) / (self.grid * self.grid)) * 2 - 1)

        return np.clip(np.array(obs_parts, dtype=np.float32), -1.0, 1.0)

    def _compute_reward(self, events: List[GameEvent]) -> float:
        R_FOOD = 1.0
        R_DEATH = 1.0
        R_TIME = 0.001

        reward = -R_TIME
        if GameEvent.FOOD_EATEN in events:
            reward += R_FOOD
        if GameEvent.GAME_OVER in events:
            reward -= R_DEATH
        return float(reward)

    def _get_info(self) -> Dict[str, Any]:
        return {
            "score": self.game.score,
            "length": len(self.game.snake),
            "step": self._step_count,
        }

    def render(self):
        if self.render_mode is None:
            return None
        if self._window is None:
            from .windows import SnakeWindow
            self._window = SnakeWindow(self.game, interactive=False)
        self._window.on_draw()
        return None

    def close(self):
        if self._window is not None:
            self._window.close()
            self._window = None


def run_random_episode(render: bool = True, seed: int = 42):
    """Run a random episode for testing"""
    env = SnakeEnv(render_mode="human" if render else None)
    obs, info = env.reset(seed=seed)

    terminated = False
    truncated = False
    total = 0.0

    import time
    while not (terminated or truncated):
        obs, reward, terminated, truncated, info = env.step(env.action_space.sample())
        total += reward
        if render and env._window:
            env._window.dispatch_events()
            env._window.flip()
            time.sleep(0.1)

    print(f"Random episode return: {total:.2f}  score: {info['score']}  length: {info['length']}")
    env.close()


if __name__ == "__main__":
    run_random_episode(render=True)
