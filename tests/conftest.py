import pytest

from tenebris.breakout_env import BreakoutGame
from tenebris.clock import ManualClock
from tenebris.scores import KeyValueStore, ScoreBook
from tenebris.snake_env import SnakeGame


class ScriptedRandom:
    """Stand-in for the random module: replays queued values, then a default"""

    def __init__(self, values=(), default=0.99):
        self.values = list(values)
        self.default = default
        self.calls = 0

    def queue(self, *values):
        self.values.extend(values)

    def random(self):
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.default

    def choice(self, seq):
        return seq[0]


@pytest.fixture
def rng():
    return ScriptedRandom()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def store(tmp_path):
    return KeyValueStore(str(tmp_path / "store.json"))


@pytest.fixture
def breakout(rng, clock):
    game = BreakoutGame(960, 640, difficulty="normal", mode="arcade", clock=clock, rng=rng)
    game.start_game()
    return game


@pytest.fixture
def snake(rng):
    game = SnakeGame(grid=20, difficulty="normal", rng=rng)
    game.start_game()
    return game


@pytest.fixture
def breakout_scores(store):
    return ScoreBook.for_breakout(store)
