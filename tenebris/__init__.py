"""Tenebris Arcade - Breakout and Snake simulation cores"""

from .breakout_env import BreakoutEnv, BreakoutGame, BreakoutSession
from .snake_env import SnakeEnv, SnakeGame
from .scores import KeyValueStore, ScoreBook

__all__ = [
    'BreakoutEnv',
    'BreakoutGame',
    'BreakoutSession',
    'SnakeEnv',
    'SnakeGame',
    'KeyValueStore',
    'ScoreBook',
]
