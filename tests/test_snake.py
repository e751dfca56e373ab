from collections import deque

import pytest

from tenebris.entities import Cell, Direction, GameEvent
from tenebris.scores import ScoreBook
from tenebris.snake_env import SnakeGame


def place(game, cells, direction=Direction.RIGHT, food=Cell(0, 0)):
    game.snake = deque(Cell(*c) for c in cells)
    game.direction = direction
    game.heading = direction
    game.food = food


def test_invalid_difficulty_raises(rng):
    with pytest.raises(ValueError):
        SnakeGame(difficulty="nightmare", rng=rng)


def test_tick_period_follows_difficulty(rng):
    assert SnakeGame(difficulty="easy", rng=rng).timer.period_ms == 150
    assert SnakeGame(difficulty="normal", rng=rng).timer.period_ms == 100
    assert SnakeGame(difficulty="hard", rng=rng).timer.period_ms == 70


def test_start_state(snake):
    assert snake.state == "playing"
    assert list(snake.snake) == [Cell(9, 10)]
    assert snake.direction == Direction.RIGHT
    assert snake.food not in snake.snake
    assert snake.timer.running


def test_eating_food_grows_and_scores(snake):
    snake.food = Cell(10, 10)
    events = snake.step()

    assert GameEvent.FOOD_EATEN in events
    assert snake.snake[0] == Cell(10, 10)
    assert snake.score == 1
    assert len(snake.snake) == 2
    assert snake.food is not None
    assert snake.food not in snake.snake


def test_plain_move_keeps_length(snake):
    place(snake, [(5, 5), (4, 5), (3, 5)])
    snake.step()
    assert list(snake.snake) == [Cell(6, 5), Cell(5, 5), Cell(4, 5)]
    assert snake.score == 0


def test_running_into_body_ends_game(snake):
    place(snake, [(5, 5), (5, 6), (6, 6), (6, 5), (6, 4)])
    events = snake.step()

    assert GameEvent.GAME_OVER in events
    assert snake.state == "gameover"
    assert not snake.timer.running


def test_moving_into_vacated_tail_is_legal(snake):
    # the tail leaves (6, 5) on the same tick the head enters it
    place(snake, [(5, 5), (5, 6), (6, 6), (6, 5)])
    events = snake.step()

    assert GameEvent.GAME_OVER not in events
    assert snake.state == "playing"
    assert snake.snake[0] == Cell(6, 5)


def test_wall_ends_game(snake):
    place(snake, [(19, 10)])
    snake.step()
    assert snake.state == "gameover"


def test_body_intact_after_death(snake):
    place(snake, [(19, 10)])
    snake.step()
    assert list(snake.snake) == [Cell(19, 10)]

    place(snake, [(5, 5), (5, 6), (6, 6), (6, 5), (6, 4)])
    snake.step()
    assert len(snake.snake) == 5
    assert snake.snake[-1] == Cell(6, 4)


def test_reversal_is_ignored(snake):
    place(snake, [(5, 5), (4, 5)])
    assert not snake.set_direction(Direction.LEFT)
    assert snake.direction == Direction.RIGHT


def test_quick_double_turn_cannot_reverse(snake):
    place(snake, [(5, 5), (4, 5)])
    assert snake.set_direction(Direction.UP)
    # still heading right until the next tick commits the turn
    assert not snake.set_direction(Direction.LEFT)
    snake.step()
    assert snake.snake[0] == Cell(5, 4)


def test_food_avoids_snake(snake):
    snake.snake = deque(Cell(x, y) for y in range(1, 19) for x in range(1, 19))
    food = snake.random_food()
    assert food is not None
    assert food not in snake.snake


def test_food_none_when_board_full(rng):
    game = SnakeGame(grid=2, rng=rng)
    game.snake = deque([Cell(0, 0), Cell(1, 0), Cell(1, 1), Cell(0, 1)])
    assert game.random_food() is None


def test_countdown_then_play(rng):
    game = SnakeGame(rng=rng)
    game.queue.key_down("enter")
    game.frame(0.0)
    assert game.state == "countdown"
    assert game.countdown == 3

    for i in range(1, 12):
        game.frame(0.25 * i)
    assert game.state == "countdown"
    assert game.countdown == 1

    game.frame(3.0)
    assert game.state == "playing"


def test_frames_drive_ticks(snake):
    snake.frame(10.0)
    assert snake.snake[0] == Cell(9, 10)

    snake.frame(10.15)
    assert snake.snake[0] == Cell(10, 10)


def test_turn_applied_on_next_tick(snake):
    snake.frame(10.0)
    snake.queue.key_down("up")
    snake.frame(10.15)
    assert snake.snake[0] == Cell(9, 9)


def test_pause_stops_ticks(snake):
    snake.frame(10.0)
    snake.queue.key_down("p")
    events = snake.frame(10.05)
    assert GameEvent.PAUSED in events
    assert snake.state == "paused"

    head = snake.snake[0]
    for i in range(1, 10):
        snake.frame(10.05 + 0.2 * i)
    assert snake.snake[0] == head

    snake.queue.key_up("p")
    snake.queue.key_down("p")
    events = snake.frame(12.5)
    assert GameEvent.RESUMED in events
    assert snake.state == "playing"


def test_game_over_flash_then_initials(rng, store):
    scores = ScoreBook.for_snake(store)
    game = SnakeGame(rng=rng, scores=scores)
    game.start_game()
    place(game, [(19, 10)])
    game.score = 3
    game.step()
    assert game.state == "gameover"
    assert scores.best_score() == 3

    game.frame(0.0)
    game.frame(0.15)
    assert not game.flash_visible
    assert game.initials is None

    game.frame(0.4)
    game.frame(0.65)
    game.frame(0.9)
    assert game.flash_visible
    assert game.initials is not None
    assert game.initials.text == "YOU"

    game.queue.key_down("enter")
    game.frame(0.95)
    assert game.state == "menu"
    assert [(e.initials, e.score) for e in scores.leaderboard()] == [("YOU", 3)]


def test_game_over_without_scores_returns_to_menu(snake):
    place(snake, [(19, 10)])
    snake.step()
    snake.frame(0.0)
    for i in range(1, 5):
        snake.frame(0.25 * i)
    assert snake.state == "menu"
