"""Gameplay tuning constants for both games."""

# Playfield (Breakout, simulation units = CSS pixels)
VIEW_WIDTH = 960
VIEW_HEIGHT = 640
SIDE_MARGIN = 8
CEILING_Y = 56
PADDLE_FLOOR_OFFSET = 42  # paddle.y = H - offset
BALL_LOSS_OFFSET = 20  # ball lost once y - r > H + offset
SHIELD_BOUNCE_OFFSET = 80  # shielded ball restarts at H - offset

# Balls
MAX_BALLS = 3
BALL_RADIUS = 7
STUCK_GAP = 2
PADDLE_MAX_ANGLE = 1.1  # rad
LAUNCH_ANGLE = 0.9  # launch angle drawn from (-LAUNCH_ANGLE, LAUNCH_ANGLE)
MULTI_ANGLE = 1.0

# Paddle
PADDLE_BASE_WIDTH = 140
PADDLE_HEIGHT = 16
PADDLE_SPEED = 900
WIDEN_BONUS = 60
WIDEN_MIN, WIDEN_MAX = 120, 220
WIDTH_EASING = 8.0

# Difficulty: paddle width, ball base speed (px/s), starting lives
BREAKOUT_DIFFICULTY = {
    "easy": {"paddle_w": 170, "ball_speed": 470, "lives": 5},
    "normal": {"paddle_w": 140, "ball_speed": 520, "lives": 3},
    "hard": {"paddle_w": 120, "ball_speed": 600, "lives": 2},
}
BREAKOUT_MODES = ("arcade", "campaign")

# Bricks
BRICK_COLS = 10
BRICK_ROWS_BASE = {"arcade": 5, "campaign": 6}
BRICK_ROWS_MIN, BRICK_ROWS_MAX = 5, 10
BRICK_MARGIN_X = 26
BRICK_TOP_Y = 90
BRICK_GAP = 8
BRICK_HEIGHT = 18
TOUGH_CHANCE_PER_LEVEL = 0.05
TOUGH_CHANCE_MAX = 0.35

# Power-ups
DROP_CHANCE = {"easy": 0.22, "normal": 0.18, "hard": 0.14}
# Cumulative upper bounds of the type roll, in order
DROP_WEIGHTS = (
    (0.26, "WIDEN"),
    (0.50, "SLOW"),
    (0.70, "SHIELD"),
    (0.86, "MULTI"),
    (1.00, "LASER"),
)
DROP_RADIUS = 11
DROP_SPEED = 220
DROP_DESPAWN_OFFSET = 60

WIDEN_MS = 12000
SLOW_MS = 9000
LASER_MS = 12000
SLOW_FACTOR = 0.78
SHIELD_MAX = 3
LASER_AMMO_GRANT = 18
LASER_AMMO_MAX = 40
LASER_COOLDOWN = 0.12  # s
LASER_SPEED = -880
LASER_EDGE_INSET = 16
LASER_CEILING = 40
MAX_STEP = 0.033  # s

# Snake
SNAKE_GRID = 20
SNAKE_START = (9, 10)
SNAKE_TICK_MS = {"easy": 150, "normal": 100, "hard": 70}
SNAKE_COUNTDOWN = 3
SNAKE_COUNTDOWN_STEP_MS = 1000
SNAKE_FLASH_TOGGLES = 7
SNAKE_FLASH_MS = 100
SNAKE_GAMEOVER_DELAY_MS = 800

# Leaderboard
LEADERBOARD_SIZE = 5
INITIALS_LEN = 3
