import pytest

from tenebris import tuning
from tenebris.breakout_env import BreakoutGame
from tenebris.entities import Ball, Brick, GameEvent, Laser, PowerUpType, Rect
from tenebris.intent import LAUNCH, InputIntent
from tenebris.powerups import apply_power_up

DT = 1 / 60


def far_brick():
    """A brick nothing in these tests touches, so the level never clears"""
    return Brick(Rect(26, 90, 60, 18), hp=1, points=50)


def test_invalid_arguments_raise(rng, clock):
    with pytest.raises(ValueError):
        BreakoutGame(difficulty="insane", clock=clock, rng=rng)
    with pytest.raises(ValueError):
        BreakoutGame(mode="endless", clock=clock, rng=rng)


def test_start_game_uses_difficulty(rng, clock):
    game = BreakoutGame(difficulty="hard", clock=clock, rng=rng)
    game.start_game()
    assert game.screen == "playing"
    assert game.session.lives == 2
    assert game.session.paddle.w == 120
    assert game.base_ball_speed == 600


def test_paddle_stays_inside_walls(breakout):
    p = breakout.session.paddle
    for _ in range(120):
        breakout.update(0.033, InputIntent(left=True))
        assert tuning.SIDE_MARGIN <= p.x <= breakout.width - p.w - tuning.SIDE_MARGIN
    assert p.x == tuning.SIDE_MARGIN

    for _ in range(120):
        breakout.update(0.033, InputIntent(right=True))
        assert tuning.SIDE_MARGIN <= p.x <= breakout.width - p.w - tuning.SIDE_MARGIN
    assert p.x == breakout.width - p.w - tuning.SIDE_MARGIN


def test_both_directions_cancel(breakout):
    x = breakout.session.paddle.x
    breakout.update(DT, InputIntent(left=True, right=True))
    assert breakout.session.paddle.x == x


def test_paddle_moves_at_tuned_speed(breakout):
    p = breakout.session.paddle
    assert p.h == tuning.PADDLE_HEIGHT
    x = p.x
    breakout.update(0.01, InputIntent(right=True))
    assert p.x == pytest.approx(x + tuning.PADDLE_SPEED * 0.01)


def test_stuck_ball_follows_paddle(breakout):
    s = breakout.session
    ball = s.balls[0]
    assert ball.stuck_to_paddle

    for _ in range(10):
        breakout.update(DT, InputIntent(right=True))
        assert ball.vx == 0 and ball.vy == 0
        assert ball.x == s.paddle.center_x
        assert ball.y == s.paddle.y - ball.r - tuning.STUCK_GAP


def test_launch_sends_ball_upwards(breakout, rng):
    # 0.5 maps to a launch angle of 0
    rng.queue(0.5)
    events = breakout.update(DT, InputIntent(pressed=frozenset({LAUNCH})))

    ball = breakout.session.balls[0]
    assert GameEvent.LAUNCH in events
    assert not ball.stuck_to_paddle
    assert ball.vx == pytest.approx(0.0)
    assert ball.vy == pytest.approx(-520.0)


def test_pointer_tap_off_paddle_launches(breakout, rng):
    rng.queue(0.5)
    breakout.update(DT, InputIntent(pointer_down_x=50.0, pointer_x=50.0))
    assert not breakout.session.balls[0].stuck_to_paddle


def test_pointer_drag_moves_paddle(breakout):
    p = breakout.session.paddle
    grab = p.x + 10
    breakout.update(DT, InputIntent(pointer_down_x=grab, pointer_x=grab))
    breakout.update(DT, InputIntent(pointer_x=grab + 100))
    assert p.x == pytest.approx(grab + 100 - 10)
    assert breakout.session.balls[0].stuck_to_paddle

    breakout.update(DT, InputIntent(pointer_up=True))
    breakout.update(DT, InputIntent(pointer_x=grab + 300))
    assert p.x == pytest.approx(grab + 90)


def test_destroying_hit_scores_points_and_rolls_drop(breakout, rng):
    s = breakout.session
    s.bricks = [Brick(Rect(430, 180, 100, 18), hp=1, points=50), far_brick()]
    s.balls = [Ball(x=480, y=200, r=7, vx=0, vy=-300)]

    # drop roll under 0.18 spawns, 0.0 picks WIDEN
    rng.queue(0.1, 0.0)
    events = breakout.update(DT)

    assert s.score == 50
    assert s.bricks[0].hp == 0
    assert GameEvent.BRICK_DESTROYED in events
    assert s.balls[0].vy > 0
    assert len(s.drops) == 1
    assert s.drops[0].type == PowerUpType.WIDEN


def test_drop_roll_above_chance_spawns_nothing(breakout, rng):
    s = breakout.session
    s.bricks = [Brick(Rect(430, 180, 100, 18), hp=1, points=50), far_brick()]
    s.balls = [Ball(x=480, y=200, r=7, vx=0, vy=-300)]

    rng.queue(0.19)
    breakout.update(DT)

    assert s.score == 50
    assert s.drops == []


def test_non_destroying_hit_scores_a_third(breakout):
    s = breakout.session
    s.bricks = [Brick(Rect(430, 180, 100, 18), hp=2, points=50), far_brick()]
    s.balls = [Ball(x=480, y=200, r=7, vx=0, vy=-300)]

    events = breakout.update(DT)

    assert s.bricks[0].hp == 1
    assert s.score == 50 // 3
    assert GameEvent.BRICK_HIT in events


def test_one_brick_per_ball_per_tick(breakout):
    s = breakout.session
    first = Brick(Rect(430, 180, 100, 18), hp=2, points=30)
    second = Brick(Rect(430, 185, 100, 18), hp=2, points=30)
    s.bricks = [first, second, far_brick()]
    s.balls = [Ball(x=480, y=200, r=7, vx=0, vy=-300)]

    breakout.update(DT)

    assert first.hp == 1
    assert second.hp == 2
    assert s.score == 10


def test_side_hit_reflects_horizontally(breakout):
    s = breakout.session
    s.bricks = [Brick(Rect(500, 190, 100, 40), hp=2, points=30), far_brick()]
    s.balls = [Ball(x=490, y=210, r=7, vx=300, vy=-10)]

    breakout.update(DT)

    assert s.balls[0].vx < 0
    assert s.balls[0].vy < 0


def test_wall_bounce_clamps_inside(breakout):
    s = breakout.session
    s.bricks = [far_brick()]
    s.balls = [Ball(x=12, y=400, r=7, vx=-600, vy=0)]

    events = breakout.update(DT)

    ball = s.balls[0]
    assert GameEvent.WALL_BOUNCE in events
    assert ball.vx > 0
    assert ball.x == tuning.SIDE_MARGIN + ball.r


def test_paddle_bounce_only_when_falling(breakout):
    s = breakout.session
    p = s.paddle
    s.bricks = [far_brick()]
    s.balls = [Ball(x=p.center_x, y=p.y - 5, r=7, vx=0, vy=300)]

    events = breakout.update(DT)

    assert GameEvent.PADDLE_BOUNCE in events
    ball = s.balls[0]
    assert ball.vy < 0
    assert ball.y == pytest.approx(p.y - ball.r - 0.5)


def test_multi_never_exceeds_max_balls(breakout):
    s = breakout.session
    s.balls = [Ball(x=480, y=300, vx=0, vy=-300)]

    apply_power_up(breakout, PowerUpType.MULTI, 0)
    assert len(s.balls) == tuning.MAX_BALLS

    apply_power_up(breakout, PowerUpType.MULTI, 0)
    assert len(s.balls) == tuning.MAX_BALLS

    s.balls = s.balls[:2]
    apply_power_up(breakout, PowerUpType.MULTI, 0)
    assert len(s.balls) == tuning.MAX_BALLS


def test_shield_saves_a_fall(breakout):
    s = breakout.session
    s.bricks = [far_brick()]
    apply_power_up(breakout, PowerUpType.SHIELD, 0)
    s.balls = [Ball(x=480, y=700, r=7, vx=0, vy=300)]

    events = breakout.update(0.01)

    assert GameEvent.SHIELD_USED in events
    assert s.lives == 3
    assert s.buffs.shield_charges == 0
    assert s.balls[0].y == breakout.height - tuning.SHIELD_BOUNCE_OFFSET
    assert s.balls[0].vy < 0


def test_shield_charges_are_capped(breakout):
    for _ in range(5):
        apply_power_up(breakout, PowerUpType.SHIELD, 0)
    assert breakout.session.buffs.shield_charges == tuning.SHIELD_MAX


def test_losing_last_ball_costs_a_life(breakout):
    s = breakout.session
    s.bricks = [far_brick()]
    s.balls = [Ball(x=480, y=700, r=7, vx=0, vy=300)]

    events = breakout.update(0.01)

    assert GameEvent.LIFE_LOST in events
    assert s.lives == 2
    assert len(s.balls) == 1
    assert s.balls[0].stuck_to_paddle


def test_losing_one_of_two_balls_keeps_lives(breakout):
    s = breakout.session
    s.bricks = [far_brick()]
    s.balls = [Ball(x=480, y=700, r=7, vx=0, vy=300), Ball(x=480, y=300, r=7, vx=0, vy=-300)]

    breakout.update(0.01)

    assert s.lives == 3
    assert len(s.balls) == 1


def test_widen_expires_and_width_eases_back(breakout, clock):
    s = breakout.session
    apply_power_up(breakout, PowerUpType.WIDEN, clock())

    clock.now_ms = 11999
    for _ in range(60):
        breakout.update(0.033)
    widened = s.paddle.w
    assert widened == pytest.approx(200, abs=0.5)

    clock.now_ms = 12001
    breakout.update(0.033)
    assert 140 < s.paddle.w < widened


def test_laser_fire_cooldown_and_ammo(breakout, clock):
    s = breakout.session
    assert not breakout.try_fire_laser()

    apply_power_up(breakout, PowerUpType.LASER, clock())
    assert s.buffs.laser_ammo == tuning.LASER_AMMO_GRANT

    assert breakout.try_fire_laser()
    assert len(s.lasers) == 2
    assert s.buffs.laser_ammo == tuning.LASER_AMMO_GRANT - 2
    assert not breakout.try_fire_laser()

    s.buffs.tick(0.13)
    assert breakout.try_fire_laser()


def test_laser_ammo_is_capped(breakout, clock):
    for _ in range(4):
        apply_power_up(breakout, PowerUpType.LASER, clock())
    assert breakout.session.buffs.laser_ammo == tuning.LASER_AMMO_MAX


def test_laser_hits_one_brick_and_retires(breakout):
    s = breakout.session
    target = Brick(Rect(400, 300, 100, 18), hp=1, points=30)
    s.bricks = [target, far_brick()]
    s.lasers = [Laser(x=450, y=320)]

    breakout.update(0.01)

    assert target.hp == 0
    assert s.score == 30
    assert s.lasers == []


def test_laser_kill_never_drops_power_up(breakout, rng):
    s = breakout.session
    s.bricks = [Brick(Rect(400, 300, 100, 18), hp=1, points=30), far_brick()]
    s.lasers = [Laser(x=450, y=320)]

    # rolls that would spawn a WIDEN if one were taken
    rng.queue(0.0, 0.0)
    events = breakout.update(0.01)

    assert GameEvent.BRICK_DESTROYED in events
    assert s.drops == []
    assert rng.values == [0.0, 0.0]


def test_laser_retires_at_ceiling(breakout):
    s = breakout.session
    s.bricks = [far_brick()]
    s.lasers = [Laser(x=900, y=45)]

    breakout.update(0.01)

    assert s.lasers == []


def test_level_clear_builds_next_level(breakout):
    s = breakout.session
    s.bricks = [Brick(Rect(430, 180, 100, 18), hp=0, points=50)]

    events = breakout.update(DT)

    assert GameEvent.LEVEL_UP in events
    assert s.level == 2
    assert s.bricks_left() == 50
    assert s.balls[0].stuck_to_paddle


def test_arcade_layout(breakout):
    bricks = breakout.session.bricks
    assert len(bricks) == 50
    assert bricks[0].points == 50
    assert bricks[-1].points == 10
    assert bricks[0].rect.w == (960 - 52 - 72) // 10
    assert bricks[0].rect.x == tuning.BRICK_MARGIN_X
    assert bricks[0].rect.y == tuning.BRICK_TOP_Y


def test_arcade_adds_rows_with_level(breakout):
    breakout.build_level(3)
    assert len(breakout.session.bricks) == 60
    breakout.build_level(20)
    assert len(breakout.session.bricks) == 100


def test_campaign_layout_is_fixed(rng, clock):
    game = BreakoutGame(mode="campaign", clock=clock, rng=rng)
    game.start_game()
    game.build_level(7)
    bricks = game.session.bricks
    assert len(bricks) == 60
    assert all(b.hp == 1 for b in bricks)
    assert bricks[0].points == 60


def test_pause_and_resume_through_frames(breakout):
    breakout.frame(1.0)
    breakout.queue.key_down("p")
    assert GameEvent.PAUSED in breakout.frame(1.016)
    assert breakout.screen == "paused"

    breakout.queue.key_up("p")
    breakout.queue.key_down("p")
    assert GameEvent.RESUMED in breakout.frame(5.0)
    assert breakout.screen == "playing"
    # no catch-up after the pause
    assert breakout.frame_clock.tick(5.0) == 0.0


def test_menu_starts_on_confirm(rng, clock):
    game = BreakoutGame(clock=clock, rng=rng)
    assert game.screen == "menu"
    game.queue.key_down("enter")
    game.frame(0.0)
    assert game.screen == "playing"
    assert game.session.bricks_left() == 50


def test_game_over_prompts_for_initials(rng, clock, breakout_scores):
    game = BreakoutGame(clock=clock, rng=rng, scores=breakout_scores)
    game.start_game()
    s = game.session
    s.lives = 1
    s.score = 120
    s.bricks = [far_brick()]
    s.balls = [Ball(x=480, y=700, r=7, vx=0, vy=300)]

    events = game.update(0.01)

    assert GameEvent.GAME_OVER in events
    assert game.screen == "gameover"
    assert game.initials is not None
    assert game.initials.text == "TNB"
    assert breakout_scores.best_score() == 120

    game.submit_initials("abc")
    assert game.screen == "menu"
    assert [(e.initials, e.score) for e in breakout_scores.leaderboard()] == [("ABC", 120)]


def test_zero_score_skips_initials(rng, clock, breakout_scores):
    game = BreakoutGame(clock=clock, rng=rng, scores=breakout_scores)
    game.start_game()
    s = game.session
    s.lives = 1
    s.bricks = [far_brick()]
    s.balls = [Ball(x=480, y=700, r=7, vx=0, vy=300)]

    game.update(0.01)

    assert game.screen == "gameover"
    assert game.initials is None


def test_initials_cycle_with_arrow_keys(rng, clock, breakout_scores):
    game = BreakoutGame(clock=clock, rng=rng, scores=breakout_scores)
    game.start_game()
    game.session.score = 80
    game._end_game()
    assert game.initials.text == "TNB"

    game.queue.key_down("up")
    game.frame(0.0)
    assert game.initials.text == "UNB"

    game.queue.key_up("up")
    game.queue.key_down("d")
    game.queue.key_down("down")
    game.frame(0.016)
    assert game.initials.text == "UMB"

    game.queue.key_down("enter")
    game.frame(0.032)
    assert game.screen == "menu"
    assert breakout_scores.leaderboard()[0].initials == "UMB"
