"""
Arcade windows for both games.

The windows only read game state and push raw input into the game's queue;
all simulation happens inside ``game.frame``. Simulation coordinates grow
downwards, Arcade's grow upwards, so every draw call flips y.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Dict, Optional

import arcade

from . import tuning
from .breakout_env import BreakoutGame
from .entities import GameEvent, PowerUpType
from .intent import LEFT, RIGHT
from .settings import Settings
from .snake_env import SnakeGame
from .tones import TONE_GAIN, fallback_tone

logger = logging.getLogger(__name__)

KEY_NAMES = {
    arcade.key.A: "a",
    arcade.key.D: "d",
    arcade.key.F: "f",
    arcade.key.P: "p",
    arcade.key.LEFT: "left",
    arcade.key.RIGHT: "right",
    arcade.key.UP: "up",
    arcade.key.DOWN: "down",
    arcade.key.SPACE: "space",
    arcade.key.ENTER: "enter",
    arcade.key.ESCAPE: "escape",
    arcade.key.BACKSPACE: "backspace",
}

DROP_LABELS = {
    PowerUpType.WIDEN: "W",
    PowerUpType.SLOW: "S",
    PowerUpType.MULTI: "M",
    PowerUpType.LASER: "L",
    PowerUpType.SHIELD: "+",
}

MUSIC_FILE = "theme.mp3"

SFX_FILES = {
    GameEvent.PADDLE_BOUNCE: "hit.wav",
    GameEvent.BRICK_HIT: "hit.wav",
    GameEvent.BRICK_DESTROYED: "hit.wav",
    GameEvent.POWERUP_CAUGHT: "powerup.wav",
    GameEvent.LIFE_LOST: "lose.wav",
    GameEvent.LEVEL_UP: "win.wav",
    GameEvent.FOOD_EATEN: "eat.wav",
    GameEvent.GAME_OVER: "death.wav",
}


class SoundBank:
    """Optional sound effects and music; a missing effect falls back to a beep"""

    def __init__(self, assets_dir: Optional[str], settings: Settings):
        self.settings = settings
        self._sounds: Dict[GameEvent, object] = {}
        self._tones: Dict[GameEvent, object] = {}
        self._music = None
        self._music_player = None

        beeps: Dict[str, object] = {}
        for event, name in SFX_FILES.items():
            if assets_dir:
                path = os.path.join(assets_dir, "sfx", name)
                try:
                    self._sounds[event] = arcade.load_sound(path)
                    continue
                except Exception as e:
                    logger.warning("Sound %s unavailable, using a beep: %s", path, e)
            if name not in beeps:
                beeps[name] = fallback_tone(name)
            self._tones[event] = beeps[name]

        if not assets_dir:
            return
        path = os.path.join(assets_dir, "music", MUSIC_FILE)
        try:
            self._music = arcade.load_sound(path, streaming=True)
        except Exception as e:
            logger.warning("Music %s unavailable: %s", path, e)

    def start_music(self):
        if self._music is None or not self.settings.music_on or self._music_player is not None:
            return
        self._music_player = arcade.play_sound(self._music, volume=self.settings.music_vol, loop=True)

    def stop_music(self):
        if self._music_player is not None:
            arcade.stop_sound(self._music_player)
            self._music_player = None

    def play(self, events):
        if not self.settings.sfx_on:
            return
        for event in set(events):
            sound = self._sounds.get(event)
            if sound is not None:
                arcade.play_sound(sound, volume=self.settings.sfx_vol)
                continue
            tone = self._tones.get(event)
            if tone is not None:
                player = tone.play()
                player.volume = self.settings.sfx_vol * TONE_GAIN


def _load_background(assets_dir: Optional[str], name: str):
    if not assets_dir:
        return None
    path = os.path.join(assets_dir, "backgrounds", name)
    try:
        return arcade.load_texture(path)
    except Exception as e:
        logger.warning("Background failed to load: %s (%s)", path, e)
        return None


class BreakoutWindow(arcade.Window):
    """Arcade window rendering a BreakoutGame"""

    def __init__(self, game: BreakoutGame, interactive: bool = True, assets_dir: Optional[str] = None):
        super().__init__(int(game.width), int(game.height), "Tenebris Breakout - Arcade")
        self.game = game
        self.interactive = interactive
        self.sounds = SoundBank(assets_dir, game.settings)
        self._background = _load_background(assets_dir, "breakout-bg.jpg")

        # Colors
        self.BG = (7, 7, 9)
        self.FRAME_C = (255, 255, 255, 30)
        self.BRICK_C = (255, 122, 24)
        self.PADDLE_C = (240, 240, 244, 217)
        self.BALL_C = (255, 255, 255, 242)
        self.LASER_C = (255, 122, 24, 217)
        self.HUD_C = (220, 220, 220)

        if interactive:
            self.sounds.start_music()

    def sy(self, y: float) -> float:
        return self.height - y

    def on_close(self):
        self.sounds.stop_music()
        super().on_close()

    # ----------------------------
    # Input
    # ----------------------------

    def on_key_press(self, symbol: int, modifiers: int):
        name = KEY_NAMES.get(symbol)
        if name:
            self.game.queue.key_down(name)

    def on_key_release(self, symbol: int, modifiers: int):
        name = KEY_NAMES.get(symbol)
        if name:
            self.game.queue.key_up(name)

    def on_text(self, text: str):
        if self.game.screen == "gameover":
            self.game.queue.text(text)

    def _touch_side(self, x: float, y: float) -> Optional[str]:
        if not self.game.settings.show_touch_buttons or y > 70:
            return None
        if x < 90:
            return LEFT
        if x > self.width - 90:
            return RIGHT
        return None

    def on_mouse_press(self, x: float, y: float, button: int, modifiers: int):
        side = self._touch_side(x, y)
        if side:
            self.game.queue.touch_hold(side, True)
            return
        self.game.queue.pointer_down(x)

    def on_mouse_drag(self, x: float, y: float, dx: float, dy: float, buttons: int, modifiers: int):
        self.game.queue.pointer_move(x)

    def on_mouse_release(self, x: float, y: float, button: int, modifiers: int):
        self.game.queue.touch_hold(LEFT, False)
        self.game.queue.touch_hold(RIGHT, False)
        self.game.queue.pointer_up()

    def on_resize(self, width: int, height: int):
        super().on_resize(width, height)
        self.game.resize(width, height)

    def on_update(self, delta_time: float):
        if not self.interactive:
            return
        events = self.game.frame(time.monotonic())
        self.sounds.play(events)

    # ----------------------------
    # Drawing
    # ----------------------------

    def on_draw(self):
        """Draw the current game state"""
        self.clear()
        g = self.game
        s = g.session
        w, h = self.width, self.height

        if self._background is not None:
            arcade.draw_texture_rect(self._background, arcade.LBWH(0, 0, w, h))
        else:
            arcade.draw_lrbt_rectangle_filled(0, w, 0, h, self.BG)
        arcade.draw_lrbt_rectangle_filled(0, w, 0, h, (0, 0, 0, 90))

        m = tuning.SIDE_MARGIN
        arcade.draw_lrbt_rectangle_outline(m, w - m, m, self.sy(tuning.CEILING_Y), self.FRAME_C, 2)

        if g.screen == "menu":
            self._draw_menu()
            return

        # Bricks
        for b in s.bricks:
            if not b.alive:
                continue
            alpha = 140 if b.hp == 1 else 179 if b.hp == 2 else 217
            r = b.rect
            arcade.draw_lrbt_rectangle_filled(r.x, r.x + r.w, self.sy(r.y + r.h), self.sy(r.y), (*self.BRICK_C, alpha))
            arcade.draw_lrbt_rectangle_outline(r.x, r.x + r.w, self.sy(r.y + r.h), self.sy(r.y), self.FRAME_C, 1)

        # Drops
        for d in s.drops:
            arcade.draw_circle_filled(d.x, self.sy(d.y), d.r, (255, 255, 255, 46))
            arcade.draw_circle_outline(d.x, self.sy(d.y), d.r, (*self.BRICK_C, 140))
            arcade.draw_text(DROP_LABELS[d.type], d.x, self.sy(d.y), (255, 255, 255, 230), 10,
                             anchor_x="center", anchor_y="center", bold=True)

        # Paddle
        p = s.paddle
        arcade.draw_lrbt_rectangle_filled(p.x, p.x + p.w, self.sy(p.y + p.h), self.sy(p.y), self.PADDLE_C)

        # Laser emitters
        now = g.clock()
        if s.buffs.laser_active(now):
            for ex in (p.x + 10, p.x + p.w - 20):
                arcade.draw_lrbt_rectangle_filled(ex, ex + 10, self.sy(p.y), self.sy(p.y - 4), (*self.BRICK_C, 166))

        # Balls
        for b in s.balls:
            arcade.draw_circle_filled(b.x, self.sy(b.y), b.r, self.BALL_C)

        # Lasers
        for laser in s.lasers:
            arcade.draw_lrbt_rectangle_filled(laser.x - 1.5, laser.x + 1.5, self.sy(laser.y + 2),
                                              self.sy(laser.y - 10), self.LASER_C)

        self._draw_hud(now)

        if g.screen == "playing" and all(b.stuck_to_paddle for b in s.balls):
            arcade.draw_text("Tap / Click or press SPACE to launch", 18, self.sy(46), (255, 255, 255, 166), 14)

        if g.settings.show_touch_buttons:
            arcade.draw_lrbt_rectangle_filled(0, 90, 0, 70, (255, 255, 255, 30))
            arcade.draw_lrbt_rectangle_filled(w - 90, w, 0, 70, (255, 255, 255, 30))

        if g.screen == "paused":
            arcade.draw_lrbt_rectangle_filled(0, w, 0, h, (0, 0, 0, 90))
            arcade.draw_text("PAUSED - press P", w / 2, h / 2, self.HUD_C, 28, anchor_x="center")
        elif g.screen == "gameover":
            self._draw_gameover()

    def _draw_hud(self, now: float):
        s = self.game.session
        txt = (f"{self.game.mode.upper()}  {self.game.difficulty.upper()}  "
               f"LV {s.level}  SCORE {s.score}  LIVES {s.lives}")
        if s.buffs.shield_charges > 0:
            txt += f"  SHIELD {s.buffs.shield_charges}"
        if s.buffs.laser_active(now):
            txt += f"  AMMO {s.buffs.laser_ammo}"
        if len(s.balls) > 1:
            txt += f"  BALLS {len(s.balls)}"
        arcade.draw_text(txt, 12, self.height - 30, self.HUD_C, 14)

    def _draw_menu(self):
        w, h = self.width, self.height
        arcade.draw_text("TENEBRIS BREAKOUT", w / 2, h * 0.7, self.HUD_C, 36, anchor_x="center", bold=True)
        arcade.draw_text("ENTER / SPACE to start", w / 2, h * 0.6, self.HUD_C, 16, anchor_x="center")
        if self.game.scores is not None:
            _draw_leaderboard(self.game.scores, w / 2, h * 0.5, self.HUD_C)

    def _draw_gameover(self):
        w, h = self.width, self.height
        arcade.draw_lrbt_rectangle_filled(0, w, 0, h, (0, 0, 0, 150))
        arcade.draw_text(f"GAME OVER  {self.game.session.score}", w / 2, h * 0.62, self.HUD_C, 32, anchor_x="center")
        if self.game.initials is not None:
            _draw_initials(self.game.initials, w / 2, h * 0.45)
        else:
            arcade.draw_text("ENTER for menu", w / 2, h * 0.45, self.HUD_C, 16, anchor_x="center")


class SnakeWindow(arcade.Window):
    """Arcade window rendering a SnakeGame"""

    def __init__(self, game: SnakeGame, size: int = 600, interactive: bool = True,
                 assets_dir: Optional[str] = None, settings: Optional[Settings] = None):
        super().__init__(size, size, "Tenebris Snake - Arcade")
        self.game = game
        self.interactive = interactive
        self.box = size // game.grid
        self.sounds = SoundBank(assets_dir, settings or Settings())

        self.HEAD_C = (255, 68, 85)
        self.BODY_C = (170, 170, 170)
        self.FOOD_C = (0, 255, 0)
        self.GRID_C = (51, 51, 51)
        self.HUD_C = (255, 255, 255)

    def on_key_press(self, symbol: int, modifiers: int):
        name = KEY_NAMES.get(symbol)
        if name:
            self.game.queue.key_down(name)

    def on_key_release(self, symbol: int, modifiers: int):
        name = KEY_NAMES.get(symbol)
        if name:
            self.game.queue.key_up(name)

    def on_text(self, text: str):
        if self.game.state == "gameover":
            self.game.queue.text(text)

    def on_update(self, delta_time: float):
        if not self.interactive:
            return
        self.sounds.play(self.game.frame(time.monotonic()))

    def _cell(self, x: int, y: int, color):
        b = self.box
        top = self.height - y * b
        arcade.draw_lrbt_rectangle_filled(x * b, x * b + b, top - b, top, color)
        arcade.draw_lrbt_rectangle_outline(x * b, x * b + b, top - b, top, self.GRID_C, 1)

    def on_draw(self):
        self.clear()
        g = self.game
        w, h = self.width, self.height
        arcade.draw_lrbt_rectangle_filled(0, w, 0, h, (0, 0, 0))

        if g.state == "menu":
            arcade.draw_text("TENEBRIS SNAKE", w / 2, h * 0.72, self.HUD_C, 30, anchor_x="center", bold=True)
            arcade.draw_text("ENTER to start", w / 2, h * 0.64, self.HUD_C, 14, anchor_x="center")
            if g.scores is not None:
                _draw_leaderboard(g.scores, w / 2, h * 0.55, self.HUD_C)
            return

        if g.state == "countdown":
            arcade.draw_text(str(g.countdown), w / 2, h / 2, self.HUD_C, 72, anchor_x="center", anchor_y="center")
            return

        if g.flash_visible:
            for i, seg in enumerate(g.snake):
                self._cell(seg.x, seg.y, self.HEAD_C if i == 0 else self.BODY_C)
            if g.food is not None:
                self._cell(g.food.x, g.food.y, self.FOOD_C)

        best = g.scores.best_score() if g.scores is not None else 0
        arcade.draw_text(f"SCORE {g.score}   HIGH {max(best, g.score)}", 8, h - 22, self.HUD_C, 12)

        if g.state == "paused":
            arcade.draw_lrbt_rectangle_filled(0, w, 0, h, (0, 0, 0, 153))
            arcade.draw_text("Paused - press P", w / 2, h / 2, self.HUD_C, max(12, w // 32), anchor_x="center")
        elif g.state == "gameover" and g.initials is not None:
            arcade.draw_lrbt_rectangle_filled(0, w, 0, h, (0, 0, 0, 153))
            _draw_initials(g.initials, w / 2, h / 2)


def _draw_leaderboard(scores, cx: float, top: float, color):
    arcade.draw_text(f"BEST {scores.best_score()}", cx, top, color, 16, anchor_x="center")
    for i, entry in enumerate(scores.leaderboard()):
        arcade.draw_text(f"{entry.initials} - {entry.score}", cx, top - 28 * (i + 1), color, 14, anchor_x="center")


def _draw_initials(entry, cx: float, cy: float):
    arcade.draw_text("ENTER YOUR INITIALS", cx, cy + 50, (0, 220, 0), 18, anchor_x="center")
    for i, ch in enumerate(entry.letters):
        x = cx + (i - 1) * 40
        col = (255, 255, 255) if i == entry.idx else (120, 120, 120)
        arcade.draw_text(ch, x, cy, col, 28, anchor_x="center")
        if i == entry.idx:
            arcade.draw_lrbt_rectangle_filled(x - 12, x + 12, cy - 8, cy - 6, (255, 255, 255))
    arcade.draw_text("ENTER=OK  ESC=SKIP", cx, cy - 40, (120, 120, 120), 12, anchor_x="center")
