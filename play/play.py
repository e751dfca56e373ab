"""
Interactive play in an Arcade window.

Usage:
    python -m play.play breakout --difficulty hard --mode campaign
    python -m play.play snake --difficulty easy
    python -m play.play breakout --keys both --touch-buttons

Controls (Breakout): A/D or arrows move, Space launches, F fires lasers,
P pauses, mouse drag moves the paddle, Up/Down cycle initials letters.
Controls (Snake): arrows steer, Enter/Space starts, P pauses.
"""

import argparse
import logging
import sys

from tenebris import BreakoutGame, KeyValueStore, ScoreBook, SnakeGame
from tenebris.intent import DESKTOP_KEY_MODES
from tenebris.settings import load_settings, save_settings
from play.configs.game_config import BREAKOUT_ENV_CONFIG, PLAY_CONFIG, SNAKE_ENV_CONFIG


def build_game(args, store: KeyValueStore):
    """Create the game object for the chosen title"""
    if args.game == "breakout":
        settings = load_settings(store)
        changed = False
        if args.keys and args.keys != settings.desktop_keys:
            settings.desktop_keys = args.keys
            changed = True
        if args.touch_buttons and not settings.show_touch_buttons:
            settings.show_touch_buttons = True
            changed = True
        if args.mute:
            settings.sfx_on = False
            settings.music_on = False
            changed = True
        if changed:
            save_settings(store, settings)

        return BreakoutGame(
            BREAKOUT_ENV_CONFIG["width"],
            BREAKOUT_ENV_CONFIG["height"],
            difficulty=args.difficulty or BREAKOUT_ENV_CONFIG["difficulty"],
            mode=args.mode,
            scores=ScoreBook.for_breakout(store),
            settings=settings,
        )

    return SnakeGame(
        grid=SNAKE_ENV_CONFIG["grid"],
        difficulty=args.difficulty or SNAKE_ENV_CONFIG["difficulty"],
        scores=ScoreBook.for_snake(store),
    )


def open_window(game, args, store: KeyValueStore):
    """Create the Arcade window; raises if no display is available"""
    from tenebris.windows import BreakoutWindow, SnakeWindow

    if isinstance(game, BreakoutGame):
        return BreakoutWindow(game, interactive=True, assets_dir=args.assets)
    return SnakeWindow(game, size=PLAY_CONFIG["snake_window"], interactive=True,
                       assets_dir=args.assets, settings=load_settings(store))


def main():
    parser = argparse.ArgumentParser(description="Play Breakout or Snake")
    parser.add_argument("game", choices=["breakout", "snake"],
                        help="Game to play")
    parser.add_argument("--difficulty", choices=["easy", "normal", "hard"], default=None,
                        help="Difficulty (default from config)")
    parser.add_argument("--mode", choices=["arcade", "campaign"], default=BREAKOUT_ENV_CONFIG["mode"],
                        help="Breakout layout mode")
    parser.add_argument("--keys", choices=list(DESKTOP_KEY_MODES), default=None,
                        help="Breakout desktop movement keys")
    parser.add_argument("--touch-buttons", action="store_true",
                        help="Show on-screen left/right buttons")
    parser.add_argument("--mute", action="store_true",
                        help="Disable sound and music")
    parser.add_argument("--store", type=str, default=PLAY_CONFIG["store_path"],
                        help="JSON file for scores and settings")
    parser.add_argument("--assets", type=str, default=PLAY_CONFIG["assets_dir"],
                        help="Directory holding sfx/ and background images")
    parser.add_argument("--verbose", action="store_true",
                        help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = KeyValueStore(args.store)
    game = build_game(args, store)

    try:
        import arcade
        window = open_window(game, args, store)
    except Exception as e:
        # no display, no GL context, or arcade missing
        print(f"Cannot open a game window: {e}", file=sys.stderr)
        return 1

    print(f"Starting {args.game}. Close the window to quit.")
    arcade.run()
    window.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
