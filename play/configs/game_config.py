"""
Run configuration for the play and headless episode scripts
"""

# Breakout environment parameters
BREAKOUT_ENV_CONFIG = {
    "width": 960,
    "height": 640,
    "difficulty": "normal",
    "mode": "arcade",
    "dt": 1 / 60,
    "max_steps": 20_000,  # ~5.5 minutes at 60 FPS
    "auto_launch": True,
}

# Snake environment parameters
SNAKE_ENV_CONFIG = {
    "grid": 20,
    "difficulty": "normal",
    "max_steps": 2_000,
}

# Interactive play
PLAY_CONFIG = {
    "store_path": "./saves/tenebris_store.json",
    "assets_dir": "./assets",
    "snake_window": 600,
}

# Headless episode runs
RUN_CONFIG = {
    "n_episodes": 10,
    "seeds": [42, 123, 456],
    "log_dir": "./logs",
}

ENV_CONFIGS = {
    "breakout": BREAKOUT_ENV_CONFIG,
    "snake": SNAKE_ENV_CONFIG,
}


def get_run_matrix(games=("breakout", "snake"), difficulties=("easy", "normal", "hard")):
    """
    All (game, difficulty, seed) combinations for a headless sweep.
    Returns list of dicts with: name, game, env_kwargs, seed
    """
    runs = []
    for game in games:
        for difficulty in difficulties:
            for seed in RUN_CONFIG["seeds"]:
                env_kwargs = ENV_CONFIGS[game].copy()
                env_kwargs["difficulty"] = difficulty
                runs.append({
                    "name": f"{game}_{difficulty}_s{seed}",
                    "game": game,
                    "env_kwargs": env_kwargs,
                    "seed": seed,
                })
    return runs


if __name__ == "__main__":
    runs = get_run_matrix()
    print(f"Total runs: {len(runs)}")
    print("-" * 50)
    for run in runs:
        print(f"  {run['name']:30} | seed {run['seed']}")
    print("-" * 50)
