"""
Headless episode runner.

Plays random-action episodes of either game through its Gymnasium wrapper
and writes per-episode metrics to CSV.

Usage:
    python -m play.run_episodes breakout --n-episodes 20
    python -m play.run_episodes snake --difficulty hard --seed 7
    python -m play.run_episodes --all
"""

import argparse
import os
import sys

import numpy as np

from tenebris import BreakoutEnv, SnakeEnv
from play.configs.game_config import ENV_CONFIGS, RUN_CONFIG, get_run_matrix
from play.metrics import EpisodeMetricsLogger

ENV_CLASSES = {
    "breakout": BreakoutEnv,
    "snake": SnakeEnv,
}


def make_env(game: str, render: bool = False, **overrides):
    """Create an environment from the run config, with overrides applied"""
    if game not in ENV_CLASSES:
        raise ValueError(f"Unknown game: {game}")
    env_kwargs = ENV_CONFIGS[game].copy()
    env_kwargs.update(overrides)
    return ENV_CLASSES[game](render_mode="human" if render else None, **env_kwargs)


def run_random_episodes(game: str, n_episodes: int = 10, seed: int = 42,
                        log_dir: str = None, run_name: str = None, verbose: int = 1, **env_overrides):
    """
    Run random-action episodes and report statistics.

    Returns the summary dict from EpisodeMetricsLogger.
    """
    env = make_env(game, **env_overrides)
    log_dir = log_dir or RUN_CONFIG["log_dir"]
    run_name = run_name or f"{game}_random_s{seed}"

    with EpisodeMetricsLogger(log_dir, run_name, verbose=verbose) as metrics:
        for ep in range(n_episodes):
            ep_seed = seed + ep
            env.action_space.seed(ep_seed)
            obs, info = env.reset(seed=ep_seed)

            ep_return = 0.0
            ep_length = 0
            terminated = truncated = False
            while not (terminated or truncated):
                obs, reward, terminated, truncated, info = env.step(env.action_space.sample())
                ep_return += reward
                ep_length += 1

            metrics.record(ep_seed, ep_return, ep_length, info)
            if verbose > 0 and (ep + 1) % 10 == 0:
                recent = metrics.episode_returns[-10:]
                print(f"  Episode {ep + 1}/{n_episodes} | avg return (last 10): {np.mean(recent):.2f}")

    env.close()
    summary = metrics.get_summary()

    if verbose > 0:
        print("\n" + "=" * 50)
        print(f"RANDOM EPISODES: {game}")
        print("=" * 50)
        print(f"Episodes:      {summary['total_episodes']}")
        print(f"Mean Return:   {summary['mean_return']:.2f} +/- {summary['std_return']:.2f}")
        print(f"Mean Length:   {summary['mean_length']:.1f}")
        print(f"Mean Score:    {summary['mean_score']:.1f}")
        print(f"Max Score:     {summary['max_score']}")
        print("=" * 50)

    return summary


def run_all(n_episodes: int, log_dir: str):
    """Sweep every game / difficulty / seed combination"""
    runs = get_run_matrix()
    print(f"Running {len(runs)} configurations")
    results = {}
    for run in runs:
        print(f"\n>>> {run['name']}")
        results[run["name"]] = run_random_episodes(
            run["game"],
            n_episodes=n_episodes,
            seed=run["seed"],
            log_dir=log_dir,
            run_name=run["name"],
            difficulty=run["env_kwargs"]["difficulty"],
        )
    return results


def main():
    parser = argparse.ArgumentParser(description="Run headless random episodes")
    parser.add_argument("game", nargs="?", choices=sorted(ENV_CLASSES), default="breakout",
                        help="Game to run")
    parser.add_argument("--n-episodes", type=int, default=RUN_CONFIG["n_episodes"],
                        help="Number of episodes")
    parser.add_argument("--difficulty", choices=["easy", "normal", "hard"], default=None,
                        help="Override the configured difficulty")
    parser.add_argument("--seed", type=int, default=42,
                        help="Base seed; episode i uses seed + i")
    parser.add_argument("--log-dir", type=str, default=RUN_CONFIG["log_dir"],
                        help="Directory for metrics CSV files")
    parser.add_argument("--all", action="store_true",
                        help="Sweep all games, difficulties and seeds")
    args = parser.parse_args()

    if args.all:
        run_all(args.n_episodes, args.log_dir)
        return 0

    overrides = {}
    if args.difficulty:
        overrides["difficulty"] = args.difficulty

    run_random_episodes(
        args.game,
        n_episodes=args.n_episodes,
        seed=args.seed,
        log_dir=os.path.abspath(args.log_dir),
        **overrides,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
