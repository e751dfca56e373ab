"""
Per-episode metrics for headless runs.
Records: score, level, length, lives left, return.
"""

import csv
import os
from typing import Any, Dict, List, Optional

import numpy as np


class EpisodeMetricsLogger:
    """
    Collects per-episode stats and writes them to CSV for easy plotting.
    """

    COLUMNS = ["episode", "seed", "return", "length", "score", "level", "lives"]

    def __init__(self, log_dir: str, run_name: str, verbose: int = 1):
        self.log_dir = log_dir
        self.run_name = run_name
        self.verbose = verbose

        self.episode_returns: List[float] = []
        self.episode_lengths: List[int] = []
        self.episode_scores: List[int] = []

        self.csv_path: Optional[str] = None
        self.csv_file = None
        self.csv_writer = None

    def open(self):
        """Create the CSV file and header."""
        os.makedirs(self.log_dir, exist_ok=True)
        self.csv_path = os.path.join(self.log_dir, f"{self.run_name}_metrics.csv")

        self.csv_file = open(self.csv_path, "w", newline="")
        self.csv_writer = csv.writer(self.csv_file)
        self.csv_writer.writerow(self.COLUMNS)
        self.csv_file.flush()

        if self.verbose > 0:
            print(f"[EpisodeMetrics] Logging to {self.csv_path}")

    def record(self, seed: Optional[int], ep_return: float, length: int, info: Dict[str, Any]):
        self.episode_returns.append(ep_return)
        self.episode_lengths.append(length)
        self.episode_scores.append(int(info.get("score", 0)))

        if self.csv_writer:
            self.csv_writer.writerow([
                len(self.episode_returns),
                seed,
                round(ep_return, 4),
                length,
                info.get("score", 0),
                info.get("level", ""),
                info.get("lives", ""),
            ])
            self.csv_file.flush()

    def close(self):
        if self.csv_file:
            self.csv_file.close()
            self.csv_file = None
            self.csv_writer = None
            if self.verbose > 0:
                print(f"[EpisodeMetrics] Saved {len(self.episode_returns)} episodes to {self.csv_path}")

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def get_summary(self) -> Dict[str, Any]:
        """Get summary statistics."""
        if not self.episode_returns:
            return {}
        return {
            "mean_return": float(np.mean(self.episode_returns)),
            "std_return": float(np.std(self.episode_returns)),
            "mean_length": float(np.mean(self.episode_lengths)),
            "mean_score": float(np.mean(self.episode_scores)),
            "max_score": int(np.max(self.episode_scores)),
            "total_episodes": len(self.episode_returns),
        }
