"""
Synthetic key datasets for demos and smoke tests.

Keys are unique random integers; write_csv stores them in the layout
ingest_csv expects.
"""

import csv
import random
from typing import Iterable, List, Optional


def generate_keys(count: int, seed: Optional[int] = None, low: int = 0,
                  high: Optional[int] = None) -> List[int]:
    """Return count distinct integers from [low, high) in random order."""
    if high is None:
        high = low + max(count * 10, 1)
    if count > high - low:
        raise ValueError(f"cannot draw {count} distinct keys from [{low}, {high})")
    rng = random.Random(seed)
    return rng.sample(range(low, high), count)


def write_csv(file_path: str, keys: Iterable, key_column: str = "key") -> None:
    with open(file_path, mode='w', newline='', encoding='utf-8') as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow([key_column])
        for key in keys:
            writer.writerow([key])
