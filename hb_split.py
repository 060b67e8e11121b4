"""
Train/holdout splitting and single-query sampling.

Both operations take an explicit random source: an int seed, a
numpy.random.Generator, or None for fresh OS entropy. Reusing a seed
reproduces the result.
"""

import math
from typing import List, Tuple

import numpy as np


def make_rng(rng) -> np.random.Generator:
    """Return rng as a numpy Generator (seeds and None are accepted)."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def split(points, train_fraction, rng) -> Tuple[List, List]:
    """
    Shuffle points and cut them into a training set and a holdout set.

    Args:
        points: Sequence of points
        train_fraction (float): Share of points for training, in [0, 1];
            the training set gets floor(train_fraction * n) points
        rng: Seed or numpy Generator used for the shuffle

    Returns:
        tuple: (training, holdout) lists
    """
    if not 0.0 <= train_fraction <= 1.0:
        raise ValueError(f"train_fraction must be in [0, 1], got {train_fraction}")
    points = list(points)
    order = make_rng(rng).permutation(len(points))
    cut = math.floor(train_fraction * len(points))
    shuffled = [points[i] for i in order]
    return shuffled[:cut], shuffled[cut:]


def sample_one(holdout, rng):
    """
    Draw one point uniformly at random.

    Returns:
        tuple: (point, remaining) where remaining is a new list without the
        drawn point; holdout itself is left unchanged
    """
    holdout = list(holdout)
    if not holdout:
        raise ValueError("Cannot sample from an empty holdout set")
    index = int(make_rng(rng).integers(len(holdout)))
    return holdout[index], holdout[:index] + holdout[index + 1:]
