"""
Greedy neighborhood partitioner.

Splits a list of labeled points into hyperblocks: the first unclaimed point
seeds a block, every unclaimed point close to that seed joins it, and the
pass repeats until every point is claimed. Blocks are seed-centred, so two
members of one block are both close to the seed but need not be close to
each other, and the result depends on input order.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from hb_config import diagnostic_print
from hb_metrics import as_vector, close_mask, resolve_thresholds, stack_vectors


@dataclass(frozen=True, eq=False)
class LabeledPoint:
    """An attribute vector with a two-class label. The vector is read-only."""
    vector: np.ndarray
    label: bool

    def __post_init__(self):
        vector = as_vector(self.vector).copy()
        vector.setflags(write=False)
        object.__setattr__(self, 'vector', vector)
        object.__setattr__(self, 'label', bool(self.label))

    def __len__(self):
        return self.vector.shape[0]


@dataclass(frozen=True, eq=False)
class Hyperblock:
    """
    Points gathered around one seed during a single partitioning pass.

    indices are the members' positions in the list given to partition();
    summary is filled in by hb_summary.summarize().
    """
    members: Tuple[LabeledPoint, ...]
    indices: Tuple[int, ...]
    seed_index: int
    summary: Optional['RepresentativeSummary'] = None  # noqa: F821

    @property
    def size(self):
        return len(self.members)

    @property
    def seed(self) -> LabeledPoint:
        return self.members[self.indices.index(self.seed_index)]

    def vectors(self) -> np.ndarray:
        return stack_vectors([point.vector for point in self.members])

    def labels(self) -> np.ndarray:
        return np.array([point.label for point in self.members], dtype=bool)


def points_from_arrays(X, y) -> List[LabeledPoint]:
    """Build LabeledPoints from a feature matrix and a matching label array."""
    X = np.asarray(X, dtype=float)
    y = np.asarray(y)
    if X.ndim != 2:
        raise ValueError(f"Expected a 2-D feature matrix, got shape {X.shape}")
    if len(X) != len(y):
        raise ValueError(f"Feature rows ({len(X)}) and labels ({len(y)}) differ in length")
    return [LabeledPoint(row, label) for row, label in zip(X, y)]


def partition(points, thresholds, progress=False) -> List[Hyperblock]:
    """
    Greedily partition points into hyperblocks.

    Args:
        points: Sequence of LabeledPoint, all of the same length
        thresholds: ThresholdProfile, or one threshold per attribute
        progress (bool): Show a tqdm progress bar over claimed points

    Returns:
        list: Hyperblocks in the order their seeds were taken. Every input
        point belongs to exactly one block.

    Raises:
        ShapeError: Points have different lengths, or the threshold profile
        does not fit them
    """
    points = list(points)
    n = len(points)
    if n == 0:
        return []

    # Arena of stable indices into an immutable matrix; claimed marks membership
    matrix = stack_vectors([point.vector for point in points])
    limits = resolve_thresholds(thresholds, matrix.shape[1])
    claimed = np.zeros(n, dtype=bool)
    blocks = []

    with tqdm(total=n, desc="Partitioning", unit="pt", disable=not progress) as pbar:
        while not claimed.all():
            seed = int(np.argmin(claimed))  # first unclaimed index
            candidates = np.flatnonzero(~claimed)
            mask = close_mask(matrix[seed], matrix[candidates], limits)
            mask[0] = True  # candidates[0] is the seed
            members = candidates[mask]

            claimed[members] = True
            blocks.append(Hyperblock(
                members=tuple(points[i] for i in members),
                indices=tuple(int(i) for i in members),
                seed_index=seed,
            ))
            pbar.update(len(members))
            diagnostic_print(f"  Block {len(blocks) - 1}: seed {seed}, {len(members)} member(s), "
                             f"{n - int(claimed.sum())} remaining")

    diagnostic_print(f"Partitioned {n} points into {len(blocks)} hyperblocks")
    return blocks
