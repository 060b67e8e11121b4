"""
Distance metrics and the thresholded closeness predicate.

Vectors are 1-D numeric sequences that the caller has already scaled into a
common range (normally [0, 1]). Every function here is pure and fails fast on
mismatched lengths instead of truncating or padding.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

# Absorbs float rounding in scaled differences (0.9 - 0.7 > 0.2)
BOUNDARY_TOLERANCE = 1e-9


class ShapeError(ValueError):
    """Vectors of mismatched length were compared."""


def as_vector(values) -> np.ndarray:
    """Return values as a 1-D float array; ShapeError if not 1-D, ValueError if not finite."""
    vector = np.asarray(values, dtype=float)
    if vector.ndim != 1:
        raise ShapeError(f"Expected a 1-D attribute vector, got shape {vector.shape}")
    if not np.isfinite(vector).all():
        raise ValueError("Attribute vectors must be finite (no NaN or infinity)")
    return vector


def _pair(a, b) -> Tuple[np.ndarray, np.ndarray]:
    a = as_vector(a)
    b = as_vector(b)
    if a.shape[0] != b.shape[0]:
        raise ShapeError(f"Vector lengths differ: {a.shape[0]} != {b.shape[0]}")
    return a, b


# =============================================================================
# THRESHOLD PROFILE
# =============================================================================

@dataclass(frozen=True)
class ThresholdProfile:
    """
    Per-attribute maximum allowed absolute difference.

    groups holds (indices, threshold) pairs; indices not named by any group
    fall back to default. A profile is resolved against a vector length with
    resolve(n), which yields one threshold per attribute.
    """
    groups: Tuple[Tuple[Tuple[int, ...], float], ...] = ()
    default: Optional[float] = None

    def __post_init__(self):
        groups = []
        seen = set()
        for indices, threshold in self.groups:
            indices = tuple(int(i) for i in indices)
            threshold = float(threshold)
            if threshold < 0:
                raise ValueError(f"Threshold must be non-negative, got {threshold}")
            for index in indices:
                if index < 0:
                    raise ValueError(f"Attribute index must be non-negative, got {index}")
                if index in seen:
                    raise ValueError(f"Attribute {index} is assigned to more than one threshold group")
                seen.add(index)
            groups.append((indices, threshold))
        object.__setattr__(self, 'groups', tuple(groups))

        if self.default is not None:
            default = float(self.default)
            if default < 0:
                raise ValueError(f"Threshold must be non-negative, got {default}")
            object.__setattr__(self, 'default', default)

    @classmethod
    def uniform(cls, value):
        """Same threshold for every attribute."""
        return cls(default=value)

    @classmethod
    def tiered(cls, tight_indices, min_threshold, threshold_value):
        """
        Tight bound for the given attribute indices, looser bound elsewhere.

        Args:
            tight_indices: Attributes that must match closely (position)
            min_threshold (float): Bound for the tight attributes
            threshold_value (float): Bound for every other attribute (shape)
        """
        return cls(groups=((tuple(tight_indices), min_threshold),), default=threshold_value)

    def resolve(self, n_features) -> np.ndarray:
        """
        Expand the profile to one threshold per attribute.

        Raises:
            ShapeError: A group names an index outside the vector
            ValueError: An attribute has no threshold and there is no default
        """
        thresholds = np.full(n_features, np.nan if self.default is None else self.default)
        for indices, threshold in self.groups:
            for index in indices:
                if index >= n_features:
                    raise ShapeError(
                        f"Threshold group names attribute {index} but vectors have {n_features} attributes"
                    )
                thresholds[index] = threshold
        if np.isnan(thresholds).any():
            missing = np.flatnonzero(np.isnan(thresholds)).tolist()
            raise ValueError(f"No threshold for attribute(s) {missing} and no default set")
        return thresholds


def resolve_thresholds(thresholds, n_features) -> np.ndarray:
    """Resolve a ThresholdProfile (or explicit per-attribute thresholds) to an array."""
    if isinstance(thresholds, ThresholdProfile):
        return thresholds.resolve(n_features)
    resolved = as_vector(thresholds)
    if resolved.shape[0] != n_features:
        raise ShapeError(f"Expected {n_features} thresholds, got {resolved.shape[0]}")
    if (resolved < 0).any():
        raise ValueError(f"Thresholds must be non-negative, got {resolved.tolist()}")
    return resolved


# =============================================================================
# DISTANCES
# =============================================================================

def l1_distance(a, b) -> float:
    """Sum of absolute attribute differences."""
    a, b = _pair(a, b)
    return float(np.sum(np.abs(a - b)))


def euclidean_distance(a, b) -> float:
    """Euclidean distance; used for diagnostic reporting only."""
    a, b = _pair(a, b)
    diff = a - b
    return float(np.sqrt(np.sum(diff * diff)))


def is_close(seed, candidate, thresholds) -> bool:
    """
    Check whether candidate lies within the per-attribute thresholds of seed.

    Args:
        seed: Reference vector
        candidate: Vector to test
        thresholds: ThresholdProfile, or one threshold per attribute

    Returns:
        bool: False at the first attribute whose difference exceeds its
        threshold, True if every attribute passes
    """
    seed, candidate = _pair(seed, candidate)
    limits = resolve_thresholds(thresholds, seed.shape[0])
    for s, c, limit in zip(seed, candidate, limits):
        if not abs(s - c) <= limit + BOUNDARY_TOLERANCE:
            return False
    return True


def close_mask(seed, matrix, thresholds) -> np.ndarray:
    """
    Vectorized is_close of one seed against every row of a matrix.

    Returns:
        np.ndarray: Boolean array with one entry per row
    """
    seed = as_vector(seed)
    matrix = np.asarray(matrix, dtype=float)
    if matrix.ndim != 2 or matrix.shape[1] != seed.shape[0]:
        raise ShapeError(f"Cannot compare a {seed.shape[0]}-D seed against rows of shape {matrix.shape}")
    if not np.isfinite(matrix).all():
        raise ValueError("Attribute vectors must be finite (no NaN or infinity)")
    limits = resolve_thresholds(thresholds, seed.shape[0])
    return np.all(np.abs(matrix - seed) <= limits + BOUNDARY_TOLERANCE, axis=1)


def stack_vectors(vectors: Sequence) -> np.ndarray:
    """Stack equal-length vectors into an (n, d) matrix, raising ShapeError if ragged."""
    if len(vectors) == 0:
        return np.empty((0, 0))
    rows = [as_vector(v) for v in vectors]
    width = rows[0].shape[0]
    for position, row in enumerate(rows):
        if row.shape[0] != width:
            raise ShapeError(f"Vector {position} has {row.shape[0]} attributes, expected {width}")
    return np.vstack(rows)
