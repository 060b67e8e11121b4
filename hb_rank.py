"""
Similarity ranking of a query against candidate vectors.

Ranking uses L1 distance and a stable sort, so equally distant candidates
keep the order they were given in. Hyperblocks are ranked through their
representative (mean) vectors and labelled with their majority class.
"""

import warnings
from collections import Counter
from dataclasses import dataclass, replace
from typing import List, Optional

import numpy as np
from joblib import Parallel, delayed

from hb_config import PARALLEL_THRESHOLD, VERBOSE_PARALLEL, diagnostic_print
from hb_metrics import as_vector, l1_distance
from hb_summary import RepresentativeSummary, aggregate


class InsufficientCandidatesWarning(UserWarning):
    """Fewer candidates exist than matches were requested; all are returned."""


@dataclass(frozen=True, eq=False)
class RankedMatch:
    distance: float
    vector: np.ndarray
    label: object
    position: int  # index in the candidate list
    summary: Optional[RepresentativeSummary] = None


def rank(query, candidates, k, n_jobs=1) -> List[RankedMatch]:
    """
    Rank candidates by ascending L1 distance to the query.

    Args:
        query: Query attribute vector
        candidates: Sequence of (vector, label) pairs
        k (int): Maximum number of matches to return
        n_jobs (int): joblib workers for the distance computation on large
            candidate lists

    Returns:
        list: Up to k RankedMatch objects, nearest first, ties in candidate
        order

    Raises:
        ValueError: k is less than 1
        ShapeError: A candidate's length differs from the query's
    """
    if k < 1:
        raise ValueError(f"k must be at least 1, got {k}")
    query = as_vector(query)
    candidates = list(candidates)

    if n_jobs != 1 and len(candidates) >= PARALLEL_THRESHOLD:
        distances = Parallel(n_jobs=n_jobs, verbose=VERBOSE_PARALLEL)(
            delayed(l1_distance)(query, vector) for vector, _ in candidates
        )
    else:
        distances = [l1_distance(query, vector) for vector, _ in candidates]

    if k > len(candidates):
        warnings.warn(
            f"Requested {k} matches but only {len(candidates)} candidate(s) exist",
            InsufficientCandidatesWarning,
            stacklevel=2,
        )

    # sorted() is stable
    order = sorted(range(len(candidates)), key=lambda i: distances[i])
    return [
        RankedMatch(
            distance=distances[i],
            vector=as_vector(candidates[i][0]),
            label=candidates[i][1],
            position=i,
        )
        for i in order[:k]
    ]


def rank_blocks(query, blocks, k, n_jobs=1) -> List[RankedMatch]:
    """Rank hyperblocks by the L1 distance from query to their mean vectors."""
    summaries = [block.summary if block.summary is not None else aggregate(block) for block in blocks]
    candidates = [(summary.mean, summary.majority_label) for summary in summaries]
    matches = rank(query, candidates, k, n_jobs=n_jobs)
    return [replace(match, summary=summaries[match.position]) for match in matches]


def vote(matches):
    """
    Majority label among ranked matches.

    A tie goes to True when True is among the tied labels, otherwise to the
    tied label of the nearest match.
    """
    if not matches:
        raise ValueError("Cannot vote on an empty match list")
    counts = Counter(match.label for match in matches)
    top = max(counts.values())
    tied = [label for label, count in counts.items() if count == top]
    if len(tied) == 1:
        return tied[0]
    if any(isinstance(label, (bool, np.bool_)) and bool(label) for label in tied):
        return True
    for match in matches:
        if match.label in tied:
            return match.label


def classify(query, blocks, k, n_jobs=1):
    """Predict the label of query from its k nearest hyperblocks."""
    matches = rank_blocks(query, blocks, k, n_jobs=n_jobs)
    prediction = vote(matches)
    diagnostic_print(f"  Nearest distances: {[round(m.distance, 4) for m in matches]} -> {prediction}")
    return prediction
