"""
Representative summaries for hyperblocks.

Each block is reduced to its attribute-wise mean vector, its size, its class
counts and its purity (majority-class share as a percentage).

Class ties: when a block holds as many True as False members, the majority
label is True and purity is 50.
"""

from dataclasses import dataclass, replace
from typing import List

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from hb_config import PARALLEL_THRESHOLD, VERBOSE_PARALLEL, diagnostic_print


class EmptyGroupError(ValueError):
    """A summary was requested for a block with no members."""


@dataclass(frozen=True, eq=False)
class RepresentativeSummary:
    mean: np.ndarray
    size: int
    true_count: int
    false_count: int
    majority_label: bool
    purity: float

    @property
    def counts(self):
        return {True: self.true_count, False: self.false_count}


def aggregate(block) -> RepresentativeSummary:
    """
    Summarize one hyperblock.

    Args:
        block (Hyperblock): Block to summarize

    Returns:
        RepresentativeSummary: Mean vector, size, class counts and purity

    Raises:
        EmptyGroupError: The block has no members
    """
    if block.size == 0:
        raise EmptyGroupError(f"Cannot summarize hyperblock seeded at {block.seed_index}: it has no members")

    vectors = block.vectors()
    labels = block.labels()
    mean = vectors.mean(axis=0)
    mean.setflags(write=False)

    true_count = int(np.count_nonzero(labels))
    false_count = block.size - true_count
    majority_label = true_count >= false_count
    purity = max(true_count, false_count) / block.size * 100

    return RepresentativeSummary(
        mean=mean,
        size=block.size,
        true_count=true_count,
        false_count=false_count,
        majority_label=majority_label,
        purity=purity,
    )


def summarize(blocks, n_jobs=1) -> List:
    """
    Attach a RepresentativeSummary to every block.

    Blocks are independent, so with n_jobs != 1 and at least
    PARALLEL_THRESHOLD blocks the work is spread over joblib workers.
    Order is preserved either way.

    Returns:
        list: New Hyperblock objects carrying their summaries
    """
    blocks = list(blocks)
    if n_jobs != 1 and len(blocks) >= PARALLEL_THRESHOLD:
        diagnostic_print(f"Summarizing {len(blocks)} blocks with n_jobs={n_jobs}")
        summaries = Parallel(n_jobs=n_jobs, verbose=VERBOSE_PARALLEL)(
            delayed(aggregate)(block) for block in blocks
        )
    else:
        summaries = [aggregate(block) for block in blocks]
    return [replace(block, summary=summary) for block, summary in zip(blocks, summaries)]


def blocks_frame(blocks) -> pd.DataFrame:
    """
    Tabulate summarized blocks, one row per block.

    Besides the summary, each row carries the per-attribute member bounds,
    i.e. the axis-aligned box that encloses the block.
    """
    rows = []
    for block_id, block in enumerate(blocks):
        summary = block.summary if block.summary is not None else aggregate(block)
        vectors = block.vectors()
        row = {
            'Block_ID': block_id,
            'Seed_Index': block.seed_index,
            'Size': summary.size,
            'True_Count': summary.true_count,
            'False_Count': summary.false_count,
            'Majority_Label': summary.majority_label,
            'Purity': summary.purity,
        }
        for i, value in enumerate(summary.mean):
            row[f'Attr_{i}_Mean'] = value
            row[f'Attr_{i}_Min'] = vectors[:, i].min()
            row[f'Attr_{i}_Max'] = vectors[:, i].max()
        rows.append(row)
    return pd.DataFrame(rows)
