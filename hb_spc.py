#!/usr/bin/env python3
"""
SPC Hyperblock Pipeline

Loads a labeled record file, splits it into training and holdout pools,
partitions the training pool into hyperblocks, and then

- prints the hyperblocks with their size and purity,
- samples one holdout query and shows it next to its nearest hyperblocks,
- classifies every holdout point by its k nearest hyperblocks and reports
  accuracy,
- optionally exports the hyperblocks to CSV.

Usage:
  python hb_spc.py --dataset breast-cancer-wisconsin.data --seed 42 --k 5
"""

import argparse
import sys

import numpy as np
import pandas as pd
from sklearn.metrics import accuracy_score, confusion_matrix
from tqdm import tqdm

import hb_config
from hb_config import diagnostic_print
from hb_data import load_points
from hb_metrics import euclidean_distance
from hb_partition import partition
from hb_rank import classify, rank_blocks
from hb_split import sample_one, split
from hb_summary import blocks_frame, summarize

DEFAULT_DATASET = 'breast-cancer-wisconsin.data'


# =============================================================================
# PIPELINE STEPS
# =============================================================================

def build_blocks(points, profile, n_jobs=1, progress=False):
    """Partition the training points and summarize every block."""
    blocks = partition(points, profile, progress=progress)
    return summarize(blocks, n_jobs=n_jobs)


def comparison_frame(query, matches):
    """
    Put the query next to its ranked matches.

    The first row is the query itself (rank 0); the remaining rows are the
    matches in rank order with both L1 and Euclidean distances.
    """
    rows = [{
        'Rank': 0,
        'Label': query.label,
        'L1_Distance': 0.0,
        'Euclidean_Distance': 0.0,
        'Size': np.nan,
        'Purity': np.nan,
        **{f'Attr_{i}': v for i, v in enumerate(query.vector)},
    }]
    for rank, match in enumerate(matches, 1):
        rows.append({
            'Rank': rank,
            'Label': match.label,
            'L1_Distance': match.distance,
            'Euclidean_Distance': euclidean_distance(query.vector, match.vector),
            'Size': match.summary.size if match.summary is not None else np.nan,
            'Purity': match.summary.purity if match.summary is not None else np.nan,
            **{f'Attr_{i}': v for i, v in enumerate(match.vector)},
        })
    return pd.DataFrame(rows)


def evaluate(blocks, holdout, k, n_jobs=1, progress=False):
    """
    Classify every holdout point by its k nearest hyperblocks.

    Returns:
        dict: accuracy, confusion matrix (rows/cols ordered True, False),
        predictions and true labels
    """
    y_true = np.array([point.label for point in holdout], dtype=bool)
    predictions = np.array([
        classify(point.vector, blocks, k, n_jobs=n_jobs)
        for point in tqdm(holdout, desc="Classifying", unit="pt", disable=not progress)
    ], dtype=bool)
    return {
        'accuracy': accuracy_score(y_true, predictions),
        'confusion': confusion_matrix(y_true, predictions, labels=[True, False]),
        'predictions': predictions,
        'y_true': y_true,
    }


# =============================================================================
# MAIN EXECUTION
# =============================================================================

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Greedy hyperblock partitioning and nearest-block classification')
    parser.add_argument('--dataset', type=str, default=DEFAULT_DATASET,
                        help='Path to the comma-separated record file')
    parser.add_argument('--config', type=str, help='KEY=VALUE config file applied before the flags below')
    parser.add_argument('--no-id', action='store_true', help='Records have no leading sample id column')
    parser.add_argument('--threshold', type=float, help='Loose closeness threshold (THRESHOLD_VALUE)')
    parser.add_argument('--min-threshold', type=float, help='Tight closeness threshold (MIN_THRESHOLD)')
    parser.add_argument('--tight-attributes', type=hb_config.parse_indices,
                        help='Attributes held to the tight threshold, e.g. "0-5" or "0,1,2"')
    parser.add_argument('--train-fraction', type=float, help='Share of records used for training')
    parser.add_argument('--k', type=int, help='Number of nearest hyperblocks to report and vote with')
    parser.add_argument('--missing', type=str,
                        help="Missing-value strategy: 'row-first', 'column-median' or a number")
    parser.add_argument('--normalize', type=str, choices=['scale', 'minmax'], help='Normalization method')
    parser.add_argument('--seed', type=int, help='Random seed for the split and query sample')
    parser.add_argument('--n-jobs', type=int, default=1, help='joblib workers for large block sets')
    parser.add_argument('--export', type=str, help='Write the hyperblocks to this CSV file')
    parser.add_argument('--progress', action='store_true', help='Show progress bars')
    parser.add_argument('--diagnostic', action='store_true', help='Enable diagnostic mode (more logging)')
    return parser.parse_args(argv)


def settings_from_args(args):
    """Defaults, then the config file, then command-line flags."""
    overrides = hb_config.load_config(args.config) if args.config else {}
    flags = {
        'THRESHOLD_VALUE': args.threshold,
        'MIN_THRESHOLD': args.min_threshold,
        'TIGHT_ATTRIBUTES': args.tight_attributes,
        'TRAIN_FRACTION': args.train_fraction,
        'K': args.k,
        'MISSING': args.missing,
        'NORMALIZE': args.normalize,
    }
    # Flags left unset must not mask config file values
    overrides.update({key: value for key, value in flags.items() if value is not None})
    return hb_config.resolve_settings(overrides)


def run(args):
    settings = settings_from_args(args)
    profile = hb_config.threshold_profile(settings)
    k = settings['K']

    seed = args.seed
    if seed is None:
        seed = int(np.random.default_rng().integers(2 ** 32))
    print(f"Random seed: {seed}")
    rng = np.random.default_rng(seed)

    diagnostic_print("Loading dataset...")
    points = load_points(
        args.dataset,
        has_id=not args.no_id,
        missing=settings['MISSING'],
        method=settings['NORMALIZE'],
        scale_factor=settings['SCALE_FACTOR'],
        true_code=settings['TRUE_CODE'],
        false_code=settings['FALSE_CODE'],
    )
    training, holdout = split(points, settings['TRAIN_FRACTION'], rng)
    print(f"Dataset: {len(points)} cases ({len(training)} training, {len(holdout)} holdout)")
    if not training:
        raise ValueError("Training set is empty; raise --train-fraction")

    print("\n" + "=" * 60)
    print("Hyperblocks")
    print("=" * 60)
    blocks = build_blocks(training, profile, n_jobs=args.n_jobs, progress=args.progress)
    table = blocks_frame(blocks)
    print(f"Blocks: {len(blocks)}")
    print(f"Singleton blocks: {int((table['Size'] == 1).sum())}")
    print(f"Pure blocks: {int((table['Purity'] == 100).sum())}")
    print(f"Mean purity: {table['Purity'].mean():.2f}%")
    diagnostic_print(table[['Block_ID', 'Seed_Index', 'Size', 'Majority_Label', 'Purity']].to_string(index=False))

    if args.export:
        table.to_csv(args.export, index=False)
        print(f"✓ Hyperblocks exported to {args.export}")

    results = {'seed': seed, 'blocks': blocks, 'table': table}
    if not holdout:
        print("\nHoldout set is empty; skipping query and evaluation.")
        return results

    print("\n" + "=" * 60)
    print("Nearest hyperblocks to a sampled query")
    print("=" * 60)
    query, _ = sample_one(holdout, rng)
    matches = rank_blocks(query.vector, blocks, k, n_jobs=args.n_jobs)
    comparison = comparison_frame(query, matches)
    print(comparison[['Rank', 'Label', 'L1_Distance', 'Euclidean_Distance', 'Size', 'Purity']]
          .to_string(index=False))

    print("\n" + "=" * 60)
    print("Holdout evaluation")
    print("=" * 60)
    scores = evaluate(blocks, holdout, k, n_jobs=args.n_jobs, progress=args.progress)
    print(f"Accuracy: {scores['accuracy']:.4f}")
    print(f"Correct Predictions: {int((scores['predictions'] == scores['y_true']).sum())}/{len(holdout)}")
    print("Confusion matrix (rows: true, cols: predicted; order True, False):")
    print(scores['confusion'])

    results.update({'query': query, 'matches': matches, 'comparison': comparison, 'scores': scores})
    return results


def main(argv=None):
    """Main function for running the hyperblock pipeline."""
    args = parse_args(argv)
    hb_config.set_diagnostic(args.diagnostic or hb_config.DIAGNOSTIC_MODE)
    try:
        run(args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
