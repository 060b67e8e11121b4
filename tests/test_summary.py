"""Tests for hyperblock summaries."""
import numpy as np
import pytest
from joblib import parallel_backend

import hb_summary
from hb_metrics import ThresholdProfile
from hb_partition import Hyperblock, LabeledPoint, partition
from hb_summary import EmptyGroupError, aggregate, blocks_frame, summarize


def make_block(rows, labels, start=0):
    members = tuple(LabeledPoint(row, label) for row, label in zip(rows, labels))
    indices = tuple(range(start, start + len(members)))
    return Hyperblock(members=members, indices=indices, seed_index=start)


def test_aggregate_mean_and_counts():
    block = make_block([[0.2, 0.4], [0.4, 0.8], [0.6, 0.0]], [True, True, False])
    summary = aggregate(block)

    np.testing.assert_allclose(summary.mean, [0.4, 0.4])
    assert summary.size == 3
    assert summary.true_count == 2
    assert summary.false_count == 1
    assert summary.counts == {True: 2, False: 1}
    assert summary.majority_label is True
    assert summary.purity == pytest.approx(200 / 3)


def test_aggregate_false_majority():
    summary = aggregate(make_block([[0.0], [0.1], [0.2]], [False, False, True]))
    assert summary.majority_label is False
    assert summary.purity == pytest.approx(200 / 3)


def test_aggregate_tie_goes_to_true():
    summary = aggregate(make_block([[0.0], [1.0]], [False, True]))
    assert summary.majority_label is True
    assert summary.purity == 50


def test_aggregate_empty_block():
    block = Hyperblock(members=(), indices=(), seed_index=0)
    with pytest.raises(EmptyGroupError):
        aggregate(block)


def test_summary_mean_is_read_only():
    summary = aggregate(make_block([[0.2]], [True]))
    with pytest.raises(ValueError):
        summary.mean[0] = 1.0


def test_purity_bounds(random_points):
    blocks = summarize(partition(random_points, ThresholdProfile.uniform(0.4)))
    for block in blocks:
        summary = block.summary
        assert 0 < summary.purity <= 100
        single_class = len(set(p.label for p in block.members)) == 1
        assert (summary.purity == 100) == single_class


def test_scenario_purity():
    points = [LabeledPoint([1, 1, 1], True), LabeledPoint([1, 1, 2], True), LabeledPoint([9, 9, 9], False)]
    blocks = summarize(partition(points, ThresholdProfile.uniform(1)))
    assert [(b.summary.size, b.summary.purity) for b in blocks] == [(2, 100), (1, 100)]
    np.testing.assert_allclose(blocks[0].summary.mean, [1, 1, 1.5])


def test_summarize_preserves_order(random_points):
    blocks = partition(random_points, ThresholdProfile.uniform(0.3))
    summarized = summarize(blocks)
    assert [b.indices for b in summarized] == [b.indices for b in blocks]
    assert all(b.summary is not None for b in summarized)
    assert all(b.summary is None for b in blocks)


def test_summarize_parallel_matches_serial(random_points, monkeypatch):
    blocks = partition(random_points, ThresholdProfile.uniform(0.3))
    serial = summarize(blocks)

    monkeypatch.setattr(hb_summary, 'PARALLEL_THRESHOLD', 1)
    with parallel_backend('threading'):
        parallel = summarize(blocks, n_jobs=2)

    assert [b.indices for b in parallel] == [b.indices for b in serial]
    for p, s in zip(parallel, serial):
        np.testing.assert_allclose(p.summary.mean, s.summary.mean)
        assert p.summary.purity == s.summary.purity


def test_blocks_frame():
    points = [LabeledPoint([0.1, 0.5], True), LabeledPoint([0.3, 0.4], False), LabeledPoint([0.9, 0.9], False)]
    blocks = summarize(partition(points, ThresholdProfile.uniform(0.25)))
    frame = blocks_frame(blocks)

    assert list(frame['Block_ID']) == [0, 1]
    assert list(frame['Size']) == [2, 1]
    assert list(frame['Majority_Label']) == [True, False]
    assert list(frame['Purity']) == [50, 100]
    assert frame.loc[0, 'Attr_0_Min'] == pytest.approx(0.1)
    assert frame.loc[0, 'Attr_0_Max'] == pytest.approx(0.3)
    assert frame.loc[0, 'Attr_1_Mean'] == pytest.approx(0.45)
