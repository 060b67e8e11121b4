"""End-to-end tests for the pipeline driver."""
import numpy as np
import pandas as pd
import pytest

from hb_config import DEFAULT_MIN_THRESHOLD, resolve_settings, threshold_profile
from hb_partition import LabeledPoint
from hb_rank import rank_blocks
from hb_spc import build_blocks, comparison_frame, evaluate, main, parse_args, settings_from_args


def separated_points(rng, n):
    points = []
    for i in range(n):
        benign = i % 2 == 0
        low, high = (0.1, 0.3) if benign else (0.6, 1.0)
        points.append(LabeledPoint(rng.uniform(low, high, size=9), benign))
    return points


def test_evaluate_separated_classes():
    rng = np.random.default_rng(0)
    training = separated_points(rng, 40)
    holdout = separated_points(rng, 10)
    blocks = build_blocks(training, threshold_profile(resolve_settings()))

    scores = evaluate(blocks, holdout, k=1)

    assert scores['accuracy'] == 1.0
    assert scores['confusion'].tolist() == [[5, 0], [0, 5]]
    assert scores['predictions'].tolist() == scores['y_true'].tolist()


def test_comparison_frame_puts_query_first():
    rng = np.random.default_rng(1)
    blocks = build_blocks(separated_points(rng, 20), threshold_profile(resolve_settings()))
    query = separated_points(rng, 1)[0]
    matches = rank_blocks(query.vector, blocks, k=3)

    frame = comparison_frame(query, matches)

    assert list(frame['Rank']) == [0, 1, 2, 3]
    assert frame.loc[0, 'Label'] == query.label
    assert frame.loc[0, 'L1_Distance'] == 0
    assert list(frame['L1_Distance'][1:]) == pytest.approx([m.distance for m in matches])
    assert frame.loc[1, 'Attr_0'] == pytest.approx(matches[0].vector[0])
    assert (frame['Euclidean_Distance'][1:] <= frame['L1_Distance'][1:] + 1e-12).all()


def test_main_runs_pipeline(wbc_file, tmp_path, capsys):
    export = tmp_path / 'blocks.csv'
    status = main(['--dataset', str(wbc_file), '--seed', '42', '--k', '3', '--export', str(export)])
    out = capsys.readouterr().out

    assert status == 0
    assert "Random seed: 42" in out
    assert "Dataset: 30 cases (27 training, 3 holdout)" in out
    assert "Accuracy:" in out

    table = pd.read_csv(export)
    assert table['Size'].sum() == 27
    assert ((table['Purity'] > 0) & (table['Purity'] <= 100)).all()


def test_main_is_reproducible(wbc_file, tmp_path, capsys):
    first, second = tmp_path / 'a.csv', tmp_path / 'b.csv'
    main(['--dataset', str(wbc_file), '--seed', '7', '--export', str(first)])
    main(['--dataset', str(wbc_file), '--seed', '7', '--export', str(second)])
    capsys.readouterr()
    pd.testing.assert_frame_equal(pd.read_csv(first), pd.read_csv(second))


def test_main_applies_config_file(wbc_file, tmp_path, capsys):
    config = tmp_path / 'config.config'
    config.write_text("TRAIN_FRACTION=1.0\n")
    status = main(['--dataset', str(wbc_file), '--seed', '1', '--config', str(config)])
    out = capsys.readouterr().out

    assert status == 0
    assert "(30 training, 0 holdout)" in out
    assert "skipping query and evaluation" in out


def test_main_reports_missing_dataset(tmp_path, capsys):
    status = main(['--dataset', str(tmp_path / 'missing.data'), '--seed', '1'])
    assert status == 1
    assert "Error:" in capsys.readouterr().out


def test_flags_override_config_file(tmp_path):
    config = tmp_path / 'config.config'
    config.write_text("TRAIN_FRACTION=1.0\nK=2\nTHRESHOLD_VALUE=0.3\n")
    settings = settings_from_args(parse_args(['--config', str(config), '--k', '4']))

    assert settings['TRAIN_FRACTION'] == 1.0
    assert settings['THRESHOLD_VALUE'] == 0.3
    assert settings['K'] == 4
    assert settings['MIN_THRESHOLD'] == DEFAULT_MIN_THRESHOLD


def test_main_flag_beats_config_file(wbc_file, tmp_path, capsys):
    config = tmp_path / 'config.config'
    config.write_text("TRAIN_FRACTION=1.0\n")
    status = main(['--dataset', str(wbc_file), '--seed', '1', '--config', str(config),
                   '--train-fraction', '0.5'])
    assert status == 0
    assert "(15 training, 15 holdout)" in capsys.readouterr().out
