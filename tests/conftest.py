import numpy as np
import pytest

import hb_config
from hb_partition import LabeledPoint


@pytest.fixture(autouse=True)
def quiet_diagnostics():
    """Keep diagnostic mode off unless a test turns it on."""
    hb_config.set_diagnostic(False)
    yield
    hb_config.set_diagnostic(False)


@pytest.fixture
def random_points():
    """60 labeled 4-D points in [0, 1] from a fixed seed."""
    rng = np.random.default_rng(7)
    X = rng.random((60, 4))
    y = rng.random(60) < 0.5
    return [LabeledPoint(row, label) for row, label in zip(X, y)]


@pytest.fixture
def wbc_file(tmp_path):
    """A small Wisconsin Breast Cancer style record file (id, 9 attributes, class)."""
    rng = np.random.default_rng(11)
    lines = []
    for i in range(30):
        benign = i % 3 != 0
        low, high = (1, 4) if benign else (6, 11)
        attrs = [str(v) for v in rng.integers(low, high, size=9)]
        if i == 4:
            attrs[5] = '?'
        lines.append(','.join([str(1000000 + i)] + attrs + ['2' if benign else '4']))
    path = tmp_path / 'wbc.data'
    path.write_text('\n'.join(lines) + '\n')
    return path
