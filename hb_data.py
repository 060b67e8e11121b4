"""
Ingestion of Wisconsin Breast Cancer style records.

Each line is "id,attr_1,...,attr_n,class" with '?' marking a missing value
and two reserved class codes (2 = benign, 4 = malignant by default). The
output is a list of LabeledPoints whose vectors are complete and scaled into
[0, 1], which is what the hyperblock core expects.
"""

import numpy as np
import pandas as pd
from sklearn.preprocessing import MinMaxScaler

from hb_config import (
    DEFAULT_FALSE_CODE,
    DEFAULT_MISSING,
    DEFAULT_NORMALIZE,
    DEFAULT_SCALE_FACTOR,
    DEFAULT_TRUE_CODE,
    diagnostic_print,
)
from hb_partition import points_from_arrays

MISSING_MARKER = '?'


def read_records(path, has_id=True):
    """
    Read a comma-separated record file without a header row.

    Args:
        path (str): Path to the data file
        has_id (bool): Whether the first column is a sample id to drop

    Returns:
        tuple: (features DataFrame with NaN for missing values, class code Series)
    """
    df = pd.read_csv(path, header=None, na_values=[MISSING_MARKER], skipinitialspace=True)
    if has_id:
        df = df.iloc[:, 1:]
    if df.shape[1] < 2:
        raise ValueError(f"{path}: expected at least one attribute and a class column")
    features = df.iloc[:, :-1].astype(float)
    features.columns = range(features.shape[1])
    codes = df.iloc[:, -1]
    if codes.isna().any():
        raise ValueError(f"{path}: {int(codes.isna().sum())} record(s) have no class code")
    diagnostic_print(f"Read {len(df)} records with {features.shape[1]} attributes from {path}")
    return features, codes


def impute_missing(features, strategy=DEFAULT_MISSING):
    """
    Replace missing attribute values.

    Args:
        features (pd.DataFrame): Attributes with NaN for missing values
        strategy: 'row-first' repeats the first known attribute of the same
            record, 'column-median' uses the attribute's median, a number is
            used as a constant

    Returns:
        pd.DataFrame: A copy with no missing values
    """
    missing = int(features.isna().sum().sum())
    if strategy == 'row-first':
        first_known = features.bfill(axis=1).iloc[:, 0]
        filled = features.copy()
        for column in filled.columns:
            filled[column] = filled[column].fillna(first_known)
    elif strategy == 'column-median':
        filled = features.fillna(features.median())
    else:
        try:
            value = float(strategy)
        except (TypeError, ValueError):
            raise ValueError(f"Unknown missing-value strategy: {strategy!r}") from None
        filled = features.fillna(value)

    if filled.isna().any().any():
        raise ValueError(f"Strategy {strategy!r} left missing values (a record or attribute has no known value)")
    if missing:
        diagnostic_print(f"Filled {missing} missing value(s) using {strategy!r}")
    return filled


def labels_from_codes(codes, true_code=DEFAULT_TRUE_CODE, false_code=DEFAULT_FALSE_CODE):
    """Map the two reserved class codes to True/False."""
    codes = pd.Series(codes)
    unknown = sorted(set(codes.unique()) - {true_code, false_code})
    if unknown:
        raise ValueError(f"Unknown class code(s) {unknown}; expected {true_code} or {false_code}")
    return (codes == true_code).to_numpy()


def normalize(X, method=DEFAULT_NORMALIZE, scale_factor=DEFAULT_SCALE_FACTOR):
    """
    Scale attributes into [0, 1].

    'scale' divides by a fixed factor (attributes graded 1-10 use 10);
    'minmax' rescales each attribute from its observed range.
    """
    X = np.asarray(X, dtype=float)
    if method == 'scale':
        if scale_factor <= 0:
            raise ValueError(f"scale_factor must be positive, got {scale_factor}")
        return X / scale_factor
    if method == 'minmax':
        return np.clip(MinMaxScaler().fit_transform(X), 0.0, 1.0)
    raise ValueError(f"Unknown normalization method: {method!r}")


def load_points(path, has_id=True, missing=DEFAULT_MISSING, method=DEFAULT_NORMALIZE,
                scale_factor=DEFAULT_SCALE_FACTOR, true_code=DEFAULT_TRUE_CODE,
                false_code=DEFAULT_FALSE_CODE):
    """
    Load a record file as normalized LabeledPoints.

    Returns:
        list: One LabeledPoint per record, in file order
    """
    features, codes = read_records(path, has_id=has_id)
    features = impute_missing(features, missing)
    labels = labels_from_codes(codes, true_code, false_code)
    X = normalize(features.to_numpy(), method, scale_factor)
    diagnostic_print(f"Classes: {int(labels.sum())} true / {int((~labels).sum())} false")
    return points_from_arrays(X, labels)
