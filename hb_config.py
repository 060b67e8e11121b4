"""
Configuration and diagnostic output for the SPC hyperblock tools.

Defaults live here as module constants. They can be overridden by a
KEY=VALUE config file (see load_config) and then by command-line flags.
"""

from hb_metrics import ThresholdProfile

# =============================================================================
# CONSTANTS AND CONFIGURATION
# =============================================================================

# Global diagnostic flag for controlling logging output
DIAGNOSTIC_MODE = False

# Closeness thresholds on normalized [0, 1] attributes
DEFAULT_THRESHOLD_VALUE = 0.2
DEFAULT_MIN_THRESHOLD = 0.1
DEFAULT_TIGHT_ATTRIBUTES = (0, 1, 2, 3, 4, 5)  # SPC position coordinates

# Split and ranking parameters
DEFAULT_TRAIN_FRACTION = 0.9
DEFAULT_K = 5

# Ingestion parameters
DEFAULT_SCALE_FACTOR = 10
DEFAULT_TRUE_CODE = 2   # benign
DEFAULT_FALSE_CODE = 4  # malignant
DEFAULT_MISSING = 'row-first'
DEFAULT_NORMALIZE = 'scale'

# Minimum number of blocks/candidates before joblib is used
PARALLEL_THRESHOLD = 1000
VERBOSE_PARALLEL = 0

DEFAULTS = {
    'THRESHOLD_VALUE': DEFAULT_THRESHOLD_VALUE,
    'MIN_THRESHOLD': DEFAULT_MIN_THRESHOLD,
    'TIGHT_ATTRIBUTES': DEFAULT_TIGHT_ATTRIBUTES,
    'TRAIN_FRACTION': DEFAULT_TRAIN_FRACTION,
    'K': DEFAULT_K,
    'SCALE_FACTOR': DEFAULT_SCALE_FACTOR,
    'TRUE_CODE': DEFAULT_TRUE_CODE,
    'FALSE_CODE': DEFAULT_FALSE_CODE,
    'MISSING': DEFAULT_MISSING,
    'NORMALIZE': DEFAULT_NORMALIZE,
}

# =============================================================================
# LOGGING UTILITY FUNCTIONS
# =============================================================================

def diagnostic_print(*args, **kwargs):
    """
    Print function that only outputs when diagnostic mode is enabled.

    Args:
        *args: Arguments to print
        **kwargs: Keyword arguments for print function
    """
    if DIAGNOSTIC_MODE:
        print(*args, **kwargs)


def set_diagnostic(enabled):
    global DIAGNOSTIC_MODE
    DIAGNOSTIC_MODE = bool(enabled)

# =============================================================================
# CONFIG FILE
# =============================================================================

def parse_indices(text):
    """Parse "0,1,2" or "0-5" (or a mix) into a tuple of attribute indices."""
    indices = []
    for part in str(text).split(','):
        part = part.strip()
        if not part:
            continue
        if '-' in part:
            start, end = part.split('-', 1)
            indices.extend(range(int(start), int(end) + 1))
        else:
            indices.append(int(part))
    return tuple(indices)


def _coerce(key, raw):
    default = DEFAULTS[key]
    if isinstance(default, tuple):
        return parse_indices(raw)
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw.strip()


def load_config(path):
    """
    Load settings from a KEY=VALUE config file.

    Blank lines and lines starting with '#' are skipped. Keys are
    case-insensitive and must be one of DEFAULTS; values are converted to
    the type of the matching default.

    Args:
        path (str): Path to the config file

    Returns:
        dict: Settings read from the file (only the keys present)
    """
    settings = {}
    with open(path, 'r') as config_file:
        for line_number, line in enumerate(config_file, 1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            if '=' not in line:
                raise ValueError(f"{path}:{line_number}: expected KEY=VALUE, got {line!r}")
            key, raw = line.split('=', 1)
            key = key.strip().upper()
            if key not in DEFAULTS:
                raise ValueError(f"{path}:{line_number}: unknown setting {key}")
            try:
                settings[key] = _coerce(key, raw)
            except ValueError as e:
                raise ValueError(f"{path}:{line_number}: bad value for {key}: {e}") from e
    diagnostic_print(f"Loaded {len(settings)} setting(s) from {path}")
    return settings


def resolve_settings(overrides=None):
    """Merge overrides on top of DEFAULTS; None values are ignored."""
    settings = dict(DEFAULTS)
    for key, value in (overrides or {}).items():
        if value is not None:
            settings[key.upper()] = value
    return settings


def threshold_profile(settings):
    """Build the tiered ThresholdProfile described by a settings dict."""
    return ThresholdProfile.tiered(
        settings['TIGHT_ATTRIBUTES'],
        min_threshold=settings['MIN_THRESHOLD'],
        threshold_value=settings['THRESHOLD_VALUE'],
    )
