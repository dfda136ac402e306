"""
GC-depth smoothing.

LOWESS and binned summaries of relative depth against GC content.
"""

import numpy as np
import pandas as pd
import logging
from statsmodels.nonparametric.smoothers_lowess import lowess

logger = logging.getLogger(__name__)


def _finite_samples(samples: pd.DataFrame) -> pd.DataFrame:
    return (samples[['gc_content_percent', 'relative_depth']]
            .replace([np.inf, -np.inf], np.nan)
            .dropna())


def smooth_gc_depth(samples: pd.DataFrame, frac: float = 0.1) -> pd.DataFrame:
    """
    LOWESS curve of relative depth against GC content.

    Args:
        samples: Table with gc_content_percent and relative_depth
        frac: Fraction of samples used for each local fit

    Returns:
        DataFrame with gc_content_percent and smoothed_depth, sorted by GC
    """
    data = _finite_samples(samples)
    if data['gc_content_percent'].nunique() < 2:
        logger.debug("GC-depth smoothing skipped: fewer than two distinct GC values")
        return pd.DataFrame(columns=['gc_content_percent', 'smoothed_depth'])

    fitted = lowess(data['relative_depth'], data['gc_content_percent'], frac=frac, return_sorted=True)
    return pd.DataFrame(fitted, columns=['gc_content_percent', 'smoothed_depth'])


def binned_gc_depth(samples: pd.DataFrame, bin_width: float = 1.0) -> pd.DataFrame:
    """
    Mean and median relative depth per GC bin.

    Args:
        samples: Table with gc_content_percent and relative_depth
        bin_width: Width of each GC bin in percentage points

    Returns:
        DataFrame indexed by bin start with mean_depth, median_depth and samples
    """
    if bin_width <= 0:
        raise ValueError(f"bin_width must be positive, got {bin_width}")

    data = _finite_samples(samples)
    bins = np.floor(data['gc_content_percent'] / bin_width) * bin_width
    summary = data.groupby(bins.rename('gc_bin'))['relative_depth'].agg(['mean', 'median', 'size'])
    return summary.rename(columns={'mean': 'mean_depth', 'median': 'median_depth', 'size': 'samples'})
