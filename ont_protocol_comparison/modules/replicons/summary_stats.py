"""
Replicon depth summary statistics.

Partitioned summaries of plasmid depth ratios by replicon size, plus the
per-protocol regression results.
"""

from typing import Dict, Iterable, Any
import pandas as pd
import logging

from .regression import fit_all_regressions, regressions_table

logger = logging.getLogger(__name__)

RATIO_COLUMNS = ['ligation_to_illumina_ratio', 'rapid_to_illumina_ratio']


def _bucket_stats(values: pd.Series) -> Dict[str, Any]:
    return {
        'mean': float(values.mean(skipna=True)),
        'min': float(values.min(skipna=True)),
        'replicons': int(values.notna().sum()),
    }


def summary_by_size_bucket(plasmids: pd.DataFrame, size_threshold_bp: int,
                           column: str = 'ligation_to_illumina_ratio') -> Dict[str, Dict[str, Any]]:
    """
    Mean and minimum depth ratio above and below a size threshold.

    Replicons without a ratio (zero Illumina depth) are not counted.
    Replicons strictly larger than the threshold go to 'above', strictly
    smaller to 'below'; replicons exactly at the threshold are in neither.

    Args:
        plasmids: Output of prepare_replicon_table
        size_threshold_bp: Size threshold in bp
        column: Ratio column to summarise

    Returns:
        {'above': {'mean', 'min', 'replicons'}, 'below': {...}}; mean and min
        are NaN for an empty bucket
    """
    size = plasmids['size_bp']
    values = plasmids[column]
    return {
        'above': _bucket_stats(values[size > size_threshold_bp]),
        'below': _bucket_stats(values[size < size_threshold_bp]),
    }


def size_bucket_table(plasmids: pd.DataFrame, thresholds: Iterable[int],
                      columns: Iterable[str] = tuple(RATIO_COLUMNS)) -> pd.DataFrame:
    """Long table of summary_by_size_bucket for every threshold and ratio column."""
    rows = []
    for threshold in thresholds:
        for column in columns:
            for side, stats in summary_by_size_bucket(plasmids, threshold, column).items():
                rows.append({'threshold_bp': threshold, 'ratio': column, 'bucket': side, **stats})
    return pd.DataFrame(rows, columns=['threshold_bp', 'ratio', 'bucket', 'mean', 'min', 'replicons'])


class RepliconSummaryStats:
    """
    Calculator for plasmid depth statistics.

    Handles:
    - ONT vs Illumina depth regressions per protocol
    - Depth ratio vs plasmid size regressions
    - Size-partitioned depth ratio summaries
    """

    def __init__(self, plasmids: pd.DataFrame, size_thresholds: Iterable[int]):
        """
        Initialize replicon summary stats calculator.

        Args:
            plasmids: Plasmid table (chromosomes excluded)
            size_thresholds: Thresholds for the size-partitioned summaries
        """
        self.plasmids = plasmids
        self.size_thresholds = tuple(size_thresholds)

    def calculate_regressions(self) -> pd.DataFrame:
        return regressions_table(fit_all_regressions(self.plasmids))

    def calculate_size_buckets(self) -> pd.DataFrame:
        return size_bucket_table(self.plasmids, self.size_thresholds)

    def calculate_category_counts(self) -> Dict[str, int]:
        """Number of plasmids per size category."""
        counts = self.plasmids['size_category'].value_counts()
        return {str(k): int(v) for k, v in counts.items()}
