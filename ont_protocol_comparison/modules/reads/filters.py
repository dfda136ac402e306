"""
Composable read filters.

Each filter is an independent threshold predicate over one column of a read
table. Filters combine with ``&`` (or ``FilterPipeline``) into an
order-insensitive intersection. Applying a filter never modifies its input;
rows whose filtered column is missing are dropped.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Tuple, Union
import pandas as pd
import logging

from ..base import DataManager
from ...config import AnalysisConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReadFilter:
    """A single named predicate over one read-table column."""

    name: str
    column: str
    predicate: Callable[[pd.Series], pd.Series]

    def mask(self, reads: pd.DataFrame) -> pd.Series:
        """Boolean mask of rows passing this filter; missing values fail."""
        DataManager.require_columns(reads, [self.column], "read table")
        values = reads[self.column]
        passed = self.predicate(values)
        return passed.fillna(False).astype(bool) & values.notna()

    def apply(self, reads: pd.DataFrame) -> pd.DataFrame:
        return FilterPipeline((self,)).apply(reads)

    def __call__(self, reads: pd.DataFrame) -> pd.DataFrame:
        return self.apply(reads)

    def __and__(self, other: Union['ReadFilter', 'FilterPipeline']) -> 'FilterPipeline':
        return FilterPipeline((self,)) & other


@dataclass(frozen=True)
class FilterPipeline:
    """Intersection of read filters."""

    filters: Tuple[ReadFilter, ...] = ()

    def mask(self, reads: pd.DataFrame) -> pd.Series:
        keep = pd.Series(True, index=reads.index)
        for read_filter in self.filters:
            keep &= read_filter.mask(reads)
        return keep

    def apply(self, reads: pd.DataFrame) -> pd.DataFrame:
        """
        Return the rows passing every filter as a new table.

        Args:
            reads: Read table (not modified)

        Returns:
            Filtered copy of the read table
        """
        keep = self.mask(reads)
        logger.debug("Filters [%s] kept %d of %d reads", self.describe(), int(keep.sum()), len(reads))
        return reads.loc[keep].copy()

    def __call__(self, reads: pd.DataFrame) -> pd.DataFrame:
        return self.apply(reads)

    def __and__(self, other: Union[ReadFilter, 'FilterPipeline']) -> 'FilterPipeline':
        if isinstance(other, ReadFilter):
            return FilterPipeline(self.filters + (other,))
        if isinstance(other, FilterPipeline):
            return FilterPipeline(self.filters + other.filters)
        return NotImplemented

    def __len__(self) -> int:
        return len(self.filters)

    def describe(self) -> str:
        return ", ".join(f.name for f in self.filters) or "no filters"


def identity_above(threshold: float) -> ReadFilter:
    """Keep reads with mean_identity_fraction > threshold."""
    return ReadFilter(f"identity > {threshold}", 'mean_identity_fraction', lambda s: s > threshold)


def length_above(threshold: float) -> ReadFilter:
    """Keep reads with read_length > threshold."""
    return ReadFilter(f"length > {threshold}", 'read_length', lambda s: s > threshold)


def coverage_above(threshold: float) -> ReadFilter:
    """Keep reads with read_coverage_fraction > threshold."""
    return ReadFilter(f"coverage > {threshold}", 'read_coverage_fraction', lambda s: s > threshold)


def start_time_below(hours: float) -> ReadFilter:
    """Keep reads that started before the given number of hours."""
    return ReadFilter(f"start < {hours} h", 'start_time_hours', lambda s: s < hours)


def reference_excluded(names: Iterable[str]) -> ReadFilter:
    """Drop reads whose reference_names is one of the excluded names."""
    excluded = frozenset(names)
    return ReadFilter(
        f"reference not in {sorted(excluded)}",
        'reference_names',
        lambda s: ~s.isin(excluded),
    )


def standard_quality_filters(config: AnalysisConfig) -> FilterPipeline:
    """Identity, length and coverage thresholds applied before identity statistics."""
    return (identity_above(config.min_identity)
            & length_above(config.min_length)
            & coverage_above(config.min_coverage))
