"""
Read-level summary statistics.

This module calculates yield, N50, demultiplexing error, chimera and
identity statistics over (optionally pre-filtered) read tables. Ratio-style
statistics return ``UNDEFINED`` (NaN) when their denominator is zero.
"""

from dataclasses import dataclass, asdict
from typing import Dict, FrozenSet, Iterable, Optional, Any, Union
import numpy as np
import pandas as pd
import logging

from .filters import FilterPipeline, reference_excluded, standard_quality_filters, start_time_below
from ..barcodes.data import barcode_numbers
from ...config import AnalysisConfig, USED_BARCODES, UNUSED_BARCODES
from ...errors import UNDEFINED

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DemuxErrorRates:
    """Misassigned reads as a percentage of correct + incorrect reads."""

    unused_pct: float
    used_pct: float
    total_pct: float


@dataclass(frozen=True)
class ChimeraRates:
    """Chimeric reads as a percentage of all reads."""

    within_bin_pct: float
    cross_bin_pct: float
    overall_pct: float


def _percentage(count: Union[int, float], total: Union[int, float], label: str) -> float:
    if total == 0:
        logger.debug("%s undefined: zero denominator", label)
        return UNDEFINED
    return count / total * 100.0


def total_yield(reads: pd.DataFrame) -> int:
    """Sum of read lengths in bp, ignoring missing lengths."""
    return int(pd.to_numeric(reads['read_length']).sum(skipna=True))


def yield_before(reads: pd.DataFrame, hour_cutoff: float) -> int:
    """Yield of reads that started before hour_cutoff hours into the run."""
    return total_yield(start_time_below(hour_cutoff).apply(reads))


def read_n50(reads: pd.DataFrame) -> float:
    """
    Read-length N50.

    Lengths are sorted in descending order and the N50 is the length at which
    the cumulative sum first reaches half of the total yield.

    Args:
        reads: Read table with a read_length column

    Returns:
        N50 in bp, or UNDEFINED for a table without reads
    """
    lengths = pd.to_numeric(reads['read_length']).dropna().to_numpy(dtype=float)
    total = lengths.sum()
    if lengths.size == 0 or total <= 0:
        logger.debug("N50 undefined: no read lengths")
        return UNDEFINED

    sorted_desc = np.sort(lengths)[::-1]
    cumulative = np.cumsum(sorted_desc)
    idx = int(np.searchsorted(cumulative, total / 2.0, side='left'))
    return float(sorted_desc[min(idx, sorted_desc.size - 1)])


def incorrect_demux_rate(reads: pd.DataFrame,
                         ambiguous_references: Iterable[str] = (),
                         used_barcodes: FrozenSet[int] = USED_BARCODES,
                         unused_barcodes: FrozenSet[int] = UNUSED_BARCODES) -> DemuxErrorRates:
    """
    Demultiplexing error rates.

    Reads aligned to an ambiguous (multi-genome) reference are removed first.
    Incorrectly demultiplexed reads are split by whether they were assigned to
    an unused or a used barcode. All three numbers share the denominator
    ``correct + incorrect``; unclassified and missing statuses are not counted.

    Args:
        reads: Read table with reference_names, demultiplex_status and barcode_arrangement
        ambiguous_references: Reference names to exclude
        used_barcodes: Barcodes that were assigned to a sample
        unused_barcodes: Barcodes with no sample

    Returns:
        DemuxErrorRates of (unused %, used %, total %)
    """
    filtered = reference_excluded(ambiguous_references).apply(reads)

    status = filtered['demultiplex_status'].astype('string').str.strip().str.lower()
    correct = (status == 'correct').fillna(False)
    incorrect = (status == 'incorrect').fillna(False)
    denominator = int(correct.sum()) + int(incorrect.sum())

    numbers = barcode_numbers(filtered['barcode_arrangement'])
    on_unused = numbers.isin(unused_barcodes)
    on_used = numbers.isin(used_barcodes)

    return DemuxErrorRates(
        unused_pct=_percentage(int((incorrect & on_unused).sum()), denominator, "Unused-barcode demux rate"),
        used_pct=_percentage(int((incorrect & on_used).sum()), denominator, "Used-barcode demux rate"),
        total_pct=_percentage(int(incorrect.sum()), denominator, "Total demux rate"),
    )


def chimera_rate(reads: pd.DataFrame) -> ChimeraRates:
    """
    Chimera rates as percentages of all rows.

    The denominator is the total row count, including reads without a chimera
    annotation, unlike incorrect_demux_rate.
    """
    total = len(reads)

    def count_yes(column: str) -> int:
        values = reads[column].astype('string').str.strip().str.lower()
        return int((values == 'yes').fillna(False).sum())

    return ChimeraRates(
        within_bin_pct=_percentage(count_yes('within_bin_chimera'), total, "Within-bin chimera rate"),
        cross_bin_pct=_percentage(count_yes('cross_bin_chimera'), total, "Cross-bin chimera rate"),
        overall_pct=_percentage(count_yes('chimera'), total, "Chimera rate"),
    )


def proportion_under_identity(reads: pd.DataFrame, threshold: float,
                              quality_filters: Optional[FilterPipeline] = None) -> float:
    """
    Fraction of quality-filtered reads whose identity is below threshold.

    Args:
        reads: Read table with derived metrics
        threshold: Identity fraction (e.g. 0.9)
        quality_filters: Filters applied first; defaults to identity > 0.5,
            length > 10000 and coverage > 0.9

    Returns:
        Fraction in [0, 1], or UNDEFINED when no read passes the filters
    """
    if quality_filters is None:
        quality_filters = standard_quality_filters(AnalysisConfig())
    filtered = quality_filters.apply(reads)
    if filtered.empty:
        logger.debug("Identity proportion undefined: no reads pass %s", quality_filters.describe())
        return UNDEFINED
    return float((filtered['mean_identity_fraction'] < threshold).sum() / len(filtered))


def translocation_speed_summary(reads: pd.DataFrame) -> Dict[str, float]:
    """Median and mean translocation speed over reads with a finite speed."""
    speeds = pd.to_numeric(reads['translocation_speed']).to_numpy(dtype=float)
    finite = speeds[np.isfinite(speeds)]
    if finite.size == 0:
        return {'median_speed': UNDEFINED, 'mean_speed': UNDEFINED, 'speed_reads': 0}
    return {
        'median_speed': float(np.median(finite)),
        'mean_speed': float(np.mean(finite)),
        'speed_reads': int(finite.size),
    }


def summarize_run(reads: pd.DataFrame, config: AnalysisConfig) -> Dict[str, Any]:
    """
    Compute every read-level statistic for one run.

    Args:
        reads: Read table of a single run
        config: Analysis configuration (thresholds, barcodes, references)

    Returns:
        Flat dictionary of statistics
    """
    demux = incorrect_demux_rate(reads, config.ambiguous_references,
                                 config.used_barcodes, config.unused_barcodes)
    chimeras = chimera_rate(reads)

    stats: Dict[str, Any] = {
        'reads': len(reads),
        'total_yield': total_yield(reads),
        'yield_before_cutoff': yield_before(reads, config.yield_hour_cutoff),
        'read_n50': read_n50(reads),
    }
    stats.update({f"demux_{key}": value for key, value in asdict(demux).items()})
    stats.update({f"chimera_{key}": value for key, value in asdict(chimeras).items()})
    stats['proportion_under_identity'] = proportion_under_identity(
        reads, config.identity_threshold, standard_quality_filters(config)
    )
    stats.update(translocation_speed_summary(reads))
    return stats


def summarize_runs(tables: Dict[str, pd.DataFrame], config: AnalysisConfig) -> pd.DataFrame:
    """
    Per-run statistics table.

    Each run is summarised from its own table; nothing is shared between runs.

    Args:
        tables: Mapping of run name to read table
        config: Analysis configuration

    Returns:
        DataFrame indexed by run with protocol, replicate and statistics columns
    """
    rows = []
    for run_name, reads in tables.items():
        row = {'run': run_name}
        for col in ('protocol', 'replicate'):
            if col in reads.columns and not reads.empty:
                row[col] = reads[col].iloc[0]
        row.update(summarize_run(reads, config))
        rows.append(row)
        logger.info("%s: %d reads, yield %d bp, N50 %s", run_name, row['reads'], row['total_yield'], row['read_n50'])

    if not rows:
        return pd.DataFrame()
    return pd.DataFrame(rows).set_index('run')


class ReadStatsSummaryStats:
    """
    Calculator for read-level statistics across runs.

    Handles:
    - Yield and N50 per run
    - Demultiplexing error and chimera rates
    - Identity and translocation speed summaries
    - Per-protocol aggregation of the per-run table
    """

    def __init__(self, tables: Dict[str, pd.DataFrame], config: AnalysisConfig):
        """
        Initialize read statistics calculator.

        Args:
            tables: Mapping of run name to read table
            config: Analysis configuration
        """
        self.tables = tables
        self.config = config

    def calculate_run_stats(self) -> pd.DataFrame:
        return summarize_runs(self.tables, self.config)

    def calculate_protocol_stats(self) -> pd.DataFrame:
        """Mean of each numeric per-run statistic, grouped by protocol."""
        run_stats = self.calculate_run_stats()
        if run_stats.empty or 'protocol' not in run_stats.columns:
            return pd.DataFrame()
        numeric = run_stats.drop(columns=['replicate'], errors='ignore')
        return numeric.groupby('protocol').mean(numeric_only=True)
