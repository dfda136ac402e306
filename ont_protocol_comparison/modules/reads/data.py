"""
Read-level data management.

This module loads the per-run read tables (gzipped TSV, one row per read)
and derives the per-read metrics used by every downstream statistic:
identity and coverage fractions, translocation speed and elapsed hours.
"""

from pathlib import Path
from typing import Dict, Union
import re
import pandas as pd
import logging

from ..base import DataManager
from ...config import AnalysisConfig
from ...errors import InputNotFoundError, MalformedInputError

logger = logging.getLogger(__name__)

PERCENTAGE_PATTERN = r"\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?\s*%\s*"
_PERCENTAGE_RE = re.compile(PERCENTAGE_PATTERN)

PERCENTAGE_COLUMNS = {
    'mean_identity': 'mean_identity_fraction',
    'read_coverage': 'read_coverage_fraction',
}

NUMERIC_COLUMNS = ['read_length', 'template_duration', 'start_time']

CATEGORICAL_COLUMNS = [
    'reference_names',
    'demultiplex_status',
    'barcode_arrangement',
    'chimera',
    'within_bin_chimera',
    'cross_bin_chimera',
]

READ_COLUMNS = NUMERIC_COLUMNS + list(PERCENTAGE_COLUMNS) + CATEGORICAL_COLUMNS

DERIVED_COLUMNS = [
    'mean_identity_fraction',
    'read_coverage_fraction',
    'translocation_speed',
    'start_time_hours',
]


def parse_percentage(value: str) -> float:
    """
    Parse a percentage string such as ``"98.5%"`` into a fraction.

    Args:
        value: Text of the form ``<number>%``

    Returns:
        The value divided by 100 (``0.985`` for ``"98.5%"``)
    """
    if not isinstance(value, str) or not _PERCENTAGE_RE.fullmatch(value):
        raise MalformedInputError(f"Expected a percentage like '98.5%', got {value!r}")
    return float(value.strip()[:-1]) / 100.0


def format_percentage(fraction: float, decimals: int = 1) -> str:
    """Format a fraction back to percentage text, e.g. 0.985 -> '98.5%'."""
    return f"{fraction * 100:.{decimals}f}%"


def _percentage_to_fraction(series: pd.Series, source: str) -> pd.Series:
    """Vectorised parse_percentage; missing cells stay missing."""
    present = series.notna()
    text = series[present].astype(str)
    matched = text.str.fullmatch(PERCENTAGE_PATTERN)
    if not matched.all():
        examples = text[~matched].unique()[:3].tolist()
        raise MalformedInputError(
            f"Column '{series.name}' of {source} has values without a '<number>%' format: {examples}"
        )
    fractions = text.str.strip().str[:-1].astype(float) / 100.0
    return fractions.reindex(series.index)


def derive_read_metrics(reads: pd.DataFrame, source: str = "read table") -> pd.DataFrame:
    """
    Add the derived per-read metrics to a raw read table.

    The input frame is not modified; raw columns are carried over unchanged.

    Args:
        reads: Raw read table with length, duration, start time and percentage columns
        source: Description of the input, used in error messages

    Returns:
        New DataFrame with mean_identity_fraction, read_coverage_fraction,
        translocation_speed (bp/s, NaN for zero or missing duration) and
        start_time_hours
    """
    DataManager.require_columns(reads, NUMERIC_COLUMNS + list(PERCENTAGE_COLUMNS), source)

    length = DataManager.to_numeric(reads['read_length'], source)
    duration = DataManager.to_numeric(reads['template_duration'], source)
    start_time = DataManager.to_numeric(reads['start_time'], source)

    derived = {
        fraction_col: _percentage_to_fraction(reads[raw_col], source)
        for raw_col, fraction_col in PERCENTAGE_COLUMNS.items()
    }
    derived['translocation_speed'] = length / duration.where(duration != 0)
    derived['start_time_hours'] = start_time / 3600.0

    return reads.assign(**derived)


def load_read_table(file_path: Union[str, Path]) -> pd.DataFrame:
    """
    Load one delimited (optionally compressed) read table and derive metrics.

    Args:
        file_path: Path to a tab-separated read table, gzip allowed

    Returns:
        DataFrame of ReadRecords with derived columns
    """
    file_path = DataManager.require_file(Path(file_path))
    source = file_path.name

    try:
        reads = pd.read_csv(
            file_path,
            sep='\t',
            compression='infer',
            dtype={col: str for col in list(PERCENTAGE_COLUMNS) + CATEGORICAL_COLUMNS},
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise MalformedInputError(f"Could not parse read table {file_path}: {e}") from e

    DataManager.require_columns(reads, READ_COLUMNS, source)
    for col in NUMERIC_COLUMNS:
        reads[col] = DataManager.to_numeric(reads[col], source)

    reads = derive_read_metrics(reads, source)
    logger.info("Loaded %d reads from %s", len(reads), file_path)
    return reads


class ReadDataManager(DataManager):
    """
    Data manager for the per-run read tables.

    One table is loaded per configured (protocol, replicate) run; each table
    is tagged with run, protocol and replicate columns.
    """

    def load_data(self) -> Dict[str, pd.DataFrame]:
        """
        Load every configured read table.

        Returns:
            Dictionary mapping run name (e.g. ``ligation_run1``) to its read table
        """
        cached = self.get_from_cache('reads')
        if cached is not None:
            logger.debug("Using cached read tables")
            return cached

        data = {}
        for protocol, replicate in self.config.runs:
            run_name = AnalysisConfig.run_name(protocol, replicate)
            reads = load_read_table(self.config.read_table_path(protocol, replicate))
            data[run_name] = reads.assign(run=run_name, protocol=protocol, replicate=replicate)

        if not data:
            raise InputNotFoundError("No sequencing runs configured")

        self.set_cache('reads', data)
        return data

    def combined(self) -> pd.DataFrame:
        """All runs concatenated into one long table."""
        return pd.concat(list(self.load_data().values()), ignore_index=True)
