"""
Replicon data management.

Loads the "Per-replicon" workbook sheet (one row per chromosome or plasmid,
depths normalised to the genome's chromosome) and derives the depth ratios,
size categories and log10 columns used by the depth-ratio regressions.
"""

from typing import Dict
import numpy as np
import pandas as pd
import logging

from ..base import DataManager
from ...config import PROTOCOLS

logger = logging.getLogger(__name__)

REPLICON_COLUMNS = [
    'genome_id',
    'replicon_id',
    'size_bp',
    'gc_content',
    'ont_depth_ligation',
    'ont_depth_rapid',
    'illumina_depth',
]

NUMERIC_REPLICON_COLUMNS = ['size_bp', 'gc_content', 'ont_depth_ligation', 'ont_depth_rapid', 'illumina_depth']


def chromosome_mask(replicons: pd.DataFrame) -> pd.Series:
    """
    Mark the chromosome row of each genome.

    A replicon whose id contains "chromosome" is a chromosome; genomes without
    such a row use their largest replicon.
    """
    named = (replicons['replicon_id'].astype('string')
             .str.contains('chromosome', case=False, na=False)
             .astype(bool))
    genome_has_named = named.groupby(replicons['genome_id']).transform('any').astype(bool)
    largest = replicons['size_bp'] == replicons.groupby('genome_id')['size_bp'].transform('max')
    return named | (~genome_has_named & largest)


def _log10(values: pd.Series) -> pd.Series:
    """log10 with non-positive inputs mapped to NaN."""
    with np.errstate(divide='ignore', invalid='ignore'):
        logged = np.log10(values.astype(float))
    return logged.replace([np.inf, -np.inf], np.nan)


def add_replicon_metrics(replicons: pd.DataFrame, small_plasmid_threshold: int = 20000) -> pd.DataFrame:
    """
    Add size category, depth ratios and log10 columns to a replicon table.

    Args:
        replicons: Replicon table (not modified)
        small_plasmid_threshold: Replicons below this size (bp) are "small"

    Returns:
        New DataFrame with size_category, <protocol>_to_illumina_ratio and
        log_size, log_illumina_depth, log_<protocol>_depth, log_<protocol>_ratio
    """
    size = replicons['size_bp'].astype(float)
    illumina = replicons['illumina_depth'].astype(float)

    derived = {
        'size_category': pd.Series(np.where(size < small_plasmid_threshold, 'small', 'big'),
                                   index=replicons.index).where(size.notna()),
        'log_size': _log10(size),
        'log_illumina_depth': _log10(illumina),
    }
    for protocol in PROTOCOLS:
        depth = replicons[f'ont_depth_{protocol}'].astype(float)
        ratio = depth / illumina.where(illumina != 0)
        derived[f'{protocol}_to_illumina_ratio'] = ratio
        derived[f'log_{protocol}_depth'] = _log10(depth)
        derived[f'log_{protocol}_ratio'] = _log10(ratio)

    return replicons.assign(**derived)


def prepare_replicon_table(replicons: pd.DataFrame, small_plasmid_threshold: int = 20000) -> pd.DataFrame:
    """
    Plasmid-level table for the depth-ratio analyses.

    Chromosome rows are removed (their normalised depth is 1.0 by definition)
    before the derived columns are added.

    Args:
        replicons: Replicon table including chromosome rows
        small_plasmid_threshold: Replicons below this size (bp) are "small"

    Returns:
        New DataFrame of plasmids with derived metrics
    """
    is_chromosome = chromosome_mask(replicons)
    plasmids = replicons.loc[~is_chromosome]
    logger.info("Excluded %d chromosome rows, %d plasmids remain", int(is_chromosome.sum()), len(plasmids))
    return add_replicon_metrics(plasmids, small_plasmid_threshold).reset_index(drop=True)


class RepliconDataManager(DataManager):
    """Data manager for the per-replicon workbook sheet."""

    def load_data(self) -> Dict[str, pd.DataFrame]:
        """
        Load the per-replicon sheet.

        Returns:
            Dictionary with 'replicons' (all rows, derived metrics) and
            'plasmids' (chromosomes excluded)
        """
        cached = self.get_from_cache('replicons')
        if cached is not None:
            return cached

        source = self.config.replicon_sheet
        raw = self.load_sheet(source).dropna(how='all')
        self.require_columns(raw, REPLICON_COLUMNS, source)
        for col in NUMERIC_REPLICON_COLUMNS:
            raw[col] = self.to_numeric(raw[col], source)

        threshold = self.config.small_plasmid_threshold
        data = {
            'replicons': add_replicon_metrics(raw, threshold),
            'plasmids': prepare_replicon_table(raw, threshold),
        }
        self.set_cache('replicons', data)
        return data
