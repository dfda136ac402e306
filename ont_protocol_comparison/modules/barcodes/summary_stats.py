"""
Barcode summary statistics.

This module calculates how each run's reads are distributed across used,
unused and unclassified barcodes, and the read N50 of each barcode class.
"""

import numpy as np
import pandas as pd
import logging

logger = logging.getLogger(__name__)


def read_share_by_class(barcodes: pd.DataFrame) -> pd.DataFrame:
    """
    Percentage of each run's reads assigned to each barcode class.

    Args:
        barcodes: Long-form barcode table from tidy_barcode_table

    Returns:
        DataFrame with protocol, replicate, barcode_class, read_count and
        read_pct (NaN for a run with no reads)
    """
    grouped = (barcodes.groupby(['protocol', 'replicate', 'barcode_class'])['read_count']
               .sum(min_count=1)
               .reset_index())
    run_totals = grouped.groupby(['protocol', 'replicate'])['read_count'].transform('sum')
    grouped['read_pct'] = grouped['read_count'] / run_totals.replace(0, np.nan) * 100.0
    return grouped


def mean_n50_by_class(barcodes: pd.DataFrame) -> pd.DataFrame:
    """Mean read N50 per protocol and barcode class, ignoring missing values."""
    return (barcodes.groupby(['protocol', 'barcode_class'])['read_n50']
            .mean()
            .unstack('barcode_class'))


class BarcodeSummaryStats:
    """
    Calculator for per-barcode read statistics.

    Handles:
    - Read share per barcode class and run
    - Read N50 per barcode class and protocol
    """

    def __init__(self, barcodes: pd.DataFrame):
        self.barcodes = barcodes

    def calculate_read_share(self) -> pd.DataFrame:
        return read_share_by_class(self.barcodes)

    def calculate_n50(self) -> pd.DataFrame:
        return mean_n50_by_class(self.barcodes)

    def unused_barcode_reads(self) -> pd.DataFrame:
        """Reads on unused barcodes per run; any such read is a demultiplexing error."""
        unused = self.barcodes[self.barcodes['barcode_class'] == 'unused']
        return (unused.groupby(['protocol', 'replicate'])['read_count']
                .sum()
                .reset_index(name='unused_barcode_reads'))
