"""
Barcode statistics module.

This module handles per-barcode read counts and N50 across runs, grouped
into used, unused and unclassified barcode classes.
"""

from typing import Any, Dict

import pandas as pd

from ..base import BaseAnalyzer
from ...config import AnalysisConfig
from .data import BarcodeDataManager, barcode_class, barcode_number
from .summary_stats import BarcodeSummaryStats
from .visualizations import BarcodeVisualizations


class BarcodeAnalyzer(BaseAnalyzer):
    """Unified analyzer for per-barcode statistics."""

    def __init__(self, config: AnalysisConfig):
        super().__init__(BarcodeDataManager(config))
        self.barcode_stats = BarcodeSummaryStats(self.data['barcodes'])
        self.barcode_viz = BarcodeVisualizations(self.data['barcodes'])

    def generate_summary_stats(self) -> Dict[str, Any]:
        return {
            'read_share': self.barcode_stats.calculate_read_share(),
            'n50': self.barcode_stats.calculate_n50(),
            'unused_reads': self.barcode_stats.unused_barcode_reads(),
        }

    def create_visualizations(self) -> Dict[str, Any]:
        return self.barcode_viz.create_all_visualizations()

    def summary_tables(self) -> Dict[str, pd.DataFrame]:
        stats = self.generate_summary_stats()
        return {'barcode_share': stats['read_share'], 'barcode_n50': stats['n50']}


__all__ = ['BarcodeAnalyzer', 'BarcodeDataManager', 'BarcodeSummaryStats', 'BarcodeVisualizations',
           'barcode_class', 'barcode_number']
