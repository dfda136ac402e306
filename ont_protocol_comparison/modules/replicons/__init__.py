"""
Replicon depth module.

This module handles plasmid depth analysis:
- Depth ratios relative to Illumina, per protocol
- Log-log OLS regressions of depth and of depth ratio against size
- Size-partitioned depth ratio summaries
"""

from typing import Any, Dict

import pandas as pd

from ..base import BaseAnalyzer
from ...config import AnalysisConfig
from .data import RepliconDataManager, add_replicon_metrics, prepare_replicon_table
from .regression import RegressionResult, fit_depth_regression, fit_size_regression
from .summary_stats import RepliconSummaryStats, summary_by_size_bucket
from .visualizations import RepliconVisualizations


class RepliconAnalyzer(BaseAnalyzer):
    """Unified analyzer for plasmid depth statistics."""

    def __init__(self, config: AnalysisConfig):
        super().__init__(RepliconDataManager(config))
        self.plasmids = self.data['plasmids']
        self.replicon_stats = RepliconSummaryStats(self.plasmids, config.size_bucket_thresholds)
        self.replicon_viz = RepliconVisualizations(self.plasmids)

    def generate_summary_stats(self) -> Dict[str, Any]:
        return {
            'regressions': self.replicon_stats.calculate_regressions(),
            'size_buckets': self.replicon_stats.calculate_size_buckets(),
            'size_categories': self.replicon_stats.calculate_category_counts(),
        }

    def create_visualizations(self) -> Dict[str, Any]:
        return self.replicon_viz.create_all_visualizations()

    def summary_tables(self) -> Dict[str, pd.DataFrame]:
        stats = self.generate_summary_stats()
        return {'regressions': stats['regressions'], 'size_buckets': stats['size_buckets']}


__all__ = [
    'RegressionResult',
    'RepliconAnalyzer',
    'RepliconDataManager',
    'RepliconSummaryStats',
    'RepliconVisualizations',
    'add_replicon_metrics',
    'fit_depth_regression',
    'fit_size_regression',
    'prepare_replicon_table',
    'summary_by_size_bucket',
]
