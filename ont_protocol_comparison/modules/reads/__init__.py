"""
Read statistics module.

This module handles read-level analysis of the sequencing runs:
- Derived per-read metrics (identity, coverage, speed, elapsed hours)
- Composable threshold filters
- Yield, N50, demultiplexing error and chimera statistics
"""

from typing import Any, Dict

import pandas as pd

from ..base import BaseAnalyzer
from ...config import AnalysisConfig
from .data import ReadDataManager, derive_read_metrics, format_percentage, load_read_table, parse_percentage
from .filters import (
    FilterPipeline,
    ReadFilter,
    coverage_above,
    identity_above,
    length_above,
    reference_excluded,
    standard_quality_filters,
    start_time_below,
)
from .summary_stats import ReadStatsSummaryStats, summarize_runs
from .visualizations import ReadStatsVisualizations


class ReadStatsAnalyzer(BaseAnalyzer):
    """
    Unified analyzer for read-level statistics.

    Loads one read table per configured run and exposes per-run and
    per-protocol summaries plus the read-level figures.
    """

    def __init__(self, config: AnalysisConfig):
        super().__init__(ReadDataManager(config))
        self.read_stats = ReadStatsSummaryStats(self.data, config)
        self.read_viz = ReadStatsVisualizations(self.data, config)

    def generate_summary_stats(self) -> Dict[str, Any]:
        return {
            'runs': self.read_stats.calculate_run_stats(),
            'protocols': self.read_stats.calculate_protocol_stats(),
        }

    def create_visualizations(self) -> Dict[str, Any]:
        return self.read_viz.create_all_visualizations()

    def summary_tables(self) -> Dict[str, pd.DataFrame]:
        stats = self.generate_summary_stats()
        return {'run_summary': stats['runs'], 'protocol_summary': stats['protocols']}


__all__ = [
    'FilterPipeline',
    'ReadDataManager',
    'ReadFilter',
    'ReadStatsAnalyzer',
    'ReadStatsSummaryStats',
    'ReadStatsVisualizations',
    'coverage_above',
    'derive_read_metrics',
    'format_percentage',
    'identity_above',
    'length_above',
    'load_read_table',
    'parse_percentage',
    'reference_excluded',
    'standard_quality_filters',
    'start_time_below',
    'summarize_runs',
]
