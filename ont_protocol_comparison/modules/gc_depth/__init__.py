"""
GC-depth module.

Smoothed and binned relative depth against GC content.
"""

from typing import Any, Dict

import pandas as pd

from ..base import BaseAnalyzer
from ...config import AnalysisConfig
from .data import GCDepthDataManager
from .summary_stats import binned_gc_depth, smooth_gc_depth
from .visualizations import GCDepthVisualizations


class GCDepthAnalyzer(BaseAnalyzer):
    """Unified analyzer for GC-depth samples."""

    def __init__(self, config: AnalysisConfig):
        super().__init__(GCDepthDataManager(config))
        self.samples = self.data['gc_depth']
        self.gc_viz = GCDepthVisualizations(self.samples, config.gc_lowess_frac)

    def generate_summary_stats(self) -> Dict[str, Any]:
        return {
            'binned': binned_gc_depth(self.samples, self.config.gc_bin_width),
            'smoothed': smooth_gc_depth(self.samples, self.config.gc_lowess_frac),
        }

    def create_visualizations(self) -> Dict[str, Any]:
        return self.gc_viz.create_all_visualizations()

    def summary_tables(self) -> Dict[str, pd.DataFrame]:
        return {'gc_depth_binned': self.generate_summary_stats()['binned']}


__all__ = ['GCDepthAnalyzer', 'GCDepthDataManager', 'GCDepthVisualizations', 'binned_gc_depth', 'smooth_gc_depth']
