"""
Read-level visualizations.

This module creates figures comparing read identity, translocation speed and
yield over time between protocols and runs.
"""

from typing import Dict
import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import logging

from .filters import standard_quality_filters
from ...config import AnalysisConfig

logger = logging.getLogger(__name__)

MAX_SCATTER_POINTS = 20000


def _empty_figure(title: str) -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title, height=400)
    fig.add_annotation(text="No data to display", showarrow=False, xref='paper', yref='paper', x=0.5, y=0.5)
    return fig


class ReadStatsVisualizations:
    """
    Visualization creator for read-level statistics.

    Every figure is built from the per-run read tables passed in; filters are
    applied per figure and never change the tables.
    """

    def __init__(self, tables: Dict[str, pd.DataFrame], config: AnalysisConfig):
        """
        Initialize read visualizations.

        Args:
            tables: Mapping of run name to read table
            config: Analysis configuration
        """
        self.tables = tables
        self.config = config

    def _combined(self) -> pd.DataFrame:
        if not self.tables:
            return pd.DataFrame()
        return pd.concat(
            [reads.assign(run=run_name) for run_name, reads in self.tables.items()],
            ignore_index=True,
        )

    def create_identity_scatter(self) -> go.Figure:
        """Read identity against read length for quality-filtered reads."""
        title = 'Read identity vs read length'
        reads = standard_quality_filters(self.config).apply(self._combined()) if self.tables else pd.DataFrame()
        if reads.empty:
            return _empty_figure(title)

        if len(reads) > MAX_SCATTER_POINTS:
            reads = reads.sample(MAX_SCATTER_POINTS, random_state=0)

        fig = px.scatter(
            reads,
            x='read_length',
            y='mean_identity_fraction',
            color='run',
            opacity=0.3,
            log_x=True,
            labels={'read_length': 'Read length (bp)', 'mean_identity_fraction': 'Read identity'},
        )
        fig.add_hline(y=self.config.identity_threshold, line_dash='dash', line_color='grey')
        fig.update_layout(title=title, height=600)
        return fig

    def create_speed_histogram(self) -> go.Figure:
        """Translocation speed distribution per run (finite speeds only)."""
        title = 'Translocation speed'
        reads = self._combined()
        if reads.empty:
            return _empty_figure(title)

        reads = reads[np.isfinite(reads['translocation_speed'].astype(float))]
        if reads.empty:
            return _empty_figure(title)

        fig = px.histogram(
            reads,
            x='translocation_speed',
            color='run',
            barmode='overlay',
            histnorm='probability density',
            nbins=100,
            labels={'translocation_speed': 'Translocation speed (bp/s)'},
        )
        fig.update_layout(title=title, height=500)
        return fig

    def create_yield_over_time(self) -> go.Figure:
        """Cumulative yield (Gbp) against hours since run start."""
        title = 'Cumulative yield over time'
        fig = go.Figure()
        for run_name, reads in self.tables.items():
            timed = reads[['start_time_hours', 'read_length']].dropna().sort_values('start_time_hours')
            if timed.empty:
                continue
            fig.add_trace(go.Scatter(
                x=timed['start_time_hours'],
                y=timed['read_length'].cumsum() / 1e9,
                mode='lines',
                name=run_name,
            ))

        if not fig.data:
            return _empty_figure(title)

        fig.add_vline(x=self.config.yield_hour_cutoff, line_dash='dash', line_color='grey')
        fig.update_layout(title=title, xaxis_title='Time (hours)', yaxis_title='Yield (Gbp)', height=500)
        return fig

    def create_all_visualizations(self) -> Dict[str, go.Figure]:
        return {
            'read_identity': self.create_identity_scatter(),
            'translocation_speed': self.create_speed_histogram(),
            'yield_over_time': self.create_yield_over_time(),
        }
