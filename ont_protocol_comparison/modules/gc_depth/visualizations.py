"""
GC-depth visualization.
"""

from typing import Dict
import pandas as pd
import plotly.graph_objects as go
import logging

from .summary_stats import smooth_gc_depth

logger = logging.getLogger(__name__)


class GCDepthVisualizations:
    """Scatter of relative depth against GC content with a LOWESS curve."""

    def __init__(self, samples: pd.DataFrame, lowess_frac: float = 0.1):
        self.samples = samples
        self.lowess_frac = lowess_frac

    def create_gc_depth_plot(self) -> go.Figure:
        fig = go.Figure()
        fig.add_trace(go.Scattergl(
            x=self.samples['gc_content_percent'],
            y=self.samples['relative_depth'],
            mode='markers',
            marker=dict(size=3, opacity=0.2, color='grey'),
            name='windows',
        ))

        smoothed = smooth_gc_depth(self.samples, self.lowess_frac)
        if not smoothed.empty:
            fig.add_trace(go.Scatter(
                x=smoothed['gc_content_percent'],
                y=smoothed['smoothed_depth'],
                mode='lines',
                line=dict(color='black', width=2),
                name='LOWESS',
            ))

        fig.update_layout(
            title='Relative depth vs GC content',
            xaxis_title='GC content (%)',
            yaxis_title='Relative depth',
            height=500,
        )
        return fig

    def create_all_visualizations(self) -> Dict[str, go.Figure]:
        return {'gc_depth': self.create_gc_depth_plot()}
