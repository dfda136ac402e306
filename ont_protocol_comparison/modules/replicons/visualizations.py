"""
Replicon depth visualizations.

Log-log figures of ONT against Illumina plasmid depth and of depth ratio
against plasmid size, with the fitted regression lines overlaid.
"""

from typing import Dict, List, Tuple
import numpy as np
import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots
import logging

from .regression import RegressionResult, fit_depth_regression, fit_size_regression
from ...config import PROTOCOLS
from ...errors import is_undefined

logger = logging.getLogger(__name__)

SIZE_CATEGORY_COLORS = {'small': '#d95f02', 'big': '#1b9e77'}


def _fit_line(x: pd.Series, slope: float, intercept: float) -> Dict[str, np.ndarray]:
    """Regression line in log space, returned in linear units."""
    log_x = np.log10(x[x > 0].astype(float))
    xs = np.linspace(log_x.min(), log_x.max(), 50)
    return {'x': 10 ** xs, 'y': 10 ** (intercept + slope * xs)}


class RepliconVisualizations:
    """Visualization creator for plasmid depth analyses."""

    def __init__(self, plasmids: pd.DataFrame):
        """
        Initialize replicon visualizations.

        Args:
            plasmids: Plasmid table from prepare_replicon_table
        """
        self.plasmids = plasmids

    def _depth_fit_lines(self, result: RegressionResult) -> List[Tuple[str, pd.Series, float, float, str]]:
        """(name, x values, slope, intercept, color) of each line to draw for a depth fit."""
        if not result.defined:
            return []
        fitted = {category: slope for category, slope in result.category_slopes.items()
                  if not is_undefined(slope)}
        if len(fitted) < 2:
            return [('fit', self.plasmids['illumina_depth'], result.slope, result.intercept, 'black')]

        lines = []
        for category, slope in sorted(fitted.items()):
            subset = self.plasmids[self.plasmids['size_category'] == category]
            lines.append((f'{category} plasmid fit', subset['illumina_depth'], slope,
                          result.category_intercepts[category], SIZE_CATEGORY_COLORS.get(category, 'black')))
        return lines

    def create_depth_scatter(self) -> go.Figure:
        """ONT depth against Illumina depth per protocol, coloured by size category."""
        fig = make_subplots(rows=1, cols=len(PROTOCOLS), subplot_titles=[p.capitalize() for p in PROTOCOLS],
                            shared_yaxes=True)

        for col, protocol in enumerate(PROTOCOLS, start=1):
            depth_col = f'ont_depth_{protocol}'
            for category, color in SIZE_CATEGORY_COLORS.items():
                subset = self.plasmids[self.plasmids['size_category'] == category]
                fig.add_trace(go.Scatter(
                    x=subset['illumina_depth'],
                    y=subset[depth_col],
                    mode='markers',
                    marker=dict(color=color, size=7),
                    name=f'{category} plasmids',
                    legendgroup=category,
                    showlegend=col == 1,
                    customdata=subset[['genome_id', 'replicon_id', 'size_bp']],
                    hovertemplate='%{customdata[0]} %{customdata[1]}<br>'
                                  'Size: %{customdata[2]:,} bp<br>'
                                  'Illumina: %{x:.3f}<br>ONT: %{y:.3f}<extra></extra>',
                ), row=1, col=col)

            result = fit_depth_regression(self.plasmids, protocol)
            for name, x, slope, intercept, color in self._depth_fit_lines(result):
                line = _fit_line(x, slope, intercept)
                fig.add_trace(go.Scatter(
                    x=line['x'], y=line['y'], mode='lines',
                    line=dict(color=color, dash='dash'),
                    name=f'{protocol} {name} (R²={result.r_squared:.2f})',
                ), row=1, col=col)

        fig.update_xaxes(type='log', title_text='Illumina depth (relative to chromosome)')
        fig.update_yaxes(type='log', title_text='ONT depth (relative to chromosome)', col=1)
        fig.update_layout(title='Plasmid depth: ONT vs Illumina', height=550)
        return fig

    def create_ratio_vs_size(self) -> go.Figure:
        """ONT/Illumina depth ratio against plasmid size for both protocols."""
        fig = go.Figure()
        for protocol, symbol in zip(PROTOCOLS, ('circle', 'diamond')):
            ratio_col = f'{protocol}_to_illumina_ratio'
            fig.add_trace(go.Scatter(
                x=self.plasmids['size_bp'],
                y=self.plasmids[ratio_col],
                mode='markers',
                marker=dict(symbol=symbol, size=7),
                name=protocol,
            ))
            result = fit_size_regression(self.plasmids, protocol)
            if result.defined:
                line = _fit_line(self.plasmids['size_bp'], result.slope, result.intercept)
                fig.add_trace(go.Scatter(
                    x=line['x'], y=line['y'], mode='lines',
                    line=dict(dash='dash'),
                    name=f'{protocol} fit (p={result.p_value:.2g})',
                ))

        fig.add_hline(y=1.0, line_color='grey')
        fig.update_xaxes(type='log', title_text='Plasmid size (bp)')
        fig.update_yaxes(type='log', title_text='ONT / Illumina depth')
        fig.update_layout(title='Depth ratio vs plasmid size', height=550)
        return fig

    def create_all_visualizations(self) -> Dict[str, go.Figure]:
        return {
            'depth_scatter': self.create_depth_scatter(),
            'ratio_vs_size': self.create_ratio_vs_size(),
        }
