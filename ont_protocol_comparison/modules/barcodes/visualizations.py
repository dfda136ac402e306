"""
Barcode visualizations.

Read counts and N50 per barcode and run, coloured by barcode class.
"""

from typing import Dict
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import logging

from .data import BARCODE_CLASSES

logger = logging.getLogger(__name__)

BARCODE_CLASS_COLORS = {'used': '#4575b4', 'unused': '#d73027', 'unclassified': '#969696'}


class BarcodeVisualizations:
    """Visualization creator for per-barcode statistics."""

    def __init__(self, barcodes: pd.DataFrame):
        self.barcodes = barcodes

    def _plot_frame(self) -> pd.DataFrame:
        df = self.barcodes.copy()
        df['barcode'] = df['barcode'].astype(str)
        df['run'] = df['protocol'] + ' run ' + df['replicate'].astype(str)
        return df

    def _barcode_order(self, df: pd.DataFrame):
        numbered = sorted({b for b in df['barcode'] if b.isdigit()}, key=int)
        return numbered + sorted({b for b in df['barcode'] if not b.isdigit()})

    def create_read_count_plot(self) -> go.Figure:
        """Read count per barcode, one facet row per run."""
        if self.barcodes.empty:
            return go.Figure()
        df = self._plot_frame()
        fig = px.bar(
            df,
            x='barcode',
            y='read_count',
            color='barcode_class',
            facet_row='run',
            log_y=True,
            color_discrete_map=BARCODE_CLASS_COLORS,
            category_orders={'barcode_class': list(BARCODE_CLASSES), 'barcode': self._barcode_order(df)},
            labels={'read_count': 'Reads', 'barcode': 'Barcode', 'barcode_class': 'Barcode class'},
        )
        fig.update_layout(title='Reads per barcode', height=250 * max(df['run'].nunique(), 1))
        return fig

    def create_n50_plot(self) -> go.Figure:
        """Read N50 per barcode and run."""
        if self.barcodes.empty:
            return go.Figure()
        df = self._plot_frame()
        fig = px.strip(
            df,
            x='barcode',
            y='read_n50',
            color='barcode_class',
            hover_data=['run'],
            color_discrete_map=BARCODE_CLASS_COLORS,
            category_orders={'barcode_class': list(BARCODE_CLASSES), 'barcode': self._barcode_order(df)},
            labels={'read_n50': 'Read N50 (bp)', 'barcode': 'Barcode', 'barcode_class': 'Barcode class'},
        )
        fig.update_layout(title='Read N50 per barcode', height=500)
        return fig

    def create_all_visualizations(self) -> Dict[str, go.Figure]:
        return {
            'barcode_reads': self.create_read_count_plot(),
            'barcode_n50': self.create_n50_plot(),
        }
