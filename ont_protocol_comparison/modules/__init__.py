"""
Protocol Comparison Analysis Modules

This package provides modular analysis components comparing ligation and
rapid ONT library preparations: read statistics, plasmid depth
regressions, barcode statistics and GC-depth smoothing.
"""

from .base import DataManager, BaseAnalyzer
from .barcodes import BarcodeAnalyzer
from .gc_depth import GCDepthAnalyzer
from .reads import ReadStatsAnalyzer
from .replicons import RepliconAnalyzer

__all__ = [
    'DataManager',
    'BaseAnalyzer',
    'BarcodeAnalyzer',
    'GCDepthAnalyzer',
    'ReadStatsAnalyzer',
    'RepliconAnalyzer',
]
