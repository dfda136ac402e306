"""
ONT Library Preparation Protocol Comparison

Descriptive statistics and figures comparing ligation and rapid Oxford
Nanopore library preparations across read-level and per-replicon tables.
"""

__version__ = "1.0.0"

from .cli import main as cli_main
from .config import AnalysisConfig
from .errors import InputNotFoundError, MalformedInputError, ProtocolComparisonError, UNDEFINED, is_undefined

__all__ = [
    "AnalysisConfig",
    "InputNotFoundError",
    "MalformedInputError",
    "ProtocolComparisonError",
    "UNDEFINED",
    "cli_main",
    "is_undefined",
    "__version__",
]
