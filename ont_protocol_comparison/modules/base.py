"""
Base data manager and analyzer for the protocol comparison analyses.

This module provides the shared loading helpers (file checks, column checks,
strict numeric coercion) and the abstract analyzer interface used by the
reads, replicons, barcodes and GC-depth modules.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, Optional, Any
import pandas as pd
import logging

from ..config import AnalysisConfig
from ..errors import InputNotFoundError, MalformedInputError

logger = logging.getLogger(__name__)


class DataManager(ABC):
    """
    Abstract base class for data management across analysis modules.
    Provides common functionality for data loading, caching, and validation.
    """

    def __init__(self, config: AnalysisConfig):
        """
        Initialize the data manager.

        Args:
            config: Analysis configuration holding the data directory
        """
        self.config = config
        self.data_path = Path(config.data_dir)
        self._cache: Dict[str, Any] = {}
        self._validate_data_path()

    def _validate_data_path(self) -> None:
        """Validate that the data path exists and is accessible."""
        if not self.data_path.exists():
            raise InputNotFoundError(f"Data path does not exist: {self.data_path}")

        if not self.data_path.is_dir():
            raise InputNotFoundError(f"Data path is not a directory: {self.data_path}")

    def get_from_cache(self, key: str) -> Optional[Any]:
        """Get data from cache if available."""
        return self._cache.get(key)

    def set_cache(self, key: str, value: Any) -> None:
        """Store data in cache."""
        self._cache[key] = value

    @staticmethod
    def require_file(file_path: Path) -> Path:
        """Raise InputNotFoundError unless file_path is an existing file."""
        if not file_path.is_file():
            raise InputNotFoundError(f"Required input not found: {file_path}")
        return file_path

    @staticmethod
    def require_columns(df: pd.DataFrame, columns: Iterable[str], source: str) -> None:
        """Raise InputNotFoundError if any of the columns is missing."""
        missing = [col for col in columns if col not in df.columns]
        if missing:
            raise InputNotFoundError(f"Missing required columns in {source}: {missing}")

    @staticmethod
    def to_numeric(series: pd.Series, source: str) -> pd.Series:
        """
        Convert a column to numbers without best-effort coercion.

        Missing cells stay missing; any present cell that is not a number
        raises MalformedInputError for the whole load.

        Args:
            series: Column to convert
            source: Description of the input, used in error messages

        Returns:
            Numeric Series with the same index
        """
        converted = pd.to_numeric(series, errors="coerce")
        bad = converted.isna() & series.notna()
        if bad.any():
            examples = series[bad].astype(str).unique()[:3].tolist()
            raise MalformedInputError(
                f"Non-numeric values in column '{series.name}' of {source}: {examples}"
            )
        return converted

    def load_sheet(self, sheet_name: str) -> pd.DataFrame:
        """
        Load one sheet of the summary workbook.

        Args:
            sheet_name: Name of the sheet to load

        Returns:
            DataFrame with the sheet contents
        """
        workbook = self.require_file(self.config.workbook_path)
        try:
            df = pd.read_excel(workbook, sheet_name=sheet_name, engine='openpyxl')
        except ValueError as e:
            # pandas reports a missing worksheet as ValueError
            if 'not found' in str(e):
                raise InputNotFoundError(f"Sheet '{sheet_name}' not found in {workbook}") from e
            raise MalformedInputError(f"Could not read sheet '{sheet_name}' from {workbook}: {e}") from e
        logger.info("Loaded %d rows from sheet '%s' of %s", len(df), sheet_name, workbook.name)
        return df

    @abstractmethod
    def load_data(self) -> Dict[str, pd.DataFrame]:
        """
        Load data specific to the analysis module.
        Must be implemented by subclasses.

        Returns:
            Dictionary of loaded DataFrames
        """
        pass


class BaseAnalyzer(ABC):
    """
    Abstract base class for analysis modules.
    Provides common functionality for data analysis and visualization.
    """

    def __init__(self, data_manager: DataManager):
        """
        Initialize the analyzer with a data manager.

        Args:
            data_manager: Data manager instance for this analyzer
        """
        self.data_manager = data_manager
        self.config = data_manager.config
        self.data: Dict[str, pd.DataFrame] = {}
        self._load_data()

    def _load_data(self) -> None:
        """Load data using the data manager."""
        self.data = self.data_manager.load_data()

    @abstractmethod
    def generate_summary_stats(self) -> Dict[str, Any]:
        """
        Generate summary statistics for the analysis.

        Returns:
            Dictionary of summary statistics
        """
        pass

    @abstractmethod
    def create_visualizations(self) -> Dict[str, Any]:
        """
        Create visualizations for the analysis.

        Returns:
            Dictionary of plotly figures
        """
        pass

    def export_results(self, output_path: Path) -> None:
        """
        Export tabular results to CSV files.

        Args:
            output_path: Directory to save results
        """
        output_path.mkdir(parents=True, exist_ok=True)
        for name, table in self.summary_tables().items():
            table.to_csv(output_path / f"{name}.csv")
            logger.info("Wrote %s.csv (%d rows) to %s", name, len(table), output_path)

    def summary_tables(self) -> Dict[str, pd.DataFrame]:
        """Tables written by export_results; subclasses override."""
        return {}
