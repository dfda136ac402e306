"""
GC-depth sample loading.

The GC-depth table holds sliding-window (GC %, relative depth) pairs used to
show how ONT depth varies with GC content.
"""

from typing import Dict
import pandas as pd
import logging

from ..base import DataManager
from ...errors import MalformedInputError

logger = logging.getLogger(__name__)

GC_DEPTH_COLUMNS = ['gc_content_percent', 'relative_depth']


class GCDepthDataManager(DataManager):
    """Data manager for the GC-depth sample table."""

    def load_data(self) -> Dict[str, pd.DataFrame]:
        """
        Load the GC-depth samples.

        Returns:
            Dictionary with key 'gc_depth'
        """
        cached = self.get_from_cache('gc_depth')
        if cached is not None:
            return cached

        file_path = self.require_file(self.config.gc_depth_path)
        try:
            samples = pd.read_csv(file_path, sep='\t', compression='infer')
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise MalformedInputError(f"Could not parse GC-depth table {file_path}: {e}") from e

        self.require_columns(samples, GC_DEPTH_COLUMNS, file_path.name)
        for col in GC_DEPTH_COLUMNS:
            samples[col] = self.to_numeric(samples[col], file_path.name)

        logger.info("Loaded %d GC-depth samples from %s", len(samples), file_path)
        cached = {'gc_depth': samples[GC_DEPTH_COLUMNS]}
        self.set_cache('gc_depth', cached)
        return cached
