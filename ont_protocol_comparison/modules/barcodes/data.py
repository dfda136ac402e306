"""
Barcode data management.

Loads the "Per-barcode" workbook sheet (one row per barcode, read count and
N50 columns per run) into long form and assigns each barcode its class:
``used`` (a genome was barcoded with it), ``unused`` (no sample, so any read
assigned to it is a demultiplexing error) or ``unclassified``.
"""

from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union
import re
import pandas as pd
import logging

from ..base import DataManager
from ...config import AnalysisConfig, USED_BARCODES, UNUSED_BARCODES
from ...errors import MalformedInputError

logger = logging.getLogger(__name__)

UNCLASSIFIED = 'unclassified'
BARCODE_CLASSES = ('used', 'unused', UNCLASSIFIED)
BARCODE_COLUMNS = ['barcode', 'barcode_class', 'protocol', 'replicate', 'read_count', 'read_n50']

_BARCODE_RE = re.compile(r'(?:barcode|bc|nb)?\s*0*(\d+)', re.IGNORECASE)
_RUN_COLUMN_RE = re.compile(r'(?P<protocol>[A-Za-z]+)_run(?P<replicate>\d+)_(?P<metric>reads|n50)', re.IGNORECASE)


def barcode_number(barcode: Union[int, float, str]) -> Optional[int]:
    """
    Normalise a barcode label to its number.

    Accepts ``6``, ``"6"``, ``"barcode06"`` or ``"unclassified"``.

    Returns:
        The barcode number, or None for unclassified reads
    """
    if isinstance(barcode, bool):
        raise MalformedInputError(f"Invalid barcode label: {barcode!r}")
    if isinstance(barcode, (int, float)):
        if float(barcode).is_integer():
            return int(barcode)
        raise MalformedInputError(f"Invalid barcode label: {barcode!r}")

    text = str(barcode).strip()
    if text.lower() == UNCLASSIFIED:
        return None
    match = _BARCODE_RE.fullmatch(text)
    if not match:
        raise MalformedInputError(f"Invalid barcode label: {barcode!r}")
    return int(match.group(1))


def barcode_class(barcode: Union[int, float, str],
                  used_barcodes: FrozenSet[int] = USED_BARCODES,
                  unused_barcodes: FrozenSet[int] = UNUSED_BARCODES) -> str:
    """Return 'used', 'unused' or 'unclassified' for a barcode label."""
    number = barcode_number(barcode)
    if number is None:
        return UNCLASSIFIED
    if number in used_barcodes:
        return 'used'
    if number in unused_barcodes:
        return 'unused'
    raise MalformedInputError(f"Barcode {barcode!r} is neither a used nor an unused barcode")


def barcode_numbers(labels: pd.Series) -> pd.Series:
    """
    Vectorised barcode number extraction for read tables.

    Labels that are missing, unclassified or unrecognised map to NaN.
    """
    extracted = labels.astype('string').str.extract(r'^\s*(?:barcode|bc|nb)?\s*0*(\d+)\s*$',
                                                    flags=re.IGNORECASE)[0]
    return pd.to_numeric(extracted, errors='coerce')


class BarcodeDataManager(DataManager):
    """Data manager for the per-barcode workbook sheet."""

    def load_data(self) -> Dict[str, pd.DataFrame]:
        """
        Load the per-barcode sheet.

        Returns:
            Dictionary with key 'barcodes' holding the long-form barcode table
        """
        cached = self.get_from_cache('barcodes')
        if cached is None:
            raw = self.load_sheet(self.config.barcode_sheet)
            cached = {'barcodes': tidy_barcode_table(raw, self.config, source=self.config.barcode_sheet)}
            self.set_cache('barcodes', cached)
        return cached


def tidy_barcode_table(raw: pd.DataFrame, config: AnalysisConfig,
                       source: str = "barcode table") -> pd.DataFrame:
    """
    Reshape the wide per-barcode sheet into one row per (barcode, run).

    Args:
        raw: Sheet with a 'barcode' column and ``<protocol>_run<n>_reads`` /
            ``<protocol>_run<n>_n50`` columns
        config: Analysis configuration (barcode classes)
        source: Description of the input, used in error messages

    Returns:
        DataFrame with barcode, barcode_class, protocol, replicate, read_count, read_n50
    """
    DataManager.require_columns(raw, ['barcode'], source)

    # (protocol, replicate) -> {'reads': column, 'n50': column}
    run_columns: Dict[Tuple[str, int], Dict[str, str]] = {}
    for col in raw.columns:
        match = _RUN_COLUMN_RE.fullmatch(str(col))
        if match:
            key = (match.group('protocol').lower(), int(match.group('replicate')))
            run_columns.setdefault(key, {})[match.group('metric').lower()] = col
    if not run_columns:
        raise MalformedInputError(f"No '<protocol>_run<n>_reads' columns found in {source}")

    raw = raw.dropna(how='all')
    numeric = {
        col: DataManager.to_numeric(raw[col], source)
        for metrics in run_columns.values() for col in metrics.values()
    }

    records: List[Dict[str, Any]] = []
    for idx, row in raw.iterrows():
        number = barcode_number(row['barcode'])
        label = UNCLASSIFIED if number is None else number
        label_class = barcode_class(label, config.used_barcodes, config.unused_barcodes)
        for (protocol, replicate), metrics in sorted(run_columns.items()):
            records.append({
                'barcode': label,
                'barcode_class': label_class,
                'protocol': protocol,
                'replicate': replicate,
                'read_count': numeric[metrics['reads']][idx] if 'reads' in metrics else float('nan'),
                'read_n50': numeric[metrics['n50']][idx] if 'n50' in metrics else float('nan'),
            })

    tidy = pd.DataFrame(records, columns=BARCODE_COLUMNS)
    logger.info("Barcode table has %d barcodes across %d runs", len(raw), len(run_columns))
    return tidy
