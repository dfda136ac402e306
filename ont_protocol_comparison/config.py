"""
Analysis configuration.

Holds input locations and every numeric threshold used by the statistics so
that analyses never depend on module-level literals. Values resolve in this
order: dataclass defaults, an optional JSON file, the ``PROTOCOL_DATA_DIR``
environment variable, then explicit overrides (usually CLI flags).
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

from .errors import InputNotFoundError, MalformedInputError

logger = logging.getLogger(__name__)

DATA_DIR_ENV = "PROTOCOL_DATA_DIR"

PROTOCOLS = ("ligation", "rapid")
REPLICATES = (1, 2)

USED_BARCODES = frozenset({1, 2, 3, 4, 5, 7, 8})
UNUSED_BARCODES = frozenset({6, 9, 10, 11, 12})


@dataclass(frozen=True)
class AnalysisConfig:
    """Locations and thresholds for one analysis run."""

    data_dir: Path = Path(".")

    # Inputs
    workbook: str = "summary.xlsx"
    barcode_sheet: str = "Per-barcode"
    replicon_sheet: str = "Per-replicon"
    run_sheet: str = "Per-run"
    read_table_pattern: str = "reads_{protocol}_run{replicate}.tsv.gz"
    gc_depth_table: str = "gc_depth.tsv.gz"
    runs: Tuple[Tuple[str, int], ...] = tuple(
        (protocol, replicate) for protocol in PROTOCOLS for replicate in REPLICATES
    )

    # Standard read quality filters
    min_identity: float = 0.5
    min_length: int = 10000
    min_coverage: float = 0.9

    identity_threshold: float = 0.9
    yield_hour_cutoff: float = 24.0

    # Replicons
    small_plasmid_threshold: int = 20000
    size_bucket_thresholds: Tuple[int, ...] = (20000, 3000)

    # Demultiplexing
    used_barcodes: FrozenSet[int] = USED_BARCODES
    unused_barcodes: FrozenSet[int] = UNUSED_BARCODES
    ambiguous_references: FrozenSet[str] = field(default_factory=frozenset)

    # GC depth
    gc_bin_width: float = 1.0
    gc_lowess_frac: float = 0.1

    def __post_init__(self):
        if self.used_barcodes & self.unused_barcodes:
            raise MalformedInputError(
                f"Barcodes listed as both used and unused: {sorted(self.used_barcodes & self.unused_barcodes)}"
            )

    @property
    def workbook_path(self) -> Path:
        return self.data_dir / self.workbook

    @property
    def gc_depth_path(self) -> Path:
        return self.data_dir / self.gc_depth_table

    def read_table_path(self, protocol: str, replicate: int) -> Path:
        """Path of the read-level table for one (protocol, replicate) run."""
        return self.data_dir / self.read_table_pattern.format(protocol=protocol, replicate=replicate)

    @staticmethod
    def run_name(protocol: str, replicate: int) -> str:
        return f"{protocol}_run{replicate}"

    def with_overrides(self, **overrides: Any) -> "AnalysisConfig":
        """Return a copy with the non-None overrides applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        if not values:
            return self
        return replace(self, **_coerce_values(values))

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "AnalysisConfig":
        """
        Load configuration values from a JSON file.

        Args:
            config_path: Path to a JSON object whose keys are field names

        Returns:
            AnalysisConfig with file values applied over the defaults
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise InputNotFoundError(f"Config file not found: {config_path}")

        try:
            raw = json.loads(config_path.read_text())
        except json.JSONDecodeError as e:
            raise MalformedInputError(f"Invalid JSON in {config_path}: {e}") from e

        if not isinstance(raw, dict):
            raise MalformedInputError(f"Config file {config_path} must contain a JSON object")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise MalformedInputError(f"Unknown config keys in {config_path}: {unknown}")

        logger.info("Loaded configuration from %s", config_path)
        return cls(**_coerce_values(raw))

    @classmethod
    def resolve(cls, config_path: Optional[Union[str, Path]] = None,
                **overrides: Any) -> "AnalysisConfig":
        """Build the effective configuration from file, environment and overrides."""
        config = cls.from_file(config_path) if config_path else cls()

        env_dir = os.environ.get(DATA_DIR_ENV)
        if env_dir:
            config = config.with_overrides(data_dir=env_dir)

        return config.with_overrides(**overrides)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view of the configuration."""
        result: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Path):
                value = str(value)
            elif isinstance(value, frozenset):
                value = sorted(value)
            elif isinstance(value, tuple):
                value = [list(v) if isinstance(v, tuple) else v for v in value]
            result[f.name] = value
        return result


def _coerce_values(values: Dict[str, Any]) -> Dict[str, Any]:
    """Convert JSON/CLI values into the field types AnalysisConfig expects."""
    coerced = dict(values)
    if "data_dir" in coerced:
        coerced["data_dir"] = Path(coerced["data_dir"])
    for key in ("used_barcodes", "unused_barcodes"):
        if key in coerced:
            coerced[key] = frozenset(int(b) for b in coerced[key])
    if "ambiguous_references" in coerced:
        coerced["ambiguous_references"] = frozenset(str(r) for r in coerced["ambiguous_references"])
    if "size_bucket_thresholds" in coerced:
        coerced["size_bucket_thresholds"] = tuple(int(t) for t in coerced["size_bucket_thresholds"])
    if "runs" in coerced:
        runs: List[Tuple[str, int]] = []
        for run in coerced["runs"]:
            protocol, replicate = run
            runs.append((str(protocol), int(replicate)))
        coerced["runs"] = tuple(runs)
    return coerced
