"""Shared fixtures: synthetic read, replicon, barcode and GC-depth tables."""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from ont_protocol_comparison.config import AnalysisConfig

READ_DEFAULTS = {
    "read_length": 1000,
    "template_duration": 2.0,
    "start_time": 0.0,
    "mean_identity": "95.0%",
    "read_coverage": "99.0%",
    "reference_names": "genome1_chromosome",
    "demultiplex_status": "correct",
    "barcode_arrangement": "barcode01",
    "chimera": "no",
    "within_bin_chimera": "no",
    "cross_bin_chimera": "no",
}


def _raw_reads(rows):
    return pd.DataFrame([{**READ_DEFAULTS, **row} for row in rows], columns=list(READ_DEFAULTS))


@pytest.fixture
def make_raw_reads():
    """Build a raw read table; each row overrides READ_DEFAULTS."""
    return _raw_reads


@pytest.fixture
def make_reads():
    """Build a read table with derived metrics."""
    from ont_protocol_comparison.modules.reads.data import derive_read_metrics

    def _make(rows):
        return derive_read_metrics(_raw_reads(rows))

    return _make


@pytest.fixture
def replicons():
    """Two genomes, each with a chromosome and three plasmids."""
    return pd.DataFrame([
        {"genome_id": "g1", "replicon_id": "chromosome", "size_bp": 5_000_000, "gc_content": 0.57,
         "ont_depth_ligation": 1.0, "ont_depth_rapid": 1.0, "illumina_depth": 1.0},
        {"genome_id": "g1", "replicon_id": "plasmid_1", "size_bp": 120_000, "gc_content": 0.52,
         "ont_depth_ligation": 1.8, "ont_depth_rapid": 1.6, "illumina_depth": 2.0},
        {"genome_id": "g1", "replicon_id": "plasmid_2", "size_bp": 4_500, "gc_content": 0.48,
         "ont_depth_ligation": 2.0, "ont_depth_rapid": 8.0, "illumina_depth": 20.0},
        {"genome_id": "g1", "replicon_id": "plasmid_3", "size_bp": 2_500, "gc_content": 0.45,
         "ont_depth_ligation": 1.5, "ont_depth_rapid": 12.0, "illumina_depth": 30.0},
        {"genome_id": "g2", "replicon_id": "chromosome", "size_bp": 4_800_000, "gc_content": 0.50,
         "ont_depth_ligation": 1.0, "ont_depth_rapid": 1.0, "illumina_depth": 1.0},
        {"genome_id": "g2", "replicon_id": "plasmid_1", "size_bp": 60_000, "gc_content": 0.51,
         "ont_depth_ligation": 3.0, "ont_depth_rapid": 2.7, "illumina_depth": 3.0},
        {"genome_id": "g2", "replicon_id": "plasmid_2", "size_bp": 8_000, "gc_content": 0.49,
         "ont_depth_ligation": 0.5, "ont_depth_rapid": 4.0, "illumina_depth": 5.0},
        {"genome_id": "g2", "replicon_id": "plasmid_3", "size_bp": 3_000, "gc_content": 0.47,
         "ont_depth_ligation": 1.2, "ont_depth_rapid": 9.0, "illumina_depth": 12.0},
    ])


@pytest.fixture
def barcode_sheet():
    """Wide per-barcode sheet as stored in the workbook."""
    rows = []
    for barcode in list(range(1, 13)) + ["unclassified"]:
        used = barcode in (1, 2, 3, 4, 5, 7, 8)
        reads = 10_000 if used else (50 if barcode != "unclassified" else 2_000)
        rows.append({
            "barcode": barcode,
            "ligation_run1_reads": reads,
            "ligation_run1_n50": 30_000 if used else 5_000,
            "rapid_run1_reads": reads * 2,
            "rapid_run1_n50": 8_000 if used else 2_000,
        })
    return pd.DataFrame(rows)


def _write_read_table(path: Path, n: int, seed: int) -> None:
    rng = np.random.default_rng(seed)
    lengths = rng.integers(500, 60_000, n)
    durations = lengths / rng.uniform(350, 450, n)
    durations[0] = 0.0
    statuses = rng.choice(["correct", "incorrect", "unclassified"], n, p=[0.9, 0.02, 0.08])
    barcodes = rng.choice([f"barcode{b:02d}" for b in range(1, 13)], n)
    reads = pd.DataFrame({
        "read_length": lengths,
        "template_duration": durations,
        "start_time": rng.uniform(0, 48 * 3600, n),
        "mean_identity": [f"{v:.2f}%" for v in rng.uniform(80, 99.9, n)],
        "read_coverage": [f"{v:.1f}%" for v in rng.uniform(50, 100, n)],
        "reference_names": rng.choice(["g1_chromosome", "g2_chromosome", "shared_plasmid"], n),
        "demultiplex_status": statuses,
        "barcode_arrangement": barcodes,
        "chimera": rng.choice(["yes", "no"], n, p=[0.01, 0.99]),
        "within_bin_chimera": rng.choice(["yes", "no"], n, p=[0.005, 0.995]),
        "cross_bin_chimera": rng.choice(["yes", "no"], n, p=[0.005, 0.995]),
    })
    reads.to_csv(path, sep="\t", index=False, compression="gzip")


@pytest.fixture
def data_dir(tmp_path, replicons, barcode_sheet):
    """A complete input directory: workbook, four read tables and GC-depth table."""
    directory = tmp_path / "data"
    directory.mkdir()

    with pd.ExcelWriter(directory / "summary.xlsx", engine="openpyxl") as writer:
        barcode_sheet.to_excel(writer, sheet_name="Per-barcode", index=False)
        replicons.to_excel(writer, sheet_name="Per-replicon", index=False)
        pd.DataFrame({"run": ["ligation_run1"], "yield_gbp": [10.0]}).to_excel(
            writer, sheet_name="Per-run", index=False)

    for seed, (protocol, replicate) in enumerate(AnalysisConfig().runs):
        _write_read_table(directory / f"reads_{protocol}_run{replicate}.tsv.gz", 300, seed)

    rng = np.random.default_rng(7)
    gc = rng.uniform(30, 70, 200)
    pd.DataFrame({
        "gc_content_percent": gc,
        "relative_depth": 1.0 - 0.0004 * (gc - 50) ** 2 + rng.normal(0, 0.05, 200),
    }).to_csv(directory / "gc_depth.tsv.gz", sep="\t", index=False, compression="gzip")

    return directory


@pytest.fixture
def config(data_dir):
    return AnalysisConfig(data_dir=data_dir, ambiguous_references=frozenset({"shared_plasmid"}))
