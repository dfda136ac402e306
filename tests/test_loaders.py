"""Tests for loading the workbook, read tables and GC-depth samples."""

import math

import pandas as pd
import pytest

from ont_protocol_comparison.config import AnalysisConfig
from ont_protocol_comparison.errors import InputNotFoundError, MalformedInputError
from ont_protocol_comparison.modules.barcodes.data import BarcodeDataManager
from ont_protocol_comparison.modules.gc_depth.data import GCDepthDataManager
from ont_protocol_comparison.modules.reads.data import ReadDataManager, load_read_table
from ont_protocol_comparison.modules.replicons.data import RepliconDataManager


def test_missing_data_directory(tmp_path):
    with pytest.raises(InputNotFoundError):
        ReadDataManager(AnalysisConfig(data_dir=tmp_path / "nowhere"))


class TestReadTables:

    def test_load_all_runs(self, config):
        manager = ReadDataManager(config)
        tables = manager.load_data()
        assert list(tables) == ["ligation_run1", "ligation_run2", "rapid_run1", "rapid_run2"]
        reads = tables["rapid_run2"]
        assert len(reads) == 300
        assert set(reads["protocol"]) == {"rapid"}
        assert set(reads["replicate"]) == {2}
        assert math.isnan(reads["translocation_speed"].iloc[0])
        assert reads["mean_identity_fraction"].between(0.8, 1.0).all()
        assert manager.load_data() is tables
        assert len(manager.combined()) == 1200

    def test_missing_run_file(self, config):
        (config.data_dir / "reads_rapid_run2.tsv.gz").unlink()
        with pytest.raises(InputNotFoundError, match="reads_rapid_run2"):
            ReadDataManager(config).load_data()

    def test_malformed_percentage(self, config, make_raw_reads):
        path = config.data_dir / "bad.tsv.gz"
        make_raw_reads([{"read_coverage": "99%"}, {"read_coverage": "0.99"}]).to_csv(
            path, sep="\t", index=False, compression="gzip")
        with pytest.raises(MalformedInputError, match="read_coverage"):
            load_read_table(path)

    def test_missing_column(self, config, make_raw_reads):
        path = config.data_dir / "short.tsv"
        make_raw_reads([{}]).drop(columns=["chimera"]).to_csv(path, sep="\t", index=False)
        with pytest.raises(InputNotFoundError, match="chimera"):
            load_read_table(path)

    def test_plain_tsv(self, config, make_raw_reads):
        path = config.data_dir / "plain.tsv"
        make_raw_reads([{"read_length": 1500, "template_duration": 3}]).to_csv(path, sep="\t", index=False)
        reads = load_read_table(path)
        assert reads.loc[0, "translocation_speed"] == 500.0
        assert reads.loc[0, "mean_identity"] == "95.0%"


class TestWorkbook:

    def test_replicons(self, config):
        data = RepliconDataManager(config).load_data()
        assert len(data["replicons"]) == 8
        assert len(data["plasmids"]) == 6
        assert "ligation_to_illumina_ratio" in data["plasmids"].columns

    def test_barcodes(self, config):
        barcodes = BarcodeDataManager(config).load_data()["barcodes"]
        assert len(barcodes) == 26
        assert set(barcodes["barcode_class"]) == {"used", "unused", "unclassified"}

    def test_missing_sheet(self, config):
        with pytest.raises(InputNotFoundError, match="Nope"):
            RepliconDataManager(config.with_overrides(replicon_sheet="Nope")).load_data()

    def test_missing_workbook(self, config):
        (config.data_dir / "summary.xlsx").unlink()
        with pytest.raises(InputNotFoundError):
            BarcodeDataManager(config).load_data()

    def test_non_numeric_size(self, config, replicons):
        bad = replicons.astype({"size_bp": object})
        bad.loc[2, "size_bp"] = "big"
        with pd.ExcelWriter(config.workbook_path, engine="openpyxl") as writer:
            bad.to_excel(writer, sheet_name="Per-replicon", index=False)
        with pytest.raises(MalformedInputError, match="size_bp"):
            RepliconDataManager(config).load_data()

    def test_missing_replicon_column(self, config, replicons):
        with pd.ExcelWriter(config.workbook_path, engine="openpyxl") as writer:
            replicons.drop(columns=["illumina_depth"]).to_excel(writer, sheet_name="Per-replicon", index=False)
        with pytest.raises(InputNotFoundError, match="illumina_depth"):
            RepliconDataManager(config).load_data()


def test_gc_depth_samples(config):
    samples = GCDepthDataManager(config).load_data()["gc_depth"]
    assert list(samples.columns) == ["gc_content_percent", "relative_depth"]
    assert len(samples) == 200
