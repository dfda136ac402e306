"""Tests for barcode classification and per-barcode statistics."""

import pandas as pd
import pytest

from ont_protocol_comparison.config import AnalysisConfig
from ont_protocol_comparison.errors import MalformedInputError
from ont_protocol_comparison.modules.barcodes.data import (
    barcode_class,
    barcode_number,
    barcode_numbers,
    tidy_barcode_table,
)
from ont_protocol_comparison.modules.barcodes.summary_stats import (
    BarcodeSummaryStats,
    mean_n50_by_class,
    read_share_by_class,
)


@pytest.mark.parametrize("label, expected", [
    (6, 6),
    (6.0, 6),
    ("6", 6),
    ("barcode06", 6),
    ("BC12", 12),
    ("unclassified", None),
])
def test_barcode_number(label, expected):
    assert barcode_number(label) == expected


@pytest.mark.parametrize("label", ["barcode", "six", 6.5, True])
def test_invalid_barcode_number(label):
    with pytest.raises(MalformedInputError):
        barcode_number(label)


def test_barcode_class():
    assert barcode_class(1) == "used"
    assert barcode_class("barcode06") == "unused"
    assert barcode_class("unclassified") == "unclassified"
    with pytest.raises(MalformedInputError):
        barcode_class(13)


def test_vectorised_numbers_ignore_unrecognised_labels():
    numbers = barcode_numbers(pd.Series(["barcode01", "barcode10", "unclassified", None, "mystery"]))
    assert numbers.iloc[0] == 1
    assert numbers.iloc[1] == 10
    assert numbers.iloc[2:].isna().all()


class TestTidyBarcodeTable:

    def test_long_form(self, barcode_sheet):
        tidy = tidy_barcode_table(barcode_sheet, AnalysisConfig())
        assert len(tidy) == 13 * 2
        assert set(tidy["protocol"]) == {"ligation", "rapid"}
        assert set(tidy["replicate"]) == {1}
        row = tidy[(tidy["barcode"] == 6) & (tidy["protocol"] == "rapid")].iloc[0]
        assert row["barcode_class"] == "unused"
        assert row["read_count"] == 100

    def test_unknown_barcode_fails(self, barcode_sheet):
        sheet = pd.concat([barcode_sheet, pd.DataFrame([{"barcode": 13, "ligation_run1_reads": 1}])])
        with pytest.raises(MalformedInputError):
            tidy_barcode_table(sheet, AnalysisConfig())

    def test_sheet_without_run_columns_fails(self):
        with pytest.raises(MalformedInputError, match="_reads"):
            tidy_barcode_table(pd.DataFrame({"barcode": [1], "total": [5]}), AnalysisConfig())

    def test_non_numeric_counts_fail(self, barcode_sheet):
        sheet = barcode_sheet.astype({"ligation_run1_reads": object})
        sheet.loc[0, "ligation_run1_reads"] = "many"
        with pytest.raises(MalformedInputError, match="ligation_run1_reads"):
            tidy_barcode_table(sheet, AnalysisConfig())


class TestBarcodeStats:

    def test_read_share(self, barcode_sheet):
        share = read_share_by_class(tidy_barcode_table(barcode_sheet, AnalysisConfig()))
        ligation = share[share["protocol"] == "ligation"].set_index("barcode_class")
        total = 7 * 10_000 + 5 * 50 + 2_000
        assert ligation.loc["used", "read_count"] == 70_000
        assert ligation.loc["unused", "read_pct"] == pytest.approx(250 / total * 100)
        assert ligation["read_pct"].sum() == pytest.approx(100.0)

    def test_mean_n50(self, barcode_sheet):
        n50 = mean_n50_by_class(tidy_barcode_table(barcode_sheet, AnalysisConfig()))
        assert n50.loc["ligation", "used"] == pytest.approx(30_000)
        assert n50.loc["rapid", "unused"] == pytest.approx(2_000)

    def test_unused_barcode_reads(self, barcode_sheet):
        stats = BarcodeSummaryStats(tidy_barcode_table(barcode_sheet, AnalysisConfig()))
        unused = stats.unused_barcode_reads().set_index("protocol")
        assert unused.loc["ligation", "unused_barcode_reads"] == 250
        assert unused.loc["rapid", "unused_barcode_reads"] == 500
