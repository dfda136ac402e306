"""Tests for per-read derived metrics and percentage parsing."""

import math

import numpy as np
import pandas as pd
import pytest

from ont_protocol_comparison.errors import MalformedInputError
from ont_protocol_comparison.modules.reads.data import (
    derive_read_metrics,
    format_percentage,
    parse_percentage,
)
from ont_protocol_comparison.modules.reads.summary_stats import total_yield


class TestParsePercentage:

    def test_parse(self):
        assert parse_percentage("98.5%") == pytest.approx(0.985)
        assert parse_percentage("100%") == pytest.approx(1.0)
        assert parse_percentage(" 7.25 %") == pytest.approx(0.0725)

    def test_round_trip_to_one_decimal(self):
        assert format_percentage(parse_percentage("98.5%")) == "98.5%"
        assert format_percentage(parse_percentage("12.3%")) == "12.3%"

    @pytest.mark.parametrize("value", ["98.5", "%", "abc%", "98.5%%", "", None, 98.5])
    def test_malformed(self, value):
        with pytest.raises(MalformedInputError):
            parse_percentage(value)


class TestDeriveReadMetrics:

    def test_translocation_speed_and_yield(self, make_raw_reads):
        raw = make_raw_reads([
            {"read_length": 1000, "template_duration": 2},
            {"read_length": 2000, "template_duration": 4},
        ])
        reads = derive_read_metrics(raw)
        assert reads["translocation_speed"].tolist() == [500.0, 500.0]
        assert total_yield(reads) == 3000

    def test_speed_is_exact_ratio(self, make_raw_reads):
        raw = make_raw_reads([
            {"read_length": 1234, "template_duration": 3.7},
            {"read_length": 50000, "template_duration": 121.0},
        ])
        reads = derive_read_metrics(raw)
        expected = raw["read_length"] / raw["template_duration"]
        assert reads["translocation_speed"].tolist() == expected.tolist()

    def test_zero_or_missing_duration_gives_nan(self, make_raw_reads):
        raw = make_raw_reads([
            {"read_length": 1000, "template_duration": 0},
            {"read_length": 1000, "template_duration": None},
            {"read_length": 1000, "template_duration": 4},
        ])
        speeds = derive_read_metrics(raw)["translocation_speed"]
        assert math.isnan(speeds[0])
        assert math.isnan(speeds[1])
        assert speeds[2] == 250.0

    def test_fractions_and_hours(self, make_raw_reads):
        raw = make_raw_reads([
            {"mean_identity": "98.5%", "read_coverage": "50%", "start_time": 7200},
        ])
        reads = derive_read_metrics(raw)
        assert reads.loc[0, "mean_identity_fraction"] == pytest.approx(0.985)
        assert reads.loc[0, "read_coverage_fraction"] == pytest.approx(0.5)
        assert reads.loc[0, "start_time_hours"] == pytest.approx(2.0)

    def test_missing_percentage_stays_missing(self, make_raw_reads):
        raw = make_raw_reads([{"mean_identity": None}, {"mean_identity": "90%"}])
        reads = derive_read_metrics(raw)
        assert np.isnan(reads.loc[0, "mean_identity_fraction"])
        assert reads.loc[1, "mean_identity_fraction"] == pytest.approx(0.9)

    def test_percentage_without_suffix_fails(self, make_raw_reads):
        raw = make_raw_reads([{"mean_identity": "98.5%"}, {"mean_identity": "98.5"}])
        with pytest.raises(MalformedInputError, match="mean_identity"):
            derive_read_metrics(raw)

    def test_non_numeric_length_fails(self, make_raw_reads):
        raw = make_raw_reads([{"read_length": "long"}])
        with pytest.raises(MalformedInputError, match="read_length"):
            derive_read_metrics(raw)

    def test_input_is_not_modified(self, make_raw_reads):
        raw = make_raw_reads([{"mean_identity": "97%"}, {"template_duration": 0}])
        snapshot = raw.copy()
        reads = derive_read_metrics(raw)
        pd.testing.assert_frame_equal(raw, snapshot)
        assert reads is not raw
        assert reads["mean_identity"].tolist() == raw["mean_identity"].tolist()
