"""Tests for the composable read filters."""

import pandas as pd

from ont_protocol_comparison.config import AnalysisConfig
from ont_protocol_comparison.modules.reads.filters import (
    FilterPipeline,
    coverage_above,
    identity_above,
    length_above,
    reference_excluded,
    standard_quality_filters,
    start_time_below,
)


def test_thresholds_are_strict(make_reads):
    reads = make_reads([
        {"mean_identity": "50%"},
        {"mean_identity": "50.1%"},
    ])
    kept = identity_above(0.5).apply(reads)
    assert kept["mean_identity"].tolist() == ["50.1%"]


def test_length_and_coverage(make_reads):
    reads = make_reads([
        {"read_length": 10000, "read_coverage": "95%"},
        {"read_length": 10001, "read_coverage": "95%"},
        {"read_length": 20000, "read_coverage": "90%"},
    ])
    assert length_above(10000).apply(reads)["read_length"].tolist() == [10001, 20000]
    assert coverage_above(0.9).apply(reads)["read_length"].tolist() == [10000, 10001]


def test_start_time_below(make_reads):
    reads = make_reads([
        {"start_time": 3600 * 23.9},
        {"start_time": 3600 * 24},
        {"start_time": 3600 * 30},
    ])
    assert len(start_time_below(24).apply(reads)) == 1


def test_missing_values_fail_the_predicate(make_reads):
    reads = make_reads([
        {"mean_identity": None},
        {"mean_identity": "99%"},
        {"reference_names": None},
    ])
    assert len(identity_above(0.1).apply(reads)) == 2
    assert len(reference_excluded(["other"]).apply(reads)) == 2


def test_reference_excluded(make_reads):
    reads = make_reads([
        {"reference_names": "g1_chromosome"},
        {"reference_names": "ambiguous_a"},
        {"reference_names": "ambiguous_b"},
    ])
    kept = reference_excluded({"ambiguous_a", "ambiguous_b"}).apply(reads)
    assert kept["reference_names"].tolist() == ["g1_chromosome"]


def test_composition_is_order_insensitive(make_reads):
    reads = make_reads([
        {"read_length": 15000, "mean_identity": "95%", "read_coverage": "95%"},
        {"read_length": 5000, "mean_identity": "95%", "read_coverage": "95%"},
        {"read_length": 15000, "mean_identity": "40%", "read_coverage": "95%"},
        {"read_length": 15000, "mean_identity": "95%", "read_coverage": "50%"},
    ])
    forward = identity_above(0.5) & length_above(10000) & coverage_above(0.9)
    backward = FilterPipeline((coverage_above(0.9), length_above(10000), identity_above(0.5)))
    pd.testing.assert_frame_equal(forward.apply(reads), backward.apply(reads))
    assert len(forward.apply(reads)) == 1
    assert len(forward) == 3


def test_filters_do_not_modify_input(make_reads):
    reads = make_reads([{"read_length": 100}, {"read_length": 20000}])
    snapshot = reads.copy()
    kept = length_above(1000).apply(reads)
    kept["read_length"] = 0
    pd.testing.assert_frame_equal(reads, snapshot)


def test_same_table_feeds_independent_pipelines(make_reads):
    reads = make_reads([
        {"read_length": 20000, "start_time": 0},
        {"read_length": 500, "start_time": 3600 * 40},
    ])
    early = start_time_below(24)(reads)
    long_reads = length_above(1000)(reads)
    assert len(early) == 1 and len(long_reads) == 1
    assert len(reads) == 2


def test_standard_quality_filters_use_config():
    pipeline = standard_quality_filters(AnalysisConfig(min_identity=0.8, min_length=500, min_coverage=0.5))
    assert pipeline.describe() == "identity > 0.8, length > 500, coverage > 0.5"


def test_empty_pipeline_keeps_everything(make_reads):
    reads = make_reads([{}, {}])
    assert len(FilterPipeline().apply(reads)) == 2
