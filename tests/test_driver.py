from __future__ import annotations

import threading

import numpy as np
import pandas as pd
import pytest

from conftest import irregular_season, smooth_season
from seasonrqa.errors import EmptyDistributionError, InsufficientDataError
from seasonrqa.orchestrator.seasonal import (
    SeasonalConfig,
    analyze_season,
    analyze_sequence,
    compare_groups,
    format_comparison,
    group_means,
)
from seasonrqa.rqa.statistics import RQAResult


def test_config_defaults_and_validation() -> None:
    cfg = SeasonalConfig()
    assert (cfg.m, cfg.tau, cfg.threshold_quantile) == (3, 1, 0.10)
    assert (cfg.start_month, cfg.end_month) == (3, 5)
    for bad in (
        SeasonalConfig(m=0),
        SeasonalConfig(tau=0),
        SeasonalConfig(threshold_quantile=1.2),
        SeasonalConfig(start_month=6, end_month=2),
        SeasonalConfig(max_workers=0),
    ):
        with pytest.raises(ValueError):
            bad.validate()


def test_analyze_sequence_artifacts(rng: np.random.Generator) -> None:
    x = irregular_season(rng, 50)
    a = analyze_sequence(x, SeasonalConfig(m=3, tau=2), year=2015, label="control")
    assert a.year == 2015 and a.label == "control"
    assert a.n_points == 50
    assert a.embedded.shape == (46, 3)
    assert a.matrix.shape == (46, 46)
    assert a.threshold > 0
    assert isinstance(a.result, RQAResult)


def test_analyze_sequence_failures() -> None:
    with pytest.raises(InsufficientDataError):
        analyze_sequence([1.0, 2.0], SeasonalConfig(m=3, tau=1))
    # exactly one embedded point: no pairs to take a quantile of
    with pytest.raises(EmptyDistributionError):
        analyze_sequence([1.0, 2.0, 3.0], SeasonalConfig(m=3, tau=1))


def test_analyze_season_from_raw_series(halfhourly_series: pd.Series) -> None:
    a = analyze_season(halfhourly_series, 2020, SeasonalConfig(start_month=3, end_month=5), label="treatment")
    assert a.n_points == 92
    assert a.embedded.shape == (90, 3)
    np.testing.assert_array_equal(np.diagonal(a.matrix), 1)


def test_batch_discriminates_smooth_from_irregular(rng: np.random.Generator) -> None:
    source = {
        2001: smooth_season(rng),
        2002: smooth_season(rng),
        2003: irregular_season(rng),
        2004: irregular_season(rng),
    }
    cmp = compare_groups(source, [2001, 2002], [2003, 2004], SeasonalConfig(threshold_quantile=0.10))

    assert not cmp.failures
    assert sorted(cmp.treatment) == [2001, 2002]
    assert sorted(cmp.control) == [2003, 2004]
    assert cmp.treatment_means["DET"] > cmp.control_means["DET"]
    assert cmp.treatment_means["LAM"] > cmp.control_means["LAM"]
    assert cmp.difference()["DET"] == pytest.approx(cmp.treatment_means["DET"] - cmp.control_means["DET"])


def test_failed_year_is_isolated(rng: np.random.Generator) -> None:
    source = {
        2001: smooth_season(rng),
        2002: [0.1, 0.2],
        2003: irregular_season(rng),
    }
    cmp = compare_groups(source, [2001, 2002, 2005], [2003], SeasonalConfig())

    assert sorted(cmp.treatment) == [2001]
    assert sorted(cmp.control) == [2003]
    kinds = {f.year: f.kind for f in cmp.failures}
    assert kinds == {2002: "InsufficientDataError", 2005: "InsufficientDataError"}
    assert all(f.group == "treatment" for f in cmp.failures)
    assert cmp.treatment_means == group_means([cmp.treatment[2001].result])


@pytest.mark.parametrize("workers", [1, 3])
def test_non_finite_year_is_isolated(rng: np.random.Generator, workers: int) -> None:
    broken = irregular_season(rng)
    broken[10] = np.nan
    source = {2001: smooth_season(rng), 2002: broken, 2003: irregular_season(rng)}
    cmp = compare_groups(source, [2001, 2002], [2003], SeasonalConfig(max_workers=workers))

    assert sorted(cmp.treatment) == [2001]
    assert sorted(cmp.control) == [2003]
    assert [(f.year, f.group, f.kind) for f in cmp.failures] == [(2002, "treatment", "NonFiniteInputError")]
    assert cmp.treatment_means == group_means([cmp.treatment[2001].result])


def test_parallel_matches_serial(rng: np.random.Generator) -> None:
    source = {y: irregular_season(rng, 60) for y in range(2000, 2006)}
    serial = compare_groups(source, [2000, 2001, 2002], [2003, 2004, 2005], SeasonalConfig())
    parallel = compare_groups(source, [2000, 2001, 2002], [2003, 2004, 2005], SeasonalConfig(max_workers=4))
    for y in serial.treatment:
        assert serial.treatment[y].result == parallel.treatment[y].result
    for y in serial.control:
        assert serial.control[y].result == parallel.control[y].result
    pd.testing.assert_frame_equal(serial.to_frame(), parallel.to_frame())


def test_overlapping_groups_rejected(rng: np.random.Generator) -> None:
    with pytest.raises(ValueError):
        compare_groups({2001: irregular_season(rng)}, [2001], [2001])


def test_cancelled_batch_skips_years(rng: np.random.Generator) -> None:
    cancel = threading.Event()
    cancel.set()
    cmp = compare_groups({2001: irregular_season(rng)}, [2001], [2002], cancel=cancel)
    assert cmp.skipped == [2001, 2002]
    assert not cmp.treatment and not cmp.control and not cmp.failures


def test_frames_and_report(rng: np.random.Generator) -> None:
    source = {2001: smooth_season(rng), 2002: irregular_season(rng), 2003: [1.0]}
    cmp = compare_groups(source, [2001], [2002, 2003])

    df = cmp.to_frame()
    assert df["year"].tolist() == [2001, 2002]
    assert df["group"].tolist() == ["treatment", "control"]
    assert set(RQAResult.METRICS).issubset(df.columns)

    summary = cmp.summary_frame()
    assert summary.index.tolist() == list(RQAResult.METRICS)
    assert summary.loc["RR", "difference"] == pytest.approx(
        summary.loc["RR", "treatment_mean"] - summary.loc["RR", "control_mean"]
    )

    text = format_comparison(cmp)
    assert "2001: RR=" in text and "2002: RR=" in text
    assert "2003 (control): InsufficientDataError" in text


def test_empty_group_means() -> None:
    assert group_means([]) == {}
    cmp = compare_groups({}, [2001], [2002])
    assert cmp.treatment_means == {} and cmp.difference() == {}
    assert cmp.summary_frame().isna().all().all()
