"""Per-year seasonal RQA and treatment vs control comparison.

Each year runs the chain daily aggregate -> embed -> quantile threshold ->
recurrence matrix -> statistics with no state shared between years. Data
failures of one year are recorded and never abort the others.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from seasonrqa.data.seasonal import daily_means
from seasonrqa.errors import EmptyDistributionError, EmptyInputError, InsufficientDataError, NonFiniteInputError
from seasonrqa.phase.embedding import embed, min_series_length
from seasonrqa.rqa.recurrence import build_recurrence_matrix, quantile_threshold
from seasonrqa.rqa.statistics import RQAResult, compute_statistics

logger = logging.getLogger(__name__)

TREATMENT = "treatment"
CONTROL = "control"

# Failures that are isolated per year. Anything else is a bug and propagates.
YEAR_LEVEL_ERRORS = (InsufficientDataError, EmptyDistributionError, EmptyInputError, NonFiniteInputError)

Source = Union[pd.Series, Mapping[int, Sequence[float]]]


@dataclass(frozen=True)
class SeasonalConfig:
    """Embedding, threshold and season parameters for one analysis run."""

    m: int = 3
    tau: int = 1
    threshold_quantile: float = 0.10

    start_month: int = 3
    end_month: int = 5

    l_min: int = 2
    v_min: int = 2

    max_workers: int = 1

    def validate(self) -> "SeasonalConfig":
        if int(self.m) < 1 or int(self.tau) < 1:
            raise ValueError("m and tau must be >= 1")
        if not 0.0 <= float(self.threshold_quantile) <= 1.0:
            raise ValueError(f"threshold_quantile must be in [0, 1], got {self.threshold_quantile}")
        if not (1 <= int(self.start_month) <= 12 and 1 <= int(self.end_month) <= 12):
            raise ValueError("start_month and end_month must be in 1..12")
        if int(self.start_month) > int(self.end_month):
            raise ValueError("start_month must be <= end_month")
        if int(self.l_min) < 1 or int(self.v_min) < 1:
            raise ValueError("l_min and v_min must be >= 1")
        if int(self.max_workers) < 1:
            raise ValueError("max_workers must be >= 1")
        return self


@dataclass(frozen=True)
class SeasonAnalysis:
    """Artifacts of one (year, season) run, exposed for reporting and plots."""

    year: Optional[int]
    label: str
    n_points: int
    embedded: np.ndarray
    threshold: float
    matrix: np.ndarray
    result: RQAResult


@dataclass(frozen=True)
class YearFailure:
    year: int
    group: str
    kind: str
    message: str


@dataclass
class GroupComparison:
    treatment: Dict[int, SeasonAnalysis] = field(default_factory=dict)
    control: Dict[int, SeasonAnalysis] = field(default_factory=dict)
    failures: List[YearFailure] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)

    @property
    def treatment_means(self) -> Dict[str, float]:
        return group_means(a.result for a in self.treatment.values())

    @property
    def control_means(self) -> Dict[str, float]:
        return group_means(a.result for a in self.control.values())

    def difference(self) -> Dict[str, float]:
        """Treatment mean minus control mean, per metric present in both groups."""
        t, c = self.treatment_means, self.control_means
        return {k: t[k] - c[k] for k in RQAResult.METRICS if k in t and k in c}

    def to_frame(self) -> pd.DataFrame:
        rows: List[Dict[str, object]] = []
        for group, results in ((TREATMENT, self.treatment), (CONTROL, self.control)):
            for year in sorted(results):
                a = results[year]
                row: Dict[str, object] = {"year": year, "group": group}
                row.update(a.result.as_dict())
                row["threshold"] = a.threshold
                row["n_points"] = a.n_points
                rows.append(row)
        cols = ["year", "group", *RQAResult.METRICS, "threshold", "n_points"]
        return pd.DataFrame(rows, columns=cols)

    def summary_frame(self) -> pd.DataFrame:
        t, c, d = self.treatment_means, self.control_means, self.difference()
        return pd.DataFrame(
            {
                "treatment_mean": [t.get(k, np.nan) for k in RQAResult.METRICS],
                "control_mean": [c.get(k, np.nan) for k in RQAResult.METRICS],
                "difference": [d.get(k, np.nan) for k in RQAResult.METRICS],
            },
            index=pd.Index(RQAResult.METRICS, name="metric"),
        )


def group_means(results: Iterable[RQAResult]) -> Dict[str, float]:
    """Arithmetic mean per metric. An empty group yields an empty mapping."""
    rows = [r.as_dict() for r in results]
    if not rows:
        return {}
    return {k: float(np.mean([row[k] for row in rows])) for k in RQAResult.METRICS}


def analyze_sequence(
    values: Sequence[float] | np.ndarray,
    config: SeasonalConfig | None = None,
    *,
    year: Optional[int] = None,
    label: str = "",
) -> SeasonAnalysis:
    """Embed, pick the quantile threshold, build the matrix and compute RQA."""
    cfg = (config or SeasonalConfig()).validate()
    x = np.asarray(values, dtype=float)

    emb = embed(x, int(cfg.m), int(cfg.tau))
    eps = quantile_threshold(emb, float(cfg.threshold_quantile))
    R = build_recurrence_matrix(emb, eps)
    res = compute_statistics(R, l_min=int(cfg.l_min), v_min=int(cfg.v_min))

    logger.info(
        "year=%s %s: points=%d embedded=%d threshold=%.4f RR=%.3f DET=%.3f LAM=%.3f",
        year,
        label,
        x.size,
        emb.shape[0],
        eps,
        res.rr,
        res.det,
        res.lam,
    )
    return SeasonAnalysis(
        year=year,
        label=label,
        n_points=int(x.size),
        embedded=emb,
        threshold=float(eps),
        matrix=R,
        result=res,
    )


def _season_values(source: Source, year: int, cfg: SeasonalConfig) -> np.ndarray:
    if isinstance(source, pd.Series):
        return daily_means(source, year, int(cfg.start_month), int(cfg.end_month)).values
    if year not in source:
        raise InsufficientDataError(min_series_length(cfg.m, cfg.tau), 0, m=int(cfg.m), tau=int(cfg.tau))
    return np.asarray(source[year], dtype=float)


def analyze_season(
    source: Source,
    year: int,
    config: SeasonalConfig | None = None,
    *,
    label: str = "",
) -> SeasonAnalysis:
    """Run the pipeline on one year's season window of ``source``.

    ``source`` is either a timestamp-indexed raw signal (aggregated to daily
    means over the configured months) or a mapping year -> daily sequence.
    """
    cfg = (config or SeasonalConfig()).validate()
    values = _season_values(source, int(year), cfg)
    return analyze_sequence(values, cfg, year=int(year), label=label)


_Outcome = Tuple[str, int, str, object]


def _run_year(
    source: Source,
    year: int,
    group: str,
    cfg: SeasonalConfig,
    cancel: Optional[threading.Event],
) -> _Outcome:
    if cancel is not None and cancel.is_set():
        return ("skipped", year, group, None)
    try:
        return ("ok", year, group, analyze_season(source, year, cfg, label=group))
    except YEAR_LEVEL_ERRORS as e:
        logger.warning("year=%d (%s) failed: %s: %s", year, group, type(e).__name__, e)
        return ("failed", year, group, YearFailure(year=year, group=group, kind=type(e).__name__, message=str(e)))


def compare_groups(
    source: Source,
    treatment_years: Iterable[int],
    control_years: Iterable[int],
    config: SeasonalConfig | None = None,
    *,
    cancel: Optional[threading.Event] = None,
) -> GroupComparison:
    """Analyze every year independently and aggregate per group.

    Years whose data are too short (or degenerate) are recorded in
    ``failures`` and left out of the group means. Setting ``cancel`` stops
    the batch between years; years not started are listed in ``skipped``.
    """
    cfg = (config or SeasonalConfig()).validate()
    t_years = sorted({int(y) for y in treatment_years})
    c_years = sorted({int(y) for y in control_years})
    overlap = sorted(set(t_years) & set(c_years))
    if overlap:
        raise ValueError(f"Years assigned to both groups: {overlap}")

    jobs = [(y, TREATMENT) for y in t_years] + [(y, CONTROL) for y in c_years]

    if int(cfg.max_workers) > 1 and len(jobs) > 1:
        with ThreadPoolExecutor(max_workers=min(int(cfg.max_workers), len(jobs))) as pool:
            futures = [pool.submit(_run_year, source, y, g, cfg, cancel) for y, g in jobs]
            outcomes = [f.result() for f in futures]
    else:
        outcomes = [_run_year(source, y, g, cfg, cancel) for y, g in jobs]

    out = GroupComparison()
    for status, year, group, payload in outcomes:
        if status == "ok":
            target = out.treatment if group == TREATMENT else out.control
            target[year] = payload  # type: ignore[assignment]
        elif status == "failed":
            out.failures.append(payload)  # type: ignore[arg-type]
        else:
            out.skipped.append(year)

    if out.skipped:
        logger.info("Batch cancelled, %d year(s) skipped: %s", len(out.skipped), out.skipped)
    return out


def format_comparison(comparison: GroupComparison) -> str:
    """Comparison table (group means and difference) plus per-year RR/DET/LAM."""
    bar = "=" * 70
    lines = [bar, "Treatment vs control - RQA statistics", bar]
    lines.append(f"{'metric':<13} | {'treatment mean':>14} | {'control mean':>14} | difference")
    lines.append("-" * 70)

    summary = comparison.summary_frame()
    for metric, row in summary.iterrows():
        t, c, d = row["treatment_mean"], row["control_mean"], row["difference"]
        if metric in ("L_max", "V_max"):
            fmt = "{:14.1f}"
        elif metric in ("L", "TT"):
            fmt = "{:14.2f}"
        else:
            fmt = "{:14.4f}"
        t_s = fmt.format(t) if np.isfinite(t) else f"{'n/a':>14}"
        c_s = fmt.format(c) if np.isfinite(c) else f"{'n/a':>14}"
        d_s = f"{d:+.4f}" if np.isfinite(d) else "n/a"
        lines.append(f"{metric:<13} | {t_s} | {c_s} | {d_s}")
    lines.append(bar)

    for title, results in (("Treatment years", comparison.treatment), ("Control years", comparison.control)):
        lines.append(title)
        for year in sorted(results):
            r = results[year].result
            lines.append(f"  {year}: RR={r.rr:.3f}, DET={r.det:.3f}, LAM={r.lam:.3f}")

    if comparison.failures:
        lines.append("Failed years")
        for f in sorted(comparison.failures, key=lambda f: f.year):
            lines.append(f"  {f.year} ({f.group}): {f.kind}: {f.message}")
    return "\n".join(lines)
