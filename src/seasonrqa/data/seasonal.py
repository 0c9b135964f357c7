"""Seasonal windowing and daily aggregation of a raw sub-daily signal.

Missing values are handled once, here: sentinel codes and non-numeric entries
become NaN and are dropped before any aggregation. Everything downstream
receives a dense float sequence.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

# Flux-tower exports encode gaps as -9999.
MISSING_SENTINELS: tuple[float, ...] = (-9999, -9999.0)


@dataclass(frozen=True)
class DailySeason:
    year: int
    start_month: int
    end_month: int
    days: pd.DatetimeIndex
    values: np.ndarray

    def __len__(self) -> int:
        return int(self.values.size)


def _check_months(start_month: int, end_month: int) -> None:
    if not (1 <= int(start_month) <= 12 and 1 <= int(end_month) <= 12):
        raise ValueError(f"Months must be in 1..12, got {start_month}..{end_month}")
    if int(start_month) > int(end_month):
        raise ValueError(f"start_month ({start_month}) must be <= end_month ({end_month})")


def sanitize_series(series: pd.Series) -> pd.Series:
    """Numeric, sentinel-free, NaN-free copy of ``series`` sorted by time."""
    s = pd.to_numeric(series, errors="coerce")
    s = s.replace(list(MISSING_SENTINELS), np.nan).dropna()
    if not isinstance(s.index, pd.DatetimeIndex):
        s.index = pd.to_datetime(s.index)
    return s.sort_index(kind="mergesort").astype(float)


def season_bounds(year: int, start_month: int, end_month: int) -> tuple[pd.Timestamp, pd.Timestamp]:
    """Inclusive bounds: first instant of start_month to last second of end_month."""
    _check_months(start_month, end_month)
    start = pd.Timestamp(year=int(year), month=int(start_month), day=1)
    end = pd.Timestamp(year=int(year), month=int(end_month), day=1) + pd.offsets.MonthBegin(1) - pd.Timedelta(seconds=1)
    return start, end


def daily_means(series: pd.Series, year: int, start_month: int, end_month: int) -> DailySeason:
    """Daily mean of ``series`` within the (year, start_month..end_month) window.

    Days without any valid sample are absent from the result.
    """
    start, end = season_bounds(year, start_month, end_month)
    s = sanitize_series(series)
    window = s.loc[(s.index >= start) & (s.index <= end)]
    daily = window.resample("D").mean().dropna()
    return DailySeason(
        year=int(year),
        start_month=int(start_month),
        end_month=int(end_month),
        days=pd.DatetimeIndex(daily.index),
        values=daily.to_numpy(dtype=float),
    )
