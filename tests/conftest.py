from __future__ import annotations

import numpy as np
import pandas as pd
import pytest


def smooth_season(rng: np.random.Generator, n: int = 92) -> np.ndarray:
    """Low-variance, slowly drifting daily signal."""
    t = np.arange(n, dtype=float)
    return 0.05 * np.sin(2.0 * np.pi * t / 60.0) + rng.normal(0.0, 1e-4, size=n)


def irregular_season(rng: np.random.Generator, n: int = 92) -> np.ndarray:
    """White-noise daily signal."""
    return rng.normal(0.0, 1.0, size=n)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(7)


@pytest.fixture
def halfhourly_series() -> pd.Series:
    """Two years of half-hourly data; the daily value equals the day of month."""
    idx = pd.date_range("2019-01-01 00:00", "2020-12-31 23:30", freq="30min")
    values = idx.day.to_numpy(dtype=float) + 0.5 * np.sin(2.0 * np.pi * idx.hour.to_numpy() / 24.0)
    return pd.Series(values, index=idx, name="NEE_CUT_REF")
