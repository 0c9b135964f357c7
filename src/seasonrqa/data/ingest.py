from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from seasonrqa.data.seasonal import sanitize_series


TIME_ALIASES = ("timestamp", "TIMESTAMP", "TIMESTAMP_START", "datetime", "date", "time")


def _first_present(df: pd.DataFrame, aliases: tuple[str, ...]) -> str | None:
    for c in aliases:
        if c in df.columns:
            return c
    return None


def _parse_compact(digits: pd.Series) -> pd.Series:
    return pd.to_datetime(digits.str.zfill(12), format="%Y%m%d%H%M", errors="coerce")


def parse_timestamps(raw: pd.Series) -> pd.DatetimeIndex:
    """Parse a timestamp column.

    Numeric stamps are read as compact ``YYYYMMDDHHMM`` (AmeriFlux style),
    left-padded to 12 digits. Anything else goes through ``pd.to_datetime``.
    Blank or unparseable cells become NaT.
    """
    if pd.api.types.is_numeric_dtype(raw):
        num = raw.to_numpy(dtype=float, na_value=np.nan)
        ok = np.isfinite(num)
        out = pd.Series(pd.NaT, index=raw.index, dtype="datetime64[ns]")
        digits = pd.Series(np.round(num[ok]).astype("int64"), index=raw.index[ok]).astype(str)
        out.loc[ok] = _parse_compact(digits)
        return pd.DatetimeIndex(out)
    text = raw.astype(str).str.replace(r"\s", "", regex=True)
    if text.str.fullmatch(r"\d{1,12}").all():
        return pd.DatetimeIndex(_parse_compact(text))
    return pd.DatetimeIndex(pd.to_datetime(raw, errors="coerce"))


def load_series(path: str | Path, *, value_col: str, time_col: str | None = None) -> pd.Series:
    """
    Load one variable of a CSV or JSON export as a timestamp-indexed series.

    Rows with unparseable timestamps are dropped; missing values (NaN, -9999,
    non-numeric cells) are removed by ``sanitize_series``.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(str(p))

    if p.suffix.lower() == ".csv":
        df = pd.read_csv(p)
    elif p.suffix.lower() == ".json":
        data: Any = json.loads(p.read_text(encoding="utf-8"))
        df = pd.DataFrame(data)
    else:
        raise ValueError(f"Unsupported input: {p.suffix}")

    if df.empty:
        raise ValueError("Empty input dataset")

    df.columns = [str(c).strip() for c in df.columns]

    tcol = time_col or _first_present(df, TIME_ALIASES)
    if tcol is None or tcol not in df.columns:
        raise ValueError(f"Missing time column (tried {time_col or ', '.join(TIME_ALIASES)})")
    if value_col not in df.columns:
        raise ValueError(f"Missing value column: {value_col}")

    idx = parse_timestamps(df[tcol])
    s = pd.Series(df[value_col].to_numpy(), index=idx, name=value_col)
    s = s[~np.asarray(idx.isna())]
    s = s[~s.index.duplicated(keep="first")]
    return sanitize_series(s)
