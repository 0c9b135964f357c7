from __future__ import annotations

from typing import Sequence

import numpy as np

from seasonrqa.errors import InsufficientDataError, NonFiniteInputError


def min_series_length(m: int, tau: int) -> int:
    """Shortest series that yields one embedded vector."""
    return (int(m) - 1) * int(tau) + 1


def embed(data: Sequence[float] | np.ndarray, m: int, tau: int) -> np.ndarray:
    """Time-delay (Takens) embedding of a 1D series.

    Row i is ``[x[i], x[i + tau], ..., x[i + (m - 1) * tau]]``.
    Returns an array of shape (len(data) - (m - 1) * tau, m).
    """
    if int(m) < 1 or int(tau) < 1:
        raise ValueError("m and tau must be >= 1")
    x = np.asarray(data, dtype=float)
    if x.ndim != 1:
        raise ValueError(f"Expected a 1D series, got shape {x.shape}")
    bad = int(np.count_nonzero(~np.isfinite(x)))
    if bad:
        raise NonFiniteInputError(bad, x.size)

    m = int(m)
    tau = int(tau)
    required = min_series_length(m, tau)
    if x.size < required:
        raise InsufficientDataError(required, x.size, m=m, tau=tau)

    n = x.size - (m - 1) * tau
    emb = np.empty((n, m), dtype=float)
    for j in range(m):
        emb[:, j] = x[j * tau : j * tau + n]
    return emb
