"""Recurrence matrix construction and threshold selection."""

from __future__ import annotations

import logging

import numpy as np
import scipy.spatial.distance as ssd

from seasonrqa.errors import EmptyDistributionError, EmptyInputError

logger = logging.getLogger(__name__)


def _as_points(embedded: np.ndarray) -> np.ndarray:
    pts = np.asarray(embedded, dtype=float)
    if pts.ndim == 1:
        pts = pts[:, None]
    if pts.ndim != 2:
        raise ValueError(f"Embedded space must be 2D (n, m), got shape {pts.shape}")
    return pts


def pairwise_distance_distribution(embedded: np.ndarray) -> np.ndarray:
    """Euclidean distances for all unordered pairs i < j (self-pairs excluded).

    Returns the condensed vector of length n * (n - 1) / 2, in ``pdist`` order.
    """
    pts = _as_points(embedded)
    if pts.shape[0] < 2:
        raise EmptyDistributionError(
            f"Need at least 2 embedded points to form a distance distribution, got {pts.shape[0]}"
        )
    return ssd.pdist(pts, metric="euclidean")


def quantile_threshold(embedded: np.ndarray, q: float) -> float:
    """Recurrence threshold as the q-quantile of the pairwise distances."""
    q = float(q)
    if not 0.0 <= q <= 1.0:
        raise ValueError(f"threshold quantile must be in [0, 1], got {q}")
    d = pairwise_distance_distribution(embedded)
    return float(np.quantile(d, q))


def build_recurrence_matrix(embedded: np.ndarray, threshold: float) -> np.ndarray:
    """Binary recurrence matrix: R[i, j] = 1 iff ||x_i - x_j|| <= threshold.

    Distances are computed once for the upper triangle and mirrored, so the
    result is exactly symmetric; the main diagonal is always 1.
    """
    pts = _as_points(embedded)
    n = int(pts.shape[0])
    if n == 0:
        raise EmptyInputError("Cannot build a recurrence matrix from an empty embedded space")
    eps = float(threshold)
    if not np.isfinite(eps) or eps < 0:
        raise ValueError(f"threshold must be a finite value >= 0, got {threshold}")

    if n == 1:
        return np.ones((1, 1), dtype=np.int8)

    d = ssd.squareform(ssd.pdist(pts, metric="euclidean"))
    R = (d <= eps).astype(np.int8)
    np.fill_diagonal(R, 1)
    logger.debug("Recurrence matrix %dx%d, threshold=%.6g, recurrences=%d", n, n, eps, int(R.sum()))
    return R
