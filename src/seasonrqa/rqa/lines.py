"""Line-length extraction from a binary recurrence matrix."""

from __future__ import annotations

from typing import Iterable

import numpy as np


def extract_run_lengths(binary_sequence: Iterable[int]) -> list[int]:
    """Lengths of consecutive runs of 1s, left to right.

    A run that ends on the last element is kept. All-zero input gives [].
    """
    lengths: list[int] = []
    run = 0
    for v in binary_sequence:
        if v:
            run += 1
        else:
            if run > 0:
                lengths.append(run)
                run = 0
    if run > 0:
        lengths.append(run)
    return lengths


def diagonal_line_lengths(R: np.ndarray) -> np.ndarray:
    """All diagonal line lengths (>=1) off the main diagonal.

    For each offset k = 1..n-1 the upper diagonal R[i, i+k] is scanned, then the
    lower diagonal R[i+k, i]. The main diagonal (k=0) is excluded.
    """
    R = np.asarray(R)
    n = R.shape[0]
    lengths: list[int] = []
    for k in range(1, n):
        lengths.extend(extract_run_lengths(np.diagonal(R, offset=k)))
        lengths.extend(extract_run_lengths(np.diagonal(R, offset=-k)))
    return np.asarray(lengths, dtype=int)


def vertical_line_lengths(R: np.ndarray) -> np.ndarray:
    """All vertical line lengths (>=1) across columns."""
    R = np.asarray(R)
    lengths: list[int] = []
    for j in range(R.shape[1]):
        lengths.extend(extract_run_lengths(R[:, j]))
    return np.asarray(lengths, dtype=int)


def line_length_histogram(lengths: Iterable[int]) -> dict[int, int]:
    arr = np.asarray(list(lengths), dtype=int)
    if arr.size == 0:
        return {}
    uniq, counts = np.unique(arr, return_counts=True)
    return {int(u): int(c) for u, c in zip(uniq, counts)}
