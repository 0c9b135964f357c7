"""RQA metrics from a binary recurrence matrix.

Definitions (Marwan et al., 2007, Physics Reports 438):
- RR: fraction of recurrent points over the full n x n matrix (diagonal included)
- DET: fraction of off-principal diagonal recurrences in lines of length >= l_min
- L, L_max, ENTR: mean, max and Shannon entropy of those diagonal lengths
- LAM: fraction of column recurrences in vertical lines of length >= v_min
- TT, V_max, V_ENTR: mean, max and Shannon entropy of those vertical lengths

Entropies use the natural logarithm (nats).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import ClassVar, Dict, Iterable

import numpy as np

from seasonrqa.errors import EmptyInputError
from seasonrqa.rqa.lines import diagonal_line_lengths, vertical_line_lengths


@dataclass(frozen=True)
class RQAResult:
    """The nine canonical RQA metrics. Every field is always populated."""

    rr: float
    det: float
    lam: float
    l: float  # noqa: E741
    l_max: int
    entr: float
    tt: float
    v_max: int
    v_entr: float

    METRICS: ClassVar[tuple[str, ...]] = ("RR", "DET", "LAM", "L", "L_max", "ENTR", "TT", "V_max", "V_ENTR")
    _FIELDS: ClassVar[tuple[str, ...]] = ("rr", "det", "lam", "l", "l_max", "entr", "tt", "v_max", "v_entr")

    @classmethod
    def zeros(cls) -> "RQAResult":
        return cls(rr=0.0, det=0.0, lam=0.0, l=0.0, l_max=0, entr=0.0, tt=0.0, v_max=0, v_entr=0.0)

    def as_dict(self) -> Dict[str, float]:
        """Mapping keyed by canonical metric names (RR, DET, ...)."""
        raw = asdict(self)
        return {name: raw[field] for name, field in zip(self.METRICS, self._FIELDS)}

    def __getitem__(self, metric: str) -> float:
        try:
            field = self._FIELDS[self.METRICS.index(metric)]
        except ValueError:
            raise KeyError(metric) from None
        return getattr(self, field)


def shannon_entropy(lengths: Iterable[int]) -> float:
    """Shannon entropy (nats) of the empirical distribution of line lengths."""
    arr = np.asarray(list(lengths), dtype=int)
    if arr.size == 0:
        return 0.0
    _, counts = np.unique(arr, return_counts=True)
    p = counts.astype(float) / float(arr.size)
    p = p[p > 0]
    return float(-np.sum(p * np.log(p)))


def _check_matrix(matrix: np.ndarray) -> np.ndarray:
    R = np.asarray(matrix)
    if R.ndim != 2 or R.shape[0] != R.shape[1]:
        raise ValueError(f"Recurrence matrix must be square, got shape {R.shape}")
    if R.shape[0] == 0:
        raise EmptyInputError("Recurrence matrix is empty")
    if R.dtype != bool and not np.all((R == 0) | (R == 1)):
        raise ValueError("Recurrence matrix must only contain 0 and 1")
    return R.astype(np.int8, copy=False)


def compute_statistics(matrix: np.ndarray, *, l_min: int = 2, v_min: int = 2) -> RQAResult:
    """Compute the RQA metric set from a square 0/1 recurrence matrix.

    A matrix with no line of length >= l_min (or v_min) is a valid outcome:
    the corresponding metrics are 0.
    """
    if int(l_min) < 1 or int(v_min) < 1:
        raise ValueError("l_min and v_min must be >= 1")
    R = _check_matrix(matrix)
    n = int(R.shape[0])

    rr = float(np.sum(R, dtype=np.int64)) / float(n * n)

    diag_all = diagonal_line_lengths(R)
    diag_det = diag_all[diag_all >= int(l_min)]
    if diag_det.size:
        det = float(np.sum(diag_det)) / float(max(int(np.sum(diag_all)), 1))
        l_mean = float(np.mean(diag_det))
        l_max = int(np.max(diag_det))
        entr = shannon_entropy(diag_det)
    else:
        det, l_mean, l_max, entr = 0.0, 0.0, 0, 0.0

    vert_all = vertical_line_lengths(R)
    vert_lam = vert_all[vert_all >= int(v_min)]
    if vert_lam.size:
        lam = float(np.sum(vert_lam)) / float(max(int(np.sum(vert_all)), 1))
        tt = float(np.mean(vert_lam))
        v_max = int(np.max(vert_lam))
        v_entr = shannon_entropy(vert_lam)
    else:
        lam, tt, v_max, v_entr = 0.0, 0.0, 0, 0.0

    return RQAResult(
        rr=rr,
        det=det,
        lam=lam,
        l=l_mean,
        l_max=l_max,
        entr=entr,
        tt=tt,
        v_max=v_max,
        v_entr=v_entr,
    )


def format_rqa_statistics(result: RQAResult, *, title: str = "RQA Statistics") -> str:
    """Human-readable block of the nine metrics."""
    bar = "=" * 60
    lines = [
        bar,
        title,
        bar,
        "Main indicators",
        f"  RR  (Recurrence Rate)          : {result.rr:.4f} ({result.rr * 100:.2f}%)",
        f"  DET (Determinism)              : {result.det:.4f} ({result.det * 100:.2f}%)",
        f"  LAM (Laminarity)               : {result.lam:.4f} ({result.lam * 100:.2f}%)",
        "Diagonal lines",
        f"  L     (Average diagonal line)  : {result.l:.2f}",
        f"  L_max (Maximum diagonal line)  : {result.l_max:d}",
        f"  ENTR  (Diagonal line entropy)  : {result.entr:.4f}",
        "Vertical lines",
        f"  TT    (Trapping time)          : {result.tt:.2f}",
        f"  V_max (Maximum vertical line)  : {result.v_max:d}",
        f"  V_ENTR(Vertical line entropy)  : {result.v_entr:.4f}",
        bar,
    ]
    return "\n".join(lines)
