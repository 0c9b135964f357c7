"""Typed failures raised by the RQA pipeline.

All of them derive from ``ValueError`` so callers that already guard numeric
code with ``except ValueError`` keep working.
"""

from __future__ import annotations


class SeasonRQAError(ValueError):
    """Base class for pipeline failures."""


class InsufficientDataError(SeasonRQAError):
    """The input sequence is too short for the requested (m, tau)."""

    def __init__(self, required: int, actual: int, *, m: int | None = None, tau: int | None = None) -> None:
        self.required = int(required)
        self.actual = int(actual)
        self.m = m
        self.tau = tau
        detail = f" for m={m}, tau={tau}" if m is not None and tau is not None else ""
        super().__init__(f"Not enough points{detail}: required {self.required}, got {self.actual}")


class EmptyDistributionError(SeasonRQAError):
    """Fewer than 2 embedded points: no pairwise distances to take a quantile of."""


class EmptyInputError(SeasonRQAError):
    """A zero-length embedded space or matrix reached a stage that needs points."""


class NonFiniteInputError(SeasonRQAError):
    """The sequence holds NaN or inf values that sanitization should have removed."""

    def __init__(self, count: int, size: int) -> None:
        self.count = int(count)
        self.size = int(size)
        super().__init__(f"Series contains {self.count} non-finite value(s) out of {self.size}; sanitize it before embedding")
