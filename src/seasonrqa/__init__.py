"""Seasonal Recurrence Quantification Analysis (RQA).

Pipeline: daily aggregate -> delay embedding -> recurrence matrix -> RQA metrics,
run per year and compared across treatment and control year groups.
"""

from __future__ import annotations

from seasonrqa.errors import (
    EmptyDistributionError,
    EmptyInputError,
    InsufficientDataError,
    NonFiniteInputError,
    SeasonRQAError,
)
from seasonrqa.orchestrator.seasonal import (
    GroupComparison,
    SeasonAnalysis,
    SeasonalConfig,
    analyze_season,
    analyze_sequence,
    compare_groups,
)
from seasonrqa.phase.embedding import embed
from seasonrqa.rqa.lines import extract_run_lengths
from seasonrqa.rqa.recurrence import build_recurrence_matrix, pairwise_distance_distribution
from seasonrqa.rqa.statistics import RQAResult, compute_statistics

__all__ = [
    "EmptyDistributionError",
    "EmptyInputError",
    "GroupComparison",
    "InsufficientDataError",
    "NonFiniteInputError",
    "RQAResult",
    "SeasonAnalysis",
    "SeasonRQAError",
    "SeasonalConfig",
    "analyze_season",
    "analyze_sequence",
    "build_recurrence_matrix",
    "compare_groups",
    "compute_statistics",
    "embed",
    "extract_run_lengths",
    "pairwise_distance_distribution",
]
