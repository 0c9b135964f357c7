from __future__ import annotations

import numpy as np

from seasonrqa.rqa.lines import (
    diagonal_line_lengths,
    extract_run_lengths,
    line_length_histogram,
    vertical_line_lengths,
)


def test_extract_run_lengths_examples() -> None:
    assert extract_run_lengths([0, 1, 1, 1, 0, 1, 1, 0]) == [3, 2]
    assert extract_run_lengths([1, 1]) == [2]
    assert extract_run_lengths([0, 0]) == []
    assert extract_run_lengths([]) == []
    assert extract_run_lengths(np.array([1, 0, 1], dtype=np.int8)) == [1, 1]


def test_diagonal_lines_exclude_main_diagonal() -> None:
    R = np.ones((3, 3), dtype=np.int8)
    # k=1 upper/lower: length 2 each, k=2 upper/lower: length 1 each
    assert sorted(diagonal_line_lengths(R).tolist()) == [1, 1, 2, 2]


def test_diagonal_lines_identity_is_empty() -> None:
    assert diagonal_line_lengths(np.eye(5, dtype=np.int8)).size == 0


def test_vertical_lines_per_column() -> None:
    R = np.array(
        [
            [1, 1, 0, 0],
            [1, 1, 1, 0],
            [0, 1, 1, 0],
            [0, 0, 0, 1],
        ],
        dtype=np.int8,
    )
    assert vertical_line_lengths(R).tolist() == [2, 3, 2, 1]


def test_line_length_histogram() -> None:
    assert line_length_histogram([2, 3, 2, 5]) == {2: 2, 3: 1, 5: 1}
    assert line_length_histogram([]) == {}
