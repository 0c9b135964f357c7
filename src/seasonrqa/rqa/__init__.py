"""Recurrence Quantification Analysis (RQA) core.

- recurrence: pairwise distances and the thresholded 0/1 recurrence matrix
- lines: diagonal and vertical run-length extraction
- statistics: RR, DET, LAM, L, L_max, ENTR, TT, V_max, V_ENTR

NumPy/SciPy only. Every function is pure: same inputs, same outputs.
"""

from __future__ import annotations
