"""Static figures for recurrence plots and reconstructed state spaces.

Matplotlib is imported lazily so the analysis core never pays for it.
"""
