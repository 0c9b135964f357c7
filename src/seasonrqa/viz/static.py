from __future__ import annotations

from pathlib import Path

import numpy as np


def _pyplot():
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    return plt


def save_recurrence_plot(out_path: Path, matrix: np.ndarray, *, title: str = "Recurrence Plot") -> Path:
    """Black-on-white recurrence plot, origin top-left."""
    plt = _pyplot()
    R = np.asarray(matrix)

    fig, ax = plt.subplots(figsize=(6, 6))
    ax.imshow(R, cmap="Greys", interpolation="nearest", origin="upper")
    ax.set_title(title)
    ax.set_xlabel("Time Index")
    ax.set_ylabel("Time Index")
    fig.tight_layout()
    fig.savefig(out_path, dpi=150)
    plt.close(fig)
    return Path(out_path)


def save_state_space_plot(out_path: Path, embedded: np.ndarray, *, title: str = "State Space") -> Path:
    """Trajectory in the first 3 (or 2) delay coordinates, coloured by time."""
    plt = _pyplot()
    emb = np.asarray(embedded, dtype=float)
    if emb.ndim != 2 or emb.shape[1] < 2:
        raise ValueError("State space plot needs an embedding with at least 2 dimensions")

    t = np.arange(emb.shape[0])
    fig = plt.figure(figsize=(7, 6))
    if emb.shape[1] >= 3:
        from mpl_toolkits.mplot3d import Axes3D  # noqa: F401

        ax = fig.add_subplot(111, projection="3d")
        ax.plot(emb[:, 0], emb[:, 1], emb[:, 2], lw=0.8, color="0.6")
        sc = ax.scatter(emb[:, 0], emb[:, 1], emb[:, 2], c=t, cmap="viridis", s=8)
        ax.set_zlabel("x(t+2τ)")
    else:
        ax = fig.add_subplot(111)
        ax.plot(emb[:, 0], emb[:, 1], lw=0.8, color="0.6")
        sc = ax.scatter(emb[:, 0], emb[:, 1], c=t, cmap="viridis", s=8)
    ax.set_xlabel("x(t)")
    ax.set_ylabel("x(t+τ)")
    ax.set_title(title)
    fig.colorbar(sc, ax=ax, label="Time")
    fig.tight_layout()
    fig.savefig(out_path, dpi=150)
    plt.close(fig)
    return Path(out_path)
