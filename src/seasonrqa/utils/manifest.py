"""Run manifest: what went in, what came out, and with which library versions.

The input file is hashed alongside the outputs so a results directory can be
tied back to the exact flux export it was computed from.
"""

from __future__ import annotations

import hashlib
import json
import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd
import scipy

MANIFEST_SCHEMA = "seasonrqa_run_v1"
MANIFEST_NAME = "manifest.json"


@dataclass(frozen=True)
class FileDigest:
    path: str
    sha256: Optional[str]
    bytes: Optional[int]


def digest(path: str | Path, *, root: Path | None = None, chunk_size: int = 1 << 20) -> FileDigest:
    """SHA-256 and size of ``path``; missing files get null fields.

    Paths under ``root`` are recorded relative to it.
    """
    p = Path(path)
    label = str(p)
    if root is not None:
        try:
            label = p.relative_to(root).as_posix()
        except ValueError:
            pass
    if not p.is_file():
        return FileDigest(path=label, sha256=None, bytes=None)

    h = hashlib.sha256()
    with p.open("rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            h.update(chunk)
    return FileDigest(path=label, sha256=h.hexdigest(), bytes=p.stat().st_size)


@dataclass
class RunManifest:
    tool: str
    config: Dict[str, Any]
    inputs: List[FileDigest] = field(default_factory=list)
    outputs: List[FileDigest] = field(default_factory=list)
    years: Dict[str, List[int]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema": MANIFEST_SCHEMA,
            "tool": self.tool,
            "python": sys.version.split()[0],
            "versions": {"numpy": np.__version__, "pandas": pd.__version__, "scipy": scipy.__version__},
            "config": self.config,
            "years": {k: sorted(int(y) for y in v) for k, v in self.years.items()},
            "inputs": [asdict(d) for d in self.inputs],
            "outputs": [asdict(d) for d in self.outputs],
        }

    def write(self, out_dir: str | Path) -> Path:
        outp = Path(out_dir)
        outp.mkdir(parents=True, exist_ok=True)
        mpath = outp / MANIFEST_NAME
        mpath.write_text(json.dumps(self.to_dict(), indent=2, sort_keys=True), encoding="utf-8")
        return mpath


def write_manifest(
    out_dir: str | Path,
    *,
    tool: str,
    config: Dict[str, Any],
    inputs: Iterable[str | Path],
    outputs: Iterable[str | Path],
    years: Optional[Dict[str, Iterable[int]]] = None,
) -> Path:
    """Hash inputs and outputs and write ``manifest.json`` into ``out_dir``."""
    outp = Path(out_dir)
    manifest = RunManifest(
        tool=tool,
        config=dict(config),
        inputs=[digest(p) for p in inputs],
        outputs=[digest(p, root=outp) for p in outputs],
        years={k: list(v) for k, v in (years or {}).items()},
    )
    return manifest.write(outp)
