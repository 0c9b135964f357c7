"""CLI: seasonal RQA for treatment vs control years.

Example
-------
python -m seasonrqa.cli.run_seasonal \
  --input data/flux_halfhourly.csv \
  --value-col NEE_CUT_REF \
  --treatment-years 2012,2018 \
  --control-years 2010,2011,2013 \
  --start-month 3 --end-month 5 \
  --out _out/spring

Outputs
-------
- rqa_per_year.csv
- rqa_comparison.csv
- rqa_summary.json
- recurrence_<year>.png, state_space_<year>.png (with --plots)
- manifest.json
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List

from seasonrqa.data.ingest import load_series
from seasonrqa.orchestrator.seasonal import SeasonalConfig, compare_groups, format_comparison
from seasonrqa.utils.manifest import write_manifest

logger = logging.getLogger(__name__)


def _parse_years(s: str) -> List[int]:
    return [int(part.strip()) for part in s.split(",") if part.strip()]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Seasonal RQA: compare treatment and control years.")
    p.add_argument("--input", required=True, help="CSV/JSON input with a timestamp and a value column.")
    p.add_argument("--out", required=True, help="Output directory.")
    p.add_argument("--time-col", default=None, help="Timestamp column (default: first known alias).")
    p.add_argument("--value-col", required=True, help="Variable analysed, e.g. NEE_CUT_REF.")

    p.add_argument("--treatment-years", default="", help="Comma-separated treatment (e.g. drought) years.")
    p.add_argument("--control-years", default="", help="Comma-separated control (e.g. normal) years.")
    p.add_argument("--start-month", type=int, default=3)
    p.add_argument("--end-month", type=int, default=5)

    p.add_argument("--emb-dim", type=int, default=3, help="Embedding dimension m.")
    p.add_argument("--emb-lag", type=int, default=1, help="Delay tau, in days.")
    p.add_argument("--threshold-quantile", type=float, default=0.10, help="Quantile of pairwise distances used as threshold.")
    p.add_argument("--workers", type=int, default=1, help="Years processed in parallel.")

    p.add_argument("--plots", action="store_true", help="Write recurrence and state-space PNGs per year.")
    p.add_argument("--verbose", action="store_true")
    return p


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    cfg = SeasonalConfig(
        m=int(args.emb_dim),
        tau=int(args.emb_lag),
        threshold_quantile=float(args.threshold_quantile),
        start_month=int(args.start_month),
        end_month=int(args.end_month),
        max_workers=int(args.workers),
    )
    try:
        treatment = _parse_years(str(args.treatment_years))
        control = _parse_years(str(args.control_years))
        if not treatment and not control:
            raise ValueError("provide at least one year via --treatment-years or --control-years")
        cfg.validate()
        series = load_series(Path(str(args.input)), value_col=str(args.value_col), time_col=args.time_col)
        comparison = compare_groups(series, treatment, control, cfg)
    except (FileNotFoundError, ValueError) as e:
        raise SystemExit(f"error: {e}") from e

    out_dir = Path(str(args.out))
    out_dir.mkdir(parents=True, exist_ok=True)

    per_year_path = out_dir / "rqa_per_year.csv"
    comparison_path = out_dir / "rqa_comparison.csv"
    summary_path = out_dir / "rqa_summary.json"

    comparison.to_frame().to_csv(per_year_path, index=False, float_format="%.6f")
    comparison.summary_frame().to_csv(comparison_path, float_format="%.6f")

    summary: Dict[str, Any] = {
        "input": str(args.input),
        "value_col": str(args.value_col),
        "config": asdict(cfg),
        "treatment_years": treatment,
        "control_years": control,
        "succeeded": {
            "treatment": sorted(comparison.treatment),
            "control": sorted(comparison.control),
        },
        "failures": [asdict(f) for f in comparison.failures],
        "treatment_means": comparison.treatment_means,
        "control_means": comparison.control_means,
        "difference": comparison.difference(),
    }
    summary_path.write_text(json.dumps(summary, indent=2, sort_keys=True), encoding="utf-8")

    produced: List[Path] = [per_year_path, comparison_path, summary_path]

    if args.plots:
        from seasonrqa.viz.static import save_recurrence_plot, save_state_space_plot

        for results in (comparison.treatment, comparison.control):
            for year, a in sorted(results.items()):
                name = f"{year} ({a.label})"
                produced.append(save_recurrence_plot(out_dir / f"recurrence_{year}.png", a.matrix, title=f"Recurrence Plot - {name}"))
                if a.embedded.shape[1] >= 2:
                    produced.append(save_state_space_plot(out_dir / f"state_space_{year}.png", a.embedded, title=f"State Space - {name}"))

    write_manifest(
        out_dir,
        tool="seasonrqa.run_seasonal",
        config=summary["config"],
        inputs=[Path(str(args.input))],
        outputs=produced,
        years={
            "treatment": comparison.treatment,
            "control": comparison.control,
            "failed": [f.year for f in comparison.failures],
        },
    )
    logger.info("Wrote %d output file(s) to %s", len(produced) + 1, out_dir)

    print(format_comparison(comparison))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
