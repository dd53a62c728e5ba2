#!/usr/bin/env python3
"""
Global 500 chart pipeline.

Runs every declared chart pipeline (adapters/configs/pipelines.yaml):
  1. Fetches the CSV source (local path or URL)
  2. Parses it into rows, honouring the source's header offset
  3. Aggregates: counts per category, or scaled label/value pairs
  4. Builds the ECharts option for the pipeline's render target
Then writes the chart page, a static bar chart per label/value
pipeline, and summary.json.

Pipelines are independent: a failed fetch or a strict-mode error fails
only its own pipeline, and the page is still written for the rest.

Usage:
  python -m cli.run_pipeline                          # All pipelines
  python -m cli.run_pipeline --only summary           # One pipeline
  python -m cli.run_pipeline --strict-rows            # Fail on malformed lines
  python -m cli.run_pipeline --list-pipelines
"""

import argparse
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from adapters.base import MODE_COUNT, PipelineConfig
from adapters.csv_client import CSVClient, load_rows
from adapters.registry import load_pipelines
from core.aggregator import LabelSeries, count_by_category, extract_label_values
from core.config import settings
from core.normalizer import build_name_map, normalize_counts
from visualization import (
    ChartPanel,
    build_bar_option,
    build_map_option,
    create_rate_bar_chart,
    write_page,
)

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Everything one pipeline produced, or the error that stopped it."""
    name: str
    target: str
    mode: str
    option: Optional[dict] = None
    row_count: int = 0
    rejected_lines: list[int] = field(default_factory=list)
    counts: Optional[dict[str, int]] = None
    series: Optional[LabelSeries] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_summary(self) -> dict:
        out = {
            "target": self.target,
            "mode": self.mode,
            "rows": self.row_count,
            "rejected_lines": self.rejected_lines,
            "error": self.error,
        }
        if self.counts is not None:
            out["counts"] = self.counts
        if self.series is not None:
            out["labels"] = self.series.labels
            out["values"] = self.series.values
            out["invalid"] = [
                {"label": o.label, "raw": o.raw, "error": o.error}
                for o in self.series.invalid
            ]
        return out


def setup_logging(output_dir: Path):
    """Configure logging to both file and stdout."""
    output_dir.mkdir(parents=True, exist_ok=True)
    log_path = output_dir / "pipeline.log"

    handlers = [
        logging.FileHandler(log_path, mode="w", encoding="utf-8"),
        logging.StreamHandler(sys.stdout),
    ]

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=handlers,
    )
    return logging.getLogger(__name__)


def run_pipeline(
    pipeline: PipelineConfig,
    client: Optional[CSVClient] = None,
    strict_rows: bool = False,
    strict_labels: bool = False,
) -> PipelineResult:
    """
    Fetch, parse, and aggregate one pipeline and build its chart option.

    Per-pipeline strict_rows/strict_labels in the config win over the
    arguments. Errors propagate to the caller.
    """
    if pipeline.strict_rows is not None:
        strict_rows = pipeline.strict_rows
    if pipeline.strict_labels is not None:
        strict_labels = pipeline.strict_labels

    parsed = load_rows(pipeline.source, client=client, strict=strict_rows)
    result = PipelineResult(
        name=pipeline.name,
        target=pipeline.target,
        mode=pipeline.mode,
        row_count=len(parsed.rows),
        rejected_lines=[o.line_number for o in parsed.rejected],
    )

    if pipeline.mode == MODE_COUNT:
        counts = count_by_category(parsed.rows, pipeline.category_column)
        name_map = None
        if pipeline.normalize_categories:
            name_map = build_name_map(labels=list(counts.keys()))
            counts = normalize_counts(counts, strict=strict_labels)
        result.counts = counts
        result.option = build_map_option(
            counts,
            title=pipeline.title,
            series_name=pipeline.series_name or "公司数量",
            visual_max=pipeline.visual_max,
            name_map=name_map,
        )
        logger.info(f"{pipeline.name}: {len(counts)} categories from {len(parsed.rows)} rows")
    else:
        series = extract_label_values(
            parsed.rows,
            label_column=pipeline.label_column,
            value_column=pipeline.value_column,
            scale=pipeline.scale,
            decimals=pipeline.decimals,
            on_invalid=pipeline.on_invalid,
        )
        result.series = series
        result.option = build_bar_option(
            series,
            title=pipeline.title,
            series_name=pipeline.series_name or pipeline.value_column,
        )
        logger.info(f"{pipeline.name}: {len(series)} label/value pairs")

    if pipeline.chart_options:
        result.option.update(pipeline.chart_options)
    return result


def run_pipelines(
    pipelines: Sequence[PipelineConfig],
    output_dir: Optional[Path] = None,
    data_dir: Optional[Path] = None,
    workers: int = 4,
    strict_rows: Optional[bool] = None,
    strict_labels: Optional[bool] = None,
) -> dict[str, PipelineResult]:
    """
    Run every pipeline and write the page, bar charts, and summary.

    Pipelines run concurrently (I/O-bound fetches), each with its own
    CSVClient so no HTTP session is shared between threads. A pipeline
    that raises is recorded with its error; the others are unaffected.

    Returns:
        {pipeline name: PipelineResult} in declaration order.
    """
    if output_dir is None:
        output_dir = settings.OUTPUT_DIR
    if strict_rows is None:
        strict_rows = settings.STRICT_ROWS
    if strict_labels is None:
        strict_labels = settings.STRICT_LABELS

    def _run_one(pipeline: PipelineConfig) -> PipelineResult:
        return run_pipeline(
            pipeline, CSVClient(base_dir=data_dir), strict_rows, strict_labels,
        )

    finished: dict[str, PipelineResult] = {}
    with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
        futures = {pool.submit(_run_one, p): p for p in pipelines}
        for future in as_completed(futures):
            p = futures[future]
            try:
                finished[p.name] = future.result()
            except Exception as e:
                logger.error(f"Pipeline {p.name} failed: {e}")
                finished[p.name] = PipelineResult(
                    name=p.name, target=p.target, mode=p.mode, error=str(e),
                )

    results = {p.name: finished[p.name] for p in pipelines}
    write_outputs(results, output_dir)
    return results


def write_outputs(results: dict[str, PipelineResult], output_dir: Path):
    """Chart page for successful pipelines, PNG per bar series, summary.json."""
    output_dir.mkdir(parents=True, exist_ok=True)

    panels = [ChartPanel(target=r.target, option=r.option) for r in results.values() if r.ok]
    if panels:
        write_page(panels, output_path=output_dir / "index.html")
    else:
        logger.warning("No pipeline succeeded, chart page not written")

    for r in results.values():
        if r.ok and r.series is not None:
            title = r.option.get("title", {}).get("text") or r.name
            create_rate_bar_chart(r.series, output_path=output_dir / f"{r.name}.png", title=title)

    summary = {
        "pipelines": {name: r.to_summary() for name, r in results.items()},
        "failed": [name for name, r in results.items() if not r.ok],
    }
    summary_path = output_dir / "summary.json"
    with open(summary_path, "w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2, ensure_ascii=False)
    logger.info(f"Exported summary to {summary_path}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Global 500 chart pipeline")
    parser.add_argument(
        "--config", type=Path, default=None,
        help=f"Pipeline YAML (default: {settings.PIPELINES_FILE})",
    )
    parser.add_argument(
        "--data-dir", type=Path, default=None,
        help="Base directory for relative source paths",
    )
    parser.add_argument(
        "--output-dir", type=Path, default=None,
        help=f"Where to write outputs (default: {settings.OUTPUT_DIR})",
    )
    parser.add_argument(
        "--only", nargs="+", metavar="NAME",
        help="Run only these pipelines",
    )
    parser.add_argument(
        "--strict-rows", action="store_true",
        help="Fail a pipeline on lines whose field count differs from the header",
    )
    parser.add_argument(
        "--strict-labels", action="store_true",
        help="Fail a pipeline on categories with no map name",
    )
    parser.add_argument(
        "--workers", type=int, default=4,
        help="Pipelines fetched concurrently (default: 4)",
    )
    parser.add_argument(
        "--list-pipelines", action="store_true",
        help="List declared pipelines and exit",
    )

    args = parser.parse_args(argv)
    pipelines = load_pipelines(args.config)

    if args.list_pipelines:
        print("Pipelines:")
        for p in pipelines:
            print(f"  {p.name:12s} - {p.mode} -> #{p.target} ({p.source.url})")
        return 0

    if args.only:
        known = {p.name for p in pipelines}
        unknown = [n for n in args.only if n not in known]
        if unknown:
            print(f"Unknown pipelines: {', '.join(unknown)}. Available: {', '.join(sorted(known))}")
            return 1
        pipelines = [p for p in pipelines if p.name in args.only]

    output_dir = args.output_dir or settings.OUTPUT_DIR
    log = setup_logging(output_dir)
    log.info("=" * 60)
    log.info(f"Global 500 chart pipeline: {', '.join(p.name for p in pipelines)}")
    log.info("=" * 60)

    results = run_pipelines(
        pipelines,
        output_dir=output_dir,
        data_dir=args.data_dir,
        workers=args.workers,
        strict_rows=args.strict_rows or None,
        strict_labels=args.strict_labels or None,
    )

    failed = [name for name, r in results.items() if not r.ok]
    log.info("=" * 60)
    log.info(f"Done: {len(results) - len(failed)} succeeded, {len(failed)} failed")
    log.info(f"  Page:    {output_dir / 'index.html'}")
    log.info(f"  Summary: {output_dir / 'summary.json'}")
    log.info("=" * 60)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
