from __future__ import annotations

import argparse
import csv
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any, TextIO

from .config import load_config
from .diagnostics import DiagnosticSink, JsonlDiagnosticSink
from .domain_models import SensorSample
from .exceptions import ConfigurationError
from .json_utils import dumps_compact, loads_record
from .processing import SwingEngine
from .session_summary import SessionAccumulator

LOGGER = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Replay a recorded sensor stream through the swing engine"
    )
    parser.add_argument("input", type=Path, help="Recorded samples (.csv or .jsonl)")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional YAML engine config (default: built-in defaults)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write detected swings as JSON lines here (default: stdout)",
    )
    parser.add_argument(
        "--summary-json",
        type=Path,
        default=None,
        help="Optional path to write the session summary JSON",
    )
    parser.add_argument(
        "--diagnostics",
        type=Path,
        default=None,
        help="Optional path to write engine diagnostics as JSON lines",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _iter_csv_records(f: TextIO) -> Iterator[dict[str, Any]]:
    yield from csv.DictReader(f)


def _iter_jsonl_records(f: TextIO, context: str) -> Iterator[dict[str, Any]]:
    for line in f:
        record = loads_record(line, context=context)
        if record is not None:
            yield record


def read_samples(path: Path) -> Iterator[SensorSample]:
    """Yield samples from a CSV (header row) or JSONL recording.

    Rows that do not parse into a :class:`SensorSample` are logged and skipped.
    """
    with path.open("r", encoding="utf-8", newline="") as f:
        if path.suffix.lower() == ".csv":
            records = _iter_csv_records(f)
        else:
            records = _iter_jsonl_records(f, str(path))
        for row_no, record in enumerate(records, start=1):
            try:
                yield SensorSample.from_dict(record)
            except ValueError as exc:
                LOGGER.warning("Skipping row %d in %s: %s", row_no, path, exc)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )
    if not args.input.exists():
        print(f"Error: input file not found: {args.input}", file=sys.stderr)
        return 1
    if args.config is not None and not args.config.exists():
        print(f"Error: config file not found: {args.config}", file=sys.stderr)
        return 1
    try:
        config = load_config(args.config)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    sink: DiagnosticSink | None = None
    if args.diagnostics is not None:
        sink = JsonlDiagnosticSink(args.diagnostics)
    engine = SwingEngine(config, sink=sink)
    session = SessionAccumulator()

    out: TextIO
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        out = args.output.open("w", encoding="utf-8")
    else:
        out = sys.stdout
    last_t: float | None = None
    try:
        for sample in read_samples(args.input):
            if session.start_s is None:
                session.start_s = sample.t_s
            last_t = sample.t_s
            event = engine.ingest(sample)
            if event is None:
                continue
            session.add(event)
            out.write(dumps_compact(event.to_dict()))
            out.write("\n")
        summary = session.summary(end_s=last_t)
        out.write(dumps_compact({"summary": summary.to_dict()}))
        out.write("\n")
    except UnicodeDecodeError as exc:
        print(f"Error: input file is not valid UTF-8 text: {exc}", file=sys.stderr)
        return 1
    finally:
        if out is not sys.stdout:
            out.close()

    stats = engine.stats()
    LOGGER.info(
        "Replayed %d samples: %d swings, %d analysis passes",
        engine.buffer.total_appended,
        summary.swing_count,
        stats.analyses_total,
    )
    if args.summary_json is not None:
        args.summary_json.parent.mkdir(parents=True, exist_ok=True)
        payload = {"summary": summary.to_dict(), "engine": stats.to_dict()}
        args.summary_json.write_text(dumps_compact(payload) + "\n", encoding="utf-8")
        print(f"wrote summary: {args.summary_json}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
