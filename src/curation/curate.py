"""Diff annotator snapshots of one document and classify every reading.

Usage:
    python -m curation.curate \\
        --schema schema.yaml --versions alice.yaml bob.yaml carol.yaml \\
        [--types Span Token] [--begin 0 --end 500] [--decisions decisions.yaml] \\
        [--segment-type Sentence] [--colors colors.yaml] [--output states.parquet]
"""

import argparse
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
import sys

from curation.agreement.classify import record_states
from curation.agreement.coloring import StateColoring
from curation.agreement.report import diff_counts, state_summary, state_table
from curation.agreement.segments import segment_bounds, segment_states
from curation.data_models.decision import DecisionIndex, index_decisions
from curation.data_models.diff_result import DiffResult
from curation.data_models.record import AnnotationType, AnnotatorVersion
from curation.data_models.selection import AnnotationOption
from curation.data_models.state import AnnotationState
from curation.diff.compare import ComparisonError
from curation.diff.engine import compute_diff, resolve_window
from curation.diff.options import build_options
from curation.snapshot import load_decisions, load_schema, load_versions


@dataclass
class CurationRun:
    begin: int
    end: int
    diff: DiffResult
    options: list[AnnotationOption]
    states: dict[tuple[str, int], AnnotationState] = field(default_factory=dict)


def run_curation(
    types: Sequence[AnnotationType],
    versions: Mapping[str, AnnotatorVersion],
    begin: int | None = None,
    end: int | None = None,
    decisions: DecisionIndex | None = None,
) -> CurationRun:
    """Diff, group and classify one window of the document."""
    if versions:
        begin, end = resolve_window(versions, begin, end)
    else:
        begin, end = begin or 0, end or 0
    diff = compute_diff(types, versions, begin, end)
    options = build_options(types, versions, begin, end)
    return CurationRun(
        begin=begin,
        end=end,
        diff=diff,
        options=options,
        states=record_states(options, diff, decisions),
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Diff annotator snapshots and classify agreement"
    )
    parser.add_argument("--schema", required=True, help="Path to schema.yaml")
    parser.add_argument(
        "--versions", required=True, nargs="+", help="One snapshot file per annotator"
    )
    parser.add_argument(
        "--types", nargs="+", default=None, help="Types to diff (default: all)"
    )
    parser.add_argument("--begin", type=int, default=None)
    parser.add_argument("--end", type=int, default=None)
    parser.add_argument("--decisions", default=None, help="Curator decisions file")
    parser.add_argument(
        "--segment-type",
        default=None,
        help="Layer whose spans are reported as segments",
    )
    parser.add_argument("--colors", default=None, help="YAML state -> colour overrides")
    parser.add_argument(
        "--output", default=None, help="Write the state table (.parquet or .csv)"
    )
    args = parser.parse_args()

    schema = load_schema(Path(args.schema))
    type_names = args.types if args.types is not None else list(schema)
    unknown = [t for t in type_names if t not in schema]
    if unknown:
        parser.error(f"unknown types: {', '.join(unknown)}")
    types = [schema[t] for t in type_names]

    versions = load_versions([Path(p) for p in args.versions], schema)
    decisions = (
        index_decisions(load_decisions(Path(args.decisions))) if args.decisions else {}
    )
    coloring = StateColoring.from_yaml(Path(args.colors)) if args.colors else None

    try:
        run = run_curation(types, versions, args.begin, args.end, decisions)
        segments = None
        if args.segment_type is not None and versions:
            first = versions[min(versions)]
            segments = segment_states(
                segment_bounds(first, args.segment_type), types, versions, decisions
            )
    except ComparisonError as exc:
        print(f"Comparison failed: {exc}", file=sys.stderr)
        sys.exit(1)

    print(
        f"Diffed {len(versions)} annotators over [{run.begin}, {run.end}): "
        f"{len(run.options)} positions"
    )
    print(diff_counts(run.diff))
    table = state_table(run.options, run.states, coloring)
    for state, n in state_summary(table).items():
        if n:
            print(f"  {state}: {n}")
    if segments is not None:
        for (seg_begin, seg_end), seg_state in segments.items():
            print(f"  segment [{seg_begin}, {seg_end}): {seg_state.value}")

    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        if out_path.suffix == ".csv":
            table.write_csv(out_path)
        else:
            table.write_parquet(out_path)
        print(f"Wrote {len(table)} rows → {out_path}")


if __name__ == "__main__":
    main()
