"""Pairwise inter-annotator agreement on one feature of one annotation type.

Every exact span of the type is one item. For each pair of annotators the item
is coded with the feature value each of them gave there:

- positions neither annotator touched are skipped;
- positions where either annotator stacked several records are counted as
  plurality and left out, since stacked readings have no single code;
- positions only one annotator touched are incomplete: left out when
  `exclude_incomplete` is set, otherwise coded as a missing value.

Cohen's kappa (scikit-learn) only sees items both annotators coded.
Krippendorff's alpha (nominal) also takes the missing values. A coefficient
is NaN when there is nothing to measure: no complete item, or a single label
across the whole study.

Usage:
    python -m curation.agreement.pairwise \\
        --schema schema.yaml --versions alice.yaml bob.yaml \\
        --type Span --feature label [--include-incomplete] [--output kappa.csv]
"""

import argparse
from collections.abc import Mapping
from dataclasses import dataclass, field
from itertools import combinations
import math
from pathlib import Path

import krippendorff
import numpy as np
import polars as pl
from sklearn.metrics import cohen_kappa_score

from curation.data_models.record import (
    AnnotationRecord,
    AnnotationType,
    AnnotatorVersion,
    FieldKind,
)
from curation.diff.engine import group_by_span, resolve_window
from curation.snapshot import load_schema, load_versions

Label = int | str | None

_SCHEMA = {
    "type": pl.String,
    "feature": pl.String,
    "left": pl.String,
    "right": pl.String,
    "n_items": pl.Int64,
    "n_incomplete": pl.Int64,
    "n_plurality": pl.Int64,
    "cohen_kappa": pl.Float64,
    "krippendorff_alpha": pl.Float64,
}


@dataclass
class LabelStudy:
    items: list[tuple[Label, Label]] = field(default_factory=list)
    n_incomplete: int = 0
    n_plurality: int = 0

    def complete_items(self) -> list[tuple[Label, Label]]:
        return [(a, b) for a, b in self.items if a is not None and b is not None]


def _check_feature(annotation_type: AnnotationType, feature: str) -> None:
    try:
        kind = annotation_type.field(feature).kind
    except KeyError:
        raise ValueError(
            f"Type {annotation_type.name!r} has no feature {feature!r}"
        ) from None
    if kind not in (FieldKind.integer, FieldKind.string):
        raise ValueError(
            f"Agreement needs a string or integer feature, "
            f"{annotation_type.name}.{feature} is {kind.value}"
        )


def label_study(
    annotation_type: AnnotationType,
    feature: str,
    versions: Mapping[str, AnnotatorVersion],
    left: str,
    right: str,
    begin: int,
    end: int,
    exclude_incomplete: bool = True,
) -> LabelStudy:
    """Code every position of the type inside [begin, end] for two annotators."""
    _check_feature(annotation_type, feature)
    pair = {left: versions[left], right: versions[right]}
    study = LabelStudy()
    for members in group_by_span(annotation_type.name, pair, begin, end).values():
        held: dict[str, list[AnnotationRecord]] = {left: [], right: []}
        for annotator, record in members:
            held[annotator].append(record)
        if len(held[left]) > 1 or len(held[right]) > 1:
            study.n_plurality += 1
            continue
        if not held[left] or not held[right]:
            study.n_incomplete += 1
            if exclude_incomplete:
                continue
        codes = [held[a][0].value(feature) if held[a] else None for a in (left, right)]
        study.items.append((codes[0], codes[1]))
    return study


def cohen_kappa(study: LabelStudy) -> float:
    complete = study.complete_items()
    if len({v for item in complete for v in item}) < 2:
        return math.nan
    left, right = zip(*complete)
    return float(cohen_kappa_score(list(left), list(right)))


def krippendorff_alpha(study: LabelStudy) -> float:
    complete = study.complete_items()
    domain = sorted({v for item in complete for v in item}, key=str)
    if len(domain) < 2:
        return math.nan
    codes = {v: float(i) for i, v in enumerate(domain)}
    # values seen only on incomplete items cannot pair with anything
    rows = [[codes.get(item[side], np.nan) for item in study.items] for side in (0, 1)]
    data = np.array(rows, dtype=float)
    return float(
        krippendorff.alpha(reliability_data=data, level_of_measurement="nominal")
    )


def pairwise_agreement(
    annotation_type: AnnotationType,
    feature: str,
    versions: Mapping[str, AnnotatorVersion],
    begin: int | None = None,
    end: int | None = None,
    exclude_incomplete: bool = True,
) -> pl.DataFrame:
    """One row per annotator pair (in name order) with both coefficients."""
    _check_feature(annotation_type, feature)
    if len(versions) < 2:
        return pl.DataFrame(schema=_SCHEMA)
    begin, end = resolve_window(versions, begin, end)
    rows = []
    for left, right in combinations(sorted(versions), 2):
        study = label_study(
            annotation_type,
            feature,
            versions,
            left,
            right,
            begin,
            end,
            exclude_incomplete=exclude_incomplete,
        )
        rows.append(
            (
                annotation_type.name,
                feature,
                left,
                right,
                len(study.items),
                study.n_incomplete,
                study.n_plurality,
                cohen_kappa(study),
                krippendorff_alpha(study),
            )
        )
    return pl.DataFrame(rows, schema=_SCHEMA, orient="row")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Pairwise agreement on one feature of one annotation type"
    )
    parser.add_argument("--schema", required=True, help="Path to schema.yaml")
    parser.add_argument(
        "--versions", required=True, nargs="+", help="One snapshot file per annotator"
    )
    parser.add_argument("--type", required=True, help="Annotation type to measure")
    parser.add_argument("--feature", required=True, help="Feature holding the label")
    parser.add_argument("--begin", type=int, default=None)
    parser.add_argument("--end", type=int, default=None)
    parser.add_argument(
        "--include-incomplete",
        action="store_true",
        help="Code positions only one annotator touched as missing values",
    )
    parser.add_argument("--output", default=None, help="Write the table as CSV")
    args = parser.parse_args()

    schema = load_schema(Path(args.schema))
    if args.type not in schema:
        parser.error(f"unknown type: {args.type}")
    versions = load_versions([Path(p) for p in args.versions], schema)

    try:
        table = pairwise_agreement(
            schema[args.type],
            args.feature,
            versions,
            args.begin,
            args.end,
            exclude_incomplete=not args.include_incomplete,
        )
    except ValueError as exc:
        parser.error(str(exc))

    print(f"{args.type}.{args.feature}: {len(table)} annotator pairs")
    print(table)

    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        table.write_csv(out_path)
        print(f"Wrote {len(table)} rows → {out_path}")


if __name__ == "__main__":
    main()
