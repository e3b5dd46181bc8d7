"""Check that annotator snapshots were taken of the same document text.

Usage:
    python -m curation.qc.validate_versions \\
        --schema schema.yaml --versions alice.yaml bob.yaml carol.yaml
"""

import argparse
from collections import Counter
from collections.abc import Mapping
from pathlib import Path
import sys

import polars as pl

from curation.data_models.record import AnnotatorVersion
from curation.snapshot import load_schema, load_versions


def validate(versions: Mapping[str, AnnotatorVersion]) -> pl.DataFrame:
    """Return one row per annotator whose text differs from the majority text.

    Ties are broken towards the text of the alphabetically first annotator.
    Empty result = all snapshots agree on the document.
    """
    schema = {
        "annotator": pl.String,
        "text_length": pl.Int64,
        "expected_length": pl.Int64,
    }
    if not versions:
        return pl.DataFrame(schema=schema)
    counts = Counter(v.text for v in versions.values())
    first_text = versions[min(versions)].text
    expected = max(counts, key=lambda t: (counts[t], t == first_text))
    rows = [
        (annotator, len(v.text), len(expected))
        for annotator, v in sorted(versions.items())
        if v.text != expected
    ]
    if not rows:
        return pl.DataFrame(schema=schema)
    return pl.DataFrame(rows, schema=schema, orient="row")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Check that all annotator snapshots share one document text"
    )
    parser.add_argument("--schema", required=True, help="Path to schema.yaml")
    parser.add_argument(
        "--versions", required=True, nargs="+", help="One snapshot file per annotator"
    )
    args = parser.parse_args()

    schema = load_schema(Path(args.schema))
    versions = load_versions([Path(p) for p in args.versions], schema)

    mismatched = validate(versions)
    print(f"{len(versions)} snapshots checked, {len(mismatched)} inconsistent")
    if len(mismatched) > 0:
        print(mismatched)
        sys.exit(1)


if __name__ == "__main__":
    main()
