"""Read annotator snapshots, schemas and curator decisions from YAML or JSON.

Schema file:
    types:
      - name: Span
        fields:
          - {name: label, kind: string}

Snapshot file (one per annotator):
    annotator: alice
    text: "Barack Obama visited Paris."
    records:
      - {address: 1, type: Span, begin: 0, end: 12, features: {label: PER}}

Decisions file:
    decisions:
      - {type_name: Span, begin: 0, end: 12, chosen: {alice: 1}}
"""

import json
from pathlib import Path
from typing import Any

import yaml

from curation.data_models.decision import CuratorDecision
from curation.data_models.record import (
    AnnotationRecord,
    AnnotationType,
    AnnotatorVersion,
)


def _read(path: Path) -> Any:
    text = path.read_text()
    if path.suffix == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def load_schema(path: Path) -> dict[str, AnnotationType]:
    data = _read(path) or {}
    types = [AnnotationType.model_validate(t) for t in data.get("types", [])]
    schema = {t.name: t for t in types}
    if len(schema) != len(types):
        raise ValueError(f"Duplicate type name in {path}")
    return schema


def parse_version(
    data: dict[str, Any], schema: dict[str, AnnotationType]
) -> AnnotatorVersion:
    records = {}
    for raw in data.get("records", []):
        type_name = raw.get("type")
        if type_name not in schema:
            raise ValueError(
                f"Record {raw.get('address')!r} of {data.get('annotator')!r} has "
                f"unknown type {type_name!r}"
            )
        record = AnnotationRecord.model_validate({**raw, "type": schema[type_name]})
        if record.address in records:
            raise ValueError(
                f"Duplicate address {record.address} in {data.get('annotator')!r}"
            )
        records[record.address] = record
    return AnnotatorVersion(
        annotator=data["annotator"], text=data.get("text", ""), records=records
    )


def load_version(path: Path, schema: dict[str, AnnotationType]) -> AnnotatorVersion:
    return parse_version(_read(path), schema)


def load_versions(
    paths: list[Path], schema: dict[str, AnnotationType]
) -> dict[str, AnnotatorVersion]:
    """Load one snapshot per path, keyed by annotator id."""
    versions: dict[str, AnnotatorVersion] = {}
    for path in paths:
        version = load_version(path, schema)
        if version.annotator in versions:
            raise ValueError(f"Annotator {version.annotator!r} appears twice ({path})")
        versions[version.annotator] = version
    return versions


def load_decisions(path: Path) -> list[CuratorDecision]:
    data = _read(path) or {}
    return [CuratorDecision.model_validate(d) for d in data.get("decisions", [])]
