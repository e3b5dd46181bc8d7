"""Tabular views of a curation run, for export or inspection."""

from collections.abc import Mapping, Sequence

import polars as pl

from curation.agreement.coloring import StateColoring
from curation.data_models.diff_result import DiffResult
from curation.data_models.selection import AnnotationOption
from curation.data_models.state import AnnotationState

_STATE_SCHEMA = {
    "type": pl.String,
    "begin": pl.Int64,
    "end": pl.Int64,
    "reading": pl.Int64,
    "annotator": pl.String,
    "address": pl.Int64,
    "state": pl.String,
    "color": pl.String,
}

_COUNT_SCHEMA = {
    "annotator": pl.String,
    "n_covered": pl.Int64,
    "n_differing": pl.Int64,
}


def state_table(
    options: Sequence[AnnotationOption],
    states: Mapping[tuple[str, int], AnnotationState],
    coloring: StateColoring | None = None,
) -> pl.DataFrame:
    """One row per (reading, annotator): where it is, its state and display colour.

    `states` is keyed by (annotator, address), as `record_states` returns it.
    """
    coloring = coloring or StateColoring()
    rows = []
    for option in options:
        for reading, selection in enumerate(option.selections):
            for annotator, address in sorted(selection.addresses.items()):
                state = states[(annotator, address)]
                rows.append(
                    (
                        option.type_name,
                        option.begin,
                        option.end,
                        reading,
                        annotator,
                        address,
                        state.value,
                        coloring.color(state),
                    )
                )
    if not rows:
        return pl.DataFrame(schema=_STATE_SCHEMA)
    return pl.DataFrame(rows, schema=_STATE_SCHEMA, orient="row")


def diff_counts(diff: DiffResult) -> pl.DataFrame:
    rows = [
        (
            annotator,
            len(diff.covered.get(annotator, frozenset())),
            len(diff.for_annotator(annotator)),
        )
        for annotator in diff.annotators
    ]
    if not rows:
        return pl.DataFrame(schema=_COUNT_SCHEMA)
    return pl.DataFrame(rows, schema=_COUNT_SCHEMA, orient="row")


def state_summary(table: pl.DataFrame) -> Mapping[str, int]:
    """Number of positions in each state, counting every position once per state."""
    counts = (
        table.unique(subset=["type", "begin", "end", "state"])
        .group_by("state")
        .agg(pl.len().alias("n"))
    )
    summary = {state.value: 0 for state in AnnotationState}
    for row in counts.iter_rows(named=True):
        summary[row["state"]] = row["n"]
    return summary
