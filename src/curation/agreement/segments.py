"""Per-segment (e.g. per-sentence) agreement, for paging through a document."""

from collections.abc import Mapping, Sequence

from curation.agreement.classify import classify
from curation.data_models.decision import DecisionIndex
from curation.data_models.diff_result import DiffResult
from curation.data_models.record import AnnotationType, AnnotatorVersion
from curation.data_models.selection import AnnotationOption
from curation.data_models.state import AnnotationState, SegmentState
from curation.diff.engine import compute_diff
from curation.diff.options import build_options


def segment_bounds(version: AnnotatorVersion, type_name: str) -> list[tuple[int, int]]:
    """Spans of the segment layer (say, "Sentence") in one version, deduplicated."""
    return sorted({r.span for r in version.select(type_name)})


def is_disputed(option: AnnotationOption, diff: DiffResult) -> bool:
    """True when some reading at the position falls short of full agreement."""
    return any(
        classify(option, selection, diff) != AnnotationState.ANNOTATORS_AGREE
        for selection in option.selections
    )


def segment_state(
    options: Sequence[AnnotationOption],
    diff: DiffResult,
    decisions: DecisionIndex | None = None,
) -> SegmentState:
    decisions = decisions or {}
    disputed = [o for o in options if is_disputed(o, diff)]
    if not disputed:
        return SegmentState.AGREE
    if all((o.type_name, o.begin, o.end) in decisions for o in disputed):
        return SegmentState.RESOLVED
    return SegmentState.DISAGREE


def segment_states(
    segments: Sequence[tuple[int, int]],
    types: Sequence[AnnotationType],
    versions: Mapping[str, AnnotatorVersion],
    decisions: DecisionIndex | None = None,
) -> dict[tuple[int, int], SegmentState]:
    """Diff each segment window on its own and summarise it."""
    return {
        (begin, end): segment_state(
            build_options(types, versions, begin, end),
            compute_diff(types, versions, begin, end),
            decisions,
        )
        for begin, end in segments
    }
