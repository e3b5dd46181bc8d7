"""Map diff output and curator decisions to presentation states."""

from collections.abc import Iterable

from curation.data_models.decision import CuratorDecision, DecisionIndex
from curation.data_models.diff_result import DiffResult
from curation.data_models.selection import AnnotationOption, AnnotationSelection
from curation.data_models.state import AnnotationState


def classify(
    option: AnnotationOption,
    selection: AnnotationSelection,
    diff: DiffResult,
    decision: CuratorDecision | None = None,
) -> AnnotationState:
    """State of one reading at one position.

    In order: a curator decision for the position wins; a reading holding a
    record the diff never covered is ERROR; everyone present and nothing
    differing is agreement; someone missing is incomplete; anything else is
    disagreement.
    """
    if decision is not None and decision.applies_to(option):
        if decision.accepts(selection):
            return AnnotationState.ACCEPTED_BY_CURATOR
        return AnnotationState.REJECTED_BY_CURATOR

    if any(not diff.was_covered(a, addr) for a, addr in selection.addresses.items()):
        return AnnotationState.ERROR

    n_annotators = len(diff.annotators)
    present = option.annotators
    any_differing = any(diff.is_differing(a, addr) for a, addr in option.addresses())

    if len(present) >= n_annotators and not any_differing:
        return AnnotationState.ANNOTATORS_AGREE
    if len(present) < n_annotators:
        return AnnotationState.ANNOTATORS_INCOMPLETE
    return AnnotationState.ANNOTATORS_DISAGREE


def record_states(
    options: Iterable[AnnotationOption],
    diff: DiffResult,
    decisions: DecisionIndex | None = None,
) -> dict[tuple[str, int], AnnotationState]:
    """State for every (annotator, address) held by some reading."""
    decisions = decisions or {}
    states: dict[tuple[str, int], AnnotationState] = {}
    for option in options:
        decision = decisions.get((option.type_name, option.begin, option.end))
        for selection in option.selections:
            state = classify(option, selection, diff, decision)
            for annotator, address in selection.addresses.items():
                states[(annotator, address)] = state
    return states
