"""Span grouping and the multi-annotator diff.

Records of each requested type are bucketed by exact (begin, end) across all
annotators. A bucket holding fewer records than there are annotators cannot
reach consensus, so all of its records differ; within a bucket every pair of
distinct records is compared structurally.
"""

from collections import defaultdict
from collections.abc import Mapping, Sequence
from itertools import combinations

from curation.data_models.diff_result import DiffResult
from curation.data_models.record import (
    AnnotationRecord,
    AnnotationType,
    AnnotatorVersion,
)
from curation.diff.compare import compare

Member = tuple[str, AnnotationRecord]
Buckets = dict[tuple[int, int], list[Member]]


def resolve_window(
    versions: Mapping[str, AnnotatorVersion],
    begin: int | None = None,
    end: int | None = None,
) -> tuple[int, int]:
    """Fill in a missing window bound from the document: [0, len(text)]."""
    if begin is None:
        begin = 0
    if end is None:
        end = max((len(v.text) for v in versions.values()), default=0)
    if end < begin:
        raise ValueError(f"Window end {end} precedes begin {begin}")
    return begin, end


def group_by_span(
    type_name: str,
    versions: Mapping[str, AnnotatorVersion],
    begin: int,
    end: int,
) -> Buckets:
    """Bucket every annotator's covered records of one type by exact span.

    Buckets come back in span order, members ordered by (annotator, address).
    """
    buckets: Buckets = defaultdict(list)
    for annotator in sorted(versions):
        for record in versions[annotator].select_covered(type_name, begin, end):
            buckets[record.span].append((annotator, record))
    return {
        span: sorted(members, key=lambda m: (m[0], m[1].address))
        for span, members in sorted(buckets.items())
    }


def compute_diff(
    types: Sequence[AnnotationType],
    versions: Mapping[str, AnnotatorVersion],
    begin: int | None = None,
    end: int | None = None,
) -> DiffResult:
    """Flag, per annotator, the records that differ from some other version.

    Raises ComparisonError if a bucket holds a field kind that cannot be compared.
    """
    if not versions:
        return DiffResult()
    begin, end = resolve_window(versions, begin, end)
    n_annotators = len(versions)

    differing: dict[str, set[int]] = {a: set() for a in versions}
    covered: dict[str, set[int]] = {a: set() for a in versions}

    for annotation_type in types:
        buckets = group_by_span(annotation_type.name, versions, begin, end)
        for members in buckets.values():
            for annotator, record in members:
                covered[annotator].add(record.address)

            if len(members) < n_annotators:
                for annotator, record in members:
                    differing[annotator].add(record.address)

            # same-annotator pairs are compared too
            for (left_user, left), (right_user, right) in combinations(members, 2):
                verdict = compare(
                    versions[left_user], left, versions[right_user], right
                )
                if verdict.equal:
                    continue
                differing[left_user] |= verdict.left
                differing[right_user] |= verdict.right

    return DiffResult(
        differing={a: frozenset(s) for a, s in differing.items()},
        covered={a: frozenset(s) for a, s in covered.items()},
    )
