"""Group equivalent readings across annotators into curation options."""

from collections.abc import Mapping, Sequence

from curation.data_models.record import AnnotationType, AnnotatorVersion
from curation.data_models.selection import AnnotationOption, AnnotationSelection
from curation.diff.compare import compare
from curation.diff.engine import Member, group_by_span, resolve_window


def _partition(
    members: list[Member], versions: Mapping[str, AnnotatorVersion]
) -> list[list[Member]]:
    """Split a bucket into equal-subsets, one record per annotator per subset.

    A record joins the first subset whose representative it equals and that
    does not already hold a record from the same annotator.
    """
    groups: list[list[Member]] = []
    for annotator, record in members:
        for group in groups:
            if any(a == annotator for a, _ in group):
                continue
            rep_user, rep = group[0]
            verdict = compare(versions[rep_user], rep, versions[annotator], record)
            if verdict.equal:
                group.append((annotator, record))
                break
        else:
            groups.append([(annotator, record)])
    return groups


def build_options(
    types: Sequence[AnnotationType],
    versions: Mapping[str, AnnotatorVersion],
    begin: int | None = None,
    end: int | None = None,
) -> list[AnnotationOption]:
    """One option per (type, span) bucket, one selection per equal-subset."""
    if not versions:
        return []
    begin, end = resolve_window(versions, begin, end)

    options: list[AnnotationOption] = []
    for annotation_type in types:
        buckets = group_by_span(annotation_type.name, versions, begin, end)
        for (span_begin, span_end), members in buckets.items():
            option = AnnotationOption(
                type_name=annotation_type.name, begin=span_begin, end=span_end
            )
            for group in _partition(members, versions):
                option.add(
                    AnnotationSelection(
                        addresses={a: record.address for a, record in group}
                    )
                )
            options.append(option)
    return options
