"""Recursive structural equality between two annotation records.

Records are compared field by field over their shared type. Composite fields
are followed into the nested records, and every record that takes part in a
difference is reported on its own side of the verdict.
"""

from pydantic import BaseModel, ConfigDict

from curation.data_models.record import AnnotationRecord, AnnotatorVersion, FieldKind


class ComparisonError(Exception):
    """Raised for a primitive field kind the comparator cannot judge."""


class EqualityVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    left: frozenset[int] = frozenset()
    right: frozenset[int] = frozenset()

    @property
    def equal(self) -> bool:
        return not self.left and not self.right


def collect_subtree(version: AnnotatorVersion, record: AnnotationRecord) -> set[int]:
    """Addresses of the record and everything reachable through composite fields."""
    seen: set[int] = set()
    stack = [record]
    while stack:
        current = stack.pop()
        if current.address in seen:
            continue
        seen.add(current.address)
        for f in current.type.composite_fields():
            child = version.deref(current, f.name)
            if child is not None:
                stack.append(child)
    return seen


def _strings_equal(a: object, b: object) -> bool:
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    return a == b


def _compare(
    left_version: AnnotatorVersion,
    left: AnnotationRecord,
    right_version: AnnotatorVersion,
    right: AnnotationRecord,
    seen: dict[tuple[int, int], tuple[set[int], set[int]]],
) -> tuple[set[int], set[int]]:
    pair = (left.address, right.address)
    if pair in seen:
        # already compared, or still in progress further up a composite cycle
        return seen[pair]
    left_diff: set[int] = set()
    right_diff: set[int] = set()
    seen[pair] = (left_diff, right_diff)

    if left.type.name != right.type.name:
        left_diff |= collect_subtree(left_version, left)
        right_diff |= collect_subtree(right_version, right)
        return left_diff, right_diff

    nested_left: set[int] = set()
    nested_right: set[int] = set()
    for f in left.type.fields:
        a = left.features.get(f.name)
        b = right.features.get(f.name)
        if f.kind is FieldKind.integer:
            if a != b:
                left_diff.add(left.address)
                right_diff.add(right.address)
        elif f.kind is FieldKind.string:
            if not _strings_equal(a, b):
                left_diff.add(left.address)
                right_diff.add(right.address)
        elif f.kind is FieldKind.composite:
            child_a = left_version.deref(left, f.name)
            child_b = right_version.deref(right, f.name)
            if child_a is not None and child_b is not None:
                sub_left, sub_right = _compare(
                    left_version, child_a, right_version, child_b, seen
                )
                nested_left |= sub_left
                nested_right |= sub_right
            elif child_a is not None:
                nested_left.add(child_a.address)
            elif child_b is not None:
                nested_right.add(child_b.address)
        else:
            raise ComparisonError(
                f"{f.kind.value} range not yet supported "
                f"(field {f.name!r} of type {left.type.name!r})"
            )

    # a record holding a differing descendant differs itself
    if nested_left:
        left_diff |= nested_left
        left_diff.add(left.address)
    if nested_right:
        right_diff |= nested_right
        right_diff.add(right.address)
    return left_diff, right_diff


def compare(
    left_version: AnnotatorVersion,
    left: AnnotationRecord,
    right_version: AnnotatorVersion,
    right: AnnotationRecord,
) -> EqualityVerdict:
    """Compare two records, each resolved against the version that owns it."""
    left_diff, right_diff = _compare(left_version, left, right_version, right, {})
    return EqualityVerdict(left=frozenset(left_diff), right=frozenset(right_diff))
