import pytest

from curation.data_models.record import (
    AnnotationRecord,
    AnnotationType,
    AnnotatorVersion,
    Field,
    FieldKind,
)
from curation.diff.compare import ComparisonError, collect_subtree, compare

TEXT = "Barack Obama visited Paris in 2009."

SPAN = AnnotationType(name="Span", fields=(Field(name="label", kind=FieldKind.string),))
LINK = AnnotationType(
    name="Link",
    fields=(
        Field(name="role", kind=FieldKind.string),
        Field(name="rank", kind=FieldKind.integer),
        Field(name="target", kind=FieldKind.composite),
    ),
)
SCORED = AnnotationType(
    name="Scored", fields=(Field(name="confidence", kind=FieldKind.float),)
)


def _version(annotator: str, *records: AnnotationRecord) -> AnnotatorVersion:
    return AnnotatorVersion(
        annotator=annotator, text=TEXT, records={r.address: r for r in records}
    )


def _span(address: int, label: str | None, begin: int = 0, end: int = 12):
    return AnnotationRecord(
        address=address, type=SPAN, begin=begin, end=end, features={"label": label}
    )


def _link(address: int, target: int | None, role: str = "agent", rank: int = 1):
    return AnnotationRecord(
        address=address,
        type=LINK,
        begin=0,
        end=12,
        features={"role": role, "rank": rank, "target": target},
    )


def test_record_equals_itself():
    inner = _span(1, "PER")
    outer = _link(2, 1)
    v = _version("alice", inner, outer)

    verdict = compare(v, outer, v, outer)

    assert verdict.equal
    assert verdict.left == frozenset()
    assert verdict.right == frozenset()


def test_equal_strings_across_versions():
    a = _version("alice", _span(1, "PER"))
    b = _version("bob", _span(7, "PER"))

    assert compare(a, a.get(1), b, b.get(7)).equal


def test_different_strings_flag_both_roots():
    a = _version("alice", _span(1, "PER"))
    b = _version("bob", _span(7, "LOC"))

    verdict = compare(a, a.get(1), b, b.get(7))

    assert not verdict.equal
    assert verdict.left == {1}
    assert verdict.right == {7}


def test_string_compared_against_other_side():
    # the value on the right must actually be read, not the left value twice
    a = _version("alice", _span(1, "PER"))
    b = _version("bob", _span(2, "ORG"))

    assert not compare(b, b.get(2), a, a.get(1)).equal


def test_null_strings_are_equal():
    a = _version("alice", _span(1, None))
    b = _version("bob", _span(2, None))

    assert compare(a, a.get(1), b, b.get(2)).equal


def test_null_against_value_differs():
    a = _version("alice", _span(1, None))
    b = _version("bob", _span(2, "PER"))

    verdict = compare(a, a.get(1), b, b.get(2))

    assert verdict.left == {1}
    assert verdict.right == {2}


def test_integer_difference_flags_roots_only():
    a = _version("alice", _span(1, "PER"), _link(2, 1, rank=1))
    b = _version("bob", _span(11, "PER"), _link(12, 11, rank=2))

    verdict = compare(a, a.get(2), b, b.get(12))

    assert verdict.left == {2}
    assert verdict.right == {12}


def test_nested_difference_marks_parents():
    a = _version("alice", _span(1, "PER"), _link(2, 1))
    b = _version("bob", _span(11, "LOC"), _link(12, 11))

    verdict = compare(a, a.get(2), b, b.get(12))

    assert verdict.left == {1, 2}
    assert verdict.right == {11, 12}


def test_one_sided_composite_attributed_to_present_side():
    a = _version("alice", _span(1, "PER"), _link(2, 1))
    b = _version("bob", _link(12, None))

    verdict = compare(a, a.get(2), b, b.get(12))

    assert not verdict.equal
    assert verdict.left == {1, 2}
    assert verdict.right == frozenset()

    swapped = compare(b, b.get(12), a, a.get(2))
    assert swapped.left == frozenset()
    assert swapped.right == {1, 2}


def test_type_mismatch_flags_whole_subtrees():
    other = AnnotationType(
        name="OtherSpan", fields=(Field(name="label", kind=FieldKind.string),)
    )
    a = _version("alice", _span(1, "PER"), _link(2, 1))
    b = _version(
        "bob",
        AnnotationRecord(
            address=11, type=other, begin=0, end=12, features={"label": "PER"}
        ),
        _link(12, 11),
    )

    verdict = compare(a, a.get(2), b, b.get(12))

    assert verdict.left == {1, 2}
    assert verdict.right == {11, 12}


def test_root_type_mismatch_flags_subtrees():
    a = _version("alice", _span(1, "PER"), _link(2, 1))
    b = _version("bob", _span(11, "PER"))

    verdict = compare(a, a.get(2), b, b.get(11))

    assert verdict.left == {1, 2}
    assert verdict.right == {11}


def test_verdict_is_symmetric():
    cases = [
        (_version("alice", _span(1, "PER")), 1, _version("bob", _span(2, "PER")), 2),
        (_version("alice", _span(1, "PER")), 1, _version("bob", _span(2, "LOC")), 2),
        (
            _version("alice", _span(1, "PER"), _link(2, 1)),
            2,
            _version("bob", _link(12, None)),
            12,
        ),
    ]
    for va, a, vb, b in cases:
        forward = compare(va, va.get(a), vb, vb.get(b))
        backward = compare(vb, vb.get(b), va, va.get(a))
        assert forward.equal == backward.equal


def test_unsupported_kind_raises():
    record = AnnotationRecord(
        address=1, type=SCORED, begin=0, end=5, features={"confidence": 0.5}
    )
    v = _version("alice", record)

    with pytest.raises(ComparisonError, match="float range not yet supported"):
        compare(v, record, v, record)


def test_cyclic_composites_terminate():
    node = AnnotationType(
        name="Node",
        fields=(
            Field(name="label", kind=FieldKind.string),
            Field(name="next", kind=FieldKind.composite),
        ),
    )

    def _node(address: int, label: str, nxt: int) -> AnnotationRecord:
        return AnnotationRecord(
            address=address,
            type=node,
            begin=0,
            end=6,
            features={"label": label, "next": nxt},
        )

    a = _version("alice", _node(1, "x", 2), _node(2, "y", 1))
    b = _version("bob", _node(1, "x", 2), _node(2, "z", 1))

    assert compare(a, a.get(1), a, a.get(1)).equal
    verdict = compare(a, a.get(1), b, b.get(1))
    assert not verdict.equal
    assert {1, 2} <= verdict.left
    assert collect_subtree(a, a.get(1)) == {1, 2}


def test_shared_nested_record_reported_for_each_parent():
    pair = AnnotationType(
        name="Pair",
        fields=(
            Field(name="first", kind=FieldKind.composite),
            Field(name="second", kind=FieldKind.composite),
        ),
    )
    holder = AnnotationType(
        name="Holder",
        fields=(
            Field(name="a", kind=FieldKind.composite),
            Field(name="b", kind=FieldKind.composite),
        ),
    )

    def _pair(address: int, target: int) -> AnnotationRecord:
        return AnnotationRecord(
            address=address,
            type=pair,
            begin=0,
            end=12,
            features={"first": target, "second": target},
        )

    def _holder(address: int, a: int, b: int) -> AnnotationRecord:
        return AnnotationRecord(
            address=address, type=holder, begin=0, end=12, features={"a": a, "b": b}
        )

    shared = [_pair(2, 1), _pair(3, 1), _holder(4, 2, 3)]
    left = _version("alice", _span(1, "PER"), *shared)
    right = _version("bob", _span(1, "LOC"), *shared)

    verdict = compare(left, left.get(4), right, right.get(4))

    assert verdict.left == {1, 2, 3, 4}
    assert verdict.right == {1, 2, 3, 4}
