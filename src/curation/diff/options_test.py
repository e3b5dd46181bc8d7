from curation.data_models.record import (
    AnnotationRecord,
    AnnotationType,
    AnnotatorVersion,
    Field,
    FieldKind,
)
from curation.data_models.selection import (
    AnnotationOption,
    AnnotationSelection,
    agreeing_groups,
)
from curation.diff.compare import compare
from curation.diff.options import build_options

TEXT = "The European Central Bank raised rates on Thursday."

SPAN = AnnotationType(name="Span", fields=(Field(name="label", kind=FieldKind.string),))


def _span(address: int, begin: int, end: int, label: str) -> AnnotationRecord:
    return AnnotationRecord(
        address=address, type=SPAN, begin=begin, end=end, features={"label": label}
    )


def _version(annotator: str, *records: AnnotationRecord) -> AnnotatorVersion:
    return AnnotatorVersion(
        annotator=annotator, text=TEXT, records={r.address: r for r in records}
    )


def test_two_of_three_agree_gives_one_selection():
    versions = {
        "alice": _version("alice", _span(1, 10, 20, "ORG")),
        "bob": _version("bob", _span(8, 10, 20, "ORG")),
        "carol": _version("carol"),
    }

    options = build_options([SPAN], versions)

    assert len(options) == 1
    option = options[0]
    assert option.span == (10, 20)
    assert option.type_name == "Span"
    assert option.selections == [AnnotationSelection(addresses={"alice": 1, "bob": 8})]
    assert option.selections[0].option is option


def test_disagreement_gives_one_selection_per_reading():
    versions = {
        "alice": _version("alice", _span(1, 4, 25, "ORG")),
        "bob": _version("bob", _span(2, 4, 25, "ORG")),
        "carol": _version("carol", _span(3, 4, 25, "LOC")),
    }

    (option,) = build_options([SPAN], versions)

    assert agreeing_groups(option) == [
        frozenset({"alice", "bob"}),
        frozenset({"carol"}),
    ]
    assert all(s.option is option for s in option.selections)


def test_full_agreement_single_selection_with_everyone():
    versions = {
        a: _version(a, _span(1, 42, 50, "DATE")) for a in ["alice", "bob", "carol"]
    }

    (option,) = build_options([SPAN], versions)

    assert option.annotators == {"alice", "bob", "carol"}
    assert len(option.selections) == 1


def test_same_annotator_duplicates_split_into_separate_selections():
    versions = {
        "alice": _version("alice", _span(1, 4, 25, "ORG"), _span(2, 4, 25, "ORG")),
        "bob": _version("bob", _span(5, 4, 25, "ORG")),
    }

    (option,) = build_options([SPAN], versions)

    assert [s.addresses for s in option.selections] == [
        {"alice": 1, "bob": 5},
        {"alice": 2},
    ]


def test_options_follow_type_then_span_order():
    other = AnnotationType(name="Other", fields=())
    versions = {
        "alice": _version(
            "alice",
            _span(1, 42, 50, "DATE"),
            _span(2, 4, 25, "ORG"),
            AnnotationRecord(address=3, type=other, begin=0, end=3),
        ),
    }

    options = build_options([other, SPAN], versions)

    assert [(o.type_name, o.span) for o in options] == [
        ("Other", (0, 3)),
        ("Span", (4, 25)),
        ("Span", (42, 50)),
    ]


def test_window_limits_options():
    versions = {"alice": _version("alice", _span(1, 42, 50, "DATE"))}

    assert build_options([SPAN], versions, begin=0, end=30) == []
    assert build_options([SPAN], {}) == []


def test_groups_reproduce_comparator_equality():
    versions = {
        "alice": _version("alice", _span(1, 4, 25, "ORG")),
        "bob": _version("bob", _span(2, 4, 25, "LOC")),
        "carol": _version("carol", _span(3, 4, 25, "ORG")),
        "dave": _version("dave", _span(4, 4, 25, "LOC")),
    }

    (option,) = build_options([SPAN], versions)

    seen: set[str] = set()
    for selection in option.selections:
        members = sorted(selection.addresses.items())
        assert not seen & selection.annotators
        seen |= selection.annotators
        for a, addr_a in members:
            for b, addr_b in members:
                va, vb = versions[a], versions[b]
                assert compare(va, va.get(addr_a), vb, vb.get(addr_b)).equal
    assert seen == set(versions)


def test_equal_selection_added_once():
    option = AnnotationOption(type_name="Span", begin=0, end=3)
    first = option.add(AnnotationSelection(addresses={"alice": 1, "bob": 2}))
    again = option.add(AnnotationSelection(addresses={"bob": 2, "alice": 1}))

    assert again is first
    assert len(option.selections) == 1
    assert hash(first) == hash(AnnotationSelection(addresses={"bob": 2, "alice": 1}))
    assert first != AnnotationSelection(addresses={"alice": 1})
