"""Curation options: the alternatives a curator picks between at one position."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(eq=False)
class AnnotationSelection:
    """One reading: the annotators who hold it and the address of each one's record.

    Equality and hashing look only at the annotator -> address map.
    """

    addresses: dict[str, int] = field(default_factory=dict)
    option: AnnotationOption | None = field(default=None, repr=False)

    @property
    def annotators(self) -> frozenset[str]:
        return frozenset(self.addresses)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnnotationSelection):
            return NotImplemented
        return self.addresses == other.addresses

    def __hash__(self) -> int:
        return hash(frozenset(self.addresses.items()))


@dataclass
class AnnotationOption:
    type_name: str
    begin: int
    end: int
    selections: list[AnnotationSelection] = field(default_factory=list)

    @property
    def span(self) -> tuple[int, int]:
        return (self.begin, self.end)

    @property
    def annotators(self) -> frozenset[str]:
        """Every annotator holding some reading at this position."""
        return frozenset(a for s in self.selections for a in s.addresses)

    def add(self, selection: AnnotationSelection) -> AnnotationSelection:
        """Attach a selection; an equal one already present is returned instead."""
        for existing in self.selections:
            if existing == selection:
                return existing
        selection.option = self
        self.selections.append(selection)
        return selection

    def addresses(self) -> set[tuple[str, int]]:
        return {(a, addr) for s in self.selections for a, addr in s.addresses.items()}


def agreeing_groups(option: AnnotationOption) -> list[frozenset[str]]:
    """The annotator subsets that share a reading at this option's position."""
    return [s.annotators for s in option.selections]
