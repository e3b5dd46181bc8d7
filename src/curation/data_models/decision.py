from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from curation.data_models.selection import AnnotationOption, AnnotationSelection


class CuratorDecision(BaseModel):
    """What the curator picked at one position.

    `chosen` is the annotator -> address map of the accepted reading;
    None means every reading offered there was rejected.
    """

    model_config = ConfigDict(frozen=True)

    type_name: str
    begin: int
    end: int
    chosen: dict[str, int] | None = None

    @property
    def key(self) -> tuple[str, int, int]:
        return (self.type_name, self.begin, self.end)

    def applies_to(self, option: AnnotationOption) -> bool:
        return self.key == (option.type_name, option.begin, option.end)

    def accepts(self, selection: AnnotationSelection) -> bool:
        return self.chosen is not None and self.chosen == selection.addresses


DecisionIndex = dict[tuple[str, int, int], CuratorDecision]


def index_decisions(decisions: Iterable[CuratorDecision]) -> DecisionIndex:
    """Key decisions by (type, begin, end); a later decision replaces an earlier one."""
    return {d.key: d for d in decisions}
