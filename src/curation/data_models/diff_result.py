from pydantic import BaseModel, ConfigDict


class DiffResult(BaseModel):
    """Per-annotator addresses of records that differ from at least one other version.

    `covered` holds every root record the computation looked at, so a renderer
    can tell a record that agrees from one that was never diffed.
    """

    model_config = ConfigDict(frozen=True)

    differing: dict[str, frozenset[int]] = {}
    covered: dict[str, frozenset[int]] = {}

    @property
    def annotators(self) -> list[str]:
        return sorted(set(self.differing) | set(self.covered))

    def for_annotator(self, annotator: str) -> frozenset[int]:
        return self.differing.get(annotator, frozenset())

    def is_differing(self, annotator: str, address: int) -> bool:
        return address in self.for_annotator(annotator)

    def was_covered(self, annotator: str, address: int) -> bool:
        return address in self.covered.get(annotator, frozenset())

    def is_empty(self) -> bool:
        return not any(self.differing.values())
