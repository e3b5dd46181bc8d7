"""Display colours for agreement states, passed to renderers explicitly."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict
import yaml

from curation.data_models.state import AnnotationState

_DEFAULT_COLORS = {
    AnnotationState.ACCEPTED_BY_CURATOR: "#0000ff",
    AnnotationState.REJECTED_BY_CURATOR: "#8f8f8f",
    AnnotationState.ANNOTATORS_AGREE: "#00ff00",
    AnnotationState.ANNOTATORS_DISAGREE: "#ff0000",
    AnnotationState.ANNOTATORS_INCOMPLETE: "#ffd700",
    AnnotationState.ERROR: "#ff00ff",
}


class StateColoring(BaseModel):
    model_config = ConfigDict(frozen=True)

    colors: dict[AnnotationState, str] = dict(_DEFAULT_COLORS)

    def color(self, state: AnnotationState) -> str:
        return self.colors.get(state, _DEFAULT_COLORS[state])

    @classmethod
    def from_yaml(cls, path: Path) -> "StateColoring":
        """Load overrides such as `ANNOTATORS_AGREE: "#00aa00"`.

        States the file leaves out keep their default colour.
        """
        data = yaml.safe_load(path.read_text()) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping of state to colour in {path}")
        return cls(colors={**_DEFAULT_COLORS, **data})
