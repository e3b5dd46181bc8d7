from enum import Enum


class AnnotationState(str, Enum):
    """Presentation state of one reading at one position."""

    ACCEPTED_BY_CURATOR = "ACCEPTED_BY_CURATOR"
    REJECTED_BY_CURATOR = "REJECTED_BY_CURATOR"
    ANNOTATORS_AGREE = "ANNOTATORS_AGREE"
    ANNOTATORS_DISAGREE = "ANNOTATORS_DISAGREE"
    ANNOTATORS_INCOMPLETE = "ANNOTATORS_INCOMPLETE"
    ERROR = "ERROR"  # rendered record the diff never saw


class SegmentState(str, Enum):
    AGREE = "AGREE"
    DISAGREE = "DISAGREE"
    RESOLVED = "RESOLVED"  # disagreed, but the curator has decided every dispute
