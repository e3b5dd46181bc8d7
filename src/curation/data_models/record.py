from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


class FieldKind(str, Enum):
    integer = "integer"
    string = "string"
    composite = "composite"
    # declared by some schemas but not comparable
    long = "long"
    float = "float"
    double = "double"
    boolean = "boolean"
    byte = "byte"

    @property
    def is_primitive(self) -> bool:
        return self is not FieldKind.composite


class Field(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    kind: FieldKind
    target: str | None = None  # type name a composite field points at, if known


class AnnotationType(BaseModel):
    """A named record schema: ordered fields, primitive or composite."""

    model_config = ConfigDict(frozen=True)

    name: str
    fields: tuple[Field, ...] = ()

    @model_validator(mode="after")
    def _unique_field_names(self) -> "AnnotationType":
        names = [f.name for f in self.fields]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate field name in type {self.name!r}")
        return self

    def field(self, name: str) -> Field:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(f"Type {self.name!r} has no field {name!r}")

    def composite_fields(self) -> list[Field]:
        return [f for f in self.fields if f.kind is FieldKind.composite]


FeatureValue = int | str | float | bool | None


class AnnotationRecord(BaseModel):
    """One typed, positioned annotation.

    Composite feature values hold the address of another record in the same
    AnnotatorVersion (or None), never the record itself.
    """

    model_config = ConfigDict(frozen=True)

    address: int
    type: AnnotationType
    begin: int
    end: int
    features: dict[str, FeatureValue] = {}

    @model_validator(mode="after")
    def _check(self) -> "AnnotationRecord":
        if self.begin < 0 or self.end < self.begin:
            raise ValueError(
                f"Invalid span ({self.begin}, {self.end}) on record {self.address}"
            )
        declared = {f.name for f in self.type.fields}
        unknown = set(self.features) - declared
        if unknown:
            raise ValueError(
                f"Record {self.address} sets undeclared fields {sorted(unknown)} "
                f"of type {self.type.name!r}"
            )
        for f in self.type.fields:
            value = self.features.get(f.name)
            if value is None:
                continue
            if f.kind is FieldKind.integer and (
                isinstance(value, bool) or not isinstance(value, int)
            ):
                raise ValueError(
                    f"Integer field {f.name!r} of record {self.address} "
                    f"holds {value!r}"
                )
            if f.kind is FieldKind.string and not isinstance(value, str):
                raise ValueError(
                    f"String field {f.name!r} of record {self.address} "
                    f"holds {value!r}"
                )
        return self

    @property
    def span(self) -> tuple[int, int]:
        return (self.begin, self.end)

    def value(self, name: str) -> FeatureValue:
        """Return the feature value, None when the field was left unset."""
        self.type.field(name)
        return self.features.get(name)


class AnnotatorVersion(BaseModel):
    """One annotator's complete, read-only snapshot of a document."""

    model_config = ConfigDict(frozen=True)

    annotator: str
    text: str = ""
    records: dict[int, AnnotationRecord] = {}

    @model_validator(mode="after")
    def _check(self) -> "AnnotatorVersion":
        for address, record in self.records.items():
            if address != record.address:
                raise ValueError(
                    f"Record stored under {address} reports address {record.address}"
                )
            if record.end > len(self.text):
                raise ValueError(
                    f"Record {address} ends at {record.end}, past the end of "
                    f"{self.annotator!r}'s text ({len(self.text)})"
                )
            for f in record.type.composite_fields():
                target = record.features.get(f.name)
                if target is None:
                    continue
                if isinstance(target, bool) or not isinstance(target, int):
                    raise ValueError(
                        f"Composite field {f.name!r} of record {address} must hold "
                        f"an address, got {target!r}"
                    )
                if target not in self.records:
                    raise ValueError(
                        f"Record {address} field {f.name!r} points at unknown "
                        f"address {target}"
                    )
        return self

    def get(self, address: int) -> AnnotationRecord:
        return self.records[address]

    def deref(self, record: AnnotationRecord, name: str) -> AnnotationRecord | None:
        """Follow a composite field to the nested record, if any."""
        if record.type.field(name).kind is not FieldKind.composite:
            raise ValueError(f"Field {name!r} of {record.type.name!r} is not composite")
        target = record.features.get(name)
        if target is None:
            return None
        return self.records[target]  # type: ignore[index]

    def select(self, type_name: str) -> list[AnnotationRecord]:
        """All records of the type, ordered by span then address."""
        found = [r for r in self.records.values() if r.type.name == type_name]
        return sorted(found, key=lambda r: (r.begin, r.end, r.address))

    def select_covered(
        self, type_name: str, begin: int, end: int
    ) -> list[AnnotationRecord]:
        """Records of the type whose own span lies inside [begin, end]."""
        return [r for r in self.select(type_name) if r.begin >= begin and r.end <= end]
