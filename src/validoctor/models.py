"""Report models: ailments and the diagnosis that aggregates them."""

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    FieldSerializationInfo,
    computed_field,
    field_serializer,
    field_validator,
)
from pydantic_core import to_jsonable_python


class Severity(str, Enum):
    """Severity of a single ailment."""
    WARN = "warn"
    ERROR = "error"


class Ailment(BaseModel):
    """One rule violation found on a patient.

    Params are held in a read-only mapping, so a returned diagnosis cannot be
    altered after the fact.
    """
    name: str
    severity: Severity = Severity.ERROR
    params: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)
    invalid_value: Any = Field(alias="invalidValue", default=None)
    field: str | None = None  # Dotted/indexed path, None when the rule ran on the patient itself

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("params")
    @classmethod
    def freeze_params(cls, v):
        return MappingProxyType(dict(v))

    @field_serializer("params")
    def serialize_params(self, params: Mapping[str, Any], info: FieldSerializationInfo):
        if info.mode_is_json():
            return to_jsonable_python(dict(params), fallback=repr)
        return dict(params)

    @field_serializer("invalid_value", when_used="json")
    def serialize_invalid_value(self, value: Any):
        # Patients may hold arbitrary objects; anything pydantic cannot encode is reported by repr
        return to_jsonable_python(value, fallback=repr)

    def at(self, field: str | None) -> "Ailment":
        """Copy of this ailment located at ``field``."""
        return self.model_copy(update={"field": field})

    def with_params(self, **params: Any) -> "Ailment":
        """Copy of this ailment with extra params merged in."""
        return self.model_copy(update={"params": MappingProxyType({**self.params, **params})})

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary, omitting an absent value or field."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def __str__(self) -> str:
        location = f" at {self.field}" if self.field else ""
        return f"[{self.severity.value.upper()}] {self.name}{location}"


class Diagnosis(BaseModel):
    """Outcome of one examination: every ailment found plus overall validity.

    A diagnosis is valid when none of its ailments has ERROR severity, so a
    diagnosis holding only warnings is still valid.
    """
    ailments: tuple[Ailment, ...] = ()

    model_config = ConfigDict(frozen=True)

    @computed_field
    @property
    def valid(self) -> bool:
        return not any(a.severity == Severity.ERROR for a in self.ailments)

    @classmethod
    def healthy(cls) -> "Diagnosis":
        """Diagnosis with no ailments."""
        return cls()

    @property
    def errors(self) -> list[Ailment]:
        return [a for a in self.ailments if a.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Ailment]:
        return [a for a in self.ailments if a.severity == Severity.WARN]

    def names(self) -> list[str]:
        """Ailment names in report order."""
        return [a.name for a in self.ailments]

    def ailments_for(self, field: str) -> list[Ailment]:
        """Ailments located at ``field`` or anywhere beneath it."""
        return [
            a for a in self.ailments
            if a.field is not None and (
                a.field == field or a.field.startswith(f"{field}.") or a.field.startswith(f"{field}[")
            )
        ]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "valid": self.valid,
            "ailments": [a.to_dict() for a in self.ailments],
        }

    def __bool__(self) -> bool:
        return self.valid
