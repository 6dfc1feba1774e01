"""Error types raised by validoctor.

Two disjoint families: configuration errors (the rules do not match the shape of
the patient, always fatal) and the exceptional-mode DiagnosisError, which wraps an
invalid diagnosis.
"""

from typing import Any


class ValidoctorError(Exception):
    """Base class for all validoctor errors."""


class ConfigurationError(ValidoctorError):
    """Rule definitions do not match the object model being examined."""


class UnresolvedFieldError(ConfigurationError):
    """A field path could not be resolved on the patient or its declared type."""

    def __init__(self, field_path: str, target: Any = None, detail: str | None = None):
        self.field_path = field_path
        self.target = target
        self.detail = detail
        target_name = target.__name__ if isinstance(target, type) else type(target).__name__
        message = f"Cannot resolve field '{field_path}' on {target_name}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class ReducerError(ConfigurationError):
    """A reducer could not fold its source values into a derived value."""

    def __init__(self, rule_name: str, detail: str):
        self.rule_name = rule_name
        self.detail = detail
        super().__init__(f"Reducer '{rule_name}' failed: {detail}")


class PredicateError(ConfigurationError):
    """A rule predicate raised instead of answering true or false."""

    def __init__(self, rule_name: str, value: Any):
        self.rule_name = rule_name
        self.value = value
        super().__init__(f"Predicate of rule '{rule_name}' raised on value {value!r}")


class CyclicRuleError(ConfigurationError):
    """A multi-rule re-entered an object it is already examining."""

    def __init__(self, rule_name: str, detail: str):
        self.rule_name = rule_name
        self.detail = detail
        super().__init__(f"Cyclic examination in '{rule_name}': {detail}")


class DiagnosisError(ValidoctorError):
    """Raised by an exceptional Validoctor when the diagnosis is invalid."""

    def __init__(self, diagnosis):
        self.diagnosis = diagnosis
        names = ", ".join(diagnosis.names())
        super().__init__(f"Patient is invalid: {len(diagnosis.ailments)} ailment(s) [{names}]")

    def to_dict(self) -> dict:
        """Error body for API responses, identical to the diagnosis payload."""
        return self.diagnosis.to_dict()
