"""Atomic single-value rules."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from .exceptions import PredicateError
from .models import Ailment, Severity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rule:
    """A predicate over one value plus the ailment to report when it fails.

    Rules are stateless and may be shared between threads and reused across any
    number of examinations. Two rules are equal when name, severity and params
    match; the predicate itself does not take part in comparison or hashing.
    Params are frozen on construction.
    """
    name: str
    test: Callable[[Any], bool] = field(compare=False, repr=False)
    severity: Severity = Severity.ERROR
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def __hash__(self) -> int:
        # Param values may be unhashable (one_of holds a list)
        return hash((self.name, self.severity))

    def evaluate(self, value: Any) -> Ailment | None:
        """Evaluate the rule against ``value``.

        Args:
            value: Value under test

        Returns:
            None when the predicate holds, otherwise the ailment describing the failure

        Raises:
            PredicateError: If the predicate itself raised
        """
        try:
            passed = self.test(value)
        except Exception as e:
            raise PredicateError(self.name, value) from e

        if passed:
            return None
        logger.debug(f"Rule {self.name} failed on {value!r}")
        return Ailment(
            name=self.name,
            severity=self.severity,
            params=dict(self.params),
            invalid_value=value,
        )

    def warn(self) -> "Rule":
        """Copy of this rule reporting WARN instead of ERROR."""
        return replace(self, severity=Severity.WARN)

    def named(self, name: str) -> "Rule":
        return replace(self, name=name)

    def with_params(self, **params: Any) -> "Rule":
        """Copy of this rule with extra ailment params."""
        return replace(self, params={**self.params, **params})
