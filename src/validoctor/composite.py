"""Composite checks: multi-rules over an object's fields, per-element checks and reducers.

A check is exactly one of four kinds, dispatched by the examiner:

    Rule         single value
    MultiRule    an object's fields, possibly nesting further MultiRules
    ForElements  a Rule or MultiRule applied to every element of a collection
    ReducerRule  several sibling fields folded into one derived value
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Union

from .exceptions import ConfigurationError, ReducerError
from .models import Ailment
from .resolvers import PropertyResolver, ReflectiveResolver
from .rules import Rule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForElements:
    """Applies a Rule or MultiRule to each element of a collection independently."""
    check: Union[Rule, "MultiRule"]

    def __post_init__(self):
        if not isinstance(self.check, (Rule, MultiRule)):
            raise ConfigurationError(
                f"each() accepts a Rule or MultiRule, got {type(self.check).__name__}"
            )

    @property
    def name(self) -> str:
        return f"each({self.check.name})"


@dataclass(frozen=True)
class ReducerRule:
    """Reduces several sibling field values to one value and tests it with a rule.

    Used for constraints spanning fields of the same object, such as "at most one
    of A, B, C is set". The reducer receives the source values in declared order.
    """
    name: str
    source_fields: tuple[str, ...]
    reduce: Callable[[list[Any]], Any] = field(compare=False, repr=False)
    rule: Rule
    resolver: PropertyResolver | None = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "source_fields", tuple(self.source_fields))
        if not self.source_fields:
            raise ConfigurationError(f"Reducer '{self.name}' needs at least one source field")
        if not isinstance(self.rule, Rule):
            raise ConfigurationError(f"Reducer '{self.name}' must wrap a Rule, got {type(self.rule).__name__}")
        if self.resolver is not None:
            for source in self.source_fields:
                self.resolver.check(source)

    def derive(self, patient: Any, resolver: PropertyResolver | None = None) -> Any:
        """Resolve every source field on ``patient`` and fold them into one value.

        Raises:
            UnresolvedFieldError: If a source field cannot be resolved
            ReducerError: If the reduce function rejects the values
        """
        resolver = self.resolver or resolver or ReflectiveResolver()
        values = [resolver.resolve(patient, source) for source in self.source_fields]
        try:
            return self.reduce(values)
        except Exception as e:
            raise ReducerError(self.name, f"{type(e).__name__}: {e}") from e

    def evaluate(self, patient: Any, resolver: PropertyResolver | None = None) -> Ailment | None:
        """Derive the value from ``patient`` and evaluate the wrapped rule on it."""
        derived = self.derive(patient, resolver)
        ailment = self.rule.evaluate(derived)
        if ailment is None:
            return None
        return ailment.with_params(fields=list(self.source_fields))


Check = Union[Rule, "MultiRule", ForElements, ReducerRule]


@dataclass(frozen=True)
class Binding:
    """One field of a MultiRule: the path, what checks it, and when it applies.

    ``field_path`` is None for reducer bindings, which read their own sources.
    """
    field_path: str | None
    check: Check
    when: Callable[[Any], bool] | None = field(default=None, compare=False)

    def applies_to(self, patient: Any) -> bool:
        return self.when is None or bool(self.when(patient))


@dataclass(frozen=True, eq=False, repr=False)
class MultiRule:
    """Named, ordered set of field bindings validating one object type.

    Built once and reused like a compiled schema. Field paths are checked against
    the resolver on construction, so a rule set that does not match its declared
    type fails here rather than during every examination. MultiRules compare by
    identity.
    """
    name: str
    bindings: tuple[Binding, ...]
    resolver: PropertyResolver = field(default_factory=ReflectiveResolver)

    def __post_init__(self):
        object.__setattr__(self, "bindings", self._normalize(self.bindings))
        logger.debug(f"Built multi-rule {self.name} with {len(self.bindings)} bindings")

    def _normalize(self, bindings: Iterable[Any]) -> tuple[Binding, ...]:
        normalized = []
        for binding in bindings:
            if isinstance(binding, ReducerRule):
                binding = Binding(None, binding)
            if not isinstance(binding, Binding):
                raise ConfigurationError(
                    f"MultiRule '{self.name}' expects bindings, got {type(binding).__name__}"
                )
            self._check_binding(binding)
            normalized.append(binding)
        return tuple(normalized)

    @classmethod
    def of(
        cls,
        name: str,
        *bindings: "Binding | ReducerRule",
        declared_type: type | None = None,
        resolver: PropertyResolver | None = None,
    ) -> "MultiRule":
        """Build a MultiRule from bindings.

        Args:
            name: Name used in logs and errors
            bindings: Field bindings (see ``bind``) or bare ReducerRules, in evaluation order
            declared_type: Type whose members the field paths are checked against
            resolver: Explicit resolver; defaults to a ReflectiveResolver over declared_type
        """
        if resolver is None:
            resolver = ReflectiveResolver(declared_type)
        return cls(name, tuple(bindings), resolver)

    @classmethod
    def recursive(
        cls,
        name: str,
        build: Callable[["MultiRule"], Iterable["Binding | ReducerRule"]],
        declared_type: type | None = None,
        resolver: PropertyResolver | None = None,
    ) -> "MultiRule":
        """Build a MultiRule whose bindings may refer to the rule itself.

        For recursive data such as trees: ``build`` receives the rule under
        construction and returns its bindings. A patient graph that loops back on
        itself is reported as a CyclicRuleError during examination.
        """
        rule = cls.of(name, declared_type=declared_type, resolver=resolver)
        object.__setattr__(rule, "bindings", rule._normalize(build(rule)))
        return rule

    def __repr__(self) -> str:
        return f"MultiRule({self.name!r}, {len(self.bindings)} bindings, {self.resolver!r})"

    @property
    def field_paths(self) -> list[str]:
        return [b.field_path for b in self.bindings if b.field_path is not None]

    def _check_binding(self, binding: Binding) -> None:
        if not isinstance(binding.check, CHECK_TYPES):
            raise ConfigurationError(
                f"MultiRule '{self.name}' cannot bind {type(binding.check).__name__}"
            )
        if isinstance(binding.check, ReducerRule):
            if binding.check.resolver is None:
                for source in binding.check.source_fields:
                    self.resolver.check(source)
            return
        if not binding.field_path:
            raise ConfigurationError(f"MultiRule '{self.name}' has a binding without a field path")
        self.resolver.check(binding.field_path)


CHECK_TYPES = (Rule, MultiRule, ForElements, ReducerRule)


def bind(field_path: str, check: Check, when: Callable[[Any], bool] | None = None) -> Binding:
    """Bind ``check`` to ``field_path``, optionally only when ``when(patient)`` holds."""
    return Binding(field_path, check, when)


def combine(check: ReducerRule, when: Callable[[Any], bool] | None = None) -> Binding:
    """Bind a reducer, optionally only when ``when(patient)`` holds."""
    return Binding(None, check, when)


def each(check: Rule | MultiRule) -> ForElements:
    """Apply ``check`` to every element of a collection."""
    return ForElements(check)


def reducer(
    name: str,
    source_fields: Iterable[str],
    reduce: Callable[[list[Any]], Any],
    rule: Rule,
    resolver: PropertyResolver | None = None,
) -> ReducerRule:
    return ReducerRule(name, tuple(source_fields), reduce, rule, resolver)
