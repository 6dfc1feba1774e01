"""Traversal and aggregation engine.

One Examiner runs one examination: it walks every check against the patient,
pulls field values through resolvers, recurses into nested multi-rules and
collections, and collects ailments into a Diagnosis.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from enum import Enum
from typing import Any

from .composite import Binding, ForElements, MultiRule, ReducerRule
from .exceptions import ConfigurationError, CyclicRuleError, PredicateError
from .models import Ailment, Diagnosis
from .resolvers import PropertyResolver, ReflectiveResolver
from .rules import Rule

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64


class ExaminerState(str, Enum):
    """Lifecycle of a single examination."""
    RUNNING = "running"
    DONE = "done"
    FAILED_FATAL = "failed_fatal"


def join_path(prefix: str | None, name: str) -> str:
    if not prefix:
        return name
    if name.startswith("["):
        return f"{prefix}{name}"
    return f"{prefix}.{name}"


class Examiner:
    """Runs checks against one patient and aggregates the ailments found.

    Non-pedantic examiners stop at the first ailment anywhere in the rule forest.
    Pedantic examiners visit every applicable binding. Configuration errors abort
    the examination regardless of traits and no diagnosis is produced.

    An Examiner is single-use; the accumulator is never shared between calls.
    """

    def __init__(self, pedantic: bool = True, max_depth: int = DEFAULT_MAX_DEPTH):
        self.pedantic = pedantic
        self.max_depth = max_depth
        self.state = ExaminerState.RUNNING
        self._ailments: list[Ailment] = []
        self._halted = False
        self._active: list[tuple[int, int]] = []  # (multi-rule, patient) ids on the current path

    def examine(self, patient: Any, checks: Sequence[Any]) -> Diagnosis:
        """Run ``checks`` in order against ``patient``.

        Args:
            patient: Object under examination
            checks: Rules, MultiRules, ForElements or ReducerRules, in evaluation order

        Returns:
            Diagnosis with every ailment found (at most one unless pedantic)

        Raises:
            ConfigurationError: If the checks do not match the patient's shape
        """
        if self.state != ExaminerState.RUNNING:
            raise RuntimeError("Examiner instances examine exactly one patient")
        if not checks:
            raise ConfigurationError("At least one check is required")

        logger.debug(f"Examining {type(patient).__name__} with {len(checks)} check(s), pedantic={self.pedantic}")
        try:
            for check in checks:
                self._visit(check, patient, None, ReflectiveResolver())
                if self._halted:
                    break
        except ConfigurationError as e:
            self.state = ExaminerState.FAILED_FATAL
            logger.error(f"Examination aborted: {e}")
            raise

        self.state = ExaminerState.DONE
        diagnosis = Diagnosis(ailments=tuple(self._ailments))
        logger.debug(f"Examination done: valid={diagnosis.valid}, {len(diagnosis.ailments)} ailment(s)")
        return diagnosis

    def _record(self, ailment: Ailment | None) -> None:
        if ailment is None:
            return
        self._ailments.append(ailment)
        if not self.pedantic:
            self._halted = True

    def _visit(self, check: Any, value: Any, path: str | None, resolver: PropertyResolver) -> None:
        """Apply a top-level check directly to ``value``."""
        if isinstance(check, Rule):
            self._record(self._locate(check.evaluate(value), path))
        elif isinstance(check, MultiRule):
            if value is not None:
                self._examine_multi(check, value, path)
        elif isinstance(check, ForElements):
            self._examine_elements(check, value, path)
        elif isinstance(check, ReducerRule):
            self._examine_reducer(check, value, path, resolver)
        else:
            raise ConfigurationError(f"Not a check: {type(check).__name__}")

    def _examine_multi(self, multi: MultiRule, patient: Any, path: str | None) -> None:
        key = (id(multi), id(patient))
        if key in self._active:
            raise CyclicRuleError(multi.name, f"object at '{path or '<patient>'}' is already under examination")
        if len(self._active) >= self.max_depth:
            raise CyclicRuleError(multi.name, f"nesting deeper than {self.max_depth} levels")

        self._active.append(key)
        try:
            for binding in multi.bindings:
                if self._halted:
                    return
                if not self._applies(multi, binding, patient):
                    logger.debug(f"{multi.name}: skipping {binding.field_path or binding.check.name}")
                    continue
                self._examine_binding(multi, binding, patient, path)
        finally:
            self._active.pop()

    def _examine_binding(self, multi: MultiRule, binding: Binding, patient: Any, path: str | None) -> None:
        check = binding.check
        if isinstance(check, ReducerRule):
            self._examine_reducer(check, patient, path, multi.resolver)
            return

        field_path = join_path(path, binding.field_path)
        value = multi.resolver.resolve(patient, binding.field_path)
        logger.debug(f"{multi.name}: checking {field_path}")
        if isinstance(check, Rule):
            self._record(self._locate(check.evaluate(value), field_path))
        elif isinstance(check, MultiRule):
            # A nested multi-rule does not itself demand a value; nullity is a separate rule
            if value is not None:
                self._examine_multi(check, value, field_path)
        else:
            self._examine_elements(check, value, field_path)

    def _examine_elements(self, each: ForElements, collection: Any, path: str | None) -> None:
        if collection is None:
            return
        if isinstance(collection, (str, bytes, Mapping)) or not isinstance(collection, Iterable):
            raise ConfigurationError(
                f"'{path or '<patient>'}' is not a collection: {type(collection).__name__}"
            )

        for index, element in enumerate(collection):
            if self._halted:
                return
            element_path = join_path(path, f"[{index}]")
            if isinstance(each.check, Rule):
                ailment = each.check.evaluate(element)
                if ailment is not None:
                    ailment = ailment.with_params(index=index).at(element_path)
                self._record(ailment)
            elif element is not None:
                self._examine_multi(each.check, element, element_path)

    def _examine_reducer(self, check: ReducerRule, patient: Any, path: str | None,
                         resolver: PropertyResolver) -> None:
        ailment = check.evaluate(patient, resolver)
        location = ",".join(join_path(path, source) for source in check.source_fields)
        self._record(self._locate(ailment, location))

    @staticmethod
    def _applies(multi: MultiRule, binding: Binding, patient: Any) -> bool:
        try:
            return binding.applies_to(patient)
        except Exception as e:
            raise PredicateError(f"{multi.name}.{binding.field_path or binding.check.name}:when", patient) from e

    @staticmethod
    def _locate(ailment: Ailment | None, path: str | None) -> Ailment | None:
        if ailment is None or path is None:
            return ailment
        return ailment.at(path)
