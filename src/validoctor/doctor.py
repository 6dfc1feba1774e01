"""The Validoctor façade: configured traits plus examine entry points."""

import logging
from collections.abc import Iterable
from typing import Any

from .config import ValidoctorConfig
from .examiner import DEFAULT_MAX_DEPTH, Examiner
from .exceptions import DiagnosisError
from .models import Diagnosis

logger = logging.getLogger(__name__)


class Validoctor:
    """Examines patients against rules under fixed execution traits.

    Traits are set once at construction:

    * ``pedantic`` (default True): collect every ailment instead of stopping at the first.
    * ``exceptional`` (default False): raise DiagnosisError for an invalid diagnosis
      instead of returning it.

    No state is kept between calls, so one instance may serve many threads.
    """

    __slots__ = ("_pedantic", "_exceptional", "_max_depth")

    def __init__(self, pedantic: bool = True, exceptional: bool = False, max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 1:
            raise ValueError("max_depth must be >= 1")
        self._pedantic = pedantic
        self._exceptional = exceptional
        self._max_depth = max_depth

    @staticmethod
    def builder() -> "ValidoctorBuilder":
        return ValidoctorBuilder()

    @classmethod
    def from_config(cls, config: ValidoctorConfig) -> "Validoctor":
        """Create a Validoctor from loaded configuration."""
        return cls(
            pedantic=config.traits.pedantic,
            exceptional=config.traits.exceptional,
            max_depth=config.traversal.max_depth,
        )

    @property
    def pedantic(self) -> bool:
        return self._pedantic

    @property
    def exceptional(self) -> bool:
        return self._exceptional

    @property
    def max_depth(self) -> int:
        return self._max_depth

    def examine(self, patient: Any, *checks: Any) -> Diagnosis:
        """Examine ``patient`` with one or more checks.

        Args:
            patient: Object to validate
            checks: Any mix of Rule, MultiRule, ForElements and ReducerRule

        Returns:
            Diagnosis of the patient

        Raises:
            DiagnosisError: If exceptional and the diagnosis is invalid
            ConfigurationError: If the checks do not fit the patient
        """
        diagnosis = Examiner(self._pedantic, self._max_depth).examine(patient, checks)
        return self._conclude(diagnosis)

    def examine_combo(self, patient: Any, *checks: Any) -> Diagnosis:
        """Examine ``patient`` with checks of mixed kinds, evaluated in the given order."""
        return self.examine(patient, *checks)

    def examine_batch(self, patients: Iterable[Any], *checks: Any) -> list[Diagnosis]:
        """Examine each patient independently with the same checks.

        When exceptional, raises at the first invalid patient.
        """
        diagnoses = [self.examine(patient, *checks) for patient in patients]
        logger.info(f"Examined batch of {len(diagnoses)}: {sum(not d.valid for d in diagnoses)} invalid")
        return diagnoses

    def _conclude(self, diagnosis: Diagnosis) -> Diagnosis:
        if self._exceptional and not diagnosis.valid:
            raise DiagnosisError(diagnosis)
        return diagnosis

    def __repr__(self) -> str:
        return f"Validoctor(pedantic={self._pedantic}, exceptional={self._exceptional})"


class ValidoctorBuilder:
    """Fluent builder; unset traits default to pedantic, non-exceptional."""

    def __init__(self):
        self._pedantic = True
        self._exceptional = False
        self._max_depth = DEFAULT_MAX_DEPTH

    def pedantic(self, value: bool = True) -> "ValidoctorBuilder":
        self._pedantic = value
        return self

    def exceptional(self, value: bool = True) -> "ValidoctorBuilder":
        self._exceptional = value
        return self

    def max_depth(self, value: int) -> "ValidoctorBuilder":
        self._max_depth = value
        return self

    def build(self) -> Validoctor:
        return Validoctor(self._pedantic, self._exceptional, self._max_depth)
