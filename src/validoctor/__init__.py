"""validoctor - rule-driven validation of nested data objects.

Checks are composed from single-value Rules, per-field MultiRules, per-element
checks and ReducerRules, then run by a Validoctor that reports a Diagnosis of
ailments instead of failing on the first problem.
"""

__version__ = "0.1.0"
__description__ = "Rule-driven validation of nested data objects"

from validoctor.composite import Binding, ForElements, MultiRule, ReducerRule, bind, combine, each, reducer
from validoctor.config import ValidoctorConfig, load_config
from validoctor.doctor import Validoctor, ValidoctorBuilder
from validoctor.examiner import Examiner, ExaminerState
from validoctor.exceptions import (
    ConfigurationError,
    CyclicRuleError,
    DiagnosisError,
    PredicateError,
    ReducerError,
    UnresolvedFieldError,
    ValidoctorError,
)
from validoctor.models import Ailment, Diagnosis, Severity
from validoctor.resolvers import AccessorResolver, PropertyResolver, ReflectiveResolver
from validoctor.rules import Rule

__all__ = [
    "__version__",
    "__description__",
    "AccessorResolver",
    "Ailment",
    "Binding",
    "ConfigurationError",
    "CyclicRuleError",
    "Diagnosis",
    "DiagnosisError",
    "Examiner",
    "ExaminerState",
    "ForElements",
    "MultiRule",
    "PredicateError",
    "PropertyResolver",
    "ReducerError",
    "ReducerRule",
    "ReflectiveResolver",
    "Rule",
    "Severity",
    "UnresolvedFieldError",
    "Validoctor",
    "ValidoctorBuilder",
    "ValidoctorConfig",
    "ValidoctorError",
    "bind",
    "combine",
    "each",
    "load_config",
    "reducer",
]
