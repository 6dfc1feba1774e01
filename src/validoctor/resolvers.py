"""Property resolution strategies: turning (object, field path) into a value."""

import dataclasses
import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

from .exceptions import UnresolvedFieldError


class PropertyResolver(ABC):
    """Strategy that reads a named field off a patient object."""

    @abstractmethod
    def resolve(self, obj: Any, field_path: str) -> Any:
        """Return the current value of ``field_path`` on ``obj``.

        Raises:
            UnresolvedFieldError: If the field does not exist or cannot be read
        """

    def check(self, field_path: str) -> None:
        """Fail fast if ``field_path`` can never resolve. No-op by default."""


class ReflectiveResolver(PropertyResolver):
    """Resolves fields by introspection, with no per-field registration.

    Dotted paths (``"address.city"``) are resolved one segment at a time. Mappings
    are read by key, everything else by attribute. A ``None`` met halfway along a
    dotted path resolves the whole path to ``None``.

    When ``declared_type`` is given, the first segment of every path is checked
    against the type's declared members at rule construction time.
    """

    def __init__(self, declared_type: type | None = None):
        self.declared_type = declared_type

    def resolve(self, obj: Any, field_path: str) -> Any:
        value = obj
        for segment in field_path.split("."):
            if value is None:
                return None
            value = self._read(value, segment, field_path)
        return value

    def check(self, field_path: str) -> None:
        if self.declared_type is None or issubclass(self.declared_type, Mapping):
            return
        head = field_path.split(".")[0]
        if head not in declared_members(self.declared_type):
            raise UnresolvedFieldError(field_path, self.declared_type, "not a declared member")

    @staticmethod
    def _read(obj: Any, name: str, field_path: str) -> Any:
        if isinstance(obj, Mapping):
            if name not in obj:
                raise UnresolvedFieldError(field_path, obj, f"missing key '{name}'")
            return obj[name]
        try:
            return getattr(obj, name)
        except AttributeError as e:
            raise UnresolvedFieldError(field_path, obj, f"no attribute '{name}'") from e
        except Exception as e:
            raise UnresolvedFieldError(field_path, obj, f"reading '{name}' raised {type(e).__name__}") from e

    def __repr__(self) -> str:
        target = self.declared_type.__name__ if self.declared_type else "any"
        return f"ReflectiveResolver({target})"


class AccessorResolver(PropertyResolver):
    """Resolves fields through explicitly registered getter functions."""

    def __init__(self, accessors: Mapping[str, Callable[[Any], Any]], declared_type: type | None = None):
        self.accessors = dict(accessors)
        self.declared_type = declared_type

    def resolve(self, obj: Any, field_path: str) -> Any:
        getter = self.accessors.get(field_path)
        if getter is None:
            raise UnresolvedFieldError(field_path, obj, "no accessor registered")
        try:
            return getter(obj)
        except Exception as e:
            raise UnresolvedFieldError(field_path, obj, f"accessor raised {type(e).__name__}: {e}") from e

    def check(self, field_path: str) -> None:
        if field_path not in self.accessors:
            raise UnresolvedFieldError(field_path, self.declared_type or self, "no accessor registered")

    def __repr__(self) -> str:
        return f"AccessorResolver({sorted(self.accessors)})"


def declared_members(declared_type: type) -> set[str]:
    """Names a type declares.

    Covers dataclass and pydantic fields, annotations, slots, class attributes and
    the parameters of the constructor, which plain classes usually assign to
    attributes of the same name.
    """
    members: set[str] = set()

    if dataclasses.is_dataclass(declared_type):
        members.update(f.name for f in dataclasses.fields(declared_type))

    model_fields = getattr(declared_type, "model_fields", None)
    if isinstance(model_fields, Mapping):
        members.update(model_fields)

    for klass in getattr(declared_type, "__mro__", (declared_type,)):
        members.update(getattr(klass, "__annotations__", {}))
        slots = getattr(klass, "__slots__", ())
        members.update([slots] if isinstance(slots, str) else slots)

    members.update(name for name in dir(declared_type) if not name.startswith("__"))

    # Pydantic signatures may name aliases, which are not attributes
    if model_fields is None and not dataclasses.is_dataclass(declared_type):
        members.update(constructor_parameters(declared_type))
    return members


def constructor_parameters(declared_type: type) -> list[str]:
    try:
        parameters = inspect.signature(declared_type).parameters.values()
    except (TypeError, ValueError):  # builtins and C types without a signature
        return []
    return [p.name for p in parameters if p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)]
