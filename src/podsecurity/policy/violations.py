"""
Violation accumulation and structured field errors.

Checks collect the subjects they blame (the pod, container names, volume
names, ...) in a Violations accumulator. Each subject may come with
deferred error constructors (ErrFn); they are only invoked when the
accumulator was created with field errors enabled.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from typing import Any, Callable, Generic, Iterable, Iterator, Optional, TypeVar

from podsecurity.policy.paths import PathFn

T = TypeVar("T")


class ErrorType(Enum):
    """Kind of structured field error."""

    FORBIDDEN = "FieldValueForbidden"  # A present value is disallowed
    REQUIRED = "FieldValueRequired"  # An expected value is absent

    @property
    def label(self) -> str:
        """Short human label used when rendering the error."""
        return "Forbidden" if self is ErrorType.FORBIDDEN else "Required value"


@dataclass(frozen=True)
class FieldError:
    """
    A machine-readable error at a location in the pod.

    Attributes:
        type: Forbidden or Required
        field: Rendered field path, e.g. spec.containers[0].securityContext
        bad_value: Offending value(s), always rendered as strings
    """

    type: ErrorType
    field: str
    bad_value: list[str] = dataclass_field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": self.type.value,
            "field": self.field,
            "bad_value": list(self.bad_value),
        }

    def __str__(self) -> str:
        if self.type is ErrorType.REQUIRED:
            return f"{self.field}: {self.type.label}"
        values = ", ".join(f'"{v}"' for v in self.bad_value)
        return f"{self.field}: {self.type.label}: [{values}]"


ErrFn = Callable[[], Optional[FieldError]]


def _as_strings(value: Any) -> list[str]:
    """Normalize a bad value to a list of strings."""
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        items = sorted(value) if isinstance(value, (set, frozenset)) else value
        return [_render(v) for v in items]
    return [_render(value)]


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def forbidden(path_fn: PathFn | None, bad_value: Any = None) -> ErrFn | None:
    """
    Deferred Forbidden error at path_fn.

    Args:
        path_fn: Location of the offending value
        bad_value: Offending value(s)

    Returns:
        ErrFn, or None if the location is disabled
    """
    if not path_fn:
        return None

    def err_fn() -> FieldError | None:
        path = path_fn.realize()
        if path is None:
            return None
        return FieldError(ErrorType.FORBIDDEN, str(path), _as_strings(bad_value))

    return err_fn


def required(path_fn: PathFn | None) -> ErrFn | None:
    """
    Deferred Required error at path_fn.

    Returns:
        ErrFn, or None if the location is disabled
    """
    if not path_fn:
        return None

    def err_fn() -> FieldError | None:
        path = path_fn.realize()
        if path is None:
            return None
        return FieldError(ErrorType.REQUIRED, str(path))

    return err_fn


def with_bad_value(err_fn: ErrFn | None, bad_value: Any) -> ErrFn | None:
    """Replace the bad value of the error produced by err_fn."""
    if err_fn is None:
        return None

    def wrapped() -> FieldError | None:
        err = err_fn()
        if err is None:
            return None
        return FieldError(err.type, err.field, _as_strings(bad_value))

    return wrapped


class Violations(Generic[T]):
    """
    Ordered collector of offending subjects and their field errors.

    Insertion order is kept for both subjects and errors; it determines
    the order of names in check details and of errors in results.

    Example:
        bad = Violations[str](with_field_errors=True)
        bad.add("app", forbidden(path_fn.child("securityContext"), True))
        if bad:
            detail = join_quote(bad.data())
    """

    def __init__(self, with_field_errors: bool = False):
        """
        Initialize an empty accumulator.

        Args:
            with_field_errors: Realize ErrFns passed to add()
        """
        self.with_field_errors = with_field_errors
        self._data: list[T] = []
        self._errs: list[FieldError] = []

    def add(self, data: T, *err_fns: ErrFn | None) -> None:
        """Record a subject and, when enabled, its field errors."""
        self._data.append(data)
        self.add_errs(*err_fns)

    def add_errs(self, *err_fns: ErrFn | None) -> None:
        """Record field errors without a subject."""
        if not self.with_field_errors:
            return
        for err_fn in err_fns:
            if err_fn is None:
                continue
            err = err_fn()
            if err is not None:
                self._errs.append(err)

    def extend(self, items: Iterable[T]) -> None:
        """Record several subjects without field errors."""
        for item in items:
            self.add(item)

    def empty(self) -> bool:
        return not self._data

    def data(self) -> list[T]:
        return list(self._data)

    def errors(self) -> list[FieldError]:
        return list(self._errs)

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)

    def __iter__(self) -> Iterator[T]:
        return iter(self._data)

    def __repr__(self) -> str:
        return f"Violations(data={self._data!r}, errors={len(self._errs)})"
