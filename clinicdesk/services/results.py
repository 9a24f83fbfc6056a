"""Result types returned across store, repository and service boundaries.

Validation failures and write failures are reported as data so callers can
decide how to surface them; only conditions that make an operation
impossible are raised as exceptions.
"""

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class FieldError:
    """A single violated field.

    Attributes:
        field: Dotted camelCase path, e.g. ``medications.0.batch``
        message: Human-readable message
    """

    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


@dataclass
class ValidationResult(Generic[T]):
    """Outcome of validating a candidate against a schema."""

    value: Optional[T] = None
    errors: list[FieldError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def message(self) -> Optional[str]:
        """First error message, the one callers conventionally display."""
        return self.errors[0].message if self.errors else None


@dataclass
class WriteResult:
    """Outcome of persisting a collection."""

    ok: bool
    error: Optional[str] = None

    @classmethod
    def success(cls) -> "WriteResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: str) -> "WriteResult":
        return cls(ok=False, error=error)


@dataclass
class SaveResult(Generic[T]):
    """Outcome of a repository or service write.

    Exactly one of ``value``, ``errors`` or ``error`` describes the outcome:
    the persisted entity, the validation errors that blocked the write, or
    the store failure that lost it.
    """

    value: Optional[T] = None
    errors: list[FieldError] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return not self.errors and self.error is None

    @property
    def message(self) -> Optional[str]:
        if self.errors:
            return self.errors[0].message
        return self.error

    @classmethod
    def invalid(cls, errors: list[FieldError]) -> "SaveResult[T]":
        return cls(errors=list(errors))

    @classmethod
    def from_write(cls, write: WriteResult, value: Optional[T] = None) -> "SaveResult[T]":
        if write.ok:
            return cls(value=value)
        return cls(error=write.error)
