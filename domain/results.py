"""Validation result types shared by every validator stage."""

from dataclasses import dataclass, field
from typing import List

from .enums import ErrorCode


@dataclass(frozen=True)
class ValidationError:
    """A single user-facing rule violation."""
    field: str
    message: str
    code: ErrorCode


@dataclass
class ValidationResult:
    """Result of validation with all errors found."""
    is_valid: bool = True
    errors: List[ValidationError] = field(default_factory=list)

    def add_error(self, field_name: str, message: str, code: ErrorCode) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(ValidationError(field=field_name, message=message, code=code))
        self.is_valid = False

    def extend(self, other: "ValidationResult") -> None:
        """Fold another stage's errors into this result."""
        if other.errors:
            self.errors.extend(other.errors)
            self.is_valid = False

    def has_error(self, field_name: str) -> bool:
        return any(e.field == field_name for e in self.errors)

    def codes(self) -> List[ErrorCode]:
        return [e.code for e in self.errors]

    def get_error_messages(self) -> List[str]:
        """Get all error messages."""
        return [e.message for e in self.errors]

    @classmethod
    def combine(cls, *results: "ValidationResult") -> "ValidationResult":
        """Union of several results, preserving error order."""
        combined = cls()
        for result in results:
            combined.extend(result)
        return combined
