"""
School API Backend — Command Validation
=========================================

What:  Syntactic rule checking for commands before they are dispatched.
How:   Each command type gets a `CommandValidator` subclass whose `rules()`
       method runs every check against a `Rules` collector. Checks never stop
       at the first failure, so the result lists every violated rule.
Who:   Called by the HTTP entry layer; pure (no database access). Uniqueness
       and reference checks belong to the handlers.

Example:
    class AddSubjectValidator(CommandValidator[AddSubjectCommand]):
        def rules(self, command, rules):
            rules.required("nameEn", command.name_en).max_length("nameEn", command.name_en, 100)

    result = AddSubjectValidator().validate(command)
    if not result.is_valid:
        ...  # result.errors holds one localized message per violation
"""

import re
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, Tuple, TypeVar

from school_api.localization import MessageKeys, resolve

CommandT = TypeVar("CommandT")

# Same shape check as a typical "looks like an email" validator: one @,
# something on both sides, a dot in the domain, no whitespace.
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one command. Valid exactly when there are no errors."""

    errors: Tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors


class Rules:
    """
    Collects localized messages for violated rules.

    Every method returns `self` so checks on one field can be chained. A
    check whose precondition does not hold (e.g. `max_length` on a missing
    value) is skipped rather than failed; `required` reports absence.
    """

    def __init__(self) -> None:
        self.errors: List[str] = []

    def _fail(self, key: str, **params: Any) -> "Rules":
        self.errors.append(resolve(key, **params))
        return self

    def required(self, field: str, value: Any) -> "Rules":
        """None, or a string that is empty after stripping whitespace."""
        if value is None or (isinstance(value, str) and not value.strip()):
            return self._fail(MessageKeys.REQUIRED, field=field)
        return self

    def max_length(self, field: str, value: Optional[str], limit: int) -> "Rules":
        if value is not None and len(value) > limit:
            return self._fail(MessageKeys.MAX_LENGTH, field=field, max=limit)
        return self

    def email(self, field: str, value: Optional[str]) -> "Rules":
        if value and value.strip() and not _EMAIL_PATTERN.match(value.strip()):
            return self._fail(MessageKeys.INVALID_EMAIL, field=field)
        return self

    def equal(self, field: str, value: Any, other_field: str, other_value: Any) -> "Rules":
        if value is not None and other_value is not None and value != other_value:
            return self._fail(MessageKeys.PASSWORDS_DO_NOT_MATCH, field=field, other=other_field)
        return self

    def positive(self, field: str, value: Optional[int]) -> "Rules":
        if value is not None and value <= 0:
            return self._fail(MessageKeys.MUST_BE_POSITIVE, field=field)
        return self

    def in_range(self, field: str, value: Optional[float], low: float, high: float) -> "Rules":
        if value is not None and not (low <= value <= high):
            return self._fail(MessageKeys.OUT_OF_RANGE, field=field, min=low, max=high)
        return self


class CommandValidator(Generic[CommandT]):
    """Base class for per-command rule sets."""

    def rules(self, command: CommandT, rules: Rules) -> None:
        raise NotImplementedError

    def validate(self, command: CommandT) -> ValidationResult:
        collector = Rules()
        self.rules(command, collector)
        return ValidationResult(errors=tuple(collector.errors))
