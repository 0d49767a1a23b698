"""
Form validation

Rules are small tagged values (Required, Email, MaxLength, DateTime) that a
Validator interprets field by field. The literal vocabulary used in rule
tables ("required", "email", "max:N", "datetime") parses into the same
values, so both forms can be mixed:

    rules = {"name": ["required", MaxLength(255)], "email": ["required", "email"]}
    result = Validator().validate(form, rules)
    if not result.passes():
        ...  # result.errors == {"name": "Name is required."}
"""
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, Mapping, Sequence, Union

from contactbook.core.exceptions import ValidationError

# local@domain.tld; local part per RFC 5322 atext plus dots, labels per RFC 1035
EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"@(?:[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?\.)+"
    r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?$"
)


@dataclass(frozen=True)
class Required:
    """Value must be non-empty after trimming whitespace"""


@dataclass(frozen=True)
class Email:
    """Value must look like an email address"""


@dataclass(frozen=True)
class MaxLength:
    """Value may be at most `length` characters long"""

    length: int


@dataclass(frozen=True)
class DateTime:
    """Value must be an ISO 8601 date or date-time"""


Rule = Union[Required, Email, MaxLength, DateTime]
RuleSpec = Union[str, Rule]


def parse_rule(spec: RuleSpec) -> Rule:
    """
    Turn a rule name into a rule value.

    Raises:
        ValueError: for unknown names or a malformed max:N
    """
    if isinstance(spec, (Required, Email, MaxLength, DateTime)):
        return spec

    name, _, argument = str(spec).strip().partition(":")
    name = name.lower()

    if name == "required":
        return Required()
    if name == "email":
        return Email()
    if name == "datetime":
        return DateTime()
    if name == "max":
        if not argument.strip().isdigit():
            raise ValueError(f"Rule 'max' needs a non-negative integer argument, got {spec!r}")
        return MaxLength(int(argument))
    raise ValueError(f"Unknown validation rule: {spec!r}")


def _label(field_name: str) -> str:
    return field_name.replace("_", " ").capitalize()


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def check_rule(rule: Rule, field_name: str, value: Any) -> Union[str, None]:
    """Evaluate one rule; return the error message or None"""
    text = _as_text(value)

    if isinstance(rule, Required):
        if not text.strip():
            return f"{_label(field_name)} is required."
        return None

    # Optional fields: only Required looks at empty values
    if not text.strip():
        return None

    if isinstance(rule, Email):
        if not EMAIL_PATTERN.match(text.strip()):
            return f"{_label(field_name)} must be a valid email address."
        return None

    if isinstance(rule, MaxLength):
        # Values are stored trimmed, so the trimmed length is what must fit
        if len(text.strip()) > rule.length:
            return f"{_label(field_name)} may not be longer than {rule.length} characters."
        return None

    if isinstance(rule, DateTime):
        try:
            datetime.fromisoformat(text.strip())
        except ValueError:
            return f"{_label(field_name)} must be a valid date and time."
        return None

    raise TypeError(f"Unsupported rule type: {type(rule).__name__}")


@dataclass
class ValidationResult:
    """Outcome of Validator.validate"""

    data: Dict[str, Any]
    errors: Dict[str, str] = field(default_factory=dict)

    def passes(self) -> bool:
        return not self.errors

    def fails(self) -> bool:
        return bool(self.errors)

    def raise_for_errors(self):
        if self.errors:
            raise ValidationError(self.errors)


class Validator:
    """Applies per-field rule lists to submitted form data"""

    def __init__(self, rules: Mapping[str, Iterable[RuleSpec]] = None):
        self.rules = self.compile(rules or {})

    @staticmethod
    def compile(rules: Mapping[str, Iterable[RuleSpec]]) -> Dict[str, Sequence[Rule]]:
        return {name: tuple(parse_rule(r) for r in specs) for name, specs in rules.items()}

    def validate(
        self,
        data: Mapping[str, Any],
        rules: Mapping[str, Iterable[RuleSpec]] = None,
    ) -> ValidationResult:
        """
        Validate data against rules (the instance's own rules when omitted).

        Each field's rules run in order and stop at the first failure, so a
        field carries at most one message. Fields without rules are passed
        through unchanged.
        """
        compiled = self.compile(rules) if rules is not None else self.rules
        result = ValidationResult(data=dict(data))

        for field_name, field_rules in compiled.items():
            value = data.get(field_name)
            for rule in field_rules:
                message = check_rule(rule, field_name, value)
                if message:
                    result.errors[field_name] = message
                    break

        return result
