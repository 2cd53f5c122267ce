"""ValidationCompiler: turns field rules into executable checkers.

Each field is compiled once into a :class:`FieldChecker`, a pure callable
``(value) -> list[ValidationError]``.  All applicable violations are
collected, not just the first.  Schema-level validation runs the checkers
of *visible* fields only; hidden fields are always valid.
"""

from __future__ import annotations

import math
import re
from typing import Any, Callable, Iterable, Mapping, Optional

from ..conditions.evaluator import Visibility, as_number, compute_visibility
from ..core.config import RuntimeConfig
from ..core.exceptions import SchemaConfigurationError
from ..schemas.fields import FieldSchema
from ..schemas.form import FormSchema
from ..schemas.submission import ValidationError
from ..utils.dates import parse_datetime
from ..utils.logger import get_logger
from .formats import FORMAT_CHECKS, FORMAT_MESSAGES

logger = get_logger(__name__)

# (error type, rule name, default message)
Violation = tuple[str, str, str]


def _fmt(number: float) -> str:
    return f"{number:g}"


def is_empty(value: Any, strip_whitespace: bool = True) -> bool:
    """None, the empty string and empty collections count as unanswered."""
    if value is None:
        return True
    if isinstance(value, str):
        return (value.strip() if strip_whitespace else value) == ""
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


# ---------------------------------------------------------------------------
# Per-type checks
# ---------------------------------------------------------------------------


def _check_string(field: Any, value: Any, config: RuntimeConfig) -> list[Violation]:
    if not isinstance(value, str):
        return [("format", "type", "Must be text")]

    rule = field.validation
    violations: list[Violation] = []

    if rule is not None:
        if rule.min_length is not None and len(value) < rule.min_length:
            violations.append(("min", "minLength", f"Must be at least {rule.min_length} characters"))
        if rule.max_length is not None and len(value) > rule.max_length:
            violations.append(("max", "maxLength", f"Must be at most {rule.max_length} characters"))
        if rule.pattern and not re.search(rule.pattern, value):
            violations.append(("pattern", "pattern", "Invalid format"))

    fmt = rule.format if rule is not None else None
    if fmt is None and field.type == "email":
        fmt = "email"
    if fmt is not None and not FORMAT_CHECKS[fmt](value):
        violations.append(("format", fmt, FORMAT_MESSAGES[fmt]))

    return violations


def _check_number(field: Any, value: Any, config: RuntimeConfig) -> list[Violation]:
    number = as_number(value)
    if number is None or math.isinf(number):
        return [("format", "type", "Must be a valid number")]

    rule = field.validation
    if rule is None:
        return []

    violations: list[Violation] = []
    if rule.min is not None and number < rule.min:
        violations.append(("min", "min", f"Must be at least {_fmt(rule.min)}"))
    if rule.max is not None and number > rule.max:
        violations.append(("max", "max", f"Must be at most {_fmt(rule.max)}"))
    if rule.integer and not number.is_integer():
        violations.append(("custom", "integer", "Must be a whole number"))
    if rule.step is not None and rule.step > 0:
        base = rule.min if rule.min is not None else 0.0
        quotient = (number - base) / rule.step
        if abs(quotient - round(quotient)) > config.step_tolerance * max(1.0, abs(quotient)):
            violations.append(("custom", "step", f"Must be in increments of {_fmt(rule.step)}"))
    return violations


def _check_date(field: Any, value: Any, config: RuntimeConfig) -> list[Violation]:
    rule = field.validation
    fmt = rule.format if rule is not None else None

    if fmt == "time":
        if not isinstance(value, str) or not re.match(r"^\d{2}:\d{2}(:\d{2}(\.\d+)?)?$", value.strip()):
            return [("format", "type", "Must be a valid time")]
        return []

    parsed = parse_datetime(value)
    if parsed is None:
        return [("format", "type", "Must be a valid date")]
    if rule is None:
        return []

    # Calendar-date comparison unless the field collects a local datetime
    use_datetime = fmt == "datetime-local"
    actual = parsed if use_datetime else parsed.date()

    violations: list[Violation] = []
    if rule.min_date is not None:
        bound = parse_datetime(rule.min_date)
        if bound is not None and actual < (bound if use_datetime else bound.date()):
            violations.append(("min", "minDate", f"Date must be on or after {rule.min_date}"))
    if rule.max_date is not None:
        bound = parse_datetime(rule.max_date)
        if bound is not None and actual > (bound if use_datetime else bound.date()):
            violations.append(("max", "maxDate", f"Date must be on or before {rule.max_date}"))
    return violations


def _option_values(field: Any) -> Optional[set[str]]:
    if not field.options:
        return None
    return {opt.value for opt in field.options}


def _check_select(field: Any, value: Any, config: RuntimeConfig) -> list[Violation]:
    allowed = _option_values(field) if config.enforce_options else None

    if not field.allows_multiple:
        if isinstance(value, (list, tuple)):
            return [("format", "type", "Select a single option")]
        if allowed is not None and str(value) not in allowed:
            return [("custom", "option", "Select a valid option")]
        return []

    if not isinstance(value, (list, tuple)):
        return [("format", "type", "Select one or more options")]

    violations: list[Violation] = []
    if allowed is not None and any(str(item) not in allowed for item in value):
        violations.append(("custom", "option", "Select valid options"))

    rule = field.validation
    if rule is not None:
        if rule.min_items is not None and len(value) < rule.min_items:
            violations.append(("min", "minItems", f"Select at least {rule.min_items} option(s)"))
        if rule.max_items is not None and len(value) > rule.max_items:
            violations.append(("max", "maxItems", f"Select at most {rule.max_items} option(s)"))
    return violations


def _check_checkbox(field: Any, value: Any, config: RuntimeConfig) -> list[Violation]:
    if not field.options:
        if not isinstance(value, bool):
            return [("format", "type", "Must be checked or unchecked")]
        return []

    if not isinstance(value, (list, tuple)):
        return [("format", "type", "Select one or more options")]
    allowed = _option_values(field) if config.enforce_options else None
    if allowed is not None and any(str(item) not in allowed for item in value):
        return [("custom", "option", "Select valid options")]
    return []


_TYPE_CHECKS: dict[str, Callable[[Any, Any, RuntimeConfig], list[Violation]]] = {
    "text": _check_string,
    "email": _check_string,
    "textarea": _check_string,
    "number": _check_number,
    "date": _check_date,
    "select": _check_select,
    "radio": _check_select,
    "checkbox": _check_checkbox,
}


# ---------------------------------------------------------------------------
# Compiled checkers
# ---------------------------------------------------------------------------


class FieldChecker:
    """Compiled validator for one field.

    Calling it is a pure function of the value: no I/O, no shared state.
    Statically hidden and disabled fields always pass.
    """

    def __init__(self, field: FieldSchema, config: RuntimeConfig):
        type_check = _TYPE_CHECKS.get(field.type)
        if type_check is None:
            raise SchemaConfigurationError(
                f"No validator for field type '{field.type}'", field=field.name
            )
        self.field = field
        self.config = config
        self._type_check = type_check
        rule = field.validation
        self._required = bool(rule is not None and rule.required)
        self._custom_message = rule.message if rule is not None else None

    @property
    def name(self) -> str:
        return self.field.name

    def _error(self, kind: str, rule: str, default_message: str) -> ValidationError:
        return ValidationError(
            field=self.field.name,
            type=kind,
            message=self._custom_message or default_message,
            rule=rule,
        )

    def __call__(self, value: Any) -> list[ValidationError]:
        if self.field.hidden or self.field.disabled:
            return []

        # A required single checkbox must be ticked
        if self.field.type == "checkbox" and not self.field.options and self._required:
            if value is not True:
                return [self._error("required", "required", f"{self.field.label} is required")]
            return []

        if is_empty(value, self.config.strip_whitespace):
            if self._required:
                return [self._error("required", "required", f"{self.field.label} is required")]
            return []

        return [self._error(*violation) for violation in self._type_check(self.field, value, self.config)]

    def __repr__(self) -> str:
        return f"FieldChecker({self.field.name!r}, type={self.field.type!r})"


def compile_field(field: FieldSchema, config: RuntimeConfig | None = None) -> FieldChecker:
    """Compile one field's rules into a checker ``(value) -> list[ValidationError]``."""
    return FieldChecker(field, config or RuntimeConfig())


class ValidationCompiler:
    """Compiles every field of a schema once and aggregates their results.

    Args:
        schema: The (already structurally checked) form schema.
        config: Optional :class:`RuntimeConfig`.
    """

    def __init__(self, schema: FormSchema, config: RuntimeConfig | None = None):
        self.schema = schema
        self.config = config or RuntimeConfig()
        self._checkers: dict[str, FieldChecker] = {
            field.name: compile_field(field, self.config) for field in schema.fields
        }

    def checker(self, name: str) -> FieldChecker:
        """Look up a compiled checker by field name.

        Raises:
            KeyError: If the schema has no field with that name.
        """
        return self._checkers[name]

    def check_field(
        self,
        name: str,
        value: Any,
        visibility: Visibility | None = None,
    ) -> list[ValidationError]:
        """Errors for one field; none when *visibility* says it is hidden."""
        if visibility is not None and not visibility.is_field_visible(name):
            return []
        return self._checkers[name](value)

    def validate_fields(
        self,
        names: Iterable[str],
        answers: Mapping[str, Any],
        visibility: Visibility | None = None,
    ) -> list[ValidationError]:
        """Errors for the given fields (in the given order), visible ones only."""
        if visibility is None:
            visibility = compute_visibility(self.schema, answers)
        errors: list[ValidationError] = []
        for name in names:
            errors.extend(self.check_field(name, answers.get(name), visibility))
        return errors

    def validate(
        self,
        answers: Mapping[str, Any],
        visibility: Visibility | None = None,
    ) -> list[ValidationError]:
        """Aggregated errors for every visible field in the schema.

        Args:
            answers: Current answer snapshot.
            visibility: Precomputed visibility for *answers*; computed when
                omitted.
        """
        if visibility is None:
            visibility = compute_visibility(self.schema, answers)
        errors = self.validate_fields(self.schema.field_names, answers, visibility)
        logger.debug("Validated form '%s': %d error(s)", self.schema.id, len(errors))
        return errors

    def is_valid(self, answers: Mapping[str, Any], visibility: Visibility | None = None) -> bool:
        return not self.validate(answers, visibility)
