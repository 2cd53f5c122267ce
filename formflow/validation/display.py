"""Human-facing helpers: rule hints, display values, answer normalisation."""

from __future__ import annotations

from typing import Any, Mapping

from ..conditions.evaluator import as_number
from ..schemas.fields import FieldSchema
from ..schemas.form import FormSchema
from ..utils.dates import parse_date


def describe_rules(field: FieldSchema) -> list[str]:
    """Short, human-readable hints for the rules attached to *field*."""
    rules: list[str] = []
    rule = field.validation

    if rule is not None and rule.required:
        rules.append("Required field")

    if field.type in ("text", "email", "textarea"):
        if rule is not None:
            if rule.min_length:
                rules.append(f"Minimum {rule.min_length} characters")
            if rule.max_length:
                rules.append(f"Maximum {rule.max_length} characters")
            if rule.pattern:
                rules.append("Must match required pattern")
        fmt = rule.format if rule is not None else None
        if field.type == "email" or fmt == "email":
            rules.append("Must be a valid email address")
        elif fmt == "url":
            rules.append("Must be a valid URL")
        elif fmt == "phone":
            rules.append("Must be a valid phone number")

    elif field.type == "number" and rule is not None:
        if rule.min is not None:
            rules.append(f"Minimum value: {rule.min:g}")
        if rule.max is not None:
            rules.append(f"Maximum value: {rule.max:g}")
        if rule.step is not None:
            rules.append(f"Increments of {rule.step:g}")
        if rule.integer:
            rules.append("Must be a whole number")

    elif field.type == "date" and rule is not None:
        if rule.min_date:
            rules.append(f"Earliest date: {rule.min_date}")
        if rule.max_date:
            rules.append(f"Latest date: {rule.max_date}")

    elif field.type in ("select", "radio") and rule is not None:
        if rule.min_items:
            rules.append(f"Select at least {rule.min_items} option(s)")
        if rule.max_items:
            rules.append(f"Select at most {rule.max_items} option(s)")

    return rules


def _option_label(field: Any, value: Any) -> str:
    for option in field.options or []:
        if option.value == value:
            return option.label
    return str(value)


def display_value(field: FieldSchema, value: Any) -> str:
    """Format an answer for read-only display (empty string when unanswered)."""
    if value is None or value == "" or value == []:
        return ""

    if field.type == "date":
        parsed = parse_date(value)
        return parsed.isoformat() if parsed is not None else str(value)

    if field.type in ("select", "radio"):
        if isinstance(value, (list, tuple)):
            return ", ".join(_option_label(field, v) for v in value)
        return _option_label(field, value)

    if field.type == "checkbox":
        if field.options and isinstance(value, (list, tuple)):
            return ", ".join(_option_label(field, v) for v in value)
        return "Yes" if value else "No"

    if field.type == "number":
        text = str(value)
        if field.prefix:
            text = field.prefix + text
        if field.suffix:
            text += field.suffix
        if field.unit:
            text += " " + field.unit
        return text

    return str(value)


def normalize_answers(schema: FormSchema, answers: Mapping[str, Any]) -> dict[str, Any]:
    """Coerce answers to the canonical type for each field.

    Numeric strings become numbers (ints when whole), multi-value fields
    become lists, single checkboxes become booleans.  Unanswered values and
    names the schema does not define pass through untouched.
    """
    normalized = dict(answers)
    for field in schema.fields:
        if field.name not in answers:
            continue
        value = answers[field.name]
        if value is None or value == "":
            continue

        if field.type == "number" and isinstance(value, str):
            number = as_number(value)
            if number is not None:
                normalized[field.name] = int(number) if number.is_integer() and "." not in value else number
        elif field.type == "checkbox":
            if field.options:
                normalized[field.name] = list(value) if isinstance(value, (list, tuple)) else [value]
            else:
                normalized[field.name] = bool(value)
        elif field.type == "select" and field.multiple:
            normalized[field.name] = list(value) if isinstance(value, (list, tuple)) else [value]

    return normalized
