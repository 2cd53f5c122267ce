"""Schema loading and structural checks.

Every schema passes through :func:`check_schema` before the runtime uses
it.  Problems are collected (not just the first) and raised together as a
single :class:`SchemaConfigurationError`, which blocks the form entirely.
"""

from __future__ import annotations

import json
import re
from collections import Counter
from pathlib import Path
from typing import Any, Union

from pydantic import ValidationError as PydanticValidationError

from ..conditions.dependencies import check_conditional_cycles
from ..core.exceptions import SchemaConfigurationError
from ..utils.dates import parse_datetime
from ..utils.logger import get_logger
from .form import FormSchema

logger = get_logger(__name__)


def load_schema(document: Union[FormSchema, dict[str, Any], str, Path]) -> FormSchema:
    """Parse a schema document and run the structural checks.

    Args:
        document: A ``FormSchema``, a dict, a JSON string, or a path to a
            JSON file.

    Returns:
        The validated, read-only ``FormSchema``.

    Raises:
        SchemaConfigurationError: If the document does not parse or any
            structural invariant is violated.
    """
    if isinstance(document, FormSchema):
        schema = document
    else:
        raw = _read_document(document)
        try:
            schema = FormSchema.model_validate(raw)
        except PydanticValidationError as e:
            problems = [
                f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            ]
            form_id = raw.get("id") if isinstance(raw, dict) else None
            raise SchemaConfigurationError(
                "Schema document is malformed",
                problems=problems,
                form_id=form_id,
            ) from e

    check_schema(schema)
    logger.debug(
        "Loaded schema '%s' (%d sections, %d fields)",
        schema.id, len(schema.sections), len(schema.field_names),
    )
    return schema


def _read_document(document: Union[dict[str, Any], str, Path]) -> Any:
    if isinstance(document, dict):
        return document
    if isinstance(document, Path) or (
        isinstance(document, str) and not document.lstrip().startswith("{")
    ):
        path = Path(document)
        if not path.exists():
            raise SchemaConfigurationError(f"Schema file not found at: {path}")
        text = path.read_text(encoding="utf-8")
    else:
        text = document
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaConfigurationError(f"Schema document is not valid JSON: {e}") from e


def schema_problems(schema: FormSchema) -> list[str]:
    """Return every structural problem in *schema* (empty when valid)."""
    problems: list[str] = []

    if not schema.title.strip():
        problems.append("Form title is required")
    if not schema.sections:
        problems.append("Form must have at least one section")

    # Uniqueness: names across fields, ids across fields + sections
    name_counts = Counter(field.name for field in schema.fields)
    for name, count in name_counts.items():
        if count > 1:
            problems.append(f"Duplicate field name '{name}' ({count} fields)")

    id_counts = Counter([s.id for s in schema.sections] + [f.id for f in schema.fields])
    for ident, count in id_counts.items():
        if count > 1:
            problems.append(f"Duplicate id '{ident}' shared by {count} fields/sections")

    for section, field in schema.iter_fields():
        where = f"Field '{field.name}' in section '{section.title}'"
        if not field.name.strip():
            problems.append(f"{where} must have a name")

        if field.type in ("select", "radio") and not field.options:
            problems.append(f"{where} of type {field.type} must have options")

        problems.extend(_rule_problems(where, field))

    try:
        check_conditional_cycles(schema)
    except SchemaConfigurationError as e:
        problems.append(e.message)

    return problems


def _rule_problems(where: str, field: Any) -> list[str]:
    rule = field.validation
    if rule is None:
        return []

    problems: list[str] = []
    if field.type in ("text", "email", "textarea"):
        if rule.pattern is not None:
            try:
                re.compile(rule.pattern)
            except re.error as e:
                problems.append(f"{where} has an invalid pattern {rule.pattern!r}: {e}")
        if _inverted(rule.min_length, rule.max_length):
            problems.append(f"{where} has minLength greater than maxLength")
    elif field.type == "number":
        if _inverted(rule.min, rule.max):
            problems.append(f"{where} has min greater than max")
        if rule.step is not None and rule.step <= 0:
            problems.append(f"{where} has a non-positive step")
    elif field.type == "date":
        for key in ("min_date", "max_date"):
            raw = getattr(rule, key)
            if raw is not None and parse_datetime(raw) is None:
                problems.append(f"{where} has an unparseable {key}: {raw!r}")
    elif field.type in ("select", "radio"):
        if _inverted(rule.min_items, rule.max_items):
            problems.append(f"{where} has minItems greater than maxItems")
    return problems


def _inverted(low: Any, high: Any) -> bool:
    return low is not None and high is not None and low > high


def check_schema(schema: FormSchema) -> None:
    """Raise :class:`SchemaConfigurationError` if *schema* has any structural problem."""
    problems = schema_problems(schema)
    if problems:
        logger.error("Schema '%s' rejected: %s", schema.id, "; ".join(problems))
        raise SchemaConfigurationError(
            "Schema configuration is invalid",
            problems=problems,
            form_id=schema.id,
        )
