"""Validation rule variants and the conditional rule tree."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import model_validator

from .base import SchemaModel

Operator = Literal["equals", "not_equals", "greater_than", "less_than", "contains", "not_contains"]
Logic = Literal["and", "or"]


# ---------------------------------------------------------------------------
# Validation rules
# ---------------------------------------------------------------------------


class BaseValidationRule(SchemaModel):
    """Keys shared by every rule variant.

    Attributes:
        required: Empty answers fail with a ``required`` error.
        message: Overrides every rule-specific default message for the field.
    """

    required: bool = False
    message: Optional[str] = None


class StringValidationRule(BaseValidationRule):
    """Rule for text, email and textarea fields."""

    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    format: Optional[Literal["email", "url", "phone"]] = None


class NumberValidationRule(BaseValidationRule):
    """Rule for number fields.  ``min``/``max`` are inclusive."""

    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    integer: bool = False


class DateValidationRule(BaseValidationRule):
    """Rule for date fields.  ``min_date``/``max_date`` are ISO strings."""

    min_date: Optional[str] = None
    max_date: Optional[str] = None
    format: Optional[Literal["date", "datetime-local", "time"]] = None


class SelectValidationRule(BaseValidationRule):
    """Rule for select and radio fields.  Item bounds apply to multi-selects only."""

    min_items: Optional[int] = None
    max_items: Optional[int] = None


def _keys(*names: str) -> frozenset[str]:
    # Accept both the document spelling and the Python attribute spelling
    out: set[str] = set()
    for name in names:
        out.add(name)
        out.add("".join("_" + c.lower() if c.isupper() else c for c in name))
    return frozenset(out)


STRING_RULE_KEYS = _keys("minLength", "maxLength", "pattern", "format")
NUMBER_RULE_KEYS = _keys("min", "max", "step", "integer")
DATE_RULE_KEYS = _keys("minDate", "maxDate", "format")
SELECT_RULE_KEYS = _keys("minItems", "maxItems")
BASE_RULE_KEYS = _keys("required", "message")

ALL_VARIANT_KEYS = STRING_RULE_KEYS | NUMBER_RULE_KEYS | DATE_RULE_KEYS | SELECT_RULE_KEYS


def foreign_rule_keys(rule: dict[str, Any], own_keys: frozenset[str]) -> list[str]:
    """Keys in *rule* that belong to a different rule variant than *own_keys*.

    Keys that belong to no variant at all are not reported; unknown keys are
    ignored rather than rejected.
    """
    return sorted(k for k in rule if k in ALL_VARIANT_KEYS and k not in own_keys)


# ---------------------------------------------------------------------------
# Conditional rules
# ---------------------------------------------------------------------------


class ConditionalRule(SchemaModel):
    """One node of a show/hide condition tree.

    A leaf compares ``answers[field]`` against ``value`` with ``operator``.
    A node with non-empty ``rules`` is composite: its own
    ``field``/``operator``/``value`` are ignored and the children are reduced
    with ``logic`` (``and`` when omitted).
    """

    field: Optional[str] = None
    operator: Optional[Operator] = None
    value: Any = None
    logic: Optional[Logic] = None
    rules: Optional[list[ConditionalRule]] = None

    @property
    def is_composite(self) -> bool:
        return bool(self.rules)

    @model_validator(mode="after")
    def _leaf_needs_field_and_operator(self) -> ConditionalRule:
        if not self.is_composite and (not self.field or self.operator is None):
            raise ValueError("a conditional rule without child rules needs 'field' and 'operator'")
        return self

    def referenced_fields(self) -> set[str]:
        """Every field name this rule (or any descendant) reads."""
        if self.is_composite:
            names: set[str] = set()
            for child in self.rules or []:
                names |= child.referenced_fields()
            return names
        return {self.field} if self.field else set()


ConditionalRule.model_rebuild()
