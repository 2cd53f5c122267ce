"""ConditionalEvaluator: decides field and section visibility.

Evaluation is a pure function of the answer snapshot: every rule in the
schema is re-evaluated on every call, with no memory of earlier visibility.
The evaluator never raises; malformed comparisons simply evaluate to False.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Collection, Mapping, Optional

from ..utils.logger import get_logger

if TYPE_CHECKING:
    from ..schemas.form import FormSchema
    from ..schemas.rules import ConditionalRule

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Operand helpers
# ---------------------------------------------------------------------------


def values_equal(left: Any, right: Any) -> bool:
    """Deep value equality.

    Booleans only equal booleans (``True != 1``), numbers compare by value
    across int/float, sequences compare element-wise, mappings key-wise.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        return len(left) == len(right) and all(values_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        return left.keys() == right.keys() and all(values_equal(left[k], right[k]) for k in left)
    if type(left) is not type(right) and not (isinstance(left, str) and isinstance(right, str)):
        return False
    return left == right


def as_number(value: Any) -> Optional[float]:
    """Numeric view of *value*, or None when it is not a number.

    Numeric strings count; booleans, None and blank strings do not.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else float(value)
    if isinstance(value, str) and value.strip():
        try:
            number = float(value)
        except ValueError:
            return None
        return None if math.isnan(number) else number
    return None


def _contains(container: Any, needle: Any) -> bool:
    if container is None:
        return False
    if isinstance(container, (list, tuple, set, frozenset)):
        return any(values_equal(item, needle) for item in container)
    if needle is None:
        return False
    return str(needle) in str(container)


# ---------------------------------------------------------------------------
# Rule evaluation
# ---------------------------------------------------------------------------


def evaluate(
    rule: Optional[ConditionalRule],
    answers: Mapping[str, Any],
    known_fields: Optional[Collection[str]] = None,
) -> bool:
    """Evaluate *rule* against a read-only answer snapshot.

    Args:
        rule: Condition tree, or None (always visible).
        answers: Field name -> current answer.
        known_fields: Field names defined by the schema.  A leaf that
            references a name outside this set evaluates to False.

    Returns:
        True when the rule holds (the target is visible).
    """
    if rule is None:
        return True

    if rule.is_composite:
        results = [evaluate(child, answers, known_fields) for child in rule.rules or []]
        if rule.logic == "or":
            return any(results)
        return all(results)

    if known_fields is not None and rule.field not in known_fields:
        return False

    actual = answers.get(rule.field)
    expected = rule.value
    op = rule.operator

    if op == "equals":
        return values_equal(actual, expected)
    if op == "not_equals":
        return not values_equal(actual, expected)
    if op in ("greater_than", "less_than"):
        left, right = as_number(actual), as_number(expected)
        if left is None or right is None:
            return False
        return left > right if op == "greater_than" else left < right
    if op == "contains":
        return _contains(actual, expected)
    if op == "not_contains":
        return not _contains(actual, expected)

    # Unreachable for validated rules; keep the never-raise contract anyway
    logger.warning("Unknown conditional operator %r on field '%s'", op, rule.field)
    return False


# ---------------------------------------------------------------------------
# Schema-wide visibility
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Visibility:
    """Visibility decisions for one answer snapshot.

    Attributes:
        sections: Section id -> visible.
        fields: Field name -> visible.  A field inside a hidden section is
            hidden regardless of its own conditional.
    """

    sections: Mapping[str, bool]
    fields: Mapping[str, bool]

    def is_section_visible(self, section_id: str) -> bool:
        return self.sections.get(section_id, False)

    def is_field_visible(self, name: str) -> bool:
        return self.fields.get(name, False)

    @property
    def visible_section_ids(self) -> list[str]:
        return [sid for sid, shown in self.sections.items() if shown]

    @property
    def visible_field_names(self) -> list[str]:
        return [name for name, shown in self.fields.items() if shown]

    @property
    def hidden_field_names(self) -> list[str]:
        return [name for name, shown in self.fields.items() if not shown]


def compute_visibility(schema: FormSchema, answers: Mapping[str, Any]) -> Visibility:
    """Re-evaluate every section and field conditional in *schema*."""
    known = set(schema.field_names)
    sections: dict[str, bool] = {}
    fields: dict[str, bool] = {}

    for section in schema.sections:
        section_visible = evaluate(section.conditional, answers, known)
        sections[section.id] = section_visible
        for field in section.fields:
            fields[field.name] = (
                section_visible
                and not field.hidden
                and evaluate(field.conditional, answers, known)
            )

    return Visibility(sections=sections, fields=fields)
