"""Field schemas: a closed tagged union discriminated by ``type``."""

from __future__ import annotations

from typing import Annotated, Any, ClassVar, Literal, Optional, Union

from pydantic import Field, model_validator

from .base import SchemaModel
from .rules import (
    BASE_RULE_KEYS,
    DATE_RULE_KEYS,
    NUMBER_RULE_KEYS,
    SELECT_RULE_KEYS,
    STRING_RULE_KEYS,
    BaseValidationRule,
    ConditionalRule,
    DateValidationRule,
    NumberValidationRule,
    SelectValidationRule,
    StringValidationRule,
    foreign_rule_keys,
)

FieldType = Literal["text", "email", "textarea", "number", "date", "select", "radio", "checkbox"]

FIELD_TYPES: tuple[str, ...] = ("text", "email", "textarea", "number", "date", "select", "radio", "checkbox")


class SelectOption(SchemaModel):
    value: str
    label: str
    disabled: bool = False


class BaseFieldSchema(SchemaModel):
    """Attributes common to every field variant.

    Attributes:
        id: UI address; unique across all fields and sections.
        name: Answer key; unique across all fields of a schema.
        label: Human-readable label, used in default messages.
        hidden: Statically hidden; always valid, never submitted.
        disabled: Shown but not validated.
        conditional: Show/hide rule evaluated against the answer snapshot.
    """

    # Rule keys this variant understands (in addition to required/message)
    rule_keys: ClassVar[frozenset[str]] = frozenset()

    id: str
    name: str
    label: str
    description: Optional[str] = None
    placeholder: Optional[str] = None
    default_value: Any = None
    disabled: bool = False
    readonly: bool = False
    hidden: bool = False
    order: Optional[int] = None
    conditional: Optional[ConditionalRule] = None

    @model_validator(mode="before")
    @classmethod
    def _rule_matches_type(cls, data: Any) -> Any:
        if isinstance(data, dict):
            rule = data.get("validation")
            if isinstance(rule, dict):
                foreign = foreign_rule_keys(rule, cls.rule_keys | BASE_RULE_KEYS)
                if foreign:
                    raise ValueError(
                        f"validation keys {foreign} do not apply to a "
                        f"'{data.get('type')}' field"
                    )
        return data

    @property
    def is_required(self) -> bool:
        rule = getattr(self, "validation", None)
        return bool(rule is not None and rule.required)


class TextFieldSchema(BaseFieldSchema):
    rule_keys: ClassVar[frozenset[str]] = STRING_RULE_KEYS

    type: Literal["text", "email", "textarea"]
    validation: Optional[StringValidationRule] = None
    multiline: bool = False
    rows: Optional[int] = None


class NumberFieldSchema(BaseFieldSchema):
    rule_keys: ClassVar[frozenset[str]] = NUMBER_RULE_KEYS

    type: Literal["number"]
    validation: Optional[NumberValidationRule] = None
    unit: Optional[str] = None
    prefix: Optional[str] = None
    suffix: Optional[str] = None


class DateFieldSchema(BaseFieldSchema):
    rule_keys: ClassVar[frozenset[str]] = DATE_RULE_KEYS

    type: Literal["date"]
    validation: Optional[DateValidationRule] = None
    show_time: bool = False


class SelectFieldSchema(BaseFieldSchema):
    rule_keys: ClassVar[frozenset[str]] = SELECT_RULE_KEYS

    type: Literal["select", "radio"]
    validation: Optional[SelectValidationRule] = None
    options: list[SelectOption] = []
    multiple: bool = False

    @property
    def allows_multiple(self) -> bool:
        return self.type == "select" and self.multiple


class CheckboxFieldSchema(BaseFieldSchema):
    type: Literal["checkbox"]
    validation: Optional[BaseValidationRule] = None
    options: Optional[list[SelectOption]] = None


FieldSchema = Annotated[
    Union[
        TextFieldSchema,
        NumberFieldSchema,
        DateFieldSchema,
        SelectFieldSchema,
        CheckboxFieldSchema,
    ],
    Field(discriminator="type"),
]
