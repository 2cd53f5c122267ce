"""Pydantic models for form schemas and submission records.

This package provides the read-only data model consumed by the runtime:

- FormSchema / FormSection / FormSettings: the form description
- FieldSchema: tagged union of field variants, discriminated by ``type``
- ConditionalRule: show/hide condition tree
- ValidationError / FormSubmission: records produced at fill time

Example:
    from formflow.schemas import load_schema

    schema = load_schema("contact_form.json")
    for section, field in schema.iter_fields():
        print(section.title, field.name, field.type)
"""

from .base import SchemaModel
from .fields import (
    FIELD_TYPES,
    BaseFieldSchema,
    CheckboxFieldSchema,
    DateFieldSchema,
    FieldSchema,
    FieldType,
    NumberFieldSchema,
    SelectFieldSchema,
    SelectOption,
    TextFieldSchema,
)
from .form import FormMetadata, FormSchema, FormSection, FormSettings
from .rules import (
    BaseValidationRule,
    ConditionalRule,
    DateValidationRule,
    NumberValidationRule,
    SelectValidationRule,
    StringValidationRule,
)
from .submission import FormSubmission, SubmissionMetadata, SubmissionStatus, ValidationError
from .loader import check_schema, load_schema, schema_problems
from .builder import SchemaBuilder, SectionBuilder, select_options

__all__ = [
    "SchemaModel",
    "FIELD_TYPES",
    "FieldType",
    "FieldSchema",
    "BaseFieldSchema",
    "TextFieldSchema",
    "NumberFieldSchema",
    "DateFieldSchema",
    "SelectFieldSchema",
    "CheckboxFieldSchema",
    "SelectOption",
    "FormSchema",
    "FormSection",
    "FormSettings",
    "FormMetadata",
    "BaseValidationRule",
    "StringValidationRule",
    "NumberValidationRule",
    "DateValidationRule",
    "SelectValidationRule",
    "ConditionalRule",
    "ValidationError",
    "FormSubmission",
    "SubmissionMetadata",
    "SubmissionStatus",
    "load_schema",
    "check_schema",
    "schema_problems",
    "SchemaBuilder",
    "SectionBuilder",
    "select_options",
]
