"""Tests for the pydantic schema models."""

import pytest
from pydantic import ValidationError as PydanticValidationError
from pydantic import TypeAdapter

from formflow.schemas import (
    CheckboxFieldSchema,
    ConditionalRule,
    FieldSchema,
    FormSchema,
    FormSubmission,
    NumberFieldSchema,
    SelectFieldSchema,
    SubmissionStatus,
    TextFieldSchema,
    ValidationError,
)

FIELD_ADAPTER = TypeAdapter(FieldSchema)


# -- helpers -----------------------------------------------------------------


def _make_field(name="name", type_="text", **extra):
    return {"id": f"f-{name}", "name": name, "label": name.title(), "type": type_, **extra}


def _make_doc(**overrides):
    doc = {
        "id": "contact",
        "title": "Contact us",
        "sections": [
            {
                "id": "s-main",
                "title": "Main",
                "fields": [
                    _make_field("name", validation={"required": True, "minLength": 2}),
                    _make_field("age", "number", validation={"min": 0}),
                ],
            },
            {
                "id": "s-extra",
                "title": "Extra",
                "fields": [_make_field("color", "select", options=[{"value": "red", "label": "Red"}])],
            },
        ],
        "settings": {"multiStep": True, "submitButtonText": "Send"},
    }
    doc.update(overrides)
    return doc


# -- field union ---------------------------------------------------------------


class TestFieldUnion:
    def test_discriminates_on_type(self):
        assert isinstance(FIELD_ADAPTER.validate_python(_make_field(type_="email")), TextFieldSchema)
        assert isinstance(FIELD_ADAPTER.validate_python(_make_field(type_="number")), NumberFieldSchema)
        assert isinstance(
            FIELD_ADAPTER.validate_python(_make_field(type_="radio", options=[])), SelectFieldSchema
        )
        assert isinstance(FIELD_ADAPTER.validate_python(_make_field(type_="checkbox")), CheckboxFieldSchema)

    def test_unknown_type_rejected(self):
        with pytest.raises(PydanticValidationError):
            FIELD_ADAPTER.validate_python(_make_field(type_="rating"))

    def test_camel_case_rule_keys(self):
        field = FIELD_ADAPTER.validate_python(
            _make_field(validation={"required": True, "minLength": 3, "maxLength": 10})
        )
        assert field.validation.min_length == 3
        assert field.validation.max_length == 10
        assert field.is_required is True

    def test_snake_case_rule_keys_accepted(self):
        field = FIELD_ADAPTER.validate_python(_make_field(validation={"min_length": 3}))
        assert field.validation.min_length == 3

    def test_foreign_rule_keys_rejected(self):
        with pytest.raises(PydanticValidationError, match="minLength"):
            FIELD_ADAPTER.validate_python(_make_field(type_="number", validation={"minLength": 3}))

    def test_checkbox_rejects_variant_keys(self):
        with pytest.raises(PydanticValidationError):
            FIELD_ADAPTER.validate_python(_make_field(type_="checkbox", validation={"min": 1}))

    def test_unknown_rule_keys_ignored(self):
        field = FIELD_ADAPTER.validate_python(_make_field(validation={"required": True, "tooltip": "x"}))
        assert field.validation.required is True

    def test_allows_multiple_only_for_select(self):
        select = FIELD_ADAPTER.validate_python(_make_field(type_="select", options=[], multiple=True))
        radio = FIELD_ADAPTER.validate_python(_make_field(type_="radio", options=[], multiple=True))
        assert select.allows_multiple is True
        assert radio.allows_multiple is False

    def test_fields_are_frozen(self):
        field = FIELD_ADAPTER.validate_python(_make_field())
        with pytest.raises(PydanticValidationError):
            field.label = "Other"


# -- conditional rules ---------------------------------------------------------


class TestConditionalRule:
    def test_leaf(self):
        rule = ConditionalRule.model_validate({"field": "hasPet", "operator": "equals", "value": True})
        assert rule.is_composite is False
        assert rule.referenced_fields() == {"hasPet"}

    def test_leaf_requires_field_and_operator(self):
        with pytest.raises(PydanticValidationError):
            ConditionalRule.model_validate({"field": "hasPet", "value": True})
        with pytest.raises(PydanticValidationError):
            ConditionalRule.model_validate({"operator": "equals", "value": True})

    def test_composite_collects_references(self):
        rule = ConditionalRule.model_validate(
            {
                "logic": "or",
                "rules": [
                    {"field": "a", "operator": "equals", "value": 1},
                    {"rules": [{"field": "b", "operator": "contains", "value": "x"}]},
                ],
            }
        )
        assert rule.is_composite is True
        assert rule.referenced_fields() == {"a", "b"}

    def test_unknown_operator_rejected(self):
        with pytest.raises(PydanticValidationError):
            ConditionalRule.model_validate({"field": "a", "operator": "matches", "value": 1})


# -- form schema ---------------------------------------------------------------


class TestFormSchema:
    def test_parses_document(self):
        schema = FormSchema.model_validate(_make_doc())
        assert schema.settings.multi_step is True
        assert schema.settings.submit_button_text == "Send"
        assert schema.field_names == ["name", "age", "color"]

    def test_lookups(self):
        schema = FormSchema.model_validate(_make_doc())
        assert schema.get_field("age").type == "number"
        assert schema.get_section("s-extra").title == "Extra"
        assert schema.section_of("color").id == "s-extra"

    def test_missing_lookup_raises_key_error(self):
        schema = FormSchema.model_validate(_make_doc())
        with pytest.raises(KeyError):
            schema.get_field("nope")
        with pytest.raises(KeyError):
            schema.get_section("nope")

    def test_extra_keys_ignored(self):
        schema = FormSchema.model_validate(_make_doc(analytics={"enabled": True}))
        assert not hasattr(schema, "analytics")

    def test_presentation_settings_carried(self):
        doc = _make_doc()
        doc["settings"]["theme"] = {"primaryColor": "#000"}
        schema = FormSchema.model_validate(doc)
        assert schema.settings.theme == {"primaryColor": "#000"}

    def test_to_document_uses_camel_case(self):
        document = FormSchema.model_validate(_make_doc()).to_document()
        assert document["settings"]["multiStep"] is True
        assert document["sections"][0]["fields"][0]["validation"]["minLength"] == 2


# -- submission records --------------------------------------------------------


class TestSubmissionRecords:
    def test_validation_error_is_a_record(self):
        error = ValidationError(field="age", type="min", message="Must be at least 0", rule="min")
        assert not isinstance(error, Exception)
        assert error.to_document() == {
            "field": "age",
            "type": "min",
            "message": "Must be at least 0",
            "rule": "min",
        }

    def test_submission_document(self):
        record = FormSubmission(
            id="sub-1",
            form_id="contact",
            data={"name": "Ada"},
            metadata={"submittedAt": "2024-01-01T00:00:00+00:00", "duration": 1200},
            status=SubmissionStatus.COMPLETE,
        )
        document = record.to_document()
        assert document["formId"] == "contact"
        assert document["metadata"] == {"submittedAt": "2024-01-01T00:00:00+00:00", "duration": 1200}
        assert document["status"] == "complete"
        assert "validationErrors" not in document
        assert record.is_complete is True
        assert record.has_errors is False

    def test_invalid_submission(self):
        record = FormSubmission(
            id="sub-2",
            form_id="contact",
            data={},
            metadata={"submittedAt": "2024-01-01T00:00:00+00:00"},
            status="invalid",
            validation_errors=[{"field": "name", "type": "required", "message": "Name is required"}],
        )
        assert record.status == SubmissionStatus.INVALID
        assert record.has_errors is True
        assert record.validation_errors[0].field == "name"
