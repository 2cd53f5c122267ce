"""Tests for SchemaBuilder / SectionBuilder."""

import pytest

from formflow.core.exceptions import SchemaConfigurationError
from formflow.schemas import SchemaBuilder, select_options


def _make_pet_builder() -> SchemaBuilder:
    builder = SchemaBuilder("Pet survey", description="Tell us about your pets", form_id="pets")
    (
        builder.add_section("About you", section_id="about")
        .add_text_field("name", "Name", validation={"required": True})
        .add_email_field("email", "Email")
        .add_checkbox_field("hasPet", "Do you have a pet?")
    )
    (
        builder.add_section(
            "Your pet",
            section_id="pet",
            conditional={"field": "hasPet", "operator": "equals", "value": True},
        )
        .add_text_field("petName", "Pet name")
        .add_radio_field("species", "Species", select_options(["Cat", "Dog"]))
        .add_number_field("petAge", "Pet age", validation={"min": 0, "integer": True}, unit="years")
    )
    return builder


class TestSelectOptions:
    def test_slugs_labels(self):
        assert select_options(["New York", "  Los  Angeles "]) == [
            {"value": "new-york", "label": "New York"},
            {"value": "los-angeles", "label": "  Los  Angeles "},
        ]


class TestSchemaBuilder:
    def test_builds_checked_schema(self):
        schema = _make_pet_builder().set_settings(multiStep=True).build()

        assert schema.id == "pets"
        assert schema.description == "Tell us about your pets"
        assert schema.settings.multi_step is True
        assert [s.id for s in schema.sections] == ["about", "pet"]
        assert schema.field_names == ["name", "email", "hasPet", "petName", "species", "petAge"]

    def test_field_attributes(self):
        schema = _make_pet_builder().build()

        assert schema.get_field("email").type == "email"
        assert schema.get_field("name").is_required is True
        assert schema.get_field("petAge").unit == "years"
        assert [o.value for o in schema.get_field("species").options] == ["cat", "dog"]
        assert schema.get_section("pet").conditional.field == "hasPet"

    def test_generated_ids_are_unique(self):
        schema = _make_pet_builder().build()
        ids = [s.id for s in schema.sections] + [f.id for f in schema.fields]
        assert len(ids) == len(set(ids))

    def test_textarea_is_multiline(self):
        builder = SchemaBuilder("Feedback")
        builder.add_section("Main").add_textarea_field("comments", "Comments", rows=4)
        field = builder.build().get_field("comments")
        assert field.type == "textarea"
        assert field.multiline is True
        assert field.rows == 4

    def test_checkbox_group_and_date(self):
        builder = SchemaBuilder("Booking")
        (
            builder.add_section("Main")
            .add_date_field("arrival", "Arrival", validation={"minDate": "2024-01-01"})
            .add_checkbox_field("extras", "Extras", options=select_options(["Breakfast", "Parking"]))
            .add_select_field("room", "Room", select_options(["Single", "Double"]), multiple=True)
        )
        schema = builder.build()
        assert schema.get_field("arrival").validation.min_date == "2024-01-01"
        assert len(schema.get_field("extras").options) == 2
        assert schema.get_field("room").allows_multiple is True

    def test_metadata(self):
        schema = _make_pet_builder().set_metadata(category="survey", tags=["pets"]).build()
        assert schema.metadata.category == "survey"
        assert schema.metadata.tags == ["pets"]
        assert schema.metadata.created_at is not None

    def test_build_without_sections_fails(self):
        with pytest.raises(SchemaConfigurationError, match="at least one section"):
            SchemaBuilder("Empty").build()

    def test_build_runs_structural_checks(self):
        builder = SchemaBuilder("Broken")
        builder.add_section("Main").add_text_field("name", "Name").add_number_field("name", "Again")
        with pytest.raises(SchemaConfigurationError, match="Duplicate field name"):
            builder.build()
