"""Fluent builder for assembling schemas in code.

Example::

    builder = SchemaBuilder("Pet survey")
    (builder.add_section("About you")
        .add_text_field("name", "Name", validation={"required": True})
        .add_checkbox_field("hasPet", "Do you have a pet?"))
    (builder.add_section("Your pet", conditional={"field": "hasPet", "operator": "equals", "value": True})
        .add_text_field("petName", "Pet name"))
    schema = builder.set_settings(multiStep=True).build()
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from .form import FormSchema
from .loader import load_schema


def _new_id() -> str:
    return str(uuid.uuid4())


def select_options(values: list[str]) -> list[dict[str, str]]:
    """Build options from display labels; values are slugged labels.

    ``["New York"]`` -> ``[{"value": "new-york", "label": "New York"}]``
    """
    return [{"value": re.sub(r"\s+", "-", v.strip().lower()), "label": v} for v in values]


class SectionBuilder:
    """Appends fields to one section.  Every ``add_*`` returns ``self``."""

    def __init__(self, section: dict[str, Any]):
        self._section = section

    @property
    def section_id(self) -> str:
        return self._section["id"]

    def _add(self, field_type: str, name: str, label: str, **options: Any) -> SectionBuilder:
        field = {"id": options.pop("id", None) or _new_id(), "name": name, "label": label, "type": field_type}
        field.update(options)
        self._section["fields"].append(field)
        return self

    def add_text_field(self, name: str, label: str, **options: Any) -> SectionBuilder:
        return self._add("text", name, label, **options)

    def add_email_field(self, name: str, label: str, **options: Any) -> SectionBuilder:
        return self._add("email", name, label, **options)

    def add_textarea_field(self, name: str, label: str, **options: Any) -> SectionBuilder:
        return self._add("textarea", name, label, multiline=True, **options)

    def add_number_field(self, name: str, label: str, **options: Any) -> SectionBuilder:
        return self._add("number", name, label, **options)

    def add_date_field(self, name: str, label: str, **options: Any) -> SectionBuilder:
        return self._add("date", name, label, **options)

    def add_select_field(
        self, name: str, label: str, options: list[dict[str, Any]], **field_options: Any
    ) -> SectionBuilder:
        return self._add("select", name, label, options=options, **field_options)

    def add_radio_field(
        self, name: str, label: str, options: list[dict[str, Any]], **field_options: Any
    ) -> SectionBuilder:
        return self._add("radio", name, label, options=options, **field_options)

    def add_checkbox_field(
        self,
        name: str,
        label: str,
        options: Optional[list[dict[str, Any]]] = None,
        **field_options: Any,
    ) -> SectionBuilder:
        if options is not None:
            field_options["options"] = options
        return self._add("checkbox", name, label, **field_options)


class SchemaBuilder:
    """Assembles a schema document and validates it on :meth:`build`."""

    def __init__(self, title: str, description: Optional[str] = None, form_id: Optional[str] = None):
        now = datetime.now(timezone.utc).isoformat()
        self._doc: dict[str, Any] = {
            "id": form_id or _new_id(),
            "title": title,
            "description": description,
            "version": "1.0.0",
            "sections": [],
            "settings": {},
            "metadata": {"createdAt": now, "updatedAt": now, "version": "1.0.0", "status": "draft"},
        }

    def add_section(
        self,
        title: str,
        description: Optional[str] = None,
        section_id: Optional[str] = None,
        **options: Any,
    ) -> SectionBuilder:
        section = {
            "id": section_id or _new_id(),
            "title": title,
            "description": description,
            "fields": [],
            **options,
        }
        self._doc["sections"].append(section)
        return SectionBuilder(section)

    def set_settings(self, **settings: Any) -> SchemaBuilder:
        self._doc["settings"].update(settings)
        return self

    def set_metadata(self, **metadata: Any) -> SchemaBuilder:
        self._doc["metadata"].update(metadata)
        return self

    def build(self) -> FormSchema:
        """Validate and return the schema.

        Raises:
            SchemaConfigurationError: On any structural problem, including a
                schema with no sections.
        """
        return load_schema(self._doc)
