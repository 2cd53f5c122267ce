"""Sections, settings, metadata and the top-level ``FormSchema``."""

from __future__ import annotations

from typing import Any, Iterator, Literal, Optional

from .base import SchemaModel
from .fields import FieldSchema
from .rules import ConditionalRule


class FormSection(SchemaModel):
    """An ordered group of fields.  Order matters for display and step grouping."""

    id: str
    title: str
    description: Optional[str] = None
    fields: list[FieldSchema] = []
    collapsible: bool = False
    collapsed: bool = False
    conditional: Optional[ConditionalRule] = None


class FormSettings(SchemaModel):
    """Form-level behaviour switches.

    ``theme`` and ``notifications`` are presentation/integration data that
    the runtime carries but never interprets.
    """

    multi_step: bool = False
    show_progress: bool = False
    allow_drafts: bool = False
    require_auth: bool = False
    submit_button_text: str = "Submit"
    reset_button_text: str = "Reset"
    theme: Optional[dict[str, Any]] = None
    notifications: Optional[dict[str, Any]] = None


class FormMetadata(SchemaModel):
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    created_by: Optional[str] = None
    version: str = "1.0.0"
    tags: Optional[list[str]] = None
    category: Optional[str] = None
    status: Literal["draft", "published", "archived"] = "draft"


class FormSchema(SchemaModel):
    """A complete, read-only form description.

    Created by an external builder, persisted externally, consumed read-only
    at fill time.  Use :func:`formflow.schemas.loader.load_schema` to parse a
    document *and* run the structural checks.
    """

    id: str
    title: str
    description: Optional[str] = None
    version: str = "1.0.0"
    sections: list[FormSection] = []
    settings: FormSettings = FormSettings()
    metadata: FormMetadata = FormMetadata()

    # -- lookups ---------------------------------------------------------

    def iter_fields(self) -> Iterator[tuple[FormSection, FieldSchema]]:
        """Yield ``(section, field)`` pairs in display order."""
        for section in self.sections:
            for field in section.fields:
                yield section, field

    @property
    def fields(self) -> list[FieldSchema]:
        """All fields across all sections, in display order."""
        return [field for _, field in self.iter_fields()]

    @property
    def field_names(self) -> list[str]:
        return [field.name for field in self.fields]

    def get_field(self, name: str) -> FieldSchema:
        """Look up a field by its ``name``.

        Raises:
            KeyError: If no field has that name.
        """
        for field in self.fields:
            if field.name == name:
                return field
        raise KeyError(name)

    def get_section(self, section_id: str) -> FormSection:
        """Look up a section by ``id``.

        Raises:
            KeyError: If no section has that id.
        """
        for section in self.sections:
            if section.id == section_id:
                return section
        raise KeyError(section_id)

    def section_of(self, field_name: str) -> FormSection:
        for section, field in self.iter_fields():
            if field.name == field_name:
                return section
        raise KeyError(field_name)
