"""Base model for every formflow schema document."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SchemaModel(BaseModel):
    """Frozen pydantic base with camelCase document aliases.

    Schema documents are authored in camelCase (``minLength``, ``multiStep``);
    Python code uses snake_case attributes.  Both spellings are accepted on
    input.  Unknown keys are ignored, not rejected, so documents written by
    newer builders still load.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    def to_document(self) -> dict:
        """Dump to a JSON-compatible camelCase dict, dropping unset optionals."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
