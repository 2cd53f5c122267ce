"""Validation error records and the submission record produced by a session."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Optional

from .base import SchemaModel

ValidationErrorType = Literal["required", "format", "min", "max", "pattern", "custom"]


class ValidationError(SchemaModel):
    """One failed check for one field.

    This is a data record, not an exception.

    Attributes:
        field: Name of the field that failed.
        type: Error kind (``required``, ``format``, ``min``, ``max``,
            ``pattern`` or ``custom``).
        message: The field's custom message when set, otherwise a
            rule-specific default.
        rule: The specific check that failed (``integer``, ``minLength``,
            ``step``, ``option``, ...).  Not part of the wire document's
            required keys, but kept for callers that need finer detail
            than ``type``.
    """

    field: str
    type: ValidationErrorType
    message: str
    rule: Optional[str] = None


class SubmissionStatus(str, Enum):
    COMPLETE = "complete"
    DRAFT = "draft"
    INVALID = "invalid"


class SubmissionMetadata(SchemaModel):
    submitted_at: str
    duration: Optional[int] = None
    """Milliseconds between session start and submission"""


class FormSubmission(SchemaModel):
    """The immutable record of one fill session's outcome.

    ``data`` keys are exactly the field names visible at submit time.
    """

    id: str
    form_id: str
    data: dict[str, Any]
    metadata: SubmissionMetadata
    status: SubmissionStatus
    validation_errors: Optional[list[ValidationError]] = None

    @property
    def is_complete(self) -> bool:
        return self.status == SubmissionStatus.COMPLETE

    @property
    def has_errors(self) -> bool:
        return bool(self.validation_errors)
