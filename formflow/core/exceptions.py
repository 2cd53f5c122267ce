"""
Custom exceptions for the formflow runtime.

Provides specific exception types for the different failure modes of a
form fill, with helpful error messages and context.  Field-level validation
failures are *not* exceptions; they are ``ValidationError`` records
(see :mod:`formflow.schemas.submission`).
"""

from __future__ import annotations

from typing import Iterable


class FormflowError(Exception):
    """Base exception for all formflow errors.

    Attributes:
        message: Human-readable error description.
        form_id: Schema the error belongs to (``None`` if not form-specific).
        field: Field name involved (``None`` if not field-specific).
    """

    def __init__(self, message: str, form_id: str | None = None, field: str | None = None):
        self.message = message
        self.form_id = form_id
        self.field = field

        # Build descriptive error message
        error_parts = [message]
        if form_id is not None:
            error_parts.append(f"Form: {form_id}")
        if field is not None:
            error_parts.append(f"Field: {field}")

        super().__init__(" | ".join(error_parts))


class SchemaConfigurationError(FormflowError):
    """Raised when a schema is malformed and cannot be used.

    Common causes:
        - Two fields share a ``name``, or a field and a section share an ``id``.
        - A field's ``validation`` carries keys of another rule variant
          (e.g. ``minLength`` on a number field).
        - Conditional rules form a dependency cycle.
        - A select or radio field declares no options.

    Detected once, when the schema is loaded.  Fatal for that schema.

    Attributes:
        problems: Every problem found, in discovery order.
    """

    def __init__(
        self,
        message: str,
        problems: Iterable[str] | None = None,
        **kwargs,
    ):
        self.problems = list(problems) if problems is not None else [message]
        if self.problems != [message]:
            message = f"{message}: " + "; ".join(self.problems)
        super().__init__(message, **kwargs)


class SubmissionError(FormflowError):
    """Raised when the external submit callback (or submission sink) fails.

    User-recoverable: the session turns it into an ``invalid`` result and
    returns to editing with the answers intact.
    """

    pass


class StorageError(FormflowError):
    """Raised when a draft save, restore, or clear fails.

    Non-fatal: the session logs it, records it in ``FormSession.warnings``
    and carries on without draft safety.
    """

    pass


class SessionStateError(FormflowError):
    """Raised when an operation is not allowed in the session's current state."""

    pass


class UnknownFieldError(FormflowError):
    """Raised when an answer is set for a name the schema does not define."""

    pass
