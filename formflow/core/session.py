"""
FormSession: one user's fill of one form schema.

Owns the answer snapshot and drives the other components:

    set_answer() -> compute_visibility() -> StepNavigator.sync() -> hooks
    submit()     -> ValidationCompiler + async validators -> on_submit -> save_submission

States: ``EDITING`` -> ``VALIDATING`` -> (``COMPLETE`` | back to ``EDITING``).
"""

from __future__ import annotations

import asyncio
import inspect
import time
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from ..conditions.evaluator import Visibility, compute_visibility, values_equal
from ..navigation.navigator import NavigationResult, StepNavigator
from ..schemas.form import FormSchema
from ..schemas.submission import (
    FormSubmission,
    SubmissionMetadata,
    SubmissionStatus,
    ValidationError,
)
from ..utils.logger import get_logger
from ..validation.async_validation import AsyncValidationScheduler, AsyncValidator
from ..validation.compiler import ValidationCompiler, is_empty
from .config import RuntimeConfig
from .exceptions import SessionStateError, StorageError, SubmissionError, UnknownFieldError
from .hooks import (
    AnswerChangeEvent,
    DraftSavedEvent,
    FormHooks,
    StepChangeEvent,
    SubmitEndEvent,
    SubmitStartEvent,
    VisibilityChangeEvent,
    _fire_hook,
    _fire_hook_sync,
)
from .storage import DraftStore, JsonFileDraftStore

logger = get_logger(__name__)

SUBMIT_ERROR_FIELD = "_form"
"""``field`` of the error recorded when the submit callback fails"""

SubmitCallback = Callable[[dict[str, Any]], Union[Awaitable[Any], Any]]
SubmissionSink = Callable[[FormSubmission], Any]


class SessionState(str, Enum):
    EDITING = "editing"
    VALIDATING = "validating"
    COMPLETE = "complete"


class FormSession:
    """
    Stateful fill session for a single :class:`FormSchema`.

    Args:
        schema: The loaded (structurally checked) schema.
        draft_store: Where drafts are kept.  When omitted and
            ``config.draft_dir`` is set, a :class:`JsonFileDraftStore` is
            used; otherwise drafts are disabled.
        on_submit: ``fn(data)``, sync or async.  Receives the visible answers.
        save_submission: ``fn(record)`` persisting the final record.
        async_validators: ``field name -> validator`` registrations.
        config: Optional :class:`RuntimeConfig`.
        hooks: Optional :class:`FormHooks`.

    Example:
        >>> session = FormSession(schema, draft_store=KeyValueDraftStore())
        >>> session.set_answer("email", "ada@example.com")
        >>> record = await session.submit()
        >>> record.status
        <SubmissionStatus.COMPLETE: 'complete'>
    """

    def __init__(
        self,
        schema: FormSchema,
        draft_store: Optional[DraftStore] = None,
        on_submit: Optional[SubmitCallback] = None,
        save_submission: Optional[SubmissionSink] = None,
        async_validators: Optional[Mapping[str, AsyncValidator]] = None,
        config: Optional[RuntimeConfig] = None,
        hooks: Optional[FormHooks] = None,
    ):
        self.schema = schema
        self.config = config or RuntimeConfig()
        self.hooks = hooks or FormHooks()
        self.on_submit = on_submit
        self.save_submission = save_submission

        if draft_store is None and self.config.draft_dir is not None:
            draft_store = JsonFileDraftStore(self.config.draft_dir)
        self.draft_store = draft_store

        self.compiler = ValidationCompiler(schema, self.config)
        self.scheduler = AsyncValidationScheduler(self.config)
        for name, fn in (async_validators or {}).items():
            self._require_field(name)
            self.scheduler.register(name, fn)

        self._state = SessionState.EDITING
        self._last_status: Optional[SubmissionStatus] = None
        self._warnings: list[StorageError] = []
        self._delivered_data: Optional[dict[str, Any]] = None
        self._started = time.monotonic()

        # Draft restore happens before the first evaluation
        self._answers: dict[str, Any] = self._initial_answers()
        self._answers.update(self._restore_draft())
        for name, value in self._answers.items():
            self.scheduler.note_value(name, value)

        self._visibility: Visibility = compute_visibility(schema, self._answers)
        self.navigator = StepNavigator(schema, self.compiler)
        self.navigator.sync(self._answers, self._visibility)

        logger.debug(
            "Session started for form '%s' (%d answers, %d steps)",
            schema.id, len(self._answers), self.navigator.total_steps,
        )

    # -- construction helpers --------------------------------------------

    def _initial_answers(self) -> dict[str, Any]:
        return {f.name: f.default_value for f in self.schema.fields if f.default_value is not None}

    def _restore_draft(self) -> dict[str, Any]:
        if self.draft_store is None:
            return {}
        try:
            draft = self.draft_store.get_draft(self.schema.id)
        except Exception as e:
            self._record_storage_failure("restore", e)
            return {}
        if not draft:
            return {}

        known = set(self.schema.field_names)
        restored = {name: value for name, value in draft.items() if name in known}
        dropped = sorted(set(draft) - known)
        if dropped:
            logger.debug("Ignoring draft answers for unknown fields: %s", dropped)
        logger.info("Restored draft for form '%s' (%d answers)", self.schema.id, len(restored))
        return restored

    def _require_field(self, name: str) -> None:
        try:
            self.schema.get_field(name)
        except KeyError:
            raise UnknownFieldError(
                f"Schema has no field named '{name}'", form_id=self.schema.id, field=name
            ) from None

    def _require_editable(self, operation: str) -> None:
        if self._state == SessionState.COMPLETE:
            raise SessionStateError(
                f"Cannot {operation}: form has already been submitted", form_id=self.schema.id
            )
        if self._state == SessionState.VALIDATING:
            raise SessionStateError(
                f"Cannot {operation}: a submit is in progress", form_id=self.schema.id
            )

    def _record_storage_failure(self, action: str, error: Exception) -> None:
        # Caller-supplied stores may raise anything
        if not isinstance(error, StorageError):
            wrapped = StorageError(f"Draft {action} failed: {error}", form_id=self.schema.id)
            wrapped.__cause__ = error
            error = wrapped
        logger.warning("Draft %s failed for form '%s': %s", action, self.schema.id, error)
        self._warnings.append(error)

    # -- read-only state -------------------------------------------------

    @property
    def form_id(self) -> str:
        return self.schema.id

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def last_status(self) -> Optional[SubmissionStatus]:
        """Status of the most recent submit, None before the first one."""
        return self._last_status

    @property
    def answers(self) -> dict[str, Any]:
        return dict(self._answers)

    @property
    def visibility(self) -> Visibility:
        return self._visibility

    @property
    def warnings(self) -> list[StorageError]:
        """Non-fatal storage failures, oldest first."""
        return list(self._warnings)

    @property
    def drafts_enabled(self) -> bool:
        return self.draft_store is not None

    # -- answers ---------------------------------------------------------

    def set_answer(self, name: str, value: Any) -> None:
        """Store one answer and recompute visibility and steps."""
        self.set_answers({name: value})

    def set_answers(self, answers: Mapping[str, Any]) -> None:
        """Store several answers, then recompute once.

        Raises:
            UnknownFieldError: If any name is not defined by the schema.
            SessionStateError: After the form has been submitted.
        """
        self._require_editable("set answers")
        for name in answers:
            self._require_field(name)

        changes: list[AnswerChangeEvent] = []
        for name, value in answers.items():
            old_value = self._answers.get(name)
            self._answers[name] = value
            self.scheduler.note_value(name, value)
            if not values_equal(old_value, value):
                changes.append(AnswerChangeEvent(self.schema.id, name, old_value, value))

        self._recompute()
        for event in changes:
            _fire_hook_sync(self.hooks.on_answer_change, event)

    def _recompute(self) -> None:
        previous = self._visibility
        before = (self.navigator.current_step, self.navigator.total_steps)

        self._visibility = compute_visibility(self.schema, self._answers)
        self.navigator.sync(self._answers, self._visibility)

        old_visible = set(previous.visible_field_names)
        new_visible = set(self._visibility.visible_field_names)
        if old_visible != new_visible:
            shown = [n for n in self.schema.field_names if n in new_visible - old_visible]
            hidden = [n for n in self.schema.field_names if n in old_visible - new_visible]
            logger.debug("Visibility changed for form '%s': shown=%s hidden=%s", self.schema.id, shown, hidden)
            _fire_hook_sync(
                self.hooks.on_visibility_change,
                VisibilityChangeEvent(self.schema.id, shown, hidden),
            )
        self._fire_step_change(before)

    def _fire_step_change(self, before: tuple[int, int]) -> None:
        after = (self.navigator.current_step, self.navigator.total_steps)
        if after == before:
            return
        section = self.navigator.current_section
        _fire_hook_sync(
            self.hooks.on_step_change,
            StepChangeEvent(
                form_id=self.schema.id,
                previous_step=before[0],
                current_step=after[0],
                total_steps=after[1],
                section_id=section.id if section is not None else None,
            ),
        )

    # -- errors ----------------------------------------------------------

    def _errors_for(self, name: str) -> list[ValidationError]:
        value = self._answers.get(name)
        errors = self.compiler.check_field(name, value, self._visibility)
        if not errors and self._visibility.is_field_visible(name):
            errors = self.scheduler.errors_for(name, value)
        return errors

    def errors(self) -> list[ValidationError]:
        """Current errors over visible fields, sync and async merged."""
        errors: list[ValidationError] = []
        for name in self.schema.field_names:
            errors.extend(self._errors_for(name))
        return errors

    def field_errors(self, name: str) -> list[ValidationError]:
        self._require_field(name)
        return self._errors_for(name)

    def blur(self, name: str) -> Optional[asyncio.Task]:
        """Request async validation for *name* (debounced).

        Only scheduled when the field is visible and passes its synchronous
        checks.  Without a running event loop nothing is scheduled.
        """
        self._require_field(name)
        if not self.scheduler.has_validator(name) or not self._visibility.is_field_visible(name):
            return None
        value = self._answers.get(name)
        if self.compiler.check_field(name, value, self._visibility):
            return None
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; async validation for '%s' not scheduled", name)
            return None
        return self.scheduler.schedule(name, value, self._answers)

    # -- navigation ------------------------------------------------------

    def next_step(self) -> NavigationResult:
        before = (self.navigator.current_step, self.navigator.total_steps)
        result = self.navigator.next(self._answers, self._visibility)
        self._fire_step_change(before)
        return result

    def previous_step(self) -> NavigationResult:
        before = (self.navigator.current_step, self.navigator.total_steps)
        result = self.navigator.previous()
        self._fire_step_change(before)
        return result

    def go_to_step(self, index: int) -> NavigationResult:
        before = (self.navigator.current_step, self.navigator.total_steps)
        result = self.navigator.go_to(index, self._answers, self._visibility)
        self._fire_step_change(before)
        return result

    # -- drafts ----------------------------------------------------------

    def save_draft(self) -> bool:
        """Persist the current answers as this form's draft.

        Returns:
            True when the draft was written; False when drafts are disabled
            or the store failed (the failure is recorded in ``warnings``).
        """
        self._require_editable("save a draft")
        if self.draft_store is None:
            logger.debug("Drafts disabled for form '%s'; nothing saved", self.schema.id)
            return False
        try:
            self.draft_store.set_draft(self.schema.id, dict(self._answers))
        except Exception as e:
            self._record_storage_failure("save", e)
            return False

        logger.info("Draft saved for form '%s' (%d answers)", self.schema.id, len(self._answers))
        _fire_hook_sync(self.hooks.on_draft_saved, DraftSavedEvent(self.schema.id, len(self._answers)))
        return True

    def _clear_draft(self) -> None:
        if self.draft_store is None:
            return
        try:
            self.draft_store.clear_draft(self.schema.id)
        except Exception as e:
            self._record_storage_failure("clear", e)
            return
        logger.info("Draft cleared for form '%s'", self.schema.id)

    # -- submission ------------------------------------------------------

    def submission_data(self) -> dict[str, Any]:
        """Answers keyed by the currently visible field names only."""
        data: dict[str, Any] = {}
        for name in self._visibility.visible_field_names:
            if name in self._answers:
                data[name] = self._answers[name]
            elif self.config.include_unanswered:
                data[name] = None
        return data

    def _build_record(
        self,
        status: SubmissionStatus,
        errors: Optional[list[ValidationError]] = None,
    ) -> FormSubmission:
        return FormSubmission(
            id=str(uuid.uuid4()),
            form_id=self.schema.id,
            data=self.submission_data(),
            metadata=SubmissionMetadata(
                submitted_at=datetime.now(timezone.utc).isoformat(),
                duration=int((time.monotonic() - self._started) * 1000),
            ),
            status=status,
            validation_errors=errors or None,
        )

    async def _async_errors(self, sync_errors: list[ValidationError]) -> list[ValidationError]:
        failing = {e.field for e in sync_errors}
        names = [
            name
            for name in self.scheduler.field_names
            if self._visibility.is_field_visible(name)
            and name not in failing
            and not is_empty(self._answers.get(name), self.config.strip_whitespace)
        ]
        if not names:
            return []
        results = await asyncio.gather(
            *(self.scheduler.run_now(name, self._answers.get(name), self._answers) for name in names)
        )
        return [error for errors in results for error in errors]

    async def _deliver(self, record: FormSubmission) -> None:
        # A retry after a failed save only re-runs on_submit when the data changed
        if self.on_submit is not None and record.data != self._delivered_data:
            result = self.on_submit(dict(record.data))
            if inspect.isawaitable(result):
                await result
            self._delivered_data = dict(record.data)
        if self.save_submission is not None:
            result = self.save_submission(record)
            if inspect.isawaitable(result):
                await result

    async def submit(self) -> FormSubmission:
        """Validate everything and hand the answers to the submit callbacks.

        Returns:
            A ``complete`` record on success.  On validation errors or a
            failing callback, an ``invalid`` record carrying
            ``validation_errors``; the session returns to editing with the
            answers intact.  When ``on_submit`` succeeded but
            ``save_submission`` failed, a retry with unchanged data only
            calls ``save_submission`` again.

        Raises:
            SessionStateError: If already submitted or a submit is running.
        """
        self._require_editable("submit")
        self._state = SessionState.VALIDATING
        start_time = time.monotonic()
        await _fire_hook(self.hooks.on_submit_start, SubmitStartEvent(self.schema.id, len(self._answers)))

        try:
            record = await self._submit()
        finally:
            if self._state == SessionState.VALIDATING:
                self._state = SessionState.EDITING

        await _fire_hook(
            self.hooks.on_submit_end,
            SubmitEndEvent(
                form_id=self.schema.id,
                status=record.status.value,
                num_errors=len(record.validation_errors or []),
                elapsed_seconds=time.monotonic() - start_time,
            ),
        )
        return record

    async def _submit(self) -> FormSubmission:
        errors = self.compiler.validate(self._answers, self._visibility)
        errors.extend(await self._async_errors(errors))
        if errors:
            logger.debug("Submit of form '%s' rejected: %d error(s)", self.schema.id, len(errors))
            return self._reject(errors)

        record = self._build_record(SubmissionStatus.COMPLETE)
        try:
            await self._deliver(record)
        except Exception as e:
            failure = SubmissionError(f"Submission failed: {e}", form_id=self.schema.id)
            logger.error("Submit callback failed for form '%s': %s", self.schema.id, e, exc_info=True)
            return self._reject(
                [ValidationError(field=SUBMIT_ERROR_FIELD, type="custom", message=failure.message, rule="submit")]
            )

        self._state = SessionState.COMPLETE
        self._last_status = SubmissionStatus.COMPLETE
        self.scheduler.cancel_all()
        self._clear_draft()
        logger.info(
            "Form '%s' submitted (%d fields, %d ms)",
            self.schema.id, len(record.data), record.metadata.duration,
        )
        return record

    def _reject(self, errors: list[ValidationError]) -> FormSubmission:
        self._state = SessionState.EDITING
        self._last_status = SubmissionStatus.INVALID
        return self._build_record(SubmissionStatus.INVALID, errors)

    def submit_sync(self) -> FormSubmission:
        """Blocking wrapper around :meth:`submit`.

        Raises:
            RuntimeError: If called while an event loop is running.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.submit())
        raise RuntimeError("submit_sync() cannot be used inside a running event loop; await submit() instead")

    # -- lifecycle -------------------------------------------------------

    def reset(self) -> None:
        """Discard all answers and the stored draft; start over at step one.

        The answer set is left empty; ``defaultValue`` only seeds new sessions.
        """
        if self._state == SessionState.VALIDATING:
            raise SessionStateError("Cannot reset: a submit is in progress", form_id=self.schema.id)

        self.scheduler.clear()
        self._answers = {}
        self._delivered_data = None
        self._state = SessionState.EDITING
        self._last_status = None
        self._started = time.monotonic()
        self._clear_draft()

        before = (self.navigator.current_step, self.navigator.total_steps)
        self._visibility = compute_visibility(self.schema, self._answers)
        self.navigator.reset()
        self.navigator.sync(self._answers, self._visibility)
        self._fire_step_change(before)
        logger.debug("Session for form '%s' reset", self.schema.id)

    def close(self) -> None:
        """Cancel in-flight async validation."""
        self.scheduler.cancel_all()

    def __repr__(self) -> str:
        return (
            f"FormSession(form_id={self.schema.id!r}, state={self._state.value}, "
            f"step={self.navigator.current_step + 1}/{self.navigator.total_steps})"
        )
