"""Lifecycle hooks for form-session observability.

Typed event dataclasses + ``FormHooks`` container.  Hook callables
are optional; the fire helpers catch errors so observability
failures never break a form fill.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..utils.logger import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Event dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnswerChangeEvent:
    """Fired after an answer is stored and visibility recomputed."""

    form_id: str
    field: str
    old_value: Any
    new_value: Any


@dataclass(frozen=True)
class VisibilityChangeEvent:
    """Fired when a recompute shows or hides at least one field."""

    form_id: str
    shown: list[str]
    hidden: list[str]


@dataclass(frozen=True)
class StepChangeEvent:
    """Fired when the navigator's current step or step count changes."""

    form_id: str
    previous_step: int
    current_step: int
    total_steps: int
    section_id: str | None


@dataclass(frozen=True)
class DraftSavedEvent:
    """Fired after a draft is written to the draft store."""

    form_id: str
    num_answers: int


@dataclass(frozen=True)
class SubmitStartEvent:
    """Fired once when ``FormSession.submit()`` begins."""

    form_id: str
    num_answers: int


@dataclass(frozen=True)
class SubmitEndEvent:
    """Fired once when ``FormSession.submit()`` ends (complete or invalid)."""

    form_id: str
    status: str
    num_errors: int
    elapsed_seconds: float


# ---------------------------------------------------------------------------
# FormHooks container
# ---------------------------------------------------------------------------


@dataclass
class FormHooks:
    """User-facing hook container, passed to ``FormSession``.

    All fields are optional callables.  Hooks fired from ``submit()`` may be
    sync or async; the others run on synchronous paths and must be sync.
    Hook errors are caught and logged; they never break the session.
    """

    on_answer_change: Optional[Callable[[AnswerChangeEvent], Any]] = None
    on_visibility_change: Optional[Callable[[VisibilityChangeEvent], Any]] = None
    on_step_change: Optional[Callable[[StepChangeEvent], Any]] = None
    on_draft_saved: Optional[Callable[[DraftSavedEvent], Any]] = None
    on_submit_start: Optional[Callable[[SubmitStartEvent], Any]] = None
    on_submit_end: Optional[Callable[[SubmitEndEvent], Any]] = None


# ---------------------------------------------------------------------------
# Fire helpers
# ---------------------------------------------------------------------------


async def _fire_hook(hook: Optional[Callable], event: Any) -> None:
    """Call *hook* with *event*, awaiting if async.  Catches and logs errors."""
    if hook is None:
        return
    try:
        result = hook(event)
        if inspect.isawaitable(result):
            await result
    except Exception:
        logger.warning("Hook %s raised an exception", hook, exc_info=True)


def _fire_hook_sync(hook: Optional[Callable], event: Any) -> None:
    """Call *hook* with *event* on a synchronous path.  Catches and logs errors.

    An async hook cannot be awaited here; its coroutine is closed unrun and
    a warning is logged.
    """
    if hook is None:
        return
    try:
        result = hook(event)
        if inspect.iscoroutine(result):
            result.close()
            logger.warning("Async hook %s cannot run on a synchronous path; skipped", hook)
    except Exception:
        logger.warning("Hook %s raised an exception", hook, exc_info=True)
