"""StepNavigator: groups visible sections into steps and gates movement.

Two modes:

- ``single_page``: one step holding every visible section.
- ``wizard`` (``settings.multiStep``): one step per *currently visible*
  section.  Steps are renumbered whenever visibility changes; the navigator
  remembers the section the user is on, not just the index.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Mapping, Optional

from ..conditions.evaluator import Visibility, compute_visibility
from ..schemas.form import FormSchema, FormSection
from ..schemas.submission import ValidationError
from ..utils.logger import get_logger
from ..validation.compiler import ValidationCompiler

logger = get_logger(__name__)

NavigationMode = Literal["single_page", "wizard"]


class StepTransition(str, Enum):
    ADVANCED = "advanced"
    RETREATED = "retreated"
    BLOCKED = "blocked"
    COMPLETE = "complete"
    """``next()`` on the last step: hand off to submission"""


@dataclass(frozen=True)
class Step:
    """One page of the form.

    Attributes:
        index: Position among the currently visible steps.
        section_ids: Sections shown on this page, in schema order.
        title: Display title (the section title in wizard mode).
    """

    index: int
    section_ids: tuple[str, ...]
    title: str


@dataclass(frozen=True)
class NavigationResult:
    """Outcome of a navigation request.

    Attributes:
        transition: What happened.
        current_step: Step index after the request.
        errors: Validation errors that blocked the move (empty otherwise).
    """

    transition: StepTransition
    current_step: int
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def allowed(self) -> bool:
        return self.transition != StepTransition.BLOCKED


class StepNavigator:
    """Tracks the current step of one fill session.

    Args:
        schema: The form schema.
        compiler: Compiled validators for *schema*, used to gate ``next()``.
        mode: Override the mode implied by ``schema.settings.multi_step``.
    """

    def __init__(
        self,
        schema: FormSchema,
        compiler: ValidationCompiler,
        mode: Optional[NavigationMode] = None,
    ):
        self.schema = schema
        self.compiler = compiler
        self.mode: NavigationMode = mode or ("wizard" if schema.settings.multi_step else "single_page")
        self._positions = {section.id: pos for pos, section in enumerate(schema.sections)}
        self._visibility = compute_visibility(schema, {})
        self._steps: list[Step] = self._build_steps(self._visibility)
        self._index = 0
        self._anchor: Optional[str] = self._first_section(0)

    # -- step list -------------------------------------------------------

    def _build_steps(self, visibility: Visibility) -> list[Step]:
        visible = [s for s in self.schema.sections if visibility.is_section_visible(s.id)]
        if self.mode == "single_page":
            return [Step(index=0, section_ids=tuple(s.id for s in visible), title=self.schema.title)]
        return [Step(index=i, section_ids=(s.id,), title=s.title) for i, s in enumerate(visible)]

    def _first_section(self, index: int) -> Optional[str]:
        if 0 <= index < len(self._steps) and self._steps[index].section_ids:
            return self._steps[index].section_ids[0]
        return None

    def _index_for_anchor(self) -> int:
        if not self._steps:
            return 0
        if self.mode == "single_page" or self._anchor is None:
            return min(self._index, len(self._steps) - 1)

        anchor_pos = self._positions.get(self._anchor, -1)
        for step in self._steps:
            # Same section if still visible, else the nearest later one
            if self._positions[step.section_ids[0]] >= anchor_pos:
                return step.index
        return len(self._steps) - 1

    def sync(self, answers: Mapping[str, Any] | None = None, visibility: Visibility | None = None) -> bool:
        """Recompute the visible-step list after an answer change.

        Keeps the user on the same section when it is still visible,
        otherwise moves to the nearest later visible step, which then
        becomes the current section.

        Returns:
            True if the current step index or the step count changed.
        """
        if visibility is None:
            visibility = compute_visibility(self.schema, answers or {})
        before = (self._index, len(self._steps))

        self._visibility = visibility
        self._steps = self._build_steps(visibility)
        self._index = self._index_for_anchor()
        if self._steps:
            self._anchor = self._first_section(self._index)

        changed = before != (self._index, len(self._steps))
        if changed:
            logger.debug(
                "Steps resynced for form '%s': step %d/%d -> %d/%d",
                self.schema.id, before[0], before[1], self._index, len(self._steps),
            )
        return changed

    # -- state -----------------------------------------------------------

    @property
    def steps(self) -> list[Step]:
        return list(self._steps)

    @property
    def total_steps(self) -> int:
        return len(self._steps)

    @property
    def current_step(self) -> int:
        return self._index

    @property
    def current_sections(self) -> list[FormSection]:
        if not self._steps:
            return []
        return [self.schema.get_section(sid) for sid in self._steps[self._index].section_ids]

    @property
    def current_section(self) -> Optional[FormSection]:
        """The section on the current step (wizard mode); None in single-page mode."""
        if self.mode == "single_page":
            return None
        sections = self.current_sections
        return sections[0] if sections else None

    @property
    def is_first_step(self) -> bool:
        return self._index == 0

    @property
    def is_last_step(self) -> bool:
        return self._index >= len(self._steps) - 1

    @property
    def progress(self) -> float:
        """``(current_step + 1) / total_steps`` for progress indicators."""
        if not self._steps:
            return 0.0
        return (self._index + 1) / len(self._steps)

    def step_field_names(self, index: int | None = None) -> list[str]:
        """Visible field names on a step (the current one by default)."""
        index = self._index if index is None else index
        if not 0 <= index < len(self._steps):
            return []
        names: list[str] = []
        for sid in self._steps[index].section_ids:
            for f in self.schema.get_section(sid).fields:
                if self._visibility.is_field_visible(f.name):
                    names.append(f.name)
        return names

    def step_errors(
        self,
        answers: Mapping[str, Any],
        index: int | None = None,
    ) -> list[ValidationError]:
        return self.compiler.validate_fields(self.step_field_names(index), answers, self._visibility)

    # -- transitions -----------------------------------------------------

    def _move_to(self, index: int) -> None:
        self._index = max(0, min(index, len(self._steps) - 1)) if self._steps else 0
        self._anchor = self._first_section(self._index)

    def next(self, answers: Mapping[str, Any], visibility: Visibility | None = None) -> NavigationResult:
        """Advance one step if the current step's visible fields are error-free.

        On the last step a successful ``next()`` returns ``COMPLETE`` and
        stays put; submission takes over from there.
        """
        self.sync(answers, visibility)

        errors = self.step_errors(answers)
        if errors:
            logger.debug("Step %d of form '%s' blocked by %d error(s)", self._index, self.schema.id, len(errors))
            return NavigationResult(StepTransition.BLOCKED, self._index, errors)

        if self.is_last_step:
            return NavigationResult(StepTransition.COMPLETE, self._index)

        self._move_to(self._index + 1)
        return NavigationResult(StepTransition.ADVANCED, self._index)

    def previous(self) -> NavigationResult:
        """Go back one step; always allowed, clamped to the first step."""
        self._move_to(self._index - 1)
        return NavigationResult(StepTransition.RETREATED, self._index)

    def go_to(
        self,
        index: int,
        answers: Mapping[str, Any],
        visibility: Visibility | None = None,
    ) -> NavigationResult:
        """Jump to *index*.

        Moving backwards is always allowed.  Moving forwards requires every
        step before *index* to be valid; the first invalid step blocks the
        jump and its errors are returned.
        """
        self.sync(answers, visibility)
        if not self._steps:
            return NavigationResult(StepTransition.BLOCKED, self._index)

        target = max(0, min(index, len(self._steps) - 1))
        if target <= self._index:
            self._move_to(target)
            return NavigationResult(StepTransition.RETREATED, self._index)

        for i in range(target):
            errors = self.step_errors(answers, i)
            if errors:
                return NavigationResult(StepTransition.BLOCKED, self._index, errors)

        self._move_to(target)
        return NavigationResult(StepTransition.ADVANCED, self._index)

    def reset(self) -> None:
        """Return to the first step."""
        self._move_to(0)
