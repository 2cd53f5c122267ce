"""Per-field asynchronous validation (e.g. uniqueness checks).

Requests are per-blur and debounced: a newer request for the same field
cancels the pending one.  Results are last-write-wins by *value*: when a
result arrives for a value the field no longer holds, it is discarded.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from ..conditions.evaluator import values_equal
from ..core.config import RuntimeConfig
from ..schemas.submission import ValidationError
from ..utils.logger import get_logger

logger = get_logger(__name__)

# fn(value, answers) -> message | ValidationError | list of them | None
AsyncValidator = Callable[[Any, Mapping[str, Any]], Union[Awaitable[Any], Any]]

_MISSING = object()


def _coerce_errors(field: str, raw: Any) -> list[ValidationError]:
    """Normalise a validator's return value into error records."""
    if raw is None or raw is True or raw == "" or raw == []:
        return []
    if raw is False:
        return [ValidationError(field=field, type="custom", message="Validation failed", rule="async")]
    if isinstance(raw, str):
        return [ValidationError(field=field, type="custom", message=raw, rule="async")]
    if isinstance(raw, ValidationError):
        return [raw]
    if isinstance(raw, (list, tuple)):
        errors: list[ValidationError] = []
        for item in raw:
            errors.extend(_coerce_errors(field, item))
        return errors
    return [ValidationError(field=field, type="custom", message=str(raw), rule="async")]


class AsyncValidationScheduler:
    """Runs registered async validators for one form session.

    Args:
        config: Optional :class:`RuntimeConfig` (debounce and timeout).
        validators: Initial ``field name -> validator`` registrations.
    """

    def __init__(
        self,
        config: RuntimeConfig | None = None,
        validators: Optional[Mapping[str, AsyncValidator]] = None,
    ):
        self._config = config or RuntimeConfig()
        self._validators: dict[str, AsyncValidator] = dict(validators or {})
        self._tasks: dict[str, asyncio.Task] = {}
        self._latest: dict[str, Any] = {}
        self._validated: dict[str, Any] = {}
        self._errors: dict[str, list[ValidationError]] = {}

    # -- registration ----------------------------------------------------

    def register(self, name: str, fn: AsyncValidator) -> None:
        """Register *fn* as the async validator for field *name*."""
        self._validators[name] = fn

    def has_validator(self, name: str) -> bool:
        return name in self._validators

    @property
    def field_names(self) -> list[str]:
        return list(self._validators)

    @property
    def pending(self) -> list[str]:
        """Fields with a validation still in flight."""
        return [name for name, task in self._tasks.items() if not task.done()]

    # -- value tracking --------------------------------------------------

    def note_value(self, name: str, value: Any) -> None:
        """Record the field's newest value; results for older values become stale."""
        if name in self._validators:
            self._latest[name] = value

    def errors_for(self, name: str, current_value: Any = _MISSING) -> list[ValidationError]:
        """Async errors for *name*, if they were computed for *current_value*."""
        if name not in self._errors:
            return []
        if current_value is not _MISSING and not values_equal(self._validated.get(name), current_value):
            return []
        return list(self._errors[name])

    def _is_stale(self, name: str, value: Any) -> bool:
        return not values_equal(self._latest.get(name, _MISSING), value)

    # -- execution -------------------------------------------------------

    def schedule(self, name: str, value: Any, answers: Mapping[str, Any]) -> Optional[asyncio.Task]:
        """Debounced request (one per blur).  Must be called inside a running loop.

        Returns:
            The scheduled task, or None when *name* has no validator.
        """
        if name not in self._validators:
            return None
        self._latest[name] = value
        self._cancel(name)

        loop = asyncio.get_running_loop()
        task = loop.create_task(
            self._run(name, value, dict(answers), self._config.async_debounce_seconds)
        )
        self._tasks[name] = task
        task.add_done_callback(lambda t, n=name: self._forget(n, t))
        return task

    async def run_now(self, name: str, value: Any, answers: Mapping[str, Any]) -> list[ValidationError]:
        """Run *name*'s validator immediately (no debounce) and return its errors."""
        if name not in self._validators:
            return []
        self._latest[name] = value
        self._cancel(name)
        return await self._run(name, value, dict(answers), 0.0)

    async def _run(self, name: str, value: Any, answers: dict[str, Any], delay: float) -> list[ValidationError]:
        if delay > 0:
            await asyncio.sleep(delay)

        fn = self._validators[name]
        try:
            raw = await asyncio.wait_for(self._call(fn, value, answers), self._config.async_timeout_seconds)
            errors = _coerce_errors(name, raw)
        except asyncio.TimeoutError:
            logger.warning("Async validation for '%s' timed out", name)
            errors = [ValidationError(field=name, type="custom", message="Validation timed out", rule="async")]
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.warning("Async validator for '%s' raised an exception", name, exc_info=True)
            errors = [ValidationError(field=name, type="custom", message="Validation failed", rule="async")]

        if self._is_stale(name, value):
            logger.debug("Discarding stale async validation result for '%s'", name)
            return []

        self._validated[name] = value
        self._errors[name] = errors
        return errors

    @staticmethod
    async def _call(fn: AsyncValidator, value: Any, answers: dict[str, Any]) -> Any:
        # Sync validators go to the default executor so they never block the loop
        if inspect.iscoroutinefunction(fn):
            return await fn(value, answers)
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, fn, value, answers)
        if inspect.isawaitable(result):
            result = await result
        return result

    def _cancel(self, name: str) -> None:
        task = self._tasks.pop(name, None)
        if task is not None and not task.done():
            task.cancel()

    def _forget(self, name: str, task: asyncio.Task) -> None:
        if self._tasks.get(name) is task:
            del self._tasks[name]

    async def drain(self) -> None:
        """Wait for every in-flight validation to settle."""
        tasks = list(self._tasks.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def cancel_all(self) -> None:
        """Discard in-flight validations.  Stored results are left untouched."""
        for name in list(self._tasks):
            self._cancel(name)

    def clear(self) -> None:
        """Cancel everything and forget all results and tracked values."""
        self.cancel_all()
        self._latest.clear()
        self._validated.clear()
        self._errors.clear()
