"""
Unified configuration for the formflow runtime.

Consolidates the runtime's tunables into a single, well-documented
configuration class with sensible defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Optional


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class RuntimeConfig:
    """
    Configuration shared by the validation compiler, the async validation
    scheduler, and form sessions.
    """

    # === Async Validation ===
    async_debounce_seconds: float = 0.3
    """Delay before a scheduled async field validation actually runs"""

    async_timeout_seconds: float = 10.0
    """Upper bound for a single async validator call"""

    # === Validation Rules ===
    step_tolerance: float = 1e-9
    """Floating-point slack when checking number ``step`` multiples"""

    enforce_options: bool = True
    """Reject select/radio/checkbox answers that are not declared options"""

    strip_whitespace: bool = True
    """Treat whitespace-only strings as empty for the required check"""

    # === Submission ===
    include_unanswered: bool = True
    """Visible but unanswered fields appear in submission data as None"""

    # === Drafts ===
    draft_dir: Optional[str] = None
    """Directory for ``JsonFileDraftStore`` (None = caller supplies a store)"""

    # === Logging Configuration ===
    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"""

    log_dir: Optional[str] = None
    """Directory for log files (None = no file logging)"""

    # === Validation ===
    def __post_init__(self):
        """Validate configuration values after initialization."""
        if self.async_debounce_seconds < 0:
            raise ValueError(
                f"async_debounce_seconds must be non-negative, got {self.async_debounce_seconds}"
            )

        if self.async_timeout_seconds <= 0:
            raise ValueError(
                f"async_timeout_seconds must be positive, got {self.async_timeout_seconds}"
            )

        if not 0.0 <= self.step_tolerance < 1.0:
            raise ValueError(f"step_tolerance must be in [0.0, 1.0), got {self.step_tolerance}")

        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {_LOG_LEVELS}, got {self.log_level!r}")

    @classmethod
    def for_development(cls) -> RuntimeConfig:
        """Create configuration optimized for development."""
        return cls(
            async_debounce_seconds=0.1,  # Snappier feedback
            log_level="DEBUG",
        )

    @classmethod
    def for_production(cls) -> RuntimeConfig:
        """Create configuration optimized for production."""
        return cls(
            async_debounce_seconds=0.5,  # Fewer collaborator round-trips
            async_timeout_seconds=5.0,
            log_level="WARNING",
        )

    @classmethod
    def for_testing(cls) -> RuntimeConfig:
        """Create configuration for test suites (no debounce delay)."""
        return cls(
            async_debounce_seconds=0.0,
            async_timeout_seconds=1.0,
            log_level="DEBUG",
        )

    @classmethod
    def from_env(cls, prefix: str = "FORMFLOW_") -> RuntimeConfig:
        """Build a configuration from ``<prefix><FIELD_NAME>`` environment variables.

        Unset variables keep their defaults.  Booleans accept
        ``1/true/yes/on`` (case-insensitive).
        """
        overrides: dict = {}
        for f in fields(cls):
            raw = os.environ.get(f"{prefix}{f.name.upper()}")
            if raw is None:
                continue
            default = f.default
            if isinstance(default, bool):
                overrides[f.name] = raw.strip().lower() in ("1", "true", "yes", "on")
            elif isinstance(default, float):
                overrides[f.name] = float(raw)
            else:
                overrides[f.name] = raw
        return cls(**overrides)
