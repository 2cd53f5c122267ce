"""Multi-step navigation over visible sections."""

from .navigator import NavigationMode, NavigationResult, Step, StepNavigator, StepTransition

__all__ = [
    "StepNavigator",
    "StepTransition",
    "NavigationResult",
    "NavigationMode",
    "Step",
]
