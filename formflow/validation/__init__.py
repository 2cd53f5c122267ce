"""Field validation: compiled checkers, async validators, display helpers."""

from .async_validation import AsyncValidationScheduler, AsyncValidator
from .compiler import FieldChecker, ValidationCompiler, compile_field, is_empty
from .display import describe_rules, display_value, normalize_answers
from .formats import is_valid_email, is_valid_phone, is_valid_url

__all__ = [
    "ValidationCompiler",
    "FieldChecker",
    "compile_field",
    "is_empty",
    "AsyncValidationScheduler",
    "AsyncValidator",
    "describe_rules",
    "display_value",
    "normalize_answers",
    "is_valid_email",
    "is_valid_url",
    "is_valid_phone",
]
