"""
Formflow - Form Schema Runtime

Interprets JSON form schemas at fill time: compiles validation rules,
evaluates show/hide conditions, drives multi-step navigation and runs the
draft/submit lifecycle of a form session.
"""

from .core import (
    FormflowError,
    FormHooks,
    JsonFileDraftStore,
    KeyValueDraftStore,
    RuntimeConfig,
    SchemaConfigurationError,
    SessionStateError,
    StorageError,
    SubmissionError,
    UnknownFieldError,
)
from .schemas import FormSchema, FormSubmission, SchemaBuilder, SubmissionStatus, ValidationError, load_schema
from .conditions import Visibility, compute_visibility, evaluate
from .validation import AsyncValidationScheduler, ValidationCompiler, compile_field
from .navigation import StepNavigator, StepTransition
from .core.session import FormSession, SessionState

__version__ = "0.1.0"
__author__ = "Formflow Team"

__all__ = [
    'FormSession',
    'SessionState',
    'FormSchema',
    'FormSubmission',
    'SubmissionStatus',
    'ValidationError',
    'SchemaBuilder',
    'load_schema',
    'ValidationCompiler',
    'compile_field',
    'AsyncValidationScheduler',
    'Visibility',
    'compute_visibility',
    'evaluate',
    'StepNavigator',
    'StepTransition',
    'RuntimeConfig',
    'FormHooks',
    'KeyValueDraftStore',
    'JsonFileDraftStore',
    'FormflowError',
    'SchemaConfigurationError',
    'SubmissionError',
    'StorageError',
    'SessionStateError',
    'UnknownFieldError',
]
