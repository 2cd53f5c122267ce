"""
Core functionality for the formflow runtime: configuration, errors,
lifecycle hooks and draft storage.  ``FormSession`` lives in
:mod:`formflow.core.session`.
"""

from .config import RuntimeConfig
from .exceptions import (
    FormflowError,
    SchemaConfigurationError,
    SessionStateError,
    StorageError,
    SubmissionError,
    UnknownFieldError,
)
from .hooks import FormHooks
from .storage import DraftStore, JsonFileDraftStore, KeyValueDraftStore, draft_key

__all__ = [
    'RuntimeConfig',
    'FormflowError',
    'SchemaConfigurationError',
    'SessionStateError',
    'StorageError',
    'SubmissionError',
    'UnknownFieldError',
    'FormHooks',
    'DraftStore',
    'JsonFileDraftStore',
    'KeyValueDraftStore',
    'draft_key',
]
