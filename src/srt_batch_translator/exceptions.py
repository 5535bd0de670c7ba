"""Exception hierarchy for subtitle translation.

Job-level errors are caught by the scheduler and recorded against a single
job. Run-level errors (``RunAbort`` subclasses) stop the run before any job
is started.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class TranslatorError(Exception):
    """Base error with optional code and details."""

    code = "translator_error"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        if code is not None:
            self.code = code
        self.details = details or {}


class MalformedDocument(TranslatorError):
    """No cue blocks could be recognized in the input."""

    code = "malformed_document"


class ReconstructionUnderflow(TranslatorError):
    """Fewer translated lines than text slots (strict reconstruction)."""

    code = "reconstruction_underflow"


class ReconstructionOverflow(TranslatorError):
    """More translated lines than text slots (strict reconstruction)."""

    code = "reconstruction_overflow"


class PostconditionViolation(TranslatorError):
    """Translated output does not have the source's line count."""

    code = "postcondition_violation"


class BackendError(TranslatorError):
    """Base class for translation backend failures."""

    code = "backend_error"


class BackendUnavailable(BackendError):
    """Backend call failed (non-2xx status, transport error, non-zero exit)."""

    code = "backend_unavailable"

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class EmptyResponse(BackendError):
    """Backend call succeeded but returned no usable translation."""

    code = "empty_response"


class RunAbort(TranslatorError):
    """Errors that abort the whole run before any job starts."""

    code = "run_abort"


class CredentialsUnavailable(RunAbort):
    """No credential source yields both an access key and a secret key."""

    code = "credentials_unavailable"


class PrerequisiteMissing(RunAbort):
    """A required external tool or setting is missing."""

    code = "prerequisite_missing"


# Errors that fail one job without stopping the others
JOB_ERRORS = (
    MalformedDocument,
    ReconstructionUnderflow,
    ReconstructionOverflow,
    PostconditionViolation,
    BackendError,
    OSError,
    UnicodeDecodeError,
)
