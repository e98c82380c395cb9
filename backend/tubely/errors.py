"""
Error taxonomy for the Tubely API
"""

from typing import Any, Dict, Optional
from datetime import datetime, timezone


class TubelyError(Exception):
    """Base exception for errors surfaced through the HTTP layer"""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None, details: Dict[str, Any] = None):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()

    @property
    def public_message(self) -> str:
        """Message that is safe to return to the caller"""
        if self.status_code >= 500:
            return "Internal server error"
        return self.message


class ValidationFailure(TubelyError):
    status_code = 400
    error_code = "VALIDATION_FAILED"


class UploadTooLarge(ValidationFailure):
    status_code = 413
    error_code = "FILE_TOO_LARGE"


class VideoNotFound(ValidationFailure):
    status_code = 404
    error_code = "VIDEO_NOT_FOUND"


class AuthFailure(TubelyError):
    status_code = 401
    error_code = "UNAUTHORIZED"


class PipelineFailure(TubelyError):
    """A stage of the upload pipeline aborted the run"""

    stage: str = "unknown"

    def __init__(self, message: str, cause: Optional[BaseException] = None, details: Dict[str, Any] = None):
        super().__init__(message, details=details)
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} ({self.stage}): {self.cause}"
        return f"{self.message} ({self.stage})"


class StagingFailure(PipelineFailure):
    stage = "staging"
    error_code = "STAGING_FAILED"


class ProbeFailure(PipelineFailure):
    stage = "probe"
    error_code = "PROBE_FAILED"


class RemuxFailure(PipelineFailure):
    stage = "remux"
    error_code = "REMUX_FAILED"


class PublishFailure(PipelineFailure):
    stage = "publish"
    error_code = "PUBLISH_FAILED"


class PersistFailure(PipelineFailure):
    stage = "finalize"
    error_code = "PERSIST_FAILED"


class SigningFailure(PipelineFailure):
    stage = "sign"
    error_code = "SIGNING_FAILED"
