"""
Detection service error taxonomy.

ValidationError   - request rejected before the engine runs (empty content)
AnalysisError     - engine-internal failure, surfaced as "Analysis failed"
LookupDegraded    - post-history lookup failed; never surfaced, logged only
StorageError      - persistence unreachable or query failed
"""
from typing import Optional


class DetectionError(Exception):
    """Base class for all service errors."""

    message = "Detection error"

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        self.message = message or self.message
        self.cause = cause
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class ValidationError(DetectionError):
    message = "Content is required for analysis"


class AnalysisError(DetectionError):
    message = "Analysis failed"


class LookupDegraded(DetectionError):
    message = "User activity lookup failed"


class StorageError(DetectionError):
    message = "Storage unavailable"
