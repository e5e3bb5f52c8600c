from __future__ import annotations


class AnalysisError(RuntimeError):
    kind = "analysis_error"
    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class InvalidSchemaError(AnalysisError):
    """An analysis result broke its own contract. Never coerced into a success."""

    kind = "invalid_schema"
    status_code = 502

    def __init__(self, field: str, message: str):
        super().__init__(f"Invalid {field}: {message}")
        self.field = field


class AnalysisTimeoutError(AnalysisError):
    kind = "timeout"
    status_code = 408


class UnexpectedAnalysisError(AnalysisError):
    kind = "unexpected_failure"
    status_code = 500


class EnrichmentUnavailable(AnalysisError):
    # Absorbed inside the market pulse fetcher; never reaches a caller.
    kind = "enrichment_unavailable"
    status_code = 503


class ResumeInputError(ValueError):
    def __init__(self, message: str, *, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class UnsupportedResumeFile(ResumeInputError):
    def __init__(self, message: str):
        super().__init__(message, status_code=415)
