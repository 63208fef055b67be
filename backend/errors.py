"""Typed errors raised by the analysis pipeline.

Each error carries the HTTP status and client-facing label/message that
main.py renders, so the core never needs to know about FastAPI.
"""


class AnalysisError(Exception):
    """Base class for errors surfaced to the API caller."""

    status_code = 500
    error = "Analysis Failed"
    default_message = "An error occurred while analyzing the content. Please try again."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


class ValidationError(AnalysisError):
    """Malformed or out-of-bounds request. Never retried."""

    status_code = 400
    error = "Validation Error"
    default_message = "The request is invalid."


class AiServiceUnavailable(AnalysisError):
    """The AI provider could not be reached or rejected the call."""

    status_code = 503
    error = "AI Service Error"
    default_message = "The AI analysis service is currently unavailable. Please try again later."


class AnalysisFailed(AnalysisError):
    """Generic failure while producing or enriching an analysis."""


class PayloadTooLarge(AnalysisError):
    status_code = 413
    error = "Request payload too large"
    default_message = (
        "The content you are trying to analyze is too large. Please try with a smaller page."
    )
