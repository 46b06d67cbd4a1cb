"""Exception hierarchy for emr-copilot."""


class CopilotError(Exception):
    """Base exception for all emr-copilot errors."""


class PreconditionError(CopilotError):
    """Raised when a pipeline run cannot start (missing credential, wrong host page)."""


class GenerationError(CopilotError):
    """Raised when the text-generation endpoint cannot produce a response."""


class TransportError(GenerationError):
    """Network or endpoint failure, including errors reported by the endpoint itself."""


class RetryableError(TransportError):
    """Rate limits, timeouts and 5xx responses; retried with backoff."""


class NonRetryableError(TransportError):
    """Auth errors, bad requests and other non-429 4xx; not retried."""


class ResponseRecoveryError(CopilotError):
    """Base class for failures turning endpoint text into a structured result."""

    def __init__(self, message: str, raw_response: str = "") -> None:
        super().__init__(message)
        self.raw_response = raw_response


class TruncatedResponseError(ResponseRecoveryError):
    """The endpoint stopped at its output length limit."""


class MalformedResponseError(ResponseRecoveryError):
    """Brace mismatch, unclosed string, or text unparsable after sanitization."""


class SchemaValidationError(ResponseRecoveryError):
    """Parsed structure is missing required fields."""


class InsertionNotFoundError(CopilotError):
    """No matching field or billing table was located in the page."""
