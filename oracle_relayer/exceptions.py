"""
Custom exceptions for the oracle relayer.

Every failure in the ingestion and verdict pipeline maps onto one of five
error kinds. All of them are fatal for the current pipeline run; ``retryable``
only tells the caller whether re-running the whole request could succeed.
"""
from typing import Optional


class ErrorKind:
    """Error kind labels used in logs and ``to_dict`` payloads."""
    MALFORMED_INPUT = "malformed_input"
    TRANSIENT_PROVIDER = "transient_provider_failure"
    SCHEMA_VIOLATION = "schema_violation"
    ENCODING_VIOLATION = "encoding_violation"
    MODEL_OUTPUT = "model_output_violation"
    PROVIDER_API = "provider_api_error"


class RelayerError(Exception):
    """Base exception for all relayer errors."""

    kind: str = ErrorKind.MALFORMED_INPUT

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.message = message
        self.retryable = retryable

    def to_dict(self) -> dict:
        """Convert to dictionary for structured logs."""
        return {
            "error_kind": self.kind,
            "error_message": self.message,
            "retryable": self.retryable,
        }


# ============================================
# Malformed Input
# ============================================

class MalformedInputError(RelayerError):
    """Bad URL, unsupported source or invalid caller-supplied value."""
    kind = ErrorKind.MALFORMED_INPUT


class UnsupportedSourceError(MalformedInputError):
    """The proposal URL does not belong to a known governance platform."""

    def __init__(self, message: str = "Unsupported proposal source"):
        super().__init__(message)


class InvalidProposalUrlError(MalformedInputError):
    """The URL belongs to a known platform but carries no proposal identifier."""

    def __init__(self, source_label: str):
        self.source_label = source_label
        super().__init__(f"Invalid {source_label} proposal URL")


class InvalidModelIdError(MalformedInputError):
    """The model identifier does not fit on-chain storage."""
    pass


class MissingCredentialsError(MalformedInputError):
    """A required API key is not configured."""
    pass


# ============================================
# Transient Provider Failure
# ============================================

class TransientProviderError(RelayerError):
    """Upstream returned 429/500 and the retry budget is exhausted."""
    kind = ErrorKind.TRANSIENT_PROVIDER

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, retryable=True)
        self.status_code = status_code


# ============================================
# Schema Violation
# ============================================

class SchemaViolationError(RelayerError):
    """Upstream data does not have the expected shape."""
    kind = ErrorKind.SCHEMA_VIOLATION


class GraphQLAPIError(SchemaViolationError):
    """GraphQL endpoint returned a non-2xx status or a populated ``errors`` array."""

    def __init__(self, message: str, status_code: int, response: Optional[dict] = None):
        super().__init__(message, retryable=status_code in (429, 500))
        self.status_code = status_code
        self.response = response


class ProposalNotFoundError(SchemaViolationError):
    """Proposal or governor lookup returned nothing."""
    pass


# ============================================
# Encoding Violation
# ============================================

class EncodingViolationError(RelayerError):
    """A value cannot be encoded for on-chain storage without losing data."""
    kind = ErrorKind.ENCODING_VIOLATION


class ProposalTooLongError(EncodingViolationError):
    """Canonical proposal header alone exceeds the byte budget."""

    def __init__(self, message: str = "Proposal text too long for on-chain storage"):
        super().__init__(message)


class ReceiptEncodingError(EncodingViolationError):
    """Receipt merkle root cannot be decoded into 32 bytes."""
    pass


# ============================================
# Model Output Violation
# ============================================

class ModelOutputError(RelayerError):
    """Model response cannot be turned into a valid verdict."""
    kind = ErrorKind.MODEL_OUTPUT


class EmptyModelResponseError(ModelOutputError):
    """Inference API returned no response text."""

    def __init__(self, message: str = "Empty model response"):
        super().__init__(message)


class JsonNotFoundError(ModelOutputError):
    """No ``{ ... }`` span in the model response."""

    def __init__(self, message: str = "Could not find JSON in model response"):
        super().__init__(message)


class JsonParseError(ModelOutputError):
    """The ``{ ... }`` span is not a valid JSON object."""

    def __init__(self, message: str = "Could not parse JSON from model response"):
        super().__init__(message)


class MissingFieldError(ModelOutputError):
    """A required field is absent or empty."""
    pass


class InvalidFieldError(ModelOutputError):
    """A field is present but has an unexpected value or type."""
    pass


class SummaryTooLongError(ModelOutputError):
    """Summary exceeds the word or character cap."""

    def __init__(self, message: str = "Summary too long"):
        super().__init__(message)


# ============================================
# Provider API
# ============================================

class AmbientApiError(RelayerError):
    """Inference API answered with a non-2xx status."""
    kind = ErrorKind.PROVIDER_API

    TRANSIENT_STATUSES = (429, 500)

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(
            f"Ambient API error {status}: {body}",
            retryable=status in self.TRANSIENT_STATUSES,
        )

    @property
    def is_transient(self) -> bool:
        """True for provider statuses that callers treat as recoverable."""
        return self.status in self.TRANSIENT_STATUSES


# ============================================
# Exception Classification Helpers
# ============================================

def is_transient_provider_failure(error: Exception) -> bool:
    """Check if an exception is a rate limit or provider-side 500."""
    if isinstance(error, AmbientApiError):
        return error.is_transient
    if isinstance(error, GraphQLAPIError):
        return error.status_code in (429, 500)
    return isinstance(error, TransientProviderError)
