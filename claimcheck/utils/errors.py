"""Error handling utilities for the claim verification service."""

from dataclasses import dataclass
from typing import Optional, Dict, Any
from enum import Enum


class ErrorType(Enum):
    """Enumeration of error types in the claim verification service."""

    # Bedrock API Errors
    BEDROCK_RATE_LIMIT = "BEDROCK_RATE_LIMIT"
    BEDROCK_TIMEOUT = "BEDROCK_TIMEOUT"
    BEDROCK_AUTH_ERROR = "BEDROCK_AUTH_ERROR"
    BEDROCK_MODEL_ERROR = "BEDROCK_MODEL_ERROR"
    BEDROCK_INVALID_REQUEST = "BEDROCK_INVALID_REQUEST"
    BEDROCK_SERVICE_ERROR = "BEDROCK_SERVICE_ERROR"

    # Upload Errors
    MISSING_UPLOAD = "MISSING_UPLOAD"
    UPLOAD_TOO_LARGE = "UPLOAD_TOO_LARGE"

    # Document Processing Errors
    PDF_EXTRACTION_FAILED = "PDF_EXTRACTION_FAILED"
    EXIF_EXTRACTION_FAILED = "EXIF_EXTRACTION_FAILED"
    UNRECOGNIZED_DOCUMENT_TYPE = "UNRECOGNIZED_DOCUMENT_TYPE"

    # Model Errors
    EXTRACTION_SERVICE_ERROR = "EXTRACTION_SERVICE_ERROR"
    SCORING_SERVICE_ERROR = "SCORING_SERVICE_ERROR"
    MALFORMED_MODEL_RESPONSE = "MALFORMED_MODEL_RESPONSE"

    # Verification Errors
    INVALID_DATE = "INVALID_DATE"
    CLAIM_CONTEXT_MISSING = "CLAIM_CONTEXT_MISSING"

    # Configuration Errors
    CONFIG_MISSING = "CONFIG_MISSING"
    CONFIG_INVALID = "CONFIG_INVALID"

    # General Errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


@dataclass
class ErrorContext:
    """
    Context information for errors in the claim verification service.

    Attributes:
        error_type: Type of error from ErrorType enum
        message: Human-readable error message (logged, not always returned)
        details: Optional additional error details
        original_exception: Optional original exception that caused this error
    """

    error_type: ErrorType
    message: str
    details: Optional[Dict[str, Any]] = None
    original_exception: Optional[Exception] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error context to dictionary for logging/serialization.

        Returns:
            Dictionary representation of error context
        """
        return {
            "error_type": self.error_type.value,
            "message": self.message,
            "details": self.details or {},
            "original_exception": str(self.original_exception) if self.original_exception else None
        }


class ClaimsProcessingError(Exception):
    """
    Base exception for all claim verification errors.

    Every subclass declares the HTTP status it maps to and the short
    message that is safe to show to a caller. The full message stays in
    the context for logging.

    Attributes:
        context: ErrorContext with detailed error information
    """

    error_type = ErrorType.UNKNOWN_ERROR
    status_code = 500
    public_message: Optional[str] = None

    def __init__(self, context: ErrorContext):
        """
        Initialize claims processing error.

        Args:
            context: ErrorContext with error details
        """
        self.context = context
        super().__init__(context.message)

    @classmethod
    def build(
        cls,
        message: str,
        error: Optional[Exception] = None,
        **details: Any
    ) -> "ClaimsProcessingError":
        """Create an instance using the subclass's default error type."""
        context = ErrorContext(
            error_type=cls.error_type,
            message=message,
            details=details or None,
            original_exception=error
        )
        return cls(context)

    @property
    def user_message(self) -> str:
        """Short message that can be returned to API callers."""
        return self.public_message or self.context.message

    def __str__(self) -> str:
        """String representation of the error."""
        return f"{self.context.error_type.value}: {self.context.message}"

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of error
        """
        return self.context.to_dict()


class MissingUpload(ClaimsProcessingError):
    """A required multipart upload was absent or empty."""
    error_type = ErrorType.MISSING_UPLOAD
    status_code = 400


class UploadTooLarge(ClaimsProcessingError):
    """An upload exceeded the configured per-file size limit."""
    error_type = ErrorType.UPLOAD_TOO_LARGE
    status_code = 413


class ClaimContextMissing(ClaimsProcessingError):
    """A verification call arrived before any claim was submitted in the session."""
    error_type = ErrorType.CLAIM_CONTEXT_MISSING
    status_code = 400


class InvalidDate(ClaimsProcessingError):
    """A claim or capture date could not be parsed or was absent."""
    error_type = ErrorType.INVALID_DATE
    status_code = 400


class UnrecognizedDocumentType(ClaimsProcessingError):
    """Document text carries none of the known sentinel labels."""
    error_type = ErrorType.UNRECOGNIZED_DOCUMENT_TYPE
    status_code = 422
    public_message = "Error processing PDF: unrecognized document type."


class DocumentExtractionError(ClaimsProcessingError):
    """The uploaded PDF could not be turned into text."""
    error_type = ErrorType.PDF_EXTRACTION_FAILED
    public_message = "Error processing PDF."

    @classmethod
    def pdf_extraction_failed(
        cls,
        filename: str,
        error: Exception
    ) -> "DocumentExtractionError":
        """
        Create error for PDF extraction failure.

        Args:
            filename: Name of PDF file
            error: Original exception

        Returns:
            DocumentExtractionError instance
        """
        return cls.build(
            f"Failed to extract text from PDF '{filename}': {str(error)}",
            error=error,
            filename=filename
        )


class MetadataReadError(ClaimsProcessingError):
    """The uploaded image could not be decoded."""
    error_type = ErrorType.EXIF_EXTRACTION_FAILED
    public_message = "Error processing image."


class ExtractionServiceError(ClaimsProcessingError):
    """The text-understanding call for claim field extraction failed."""
    error_type = ErrorType.EXTRACTION_SERVICE_ERROR
    public_message = "Error processing PDF."


class ScoringServiceError(ClaimsProcessingError):
    """The vision-understanding call for image matching failed."""
    error_type = ErrorType.SCORING_SERVICE_ERROR
    public_message = "Error processing image."


class MalformedModelResponse(ClaimsProcessingError):
    """The model reply could not be parsed into the expected structure."""
    error_type = ErrorType.MALFORMED_MODEL_RESPONSE
    public_message = "The model returned an unreadable response."


class ConfigurationError(ClaimsProcessingError):
    """Required configuration is missing or invalid."""
    error_type = ErrorType.CONFIG_MISSING


class BedrockAPIError(ClaimsProcessingError):
    """Exception for AWS Bedrock API errors."""
    error_type = ErrorType.BEDROCK_SERVICE_ERROR
    public_message = "Upstream model service error."

    @classmethod
    def from_client_error(
        cls,
        error: Exception,
        operation: str
    ) -> "BedrockAPIError":
        """
        Create BedrockAPIError from boto3 ClientError.

        Args:
            error: Original boto3 ClientError
            operation: Description of operation that failed

        Returns:
            BedrockAPIError instance
        """
        # Extract error details from boto3 ClientError
        error_code = "Unknown"
        error_message = str(error)

        if hasattr(error, 'response'):
            error_info = error.response.get("Error", {})
            error_code = error_info.get("Code", "Unknown")
            error_message = error_info.get("Message", str(error))

        # Map error codes to error types
        error_type_map = {
            "ThrottlingException": ErrorType.BEDROCK_RATE_LIMIT,
            "TooManyRequestsException": ErrorType.BEDROCK_RATE_LIMIT,
            "RequestTimeout": ErrorType.BEDROCK_TIMEOUT,
            "RequestTimeoutException": ErrorType.BEDROCK_TIMEOUT,
            "UnauthorizedException": ErrorType.BEDROCK_AUTH_ERROR,
            "AccessDeniedException": ErrorType.BEDROCK_AUTH_ERROR,
            "ValidationException": ErrorType.BEDROCK_INVALID_REQUEST,
            "ModelNotReadyException": ErrorType.BEDROCK_MODEL_ERROR,
            "ModelTimeoutException": ErrorType.BEDROCK_TIMEOUT,
            "ServiceUnavailableException": ErrorType.BEDROCK_SERVICE_ERROR,
            "InternalServerException": ErrorType.BEDROCK_SERVICE_ERROR,
        }

        error_type = error_type_map.get(error_code, ErrorType.BEDROCK_SERVICE_ERROR)

        context = ErrorContext(
            error_type=error_type,
            message=f"Bedrock API error during {operation}: {error_message}",
            details={
                "error_code": error_code,
                "operation": operation
            },
            original_exception=error
        )

        return cls(context)
