"""
Module 01 - Schemas
File: errors.py

Purpose: Standard error taxonomy for query packages and evaluation retrieval.
Defines both a Pydantic model for structured error communication
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Package structure errors
    MANIFEST_INVALID = "MANIFEST_INVALID"
    MANIFEST_MISSING = "MANIFEST_MISSING"
    ARCHIVE_CORRUPT = "ARCHIVE_CORRUPT"
    REFERENT_MISSING = "REFERENT_MISSING"
    PRIMARY_REFERENCE_UNSUPPORTED = "PRIMARY_REFERENCE_UNSUPPORTED"
    PRIMARY_DOCUMENT_INVALID = "PRIMARY_DOCUMENT_INVALID"
    DUPLICATE_REFERENCE_NAME = "DUPLICATE_REFERENCE_NAME"

    # Content store errors
    CONTENT_STORE_ERROR = "CONTENT_STORE_ERROR"
    FETCH_EXHAUSTED = "FETCH_EXHAUSTED"

    # Evaluation errors
    POLL_EXHAUSTED = "POLL_EXHAUSTED"
    TRANSACTION_REVERTED = "TRANSACTION_REVERTED"
    TIMEOUT_FINALIZE_FAILED = "TIMEOUT_FINALIZE_FAILED"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class JuryPackError(BaseModel):
    """
    Error model for passing failures across module boundaries without
    exceptions, e.g. in CLI JSON output.
    """

    model_config = ConfigDict(extra="forbid")

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.MANIFEST_INVALID],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "JuryPackException":
        """Convert this error model to a raisable exception."""
        return JuryPackException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class JuryPackException(Exception):
    """
    Base exception for all query package and evaluation errors.

    Carries structured error information and can be converted to a
    JuryPackError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "JURYPACK_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> JuryPackError:
        """Convert this exception to a JuryPackError model."""
        return JuryPackError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class PackageError(JuryPackException):
    """Base class for structural package errors. Never retried."""


class ManifestError(PackageError):
    """Raised when a manifest violates the schema."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        self.reason = reason
        super().__init__(
            message=f"Invalid manifest: {reason}",
            code=ErrorCodes.MANIFEST_INVALID,
            details=details,
        )


class CorruptArchiveError(PackageError):
    """Raised when the archive container cannot be opened."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=f"Failed to extract archive: {message}",
            code=ErrorCodes.ARCHIVE_CORRUPT,
            details=details,
        )


class MissingManifestError(PackageError):
    """Raised when an archive has no manifest.json entry."""

    def __init__(self, entry_name: str = "manifest.json") -> None:
        self.entry_name = entry_name
        super().__init__(
            message=f"No {entry_name} found in archive",
            code=ErrorCodes.MANIFEST_MISSING,
            details={"entry": entry_name},
        )


class MissingReferentError(PackageError):
    """Raised when the manifest names a file that is not in the archive."""

    def __init__(self, filename: str, role: str = "additional") -> None:
        self.filename = filename
        self.role = role
        super().__init__(
            message=f"{role.capitalize()} file {filename} not found in archive",
            code=ErrorCodes.REFERENT_MISSING,
            details={"filename": filename, "role": role},
        )


class UnsupportedPrimaryReferenceError(PackageError):
    """Raised for a hash-addressed primary document."""

    def __init__(self, hash_ref: str) -> None:
        self.hash_ref = hash_ref
        super().__init__(
            message="External primary files (hash-based) are not yet supported",
            code=ErrorCodes.PRIMARY_REFERENCE_UNSUPPORTED,
            details={"hash": hash_ref},
        )


class PrimaryDocumentError(PackageError):
    """Raised when the primary document carries no query."""

    def __init__(self, message: str, filename: str | None = None) -> None:
        details = {"filename": filename} if filename else {}
        super().__init__(
            message=message,
            code=ErrorCodes.PRIMARY_DOCUMENT_INVALID,
            details=details,
        )


class DuplicateReferenceNameError(PackageError):
    """Raised when two additional/support entries share a name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            message=f"Duplicate reference name: {name!r}",
            code=ErrorCodes.DUPLICATE_REFERENCE_NAME,
            details={"name": name},
        )


class ContentStoreError(JuryPackException):
    """Raised by a content store on a non-success response or transport failure."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        full_details = details or {}
        if status_code is not None:
            full_details["status_code"] = status_code
        super().__init__(
            message=message,
            code=ErrorCodes.CONTENT_STORE_ERROR,
            details=full_details,
            retryable=True,
        )


class FetchExhaustedError(JuryPackException):
    """Raised when every attempt of a content fetch failed."""

    def __init__(self, cid: str, attempts: int, last_error: BaseException | None) -> None:
        self.cid = cid
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            message=f"Failed to fetch CID {cid} after {attempts} attempts: {last_error}",
            code=ErrorCodes.FETCH_EXHAUSTED,
            details={"cid": cid, "attempts": attempts, "last_error": str(last_error)},
            retryable=True,
        )


class EvaluationPollTimeoutError(JuryPackException):
    """Raised when polling gives up without finding an evaluation record."""

    def __init__(self, request_id: str, attempts: int) -> None:
        self.request_id = request_id
        self.attempts = attempts
        super().__init__(
            message="Evaluation results not received in time",
            code=ErrorCodes.POLL_EXHAUSTED,
            details={"request_id": request_id, "attempts": attempts},
            retryable=True,
        )


class TransactionRevertedError(JuryPackException):
    """Raised by a ledger adapter when a transaction reverts."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        self.reason = reason
        super().__init__(
            message=f"Transaction reverted: {reason}",
            code=ErrorCodes.TRANSACTION_REVERTED,
            details=details,
        )


class TimeoutFinalizeError(JuryPackException):
    """Raised when the on-chain timeout finalize fails for a genuine reason."""

    def __init__(self, request_id: str, cause: BaseException) -> None:
        self.request_id = request_id
        self.cause = cause
        super().__init__(
            message=f"Timeout finalize failed for request {request_id}: {cause}",
            code=ErrorCodes.TIMEOUT_FINALIZE_FAILED,
            details={"request_id": request_id, "cause": str(cause)},
        )
