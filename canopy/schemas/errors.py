"""
Schemas - Error Taxonomy
File: errors.py

Purpose: Standard error taxonomy for canopy trees.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

Only two kinds of error are raised by tree operations, and both are
expected, recoverable conditions:

- HashUnavailableException: the hash primitive cannot be instantiated
  (construction time only).
- NoDataException: no items were supplied, or a looked-up item, digest,
  ordered ID or datum is not present in the tree.

A present item whose proof does not check out is NOT an error: the verify
calls return False for it.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the package."""

    # Construction Errors
    HASH_UNAVAILABLE = "HASH_UNAVAILABLE"
    NO_DATA = "NO_DATA"

    # Merkle & Commitment Errors
    MERKLE_PROOF_INVALID = "MERKLE_PROOF_INVALID"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class MerkleError(BaseModel):
    """
    Base error model for structured error communication.

    Lets callers pass tree errors around (logs, reports, API payloads)
    without raising, and turn them back into exceptions when needed.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.NO_DATA],
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

    def to_exception(self) -> "MerkleException":
        """Convert this error model to a raisable exception of the matching kind."""
        exc_type = _EXCEPTIONS_BY_CODE.get(self.code)
        if exc_type is not None:
            return exc_type(message=self.message, details=dict(self.details))
        return MerkleException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class MerkleException(Exception):
    """
    Base exception for all canopy errors.

    This exception carries structured error information and can be
    converted to/from MerkleError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "MERKLE_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = dict(details or {})
        self.retryable = retryable

    def to_error_model(self) -> MerkleError:
        """Convert this exception to a MerkleError model."""
        return MerkleError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class HashUnavailableException(MerkleException):
    """Exception raised when the requested hash algorithm cannot be instantiated."""

    def __init__(
        self,
        message: str = "Hash algorithm unavailable",
        algorithm: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = dict(details or {})
        if algorithm:
            full_details["algorithm"] = algorithm
        super().__init__(
            message=message,
            code=ErrorCodes.HASH_UNAVAILABLE,
            details=full_details,
            retryable=False,
        )


class NoDataException(MerkleException):
    """Exception raised when data is missing or not present in the tree."""

    def __init__(
        self,
        message: str = "Nonexistent data",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.NO_DATA,
            details=details,
            retryable=False,
        )


class MerkleVerificationException(MerkleException):
    """Exception raised when a standalone Merkle proof is structurally invalid."""

    def __init__(
        self,
        message: str,
        leaf_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = dict(details or {})
        if leaf_index is not None:
            full_details["leaf_index"] = leaf_index
        super().__init__(
            message=message,
            code=ErrorCodes.MERKLE_PROOF_INVALID,
            details=full_details,
            retryable=False,
        )


_EXCEPTIONS_BY_CODE: dict[str, type[MerkleException]] = {
    ErrorCodes.HASH_UNAVAILABLE: HashUnavailableException,
    ErrorCodes.NO_DATA: NoDataException,
    ErrorCodes.MERKLE_PROOF_INVALID: MerkleVerificationException,
}
