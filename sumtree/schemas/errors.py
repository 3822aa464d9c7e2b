"""
Error Taxonomy

Standard errors raised by the sum tree engine and its helpers.
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

    # Tree construction & mutation
    EMPTY_INPUT = "EMPTY_INPUT"
    HEIGHT_EXCEEDED = "HEIGHT_EXCEEDED"
    SUM_OVERFLOW = "SUM_OVERFLOW"
    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"

    # Proofs
    MALFORMED_PROOF = "MALFORMED_PROOF"

    # Files & serialization
    FILE_ERROR = "FILE_ERROR"
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class SumTreeError(BaseModel):
    """
    Structured error model, printed by the CLI in place of a plain
    message when JSON output is requested.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.SUM_OVERFLOW],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class SumTreeException(Exception):
    """
    Base exception for all sum tree errors.

    Carries structured error information and can be converted
    to a SumTreeError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUMTREE_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_error_model(self) -> SumTreeError:
        """Convert this exception to a SumTreeError model."""
        return SumTreeError(
            code=self.code,
            message=self.message,
            details=self.details,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class EmptyInputException(SumTreeException):
    """Raised when a tree is constructed from no leaves."""

    def __init__(self, message: str = "Cannot create tree with no leaves") -> None:
        super().__init__(message=message, code=ErrorCodes.EMPTY_INPUT)


class HeightExceededException(SumTreeException):
    """Raised when a tree would need more levels than allowed."""

    def __init__(
        self,
        message: str,
        required_height: int | None = None,
        max_height: int | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if required_height is not None:
            details["required_height"] = required_height
        if max_height is not None:
            details["max_height"] = max_height
        super().__init__(
            message=message,
            code=ErrorCodes.HEIGHT_EXCEEDED,
            details=details,
        )


class SumOverflowException(SumTreeException):
    """Raised when an aggregate value would exceed the maximum."""

    def __init__(
        self,
        message: str,
        max_value: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if max_value is not None:
            full_details["max_value"] = max_value
        super().__init__(
            message=message,
            code=ErrorCodes.SUM_OVERFLOW,
            details=full_details,
        )


class IndexOutOfRangeException(SumTreeException, IndexError):
    """Raised on access or mutation with an invalid index."""

    def __init__(self, index: int, size: int, what: str = "leaf") -> None:
        super().__init__(
            message=f"{what.capitalize()} index {index} out of range for {size} {what}s",
            code=ErrorCodes.INDEX_OUT_OF_RANGE,
            details={"index": index, "size": size, "kind": what},
        )


class MalformedProofException(SumTreeException):
    """Raised when a proof's shape does not match the tree it is checked against."""

    def __init__(
        self,
        message: str,
        path_length: int | None = None,
        expected_height: int | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if path_length is not None:
            details["path_length"] = path_length
        if expected_height is not None:
            details["expected_height"] = expected_height
        super().__init__(
            message=message,
            code=ErrorCodes.MALFORMED_PROOF,
            details=details,
        )


class CanonicalizationException(SumTreeException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
        )
