"""
Schemas
File: errors.py

Purpose: Error taxonomy for Merkle tree computation and piece-layer validation.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Hashing
    HASH_PRIMITIVE_FAILURE = "HASH_PRIMITIVE_FAILURE"

    # Tree reduction
    REDUCTION_FAILURE = "REDUCTION_FAILURE"
    LAYER_BOUND_EXCEEDED = "LAYER_BOUND_EXCEEDED"
    EMPTY_LAYER = "EMPTY_LAYER"
    LAYER_ORDER_INVALID = "LAYER_ORDER_INVALID"

    # Piece layers
    PIECE_LAYERS_PARSE_ERROR = "PIECE_LAYERS_PARSE_ERROR"
    LAYER_NUMBER_UNDETERMINABLE = "LAYER_NUMBER_UNDETERMINABLE"
    ROOT_MISMATCH = "ROOT_MISMATCH"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class PieceTreeError(BaseModel):
    """
    Base error model for structured error communication.

    Used to attach failures to verification results without raising.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.ROOT_MISMATCH],
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

    def to_exception(self) -> "PieceTreeException":
        """Convert this error model to a raised exception."""
        return PieceTreeException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class PieceTreeException(Exception):
    """
    Base exception for all Merkle tree errors.

    This exception carries structured error information and can be
    converted to/from PieceTreeError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "PIECETREE_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> PieceTreeError:
        """Convert this exception to a PieceTreeError model."""
        return PieceTreeError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class HashPrimitiveException(PieceTreeException):
    """Exception raised when the hash primitive cannot produce a digest."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.HASH_PRIMITIVE_FAILURE,
            details=details,
            retryable=False,
        )


class ReductionException(PieceTreeException):
    """Exception raised when a pairwise hash fails while reducing a layer."""

    def __init__(
        self,
        message: str,
        layer_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if layer_number is not None:
            full_details["layer_number"] = layer_number
        super().__init__(
            message=message,
            code=ErrorCodes.REDUCTION_FAILURE,
            details=full_details,
            retryable=False,
        )


class LayerBoundExceededException(PieceTreeException):
    """Exception raised when a layer does not collapse to one digest within the bound."""

    def __init__(
        self,
        message: str,
        max_layer: int,
        remaining: int,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.LAYER_BOUND_EXCEEDED,
            details={"max_layer": max_layer, "remaining": remaining},
            retryable=False,
        )


class EmptyLayerException(PieceTreeException):
    """Exception raised when a root is requested for a layer with no hashes."""

    def __init__(
        self,
        message: str,
        layer_number: int | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if layer_number is not None:
            details["layer_number"] = layer_number
        super().__init__(
            message=message,
            code=ErrorCodes.EMPTY_LAYER,
            details=details,
            retryable=False,
        )


class LayerOrderException(PieceTreeException):
    """Exception raised when a reduction target lies below the current layer."""

    def __init__(
        self,
        message: str,
        current_layer: int,
        target_layer: int,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.LAYER_ORDER_INVALID,
            details={"current_layer": current_layer, "target_layer": target_layer},
            retryable=False,
        )


class PieceLayersParseException(PieceTreeException):
    """Exception raised when a piece layers mapping contains a malformed entry."""

    def __init__(
        self,
        message: str,
        key_length: int | None = None,
        value_length: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if key_length is not None:
            full_details["key_length"] = key_length
        if value_length is not None:
            full_details["value_length"] = value_length
        super().__init__(
            message=message,
            code=ErrorCodes.PIECE_LAYERS_PARSE_ERROR,
            details=full_details,
            retryable=False,
        )
