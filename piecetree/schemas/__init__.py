"""
Schemas

Purpose: Export the error taxonomy and verification result models.
"""

from .errors import (
    EmptyLayerException,
    ErrorCodes,
    HashPrimitiveException,
    LayerBoundExceededException,
    LayerOrderException,
    PieceLayersParseException,
    PieceTreeError,
    PieceTreeException,
    ReductionException,
)

from .verification import (
    CheckResult,
    CheckSeverity,
    VerificationResult,
)

__all__ = [
    # Errors
    "ErrorCodes",
    "PieceTreeError",
    "PieceTreeException",
    "HashPrimitiveException",
    "ReductionException",
    "LayerBoundExceededException",
    "EmptyLayerException",
    "LayerOrderException",
    "PieceLayersParseException",
    # Verification
    "CheckSeverity",
    "CheckResult",
    "VerificationResult",
]
