"""
Piece Layers Verifier
Class-based wrapper that verifies raw piece layers entries end to end.

Each entry goes through three checks, reported as CheckResults:
- piece_layers.parse: key and value have valid digest widths
- piece_layers.layer_number: the piece length maps to a tree layer
- piece_layers.root: the piece layer reduces to the entry's root

These wrap the functions in merkle_tree.py and piece_layers.py.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Mapping, Optional

from piecetree.crypto.hashing import HashPrimitive, get_default_primitive, to_hex
from piecetree.merkle.empty_hashes import EmptyHashCache, get_default_empty_hash_cache
from piecetree.merkle.merkle_tree import MAX_LAYER, reduce_to_root
from piecetree.merkle.piece_layers import calculate_layer_number, parse_piece_layers_entry
from piecetree.schemas.errors import ErrorCodes, PieceTreeError, PieceTreeException
from piecetree.schemas.verification import CheckResult, VerificationResult

if TYPE_CHECKING:
    from piecetree.config.runtime import RuntimeConfig


logger = logging.getLogger(__name__)


class PieceLayersVerifier:
    """
    Verifies piece layers entries against their roots.

    Example:
        >>> verifier = PieceLayersVerifier()
        >>> result = verifier.verify_entry(root, hashes, piece_length=4 * 1024 * 1024)
        >>> result.ok
        True
    """

    def __init__(
        self,
        cache: Optional[EmptyHashCache] = None,
        primitive: Optional[HashPrimitive] = None,
        max_layer: int = MAX_LAYER,
    ) -> None:
        if cache is None:
            cache = (
                get_default_empty_hash_cache() if primitive is None
                else EmptyHashCache(primitive)
            )
        self.cache = cache
        self.primitive = primitive if primitive is not None else get_default_primitive()
        self.max_layer = max_layer

    @classmethod
    def from_config(cls, config: "RuntimeConfig") -> "PieceLayersVerifier":
        """Create a verifier using the Merkle settings of a runtime config."""
        return cls(max_layer=config.merkle.max_layer)

    def verify_entry(self, key: bytes, value: bytes, piece_length: int) -> VerificationResult:
        """
        Verify one raw piece layers entry.

        Args:
            key: Raw root bytes
            value: Raw concatenated piece hashes
            piece_length: Piece length of the torrent

        Returns:
            VerificationResult with one check per completed stage
        """
        checks: list[CheckResult] = []

        entry = parse_piece_layers_entry(key, value)
        if entry is None:
            message = (
                f"Malformed entry: key is {len(key)} bytes, value is {len(value)} bytes"
            )
            checks.append(CheckResult.failed("piece_layers.parse", message))
            return VerificationResult.failure(
                checks,
                error=PieceTreeError(
                    code=ErrorCodes.PIECE_LAYERS_PARSE_ERROR,
                    message=message,
                    details={"key_length": len(key), "value_length": len(value)},
                ),
            )
        details = {"root": to_hex(entry.root), "piece_count": len(entry.hashes)}
        checks.append(CheckResult.passed("piece_layers.parse", details=details))

        layer_number = calculate_layer_number(piece_length)
        if layer_number is None:
            message = f"Piece length {piece_length} does not map to a tree layer"
            checks.append(CheckResult.failed("piece_layers.layer_number", message))
            return VerificationResult.failure(
                checks,
                error=PieceTreeError(
                    code=ErrorCodes.LAYER_NUMBER_UNDETERMINABLE,
                    message=message,
                    details={"piece_length": piece_length},
                ),
            )
        checks.append(
            CheckResult.passed(
                "piece_layers.layer_number",
                details={"piece_length": piece_length, "layer_number": layer_number},
            )
        )

        try:
            found_root = reduce_to_root(
                entry.to_layer(layer_number),
                max_layer=self.max_layer,
                cache=self.cache,
                primitive=self.primitive,
            )
        except PieceTreeException as e:
            logger.warning("Reduction failed for root %s: %s", details["root"], e.message)
            checks.append(CheckResult.failed("piece_layers.root", e.message, details=details))
            return VerificationResult.failure(checks, error=e.to_error_model())

        if found_root != entry.root:
            message = "Piece layer does not reduce to the expected root"
            mismatch = {**details, "computed_root": to_hex(found_root)}
            checks.append(CheckResult.failed("piece_layers.root", message, details=mismatch))
            return VerificationResult.failure(
                checks,
                error=PieceTreeError(
                    code=ErrorCodes.ROOT_MISMATCH,
                    message=message,
                    details=mismatch,
                ),
            )

        checks.append(CheckResult.passed("piece_layers.root", details=details))
        return VerificationResult.success(checks)

    def verify_all(
        self,
        layers: Mapping[bytes, bytes],
        piece_length: int,
    ) -> VerificationResult:
        """Verify every entry of a piece layers dictionary."""
        result = VerificationResult.success()
        for key, value in layers.items():
            result = result.merge(self.verify_entry(key, value, piece_length))
        logger.info(
            "Verified %d piece layers entries: %s",
            len(layers),
            "ok" if result.ok else f"{result.error_count} failed",
        )
        return result


__all__ = [
    "PieceLayersVerifier",
]
