"""
CLI Verify Command

Verify the piece layers of a document offline.

The document is JSON or YAML:

    piece_length: 4194304
    piece_layers:
      "<base64 root>": "<base64 concatenated piece hashes>"

Usage:
    piecetree verify layers.yaml [--piece-length N] [--json] [--debug]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from piecetree.crypto.hashing import b64decode
from piecetree.merkle.verifier import PieceLayersVerifier
from piecetree.schemas.errors import ErrorCodes, PieceTreeError
from piecetree.schemas.verification import CheckResult, VerificationResult


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class VerifySummary:
    """Summary of piece layers verification for CLI output."""
    path: str = ""
    piece_length: int = 0
    entries: int = 0
    passed: int = 0
    failed: int = 0
    checks: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if not d["checks"]:
            del d["checks"]
        if not d["errors"]:
            del d["errors"]
        return d

    @property
    def all_ok(self) -> bool:
        """Check if every entry verified."""
        return self.failed == 0 and not self.errors


def load_document(path: Path) -> dict[str, Any]:
    """Load a JSON or YAML piece layers document."""
    if not path.exists():
        raise FileNotFoundError(f"Document not found: {path}")

    with open(path, "r") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Document must be a mapping, got {type(data).__name__}")
    return data


def decode_entry(key: Any, value: Any) -> tuple[bytes, bytes]:
    """
    Decode one base64 key/value pair into raw buffers.

    Raises:
        ValueError: If either side is not a base64 string
    """
    if value is None:
        value = ""
    if not isinstance(key, str) or not isinstance(value, str):
        raise ValueError("Piece layers keys and values must be base64 strings")
    return b64decode(key), b64decode(value)


def undecodable_result(key: Any, error: ValueError) -> VerificationResult:
    """Failed result for an entry that could not be decoded."""
    message = f"Undecodable entry: {error}"
    return VerificationResult.failure(
        [CheckResult.failed("piece_layers.decode", message)],
        error=PieceTreeError(
            code=ErrorCodes.PIECE_LAYERS_PARSE_ERROR,
            message=message,
            details={"key": str(key)[:64]},
        ),
    )


def build_summary(
    path: str,
    piece_length: int,
    results: list[VerificationResult],
    debug: bool = False,
) -> VerifySummary:
    """Build a VerifySummary from per-entry results."""
    summary = VerifySummary(path=path, piece_length=piece_length, entries=len(results))

    for index, result in enumerate(results):
        if result.ok:
            summary.passed += 1
        else:
            summary.failed += 1
            for message in result.get_error_messages():
                summary.errors.append(f"entry {index}: {message}")

        if debug:
            for check in result.checks:
                summary.checks.append({
                    "entry": index,
                    "check_id": check.check_id,
                    "ok": check.ok,
                    "message": check.message,
                    "details": check.details,
                })

    return summary


def print_summary_human(summary: VerifySummary) -> None:
    """Print summary in human-readable format."""
    print(f"document: {summary.path}")
    print(f"piece_length: {summary.piece_length}")
    print(f"entries: {summary.entries}")
    print(f"passed: {summary.passed}")
    print(f"failed: {summary.failed}")

    if summary.errors:
        print(f"\nerrors ({len(summary.errors)}):")
        for err in summary.errors[:10]:
            print(f"  ✗ {err}")
        if len(summary.errors) > 10:
            print(f"  ... and {len(summary.errors) - 10} more")

    if summary.checks:
        print("\nchecks:")
        for check in summary.checks:
            mark = "✓" if check["ok"] else "✗"
            print(f"  {mark} [{check['entry']}] {check['check_id']}: {check['message']}")


def verify_cmd(args: Namespace) -> int:
    """Handle verify command."""
    path = Path(args.path)
    data = load_document(path)

    piece_length = args.piece_length if args.piece_length is not None else data.get("piece_length")
    if piece_length is None:
        raise ValueError("Piece length missing: pass --piece-length or set piece_length")

    raw_layers = data.get("piece_layers") or {}
    logger.info(f"Verifying {len(raw_layers)} piece layers entries from: {path}")

    verifier = PieceLayersVerifier.from_config(args.runtime_config)
    results: list[VerificationResult] = []
    for key, value in raw_layers.items():
        try:
            root, hashes = decode_entry(key, value)
        except ValueError as e:
            logger.warning(f"Undecodable entry {str(key)[:16]!r}: {e}")
            results.append(undecodable_result(key, e))
            continue
        results.append(verifier.verify_entry(root, hashes, int(piece_length)))

    summary = build_summary(str(path), int(piece_length), results, debug=args.debug)

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    return EXIT_SUCCESS if summary.all_ok else EXIT_VERIFICATION_FAILED
