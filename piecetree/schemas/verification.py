"""
Schemas
File: verification.py

Purpose: Standard result format for piece-layer verification.
Each stage of a verification (parse, layer number, root) reports a
CheckResult; the stages are collected into a VerificationResult.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .errors import PieceTreeError


# Severity levels for checks
CheckSeverity = Literal["info", "warn", "error"]


class CheckResult(BaseModel):
    """
    Result of a single verification check.

    Checks are atomic verification steps that can pass or fail.
    """

    model_config = ConfigDict(extra="forbid")

    check_id: str = Field(
        ...,
        description="Unique identifier for this check",
        min_length=1,
    )
    ok: bool = Field(
        ...,
        description="Whether the check passed",
    )
    severity: CheckSeverity = Field(
        ...,
        description="Severity level of this check",
    )
    message: str = Field(
        ...,
        description="Human-readable message describing the result",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional details about the check",
    )

    @property
    def is_error(self) -> bool:
        """Check if this is an error-level failure."""
        return not self.ok and self.severity == "error"

    @classmethod
    def passed(
        cls,
        check_id: str,
        message: str = "Check passed",
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Create a passed check result."""
        return cls(
            check_id=check_id,
            ok=True,
            severity="info",
            message=message,
            details=details or {},
        )

    @classmethod
    def failed(
        cls,
        check_id: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Create a failed check result."""
        return cls(
            check_id=check_id,
            ok=False,
            severity="error",
            message=message,
            details=details or {},
        )


class VerificationResult(BaseModel):
    """
    Complete result of a verification process.

    This is the standard format for reporting verification outcomes
    without using exceptions.
    """

    model_config = ConfigDict(extra="forbid")

    ok: bool = Field(
        ...,
        description="Overall verification success",
    )
    checks: list[CheckResult] = Field(
        default_factory=list,
        description="Individual check results",
    )
    error: PieceTreeError | None = Field(
        default=None,
        description="Error details if verification failed",
    )

    @property
    def error_count(self) -> int:
        """Count of error-level failures."""
        return sum(1 for check in self.checks if check.is_error)

    def get_error_messages(self) -> list[str]:
        """Get all error messages."""
        return [check.message for check in self.checks if check.is_error]

    @classmethod
    def success(cls, checks: list[CheckResult] | None = None) -> "VerificationResult":
        """Create a successful verification result."""
        return cls(ok=True, checks=checks or [])

    @classmethod
    def failure(
        cls,
        checks: list[CheckResult],
        error: PieceTreeError | None = None,
    ) -> "VerificationResult":
        """Create a failed verification result."""
        return cls(ok=False, checks=checks, error=error)

    def merge(self, other: "VerificationResult") -> "VerificationResult":
        """Merge another verification result into this one."""
        return VerificationResult(
            ok=self.ok and other.ok,
            checks=self.checks + other.checks,
            error=self.error or other.error,
        )
