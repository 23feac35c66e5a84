"""
Exception hierarchy for contrast compensation.
"""

from __future__ import annotations

from typing import Optional


class ContrastCAMError(Exception):
    """Base class for all errors raised by contrastcam."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"


class ComputationError(ContrastCAMError, ValueError):
    """Viewing-condition inputs are degenerate (non-positive luminance)."""


class CIECAM02Error(ContrastCAMError):
    """Forward or inverse transform produced a non-finite intermediate."""


class ContrastCompensationError(ContrastCAMError):
    """Gamut clamping failed on an otherwise valid compensated color."""
