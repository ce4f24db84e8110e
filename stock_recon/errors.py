from __future__ import annotations

from typing import List, Optional


class StockReconError(Exception):
    """Base class for every error raised by the reconciliation package."""


class ValidationError(StockReconError):
    """A recalibration submission was rejected.

    ``errors`` lists every problem found so the caller can fix them in one pass.
    """

    def __init__(self, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid recalibration")


class DataUnavailableError(StockReconError):
    """Records could not be fetched, as opposed to fetched and found empty."""

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        self.source = source
        super().__init__(message)
