from .identity import IdentityResolver, Resolved, Unresolved, normalize_item_key
from .periods import PeriodCalculator
from .anchors import AnchorSelector
from .aggregator import Aggregator
from .reconciliation import ReconciliationEngine
from .submission import RecalibrationSubmissionHandler

__all__ = [
    "IdentityResolver",
    "Resolved",
    "Unresolved",
    "normalize_item_key",
    "PeriodCalculator",
    "AnchorSelector",
    "Aggregator",
    "ReconciliationEngine",
    "RecalibrationSubmissionHandler",
]
