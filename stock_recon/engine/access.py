from __future__ import annotations

from typing import Any, Callable, TypeVar

from stock_recon.errors import DataUnavailableError

T = TypeVar("T")


def guarded(source: str, call: Callable[..., T], *args: Any) -> T:
    """Run a data access call, surfacing any failure as DataUnavailableError."""
    try:
        return call(*args)
    except DataUnavailableError:
        raise
    except Exception as e:
        raise DataUnavailableError(f"Could not read {source}: {e}", source=source) from e
