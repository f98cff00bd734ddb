"""Performance monitoring utilities for the quotation pricing engine."""
import time
import logging
import threading
import functools
from typing import Any, Callable, Dict

logger = logging.getLogger("quotedesk-api.perf")


def timed(func: Callable) -> Callable:
    """
    Decorator that measures and logs execution time for synchronous functions.

    Usage::

        @timed
        def duplicate_quotation(...):
            ...
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.debug(
                "function timed",
                extra={
                    "function": func.__qualname__,
                    "duration_ms": duration_ms,
                },
            )
    return wrapper


class RecalcTracker:
    """
    Thread-safe in-memory counters for aggregate recomputation.

    Tracks, per scope ("room" / "quotation"):
    - Number of recomputes run
    - Cumulative and slowest duration
    - Recomputes skipped because the target record no longer exists
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._counts: Dict[str, int] = {}
        self._total_ms: Dict[str, float] = {}
        self._max_ms: Dict[str, float] = {}
        self._skipped: Dict[str, int] = {}

    # ------------------------------------------------------------------
    # Public write API
    # ------------------------------------------------------------------

    def record_recalc(self, scope: str, duration_ms: float) -> None:
        with self._lock:
            self._counts[scope] = self._counts.get(scope, 0) + 1
            self._total_ms[scope] = self._total_ms.get(scope, 0.0) + duration_ms
            if duration_ms > self._max_ms.get(scope, 0.0):
                self._max_ms[scope] = duration_ms

    def record_skipped(self, scope: str) -> None:
        with self._lock:
            self._skipped[scope] = self._skipped.get(scope, 0) + 1

    # ------------------------------------------------------------------
    # Public read API
    # ------------------------------------------------------------------

    def get_metrics(self) -> Dict[str, Any]:
        """
        Return a snapshot of all collected metrics.

        Returns
        -------
        dict with keys:
            recalc_counts        : dict  {scope: count}
            avg_recalc_ms        : dict  {scope: avg_ms}
            max_recalc_ms        : dict  {scope: max_ms}
            skipped_missing      : dict  {scope: count}
        """
        with self._lock:
            avgs = {
                scope: round(self._total_ms[scope] / count, 4) if count else 0.0
                for scope, count in self._counts.items()
            }
            return {
                "recalc_counts": dict(self._counts),
                "avg_recalc_ms": avgs,
                "max_recalc_ms": {k: round(v, 4) for k, v in self._max_ms.items()},
                "skipped_missing": dict(self._skipped),
            }

    def reset(self) -> None:
        """Reset all counters (useful in tests)."""
        with self._lock:
            self._counts.clear()
            self._total_ms.clear()
            self._max_ms.clear()
            self._skipped.clear()
