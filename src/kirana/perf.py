"""
Stage-level timing for the voice command pipeline.

Parsing one utterance should stay far below a millisecond per stage; the
budgets here only flag pathological inputs and never fail a request.
"""
import logging
import time
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Soft performance budgets (ms) - warn-only, never raise
STAGE_BUDGETS_MS: Dict[str, float] = {
    "normalization": 5,
    "classification": 25,
    "segmentation": 25,
    "routing": 5,
}


class StageTimer:
    """
    Context manager for timing pipeline stage execution.

    Usage:
        with StageTimer(timings, "classification"):
            # stage code here
            pass

    Stores duration (ms) into timings[stage_name] and logs a warning if the
    stage exceeds its soft budget (never raises).

    Args:
        timings: Dictionary to store durations in
        stage_name: Name of the stage being timed
        request_id: Optional request ID for logging
        budget_ms: Optional budget override (defaults to STAGE_BUDGETS_MS[stage_name])
    """

    def __init__(
        self,
        timings: Dict[str, Any],
        stage_name: str,
        request_id: Optional[str] = None,
        budget_ms: Optional[float] = None
    ):
        self.timings = timings
        self.stage_name = stage_name
        self.request_id = request_id
        self.budget_ms = budget_ms if budget_ms is not None else STAGE_BUDGETS_MS.get(stage_name)
        self.start_time: Optional[float] = None
        self.duration_ms: Optional[float] = None

    def __enter__(self):
        """Start timing."""
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Stop timing and record duration."""
        self.duration_ms = (time.perf_counter() - self.start_time) * 1000.0
        self.timings[self.stage_name] = round(self.duration_ms, 3)

        if self.budget_ms is not None and self.duration_ms > self.budget_ms:
            logger.warning(
                f"Stage '{self.stage_name}' exceeded performance budget",
                extra={
                    'request_id': self.request_id,
                    'stage': self.stage_name,
                    'duration_ms': round(self.duration_ms, 2),
                    'budget_ms': self.budget_ms
                }
            )

        # Never suppress exceptions
        return False
