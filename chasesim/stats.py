"""In-memory statistics for a chase session."""

import logging
import time
from collections import deque
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Protocol

import numpy as np

from chasesim.types import CaptureRecord, EscapeRecord

logger = logging.getLogger(__name__)


class StatsCollector(Protocol):
    """What the simulation loop reports to."""

    def start_attempt(self) -> None: ...

    def record_capture(self, record: CaptureRecord) -> None: ...

    def record_escape(self, record: EscapeRecord) -> None: ...

    def reset(self) -> None: ...


class AttemptResult(NamedTuple):
    """One finished attempt in the session history."""
    kind: str  # "capture" or "escape"
    attempt_number: int
    duration: float
    strategy_name: str
    target_speed: float
    chaser_speed: float
    detection_sensitivity: float
    distance: Optional[float] = None


class SessionStats(NamedTuple):
    attempts: int
    captures: int
    escapes: int
    success_rate: float
    avg_capture_time: float
    avg_escape_time: float
    min_capture_time: float
    max_capture_time: float
    session_time: float
    current_time: float


def _mean(values) -> float:
    return float(np.mean(values)) if len(values) else 0.0


class StatsTracker:
    """Counts attempts and outcomes and keeps a bounded attempt history.

    Durations are measured with ``clock`` (seconds), which defaults to
    ``time.perf_counter`` and can be replaced for deterministic runs.
    """

    def __init__(self, max_history: int = 1000, clock: Callable[[], float] = time.perf_counter):
        self.clock = clock
        self.history: deque = deque(maxlen=max_history)
        self.reset()

    def reset(self) -> None:
        self.reset_session()
        self.history.clear()

    def set_max_history(self, max_history: int) -> None:
        """Change the history capacity, keeping the newest results."""
        if max_history != self.history.maxlen:
            self.history = deque(self.history, maxlen=max_history)

    def reset_session(self) -> None:
        """Clear counters but keep the attempt history."""
        self.attempts = 0
        self.captures = 0
        self.capture_times: List[float] = []
        self.escape_times: List[float] = []
        self.attempt_start = self.clock()
        self.session_start = self.clock()

    def start_attempt(self) -> None:
        self.attempt_start = self.clock()
        self.attempts += 1
        logger.info("Attempt #%d started", self.attempts)

    def current_attempt_time(self) -> float:
        return self.clock() - self.attempt_start

    def record_capture(self, record: CaptureRecord) -> None:
        duration = self.current_attempt_time()
        self.captures += 1
        self.capture_times.append(duration)
        self.history.append(AttemptResult(
            kind="capture",
            attempt_number=self.attempts,
            duration=duration,
            strategy_name=record.strategy_name,
            target_speed=record.target_speed,
            chaser_speed=record.chaser_speed,
            detection_sensitivity=record.detection_sensitivity,
            distance=record.distance,
        ))
        logger.info("Capture #%d after %.2fs (success rate %.1f%%)",
                    self.captures, duration, self.success_rate())

    def record_escape(self, record: EscapeRecord) -> None:
        duration = self.current_attempt_time()
        self.escape_times.append(duration)
        self.history.append(AttemptResult(
            kind="escape",
            attempt_number=self.attempts,
            duration=duration,
            strategy_name=record.strategy_name,
            target_speed=record.target_speed,
            chaser_speed=record.chaser_speed,
            detection_sensitivity=record.detection_sensitivity,
        ))
        logger.info("Escape on attempt #%d after %.2fs", self.attempts, duration)

    def success_rate(self) -> float:
        """Captures as a percentage of attempts."""
        if self.attempts == 0:
            return 0.0
        return 100.0 * self.captures / self.attempts

    def average_capture_time(self) -> float:
        return _mean(self.capture_times)

    def average_escape_time(self) -> float:
        return _mean(self.escape_times)

    def capture_time_std(self) -> float:
        if len(self.capture_times) < 2:
            return 0.0
        return float(np.std(self.capture_times))

    def get_stats(self) -> SessionStats:
        return SessionStats(
            attempts=self.attempts,
            captures=self.captures,
            escapes=len(self.escape_times),
            success_rate=self.success_rate(),
            avg_capture_time=self.average_capture_time(),
            avg_escape_time=self.average_escape_time(),
            min_capture_time=min(self.capture_times, default=0.0),
            max_capture_time=max(self.capture_times, default=0.0),
            session_time=self.clock() - self.session_start,
            current_time=self.current_attempt_time(),
        )

    def history_by_strategy(self, strategy_name: str) -> List[AttemptResult]:
        return [r for r in self.history if r.strategy_name == strategy_name]

    def strategy_stats(self, strategy_name: str) -> Dict[str, Any]:
        records = self.history_by_strategy(strategy_name)
        captures = [r.duration for r in records if r.kind == "capture"]
        escapes = [r.duration for r in records if r.kind == "escape"]
        return {
            "strategy": strategy_name,
            "total_attempts": len(records),
            "captures": len(captures),
            "escapes": len(escapes),
            "success_rate": 100.0 * len(captures) / len(records) if records else 0.0,
            "avg_capture_time": _mean(captures),
            "avg_escape_time": _mean(escapes),
        }

    def strategy_comparison(self) -> List[Dict[str, Any]]:
        names = list(dict.fromkeys(r.strategy_name for r in self.history))
        return [self.strategy_stats(name) for name in names]

    def trends(self, window: int = 10) -> Dict[str, Any]:
        """Compare the success rate of the last ``window`` results with the
        ``window`` before them."""
        history = list(self.history)
        if len(history) < window:
            return {"success_rate_trend": "insufficient_data"}

        recent = history[-window:]
        previous = history[-2 * window:-window]
        recent_rate = 100.0 * sum(r.kind == "capture" for r in recent) / len(recent)
        previous_rate = (
            100.0 * sum(r.kind == "capture" for r in previous) / len(previous) if previous else 0.0
        )
        if recent_rate > previous_rate:
            trend = "improving"
        elif recent_rate < previous_rate:
            trend = "declining"
        else:
            trend = "stable"
        return {
            "success_rate_trend": trend,
            "recent_success_rate": recent_rate,
            "previous_success_rate": previous_rate,
        }
