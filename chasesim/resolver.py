"""Terminal conditions of an attempt: capture and escape."""

import enum
import logging
from collections import deque
from typing import List, NamedTuple, Optional

from chasesim.arena import Arena
from chasesim.dynamics import check_capture, compute_distance
from chasesim.types import CAPTURE_DISTANCE_RANGE
from chasesim.vector import clamp

logger = logging.getLogger(__name__)


class Outcome(str, enum.Enum):
    NONE = "none"
    CAPTURE = "capture"
    ESCAPE = "escape"


class ResolverEvent(NamedTuple):
    """One terminal event as seen by the resolver."""
    outcome: Outcome
    frame: int
    chaser_id: Optional[str]
    target_id: Optional[str]
    distance: Optional[float]
    position: tuple


class CaptureResolver:
    """Evaluates capture, then escape, once per frame.

    Capture fires when the active target is strictly closer than
    ``capture_distance`` to the chaser, whether or not it was detected.
    Escape fires when the target leaves the arena grown by ``margin``. A
    capture short-circuits the escape check for that frame.
    """

    def __init__(
        self,
        arena: Arena,
        capture_distance: float = 60.0,
        margin: float = 100.0,
        max_history: int = 100,
        logger: logging.Logger = logger,
    ):
        self.arena = arena
        self.capture_distance = capture_distance
        self.margin = margin
        self.history = deque(maxlen=max_history)
        self.logger = logger

    def check_capture(self, chaser, target) -> bool:
        return check_capture(chaser, target, self.capture_distance)

    def check_escape(self, target) -> bool:
        if target is None:
            return False
        return self.arena.has_escaped(target.position, self.margin)

    def resolve(self, chaser, target, frame: int = 0) -> Outcome:
        """Return the terminal outcome for this frame, if any."""
        if self.check_capture(chaser, target):
            dist = compute_distance(chaser, target)
            self._record(Outcome.CAPTURE, chaser, target, frame, dist)
            self.logger.info("Capture at distance %.2f (frame %d)", dist, frame)
            return Outcome.CAPTURE

        if self.check_escape(target):
            self._record(Outcome.ESCAPE, chaser, target, frame, None)
            target.record_escape()
            return Outcome.ESCAPE

        return Outcome.NONE

    def _record(self, outcome, chaser, target, frame, dist) -> None:
        self.history.append(ResolverEvent(
            outcome=outcome,
            frame=frame,
            chaser_id=getattr(chaser, "id", None),
            target_id=getattr(target, "id", None),
            distance=dist,
            position=tuple(target.position),
        ))

    def recent(self, outcome: Optional[Outcome] = None) -> List[ResolverEvent]:
        return [e for e in self.history if outcome is None or e.outcome == outcome]

    def capture_count(self) -> int:
        return len(self.recent(Outcome.CAPTURE))

    def set_capture_distance(self, capture_distance: float) -> float:
        self.capture_distance = clamp(capture_distance, *CAPTURE_DISTANCE_RANGE)
        self.logger.info("Capture distance set to %.1f", self.capture_distance)
        return self.capture_distance

    def reset(self) -> None:
        self.history.clear()
