"""Detection model: does the chaser perceive the target this frame?"""

import logging
import math
from collections import deque
from typing import Dict, Iterator, Optional

import numpy as np

from chasesim.dynamics import compute_distance
from chasesim.vector import angle_difference, clamp, subtract

logger = logging.getLogger(__name__)

METHODS = ("radius", "cone", "raycast")


class DetectionHistory:
    """Fixed-capacity record of recent detection outcomes.

    Only used for rolling statistics; the frame's detection result is
    whatever ``DetectionSystem.detect`` returned.
    """

    def __init__(self, capacity: int = 60):
        self.capacity = capacity
        self._results = deque(maxlen=capacity)

    def append(self, detected: bool) -> None:
        self._results.append(bool(detected))

    def clear(self) -> None:
        self._results.clear()

    def resize(self, capacity: int) -> None:
        """Change the capacity, keeping the newest entries."""
        self.capacity = capacity
        self._results = deque(self._results, maxlen=capacity)

    def recent(self, frames: int) -> list:
        if frames <= 0:
            return []
        return list(self._results)[-frames:]

    def rate(self, frames: Optional[int] = None) -> float:
        """Fraction of positive results over the last ``frames`` entries."""
        window = list(self._results) if frames is None else self.recent(frames)
        if not window:
            return 0.0
        return float(np.mean(window))

    def has_recent_loss(self, frames: int = 10) -> bool:
        """True if the target was seen in the first half of the window
        and lost for the whole second half."""
        window = self.recent(frames)
        half = frames // 2
        if half == 0:
            return False
        had_detection = any(window[:half])
        lost_detection = not any(window[-half:])
        return had_detection and lost_detection

    @property
    def last(self) -> bool:
        return self._results[-1] if self._results else False

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[bool]:
        return iter(self._results)


class DetectionSystem:
    """Radius (and optional cone-of-view) detection with a rolling history.

    The effective range is ``chaser.detection_radius * sensitivity``;
    sensitivity is clamped into ``[min_sensitivity, max_sensitivity]``
    whenever it is assigned.
    """

    def __init__(
        self,
        sensitivity: float = 0.9,
        min_sensitivity: float = 0.3,
        max_sensitivity: float = 1.5,
        method: str = "radius",
        field_of_view: float = 2.0 * math.pi / 3.0,
        window: int = 60,
        logger: logging.Logger = logger,
    ):
        self.min_sensitivity = min_sensitivity
        self.max_sensitivity = max_sensitivity
        self.sensitivity = clamp(sensitivity, min_sensitivity, max_sensitivity)
        self.logger = logger
        self.method = "radius"
        if method != self.method:
            self.set_method(method)
        self.field_of_view = field_of_view
        self.history = DetectionHistory(window)

    def detect(self, chaser, target) -> bool:
        """Decide whether ``chaser`` perceives ``target`` this frame.

        Returns False without touching the history if either agent is
        missing or the target is inactive.
        """
        if chaser is None or target is None or not target.active:
            return False

        if self.method == "cone":
            detected = self.cone_detection(chaser, target)
        elif self.method == "raycast":
            detected = self.raycast_detection(chaser, target)
        else:
            detected = self.radius_detection(chaser, target)

        self.history.append(detected)
        self.logger.debug(
            "Detection %s (method=%s, distance=%.2f)",
            "positive" if detected else "negative",
            self.method,
            compute_distance(chaser, target),
        )
        return detected

    def radius_detection(self, chaser, target) -> bool:
        return compute_distance(chaser, target) <= self.effective_range(chaser)

    def cone_detection(self, chaser, target, field_of_view: Optional[float] = None) -> bool:
        """Radius check plus a heading check against the field of view."""
        if not self.radius_detection(chaser, target):
            return False
        fov = self.field_of_view if field_of_view is None else field_of_view
        heading = chaser.velocity.angle()
        bearing = subtract(target.position, chaser.position).angle()
        return abs(angle_difference(heading, bearing)) <= fov / 2.0

    def raycast_detection(self, chaser, target) -> bool:
        # The arena has no obstacles, so line of sight reduces to range.
        return self.radius_detection(chaser, target)

    def effective_range(self, chaser) -> float:
        return chaser.detection_radius * self.sensitivity

    def set_sensitivity(self, sensitivity: float) -> float:
        self.sensitivity = clamp(sensitivity, self.min_sensitivity, self.max_sensitivity)
        self.logger.info("Detection sensitivity set to %.2f", self.sensitivity)
        return self.sensitivity

    def set_method(self, method: str) -> bool:
        if method not in METHODS:
            self.logger.warning("Unknown detection method: %s", method)
            return False
        self.method = method
        self.logger.info("Detection method set to %s", method)
        return True

    def set_window(self, window: int) -> None:
        self.history.resize(window)

    def recent_detection_rate(self, frames: int = 60) -> float:
        return self.history.rate(frames)

    def has_recent_loss(self, frames: int = 10) -> bool:
        return self.history.has_recent_loss(frames)

    def stats(self) -> Dict[str, float]:
        total = len(self.history)
        detected = sum(self.history)
        return {
            "total_frames": total,
            "detected_frames": detected,
            "detection_rate": detected / total if total else 0.0,
            "currently_detected": self.history.last,
            "recent_detection_rate": self.recent_detection_rate(),
        }

    def reset(self) -> None:
        self.history.clear()
