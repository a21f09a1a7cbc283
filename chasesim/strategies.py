"""Pursuit strategies: turn chaser/target kinematics into a steering force.

Every strategy implements ``calculate(chaser, target, target_detected)``
and can be switched off with ``deactivate``; an inactive strategy, or one
called without a target, returns a zero force.
"""

import logging
import math
from typing import Any, Dict, Optional, Protocol

from chasesim.steering import predict_position, seek
from chasesim.types import (
    LOOKAHEAD_RANGE,
    PATROL_ANGULAR_SPEED_RANGE,
    PATROL_RADIUS_RANGE,
    PATROL_SPEED_RANGE,
)
from chasesim.vector import Vector2D, clamp, distance, map_range, subtract

logger = logging.getLogger(__name__)

PATROL = "patrol"
PURSUE = "pursue"


class PursuitStrategy(Protocol):
    """Capability consumed by the chaser once per frame."""

    name: str
    active: bool

    def calculate(self, chaser, target, target_detected: bool) -> Vector2D: ...

    def reset(self) -> None: ...

    def info(self) -> Dict[str, Any]: ...


class _Switch:
    """Activation gate shared by the strategies."""

    name = ""
    description = ""

    def __init__(self, logger: logging.Logger = logger):
        self.active = True
        self.logger = logger

    def activate(self) -> None:
        self.active = True
        self.logger.debug("%s activated", self.name)

    def deactivate(self) -> None:
        self.active = False
        self.logger.debug("%s deactivated", self.name)

    def reset(self) -> None:
        pass

    def info(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "active": self.active}


class DirectStrategy(_Switch):
    """Seek the target's current position every frame.

    Ignores the detection flag: the chaser always steers on ground truth.
    """

    name = "direct"
    description = "Moves straight towards the target's current position"

    def calculate(self, chaser, target, target_detected: bool) -> Vector2D:
        if not self.active or target is None:
            return Vector2D()
        self.logger.debug(
            "direct: distance=%.2f detected=%s", chaser.distance_to(target), target_detected
        )
        return seek(chaser.position, chaser.velocity, target.position, chaser.max_speed, chaser.max_force)

    def info(self) -> Dict[str, Any]:
        return {
            **super().info(),
            "type": "Direct Pursuit",
            "best_for": "Slow targets, open spaces",
            "weaknesses": "Predictable, can be dodged easily",
        }


class PredictiveStrategy(_Switch):
    """Seek where the target will be, once it has been detected.

    With adaptive lookahead on, the lookahead grows linearly with the
    distance to the target, from ``lookahead_min`` at distance 0 to
    ``lookahead_max`` at ``lookahead_distance`` and beyond. The predicted
    point is clamped into the arena.
    """

    name = "predictive"
    description = "Predicts the target's future position and intercepts it"

    def __init__(
        self,
        width: float = 1400.0,
        height: float = 900.0,
        lookahead: float = 10.0,
        lookahead_min: float = 3.0,
        lookahead_max: float = 20.0,
        lookahead_distance: float = 400.0,
        adaptive_lookahead: bool = True,
        logger: logging.Logger = logger,
    ):
        super().__init__(logger)
        self.width = width
        self.height = height
        self.lookahead = lookahead
        self.lookahead_min = lookahead_min
        self.lookahead_max = lookahead_max
        self.lookahead_distance = lookahead_distance
        self.adaptive_lookahead = adaptive_lookahead

    def calculate(self, chaser, target, target_detected: bool) -> Vector2D:
        if not self.active or target is None:
            return Vector2D()

        dist = chaser.distance_to(target)
        lookahead = self.effective_lookahead(dist)
        if target_detected:
            aim = self.predict_future_position(target, lookahead)
        else:
            aim = target.position

        self.logger.debug(
            "predictive: aim=%s lookahead=%.2f distance=%.2f", aim, lookahead, dist
        )
        return seek(chaser.position, chaser.velocity, aim, chaser.max_speed, chaser.max_force)

    def effective_lookahead(self, dist: float) -> float:
        if self.adaptive_lookahead:
            return self.adaptive_lookahead_for(dist)
        return self.lookahead

    def adaptive_lookahead_for(self, dist: float) -> float:
        """Map a distance onto ``[lookahead_min, lookahead_max]``."""
        return map_range(
            clamp(dist, 0.0, self.lookahead_distance),
            0.0,
            self.lookahead_distance,
            self.lookahead_min,
            self.lookahead_max,
        )

    def predict_future_position(self, target, lookahead: float) -> Vector2D:
        prediction = predict_position(target.position, target.velocity, lookahead)
        prediction.x = clamp(prediction.x, 0.0, self.width)
        prediction.y = clamp(prediction.y, 0.0, self.height)
        return prediction

    def interception_point(self, chaser, target, iterations: int = 3) -> Vector2D:
        """Refine a time-to-intercept estimate and return where the paths meet.

        Starts from ``t = distance / chaser_speed`` and re-evaluates the
        distance to the target's extrapolated position ``iterations`` times.
        """
        if chaser.max_speed <= 0:
            return target.position.clone()
        t = subtract(target.position, chaser.position).magnitude() / chaser.max_speed
        for _ in range(iterations):
            predicted = predict_position(target.position, target.velocity, t)
            t = distance(chaser.position, predicted) / chaser.max_speed
        return predict_position(target.position, target.velocity, t)

    def set_adaptive_lookahead(self, adaptive: bool) -> None:
        self.adaptive_lookahead = adaptive
        self.logger.debug("Adaptive lookahead %s", "on" if adaptive else "off")

    def set_lookahead(self, lookahead: float) -> float:
        self.lookahead = clamp(lookahead, *LOOKAHEAD_RANGE)
        return self.lookahead

    def info(self) -> Dict[str, Any]:
        return {
            **super().info(),
            "type": "Predictive Pursuit",
            "lookahead": self.lookahead,
            "adaptive_lookahead": self.adaptive_lookahead,
            "best_for": "Fast targets, predictable movements",
            "weaknesses": "Vulnerable to sudden direction changes",
        }


class PatrolStrategy(_Switch):
    """Two-state machine: circle a patrol point until the target is detected.

    The state is ``pursue`` on every frame the target is detected and
    ``patrol`` otherwise; there is no hysteresis. While patrolling the
    chaser seeks a point moving around a circle at a reduced speed, and the
    patrol clock advances by one frame (the angle by ``angular_speed``).
    The clock survives across frames until ``reset`` is called.
    """

    name = "patrol"
    description = "Patrols the area until the target is detected, then pursues"

    def __init__(
        self,
        center: Optional[Vector2D] = None,
        radius: float = 100.0,
        speed: float = 0.5,
        angular_speed: float = 0.05,
        logger: logging.Logger = logger,
    ):
        super().__init__(logger)
        self.center = center.clone() if center is not None else Vector2D(700.0, 450.0)
        self.patrol_radius = radius
        self.patrol_speed = speed
        self.angular_speed = angular_speed
        self.state = PATROL
        self.patrol_time = 0

    @property
    def patrol_angle(self) -> float:
        """Angle of the current patrol waypoint on the circle."""
        return self.patrol_time * self.angular_speed

    def calculate(self, chaser, target, target_detected: bool) -> Vector2D:
        if not self.active or target is None:
            return Vector2D()

        self.update_state(target_detected)
        if self.state == PURSUE:
            return seek(chaser.position, chaser.velocity, target.position, chaser.max_speed, chaser.max_force)

        steering = self.patrol_behavior(chaser)
        self.patrol_time += 1
        return steering

    def update_state(self, target_detected: bool) -> str:
        previous = self.state
        self.state = PURSUE if target_detected else PATROL
        if previous != self.state:
            self.logger.debug("patrol: %s -> %s", previous, self.state)
        return self.state

    def waypoint(self) -> Vector2D:
        angle = self.patrol_angle
        return Vector2D(
            self.center.x + math.cos(angle) * self.patrol_radius,
            self.center.y + math.sin(angle) * self.patrol_radius,
        )

    def patrol_behavior(self, chaser) -> Vector2D:
        return seek(
            chaser.position,
            chaser.velocity,
            self.waypoint(),
            chaser.max_speed * self.patrol_speed,
            chaser.max_force,
        )

    def set_patrol_center(self, x: float, y: float) -> None:
        self.center.set(x, y)

    def set_patrol_radius(self, radius: float) -> float:
        self.patrol_radius = clamp(radius, *PATROL_RADIUS_RANGE)
        return self.patrol_radius

    def set_patrol_speed(self, speed: float) -> float:
        self.patrol_speed = clamp(speed, *PATROL_SPEED_RANGE)
        return self.patrol_speed

    def set_angular_speed(self, angular_speed: float) -> float:
        self.angular_speed = clamp(angular_speed, *PATROL_ANGULAR_SPEED_RANGE)
        return self.angular_speed

    def reset_patrol_time(self) -> None:
        self.patrol_time = 0

    def reset(self) -> None:
        self.state = PATROL
        self.patrol_time = 0

    def info(self) -> Dict[str, Any]:
        return {
            **super().info(),
            "type": "Patrol + Pursuit",
            "state": self.state,
            "patrol_radius": self.patrol_radius,
            "patrol_speed": self.patrol_speed,
            "angular_speed": self.angular_speed,
            "best_for": "Large areas, intermittent target visibility",
            "weaknesses": "Slower initial response time",
        }


STRATEGY_NAMES = (DirectStrategy.name, PredictiveStrategy.name, PatrolStrategy.name)


def create_strategy(name: str, params=None, logger: logging.Logger = logger) -> PursuitStrategy:
    """Factory function to create pursuit strategies.

    Args:
        name: Strategy name ("direct", "predictive" or "patrol")
        params: Optional ``SimParams`` supplying arena and tuning values
        logger: Logger handed to the strategy

    Returns:
        Strategy object
    """
    if name == "direct":
        return DirectStrategy(logger)
    elif name == "predictive":
        if params is None:
            return PredictiveStrategy(logger=logger)
        return PredictiveStrategy(
            width=params.width,
            height=params.height,
            lookahead=params.lookahead,
            lookahead_min=params.lookahead_min,
            lookahead_max=params.lookahead_max,
            lookahead_distance=params.lookahead_distance,
            logger=logger,
        )
    elif name == "patrol":
        if params is None:
            return PatrolStrategy(logger=logger)
        return PatrolStrategy(
            center=Vector2D(params.width / 2.0, params.height / 2.0),
            radius=params.patrol_radius,
            speed=params.patrol_speed,
            angular_speed=params.patrol_angular_speed,
            logger=logger,
        )
    else:
        raise ValueError(f"Unknown strategy: {name}")
