"""The two agents of a chase: the fleeing target and the chaser.

Both compose a ``Kinematics`` body instead of inheriting from a common
base class; anything exposing the ``Steerable`` attributes can be fed to
the steering, detection and resolver code.
"""

import itertools
import logging
import math
import random
from collections import deque
from typing import Deque, Optional, Protocol

from chasesim.dynamics import Kinematics, compute_distance
from chasesim.vector import Vector2D, subtract

logger = logging.getLogger(__name__)

_agent_ids = itertools.count(1)


class Steerable(Protocol):
    """Capability shared by every agent that can be steered."""

    id: str
    size: float
    active: bool
    body: Kinematics

    @property
    def position(self) -> Vector2D: ...

    @property
    def velocity(self) -> Vector2D: ...

    @property
    def max_speed(self) -> float: ...

    @property
    def max_force(self) -> float: ...


def _body_attr(name: str) -> property:
    """Expose ``self.body.<name>`` as an attribute of the agent."""
    return property(
        lambda self: getattr(self.body, name),
        lambda self, value: setattr(self.body, name, value),
    )


def _new_id(prefix: str) -> str:
    return f"{prefix}_{next(_agent_ids)}"


class _Trail:
    """Bounded history of recent positions."""

    def __init__(self, max_length: int = 50):
        self.points: Deque[Vector2D] = deque(maxlen=max_length)

    def record(self, position: Vector2D) -> None:
        self.points.append(position.clone())

    def clear(self) -> None:
        self.points.clear()

    def __len__(self) -> int:
        return len(self.points)


class Target:
    """Fleeing agent that crosses the arena at constant speed.

    After every integration step the velocity is rescaled to exactly
    ``max_speed``, so steering forces can turn the target but never slow
    it down.
    """

    position = _body_attr("position")
    velocity = _body_attr("velocity")
    acceleration = _body_attr("acceleration")
    mass = _body_attr("mass")
    max_speed = _body_attr("max_speed")
    max_force = _body_attr("max_force")

    def __init__(
        self,
        position: Vector2D,
        velocity: Vector2D,
        max_speed: float = 8.0,
        size: float = 80.0,
        mass: float = 1.0,
        max_force: float = 0.5,
        spawn_edge: Optional[str] = None,
    ):
        """Initialize the target.

        Args:
            position: Initial position
            velocity: Initial heading; rescaled to ``max_speed``
            max_speed: Constant cruising speed
            size: Diameter
            mass: Mass used when forces are applied
            max_force: Steering force bound
            spawn_edge: Arena edge the target entered from, if any
        """
        self.id = _new_id("target")
        self.body = Kinematics(
            position.clone(),
            velocity.clone().set_magnitude(max_speed),
            mass=mass,
            max_speed=max_speed,
            max_force=max_force,
        )
        self.size = size
        self.active = True
        self.spawn_edge = spawn_edge
        self.escape_count = 0
        self.trail = _Trail()

    def apply_force(self, force: Vector2D) -> None:
        self.body.apply_force(force)

    def update(self, dt: float = 1.0) -> None:
        if not self.active:
            return
        self.body.integrate(dt)
        self.body.velocity.set_magnitude(self.body.max_speed)
        self.trail.record(self.position)

    def distance_to(self, other) -> float:
        return compute_distance(self, other)

    def record_escape(self) -> None:
        self.escape_count += 1
        logger.info("Target %s escaped at %s (escapes: %d)", self.id, self.position, self.escape_count)

    def evade_from(self, chaser, intensity: float = 0.3) -> None:
        """Push the heading away from ``chaser``, scaled by ``intensity``."""
        desired = subtract(self.position, chaser.position).normalize().multiply(self.max_speed)
        self.apply_force(subtract(desired, self.velocity).multiply(intensity))

    def erratic(self, chance: float = 0.01, max_angle: float = math.pi / 4, rng=random) -> bool:
        """With probability ``chance`` rotate the heading by up to ``max_angle / 2``.

        Returns:
            True if the heading changed
        """
        if rng.random() >= chance:
            return False
        self.velocity.rotate((rng.random() - 0.5) * max_angle)
        return True

    def reset(self) -> None:
        self.active = True
        self.escape_count = 0
        self.trail.clear()


class Chaser:
    """Pursuing agent driven by a swappable pursuit strategy.

    Each frame the chaser asks the detection system whether it perceives
    its target, caches the answer in ``target_detected``, then lets the
    strategy turn that into a steering force before integrating.
    """

    position = _body_attr("position")
    velocity = _body_attr("velocity")
    acceleration = _body_attr("acceleration")
    mass = _body_attr("mass")
    max_speed = _body_attr("max_speed")
    max_force = _body_attr("max_force")

    def __init__(
        self,
        position: Vector2D,
        max_speed: float = 9.0,
        size: float = 150.0,
        detection_radius: float = 300.0,
        mass: float = 1.0,
        max_force: float = 0.5,
        strategy=None,
    ):
        """Initialize the chaser at rest.

        Args:
            position: Start position, also used by ``reset``
            max_speed: Velocity magnitude bound
            size: Diameter
            detection_radius: Base sensing range
            mass: Mass used when forces are applied
            max_force: Steering force bound
            strategy: Initial pursuit strategy
        """
        self.id = _new_id("chaser")
        self.start = position.clone()
        self.body = Kinematics(position.clone(), mass=mass, max_speed=max_speed, max_force=max_force)
        self.size = size
        self.active = True
        self.detection_radius = detection_radius
        self.target: Optional[Target] = None
        self.target_detected = False
        self.strategy = strategy
        self.capture_count = 0
        self.current_pursuit_frames = 0
        self.total_pursuit_frames = 0
        self.trail = _Trail()

    def set_target(self, target: Optional[Target]) -> None:
        self.target = target

    def set_strategy(self, strategy) -> None:
        self.strategy = strategy

    def apply_force(self, force: Vector2D) -> None:
        self.body.apply_force(force)

    def distance_to(self, other) -> float:
        return compute_distance(self, other)

    def update(self, dt: float = 1.0, detection_system=None) -> None:
        """Detect, steer and integrate for one frame."""
        if not self.active or self.target is None:
            return

        if detection_system is not None:
            self.target_detected = detection_system.detect(self, self.target)

        if self.strategy is not None:
            steering = self.strategy.calculate(self, self.target, self.target_detected)
            self.apply_force(steering)

        self.body.integrate(dt)
        self.trail.record(self.position)

        if self.target_detected:
            self.current_pursuit_frames += 1

    def record_capture(self) -> None:
        self.capture_count += 1
        self.total_pursuit_frames += self.current_pursuit_frames
        self.current_pursuit_frames = 0

    def average_pursuit_frames(self) -> float:
        if self.capture_count == 0:
            return 0.0
        return self.total_pursuit_frames / self.capture_count

    def reset(self) -> None:
        """Return to the start position at rest, keeping capture totals."""
        self.body.reset(self.start)
        self.target_detected = False
        self.current_pursuit_frames = 0
        self.trail.clear()


def is_within_bounds(agent, min_x: float, min_y: float, max_x: float, max_y: float) -> bool:
    pos = agent.position
    return min_x <= pos.x <= max_x and min_y <= pos.y <= max_y


def is_colliding(agent1, agent2) -> bool:
    """Disc overlap test using each agent's ``size`` as its diameter."""
    if not agent1.active or not agent2.active:
        return False
    return compute_distance(agent1, agent2) < (agent1.size + agent2.size) / 2.0
