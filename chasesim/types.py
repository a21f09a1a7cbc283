"""Type definitions for the chase simulation."""

import math
from typing import NamedTuple, Optional, Tuple

# Bounds enforced by the runtime setters and by parameter validation.
CAPTURE_DISTANCE_RANGE = (10.0, 100.0)
LOOKAHEAD_RANGE = (1.0, 50.0)
PATROL_RADIUS_RANGE = (50.0, 300.0)
PATROL_SPEED_RANGE = (0.1, 1.0)
PATROL_ANGULAR_SPEED_RANGE = (0.01, 0.2)


class SimParams(NamedTuple):
    """Named scalar parameters consumed by the simulation core.

    Distances are in arena units (screen pixels), speeds in
    units per frame and delays in host seconds.

    Attributes:
        width: Arena width
        height: Arena height
        target_size: Diameter of the target
        target_speed: Constant speed of the target
        target_speed_min: Lower bound for the target speed
        target_speed_max: Upper bound for the target speed
        chaser_size: Diameter of the chaser
        chaser_speed: Maximum speed of the chaser
        chaser_speed_min: Lower bound for the chaser speed
        chaser_speed_max: Upper bound for the chaser speed
        chaser_start: Chaser spawn point; ``None`` means the arena centre
        detection_radius: Base sensing range of the chaser
        mass: Mass of both agents
        max_force: Per-frame steering force bound
        sensitivity: Detection radius multiplier
        sensitivity_min: Lower sensitivity bound
        sensitivity_max: Upper sensitivity bound
        field_of_view: Cone detection angle (radians)
        detection_window: Capacity of the rolling detection history
        capture_distance: Proximity threshold for capture
        boundary_margin: Distance past the arena edge before the target escapes
        bounce_damping: Velocity factor kept when the chaser hits a wall
        time_step: Fixed logical physics step per frame
        fps: Frames per second used to convert frame counts to seconds
        fps_min: Lower fps bound
        fps_max: Upper fps bound
        capture_delay: Pause after a capture before the next attempt
        escape_delay: Pause after an escape before the next attempt
        lookahead: Fixed predictive lookahead (frames)
        lookahead_min: Adaptive lookahead at zero distance
        lookahead_max: Adaptive lookahead at ``lookahead_distance``
        lookahead_distance: Distance at which the adaptive lookahead saturates
        patrol_speed: Speed multiplier while patrolling
        patrol_radius: Radius of the patrol circle
        patrol_angular_speed: Patrol angle increment per frame
        history_length: Capacity of the statistics attempt history
    """
    width: float = 1400.0
    height: float = 900.0
    target_size: float = 80.0
    target_speed: float = 8.0
    target_speed_min: float = 8.0
    target_speed_max: float = 15.0
    chaser_size: float = 150.0
    chaser_speed: float = 9.0
    chaser_speed_min: float = 3.0
    chaser_speed_max: float = 15.0
    chaser_start: Optional[Tuple[float, float]] = None
    detection_radius: float = 300.0
    mass: float = 1.0
    max_force: float = 0.5
    sensitivity: float = 0.9
    sensitivity_min: float = 0.3
    sensitivity_max: float = 1.5
    field_of_view: float = 2.0 * math.pi / 3.0
    detection_window: int = 60
    capture_distance: float = 60.0
    boundary_margin: float = 100.0
    bounce_damping: float = 0.8
    time_step: float = 1.0
    fps: int = 60
    fps_min: int = 30
    fps_max: int = 120
    capture_delay: float = 2.0
    escape_delay: float = 0.5
    lookahead: float = 10.0
    lookahead_min: float = 3.0
    lookahead_max: float = 20.0
    lookahead_distance: float = 400.0
    patrol_speed: float = 0.5
    patrol_radius: float = 100.0
    patrol_angular_speed: float = 0.05
    history_length: int = 1000


class ValidationResult(NamedTuple):
    """Outcome of a configuration check.

    Attributes:
        ok: True when every value is acceptable
        errors: Human readable description of each rejected value
    """
    ok: bool
    errors: Tuple[str, ...] = ()


class AgentSnapshot(NamedTuple):
    """Read-only view of an agent for renderers."""
    position: Tuple[float, float]
    velocity: Tuple[float, float]
    size: float
    active: bool


class ChaserSnapshot(NamedTuple):
    """Read-only view of the chaser, including its sensing state."""
    position: Tuple[float, float]
    velocity: Tuple[float, float]
    size: float
    active: bool
    target_detected: bool
    detection_radius: float
    effective_radius: float


class FrameSnapshot(NamedTuple):
    """Everything a renderer needs to draw one frame.

    Attributes:
        frame: Number of physics frames run in the current attempt
        target: Target view, ``None`` if there is no target
        chaser: Chaser view, ``None`` if there is no chaser
        strategy: Name of the active pursuit strategy
        outcome: Terminal outcome of the attempt so far (``"none"``,
            ``"capture"`` or ``"escape"``)
    """
    frame: int
    target: Optional[AgentSnapshot]
    chaser: Optional[ChaserSnapshot]
    strategy: str
    outcome: str


class CaptureRecord(NamedTuple):
    """Event sent to the statistics collaborator on capture."""
    strategy_name: str
    target_speed: float
    chaser_speed: float
    detection_sensitivity: float
    distance: float


class EscapeRecord(NamedTuple):
    """Event sent to the statistics collaborator on escape."""
    strategy_name: str
    target_speed: float
    chaser_speed: float
    detection_sensitivity: float
