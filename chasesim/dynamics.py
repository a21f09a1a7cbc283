"""Point-mass kinematics shared by the target and the chaser."""

from chasesim.vector import Vector2D, multiply


class Kinematics:
    """Position/velocity/acceleration state of a point mass.

    Forces are frame-local impulses: they accumulate into ``acceleration``
    through ``apply_force`` and are cleared by ``integrate``.

    Dynamics (one frame):
        velocity = limit(velocity + acceleration, max_speed)
        position = position + velocity * dt
        acceleration = 0
    """

    __slots__ = ("position", "velocity", "acceleration", "mass", "max_speed", "max_force")

    def __init__(
        self,
        position: Vector2D,
        velocity: Vector2D = None,
        mass: float = 1.0,
        max_speed: float = 10.0,
        max_force: float = 0.5,
    ):
        """Initialize the kinematic state.

        Args:
            position: Initial position (owned by this object from now on)
            velocity: Initial velocity, zero if omitted
            mass: Agent mass
            max_speed: Velocity magnitude bound applied after integration
            max_force: Steering force bound used by the steering functions
        """
        self.position = position
        self.velocity = velocity if velocity is not None else Vector2D()
        self.acceleration = Vector2D()
        self.mass = mass
        self.max_speed = max_speed
        self.max_force = max_force

    def apply_force(self, force: Vector2D) -> None:
        """Accumulate ``force / mass`` into the acceleration (F = ma)."""
        self.acceleration.add(multiply(force, 1.0 / self.mass))

    def integrate(self, dt: float = 1.0) -> None:
        """Advance the state by one step of ``dt``."""
        self.velocity.add(self.acceleration)
        self.velocity.limit(self.max_speed)
        self.position.add(multiply(self.velocity, dt))
        self.acceleration.set(0.0, 0.0)

    def speed(self) -> float:
        return self.velocity.magnitude()

    def reset(self, position: Vector2D, velocity: Vector2D = None) -> None:
        self.position.copy_from(position)
        self.velocity.set(0.0, 0.0)
        if velocity is not None:
            self.velocity.copy_from(velocity)
        self.acceleration.set(0.0, 0.0)


def compute_distance(agent1, agent2) -> float:
    """Euclidean distance between two agents' positions.

    Args:
        agent1: Anything with a ``position`` vector
        agent2: Anything with a ``position`` vector

    Returns:
        Scalar distance
    """
    return agent1.position.distance_to(agent2.position)


def check_capture(chaser, target, capture_distance: float) -> bool:
    """Check whether the chaser is close enough to capture the target.

    Capture is a physical proximity test; it does not consult the
    detection state.

    Args:
        chaser: Chaser agent
        target: Target agent
        capture_distance: Strict distance threshold

    Returns:
        True if the target is active and closer than ``capture_distance``
    """
    if chaser is None or target is None or not target.active:
        return False
    return compute_distance(chaser, target) < capture_distance


def check_escape(position: Vector2D, width: float, height: float, margin: float) -> bool:
    """Check whether ``position`` lies outside the arena grown by ``margin``.

    Args:
        position: Position to test
        width: Arena width
        height: Arena height
        margin: Extra distance allowed past every edge

    Returns:
        True if outside ``[-margin, width + margin] x [-margin, height + margin]``
    """
    return (
        position.x < -margin
        or position.x > width + margin
        or position.y < -margin
        or position.y > height + margin
    )
