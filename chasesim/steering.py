"""Steering behaviours as pure functions on positions and velocities.

Every function returns a new force vector whose magnitude is at most
``max_force``; none of them mutate their inputs, so an agent's own
position can be passed in safely.
"""

import jax
from chex import PRNGKey

from chasesim.vector import Vector2D, add, map_range, multiply, subtract


def _steer(desired: Vector2D, velocity: Vector2D, max_force: float) -> Vector2D:
    return subtract(desired, velocity).limit(max_force)


def seek(
    position: Vector2D,
    velocity: Vector2D,
    target: Vector2D,
    max_speed: float,
    max_force: float,
) -> Vector2D:
    """Steer towards ``target`` at full speed.

    desired = unit(target - position) * max_speed
    steering = limit(desired - velocity, max_force)
    """
    desired = subtract(target, position).normalize().multiply(max_speed)
    return _steer(desired, velocity, max_force)


def flee(
    position: Vector2D,
    velocity: Vector2D,
    threat: Vector2D,
    max_speed: float,
    max_force: float,
) -> Vector2D:
    """Steer directly away from ``threat`` at full speed."""
    desired = subtract(position, threat).normalize().multiply(max_speed)
    return _steer(desired, velocity, max_force)


def arrive(
    position: Vector2D,
    velocity: Vector2D,
    target: Vector2D,
    max_speed: float,
    max_force: float,
    slowing_radius: float = 100.0,
) -> Vector2D:
    """Seek ``target`` but slow down linearly inside ``slowing_radius``.

    The desired speed falls from ``max_speed`` at the slowing radius to zero
    at the target.
    """
    offset = subtract(target, position)
    dist = offset.magnitude()
    if dist < slowing_radius:
        speed = map_range(dist, 0.0, slowing_radius, 0.0, max_speed)
    else:
        speed = max_speed
    desired = offset.normalize().multiply(speed)
    return _steer(desired, velocity, max_force)


def predict_position(position: Vector2D, velocity: Vector2D, lookahead: float) -> Vector2D:
    """Linear extrapolation ``position + velocity * lookahead`` (frames)."""
    return add(position, multiply(velocity, lookahead))


def pursuit(
    position: Vector2D,
    velocity: Vector2D,
    target_position: Vector2D,
    target_velocity: Vector2D,
    max_speed: float,
    max_force: float,
    lookahead: float = 10.0,
) -> Vector2D:
    """Seek the target's position extrapolated ``lookahead`` frames ahead."""
    future = predict_position(target_position, target_velocity, lookahead)
    return seek(position, velocity, future, max_speed, max_force)


def evade(
    position: Vector2D,
    velocity: Vector2D,
    pursuer_position: Vector2D,
    pursuer_velocity: Vector2D,
    max_speed: float,
    max_force: float,
    lookahead: float = 10.0,
) -> Vector2D:
    """Flee from the pursuer's position extrapolated ``lookahead`` frames ahead."""
    future = predict_position(pursuer_position, pursuer_velocity, lookahead)
    return flee(position, velocity, future, max_speed, max_force)


def wander(
    velocity: Vector2D,
    wander_angle: float,
    max_speed: float,
    max_force: float,
    wander_distance: float = 50.0,
    wander_radius: float = 25.0,
) -> Vector2D:
    """Steer towards a point on a circle projected ahead of the heading.

    The circle is centred ``wander_distance`` ahead along the current
    velocity; the point on it sits at ``wander_angle``.
    """
    circle_center = velocity.clone().normalize().multiply(wander_distance)
    displacement = Vector2D.from_angle(wander_angle, wander_radius)
    desired = add(circle_center, displacement).set_magnitude(max_speed)
    return _steer(desired, velocity, max_force)


def next_wander_angle(key: PRNGKey, wander_angle: float, angle_change: float) -> float:
    """Random-walk the wander angle by at most ``angle_change / 2`` either way."""
    step = float(jax.random.uniform(key, minval=-0.5, maxval=0.5))
    return wander_angle + step * angle_change


class Wanderer:
    """Stateful wrapper around ``wander`` that owns the random-walk angle."""

    def __init__(
        self,
        key: PRNGKey,
        angle: float = 0.0,
        angle_change: float = 0.3,
        wander_distance: float = 50.0,
        wander_radius: float = 25.0,
    ):
        self.key = key
        self.angle = angle
        self.angle_change = angle_change
        self.wander_distance = wander_distance
        self.wander_radius = wander_radius

    def steer(self, velocity: Vector2D, max_speed: float, max_force: float) -> Vector2D:
        """Return the wander force for this call and advance the angle."""
        force = wander(
            velocity,
            self.angle,
            max_speed,
            max_force,
            self.wander_distance,
            self.wander_radius,
        )
        self.key, subkey = jax.random.split(self.key)
        self.angle = next_wander_angle(subkey, self.angle, self.angle_change)
        return force
