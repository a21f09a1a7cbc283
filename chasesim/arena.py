"""Rectangular arena geometry: containment, clamping and edge spawning."""

from typing import Tuple

import jax
from chex import PRNGKey

from chasesim.dynamics import check_escape
from chasesim.vector import Vector2D, clamp

EDGES = ("top", "right", "bottom", "left")


class Arena:
    """Axis-aligned arena spanning ``[0, width] x [0, height]``."""

    def __init__(self, width: float, height: float):
        """Initialize the arena.

        Args:
            width: Extent along x
            height: Extent along y
        """
        self.width = width
        self.height = height

    @property
    def center(self) -> Vector2D:
        return Vector2D(self.width / 2.0, self.height / 2.0)

    def contains(self, position: Vector2D, margin: float = 0.0) -> bool:
        """Check if a position is inside the arena grown by ``margin``."""
        return not check_escape(position, self.width, self.height, margin)

    def has_escaped(self, position: Vector2D, margin: float) -> bool:
        return check_escape(position, self.width, self.height, margin)

    def clip(self, position: Vector2D) -> Vector2D:
        """Return a copy of ``position`` clamped into the arena."""
        return Vector2D(
            clamp(position.x, 0.0, self.width),
            clamp(position.y, 0.0, self.height),
        )

    def constrain(self, agent, damping: float = 0.8) -> bool:
        """Keep an agent's body inside the arena, bouncing off the walls.

        The agent is treated as a disc of diameter ``agent.size``. When it
        crosses a wall it is placed back against that wall and the normal
        velocity component is reversed and scaled by ``damping``.

        Args:
            agent: Agent with ``position``, ``velocity`` and ``size``
            damping: Fraction of the normal speed kept after the bounce

        Returns:
            True if any wall was hit
        """
        half = agent.size / 2.0
        pos = agent.position
        vel = agent.velocity
        hit = False

        if pos.x < half:
            pos.x = half
            vel.x *= -damping
            hit = True
        if pos.x > self.width - half:
            pos.x = self.width - half
            vel.x *= -damping
            hit = True
        if pos.y < half:
            pos.y = half
            vel.y *= -damping
            hit = True
        if pos.y > self.height - half:
            pos.y = self.height - half
            vel.y *= -damping
            hit = True

        return hit

    def wrap(self, agent) -> None:
        """Teleport an agent that left the arena to the opposite side."""
        margin = agent.size
        pos = agent.position
        if pos.x < -margin:
            pos.x = self.width + margin
        elif pos.x > self.width + margin:
            pos.x = -margin
        if pos.y < -margin:
            pos.y = self.height + margin
        elif pos.y > self.height + margin:
            pos.y = -margin

    def sample_position(self, key: PRNGKey) -> Vector2D:
        """Sample a uniform random position inside the arena."""
        key_x, key_y = jax.random.split(key)
        return Vector2D(
            float(jax.random.uniform(key_x, minval=0.0, maxval=self.width)),
            float(jax.random.uniform(key_y, minval=0.0, maxval=self.height)),
        )

    def sample_edge_spawn(self, key: PRNGKey, speed: float) -> Tuple[str, Vector2D, Vector2D]:
        """Sample a spawn point on a random edge with an inward heading.

        The heading has a unit component pointing into the arena and a
        tangential component drawn from ``[-1, 1]``, so after normalization
        it lies within 45 degrees of the inward normal.

        Args:
            key: JAX random key
            speed: Magnitude of the returned velocity

        Returns:
            Tuple of (edge name, position, velocity)
        """
        key_edge, key_along, key_tangent = jax.random.split(key, 3)
        edge = EDGES[int(jax.random.randint(key_edge, (), 0, 4))]
        along = float(jax.random.uniform(key_along))
        tangent = float(jax.random.uniform(key_tangent, minval=-1.0, maxval=1.0))

        if edge == "top":
            position = Vector2D(along * self.width, 0.0)
            heading = Vector2D(tangent, 1.0)
        elif edge == "right":
            position = Vector2D(self.width, along * self.height)
            heading = Vector2D(-1.0, tangent)
        elif edge == "bottom":
            position = Vector2D(along * self.width, self.height)
            heading = Vector2D(tangent, -1.0)
        else:
            position = Vector2D(0.0, along * self.height)
            heading = Vector2D(1.0, tangent)

        return edge, position, heading.set_magnitude(speed)
