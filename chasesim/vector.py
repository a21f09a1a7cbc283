"""2D vector primitive used by the kinematics and steering code.

``Vector2D`` methods mutate in place and return ``self`` so they can be
chained. The module-level functions (and the arithmetic operators) are the
non-mutating forms and always return a new vector.
"""

import math
from typing import Iterator

import jax.numpy as jnp
from chex import Array


class Vector2D:
    """Mutable 2D vector with chainable in-place operations."""

    __slots__ = ("x", "y")

    def __init__(self, x: float = 0.0, y: float = 0.0):
        self.x = float(x)
        self.y = float(y)

    # ------------------------------------------------------------------
    # In-place operations
    # ------------------------------------------------------------------

    def set(self, x: float, y: float) -> "Vector2D":
        self.x = float(x)
        self.y = float(y)
        return self

    def copy_from(self, other: "Vector2D") -> "Vector2D":
        self.x = other.x
        self.y = other.y
        return self

    def clone(self) -> "Vector2D":
        return Vector2D(self.x, self.y)

    def add(self, other: "Vector2D") -> "Vector2D":
        self.x += other.x
        self.y += other.y
        return self

    def subtract(self, other: "Vector2D") -> "Vector2D":
        self.x -= other.x
        self.y -= other.y
        return self

    def multiply(self, scalar: float) -> "Vector2D":
        self.x *= scalar
        self.y *= scalar
        return self

    def divide(self, scalar: float) -> "Vector2D":
        """Divide by ``scalar``; dividing by zero leaves the vector unchanged."""
        if scalar != 0:
            self.x /= scalar
            self.y /= scalar
        return self

    def normalize(self) -> "Vector2D":
        """Scale to unit length. The zero vector stays at zero."""
        mag = self.magnitude()
        if mag > 0:
            self.divide(mag)
        return self

    def set_magnitude(self, magnitude: float) -> "Vector2D":
        return self.normalize().multiply(magnitude)

    def limit(self, max_magnitude: float) -> "Vector2D":
        """Clamp the magnitude to ``max_magnitude`` (idempotent)."""
        if self.magnitude_squared() > max_magnitude * max_magnitude:
            self.normalize().multiply(max_magnitude)
        return self

    def rotate(self, angle: float) -> "Vector2D":
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        x = self.x * cos_a - self.y * sin_a
        y = self.x * sin_a + self.y * cos_a
        self.x = x
        self.y = y
        return self

    def lerp(self, other: "Vector2D", t: float) -> "Vector2D":
        self.x += (other.x - self.x) * t
        self.y += (other.y - self.y) * t
        return self

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y)

    def magnitude_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    def distance_to(self, other: "Vector2D") -> float:
        return math.sqrt(self.distance_squared_to(other))

    def distance_squared_to(self, other: "Vector2D") -> float:
        dx = other.x - self.x
        dy = other.y - self.y
        return dx * dx + dy * dy

    def dot(self, other: "Vector2D") -> float:
        return self.x * other.x + self.y * other.y

    def angle(self) -> float:
        """Heading in radians, ``atan2(y, x)``."""
        return math.atan2(self.y, self.x)

    # ------------------------------------------------------------------
    # Constructors and interop
    # ------------------------------------------------------------------

    @staticmethod
    def from_angle(angle: float, magnitude: float = 1.0) -> "Vector2D":
        return Vector2D(math.cos(angle) * magnitude, math.sin(angle) * magnitude)

    @staticmethod
    def from_array(array: Array) -> "Vector2D":
        return Vector2D(float(array[0]), float(array[1]))

    def to_array(self) -> Array:
        return jnp.array([self.x, self.y])

    # ------------------------------------------------------------------
    # Python protocol
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def __eq__(self, other):
        if not isinstance(other, Vector2D):
            return NotImplemented
        return self.x == other.x and self.y == other.y

    __hash__ = None  # mutable

    def __add__(self, other: "Vector2D") -> "Vector2D":
        return add(self, other)

    def __sub__(self, other: "Vector2D") -> "Vector2D":
        return subtract(self, other)

    def __mul__(self, scalar: float) -> "Vector2D":
        return multiply(self, scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> "Vector2D":
        return divide(self, scalar)

    def __neg__(self) -> "Vector2D":
        return Vector2D(-self.x, -self.y)

    def __repr__(self) -> str:
        return f"Vector2D({self.x:.2f}, {self.y:.2f})"


# ----------------------------------------------------------------------
# Non-mutating forms
# ----------------------------------------------------------------------

def add(v1: Vector2D, v2: Vector2D) -> Vector2D:
    return Vector2D(v1.x + v2.x, v1.y + v2.y)


def subtract(v1: Vector2D, v2: Vector2D) -> Vector2D:
    return Vector2D(v1.x - v2.x, v1.y - v2.y)


def multiply(v: Vector2D, scalar: float) -> Vector2D:
    return Vector2D(v.x * scalar, v.y * scalar)


def divide(v: Vector2D, scalar: float) -> Vector2D:
    return v.clone().divide(scalar)


def normalized(v: Vector2D) -> Vector2D:
    return v.clone().normalize()


def limited(v: Vector2D, max_magnitude: float) -> Vector2D:
    return v.clone().limit(max_magnitude)


def rotated(v: Vector2D, angle: float) -> Vector2D:
    return v.clone().rotate(angle)


def lerp(v1: Vector2D, v2: Vector2D, t: float) -> Vector2D:
    return v1.clone().lerp(v2, t)


def distance(v1: Vector2D, v2: Vector2D) -> float:
    return v1.distance_to(v2)


def dot(v1: Vector2D, v2: Vector2D) -> float:
    return v1.dot(v2)


def angle_difference(angle1: float, angle2: float) -> float:
    """Signed difference ``angle2 - angle1`` wrapped into ``[-pi, pi]``."""
    diff = angle2 - angle1
    while diff > math.pi:
        diff -= 2.0 * math.pi
    while diff < -math.pi:
        diff += 2.0 * math.pi
    return diff


def clamp(value: float, lo: float, hi: float) -> float:
    return lo if value < lo else hi if value > hi else value


def map_range(value: float, in_min: float, in_max: float, out_min: float, out_max: float) -> float:
    """Linearly map ``value`` from one range onto another."""
    if in_max == in_min:
        return out_min
    return out_min + (value - in_min) * (out_max - out_min) / (in_max - in_min)
