"""Tests for steering behaviours and the kinematic agents."""

import math
import random

import jax
import pytest

from chasesim.agents import Chaser, Target, is_colliding, is_within_bounds
from chasesim.arena import EDGES, Arena
from chasesim.dynamics import Kinematics
from chasesim.steering import (
    Wanderer,
    arrive,
    evade,
    flee,
    predict_position,
    pursuit,
    seek,
    wander,
)
from chasesim.vector import Vector2D


class TestSteering:
    """Test suite for the steering functions."""

    def test_seek_direction_and_bound(self):
        """Test that seek points at the target and respects max_force."""
        force = seek(Vector2D(0, 0), Vector2D(0, 0), Vector2D(100, 0), 9.0, 0.5)
        assert force.x == pytest.approx(0.5)
        assert force.y == pytest.approx(0.0)

    def test_seek_at_target_cancels_velocity(self):
        """Test seeking the own position only brakes the agent."""
        force = seek(Vector2D(10, 10), Vector2D(0.2, 0), Vector2D(10, 10), 9.0, 0.5)
        assert force.x == pytest.approx(-0.2)
        assert force.y == pytest.approx(0.0)

    def test_seek_does_not_mutate_inputs(self):
        """Test that steering leaves positions and velocities untouched."""
        position = Vector2D(1, 2)
        velocity = Vector2D(3, 4)
        seek(position, velocity, Vector2D(50, 50), 9.0, 0.5)
        assert position == Vector2D(1, 2)
        assert velocity == Vector2D(3, 4)

    def test_flee_points_away(self):
        """Test that flee steers away from the threat."""
        force = flee(Vector2D(0, 0), Vector2D(0, 0), Vector2D(10, 0), 9.0, 0.5)
        assert force.x < 0

    def test_arrive_slows_inside_radius(self):
        """Test that arrive asks for less speed close to the target."""
        far = arrive(Vector2D(0, 0), Vector2D(0, 0), Vector2D(500, 0), 9.0, 100.0)
        near = arrive(Vector2D(0, 0), Vector2D(0, 0), Vector2D(50, 0), 9.0, 100.0)
        assert far.x == pytest.approx(9.0)
        assert near.x == pytest.approx(4.5)

    def test_pursuit_and_evade_use_prediction(self):
        """Test that pursuit and evade react to the predicted position."""
        assert predict_position(Vector2D(0, 0), Vector2D(2, 1), 10) == Vector2D(20, 10)

        force = pursuit(Vector2D(0, 0), Vector2D(0, 0), Vector2D(100, 0), Vector2D(0, 10), 9.0, 0.5)
        assert force.y > 0

        away = evade(Vector2D(0, 0), Vector2D(0, 0), Vector2D(100, 0), Vector2D(-20, 0), 9.0, 0.5)
        assert away.x > 0

    def test_all_forces_bounded(self):
        """Test that every behaviour respects max_force."""
        pos = Vector2D(10, 20)
        vel = Vector2D(-5, 3)
        goal = Vector2D(400, -300)
        forces = [
            seek(pos, vel, goal, 9.0, 0.5),
            flee(pos, vel, goal, 9.0, 0.5),
            arrive(pos, vel, goal, 9.0, 0.5),
            pursuit(pos, vel, goal, Vector2D(3, 3), 9.0, 0.5),
            evade(pos, vel, goal, Vector2D(3, 3), 9.0, 0.5),
            wander(vel, 1.0, 9.0, 0.5),
        ]
        for force in forces:
            assert force.magnitude() <= 0.5 + 1e-9

    def test_wanderer_advances_angle(self):
        """Test that the wanderer random-walks its angle within bounds."""
        wanderer = Wanderer(jax.random.PRNGKey(0), angle=0.0, angle_change=0.3)
        previous = wanderer.angle
        for _ in range(5):
            force = wanderer.steer(Vector2D(1, 0), 9.0, 0.5)
            assert force.magnitude() <= 0.5 + 1e-9
            assert abs(wanderer.angle - previous) <= 0.15 + 1e-9
            previous = wanderer.angle


class TestKinematics:
    """Test suite for the point-mass update."""

    def test_integrate_clears_acceleration(self):
        """Test that forces are frame-local."""
        body = Kinematics(Vector2D(0, 0), max_speed=10.0)
        body.apply_force(Vector2D(1, 0))
        body.integrate(1.0)
        assert body.position == Vector2D(1, 0)
        body.integrate(1.0)
        assert body.position == Vector2D(2, 0)
        assert body.acceleration == Vector2D(0, 0)

    def test_velocity_limited(self):
        """Test that speed never exceeds max_speed."""
        body = Kinematics(Vector2D(0, 0), max_speed=3.0)
        body.apply_force(Vector2D(100, 100))
        body.integrate(1.0)
        assert body.speed() == pytest.approx(3.0)

    def test_mass_scales_force(self):
        """Test F = ma."""
        body = Kinematics(Vector2D(0, 0), mass=2.0, max_speed=10.0)
        body.apply_force(Vector2D(1, 0))
        body.integrate(1.0)
        assert body.velocity.x == pytest.approx(0.5)


class TestAgents:
    """Test suite for Target and Chaser."""

    def test_target_keeps_constant_speed(self):
        """Test that the target's speed equals max_speed after every update."""
        target = Target(Vector2D(100, 100), Vector2D(1, 0), max_speed=8.0)
        assert target.velocity.magnitude() == pytest.approx(8.0)
        for _ in range(20):
            target.apply_force(Vector2D(0, 0.5))
            target.update(1.0)
            assert target.velocity.magnitude() == pytest.approx(8.0)

    def test_target_erratic(self):
        """Test that erratic keeps speed and only fires with its chance."""
        target = Target(Vector2D(0, 0), Vector2D(1, 0), max_speed=8.0)
        assert target.erratic(chance=0.0) is False
        rng = random.Random(3)
        assert target.erratic(chance=1.0, rng=rng) is True
        assert target.velocity.magnitude() == pytest.approx(8.0)
        assert abs(target.velocity.angle()) <= math.pi / 8 + 1e-9

    def test_chaser_without_target_is_idle(self):
        """Test that a chaser with no target does not move."""
        chaser = Chaser(Vector2D(50, 50))
        chaser.update(1.0)
        assert chaser.position == Vector2D(50, 50)

    def test_chaser_reset_keeps_captures(self):
        """Test that reset restores the start position but not totals."""
        chaser = Chaser(Vector2D(50, 50))
        chaser.position.set(300, 300)
        chaser.current_pursuit_frames = 12
        chaser.record_capture()
        chaser.reset()
        assert chaser.position == Vector2D(50, 50)
        assert chaser.capture_count == 1
        assert chaser.average_pursuit_frames() == pytest.approx(12.0)

    def test_unique_ids(self):
        """Test that agents get distinct ids."""
        a = Target(Vector2D(0, 0), Vector2D(1, 0))
        b = Target(Vector2D(0, 0), Vector2D(1, 0))
        assert a.id != b.id

    def test_bounds_and_collision(self):
        """Test bounds and overlap helpers."""
        chaser = Chaser(Vector2D(100, 100), size=150.0)
        target = Target(Vector2D(200, 100), Vector2D(1, 0), size=80.0)
        assert is_within_bounds(chaser, 0, 0, 1400, 900)
        assert is_colliding(chaser, target)
        target.active = False
        assert not is_colliding(chaser, target)


class TestArena:
    """Test suite for arena geometry."""

    def test_constrain_bounces(self):
        """Test the damped bounce off a wall using the half size."""
        arena = Arena(1400, 900)
        chaser = Chaser(Vector2D(10, 450), size=150.0)
        chaser.velocity.set(-5, 0)
        assert arena.constrain(chaser, 0.8)
        assert chaser.position.x == pytest.approx(75.0)
        assert chaser.velocity.x == pytest.approx(4.0)

    def test_escape_margin(self):
        """Test the escape region is the arena grown by the margin."""
        arena = Arena(1400, 900)
        assert not arena.has_escaped(Vector2D(-99, 450), 100)
        assert arena.has_escaped(Vector2D(-101, 450), 100)
        assert arena.contains(Vector2D(700, 450))

    def test_wrap(self):
        """Test teleporting to the opposite side once fully outside."""
        arena = Arena(1400, 900)
        target = Target(Vector2D(-81, 450), Vector2D(-1, 0), size=80.0)
        arena.wrap(target)
        assert target.position.x == pytest.approx(1480.0)

    def test_sample_position_inside(self):
        """Test that sampled positions are inside the arena."""
        arena = Arena(1400, 900)
        position = arena.sample_position(jax.random.PRNGKey(5))
        assert arena.contains(position)
        assert arena.clip(Vector2D(-5, 1000)) == Vector2D(0, 900)

    def test_edge_spawn_points_inward(self):
        """Test that spawned targets start on an edge heading into the arena."""
        arena = Arena(1400, 900)
        key = jax.random.PRNGKey(0)
        for _ in range(10):
            key, subkey = jax.random.split(key)
            edge, position, velocity = arena.sample_edge_spawn(subkey, 8.0)
            assert edge in EDGES
            assert velocity.magnitude() == pytest.approx(8.0)
            center = arena.center
            to_center = Vector2D(center.x - position.x, center.y - position.y)
            if edge in ("top", "bottom"):
                assert velocity.y * to_center.y > 0
            else:
                assert velocity.x * to_center.x > 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
