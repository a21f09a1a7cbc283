"""Tests for the chase simulation loop."""

import jax
import pytest

from chasesim import ChaseSimulation, Outcome, SimParams
from chasesim.agents import Chaser, Target
from chasesim.vector import Vector2D


def make_sim(params=SimParams(), strategy="direct", seed=0):
    return ChaseSimulation(params, strategy=strategy, key=jax.random.PRNGKey(seed))


def place(sim, target_xy, target_velocity, chaser_xy):
    params = sim.params
    target = Target(Vector2D(*target_xy), Vector2D(*target_velocity), max_speed=params.target_speed)
    chaser = Chaser(Vector2D(*chaser_xy), max_speed=params.chaser_speed)
    sim.set_agents(target, chaser)
    return target, chaser


class TestChaseSimulation:
    """Test suite for ChaseSimulation."""

    def test_creation(self):
        """Test that the simulation spawns agents and starts paused."""
        sim = make_sim()
        assert not sim.running
        assert sim.target is not None
        assert sim.chaser is not None
        assert sim.chaser.position == Vector2D(700.0, 450.0)
        assert sim.target.spawn_edge in ("top", "right", "bottom", "left")
        assert sim.chaser.target is sim.target
        assert sim.chaser.strategy is sim.strategy

    def test_invalid_params_raise(self):
        """Test that invalid construction parameters raise."""
        with pytest.raises(ValueError):
            make_sim(SimParams(width=-1.0))
        with pytest.raises(ValueError):
            make_sim(strategy="teleport")

    def test_spawn_is_reproducible(self):
        """Test that the same key gives the same spawn."""
        a = make_sim(seed=3)
        b = make_sim(seed=3)
        assert a.target.position == b.target.position
        assert a.target.velocity == b.target.velocity

    def test_faster_chaser_captures(self):
        """Test that a faster direct chaser closes a 1000 unit gap."""
        params = SimParams(width=20000.0, height=2000.0)
        sim = make_sim(params)
        place(sim, (1500.0, 1000.0), (8.0, 0.0), (500.0, 1000.0))
        assert sim.chaser.distance_to(sim.target) == pytest.approx(1000.0)

        outcome = sim.run_until_outcome(max_frames=3000)
        assert outcome is Outcome.CAPTURE
        assert sim.chaser.distance_to(sim.target) < params.capture_distance
        assert sim.chaser.capture_count == 1
        assert sim.stats.captures == 1

    def test_outward_target_escapes(self):
        """Test that a target heading out of the arena escapes before capture."""
        sim = make_sim()
        target, _ = place(sim, (1390.0, 450.0), (8.0, 0.0), (100.0, 450.0))

        outcome = sim.run_until_outcome(max_frames=100)
        assert outcome is Outcome.ESCAPE
        assert sim.frame == 14
        assert target.escape_count == 1
        assert sim.stats.captures == 0

    def test_stationary_chaser_target_crosses_arena(self):
        """Test that an idle chaser lets a target cross the whole arena and escape."""
        sim = make_sim()
        target, chaser = place(sim, (0.0, 450.0), (8.0, 0.0), (700.0, 150.0))
        sim.strategy.deactivate()

        outcome = sim.run_until_outcome(max_frames=500)
        assert outcome is Outcome.ESCAPE
        # (width + margin) / speed = 187.5 frames
        assert sim.frame == 188
        assert target.position.x > sim.params.width + sim.params.boundary_margin
        assert chaser.position == Vector2D(700.0, 150.0)
        assert sim.stats.captures == 0

    def test_outcome_freezes_physics(self):
        """Test that nothing moves between the outcome and the restart."""
        sim = make_sim()
        target, _ = place(sim, (1390.0, 450.0), (8.0, 0.0), (100.0, 450.0))
        sim.run_until_outcome(max_frames=100)
        frozen = target.position.clone()
        assert sim.step() is Outcome.NONE
        assert target.position == frozen

    def test_restart_after_delay(self):
        """Test that a new attempt begins once the capture delay has elapsed."""
        sim = make_sim()
        sim.start()
        old_target, _ = place(sim, (720.0, 450.0), (8.0, 0.0), (700.0, 450.0))

        assert sim.update(0.1) is Outcome.CAPTURE
        assert sim.pending_restart is not None

        sim.update(1.0)
        assert sim.target is old_target
        assert sim.outcome is Outcome.CAPTURE

        sim.update(1.5)
        assert sim.target is not old_target
        assert sim.outcome is Outcome.NONE
        assert sim.pending_restart is None
        assert sim.stats.attempts == 2

    def test_escape_restarts_sooner(self):
        """Test the shorter escape delay."""
        sim = make_sim()
        sim.start()
        old_target, _ = place(sim, (1501.0, 450.0), (8.0, 0.0), (100.0, 450.0))
        assert sim.update(0.0) is Outcome.ESCAPE
        sim.update(0.6)
        assert sim.target is not old_target

    def test_reset_cancels_pending_restart(self):
        """Test that a full reset cancels the scheduled restart."""
        sim = make_sim()
        sim.start()
        place(sim, (720.0, 450.0), (8.0, 0.0), (700.0, 450.0))
        sim.update(0.1)
        pending = sim.pending_restart
        assert pending is not None

        sim.reset()
        assert not sim.running
        assert pending.cancelled
        assert sim.pending_restart is None
        assert sim.stats.attempts == 0

        target_after_reset = sim.target
        sim.update(5.0)
        assert sim.target is target_after_reset
        assert sim.stats.attempts == 0

    def test_paused_simulation_does_not_move(self):
        """Test that update does not step physics while paused."""
        sim = make_sim()
        position = sim.target.position.clone()
        sim.update()
        assert sim.target.position == position
        assert sim.toggle() is True
        sim.update()
        assert sim.target.position != position

    def test_speed_invariants(self):
        """Test the target's constant speed and the chaser's speed bound."""
        sim = make_sim(strategy="predictive", seed=1)
        for _ in range(300):
            outcome = sim.step()
            if outcome is not Outcome.NONE:
                break
            assert sim.target.velocity.magnitude() == pytest.approx(sim.params.target_speed)
            assert sim.chaser.velocity.magnitude() <= sim.params.chaser_speed + 1e-9

    def test_chaser_stays_in_arena(self):
        """Test that the chaser is kept inside the arena by its half size."""
        sim = make_sim(strategy="patrol", seed=2)
        half = sim.params.chaser_size / 2.0
        for _ in range(300):
            if sim.step() is not Outcome.NONE:
                break
            pos = sim.chaser.position
            assert half <= pos.x <= sim.params.width - half
            assert half <= pos.y <= sim.params.height - half

    def test_set_strategy(self):
        """Test switching strategies and rejecting unknown names."""
        sim = make_sim()
        assert sim.set_strategy("patrol")
        assert sim.chaser.strategy is sim.strategies["patrol"]
        assert not sim.set_strategy("teleport")
        assert sim.strategy_name == "patrol"

    def test_configure(self):
        """Test live configuration with validation."""
        sim = make_sim()
        result = sim.set_target_speed(12.0)
        assert result.ok
        assert sim.target.max_speed == 12.0

        result = sim.set_chaser_speed(100.0)
        assert not result.ok
        assert sim.chaser.max_speed == 9.0

        result = sim.configure(capture_distance=80.0, patrol_radius=150.0)
        assert result.ok
        assert sim.resolver.capture_distance == 80.0
        assert sim.strategies["patrol"].patrol_radius == 150.0

    def test_pause_and_resume_is_one_attempt(self):
        """Test that resuming a paused attempt does not count a new one."""
        sim = make_sim()
        sim.start()
        for _ in range(5):
            sim.update()
        sim.pause()
        sim.start()
        sim.update()

        stats = sim.stats.get_stats()
        assert stats.attempts == 1
        assert stats.captures == 0
        assert stats.escapes == 0

    def test_configure_rejects_out_of_range_values(self):
        """Test that values the setters would clamp are rejected by configure."""
        sim = make_sim()
        original = sim.params
        result = sim.configure(lookahead_min=-30.0, lookahead_max=-10.0)
        assert not result.ok
        assert sim.params is original

        result = sim.configure(capture_distance=5000.0)
        assert not result.ok
        assert sim.resolver.capture_distance == original.capture_distance

    def test_configure_applies_every_field(self):
        """Test that accepted sizes, forces, windows and arena size reach the live objects."""
        sim = make_sim()
        result = sim.configure(
            width=2000.0,
            height=1200.0,
            detection_window=10,
            chaser_size=60.0,
            target_size=40.0,
            mass=2.0,
            max_force=2.0,
            detection_radius=500.0,
            history_length=5,
        )
        assert result.ok
        assert sim.strategies["patrol"].center == Vector2D(1000.0, 600.0)
        assert sim.detection.history.capacity == 10
        assert sim.stats.history.maxlen == 5
        assert sim.chaser.size == 60.0
        assert sim.chaser.max_force == 2.0
        assert sim.chaser.mass == 2.0
        assert sim.chaser.detection_radius == 500.0
        assert sim.target.size == 40.0
        assert sim.target.max_force == 2.0

    def test_chaser_start_applies_next_attempt(self):
        """Test that a new chaser start is used once agents are spawned again."""
        sim = make_sim()
        position = sim.chaser.position.clone()
        assert sim.configure(chaser_start=(100.0, 100.0)).ok
        assert sim.chaser.position == position

        sim.create_agents()
        assert sim.chaser.position == Vector2D(100.0, 100.0)

    def test_sensitivity_and_method(self):
        """Test the detection setters."""
        sim = make_sim()
        assert sim.set_sensitivity(3.0) == 1.5
        assert sim.params.sensitivity == 1.5
        assert sim.set_detection_method("cone")
        assert not sim.set_detection_method("sonar")
        assert sim.detection.method == "cone"

    def test_snapshot(self):
        """Test the renderer view of a frame."""
        sim = make_sim()
        sim.step()
        snap = sim.snapshot()
        assert snap.frame == 1
        assert snap.strategy == "direct"
        assert snap.outcome == "none"
        assert snap.target.position == tuple(sim.target.position)
        assert snap.chaser.effective_radius == pytest.approx(300.0 * 0.9)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
