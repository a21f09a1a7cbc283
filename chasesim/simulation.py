"""Frame-driven chase simulation with a host-loop style interface."""

import logging
from typing import Dict, Optional

import jax
from chex import PRNGKey

from chasesim.agents import Chaser, Target
from chasesim.arena import Arena
from chasesim.config import update_params, validate_params
from chasesim.detection import DetectionSystem
from chasesim.resolver import CaptureResolver, Outcome
from chasesim.scheduler import EventScheduler, ScheduledEvent
from chasesim.stats import StatsCollector, StatsTracker
from chasesim.strategies import STRATEGY_NAMES, PursuitStrategy, create_strategy
from chasesim.types import (
    AgentSnapshot,
    CaptureRecord,
    ChaserSnapshot,
    EscapeRecord,
    FrameSnapshot,
    SimParams,
    ValidationResult,
)
from chasesim.vector import Vector2D

logger = logging.getLogger(__name__)


class ChaseSimulation:
    """One chaser hunting one target across repeated attempts.

    Each physics frame runs, in order: detection, steering and integration
    of the chaser, integration of the target, wall constraint of the
    chaser, then capture/escape resolution. A capture or escape freezes
    the physics and schedules the next attempt after a delay; ``reset``
    cancels any such pending restart.

    The host calls ``update(delta_time)`` once per rendered frame.
    ``delta_time`` only drives the restart timer; physics always advances
    by the fixed ``params.time_step`` so runs are reproducible.
    """

    def __init__(
        self,
        params: SimParams = SimParams(),
        strategy: str = "direct",
        key: Optional[PRNGKey] = None,
        stats: Optional[StatsCollector] = None,
        logger: logging.Logger = logger,
    ):
        """Initialize the simulation and spawn the first pair of agents.

        Args:
            params: Simulation parameters
            strategy: Initial strategy name ("direct", "predictive", "patrol")
            key: JAX random key used for target spawns
            stats: Statistics collaborator, an in-memory tracker if omitted
            logger: Logger shared with the detection, resolver and strategies
        """
        result = validate_params(params)
        if not result.ok:
            raise ValueError("Invalid simulation parameters: " + "; ".join(result.errors))

        self.params = params
        self.logger = logger
        self.key = key if key is not None else jax.random.PRNGKey(0)
        self.arena = Arena(params.width, params.height)
        self.scheduler = EventScheduler()
        self.detection = DetectionSystem(
            sensitivity=params.sensitivity,
            min_sensitivity=params.sensitivity_min,
            max_sensitivity=params.sensitivity_max,
            field_of_view=params.field_of_view,
            window=params.detection_window,
            logger=logger,
        )
        self.resolver = CaptureResolver(
            self.arena,
            capture_distance=params.capture_distance,
            margin=params.boundary_margin,
            logger=logger,
        )
        self.stats = stats if stats is not None else StatsTracker(max_history=params.history_length)
        self.strategies: Dict[str, PursuitStrategy] = {
            name: create_strategy(name, params, logger) for name in STRATEGY_NAMES
        }
        if strategy not in self.strategies:
            raise ValueError(f"Unknown strategy: {strategy}")
        self.strategy_name = strategy

        self.running = False
        self.frame = 0
        self.attempt_started = False
        self.total_frames = 0
        self.outcome = Outcome.NONE
        self.pending_restart: Optional[ScheduledEvent] = None
        self.target: Optional[Target] = None
        self.chaser: Optional[Chaser] = None

        self.create_agents()
        self.logger.info("Simulation ready (%gx%g, strategy=%s)", params.width, params.height, strategy)

    # ------------------------------------------------------------------
    # Agents and strategy
    # ------------------------------------------------------------------

    @property
    def strategy(self) -> PursuitStrategy:
        return self.strategies[self.strategy_name]

    def chaser_start(self) -> Vector2D:
        if self.params.chaser_start is not None:
            return Vector2D(*self.params.chaser_start)
        return self.arena.center

    def create_agents(self) -> None:
        """Spawn a fresh target on a random edge and a chaser at its start."""
        self.key, spawn_key = jax.random.split(self.key)
        edge, position, velocity = self.arena.sample_edge_spawn(spawn_key, self.params.target_speed)
        target = Target(
            position,
            velocity,
            max_speed=self.params.target_speed,
            size=self.params.target_size,
            mass=self.params.mass,
            max_force=self.params.max_force,
            spawn_edge=edge,
        )
        chaser = Chaser(
            self.chaser_start(),
            max_speed=self.params.chaser_speed,
            size=self.params.chaser_size,
            detection_radius=self.params.detection_radius,
            mass=self.params.mass,
            max_force=self.params.max_force,
        )
        self.set_agents(target, chaser)
        self.logger.debug("Target spawned on %s edge at %s", edge, position)

    def set_agents(self, target: Optional[Target], chaser: Chaser) -> None:
        """Install a target/chaser pair and start a new attempt's frame count."""
        self.target = target
        self.chaser = chaser
        chaser.set_target(target)
        chaser.set_strategy(self.strategy)
        self.strategy.reset()
        self.frame = 0
        self.outcome = Outcome.NONE
        self.attempt_started = False

    def set_strategy(self, name: str) -> bool:
        if name not in self.strategies:
            self.logger.warning("Unknown strategy: %s", name)
            return False
        self.strategy_name = name
        self.strategy.reset()
        if self.chaser is not None:
            self.chaser.set_strategy(self.strategy)
        self.logger.info("Strategy set to %s", name)
        return True

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self.running:
            return
        self.running = True
        if not self.attempt_started:
            self._begin_attempt()
        self.logger.info("Simulation started")

    def pause(self) -> None:
        self.running = False
        self.logger.info("Simulation paused")

    def toggle(self) -> bool:
        if self.running:
            self.pause()
        else:
            self.start()
        return self.running

    def reset(self) -> None:
        """Stop, cancel any pending restart and start over with fresh agents."""
        self.pause()
        if self.pending_restart is not None:
            self.pending_restart.cancel()
            self.pending_restart = None
        self.scheduler.cancel_all()
        self.create_agents()
        self.stats.reset()
        self.detection.reset()
        self.resolver.reset()
        self.total_frames = 0
        self.logger.info("Simulation reset")

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------

    def update(self, delta_time: Optional[float] = None) -> Outcome:
        """Host-loop entry point, called once per rendered frame.

        Args:
            delta_time: Host time since the previous call, in seconds;
                defaults to one frame at ``params.fps``

        Returns:
            Terminal outcome produced by this frame, if any
        """
        if delta_time is None:
            delta_time = 1.0 / self.params.fps
        self.scheduler.advance(delta_time)
        if not self.running:
            return Outcome.NONE
        return self.step()

    def step(self) -> Outcome:
        """Run one physics frame unless the attempt has already ended."""
        if self.outcome is not Outcome.NONE or self.chaser is None:
            return Outcome.NONE

        dt = self.params.time_step
        self.chaser.update(dt, self.detection)
        if self.target is not None:
            self.target.update(dt)
        self.arena.constrain(self.chaser, self.params.bounce_damping)
        self.frame += 1
        self.total_frames += 1

        outcome = self.resolver.resolve(self.chaser, self.target, self.frame)
        if outcome is Outcome.CAPTURE:
            self._handle_capture()
        elif outcome is Outcome.ESCAPE:
            self._handle_escape()
        return outcome

    def run_until_outcome(self, max_frames: int = 10000) -> Outcome:
        """Step until the attempt ends or ``max_frames`` frames have run."""
        for _ in range(max_frames):
            outcome = self.step()
            if outcome is not Outcome.NONE:
                return outcome
        return Outcome.NONE

    def _handle_capture(self) -> None:
        self.outcome = Outcome.CAPTURE
        self.chaser.record_capture()
        self.stats.record_capture(CaptureRecord(
            strategy_name=self.strategy_name,
            target_speed=self.params.target_speed,
            chaser_speed=self.params.chaser_speed,
            detection_sensitivity=self.detection.sensitivity,
            distance=self.chaser.distance_to(self.target),
        ))
        self._schedule_restart(self.params.capture_delay)

    def _handle_escape(self) -> None:
        self.outcome = Outcome.ESCAPE
        self.stats.record_escape(EscapeRecord(
            strategy_name=self.strategy_name,
            target_speed=self.params.target_speed,
            chaser_speed=self.params.chaser_speed,
            detection_sensitivity=self.detection.sensitivity,
        ))
        self._schedule_restart(self.params.escape_delay)

    def _schedule_restart(self, delay: float) -> None:
        if self.pending_restart is not None:
            self.pending_restart.cancel()
        self.pending_restart = self.scheduler.schedule(delay, self._restart, label="restart")

    def _restart(self) -> None:
        previous = self.outcome
        self.pending_restart = None
        self.create_agents()
        self._begin_attempt()
        self.logger.info("New attempt after %s", previous.value)

    def _begin_attempt(self) -> None:
        # One call per pair of agents; resuming after a pause is not a new attempt.
        self.stats.start_attempt()
        self.attempt_started = True

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def configure(self, **changes) -> ValidationResult:
        """Validate and apply parameter changes to the live simulation.

        On failure nothing changes and the errors are returned. Every
        accepted value takes effect immediately, except ``chaser_start``,
        which is used from the next attempt on. Resizing the arena moves
        the patrol circle to the new centre.
        """
        params, result = update_params(self.params, **changes)
        if not result.ok:
            return result

        self.params = params
        self.arena.width = params.width
        self.arena.height = params.height
        self.detection.min_sensitivity = params.sensitivity_min
        self.detection.max_sensitivity = params.sensitivity_max
        self.detection.sensitivity = params.sensitivity
        self.detection.field_of_view = params.field_of_view
        if self.detection.history.capacity != params.detection_window:
            self.detection.set_window(params.detection_window)
        self.resolver.capture_distance = params.capture_distance
        self.resolver.margin = params.boundary_margin

        predictive = self.strategies["predictive"]
        predictive.width = params.width
        predictive.height = params.height
        predictive.lookahead = params.lookahead
        predictive.lookahead_min = params.lookahead_min
        predictive.lookahead_max = params.lookahead_max
        predictive.lookahead_distance = params.lookahead_distance

        patrol = self.strategies["patrol"]
        patrol.patrol_radius = params.patrol_radius
        patrol.patrol_speed = params.patrol_speed
        patrol.angular_speed = params.patrol_angular_speed
        if "width" in changes or "height" in changes:
            patrol.set_patrol_center(*self.arena.center)

        if isinstance(self.stats, StatsTracker):
            self.stats.set_max_history(params.history_length)

        if self.target is not None:
            self.target.max_speed = params.target_speed
            self.target.size = params.target_size
            self.target.mass = params.mass
            self.target.max_force = params.max_force
        if self.chaser is not None:
            self.chaser.max_speed = params.chaser_speed
            self.chaser.size = params.chaser_size
            self.chaser.mass = params.mass
            self.chaser.max_force = params.max_force
            self.chaser.detection_radius = params.detection_radius

        self.logger.info("Configuration updated: %s", changes)
        return result

    def set_target_speed(self, speed: float) -> ValidationResult:
        return self.configure(target_speed=speed)

    def set_chaser_speed(self, speed: float) -> ValidationResult:
        return self.configure(chaser_speed=speed)

    def set_sensitivity(self, sensitivity: float) -> float:
        """Set detection sensitivity, clamped into the configured bounds."""
        value = self.detection.set_sensitivity(sensitivity)
        self.params = self.params._replace(sensitivity=value)
        return value

    def set_detection_method(self, method: str) -> bool:
        return self.detection.set_method(method)

    # ------------------------------------------------------------------
    # Renderer view
    # ------------------------------------------------------------------

    def snapshot(self) -> FrameSnapshot:
        target = None
        if self.target is not None:
            target = AgentSnapshot(
                position=tuple(self.target.position),
                velocity=tuple(self.target.velocity),
                size=self.target.size,
                active=self.target.active,
            )
        chaser = None
        if self.chaser is not None:
            chaser = ChaserSnapshot(
                position=tuple(self.chaser.position),
                velocity=tuple(self.chaser.velocity),
                size=self.chaser.size,
                active=self.chaser.active,
                target_detected=self.chaser.target_detected,
                detection_radius=self.chaser.detection_radius,
                effective_radius=self.detection.effective_range(self.chaser),
            )
        return FrameSnapshot(
            frame=self.frame,
            target=target,
            chaser=chaser,
            strategy=self.strategy_name,
            outcome=self.outcome.value,
        )
