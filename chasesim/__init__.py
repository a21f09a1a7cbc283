"""CHASESIM: Pursuit-evasion chase simulation with steering behaviors."""

from chasesim.simulation import ChaseSimulation
from chasesim.types import SimParams, ValidationResult, FrameSnapshot
from chasesim.vector import Vector2D
from chasesim.agents import Target, Chaser
from chasesim.detection import DetectionSystem
from chasesim.resolver import CaptureResolver, Outcome
from chasesim.stats import StatsTracker
from chasesim.strategies import (
    DirectStrategy,
    PredictiveStrategy,
    PatrolStrategy,
    create_strategy,
)

__version__ = "0.1.0"

__all__ = [
    "ChaseSimulation",
    "SimParams",
    "ValidationResult",
    "FrameSnapshot",
    "Vector2D",
    "Target",
    "Chaser",
    "DetectionSystem",
    "CaptureResolver",
    "Outcome",
    "StatsTracker",
    "DirectStrategy",
    "PredictiveStrategy",
    "PatrolStrategy",
    "create_strategy",
]
