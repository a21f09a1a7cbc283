"""Validation and update helpers for ``SimParams``."""

import logging
from typing import Any, Dict, List, Mapping, Tuple

from chasesim.types import (
    CAPTURE_DISTANCE_RANGE,
    LOOKAHEAD_RANGE,
    PATROL_ANGULAR_SPEED_RANGE,
    PATROL_RADIUS_RANGE,
    PATROL_SPEED_RANGE,
    SimParams,
    ValidationResult,
)

logger = logging.getLogger(__name__)

# Values that must be strictly positive.
_POSITIVE_FIELDS = (
    "width",
    "height",
    "target_size",
    "chaser_size",
    "target_speed",
    "target_speed_min",
    "chaser_speed",
    "chaser_speed_min",
    "sensitivity_min",
    "fps_min",
    "detection_radius",
    "mass",
    "max_force",
    "capture_distance",
    "time_step",
    "field_of_view",
    "detection_window",
    "lookahead",
    "lookahead_min",
    "lookahead_max",
    "lookahead_distance",
    "patrol_speed",
    "patrol_radius",
    "patrol_angular_speed",
    "history_length",
)

# (value, lower bound, upper bound)
_RANGES = (
    ("target_speed", "target_speed_min", "target_speed_max"),
    ("chaser_speed", "chaser_speed_min", "chaser_speed_max"),
    ("sensitivity", "sensitivity_min", "sensitivity_max"),
    ("fps", "fps_min", "fps_max"),
)

# (value, fixed bounds shared with the runtime setters)
_FIXED_RANGES = (
    ("capture_distance", CAPTURE_DISTANCE_RANGE),
    ("lookahead", LOOKAHEAD_RANGE),
    ("lookahead_min", LOOKAHEAD_RANGE),
    ("lookahead_max", LOOKAHEAD_RANGE),
    ("patrol_radius", PATROL_RADIUS_RANGE),
    ("patrol_speed", PATROL_SPEED_RANGE),
    ("patrol_angular_speed", PATROL_ANGULAR_SPEED_RANGE),
)


def validate_params(params: SimParams) -> ValidationResult:
    """Check that every parameter is usable by the simulation core.

    Args:
        params: Parameters to check

    Returns:
        ValidationResult listing every rejected value
    """
    errors: List[str] = []

    for name in _POSITIVE_FIELDS:
        value = getattr(params, name)
        if value <= 0:
            errors.append(f"{name} must be positive, got {value}")

    for name in ("boundary_margin", "capture_delay", "escape_delay"):
        value = getattr(params, name)
        if value < 0:
            errors.append(f"{name} must not be negative, got {value}")

    if not 0.0 <= params.bounce_damping <= 1.0:
        errors.append(f"bounce_damping must be in [0, 1], got {params.bounce_damping}")

    for name, lo_name, hi_name in _RANGES:
        value = getattr(params, name)
        lo = getattr(params, lo_name)
        hi = getattr(params, hi_name)
        if lo > hi:
            errors.append(f"{lo_name} ({lo}) is greater than {hi_name} ({hi})")
        elif not lo <= value <= hi:
            errors.append(f"{name} must be in [{lo}, {hi}], got {value}")

    for name, (lo, hi) in _FIXED_RANGES:
        value = getattr(params, name)
        if not lo <= value <= hi:
            errors.append(f"{name} must be in [{lo}, {hi}], got {value}")

    if params.lookahead_min > params.lookahead_max:
        errors.append(
            f"lookahead_min ({params.lookahead_min}) is greater than "
            f"lookahead_max ({params.lookahead_max})"
        )

    if params.chaser_start is not None and len(params.chaser_start) != 2:
        errors.append(f"chaser_start must be an (x, y) pair, got {params.chaser_start}")

    return ValidationResult(ok=not errors, errors=tuple(errors))


def update_params(params: SimParams, **changes: Any) -> Tuple[SimParams, ValidationResult]:
    """Apply ``changes`` to ``params`` if the result validates.

    On failure the original ``params`` are returned untouched together with
    the errors, so the caller can correct and resubmit.

    Args:
        params: Current parameters
        **changes: Field names and their new values

    Returns:
        Tuple of (parameters now in effect, validation result)
    """
    unknown = sorted(set(changes) - set(SimParams._fields))
    if unknown:
        result = ValidationResult(ok=False, errors=tuple(f"unknown parameter: {k}" for k in unknown))
        logger.warning("Rejected configuration update: %s", "; ".join(result.errors))
        return params, result

    candidate = params._replace(**changes)
    result = validate_params(candidate)
    if not result.ok:
        logger.warning("Rejected configuration update: %s", "; ".join(result.errors))
        return params, result

    logger.debug("Configuration updated: %s", changes)
    return candidate, result


def params_to_dict(params: SimParams) -> Dict[str, Any]:
    """Plain-dict form of ``params`` (e.g. for logging or Hydra configs)."""
    data = params._asdict()
    if data["chaser_start"] is not None:
        data["chaser_start"] = list(data["chaser_start"])
    return data


def params_from_dict(data: Mapping[str, Any]) -> Tuple[SimParams, ValidationResult]:
    """Build parameters from a mapping, starting from the defaults.

    Keys not in ``SimParams`` are reported as errors. Returns the default
    parameters when validation fails.
    """
    changes = dict(data)
    if changes.get("chaser_start") is not None:
        changes["chaser_start"] = tuple(float(v) for v in changes["chaser_start"])
    return update_params(SimParams(), **changes)
