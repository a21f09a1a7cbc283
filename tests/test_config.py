"""Tests for parameter validation and updates."""

import pytest

from chasesim.config import params_from_dict, params_to_dict, update_params, validate_params
from chasesim.types import SimParams


class TestValidation:
    """Test suite for validate_params."""

    def test_defaults_are_valid(self):
        """Test that the default parameters validate."""
        result = validate_params(SimParams())
        assert result.ok
        assert result.errors == ()

    def test_defaults_match_reference_values(self):
        """Test a few defaults the simulation relies on."""
        params = SimParams()
        assert (params.width, params.height) == (1400.0, 900.0)
        assert params.target_speed < params.chaser_speed
        assert params.capture_distance == 60.0
        assert params.boundary_margin == 100.0

    def test_rejects_non_positive_values(self):
        """Test that zero sizes and speeds are rejected."""
        result = validate_params(SimParams(width=0.0, capture_distance=-1.0))
        assert not result.ok
        assert any("width" in e for e in result.errors)
        assert any("capture_distance" in e for e in result.errors)

    def test_rejects_non_positive_bounds(self):
        """Test that lower bounds and lookahead limits must be positive."""
        result = validate_params(SimParams(
            lookahead_min=-30.0,
            lookahead_max=-10.0,
            sensitivity_min=0.0,
            target_speed_min=-1.0,
            chaser_speed_min=0.0,
        ))
        assert not result.ok
        for name in ("lookahead_min", "lookahead_max", "sensitivity_min",
                     "target_speed_min", "chaser_speed_min"):
            assert any(e.startswith(f"{name} must be positive") for e in result.errors)

    def test_rejects_values_outside_setter_ranges(self):
        """Test that values the runtime setters would clamp are rejected."""
        result = validate_params(SimParams(
            capture_distance=5000.0,
            patrol_speed=5.0,
            patrol_radius=5000.0,
            patrol_angular_speed=0.5,
            lookahead=80.0,
        ))
        assert not result.ok
        for name in ("capture_distance", "patrol_speed", "patrol_radius",
                     "patrol_angular_speed", "lookahead"):
            assert any(e.startswith(f"{name} must be in") for e in result.errors)

    def test_setter_range_edges_are_valid(self):
        """Test that the inclusive range limits validate."""
        params = SimParams(capture_distance=100.0, patrol_speed=1.0, patrol_radius=50.0)
        assert validate_params(params).ok

    def test_rejects_out_of_range_speed(self):
        """Test that speeds outside their bounds are rejected."""
        result = validate_params(SimParams(target_speed=20.0))
        assert not result.ok
        assert any("target_speed" in e for e in result.errors)

    def test_rejects_inverted_bounds(self):
        """Test that min > max is reported."""
        result = validate_params(SimParams(sensitivity_min=2.0, sensitivity_max=1.0))
        assert not result.ok
        assert any("sensitivity_min" in e for e in result.errors)

    def test_rejects_bad_chaser_start(self):
        """Test that the chaser start must be a pair."""
        result = validate_params(SimParams(chaser_start=(1.0, 2.0, 3.0)))
        assert not result.ok


class TestUpdates:
    """Test suite for update_params and dict conversion."""

    def test_update_applies_valid_changes(self):
        """Test a valid update."""
        params, result = update_params(SimParams(), target_speed=12.0, sensitivity=1.2)
        assert result.ok
        assert params.target_speed == 12.0
        assert params.sensitivity == 1.2

    def test_update_keeps_params_on_failure(self):
        """Test that an invalid update leaves the parameters unchanged."""
        original = SimParams()
        params, result = update_params(original, chaser_speed=100.0)
        assert not result.ok
        assert params is original

    def test_unknown_key(self):
        """Test that unknown parameter names are rejected."""
        original = SimParams()
        params, result = update_params(original, warp_speed=9.0)
        assert not result.ok
        assert "warp_speed" in result.errors[0]
        assert params is original

    def test_dict_conversion(self):
        """Test conversion to and from plain mappings."""
        data = params_to_dict(SimParams(chaser_start=(100.0, 200.0)))
        assert data["chaser_start"] == [100.0, 200.0]

        params, result = params_from_dict({"width": 2000.0, "chaser_start": [100, 200]})
        assert result.ok
        assert params.width == 2000.0
        assert params.chaser_start == (100.0, 200.0)
        assert params.height == SimParams().height


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
