"""
Unit tests for Settings.
"""

import pytest
from pydantic import ValidationError

from crossarb.config.constants import IMPACT_FACTOR_MAX, IMPACT_FACTOR_MIN, SIZING_IMPACT_FACTOR
from crossarb.config.settings import Settings, get_settings


class TestSettings:
    """Tests for Settings loading and validation."""

    def test_defaults(self) -> None:
        """Test defaults come from the constants module."""
        settings = Settings(_env_file=None)

        assert settings.sizing_impact_factor == SIZING_IMPACT_FACTOR
        assert settings.impact_factor_range == (IMPACT_FACTOR_MIN, IMPACT_FACTOR_MAX)
        assert settings.oracle_concurrency == 1
        assert settings.seed is None

    def test_environment_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test CROSSARB_ variables override defaults."""
        monkeypatch.setenv("CROSSARB_NUM_EXCHANGES", "5")
        monkeypatch.setenv("CROSSARB_SEED", "99")
        monkeypatch.setenv("CROSSARB_HOLD_PROBABILITY", "0.1")

        settings = Settings(_env_file=None)

        assert settings.num_exchanges == 5
        assert settings.seed == 99
        assert settings.hold_probability == 0.1

    def test_lowercase_log_level(self) -> None:
        """Test level names are case-insensitive."""
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        """Test unknown level names are rejected."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="verbose")

    def test_impact_range_order(self) -> None:
        """Test min above max is rejected."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, impact_factor_min=0.01, impact_factor_max=0.001)

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("num_exchanges", 1),
            ("hold_probability", 1.5),
            ("sizing_impact_factor", 0.0),
            ("dashboard_port", 70000),
        ],
    )
    def test_field_bounds(self, field: str, value: object) -> None:
        """Test out-of-range values are rejected."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    def test_get_settings_cached(self) -> None:
        """Test get_settings returns one shared instance."""
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
