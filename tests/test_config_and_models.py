"""
Configuration and Model Tests
=============================

Validation boundary, layered loading and event models.
"""

import dataclasses

import pytest
from pydantic import ValidationError

from risk_heatmap.config import (
    ConfigurationError,
    KDEConfig,
    load_config,
    resolve_timezone,
    validate_kde_config,
)
from risk_heatmap.models.event import (
    MAX_TIMESTAMP_MS,
    AbnormalDimension,
    Event,
    EventMessage,
    RiskLevel,
    risk_score_for,
)


class TestKDEConfig:
    """Tests for the configuration boundary."""

    def test_defaults(self):
        """Verify default density parameters."""
        config = KDEConfig()
        assert config.bandwidth == 8.0
        assert (config.ws, config.wb, config.wt) == (0.4, 0.3, 0.3)
        assert config.grid_size == 50
        assert config.time_window_hours == 24.0

    @pytest.mark.parametrize(
        "changes",
        [
            {"bandwidth": 0},
            {"bandwidth": -1.5},
            {"bandwidth": float("inf")},
            {"bandwidth": float("nan")},
            {"grid_size": 0},
            {"time_window_hours": 0},
            {"time_window_hours": -3},
            {"time_window_hours": float("inf")},
            {"ws": -0.1},
            {"ws": float("inf")},
            {"wb": float("nan")},
            {"wt": float("inf")},
        ],
    )
    def test_rejects_invalid(self, changes):
        """Verify out-of-range and non-finite parameters are rejected."""
        with pytest.raises(ConfigurationError):
            validate_kde_config(changes)

    def test_partial_update_keeps_base(self):
        """Verify omitted fields keep the base configuration's values."""
        base = KDEConfig(bandwidth=5.0, grid_size=10)
        config = validate_kde_config({"wt": 0.9}, base=base)
        assert config.bandwidth == 5.0
        assert config.grid_size == 10
        assert config.wt == 0.9

    def test_zero_weights_are_valid(self):
        """Verify all-zero axis weights are accepted."""
        config = validate_kde_config({"ws": 0, "wb": 0, "wt": 0})
        assert config.ws == 0.0

    def test_immutable(self):
        """Verify a validated configuration cannot be mutated."""
        with pytest.raises(ValidationError):
            KDEConfig().bandwidth = 3.0


class TestSettingsLoading:
    """Tests for YAML + environment layering."""

    def test_yaml_file(self, tmp_path):
        """Verify YAML values override defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("kde:\n  bandwidth: 4.5\nbuffer:\n  max_events: 50\n")
        settings = load_config(str(path))
        assert settings.kde.bandwidth == 4.5
        assert settings.buffer.max_events == 50
        assert settings.kde.grid_size == 50

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        """Verify environment variables take precedence over YAML."""
        path = tmp_path / "config.yaml"
        path.write_text("kde:\n  bandwidth: 4.5\n")
        monkeypatch.setenv("RISK_HEATMAP_BANDWIDTH", "6.25")
        monkeypatch.setenv("RISK_HEATMAP_GRID_SIZE", "12")
        monkeypatch.setenv("RISK_HEATMAP_TIMEZONE", "Asia/Shanghai")
        settings = load_config(str(path))
        assert settings.kde.bandwidth == 6.25
        assert settings.kde.grid_size == 12
        assert settings.projection.timezone == "Asia/Shanghai"

    def test_invalid_yaml_value_rejected(self, tmp_path):
        """Verify an invalid file value fails loading."""
        path = tmp_path / "config.yaml"
        path.write_text("kde:\n  grid_size: 0\n")
        with pytest.raises(ValidationError):
            load_config(str(path))

    def test_cluster_spread_capped(self, tmp_path):
        """Verify a jitter wider than the hot zone margin is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("generator:\n  cluster_spread: 41\n")
        with pytest.raises(ValidationError):
            load_config(str(path))

    def test_unknown_timezone(self):
        """Verify unknown IANA names raise ValueError."""
        with pytest.raises(ValueError):
            resolve_timezone("Mars/Olympus_Mons")


class TestEventModel:
    """Tests for the event entity."""

    @pytest.mark.parametrize(
        "level, score",
        [
            (RiskLevel.CRITICAL, 5),
            (RiskLevel.HIGH, 4),
            (RiskLevel.MEDIUM, 3),
            (RiskLevel.LOW, 3),
            (RiskLevel.NONE, 3),
        ],
    )
    def test_risk_score_derived(self, make_event, level, score):
        """Verify risk score follows risk level."""
        assert risk_score_for(level) == score
        assert make_event(risk_level=level).risk_score == score

    def test_risk_score_not_settable(self):
        """Verify risk score cannot be passed to the constructor."""
        with pytest.raises(TypeError):
            Event(
                id="x",
                x=1.0,
                y=1.0,
                t=0.0,
                dimension=AbnormalDimension.TIME,
                risk_level=RiskLevel.HIGH,
                risk_score=1,
            )

    def test_frozen(self, make_event):
        """Verify events are immutable."""
        event = make_event()
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.x = 3.0

    def test_string_enums_coerced(self):
        """Verify string dimension and level are coerced to enums."""
        event = Event(id="x", x=1.0, y=1.0, t=0.0, dimension="TIME", risk_level="HIGH")
        assert event.dimension is AbnormalDimension.TIME
        assert event.risk_score == 4

    def test_message_validation(self):
        """Verify coordinates outside [0, 100] are rejected."""
        with pytest.raises(ValidationError):
            EventMessage(
                id="pt-1", x=120.0, y=10.0, t=0.0,
                dimension="TIME", risk_level="HIGH",
            )

    @pytest.mark.parametrize("t", [1e15, MAX_TIMESTAMP_MS + 1, float("inf")])
    def test_message_rejects_unrepresentable_timestamp(self, t):
        """Verify timestamps past year 9999 are rejected."""
        with pytest.raises(ValidationError):
            EventMessage(
                id="pt-1", x=10.0, y=10.0, t=t,
                dimension="TIME", risk_level="HIGH",
            )

    def test_message_accepts_last_representable_timestamp(self):
        """Verify the last millisecond of year 9999 is accepted."""
        message = EventMessage(
            id="pt-1", x=10.0, y=10.0, t=MAX_TIMESTAMP_MS,
            dimension="TIME", risk_level="HIGH",
        )
        assert message.to_event().t == MAX_TIMESTAMP_MS

    def test_message_details_default(self):
        """Verify optional text fields default to empty strings."""
        message = EventMessage(
            id="pt-1", x=10.0, y=10.0, t=0.0,
            dimension="TIME", risk_level="HIGH",
        )
        assert message.details == ""
        assert message.to_event().details == ""

    def test_message_to_event(self):
        """Verify a validated message converts to an Event."""
        message = EventMessage.model_validate({
            "id": "pt-9",
            "x": 10.0,
            "y": 90.0,
            "t": 1000.0,
            "dimension": "SENSITIVITY",
            "risk_level": "CRITICAL",
            "user_name": "Auditor_X",
        })
        event = message.to_event()
        assert event.risk_score == 5
        assert event.user_name == "Auditor_X"
        assert event.to_dict()["dimension"] == "SENSITIVITY"
