"""Tests for pipeline configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from fleet_segmenter.config import PipelineConfig, parse_senders


class TestParseSenders:
    def test_parses_pairs(self):
        assert parse_senders("robot1=1, robot2=2") == {"robot1": 1, "robot2": 2}

    def test_ignores_empty_items(self):
        assert parse_senders("robot1=1,,") == {"robot1": 1}

    def test_missing_separator_raises(self):
        with pytest.raises(ValueError, match="Expected name=id"):
            parse_senders("robot1")

    def test_non_integer_id_raises(self):
        with pytest.raises(ValueError):
            parse_senders("robot1=one")


class TestPipelineConfig:
    def test_defaults(self):
        config = PipelineConfig()
        assert config.acceleration_window_s == pytest.approx(0.1)
        assert config.weak_acceleration == pytest.approx(0.1)
        assert config.weak_deceleration == pytest.approx(-0.1)
        assert config.min_ticks_per_segment == 10
        assert config.sections_per_lane == 3
        assert config.fleet_size is None
        assert config.senders == {}

    @pytest.mark.parametrize("field, value", [
        ("acceleration_window_s", 0.0),
        ("weak_acceleration", -0.1),
        ("weak_deceleration", 0.1),
        ("min_ticks_per_segment", 0),
        ("fleet_size", 0),
    ])
    def test_invalid_values_raise(self, field, value):
        with pytest.raises(ValidationError):
            PipelineConfig(**{field: value})

    def test_from_env(self):
        env = {
            "FLEET_SEGMENTER_WEAK_ACCELERATION": "0.2",
            "FLEET_SEGMENTER_MIN_TICKS_PER_SEGMENT": "5",
            "FLEET_SEGMENTER_SENDERS": "robot1=1, robot2=2",
            "UNRELATED": "x",
        }
        config = PipelineConfig.from_env(env)

        assert config.weak_acceleration == pytest.approx(0.2)
        assert config.min_ticks_per_segment == 5
        assert config.senders == {"robot1": 1, "robot2": 2}

    def test_overrides_take_precedence(self):
        env = {"FLEET_SEGMENTER_MIN_TICKS_PER_SEGMENT": "5"}
        config = PipelineConfig.from_env(env, min_ticks_per_segment=8, fleet_size=None)

        assert config.min_ticks_per_segment == 8
        assert config.fleet_size is None

    def test_empty_variables_are_ignored(self):
        config = PipelineConfig.from_env({"FLEET_SEGMENTER_FLEET_SIZE": ""})
        assert config.fleet_size is None

    def test_invalid_environment_value_raises(self):
        with pytest.raises(ValidationError):
            PipelineConfig.from_env({"FLEET_SEGMENTER_WEAK_DECELERATION": "0.3"})
