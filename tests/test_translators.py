"""
Tests for hub <-> normalized value translation.
"""

import pytest

from hubitat_bridge.devices import translators as t
from hubitat_bridge.exceptions import UnrecognizedValueError, ValidationError


class TestPercentages:

    def test_every_percentage_survives_a_round_trip(self):
        for pct in range(101):
            assert t.unit_to_percent(t.percent_to_unit(pct)) == pct

    def test_numeric_strings_are_accepted(self):
        assert t.percent_to_unit("75") == 0.75

    def test_halves_round_up(self):
        assert t.unit_to_percent(0.125) == 13
        assert t.round_half_up(2.5) == 3
        assert t.round_half_up(0.5) == 1

    def test_non_numeric_level_is_rejected(self):
        with pytest.raises(UnrecognizedValueError):
            t.percent_to_unit("bright")


class TestColorTemperature:

    def test_tunable_white_is_inverted(self):
        assert t.color_temp_kelvin_to_unit(6500) == 0.0
        assert t.color_temp_kelvin_to_unit(2700) == 1.0
        assert t.unit_to_color_temp_kelvin(0.0) == 6500
        assert t.unit_to_color_temp_kelvin(1.0) == 2700

    def test_tunable_white_clamps_out_of_range(self):
        assert t.color_temp_kelvin_to_unit(2000) == 1.0
        assert t.color_temp_kelvin_to_unit(9000) == 0.0

    def test_full_color_range(self):
        assert t.full_color_kelvin_to_unit(2200) == 0.0
        assert t.full_color_kelvin_to_unit(6500) == 1.0
        assert t.unit_to_full_color_kelvin(0.5) == 4350

    def test_full_color_clamps_out_of_range(self):
        assert t.full_color_kelvin_to_unit(1800) == 0.0
        assert t.full_color_kelvin_to_unit(7000) == 1.0


class TestFanSpeed:

    @pytest.mark.parametrize("name,expected", [
        ("low", 0.2),
        ("medium-low", 0.4),
        ("medium", 0.6),
        ("medium-high", 0.8),
        ("high", 1.0),
        ("off", 0.0),
        ("auto", 0.5),
        ("on", 0.5),
        ("MEDIUM", 0.6),
    ])
    def test_named_speeds(self, name, expected):
        assert t.fan_speed_to_unit(name) == expected

    def test_numeric_speeds(self):
        assert t.fan_speed_to_unit(40) == 0.4
        assert t.fan_speed_to_unit("65") == 0.65

    def test_unknown_name_raises_validation_error(self):
        with pytest.raises(ValidationError):
            t.fan_speed_to_unit("turbo")

    @pytest.mark.parametrize("raw", ["nan", "NaN", "inf", "-Infinity", float("inf")])
    def test_non_finite_speeds_raise(self, raw):
        with pytest.raises(UnrecognizedValueError):
            t.fan_speed_to_unit(raw)

    def test_non_finite_measurement_raises(self):
        with pytest.raises(UnrecognizedValueError):
            t.to_float("nan")
        with pytest.raises(UnrecognizedValueError):
            t.percent_to_unit("inf")

    @pytest.mark.parametrize("value,expected", [
        (0.0, "off"),
        (0.004, "off"),
        (0.01, "low"),
        (0.2, "low"),
        (0.21, "medium-low"),
        (0.5, "medium"),
        (0.6, "medium"),
        (0.8, "medium-high"),
        (0.81, "high"),
        (1.0, "high"),
    ])
    def test_outbound_buckets(self, value, expected):
        assert t.unit_to_fan_speed(value) == expected

    def test_auto_and_on_are_never_sent(self):
        sent = {t.unit_to_fan_speed(v / 100) for v in range(101)}
        assert "auto" not in sent
        assert "on" not in sent

    def test_named_fan_speed_only_accepts_rungs(self):
        assert t.named_fan_speed("Medium-High") == "medium-high"
        assert t.named_fan_speed("auto") is None
        assert t.named_fan_speed(60) is None


class TestEnumsAndMeasurements:

    def test_enum_to_bool_is_case_insensitive(self):
        is_on = t.enum_to_bool("on")
        assert is_on("on") is True
        assert is_on("ON") is True
        assert is_on("off") is False

    @pytest.mark.parametrize("raw,expected", [
        ("open", "up"),
        ("opening", "up"),
        ("closed", "down"),
        ("closing", "down"),
        ("partially open", "idle"),
        ("unknown", "idle"),
    ])
    def test_window_shade(self, raw, expected):
        assert t.window_shade_to_state(raw) == expected

    def test_color_mode(self):
        assert t.color_mode_to_light_mode("CT") == "temperature"
        assert t.color_mode_to_light_mode("RGB") == "color"

    def test_measurements_parse_numeric_strings(self):
        assert t.to_float("72.5") == 72.5
        with pytest.raises(UnrecognizedValueError):
            t.to_float("n/a")

    def test_button_number_falls_back_to_one(self):
        assert t.to_button_number("3") == 3
        assert t.to_button_number("") == 1
        assert t.to_button_number(None) == 1
