"""Tests for configuration loading and validation."""

import pytest

from garage_calendar.config import AppConfig, LayoutConfig, SlotConfig, _validate_config


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_default_layout_constants(self):
        layout = LayoutConfig()
        assert layout.pixels_per_minute == 1.0
        assert layout.pixels_per_hour == 60
        assert layout.day_base_offset_px == 10
        assert layout.week_base_offset_px == 5
        assert layout.overlap_shift_px == 10
        assert layout.detail_threshold_minutes == 30
        assert layout.month_visible_bookings == 2

    def test_invalid_pixels_per_minute(self):
        config = AppConfig(layout=LayoutConfig(pixels_per_minute=0))
        with pytest.raises(ValueError, match="PIXELS_PER_MINUTE"):
            _validate_config(config)

    def test_negative_shift(self):
        config = AppConfig(layout=LayoutConfig(overlap_shift_px=-1))
        with pytest.raises(ValueError, match="OVERLAP_SHIFT_PX"):
            _validate_config(config)

    def test_width_percent_out_of_range(self):
        config = AppConfig(layout=LayoutConfig(week_width_percent=120))
        with pytest.raises(ValueError, match="WEEK_WIDTH_PERCENT"):
            _validate_config(config)

    def test_detail_threshold_must_be_positive(self):
        config = AppConfig(layout=LayoutConfig(detail_threshold_minutes=0))
        with pytest.raises(ValueError, match="DETAIL_THRESHOLD_MINUTES"):
            _validate_config(config)

    def test_month_visible_bookings(self):
        config = AppConfig(layout=LayoutConfig(month_visible_bookings=0))
        with pytest.raises(ValueError, match="MONTH_VISIBLE_BOOKINGS"):
            _validate_config(config)

    def test_slot_step_must_divide_an_hour(self):
        config = AppConfig(slots=SlotConfig(slot_step_minutes=25))
        with pytest.raises(ValueError, match="SLOT_STEP_MINUTES"):
            _validate_config(config)

    def test_bad_opening_time(self):
        config = AppConfig(slots=SlotConfig(default_open_time="8am"))
        with pytest.raises(ValueError, match="DEFAULT_OPEN_TIME"):
            _validate_config(config)

    def test_bad_closing_time(self):
        config = AppConfig(slots=SlotConfig(default_close_time="25:00"))
        with pytest.raises(ValueError, match="DEFAULT_CLOSE_TIME"):
            _validate_config(config)

    def test_api_timeout_must_be_positive(self):
        config = AppConfig(slots=SlotConfig(api_timeout_sec=0))
        with pytest.raises(ValueError, match="GARAGE_API_TIMEOUT"):
            _validate_config(config)

    def test_safe_int_parsing(self):
        from garage_calendar.config import _safe_int

        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_int_rejects_garbage(self, monkeypatch):
        from garage_calendar.config import _safe_int

        monkeypatch.setenv("GARAGE_TEST_INT", "ten")
        with pytest.raises(ValueError, match="GARAGE_TEST_INT"):
            _safe_int("GARAGE_TEST_INT", "10")

    def test_safe_float_parsing(self):
        from garage_calendar.config import _safe_float

        assert _safe_float("NONEXISTENT_VAR_12345", "3.14") == pytest.approx(3.14)
