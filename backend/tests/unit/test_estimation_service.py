"""
Unit tests for forward print estimation

Weight and print time from base volume, quality, infill, supports and pattern.
"""
import math

import pytest

from printquote.schemas.pricing import (
    FallbackKind,
    InfillPattern,
    PricingError,
    PricingErrorCode,
    PrintJobSpec,
    SupportType,
)
from printquote.services.estimation_service import MIN_PRINT_TIME_HOURS, estimate
from printquote.services.print_parameters import PricingConfig


@pytest.fixture
def config():
    return PricingConfig()


def make_spec(**overrides) -> PrintJobSpec:
    fields = {
        "base_volume_cm3": 67.0,
        "material_type": "pla",
        "color": "white",
        "quality": "standard",
    }
    fields.update(overrides)
    return PrintJobSpec(**fields)


class TestReferenceScenario:
    """67 cm³ PLA at standard quality, no supports, grid infill"""

    def test_effective_volume_weight_and_time(self, config):
        result = estimate(make_spec(), config)

        assert result.layer_height == "0.2"
        assert result.infill_percent == 20
        assert result.density == 1.24
        assert result.effective_volume_cm3 == pytest.approx(80.4)
        assert result.weight_grams == pytest.approx(99.696)
        assert result.print_time_hours == pytest.approx(8.04)
        assert result.fallbacks == []

    def test_reported_values_are_rounded(self, config):
        result = estimate(make_spec(), config)

        assert result.material_weight_grams == 100
        assert result.print_time_minutes == 482

    def test_same_input_same_output(self, config):
        spec = make_spec(support_type=SupportType.TREE, infill_pattern=InfillPattern.GYROID)

        assert estimate(spec, config) == estimate(spec, config)


class TestInvalidVolume:
    """Volume must be known and positive; no silent substitution"""

    @pytest.mark.parametrize("volume", [None, 0, 0.0, -12.5])
    def test_missing_or_non_positive_volume_is_rejected(self, config, volume):
        result = estimate(make_spec(base_volume_cm3=volume), config)

        assert isinstance(result, PricingError)
        assert result.code == PricingErrorCode.INVALID_VOLUME
        assert result.blocking_items[0].missing == ["base_volume_cm3"]

    def test_nan_volume_raises(self, config):
        with pytest.raises(ValueError):
            estimate(make_spec(base_volume_cm3=math.nan), config)


class TestPrintTimeFloor:
    """Setup/cooldown overhead: never below 0.25 h"""

    @pytest.mark.parametrize("volume", [0.0001, 0.5, 1.0, 2.0])
    def test_tiny_models_hit_the_floor(self, config, volume):
        result = estimate(make_spec(base_volume_cm3=volume), config)

        assert result.print_time_hours == MIN_PRINT_TIME_HOURS
        assert result.print_time_minutes == 15

    @pytest.mark.parametrize("volume", [0.001, 1, 3, 10, 67, 500])
    @pytest.mark.parametrize("quality", ["draft", "standard", "high", "ultra"])
    def test_floor_holds_for_any_positive_volume(self, config, volume, quality):
        result = estimate(make_spec(base_volume_cm3=volume, quality=quality), config)

        assert result.print_time_hours >= 0.25

    def test_multipliers_apply_on_top_of_the_floor(self, config):
        result = estimate(make_spec(base_volume_cm3=0.01, support_type=SupportType.NORMAL), config)

        assert result.print_time_hours == pytest.approx(0.25 * 1.10)


class TestSupportMultipliers:
    """normal: x1.15 weight, x1.10 time; tree: x1.10 weight, x1.05 time"""

    @pytest.mark.parametrize("support, weight_factor, time_factor", [
        (SupportType.NONE, 1.0, 1.0),
        (SupportType.NORMAL, 1.15, 1.10),
        (SupportType.TREE, 1.10, 1.05),
    ])
    def test_relative_to_baseline(self, config, support, weight_factor, time_factor):
        baseline = estimate(make_spec(), config)
        result = estimate(make_spec(support_type=support), config)

        assert result.weight_grams == pytest.approx(baseline.weight_grams * weight_factor)
        assert result.print_time_hours == pytest.approx(baseline.print_time_hours * time_factor)


class TestInfillPattern:
    """honeycomb and gyroid print 5% slower; pattern never changes weight"""

    @pytest.mark.parametrize("pattern, time_factor", [
        (InfillPattern.GRID, 1.0),
        (InfillPattern.TRIANGLES, 1.0),
        (InfillPattern.HONEYCOMB, 1.05),
        (InfillPattern.GYROID, 1.05),
    ])
    def test_time_factor(self, config, pattern, time_factor):
        baseline = estimate(make_spec(), config)
        result = estimate(make_spec(infill_pattern=pattern), config)

        assert result.print_time_hours == pytest.approx(baseline.print_time_hours * time_factor)
        assert result.weight_grams == pytest.approx(baseline.weight_grams)


class TestInfillMonotonicity:
    def test_more_infill_never_lighter_or_faster(self, config):
        previous = None
        for infill in range(0, 101, 5):
            result = estimate(make_spec(infill_percent=infill), config)
            if previous is not None:
                assert result.material_weight_grams >= previous.material_weight_grams
                assert result.print_time_minutes >= previous.print_time_minutes
            previous = result


class TestParameterResolution:
    """Custom overrides beat quality-derived defaults"""

    @pytest.mark.parametrize("quality, layer_height, infill", [
        ("draft", "0.3", 10),
        ("standard", "0.2", 20),
        ("high", "0.15", 25),
        ("ultra", "0.1", 30),
        ("0.2", "0.2", 20),
        ("0.15mm", "0.15", 25),
        ("0.30", "0.3", 10),
    ])
    def test_quality_resolves_layer_height_and_infill(self, config, quality, layer_height, infill):
        result = estimate(make_spec(quality=quality), config)

        assert result.layer_height == layer_height
        assert result.infill_percent == infill

    def test_custom_infill_override(self, config):
        result = estimate(make_spec(infill_percent=50), config)

        assert result.infill_percent == 50
        assert result.effective_volume_cm3 == pytest.approx(67 * 1.5)

    def test_custom_layer_height_override(self, config):
        result = estimate(make_spec(quality="standard", custom_layer_height="0.1"), config)

        assert result.layer_height == "0.1"
        assert result.infill_percent == 30
        # 0.1 mm prints at 5 cm³/h
        assert result.print_time_hours == pytest.approx(67 * 1.3 / 5)


class TestFallbacks:
    """Table misses degrade to defaults and are reported"""

    def test_unknown_material_uses_default_density(self, config):
        result = estimate(make_spec(material_type="unobtainium"), config)

        assert result.density == 1.24
        assert result.fallbacks == [FallbackKind.DENSITY]

    def test_unknown_layer_height_uses_standard_speed_and_infill(self, config):
        result = estimate(make_spec(quality="0.25"), config)

        assert result.layer_height == "0.25"
        assert result.infill_percent == 20
        assert result.print_time_hours == pytest.approx(67 * 1.2 / 10)
        assert FallbackKind.INFILL in result.fallbacks
        assert FallbackKind.PRINT_SPEED in result.fallbacks

    def test_custom_infill_on_unknown_layer_only_flags_speed(self, config):
        result = estimate(make_spec(quality="0.25", infill_percent=40), config)

        assert result.fallbacks == [FallbackKind.PRINT_SPEED]

    def test_missing_quality_uses_standard_and_is_flagged(self, config):
        result = estimate(make_spec(quality=None), config)

        assert result.layer_height == "0.2"
        assert result.infill_percent == 20
        assert result.fallbacks == [FallbackKind.LAYER_HEIGHT]

    def test_fallback_is_logged(self, config, caplog):
        with caplog.at_level("WARNING"):
            estimate(make_spec(material_type="unobtainium"), config)

        assert any("density" in record.getMessage() for record in caplog.records)

    def test_estimate_does_not_touch_config(self, config):
        estimate(make_spec(material_type="unobtainium", quality="0.25"), config)

        assert config == PricingConfig()
        assert "unobtainium" not in config.material_density
        assert "0.25" not in config.speed_by_layer_height
