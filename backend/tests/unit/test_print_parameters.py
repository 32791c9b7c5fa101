"""
Unit tests for print parameter tables and PricingConfig
"""
import pytest
from pydantic import ValidationError

from printquote.core.settings import Settings
from printquote.services.print_parameters import (
    DEFAULT_PRINTER,
    PricingConfig,
    build_pricing_config,
    normalize_layer_height,
)


@pytest.mark.parametrize("raw, expected", [
    ("0.2", "0.2"),
    ("0.20", "0.2"),
    ("0.2mm", "0.2"),
    (" 0.15 MM ", "0.15"),
    (".3", "0.3"),
    ("fine", "fine"),
])
def test_normalize_layer_height(raw, expected):
    assert normalize_layer_height(raw) == expected


class TestPricingConfig:

    def test_defaults(self):
        config = PricingConfig()

        assert config.default_price_per_kg == 39.0
        assert config.default_printer == DEFAULT_PRINTER
        assert config.material_density["petg"] == 1.27

    def test_is_frozen(self):
        config = PricingConfig()

        with pytest.raises(ValidationError):
            config.default_price_per_kg = 10.0

    @pytest.mark.parametrize("table", [
        "material_density",
        "infill_by_layer_height",
        "speed_by_layer_height",
        "support_weight_multipliers",
        "shipping_costs",
    ])
    def test_tables_cannot_be_edited_in_place(self, table):
        config = PricingConfig()
        mapping = getattr(config, table)
        key = next(iter(mapping))

        with pytest.raises(TypeError):
            mapping[key] = 5
        assert getattr(PricingConfig(), table)[key] == mapping[key]

    def test_caller_dict_is_copied(self):
        costs = {"pickup": 0.0, "drone": 99.5}
        config = PricingConfig(shipping_costs=costs)
        costs["drone"] = 0.0

        assert config.shipping_costs["drone"] == 99.5
        assert config == PricingConfig(shipping_costs={"pickup": 0.0, "drone": 99.5})

    @pytest.mark.parametrize("quality, custom, expected", [
        ("standard", None, "0.2"),
        ("HIGH", None, "0.15"),
        ("0.15mm", None, "0.15"),
        ("draft", "0.1", "0.1"),
        (None, "0.2", "0.2"),
        (None, None, None),
        ("", None, None),
    ])
    def test_resolve_layer_height(self, quality, custom, expected):
        assert PricingConfig().resolve_layer_height(quality, custom) == expected

    def test_lookups_report_fallbacks(self):
        config = PricingConfig()

        assert config.density_for("ABS") == (1.04, False)
        assert config.density_for(None) == (1.24, True)
        assert config.infill_for("0.1") == (30, False)
        assert config.infill_for("0.4") == (20, True)
        assert config.speed_for("0.3") == (15.0, False)
        assert config.speed_for("0.4") == (10.0, True)


def test_build_pricing_config_from_settings():
    settings = Settings(
        DEFAULT_MATERIAL_PRICE_PER_KG=45.0,
        DEFAULT_PRINTER_POWER_WATTS=350.0,
        DEFAULT_PRINTER_COST_PLN=5000.0,
        DEFAULT_PRINTER_LIFESPAN_HOURS=8000.0,
        DEFAULT_PRINTER_MAINTENANCE_RATE=0.05,
    )

    config = build_pricing_config(settings)

    assert config.default_price_per_kg == 45.0
    assert config.default_printer.power_watts == 350.0
    assert config.default_printer.lifespan_hours == 8000.0
    assert config.default_printer.maintenance_rate == 0.05
