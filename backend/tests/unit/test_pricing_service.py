"""
Unit tests for the print cost calculator
"""
import math
from decimal import Decimal

import pytest

from printquote.schemas.pricing import PrinterProfileSpec
from printquote.services.pricing_service import (
    ENERGY_TARIFF_PLN_PER_KWH,
    VAT_RATE,
    labor_cost,
    price,
    round_money,
)
from printquote.services.print_parameters import DEFAULT_PRINTER


class TestReferenceScenario:
    """99.696 g PLA at 39 PLN/kg, 8.04 h on the default printer"""

    def test_breakdown(self):
        result = price(99.696, 8.04, 39.0, DEFAULT_PRINTER, quantity=1)

        assert result.material_cost == Decimal("3.89")
        assert result.energy_cost == Decimal("1.98")
        assert result.service_fee == Decimal("5.23")
        assert result.depreciation == Decimal("5.60")
        assert result.maintenance == Decimal("0.17")
        assert result.internal_cost == Decimal("16.87")
        assert result.vat == Decimal("3.88")
        assert result.unit_price == Decimal("20.76")
        assert result.total_price == Decimal("20.76")

    def test_total_is_rounded_once_from_unrounded_sums(self):
        result = price(99.696, 8.04, 39.0, DEFAULT_PRINTER, quantity=3)

        # 20.7561496 * 3 = 62.2684..., not 3 * 20.76 = 62.28
        assert result.total_price == Decimal("62.27")
        assert result.unit_price == Decimal("20.76")
        assert result.quantity == 3

    def test_deterministic(self):
        assert price(99.696, 8.04, 39.0, DEFAULT_PRINTER) == price(99.696, 8.04, 39.0, DEFAULT_PRINTER)


class TestCostComponents:

    def test_small_print(self):
        """50 g PLA, 2 h"""
        result = price(50, 2, 39.0, DEFAULT_PRINTER)

        assert result.material_cost == Decimal("1.95")
        assert result.energy_cost == Decimal("0.49")
        assert result.depreciation == Decimal("1.39")
        assert result.maintenance == Decimal("0.04")
        assert result.internal_cost == Decimal("9.11")
        assert result.vat == Decimal("2.10")
        assert result.total_price == Decimal("11.21")

    def test_service_fee_is_fixed(self):
        """Ten minutes at 31.40/h regardless of print time or quantity"""
        short = price(10, 0.25, 39.0, DEFAULT_PRINTER, quantity=1)
        long = price(10, 40, 39.0, DEFAULT_PRINTER, quantity=50)

        assert labor_cost() == pytest.approx(31.40 / 6)
        assert short.service_fee == long.service_fee == Decimal("5.23")

    def test_energy_uses_printer_power(self):
        printer = PrinterProfileSpec(power_watts=1000, cost_pln=0, lifespan_hours=1, maintenance_rate=0)
        result = price(0, 10, 39.0, printer)

        assert result.energy_cost == round_money(10 * 1.0 * ENERGY_TARIFF_PLN_PER_KWH)
        assert result.depreciation == Decimal("0.00")
        assert result.maintenance == Decimal("0.00")

    def test_maintenance_is_share_of_depreciation(self):
        printer = PrinterProfileSpec(power_watts=270, cost_pln=5000, lifespan_hours=5000, maintenance_rate=0.1)
        result = price(0, 20, 39.0, printer)

        assert result.depreciation == Decimal("20.00")
        assert result.maintenance == Decimal("2.00")

    def test_vat_on_internal_cost(self):
        result = price(100, 1, 39.0, DEFAULT_PRINTER)

        assert VAT_RATE == 0.23
        assert result.internal_cost == Decimal("10.10")
        assert result.vat == Decimal("2.32")
        assert result.total_price == Decimal("12.42")


class TestInvalidInputs:
    """Corrupt catalog/printer data raises instead of producing a price"""

    @pytest.mark.parametrize("kwargs", [
        {"weight_grams": math.nan},
        {"print_time_hours": math.inf},
        {"price_per_kg": math.nan},
    ])
    def test_non_finite_inputs_raise(self, kwargs):
        args = {"weight_grams": 10.0, "print_time_hours": 1.0, "price_per_kg": 39.0}
        args.update(kwargs)

        with pytest.raises(ValueError):
            price(printer=DEFAULT_PRINTER, **args)

    def test_non_finite_printer_raises(self):
        printer = PrinterProfileSpec.model_construct(
            power_watts=math.nan, cost_pln=1.0, lifespan_hours=1.0, maintenance_rate=0.0
        )

        with pytest.raises(ValueError):
            price(10, 1, 39.0, printer)

    def test_zero_quantity_raises(self):
        with pytest.raises(ValueError):
            price(10, 1, 39.0, DEFAULT_PRINTER, quantity=0)


class TestRoundMoney:

    @pytest.mark.parametrize("value, expected", [
        (2.675, "2.67"),
        (1.005, "1.00"),
        (0.005, "0.01"),
        (0.125, "0.13"),
        (1.0049, "1.00"),
        (20.7561496, "20.76"),
        (0, "0.00"),
    ])
    def test_rounds_the_stored_float(self, value, expected):
        """Ties are judged on the binary value: 1.005 is 1.00499..."""
        assert round_money(value) == Decimal(expected)

    def test_nan_raises(self):
        with pytest.raises(ValueError):
            round_money(math.nan)
