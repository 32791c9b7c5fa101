"""
Print cost calculator

Converts weight and print time into an itemized, VAT-inclusive price.

Cost model (PLN):
    material     = price_per_kg * weight_kg
    energy       = hours * power_kw * ENERGY_TARIFF_PLN_PER_KWH
    service fee  = LABOR_RATE_PLN_PER_HOUR * LABOR_ALLOWANCE_MINUTES / 60
    depreciation = printer cost / lifespan hours * hours
    maintenance  = depreciation * maintenance rate
    internal     = sum of the above
    vat          = internal * VAT_RATE
    total        = (internal + vat) * quantity

Components are rounded to cents for display, but the total is computed from
the unrounded sums and rounded once.
"""
import math
from decimal import Decimal

from printquote.schemas.pricing import PriceBreakdown, PrinterProfileSpec

ENERGY_TARIFF_PLN_PER_KWH = 0.914
LABOR_RATE_PLN_PER_HOUR = 31.40
LABOR_ALLOWANCE_MINUTES = 10
VAT_RATE = 0.23

CENT = Decimal("0.01")


def labor_cost() -> float:
    """Fixed handling allowance charged once per unit, independent of print time"""
    return LABOR_RATE_PLN_PER_HOUR * (LABOR_ALLOWANCE_MINUTES / 60)


def round_money(value: float) -> Decimal:
    """
    Round to cents as floor(value * 100 + 0.5) / 100.

    Rounding happens on the binary float, so a tie such as 1.005 (stored as
    1.00499...) rounds down to 1.00. This matches the cents on prices the
    storefront stored before this service existed.
    """
    if not math.isfinite(value):
        raise ValueError(f"Non-finite monetary amount: {value}")
    cents = math.floor(value * 100 + 0.5)
    return (Decimal(cents) / 100).quantize(CENT)


def price(
    weight_grams: float,
    print_time_hours: float,
    price_per_kg: float,
    printer: PrinterProfileSpec,
    quantity: int = 1,
) -> PriceBreakdown:
    """
    Price `quantity` units of a print.

    Args:
        weight_grams: Material weight of one unit (unrounded)
        print_time_hours: Print time of one unit (unrounded)
        price_per_kg: Material price in PLN/kg
        printer: Printer operating profile
        quantity: Number of units

    Raises:
        ValueError: if any input is NaN/infinite (corrupt catalog or printer data)
            or quantity is below 1
    """
    for name, value in (
        ("weight_grams", weight_grams),
        ("print_time_hours", print_time_hours),
        ("price_per_kg", price_per_kg),
        ("power_watts", printer.power_watts),
        ("cost_pln", printer.cost_pln),
        ("lifespan_hours", printer.lifespan_hours),
        ("maintenance_rate", printer.maintenance_rate),
    ):
        if not math.isfinite(value):
            raise ValueError(f"Non-finite pricing input {name}={value}")
    if quantity < 1:
        raise ValueError(f"Quantity must be at least 1, got {quantity}")

    material_cost = price_per_kg * (weight_grams / 1000)
    energy_cost = print_time_hours * (printer.power_watts / 1000) * ENERGY_TARIFF_PLN_PER_KWH
    service_fee = labor_cost()
    depreciation = (printer.cost_pln / printer.lifespan_hours) * print_time_hours
    maintenance = depreciation * printer.maintenance_rate

    internal_cost = material_cost + energy_cost + service_fee + depreciation + maintenance
    vat = internal_cost * VAT_RATE
    unit_price = internal_cost + vat

    return PriceBreakdown(
        material_cost=round_money(material_cost),
        energy_cost=round_money(energy_cost),
        service_fee=round_money(service_fee),
        depreciation=round_money(depreciation),
        maintenance=round_money(maintenance),
        internal_cost=round_money(internal_cost),
        vat=round_money(vat),
        unit_price=round_money(unit_price),
        quantity=quantity,
        total_price=round_money(unit_price * quantity),
    )
