"""
Order pricing

Prices single-file orders and multi-file projects. Every file is estimated
and priced on its own through estimation_service.estimate() and
pricing_service.price(); the project total is the sum of the line totals
plus the delivery surcharge.

A project with any incomplete file is not priced at all: the result names
the blocking files instead of quietly leaving them out of the sum.
"""
from decimal import Decimal
from typing import List, Optional, Sequence, Union

from printquote.logging_config import get_logger, log_fallback
from printquote.schemas.pricing import (
    BlockingItem,
    FallbackKind,
    ItemQuote,
    MaterialCatalog,
    OrderQuote,
    PricingError,
    PricingErrorCode,
    PrinterProfileSpec,
    PrintJobSpec,
)
from printquote.services.estimation_service import estimate, invalid_volume_error
from printquote.services.pricing_service import price
from printquote.services.print_parameters import PricingConfig
from printquote.services.shipping_service import shipping_service

logger = get_logger(__name__)

MISSING_FIELD_MESSAGES = {
    "file": "The model file failed to load, upload it again",
    "material_type": "Select a material",
    "quality": "Select a print quality",
    "analysis": "Please wait for model analysis to finish",
}


def find_blocking_items(items: Sequence[PrintJobSpec], config: PricingConfig) -> List[BlockingItem]:
    """Items that cannot be priced yet, with the fields each one is missing"""
    blocking = []
    for index, item in enumerate(items):
        missing = []
        if item.load_error:
            missing.append("file")
        if not item.material_type:
            missing.append("material_type")
        if config.resolve_layer_height(item.quality, item.custom_layer_height) is None:
            missing.append("quality")
        if item.base_volume_cm3 is None:
            missing.append("analysis")

        if missing:
            blocking.append(
                BlockingItem(
                    index=index,
                    file_name=item.file_name,
                    missing=missing,
                    message="; ".join(MISSING_FIELD_MESSAGES[field] for field in missing),
                )
            )
    return blocking


def price_item(
    spec: PrintJobSpec,
    catalog: MaterialCatalog,
    printer: Optional[PrinterProfileSpec],
    config: PricingConfig,
    index: int = 0,
) -> Union[ItemQuote, PricingError]:
    """
    Estimate and price one file.

    The catalog price falls back to config.default_price_per_kg and the
    printer to config.default_printer; both are reported in `fallbacks`.
    """
    estimation = estimate(spec, config)
    if isinstance(estimation, PricingError):
        return invalid_volume_error(spec, index)

    fallbacks = list(estimation.fallbacks)

    entry = catalog.get(spec.material_type, spec.color)
    if entry is not None:
        price_per_kg = entry.price_per_kg
    else:
        price_per_kg = config.default_price_per_kg
        fallbacks.append(FallbackKind.MATERIAL_PRICE)
        log_fallback(
            logger, FallbackKind.MATERIAL_PRICE, "Material not in catalog, using default price",
            material_type=spec.material_type, color=spec.color, price_per_kg=price_per_kg,
        )

    if printer is None:
        printer = config.default_printer
        fallbacks.append(FallbackKind.PRINTER_PROFILE)
        log_fallback(logger, FallbackKind.PRINTER_PROFILE, "No printer profile available, using default profile")

    breakdown = price(
        weight_grams=estimation.weight_grams,
        print_time_hours=estimation.print_time_hours,
        price_per_kg=price_per_kg,
        printer=printer,
        quantity=spec.quantity,
    )

    return ItemQuote(
        index=index,
        file_name=spec.file_name,
        material_type=spec.material_type or "",
        color=spec.color,
        layer_height=estimation.layer_height,
        infill_percent=estimation.infill_percent,
        support_type=spec.support_type,
        infill_pattern=spec.infill_pattern,
        quantity=spec.quantity,
        base_volume_cm3=estimation.base_volume_cm3,
        material_weight_grams=estimation.material_weight_grams,
        print_time_minutes=estimation.print_time_minutes,
        price_per_kg=price_per_kg,
        stock_status=entry.stock_status if entry else None,
        lead_time_days=entry.lead_time_days if entry else None,
        estimate=estimation,
        breakdown=breakdown,
        fallbacks=fallbacks,
    )


def price_order(
    items: Sequence[PrintJobSpec],
    delivery_method: str,
    catalog: MaterialCatalog,
    printer: Optional[PrinterProfileSpec],
    config: PricingConfig,
) -> Union[OrderQuote, PricingError]:
    """
    Price a whole order. A single-file order is a one-element `items`.

    Returns:
        OrderQuote, or PricingError when any item is incomplete
        (INCOMPLETE_PROJECT_ITEM), has a non-positive volume (INVALID_VOLUME),
        or the delivery method is unknown (UNKNOWN_DELIVERY_METHOD)
    """
    if not items:
        return PricingError(
            code=PricingErrorCode.INCOMPLETE_PROJECT_ITEM,
            message="Add at least one model file to the order",
        )

    blocking = find_blocking_items(items, config)
    if blocking:
        logger.info(
            "Order not priced, incomplete items",
            extra={"blocking_indexes": [b.index for b in blocking]},
        )
        return PricingError(
            code=PricingErrorCode.INCOMPLETE_PROJECT_ITEM,
            message=f"{len(blocking)} of {len(items)} files are not ready to be priced",
            blocking_items=blocking,
        )

    invalid = [
        invalid_volume_error(item, index).blocking_items[0]
        for index, item in enumerate(items)
        if item.base_volume_cm3 <= 0
    ]
    if invalid:
        return PricingError(
            code=PricingErrorCode.INVALID_VOLUME,
            message="Some models have an invalid volume. Re-upload them to get a price.",
            blocking_items=invalid,
        )

    surcharge = shipping_service.get_surcharge(delivery_method, config)
    if isinstance(surcharge, PricingError):
        return surcharge

    quotes = []
    for index, item in enumerate(items):
        quote = price_item(item, catalog, printer, config, index=index)
        if isinstance(quote, PricingError):
            return quote
        quotes.append(quote)

    subtotal = sum((q.breakdown.total_price for q in quotes), Decimal("0.00"))
    total = subtotal + surcharge

    logger.info(
        "Order priced",
        extra={
            "item_count": len(quotes),
            "subtotal": str(subtotal),
            "delivery_method": delivery_method,
            "total": str(total),
        },
    )

    return OrderQuote(
        items=quotes,
        subtotal=subtotal,
        delivery_method=shipping_service.normalize_method(delivery_method),
        delivery_surcharge=surcharge,
        total=total,
    )
