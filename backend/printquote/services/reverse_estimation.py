"""
Reverse estimation for stored orders

Older order rows were saved without the model's base volume. To reprice
them (edit flow) we recover an approximate volume from the densest field
that survived, then run the normal estimate/price pipeline on it:

1. stored model_volume_cm3, when above the noise floor
2. stored material weight
3. stored VAT-inclusive price
4. a hardcoded legacy volume (logged and audited, unreliable)

Orders saved by this service always carry model_volume_cm3, so only
legacy rows ever reach branches 2-4.
"""
import math
from typing import Any, Dict, List, Optional, Union

from printquote.logging_config import audit_log, get_logger, log_fallback
from printquote.schemas.pricing import (
    FallbackKind,
    MaterialCatalog,
    PersistedOrderFields,
    PricingError,
    PricingErrorCode,
    PrinterProfileSpec,
    PrintJobSpec,
    RepriceResult,
    VolumeRecovery,
    VolumeSource,
)
from printquote.services.order_pricing_service import find_blocking_items, price_item
from printquote.services.pricing_service import VAT_RATE, labor_cost
from printquote.services.print_parameters import PricingConfig

logger = get_logger(__name__)

# Stored volumes at or below this are treated as missing
PERSISTED_VOLUME_NOISE_FLOOR_CM3 = 1.0

# Share of the ex-VAT, ex-labor price attributed to material when only a
# price survived. Energy, depreciation and maintenance cannot be separated
# from the price, so this is a rough approximation, not an inverse.
PRICE_MATERIAL_SHARE = 0.5

LEGACY_FALLBACK_VOLUME_CM3 = 67.0


def _density(order: PersistedOrderFields, config: PricingConfig, fallbacks: List[FallbackKind]) -> float:
    density, missed = config.density_for(order.material)
    if missed:
        fallbacks.append(FallbackKind.DENSITY)
    return density


def _volume_from_weight(
    order: PersistedOrderFields,
    config: PricingConfig,
    fallbacks: List[FallbackKind],
) -> Optional[float]:
    if not (order.material_weight and order.material_weight > 0 and order.material and order.layer_height):
        return None

    layer_height = config.resolve_layer_height(order.layer_height)
    density = _density(order, config, fallbacks)
    infill_percent, missed = config.infill_for(layer_height)
    if missed:
        fallbacks.append(FallbackKind.INFILL)

    effective_volume = order.material_weight / density
    return effective_volume / (1 + infill_percent / 100)


def _volume_from_price(
    order: PersistedOrderFields,
    catalog: MaterialCatalog,
    config: PricingConfig,
    fallbacks: List[FallbackKind],
) -> Optional[float]:
    if not (order.price and order.price > 0 and order.material and order.layer_height):
        return None
    if order.infill is None:
        return None

    price_ex_vat = order.price / (1 + VAT_RATE)
    estimated_material_cost = (price_ex_vat - labor_cost()) * PRICE_MATERIAL_SHARE
    if estimated_material_cost <= 0:
        # Price doesn't even cover the labor allowance
        return None

    entry = catalog.get(order.material, order.color)
    if entry is not None:
        price_per_kg = entry.price_per_kg
    else:
        price_per_kg = config.default_price_per_kg
        fallbacks.append(FallbackKind.MATERIAL_PRICE)
    density = _density(order, config, fallbacks)

    mass_kg = estimated_material_cost / price_per_kg
    return (mass_kg * 1000 / density) / (1 + order.infill / 100)


def recover_base_volume(
    order: PersistedOrderFields,
    catalog: MaterialCatalog,
    config: PricingConfig,
    order_id: Optional[Any] = None,
) -> VolumeRecovery:
    """
    Base volume to reprice a stored order with.

    The stored volume always wins when present. Otherwise the first of
    weight, price, hardcoded fallback that applies is used; `source` says
    which. Table lookups that missed in the chosen branch are logged and
    listed in `fallbacks`.
    """
    if order.model_volume_cm3 is not None and order.model_volume_cm3 > PERSISTED_VOLUME_NOISE_FLOOR_CM3:
        return VolumeRecovery(base_volume_cm3=order.model_volume_cm3, source=VolumeSource.PERSISTED)

    for source, recover in (
        (VolumeSource.WEIGHT, lambda misses: _volume_from_weight(order, config, misses)),
        (VolumeSource.PRICE, lambda misses: _volume_from_price(order, catalog, config, misses)),
    ):
        fallbacks: List[FallbackKind] = []
        volume = recover(fallbacks)
        if volume is None or not math.isfinite(volume) or volume <= 0:
            continue

        for kind in fallbacks:
            log_fallback(
                logger, kind, "Table miss while recovering stored order volume, used default",
                order_id=order_id, source=source.value, material_type=order.material,
                layer_height=order.layer_height,
            )
        logger.info(
            "Recovered base volume for stored order",
            extra={"order_id": order_id, "source": source.value, "base_volume_cm3": volume},
        )
        return VolumeRecovery(base_volume_cm3=volume, source=source, fallbacks=fallbacks)

    logger.warning(
        "No volume, weight or price on stored order, using legacy fallback volume",
        extra={"order_id": order_id, "base_volume_cm3": LEGACY_FALLBACK_VOLUME_CM3},
    )
    audit_log(
        "LEGACY_VOLUME_FALLBACK",
        resource_type="print_order",
        resource_id=order_id,
        details={"base_volume_cm3": LEGACY_FALLBACK_VOLUME_CM3},
    )
    return VolumeRecovery(base_volume_cm3=LEGACY_FALLBACK_VOLUME_CM3, source=VolumeSource.FALLBACK)


def reprice_persisted_order(
    order: PersistedOrderFields,
    catalog: MaterialCatalog,
    printer: Optional[PrinterProfileSpec],
    config: PricingConfig,
    changes: Optional[Dict[str, Any]] = None,
    order_id: Optional[Any] = None,
) -> Union[RepriceResult, PricingError]:
    """
    Reprice a stored order line, optionally with edited parameters.

    The volume is recovered from the stored fields; `changes` (PrintJobSpec
    field names) are applied on top of the stored parameters before the
    usual estimate and price run.
    """
    recovery = recover_base_volume(order, catalog, config, order_id=order_id)

    fields: Dict[str, Any] = {
        "base_volume_cm3": recovery.base_volume_cm3,
        "material_type": order.material,
        "color": order.color,
        "quality": order.layer_height,
        "infill_percent": order.infill,
        "support_type": order.support_type,
        "infill_pattern": order.infill_pattern,
        "quantity": order.quantity,
    }
    if changes:
        # A new quality means the stored (quality-derived) infill no longer applies
        if ("quality" in changes or "custom_layer_height" in changes) and "infill_percent" not in changes:
            fields["infill_percent"] = None
        fields.update(changes)

    spec = PrintJobSpec(**fields)

    blocking = find_blocking_items([spec], config)
    if blocking:
        return PricingError(
            code=PricingErrorCode.INCOMPLETE_PROJECT_ITEM,
            message="The stored order is missing parameters needed for pricing",
            blocking_items=blocking,
        )

    quote = price_item(spec, catalog, printer, config)
    if isinstance(quote, PricingError):
        return quote

    missed_in_recovery = [kind for kind in recovery.fallbacks if kind not in quote.fallbacks]
    if missed_in_recovery:
        quote = quote.model_copy(update={"fallbacks": missed_in_recovery + quote.fallbacks})

    return RepriceResult(recovery=recovery, quote=quote)
