"""
Forward print estimation

Turns a model's base volume plus print parameters into material weight and
print time. This is the only place these formulas live: new quotes, edited
orders and repriced legacy orders all come through estimate().
"""
import math
from typing import List, Union

from printquote.logging_config import get_logger, log_fallback
from printquote.schemas.pricing import (
    BlockingItem,
    EstimationResult,
    FallbackKind,
    PricingError,
    PricingErrorCode,
    PrintJobSpec,
)
from printquote.services.print_parameters import PricingConfig

logger = get_logger(__name__)

# Fixed setup/cooldown overhead; no job is quoted below this
MIN_PRINT_TIME_HOURS = 0.25


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def invalid_volume_error(spec: PrintJobSpec, index: int = 0) -> PricingError:
    return PricingError(
        code=PricingErrorCode.INVALID_VOLUME,
        message="Model volume is missing or not positive. Re-upload the model or wait for analysis to finish.",
        blocking_items=[
            BlockingItem(
                index=index,
                file_name=spec.file_name,
                missing=["base_volume_cm3"],
                message=f"Invalid model volume: {spec.base_volume_cm3}",
            )
        ],
    )


def estimate(spec: PrintJobSpec, config: PricingConfig) -> Union[EstimationResult, PricingError]:
    """
    Estimate material weight and print time for one unit of `spec`.

    Layer height and infill each come from the custom override when set,
    otherwise from the quality. Table misses fall back to the configured
    defaults and are listed in `fallbacks`.

    Returns:
        EstimationResult, or PricingError(INVALID_VOLUME) when the base
        volume is missing, zero or negative

    Raises:
        ValueError: if the volume is NaN or infinite
    """
    volume = spec.base_volume_cm3
    if volume is None or volume <= 0:
        return invalid_volume_error(spec)
    if not math.isfinite(volume):
        raise ValueError(f"Non-finite model volume: {volume}")

    fallbacks: List[FallbackKind] = []

    layer_height = config.resolve_layer_height(spec.quality, spec.custom_layer_height)
    if layer_height is None:
        # Callers validate quality; a bare call gets the standard preset
        layer_height = config.resolve_layer_height("standard")
        fallbacks.append(FallbackKind.LAYER_HEIGHT)
        log_fallback(
            logger, FallbackKind.LAYER_HEIGHT, "No quality or layer height given, using standard preset",
            layer_height=layer_height,
        )

    if spec.infill_percent is not None:
        infill_percent = spec.infill_percent
    else:
        infill_percent, missed = config.infill_for(layer_height)
        if missed:
            fallbacks.append(FallbackKind.INFILL)
            log_fallback(
                logger, FallbackKind.INFILL, "Layer height not in infill table, using default infill",
                layer_height=layer_height, infill_percent=infill_percent,
            )

    density, missed = config.density_for(spec.material_type)
    if missed:
        fallbacks.append(FallbackKind.DENSITY)
        log_fallback(
            logger, FallbackKind.DENSITY, "Material not in density table, using default density",
            material_type=spec.material_type, density=density,
        )

    speed, missed = config.speed_for(layer_height)
    if missed:
        fallbacks.append(FallbackKind.PRINT_SPEED)
        log_fallback(
            logger, FallbackKind.PRINT_SPEED, "Layer height not in speed table, using default speed",
            layer_height=layer_height, speed_cm3_per_hour=speed,
        )

    effective_volume = volume * (1 + infill_percent / 100)

    weight_grams = effective_volume * density
    weight_grams *= config.support_weight_multipliers[spec.support_type]

    print_time_hours = max(MIN_PRINT_TIME_HOURS, effective_volume / speed)
    print_time_hours *= config.support_time_multipliers[spec.support_type]
    print_time_hours *= config.pattern_time_multipliers[spec.infill_pattern]

    return EstimationResult(
        base_volume_cm3=volume,
        effective_volume_cm3=effective_volume,
        layer_height=layer_height,
        infill_percent=infill_percent,
        density=density,
        weight_grams=weight_grams,
        print_time_hours=print_time_hours,
        material_weight_grams=_round_half_up(weight_grams),
        print_time_minutes=_round_half_up(print_time_hours * 60),
        fallbacks=fallbacks,
    )
