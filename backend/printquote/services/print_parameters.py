"""
Print parameter tables

Material densities, quality presets, infill and speed by layer height,
support/pattern multipliers and delivery costs. The tables live in an
immutable PricingConfig that is passed explicitly into every pricing entry
point; services never read these module constants directly.
"""
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from printquote.core.settings import Settings, get_settings
from printquote.schemas.pricing import InfillPattern, PrinterProfileSpec, SupportType


MATERIAL_DENSITY = MappingProxyType({
    "pla": 1.24,    # g/cm³
    "abs": 1.04,
    "petg": 1.27,
    "tpu": 1.21,
    "nylon": 1.14,
    "resin": 1.10,
})
DEFAULT_DENSITY = 1.24

QUALITY_LAYER_HEIGHTS = MappingProxyType({
    "draft": "0.3",
    "standard": "0.2",
    "high": "0.15",
    "ultra": "0.1",
})

INFILL_BY_LAYER_HEIGHT = MappingProxyType({
    "0.3": 10,
    "0.2": 20,
    "0.15": 25,
    "0.1": 30,
})
DEFAULT_INFILL_PERCENT = 20

# cm³ of effective volume printed per hour
SPEED_BY_LAYER_HEIGHT = MappingProxyType({
    "0.3": 15.0,
    "0.2": 10.0,
    "0.15": 7.5,
    "0.1": 5.0,
})
DEFAULT_SPEED_CM3_PER_HOUR = 10.0

SUPPORT_WEIGHT_MULTIPLIERS = MappingProxyType({
    SupportType.NONE: 1.0,
    SupportType.NORMAL: 1.15,
    SupportType.TREE: 1.10,
})
SUPPORT_TIME_MULTIPLIERS = MappingProxyType({
    SupportType.NONE: 1.0,
    SupportType.NORMAL: 1.10,
    SupportType.TREE: 1.05,
})
PATTERN_TIME_MULTIPLIERS = MappingProxyType({
    InfillPattern.GRID: 1.0,
    InfillPattern.TRIANGLES: 1.0,
    InfillPattern.HONEYCOMB: 1.05,
    InfillPattern.GYROID: 1.05,
})

# PLN surcharge per delivery method id
SHIPPING_COSTS = MappingProxyType({
    "pickup": 0.0,
    "inpost": 12.99,
    "standard": 12.99,
    "dpd": 24.99,
    "courier": 24.99,
    "express": 24.99,
})

DEFAULT_MATERIAL_PRICE_PER_KG = 39.0
DEFAULT_PRINTER = PrinterProfileSpec(
    power_watts=270.0,
    cost_pln=3483.39,
    lifespan_hours=5000.0,
    maintenance_rate=0.03,
)


def normalize_layer_height(value: str) -> str:
    """
    Canonical layer-height key.

    '0.2', '0.20', '0.2mm' and ' 0.2 MM ' all become '0.2'. Values that are
    not numbers are returned lowercased so they still miss the tables.
    """
    text = value.strip().lower()
    if text.endswith("mm"):
        text = text[:-2].strip()
    try:
        return f"{float(text):g}"
    except ValueError:
        return text


class PricingConfig(BaseModel):
    """
    Lookup tables and defaults for one pricing run.

    Frozen, and every table is stored as a read-only mapping, so a config
    shared between requests can be neither rebound nor edited in place.
    """
    model_config = ConfigDict(frozen=True, validate_default=True)

    material_density: Mapping[str, float] = Field(default_factory=lambda: dict(MATERIAL_DENSITY))
    default_density: float = DEFAULT_DENSITY
    quality_layer_heights: Mapping[str, str] = Field(default_factory=lambda: dict(QUALITY_LAYER_HEIGHTS))
    infill_by_layer_height: Mapping[str, int] = Field(default_factory=lambda: dict(INFILL_BY_LAYER_HEIGHT))
    default_infill_percent: int = DEFAULT_INFILL_PERCENT
    speed_by_layer_height: Mapping[str, float] = Field(default_factory=lambda: dict(SPEED_BY_LAYER_HEIGHT))
    default_speed_cm3_per_hour: float = DEFAULT_SPEED_CM3_PER_HOUR
    support_weight_multipliers: Mapping[SupportType, float] = Field(
        default_factory=lambda: dict(SUPPORT_WEIGHT_MULTIPLIERS)
    )
    support_time_multipliers: Mapping[SupportType, float] = Field(
        default_factory=lambda: dict(SUPPORT_TIME_MULTIPLIERS)
    )
    pattern_time_multipliers: Mapping[InfillPattern, float] = Field(
        default_factory=lambda: dict(PATTERN_TIME_MULTIPLIERS)
    )
    shipping_costs: Mapping[str, float] = Field(default_factory=lambda: dict(SHIPPING_COSTS))
    default_price_per_kg: float = DEFAULT_MATERIAL_PRICE_PER_KG
    default_printer: PrinterProfileSpec = DEFAULT_PRINTER

    @field_validator(
        "material_density",
        "quality_layer_heights",
        "infill_by_layer_height",
        "speed_by_layer_height",
        "support_weight_multipliers",
        "support_time_multipliers",
        "pattern_time_multipliers",
        "shipping_costs",
    )
    @classmethod
    def read_only_table(cls, v: Mapping) -> Mapping:
        return MappingProxyType(dict(v))

    def resolve_layer_height(
        self,
        quality: Optional[str],
        custom_layer_height: Optional[str] = None,
    ) -> Optional[str]:
        """Custom override if present, else the layer height the quality stands for"""
        raw = custom_layer_height or quality
        if not raw:
            return None
        preset = self.quality_layer_heights.get(raw.strip().lower())
        return preset if preset is not None else normalize_layer_height(raw)

    def density_for(self, material_type: Optional[str]) -> Tuple[float, bool]:
        """(density g/cm³, fallback_used)"""
        density = self.material_density.get((material_type or "").lower())
        if density is None:
            return self.default_density, True
        return density, False

    def infill_for(self, layer_height: str) -> Tuple[int, bool]:
        """(infill percent, fallback_used)"""
        infill = self.infill_by_layer_height.get(layer_height)
        if infill is None:
            return self.default_infill_percent, True
        return infill, False

    def speed_for(self, layer_height: str) -> Tuple[float, bool]:
        """(cm³/h, fallback_used)"""
        speed = self.speed_by_layer_height.get(layer_height)
        if speed is None:
            return self.default_speed_cm3_per_hour, True
        return speed, False


def build_pricing_config(settings: Settings) -> PricingConfig:
    """PricingConfig with the fallback price and printer taken from settings"""
    return PricingConfig(
        default_price_per_kg=settings.DEFAULT_MATERIAL_PRICE_PER_KG,
        default_printer=PrinterProfileSpec(
            power_watts=settings.DEFAULT_PRINTER_POWER_WATTS,
            cost_pln=settings.DEFAULT_PRINTER_COST_PLN,
            lifespan_hours=settings.DEFAULT_PRINTER_LIFESPAN_HOURS,
            maintenance_rate=settings.DEFAULT_PRINTER_MAINTENANCE_RATE,
        ),
    )


@lru_cache
def get_pricing_config() -> PricingConfig:
    """Cached config for request handlers (FastAPI dependency)"""
    return build_pricing_config(get_settings())
