"""
Pydantic schemas for the pricing engine

Value types passed into and returned from the estimation, cost, reverse
estimation and order pricing services. The API schemas in
printquote.schemas.order build on these.
"""
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SupportType(str, Enum):
    """Support structure mode"""
    NONE = "none"
    NORMAL = "normal"
    TREE = "tree"


class InfillPattern(str, Enum):
    """Infill lattice pattern"""
    GRID = "grid"
    HONEYCOMB = "honeycomb"
    TRIANGLES = "triangles"
    GYROID = "gyroid"


class FallbackKind(str, Enum):
    """A lookup that missed and was answered with a default value"""
    DENSITY = "density"
    INFILL = "infill"
    PRINT_SPEED = "print_speed"
    MATERIAL_PRICE = "material_price"
    PRINTER_PROFILE = "printer_profile"
    LAYER_HEIGHT = "layer_height"


class PricingErrorCode(str, Enum):
    INVALID_VOLUME = "INVALID_VOLUME"
    INCOMPLETE_PROJECT_ITEM = "INCOMPLETE_PROJECT_ITEM"
    UNKNOWN_DELIVERY_METHOD = "UNKNOWN_DELIVERY_METHOD"


class VolumeSource(str, Enum):
    """Where the base volume used for a repricing came from"""
    PERSISTED = "persisted"
    WEIGHT = "weight"
    PRICE = "price"
    FALLBACK = "fallback"


def _blank_to_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


def catalog_key(material_type: str, color: Optional[str]) -> str:
    """Identity key of a catalog entry: lower(material)-lower(color)"""
    return f"{material_type.strip().lower()}-{(color or '').strip().lower()}"


# ============================================================================
# Inputs
# ============================================================================

class PrintJobSpec(BaseModel):
    """Parameters of one printable item (one file of a project)"""
    file_name: Optional[str] = Field(None, max_length=255)
    base_volume_cm3: Optional[float] = Field(
        None, description="Geometric model volume without infill; None until analysis finishes"
    )
    material_type: Optional[str] = Field(None, max_length=50, description="pla, abs, petg, tpu, nylon, resin")
    color: Optional[str] = Field(None, max_length=50)
    quality: Optional[str] = Field(
        None, max_length=20, description="Quality name (draft, standard, high, ultra) or layer height in mm"
    )
    custom_layer_height: Optional[str] = Field(None, max_length=20, description="Overrides the quality layer height")
    infill_percent: Optional[int] = Field(None, ge=0, le=100, description="Overrides the quality infill")
    support_type: SupportType = SupportType.NONE
    infill_pattern: InfillPattern = InfillPattern.GRID
    quantity: int = Field(1, ge=1, le=1000)
    load_error: Optional[str] = Field(None, description="Set when the model file failed to load")

    @field_validator("material_type", mode="before")
    @classmethod
    def normalize_material(cls, v):
        v = _blank_to_none(v)
        return v.lower() if isinstance(v, str) else v

    @field_validator("color", "quality", "custom_layer_height", "load_error", "file_name", mode="before")
    @classmethod
    def blank_strings(cls, v):
        return _blank_to_none(v)


class MaterialCatalogEntry(BaseModel):
    """Catalog row as the engine sees it (density comes from the parameter tables)"""
    model_config = ConfigDict(frozen=True)

    material_type: str
    color: str
    price_per_kg: float
    stock_status: str = "in_stock"
    is_active: bool = True
    lead_time_days: int = 0

    @property
    def key(self) -> str:
        return catalog_key(self.material_type, self.color)


class MaterialCatalog(BaseModel):
    """Read-only lookup of catalog entries by material+color"""
    model_config = ConfigDict(frozen=True)

    entries: Dict[str, MaterialCatalogEntry] = Field(default_factory=dict)

    @classmethod
    def from_entries(cls, entries: Iterable[MaterialCatalogEntry]) -> "MaterialCatalog":
        return cls(entries={entry.key: entry for entry in entries})

    def get(self, material_type: Optional[str], color: Optional[str]) -> Optional[MaterialCatalogEntry]:
        """Active entry for the pair, or None"""
        if not material_type:
            return None
        entry = self.entries.get(catalog_key(material_type, color))
        if entry is None or not entry.is_active:
            return None
        return entry


class PrinterProfileSpec(BaseModel):
    """Operating profile of the printer used for depreciation and energy"""
    model_config = ConfigDict(frozen=True)

    power_watts: float = Field(..., gt=0)
    cost_pln: float = Field(..., ge=0)
    lifespan_hours: float = Field(..., gt=0)
    maintenance_rate: float = Field(..., ge=0)


class PersistedOrderFields(BaseModel):
    """Fields of a stored order line consumed when repricing it"""
    model_volume_cm3: Optional[float] = None
    material_weight: Optional[float] = Field(None, description="Stored weight in grams")
    material: Optional[str] = None
    color: Optional[str] = None
    layer_height: Optional[str] = None
    infill: Optional[int] = None
    price: Optional[float] = Field(None, description="Stored VAT-inclusive price")
    quantity: int = 1
    support_type: SupportType = SupportType.NONE
    infill_pattern: InfillPattern = InfillPattern.GRID

    model_config = {"from_attributes": True}

    @field_validator("material", mode="before")
    @classmethod
    def normalize_material(cls, v):
        v = _blank_to_none(v)
        return v.lower() if isinstance(v, str) else v

    @field_validator("color", "layer_height", mode="before")
    @classmethod
    def blank_strings(cls, v):
        return _blank_to_none(v)

    @field_validator("infill", mode="before")
    @classmethod
    def parse_infill(cls, v):
        """Legacy rows store infill as text such as '20%'"""
        v = _blank_to_none(v)
        if isinstance(v, str):
            return int(float(v.rstrip("%").strip()))
        return v

    @field_validator("support_type", "infill_pattern", mode="before")
    @classmethod
    def default_enums(cls, v, info):
        v = _blank_to_none(v)
        if v is None:
            return SupportType.NONE if info.field_name == "support_type" else InfillPattern.GRID
        return v


# ============================================================================
# Results
# ============================================================================

class EstimationResult(BaseModel):
    """Weight and print time for one unit of a PrintJobSpec"""
    model_config = ConfigDict(frozen=True)

    base_volume_cm3: float
    effective_volume_cm3: float
    layer_height: str
    infill_percent: int
    density: float
    weight_grams: float = Field(..., description="Unrounded weight, used for pricing")
    print_time_hours: float = Field(..., description="Unrounded time, used for pricing")
    material_weight_grams: int
    print_time_minutes: int
    fallbacks: List[FallbackKind] = Field(default_factory=list)


class PriceBreakdown(BaseModel):
    """Itemized VAT-inclusive price; components are rounded for display only"""
    model_config = ConfigDict(frozen=True)

    material_cost: Decimal
    energy_cost: Decimal
    service_fee: Decimal
    depreciation: Decimal
    maintenance: Decimal
    internal_cost: Decimal
    vat: Decimal
    unit_price: Decimal
    quantity: int
    total_price: Decimal


class BlockingItem(BaseModel):
    """An item that prevents an order from being priced"""
    index: int
    file_name: Optional[str] = None
    missing: List[str] = Field(default_factory=list)
    message: str


class PricingError(BaseModel):
    """Expected validation failure returned instead of a price"""
    model_config = ConfigDict(frozen=True)

    code: PricingErrorCode
    message: str
    blocking_items: List[BlockingItem] = Field(default_factory=list)


class ItemQuote(BaseModel):
    """Priced line item, with the resolved values that get persisted"""
    index: int
    file_name: Optional[str] = None
    material_type: str
    color: Optional[str] = None
    layer_height: str
    infill_percent: int
    support_type: SupportType
    infill_pattern: InfillPattern
    quantity: int
    base_volume_cm3: float
    material_weight_grams: int
    print_time_minutes: int
    price_per_kg: float
    stock_status: Optional[str] = None
    lead_time_days: Optional[int] = None
    estimate: EstimationResult
    breakdown: PriceBreakdown
    fallbacks: List[FallbackKind] = Field(default_factory=list)


class OrderQuote(BaseModel):
    """Priced project: per-item breakdowns plus delivery"""
    items: List[ItemQuote]
    subtotal: Decimal
    delivery_method: str
    delivery_surcharge: Decimal
    total: Decimal


class VolumeRecovery(BaseModel):
    """Base volume chosen for a stored order and the branch that produced it"""
    model_config = ConfigDict(frozen=True)

    base_volume_cm3: float
    source: VolumeSource
    fallbacks: List[FallbackKind] = Field(default_factory=list, description="Table misses hit while recovering the volume")


class RepriceResult(BaseModel):
    recovery: VolumeRecovery
    quote: ItemQuote
