"""
Material catalog model

One row per material-color combination offered in the storefront.
Density is not stored here; it comes from the print parameter tables.
"""
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Numeric, Boolean, DateTime, UniqueConstraint
)

from printquote.db.base import Base
from printquote.schemas.pricing import catalog_key


class MaterialCatalogItem(Base):
    """
    Material-color catalog entry (e.g., PLA White at 39 PLN/kg)
    """
    __tablename__ = "material_catalog"

    id = Column(Integer, primary_key=True, index=True)

    # Identification
    material_type = Column(String(50), nullable=False, index=True)  # PLA, PETG, ABS, TPU
    color = Column(String(50), nullable=False)  # White, Black, Red

    # Pricing
    price_per_kg = Column(Numeric(10, 2), nullable=False)  # PLN/kg

    # Availability
    stock_status = Column(String(20), nullable=False, default="in_stock")  # in_stock, low_stock, out_of_stock
    lead_time_days = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("material_type", "color", name="uq_material_catalog_type_color"),
    )

    @property
    def catalog_key(self) -> str:
        return catalog_key(self.material_type, self.color)

    def __repr__(self):
        return f"<MaterialCatalogItem {self.material_type} {self.color}: {self.price_per_kg}/kg>"
