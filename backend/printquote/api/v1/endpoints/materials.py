"""
Material API Endpoints

Provides material and color options for the storefront.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel

from printquote.db.session import get_db
from printquote.services.material_service import get_portal_material_options


router = APIRouter()


# ============================================================================
# SCHEMAS
# ============================================================================

class ColorOption(BaseModel):
    """Color option for dropdown"""
    color: str
    price_per_kg: float
    stock_status: str = "in_stock"
    lead_time_days: Optional[int] = 0


class MaterialOption(BaseModel):
    """Material type with available colors"""
    material_type: str
    colors: List[ColorOption]


class MaterialOptionsResponse(BaseModel):
    """Response containing all material options for the storefront"""
    materials: List[MaterialOption]


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("/options", response_model=MaterialOptionsResponse)
def get_material_options(
    in_stock_only: bool = False,
    db: Session = Depends(get_db)
):
    """
    Get all active material options.

    Returns material types (first dropdown) with the colors available for
    each (second dropdown), including price and lead time.
    """
    materials = []
    for m in get_portal_material_options(db):
        colors = [
            ColorOption(**c)
            for c in m["colors"]
            if not in_stock_only or c["stock_status"] != "out_of_stock"
        ]
        if colors:
            materials.append(MaterialOption(material_type=m["material_type"], colors=colors))

    return MaterialOptionsResponse(materials=materials)
