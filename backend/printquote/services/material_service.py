"""
Material Service

Reads the material catalog and converts it into the read-only
MaterialCatalog the pricing engine consumes. Also formats catalog options
for the storefront dropdowns.
"""
from typing import List

from sqlalchemy.orm import Session

from printquote.models.material import MaterialCatalogItem
from printquote.schemas.pricing import MaterialCatalog, MaterialCatalogEntry


def to_catalog_entry(item: MaterialCatalogItem) -> MaterialCatalogEntry:
    """Convert a catalog row to the engine's entry type"""
    return MaterialCatalogEntry(
        material_type=item.material_type,
        color=item.color,
        price_per_kg=float(item.price_per_kg),
        stock_status=item.stock_status or "in_stock",
        is_active=bool(item.is_active),
        lead_time_days=item.lead_time_days or 0,
    )


def get_catalog_items(db: Session, active_only: bool = True) -> List[MaterialCatalogItem]:
    """
    Catalog rows ordered by material and color

    Args:
        db: Database session
        active_only: If True, skip deactivated rows
    """
    query = db.query(MaterialCatalogItem)
    if active_only:
        query = query.filter(MaterialCatalogItem.is_active == True)  # noqa: E712
    return query.order_by(MaterialCatalogItem.material_type, MaterialCatalogItem.color).all()


def load_material_catalog(db: Session) -> MaterialCatalog:
    """Snapshot of the active catalog for one pricing run"""
    items = get_catalog_items(db, active_only=True)
    return MaterialCatalog.from_entries(to_catalog_entry(item) for item in items)


def get_portal_material_options(db: Session) -> List[dict]:
    """
    Material options formatted for the storefront

    Returns:
        List of dicts: [
            {
                "material_type": "PLA",
                "colors": [
                    {"color": "White", "price_per_kg": 39.0, "stock_status": "in_stock", "lead_time_days": 0},
                    ...
                ]
            },
            ...
        ]
    """
    grouped: dict = {}
    for item in get_catalog_items(db, active_only=True):
        grouped.setdefault(item.material_type, []).append({
            "color": item.color,
            "price_per_kg": float(item.price_per_kg),
            "stock_status": item.stock_status,
            "lead_time_days": item.lead_time_days,
        })

    return [
        {"material_type": material_type, "colors": colors}
        for material_type, colors in grouped.items()
    ]
