"""
Seed the material catalog and default printer profile

Creates missing tables, then inserts the storefront's material-color price
list and the default printer profile. Existing rows are left untouched.

Run with: python backend/scripts/seed_catalog.py
"""
import sys
from pathlib import Path
from decimal import Decimal

# Add backend directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session

from printquote.db.session import SessionLocal, init_db
from printquote.models.material import MaterialCatalogItem
from printquote.models.printer import PrinterProfile


# (material, color, PLN/kg)
MATERIAL_PRICES = [
    ("PLA", "White", "39"),
    ("PLA", "Black", "39"),
    ("PLA", "Red", "49"),
    ("PLA", "Yellow", "49"),
    ("PLA", "Blue", "49"),
    ("ABS", "Silver", "50"),
    ("ABS", "Transparent", "50"),
    ("ABS", "Black", "50"),
    ("ABS", "Grey", "50"),
    ("ABS", "Red", "50"),
    ("ABS", "White", "50"),
    ("ABS", "Blue", "50"),
    ("ABS", "Green", "50"),
    ("PETG", "Black", "30"),
    ("PETG", "White", "35"),
    ("PETG", "Red", "39"),
    ("PETG", "Green", "39"),
    ("PETG", "Blue", "39"),
    ("PETG", "Yellow", "39"),
    ("PETG", "Pink", "39"),
    ("PETG", "Orange", "39"),
    ("PETG", "Silver", "39"),
]


def seed_materials(db: Session) -> int:
    """Insert missing catalog rows, returns how many were added"""
    added = 0
    for material_type, color, price_per_kg in MATERIAL_PRICES:
        exists = db.query(MaterialCatalogItem).filter(
            MaterialCatalogItem.material_type == material_type,
            MaterialCatalogItem.color == color,
        ).first()
        if exists:
            continue

        db.add(MaterialCatalogItem(
            material_type=material_type,
            color=color,
            price_per_kg=Decimal(price_per_kg),
            stock_status="in_stock",
            lead_time_days=0,
            is_active=True,
        ))
        added += 1

    db.commit()
    return added


def seed_printer(db: Session) -> bool:
    """Insert the default printer profile if there is none"""
    if db.query(PrinterProfile).filter(PrinterProfile.code == "DEFAULT").first():
        return False

    db.add(PrinterProfile(
        code="DEFAULT",
        name="Default FDM printer",
        power_watts=Decimal("270"),
        cost_pln=Decimal("3483.39"),
        lifespan_hours=Decimal("5000"),
        maintenance_rate=Decimal("0.03"),
        active=True,
    ))
    db.commit()
    return True


def main():
    init_db()
    db = SessionLocal()
    try:
        print(f"Materials added: {seed_materials(db)}")
        print(f"Printer profile added: {seed_printer(db)}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
