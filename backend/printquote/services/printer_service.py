"""
Printer Service

Provides the printer operating profile used for pricing.
"""
from typing import Optional

from sqlalchemy.orm import Session

from printquote.models.printer import PrinterProfile
from printquote.schemas.pricing import PrinterProfileSpec


def get_printer_profile(db: Session, code: Optional[str] = None) -> Optional[PrinterProfileSpec]:
    """
    Active printer profile, or None when there is none.

    Args:
        db: Database session
        code: Printer code; the first active profile when omitted

    The pricing engine substitutes its default profile for None.
    """
    query = db.query(PrinterProfile).filter(PrinterProfile.active == True)  # noqa: E712
    if code:
        query = query.filter(PrinterProfile.code == code)
    printer = query.order_by(PrinterProfile.id).first()

    if printer is None:
        return None

    return PrinterProfileSpec(
        power_watts=float(printer.power_watts),
        cost_pln=float(printer.cost_pln),
        lifespan_hours=float(printer.lifespan_hours),
        maintenance_rate=float(printer.maintenance_rate),
    )
