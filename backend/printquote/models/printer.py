"""
Printer profile model
"""
from sqlalchemy import Column, Integer, String, Boolean, Numeric

from printquote.db.base import Base

class PrinterProfile(Base):
    """Operating profile used for energy, depreciation and maintenance costs"""
    __tablename__ = "printer_profiles"

    id = Column(Integer, primary_key=True, index=True)

    # Printer identification
    code = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)

    # Operating costs
    power_watts = Column(Numeric(10, 2), nullable=False)
    cost_pln = Column(Numeric(12, 2), nullable=False)  # purchase cost, amortized over lifespan
    lifespan_hours = Column(Numeric(10, 2), nullable=False)
    maintenance_rate = Column(Numeric(6, 4), nullable=False)  # fraction of depreciation

    # Active flag
    active = Column(Boolean, default=True, nullable=True)

    def __repr__(self):
        return f"<PrinterProfile {self.code}: {self.name}>"
