"""
Print order model

One row per printable file. Files of a multi-file project share an
order_number. The resolved pricing inputs are stored verbatim so the line
can be repriced later without the mesh.
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Numeric, Float, DateTime

from printquote.db.base import Base


class PrintOrder(Base):
    """Print order line - matches print_orders table"""
    __tablename__ = "print_orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(50), nullable=False, index=True)  # PO-2026-001

    # File
    file_name = Column(String(255), nullable=True)

    # Print parameters
    material = Column(String(50), nullable=True)
    color = Column(String(50), nullable=True)
    layer_height = Column(String(20), nullable=True)
    infill = Column(Integer, nullable=True)
    support_type = Column(String(20), nullable=True, default="none")
    infill_pattern = Column(String(20), nullable=True, default="grid")
    quantity = Column(Integer, nullable=False, default=1)

    # Delivery
    shipping_method = Column(String(50), nullable=True)

    # Resolved estimation (nullable: legacy rows predate these columns)
    model_volume_cm3 = Column(Float, nullable=True)  # stored unrounded for exact repricing
    material_weight = Column(Numeric(12, 2), nullable=True)  # grams
    print_time = Column(Integer, nullable=True)  # minutes

    # Line total, VAT included, delivery excluded
    price = Column(Numeric(10, 2), nullable=True)

    status = Column(String(50), nullable=False, default="pending")

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<PrintOrder {self.order_number}#{self.id}: {self.status}>"
