"""
Pydantic schemas for quote and order endpoints

Request and response models for project pricing, order submission and the
edit-order repricing flow.
"""
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field

from printquote.schemas.pricing import (
    InfillPattern,
    ItemQuote,
    OrderQuote,
    PrintJobSpec,
    SupportType,
    VolumeSource,
)


class QuoteEstimateRequest(BaseModel):
    """Schema for pricing a single file or a multi-file project"""
    items: List[PrintJobSpec] = Field(..., description="One entry per model file")
    delivery_method: str = Field(..., max_length=50, description="pickup, inpost, standard, dpd, courier, express")


class OrderCreate(QuoteEstimateRequest):
    """Schema for submitting an order; priced exactly like an estimate"""
    pass


class PrintOrderResponse(BaseModel):
    """Schema for a stored order line"""
    id: int
    order_number: str
    file_name: Optional[str] = None
    material: Optional[str] = None
    color: Optional[str] = None
    layer_height: Optional[str] = None
    infill: Optional[int] = None
    support_type: Optional[str] = None
    infill_pattern: Optional[str] = None
    quantity: int
    shipping_method: Optional[str] = None
    model_volume_cm3: Optional[float] = None
    material_weight: Optional[Decimal] = None
    print_time: Optional[int] = None
    price: Optional[Decimal] = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrderCreateResponse(BaseModel):
    """Schema for a submitted order"""
    order_number: str
    lines: List[PrintOrderResponse]
    quote: OrderQuote


class OrderReprice(BaseModel):
    """
    Schema for repricing a stored order line (edit order page)

    Omitted or null fields keep their stored values.
    """
    material_type: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=50)
    quality: Optional[str] = Field(None, max_length=20)
    custom_layer_height: Optional[str] = Field(None, max_length=20)
    infill_percent: Optional[int] = Field(None, ge=0, le=100)
    support_type: Optional[SupportType] = None
    infill_pattern: Optional[InfillPattern] = None
    quantity: Optional[int] = Field(None, ge=1, le=1000)
    shipping_method: Optional[str] = Field(None, max_length=50)
    save: bool = Field(False, description="Write the recomputed values back to the order")


class OrderRepriceResponse(BaseModel):
    """Schema for a repriced order line"""
    order_id: int
    volume_source: VolumeSource
    base_volume_cm3: float
    quote: ItemQuote
    delivery_method: str
    delivery_surcharge: Decimal
    total: Decimal
    saved: bool
