"""
Order endpoints

Order submission and the edit-order repricing flow. Submitted lines store
the resolved pricing inputs (base volume, weight, print time) so later
edits reprice them deterministically without the model file.
"""
from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from sqlalchemy import desc

from printquote.db.session import get_db
from printquote.exceptions import NotFoundError, PricingValidationError
from printquote.logging_config import audit_log, get_logger
from printquote.models.print_order import PrintOrder
from printquote.schemas.order import (
    OrderCreate,
    OrderCreateResponse,
    OrderReprice,
    OrderRepriceResponse,
    PrintOrderResponse,
)
from printquote.schemas.pricing import ItemQuote, PersistedOrderFields, PricingError
from printquote.services.material_service import load_material_catalog
from printquote.services.order_pricing_service import price_order
from printquote.services.print_parameters import PricingConfig, get_pricing_config
from printquote.services.printer_service import get_printer_profile
from printquote.services.reverse_estimation import reprice_persisted_order
from printquote.services.shipping_service import shipping_service

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = get_logger(__name__)


def _next_order_number(db: Session) -> str:
    """PO-YYYY-NNN, sequential within the year"""
    year = datetime.utcnow().year
    last_order = (
        db.query(PrintOrder)
        .filter(PrintOrder.order_number.like(f"PO-{year}-%"))
        .order_by(desc(PrintOrder.order_number))
        .first()
    )

    if last_order:
        next_num = int(last_order.order_number.split("-")[2]) + 1
    else:
        next_num = 1

    return f"PO-{year}-{next_num:03d}"


def _apply_quote(line: PrintOrder, quote: ItemQuote) -> None:
    """Store the resolved inputs and outputs of a priced line"""
    if quote.file_name is not None:
        line.file_name = quote.file_name
    line.material = quote.material_type
    line.color = quote.color
    line.layer_height = quote.layer_height
    line.infill = quote.infill_percent
    line.support_type = quote.support_type.value
    line.infill_pattern = quote.infill_pattern.value
    line.quantity = quote.quantity
    line.model_volume_cm3 = quote.base_volume_cm3
    line.material_weight = Decimal(quote.material_weight_grams)
    line.print_time = quote.print_time_minutes
    line.price = quote.breakdown.total_price


def _persisted_fields(line: PrintOrder) -> PersistedOrderFields:
    return PersistedOrderFields(
        model_volume_cm3=line.model_volume_cm3,
        material_weight=float(line.material_weight) if line.material_weight is not None else None,
        material=line.material,
        color=line.color,
        layer_height=line.layer_height,
        infill=line.infill,
        price=float(line.price) if line.price is not None else None,
        quantity=line.quantity or 1,
        support_type=line.support_type,
        infill_pattern=line.infill_pattern,
    )


def _get_line(db: Session, order_id: int) -> PrintOrder:
    line = db.query(PrintOrder).filter(PrintOrder.id == order_id).first()
    if not line:
        raise NotFoundError("Order", order_id)
    return line


# ============================================================================
# ENDPOINT: Submit Order
# ============================================================================

@router.post("/", response_model=OrderCreateResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    request: OrderCreate,
    db: Session = Depends(get_db),
    config: PricingConfig = Depends(get_pricing_config),
):
    """
    Price and store an order

    Creates one order line per file, all sharing one order number. The
    order is refused (422) under the same conditions as /quotes/estimate.
    """
    result = price_order(
        request.items,
        request.delivery_method,
        catalog=load_material_catalog(db),
        printer=get_printer_profile(db),
        config=config,
    )
    if isinstance(result, PricingError):
        raise PricingValidationError(result)

    order_number = _next_order_number(db)
    lines = []
    for quote in result.items:
        line = PrintOrder(
            order_number=order_number,
            shipping_method=result.delivery_method,
            status="pending",
        )
        _apply_quote(line, quote)
        db.add(line)
        lines.append(line)

    db.commit()
    for line in lines:
        db.refresh(line)

    audit_log(
        "ORDER_CREATED",
        resource_type="print_order",
        resource_id=order_number,
        details={
            "lines": len(lines),
            "subtotal": str(result.subtotal),
            "delivery_method": result.delivery_method,
            "total": str(result.total),
        },
    )

    return OrderCreateResponse(
        order_number=order_number,
        lines=[PrintOrderResponse.model_validate(line) for line in lines],
        quote=result,
    )


# ============================================================================
# ENDPOINT: Get Order Line
# ============================================================================

@router.get("/{order_id}", response_model=PrintOrderResponse)
def get_order(order_id: int, db: Session = Depends(get_db)):
    """Stored order line with its pricing inputs"""
    return _get_line(db, order_id)


# ============================================================================
# ENDPOINT: Reprice Order Line
# ============================================================================

@router.post("/{order_id}/reprice", response_model=OrderRepriceResponse)
def reprice_order(
    order_id: int,
    request: OrderReprice,
    db: Session = Depends(get_db),
    config: PricingConfig = Depends(get_pricing_config),
):
    """
    Reprice a stored order line, optionally with edited parameters

    Lines stored without a model volume get one recovered from their weight,
    else their price, else a fixed legacy volume; `volume_source` reports
    which. With save=true the recomputed values, including the recovered
    volume, are written back so the next reprice uses the stored volume.
    """
    line = _get_line(db, order_id)

    # An explicit null means "keep the stored value"
    changes = request.model_dump(exclude_unset=True, exclude_none=True, exclude={"save", "shipping_method"})
    result = reprice_persisted_order(
        _persisted_fields(line),
        catalog=load_material_catalog(db),
        printer=get_printer_profile(db),
        config=config,
        changes=changes,
        order_id=order_id,
    )
    if isinstance(result, PricingError):
        raise PricingValidationError(result)

    delivery_method = request.shipping_method or line.shipping_method or "pickup"
    surcharge = shipping_service.get_surcharge(delivery_method, config)
    if isinstance(surcharge, PricingError):
        raise PricingValidationError(surcharge)

    quote = result.quote
    if request.save:
        _apply_quote(line, quote)
        line.shipping_method = shipping_service.normalize_method(delivery_method)
        db.commit()
        audit_log(
            "ORDER_REPRICED",
            resource_type="print_order",
            resource_id=order_id,
            details={
                "volume_source": result.recovery.source.value,
                "price": str(quote.breakdown.total_price),
            },
        )

    logger.info(
        "Order line repriced",
        extra={
            "order_id": order_id,
            "volume_source": result.recovery.source.value,
            "total_price": str(quote.breakdown.total_price),
            "saved": request.save,
        },
    )

    return OrderRepriceResponse(
        order_id=order_id,
        volume_source=result.recovery.source,
        base_volume_cm3=result.recovery.base_volume_cm3,
        quote=quote,
        delivery_method=shipping_service.normalize_method(delivery_method),
        delivery_surcharge=surcharge,
        total=quote.breakdown.total_price + surcharge,
        saved=request.save,
    )
