"""
Quote endpoints

Instant pricing for single files and multi-file projects. Called by the
storefront on every change to the order form; nothing is stored.
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from printquote.db.session import get_db
from printquote.exceptions import PricingValidationError
from printquote.schemas.order import QuoteEstimateRequest
from printquote.schemas.pricing import OrderQuote, PricingError
from printquote.services.material_service import load_material_catalog
from printquote.services.order_pricing_service import price_order
from printquote.services.print_parameters import PricingConfig, get_pricing_config
from printquote.services.printer_service import get_printer_profile
from printquote.services.shipping_service import DeliveryOption, shipping_service

router = APIRouter(prefix="/quotes", tags=["Quotes"])


# ============================================================================
# ENDPOINT: Delivery Methods
# ============================================================================

@router.get("/delivery-methods", response_model=List[DeliveryOption])
def get_delivery_methods(config: PricingConfig = Depends(get_pricing_config)):
    """Delivery methods and their surcharges, cheapest first"""
    return shipping_service.list_methods(config)


# ============================================================================
# ENDPOINT: Estimate Price
# ============================================================================

@router.post("/estimate", response_model=OrderQuote)
def estimate_quote(
    request: QuoteEstimateRequest,
    db: Session = Depends(get_db),
    config: PricingConfig = Depends(get_pricing_config),
):
    """
    Price a project without storing it

    Each file is estimated and priced independently; the response holds the
    per-file breakdowns, subtotal, delivery surcharge and total.

    Errors (422):
    - INCOMPLETE_PROJECT_ITEM: a file lacks material, quality or analysis
      (details.blocking_items lists them)
    - INVALID_VOLUME: a file has a non-positive volume
    - UNKNOWN_DELIVERY_METHOD
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

    return result
