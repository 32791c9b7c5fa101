"""
Shipping Service - delivery surcharges

Flat surcharge per delivery method. Carrier integration (rate shopping,
labels, lockers) is handled outside this service.
"""
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel

from printquote.logging_config import get_logger
from printquote.schemas.pricing import PricingError, PricingErrorCode
from printquote.services.pricing_service import round_money
from printquote.services.print_parameters import PricingConfig

logger = get_logger(__name__)


class DeliveryOption(BaseModel):
    """Delivery method offered at checkout"""
    method: str
    surcharge: Decimal


class ShippingService:
    """
    Delivery surcharge lookup.

    Unknown method ids are rejected; defaulting them to 0 would under-charge.
    """

    def normalize_method(self, method: Optional[str]) -> str:
        return (method or "").strip().lower()

    def get_surcharge(self, method: Optional[str], config: PricingConfig) -> Union[Decimal, PricingError]:
        """Surcharge for `method`, or PricingError(UNKNOWN_DELIVERY_METHOD)"""
        method_id = self.normalize_method(method)
        cost = config.shipping_costs.get(method_id)
        if cost is None:
            logger.warning("Unknown delivery method", extra={"delivery_method": method})
            return PricingError(
                code=PricingErrorCode.UNKNOWN_DELIVERY_METHOD,
                message=(
                    f"Unknown delivery method '{method}'. "
                    f"Choose one of: {', '.join(sorted(config.shipping_costs))}"
                ),
            )
        return round_money(cost)

    def list_methods(self, config: PricingConfig) -> List[DeliveryOption]:
        """All delivery methods, cheapest first"""
        options = [
            DeliveryOption(method=method, surcharge=round_money(cost))
            for method, cost in config.shipping_costs.items()
        ]
        return sorted(options, key=lambda o: (o.surcharge, o.method))


shipping_service = ShippingService()
