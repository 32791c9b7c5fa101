"""
API v1 Router - PrintQuote
"""
from fastapi import APIRouter
from printquote.api.v1.endpoints import (
    materials,
    orders,
    quotes,
)

router = APIRouter()

# Materials
router.include_router(
    materials.router,
    prefix="/materials",
    tags=["materials"]
)

# Quotes (instant pricing)
router.include_router(quotes.router)

# Orders (submission and repricing)
router.include_router(orders.router)
