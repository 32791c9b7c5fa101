"""
PrintQuote - FastAPI application

Instant quotes, order submission and order repricing for the storefront.
"""
from contextlib import asynccontextmanager
from typing import Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from printquote.api.v1 import router as api_v1_router
from printquote.core.settings import settings
from printquote.exceptions import PricingValidationError, PrintQuoteException
from printquote.logging_config import get_logger, setup_logging
from printquote.services.print_parameters import get_pricing_config

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_pricing_config()
    logger.info(
        "PrintQuote API starting",
        extra={
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "default_price_per_kg": config.default_price_per_kg,
            "delivery_methods": sorted(config.shipping_costs),
        },
    )
    yield
    logger.info("PrintQuote API stopped")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Pricing and print estimation for an on-demand 3D printing storefront",
    version=settings.VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================
# Exception Handlers
# ===================


@app.exception_handler(PrintQuoteException)
async def printquote_exception_handler(request: Request, exc: PrintQuoteException):
    """Application errors carry their own status code and error code."""
    # A refused quote is an everyday outcome of the order form, not a fault
    level = "info" if isinstance(exc, PricingValidationError) else "warning"
    getattr(logger, level)(
        f"{exc.error_code}: {exc.message}",
        extra={"error_code": exc.error_code, "details": exc.details, "path": request.url.path},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(ValidationError)
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: Union[RequestValidationError, ValidationError]):
    """
    Flatten pydantic errors to field/message/type triples.

    Also covers models built from request data inside a handler, which would
    otherwise reach the ValueError handler below.
    """
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    logger.warning(f"Malformed request on {request.url.path}", extra={"errors": errors})
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": {"errors": errors},
        },
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    # Full error goes to the log only
    logger.error(f"Database error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "DATABASE_ERROR",
            "message": "A database error occurred. Please try again.",
        },
    )


@app.exception_handler(ValueError)
async def pricing_data_exception_handler(request: Request, exc: ValueError):
    """Non-finite numbers reaching the calculator mean corrupt catalog or printer data."""
    logger.error(f"Pricing data error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "PRICING_DATA_ERROR",
            "message": "This item cannot be priced right now. Please contact us for a quote.",
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


app.include_router(api_v1_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    return {"message": "PrintQuote API", "version": settings.VERSION, "status": "online"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("printquote.main:app", host="0.0.0.0", port=8000, reload=settings.is_development)
