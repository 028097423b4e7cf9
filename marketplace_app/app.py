import logging

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.catch_error_middleware import ErrorHandlerMiddleware
from core.errors import MarketplaceError
from core.exception_handler import (
    HTTPErrorHandler,
    MarketplaceErrorHandler,
    ValidationErrorHandler,
)
from core.lifespan import lifespan
from core.settings import settings
from routes.payment_routes import router as payment_router
from routes.property_routes import router as property_router
from routes.rent_request_routes import router as rent_request_router
from routes.rent_subscription_routes import router as rent_subscription_router

logging.basicConfig(level=logging.INFO)
app = FastAPI(
    lifespan=lifespan,
    title=settings.PROJECT_NAME,
    version="2.0.0",
)

app.include_router(payment_router, prefix="/v2/payments")
app.include_router(property_router, prefix="/v2/properties")
app.include_router(rent_subscription_router, prefix="/v2/rent-subscriptions")
app.include_router(rent_request_router, prefix="/v2/rent-requests")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["System"])
async def health_check():
    return {"status": "ok"}


app.add_exception_handler(
    RequestValidationError,
    ValidationErrorHandler(),
)
app.add_exception_handler(MarketplaceError, MarketplaceErrorHandler())
app.add_exception_handler(StarletteHTTPException, HTTPErrorHandler())

app.add_middleware(ErrorHandlerMiddleware)


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8001, reload=True)
