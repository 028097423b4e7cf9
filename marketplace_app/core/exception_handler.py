from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.errors import MarketplaceError


class ValidationErrorHandler:
    async def __call__(self, request: Request, exc: RequestValidationError):

        errors = []

        for err in exc.errors():
            errors.append({
                "loc": err.get("loc"),
                "msg": str(err.get("msg")),
                "type": err.get("type"),
            })

        return JSONResponse(
            status_code=422,
            content={
                "message": "Validation failed",
                "details": errors,
            },
        )


class MarketplaceErrorHandler:
    async def __call__(self, request: Request, exc: MarketplaceError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.message},
        )


class HTTPErrorHandler:
    async def __call__(self, request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )
