import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from database import check_connection, init_db
from routers import leases_router, payments_router, users_router, webhooks_router
from services.errors import LeaseFlowError, ValidationError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("rentflow")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.is_production and settings.test_otp_enabled:
        logger.warning("TEST_OTP_ENABLED is ignored in production")
    if not settings.wompi_configured:
        logger.warning("Wompi keys are not fully configured; checkout and webhooks will not validate")
    if settings.app_env == "development":
        init_db()
    yield


# App instance
app = FastAPI(
    title=settings.app_name,
    description="Rental origination: verification, contract signature and payment-gated approval",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
origins = settings.cors_origins.split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LeaseFlowError)
async def lease_flow_error_handler(request: Request, exc: LeaseFlowError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(status_code=404, content={"error": "Route not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part != "body") or "body"
        details.setdefault(field, []).append(error["msg"])
    error = ValidationError(details)
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


app.include_router(leases_router)
app.include_router(payments_router)
app.include_router(webhooks_router)
app.include_router(users_router)


@app.get("/health")
def health():
    return {"status": "ok", "database": check_connection()}


# Internal errors never leak their detail to the caller
@app.middleware("http")
async def internal_error_middleware(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=10000, reload=True)
