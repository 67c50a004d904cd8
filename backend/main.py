# backend/main.py
# QRIS Gateway Hub API

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gateways.api import router as gateways_router
from gateways.errors import (
    GatewayError,
    ProviderAuthError,
    ProviderTransportError
)
from gateways.registry import GATEWAY_REGISTRY
from qris import CodecError
from transactions.api import router as transactions_router

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("QRIS Gateway Hub started, gateways: %s", ", ".join(GATEWAY_REGISTRY))
    yield
    logger.info("QRIS Gateway Hub stopped")


app = FastAPI(
    title="QRIS Gateway Hub",
    description="""
## QRIS Gateway Hub

### Features
- **QRIS**: static → dynamic QRIS (amount tag + CRC16)
- **Gateways**: Order Kuota, QiosPay, Atlantic (login / OTP token / mutations / withdraw / balance)
- **Mutations**: one canonical record per incoming payment (`ref_id` dedup key)

All responses carry `success`; failures add `error` (and `gateway` when known).
    """,
    version=VERSION,
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(gateways_router)
app.include_router(transactions_router)


# ── error → HTTP status ────────────────────────────────────────────

def _status_for(exc: GatewayError) -> int:
    if isinstance(exc, ProviderAuthError):
        if exc.status_code and 400 <= exc.status_code < 500:
            return exc.status_code
        return 401
    if isinstance(exc, ProviderTransportError):
        return 500
    return 400


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    status = _status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())


@app.exception_handler(CodecError)
async def codec_error_handler(request: Request, exc: CodecError):
    return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})


@app.get("/")
async def root():
    """API info"""
    return {
        "success": True,
        "name": "QRIS Gateway Hub",
        "version": VERSION,
        "gateways": list(GATEWAY_REGISTRY),
        "endpoints": {
            "auth": ["/login", "/get-token"],
            "mutations": ["/unified-mutations"],
            "transactions": ["/create-transaction"],
            "money": ["/withdraw", "/balance"],
            "deposits": ["/deposit", "/deposit-status", "/deposit-instant"],
            "banks": ["/banks", "/verify-account"],
            "meta": ["/gateways", "/health"]
        }
    }


@app.get("/health")
async def health():
    return {"success": True, "status": "healthy", "version": VERSION}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
