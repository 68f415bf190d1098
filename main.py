# main.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from chain_utils import ChainContext, get_chain_context
from config import Settings, get_settings
from erc20_utils import get_token_balance
from exceptions import TokenTransferError
from logging_config import setup_logging
from relay_service_core import handle_token_transfer

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)
    if settings.init_mode == "eager":
        # eager 模式：PRIVATE_KEY 有问题直接启动失败
        get_chain_context()
    yield


app = FastAPI(title="Token Transfer API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "Referrer-Policy": "no-referrer",
    "Content-Security-Policy": "default-src 'self'",
    "Cross-Origin-Opener-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
    "X-Permitted-Cross-Domain-Policies": "none",
}


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


class TransferRequest(BaseModel):
    # 原样交给 pipeline 校验，避免 pydantic 把 true 转成 1
    amount: Any = None
    walletAddress: Optional[str] = None


# ================= 错误处理 =================

@app.exception_handler(TokenTransferError)
async def token_transfer_error_handler(request: Request, exc: TokenTransferError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code in (404, 405):
        return JSONResponse(status_code=404, content={"error": "Endpoint not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": str(exc)},
    )


# ================= 路由 =================

@app.get("/health")
def health(settings: Settings = Depends(get_settings)):
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "network": settings.network_name,
        "token": settings.token_address,
    }


@app.get("/debug")
def debug(settings: Settings = Depends(get_settings)):
    """部署排查用：只看私钥是否存在，最多暴露前 4 个字符"""
    if settings.is_production:
        raise StarletteHTTPException(status_code=404)

    key = (settings.private_key or "").strip()
    return {
        "privateKeyExists": bool(settings.private_key),
        "privateKeyLength": len(key),
        "privateKeyPrefix": key[:4] if key else "N/A",
        "rpcUrl": settings.rpc_url,
    }


@app.get("/balance/{address}")
def balance(address: str, ctx: ChainContext = Depends(get_chain_context)):
    return get_token_balance(ctx, address)


@app.post("/transfer")
def transfer(
    req: Optional[TransferRequest] = None,
    ctx: ChainContext = Depends(get_chain_context),
):
    req = req or TransferRequest()
    return handle_token_transfer(ctx, req.amount, req.walletAddress)


if __name__ == "__main__":
    settings = get_settings()
    if settings.is_production:
        # serverless 平台直接 import app，不在本地监听
        print("APP_ENV=production, not starting a local server")
    else:
        print(f"🚀 Token Transfer API starting on port {settings.port}")
        print(f"📝 Health check: http://localhost:{settings.port}/health")
        print(f"🔗 Network: {settings.network_name}")
        print(f"🪙 Token: {settings.token_address} ({settings.token_decimals} decimals)")
        uvicorn.run(app, host="0.0.0.0", port=settings.port)
