"""
Stock Backend API

FastAPI application: auth, symbols, candles and logo detection routers plus
an unversioned health check.
"""

import json

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from stock_backend.routers import auth, candles, logo, symbols
from stock_backend.utils.logger import create_logger

logger = create_logger(__name__)

app = FastAPI(title="Stock Backend", version="1.0.0")

app.include_router(auth.router)
app.include_router(candles.router)
app.include_router(symbols.router)
app.include_router(logo.router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report request validation failures as a plain 400."""
    logger.warning(
        json.dumps(
            {
                "event": "request_validation_failed",
                "path": request.url.path,
                "errors": len(exc.errors()),
            }
        )
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": "invalid request"})


@app.api_route("/healthz", methods=["GET", "HEAD", "OPTIONS"], tags=["Health"])
def healthz(request: Request):
    """Liveness check. Never cached."""
    headers = {"Cache-Control": "no-store"}
    if request.method == "HEAD":
        return Response(status_code=status.HTTP_200_OK, headers=headers)
    if request.method == "OPTIONS":
        return Response(status_code=status.HTTP_204_NO_CONTENT, headers=headers)
    return JSONResponse({"status": "ok"}, headers=headers)
