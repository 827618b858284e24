"""
Crop Yield Predictor API.

Run with: uvicorn app.main:app
"""
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Any
import logging
import math

from app.core.config import LOG_LEVEL
from app.routers import yield_prediction

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Crop Yield Predictor",
    description="Multi-factor yield estimation, limiting factor diagnosis and agronomic recommendations.",
    version="1.0.0",
)

app.include_router(yield_prediction.router)


def json_safe(value: Any) -> Any:
    """Replace NaN/Infinity with their string form so the error body stays valid JSON."""
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, dict):
        return {k: json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    return value


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = json_safe(jsonable_encoder(exc.errors()))
    logger.warning(f"Rejected request to {request.url.path}: {len(errors)} validation error(s)")
    return JSONResponse(status_code=422, content={"detail": errors})


@app.get("/health")
def health():
    return {"status": "ok"}


logger.info("Crop Yield Predictor API initialized")
