"""
HTTP API for the item valuer

Routes:
    POST /api/identify  photo (+ hint) -> item identification
    POST /api/comps     search queries -> sold-price stats and samples
    POST /api/valuate   photo -> identification + comps in one call

Errors come back as {"error": "..."}: 400 for bad input, 500 otherwise.
"""
import asyncio
import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .client import DEFAULT_AGE_DAYS, MarketplaceClient, clamp_age_days
from .config import ConfigurationError
from .errors import InputError, UpstreamError
from .identify import IdentificationClient
from .valuer import Valuer

logger = logging.getLogger(__name__)

app = FastAPI(title="Item Valuer API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== DEPENDENCIES ====================

@lru_cache()
def get_marketplace_client() -> MarketplaceClient:
    # One client (and so one token cache) per process
    return MarketplaceClient()


@lru_cache()
def get_identification_client() -> IdentificationClient:
    return IdentificationClient()


def get_valuer(
    identifier: IdentificationClient = Depends(get_identification_client),
    marketplace: MarketplaceClient = Depends(get_marketplace_client),
) -> Valuer:
    return Valuer(identifier=identifier, marketplace=marketplace)


# ==================== ERROR HANDLING ====================

@app.exception_handler(InputError)
async def input_error_handler(request: Request, exc: InputError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request"})


@app.exception_handler(ConfigurationError)
@app.exception_handler(UpstreamError)
async def service_error_handler(request: Request, exc: Exception):
    logger.error(f"{request.url.path} failed: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"{request.url.path} failed unexpectedly")
    return JSONResponse(status_code=500, content={"error": str(exc) or "Unexpected error"})


# ==================== HELPERS ====================

def _age_days(raw) -> int:
    if raw is None or raw == '':
        return DEFAULT_AGE_DAYS
    try:
        return clamp_age_days(raw)
    except (TypeError, ValueError):
        raise InputError("maxAgeDays must be a number")


async def _read_image(file: Optional[UploadFile]) -> tuple[bytes, str]:
    if file is None:
        raise InputError("No image uploaded")
    data = await file.read()
    if not data:
        raise InputError("No image uploaded")
    return data, file.content_type or "image/jpeg"


# ==================== ROUTES ====================

@app.get("/health")
def health():
    return {"status": "healthy"}


@app.post("/api/identify")
async def identify(
    file: Optional[UploadFile] = File(default=None),
    description: str = Form(default=""),
    identifier: IdentificationClient = Depends(get_identification_client),
):
    """
    Form fields:
      file        — item photo
      description — optional free-text hint
    """
    image_bytes, mime_type = await _read_image(file)
    # requests is blocking; keep it off the event loop
    result = await asyncio.to_thread(identifier.identify, image_bytes, mime_type, description)
    return result.to_dict()


@app.post("/api/comps")
async def comps(request: Request, marketplace: MarketplaceClient = Depends(get_marketplace_client)):
    """
    JSON body: {"search_queries": [...], "country": "GB", "maxAgeDays": 60}
    Only the first search query is used.
    """
    try:
        body = await request.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    queries = body.get("search_queries") or []
    if not isinstance(queries, list):
        queries = [queries]

    result = await asyncio.to_thread(
        marketplace.search_queries,
        queries,
        body.get("country") or None,
        _age_days(body.get("maxAgeDays")),
    )
    return result.to_dict()


@app.post("/api/valuate")
async def valuate(
    file: Optional[UploadFile] = File(default=None),
    description: str = Form(default=""),
    country: str = Form(default=""),
    maxAgeDays: str = Form(default=""),
    valuer: Valuer = Depends(get_valuer),
):
    image_bytes, mime_type = await _read_image(file)
    valuation = await asyncio.to_thread(
        valuer.valuate,
        image_bytes,
        mime_type,
        description,
        country or None,
        _age_days(maxAgeDays),
    )
    return valuation.to_dict()
