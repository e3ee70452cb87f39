"""
FastAPI application serving the generation endpoint.
"""

from functools import lru_cache

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from webber import __version__
from webber.config import get_settings
from webber.errors import (
    InvalidRequestError,
    MissingImageError,
    ModelInvocationError,
    WebberError,
)
from webber.models import GenerationRequest
from webber.pipeline.generation import SiteGenerator, new_request_id


app = FastAPI(title="Webber", version=__version__)


@lru_cache(maxsize=1)
def get_generator() -> SiteGenerator:
    try:
        return SiteGenerator.from_settings(get_settings())
    except ValueError as e:
        raise ModelInvocationError(str(e)) from e


@app.exception_handler(WebberError)
async def webber_error_handler(request: Request, exc: WebberError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/generate")
async def generate(request: Request, generator: SiteGenerator = Depends(get_generator)):
    """
    Convert a sketch into ``{html, css, js}``.

    Body: ``{"image": "<base64 or data URI>", "type": "...", "prompt": "..."}``.
    Failures come back as ``{"error": ..., "raw"?: ...}`` with a non-2xx status.
    """
    try:
        body = await request.json()
    except ValueError:
        raise InvalidRequestError("Request body must be a JSON object")

    if not isinstance(body, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    if not body.get("image"):
        raise MissingImageError()

    try:
        generation_request = GenerationRequest.model_validate(body)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise InvalidRequestError(f"Invalid request fields: {fields}")

    # Generator failures are logged where they happen and mapped by the handler
    site = await generator.agenerate(generation_request, request_id=new_request_id())
    return site.model_dump()
