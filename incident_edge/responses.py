# ================================
# FILE: incident_edge/responses.py
# ================================
import logging
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from incident_edge.schemas import Envelope

log = logging.getLogger("uvicorn.error").getChild("responses")


def envelope(status: int, message: str, data=None, headers=None) -> JSONResponse:
    body = Envelope(status=status, message=message, data=data)
    return JSONResponse(jsonable_encoder(body), status_code=status, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return envelope(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    field = ".".join(str(p) for p in errors[0].get("loc", ())[1:]) if errors else ""
    return envelope(400, f"Invalid field: {field}" if field else "Invalid request")

async def guard_unexpected_errors(request: Request, call_next):
    """Anything a route did not turn into an HTTPException becomes a bare 500."""
    try:
        return await call_next(request)
    except Exception:
        log.exception("[%s %s] unexpected error", request.method, request.url.path)
        return envelope(500, "Internal Server Error")


class PreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware that answers accepted preflights with an empty 204."""

    def preflight_response(self, request_headers):
        resp = super().preflight_response(request_headers)
        if resp.status_code != 200:
            return resp
        headers = {k: v for k, v in resp.headers.items()
                   if k.lower() not in ("content-length", "content-type")}
        return Response(status_code=204, headers=headers)
