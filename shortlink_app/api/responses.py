"""Response helpers shared by the redirect and creation routes."""

from typing import Any

from fastapi import status
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Max-Age": "86400",
}


def text_response(content: str, status_code: int = status.HTTP_200_OK) -> PlainTextResponse:
    return PlainTextResponse(content, status_code=status_code)


def html_response(content: str, status_code: int = status.HTTP_200_OK) -> HTMLResponse:
    return HTMLResponse(content, status_code=status_code)


def json_response(content: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    """JSON body with the permissive CORS headers of the creation API."""
    return JSONResponse(content, status_code=status_code, headers=CORS_HEADERS)


def preflight_response() -> Response:
    return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)
