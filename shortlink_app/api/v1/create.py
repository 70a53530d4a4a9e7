import hmac
import logging

from fastapi import APIRouter, Depends, Request, status
from pydantic import ValidationError

from shortlink_app.api.responses import json_response, preflight_response
from shortlink_app.config import Settings, get_settings
from shortlink_app.dependencies import get_link_service
from shortlink_app.schemas.link import ErrorMessage, LinkCreate, LinkCreated
from shortlink_app.services.client_info import get_client_ip
from shortlink_app.services.errors import (
    LinkPersistenceError,
    LinkValidationError,
    SlugConflictError,
)
from shortlink_app.services.link_service import LinkService
from shortlink_app.services.validators import reject_same_host, validate_slug, validate_url

logger = logging.getLogger(__name__)

router = APIRouter(tags=["links"])

WRONG_METHOD_MESSAGE = "Use POST /create with JSON body"


def _public_origin(request: Request, app_settings: Settings) -> str:
    if app_settings.public_base_url:
        return app_settings.public_base_url.rstrip("/")
    return f"{request.url.scheme}://{request.url.netloc}"


def _error(message: str, status_code: int):
    return json_response(ErrorMessage(message=message).model_dump(), status_code)


@router.options("/create", include_in_schema=False)
async def create_preflight():
    return preflight_response()


# Registered explicitly so GET /create is answered here instead of being
# treated as a slug by the redirect router
@router.api_route("/create", methods=["GET", "HEAD", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def create_wrong_method():
    return _error(WRONG_METHOD_MESSAGE, status.HTTP_405_METHOD_NOT_ALLOWED)


@router.post(
    "/create",
    response_model=LinkCreated,
    responses={
        400: {"model": ErrorMessage},
        403: {"model": ErrorMessage},
        409: {"model": ErrorMessage},
        500: {"model": ErrorMessage},
    },
)
async def create_short_link(
    request: Request,
    link_service: LinkService = Depends(get_link_service),
    app_settings: Settings = Depends(get_settings),
):
    """
    Create a short link, or return the existing one.

    Body: ``{url, slug?, expiry?, password?}``. The body is parsed by hand so
    malformed JSON answers 400 with a ``message`` like every other error of
    this endpoint.
    """
    try:
        body = await request.json()
    except ValueError:
        body = None
    if not body or not isinstance(body, dict):
        return _error("Missing JSON request body", status.HTTP_400_BAD_REQUEST)

    # Checked on the raw body so field errors are never shown to a caller
    # without the password
    if app_settings.creation_password_required:
        supplied = body.get("password")
        if not isinstance(supplied, str) or not hmac.compare_digest(
            supplied.encode(), app_settings.access_password.encode()
        ):
            return _error("Access password incorrect", status.HTTP_403_FORBIDDEN)

    try:
        link_in = LinkCreate.model_validate(body)
    except ValidationError:
        return _error("Invalid request body", status.HTTP_400_BAD_REQUEST)

    try:
        url = validate_url(link_in.url)
        slug = validate_slug(link_in.slug) if link_in.slug else None
        reject_same_host(url, request.url.hostname)
    except LinkValidationError as e:
        return _error(e.message, status.HTTP_400_BAD_REQUEST)

    ip = get_client_ip(request.headers) or ""
    ua = request.headers.get("user-agent", "")
    origin = _public_origin(request, app_settings)

    try:
        link, created = link_service.create_link(
            url=url,
            slug=slug,
            expiry=link_in.expiry,
            password=link_in.password,
            ip=ip,
            ua=ua,
        )
    except SlugConflictError as e:
        return _error(e.message, status.HTTP_409_CONFLICT)
    except LinkPersistenceError as e:
        logger.error("Insert failed for %s: %s", url, e.message)
        return _error(e.message or "Server error", status.HTTP_500_INTERNAL_SERVER_ERROR)
    except Exception as e:
        logger.exception("Link creation failed for %s", url)
        return _error(str(e) or "Server error", status.HTTP_500_INTERNAL_SERVER_ERROR)

    if not created:
        logger.info("Reused link %s for %s", link.slug, url)

    return json_response(LinkCreated(slug=link.slug, link=f"{origin}/{link.slug}").model_dump())
