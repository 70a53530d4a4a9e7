import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import RedirectResponse

from shortlink_app.api.pages import NOT_FOUND_PAGE, password_prompt_page
from shortlink_app.api.responses import html_response, text_response
from shortlink_app.dependencies import get_link_service, get_visit_recorder
from shortlink_app.queue.models import VisitEvent
from shortlink_app.services.client_info import get_client_ip
from shortlink_app.services.link_service import LinkService, LinkState
from shortlink_app.services.visit_recorder import VisitRecorder

logger = logging.getLogger(__name__)

router = APIRouter(tags=["redirect"])

ACCESS_PASSWORD_HEADER = "x-access-password"


@router.get("/", include_in_schema=False)
async def missing_slug():
    return html_response(NOT_FOUND_PAGE, status.HTTP_404_NOT_FOUND)


@router.get("/{slug}")
async def redirect_to_target(
    slug: str,
    request: Request,
    background_tasks: BackgroundTasks,
    p: Optional[str] = None,
    link_service: LinkService = Depends(get_link_service),
    visit_recorder: VisitRecorder = Depends(get_visit_recorder),
):
    """
    Redirect a visitor to the link's target.

    Flow:
    1. Look up the slug (404 page when unknown)
    2. Disabled or expired links answer 410
    3. Password protected links need ``?p=`` or the X-Access-Password header
    4. Schedule the visit log to run after the response is sent
    5. 302 to the target

    The visit log never delays or changes the redirect.
    """
    try:
        if not slug:
            return html_response(NOT_FOUND_PAGE, status.HTTP_404_NOT_FOUND)

        link = link_service.get_by_slug(slug)
        if link is None:
            return html_response(NOT_FOUND_PAGE, status.HTTP_404_NOT_FOUND)

        state = link_service.link_state(link)
        if state is LinkState.DISABLED:
            return text_response("Link disabled", status.HTTP_410_GONE)
        if state is LinkState.EXPIRED:
            return text_response("Link expired", status.HTTP_410_GONE)

        provided = p or request.headers.get(ACCESS_PASSWORD_HEADER)
        if not link_service.password_matches(link, provided):
            # First visit gets the form, only a wrong guess is an error
            wrong_password = bool(provided)
            return html_response(
                password_prompt_page(slug, wrong_password),
                status.HTTP_401_UNAUTHORIZED if wrong_password else status.HTTP_200_OK,
            )

        visit = VisitEvent(
            url=link.url,
            slug=slug,
            referer=request.headers.get("referer"),
            ua=request.headers.get("user-agent"),
            ip=get_client_ip(request.headers),
        )
        background_tasks.add_task(visit_recorder.record, visit)

        return RedirectResponse(url=link.url, status_code=status.HTTP_302_FOUND)

    except Exception:
        logger.exception("Redirect failed for slug %r", slug)
        return text_response("Server error", status.HTTP_500_INTERNAL_SERVER_ERROR)
