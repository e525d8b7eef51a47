from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
from tinylink_app.exceptions import LinkNotFoundError, StorageUnavailableError, ValidationError
from tinylink_app.services.link_service import LinkService
from tinylink_app.dependencies import get_link_service

router = APIRouter(tags=["redirect"])


@router.get("/{code}")
async def redirect_to_url(
    code: str,
    link_service: LinkService = Depends(get_link_service)
):
    """
    Redirect to the target URL and count the click.

    Flow:
    1. Reject malformed codes without touching the store
    2. Increment clicks and stamp last_clicked in one atomic store call
    3. Redirect to the URL returned by that same call

    A malformed code can never resolve, so it is answered like an unknown one.
    """
    try:
        link = await link_service.record_click(code)
    except (ValidationError, LinkNotFoundError):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Link not found"
        )
    except StorageUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
            headers={"Retry-After": "1"},
        )

    return RedirectResponse(url=link.url, status_code=status.HTTP_302_FOUND)
