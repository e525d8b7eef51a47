from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from tinylink_app.exceptions import (
    CodeConflictError,
    GenerationExhaustedError,
    LinkNotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from tinylink_app.schemas.link import LinkCreate, LinkResponse, MessageResponse
from tinylink_app.services.link_service import LinkService
from tinylink_app.dependencies import get_link_service

router = APIRouter(prefix="/links", tags=["links"])


def _to_http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, CodeConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, LinkNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link not found")
    # GenerationExhaustedError, StorageUnavailableError: retry later
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=str(exc),
        headers={"Retry-After": "1"},
    )


LINK_ERRORS = (
    ValidationError,
    CodeConflictError,
    LinkNotFoundError,
    GenerationExhaustedError,
    StorageUnavailableError,
)


@router.post("", response_model=LinkResponse, status_code=status.HTTP_201_CREATED)
async def create_link(
    link_data: LinkCreate,
    link_service: LinkService = Depends(get_link_service)
):
    """Create a new short link, with a custom code or a generated one"""
    try:
        return await link_service.create_link(link_data.url, link_data.code)
    except LINK_ERRORS as exc:
        raise _to_http_error(exc)


@router.get("", response_model=List[LinkResponse])
async def list_links(link_service: LinkService = Depends(get_link_service)):
    """List all links, newest first"""
    try:
        return await link_service.list_links()
    except LINK_ERRORS as exc:
        raise _to_http_error(exc)


@router.get("/{code}", response_model=LinkResponse)
async def get_link_stats(
    code: str,
    link_service: LinkService = Depends(get_link_service)
):
    """Get a single link with its click count and last click time"""
    try:
        return await link_service.get_stats(code)
    except LINK_ERRORS as exc:
        raise _to_http_error(exc)


@router.delete("/{code}", response_model=MessageResponse)
async def delete_link(
    code: str,
    link_service: LinkService = Depends(get_link_service)
):
    """Delete a link; its code can be used again right away"""
    try:
        await link_service.delete_link(code)
    except LINK_ERRORS as exc:
        raise _to_http_error(exc)
    return {"message": "Link deleted successfully"}
