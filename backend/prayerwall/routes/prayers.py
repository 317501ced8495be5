"""
Prayer Wall Backend — Prayers Route Handlers
==============================================

What:  GET, POST and DELETE on /api/prayers.
How:   Extracts body/query values, delegates to PrayerService, returns JSON.
Who:   Called by the memorial page's prayer form (and prayerwall.client).

Caching:
    The listing is polled by every open page, so its response forbids any
    browser, proxy or CDN cache from storing it. Mutations are never cached
    by intermediaries in the first place.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from prayerwall.schemas.prayer import (
    DeleteResponse,
    ErrorResponse,
    PrayerCreate,
    PrayerResponse,
)
from prayerwall.services.prayer_service import PrayerService, get_prayer_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Prayers"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.get(
    "/prayers",
    response_model=List[PrayerResponse],
    response_model_exclude_none=True,
    responses={
        200: {"description": "All prayers, newest first"},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="List prayers",
    description=(
        "Returns every prayer ordered by creation time, newest first. "
        "Timestamps are display strings computed at request time. "
        "Query parameters (such as a cache-busting `_`) are ignored."
    ),
)
async def list_prayers(
    response: Response,
    service: PrayerService = Depends(get_prayer_service),
) -> List[PrayerResponse]:
    prayers = await service.list_prayers()
    response.headers.update(NO_CACHE_HEADERS)
    return prayers


@router.post(
    "/prayers",
    status_code=201,
    response_model=PrayerResponse,
    response_model_exclude_none=True,
    responses={
        201: {"description": "Prayer stored", "model": PrayerResponse},
        400: {"description": "Prayer text missing or empty", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Share a prayer",
)
async def create_prayer(
    payload: PrayerCreate,
    service: PrayerService = Depends(get_prayer_service),
) -> PrayerResponse:
    """
    Store a new prayer.

    Returns the stored record with `timestamp: "Just now"`; the page
    prepends it to its list instead of re-fetching.
    """
    logger.info("Received prayer (anonymous=%s)", not (payload.name and payload.name.strip()))
    return await service.create_prayer(payload)


@router.delete(
    "/prayers",
    response_model=DeleteResponse,
    responses={
        200: {"description": "Prayer removed", "model": DeleteResponse},
        400: {"description": "id query parameter missing", "model": ErrorResponse},
        404: {"description": "No prayer with that id", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Remove a prayer",
)
async def delete_prayer(
    prayer_id: Optional[str] = Query(
        default=None,
        alias="id",
        description="Identifier of the prayer to remove",
    ),
    service: PrayerService = Depends(get_prayer_service),
) -> DeleteResponse:
    await service.delete_prayer(prayer_id)
    return DeleteResponse(success=True)
