"""GET/POST /api/v1/shortlist: the caller's shortlist with race status."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings
from core.dependencies import get_current_user, get_db_session
from core.errors import success_envelope
from core.identity import AuthenticatedUser
from services.shortlist_service import get_shortlist

router = APIRouter(prefix="/shortlist", tags=["shortlist"])

StatusFilter = Literal["upcoming", "past"]
SortField = Literal["race_time", "created_at"]
SortOrder = Literal["asc", "desc"]


class ShortlistQuery(BaseModel):
    status: Optional[StatusFilter] = None
    sort_by: SortField = "created_at"
    order: SortOrder = "desc"


async def _respond(query: ShortlistQuery, session: AsyncSession, user: AuthenticatedUser, settings: Settings):
    data = await get_shortlist(
        session,
        user,
        settings.timezone,
        status=query.status,
        sort_by=query.sort_by,
        descending=query.order == "desc",
    )
    return success_envelope(data, count=len(data["entries"]))


@router.get("", summary="List shortlist entries")
async def get_shortlist_entries(
    status: Optional[StatusFilter] = Query(default=None),
    sort_by: SortField = Query(default="created_at"),
    order: SortOrder = Query(default="desc"),
    session: AsyncSession = Depends(get_db_session),
    user: AuthenticatedUser = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    query = ShortlistQuery(status=status, sort_by=sort_by, order=order)
    return await _respond(query, session, user, settings)


@router.post("", summary="List shortlist entries (filters in body)")
async def post_shortlist_entries(
    body: Optional[ShortlistQuery] = None,
    session: AsyncSession = Depends(get_db_session),
    user: AuthenticatedUser = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    return await _respond(body or ShortlistQuery(), session, user, settings)
