from typing import Optional

from fastapi import APIRouter, Query

from mealplan.events.web_observers import get_events

router = APIRouter(prefix="/api")


@router.get("/events")
def list_events(since: Optional[int] = Query(default=None)):
    """Plan/storage notices newer than the given cursor (poll with next_cursor)."""
    return get_events(since)
