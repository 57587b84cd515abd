# vidtube/api/v1/routers/subscriptions.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from vidtube.api.v1.deps import get_current_user
from vidtube.core.ids import parse_object_id
from vidtube.core.responses import api_response
from vidtube.models.user import User
from vidtube.services import views
from vidtube.services.query import PageParams
from vidtube.services.toggles import toggle_subscription

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.post("/c/{channel_id}")
async def toggle_channel_subscription(channel_id: str, user: User = Depends(get_current_user)):
    """
    Subscribe to or unsubscribe from a channel.

    Both users' counters move with the subscription row in one transaction.
    """
    channel_id = parse_object_id(channel_id, "channel ID")
    result = await toggle_subscription(user.id, channel_id)
    return api_response({"isSubscribed": result.active}, result.message)


@router.get("/c/{channel_id}")
async def get_channel_subscribers(
    channel_id: str,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    user: User = Depends(get_current_user),
):
    channel_id = parse_object_id(channel_id, "channel ID")
    data = await views.channel_subscribers(channel_id, PageParams.parse(page, limit))
    return api_response(data, "Subscribers fetched successfully")


@router.get("/u/{subscriber_id}")
async def get_subscribed_channels(
    subscriber_id: str,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    user: User = Depends(get_current_user),
):
    subscriber_id = parse_object_id(subscriber_id, "subscriber ID")
    data = await views.subscribed_channels(subscriber_id, PageParams.parse(page, limit))
    return api_response(data, "Subscribed channels fetched successfully")
