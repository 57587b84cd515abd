# vidtube/api/v1/routers/dashboard.py
from fastapi import APIRouter, Depends

from vidtube.api.v1.deps import get_current_user
from vidtube.core.responses import api_response
from vidtube.models.user import User
from vidtube.services.stats import channel_stats, channel_videos

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats")
async def get_channel_stats(user: User = Depends(get_current_user)):
    """
    Totals for the caller's channel.

    Returns:
        dict with totalSubscribers, totalVideos, totalViews, totalLikes
        (all 0 for a channel without videos)
    """
    data = await channel_stats(user.id)
    return api_response(data, "Channel stats fetched successfully")


@router.get("/videos")
async def get_channel_videos(user: User = Depends(get_current_user)):
    data = await channel_videos(user.id)
    return api_response(data, "Channel videos fetched successfully")
