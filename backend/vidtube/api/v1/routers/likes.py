# vidtube/api/v1/routers/likes.py
from fastapi import APIRouter, Depends

from vidtube.api.v1.deps import get_current_user
from vidtube.core.ids import parse_object_id
from vidtube.core.responses import api_response
from vidtube.models.user import User
from vidtube.services import views
from vidtube.services.toggles import toggle_like

router = APIRouter(prefix="/likes", tags=["likes"])


async def _toggle(user: User, kind: str, raw_id: str):
    target_id = parse_object_id(raw_id, f"{kind} ID")
    result = await toggle_like(user.id, kind, target_id)
    return api_response({"isLiked": result.active}, result.message)


@router.post("/toggle/v/{video_id}")
async def toggle_video_like(video_id: str, user: User = Depends(get_current_user)):
    return await _toggle(user, "video", video_id)


@router.post("/toggle/c/{comment_id}")
async def toggle_comment_like(comment_id: str, user: User = Depends(get_current_user)):
    return await _toggle(user, "comment", comment_id)


@router.post("/toggle/t/{tweet_id}")
async def toggle_tweet_like(tweet_id: str, user: User = Depends(get_current_user)):
    return await _toggle(user, "tweet", tweet_id)


@router.get("/videos")
async def get_liked_videos(user: User = Depends(get_current_user)):
    """Videos the caller liked, newest like first, each with its owner."""
    data = await views.liked_videos(user.id)
    return api_response(data, "Liked videos fetched successfully")
