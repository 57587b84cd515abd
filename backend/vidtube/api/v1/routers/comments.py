# vidtube/api/v1/routers/comments.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from vidtube.api.v1.deps import get_current_user, get_optional_user
from vidtube.core.errors import BadRequestError
from vidtube.core.ids import parse_object_id
from vidtube.core.responses import api_response
from vidtube.models.comment import Comment
from vidtube.models.user import User
from vidtube.schemas.content import ContentIn
from vidtube.services import views
from vidtube.services.ownership import delete_owned, update_owned
from vidtube.services.query import PageParams

router = APIRouter(prefix="/comments", tags=["comments"])


def _content(body: ContentIn) -> str:
    content = (body.content or "").strip()
    if not content:
        raise BadRequestError("Content is required")
    return content


@router.get("/{video_id}")
async def list_video_comments(
    video_id: str,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    viewer: Optional[User] = Depends(get_optional_user),
):
    """
    Paginated comments of a video, newest first.

    Each comment carries its enriched owner, likesCount and isLiked.
    """
    video_id = parse_object_id(video_id, "video ID")
    data = await views.list_video_comments(video_id, PageParams.parse(page, limit), viewer.id if viewer else None)
    return api_response(data, "Comments fetched successfully")


@router.post("/{video_id}")
async def add_comment(video_id: str, body: ContentIn, user: User = Depends(get_current_user)):
    video_id = parse_object_id(video_id, "video ID")
    content = _content(body)
    video = await views.get_video_or_404(video_id)
    views.ensure_visible(video, user.id)
    comment = await Comment.create(content=content, video_id=video_id, owner_id=user.id)
    data = await views.comment_with_owner(comment.id)
    return api_response(data, "Comment added successfully", status.HTTP_201_CREATED)


@router.patch("/c/{comment_id}")
async def update_comment(comment_id: str, body: ContentIn, user: User = Depends(get_current_user)):
    comment_id = parse_object_id(comment_id, "comment ID")
    content = _content(body)
    await update_owned(Comment, comment_id, user.id, {"content": content})
    data = await views.comment_with_owner(comment_id)
    return api_response(data, "Comment updated successfully")


@router.delete("/c/{comment_id}")
async def delete_comment(comment_id: str, user: User = Depends(get_current_user)):
    comment_id = parse_object_id(comment_id, "comment ID")
    await delete_owned(Comment, comment_id, user.id)
    return api_response({}, "Comment deleted successfully")
