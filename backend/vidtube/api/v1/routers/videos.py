# vidtube/api/v1/routers/videos.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from vidtube.api.v1.deps import get_current_user, get_optional_user
from vidtube.core.errors import BadRequestError, ConflictError, NotFoundError, UpstreamError
from vidtube.core.ids import parse_object_id
from vidtube.core.responses import api_response
from vidtube.models.user import User
from vidtube.models.video import Video
from vidtube.services import views
from vidtube.services.asset_store import AssetStore, delete_assets, get_asset_store, store_upload
from vidtube.services.ownership import delete_owned, get_owned, update_owned
from vidtube.services.query import PageParams

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/videos", tags=["videos"])


@router.get("")
async def list_videos(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    query: Optional[str] = Query(None),
    sortBy: Optional[str] = Query(None),
    sortType: Optional[str] = Query(None),
    userId: Optional[str] = Query(None),
):
    """
    Paginated listing of published videos.

    Args:
        page / limit: Lenient integers (defaults 1 / 10, limit capped)
        query: Case-insensitive substring over title and description
        sortBy / sortType: createdAt|updatedAt|title|views|duration, asc|desc
        userId: Restrict to one owner (must be a valid id)

    Returns:
        Paginated envelope: docs, totalDocs, limit, page, totalPages, ...
    """
    owner_id = parse_object_id(userId, "user ID") if userId else None
    data = await views.list_videos(
        PageParams.parse(page, limit),
        query=query,
        owner_id=owner_id,
        sort_by=sortBy,
        sort_type=sortType,
    )
    return api_response(data, "Videos fetched successfully")


@router.post("")
async def publish_video(
    title: str = Form(default=""),
    description: str = Form(default=""),
    videoFile: Optional[UploadFile] = File(default=None),
    thumbnail: Optional[UploadFile] = File(default=None),
    isPublished: bool = Form(default=True),
    user: User = Depends(get_current_user),
    store: AssetStore = Depends(get_asset_store),
):
    """
    Upload a video file plus thumbnail and create the Video.

    The duration reported by the asset store is recorded. When the
    thumbnail upload fails the already stored video file is discarded.

    Raises:
        BadRequestError (400): Blank title/description or a missing file
        UpstreamError (500): Asset store upload failed
    """
    title, description = title.strip(), description.strip()
    if not title or not description:
        raise BadRequestError("Title and description are required")
    if videoFile is None or not videoFile.filename:
        raise BadRequestError("Video file is required")
    if thumbnail is None or not thumbnail.filename:
        raise BadRequestError("Thumbnail is required")

    video_asset = await store_upload(store, videoFile, resource_type="video")
    if not video_asset:
        raise UpstreamError("Error while uploading video")
    thumb_asset = await store_upload(store, thumbnail, resource_type="image")
    if not thumb_asset:
        await delete_assets(store, [(video_asset.key, "video")])
        raise UpstreamError("Error while uploading thumbnail")

    video = await Video.create(
        video_file_url=video_asset.url,
        video_file_key=video_asset.key,
        thumbnail_url=thumb_asset.url,
        thumbnail_key=thumb_asset.key,
        title=title,
        description=description,
        duration=video_asset.duration or 0,
        is_published=isPublished,
        owner_id=user.id,
    )
    data = await views.video_with_owner(video.id)
    logger.info("[videos] %s published %s", user.id, video.id)
    return api_response(data, "Video uploaded successfully", status.HTTP_201_CREATED)


@router.get("/{video_id}")
async def get_video(video_id: str, viewer: Optional[User] = Depends(get_optional_user)):
    """
    Video detail with owner, like count and subscription state.

    A successful fetch counts a view and, for a signed-in viewer, moves the
    video to the front of their watch history. Unpublished videos are 403
    for everyone but the owner.
    """
    video_id = parse_object_id(video_id, "video ID")
    data = await views.video_detail(video_id, viewer.id if viewer else None)
    return api_response(data, "Video fetched successfully")


@router.patch("/{video_id}")
async def update_video(
    video_id: str,
    title: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    thumbnail: Optional[UploadFile] = File(default=None),
    user: User = Depends(get_current_user),
    store: AssetStore = Depends(get_asset_store),
):
    """
    Patch title, description and/or thumbnail of an owned video.

    Absent fields stay unchanged; given text fields must not be blank. A new
    thumbnail is stored first, the row updated, then the old asset removed.

    Raises:
        BadRequestError (400): Nothing to update or a blank field
        NotFoundError (404): Video missing or not owned by the caller
    """
    video_id = parse_object_id(video_id, "video ID")
    patch = {}
    for name, value in (("title", title), ("description", description)):
        if value is None:
            continue
        if not value.strip():
            raise BadRequestError(f"{name.capitalize()} cannot be empty")
        patch[name] = value.strip()
    has_thumbnail = thumbnail is not None and bool(thumbnail.filename)
    if not patch and not has_thumbnail:
        raise BadRequestError("Title, description or thumbnail is required")

    video = await get_owned(Video, video_id, user.id)
    old_thumbnail_key = None
    if has_thumbnail:
        asset = await store_upload(store, thumbnail, resource_type="image")
        if not asset:
            raise UpstreamError("Error while uploading thumbnail")
        patch["thumbnail_url"] = asset.url
        patch["thumbnail_key"] = asset.key
        old_thumbnail_key = video.thumbnail_key

    try:
        await update_owned(Video, video_id, user.id, patch)
    except NotFoundError:
        if has_thumbnail:
            await delete_assets(store, [(patch["thumbnail_key"], "image")])
        raise
    if old_thumbnail_key:
        await delete_assets(store, [(old_thumbnail_key, "image")])

    data = await views.video_with_owner(video_id)
    return api_response(data, "Video updated successfully")


@router.delete("/{video_id}")
async def delete_video(
    video_id: str,
    user: User = Depends(get_current_user),
    store: AssetStore = Depends(get_asset_store),
):
    """
    Delete an owned video, then its stored file and thumbnail.

    Asset removal is best effort: failures are queued for retry and never
    block the record deletion. A non-owner gets 404 and nothing is touched.
    """
    video_id = parse_object_id(video_id, "video ID")
    video = await get_owned(Video, video_id, user.id)
    await delete_owned(Video, video_id, user.id)
    await delete_assets(store, [(video.video_file_key, "video"), (video.thumbnail_key, "image")])
    return api_response({}, "Video deleted successfully")


@router.patch("/toggle/publish/{video_id}")
async def toggle_publish_status(video_id: str, user: User = Depends(get_current_user)):
    """
    Flip the publish flag of an owned video.

    The write only applies while the flag still holds the value that was
    read, so two concurrent toggles cannot both land on the same state.

    Raises:
        NotFoundError (404): Video missing or not owned by the caller
        ConflictError (409): The flag changed between the read and the write
    """
    video_id = parse_object_id(video_id, "video ID")
    video = await get_owned(Video, video_id, user.id)
    is_published = not video.is_published
    try:
        await update_owned(
            Video, video_id, user.id, {"is_published": is_published}, is_published=video.is_published
        )
    except NotFoundError:
        raise ConflictError("Publish status changed concurrently, please retry")
    message = "Video published successfully" if is_published else "Video unpublished successfully"
    return api_response({"_id": video_id, "isPublished": is_published}, message)
