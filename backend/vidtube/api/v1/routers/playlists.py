# vidtube/api/v1/routers/playlists.py
from fastapi import APIRouter, Depends, status
from tortoise.exceptions import IntegrityError
from tortoise.expressions import Subquery

from vidtube.api.v1.deps import get_current_user
from vidtube.core.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from vidtube.core.ids import parse_object_id
from vidtube.core.responses import api_response
from vidtube.models.playlist import Playlist, PlaylistEntry
from vidtube.models.user import User
from vidtube.models.video import Video
from vidtube.schemas.content import PlaylistCreateIn, PlaylistUpdateIn, patch_fields
from vidtube.services import views
from vidtube.services.ownership import delete_owned, update_owned

router = APIRouter(prefix="/playlist", tags=["playlists"])


@router.post("")
async def create_playlist(body: PlaylistCreateIn, user: User = Depends(get_current_user)):
    name = (body.name or "").strip()
    if not name:
        raise BadRequestError("Playlist name is required")
    description = (body.description or "").strip() or None
    playlist = await Playlist.create(name=name, description=description, owner_id=user.id)
    data = await views.playlist_detail(playlist.id, user.id)
    return api_response(data, "Playlist created successfully", status.HTTP_201_CREATED)


@router.get("/user/{user_id}")
async def get_user_playlists(user_id: str, user: User = Depends(get_current_user)):
    user_id = parse_object_id(user_id, "user ID")
    data = await views.list_user_playlists(user_id, user.id)
    return api_response(data, "User playlists fetched successfully")


@router.get("/{playlist_id}")
async def get_playlist(playlist_id: str, user: User = Depends(get_current_user)):
    """
    Playlist with its owner and its videos in playlist order; every video
    carries its own enriched owner.
    """
    playlist_id = parse_object_id(playlist_id, "playlist ID")
    data = await views.playlist_detail(playlist_id, user.id)
    return api_response(data, "Playlist fetched successfully")


@router.patch("/add/{video_id}/{playlist_id}")
async def add_video_to_playlist(video_id: str, playlist_id: str, user: User = Depends(get_current_user)):
    """
    Append a video to an owned playlist.

    Raises:
        NotFoundError (404): Playlist or video does not exist
        ForbiddenError (403): Playlist belongs to someone else, or the video
            is another user's unpublished video
        ConflictError (409): Video already in the playlist
    """
    video_id = parse_object_id(video_id, "video ID")
    playlist_id = parse_object_id(playlist_id, "playlist ID")
    playlist = await Playlist.get_or_none(id=playlist_id)
    if not playlist:
        raise NotFoundError("Playlist not found")
    if playlist.owner_id != user.id:
        raise ForbiddenError("You are not allowed to modify this playlist")
    video = await Video.get_or_none(id=video_id)
    if not video:
        raise NotFoundError("Video not found")
    views.ensure_visible(video, user.id)
    if await PlaylistEntry.exists(playlist_id=playlist_id, video_id=video_id):
        raise ConflictError("Video already in playlist")

    last = await PlaylistEntry.filter(playlist_id=playlist_id).order_by("-position").first()
    try:
        await PlaylistEntry.create(
            playlist_id=playlist_id,
            video_id=video_id,
            position=(last.position + 1) if last else 0,
        )
    except IntegrityError:
        raise ConflictError("Video already in playlist")
    await update_owned(Playlist, playlist_id, user.id, {})
    data = await views.playlist_detail(playlist_id, user.id)
    return api_response(data, "Video added to playlist successfully")


@router.patch("/remove/{video_id}/{playlist_id}")
async def remove_video_from_playlist(video_id: str, playlist_id: str, user: User = Depends(get_current_user)):
    """
    Remove a video from an owned playlist in one conditional delete.

    A missing playlist, a playlist owned by someone else and a video that
    is not in the playlist all give the same 404.
    """
    video_id = parse_object_id(video_id, "video ID")
    playlist_id = parse_object_id(playlist_id, "playlist ID")
    owned = Playlist.filter(id=playlist_id, owner_id=user.id).values("id")
    deleted = await PlaylistEntry.filter(playlist_id__in=Subquery(owned), video_id=video_id).delete()
    if not deleted:
        raise NotFoundError("Video not found in playlist or unauthorized")
    await update_owned(Playlist, playlist_id, user.id, {})
    data = await views.playlist_detail(playlist_id, user.id)
    return api_response(data, "Video removed from playlist successfully")


@router.patch("/{playlist_id}")
async def update_playlist(playlist_id: str, body: PlaylistUpdateIn, user: User = Depends(get_current_user)):
    """
    Patch name and/or description. A given name must not be blank; an empty
    or null description clears it.
    """
    playlist_id = parse_object_id(playlist_id, "playlist ID")
    fields_ = patch_fields(body)
    if not fields_:
        raise BadRequestError("Name or description is required")
    patch = {}
    if "name" in fields_:
        name = (fields_["name"] or "").strip()
        if not name:
            raise BadRequestError("Playlist name cannot be empty")
        patch["name"] = name
    if "description" in fields_:
        patch["description"] = (fields_["description"] or "").strip() or None
    await update_owned(Playlist, playlist_id, user.id, patch)
    data = await views.playlist_detail(playlist_id, user.id)
    return api_response(data, "Playlist updated successfully")


@router.delete("/{playlist_id}")
async def delete_playlist(playlist_id: str, user: User = Depends(get_current_user)):
    playlist_id = parse_object_id(playlist_id, "playlist ID")
    await delete_owned(Playlist, playlist_id, user.id)
    return api_response({}, "Playlist deleted successfully")
