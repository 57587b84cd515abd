# vidtube/services/projections.py
"""
Response shapes for every entity.

Reference fields are replaced by a projected subset of the referenced user
(never the full row, never the credential fields). A reference that was not
resolved by the query, or that resolves to nothing, becomes None.
"""
import datetime as dt
from typing import Iterable, Optional

from tortoise.models import Model

from vidtube.models import Comment, Playlist, PlaylistEntry, Tweet, User, Video

OWNER_FIELDS = ("username", "avatar", "fullname")
AUTHOR_FIELDS = ("username", "avatar")
CHANNEL_FIELDS = ("username", "avatar", "fullname", "subscribersCount")

_USER_ATTRS = {
    "username": "username",
    "email": "email",
    "fullname": "fullname",
    "avatar": "avatar",
    "coverImage": "cover_image",
    "subscribersCount": "subscribers_count",
    "channelsSubscribedToCount": "channels_subscribed_to_count",
}


def iso(value: Optional[dt.datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.isoformat() + "Z"
    return value.isoformat()


def _resolved(obj) -> bool:
    # An unfetched relation is a QuerySet, not a model instance
    return isinstance(obj, Model)


def user_summary(user, fields: Iterable[str] = OWNER_FIELDS) -> Optional[dict]:
    """Enrichment shape of a user reference: {_id, <fields>}; None when unresolved."""
    if not _resolved(user):
        return None
    out = {"_id": user.id}
    for name in fields:
        out[name] = getattr(user, _USER_ATTRS[name])
    return out


def user_doc(user: User) -> dict:
    """The account as its owner sees it (no password hash, no refresh token)."""
    return {
        "_id": user.id,
        "username": user.username,
        "email": user.email,
        "fullname": user.fullname,
        "avatar": user.avatar,
        "coverImage": user.cover_image,
        "subscribersCount": user.subscribers_count,
        "channelsSubscribedToCount": user.channels_subscribed_to_count,
        "createdAt": iso(user.created_at),
        "updatedAt": iso(user.updated_at),
    }


def video_doc(video: Video, owner_fields: Iterable[str] = OWNER_FIELDS) -> dict:
    """Full video body with the owner enriched."""
    return {
        "_id": video.id,
        "videoFile": {"url": video.video_file_url, "publicId": video.video_file_key},
        "thumbnail": {"url": video.thumbnail_url, "publicId": video.thumbnail_key},
        "title": video.title,
        "description": video.description,
        "duration": video.duration,
        "views": video.views,
        "isPublished": video.is_published,
        "owner": user_summary(video.owner, owner_fields),
        "createdAt": iso(video.created_at),
        "updatedAt": iso(video.updated_at),
    }


def video_summary(video: Video, with_owner: bool = False) -> dict:
    """Compact card used inside playlists and the channel dashboard."""
    out = {
        "_id": video.id,
        "title": video.title,
        "description": video.description,
        "thumbnail": {"url": video.thumbnail_url, "publicId": video.thumbnail_key},
        "duration": video.duration,
        "views": video.views,
        "isPublished": video.is_published,
        "createdAt": iso(video.created_at),
    }
    if with_owner:
        out["owner"] = user_summary(video.owner, AUTHOR_FIELDS)
    return out


def comment_doc(comment: Comment, likes_count: Optional[int] = None, is_liked: Optional[bool] = None) -> dict:
    out = {
        "_id": comment.id,
        "content": comment.content,
        "video": comment.video_id,
        "owner": user_summary(comment.owner, OWNER_FIELDS),
        "createdAt": iso(comment.created_at),
        "updatedAt": iso(comment.updated_at),
    }
    if likes_count is not None:
        out["likesCount"] = likes_count
    if is_liked is not None:
        out["isLiked"] = is_liked
    return out


def tweet_doc(tweet: Tweet, likes_count: Optional[int] = None, is_liked: Optional[bool] = None) -> dict:
    out = {
        "_id": tweet.id,
        "content": tweet.content,
        "owner": user_summary(tweet.owner, AUTHOR_FIELDS),
        "createdAt": iso(tweet.created_at),
        "updatedAt": iso(tweet.updated_at),
    }
    if likes_count is not None:
        out["likesCount"] = likes_count
    if is_liked is not None:
        out["isLiked"] = is_liked
    return out


def playlist_doc(playlist: Playlist, entries: Optional[Iterable[PlaylistEntry]] = None, with_video_owner: bool = False) -> dict:
    """
    Playlist with owner enriched and its videos in playlist order.

    With `with_video_owner` each video carries its own enriched owner
    (two-level join: playlist -> videos -> video owner).
    """
    videos = []
    for entry in sorted(entries or [], key=lambda e: e.position):
        if _resolved(entry.video):
            videos.append(video_summary(entry.video, with_owner=with_video_owner))
    return {
        "_id": playlist.id,
        "name": playlist.name,
        "description": playlist.description,
        "owner": user_summary(playlist.owner, AUTHOR_FIELDS),
        "videos": videos,
        "totalVideos": len(videos),
        "createdAt": iso(playlist.created_at),
        "updatedAt": iso(playlist.updated_at),
    }
