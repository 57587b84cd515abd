# vidtube/services/views.py
"""
Denormalized read views.

Each builder runs the joins a screen needs (owner enrichment, nested
video -> owner joins, like counts) and returns plain dicts ready for the
response envelope. Nothing here writes except `record_view`.
"""
from typing import Iterable, Optional

from tortoise import timezone
from tortoise.expressions import F, Q
from tortoise.functions import Count

from vidtube.core.errors import ForbiddenError, NotFoundError, UpstreamError
from vidtube.models import (
    Comment,
    Like,
    Playlist,
    PlaylistEntry,
    Subscription,
    Tweet,
    User,
    Video,
    WatchHistoryEntry,
)
from vidtube.services import projections as shape
from vidtube.services.query import PageParams, paginate, parse_sort, text_search


# ---------------------------------------------------------------------------
# Like helpers
# ---------------------------------------------------------------------------
async def like_counts(target: str, ids: Iterable[str]) -> dict:
    """Number of likes per target id (target is "video", "comment" or "tweet")."""
    ids = list(ids)
    if not ids:
        return {}
    column = f"{target}_id"
    rows = (
        await Like.filter(**{f"{column}__in": ids})
        .annotate(n=Count("id"))
        .group_by(column)
        .values(column, "n")
    )
    return {r[column]: r["n"] for r in rows}


async def liked_ids(target: str, ids: Iterable[str], user_id: Optional[str]) -> set:
    """Subset of `ids` the user has liked; empty for anonymous viewers."""
    ids = list(ids)
    if not ids or not user_id:
        return set()
    column = f"{target}_id"
    found = await Like.filter(**{f"{column}__in": ids, "liked_by_id": user_id}).values_list(column, flat=True)
    return set(found)


# ---------------------------------------------------------------------------
# Videos
# ---------------------------------------------------------------------------
async def list_videos(
    params: PageParams,
    query: Optional[str] = None,
    owner_id: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_type: Optional[str] = None,
) -> dict:
    """
    Public video listing.

    Only published videos are ever returned; `query` matches title or
    description (case-insensitive substring) and is ANDed with `owner_id`.
    """
    qs = Video.filter(is_published=True)
    search = text_search(query, "title", "description")
    if search is not None:
        qs = qs.filter(search)
    if owner_id:
        qs = qs.filter(owner_id=owner_id)
    page = await paginate(
        qs.select_related("owner"),
        params,
        order_by=parse_sort(sort_by, sort_type),
        shape=shape.video_doc,
    )
    return page.to_dict()


async def get_video_or_404(video_id: str) -> Video:
    video = await Video.get_or_none(id=video_id).select_related("owner")
    if not video:
        raise NotFoundError("Video not found")
    return video


def ensure_visible(video: Video, viewer_id: Optional[str]) -> None:
    """Unpublished videos are visible to their owner only (403 otherwise)."""
    if not video.is_published and video.owner_id != viewer_id:
        raise ForbiddenError("This video is not published")


def visible_video_q(viewer_id: Optional[str]) -> Q:
    """Filter over a `video` relation: published, or owned by the viewer."""
    if not viewer_id:
        return Q(video__is_published=True)
    return Q(video__is_published=True) | Q(video__owner_id=viewer_id)


async def record_view(video: Video, viewer_id: Optional[str]) -> None:
    """
    Count a view and move the video to the front of the viewer's history.

    The counter is bumped with a single atomic UPDATE; the history keeps
    one entry per (user, video).
    """
    await Video.filter(id=video.id).update(views=F("views") + 1)
    video.views += 1
    if not viewer_id:
        return
    now = timezone.now()
    updated = await WatchHistoryEntry.filter(user_id=viewer_id, video_id=video.id).update(watched_at=now, updated_at=now)
    if not updated:
        await WatchHistoryEntry.create(user_id=viewer_id, video_id=video.id, watched_at=now)


async def video_detail(video_id: str, viewer_id: Optional[str]) -> dict:
    video = await get_video_or_404(video_id)
    ensure_visible(video, viewer_id)
    await record_view(video, viewer_id)
    doc = shape.video_doc(video)
    doc["likesCount"] = await Like.filter(video_id=video.id).count()
    doc["isLiked"] = bool(viewer_id) and await Like.filter(video_id=video.id, liked_by_id=viewer_id).exists()
    if doc["owner"] is not None:
        doc["owner"]["subscribersCount"] = await Subscription.filter(channel_id=video.owner_id).count()
        doc["owner"]["isSubscribed"] = bool(viewer_id) and await Subscription.filter(
            channel_id=video.owner_id, subscriber_id=viewer_id
        ).exists()
    return doc


async def video_with_owner(video_id: str) -> dict:
    """Re-read after a write so the response carries the enriched owner; an empty read is a 500."""
    video = await Video.get_or_none(id=video_id).select_related("owner")
    if not video:
        raise UpstreamError("Video could not be read back after the write")
    return shape.video_doc(video)


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------
async def list_video_comments(video_id: str, params: PageParams, viewer_id: Optional[str]) -> dict:
    video = await Video.get_or_none(id=video_id)
    if not video:
        raise NotFoundError("Video not found")
    ensure_visible(video, viewer_id)
    page = await paginate(
        Comment.filter(video_id=video_id).select_related("owner"),
        params,
        order_by="-created_at",
    )
    ids = [c.id for c in page.items]
    counts = await like_counts("comment", ids)
    mine = await liked_ids("comment", ids, viewer_id)
    page.items = [shape.comment_doc(c, counts.get(c.id, 0), c.id in mine) for c in page.items]
    return page.to_dict(items_key="comments", total_key="totalComments")


async def comment_with_owner(comment_id: str) -> dict:
    comment = await Comment.get_or_none(id=comment_id).select_related("owner")
    if not comment:
        raise UpstreamError("Comment could not be read back after the write")
    return shape.comment_doc(comment)


# ---------------------------------------------------------------------------
# Tweets
# ---------------------------------------------------------------------------
async def list_user_tweets(user_id: str, params: PageParams, viewer_id: Optional[str]) -> dict:
    if not await User.exists(id=user_id):
        raise NotFoundError("User not found")
    page = await paginate(
        Tweet.filter(owner_id=user_id).select_related("owner"),
        params,
        order_by="-created_at",
    )
    ids = [t.id for t in page.items]
    counts = await like_counts("tweet", ids)
    mine = await liked_ids("tweet", ids, viewer_id)
    page.items = [shape.tweet_doc(t, counts.get(t.id, 0), t.id in mine) for t in page.items]
    return page.to_dict(items_key="tweets", total_key="totalTweets")


async def tweet_with_owner(tweet_id: str) -> dict:
    tweet = await Tweet.get_or_none(id=tweet_id).select_related("owner")
    if not tweet:
        raise UpstreamError("Tweet could not be read back after the write")
    return shape.tweet_doc(tweet)


# ---------------------------------------------------------------------------
# Playlists (two-level joins)
# ---------------------------------------------------------------------------
def _visible_entries(entries: Iterable[PlaylistEntry], viewer_id: Optional[str]) -> list:
    # A playlist may hold videos their owners later unpublished
    return [e for e in entries if e.video.is_published or e.video.owner_id == viewer_id]


async def list_user_playlists(user_id: str, viewer_id: Optional[str]) -> list:
    if not await User.exists(id=user_id):
        raise NotFoundError("User not found")
    playlists = (
        await Playlist.filter(owner_id=user_id)
        .order_by("-created_at")
        .select_related("owner")
        .prefetch_related("entries__video")
    )
    return [shape.playlist_doc(p, _visible_entries(p.entries, viewer_id)) for p in playlists]


async def playlist_detail(playlist_id: str, viewer_id: Optional[str]) -> dict:
    playlist = (
        await Playlist.get_or_none(id=playlist_id)
        .select_related("owner")
        .prefetch_related("entries__video__owner")
    )
    if not playlist:
        raise NotFoundError("Playlist not found")
    entries = _visible_entries(playlist.entries, viewer_id)
    return shape.playlist_doc(playlist, entries, with_video_owner=True)


# ---------------------------------------------------------------------------
# Likes
# ---------------------------------------------------------------------------
async def liked_videos(user_id: str) -> list:
    """
    Videos the user liked, newest like first.

    Like -> video -> video owner; the Like wrapper is dropped and each video
    is promoted to the top level. Unpublished videos are kept only when the
    user owns them.
    """
    likes = (
        await Like.filter(liked_by_id=user_id, video_id__isnull=False)
        .filter(visible_video_q(user_id))
        .order_by("-created_at")
        .prefetch_related("video__owner")
    )
    return [shape.video_doc(like.video, shape.AUTHOR_FIELDS) for like in likes]


# ---------------------------------------------------------------------------
# Subscriptions & channels
# ---------------------------------------------------------------------------
async def channel_subscribers(channel_id: str, params: PageParams) -> dict:
    if not await User.exists(id=channel_id):
        raise NotFoundError("Channel not found")
    page = await paginate(
        Subscription.filter(channel_id=channel_id).select_related("subscriber"),
        params,
        order_by="-created_at",
        shape=lambda s: shape.user_summary(s.subscriber, shape.OWNER_FIELDS),
    )
    return page.to_dict(items_key="subscribers", total_key="totalSubscribers")


async def subscribed_channels(subscriber_id: str, params: PageParams) -> dict:
    if not await User.exists(id=subscriber_id):
        raise NotFoundError("User not found")
    page = await paginate(
        Subscription.filter(subscriber_id=subscriber_id).select_related("channel"),
        params,
        order_by="-created_at",
        shape=lambda s: shape.user_summary(s.channel, shape.CHANNEL_FIELDS),
    )
    return page.to_dict(items_key="channels", total_key="totalChannels")


async def channel_profile(username: str, viewer_id: Optional[str]) -> dict:
    """
    Public channel page. Counts are derived from the Subscription table on
    read rather than taken from the stored counters.
    """
    user = await User.get_or_none(username=(username or "").strip().lower())
    if not user:
        raise NotFoundError("Channel not found")
    subscribers = await Subscription.filter(channel_id=user.id).count()
    subscribed_to = await Subscription.filter(subscriber_id=user.id).count()
    is_subscribed = bool(viewer_id) and await Subscription.filter(channel_id=user.id, subscriber_id=viewer_id).exists()
    return {
        "_id": user.id,
        "username": user.username,
        "fullname": user.fullname,
        "email": user.email,
        "avatar": user.avatar,
        "coverImage": user.cover_image,
        "subscribersCount": subscribers,
        "channelsSubscribedToCount": subscribed_to,
        "isSubscribed": is_subscribed,
    }


async def watch_history(user_id: str) -> list:
    """Most recently watched first; videos unpublished by others drop out."""
    entries = (
        await WatchHistoryEntry.filter(user_id=user_id)
        .filter(visible_video_q(user_id))
        .order_by("-watched_at")
        .prefetch_related("video__owner")
    )
    return [shape.video_doc(e.video) for e in entries]
