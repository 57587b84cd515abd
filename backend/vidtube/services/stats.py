# vidtube/services/stats.py
from tortoise.functions import Count, Sum

from vidtube.models import Like, Subscription, Video
from vidtube.services import projections as shape


async def channel_stats(user_id: str) -> dict:
    """
    Totals for the acting user's channel.

    Subscribers are counted over Subscription; video count and view sum
    come from one grouped aggregate over the user's videos; likes are the
    likes received by those videos. A channel without videos gets zeros.
    """
    total_subscribers = await Subscription.filter(channel_id=user_id).count()
    rows = (
        await Video.filter(owner_id=user_id)
        .annotate(total_videos=Count("id"), total_views=Sum("views"))
        .group_by("owner_id")
        .values("total_videos", "total_views")
    )
    totals = rows[0] if rows else {}
    total_likes = await Like.filter(video__owner_id=user_id).count()
    return {
        "totalSubscribers": total_subscribers,
        "totalVideos": int(totals.get("total_videos") or 0),
        "totalViews": int(totals.get("total_views") or 0),
        "totalLikes": total_likes,
    }


async def channel_videos(user_id: str) -> dict:
    """Every video of the user, published or not, newest first."""
    videos = await Video.filter(owner_id=user_id).order_by("-created_at")
    return {
        "videos": [shape.video_summary(v) for v in videos],
        "totalVideos": len(videos),
    }
