# vidtube/services/toggles.py
"""
Create-if-absent / delete-if-present mutations.

Likes (per video, comment or tweet) and subscriptions share the same shape:
the target must exist, then the (actor, target) record is flipped. Callers
only get the resulting state back, never the record body.

Subscription toggles also keep the denormalized counters on both users.
The existence record and both counters change inside one transaction, and
`reconcile_subscription_counters` rebuilds the counters from the
Subscription table.
"""
import logging
from dataclasses import dataclass

from tortoise.expressions import F
from tortoise.transactions import in_transaction

from vidtube.core.errors import BadRequestError, NotFoundError
from vidtube.models import Comment, Like, Subscription, Tweet, User, Video

logger = logging.getLogger(__name__)

LIKE_TARGETS = {
    "video": (Video, "Video"),
    "comment": (Comment, "Comment"),
    "tweet": (Tweet, "Tweet"),
}


@dataclass(frozen=True)
class ToggleResult:
    active: bool  # True when the record exists after the toggle
    message: str


async def toggle_like(actor_id: str, kind: str, target_id: str) -> ToggleResult:
    """
    Like or unlike a video, comment or tweet.

    Raises:
        BadRequestError (400): Unknown target kind
        NotFoundError (404): Target does not exist (nothing is written)
    """
    if kind not in LIKE_TARGETS:
        raise BadRequestError(f"Cannot like a {kind}")
    model, label = LIKE_TARGETS[kind]
    if not await model.exists(id=target_id):
        raise NotFoundError(f"{label} not found")

    match = {f"{kind}_id": target_id, "liked_by_id": actor_id}
    existing = await Like.filter(**match).first()
    if existing:
        await Like.filter(id=existing.id).delete()
        return ToggleResult(active=False, message=f"{label} unliked successfully")
    await Like.create(**match)
    return ToggleResult(active=True, message=f"{label} liked successfully")


async def toggle_subscription(actor_id: str, channel_id: str) -> ToggleResult:
    """
    Subscribe to or unsubscribe from a channel.

    Raises:
        BadRequestError (400): Actor tries to subscribe to themselves
        NotFoundError (404): Channel does not exist (nothing is written)
    """
    if actor_id == channel_id:
        raise BadRequestError("You cannot subscribe to your own channel")
    if not await User.exists(id=channel_id):
        raise NotFoundError("Channel not found")

    async with in_transaction() as conn:
        existing = await Subscription.filter(subscriber_id=actor_id, channel_id=channel_id).using_db(conn).first()
        if existing:
            await Subscription.filter(id=existing.id).using_db(conn).delete()
            # Decrements are guarded so a drifted counter never goes negative
            await User.filter(id=actor_id, channels_subscribed_to_count__gt=0).using_db(conn).update(
                channels_subscribed_to_count=F("channels_subscribed_to_count") - 1
            )
            await User.filter(id=channel_id, subscribers_count__gt=0).using_db(conn).update(
                subscribers_count=F("subscribers_count") - 1
            )
            return ToggleResult(active=False, message="Unsubscribed successfully")

        await Subscription.create(subscriber_id=actor_id, channel_id=channel_id, using_db=conn)
        await User.filter(id=actor_id).using_db(conn).update(
            channels_subscribed_to_count=F("channels_subscribed_to_count") + 1
        )
        await User.filter(id=channel_id).using_db(conn).update(subscribers_count=F("subscribers_count") + 1)
        return ToggleResult(active=True, message="Subscribed successfully")


async def reconcile_subscription_counters() -> int:
    """
    Recompute both counters for every user from the Subscription table.

    Returns:
        Number of users whose stored counters were corrected
    """
    fixed = 0
    users = await User.all().only("id", "subscribers_count", "channels_subscribed_to_count")
    for u in users:
        subscribers = await Subscription.filter(channel_id=u.id).count()
        subscribed_to = await Subscription.filter(subscriber_id=u.id).count()
        if subscribers != u.subscribers_count or subscribed_to != u.channels_subscribed_to_count:
            await User.filter(id=u.id).update(
                subscribers_count=subscribers,
                channels_subscribed_to_count=subscribed_to,
            )
            fixed += 1
    if fixed:
        logger.warning("[reconcile] corrected subscription counters for %d user(s)", fixed)
    return fixed
