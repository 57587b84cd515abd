# vidtube/models/user.py
"""
Database models for users and their watch history.
"""
from tortoise import fields

from vidtube.models.base import Document


class User(Document):
    """
    User account (also a channel).

    Relationships:
    - Has many Videos, Comments, Tweets, Playlists (via owner)
    - Has many Subscriptions as subscriber and as channel
    - Has an ordered watch history (WatchHistoryEntry, most recent first)

    Security:
    - Password is stored as a hash, never plain text
    - refresh_token holds the only refresh token currently honoured
    """
    username = fields.CharField(max_length=64, unique=True, index=True)  # lowercase, trimmed
    email = fields.CharField(max_length=256, unique=True)  # lowercase, trimmed
    fullname = fields.CharField(max_length=128, index=True)
    avatar = fields.CharField(max_length=1024)  # Asset URI (required)
    cover_image = fields.CharField(max_length=1024, default="")  # Asset URI, empty when not set
    password_hash = fields.CharField(max_length=255)
    refresh_token = fields.TextField(null=True)
    # Denormalized counters, maintained by subscription toggles; never negative
    subscribers_count = fields.IntField(default=0)
    channels_subscribed_to_count = fields.IntField(default=0)

    class Meta:
        table = "users"


class WatchHistoryEntry(Document):
    """One video in a user's watch history; at most one entry per (user, video)."""
    user = fields.ForeignKeyField("models.User", related_name="watch_history", on_delete=fields.CASCADE)
    video = fields.ForeignKeyField("models.Video", related_name="watched_by", on_delete=fields.CASCADE)
    watched_at = fields.DatetimeField()

    class Meta:
        table = "watch_history"
        unique_together = (("user", "video"),)
