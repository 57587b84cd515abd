# vidtube/models/__init__.py
"""
Database models module initialization.
Exports all Tortoise ORM models for convenient imports.

Models exported:
- User / WatchHistoryEntry: accounts (channels) and their watch history
- Video: published videos and their asset references
- Comment, Like, Tweet: engagement
- Subscription: subscriber -> channel relation
- Playlist / PlaylistEntry: ordered video collections
- PendingAssetDeletion: asset-store deletions awaiting retry
"""
from .user import User, WatchHistoryEntry
from .video import Video
from .comment import Comment
from .like import Like
from .subscription import Subscription
from .playlist import Playlist, PlaylistEntry
from .tweet import Tweet
from .asset import PendingAssetDeletion
