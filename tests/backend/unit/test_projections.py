"""
Unit tests for services.projections module.
"""
import datetime as dt

import pytest

from vidtube.models import User, Video
from vidtube.services.projections import AUTHOR_FIELDS, iso, user_doc, user_summary, video_doc


def _user():
    return User(
        id="a" * 24, username="alice", email="alice@example.com", fullname="Alice A",
        avatar="https://assets.test/a", password_hash="secret-hash", refresh_token="rt",
    )


def test_iso_marks_naive_datetimes_as_utc():
    assert iso(dt.datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05Z"
    aware = dt.datetime(2024, 1, 2, tzinfo=dt.timezone.utc)
    assert iso(aware) == "2024-01-02T00:00:00+00:00"
    assert iso(None) is None


@pytest.mark.asyncio
async def test_user_summary_projects_only_requested_fields(db):
    out = user_summary(_user(), AUTHOR_FIELDS)
    assert out == {"_id": "a" * 24, "username": "alice", "avatar": "https://assets.test/a"}


def test_user_summary_of_unresolved_reference_is_none():
    assert user_summary(None) is None
    assert user_summary("a" * 24) is None


@pytest.mark.asyncio
async def test_user_doc_never_exposes_credentials(db):
    doc = user_doc(_user())
    assert "password_hash" not in doc and "passwordHash" not in doc
    assert "refresh_token" not in doc and "refreshToken" not in doc
    assert doc["username"] == "alice"


@pytest.mark.asyncio
async def test_video_doc_embeds_owner_and_asset_pairs(db):
    owner = _user()
    await owner.save()
    video = Video(
        id="b" * 24, title="T", description="D", duration=3.5, views=7, is_published=True,
        video_file_url="https://v", video_file_key="vk", thumbnail_url="https://t", thumbnail_key="tk",
        owner=owner,
    )
    doc = video_doc(video)
    assert doc["videoFile"] == {"url": "https://v", "publicId": "vk"}
    assert doc["thumbnail"] == {"url": "https://t", "publicId": "tk"}
    assert doc["owner"] == {"_id": "a" * 24, "username": "alice", "avatar": "https://assets.test/a", "fullname": "Alice A"}
