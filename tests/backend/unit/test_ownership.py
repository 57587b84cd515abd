"""
Unit tests for services.ownership module.
Covers the single-statement id + owner matching and state-guarded updates.
"""
import pytest

from vidtube.core.errors import NotFoundError
from vidtube.models import Video
from vidtube.services.ownership import delete_owned, get_owned, update_owned


pytestmark = pytest.mark.asyncio


async def _video(owner) -> Video:
    return await Video.create(
        title="T", description="D", video_file_url="https://v", video_file_key="vk",
        thumbnail_url="https://t", thumbnail_key="tk", owner=owner,
    )


async def test_foreign_and_missing_rows_share_one_error(db, create_user):
    owner, _ = await create_user()
    other, _ = await create_user()
    video = await _video(owner)

    for obj_id, actor in ((video.id, other.id), ("0" * 24, owner.id)):
        with pytest.raises(NotFoundError) as exc:
            await get_owned(Video, obj_id, actor)
        assert exc.value.message == "Video not found or unauthorized"
        with pytest.raises(NotFoundError):
            await delete_owned(Video, obj_id, actor)

    assert await Video.exists(id=video.id)


async def test_update_with_stale_expected_state_is_rejected(db, create_user):
    owner, _ = await create_user()
    video = await _video(owner)
    stale = await get_owned(Video, video.id, owner.id)

    # Another request flips the flag after `stale` was read
    await update_owned(Video, video.id, owner.id, {"is_published": False}, is_published=True)

    with pytest.raises(NotFoundError):
        await update_owned(
            Video, video.id, owner.id, {"is_published": not stale.is_published}, is_published=stale.is_published
        )
    assert (await Video.get(id=video.id)).is_published is False
