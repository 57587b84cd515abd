import uuid

import pytest


pytestmark = pytest.mark.asyncio


def _register_form(username: str, password: str = "StrongPass!23", **overrides):
    data = {
        "fullname": "Test User",
        "email": f"{username}@example.com",
        "username": username,
        "password": password,
    }
    data.update(overrides)
    return data


async def register_user(client, username: str, password: str = "StrongPass!23", with_avatar: bool = True, **overrides):
    files = {"avatar": ("me.png", b"png-bytes", "image/png")} if with_avatar else None
    return await client.post("/api/v1/users/register", data=_register_form(username, password, **overrides), files=files)


async def test_register_and_login_flow(client, asset_store):
    username = f"user_{uuid.uuid4().hex[:6]}"

    resp = await register_user(client, username)
    body = resp.json()
    assert resp.status_code == 201
    assert body["success"] is True
    assert body["statusCode"] == 201
    assert body["data"]["username"] == username
    assert body["data"]["avatar"].startswith("https://assets.test/")
    assert "password_hash" not in body["data"]
    assert len(asset_store.uploaded) == 1

    # Duplicate username should fail with the error envelope
    dup = await register_user(client, username)
    assert dup.status_code == 409
    assert dup.json() == {
        "statusCode": 409,
        "success": False,
        "message": "Username or email already exists",
        "errors": [],
        "data": None,
    }

    # Login by email works too
    login = await client.post("/api/v1/users/login", json={"email": f"{username}@example.com", "password": "StrongPass!23"})
    assert login.status_code == 200
    data = login.json()["data"]
    assert data["accessToken"] and data["refreshToken"]
    assert "accessToken" in login.cookies
    assert "refreshToken" in login.cookies

    bad = await client.post("/api/v1/users/login", json={"username": username, "password": "wrong"})
    assert bad.status_code == 401

    missing = await client.post("/api/v1/users/login", json={"username": "nobody_here", "password": "x"})
    assert missing.status_code == 404


async def test_register_validation(client, asset_store):
    username = f"user_{uuid.uuid4().hex[:6]}"

    blank = await register_user(client, username, fullname="   ")
    assert blank.status_code == 400

    no_avatar = await register_user(client, username, with_avatar=False)
    assert no_avatar.status_code == 400
    assert no_avatar.json()["message"] == "Avatar is required"

    asset_store.fail_uploads = True
    failed = await register_user(client, username)
    assert failed.status_code == 400
    assert failed.json()["message"] == "Avatar upload failed"


async def test_current_user_requires_auth(client):
    resp = await client.get("/api/v1/users/current-user")
    assert resp.status_code == 401
    assert resp.json()["success"] is False

    garbage = await client.get("/api/v1/users/current-user", headers={"Authorization": "Bearer nope"})
    assert garbage.status_code == 401


async def test_refresh_token_rotation(client, create_user):
    user, password = await create_user()
    login = await client.post("/api/v1/users/login", json={"username": user.username, "password": password})
    old_refresh = login.json()["data"]["refreshToken"]
    client.cookies.clear()

    rotated = await client.post("/api/v1/users/refresh-token", json={"refreshToken": old_refresh})
    assert rotated.status_code == 200
    new_refresh = rotated.json()["data"]["refreshToken"]
    assert new_refresh != old_refresh
    client.cookies.clear()

    # The old token was rotated away and cannot be reused
    reused = await client.post("/api/v1/users/refresh-token", json={"refreshToken": old_refresh})
    assert reused.status_code == 401

    missing = await client.post("/api/v1/users/refresh-token")
    assert missing.status_code == 401


async def test_change_password_and_logout(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.username, password)

    wrong = await client.post(
        "/api/v1/users/change-password",
        headers=headers,
        json={"oldPassword": "not-it", "newPassword": "NewPass#456"},
    )
    assert wrong.status_code == 401

    ok = await client.post(
        "/api/v1/users/change-password",
        headers=headers,
        json={"oldPassword": password, "newPassword": "NewPass#456"},
    )
    assert ok.status_code == 200

    relogin = await client.post("/api/v1/users/login", json={"username": user.username, "password": "NewPass#456"})
    assert relogin.status_code == 200
    refresh = relogin.json()["data"]["refreshToken"]

    out = await client.post("/api/v1/users/logout", headers=headers)
    assert out.status_code == 200
    client.cookies.clear()

    # Logout forgets the stored refresh token
    after = await client.post("/api/v1/users/refresh-token", json={"refreshToken": refresh})
    assert after.status_code == 401


async def test_update_account_patch(client, signed_in):
    user, headers = await signed_in()
    other, _ = await signed_in()

    nothing = await client.patch("/api/v1/users/update-account", headers=headers, json={})
    assert nothing.status_code == 400

    only_name = await client.patch("/api/v1/users/update-account", headers=headers, json={"fullname": "Renamed"})
    assert only_name.status_code == 200
    assert only_name.json()["data"]["fullname"] == "Renamed"
    assert only_name.json()["data"]["email"] == user.email

    taken = await client.patch("/api/v1/users/update-account", headers=headers, json={"email": other.email})
    assert taken.status_code == 409


async def test_avatar_and_cover_image_updates(client, signed_in, asset_store):
    _, headers = await signed_in()

    missing = await client.patch("/api/v1/users/avatar", headers=headers)
    assert missing.status_code == 400

    resp = await client.patch(
        "/api/v1/users/cover-image",
        headers=headers,
        files={"coverImage": ("cover.jpg", b"jpg", "image/jpeg")},
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["coverImage"] == asset_store.uploaded[-1].url


async def test_channel_profile_and_history(client, signed_in, publish_video):
    channel, channel_headers = await signed_in()
    viewer, viewer_headers = await signed_in()

    video = await publish_video(channel_headers)
    await client.post(f"/api/v1/subscriptions/c/{channel.id}", headers=viewer_headers)
    await client.get(f"/api/v1/videos/{video['_id']}", headers=viewer_headers)

    profile = await client.get(f"/api/v1/users/c/{channel.username.upper()}", headers=viewer_headers)
    assert profile.status_code == 200
    data = profile.json()["data"]
    assert data["subscribersCount"] == 1
    assert data["channelsSubscribedToCount"] == 0
    assert data["isSubscribed"] is True

    unknown = await client.get("/api/v1/users/c/nobody_at_all")
    assert unknown.status_code == 404

    history = await client.get("/api/v1/users/history", headers=viewer_headers)
    assert [v["_id"] for v in history.json()["data"]] == [video["_id"]]


async def test_watch_history_drops_videos_unpublished_by_others(client, signed_in, publish_video):
    _, creator_headers = await signed_in()
    _, viewer_headers = await signed_in()
    stays = await publish_video(creator_headers, title="Stays")
    goes = await publish_video(creator_headers, title="Goes")
    for video in (stays, goes):
        await client.get(f"/api/v1/videos/{video['_id']}", headers=viewer_headers)

    await client.patch(f"/api/v1/videos/toggle/publish/{goes['_id']}", headers=creator_headers)

    history = (await client.get("/api/v1/users/history", headers=viewer_headers)).json()["data"]
    assert [v["_id"] for v in history] == [stays["_id"]]

    # Own unpublished videos remain in the owner's history
    await client.get(f"/api/v1/videos/{goes['_id']}", headers=creator_headers)
    own = (await client.get("/api/v1/users/history", headers=creator_headers)).json()["data"]
    assert [v["_id"] for v in own] == [goes["_id"]]
