# vidtube/api/v1/routers/tweets.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from vidtube.api.v1.deps import get_current_user, get_optional_user
from vidtube.core.errors import BadRequestError
from vidtube.core.ids import parse_object_id
from vidtube.core.responses import api_response
from vidtube.models.tweet import Tweet
from vidtube.models.user import User
from vidtube.schemas.content import ContentIn
from vidtube.services import views
from vidtube.services.ownership import delete_owned, update_owned
from vidtube.services.query import PageParams

router = APIRouter(prefix="/tweets", tags=["tweets"])


def _content(body: ContentIn) -> str:
    content = (body.content or "").strip()
    if not content:
        raise BadRequestError("Tweet content is required")
    return content


@router.post("")
async def create_tweet(body: ContentIn, user: User = Depends(get_current_user)):
    tweet = await Tweet.create(content=_content(body), owner_id=user.id)
    data = await views.tweet_with_owner(tweet.id)
    return api_response(data, "Tweet created successfully", status.HTTP_201_CREATED)


@router.get("/user/{user_id}")
async def get_user_tweets(
    user_id: str,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    viewer: Optional[User] = Depends(get_optional_user),
):
    user_id = parse_object_id(user_id, "user ID")
    data = await views.list_user_tweets(user_id, PageParams.parse(page, limit), viewer.id if viewer else None)
    return api_response(data, "Tweets fetched successfully")


@router.patch("/{tweet_id}")
async def update_tweet(tweet_id: str, body: ContentIn, user: User = Depends(get_current_user)):
    tweet_id = parse_object_id(tweet_id, "tweet ID")
    await update_owned(Tweet, tweet_id, user.id, {"content": _content(body)})
    data = await views.tweet_with_owner(tweet_id)
    return api_response(data, "Tweet updated successfully")


@router.delete("/{tweet_id}")
async def delete_tweet(tweet_id: str, user: User = Depends(get_current_user)):
    tweet_id = parse_object_id(tweet_id, "tweet ID")
    await delete_owned(Tweet, tweet_id, user.id)
    return api_response({}, "Tweet deleted successfully")
