# vidtube/models/tweet.py
from tortoise import fields

from vidtube.models.base import Document


class Tweet(Document):
    content = fields.TextField()  # required, trimmed
    owner = fields.ForeignKeyField("models.User", related_name="tweets", on_delete=fields.CASCADE)

    class Meta:
        table = "tweets"
