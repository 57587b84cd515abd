# vidtube/models/comment.py
from tortoise import fields

from vidtube.models.base import Document


class Comment(Document):
    content = fields.TextField()  # non-empty, trimmed
    video = fields.ForeignKeyField("models.Video", related_name="comments", on_delete=fields.CASCADE)
    owner = fields.ForeignKeyField("models.User", related_name="comments", on_delete=fields.CASCADE)

    class Meta:
        table = "comments"
