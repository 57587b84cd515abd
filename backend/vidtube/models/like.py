# vidtube/models/like.py
from tortoise import fields

from vidtube.models.base import Document


class Like(Document):
    """
    A user's like on exactly one of: video, comment, tweet.

    Uniqueness per (liked_by, target) is enforced by the toggle
    (find-before-create), not by a storage constraint.
    """
    video = fields.ForeignKeyField("models.Video", related_name="likes", null=True, on_delete=fields.CASCADE)
    comment = fields.ForeignKeyField("models.Comment", related_name="likes", null=True, on_delete=fields.CASCADE)
    tweet = fields.ForeignKeyField("models.Tweet", related_name="likes", null=True, on_delete=fields.CASCADE)
    liked_by = fields.ForeignKeyField("models.User", related_name="likes", on_delete=fields.CASCADE)

    class Meta:
        table = "likes"
