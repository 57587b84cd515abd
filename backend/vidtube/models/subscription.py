# vidtube/models/subscription.py
from tortoise import fields

from vidtube.models.base import Document


class Subscription(Document):
    """subscriber follows channel; at most one row per pair."""
    subscriber = fields.ForeignKeyField("models.User", related_name="subscriptions", on_delete=fields.CASCADE)
    channel = fields.ForeignKeyField("models.User", related_name="subscribers", on_delete=fields.CASCADE)

    class Meta:
        table = "subscriptions"
        unique_together = (("subscriber", "channel"),)
