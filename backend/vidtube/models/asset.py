# vidtube/models/asset.py
from tortoise import fields

from vidtube.models.base import Document


class PendingAssetDeletion(Document):
    """
    Asset-store object whose deletion failed.

    Rows are retried by the startup reconciliation and removed once the
    asset store confirms the deletion.
    """
    key = fields.CharField(max_length=512)
    resource_type = fields.CharField(max_length=16, default="image")
    attempts = fields.IntField(default=1)
    last_error = fields.TextField(null=True)

    class Meta:
        table = "pending_asset_deletions"
