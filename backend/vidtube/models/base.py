# vidtube/models/base.py
from tortoise import fields, models

from vidtube.core.ids import OBJECT_ID_LENGTH, new_object_id


class Document(models.Model):
    """
    Abstract base for every entity.

    Provides the 24-hex identifier (generated on create, immutable) and the
    created/updated timestamps used for default sorting.
    """
    id = fields.CharField(pk=True, max_length=OBJECT_ID_LENGTH, default=new_object_id)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        abstract = True
