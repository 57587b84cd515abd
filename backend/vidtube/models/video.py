# vidtube/models/video.py
from tortoise import fields

from vidtube.models.base import Document


class Video(Document):
    """
    Published video.

    The file and the thumbnail live in the asset store; each is kept as a
    (url, key) pair so the asset can be deleted when the video goes away.
    """
    video_file_url = fields.CharField(max_length=1024)
    video_file_key = fields.CharField(max_length=512)
    thumbnail_url = fields.CharField(max_length=1024)
    thumbnail_key = fields.CharField(max_length=512)
    title = fields.CharField(max_length=256)
    description = fields.TextField()
    duration = fields.FloatField(default=0)  # seconds
    views = fields.IntField(default=0)
    is_published = fields.BooleanField(default=True)
    owner = fields.ForeignKeyField("models.User", related_name="videos", on_delete=fields.CASCADE)

    class Meta:
        table = "videos"
