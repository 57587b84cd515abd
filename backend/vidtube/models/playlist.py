# vidtube/models/playlist.py
from tortoise import fields

from vidtube.models.base import Document


class Playlist(Document):
    """
    Named, ordered collection of videos owned by a user.

    Relationships:
    - Has many PlaylistEntry rows (related_name="entries"), ordered by position
    """
    name = fields.CharField(max_length=256)
    description = fields.TextField(null=True)
    owner = fields.ForeignKeyField("models.User", related_name="playlists", on_delete=fields.CASCADE)

    class Meta:
        table = "playlists"


class PlaylistEntry(Document):
    playlist = fields.ForeignKeyField("models.Playlist", related_name="entries", on_delete=fields.CASCADE)
    video = fields.ForeignKeyField("models.Video", related_name="playlist_entries", on_delete=fields.CASCADE)
    position = fields.IntField()

    class Meta:
        table = "playlist_entries"
        ordering = ["position"]
        unique_together = (("playlist", "video"),)
