# vidtube/schemas/content.py
"""
Pydantic schemas for comment, tweet and playlist endpoints.

Update models are patch structs: only fields present in the request body
are applied (see `patch_fields`), so "absent" and "set" stay distinct.
"""
from typing import Optional

from pydantic import BaseModel


class ContentIn(BaseModel):
    """Body of a comment or tweet (trimmed, must not be empty)."""
    content: str = ""


class PlaylistCreateIn(BaseModel):
    name: str = ""  # Required, non-blank
    description: Optional[str] = None


class PlaylistUpdateIn(BaseModel):
    name: Optional[str] = None  # Non-blank when given
    description: Optional[str] = None  # May be cleared with an empty string or null


def patch_fields(body: BaseModel) -> dict:
    """Fields the client actually sent, with their values."""
    return {name: getattr(body, name) for name in body.model_fields_set}
