# vidtube/schemas/auth.py
"""
Pydantic schemas for user and authentication endpoints.
Registration and file uploads are multipart forms and are read with
fastapi.Form/File in the router; the JSON bodies are defined here.
"""
from typing import Optional

from pydantic import BaseModel


class LoginIn(BaseModel):
    """
    Request model for user login endpoint.
    Either username or email identifies the account.
    """
    username: Optional[str] = None  # Login by username (case-insensitive)
    email: Optional[str] = None  # ... or by email (case-insensitive)
    password: str = ""  # Plain text, verified against the stored hash


class RefreshIn(BaseModel):
    """Body fallback for clients that cannot send the refreshToken cookie."""
    refreshToken: Optional[str] = None


class ChangePasswordIn(BaseModel):
    oldPassword: str = ""  # Must match the current password
    newPassword: str = ""


class UpdateAccountIn(BaseModel):
    """
    Patch struct for account details.
    Fields that are absent stay unchanged; at least one must be given.
    """
    fullname: Optional[str] = None
    email: Optional[str] = None
