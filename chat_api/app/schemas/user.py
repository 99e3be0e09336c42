"""
Pydantic models for user data.

``UserCredentials`` carries a username and password for signup, login
and password reset.  ``SafeUser`` is the only user shape returned by
the API; it never includes the password.  Field names follow the
camelCase JSON contract (``dateJoined``) through aliases.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class UserCredentials(BaseModel):
    """Username and password supplied by a client."""

    username: str = Field(..., examples=["user1"])
    password: str = Field(..., examples=["password"])


class SafeUser(BaseModel):
    """Schema for reading a user from the API."""

    id: str
    username: str
    date_joined: datetime = Field(..., alias="dateJoined")

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }
