"""
Pydantic models for chat messages.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    """A message as posted by a client.  ``msgDateTime`` defaults to now when omitted."""

    msg: str = Field(..., examples=["Hello"])
    msg_from: str = Field(..., alias="msgFrom", examples=["User1"])
    msg_date_time: Optional[datetime] = Field(None, alias="msgDateTime")

    model_config = {"populate_by_name": True}


class MessageRead(BaseModel):
    """A stored message."""

    id: str
    msg: str
    msg_from: str = Field(..., alias="msgFrom")
    msg_date_time: datetime = Field(..., alias="msgDateTime")

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }
