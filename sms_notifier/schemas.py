from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SendMessageRequest(BaseModel):
    """Body of a Hubtel ``messages/send`` call."""

    model_config = ConfigDict(populate_by_name=True)

    sender: str = Field(..., alias="From", min_length=1)
    to: str = Field(..., alias="To", min_length=1)
    content: str = Field(..., alias="Content")
