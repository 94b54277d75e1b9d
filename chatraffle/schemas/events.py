"""
Raffle Event Schemas

Pydantic models for inbound live chat events, operator commands and the
payloads sent back over the operator channel. Wire names are camelCase
to match the browser client; Python attributes stay snake_case.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator


class ChatComment(BaseModel):
    """A chat message delivered by the live source."""

    comment: str = ""
    nickname: str = ""
    profile_picture_url: str = Field(default="", alias="profilePictureUrl")
    user_id: str = Field(alias="userId")

    class Config:
        populate_by_name = True

    @field_validator("user_id", mode="before")
    @classmethod
    def _stringify_user_id(cls, value: Any) -> str:
        # TikTok user ids arrive as large integers
        return str(value)


class Participant(BaseModel):
    """A raffle entrant. Immutable once stored."""

    user_id: str = Field(alias="userId")
    username: str
    message: str
    profile_picture: str = Field(default="", alias="profilePicture")

    class Config:
        populate_by_name = True
        frozen = True

    @classmethod
    def from_comment(cls, comment: ChatComment) -> "Participant":
        return cls(
            user_id=comment.user_id,
            username=comment.nickname,
            message=comment.comment,
            profile_picture=comment.profile_picture_url,
        )

    def to_wire(self) -> Dict[str, Any]:
        """Serialize as {username, message, profilePicture, userId}."""
        return self.model_dump(by_alias=True)


class ConnectRequest(BaseModel):
    """`connect-to-room` command from the operator."""

    username: str = Field(..., min_length=1, description="Live source username, with or without '@'")
    keyword: str = Field(..., description="Keyword a chat message must contain to enter")
    allow_duplicates: bool = Field(default=False, alias="allowDuplicates")
    email: Optional[str] = Field(default=None, description="Operator identity, used in logs only")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "username": "alice",
                "keyword": "join",
                "allowDuplicates": False,
                "email": "operator@example.com",
            }
        }

    @field_validator("username")
    @classmethod
    def _strip_at(cls, value: str) -> str:
        value = value.strip().lstrip("@")
        if not value:
            raise ValueError("username must not be empty")
        return value


class ConnectionStatus(BaseModel):
    """`connection-success` payload; `type` is "success" or "error"."""

    type: str
    message: str


class DuplicateEntry(BaseModel):
    """`duplicate-entry` payload."""

    username: str
    message: str
    profile_picture: str = Field(default="", alias="profilePicture")

    class Config:
        populate_by_name = True
