"""Records read from the conversation API and the summary shape we return."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError, field_validator

_DATETIME = TypeAdapter(datetime)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware datetime.

    Accepts a trailing "Z" and any number of fractional digits. Naive
    values are taken as UTC so that every parsed instant is comparable
    with every other.
    """
    parsed = _DATETIME.validate_python(value.strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _coerce_id(v: Any) -> str:
    # The API sometimes sends numeric ids
    if isinstance(v, bool) or v is None:
        raise ValueError("id must be a string or integer")
    return str(v)


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class Conversation(_Record):
    id: str

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return _coerce_id(v)


class User(_Record):
    id: str
    avatar_url: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return _coerce_id(v)


class Message(_Record):
    id: str
    conversation_id: str
    body: str
    from_user_id: str
    created_at: str

    @field_validator("id", "conversation_id", "from_user_id", mode="before")
    @classmethod
    def coerce_ids(cls, v):
        return _coerce_id(v)

    @field_validator("created_at")
    @classmethod
    def validate_created_at(cls, v):
        try:
            parse_timestamp(v)
        except ValidationError as exc:
            raise ValueError(f"created_at is not an ISO-8601 timestamp: {v!r}") from exc
        return v

    @property
    def created(self) -> datetime:
        return parse_timestamp(self.created_at)


class SummaryUser(_Record):
    id: str
    avatar_url: Optional[str] = None


class LatestMessage(_Record):
    id: str
    body: str
    from_user: SummaryUser
    created_at: str


class ConversationSummary(_Record):
    """One entry of the summary list: a conversation and its latest message."""

    id: str
    latest_message: LatestMessage

    @property
    def created(self) -> datetime:
        return parse_timestamp(self.latest_message.created_at)

    def to_dict(self) -> Dict[str, Any]:
        """Render the public output shape.

        A sender without a known avatar has no avatar_url key at all.
        """
        return self.model_dump(exclude_none=True)
