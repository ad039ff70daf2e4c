"""Read conversations, messages and users from the conversation API.

Every helper here turns transport and decoding problems into FetchError
so callers only ever deal with one failure kind.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence, Type, TypeVar
from urllib.parse import quote

from pydantic import BaseModel, ValidationError

from conversation_digest.api.errors import FetchError
from conversation_digest.api.session import ApiSession
from conversation_digest.models import Conversation, Message, User

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def _segment(value) -> str:
    return quote(str(value), safe="")


def _decode(payload: Any, model: Type[RecordT], path: str) -> RecordT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise FetchError(f"Unexpected {model.__name__} record from {path}: {exc}") from exc


def _decode_list(payload: Any, model: Type[RecordT], path: str) -> List[RecordT]:
    if not isinstance(payload, list):
        raise FetchError(f"Expected a list from {path}, got {type(payload).__name__}")
    return [_decode(item, model, path) for item in payload]


def fetch_conversations(session: ApiSession) -> List[Conversation]:
    """Fetch the current user's conversations, in the order the service returns them."""
    path = "/conversations"
    conversations = _decode_list(session.get_json(path), Conversation, path)
    logger.debug("Fetched %d conversations", len(conversations))
    return conversations


def fetch_users(session: ApiSession) -> List[User]:
    """Fetch every known user. The endpoint is not paginated."""
    path = "/users"
    users = _decode_list(session.get_json(path), User, path)
    logger.debug("Fetched %d users", len(users))
    return users


def fetch_user(session: ApiSession, user_id: str) -> User:
    """Fetch a single user by id."""
    path = f"/users/{_segment(user_id)}"
    return _decode(session.get_json(path), User, path)


def fetch_messages(session: ApiSession, conversation_id: str) -> List[Message]:
    """Fetch all messages of one conversation."""
    path = f"/conversations/{_segment(conversation_id)}/messages"
    messages = _decode_list(session.get_json(path), Message, path)
    logger.debug("Fetched %d messages for conversation %s", len(messages), conversation_id)
    return messages


def select_latest_message(messages: Sequence[Message]) -> Optional[Message]:
    """Return the message with the greatest created_at, or None if there are none.

    On equal timestamps the earliest one in input order wins.
    """
    latest: Optional[Message] = None
    for msg in messages:
        if latest is None or msg.created > latest.created:
            latest = msg
    return latest


def fetch_latest_message(session: ApiSession, conversation_id: str) -> Optional[Message]:
    """Fetch a conversation's messages and return the most recent one.

    Returns None for a conversation without messages.
    """
    return select_latest_message(fetch_messages(session, conversation_id))
