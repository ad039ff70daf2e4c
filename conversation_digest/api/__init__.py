from conversation_digest.api.errors import FetchError
from conversation_digest.api.session import ApiSession
from conversation_digest.api.fetch import (
    fetch_conversations,
    fetch_latest_message,
    fetch_messages,
    fetch_user,
    fetch_users,
    select_latest_message,
)

__all__ = [
    "ApiSession",
    "FetchError",
    "fetch_conversations",
    "fetch_latest_message",
    "fetch_messages",
    "fetch_user",
    "fetch_users",
    "select_latest_message",
]
