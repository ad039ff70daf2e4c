from conversation_digest.api import ApiSession, FetchError
from conversation_digest.models import ConversationSummary
from conversation_digest.summaries import (
    format_summary,
    get_recent_conversation_summaries,
    sort_summaries,
)

__all__ = [
    "ApiSession",
    "ConversationSummary",
    "FetchError",
    "format_summary",
    "get_recent_conversation_summaries",
    "sort_summaries",
]
