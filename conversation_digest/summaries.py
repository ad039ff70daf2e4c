"""Build the recent-conversation summary list.

Fetches conversations and users, pairs every conversation with its
latest message and the sender's avatar, then orders the result so the
most recently active conversation comes first.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Tuple

from conversation_digest.api.errors import FetchError
from conversation_digest.api.fetch import (
    fetch_conversations,
    fetch_latest_message,
    fetch_user,
    fetch_users,
)
from conversation_digest.api.session import ApiSession
from conversation_digest.models import (
    Conversation,
    ConversationSummary,
    LatestMessage,
    Message,
    SummaryUser,
    User,
)

logger = logging.getLogger(__name__)

ON_ERROR_ABORT = "abort"
ON_ERROR_SKIP = "skip"
ERROR_POLICIES = (ON_ERROR_ABORT, ON_ERROR_SKIP)


def build_user_lookup(users: Iterable[User]) -> Dict[str, Optional[str]]:
    """Map user id -> avatar URL. Later duplicates overwrite earlier ones."""
    return {user.id: user.avatar_url for user in users}


def format_summary(conversation_id, message: Message, avatar_url: Optional[str]) -> ConversationSummary:
    return ConversationSummary(
        id=str(conversation_id),
        latest_message=LatestMessage(
            id=message.id,
            body=message.body,
            from_user=SummaryUser(id=message.from_user_id, avatar_url=avatar_url),
            created_at=message.created_at,
        ),
    )


def sort_summaries(summaries: List[ConversationSummary]) -> List[ConversationSummary]:
    """Sort summaries in place, most recent latest message first.

    The sort is stable, so summaries with equal timestamps keep their
    relative order. Returns the same list for convenience.
    """
    summaries.sort(key=lambda s: s.created, reverse=True)
    return summaries


def _resolve_missing_avatars(
    session: ApiSession,
    executor: ThreadPoolExecutor,
    user_ids: Iterable[str],
    lookup: Dict[str, Optional[str]],
):
    """Look up senders missing from the bulk user list one by one.

    A failed lookup leaves the avatar unknown instead of failing the run.
    """
    futures = {uid: executor.submit(fetch_user, session, uid) for uid in set(user_ids)}
    for uid, future in futures.items():
        try:
            lookup[uid] = future.result().avatar_url
        except FetchError as exc:
            logger.warning("Could not resolve user %s: %s", uid, exc)


def get_recent_conversation_summaries(
    session: ApiSession,
    on_message_error: str = ON_ERROR_ABORT,
    max_workers: Optional[int] = None,
    resolve_missing_users: bool = False,
) -> List[ConversationSummary]:
    """Return the current user's conversations summarised by their latest message.

    Args:
        session: API session identifying the current user.
        on_message_error: What to do when one conversation's messages
            can't be fetched. "abort" re-raises the FetchError and returns
            nothing; "skip" drops that conversation and carries on.
        max_workers: Upper bound on concurrent requests. Defaults to the
            session's configured value.
        resolve_missing_users: Query /users/{id} for senders that are not
            in the bulk user list.

    Conversations without any message are left out of the result.

    Raises FetchError if the conversation or user list can't be fetched,
    or if a message fetch fails under the "abort" policy.
    """
    if on_message_error not in ERROR_POLICIES:
        raise ValueError(
            f"Unknown on_message_error policy: {on_message_error!r}. Use one of {ERROR_POLICIES}."
        )

    workers = max(1, max_workers or session.max_workers)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        conversations_future = executor.submit(fetch_conversations, session)
        users_future = executor.submit(fetch_users, session)
        conversations = conversations_future.result()
        lookup = build_user_lookup(users_future.result())

        pending: List[Tuple[Conversation, Future]] = [
            (conv, executor.submit(fetch_latest_message, session, conv.id))
            for conv in conversations
        ]

        latest: List[Tuple[Conversation, Message]] = []
        for index, (conv, future) in enumerate(pending):
            try:
                message = future.result()
            except FetchError as exc:
                if on_message_error == ON_ERROR_ABORT:
                    for _, rest in pending[index + 1:]:
                        rest.cancel()
                    raise
                logger.warning("Skipping conversation %s: %s", conv.id, exc)
                continue

            if message is None:
                logger.debug("Conversation %s has no messages, leaving it out", conv.id)
                continue
            latest.append((conv, message))

        if resolve_missing_users:
            missing = [msg.from_user_id for _, msg in latest if msg.from_user_id not in lookup]
            if missing:
                _resolve_missing_avatars(session, executor, missing, lookup)

    summaries = [
        format_summary(conv.id, msg, lookup.get(msg.from_user_id))
        for conv, msg in latest
    ]
    logger.debug("Built %d summaries from %d conversations", len(summaries), len(conversations))
    return sort_summaries(summaries)
