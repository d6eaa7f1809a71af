import logging
from datetime import datetime

from auth.domain.entities import User
from documents.domain.entities import Document
from documents.domain.mentions import extract_mentions
from documents.domain.repository import UserDirectory

logger = logging.getLogger(__name__)


async def resolve_mentions(
    document: Document, users: UserDirectory, content: str, now: datetime
) -> list[User]:
    """Grant view access to every user @mentioned in ``content``.

    Mentions are best effort: unknown usernames are skipped and a failing
    directory lookup is logged and leaves the grants untouched. Existing
    grants are never changed. Returns the users that received a new grant.
    """
    usernames = extract_mentions(content)
    if not usernames:
        return []

    try:
        mentioned = await users.get_by_usernames(usernames)
    except Exception:
        logger.exception("Mention lookup failed for document %s", document.id)
        return []

    granted = [
        user
        for user in mentioned
        if user.username in usernames and document.grant_view_if_absent(user.id, now)
    ]
    if granted:
        logger.info(
            "Mentions granted view access on document %s to %s",
            document.id,
            ", ".join(u.username for u in granted),
        )
    return granted
