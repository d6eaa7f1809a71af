import json
import logging
from uuid import UUID

from redis.asyncio import Redis

from auth.domain.entities import User
from documents.domain.entities import Document, SharePermission
from shared.config import settings

logger = logging.getLogger(__name__)


def _channel_name(user_id: UUID) -> str:
    return f"user:{user_id}:notifications"


class RedisShareNotifier:
    """Publishes a share event on the recipient's notification channel."""

    def __init__(self, redis: Redis):
        self.redis = redis

    async def share_created(
        self,
        document: Document,
        target: User,
        shared_by: User | None,
        permission: SharePermission,
    ) -> None:
        payload = {
            "type": "document_shared",
            "document_id": str(document.id),
            "document_title": document.title,
            "document_url": f"{settings.FRONTEND_URL}/documents/{document.id}",
            "permission": permission.value,
            "recipient_email": target.email,
            "recipient_username": target.username,
            "shared_by": shared_by.username if shared_by else None,
        }
        receivers = await self.redis.publish(_channel_name(target.id), json.dumps(payload))
        logger.debug("Share notice for %s delivered to %d subscribers", target.id, receivers)
