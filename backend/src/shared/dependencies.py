from collections.abc import AsyncGenerator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth.application.services import verify_token
from auth.domain.entities import User
from auth.infrastructure.user_repository import DbUserRepository
from documents.domain.repository import ShareNotifier
from documents.infrastructure.share_notifier import RedisShareNotifier
from shared.infrastructure.database import async_session
from shared.infrastructure.redis import get_redis_pool

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    repo = DbUserRepository(db)
    return await verify_token(repo, credentials.credentials)


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_security),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Resolve the caller if a bearer token was sent; anonymous callers get None."""
    if credentials is None:
        return None
    repo = DbUserRepository(db)
    return await verify_token(repo, credentials.credentials)


def get_share_notifier() -> ShareNotifier:
    return RedisShareNotifier(get_redis_pool())
