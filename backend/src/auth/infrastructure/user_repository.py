from uuid import UUID

from sqlalchemy import ColumnElement, Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from auth.domain.entities import User
from auth.infrastructure.orm_models import UserModel
from shared.clock import as_utc


class DbUserRepository:
    """User lookups for sign-in, sharing by email and @mention resolution."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        return await self._first(UserModel.id == user_id)

    async def get_by_email(self, email: str) -> User | None:
        return await self._first(UserModel.email == email)

    async def get_by_username(self, username: str) -> User | None:
        return await self._first(UserModel.username == username)

    async def get_by_usernames(self, usernames: list[str]) -> list[User]:
        if not usernames:
            return []
        # Runs inside a document save; a failed lookup only rolls back its savepoint
        async with self.session.begin_nested():
            result = await self.session.execute(_users_named(usernames))
            return [_to_entity(m) for m in result.scalars().all()]

    async def create(self, user: User) -> User:
        model = UserModel(
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            password_hash=user.password_hash,
        )
        self.session.add(model)
        await self.session.commit()
        await self.session.refresh(model)
        return _to_entity(model)

    async def _first(self, condition: ColumnElement[bool]) -> User | None:
        result = await self.session.execute(select(UserModel).where(condition))
        model = result.scalar_one_or_none()
        return _to_entity(model) if model else None


def _to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        username=model.username,
        email=model.email,
        first_name=model.first_name,
        last_name=model.last_name,
        password_hash=model.password_hash,
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
    )


def _users_named(usernames: list[str]) -> Select:
    return select(UserModel).where(UserModel.username.in_(usernames)).order_by(UserModel.username)
