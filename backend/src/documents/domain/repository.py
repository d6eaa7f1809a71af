from typing import Protocol
from uuid import UUID

from auth.domain.entities import User
from documents.domain.entities import Document, SharePermission


class DocumentRepository(Protocol):
    async def get_by_id(self, document_id: UUID) -> Document | None: ...

    # Listings return summaries: content is left empty and versions are not loaded
    async def list_accessible(self, user_id: UUID | None) -> list[Document]: ...

    async def search(self, user_id: UUID | None, query: str) -> list[Document]: ...

    async def add(self, document: Document) -> Document: ...

    async def save(self, document: Document, expected_revision: int) -> Document: ...

    async def delete(self, document_id: UUID) -> None: ...


class UserDirectory(Protocol):
    async def get_by_id(self, user_id: UUID) -> User | None: ...

    async def get_by_email(self, email: str) -> User | None: ...

    async def get_by_usernames(self, usernames: list[str]) -> list[User]: ...


class ShareNotifier(Protocol):
    async def share_created(
        self,
        document: Document,
        target: User,
        shared_by: User | None,
        permission: SharePermission,
    ) -> None: ...
