import uuid
from uuid import UUID

from sqlalchemy import ColumnElement, delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import defer, selectinload

from documents.domain.entities import (
    Document,
    ShareGrant,
    SharePermission,
    VersionEntry,
    Visibility,
)
from documents.infrastructure.models import (
    DocumentModel,
    DocumentShareModel,
    DocumentVersionModel,
)
from shared.clock import as_utc
from shared.exceptions import ConflictError


class DbDocumentRepository:
    """Stores a Document together with its share grants and version history.

    ``save`` is a conditional write on ``revision``: it only succeeds when the
    row still carries the revision the caller read. Version numbers are also
    unique per document, so two writers can never both append the same one.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, document_id: UUID) -> Document | None:
        result = await self.session.execute(
            _select_documents().where(DocumentModel.id == document_id)
        )
        model = result.scalar_one_or_none()
        return _to_entity(model) if model else None

    async def list_accessible(self, user_id: UUID | None) -> list[Document]:
        result = await self.session.execute(
            _select_summaries()
            .where(_readable_by(user_id))
            .order_by(DocumentModel.updated_at.desc())
        )
        return [_to_summary(m) for m in result.scalars().all()]

    async def search(self, user_id: UUID | None, query: str) -> list[Document]:
        result = await self.session.execute(
            _select_summaries()
            .where(
                _readable_by(user_id),
                or_(
                    DocumentModel.title.icontains(query, autoescape=True),
                    DocumentModel.content.icontains(query, autoescape=True),
                ),
            )
            .order_by(DocumentModel.updated_at.desc())
        )
        return [_to_summary(m) for m in result.scalars().all()]

    async def add(self, document: Document) -> Document:
        document_id = uuid.uuid4()
        self.session.add(
            DocumentModel(
                id=document_id,
                title=document.title,
                content=document.content,
                owner_id=document.owner_id,
                last_modified_by=document.last_modified_by,
                visibility=document.visibility.value,
                revision=1,
                created_at=document.created_at,
                updated_at=document.updated_at,
            )
        )
        await self.session.flush()
        self.session.add_all(_share_models(document_id, document.shared_with))
        self.session.add_all(_new_version_models(document_id, document.versions))
        await self.session.commit()
        return await self._require(document_id)

    async def save(self, document: Document, expected_revision: int) -> Document:
        try:
            result = await self.session.execute(
                update(DocumentModel)
                .where(
                    DocumentModel.id == document.id,
                    DocumentModel.revision == expected_revision,
                )
                .values(
                    title=document.title,
                    content=document.content,
                    last_modified_by=document.last_modified_by,
                    visibility=document.visibility.value,
                    updated_at=document.updated_at,
                    revision=expected_revision + 1,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self.session.rollback()
                raise ConflictError("Document was modified by another user")

            await self._sync_shares(document)
            self.session.add_all(_new_version_models(document.id, document.versions))
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise ConflictError("Document was modified by another user") from exc

        return await self._require(document.id)

    async def delete(self, document_id: UUID) -> None:
        await self.session.execute(
            delete(DocumentVersionModel).where(DocumentVersionModel.document_id == document_id)
        )
        await self.session.execute(
            delete(DocumentShareModel).where(DocumentShareModel.document_id == document_id)
        )
        await self.session.execute(delete(DocumentModel).where(DocumentModel.id == document_id))
        await self.session.commit()

    async def _sync_shares(self, document: Document) -> None:
        wanted = {share.user_id: share for share in document.shared_with}
        await self.session.execute(
            delete(DocumentShareModel).where(
                DocumentShareModel.document_id == document.id,
                DocumentShareModel.user_id.not_in(list(wanted)),
            )
        )

        result = await self.session.execute(
            select(DocumentShareModel.user_id).where(
                DocumentShareModel.document_id == document.id
            )
        )
        existing = set(result.scalars().all())

        for user_id, share in wanted.items():
            if user_id in existing:
                await self.session.execute(
                    update(DocumentShareModel)
                    .where(
                        DocumentShareModel.document_id == document.id,
                        DocumentShareModel.user_id == user_id,
                    )
                    .values(permission=share.permission.value)
                    .execution_options(synchronize_session=False)
                )
            else:
                self.session.add_all(_share_models(document.id, [share]))

    async def _require(self, document_id: UUID) -> Document:
        document = await self.get_by_id(document_id)
        if document is None:
            raise ConflictError("Document was deleted by another user")
        return document


def _select_documents():
    return (
        select(DocumentModel)
        .options(selectinload(DocumentModel.shares), selectinload(DocumentModel.versions))
        .execution_options(populate_existing=True)
    )


def _select_summaries():
    # Listings only need grants for the read check; content and history stay unloaded
    return (
        select(DocumentModel)
        .options(selectinload(DocumentModel.shares), defer(DocumentModel.content, raiseload=True))
        .execution_options(populate_existing=True)
    )


def _readable_by(user_id: UUID | None) -> ColumnElement[bool]:
    is_public = DocumentModel.visibility == Visibility.PUBLIC.value
    if user_id is None:
        return is_public
    is_shared = (
        select(DocumentShareModel.id)
        .where(
            DocumentShareModel.document_id == DocumentModel.id,
            DocumentShareModel.user_id == user_id,
        )
        .exists()
    )
    return or_(is_public, DocumentModel.owner_id == user_id, is_shared)


def _share_models(document_id: UUID, shares: list[ShareGrant]) -> list[DocumentShareModel]:
    return [
        DocumentShareModel(
            document_id=document_id,
            user_id=share.user_id,
            permission=share.permission.value,
            shared_at=share.shared_at,
        )
        for share in shares
    ]


def _new_version_models(
    document_id: UUID, versions: list[VersionEntry]
) -> list[DocumentVersionModel]:
    # Stored entries already carry an id; only fresh ones are inserted
    return [
        DocumentVersionModel(
            id=uuid.uuid4(),
            document_id=document_id,
            version=entry.version,
            content=entry.content,
            author_id=entry.author_id,
            created_at=entry.created_at,
        )
        for entry in versions
        if entry.id is None
    ]


def _to_entity(model: DocumentModel) -> Document:
    return Document(
        id=model.id,
        title=model.title,
        content=model.content,
        owner_id=model.owner_id,
        last_modified_by=model.last_modified_by,
        visibility=Visibility(model.visibility),
        shared_with=_share_entities(model),
        versions=[
            VersionEntry(
                id=version.id,
                version=version.version,
                content=version.content,
                author_id=version.author_id,
                created_at=as_utc(version.created_at),
            )
            for version in model.versions
        ],
        revision=model.revision,
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
    )


def _to_summary(model: DocumentModel) -> Document:
    return Document(
        id=model.id,
        title=model.title,
        owner_id=model.owner_id,
        last_modified_by=model.last_modified_by,
        visibility=Visibility(model.visibility),
        shared_with=_share_entities(model),
        revision=model.revision,
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
    )


def _share_entities(model: DocumentModel) -> list[ShareGrant]:
    return [
        ShareGrant(
            user_id=share.user_id,
            permission=SharePermission(share.permission),
            shared_at=as_utc(share.shared_at),
        )
        for share in model.shares
    ]
