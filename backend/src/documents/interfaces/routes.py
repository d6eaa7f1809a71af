from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from auth.domain.entities import User
from auth.infrastructure.user_repository import DbUserRepository
from documents.application.services import (
    create_document,
    delete_document,
    get_document,
    list_documents,
    remove_access,
    search_documents,
    set_visibility,
    share_document,
    update_document,
)
from documents.domain.entities import Document
from documents.domain.repository import ShareNotifier
from documents.infrastructure.document_repository import DbDocumentRepository
from documents.interfaces.notifications import BackgroundShareNotifier
from documents.interfaces.schemas import (
    CreateDocumentRequest,
    DocumentResponse,
    DocumentSummaryResponse,
    ShareRequest,
    ShareResponse,
    UpdateDocumentRequest,
    VisibilityRequest,
)
from shared.dependencies import get_current_user, get_db, get_optional_user, get_share_notifier

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.post("/", response_model=DocumentResponse, status_code=201)
async def create(
    body: CreateDocumentRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    doc = await create_document(
        DbDocumentRepository(db),
        DbUserRepository(db),
        title=body.title,
        owner_id=current_user.id,
        content=body.content,
        visibility=body.visibility,
    )
    return _document_response(doc)


@router.get("/", response_model=list[DocumentSummaryResponse])
async def list_all(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    docs = await list_documents(DbDocumentRepository(db), current_user.id)
    return [_summary_response(doc) for doc in docs]


@router.get("/search", response_model=list[DocumentSummaryResponse])
async def search(
    q: str = Query(default=""),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    docs = await search_documents(DbDocumentRepository(db), current_user.id, q)
    return [_summary_response(doc) for doc in docs]


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_one(
    document_id: UUID,
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    doc = await get_document(DbDocumentRepository(db), document_id, _user_id(current_user))
    return _document_response(doc)


@router.patch("/{document_id}", response_model=DocumentResponse)
async def update(
    document_id: UUID,
    body: UpdateDocumentRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    doc = await update_document(
        DbDocumentRepository(db),
        DbUserRepository(db),
        document_id=document_id,
        user_id=current_user.id,
        title=body.title,
        content=body.content,
    )
    return _document_response(doc)


@router.delete("/{document_id}", status_code=204)
async def delete(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_document(DbDocumentRepository(db), document_id=document_id, user_id=current_user.id)


@router.put("/{document_id}/visibility", response_model=DocumentResponse)
async def change_visibility(
    document_id: UUID,
    body: VisibilityRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    doc = await set_visibility(
        DbDocumentRepository(db), document_id, current_user.id, body.visibility
    )
    return _document_response(doc)


@router.post("/{document_id}/share", response_model=ShareResponse)
async def share(
    document_id: UUID,
    body: ShareRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    notifier: ShareNotifier = Depends(get_share_notifier),
):
    doc, is_new = await share_document(
        DbDocumentRepository(db),
        DbUserRepository(db),
        document_id=document_id,
        user_id=current_user.id,
        email=body.email,
        permission=body.permission,
        notifier=BackgroundShareNotifier(notifier, background_tasks),
    )
    message = (
        f"Document shared with {body.email}"
        if is_new
        else f"Permission updated for {body.email}"
    )
    return ShareResponse(message=message, is_new_share=is_new, document=_document_response(doc))


@router.delete("/{document_id}/share/{user_id}", response_model=DocumentResponse)
async def unshare(
    document_id: UUID,
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    doc = await remove_access(DbDocumentRepository(db), document_id, current_user.id, user_id)
    return _document_response(doc)


def _user_id(user: User | None) -> UUID | None:
    return user.id if user else None


def _summary_response(doc: Document) -> DocumentSummaryResponse:
    return DocumentSummaryResponse.model_validate(doc, from_attributes=True)


def _document_response(doc: Document) -> DocumentResponse:
    return DocumentResponse.model_validate(doc, from_attributes=True)
