import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar
from uuid import UUID

from auth.application.services import normalize_email
from auth.domain.entities import User
from documents.application.locks import document_locks
from documents.application.mentions import resolve_mentions
from documents.domain.access import can_edit, can_manage, can_read
from documents.domain.entities import Document, SharePermission, Visibility
from documents.domain.repository import DocumentRepository, ShareNotifier, UserDirectory
from shared.clock import utcnow
from shared.config import settings
from shared.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def create_document(
    repo: DocumentRepository,
    users: UserDirectory,
    title: str,
    owner_id: UUID,
    content: str = "",
    visibility: Visibility = Visibility.PRIVATE,
) -> Document:
    now = utcnow()
    doc = Document.create(
        title=title,
        owner_id=owner_id,
        now=now,
        content=content,
        visibility=_parse_visibility(visibility),
    )
    await resolve_mentions(doc, users, content, now)
    created = await repo.add(doc)
    logger.info("Document %s created by %s", created.id, owner_id)
    return created


async def get_document(
    repo: DocumentRepository, document_id: UUID, user_id: UUID | None
) -> Document:
    doc = await _get_or_404(repo, document_id)
    if not can_read(doc, user_id):
        raise AuthorizationError("Access denied")
    return doc


async def list_documents(repo: DocumentRepository, user_id: UUID | None) -> list[Document]:
    docs = await repo.list_accessible(user_id)
    return [doc for doc in docs if can_read(doc, user_id)]


async def search_documents(
    repo: DocumentRepository, user_id: UUID | None, query: str
) -> list[Document]:
    query = (query or "").strip()
    if not query:
        raise ValidationError("Search query is required")
    docs = await repo.search(user_id, query)
    return [doc for doc in docs if can_read(doc, user_id)]


async def update_document(
    repo: DocumentRepository,
    users: UserDirectory,
    document_id: UUID,
    user_id: UUID,
    title: str | None = None,
    content: str | None = None,
) -> Document:
    async def change(doc: Document) -> None:
        if not can_edit(doc, user_id):
            raise AuthorizationError("No edit permission")
        now = utcnow()
        entry = doc.record_edit(user_id, now, title=title, content=content)
        await resolve_mentions(doc, users, doc.content, now)
        logger.info("Document %s edited by %s, version %d", doc.id, user_id, entry.version)

    updated, _ = await _mutate(repo, document_id, change)
    return updated


async def delete_document(
    repo: DocumentRepository, document_id: UUID, user_id: UUID
) -> None:
    async with document_locks.hold(document_id):
        doc = await _get_or_404(repo, document_id)
        if not can_manage(doc, user_id):
            raise AuthorizationError("Only the document owner can delete it")
        await repo.delete(document_id)
    logger.info("Document %s deleted by %s", document_id, user_id)


async def set_visibility(
    repo: DocumentRepository, document_id: UUID, user_id: UUID, visibility: Visibility
) -> Document:
    async def change(doc: Document) -> None:
        if not can_manage(doc, user_id):
            raise AuthorizationError("Only the document owner can change visibility")
        doc.set_visibility(_parse_visibility(visibility), utcnow())

    updated, _ = await _mutate(repo, document_id, change)
    return updated


async def share_document(
    repo: DocumentRepository,
    users: UserDirectory,
    document_id: UUID,
    user_id: UUID,
    email: str,
    permission: SharePermission = SharePermission.VIEW,
    notifier: ShareNotifier | None = None,
) -> tuple[Document, bool]:
    """Grant ``permission`` to the user registered under ``email``.

    Re-sharing with the same user overwrites the permission in place. The
    returned flag is True only when a new grant was created, which is also the
    only case that notifies the recipient.
    """
    doc = await _get_or_404(repo, document_id)
    if not can_manage(doc, user_id):
        raise AuthorizationError("Only the document owner can share it")
    permission = _parse_permission(permission)

    target = await users.get_by_email(normalize_email(email))
    if not target:
        raise NotFoundError("User", email)

    async def change(current: Document) -> bool:
        if not can_manage(current, user_id):
            raise AuthorizationError("Only the document owner can share it")
        return current.grant(target.id, permission, utcnow())

    shared, is_new = await _mutate(repo, document_id, change)
    if is_new:
        logger.info("Document %s shared with %s (%s)", document_id, target.id, permission)
        if notifier is not None:
            await _notify_share(notifier, users, shared, target, user_id, permission)
    else:
        logger.info("Permission on document %s for %s set to %s", document_id, target.id, permission)
    return shared, is_new


async def remove_access(
    repo: DocumentRepository, document_id: UUID, user_id: UUID, target_user_id: UUID
) -> Document:
    async def change(doc: Document) -> bool:
        if not can_manage(doc, user_id):
            raise AuthorizationError("Only the document owner can remove access")
        return doc.revoke(target_user_id, utcnow())

    updated, removed = await _mutate(repo, document_id, change)
    if removed:
        logger.info("Access to document %s removed for %s", document_id, target_user_id)
    return updated


async def _mutate(
    repo: DocumentRepository,
    document_id: UUID,
    change: Callable[[Document], Awaitable[T]],
) -> tuple[Document, T]:
    """Run read-modify-write on one document as a single transaction.

    Writers on the same document are serialized in-process, and a stale
    revision detected by the store (another process won the race) re-reads
    the document and reapplies ``change``.
    """
    async with document_locks.hold(document_id):
        for attempt in range(1, settings.MUTATION_MAX_RETRIES + 1):
            doc = await _get_or_404(repo, document_id)
            outcome = await change(doc)
            try:
                return await repo.save(doc, expected_revision=doc.revision), outcome
            except ConflictError:
                logger.warning(
                    "Conflicting write on document %s (attempt %d/%d)",
                    document_id,
                    attempt,
                    settings.MUTATION_MAX_RETRIES,
                )
    raise ConflictError("Document is being modified concurrently, please retry")


async def _notify_share(
    notifier: ShareNotifier,
    users: UserDirectory,
    document: Document,
    target: User,
    shared_by_id: UUID,
    permission: SharePermission,
) -> None:
    try:
        shared_by = await users.get_by_id(shared_by_id)
    except Exception:
        logger.exception("Could not load sharer %s for document %s", shared_by_id, document.id)
        shared_by = None
    await deliver_share_notice(notifier, document, target, shared_by, permission)


async def deliver_share_notice(
    notifier: ShareNotifier,
    document: Document,
    target: User,
    shared_by: User | None,
    permission: SharePermission,
) -> None:
    """Send one share notice, giving up after ``NOTIFICATION_TIMEOUT_SECONDS``.

    The share is already committed when this runs, so a slow or failing
    notifier is logged and dropped.
    """
    try:
        await asyncio.wait_for(
            notifier.share_created(document, target, shared_by, permission),
            timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
        )
    except TimeoutError:
        logger.warning("Share notice to %s for document %s timed out", target.id, document.id)
    except Exception:
        logger.exception("Failed to notify %s about document %s", target.id, document.id)


async def _get_or_404(repo: DocumentRepository, document_id: UUID) -> Document:
    doc = await repo.get_by_id(document_id)
    if not doc:
        raise NotFoundError("Document", str(document_id))
    return doc


def _parse_visibility(value: str) -> Visibility:
    try:
        return Visibility(value)
    except ValueError:
        raise ValidationError("Visibility must be either public or private") from None


def _parse_permission(value: str) -> SharePermission:
    try:
        return SharePermission(value)
    except ValueError:
        raise ValidationError("Permission must be either view or edit") from None
