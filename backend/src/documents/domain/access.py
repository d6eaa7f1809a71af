"""Read, edit and manage authority over a document.

Every document and version operation authorizes through these predicates.
They never raise: callers turn ``False`` into an ``AuthorizationError``.
``user_id`` is ``None`` for anonymous callers, who can only read public
documents.
"""

from uuid import UUID

from documents.domain.entities import Document, SharePermission, Visibility


def can_read(doc: Document, user_id: UUID | None) -> bool:
    if doc.visibility == Visibility.PUBLIC:
        return True
    if user_id is None:
        return False
    return user_id == doc.owner_id or doc.find_share(user_id) is not None


def can_edit(doc: Document, user_id: UUID | None) -> bool:
    if user_id is None:
        return False
    if user_id == doc.owner_id:
        return True
    share = doc.find_share(user_id)
    return share is not None and share.permission == SharePermission.EDIT


def can_manage(doc: Document, user_id: UUID | None) -> bool:
    return user_id is not None and user_id == doc.owner_id
