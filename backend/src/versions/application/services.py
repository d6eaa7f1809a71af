from uuid import UUID

from documents.application.services import get_document
from documents.domain.entities import Document, VersionEntry
from documents.domain.repository import DocumentRepository
from shared.exceptions import NotFoundError, ValidationError
from versions.domain.diff import DiffAlgorithm, diff_lines
from versions.domain.entities import (
    CURRENT_VERSION_LABEL,
    VersionComparison,
    VersionHeader,
    VersionHistory,
    VersionPreview,
    VersionSnapshot,
)


async def list_versions(
    repo: DocumentRepository, document_id: UUID, user_id: UUID | None
) -> VersionHistory:
    doc = await get_document(repo, document_id, user_id)
    entries = sorted(doc.versions, key=lambda v: v.version, reverse=True)
    return VersionHistory(
        document_id=doc.id,
        document_title=doc.title,
        versions=[VersionPreview.of(entry) for entry in entries],
    )


async def get_version(
    repo: DocumentRepository, document_id: UUID, user_id: UUID | None, version_id: UUID
) -> VersionSnapshot:
    doc = await get_document(repo, document_id, user_id)
    entry = _find_version(doc, version_id, "Version")
    return VersionSnapshot(
        document_id=doc.id,
        document_title=doc.title,
        owner_id=doc.owner_id,
        version=entry,
    )


async def compare_versions(
    repo: DocumentRepository,
    document_id: UUID,
    user_id: UUID | None,
    version_id: UUID,
    compare_with: UUID | None = None,
    algorithm: DiffAlgorithm = DiffAlgorithm.POSITIONAL,
) -> VersionComparison:
    """Diff a stored version against another one, or against the live content.

    The requested version is the old side of the diff. Without
    ``compare_with`` the new side is the document's current content.
    """
    try:
        algorithm = DiffAlgorithm(algorithm)
    except ValueError:
        raise ValidationError("Unknown diff algorithm") from None

    doc = await get_document(repo, document_id, user_id)
    target = _find_version(doc, version_id, "Version")

    if compare_with is not None:
        other = _find_version(doc, compare_with, "Comparison version")
        new_content = other.content
        to_header = _header(other)
    else:
        new_content = doc.content
        to_header = VersionHeader(
            version=CURRENT_VERSION_LABEL,
            author_id=doc.last_modified_by,
            created_at=doc.updated_at,
        )

    return VersionComparison(
        document_id=doc.id,
        document_title=doc.title,
        from_version=_header(target),
        to_version=to_header,
        changes=diff_lines(target.content, new_content, algorithm),
    )


def _find_version(doc: Document, version_id: UUID, label: str) -> VersionEntry:
    entry = doc.find_version(version_id)
    if entry is None:
        raise NotFoundError(label, str(version_id))
    return entry


def _header(entry: VersionEntry) -> VersionHeader:
    return VersionHeader(
        id=entry.id,
        version=entry.version,
        author_id=entry.author_id,
        created_at=entry.created_at,
    )
