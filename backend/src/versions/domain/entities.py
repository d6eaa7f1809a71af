from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal
from uuid import UUID

from documents.domain.entities import VersionEntry
from versions.domain.diff import LineChange

PREVIEW_LENGTH = 200

CURRENT_VERSION_LABEL = "current"


@dataclass(frozen=True)
class VersionPreview:
    id: UUID
    version: int
    author_id: UUID
    created_at: datetime
    content_preview: str

    @classmethod
    def of(cls, entry: VersionEntry) -> "VersionPreview":
        preview = entry.content[:PREVIEW_LENGTH]
        if len(entry.content) > PREVIEW_LENGTH:
            preview += "..."
        return cls(
            id=entry.id,
            version=entry.version,
            author_id=entry.author_id,
            created_at=entry.created_at,
            content_preview=preview,
        )


@dataclass(frozen=True)
class VersionHistory:
    document_id: UUID
    document_title: str
    versions: list[VersionPreview] = field(default_factory=list)


@dataclass(frozen=True)
class VersionSnapshot:
    document_id: UUID
    document_title: str
    owner_id: UUID
    version: VersionEntry


@dataclass(frozen=True)
class VersionHeader:
    """Identifies one side of a comparison; ``version`` is "current" for live content."""

    version: int | Literal["current"]
    author_id: UUID | None
    created_at: datetime | None
    id: UUID | None = None


@dataclass(frozen=True)
class VersionComparison:
    document_id: UUID
    document_title: str
    from_version: VersionHeader
    to_version: VersionHeader
    changes: list[LineChange] = field(default_factory=list)
