from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel

from versions.domain.diff import ChangeType


class VersionPreviewResponse(BaseModel):
    id: UUID
    version: int
    author_id: UUID
    created_at: datetime
    content_preview: str


class VersionListResponse(BaseModel):
    document_id: UUID
    document_title: str
    versions: list[VersionPreviewResponse]


class VersionResponse(BaseModel):
    id: UUID
    version: int
    content: str
    author_id: UUID
    created_at: datetime


class VersionDetailResponse(BaseModel):
    document_id: UUID
    document_title: str
    owner_id: UUID
    version: VersionResponse


class VersionHeaderResponse(BaseModel):
    id: UUID | None = None
    version: int | Literal["current"]
    author_id: UUID | None = None
    created_at: datetime | None = None


class LineChangeResponse(BaseModel):
    type: ChangeType
    line_number: int
    content: str | None = None
    old_content: str | None = None
    new_content: str | None = None


class VersionComparisonResponse(BaseModel):
    document_id: UUID
    document_title: str
    from_version: VersionHeaderResponse
    to_version: VersionHeaderResponse
    changes: list[LineChangeResponse]
