from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr

from documents.domain.entities import SharePermission, Visibility


class CreateDocumentRequest(BaseModel):
    title: str
    content: str = ""
    visibility: Visibility = Visibility.PRIVATE


class UpdateDocumentRequest(BaseModel):
    # None leaves the field unchanged; "" is a real (empty) content value
    title: str | None = None
    content: str | None = None


class VisibilityRequest(BaseModel):
    # Parsed by the service so a missing document is reported before a bad value
    visibility: str


class ShareRequest(BaseModel):
    email: EmailStr
    permission: str = SharePermission.VIEW.value


class ShareGrantResponse(BaseModel):
    user_id: UUID
    permission: SharePermission
    shared_at: datetime | None = None


class DocumentSummaryResponse(BaseModel):
    id: UUID
    title: str
    owner_id: UUID
    last_modified_by: UUID | None = None
    visibility: Visibility
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DocumentResponse(DocumentSummaryResponse):
    content: str
    shared_with: list[ShareGrantResponse]
    latest_version: int


class ShareResponse(BaseModel):
    message: str
    is_new_share: bool
    document: DocumentResponse
