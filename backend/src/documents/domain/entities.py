from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from shared.exceptions import ValidationError

TITLE_MAX_LENGTH = 200


class Visibility(StrEnum):
    PUBLIC = "public"
    PRIVATE = "private"


class SharePermission(StrEnum):
    VIEW = "view"
    EDIT = "edit"


@dataclass
class ShareGrant:
    user_id: UUID
    permission: SharePermission = SharePermission.VIEW
    shared_at: datetime | None = field(default=None)


@dataclass(frozen=True)
class VersionEntry:
    """An immutable content snapshot. ``id`` is assigned when the entry is stored."""

    version: int
    content: str
    author_id: UUID
    created_at: datetime
    id: UUID | None = field(default=None)


@dataclass
class Document:
    title: str
    owner_id: UUID
    content: str = ""
    last_modified_by: UUID | None = field(default=None)
    visibility: Visibility = Visibility.PRIVATE
    shared_with: list[ShareGrant] = field(default_factory=list)
    versions: list[VersionEntry] = field(default_factory=list)
    revision: int = 1
    id: UUID | None = field(default=None)
    created_at: datetime | None = field(default=None)
    updated_at: datetime | None = field(default=None)

    @classmethod
    def create(
        cls,
        title: str,
        owner_id: UUID,
        now: datetime,
        content: str = "",
        visibility: Visibility = Visibility.PRIVATE,
    ) -> "Document":
        doc = cls(
            title=validate_title(title),
            owner_id=owner_id,
            content=content,
            last_modified_by=owner_id,
            visibility=visibility,
            created_at=now,
            updated_at=now,
        )
        doc.versions.append(
            VersionEntry(version=1, content=content, author_id=owner_id, created_at=now)
        )
        return doc

    @property
    def latest_version(self) -> int:
        return max((v.version for v in self.versions), default=0)

    def find_share(self, user_id: UUID) -> ShareGrant | None:
        return next((s for s in self.shared_with if s.user_id == user_id), None)

    def find_version(self, version_id: UUID) -> VersionEntry | None:
        return next((v for v in self.versions if v.id == version_id), None)

    def record_edit(
        self,
        user_id: UUID,
        now: datetime,
        title: str | None = None,
        content: str | None = None,
    ) -> VersionEntry:
        """Apply an edit and append exactly one version holding the resulting content.

        ``content=None`` keeps the current content; an empty string replaces it.
        """
        if title is not None:
            self.title = validate_title(title)
        if content is not None:
            self.content = content

        entry = VersionEntry(
            version=self.latest_version + 1,
            content=self.content,
            author_id=user_id,
            created_at=now,
        )
        self.versions.append(entry)
        self.last_modified_by = user_id
        self.touch(now)
        return entry

    def grant(self, user_id: UUID, permission: SharePermission, now: datetime) -> bool:
        """Share with ``user_id``. Returns True when a new grant was created."""
        if user_id == self.owner_id:
            raise ValidationError("Cannot share document with its owner")

        existing = self.find_share(user_id)
        if existing:
            existing.permission = permission
        else:
            self.shared_with.append(
                ShareGrant(user_id=user_id, permission=permission, shared_at=now)
            )
        self.touch(now)
        return existing is None

    def grant_view_if_absent(self, user_id: UUID, now: datetime) -> bool:
        if user_id == self.owner_id or self.find_share(user_id):
            return False
        self.shared_with.append(
            ShareGrant(user_id=user_id, permission=SharePermission.VIEW, shared_at=now)
        )
        self.touch(now)
        return True

    def revoke(self, user_id: UUID, now: datetime) -> bool:
        remaining = [s for s in self.shared_with if s.user_id != user_id]
        removed = len(remaining) != len(self.shared_with)
        self.shared_with = remaining
        self.touch(now)
        return removed

    def set_visibility(self, visibility: Visibility, now: datetime) -> None:
        self.visibility = visibility
        self.touch(now)

    def touch(self, now: datetime) -> None:
        # updated_at never moves backwards
        if self.updated_at is None or now > self.updated_at:
            self.updated_at = now


def validate_title(title: str) -> str:
    stripped = title.strip() if title else ""
    if not stripped:
        raise ValidationError("Title is required")
    if len(stripped) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title cannot exceed {TITLE_MAX_LENGTH} characters")
    return stripped
