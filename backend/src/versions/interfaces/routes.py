from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from auth.domain.entities import User
from documents.infrastructure.document_repository import DbDocumentRepository
from shared.dependencies import get_db, get_optional_user
from versions.application.services import compare_versions, get_version, list_versions
from versions.domain.diff import DiffAlgorithm
from versions.interfaces.schemas import (
    VersionComparisonResponse,
    VersionDetailResponse,
    VersionListResponse,
)

router = APIRouter(prefix="/api/documents/{document_id}/versions", tags=["versions"])


@router.get("", response_model=VersionListResponse)
async def list_all(
    document_id: UUID,
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return await list_versions(DbDocumentRepository(db), document_id, _user_id(current_user))


@router.get("/{version_id}", response_model=VersionDetailResponse)
async def get_one(
    document_id: UUID,
    version_id: UUID,
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_version(
        DbDocumentRepository(db), document_id, _user_id(current_user), version_id
    )


@router.get("/{version_id}/diff", response_model=VersionComparisonResponse)
async def diff(
    document_id: UUID,
    version_id: UUID,
    compare_with: UUID | None = Query(default=None),
    algorithm: DiffAlgorithm = Query(default=DiffAlgorithm.POSITIONAL),
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return await compare_versions(
        DbDocumentRepository(db),
        document_id,
        _user_id(current_user),
        version_id,
        compare_with=compare_with,
        algorithm=algorithm,
    )


def _user_id(user: User | None) -> UUID | None:
    return user.id if user else None
