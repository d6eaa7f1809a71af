from uuid import uuid4

import pytest

from auth.infrastructure.user_repository import DbUserRepository
from documents.application.services import create_document, share_document, update_document
from documents.domain.entities import Visibility
from documents.infrastructure.document_repository import DbDocumentRepository
from shared.exceptions import AuthorizationError, NotFoundError, ValidationError
from versions.application.services import compare_versions, get_version, list_versions
from versions.domain.diff import ChangeType, DiffAlgorithm
from versions.domain.entities import CURRENT_VERSION_LABEL


@pytest.fixture
def repo(db):
    return DbDocumentRepository(db)


@pytest.fixture
def users(db):
    return DbUserRepository(db)


@pytest.fixture
async def carol(make_user):
    return await make_user("carol")


@pytest.fixture
async def dave(make_user):
    return await make_user("dave")


@pytest.fixture
async def doc(repo, users, carol):
    return await create_document(repo, users, title="Notes", owner_id=carol.id)


async def test_list_versions_newest_first(repo, users, carol, doc):
    await update_document(repo, users, doc.id, carol.id, content="second")
    await update_document(repo, users, doc.id, carol.id, content="third")

    history = await list_versions(repo, doc.id, carol.id)

    assert history.document_title == "Notes"
    assert [v.version for v in history.versions] == [3, 2, 1]
    assert history.versions[0].content_preview == "third"
    assert history.versions[0].author_id == carol.id


async def test_list_versions_truncates_preview(repo, users, carol, doc):
    await update_document(repo, users, doc.id, carol.id, content="x" * 250)

    history = await list_versions(repo, doc.id, carol.id)

    assert history.versions[0].content_preview == "x" * 200 + "..."
    assert history.versions[1].content_preview == ""


async def test_list_versions_preview_at_limit_is_not_marked(repo, users, carol, doc):
    await update_document(repo, users, doc.id, carol.id, content="y" * 200)
    history = await list_versions(repo, doc.id, carol.id)
    assert history.versions[0].content_preview == "y" * 200


async def test_get_version_returns_full_content(repo, users, carol, doc):
    updated = await update_document(repo, users, doc.id, carol.id, content="z" * 300)
    entry = updated.versions[-1]

    snapshot = await get_version(repo, doc.id, carol.id, entry.id)

    assert snapshot.version.content == "z" * 300
    assert snapshot.version.version == 2
    assert snapshot.owner_id == carol.id


async def test_get_version_not_found(repo, carol, doc):
    with pytest.raises(NotFoundError, match="Version not found"):
        await get_version(repo, doc.id, carol.id, uuid4())


async def test_reads_require_read_permission(repo, carol, dave, doc):
    version_id = doc.versions[0].id
    with pytest.raises(AuthorizationError):
        await list_versions(repo, doc.id, dave.id)
    with pytest.raises(AuthorizationError):
        await get_version(repo, doc.id, dave.id, version_id)
    with pytest.raises(AuthorizationError):
        await compare_versions(repo, doc.id, dave.id, version_id)
    with pytest.raises(AuthorizationError):
        await list_versions(repo, doc.id, None)


async def test_missing_document_is_checked_before_access(repo, dave):
    with pytest.raises(NotFoundError, match="Document not found"):
        await list_versions(repo, uuid4(), dave.id)


async def test_shared_user_can_read_history(repo, users, carol, dave, doc):
    await share_document(repo, users, doc.id, carol.id, email=dave.email)
    history = await list_versions(repo, doc.id, dave.id)
    assert [v.version for v in history.versions] == [1]


async def test_public_history_readable_anonymously(repo, users, carol):
    doc = await create_document(
        repo, users, title="Open", owner_id=carol.id, visibility=Visibility.PUBLIC
    )
    history = await list_versions(repo, doc.id, None)
    assert len(history.versions) == 1


async def test_compare_two_versions(repo, users, carol, doc):
    await update_document(repo, users, doc.id, carol.id, content="line1\nline2")
    updated = await update_document(repo, users, doc.id, carol.id, content="line1\nCHANGED")
    v2, v3 = updated.versions[1], updated.versions[2]

    comparison = await compare_versions(repo, doc.id, carol.id, v2.id, compare_with=v3.id)

    assert comparison.from_version.version == 2
    assert comparison.to_version.version == 3
    assert len(comparison.changes) == 1
    change = comparison.changes[0]
    assert change.type == ChangeType.MODIFIED
    assert change.line_number == 2
    assert (change.old_content, change.new_content) == ("line2", "CHANGED")


async def test_compare_first_two_versions(repo, users, carol):
    doc = await create_document(
        repo, users, title="Lines", owner_id=carol.id, content="line1\nline2"
    )
    updated = await update_document(repo, users, doc.id, carol.id, content="line1\nCHANGED")
    v1, v2 = updated.versions

    comparison = await compare_versions(repo, doc.id, carol.id, v1.id, compare_with=v2.id)

    assert [(c.type, c.line_number, c.old_content, c.new_content) for c in comparison.changes] == [
        (ChangeType.MODIFIED, 2, "line2", "CHANGED")
    ]


async def test_compare_version_with_itself_is_empty(repo, users, carol, doc):
    updated = await update_document(repo, users, doc.id, carol.id, content="a\nb")
    entry = updated.versions[-1]
    comparison = await compare_versions(repo, doc.id, carol.id, entry.id, compare_with=entry.id)
    assert comparison.changes == []


async def test_compare_against_current_content(repo, users, carol, dave, doc):
    await share_document(repo, users, doc.id, carol.id, email=dave.email, permission="edit")
    updated = await update_document(repo, users, doc.id, dave.id, content="now")

    comparison = await compare_versions(repo, doc.id, carol.id, updated.versions[0].id)

    assert comparison.to_version.version == CURRENT_VERSION_LABEL
    assert comparison.to_version.author_id == dave.id
    assert comparison.to_version.created_at == updated.updated_at
    assert [(c.type, c.content) for c in comparison.changes] == [(ChangeType.ADDED, "now")]


async def test_compare_missing_versions(repo, carol, doc):
    with pytest.raises(NotFoundError, match="^Version not found"):
        await compare_versions(repo, doc.id, carol.id, uuid4())
    with pytest.raises(NotFoundError, match="Comparison version not found"):
        await compare_versions(repo, doc.id, carol.id, doc.versions[0].id, compare_with=uuid4())


async def test_compare_with_line_match(repo, users, carol, doc):
    await update_document(repo, users, doc.id, carol.id, content="a\nb\nc")
    updated = await update_document(repo, users, doc.id, carol.id, content="new\na\nb\nc")
    v2, v3 = updated.versions[1], updated.versions[2]

    comparison = await compare_versions(
        repo, doc.id, carol.id, v2.id, compare_with=v3.id, algorithm=DiffAlgorithm.LINE_MATCH
    )

    assert [(c.type, c.line_number) for c in comparison.changes] == [(ChangeType.ADDED, 1)]


async def test_compare_with_unknown_algorithm(repo, carol, doc):
    with pytest.raises(ValidationError):
        await compare_versions(repo, doc.id, carol.id, doc.versions[0].id, algorithm="lcs")
