from datetime import datetime, timezone
from uuid import uuid4

from auth.domain.entities import User
from documents.application.mentions import resolve_mentions
from documents.domain.entities import Document, SharePermission
from documents.domain.mentions import extract_mentions

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _user(username):
    return User(
        id=uuid4(),
        username=username,
        email=f"{username}@example.com",
        first_name=username.title(),
        last_name="Tester",
        password_hash="x",
    )


class StaticDirectory:
    def __init__(self, *users):
        self.users = {u.username: u for u in users}
        self.lookups = []

    async def get_by_usernames(self, usernames):
        self.lookups.append(list(usernames))
        return [self.users[name] for name in usernames if name in self.users]


class BrokenDirectory:
    async def get_by_usernames(self, usernames):
        raise RuntimeError("directory unavailable")


def test_extract_mentions_dedupes_in_order():
    assert extract_mentions("hi @bob and @alice, again @bob") == ["bob", "alice"]


def test_extract_mentions_is_case_sensitive_word_tokens():
    assert extract_mentions("@Alice @alice @a_1.x @") == ["Alice", "alice", "a_1"]


def test_extract_mentions_ignores_non_ascii_word_characters():
    assert extract_mentions("@émile") == []


def test_extract_mentions_empty_content():
    assert extract_mentions("") == []


async def test_resolve_mentions_grants_view():
    alice = _user("alice")
    doc = Document.create(title="Notes", owner_id=uuid4(), now=NOW)

    granted = await resolve_mentions(doc, StaticDirectory(alice), "Hello @alice @ghost", NOW)

    assert granted == [alice]
    assert doc.find_share(alice.id).permission == SharePermission.VIEW


async def test_resolve_mentions_skips_owner_and_existing_grants():
    owner, editor = _user("owner"), _user("editor")
    doc = Document.create(title="Notes", owner_id=owner.id, now=NOW)
    doc.grant(editor.id, SharePermission.EDIT, NOW)

    granted = await resolve_mentions(doc, StaticDirectory(owner, editor), "@owner @editor", NOW)

    assert granted == []
    assert len(doc.shared_with) == 1
    assert doc.find_share(editor.id).permission == SharePermission.EDIT


async def test_resolve_mentions_without_tokens_skips_lookup():
    directory = StaticDirectory()
    doc = Document.create(title="Notes", owner_id=uuid4(), now=NOW)

    assert await resolve_mentions(doc, directory, "no mentions here", NOW) == []
    assert directory.lookups == []


async def test_resolve_mentions_swallows_directory_failure(caplog):
    doc = Document.create(title="Notes", owner_id=uuid4(), now=NOW)

    granted = await resolve_mentions(doc, BrokenDirectory(), "@alice", NOW)

    assert granted == []
    assert doc.shared_with == []
    assert "Mention lookup failed" in caplog.text
