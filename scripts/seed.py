"""Seed script: creates demo users, documents, shares and edits via the REST API.

Usage:
    python scripts/seed.py              # uses http://localhost:8000
    python scripts/seed.py http://host  # custom base URL
"""

import sys

import httpx

BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"

USERS = [
    {
        "username": "alice",
        "email": "alice@example.com",
        "first_name": "Alice",
        "last_name": "Smith",
        "password": "password123",
    },
    {
        "username": "bob",
        "email": "bob@example.com",
        "first_name": "Bob",
        "last_name": "Jones",
        "password": "password123",
    },
    {
        "username": "carol",
        "email": "carol@example.com",
        "first_name": "Carol",
        "last_name": "White",
        "password": "password123",
    },
]

DOCUMENTS = [
    {
        "title": "Getting Started Guide",
        "owner": "alice@example.com",
        "content": "Welcome!\nAsk @bob if anything is unclear.",
        "visibility": "public",
    },
    {
        "title": "API Reference",
        "owner": "alice@example.com",
        "content": "GET /api/documents\nPOST /api/documents",
        "share": [("bob@example.com", "edit")],
        "edits": ["GET /api/documents\nPOST /api/documents\nGET /api/documents/search"],
    },
    {
        "title": "Architecture Notes",
        "owner": "bob@example.com",
        "content": "Services talk to Postgres.",
        "share": [("carol@example.com", "view")],
        "edits": ["Services talk to Postgres.\nNotifications go through Redis, cc @alice"],
    },
]


def _headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register(client: httpx.Client, user: dict) -> None:
    resp = client.post(f"{BASE_URL}/api/auth/register", json=user)
    if resp.status_code == 201:
        print(f"  Registered {user['username']}")
    elif resp.status_code == 409:
        print(f"  {user['username']} already exists, skipping")
    else:
        resp.raise_for_status()


def login(client: httpx.Client, email: str, password: str) -> str:
    resp = client.post(
        f"{BASE_URL}/api/auth/login",
        json={"email": email, "password": password},
    )
    resp.raise_for_status()
    return resp.json()["access_token"]


def create_document(client: httpx.Client, token: str, doc: dict) -> str:
    resp = client.post(
        f"{BASE_URL}/api/documents/",
        json={
            "title": doc["title"],
            "content": doc.get("content", ""),
            "visibility": doc.get("visibility", "private"),
        },
        headers=_headers(token),
    )
    resp.raise_for_status()
    doc_id = resp.json()["id"]
    print(f"  Created document '{doc['title']}' ({doc_id})")
    return doc_id


def share(client: httpx.Client, token: str, doc_id: str, email: str, permission: str) -> None:
    resp = client.post(
        f"{BASE_URL}/api/documents/{doc_id}/share",
        json={"email": email, "permission": permission},
        headers=_headers(token),
    )
    resp.raise_for_status()
    print(f"    {resp.json()['message']}")


def edit(client: httpx.Client, token: str, doc_id: str, content: str) -> None:
    resp = client.patch(
        f"{BASE_URL}/api/documents/{doc_id}",
        json={"content": content},
        headers=_headers(token),
    )
    resp.raise_for_status()
    print(f"    Saved version {resp.json()['latest_version']}")


def main() -> None:
    print(f"Seeding against {BASE_URL}\n")

    with httpx.Client(timeout=10) as client:
        # 1. Register users
        print("Users:")
        for user in USERS:
            register(client, user)

        # 2. Login and cache tokens
        tokens: dict[str, str] = {}
        for user in USERS:
            tokens[user["email"]] = login(client, user["email"], user["password"])

        # 3. Create documents, share them and record a few edits
        print("\nDocuments:")
        for doc in DOCUMENTS:
            token = tokens[doc["owner"]]
            doc_id = create_document(client, token, doc)
            for email, permission in doc.get("share", []):
                share(client, token, doc_id, email, permission)
            for content in doc.get("edits", []):
                edit(client, token, doc_id, content)

    print("\nDone!")


if __name__ == "__main__":
    main()
