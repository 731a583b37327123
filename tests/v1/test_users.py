"""Tests for user profile and administration endpoints."""

from __future__ import annotations

from datetime import datetime

from fastapi import status
from sqlalchemy import func, select

from quillpost.core.security import create_access_token
from quillpost.models import Comment, Post, PostLike, User

MISSING_ID = "fedcba9876543210fedcba98"


def test_list_users_requires_admin(client, auth_token) -> None:
    r = client.get("/api/v1/users")
    assert r.status_code == status.HTTP_401_UNAUTHORIZED

    r = client.get("/api/v1/users", headers=auth_token)
    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert r.json()["detail"] == "Access denied. Admin role required."


def test_list_users_newest_first(client, make_user, admin_auth_token, admin_user) -> None:
    older = make_user("older", created_at=datetime(2020, 1, 1))
    newer = make_user("newer", created_at=datetime(2021, 1, 1))

    r = client.get("/api/v1/users", headers=admin_auth_token)
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    ids = [u["id"] for u in data["users"]]
    assert ids == [admin_user.id, newer.id, older.id]
    assert data["pagination"]["totalUsers"] == 3
    assert all("passwordHash" not in u and "password_hash" not in u for u in data["users"])


def test_list_users_search_and_paging(client, make_user, admin_auth_token) -> None:
    make_user("carol", first_name="Carol", last_name="Smith")
    make_user("dave", first_name="Dave", last_name="Smithers")
    make_user("erin", first_name="Erin", last_name="Jones")

    r = client.get("/api/v1/users", params={"search": "SMITH"}, headers=admin_auth_token)
    usernames = {u["username"] for u in r.json()["users"]}
    assert usernames == {"carol", "dave"}

    r = client.get("/api/v1/users", params={"search": "erin@example"}, headers=admin_auth_token)
    assert [u["username"] for u in r.json()["users"]] == ["erin"]

    r = client.get("/api/v1/users", params={"limit": 2, "page": 2}, headers=admin_auth_token)
    pagination = r.json()["pagination"]
    assert pagination["totalUsers"] == 4
    assert pagination["totalPages"] == 2
    assert pagination["hasPrev"] is True
    assert pagination["hasNext"] is False


def test_get_user_profile(client, test_user, make_post) -> None:
    make_post(test_user, "One")
    make_post(test_user, "Two")

    r = client.get(f"/api/v1/users/{test_user.id}")
    assert r.status_code == status.HTTP_200_OK
    assert list(r.json()) == ["user"]
    data = r.json()["user"]
    assert data["username"] == "alice"
    assert data["firstName"] == "Alice"
    assert data["postsCount"] == 2
    assert data["role"] == "user"
    assert data["isActive"] is True
    assert "passwordHash" not in data


def test_get_user_not_found(client) -> None:
    r = client.get(f"/api/v1/users/{MISSING_ID}")
    assert r.status_code == status.HTTP_404_NOT_FOUND
    assert r.json()["detail"] == "User not found"


def test_user_posts_listing(client, test_user, other_user, make_post) -> None:
    older = make_post(test_user, "Older")
    newer = make_post(test_user, "Newer")
    make_post(other_user, "Not theirs")

    r = client.get(f"/api/v1/users/{test_user.id}/posts")
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert [p["id"] for p in data["posts"]] == [newer.id, older.id]
    assert data["pagination"]["totalPosts"] == 2


def test_user_posts_status_is_forced_for_anonymous_callers(
    client, test_user, auth_token, make_post
) -> None:
    make_post(test_user, "Visible")

    r = client.get(f"/api/v1/users/{test_user.id}/posts", params={"status": "draft"})
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["pagination"]["totalPosts"] == 1

    r = client.get(
        f"/api/v1/users/{test_user.id}/posts",
        params={"status": "draft"},
        headers=auth_token,
    )
    data = r.json()
    assert data["posts"] == []
    assert data["pagination"]["totalPosts"] == 0
    assert data["pagination"]["totalPages"] == 0


def test_user_posts_rejects_unknown_status(client, test_user) -> None:
    r = client.get(f"/api/v1/users/{test_user.id}/posts", params={"status": "bogus"})
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["errors"][0]["field"] == "status"


def test_user_posts_rejects_invalid_token(client, test_user, make_post) -> None:
    make_post(test_user, "Visible")

    r = client.get(
        f"/api/v1/users/{test_user.id}/posts",
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert r.status_code == status.HTTP_401_UNAUTHORIZED
    assert r.json()["detail"] == "Could not validate credentials"


def test_user_posts_missing_user(client) -> None:
    r = client.get(f"/api/v1/users/{MISSING_ID}/posts")
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_update_own_profile(client, test_user, auth_token) -> None:
    r = client.put(
        f"/api/v1/users/{test_user.id}",
        json={
            "firstName": "  Alicia ",
            "bio": "Writes about gardens",
            "avatar": "https://example.com/me.png",
        },
        headers=auth_token,
    )
    assert r.status_code == status.HTTP_200_OK
    body = r.json()
    assert body["message"] == "User updated successfully"
    assert body["user"]["firstName"] == "Alicia"
    assert body["user"]["lastName"] == "Writer"
    assert body["user"]["bio"] == "Writes about gardens"
    assert body["user"]["avatar"] == "https://example.com/me.png"


def test_update_own_profile_ignores_admin_fields(client, test_user, auth_token) -> None:
    r = client.put(
        f"/api/v1/users/{test_user.id}",
        json={"role": "admin", "isActive": False, "lastName": "Changed"},
        headers=auth_token,
    )
    assert r.status_code == status.HTTP_200_OK
    user = r.json()["user"]
    assert user["role"] == "user"
    assert user["isActive"] is True
    assert user["lastName"] == "Changed"


def test_admin_can_change_role_and_status(client, test_user, admin_auth_token) -> None:
    r = client.put(
        f"/api/v1/users/{test_user.id}",
        json={"role": "admin", "isActive": False},
        headers=admin_auth_token,
    )
    assert r.status_code == status.HTTP_200_OK
    user = r.json()["user"]
    assert user["role"] == "admin"
    assert user["isActive"] is False


def test_update_other_user_forbidden(client, test_user, other_auth_token) -> None:
    r = client.put(
        f"/api/v1/users/{test_user.id}",
        json={"firstName": "Mallory"},
        headers=other_auth_token,
    )
    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert r.json()["detail"] == "Not authorized to update this user"


def test_update_missing_user_as_admin(client, admin_auth_token) -> None:
    r = client.put(
        f"/api/v1/users/{MISSING_ID}",
        json={"firstName": "Ghost"},
        headers=admin_auth_token,
    )
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_update_profile_validation(client, test_user, auth_token) -> None:
    cases = [
        ({"firstName": ""}, "firstName", "First name must be between 1 and 50 characters"),
        ({"lastName": "x" * 51}, "lastName", "Last name must be between 1 and 50 characters"),
        ({"bio": "x" * 501}, "bio", "Bio must be less than 500 characters"),
        ({"avatar": "not a url"}, "avatar", "Avatar must be a valid URL"),
    ]
    for payload, field, message in cases:
        r = client.put(f"/api/v1/users/{test_user.id}", json=payload, headers=auth_token)
        assert r.status_code == status.HTTP_400_BAD_REQUEST, payload
        error = r.json()["errors"][0]
        assert error["field"] == field
        assert error["message"] == message

    r = client.put(
        f"/api/v1/users/{test_user.id}",
        json={"role": "superuser"},
        headers=auth_token,
    )
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_deactivated_user_cannot_authenticate(client, make_user) -> None:
    inactive = make_user("sleepy", is_active=False)
    r = client.put(
        f"/api/v1/users/{inactive.id}",
        json={"firstName": "Awake"},
        headers={"Authorization": f"Bearer {create_access_token(inactive.id)}"},
    )
    assert r.status_code == status.HTTP_401_UNAUTHORIZED
    assert r.json()["detail"] == "Account is deactivated"


def test_delete_user_requires_admin(client, test_user, other_auth_token) -> None:
    r = client.delete(f"/api/v1/users/{test_user.id}", headers=other_auth_token)
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_admin_cannot_delete_self(client, admin_user, admin_auth_token) -> None:
    r = client.delete(f"/api/v1/users/{admin_user.id}", headers=admin_auth_token)
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["detail"] == "Cannot delete your own account"


def test_delete_missing_user(client, admin_auth_token) -> None:
    r = client.delete(f"/api/v1/users/{MISSING_ID}", headers=admin_auth_token)
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_delete_user_removes_posts_and_detaches_activity(
    client,
    db_session,
    test_user,
    other_user,
    admin_auth_token,
    make_post,
    make_comment,
) -> None:
    kept = make_post(test_user, "Kept", liked_by=[other_user])
    make_comment(kept, other_user, "from bob")
    removed = make_post(other_user, "Removed", liked_by=[test_user])
    make_comment(removed, test_user, "from alice")
    kept_id, removed_id, bob_id = kept.id, removed.id, other_user.id

    r = client.delete(f"/api/v1/users/{bob_id}", headers=admin_auth_token)
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"message": "User and associated posts deleted successfully"}

    assert db_session.get(User, bob_id) is None
    assert db_session.get(Post, removed_id) is None
    assert client.get(f"/api/v1/posts/{removed_id}").status_code == status.HTTP_404_NOT_FOUND

    r = client.get(f"/api/v1/posts/{kept_id}")
    assert r.status_code == status.HTTP_200_OK
    data = r.json()["post"]
    assert data["likes"] == []
    assert data["likeCount"] == 0
    assert len(data["comments"]) == 1
    assert data["comments"][0]["author"] is None
    assert data["comments"][0]["content"] == "from bob"

    assert db_session.scalar(select(func.count()).select_from(PostLike)) == 0
    assert db_session.scalar(select(func.count()).select_from(Comment)) == 1
