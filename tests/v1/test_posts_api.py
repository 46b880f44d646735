# mypy: ignore-errors
# tests/v1/test_posts_api.py
"""Tests for post endpoints."""

import pytest
from fastapi import status



@pytest.mark.asyncio
async def test_create_post_requires_token(client) -> None:
    response = await client.post("/api/v1/posts/", json={"body": "hi"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_create_and_fetch_post(client, auth_headers, alice) -> None:
    created = await client.post("/api/v1/posts/", json={"body": "hello"}, headers=auth_headers(alice))
    assert created.status_code == status.HTTP_201_CREATED
    post_id = created.json()["id"]

    response = await client.get(f"/api/v1/posts/{post_id}")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["body"] == "hello"
    assert data["author_id"] == alice.id
    assert data["is_liked"] is False
    assert data["repost_target"] is None


@pytest.mark.asyncio
async def test_empty_plain_post_is_unprocessable(client, auth_headers, alice) -> None:
    response = await client.post("/api/v1/posts/", json={"body": ""}, headers=auth_headers(alice))

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
async def test_like_is_idempotent_over_http(client, auth_headers, make_post, alice, bob) -> None:
    post = await make_post(alice)

    for _ in range(2):
        response = await client.post(f"/api/v1/posts/{post.id}/like", headers=auth_headers(bob))
        assert response.status_code == status.HTTP_200_OK
    assert response.json()["liker_ids"] == [bob.id]

    viewed = await client.get(f"/api/v1/posts/{post.id}", headers=auth_headers(bob))
    assert viewed.json()["likes_count"] == 1
    assert viewed.json()["is_liked"] is True

    unliked = await client.delete(f"/api/v1/posts/{post.id}/like", headers=auth_headers(bob))
    assert unliked.json()["liker_ids"] == []


@pytest.mark.asyncio
async def test_missing_and_malformed_post_ids(client, auth_headers, bob) -> None:
    missing = await client.get("/api/v1/posts/999")
    malformed = await client.post("/api/v1/posts/0/like", headers=auth_headers(bob))

    assert missing.status_code == status.HTTP_404_NOT_FOUND
    assert malformed.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
async def test_repost_and_list_reposts(client, auth_headers, make_post, alice, bob) -> None:
    original = await make_post(alice, "original")

    created = await client.post(
        "/api/v1/posts/",
        json={"body": "", "repost_target_id": original.id},
        headers=auth_headers(bob),
    )
    assert created.status_code == status.HTTP_201_CREATED
    assert created.json()["repost_target"]["id"] == original.id

    reposts = await client.get(f"/api/v1/posts/{original.id}/reposts", headers=auth_headers(bob))
    assert [post["id"] for post in reposts.json()] == [created.json()["id"]]

    viewed = await client.get(f"/api/v1/posts/{original.id}", headers=auth_headers(bob))
    assert viewed.json()["reposts_count"] == 1
    assert viewed.json()["is_reposted"] is True


@pytest.mark.asyncio
async def test_list_likers(client, auth_headers, make_post, alice, bob, carol) -> None:
    post = await make_post(alice)
    for user in (carol, bob):
        await client.post(f"/api/v1/posts/{post.id}/like", headers=auth_headers(user))

    response = await client.get(f"/api/v1/posts/{post.id}/likers", params={"limit": 1})

    assert [user["username"] for user in response.json()] == ["carol"]


@pytest.mark.asyncio
async def test_edit_and_delete_are_author_only(client, auth_headers, make_post, alice, bob) -> None:
    post = await make_post(alice, "mine")

    forbidden = await client.patch(
        f"/api/v1/posts/{post.id}", json={"body": "nope"}, headers=auth_headers(bob)
    )
    assert forbidden.status_code == status.HTTP_401_UNAUTHORIZED

    edited = await client.patch(
        f"/api/v1/posts/{post.id}", json={"body": "edited"}, headers=auth_headers(alice)
    )
    assert edited.json()["body"] == "edited"

    deleted = await client.delete(f"/api/v1/posts/{post.id}", headers=auth_headers(alice))
    assert deleted.status_code == status.HTTP_200_OK
    assert (await client.get(f"/api/v1/posts/{post.id}")).status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_invalid_token_is_treated_as_anonymous_on_reads(client, make_post, alice) -> None:
    post = await make_post(alice)

    response = await client.get(
        f"/api/v1/posts/{post.id}", headers={"Authorization": "Bearer garbage"}
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["is_liked"] is False
