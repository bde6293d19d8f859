"""Tests for favorite CRUD endpoints."""

from sqlalchemy.exc import IntegrityError

from favset.api.v1.favorites import CONFLICT_DETAIL, DUPLICATE_URL_DETAIL, conflict_detail
from favset.services.metadata import UrlMetadata
from tests.conftest import register


def create(client, url: str, **fields):
    response = client.post("/api/favorites", json={"url": url, **fields})
    assert response.status_code == 201, response.text
    return response.json()


def test_create_favorite_stores_resolved_metadata(client, user, metadata_service) -> None:
    metadata_service.responses["https://example.com/post"] = UrlMetadata(
        domain="example.com", title="A Post", description="About things"
    )

    data = create(client, "https://example.com/post", rating=4, tags=["reading", " news "])

    assert data["url"] == "https://example.com/post"
    assert data["domain"] == "example.com"
    assert data["title"] == "A Post"
    assert data["description"] == "About things"
    assert data["rating"] == 4
    assert sorted(tag["name"] for tag in data["tags"]) == ["news", "reading"]
    assert metadata_service.calls == ["https://example.com/post"]


def test_create_favorite_minimal(client, user, metadata_service) -> None:
    metadata_service.responses["https://offline.example.net/"] = UrlMetadata(
        domain="offline.example.net"
    )

    data = create(client, "https://offline.example.net/")

    assert data["domain"] == "offline.example.net"
    assert data["title"] is None
    assert data["description"] is None
    assert data["rating"] is None
    assert data["tags"] == []


def test_create_rejects_invalid_url(client, user, metadata_service) -> None:
    response = client.post("/api/favorites", json={"url": "not a url"})
    assert response.status_code == 400
    assert "url" in response.json()["detail"]
    assert metadata_service.calls == []


def test_create_rejects_missing_url(client, user) -> None:
    assert client.post("/api/favorites", json={"rating": 3}).status_code == 400


def test_create_rejects_rating_out_of_range(client, user) -> None:
    for rating in (0, 6):
        response = client.post(
            "/api/favorites", json={"url": "https://example.com/x", "rating": rating}
        )
        assert response.status_code == 400
        assert "rating" in response.json()["detail"]


def test_create_rejects_duplicate_url(client, user, metadata_service) -> None:
    create(client, "https://example.com/dup")
    response = client.post("/api/favorites", json={"url": "https://example.com/dup"})
    assert response.status_code == 409
    assert response.json()["detail"] == "This URL is already in your favorites"
    assert metadata_service.calls == ["https://example.com/dup"]


def test_same_url_allowed_for_different_users(client, user) -> None:
    create(client, "https://example.com/shared")
    client.cookies.clear()
    register(client, "bob@example.com")
    create(client, "https://example.com/shared")


def test_create_reuses_existing_tags(client, user) -> None:
    first = create(client, "https://example.com/1", tags=["python"])
    second = create(client, "https://example.com/2", tags=["python", "python"])
    assert len(second["tags"]) == 1
    assert second["tags"][0]["id"] == first["tags"][0]["id"]


def test_list_favorites(client, user) -> None:
    create(client, "https://example.com/1")
    create(client, "https://other.org/2")

    response = client.get("/api/favorites")

    assert response.status_code == 200
    assert {item["url"] for item in response.json()} == {
        "https://example.com/1",
        "https://other.org/2",
    }


def test_list_favorites_with_search_and_tag_filters(client, user) -> None:
    create(client, "https://github.com/a", tags=["code", "python"])
    create(client, "https://docs.python.org/3/", tags=["python"])
    create(client, "https://youtube.com/watch", tags=["music"])

    by_text = client.get("/api/favorites", params={"q": "GITHUB"}).json()
    assert [item["url"] for item in by_text] == ["https://github.com/a"]

    by_tag = client.get("/api/favorites", params={"tag": "python"}).json()
    assert {item["url"] for item in by_tag} == {
        "https://github.com/a",
        "https://docs.python.org/3/",
    }

    by_tags = client.get("/api/favorites", params=[("tag", "python"), ("tag", "code")]).json()
    assert [item["url"] for item in by_tags] == ["https://github.com/a"]

    by_tag_name_search = client.get("/api/favorites", params={"q": "music"}).json()
    assert [item["url"] for item in by_tag_name_search] == ["https://youtube.com/watch"]


def test_grouped_favorites(client, user) -> None:
    create(client, "https://github.com/a")
    create(client, "https://github.com/b")
    create(client, "https://youtube.com/watch")

    groups = client.get("/api/favorites/grouped").json()

    assert [(group["domain"], group["count"]) for group in groups] == [
        ("github.com", 2),
        ("youtube.com", 1),
    ]
    assert {item["url"] for item in groups[0]["favorites"]} == {
        "https://github.com/a",
        "https://github.com/b",
    }


def test_get_favorite(client, user) -> None:
    created = create(client, "https://example.com/one")
    response = client.get(f"/api/favorites/{created['id']}")
    assert response.status_code == 200
    assert response.json()["url"] == "https://example.com/one"


def test_get_unknown_favorite(client, user) -> None:
    response = client.get("/api/favorites/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404


def test_update_rating(client, user) -> None:
    created = create(client, "https://example.com/r", rating=2)

    response = client.patch(f"/api/favorites/{created['id']}", json={"rating": 5})
    assert response.status_code == 200
    assert response.json()["rating"] == 5

    cleared = client.patch(f"/api/favorites/{created['id']}", json={"rating": None})
    assert cleared.json()["rating"] is None


def test_update_without_rating_keeps_it(client, user) -> None:
    created = create(client, "https://example.com/keep", rating=3, tags=["a"])
    response = client.patch(f"/api/favorites/{created['id']}", json={"tags": ["b"]})
    assert response.json()["rating"] == 3
    assert [tag["name"] for tag in response.json()["tags"]] == ["b"]


def test_update_rejects_rating_out_of_range(client, user) -> None:
    created = create(client, "https://example.com/bad")
    response = client.patch(f"/api/favorites/{created['id']}", json={"rating": 9})
    assert response.status_code == 400


def test_update_replaces_tags(client, user) -> None:
    created = create(client, "https://example.com/t", tags=["one", "two"])

    response = client.patch(
        f"/api/favorites/{created['id']}", json={"tags": ["two", "three", " "]}
    )
    assert sorted(tag["name"] for tag in response.json()["tags"]) == ["three", "two"]

    emptied = client.patch(f"/api/favorites/{created['id']}", json={"tags": []})
    assert emptied.json()["tags"] == []


def test_update_never_resolves_metadata_again(client, user, metadata_service) -> None:
    created = create(client, "https://example.com/once")
    client.patch(f"/api/favorites/{created['id']}", json={"rating": 1})
    assert metadata_service.calls == ["https://example.com/once"]


def test_delete_favorite(client, user) -> None:
    created = create(client, "https://example.com/gone", tags=["temp"])

    response = client.delete(f"/api/favorites/{created['id']}")
    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert client.get(f"/api/favorites/{created['id']}").status_code == 404

    tags = client.get("/api/tags").json()
    assert [(tag["name"], tag["favorite_count"]) for tag in tags] == [("temp", 0)]


def test_favorites_are_isolated_between_users(client, user) -> None:
    created = create(client, "https://example.com/private")

    client.cookies.clear()
    register(client, "mallory@example.com")

    assert client.get("/api/favorites").json() == []
    assert client.get(f"/api/favorites/{created['id']}").status_code == 404
    assert (
        client.patch(f"/api/favorites/{created['id']}", json={"rating": 1}).status_code
        == 404
    )
    assert client.delete(f"/api/favorites/{created['id']}").status_code == 404


def test_metadata_preview(client, user, metadata_service) -> None:
    response = client.get("/api/metadata", params={"url": "https://example.com/x"})
    assert response.status_code == 200
    assert response.json() == {
        "domain": "example.com",
        "title": "Page on example.com",
        "description": None,
    }


def test_metadata_preview_requires_session(client) -> None:
    response = client.get("/api/metadata", params={"url": "https://example.com/x"})
    assert response.status_code == 401


def test_list_is_newest_first_for_back_to_back_creates(client, user) -> None:
    urls = [f"https://example.com/{n}" for n in range(6)]
    for url in urls:
        create(client, url)

    listed = [item["url"] for item in client.get("/api/favorites").json()]
    assert listed == urls[::-1]

    groups = client.get("/api/favorites/grouped").json()
    assert len(groups) == 1
    assert [item["url"] for item in groups[0]["favorites"]] == urls[::-1]


def test_conflict_detail_names_duplicate_url_only_for_that_constraint() -> None:
    def integrity_error(message: str) -> IntegrityError:
        return IntegrityError("INSERT ...", {}, Exception(message))

    assert (
        conflict_detail(integrity_error("UNIQUE constraint failed: favorites.user_id, favorites.url"))
        == DUPLICATE_URL_DETAIL
    )
    assert (
        conflict_detail(integrity_error('duplicate key value violates unique constraint "unique_user_url"'))
        == DUPLICATE_URL_DETAIL
    )
    assert (
        conflict_detail(integrity_error("UNIQUE constraint failed: tags.user_id, tags.name"))
        == CONFLICT_DETAIL
    )
    assert (
        conflict_detail(integrity_error('duplicate key value violates unique constraint "unique_user_tag"'))
        == CONFLICT_DETAIL
    )
