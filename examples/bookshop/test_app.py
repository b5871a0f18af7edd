"""Tests for the bookshop example — generated routes over a small schema."""

from ottoman.testing import TestClient


class TestQueries:
    async def test_list_books(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/api/books")
            assert response.status == 200
            assert [b["title"] for b in response.json()] == ["The Hobbit", "Dune"]

    async def test_filter_by_genre(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/api/books?genre=scifi")
            assert response.json() == [{"id": "2", "title": "Dune", "genre": "scifi"}]

    async def test_book_by_id(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/api/book/1")
            assert response.json()["title"] == "The Hobbit"


class TestMutations:
    async def test_add_book(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post("/api/add-book", json={"title": "Emma", "genre": "classic"})
            assert response.status == 200
            assert response.json() == {"id": "3", "title": "Emma", "genre": "classic"}

    async def test_missing_required_argument(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post("/api/add-book", json={})
            assert response.status == 500
            assert "title" in response.json()["message"]


class TestWebhooks:
    async def test_subscribe_and_unsubscribe(self, example_app) -> None:
        async with TestClient(example_app) as client:
            started = await client.post(
                "/api/webhook",
                json={"subscription": "onBook", "variables": {"genre": "scifi"}, "url": "http://localhost:9/hook"},
            )
            assert started.status == 200
            subscription_id = started.json()["id"]

            stopped = await client.delete(f"/api/webhook/{subscription_id}")
            assert stopped.json() == {"id": subscription_id}
