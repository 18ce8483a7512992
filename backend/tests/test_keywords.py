"""Tests for keyword API endpoints."""

from fastapi.testclient import TestClient


class TestKeywordCrud:
    """Tests for /api/keywords."""

    def test_create_returns_keyword(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """Creating a keyword returns the stored record with default weight."""
        response = client.post("/api/keywords", json={"keyword": "ocean"}, headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["keyword"] == "ocean"
        assert data["weight"] == 1.0
        assert data["search_results"] is None

    def test_list_is_newest_first(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """Keywords are listed newest first."""
        for word in ["first", "second", "third"]:
            client.post("/api/keywords", json={"keyword": word}, headers=auth_headers)

        response = client.get("/api/keywords", headers=auth_headers)

        assert response.status_code == 200
        assert [k["keyword"] for k in response.json()] == ["third", "second", "first"]

    def test_list_is_scoped_to_user(
        self,
        client: TestClient,
        auth_headers: dict[str, str],
        other_auth_headers: dict[str, str],
    ) -> None:
        """Users only see their own keywords."""
        client.post("/api/keywords", json={"keyword": "mine"}, headers=auth_headers)

        response = client.get("/api/keywords", headers=other_auth_headers)

        assert response.json() == []

    def test_update(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """Updating a keyword changes only the given fields."""
        keyword_id = client.post("/api/keywords", json={"keyword": "ocean"}, headers=auth_headers).json()["id"]

        response = client.put(f"/api/keywords/{keyword_id}", json={"weight": 1.5}, headers=auth_headers)

        assert response.json() == {"success": True}
        keyword = client.get("/api/keywords", headers=auth_headers).json()[0]
        assert keyword["weight"] == 1.5
        assert keyword["keyword"] == "ocean"

    def test_update_rejects_out_of_range_weight(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """Weights outside [0.1, 2.0] are rejected."""
        keyword_id = client.post("/api/keywords", json={"keyword": "ocean"}, headers=auth_headers).json()["id"]

        response = client.put(f"/api/keywords/{keyword_id}", json={"weight": 5}, headers=auth_headers)

        assert response.status_code == 422

    def test_other_user_cannot_update(
        self,
        client: TestClient,
        auth_headers: dict[str, str],
        other_auth_headers: dict[str, str],
    ) -> None:
        """Updates to another user's keyword are ignored."""
        keyword_id = client.post("/api/keywords", json={"keyword": "ocean"}, headers=auth_headers).json()["id"]

        client.put(f"/api/keywords/{keyword_id}", json={"keyword": "stolen"}, headers=other_auth_headers)

        assert client.get("/api/keywords", headers=auth_headers).json()[0]["keyword"] == "ocean"

    def test_delete(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """Deleting removes the keyword; deleting again still succeeds."""
        keyword_id = client.post("/api/keywords", json={"keyword": "ocean"}, headers=auth_headers).json()["id"]

        first = client.delete(f"/api/keywords/{keyword_id}", headers=auth_headers)
        second = client.delete(f"/api/keywords/{keyword_id}", headers=auth_headers)

        assert first.json() == {"success": True}
        assert second.json() == {"success": True}
        assert client.get("/api/keywords", headers=auth_headers).json() == []

    def test_empty_keyword_rejected(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """Empty keywords fail validation."""
        response = client.post("/api/keywords", json={"keyword": ""}, headers=auth_headers)

        assert response.status_code == 422

    def test_too_long_keyword_rejected(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        """Keywords longer than 255 characters fail validation."""
        response = client.post("/api/keywords", json={"keyword": "x" * 256}, headers=auth_headers)

        assert response.status_code == 422
