"""Tests for category API endpoints."""


def create(client, name, **fields):
    response = client.post("/api/categories", json={"name": name, **fields})
    assert response.status_code == 201
    return response.json()["id"]


class TestCategoryEndpoints:
    def test_list_in_display_order(self, auth_client):
        create(auth_client, "A", order=2)
        create(auth_client, "B", order=0)
        create(auth_client, "C", order=1)

        response = auth_client.get("/api/categories")

        assert response.status_code == 200
        assert [c["name"] for c in response.json()["categories"]] == ["B", "C", "A"]

    def test_create_and_get(self, auth_client):
        category_id = create(
            auth_client, "Worship", description="Slow songs", icon_url="/assets/w.png"
        )

        data = auth_client.get(f"/api/categories/{category_id}").json()

        assert data["name"] == "Worship"
        assert data["description"] == "Slow songs"
        assert data["icon_url"] == "/assets/w.png"
        assert data["order"] == 0

    def test_blank_name_is_bad_request(self, auth_client):
        response = auth_client.post("/api/categories", json={"name": "  "})
        assert response.status_code == 400
        assert "name" in response.json()["detail"]

    def test_negative_order_is_bad_request(self, auth_client):
        response = auth_client.post("/api/categories", json={"name": "X", "order": -1})
        assert response.status_code == 400

    def test_get_missing(self, auth_client):
        assert auth_client.get("/api/categories/missing").status_code == 404

    def test_partial_update(self, auth_client):
        category_id = create(auth_client, "Praise", description="Upbeat", order=4)

        response = auth_client.patch(
            f"/api/categories/{category_id}", json={"description": ""}
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Praise"
        assert response.json()["description"] is None
        assert response.json()["order"] == 4

    def test_update_missing(self, auth_client):
        response = auth_client.patch("/api/categories/missing", json={"name": "X"})
        assert response.status_code == 404

    def test_delete(self, auth_client):
        category_id = create(auth_client, "Praise")

        assert auth_client.delete(f"/api/categories/{category_id}").status_code == 200
        assert auth_client.get(f"/api/categories/{category_id}").status_code == 404
        assert auth_client.delete(f"/api/categories/{category_id}").status_code == 404

    def test_category_songs(self, auth_client):
        worship = create(auth_client, "Worship")
        auth_client.post(
            "/api/songs",
            data={"title": "Song", "lyrics": "<p>x</p>", "category_ids": [worship]},
        )

        response = auth_client.get(f"/api/categories/{worship}/songs")

        assert response.status_code == 200
        assert [s["title"] for s in response.json()["songs"]] == ["Song"]
