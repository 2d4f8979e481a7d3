from unittest.mock import patch

from hidden_archives.errors import CategoryNotFound, StorageError
from hidden_archives.models import Category


def test_not_found_is_json(client):
    response = client.get("/no/such/page")

    assert response.status_code == 404
    body = response.get_json()
    assert body["error"] == "Not Found"
    assert body["status_code"] == 404


def test_unknown_category_message(client):
    body = client.get("/product-category/ghost/").get_json()

    assert body["message"] == "No product category with slug 'ghost'"


def test_storage_failure_on_storefront_is_service_unavailable(client, store, dekit):
    with patch.object(store, "get", side_effect=StorageError("Could not read archive flag")):
        response = client.get("/product-category/dekit/")

    assert response.status_code == 503
    body = response.get_json()
    assert body["error"] == "Service Unavailable"
    assert "Could not read" not in body["message"]


def test_storage_failure_on_toggle_is_service_unavailable(client, store, nonces, auth_headers, dekit):
    from hidden_archives.plugin import toggle_action

    token = nonces.create(toggle_action(dekit.id), "1")
    with patch.object(store, "set", side_effect=StorageError("disk I/O error")):
        response = client.get(
            f"/admin/categories?action=toggle&entity_id={dekit.id}&new_value=1&_token={token}",
            headers=auth_headers,
        )

    assert response.status_code == 503


def test_unexpected_error_is_generic_500(client):
    with patch.object(Category, "find_by_slug", side_effect=RuntimeError("boom")):
        response = client.get("/product-category/dekit/")

    assert response.status_code == 500
    body = response.get_json()
    assert body["error"] == "Internal Server Error"
    assert "boom" not in response.get_data(as_text=True)


def test_category_not_found_message():
    error = CategoryNotFound("dekit")

    assert str(error) == "Category not found: dekit"
    assert error.slug == "dekit"


def test_security_headers(client):
    response = client.get("/")

    assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Request-ID"]
