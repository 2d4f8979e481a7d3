import pytest

from hidden_archives.extensions import db
from hidden_archives.models import Category
from hidden_archives.plugin import get_plugin

pytestmark = pytest.mark.redirect

SHOP_URL = "http://localhost/shop/"


def test_visible_archive_renders(client, dekit):
    response = client.get("/product-category/dekit/")

    assert response.status_code == 200
    assert b"DE Kit" in response.data


def test_hidden_archive_redirects_permanently_to_shop(client, store, dekit):
    store.set(dekit.id, True)

    response = client.get("/product-category/dekit/")

    assert response.status_code == 301
    assert response.headers["Location"] == SHOP_URL
    assert response.data == b""


def test_hidden_archive_without_trailing_slash_redirects(client, store, dekit):
    store.set(dekit.id, True)

    response = client.get("/product-category/dekit")

    assert response.status_code == 301
    assert response.headers["Location"] == SHOP_URL


def test_unhidden_archive_renders_again(client, store, dekit):
    store.set(dekit.id, True)
    store.set(dekit.id, False)

    assert client.get("/product-category/dekit/").status_code == 200


def test_hiding_one_category_leaves_others_visible(client, store, dekit, make_category):
    other = make_category()
    store.set(dekit.id, True)

    assert client.get(f"/product-category/{other.slug}/").status_code == 200
    assert client.get("/shop/").status_code == 200


def test_unknown_category_is_not_found(client):
    response = client.get("/product-category/does-not-exist/")

    assert response.status_code == 404
    assert response.get_json()["status_code"] == 404


def test_shop_lists_hidden_categories(client, store, dekit):
    # Only the archive is hidden, the category itself still exists.
    store.set(dekit.id, True)

    response = client.get("/shop/")

    assert response.status_code == 200
    assert b"DE Kit" in response.data


def test_redirect_carries_request_id(client, store, dekit):
    store.set(dekit.id, True)

    response = client.get("/product-category/dekit/", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 301
    assert response.headers["X-Request-ID"] == "req-123"


def test_same_site_referrer_is_ignored_by_default(client, store, dekit):
    store.set(dekit.id, True)

    response = client.get("/product-category/dekit/", headers={"Referer": "http://localhost/"})

    assert response.headers["Location"] == SHOP_URL


def test_custom_shop_page_path(make_app):
    app = make_app(HPC_SHOP_PAGE_PATH="/catalogue/")
    category = Category(name="DE Kit", slug="dekit")
    db.session.add(category)
    db.session.commit()
    get_plugin(app).store.set(category.id, True)

    response = app.test_client().get("/product-category/dekit/")

    assert response.status_code == 301
    assert response.headers["Location"] == "http://localhost/catalogue/"


class TestReferrerAwarePolicy:
    @pytest.fixture()
    def aware_client(self, make_app):
        app = make_app(HPC_REDIRECT_POLICY="referrer_aware")
        for name, slug in (("DE Kit", "dekit"), ("Filters", "filters")):
            db.session.add(Category(name=name, slug=slug))
        db.session.commit()
        store = get_plugin(app).store
        for category in Category.query.all():
            store.set(category.id, category.slug == "dekit")
        return app.test_client()

    def test_returns_visitor_to_referring_page(self, aware_client):
        response = aware_client.get(
            "/product-category/dekit/",
            headers={"Referer": "http://localhost/?utm=newsletter"},
        )

        assert response.status_code == 301
        assert response.headers["Location"] == "http://localhost/?utm=newsletter"

    def test_archive_referrer_falls_back_to_shop(self, aware_client):
        response = aware_client.get(
            "/product-category/dekit/",
            headers={"Referer": "http://localhost/product-category/filters/"},
        )

        assert response.headers["Location"] == SHOP_URL

    def test_self_referrer_does_not_loop(self, aware_client):
        response = aware_client.get(
            "/product-category/dekit/",
            headers={"Referer": "http://localhost/product-category/dekit/"},
        )

        assert response.headers["Location"] == SHOP_URL

    def test_foreign_referrer_falls_back_to_shop(self, aware_client):
        response = aware_client.get(
            "/product-category/dekit/",
            headers={"Referer": "https://evil.example/phish"},
        )

        assert response.headers["Location"] == SHOP_URL

    def test_missing_referrer_falls_back_to_shop(self, aware_client):
        response = aware_client.get("/product-category/dekit/")

        assert response.headers["Location"] == SHOP_URL
