import pytest

from hidden_archives.config import ConfigurationError
from hidden_archives.context import RequestContext
from hidden_archives.services.redirect_resolver import (
    RedirectPolicy,
    RedirectResolver,
    ResolverState,
)

SITE = "http://shop.test/"
SHOP = "http://shop.test/shop/"


class FakeStore:
    def __init__(self, hidden=()):
        self.hidden = set(hidden)

    def get(self, category_id):
        return category_id in self.hidden


class FakeRouter:
    ARCHIVES = {
        "/product-category/dekit/": 1,
        "/product-category/other-hidden/": 2,
        "/product-category/visible/": 3,
    }

    def resolve(self, path):
        return self.ARCHIVES.get(path)

    def is_archive(self, path):
        return path.startswith("/product-category/")


def ctx_for(path, referrer=None, is_admin=False):
    return RequestContext(
        path=path,
        url=SITE.rstrip("/") + path,
        host_url=SITE,
        referrer=referrer,
        is_admin=is_admin,
    )


def resolver(hidden=(1, 2), **kwargs):
    return RedirectResolver(FakeStore(hidden), FakeRouter(), **kwargs)


def test_visible_archive_is_not_applicable():
    decision = resolver(hidden=()).resolve(ctx_for("/product-category/dekit/"))

    assert decision.state is ResolverState.NOT_APPLICABLE
    assert decision.destination is None
    assert not decision.should_redirect


def test_hidden_archive_redirects_to_shop():
    decision = resolver().resolve(ctx_for("/product-category/dekit/"))

    assert decision.state is ResolverState.REDIRECT
    assert decision.destination == SHOP
    assert decision.category_id == 1


def test_admin_requests_never_redirect():
    decision = resolver().resolve(ctx_for("/product-category/dekit/", is_admin=True))

    assert decision.state is ResolverState.NOT_APPLICABLE


@pytest.mark.parametrize("path", ["/", "/shop/", "/about", "/product-category/unknown/"])
def test_non_archive_or_unknown_paths_are_not_applicable(path):
    assert resolver().resolve(ctx_for(path)).state is ResolverState.NOT_APPLICABLE


@pytest.mark.parametrize("fallback_path", ["", None])
def test_missing_fallback_page_uses_site_root(fallback_path):
    decision = resolver(fallback_path=fallback_path).resolve(ctx_for("/product-category/dekit/"))

    assert decision.destination == SITE


def test_always_fallback_ignores_referrer():
    decision = resolver().resolve(ctx_for("/product-category/dekit/", referrer="http://shop.test/about"))

    assert decision.destination == SHOP


def test_referrer_aware_uses_same_site_referrer():
    decision = resolver(policy=RedirectPolicy.REFERRER_AWARE).resolve(
        ctx_for("/product-category/dekit/", referrer="http://shop.test/about")
    )

    assert decision.destination == "http://shop.test/about"


def test_referrer_aware_rejects_hidden_archive_referrer():
    decision = resolver(policy=RedirectPolicy.REFERRER_AWARE).resolve(
        ctx_for("/product-category/dekit/", referrer="http://shop.test/product-category/other-hidden/")
    )

    assert decision.destination == SHOP


def test_referrer_aware_rejects_any_archive_referrer():
    # Visible archives are rejected too: the check looks at the view type only.
    decision = resolver(policy=RedirectPolicy.REFERRER_AWARE).resolve(
        ctx_for("/product-category/dekit/", referrer="http://shop.test/product-category/visible/")
    )

    assert decision.destination == SHOP


@pytest.mark.parametrize("referrer", [
    "https://elsewhere.example/about",
    "https://shop.test/about",
    "//shop.test.evil/about",
    "",
    None,
])
def test_referrer_aware_falls_back_for_foreign_or_missing_referrer(referrer):
    decision = resolver(policy="referrer_aware").resolve(
        ctx_for("/product-category/dekit/", referrer=referrer)
    )

    assert decision.destination == SHOP


def test_fallback_equal_to_archive_does_not_loop():
    decision = resolver(fallback_path="/product-category/dekit/").resolve(ctx_for("/product-category/dekit/"))

    assert decision.destination == SITE


def test_off_site_fallback_is_replaced_by_site_root():
    decision = resolver(fallback_path="https://elsewhere.example/shop/").resolve(
        ctx_for("/product-category/dekit/")
    )

    assert decision.destination == SITE


def test_allowed_hosts_may_receive_redirects():
    decision = resolver(
        fallback_path="https://store.example/shop/",
        allowed_hosts=["Store.Example"],
    ).resolve(ctx_for("/product-category/dekit/"))

    assert decision.destination == "https://store.example/shop/"


@pytest.mark.parametrize("policy", list(RedirectPolicy))
@pytest.mark.parametrize("fallback_path", ["/shop/", "", "/product-category/dekit/"])
@pytest.mark.parametrize("referrer", [None, "http://shop.test/product-category/dekit/", "http://shop.test/about"])
def test_redirect_destination_is_never_the_archive(policy, fallback_path, referrer):
    ctx = ctx_for("/product-category/dekit/", referrer=referrer)
    decision = resolver(policy=policy, fallback_path=fallback_path).resolve(ctx)

    assert decision.should_redirect
    assert decision.destination
    assert decision.destination != ctx.url


def test_policy_from_config_accepts_names_and_members():
    assert RedirectPolicy.from_config(" Referrer_Aware ") is RedirectPolicy.REFERRER_AWARE
    assert RedirectPolicy.from_config(RedirectPolicy.ALWAYS_FALLBACK) is RedirectPolicy.ALWAYS_FALLBACK


def test_policy_from_config_rejects_unknown_values():
    with pytest.raises(ConfigurationError, match="always_fallback, referrer_aware"):
        RedirectPolicy.from_config("sometimes")
