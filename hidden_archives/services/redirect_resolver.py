"""
Decides whether a storefront request for a category archive must be
answered with a permanent redirect, and where to.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional
from urllib.parse import urljoin, urlsplit

from hidden_archives.config import ConfigurationError
from hidden_archives.context import RequestContext
from hidden_archives.utils.urls import host_of, is_same_origin, same_location

logger = logging.getLogger(__name__)


class RedirectPolicy(str, Enum):
    ALWAYS_FALLBACK = "always_fallback"
    REFERRER_AWARE = "referrer_aware"

    @classmethod
    def from_config(cls, value) -> "RedirectPolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(policy.value for policy in cls)
            raise ConfigurationError(
                f"Invalid HPC_REDIRECT_POLICY '{value}'. Valid values are: {valid}"
            ) from None


class ResolverState(Enum):
    NOT_APPLICABLE = "not_applicable"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class RedirectDecision:
    state: ResolverState
    destination: Optional[str] = None
    category_id: Optional[int] = None

    @property
    def should_redirect(self) -> bool:
        return self.state is ResolverState.REDIRECT


NOT_APPLICABLE = RedirectDecision(ResolverState.NOT_APPLICABLE)


class RedirectResolver:
    """
    Args:
        store: anything with ``get(category_id) -> bool``
        router: anything with ``resolve(path) -> Optional[int]`` and
            ``is_archive(path) -> bool``
        policy: where hidden archives send visitors
        fallback_path: site-relative path of the fallback listing page;
            empty means the site root
        allowed_hosts: hosts other than the site's own that redirects
            may point at
    """

    def __init__(
        self,
        store,
        router,
        policy: RedirectPolicy = RedirectPolicy.ALWAYS_FALLBACK,
        fallback_path: Optional[str] = "/shop/",
        allowed_hosts: Iterable[str] = (),
    ):
        self.store = store
        self.router = router
        self.policy = RedirectPolicy.from_config(policy)
        self.fallback_path = fallback_path
        self.allowed_hosts = {host.lower() for host in allowed_hosts}

    def resolve(self, ctx: RequestContext) -> RedirectDecision:
        if ctx.is_admin:
            return NOT_APPLICABLE

        category_id = self.router.resolve(ctx.path)
        if category_id is None:
            return NOT_APPLICABLE

        if not self.store.get(category_id):
            return NOT_APPLICABLE

        return RedirectDecision(
            state=ResolverState.REDIRECT,
            destination=self.destination_for(ctx),
            category_id=category_id,
        )

    def destination_for(self, ctx: RequestContext) -> str:
        candidate = None
        if self.policy is RedirectPolicy.REFERRER_AWARE:
            candidate = self._usable_referrer(ctx)
        if not candidate:
            candidate = self.fallback_url(ctx)
        return self._safe(candidate, ctx)

    def fallback_url(self, ctx: RequestContext) -> str:
        if self.fallback_path:
            return urljoin(ctx.host_url, self.fallback_path)
        return ctx.host_url

    def _usable_referrer(self, ctx: RequestContext) -> Optional[str]:
        referrer = ctx.referrer
        if not referrer or not is_same_origin(referrer, ctx.host_url):
            return None
        # Any archive is rejected here, hidden or not.
        if self.router.is_archive(urlsplit(referrer).path):
            return None
        return referrer

    def _safe(self, destination: str, ctx: RequestContext) -> str:
        parts = urlsplit(destination)
        if parts.netloc:
            host = host_of(destination)
            if parts.scheme not in ("http", "https") or (
                host != host_of(ctx.host_url) and host not in self.allowed_hosts
            ):
                logger.warning(f"Refusing off-site redirect target {destination!r}")
                return ctx.host_url
        if same_location(destination, ctx.host_url, ctx.path):
            return ctx.host_url
        return destination
