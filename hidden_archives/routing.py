"""
Answers "does this path resolve to a category archive, and which one?"
using the application's own URL map.
"""

from typing import Callable, Optional
from urllib.parse import urlsplit

from werkzeug.exceptions import HTTPException
from werkzeug.routing import RequestRedirect

ARCHIVE_ENDPOINT = "storefront.category_archive"


class ArchiveRouter:
    def __init__(self, url_map, lookup_slug: Callable[[str], Optional[int]], endpoint: str = ARCHIVE_ENDPOINT):
        self.url_map = url_map
        self.lookup_slug = lookup_slug
        self.endpoint = endpoint

    def archive_slug(self, path: str) -> Optional[str]:
        """Slug of the archive route ``path`` matches, or None."""
        adapter = self.url_map.bind("localhost")
        path = urlsplit(path).path or "/"
        try:
            endpoint, values = adapter.match(path, method="GET")
        except RequestRedirect as redirect:
            # Missing trailing slash and similar canonicalisations
            try:
                endpoint, values = adapter.match(urlsplit(redirect.new_url).path, method="GET")
            except HTTPException:
                return None
        except HTTPException:
            return None
        if endpoint != self.endpoint:
            return None
        return values.get("slug")

    def is_archive(self, path: str) -> bool:
        return self.archive_slug(path) is not None

    def resolve(self, path: str) -> Optional[int]:
        """Category id the path is the archive of, or None."""
        slug = self.archive_slug(path)
        if slug is None:
            return None
        return self.lookup_slug(slug)
