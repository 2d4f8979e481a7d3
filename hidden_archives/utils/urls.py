from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


def add_query_arg(url, **params):
    """Return ``url`` with ``params`` merged into its query string."""
    parts = urlsplit(url)
    query = [(key, value) for key, value in parse_qsl(parts.query, keep_blank_values=True) if key not in params]
    query.extend((key, str(value)) for key, value in params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))


def origin(url):
    parts = urlsplit(url)
    return parts.scheme.lower(), parts.netloc.lower()


def is_same_origin(url, site_url):
    if not url:
        return False
    scheme, netloc = origin(url)
    return bool(netloc) and (scheme, netloc) == origin(site_url)


def host_of(url):
    return (urlsplit(url).hostname or "").lower()


def same_location(url, site_url, path):
    """True when ``url`` points at ``path`` on the site's own host."""
    parts = urlsplit(url)
    if parts.netloc and host_of(url) != host_of(site_url):
        return False
    return parts.path.rstrip("/") == path.rstrip("/")
