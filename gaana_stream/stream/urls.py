"""
URL helpers for resolving playlist and segment references.
"""

_ABSOLUTE_PREFIXES = ("http://", "https://")


def base_path(url: str) -> str:
    """
    Returns the directory prefix of a URL: everything up to and including the
    last '/' once the query string has been removed.
    """
    without_query = url.split("?", 1)[0]
    last_slash = without_query.rfind("/")
    if last_slash == -1:
        return without_query
    return without_query[: last_slash + 1]


def origin(url: str) -> str | None:
    """Returns scheme and authority (e.g. 'https://host') or None if there is no scheme."""
    scheme_end = url.find("://")
    if scheme_end == -1:
        return None
    path_start = url.find("/", scheme_end + 3)
    if path_start == -1:
        return url.split("?", 1)[0]
    return url[:path_start]


def resolve_url(base_url: str, reference: str) -> str:
    """
    Resolves a playlist reference against the URL of the playlist containing it.

    Absolute http(s) references pass through unchanged, root-relative ones are
    joined to the origin of the base, and anything else is appended to the
    base's directory prefix.
    """
    if reference.startswith(_ABSOLUTE_PREFIXES):
        return reference
    if reference.startswith("/"):
        base_origin = origin(base_url)
        if base_origin is not None:
            return base_origin + reference
    return base_path(base_url) + reference
