"""URL canonicalization shared by signing and verification.

The canonical form of a URL is::

    scheme://authority<path>[?k1=v1&k2=v2...]

Query values are decoded once (form encoding, ``+`` is a space) and are not
re-encoded, parameters keep the order of their first appearance and a
repeated name keeps its last value. The fragment never takes part.
"""

from typing import NamedTuple
from urllib.parse import parse_qsl, unquote_plus, urlsplit

from urlsigner.errors import InvalidURLError


class SplitURL(NamedTuple):
    scheme: str
    authority: str
    path: str
    query: str
    fragment: str


def split_url(url: str) -> SplitURL:
    if not isinstance(url, str) or not url.strip():
        raise InvalidURLError("url is required")
    try:
        parts = urlsplit(url)
        # urlsplit only validates the port lazily
        parts.port
    except ValueError as exc:
        raise InvalidURLError(f"could not parse url: {exc}") from exc

    if not parts.scheme or not parts.hostname:
        raise InvalidURLError("url must include a scheme and a host")

    return SplitURL(parts.scheme, parts.netloc, parts.path, parts.query, parts.fragment)


def parse_query(query: str) -> dict[str, str]:
    if not query:
        return {}
    params: dict[str, str] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        if not key:
            continue
        params[key] = value
    return params


def build_query(params: dict[str, str]) -> str:
    return "&".join(f"{key}={value}" for key, value in params.items())


def canonicalize(url: str, exclude: set[str] | frozenset[str] = frozenset()) -> str:
    parts = split_url(url)
    params = {key: value for key, value in parse_query(parts.query).items() if key not in exclude}

    canonical = f"{parts.scheme}://{parts.authority}{parts.path}"
    query = build_query(params)
    if query:
        canonical += f"?{query}"
    return canonical


def append_query_params(url: str, params: dict[str, str]) -> str:
    """Append ``params`` to ``url`` as the last query parameters.

    Existing parameters with the same names are dropped; every other raw
    query segment is kept byte for byte and in place. A fragment stays at
    the end of the URL.
    """
    base, hash_mark, fragment = url.partition("#")
    base, _, query = base.partition("?")

    kept = []
    for segment in query.split("&"):
        if not segment:
            continue
        name = unquote_plus(segment.split("=", 1)[0])
        if name in params:
            continue
        kept.append(segment)
    kept.extend(f"{key}={value}" for key, value in params.items())

    return f"{base}?{'&'.join(kept)}{hash_mark}{fragment}"
