from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

ASYNC_DRIVER = "postgresql+asyncpg"


def normalize_database_url(url: str) -> str:
    """Point plain Postgres URLs at the asyncpg driver.

    Hosted providers hand out ``postgres://...?sslmode=require`` URLs; asyncpg
    does not understand ``sslmode`` and expects ``ssl`` instead.
    """
    url = (url or "").strip()
    if not url:
        return url

    parts = urlsplit(url)
    scheme = parts.scheme
    if scheme in {"postgres", "postgresql", "postgresql+psycopg", "postgresql+psycopg2"}:
        scheme = ASYNC_DRIVER
    if scheme != ASYNC_DRIVER:
        return url

    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    sslmode_key = next((key for key in query if key.lower() == "sslmode"), None)
    if sslmode_key is not None:
        sslmode = query.pop(sslmode_key).lower().strip()
        if "ssl" not in query and sslmode and sslmode != "disable":
            query["ssl"] = sslmode

    new_query = urlencode(query, doseq=True)
    return urlunsplit((scheme, parts.netloc, parts.path, new_query, parts.fragment))
