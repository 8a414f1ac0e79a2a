import httpx

__all__ = ["create_http_client"]

_CUSTOM_HEADERS = {"User-Agent": "podcaster/1.0"}

# No cap on simultaneous connections; every download runs at once.
_UNBOUNDED_LIMITS = httpx.Limits(max_connections=None, max_keepalive_connections=20)


def create_http_client(
    timeout: float | None = 60,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the client shared by every feed fetch and download of a run.

    `timeout` applies to each network operation (connect, read, write), not to a whole
    transfer. 0 or None disables it.
    """
    return httpx.AsyncClient(
        headers=_CUSTOM_HEADERS,
        timeout=httpx.Timeout(timeout or None),
        limits=_UNBOUNDED_LIMITS,
        follow_redirects=True,
        transport=transport,
    )
