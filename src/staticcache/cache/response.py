"""Response sinks that cached artifacts are streamed into.

:meth:`~staticcache.cache.StaticCache.serve` only needs somewhere to set
headers and write bytes. Any object with a mutable ``headers`` mapping and
a ``write(bytes)`` method qualifies -- a WSGI/ASGI adapter, a socket
wrapper, or the in-memory :class:`BufferedResponse` used by
:class:`~staticcache.handler.CachingHandler` and the tests.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Protocol, runtime_checkable

import httpx


@runtime_checkable
class ResponseSink(Protocol):
    """Structural type of anything a cached artifact can be written to.

    The status code is implicitly 200 for a cache hit; sinks that track a
    status should default to it.
    """

    headers: MutableMapping[str, str]

    def write(self, data: bytes) -> object: ...


class BufferedResponse:
    """In-memory HTTP response collecting status, headers, and body.

    Headers are stored in an :class:`httpx.Headers` so lookups are
    case-insensitive, as they are on the wire.

    Example::

        sink = BufferedResponse()
        cache.serve(sink, entry)
        sink.headers["content-type"]   # "text/css"
        sink.body                      # b"body { ... }"
    """

    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.headers: httpx.Headers = httpx.Headers()
        self._chunks: list[bytes] = []

    def write(self, data: bytes) -> int:
        """Append *data* to the body and return the number of bytes written."""
        self._chunks.append(bytes(data))
        return len(data)

    @property
    def body(self) -> bytes:
        """Everything written so far, joined into one ``bytes`` object."""
        return b"".join(self._chunks)

    def __repr__(self) -> str:
        return f"BufferedResponse(status_code={self.status_code}, bytes={len(self.body)})"
