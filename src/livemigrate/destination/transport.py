"""
Transports for the destination client.

A transport performs one HTTP request against the destination's REST
API and returns the decoded JSON response. Two implementations ship:

- AiohttpTransport: real HTTP via aiohttp
- InMemoryTransport: a JSON tree in memory that behaves like the
  destination's REST API, for tests and development
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol, runtime_checkable
from urllib.parse import parse_qs, urlsplit, urlunsplit
from uuid import uuid4

import aiohttp

from livemigrate.exceptions import DestinationError

logger = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    """Performs a single request and returns the decoded JSON body."""

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: str | None,
    ) -> Any: ...


def redact_url(url: str) -> str:
    """Mask the ``auth`` query parameter of a destination URL."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    query = "&".join(
        "auth=***" if pair.startswith("auth=") else pair for pair in parts.query.split("&")
    )
    return urlunsplit(parts._replace(query=query))


class AiohttpTransport:
    """
    HTTP transport backed by an aiohttp ClientSession.

    The session is created lazily on first use unless one is passed in.
    Sessions created here are closed by ``close()`` or when leaving the
    async context manager; passed-in sessions belong to the caller.

    Example:
        >>> async with AiohttpTransport(timeout=10.0) as transport:
        ...     ref = DestinationRef("https://myapp.firebaseio.com", transport=transport)
        ...     await ref.child("users/1").put({"name": "Ada"})
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        *,
        timeout: float = 30.0,
    ) -> None:
        self._session = session
        self._owns_session = session is None
        self._timeout = timeout

    async def __aenter__(self) -> AiohttpTransport:
        self._ensure_session()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if this transport created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: str | None,
    ) -> Any:
        session = self._ensure_session()
        logger.debug("%s %s", method, redact_url(url))
        try:
            async with session.request(method, url, headers=headers, data=body) as response:
                if response.status >= 400:
                    text = await response.text()
                    raise DestinationError(method, redact_url(url), text, response.status)
                return await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise DestinationError(method, redact_url(url), str(e)) from e
        except asyncio.TimeoutError as e:
            raise DestinationError(method, redact_url(url), "request timed out") from e


class InMemoryTransport:
    """
    In-memory stand-in for the destination's REST API.

    Data is one JSON tree. URLs address nodes by path (the ``.json``
    suffix is dropped). Semantics follow the REST API:

    - GET returns the node or None
    - PUT replaces the node; putting None deletes it
    - PATCH merges the given children into the node
    - POST adds a child under a generated key and returns ``{"name": key}``
    - DELETE removes the node

    Empty objects are pruned, so a node with no children reads as None.

    Attributes:
        requests: Every (method, url, body) handled, in order
    """

    def __init__(self, *, secret: str | None = None) -> None:
        self._root: Any = {}
        self._secret = secret
        self._lock = asyncio.Lock()
        self.requests: list[tuple[str, str, Any]] = []

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: str | None,
    ) -> Any:
        value = json.loads(body) if body is not None else None
        self.requests.append((method, url, value))

        parts = urlsplit(url)
        if self._secret is not None:
            auth = parse_qs(parts.query).get("auth", [None])[0]
            if auth != self._secret:
                raise DestinationError(method, redact_url(url), "Permission denied", 401)

        path = parts.path
        if path.endswith(".json"):
            path = path[: -len(".json")]
        segments = [segment for segment in path.split("/") if segment]

        async with self._lock:
            if method == "GET":
                return self.get_path(segments)
            if method == "PUT":
                self._set(segments, value)
                return value
            if method == "PATCH":
                if not isinstance(value, dict):
                    raise DestinationError(method, redact_url(url), "PATCH requires an object", 400)
                for key, child in value.items():
                    self._set([*segments, *[s for s in key.split("/") if s]], child)
                return value
            if method == "POST":
                key = uuid4().hex
                self._set([*segments, key], value)
                return {"name": key}
            if method == "DELETE":
                self._set(segments, None)
                return None
        raise DestinationError(method, redact_url(url), "Method not allowed", 405)

    def get_path(self, segments: list[str]) -> Any:
        """Read the node at a path without going through a request."""
        node: Any = self._root
        for segment in segments:
            if not isinstance(node, dict) or segment not in node:
                return None
            node = node[segment]
        return json.loads(json.dumps(node)) if node != {} else None

    @property
    def data(self) -> Any:
        """A copy of the whole tree."""
        return json.loads(json.dumps(self._root))

    def _set(self, segments: list[str], value: Any) -> None:
        if not segments:
            self._root = {} if value is None else value
            return

        if not isinstance(self._root, dict):
            self._root = {}
        node = self._root
        parents: list[tuple[dict[str, Any], str]] = []
        for segment in segments[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            parents.append((node, segment))
            node = child

        last = segments[-1]
        if value is None or value == {}:
            node.pop(last, None)
        else:
            node[last] = value

        # Prune emptied parents, deepest first.
        for parent, segment in reversed(parents):
            if parent[segment] == {}:
                del parent[segment]
            else:
                break


__all__ = [
    "Transport",
    "AiohttpTransport",
    "InMemoryTransport",
    "redact_url",
]
