"""
Destination client.

A minimal client for a JSON REST store addressed by URL paths, such as
the Firebase Realtime Database REST API. References are immutable:
``child`` builds a new reference and never performs I/O.

Example:
    >>> ref = DestinationRef("https://myapp.firebaseio.com", transport=transport)
    >>> users = ref.child("users")
    >>> await users.child("alice").put({"name": "Alice"})
    >>> await users.child("alice").get()
    {'name': 'Alice'}
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

from livemigrate.config import DestinationConfig
from livemigrate.destination.transport import Transport, redact_url
from livemigrate.observability import (
    ATTR_HTTP_METHOD,
    ATTR_HTTP_URL,
    Tracer,
    create_tracer,
)


class DestinationRef:
    """
    Reference to a location in the destination store.

    Attributes:
        base_url: URL of the referenced location, without ``.json``

    Raises (from request methods):
        DestinationError: If the transport fails; requests are not retried
    """

    def __init__(
        self,
        url: str,
        *,
        secret: str | None = None,
        transport: Transport,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self.base_url = url
        self._secret = secret
        self._transport = transport
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    @classmethod
    def from_config(
        cls,
        config: DestinationConfig,
        transport: Transport,
        *,
        tracer: Tracer | None = None,
    ) -> DestinationRef:
        """Create a root reference from a DestinationConfig."""
        return cls(config.url, secret=config.secret, transport=transport, tracer=tracer)

    def child(self, path: str) -> DestinationRef:
        """
        Get a reference to a location below this one.

        Args:
            path: Relative path, e.g. "users" or "users/alice"

        Raises:
            ValueError: If path is not a non-empty string
        """
        if not isinstance(path, str) or not path:
            raise ValueError("DestinationRef.child() expected a non-empty string")
        if not self.base_url.endswith("/") and not path.startswith("/"):
            path = "/" + path
        return DestinationRef(
            self.base_url + path,
            secret=self._secret,
            transport=self._transport,
            tracer=self._tracer,
        )

    @property
    def url(self) -> str:
        """Full request URL, including the secret when one is set."""
        if self._secret:
            return f"{self.base_url}.json?auth={quote(self._secret, safe='')}"
        return f"{self.base_url}.json"

    async def get(self) -> Any:
        """Read the value here; None if nothing is stored."""
        return await self._request("GET")

    async def put(self, value: Any) -> Any:
        """Replace the value here."""
        return await self._request("PUT", value)

    async def patch(self, value: dict[str, Any]) -> Any:
        """Update the given children, leaving other children untouched."""
        return await self._request("PATCH", value)

    async def post(self, value: Any) -> str:
        """Add a child under a server-generated key and return the key."""
        response = await self._request("POST", value)
        return response["name"]

    async def delete(self) -> None:
        """Remove the value here."""
        await self._request("DELETE")

    async def _request(self, method: str, value: Any = None) -> Any:
        headers: dict[str, str] = {}
        body = None
        if value is not None:
            body = json.dumps(value)
            headers["Content-Type"] = "application/json"

        with self._tracer.span(
            f"livemigrate.destination.{method.lower()}",
            {ATTR_HTTP_METHOD: method, ATTR_HTTP_URL: redact_url(self.url)},
        ):
            return await self._transport.request(method, self.url, headers, body)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DestinationRef):
            return NotImplemented
        return self.base_url == other.base_url and self._secret == other._secret

    def __hash__(self) -> int:
        return hash((self.base_url, self._secret))

    def __repr__(self) -> str:
        return f"DestinationRef({self.base_url!r})"


__all__ = ["DestinationRef"]
