"""
Unit tests for DestinationRef.

Tests cover:
- URL building and child references
- Read/write operations against InMemoryTransport
- Request bodies and headers
- Authentication failures
"""

import pytest

from livemigrate.config import DestinationConfig
from livemigrate.destination import DestinationRef, InMemoryTransport
from livemigrate.exceptions import DestinationError
from livemigrate.observability import MockTracer


class TestReferences:
    """Tests for building references."""

    def test_url_without_secret(self, destination: DestinationRef) -> None:
        assert destination.url == "https://example.firebaseio.com.json"

    def test_url_with_secret_is_quoted(self, transport: InMemoryTransport) -> None:
        ref = DestinationRef("https://example.firebaseio.com", secret="a/b c", transport=transport)

        assert ref.child("users").url == "https://example.firebaseio.com/users.json?auth=a%2Fb%20c"

    def test_child_inserts_separator(self, destination: DestinationRef) -> None:
        assert destination.child("users").base_url == "https://example.firebaseio.com/users"
        assert (
            destination.child("users").child("/alice").base_url
            == "https://example.firebaseio.com/users/alice"
        )

    def test_child_keeps_trailing_slash(self, transport: InMemoryTransport) -> None:
        ref = DestinationRef("https://example.firebaseio.com/", transport=transport)

        assert ref.child("users").base_url == "https://example.firebaseio.com/users"

    @pytest.mark.parametrize("path", ["", None, 42])
    def test_child_rejects_invalid_path(self, destination: DestinationRef, path: object) -> None:
        with pytest.raises(ValueError):
            destination.child(path)  # type: ignore[arg-type]

    def test_equality(self, transport: InMemoryTransport) -> None:
        a = DestinationRef("https://x.firebaseio.com", transport=transport).child("users")
        b = DestinationRef("https://x.firebaseio.com/users", transport=transport)

        assert a == b
        assert hash(a) == hash(b)
        assert repr(a) == "DestinationRef('https://x.firebaseio.com/users')"

    def test_from_config(self, transport: InMemoryTransport) -> None:
        config = DestinationConfig("https://myapp.firebaseio.com", secret="s3cret")

        ref = DestinationRef.from_config(config, transport)

        assert ref.url == "https://myapp.firebaseio.com.json?auth=s3cret"


class TestOperations:
    """Tests for destination reads and writes."""

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, destination: DestinationRef) -> None:
        assert await destination.child("users/alice").get() is None

    @pytest.mark.asyncio
    async def test_put_then_get(self, destination: DestinationRef) -> None:
        ref = destination.child("users/alice")

        await ref.put({"name": "Alice", "age": 30})

        assert await ref.get() == {"name": "Alice", "age": 30}
        assert await destination.child("users").get() == {"alice": {"name": "Alice", "age": 30}}

    @pytest.mark.asyncio
    async def test_patch_merges_children(self, destination: DestinationRef) -> None:
        ref = destination.child("users/alice")
        await ref.put({"name": "Alice", "age": 30})

        await ref.patch({"age": 31, "city": "Oslo"})

        assert await ref.get() == {"name": "Alice", "age": 31, "city": "Oslo"}

    @pytest.mark.asyncio
    async def test_post_returns_generated_key(self, destination: DestinationRef) -> None:
        ref = destination.child("logs")

        key = await ref.post({"event": "imported"})

        assert key
        assert await ref.child(key).get() == {"event": "imported"}

    @pytest.mark.asyncio
    async def test_delete(self, destination: DestinationRef, transport: InMemoryTransport) -> None:
        await destination.child("users/alice").put({"name": "Alice"})

        await destination.child("users/alice").delete()

        assert await destination.child("users/alice").get() is None
        assert transport.data == {}

    @pytest.mark.asyncio
    async def test_requests_are_recorded(
        self, destination: DestinationRef, transport: InMemoryTransport
    ) -> None:
        await destination.child("users/alice").put({"name": "Alice"})
        await destination.child("users/alice").get()

        assert transport.requests == [
            ("PUT", "https://example.firebaseio.com/users/alice.json", {"name": "Alice"}),
            ("GET", "https://example.firebaseio.com/users/alice.json", None),
        ]

    @pytest.mark.asyncio
    async def test_body_is_json_with_content_type(self) -> None:
        seen: list[tuple[dict, str | None]] = []

        class CapturingTransport:
            async def request(self, method, url, headers, body):
                seen.append((headers, body))
                return None

        ref = DestinationRef("https://x.firebaseio.com", transport=CapturingTransport())

        await ref.put({"a": 1})
        await ref.get()

        assert seen == [({"Content-Type": "application/json"}, '{"a": 1}'), ({}, None)]

    @pytest.mark.asyncio
    async def test_wrong_secret_is_rejected(self) -> None:
        transport = InMemoryTransport(secret="right")
        ref = DestinationRef("https://x.firebaseio.com", secret="wrong", transport=transport)

        with pytest.raises(DestinationError) as exc_info:
            await ref.child("users").get()

        assert exc_info.value.status == 401
        assert "wrong" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_request_span_redacts_secret(self) -> None:
        tracer = MockTracer()
        transport = InMemoryTransport(secret="s3cret")
        ref = DestinationRef(
            "https://x.firebaseio.com", secret="s3cret", transport=transport, tracer=tracer
        )

        await ref.child("users").put({"a": 1})

        assert tracer.span_names == ["livemigrate.destination.put"]
        assert "s3cret" not in str(tracer.spans)
