"""
Destination store client and transports.
"""

from livemigrate.destination.client import DestinationRef
from livemigrate.destination.transport import (
    AiohttpTransport,
    InMemoryTransport,
    Transport,
    redact_url,
)

__all__ = [
    "DestinationRef",
    "Transport",
    "AiohttpTransport",
    "InMemoryTransport",
    "redact_url",
]
