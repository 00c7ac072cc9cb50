"""HTTP surface: SSE relay and aiohttp handlers."""

from think_relay.api.handlers import register_routes
from think_relay.api.sse import encode_sse, relay_events

__all__ = ["register_routes", "encode_sse", "relay_events"]
