import logging
from typing import Any, Mapping, Optional, Tuple

import requests
from pydantic import ValidationError

from ..config import peer_url_from_env
from ..errors import TransportError
from ..tools.dispatcher import ToolDispatcher, ToolHandler
from ..tools.registry import ToolRegistry
from ..tools.schema import ToolDescriptor, message_tool
from .wire import JSON_CONTENT_TYPE, PEER_PATH, PeerRequest, PeerResponse

logger = logging.getLogger(__name__)


class PeerClient:
    """
    Synchronous client for another agent's ``POST /agent`` endpoint.

    One request per call: no retry, no circuit breaking. A peer that is
    down, rejects the request, or answers with anything other than a
    PeerResponse produces a TransportError.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._http = session or requests.Session()

    @classmethod
    def from_env(
        cls,
        prefix: str,
        environ: Optional[Mapping[str, str]] = None,
        **kwargs,
    ) -> "PeerClient":
        """Client for the peer at ``<PREFIX>_HOSTNAME:<PREFIX>_PORT``."""
        return cls(peer_url_from_env(prefix, environ), **kwargs)

    @property
    def url(self) -> str:
        return f"{self.base_url}{PEER_PATH}"

    # ============================================================
    # CALL
    # ============================================================

    def call(self, message: str) -> str:

        logger.info("[PEER CLIENT] Calling %s | message=%s", self.url, message)

        body = PeerRequest(input=message).model_dump()

        try:
            response = self._http.post(
                self.url,
                json=body,
                headers={"Content-Type": JSON_CONTENT_TYPE},
                timeout=self.timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"peer transport failure (POST {self.url}): {e}") from e

        if not response.ok:
            raise TransportError(
                f"peer at {self.url} rejected the request: "
                f"{response.status_code} {response.text[:200]}"
            )

        try:
            reply = PeerResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise TransportError(
                f"peer at {self.url} did not return a valid response: {response.text[:200]}"
            ) from e

        return reply.content

    def close(self) -> None:
        self._http.close()


# ============================================================
# COMPOSITION
# ============================================================

def peer_handler(client: PeerClient, tool_name: str = "peer") -> ToolHandler:
    """
    Handler forwarding a tool call's ``message`` argument to a peer.

    TransportError propagates, so a downed peer aborts the calling
    agent's request.
    """

    def handler(args: Mapping[str, Any]) -> str:
        result = client.call(args["message"])
        logger.info("[PEER CLIENT] %s result (capped): %s", tool_name, result[:500])
        return result

    return handler


def peer_tool(
    name: str,
    description: str,
    client: PeerClient,
    message_description: str = "",
) -> Tuple[ToolDescriptor, ToolHandler]:
    """Build a pass-through tool that makes another agent a capability."""

    descriptor = message_tool(name, description, message_description)

    return descriptor, peer_handler(client, name)


def register_peer_tool(
    registry: ToolRegistry,
    dispatcher: ToolDispatcher,
    name: str,
    description: str,
    client: PeerClient,
    message_description: str = "",
) -> ToolDescriptor:

    descriptor, handler = peer_tool(name, description, client, message_description)

    registry.register(descriptor)
    dispatcher.bind(name, handler)

    return descriptor
