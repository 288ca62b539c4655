"""
Peer RPC layer: agents served over HTTP and agents used as tools.
"""

from .wire import PeerRequest, PeerResponse
from .client import PeerClient, peer_handler, peer_tool, register_peer_tool
from .server import PeerServer, create_peer_app

__all__ = [
    "PeerRequest",
    "PeerResponse",
    "PeerClient",
    "PeerServer",
    "create_peer_app",
    "peer_handler",
    "peer_tool",
    "register_peer_tool",
]
