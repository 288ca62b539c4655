from pydantic import BaseModel


class PeerRequest(BaseModel):
    """Body of ``POST /agent``. No identifiers: answered on the same connection."""

    input: str


class PeerResponse(BaseModel):
    """Successful reply of ``POST /agent``."""

    content: str


PEER_PATH = "/agent"
JSON_CONTENT_TYPE = "application/json"
