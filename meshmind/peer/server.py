import logging
import threading
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..agent.core import Agent
from ..errors import MeshMindError
from .wire import JSON_CONTENT_TYPE, PEER_PATH, PeerRequest, PeerResponse

logger = logging.getLogger(__name__)

BAD_REQUEST = "Bad Request"


# ============================================================
# Request Guards
# ============================================================

def require_json(content_type: Optional[str] = Header(None)) -> None:
    """Reject anything that does not declare a JSON body."""

    media_type = (content_type or "").split(";")[0].strip().lower()

    if media_type != JSON_CONTENT_TYPE and not media_type.endswith("+json"):
        logger.warning("[PEER SERVER] Rejected content type: %r", content_type)
        raise HTTPException(status_code=400, detail=BAD_REQUEST)


# ============================================================
# FastAPI App
# ============================================================

def create_peer_app(agent: Agent) -> FastAPI:
    """
    Expose one agent's ``call_agent`` at ``POST /agent``.

    Every failure, whether malformed input or an aborted agent call,
    is reported as a plain 400. The error kind is logged here but
    never sent over the wire.
    """

    app = FastAPI(title=f"MeshMind agent: {agent.name}")

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning("[PEER SERVER] Malformed request: %s", exc.errors())
        return JSONResponse(status_code=400, content={"detail": BAD_REQUEST})

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "agent": agent.name,
            "session": agent.state.value,
            "tools": agent.registry.list_tool_names(),
        }

    @app.post(PEER_PATH, response_model=PeerResponse, dependencies=[Depends(require_json)])
    def call_agent_endpoint(request: PeerRequest):
        try:
            content = agent.call_agent(request.input)

        except MeshMindError as e:
            logger.error(
                "[PEER SERVER] Agent call failed | agent=%s | kind=%s | error=%s",
                agent.name,
                type(e).__name__,
                e,
            )
            raise HTTPException(status_code=400, detail=BAD_REQUEST)

        except Exception:
            logger.exception("[PEER SERVER] Execution failed")
            raise HTTPException(status_code=500, detail="Internal error")

        return PeerResponse(content=content)

    return app


# ============================================================
# Server Lifecycle
# ============================================================

class PeerServer:
    """
    Runs a peer app on a background thread with an explicit lifecycle.

    ``start()`` returns only once the listener accepts connections.
    ``stop()`` asks uvicorn for a graceful shutdown, which lets
    in-flight agent calls finish, then joins the serving thread.
    """

    def __init__(
        self,
        agent: Agent,
        host: str = "127.0.0.1",
        port: int = 8080,
        log_level: str = "warning",
    ) -> None:
        self.agent = agent
        self.host = host
        self.port = port
        self.app = create_peer_app(agent)
        self.ready = threading.Event()

        self._config = uvicorn.Config(
            self.app,
            host=host,
            port=port,
            log_level=log_level,
            lifespan="off",
        )
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, timeout: float = 10.0) -> threading.Event:

        if self.is_running:
            raise RuntimeError(f"Peer server for '{self.agent.name}' is already running.")

        self.ready.clear()
        self._server = uvicorn.Server(self._config)
        self._thread = threading.Thread(
            target=self._server.run,
            name=f"meshmind-peer-{self.agent.name}",
            daemon=True,
        )
        self._thread.start()

        # uvicorn flips `started` once the socket is bound and serving
        waited = 0.0
        while not self._server.started:
            if not self._thread.is_alive():
                raise RuntimeError(f"Peer server failed to start at {self.url}")
            if waited >= timeout:
                self.stop()
                raise RuntimeError(f"Peer server not ready after {timeout}s at {self.url}")
            self._thread.join(0.05)
            waited += 0.05

        self.ready.set()
        logger.info("[PEER SERVER] agent %s running at: %s", self.agent.name, self.url)

        return self.ready

    def stop(self, timeout: Optional[float] = 30.0) -> None:

        if self._server is None:
            return

        self._server.should_exit = True

        if self._thread is not None:
            self._thread.join(timeout)

        self.ready.clear()
        self._server = None
        self._thread = None

        logger.info("[PEER SERVER] agent %s stopped", self.agent.name)

    def serve_forever(self) -> None:
        """Run in the calling thread until interrupted."""
        self._server = uvicorn.Server(self._config)
        self._server.run()

    def __enter__(self) -> "PeerServer":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
