"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the layers together. For every accepted connection:

    ┌──────────────┐   ┌──────────────┐   ┌──────────────┐   ┌──────────────┐
    │ Connection   │──►│ RequestParser│──►│ Router       │──►│ Connection   │
    │ read_request │   │ parse        │   │ handle       │   │ send_response│
    └──────────────┘   └──────────────┘   └──────────────┘   └──────────────┘
      raw bytes          HTTPRequest        HTTPResponse        bytes, close

=============================================================================
ERROR MAPPING
=============================================================================

    ┌───────────────────────────────┬─────────────────────────────────────┐
    │ What went wrong               │ What the client gets                │
    ├───────────────────────────────┼─────────────────────────────────────┤
    │ Client sent nothing           │ nothing, socket closed              │
    │ No request line               │ 400 text/plain "Petición inválida"  │
    │ Request over max size         │ 413 text/plain                      │
    │ Handler raised                │ 500 HTML error page (logged)        │
    │ Send failed                   │ logged, socket closed               │
    └───────────────────────────────┴─────────────────────────────────────┘

No exception escapes a connection: whatever happens, the socket is closed
and the accept loop moves on to the next client.

=============================================================================
"""

import logging
import time
from typing import Optional

from .access_log import AccessLogger
from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, RequestTooLargeError
from .http import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    HTTPResponse,
    HTTPStatus,
    Router,
    ResponseBuilder,
    internal_error,
    payload_too_large,
)
from .inventory.render import render_error_page

logger = logging.getLogger(__name__)

HANDLER_ERROR_MESSAGE = "No se pudo procesar la petición."


class HTTPServer:
    """
    Sequential HTTP/1.1 server: one connection at a time, one request
    per connection.

    =========================================================================
    USAGE
    =========================================================================

        router = Router()

        @router.get("/")
        def index(request):
            return ok_html("<h1>Hola</h1>")

        server = HTTPServer(ServerConfig(port=8080), router)
        server.run()   # Blocks until Ctrl+C / SIGTERM

    Most callers use costtracker.app.create_app(), which builds the router
    with the inventory routes already registered.

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        """
        Initialize the HTTP server.

        Args:
            config: Server configuration. Uses defaults if not provided.
            router: Routes to dispatch to. An empty router answers every
                    request with the 404 page.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser()
        self._router = router or Router()
        self._access_log = AccessLogger(log_format=self.config.log_format)

    @property
    def router(self) -> Router:
        return self._router

    @property
    def socket_server(self) -> SocketServer:
        return self._socket_server

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Returns once shutdown() is called or SIGINT/SIGTERM arrives.
        """
        self._setup_logging()

        logger.info(f"Starting cost tracker on {self.config.host}:{self.config.port}")
        for route in self._router.routes:
            logger.debug(f"  {route.method:<5} {route.path}")

        try:
            self._socket_server.start(self.process_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Ask the accept loop to stop after the current connection."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("costtracker").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def process_connection(self, conn: Connection):
        """
        Serve one connection: read, respond, close.

        Runs on the accept loop's thread. Never raises.
        """
        with conn:  # Context manager ensures connection is closed
            try:
                self._serve(conn)
            except Exception as e:
                logger.exception(f"[{conn.id}] Connection error: {e}")

    def _serve(self, conn: Connection):
        try:
            raw_request = conn.read_request()
        except RequestTooLargeError as e:
            logger.warning(f"[{conn.id}] {e}")
            self._send(conn, None, payload_too_large(str(e)), time.time())
            return

        started = time.time()
        conn.state = ConnectionState.PROCESSING

        request, response = self.respond(raw_request, conn.address, conn.id)
        if response is None:
            logger.debug(f"[{conn.id}] Empty request, closing")
            return

        self._send(conn, request, response, started)

    def respond(
        self,
        raw_request: bytes,
        client_address: tuple[str, int] = ("", 0),
        request_id: str = "-",
    ) -> tuple[Optional[HTTPRequest], Optional[HTTPResponse]]:
        """
        Turn raw request bytes into a response.

        Returns:
            (request, response). request is None when the bytes did not
            parse; response is None when there is nothing to answer
            (empty buffer).
        """
        try:
            request = self._parser.parse(raw_request, client_address)
        except HTTPParseError as e:
            logger.info(f"[{request_id}] Rejected malformed request: {e.message}")
            return None, (ResponseBuilder()
                          .status(HTTPStatus(e.status_code))
                          .text(e.message)
                          .build())

        if request is None:
            return None, None

        try:
            return request, self._router.handle(request)
        except Exception as e:
            logger.exception(f"[{request_id}] Handler error on {request.method} {request.path}: {e}")
            return request, internal_error(render_error_page(HANDLER_ERROR_MESSAGE))

    def _send(
        self,
        conn: Connection,
        request: Optional[HTTPRequest],
        response: HTTPResponse,
        started: float,
    ):
        sent = conn.send_response(response.to_bytes())
        duration_ms = (time.time() - started) * 1000

        if sent:
            self._access_log.log(request, response, duration_ms, conn.id, conn.address)
