"""Serves the status document over HTTP on /status/json."""

from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlsplit

STATUS_PATH = "/status/json"
DEFAULT_ADDRESS = "127.0.0.1:8080"

_TEXT = "text/plain; charset=utf-8"


@dataclass(frozen=True)
class Response:
    """A response ready to be written to the client."""

    status: int
    content_type: str
    body: bytes


def _split_address(address):
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"address {address!r} has no port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, int(port)


class StatusServer:
    """HTTP server exposing a provider's status document."""

    def __init__(self, provider, address=DEFAULT_ADDRESS):
        self.provider = provider
        self.address = address

    def handle(self, method, path):
        """Build the response to ``method`` on the request target ``path``."""
        if urlsplit(path).path != STATUS_PATH or method != "GET":
            return Response(404, _TEXT, b"404 page not found\n")
        try:
            document = self.provider.status()
        except Exception as exc:
            return Response(500, _TEXT, f"{exc}\n".encode())
        return Response(200, "application/json", bytes(document))

    def run(self):
        """Listen on the configured address and serve until interrupted."""
        with self._make_server() as server:
            server.serve_forever()

    def _make_server(self):
        status_server = self

        class Handler(BaseHTTPRequestHandler):
            def _dispatch(self):
                response = status_server.handle(self.command, self.path)
                self.send_response(response.status)
                self.send_header("Content-Type", response.content_type)
                if response.status != 200:
                    self.send_header("X-Content-Type-Options", "nosniff")
                self.send_header("Content-Length", str(len(response.body)))
                self.end_headers()
                if self.command != "HEAD":
                    self.wfile.write(response.body)

            do_GET = do_HEAD = do_POST = do_PUT = _dispatch
            do_DELETE = do_PATCH = do_OPTIONS = _dispatch

            def log_message(self, format, *args):
                pass

        return ThreadingHTTPServer(_split_address(self.address), Handler)