import logging
import socket
from typing import Optional

from timex_pipeline.config import DEFAULT_HOST, parse_port
from timex_pipeline.errors import ClientError, ConfigError
from timex_pipeline.server import ENCODING, TERMINATOR

logger = logging.getLogger(__name__)

BUFFER_SIZE = 65536


class AnnotationClient:
    """Sends one document per connection to an annotation server."""

    def __init__(self, host: str = DEFAULT_HOST, port=None, timeout: Optional[float] = None) -> None:
        try:
            self.port = parse_port(port)
        except ConfigError as exc:
            raise ClientError(str(exc)) from exc
        self.host = host
        self.timeout = timeout

    @staticmethod
    def frame(text: str) -> bytes:
        """Document text followed by the terminator line."""
        if text and not text.endswith("\n"):
            text += "\n"
        return (text + TERMINATOR + "\n").encode(ENCODING)

    def annotate(self, text: str) -> str:
        """Send ``text`` and return the server's full response."""
        try:
            with socket.create_connection((self.host, self.port), timeout=self.timeout) as conn:
                conn.sendall(self.frame(text))
                conn.shutdown(socket.SHUT_WR)
                chunks = []
                while True:
                    chunk = conn.recv(BUFFER_SIZE)
                    if not chunk:
                        break
                    chunks.append(chunk)
        except socket.gaierror as exc:
            raise ClientError(f"Unknown hostname or IP address: {self.host}") from exc
        except OSError as exc:
            raise ClientError(f"Could not talk to {self.host}:{self.port}: {exc}") from exc
        logger.debug(f"Received {sum(len(c) for c in chunks)} bytes from {self.host}:{self.port}")
        return b"".join(chunks).decode(ENCODING)
