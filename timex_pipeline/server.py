"""
TCP annotation server.

Clients send a document as UTF-8 lines followed by a line holding only
``<ENDOFDOCUMENT>``. The server annotates the document, writes the encoded
result back on the same connection and waits for the next document, so one
connection can carry any number of documents. The server never sends a
terminator of its own; a client that wants a single round trip half-closes
its side after the terminator and reads until EOF.

A document that cannot be read (for instance malformed NAF) is logged and
answered with the encoding of an empty document in the configured format, so
every terminated document gets exactly one response and the connection keeps
serving. In CoNLL format that response is empty.
"""

import logging
import socketserver
from typing import Callable, List, Optional

from timex_pipeline.config import ServerConfig
from timex_pipeline.errors import DocumentFormatError
from timex_pipeline.pipeline import TimexPipeline

logger = logging.getLogger(__name__)

TERMINATOR = "<ENDOFDOCUMENT>"
ENCODING = "utf-8"


class DocumentStreamHandler(socketserver.StreamRequestHandler):
    """Serves sentinel-delimited documents on one connection until it closes."""

    server: "AnnotationServer"

    def handle(self) -> None:
        peer = "%s:%s" % self.client_address[:2]
        logger.info(f"Connection opened from {peer}")
        pipeline = self.server.pipeline_for_connection()
        served = 0
        try:
            while True:
                document = self._read_document()
                if document is None:
                    break
                response = self._annotate(pipeline, document)
                self.wfile.write(response.encode(ENCODING))
                self.wfile.flush()
                served += 1
        except (ConnectionError, OSError) as exc:
            logger.warning(f"Connection with {peer} failed: {exc}")
        logger.info(f"Connection from {peer} closed after {served} documents")

    def _read_document(self) -> Optional[str]:
        """Lines up to the terminator, or None once the client stops sending."""
        lines: List[str] = []
        for raw in self.rfile:
            line = raw.decode(ENCODING, errors="replace").rstrip("\r\n")
            if line == TERMINATOR:
                return "".join(text + "\n" for text in lines)
            lines.append(line)
        if lines:
            logger.debug(f"Discarding {len(lines)} lines received without {TERMINATOR}")
        return None

    def _annotate(self, pipeline: TimexPipeline, document: str) -> str:
        try:
            return pipeline.annotate_text(document)
        except DocumentFormatError as exc:
            logger.warning(f"Answering unreadable document with an empty one: {exc}")
            return pipeline.empty_response()


class AnnotationServer(socketserver.ThreadingTCPServer):
    """
    Threaded TCP server holding the annotation pipeline.

    With ``shared`` isolation every connection uses the same pipeline, whose
    annotator serializes documents; with ``connection`` isolation each
    connection builds its own pipeline.
    """

    allow_reuse_address = True
    daemon_threads = True

    def __init__(
        self,
        config: ServerConfig,
        pipeline_factory: Optional[Callable[[], TimexPipeline]] = None,
    ) -> None:
        self.config = config
        self.pipeline_factory = pipeline_factory or (lambda: TimexPipeline(config.tagger))
        # Load the model before accepting connections so resource errors surface here.
        self.pipeline = self.pipeline_factory()
        super().__init__((config.host, config.port), DocumentStreamHandler)

    @property
    def port(self) -> int:
        return self.server_address[1]

    def pipeline_for_connection(self) -> TimexPipeline:
        if self.config.isolation == "connection":
            return self.pipeline_factory()
        return self.pipeline

    def handle_error(self, request, client_address) -> None:
        logger.exception(f"Error while serving {client_address}")

    def serve(self) -> None:
        logger.info(
            f"Annotation server listening on {self.config.host}:{self.port} "
            f"(format={self.config.tagger.output_format}, isolation={self.config.isolation})"
        )
        try:
            self.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down annotation server")
        finally:
            self.server_close()
