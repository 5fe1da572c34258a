# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
HTTP API for etching, minting and transferring runes.

Endpoints:
    POST /api/etch      {"runeName", "divisibility", "premine"?}
    POST /api/mint      {"runeId"}
    POST /api/transfer  {"runeId", "amount", "output"}
    GET  /api/decode?kind=<etch|mint|transfer>&payload=<hex>
"""

import json
import sys
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict
from urllib.parse import parse_qs, urlparse

from .api import RequestError, RunesService, describe_payload
from .config import Config
from .protocol import MessageKind
from .rpc import RPCError
from .transport import EmbedError
from .varint import CodecError

ROUTES = {
    "/api/etch": MessageKind.ETCH,
    "/api/mint": MessageKind.MINT,
    "/api/transfer": MessageKind.TRANSFER,
}

ERROR_LABELS = {
    MessageKind.ETCH: "Etching Error",
    MessageKind.MINT: "Minting Error",
    MessageKind.TRANSFER: "Transfer Error",
}


class RunesHandler(BaseHTTPRequestHandler):
    """Request handler; the service is bound by make_server."""
    protocol_version = "HTTP/1.1"

    service: RunesService

    def _send_json(self, payload: Dict[str, Any], status: int = HTTPStatus.OK) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _read_json_body(self) -> Any:
        header = self.headers.get("Content-Length") or "0"
        try:
            length = int(header)
        except ValueError:
            length = -1
        if length < 0:
            self.close_connection = True
            raise RequestError(f"Invalid Content-Length: {header}")
        raw = self.rfile.read(length) if length else b""
        if not raw:
            return {}
        try:
            return json.loads(raw)
        except ValueError:
            raise RequestError("Request body is not valid JSON")

    def do_POST(self) -> None:  # noqa: N802
        kind = ROUTES.get(urlparse(self.path).path)
        if kind is None:
            self.close_connection = True
            self._send_json({"error": "not found"}, status=HTTPStatus.NOT_FOUND)
            return

        try:
            body = self._read_json_body()
            result = self.service.handle(kind, body)
        except RequestError as e:
            self._send_json({"error": str(e)}, status=e.status)
            return
        except CodecError as e:
            self._send_json({"error": str(e)}, status=HTTPStatus.BAD_REQUEST)
            return
        except (EmbedError, RPCError) as e:
            print(f"{ERROR_LABELS[kind]}: {e}", file=sys.stderr)
            self._send_json({"error": str(e)}, status=HTTPStatus.INTERNAL_SERVER_ERROR)
            return

        self._send_json(result)

    def do_GET(self) -> None:  # noqa: N802
        parsed = urlparse(self.path)
        if parsed.path != "/api/decode":
            self._send_json({"error": "not found"}, status=HTTPStatus.NOT_FOUND)
            return

        query = parse_qs(parsed.query)
        try:
            kind = MessageKind(query.get("kind", [""])[0])
            payload = bytes.fromhex(query.get("payload", [""])[0])
            result = describe_payload(kind, payload)
        except ValueError as e:
            # CodecError is a ValueError too
            self._send_json({"error": str(e)}, status=HTTPStatus.BAD_REQUEST)
            return

        self._send_json(result)

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A003
        print(f"[runes-api] {self.address_string()} - {format % args}", file=sys.stderr)


def make_server(service: RunesService, host: str = "127.0.0.1", port: int = 3000) -> ThreadingHTTPServer:
    """
    Create an HTTP server bound to host:port.

    Port 0 picks a free port; read it back from server.server_address.
    """

    class BoundRunesHandler(RunesHandler):
        pass

    BoundRunesHandler.service = service
    return ThreadingHTTPServer((host, port), BoundRunesHandler)


def serve(config: Config) -> None:
    """Run the API until interrupted."""
    service = RunesService.from_config(config)
    server = make_server(service, config.host, config.port)
    print(f"Runes API server running on {config.host}:{config.port}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
        service.close()
