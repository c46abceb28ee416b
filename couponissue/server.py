"""HTTP server exposing the CouponService RPCs as JSON over POST."""

from __future__ import annotations

import argparse
import functools
import json
import logging
import time
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Optional, Sequence
from urllib.parse import urlsplit

from .codegen import CouponCodeGenerator
from .handler import ConnectError, CouponServiceHandler
from .model import CreateCampaignRequest, GetCampaignRequest, IssueCouponRequest
from .repository import MemoryCampaignRepository, MemoryCouponRepository
from .service import CouponService

log = logging.getLogger(__name__)

SERVICE_NAME = "coupon.CouponService"
SERVICE_PATH = f"/{SERVICE_NAME}/"
CREATE_CAMPAIGN_PROCEDURE = f"/{SERVICE_NAME}/CreateCampaign"
GET_CAMPAIGN_PROCEDURE = f"/{SERVICE_NAME}/GetCampaign"
ISSUE_COUPON_PROCEDURE = f"/{SERVICE_NAME}/IssueCoupon"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Connect-Protocol-Version, Connect-Timeout-Ms",
}

DEFAULT_PORT = 8080


@dataclass
class HttpResponse:
    """Status, headers and body produced for one request."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


def _json_response(status: int, payload: Any) -> HttpResponse:
    body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    return HttpResponse(status, {"Content-Type": "application/json"}, body)


def _error_response(error: ConnectError) -> HttpResponse:
    return _json_response(error.http_status, error.to_dict())


def _not_found() -> HttpResponse:
    return HttpResponse(
        404, {"Content-Type": "text/plain; charset=utf-8"}, b"404 page not found\n"
    )


class CouponServiceApp:
    """Routes requests to the RPC handler, with CORS and request logging."""

    def __init__(self, handler: CouponServiceHandler):
        self._procedures: dict[str, tuple[Callable[[Any], Any], Callable[[Any], Any]]] = {
            CREATE_CAMPAIGN_PROCEDURE: (handler.create_campaign, CreateCampaignRequest.from_dict),
            GET_CAMPAIGN_PROCEDURE: (handler.get_campaign, GetCampaignRequest.from_dict),
            ISSUE_COUPON_PROCEDURE: (handler.issue_coupon, IssueCouponRequest.from_dict),
        }

    def dispatch(self, method: str, path: str, body: bytes = b"") -> HttpResponse:
        """Handle one request and return the response to send."""
        start = time.perf_counter()
        path = urlsplit(path).path
        log.info("📥 [%s] %s", method, path)
        response = self._cors(method, path, body)
        log.info("📤 [%s] %s - %.6fs", method, path, time.perf_counter() - start)
        return response

    def _cors(self, method: str, path: str, body: bytes) -> HttpResponse:
        if method == "OPTIONS":
            response = HttpResponse(200)
        else:
            response = self._route(method, path, body)
        response.headers.update(CORS_HEADERS)
        return response

    def _route(self, method: str, path: str, body: bytes) -> HttpResponse:
        if not path.startswith(SERVICE_PATH) or path not in self._procedures:
            return _not_found()
        if method != "POST":
            return HttpResponse(405, {"Allow": "POST"})

        call, parse = self._procedures[path]
        try:
            request = parse(self._decode(body))
            result = call(request)
        except ConnectError as error:
            return _error_response(error)
        return _json_response(200, result.to_dict())

    @staticmethod
    def _decode(body: bytes) -> dict[str, Any]:
        if not body.strip():
            return {}
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ConnectError("invalid_argument", f"unmarshal message: {exc}") from exc
        if not isinstance(payload, dict):
            raise ConnectError("invalid_argument", "request body must be a JSON object")
        return payload


def build_app() -> CouponServiceApp:
    """Wire repositories, service and handler into a ready application."""
    campaign_repo = MemoryCampaignRepository()
    coupon_repo = MemoryCouponRepository(campaign_repo)
    service = CouponService(campaign_repo, coupon_repo, CouponCodeGenerator())
    return CouponServiceApp(CouponServiceHandler(service))


class _RequestHandler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    def __init__(self, *args: Any, app: CouponServiceApp, **kwargs: Any):
        self.app = app
        super().__init__(*args, **kwargs)

    def _handle(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""
        log.debug("request from %s", self.client_address[0])
        response = self.app.dispatch(self.command, self.path, body)
        self.send_response(response.status)
        for name, value in response.headers.items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(response.body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(response.body)

    do_GET = do_POST = do_PUT = do_DELETE = do_OPTIONS = do_HEAD = _handle

    def log_message(self, format: str, *args: Any) -> None:
        log.debug("%s - %s", self.address_string(), format % args)


def create_server(
    app: CouponServiceApp, host: str = "", port: int = DEFAULT_PORT
) -> ThreadingHTTPServer:
    """Create (but do not start) a threaded HTTP server for ``app``."""
    return ThreadingHTTPServer((host, port), functools.partial(_RequestHandler, app=app))


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Coupon issuance server")
    parser.add_argument("--host", default="")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    server = create_server(build_app(), args.host, args.port)
    log.info("🚀 쿠폰 발급 서버 시작: http://localhost:%d", server.server_address[1])
    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())