"""HTTP endpoints reporting balances, payers and beneficiaries of an address."""

from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlsplit

from tron_rpc.address import AddressError
from tron_rpc.client import RpcClient, RpcError, load_rpc_url
from tron_rpc.transactions import MAX_DEPTH, TARGET_COUNT, fetch_beneficiaries, fetch_payers

__all__ = [
    "Response",
    "current_balance",
    "payer_address",
    "list_of_all_beneficiary",
    "route",
    "make_server",
    "main",
]

log = logging.getLogger(__name__)

_TEXT = "text/plain; charset=utf-8"
_SUN_PER_TRX = 1e6
_FETCH_ERRORS = (AddressError, RpcError)
_JSON_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


@dataclass(frozen=True)
class Response:
    """Status, body and content type of an HTTP reply."""

    status: int
    body: str
    content_type: str = _TEXT


def _error(message: str, status: int) -> Response:
    return Response(status, message + "\n")


def _encode_json(value: object) -> str:
    text = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    for char, escape in _JSON_ESCAPES:
        text = text.replace(char, escape)
    return text + "\n"


def _format_float(value: float) -> str:
    """Shortest float text, plain notation between 1e-6 and 1e21."""
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    if 1e-6 <= abs(value) < 1e21:
        return format(Decimal(repr(value)), "f")
    return repr(value)


def _to_int64(value: int) -> int:
    value &= (1 << 64) - 1
    return value - (1 << 64) if value >= 1 << 63 else value


def _balance_trx(client: RpcClient, address: str) -> float:
    return _to_int64(client.fetch_balance(address)) / _SUN_PER_TRX


def current_balance(client: RpcClient, query: Mapping[str, str]) -> Response:
    """Balance of ``address`` in TRX as JSON."""
    address = query.get("address", "")
    if not address:
        return _error("address is required", 400)
    try:
        balance = _balance_trx(client, address)
    except _FETCH_ERRORS as exc:
        return _error(f"Error fetching balance: {exc}", 500)
    return Response(200, '{"balance_trx":' + _format_float(balance) + "}\n")


def payer_address(client: RpcClient, query: Mapping[str, str]) -> Response:
    """Payers of ``address`` as JSON."""
    address = query.get("address", "")
    if not address:
        return _error("Please mention address", 400)
    try:
        payers = fetch_payers(client, address, TARGET_COUNT, MAX_DEPTH)
    except _FETCH_ERRORS as exc:
        return _error(f"Error fetching payers:{exc}", 500)
    body = _encode_json({"address": address, "payers": payers or None})
    return Response(200, body, "application/json")


def list_of_all_beneficiary(client: RpcClient, query: Mapping[str, str]) -> Response:
    """Plain-text report of the balance, payers and beneficiaries of ``address``."""
    address = query.get("address", "")
    if not address:
        return _error("address query parameter is required", 400)
    try:
        payers = fetch_payers(client, address, TARGET_COUNT, MAX_DEPTH)
    except _FETCH_ERRORS as exc:
        return _error(f"Error fetching payers: {exc}", 500)
    try:
        beneficiaries = fetch_beneficiaries(client, address, TARGET_COUNT, MAX_DEPTH)
    except _FETCH_ERRORS as exc:
        return _error(f"Error fetching beneficiaries: {exc}", 500)
    try:
        balance = f"{_balance_trx(client, address):.6f} TRX"
    except _FETCH_ERRORS:
        balance = "N/A"

    lines = [
        f"Input Wallet Address: {address}",
        f"Current Balance: {balance}",
        "",
        "Payers:",
        *(f"- {payer}" for payer in payers),
        "",
        "Beneficiaries:",
        *(f"- {beneficiary}" for beneficiary in beneficiaries),
    ]
    return Response(200, "\n".join(lines) + "\n", "text/plain")


_ROUTES: dict[str, Callable[[RpcClient, Mapping[str, str]], Response]] = {
    "/currentBalance": current_balance,
    "/payerAddress": payer_address,
    "/listOfAllBeneficiary": list_of_all_beneficiary,
}


def route(client: RpcClient, path: str, query: Mapping[str, str]) -> Response:
    """Dispatch a request path to its handler; unknown paths get a 404."""
    handler = _ROUTES.get(path)
    if handler is None:
        return _error("404 page not found", 404)
    return handler(client, query)


class _Server(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: tuple[str, int], client: RpcClient):
        super().__init__(address, _Handler)
        self.rpc_client = client


class _Handler(BaseHTTPRequestHandler):
    server: _Server

    def do_GET(self) -> None:
        parts = urlsplit(self.path)
        query = {
            key: values[0]
            for key, values in parse_qs(parts.query, keep_blank_values=True).items()
        }
        response = route(self.server.rpc_client, parts.path, query)
        body = response.body.encode("utf-8")
        self.send_response(response.status)
        self.send_header("Content-Type", response.content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    do_POST = do_GET

    def log_message(self, format: str, *args: object) -> None:
        log.info("%s - %s", self.address_string(), format % args)


def make_server(client: RpcClient, host: str = "", port: int = 8080) -> ThreadingHTTPServer:
    """Create, but do not start, an HTTP server serving the endpoints."""
    return _Server((host, port), client)


def main(argv: list[str] | None = None) -> int:
    """Serve the endpoints until interrupted."""
    parser = argparse.ArgumentParser(description="Serve address lookups over HTTP.")
    parser.add_argument("--host", default="", help="interface to bind (default: all)")
    parser.add_argument("--port", type=int, default=8080, help="port to listen on")
    parser.add_argument("--env-file", default=None, help="path of the .env file")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    client = RpcClient(load_rpc_url(args.env_file))
    with make_server(client, args.host, args.port) as server:
        print(f"Server started at : {args.port}")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())