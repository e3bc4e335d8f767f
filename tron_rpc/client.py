"""JSON-RPC client for a TRON node's Ethereum-compatible interface."""

from __future__ import annotations

import itertools
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any

import requests
from dotenv import load_dotenv

from tron_rpc.address import tron_to_hex_address

__all__ = ["RpcError", "Transaction", "Block", "RpcClient", "load_rpc_url"]

log = logging.getLogger(__name__)

_HEX_PREFIX = re.compile(r"0x([0-9a-fA-F]+)")
_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")


class RpcError(Exception):
    """Raised when an RPC request cannot be made or answered."""


@dataclass(frozen=True)
class Transaction:
    """A transfer between two hex addresses, as reported by the node."""

    from_address: str
    to_address: str


@dataclass(frozen=True)
class Block:
    """The transactions of one block."""

    transactions: list[Transaction] = field(default_factory=list)


def load_rpc_url(env_file: str | os.PathLike[str] | None = None) -> str | None:
    """Load a .env file into the environment and return RPC_URL, or None if unset."""
    if not load_dotenv(env_file):
        log.warning("error while loading .env file")
    url = os.environ.get("RPC_URL", "")
    if not url:
        log.warning("rpc url not found")
        return None
    return url


class RpcClient:
    """Posts JSON-RPC 2.0 requests to a node."""

    def __init__(self, url: str | None = None, session: requests.Session | None = None):
        self._url = url
        self._session = session if session is not None else requests.Session()
        self._ids = itertools.count(1)

    @property
    def url(self) -> str:
        """The endpoint; falls back to the RPC_URL environment variable."""
        url = self._url or os.environ.get("RPC_URL", "")
        if not url:
            raise RpcError("RPC_URL is empty")
        return url

    def call(self, method: str, params: Any) -> Any:
        """Send one request and return the ``result`` member of the reply."""
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        url = self.url
        try:
            response = self._session.post(url, json=payload)
        except requests.RequestException as exc:
            raise RpcError(f"failed to perform request: {exc}") from exc

        if response.status_code != 200:
            raise RpcError(
                f"bad status: {response.status_code} {response.reason}, body: {response.text}"
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise RpcError(f"invalid JSON reply: {exc}") from exc
        if not isinstance(body, dict):
            raise RpcError("invalid JSON-RPC reply")
        return body.get("result")

    def latest_block_number(self) -> int:
        """Number of the newest block; 0 when the reply holds no hex number."""
        result = self.call("eth_blockNumber", [])
        match = _HEX_PREFIX.match(result) if isinstance(result, str) else None
        return int(match.group(1), 16) if match else 0

    def block_by_number(self, number: int) -> Block:
        """Fetch a block with its full transactions."""
        result = self.call("eth_getBlockByNumber", [f"0x{number:x}", True])
        raw_transactions = (result or {}).get("transactions") or []
        transactions = [
            Transaction(tx.get("from") or "", tx.get("to") or "")
            for tx in raw_transactions
            if isinstance(tx, dict)
        ]
        return Block(transactions)

    def fetch_balance(self, address: str) -> int:
        """Balance of a base58 TRON address in sun; 0 when the reply holds no number."""
        hex_addr = tron_to_hex_address(address)
        result = self.call("eth_getBalance", [hex_addr, "latest"])
        digits = result.removeprefix("0x") if isinstance(result, str) else ""
        if not _HEX_DIGITS.fullmatch(digits):
            return 0
        return int(digits, 16)