"""Payer and beneficiary discovery by scanning the newest blocks."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import closing

from tron_rpc.address import AddressError, hex_to_tron_address
from tron_rpc.client import Block, RpcClient, RpcError, Transaction

__all__ = [
    "TARGET_COUNT",
    "MAX_DEPTH",
    "fetch_payers",
    "fetch_beneficiaries",
]

log = logging.getLogger(__name__)

TARGET_COUNT = 6
MAX_DEPTH = 100_000

_ETH_WORKERS = 5
_TRON_WORKERS = 16


def _fetch_block(client: RpcClient, number: int) -> Block | None:
    try:
        return client.block_by_number(number)
    except (RpcError, AttributeError, TypeError) as exc:
        log.debug("skipping block %d: %s", number, exc)
        return None


def _scan(client: RpcClient, numbers: Iterable[int], workers: int) -> Iterator[Block]:
    """Yield blocks in the order of ``numbers``, fetching several at once.

    Blocks that cannot be fetched are skipped. Closing the generator cancels
    the requests that have not started yet.
    """
    remaining = iter(numbers)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        pending: deque[Future[Block | None]] = deque()

        def fill() -> None:
            while len(pending) < workers * 2:
                number = next(remaining, None)
                if number is None:
                    return
                pending.append(pool.submit(_fetch_block, client, number))

        fill()
        try:
            while pending:
                block = pending.popleft().result()
                fill()
                if block is not None:
                    yield block
        finally:
            for future in pending:
                future.cancel()


def _newest_blocks(latest: int, count: int) -> range:
    """Numbers of the ``count`` newest blocks, newest first, never below zero."""
    return range(latest, max(latest - count, -1), -1)


def _tron_address(hex_addr: str) -> str:
    try:
        return hex_to_tron_address(hex_addr)
    except AddressError:
        return ""


def _collect_tron(
    client: RpcClient,
    target_count: int,
    max_depth: int,
    counterpart: Callable[[str, str], str | None],
) -> list[str]:
    latest = client.latest_block_number()
    if target_count <= 0:
        return []
    found: dict[str, None] = {}
    with closing(_scan(client, _newest_blocks(latest, max_depth), _TRON_WORKERS)) as blocks:
        for block in blocks:
            for tx in block.transactions:
                other = counterpart(
                    _tron_address(tx.from_address), _tron_address(tx.to_address)
                )
                if other is None:
                    continue
                found[other] = None
                if len(found) >= target_count:
                    return list(found)
    return list(found)


def _collect_eth(
    client: RpcClient,
    block_count: int,
    counterpart: Callable[[Transaction], str | None],
) -> list[str]:
    latest = client.latest_block_number()
    log.debug("latest block %d", latest)
    found: dict[str, None] = {}
    for block in _scan(client, _newest_blocks(latest, block_count), _ETH_WORKERS):
        for tx in block.transactions:
            other = counterpart(tx)
            if other is not None:
                found[other] = None
    return list(found)


def fetch_payers(
    client: RpcClient,
    address: str,
    target_count: int = TARGET_COUNT,
    max_depth: int = MAX_DEPTH,
) -> list[str]:
    """Addresses that sent to ``address`` in recent blocks.

    A 0x-prefixed address scans the ``target_count`` newest blocks and
    compares hex addresses case-insensitively. Any other address is taken
    as base58 TRON: up to ``max_depth`` blocks are scanned until
    ``target_count`` distinct payers are found.
    """
    if address.startswith("0x"):
        log.info("fetching payers")
        wanted = address.lower()
        return _collect_eth(
            client,
            target_count,
            lambda tx: tx.from_address if tx.to_address.lower() == wanted else None,
        )
    log.info("fetching tron payers")
    return _collect_tron(
        client,
        target_count,
        max_depth,
        lambda sender, recipient: sender if recipient == address else None,
    )


def fetch_beneficiaries(
    client: RpcClient,
    address: str,
    target_count: int = TARGET_COUNT,
    max_depth: int = MAX_DEPTH,
) -> list[str]:
    """Addresses that ``address`` sent to in recent blocks; see fetch_payers."""
    if address.startswith("0x"):
        wanted = address.lower()
        return _collect_eth(
            client,
            target_count,
            lambda tx: tx.to_address if tx.from_address.lower() == wanted else None,
        )
    return _collect_tron(
        client,
        target_count,
        max_depth,
        lambda sender, recipient: recipient if sender == address else None,
    )