# tron_rpc

A small HTTP service that talks to a TRON (or Ethereum-compatible) JSON-RPC
node. It reports a wallet's balance, the addresses that paid it, and the
addresses it paid.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Configuration

The node endpoint comes from the `RPC_URL` environment variable. At start-up
the server loads a `.env` file if one is found (or the file given with
`--env-file`); a warning is logged if no file is loaded or `RPC_URL` is unset.

```
RPC_URL=http://localhost:8545
```

If no endpoint is configured, every lookup fails with `RPC_URL is empty`.

## Running the server

```
tron-rpc
```

Options:

- `--host HOST` – interface to bind (default: all interfaces)
- `--port PORT` – port to listen on (default: 8080)
- `--env-file PATH` – `.env` file to load

The server runs until interrupted with Ctrl-C.

## Endpoints

All endpoints take the wallet in the `address` query parameter and answer both
`GET` and `POST`. Unknown paths get `404 page not found`.

- `/currentBalance?address=T...` returns JSON such as
  `{"balance_trx":12.5}`. The address must be a base58 TRON address; the
  node's balance in sun is divided by 1,000,000.
- `/payerAddress?address=...` returns JSON of the form
  `{"address": ..., "payers": [...]}`; `payers` is `null` when none were found.
- `/listOfAllBeneficiary?address=...` returns a plain-text report with the
  balance (or `N/A` if it could not be fetched), the payers and the
  beneficiaries.

If `address` is missing the response is `400`. If the address is invalid or
the node cannot be reached or answers with a bad status, the response is `500`
with the error message.

### How payers and beneficiaries are found

- An address starting with `0x` is compared case-insensitively against the
  `from`/`to` fields of the transactions in the 6 newest blocks.
- Any other address is taken as base58 TRON. Up to 100,000 of the newest
  blocks are scanned, their transaction addresses converted to base58, until
  6 distinct counterparts are found.

Blocks that cannot be fetched are skipped.

## Using it as a library

```python
from tron_rpc.client import RpcClient, load_rpc_url
from tron_rpc.transactions import fetch_payers, fetch_beneficiaries
from tron_rpc.address import tron_to_hex_address, hex_to_tron_address

client = RpcClient(load_rpc_url(None), None)
print(client.fetch_balance("T..."))           # balance in sun, as an int
print(fetch_payers(client, "T...", 6, 100))   # up to 6 payer addresses
print(tron_to_hex_address("T..."))            # "0x41..."
```

- `tron_rpc.address` holds base58 encoding (`b58encode`, `b58decode`),
  `tron_to_hex_address`, `hex_to_tron_address` and `decode_base58_address`;
  invalid input raises `AddressError`.
- `tron_rpc.client.RpcClient` sends JSON-RPC 2.0 requests: `call`,
  `latest_block_number`, `block_by_number` (returns a `Block` of
  `Transaction`s) and `fetch_balance`. Failures raise `RpcError`. Without a
  URL it reads `RPC_URL` from the environment at each call.
- `tron_rpc.server.route(client, path, query)` answers one request as a
  `Response` without starting a server. `make_server(client, host, port)`
  builds the HTTP server that `tron-rpc` runs.