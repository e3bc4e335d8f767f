import json
import threading
import urllib.error
import urllib.request

import pytest
import responses

from tron_rpc.address import hex_to_tron_address
from tron_rpc.client import RpcClient
from tron_rpc.server import (
    current_balance,
    list_of_all_beneficiary,
    make_server,
    payer_address,
    route,
)

URL = "http://node.example.com/jsonrpc"

HEX_A = "0x" + "11" * 20
HEX_B = "0x" + "22" * 20
HEX_TARGET = "0x" + "aa" * 20
TRON_A = hex_to_tron_address(HEX_A)
TRON_B = hex_to_tron_address(HEX_B)
TRON_TARGET = hex_to_tron_address(HEX_TARGET)


class FakeNode:
    def __init__(self, latest=0, blocks=None, balance="0x0"):
        self.latest = latest
        self.blocks = blocks or {}
        self.balance = balance

    def __call__(self, request):
        payload = json.loads(request.body)
        method = payload["method"]
        if method == "eth_blockNumber":
            if self.latest is None:
                return (500, {}, "down")
            result = hex(self.latest)
        elif method == "eth_getBlockByNumber":
            number = int(payload["params"][0], 16)
            result = {
                "transactions": [
                    {"from": s, "to": r} for s, r in self.blocks.get(number, [])
                ]
            }
        elif method == "eth_getBalance":
            if self.balance is None:
                return (500, {}, "down")
            result = self.balance
        else:
            return (500, {}, "unknown method")
        body = json.dumps({"jsonrpc": "2.0", "id": payload["id"], "result": result})
        return (200, {"Content-Type": "application/json"}, body)


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def client_for(rsps, node):
    rsps.add_callback(responses.POST, URL, callback=node)
    return RpcClient(URL)


def test_current_balance_requires_address():
    response = current_balance(RpcClient(URL), {})
    assert response.status == 400
    assert response.body == "address is required\n"


def test_current_balance_whole_trx(mocked):
    client = client_for(mocked, FakeNode(balance="0xf4240"))
    response = current_balance(client, {"address": TRON_TARGET})
    assert response.status == 200
    assert response.body == '{"balance_trx":1}\n'


def test_current_balance_fraction(mocked):
    sun = 1_234_567
    client = client_for(mocked, FakeNode(balance=hex(sun)))
    response = current_balance(client, {"address": TRON_TARGET})
    assert json.loads(response.body) == {"balance_trx": sun / 1_000_000}


def test_current_balance_bad_address():
    response = current_balance(RpcClient(URL), {"address": "Xnotanaddress"})
    assert response.status == 500
    assert response.body.startswith("Error fetching balance: ")


def test_payer_address_requires_address():
    response = payer_address(RpcClient(URL), {"address": ""})
    assert (response.status, response.body) == (400, "Please mention address\n")


def test_payer_address_lists_payers(mocked):
    client = client_for(mocked, FakeNode(3, {3: [(HEX_A, HEX_TARGET)]}))
    response = payer_address(client, {"address": TRON_TARGET})
    assert response.status == 200
    assert response.content_type == "application/json"
    assert response.body.startswith('{"address":')
    assert json.loads(response.body) == {"address": TRON_TARGET, "payers": [TRON_A]}


def test_payer_address_without_payers_gives_null(mocked):
    client = client_for(mocked, FakeNode(2))
    response = payer_address(client, {"address": TRON_TARGET})
    assert json.loads(response.body)["payers"] is None


def test_payer_address_rpc_failure(mocked):
    client = client_for(mocked, FakeNode(None))
    response = payer_address(client, {"address": TRON_TARGET})
    assert response.status == 500
    assert response.body.startswith("Error fetching payers:")


def test_list_of_all_beneficiary_report(mocked):
    node = FakeNode(5, {5: [(HEX_A, HEX_TARGET), (HEX_TARGET, HEX_B)]}, balance="0x1e8480")
    client = client_for(mocked, node)
    response = list_of_all_beneficiary(client, {"address": TRON_TARGET})
    assert response.status == 200
    assert response.content_type == "text/plain"
    assert response.body == (
        f"Input Wallet Address: {TRON_TARGET}\n"
        "Current Balance: 2.000000 TRX\n"
        "\nPayers:\n"
        f"- {TRON_A}\n"
        "\nBeneficiaries:\n"
        f"- {TRON_B}\n"
    )


def test_list_of_all_beneficiary_balance_unavailable(mocked):
    client = client_for(mocked, FakeNode(1, balance=None))
    response = list_of_all_beneficiary(client, {"address": TRON_TARGET})
    assert "Current Balance: N/A\n" in response.body


def test_list_of_all_beneficiary_requires_address():
    response = list_of_all_beneficiary(RpcClient(URL), {})
    assert response.status == 400
    assert response.body == "address query parameter is required\n"


def test_list_of_all_beneficiary_rpc_failure(mocked):
    client = client_for(mocked, FakeNode(None))
    response = list_of_all_beneficiary(client, {"address": TRON_TARGET})
    assert response.status == 500
    assert response.body.startswith("Error fetching payers: ")


def test_route_dispatches_and_rejects_unknown():
    client = RpcClient(URL)
    assert route(client, "/currentBalance", {}).status == 400
    unknown = route(client, "/nowhere", {"address": TRON_TARGET})
    assert (unknown.status, unknown.body) == (404, "404 page not found\n")


@pytest.fixture
def running_server(mocked):
    client = client_for(mocked, FakeNode(3, {3: [(HEX_A, HEX_TARGET)]}))
    server = make_server(client, "127.0.0.1", 0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()
        thread.join()


def test_http_missing_address(running_server):
    with pytest.raises(urllib.error.HTTPError) as info:
        urllib.request.urlopen(running_server + "/currentBalance")
    assert info.value.code == 400
    assert info.value.read() == b"address is required\n"


def test_http_payer_address(running_server):
    with urllib.request.urlopen(f"{running_server}/payerAddress?address={TRON_TARGET}") as reply:
        assert reply.headers["Content-Type"] == "application/json"
        assert json.loads(reply.read()) == {"address": TRON_TARGET, "payers": [TRON_A]}


def test_http_unknown_path(running_server):
    with pytest.raises(urllib.error.HTTPError) as info:
        urllib.request.urlopen(running_server + "/missing")
    assert info.value.code == 404