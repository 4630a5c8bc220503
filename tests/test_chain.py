import pytest
import requests

from voicevault.core.errors import ChainError, InvalidAmount, UnsupportedModelUri, ValidationFailed
from voicevault.services import chain_writer
from voicevault.services.chain_reader import ChainReader

NODE = "https://fullnode.testnet.example/v1"
PAY_FN = "0xb0fcc55b9a116fec51295eb73b03ac31083a841290405c955fc088c2eeb0bf27::payment_contract::pay_for_inference"


class _Resp:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        return self._payload


def _fake_node(routes):
    def _request(method, url, timeout=None, json=None, **kwargs):
        key = (method, url[len(NODE):])
        if key not in routes:
            return _Resp(404, {"error_code": "not_found"}, text="not found")
        return routes[key]
    return _request


def _user_tx(success=True, sender="0xBuyer", function=PAY_FN):
    return {
        "type": "user_transaction",
        "hash": "0xabc",
        "sender": sender,
        "success": success,
        "vm_status": "Executed successfully" if success else "Move abort",
        "payload": {"function": function, "arguments": []},
    }


def test_verify_payment_confirmed(monkeypatch):
    routes = {("GET", "/transactions/by_hash/0xabc"): _Resp(200, _user_tx())}
    monkeypatch.setattr("voicevault.services.chain_reader.requests.request", _fake_node(routes))

    out = ChainReader(NODE).verify_payment("0xabc", sender="0xbuyer")

    assert out["found"] is True
    assert out["confirmed"] is True
    assert out["function"] == PAY_FN


@pytest.mark.parametrize(
    "tx,sender",
    [
        (_user_tx(success=False), None),
        (_user_tx(function="0x1::coin::transfer"), None),
        (_user_tx(), "0xsomeoneelse"),
        ({"type": "pending_transaction", "sender": "0xBuyer", "payload": {"function": PAY_FN}}, None),
    ],
)
def test_verify_payment_not_confirmed(monkeypatch, tx, sender):
    routes = {("GET", "/transactions/by_hash/0xabc"): _Resp(200, tx)}
    monkeypatch.setattr("voicevault.services.chain_reader.requests.request", _fake_node(routes))

    out = ChainReader(NODE).verify_payment("0xabc", sender=sender)

    assert out["found"] is True
    assert out["confirmed"] is False


def test_verify_payment_unknown_hash(monkeypatch):
    monkeypatch.setattr("voicevault.services.chain_reader.requests.request", _fake_node({}))
    out = ChainReader(NODE).verify_payment("0xdead")
    assert out == {"tx_hash": "0xdead", "found": False, "confirmed": False}


def test_view_and_errors(monkeypatch):
    routes = {
        ("POST", "/view"): _Resp(200, [{"name": "Deep Voice"}]),
        ("GET", "/"): _Resp(500, {}, text="oops"),
    }
    monkeypatch.setattr("voicevault.services.chain_reader.requests.request", _fake_node(routes))
    reader = ChainReader(NODE + "/")

    assert reader.view("0x1::voice_identity::get_metadata", ["0xabc"]) == [{"name": "Deep Voice"}]
    with pytest.raises(ChainError):
        reader.get_ledger_info()
    assert reader.sanity()["reachable"] is False


def test_unreachable_node(monkeypatch):
    def _boom(method, url, timeout=None, **kwargs):
        raise requests.exceptions.ConnectTimeout("timeout")

    monkeypatch.setattr("voicevault.services.chain_reader.requests.request", _boom)
    with pytest.raises(ChainError):
        ChainReader(NODE).get_transaction("0xabc")


def test_from_settings_requires_node_url(monkeypatch):
    monkeypatch.setattr("voicevault.services.chain_reader.settings.APTOS_NODE_URL", None)
    assert ChainReader.from_settings() is None


def test_build_payment_payload_uses_breakdown_subunits():
    out = chain_writer.build_payment_payload("0xcreator", 0.1)
    payload = out["payload"]
    assert payload["function"] == PAY_FN
    assert payload["arguments"] == ["0xcreator", "10000000", "0xcreator"]
    assert out["breakdown"]["creator_subunits"] == 8_775_000

    out = chain_writer.build_payment_payload("0xcreator", 1, royalty_recipient="0xorig")
    assert out["payload"]["arguments"][2] == "0xorig"


def test_build_payment_payload_rejects_bad_input():
    with pytest.raises(InvalidAmount):
        chain_writer.build_payment_payload("0xcreator", 0)
    with pytest.raises(ValidationFailed):
        chain_writer.build_payment_payload("", 1)


def test_build_register_payload():
    out = chain_writer.build_register_payload(" Deep Voice ", "eleven:abc", "commercial", 0.1)
    assert out["payload"]["function"].endswith("::voice_identity::register_voice")
    assert out["payload"]["arguments"] == ["Deep Voice", "eleven:abc", "commercial", "10000000"]

    with pytest.raises(UnsupportedModelUri):
        chain_writer.build_register_payload("n", "azure:x", "commercial", 1)
    with pytest.raises(ValidationFailed):
        chain_writer.build_register_payload("n", "openai:alloy", "  ", 1)
    with pytest.raises(InvalidAmount):
        chain_writer.build_register_payload("n", "openai:alloy", "commercial", -1)
