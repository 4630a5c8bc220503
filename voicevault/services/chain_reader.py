from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from voicevault.core.config import settings
from voicevault.core.errors import ChainError

PAYMENT_FUNCTION = "payment_contract::pay_for_inference"


class ChainReader:
    """Read-only client for an Aptos fullnode REST API (base URL ends in /v1)."""

    def __init__(self, node_url: str, timeout: float = 15.0):
        self.node_url = node_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> Optional["ChainReader"]:
        if not settings.APTOS_NODE_URL:
            return None
        return cls(settings.APTOS_NODE_URL, timeout=settings.APTOS_TIMEOUT_SECONDS)

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.node_url}{path}"
        try:
            return requests.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logging.error("aptos %s %s failed: %s", method, path, e)
            raise ChainError("Aptos node unreachable", {"url": url, "reason": str(e)})

    def get_ledger_info(self) -> Dict[str, Any]:
        r = self._request("GET", "/")
        if r.status_code != 200:
            raise ChainError("Ledger info request failed", {"status": r.status_code, "body": r.text[:500]})
        return r.json() or {}

    def get_transaction(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        """Return the transaction, or None when the node does not know the hash."""
        r = self._request("GET", f"/transactions/by_hash/{tx_hash}")
        if r.status_code == 404:
            return None
        if r.status_code != 200:
            raise ChainError(
                "Transaction lookup failed",
                {"status": r.status_code, "tx_hash": tx_hash, "body": r.text[:500]},
            )
        return r.json() or {}

    def view(self, function: str, arguments: List[Any], type_arguments: List[str] | None = None) -> List[Any]:
        body = {
            "function": function,
            "type_arguments": list(type_arguments or []),
            "arguments": list(arguments),
        }
        r = self._request("POST", "/view", json=body)
        if r.status_code != 200:
            raise ChainError(
                "View function call failed",
                {"status": r.status_code, "function": function, "body": r.text[:500]},
            )
        out = r.json()
        if not isinstance(out, list):
            raise ChainError("Unexpected view response", {"function": function})
        return out

    def verify_payment(self, tx_hash: str, sender: Optional[str] = None) -> Dict[str, Any]:
        """
        Summarise whether tx_hash is a committed, successful payment.

        confirmed: the transaction is committed (not pending) and succeeded,
        called the payment entry function, and (if given) was sent by sender.
        """
        tx = self.get_transaction(tx_hash)
        if tx is None:
            return {"tx_hash": tx_hash, "found": False, "confirmed": False}

        payload = tx.get("payload") or {}
        function = str(payload.get("function") or "")
        tx_sender = str(tx.get("sender") or "")
        committed = tx.get("type") == "user_transaction"
        success = bool(tx.get("success")) if committed else False
        is_payment = function.endswith(PAYMENT_FUNCTION)
        sender_ok = sender is None or tx_sender.lower() == sender.lower()

        return {
            "tx_hash": tx_hash,
            "found": True,
            "committed": committed,
            "success": success,
            "sender": tx_sender,
            "function": function,
            "vm_status": tx.get("vm_status"),
            "confirmed": committed and success and is_payment and sender_ok,
        }

    def sanity(self) -> Dict[str, Any]:
        """Return basic diagnostics for easier troubleshooting."""
        try:
            info = self.get_ledger_info()
        except ChainError as e:
            return {"node_url": self.node_url, "reachable": False, "error": e.message}
        return {
            "node_url": self.node_url,
            "reachable": True,
            "chain_id": info.get("chain_id"),
            "ledger_version": info.get("ledger_version"),
            "payment_contract": settings.PAYMENT_CONTRACT_ADDRESS,
            "voice_identity_contract": settings.VOICE_IDENTITY_CONTRACT_ADDRESS,
        }
