"""
JSON-file data access layer.

Keeps the voice registry and the purchase ledger as JSON arrays under
settings.VOICEVAULT_DATA_DIR. Each file is read whole and rewritten
atomically; writers in the same process are serialised per path.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from voicevault.core.config import settings
from voicevault.core.errors import (
    PurchaseAlreadyRecorded,
    StoreError,
    ValidationFailed,
    VoiceAlreadyRegistered,
)

VOICE_REGISTRY_FILE = "voice-registry.json"
PURCHASED_VOICES_FILE = "purchased-voices.json"

_locks: Dict[str, threading.RLock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = str(path.resolve())
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.RLock()
        return lock


def _now_ms() -> int:
    return int(time.time() * 1000)


class JsonFileStore:
    """A list of JSON objects persisted in a single file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.lock = _lock_for(self.path)

    def _ensure(self) -> None:
        if self.path.exists():
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError("Failed to create data directory", {"path": str(self.path.parent), "reason": str(e)})
        self.write([])

    def read(self) -> List[Dict[str, Any]]:
        with self.lock:
            self._ensure()
            try:
                data = json.loads(self.path.read_text(encoding="utf-8") or "[]")
            except (OSError, ValueError) as e:
                logging.error("store read failed path=%s: %s", self.path, e)
                raise StoreError("Failed to read data file", {"path": str(self.path), "reason": str(e)})
            if not isinstance(data, list):
                raise StoreError("Data file must contain a JSON array", {"path": str(self.path)})
            return data

    def write(self, items: List[Dict[str, Any]]) -> None:
        with self.lock:
            fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), prefix=self.path.name, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(items, f, indent=2)
                os.replace(tmp, self.path)
            except OSError as e:
                logging.error("store write failed path=%s: %s", self.path, e)
                try:
                    os.unlink(tmp)
                except OSError:
                    pass
                raise StoreError("Failed to write data file", {"path": str(self.path), "reason": str(e)})

    def is_readable(self) -> bool:
        try:
            self.read()
            return True
        except StoreError:
            return False


class VoiceRegistry:
    """Voices registered for marketplace discovery, keyed by creator address."""

    def __init__(self, store: JsonFileStore):
        self.store = store

    @classmethod
    def from_settings(cls) -> "VoiceRegistry":
        return cls(JsonFileStore(Path(settings.VOICEVAULT_DATA_DIR) / VOICE_REGISTRY_FILE))

    def list_voices(self) -> List[Dict[str, Any]]:
        return self.store.read()

    def get(self, address: str) -> Optional[Dict[str, Any]]:
        for entry in self.store.read():
            if entry.get("address") == address:
                return entry
        return None

    def addresses(self) -> List[str]:
        return [entry.get("address") for entry in self.store.read()]

    def register(self, address: str, name: str, wallet_address: Optional[str] = None) -> Dict[str, Any]:
        """Append a voice unless its address is already registered."""
        if not address:
            raise ValidationFailed("address parameter missing")
        if not name:
            raise ValidationFailed("name parameter missing")
        with self.store.lock:
            registry = self.store.read()
            for entry in registry:
                if entry.get("address") == address:
                    raise VoiceAlreadyRegistered("Voice already registered", {"voice": entry})
            entry = {
                "address": address,
                "name": name,
                "walletAddress": wallet_address or None,
                "registeredAt": _now_ms(),
            }
            registry.append(entry)
            self.store.write(registry)
        logging.info("voice registered address=%s name=%s", address, name)
        return entry

    def metadata_for(self, addresses: List[str]) -> List[Dict[str, Any]]:
        """Metadata for known addresses, in request order; unknown ones are skipped."""
        by_address = {e.get("address"): e for e in self.store.read()}
        out = []
        for address in addresses:
            entry = by_address.get(address)
            if entry is None:
                continue
            out.append({
                "owner": entry.get("address"),
                "name": entry.get("name"),
                "registeredAt": entry.get("registeredAt"),
            })
        return out


class PurchaseLedger:
    """Append-only record of voices bought per buyer wallet."""

    def __init__(self, store: JsonFileStore):
        self.store = store

    @classmethod
    def from_settings(cls) -> "PurchaseLedger":
        return cls(JsonFileStore(Path(settings.VOICEVAULT_DATA_DIR) / PURCHASED_VOICES_FILE))

    @staticmethod
    def _matches(p: Dict[str, Any], voice_id: str, owner: str, wallet_address: str) -> bool:
        return (
            p.get("voiceId") == voice_id
            and p.get("owner") == owner
            and p.get("walletAddress") == wallet_address
        )

    def list_purchases(self, wallet_address: Optional[str] = None) -> List[Dict[str, Any]]:
        purchases = self.store.read()
        if wallet_address:
            return [p for p in purchases if p.get("walletAddress") == wallet_address]
        return purchases

    def is_purchased(self, voice_id: str, owner: str, wallet_address: str) -> bool:
        return any(self._matches(p, voice_id, owner, wallet_address) for p in self.store.read())

    def record(
        self,
        voice_id: str,
        owner: str,
        tx_hash: str,
        wallet_address: str,
        *,
        name: Optional[str] = None,
        model_uri: Optional[str] = None,
        price: float = 0,
    ) -> Dict[str, Any]:
        if not (voice_id and owner and tx_hash and wallet_address):
            raise ValidationFailed("Missing required fields: voiceId, owner, txHash, walletAddress")
        with self.store.lock:
            purchases = self.store.read()
            if any(self._matches(p, voice_id, owner, wallet_address) for p in purchases):
                raise PurchaseAlreadyRecorded("Voice already purchased by this wallet")
            purchase = {
                "voiceId": voice_id,
                "name": name or f"Voice {voice_id}",
                "modelUri": model_uri or "",
                "owner": owner,
                "price": price or 0,
                "purchasedAt": _now_ms(),
                "txHash": tx_hash,
                "walletAddress": wallet_address,
            }
            purchases.append(purchase)
            self.store.write(purchases)
        logging.info("purchase recorded voice_id=%s buyer=%s tx=%s", voice_id, wallet_address, tx_hash)
        return purchase
