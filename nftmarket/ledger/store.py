"""
Ledger store: transactional key-value state of the marketplace.

Backends:
    MemoryStore   process-local dict
    FileStore     MemoryStore persisted to one JSON document on commit

Both expose transaction(): a snapshot is taken on entry and restored
if the block raises, so a failed operation leaves no partial state.
Nested transaction() blocks join the outermost one.

Values are JSON-primitive dicts and are replaced, never mutated in place,
which keeps the snapshot a shallow copy.

LedgerStore layers the marketplace tables over a backend:
    config/*                  singletons (taker fee, currency, addresses, admin)
    collections/<address>     Collection records
    sales/<address>/<token>   Sale records
"""

import json
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

from nftmarket.core.exceptions import LedgerError
from nftmarket.core.models import Collection, Sale
from nftmarket.core.ownership import Ownership


class MemoryStore:
    """In-memory key-value backend with snapshot transactions."""

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = dict(data or {})
        self._lock  = threading.RLock()
        self._depth = 0

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def scan(self, prefix: str) -> Iterator[Tuple[str, Any]]:
        """Yield (key, value) pairs under prefix in key order."""
        for key in sorted(k for k in self._data if k.startswith(prefix)):
            yield key, self._data[key]

    def __len__(self) -> int:
        return len(self._data)

    @contextmanager
    def transaction(self):
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            snapshot = dict(self._data)
            self._depth = 1
            try:
                yield self
                self._commit()
            except BaseException:
                self._data = snapshot
                raise
            finally:
                self._depth = 0

    def _commit(self) -> None:
        """Hook for durable backends. The in-memory state is already current."""
        pass


class FileStore(MemoryStore):
    """
    MemoryStore persisted as a single JSON document.

    Commit writes a temp file, fsyncs it and renames it over the target,
    so the file on disk is always a complete committed state.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise LedgerError(f"Failed to load store: {e}", {"path": str(self.path)})
        if not isinstance(data, dict):
            raise LedgerError("Store document must be a JSON object", {"path": str(self.path)})
        return data

    def _commit(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(".tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, sort_keys=True, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise LedgerError(f"Failed to write store: {e}", {"path": str(self.path)})


class LedgerStore:
    """Typed marketplace tables over a MemoryStore-compatible backend."""

    TAKER_FEE           = "config/taker_fee"
    NATIVE_DENOM        = "config/native_denom"
    TAKER_ADDRESS       = "config/taker_address"
    MARKETPLACE_ADDRESS = "config/marketplace_address"
    OWNERSHIP           = "config/ownership"

    COLLECTIONS = "collections/"
    SALES       = "sales/"

    def __init__(self, backend: Optional[MemoryStore] = None) -> None:
        self.backend = backend if backend is not None else MemoryStore()

    def transaction(self):
        return self.backend.transaction()

    def is_instantiated(self) -> bool:
        return self.backend.get(self.OWNERSHIP) is not None

    # ── Singletons ────────────────────────────────────────────

    def _load_required(self, key: str) -> Any:
        value = self.backend.get(key)
        if value is None:
            raise LedgerError("Marketplace is not instantiated", {"key": key})
        return value

    def load_taker_fee(self) -> int:
        return self._load_required(self.TAKER_FEE)

    def save_taker_fee(self, fee: int) -> None:
        self.backend.set(self.TAKER_FEE, fee)

    def load_native_denom(self) -> str:
        return self._load_required(self.NATIVE_DENOM)

    def save_native_denom(self, denom: str) -> None:
        self.backend.set(self.NATIVE_DENOM, denom)

    def load_taker_address(self) -> str:
        return self._load_required(self.TAKER_ADDRESS)

    def save_taker_address(self, address: str) -> None:
        self.backend.set(self.TAKER_ADDRESS, address)

    def load_marketplace_address(self) -> str:
        return self._load_required(self.MARKETPLACE_ADDRESS)

    def save_marketplace_address(self, address: str) -> None:
        self.backend.set(self.MARKETPLACE_ADDRESS, address)

    def load_ownership(self) -> Ownership:
        return Ownership.from_dict(self._load_required(self.OWNERSHIP))

    def save_ownership(self, ownership: Ownership) -> None:
        self.backend.set(self.OWNERSHIP, ownership.to_dict())

    # ── Collections ───────────────────────────────────────────

    def load_collection(self, address: str) -> Optional[Collection]:
        data = self.backend.get(self.COLLECTIONS + address)
        return Collection.from_dict(data) if data is not None else None

    def has_collection(self, address: str) -> bool:
        return self.backend.get(self.COLLECTIONS + address) is not None

    def save_collection(self, address: str, collection: Collection) -> None:
        self.backend.set(self.COLLECTIONS + address, collection.to_dict())

    def iter_collections(self) -> Iterator[Tuple[str, Collection]]:
        for key, data in self.backend.scan(self.COLLECTIONS):
            yield key[len(self.COLLECTIONS):], Collection.from_dict(data)

    # ── Sales ─────────────────────────────────────────────────

    def _sale_key(self, collection: str, token_id: str) -> str:
        return f"{self.SALES}{collection}/{token_id}"

    def load_sale(self, collection: str, token_id: str) -> Optional[Sale]:
        data = self.backend.get(self._sale_key(collection, token_id))
        return Sale.from_dict(data) if data is not None else None

    def has_sale(self, collection: str, token_id: str) -> bool:
        return self.backend.get(self._sale_key(collection, token_id)) is not None

    def save_sale(self, collection: str, token_id: str, sale: Sale) -> None:
        self.backend.set(self._sale_key(collection, token_id), sale.to_dict())

    def remove_sale(self, collection: str, token_id: str) -> None:
        self.backend.delete(self._sale_key(collection, token_id))

