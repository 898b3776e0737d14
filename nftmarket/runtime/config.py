"""
Marketplace configuration.

A YAML document describing one marketplace deployment:

    admin: admin
    taker_fee: 5
    native_denom: u
    marketplace_address: market
    taker_address: taker          # optional, defaults to admin
    state_path: state.json        # relative paths resolve against the file
    journal_path: journal.jsonl
    key_path: keys/journal.pem
    registry:                     # token registry for local runs
      collection:
        "1": {owner: seller, approvals: [market]}

The CLI reads the path from --config or NFTMARKET_CONFIG.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from nftmarket.core.crypto import JournalSigner
from nftmarket.core.exceptions import ConfigError
from nftmarket.ledger.journal import EventJournal
from nftmarket.ledger.store import FileStore, LedgerStore
from nftmarket.registry.client import InMemoryRegistry
from nftmarket.runtime.market import Marketplace


ENV_VAR = "NFTMARKET_CONFIG"

_REQUIRED = ("admin", "taker_fee", "native_denom", "marketplace_address")


@dataclass
class MarketConfig:
    admin:               str
    taker_fee:           int
    native_denom:        str
    marketplace_address: str
    taker_address:       Optional[str] = None
    state_path:          Path = Path("state.json")
    journal_path:        Path = Path("journal.jsonl")
    key_path:            Path = Path("keys/journal.pem")
    registry:            Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, base_dir: Path = Path(".")) -> "MarketConfig":
        if not isinstance(data, dict):
            raise ConfigError("configuration must be a mapping")
        missing = [k for k in _REQUIRED if k not in data]
        if missing:
            raise ConfigError(f"missing configuration keys: {', '.join(missing)}")
        registry = data.get("registry") or {}
        if not isinstance(registry, dict):
            raise ConfigError("registry must be a mapping of collections")

        def resolve(key: str, default: str) -> Path:
            path = Path(data.get(key, default))
            return path if path.is_absolute() else base_dir / path

        return cls(
            admin=               data["admin"],
            taker_fee=           data["taker_fee"],
            native_denom=        data["native_denom"],
            marketplace_address= data["marketplace_address"],
            taker_address=       data.get("taker_address"),
            state_path=          resolve("state_path", "state.json"),
            journal_path=        resolve("journal_path", "journal.jsonl"),
            key_path=            resolve("key_path", "keys/journal.pem"),
            registry=            registry,
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "MarketConfig":
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"cannot read configuration: {e}", {"path": str(path)})
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML: {e}", {"path": str(path)})
        return cls.from_dict(data, base_dir=path.parent)

    def build(self, with_journal: bool = True) -> Marketplace:
        """Open the file-backed store, the signed journal and the registry."""
        try:
            registry = InMemoryRegistry.from_dict(self.registry)
        except (KeyError, TypeError, AttributeError) as e:
            raise ConfigError(f"invalid registry section: {e!r}")
        journal = None
        if with_journal:
            signer = JournalSigner.open(self.key_path)
            journal = EventJournal(signer, self.journal_path)
        return Marketplace(
            registry=registry,
            store=LedgerStore(FileStore(self.state_path)),
            journal=journal,
        )

    def instantiate(self, market: Marketplace):
        return market.instantiate(
            sender=self.admin,
            taker_fee=self.taker_fee,
            native_denom=self.native_denom,
            marketplace_address=self.marketplace_address,
            taker_address=self.taker_address,
        )
