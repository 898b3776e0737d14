"""
nftmarket/ledger/journal.py

Signed event journal.

Every committed marketplace response is appended as one JournalEntry to
an append-only JSONL file. record() MUST, in this order:
  1. Acquire lock
  2. Build the entry:   sequence, timestamp, causal_hash of the previous entry
  3. Sign it:           Ed25519 over RFC 8785 canonical bytes
  4. Append the line:   state advances only after the write succeeds
  5. Return the signed entry

causal_hash = SHA-256(JCS(prev.to_signing_dict())), GENESIS_HASH for the
first entry. Changing any field of an entry breaks its own signature and
the causal_hash of the entry after it.
"""

import json
import threading
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from nftmarket.core.canonical import canonical_hash, canonicalize
from nftmarket.core.crypto import JournalSigner, verify_entry_signature
from nftmarket.core.exceptions import LedgerError
from nftmarket.core.models import Response
from nftmarket.core.time import journal_timestamp


GENESIS_HASH = "0" * 64


@dataclass
class JournalEntry:
    sequence:          int
    timestamp:         str
    causal_hash:       str
    signer_public_key: str
    operation:         str
    sender:            str
    payload:           Dict[str, Any]
    signature:         Optional[str] = None

    def to_signing_dict(self) -> Dict[str, Any]:
        return {
            "causal_hash":       self.causal_hash,
            "operation":         self.operation,
            "payload":           self.payload,
            "sender":            self.sender,
            "sequence":          self.sequence,
            "signer_public_key": self.signer_public_key,
            "timestamp":         self.timestamp,
        }

    def to_dict(self) -> Dict[str, Any]:
        d = self.to_signing_dict()
        d["signature"] = self.signature
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JournalEntry":
        return cls(
            sequence=          data["sequence"],
            timestamp=         data["timestamp"],
            causal_hash=       data["causal_hash"],
            signer_public_key= data["signer_public_key"],
            operation=         data["operation"],
            sender=            data["sender"],
            payload=           data.get("payload", {}),
            signature=         data.get("signature"),
        )

    def sign(self, signer: JournalSigner) -> "JournalEntry":
        self.signature = signer.sign(canonicalize(self.to_signing_dict()))
        return self

    def verify_signature(self) -> bool:
        if not self.signature:
            return False
        return verify_entry_signature(
            canonicalize(self.to_signing_dict()),
            self.signature,
            self.signer_public_key,
        )

    def verify_chain(self, prev: Optional["JournalEntry"]) -> bool:
        return self.causal_hash == chain_hash(prev)


def chain_hash(prev: Optional[JournalEntry]) -> str:
    if prev is None:
        return GENESIS_HASH
    return canonical_hash(prev.to_signing_dict())


@dataclass
class JournalSummary:
    total_entries:      int = 0
    valid_signatures:   int = 0
    invalid_signatures: int = 0
    violations:         List[str] = field(default_factory=list)
    head_hash:          Optional[str] = None

    @property
    def valid(self) -> bool:
        return not self.violations

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_entries":      self.total_entries,
            "valid_signatures":   self.valid_signatures,
            "invalid_signatures": self.invalid_signatures,
            "violations":         list(self.violations),
            "head_hash":          self.head_hash,
            "valid":              self.valid,
        }


class EventJournal:
    """
    Append-only signed journal of marketplace responses.

    Thread-safe via internal lock (single-process only).
    State survives restart by reading the last line of the file.
    """

    def __init__(self, signer: JournalSigner, path: Path) -> None:
        self.signer = signer
        self.path   = Path(path)

        self._lock = threading.Lock()
        self._sequence: int = 0
        self._last_entry: Optional[JournalEntry] = None

        self._restore_state()

    def record(self, operation: str, sender: str, response: Response) -> JournalEntry:
        """
        Append one signed entry for a response.

        Raises LedgerError if the write fails; the caller's transaction
        must then abort.
        """
        with self._lock:
            entry = JournalEntry(
                sequence=          self._sequence,
                timestamp=         journal_timestamp(),
                causal_hash=       chain_hash(self._last_entry),
                signer_public_key= self.signer.public_key_hex,
                operation=         operation,
                sender=            sender,
                payload=           {
                    "events":     [e.to_dict() for e in response.events],
                    "attributes": [{"key": k, "value": v} for k, v in response.attributes],
                },
            ).sign(self.signer)

            self._append(entry)

            self._sequence  += 1
            self._last_entry = entry
            return entry

    @property
    def next_sequence(self) -> int:
        return self._sequence

    # ── Verification ──────────────────────────────────────────

    @staticmethod
    def load(path: Path) -> List[JournalEntry]:
        """Read every entry. Raises LedgerError on unreadable or malformed lines."""
        entries = []
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, 1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entries.append(JournalEntry.from_dict(json.loads(line)))
                    except (json.JSONDecodeError, KeyError, TypeError) as e:
                        raise LedgerError(f"Invalid journal entry at line {line_num}: {e}")
        except OSError as e:
            raise LedgerError(f"Failed to read journal: {e}", {"path": str(path)})
        return entries

    @staticmethod
    def verify(path: Path) -> JournalSummary:
        """Check sequence, chain linkage and every signature."""
        entries = EventJournal.load(path)
        summary = JournalSummary(total_entries=len(entries))

        prev = None
        for i, entry in enumerate(entries):
            if entry.sequence != i:
                summary.violations.append(
                    f"sequence gap at index {i}: got {entry.sequence}"
                )
            if not entry.verify_chain(prev):
                summary.violations.append(f"chain break at sequence {entry.sequence}")
            if entry.verify_signature():
                summary.valid_signatures += 1
            else:
                summary.invalid_signatures += 1
                summary.violations.append(f"invalid signature at sequence {entry.sequence}")
            prev = entry

        summary.head_hash = chain_hash(prev) if prev is not None else None
        return summary

    # ── Internal ──────────────────────────────────────────────

    def _restore_state(self) -> None:
        if not self.path.exists():
            return

        last_line = None
        with open(self.path, "r", encoding="utf-8") as f:
            for line in f:
                if line.strip():
                    last_line = line.strip()

        if not last_line:
            return

        try:
            entry = JournalEntry.from_dict(json.loads(last_line))
        except (json.JSONDecodeError, KeyError, TypeError) as exc:
            warnings.warn(
                f"EventJournal: could not restore state from {self.path}: {exc}. "
                "Last line may be corrupted. Run 'nftmarket verify' before recording.",
                RuntimeWarning,
                stacklevel=3,
            )
            return

        self._sequence   = entry.sequence + 1
        self._last_entry = entry

    def _append(self, entry: JournalEntry) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry.to_dict()) + "\n")
        except OSError as exc:
            raise LedgerError(f"Journal write failed: {exc}", {"path": str(self.path)}) from exc
