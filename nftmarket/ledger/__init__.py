"""
nftmarket Ledger - marketplace state and its signed event journal.

The store is the only mutable shared resource; the journal is the
audit trail of every committed response.
"""

from nftmarket.ledger.journal import EventJournal, JournalEntry, JournalSummary
from nftmarket.ledger.store import FileStore, LedgerStore, MemoryStore

__all__ = [
    "EventJournal",
    "JournalEntry",
    "JournalSummary",
    "FileStore",
    "LedgerStore",
    "MemoryStore",
]
