"""Local storage for tenders and sync run history."""

from rfp_quest.store.base import BaseTenderStore
from rfp_quest.store.ledger import SyncLedger
from rfp_quest.store.sqlite_store import TenderStore

__all__ = [
    "BaseTenderStore",
    "SyncLedger",
    "TenderStore",
]
