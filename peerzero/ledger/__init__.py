"""Credibility ledger and live progress queries."""

from peerzero.ledger.credibility_ledger import CredibilityLedger, LedgerAudit
from peerzero.ledger.progress import ProgressReader

__all__ = ["CredibilityLedger", "LedgerAudit", "ProgressReader"]
