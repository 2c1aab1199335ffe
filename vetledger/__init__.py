"""
Vet Ledger - Source Package

The financial core of a veterinary practice: invoices owed by clients,
payments applied against them, expenses, and the summaries built from them.

DESIGN PRINCIPLES:
1. One writer for derived state (the payment reconciler owns payment_status)
2. Fail early, fail visibly
3. No silent corrections, no silent retries
4. The signed-in user is passed in, never read from global state
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Vet Ledger Team"
