"""
Services Package

Reconciliation of parsed listings with persisted auction state.
"""

from .auction_reconciler import AuctionReconciler, ReconcileResult, find_mode

__all__ = [
    "AuctionReconciler",
    "ReconcileResult",
    "find_mode",
]
