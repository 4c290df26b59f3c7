"""Application services shared by swap handlers."""

from .address_validator import AddressValidator
from .status_reconciler import ReconcileResult, StatusReconciler

__all__ = ["AddressValidator", "ReconcileResult", "StatusReconciler"]
