from .models import (
    CURRENCY,
    DirectDebit,
    DirectDebitMessage,
    DirectDebitTransaction,
    Transaction,
)

__all__ = [
    "CURRENCY",
    "DirectDebit",
    "DirectDebitMessage",
    "DirectDebitTransaction",
    "Transaction",
]
