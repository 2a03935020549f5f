"""Transaction store package."""

from budgetbee.store.transaction_store import TransactionStore

__all__ = ["TransactionStore"]
