"""
BudgetBee Core - Source Package

Transaction store and encrypted backup/restore engine for the
BudgetBee personal finance tracker.

DESIGN PRINCIPLES:
1. Reads fail open, writes fail closed
2. Every backup is a full, versioned snapshot
3. Restores never partially apply a bad backup
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "BudgetBee Team"
