"""
Gathering Ledger - Source Package

A shared-expense ledger: gatherings of members who log expenses and
payments, with equal-split balances and settlement on close.

DESIGN PRINCIPLES:
1. The whole store is one aggregate, read and written as a unit
2. Validate fully before mutating
3. No silent corrections (settlements are tagged as such)
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Gathering Ledger Team"
