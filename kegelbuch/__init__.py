"""
Kegelbuch - Source Package

A ledger for recurring bowling evenings: who attended, which penalties
were thrown, what each game produced, and what every player owes.

DESIGN PRINCIPLES:
1. Totals are always derived, never stored
2. Data entry never fails on bad numbers (they become zero)
3. Every mutation is persisted immediately, as a full overwrite
4. A failed write never corrupts the in-memory ledger
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Kegelbuch Team"
