"""
Ledger Simulator

An in-memory ledger of users, accounts and money-movement transactions with
Decimal balances, atomic transfers and observers for audit and notifications.
"""

__version__ = "1.0.0"
