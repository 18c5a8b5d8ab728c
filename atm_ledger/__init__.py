"""
ATM Ledger

Account ledger for a cash-dispensing terminal: Decimal balances, a shared
cash pool, durable account snapshots and an append-only transaction log,
all driven through one locked facade.
"""

__version__ = "1.0.0"
