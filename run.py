#!/usr/bin/env python3
"""
Ledger Simulator Entry Point

Seeds two demo users and runs a deposit, a withdrawal and a transfer against
an in-memory ledger configured from the environment (LEDGER_* variables).
"""

import sys

from ledger_sim.config import load_config
from ledger_sim.currency import format_amount
from ledger_sim.errors import LedgerError
from ledger_sim.ledger import Ledger
from ledger_sim.logging_config import setup_logging


def print_account(ledger: Ledger, account_id: str) -> None:
    account = ledger.find_account_by_id(account_id)
    currency = ledger.config.currency_unit
    print(f"  {account.id} ({account.owner.username}): {format_amount(account.balance, currency)}")
    for transaction in ledger.get_transaction_history(account_id):
        print(f"    {transaction.render(currency, ledger.config.date_format)}")


def main() -> int:
    config = load_config()
    setup_logging(config.log_level, fmt=config.log_format)
    ledger = Ledger(config)

    print(f"{config.app_name} v{config.app_version}")
    print()

    try:
        first = ledger.create_user_with_account("user1", "password1", "user1@example.com", 1000)
        second = ledger.create_user_with_account("user2", "password2", "user2@example.com", 500)

        ledger.deposit(first.id, "250.00")
        ledger.withdraw(second.id, 120)
        ledger.transfer(first.id, second.id, 300)

        if ledger.withdraw(second.id, 5000) is None:
            print("Withdrawal of 5000 refused: insufficient funds")
        print()
    except LedgerError as e:
        print(f"Error: {e}")
        return 1

    print("Accounts:")
    print_account(ledger, first.id)
    print_account(ledger, second.id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
