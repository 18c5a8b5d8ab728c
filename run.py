#!/usr/bin/env python3
"""
ATM Ledger Entry Point

Starts the FastAPI server with the configured account and transaction files.
"""

import sys

import uvicorn

from atm_ledger.api import create_app
from atm_ledger.config import get_config
from atm_ledger.logging_config import setup_logging
from atm_ledger.results import LedgerError


if __name__ == "__main__":
    config = get_config()
    setup_logging(config.log_level, log_format=config.log_format, log_file=config.log_file)

    print("🏧 Starting ATM Ledger...")
    print(f"📒 Accounts file: {config.accounts_file}")
    print(f"🧾 Transaction log: {config.transactions_file}")
    print(f"🌐 API available at: http://{config.api_host}:{config.api_port}")
    print()

    try:
        app = create_app(config=config)
        uvicorn.run(app, host=config.api_host, port=config.api_port)
    except KeyboardInterrupt:
        print("\n👋 Shutting down ATM Ledger...")
    except LedgerError as e:
        print(f"❌ Error loading ledger: {e.message}")
        sys.exit(1)
