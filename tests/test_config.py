"""
Tests for configuration and structured logging
"""

import json
import logging
from decimal import Decimal

import pytest

from atm_ledger.config import LedgerConfig
from atm_ledger.logging_config import JSONFormatter, log_action, setup_logging


class TestLedgerConfig:
    """Test LedgerConfig defaults and environment overrides"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("ATM_LEDGER_INITIAL_CASH_RESERVE", raising=False)
        monkeypatch.delenv("ATM_LEDGER_ACCOUNTS_FILE", raising=False)
        config = LedgerConfig(_env_file=None)

        assert config.accounts_file == "accounts.txt"
        assert config.transactions_file == "transactions.txt"
        assert config.initial_cash_reserve_amount == Decimal("10000.00")
        assert config.admin_actor == "ADMIN"
        assert config.technician_actor == "TECH"

    def test_environment_override(self, monkeypatch):
        """Test ATM_LEDGER_ prefixed variables"""
        monkeypatch.setenv("ATM_LEDGER_ACCOUNTS_FILE", "/var/lib/atm/accounts.txt")
        monkeypatch.setenv("ATM_LEDGER_INITIAL_CASH_RESERVE", "25000.50")
        monkeypatch.setenv("ATM_LEDGER_API_PORT", "9000")
        config = LedgerConfig(_env_file=None)

        assert config.accounts_file == "/var/lib/atm/accounts.txt"
        assert config.initial_cash_reserve_amount == Decimal("25000.50")
        assert config.api_port == 9000

    def test_invalid_values_rejected(self):
        """Test that bad cash reserves and actor names fail when the config is built"""
        for kwargs in [
            {"initial_cash_reserve": "abc"},
            {"initial_cash_reserve": "-5.00"},
            {"admin_actor": "ADMIN | ROOT"},
            {"technician_actor": "TECH\n"},
            {"technician_actor": ""},
        ]:
            with pytest.raises(ValueError):
                LedgerConfig(_env_file=None, **kwargs)

    def test_cash_reserve_quantized(self):
        config = LedgerConfig(_env_file=None, initial_cash_reserve="2500.5")
        assert config.initial_cash_reserve_amount == Decimal("2500.50")


class TestStructuredLogging:
    """Test JSON log output"""

    def test_json_formatter(self):
        """Test that structured fields land in the JSON entry"""
        logger = logging.getLogger("atm_ledger.test_formatter")
        record = logger.makeRecord(logger.name, logging.INFO, __name__, 0, "Withdrawal successful", (), None)
        record.user_id = "1001"
        record.action = "withdraw"
        record.extra = {"amount": "500.00"}

        entry = json.loads(JSONFormatter().format(record))
        assert entry["message"] == "Withdrawal successful"
        assert entry["level"] == "INFO"
        assert entry["user_id"] == "1001"
        assert entry["extra"] == {"amount": "500.00"}
        assert "resource" not in entry

    def test_log_action_to_file(self, tmp_path):
        """Test setup_logging with a log file and log_action fields"""
        log_file = tmp_path / "ledger.log"
        logger = setup_logging("INFO", logger_name="atm_ledger_file_test", log_file=str(log_file))

        log_action(logger, "info", "Refilled ATM", user_id="TECH", action="refill_atm",
                   resource="account:ATM")
        log_action(logger, "debug", "not emitted")
        for handler in logger.handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 1
        entry = json.loads(lines[0])
        assert entry["action"] == "refill_atm"
        assert entry["resource"] == "account:ATM"
