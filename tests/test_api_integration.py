"""
Integration tests for the ATM Ledger API
Tests end-to-end workflows using FastAPI TestClient
"""

import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from atm_ledger.api import create_app
from atm_ledger.config import LedgerConfig
from atm_ledger.ledger import Ledger


TECH_HEADERS = {"X-Technician-Id": "tech", "X-Technician-Pin": "0000"}


@pytest.fixture
def data_dir():
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def client(data_dir):
    """Create a test client over a ledger stored in a temp directory"""
    config = LedgerConfig(
        accounts_file=str(data_dir / "accounts.txt"),
        transactions_file=str(data_dir / "transactions.txt")
    )
    app = create_app(ledger=Ledger.open(config), config=config)
    return TestClient(app)


def credentials(account_id="1001", pin="1234", **extra):
    return {"account_id": account_id, "pin": pin, **extra}


class TestHealthEndpoints:
    """Test basic health and root endpoints"""

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"

    def test_root(self, client):
        r = client.get("/")
        assert r.status_code == 200
        data = r.json()
        assert data["name"] == "ATM Ledger API"
        assert "customer" in data["endpoints"]


class TestCustomerFlow:
    """End-to-end customer session tests"""

    def test_login(self, client):
        """Test login returns name and balance"""
        r = client.post("/customer/login", json=credentials())
        assert r.status_code == 200
        assert r.json() == {"account_id": "1001", "name": "vignesh reddy", "balance": "15000.00"}

    def test_login_bad_pin(self, client):
        """Test that a wrong pin is 401 with the uniform message"""
        r = client.post("/customer/login", json=credentials(pin="9999"))
        assert r.status_code == 401
        assert r.json()["detail"]["error"] == "auth_failure"

    def test_withdraw(self, client, data_dir):
        """Test withdrawal updates balance, snapshot and log"""
        r = client.post("/customer/withdraw", json=credentials(amount="500"))
        assert r.status_code == 200
        data = r.json()
        assert data["account"]["balance"] == "14500.00"
        assert data["message"] == "Withdrawal successful. Dispensed 500.00"

        log = (data_dir / "transactions.txt").read_text(encoding="utf-8").splitlines()
        assert len(log) == 1
        assert log[0].endswith("| 1001 | WITHDRAW | target:1001 | 500.00")

    def test_withdraw_requires_credentials(self, client):
        """Test that an operation with a wrong pin changes nothing"""
        r = client.post("/customer/withdraw", json=credentials(pin="0000", amount="500"))
        assert r.status_code == 401

        r = client.post("/customer/login", json=credentials())
        assert r.json()["balance"] == "15000.00"

    def test_withdraw_bad_amounts(self, client):
        """Test unparseable and non-positive amounts are 400"""
        for amount in ["abc", "0", "-20", ""]:
            r = client.post("/customer/withdraw", json=credentials(amount=amount))
            assert r.status_code == 400

    def test_withdraw_conflicts(self, client):
        """Test overdraw and empty dispenser are 409"""
        r = client.post("/customer/withdraw", json=credentials(account_id="1002", pin="2345", amount="10000.01"))
        assert r.status_code == 409
        assert r.json()["detail"]["error"] == "insufficient_pool_cash"

        r = client.post("/technician/cash/refill", json={"amount": "50000"}, headers=TECH_HEADERS)
        assert r.status_code == 200

        r = client.post("/customer/withdraw", json=credentials(amount="15000.01"))
        assert r.status_code == 409
        assert r.json()["detail"]["error"] == "insufficient_funds"

        r = client.get("/technician/cash", headers=TECH_HEADERS)
        assert r.json()["available"] == "60000.00"

    def test_deposit_with_thousands_separator(self, client):
        """Test amounts entered with a thousands separator"""
        r = client.post("/customer/deposit", json=credentials(account_id="1003", pin="3456", amount="1,250.50"))
        assert r.status_code == 200
        assert r.json()["account"]["balance"] == "11250.50"

    def test_transfer(self, client):
        """Test transfer between two customers"""
        r = client.post("/customer/transfer", json=credentials(amount="1000", to_account_id="1002"))
        assert r.status_code == 200
        assert r.json()["account"]["balance"] == "14000.00"

        r = client.post("/customer/login", json=credentials(account_id="1002", pin="2345"))
        assert r.json()["balance"] == "31000.00"

    def test_transfer_errors(self, client):
        """Test transfer to self and to an unknown account"""
        r = client.post("/customer/transfer", json=credentials(amount="10", to_account_id="1001"))
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "same_account"

        r = client.post("/customer/transfer", json=credentials(amount="10", to_account_id="4242"))
        assert r.status_code == 404


class TestTechnicianFlow:
    """End-to-end technician console tests"""

    def test_requires_technician_credentials(self, client):
        """Test missing and wrong technician headers"""
        assert client.get("/technician/accounts").status_code == 422

        r = client.get("/technician/accounts", headers={"X-Technician-Id": "tech", "X-Technician-Pin": "1111"})
        assert r.status_code == 401

    def test_technician_id_case_insensitive(self, client):
        r = client.get("/technician/cash", headers={"X-Technician-Id": "TECH", "X-Technician-Pin": "0000"})
        assert r.status_code == 200
        assert r.json() == {"available": "10000.00"}

    def test_list_accounts(self, client):
        r = client.get("/technician/accounts", headers=TECH_HEADERS)
        assert r.status_code == 200
        data = r.json()
        assert data["cash_reserve"]["available"] == "10000.00"
        assert [a["account_id"] for a in data["accounts"]] == ["1001", "1002", "1003"]

    def test_add_and_remove_account(self, client):
        """Test account lifecycle through the console"""
        r = client.post("/technician/accounts", json={
            "account_id": "2001", "pin": "1111", "name": "New Customer", "initial_balance": "250"
        }, headers=TECH_HEADERS)
        assert r.status_code == 201
        assert r.json()["account"]["balance"] == "250.00"

        r = client.post("/customer/login", json=credentials(account_id="2001", pin="1111"))
        assert r.status_code == 200

        r = client.delete("/technician/accounts/2001", headers=TECH_HEADERS)
        assert r.status_code == 200

        r = client.delete("/technician/accounts/2001", headers=TECH_HEADERS)
        assert r.status_code == 404

    def test_add_account_rejections(self, client):
        """Test duplicate ids and invalid fields"""
        r = client.post("/technician/accounts", json={
            "account_id": "1001", "pin": "1111", "name": "Impostor"
        }, headers=TECH_HEADERS)
        assert r.status_code == 409
        assert r.json()["detail"]["error"] == "duplicate_id"

        r = client.post("/technician/accounts", json={
            "account_id": "20,01", "pin": "1111", "name": "x"
        }, headers=TECH_HEADERS)
        assert r.status_code == 400

        r = client.post("/technician/accounts", json={
            "account_id": "2001", "pin": "1111", "name": "x", "initial_balance": "lots"
        }, headers=TECH_HEADERS)
        assert r.status_code == 400

    def test_refill_and_transaction_log(self, client):
        """Test refill, log view and integrity check"""
        r = client.post("/technician/cash/refill", json={"amount": "2500"}, headers=TECH_HEADERS)
        assert r.status_code == 200
        assert r.json() == {"available": "12500.00"}

        client.post("/customer/deposit", json=credentials(amount="5"))

        r = client.get("/technician/transactions", headers=TECH_HEADERS)
        lines = r.json()["lines"]
        assert len(lines) == 2
        assert lines[0].endswith("| TECH | REFILL_ATM | target:ATM | 2500.00")
        assert lines[1].endswith("| 1001 | DEPOSIT | target:1001 | 5.00")

        r = client.get("/technician/transactions/verify", headers=TECH_HEADERS)
        assert r.status_code == 200
        report = r.json()
        assert report["valid"] is True
        assert report["total_lines"] == 2

    def test_refill_invalid_amount(self, client):
        r = client.post("/technician/cash/refill", json={"amount": "0"}, headers=TECH_HEADERS)
        assert r.status_code == 400
