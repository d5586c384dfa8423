"""Tests for the spreadsheet ledger mirror."""

import json
from unittest.mock import MagicMock, patch

import httpx
import pytest
from wealth_snapshot.services.ledger_mirror import LedgerMirrorService
from wealth_snapshot.services.state import make_cash, make_stock


@pytest.fixture
def mirror():
    return LedgerMirrorService(url="https://script.example.test/exec", timeout=5)


@pytest.fixture
def accounts():
    return [
        make_cash("HSBC Savings", 1000, "HKD", account_id="c1"),
        make_stock("AAPL", 10, 100.0, "USD", name="IBKR", account_id="s1"),
    ]


def _reply(payload):
    mock_resp = MagicMock()
    mock_resp.json.return_value = payload
    return mock_resp


def test_payload_uses_quantity_for_stocks(mirror, accounts):
    payload = mirror.build_payload(accounts)
    assert payload == {
        "assets": [
            {"category": "CASH", "institution": "HSBC Savings", "symbol": "", "amount": 1000, "currency": "HKD"},
            {"category": "STOCK", "institution": "IBKR", "symbol": "AAPL", "amount": 10, "currency": "USD"},
        ]
    }


def test_push_sends_text_plain_body(mirror, accounts):
    reply = _reply({"status": "Success", "latestPrices": {"AAPL": 190.1}, "totalNetWorth": 9000})
    with patch("wealth_snapshot.services.ledger_mirror.httpx.post", return_value=reply) as mock_post:
        result = mirror.push(accounts)

    args, kwargs = mock_post.call_args
    assert args[0] == "https://script.example.test/exec"
    assert kwargs["headers"] == {"Content-Type": "text/plain"}
    assert json.loads(kwargs["content"]) == mirror.build_payload(accounts)
    assert result.latest_prices == {"AAPL": 190.1}
    assert result.total_net_worth == 9000


def test_invalid_prices_dropped(mirror, accounts):
    reply = _reply({"status": "Success", "latestPrices": {"AAPL": "n/a", "MSFT": -3, "TSLA": 250}})
    with patch("wealth_snapshot.services.ledger_mirror.httpx.post", return_value=reply):
        result = mirror.push(accounts)
    assert result.latest_prices == {"TSLA": 250.0}
    assert result.total_net_worth is None


def test_error_status_is_none(mirror, accounts):
    reply = _reply({"status": "Error", "message": "sheet locked"})
    with patch("wealth_snapshot.services.ledger_mirror.httpx.post", return_value=reply):
        assert mirror.push(accounts) is None


def test_network_failure_is_none(mirror, accounts):
    with patch("wealth_snapshot.services.ledger_mirror.httpx.post", side_effect=httpx.ConnectError("down")):
        assert mirror.push(accounts) is None


def test_disabled_without_url(accounts):
    mirror = LedgerMirrorService(url="")
    with patch("wealth_snapshot.services.ledger_mirror.httpx.post") as mock_post:
        assert mirror.push(accounts) is None
    mock_post.assert_not_called()
