"""Tests for the Gemini price oracle and statement extractor."""

import base64
import json
from unittest.mock import MagicMock, patch

import httpx
import pytest
from wealth_snapshot.services.cache import PriceCache
from wealth_snapshot.services.gemini import GeminiService


def _reply(payload):
    """Mock generateContent response whose text part holds ``payload`` as JSON."""
    mock_resp = MagicMock()
    mock_resp.json.return_value = {
        "candidates": [{"content": {"parts": [{"text": json.dumps(payload)}]}}]
    }
    return mock_resp


@pytest.fixture
def gemini():
    return GeminiService(
        api_key="test-key",
        model="gemini-test",
        api_url="https://example.test/models",
        max_attempts=3,
        base_delay=0,
        cache=PriceCache(ttl=60),
    )


class TestEstimatePrice:
    def test_returns_price(self, gemini):
        with patch("wealth_snapshot.services.gemini.httpx.post", return_value=_reply({"price": 340.5})) as mock_post:
            assert gemini.estimate_price("0700.HK") == 340.5
        args, kwargs = mock_post.call_args
        assert args[0] == "https://example.test/models/gemini-test:generateContent"
        assert kwargs["params"] == {"key": "test-key"}
        assert "0700.HK" in kwargs["json"]["contents"][0]["parts"][0]["text"]

    def test_cached_after_first_call(self, gemini):
        with patch("wealth_snapshot.services.gemini.httpx.post", return_value=_reply({"price": 10})) as mock_post:
            gemini.estimate_price("AAPL")
            assert gemini.estimate_price("aapl") == 10.0
        assert mock_post.call_count == 1

    @pytest.mark.parametrize("payload", [{"price": "abc"}, {"price": -1}, {"price": True}, {}])
    def test_unusable_answer_is_none(self, gemini, payload):
        with patch("wealth_snapshot.services.gemini.httpx.post", return_value=_reply(payload)):
            assert gemini.estimate_price("AAPL") is None

    def test_malformed_json_is_none(self, gemini):
        mock_resp = MagicMock()
        mock_resp.json.return_value = {"candidates": [{"content": {"parts": [{"text": "not json"}]}}]}
        with patch("wealth_snapshot.services.gemini.httpx.post", return_value=mock_resp):
            assert gemini.estimate_price("AAPL") is None

    def test_retries_transient_failures(self, gemini):
        side_effect = [httpx.ConnectError("down"), _reply({"price": 5})]
        with patch("wealth_snapshot.services.gemini.httpx.post", side_effect=side_effect) as mock_post:
            assert gemini.estimate_price("AAPL") == 5.0
        assert mock_post.call_count == 2

    def test_gives_up_after_max_attempts(self, gemini):
        with patch("wealth_snapshot.services.gemini.httpx.post", side_effect=httpx.ConnectError("down")) as mock_post:
            assert gemini.estimate_price("AAPL") is None
        assert mock_post.call_count == 3

    def test_disabled_without_key(self):
        service = GeminiService(api_key="", cache=PriceCache(ttl=60))
        assert not service.enabled
        with patch("wealth_snapshot.services.gemini.httpx.post") as mock_post:
            assert service.estimate_price("AAPL") is None
        mock_post.assert_not_called()


class TestExtractAssets:
    def test_returns_records(self, gemini):
        records = [{"category": "CASH", "institution": "HSBC", "amount": 100, "currency": "HKD"}]
        with patch("wealth_snapshot.services.gemini.httpx.post", return_value=_reply(records)) as mock_post:
            assert gemini.extract_assets(b"\x89PNG", "image/png") == records
        parts = mock_post.call_args.kwargs["json"]["contents"][0]["parts"]
        assert parts[0]["inlineData"] == {
            "mimeType": "image/png",
            "data": base64.b64encode(b"\x89PNG").decode("ascii"),
        }

    def test_non_list_payload_is_none(self, gemini):
        with patch("wealth_snapshot.services.gemini.httpx.post", return_value=_reply({"assets": []})):
            assert gemini.extract_assets(b"img") is None

    def test_failure_is_none(self, gemini):
        with patch("wealth_snapshot.services.gemini.httpx.post", side_effect=httpx.ConnectError("down")):
            assert gemini.extract_assets(b"img") is None
