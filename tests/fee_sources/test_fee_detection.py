"""
Tests for Fee Sources.

============================================================
PURPOSE
============================================================
Verify the mock, wallet-watcher and API fee sources and the
factory.

TEST PRINCIPLES:
- No network: RPC client and HTTP session are mocked
- Detection errors never raise out of detect()

============================================================
"""

import asyncio
import json
import random
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from core.clock import MockClock
from core.exceptions import FeeSourceError, MissingConfigError, RPCError
from fee_sources import (
    ApiFeeSource,
    ConfirmationStatus,
    FeeEventSource,
    MockFeeSource,
    WalletWatcherFeeSource,
    confirmation_status_for,
    create_fee_source,
    extract_sol_inflow,
)

from .conftest import FakeResponse, fake_session


NOW = 1_700_000_000
WALLET = "FeeWallet1111"


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def clock():
    return MockClock.at(NOW)


def transaction(keys, pre, post, block_time=NOW - 60):
    return {
        "blockTime": block_time,
        "meta": {"preBalances": pre, "postBalances": post},
        "transaction": {"message": {"accountKeys": keys}},
    }


@pytest.fixture
def rpc_client():
    client = MagicMock()
    client.get_signatures_for_address = AsyncMock(return_value=[
        {"signature": "sigB", "err": None},
        {"signature": "sigFailed", "err": {"InstructionError": [0, "Custom"]}},
        {"signature": "sigA", "err": None},
    ])
    client.get_signature_statuses = AsyncMock(return_value=[
        {"confirmations": 40},
        {"confirmations": 20},
    ])
    transactions = {
        "sigB": transaction(["payer", WALLET], [5_000_000_000, 1_000_000_000], [3_000_000_000, 3_000_000_000]),
        "sigA": transaction([{"pubkey": WALLET}], [1_000_000_000], [1_500_000_000], block_time=NOW - 600),
    }
    client.get_transaction = AsyncMock(side_effect=lambda sig: transactions[sig])
    client.close = AsyncMock()
    return client


# ============================================================
# MOCK
# ============================================================

class TestMockFeeSource:
    """Tests for the random fee source."""

    @pytest.mark.asyncio
    async def test_event_shape(self, clock):
        source = MockFeeSource(clock=clock, rng=random.Random(0), detection_probability=1.0)

        events = await source.detect()

        assert len(events) == 1
        assert 0.1 <= events[0].amount_sol <= 5.1
        assert events[0].timestamp == NOW
        assert events[0].source == FeeEventSource.MOCK
        assert len(events[0].signature) == 88

    @pytest.mark.asyncio
    async def test_never_detects_at_zero_probability(self, clock):
        source = MockFeeSource(clock=clock, detection_probability=0.0)

        for _ in range(20):
            assert await source.detect() == []

    @pytest.mark.asyncio
    async def test_unique_signatures(self, clock):
        source = MockFeeSource(clock=clock, rng=random.Random(1), detection_probability=1.0)

        signatures = {(await source.detect())[0].signature for _ in range(50)}
        assert len(signatures) == 50


# ============================================================
# WALLET WATCHER
# ============================================================

class TestWalletWatcherHelpers:
    """Tests for confirmation mapping and inflow extraction."""

    @pytest.mark.parametrize("status,expected", [
        (None, ConfirmationStatus.PROCESSED),
        ({"confirmations": 3}, ConfirmationStatus.PROCESSED),
        ({"confirmations": 16}, ConfirmationStatus.CONFIRMED),
        ({"confirmations": 32}, ConfirmationStatus.FINALIZED),
        ({"confirmations": None, "confirmationStatus": "finalized"}, ConfirmationStatus.FINALIZED),
    ])
    def test_confirmation_status(self, status, expected):
        assert confirmation_status_for(status, 32) == expected

    def test_inflow_uses_wallet_index(self):
        tx = transaction(["payer", WALLET], [5_000_000_000, 0], [4_000_000_000, 1_000_000_000])
        assert extract_sol_inflow(tx, WALLET) == 1.0

    def test_outflow_is_zero(self):
        tx = transaction([WALLET], [2_000_000_000], [1_000_000_000])
        assert extract_sol_inflow(tx, WALLET) == 0.0

    def test_wallet_not_involved(self):
        tx = transaction(["a", "b"], [1, 2], [3, 4])
        assert extract_sol_inflow(tx, WALLET) == 0.0


class TestWalletWatcherFeeSource:
    """Tests for ledger-backed detection."""

    @pytest.mark.asyncio
    async def test_detects_inflows(self, rpc_client, clock):
        source = WalletWatcherFeeSource(rpc_client, WALLET, clock=clock)

        events = await source.detect()

        assert [e.signature for e in events] == ["sigB", "sigA"]
        assert events[0].amount_sol == pytest.approx(2.0)
        assert events[0].confirmation_status == ConfirmationStatus.FINALIZED
        assert events[1].amount_sol == pytest.approx(0.5)
        assert events[1].confirmation_status == ConfirmationStatus.CONFIRMED
        assert events[1].timestamp == NOW - 600
        assert source.last_processed_signature == "sigB"
        rpc_client.get_signature_statuses.assert_awaited_once_with(["sigB", "sigA"])

    @pytest.mark.asyncio
    async def test_poll_interval(self, rpc_client, clock):
        source = WalletWatcherFeeSource(rpc_client, WALLET, clock=clock, poll_interval_ms=30000)
        await source.detect()

        clock.advance(seconds=10)
        assert await source.detect() == []
        assert rpc_client.get_signatures_for_address.await_count == 1

        rpc_client.get_signatures_for_address.return_value = []
        clock.advance(seconds=20)
        assert await source.detect() == []
        assert rpc_client.get_signatures_for_address.await_count == 2
        _, kwargs = rpc_client.get_signatures_for_address.call_args
        assert kwargs["until"] == "sigB"

    @pytest.mark.asyncio
    async def test_rpc_error_returns_empty(self, rpc_client, clock):
        rpc_client.get_signatures_for_address.side_effect = RPCError("down", method="getSignaturesForAddress")
        source = WalletWatcherFeeSource(rpc_client, WALLET, clock=clock)

        assert await source.detect() == []

    @pytest.mark.asyncio
    async def test_single_transaction_error_is_skipped(self, rpc_client, clock):
        good = rpc_client.get_transaction.side_effect

        async def flaky(signature):
            if signature == "sigB":
                raise RPCError("timeout", method="getTransaction")
            return good(signature)

        rpc_client.get_transaction.side_effect = flaky
        source = WalletWatcherFeeSource(rpc_client, WALLET, clock=clock)

        events = await source.detect()

        assert [e.signature for e in events] == ["sigA"]


# ============================================================
# API
# ============================================================

class TestApiFeeSource:
    """Tests for the HTTP fee source."""

    @pytest.mark.asyncio
    async def test_parses_list_and_dedupes(self):
        payload = [
            {"signature": "s1", "timestamp": NOW, "amountSol": 1.25, "confirmationStatus": "finalized"},
            {"signature": "s2", "timestamp": NOW, "amountSol": 0.5},
            {"signature": "broken"},
        ]
        source = ApiFeeSource("https://fees.test/events")
        source._session = fake_session(FakeResponse(200, payload))

        events = await source.detect()
        assert [e.signature for e in events] == ["s1", "s2"]
        assert all(e.source == FeeEventSource.API for e in events)
        assert events[0].confirmation_status == ConfirmationStatus.FINALIZED

        assert await source.detect() == []

    @pytest.mark.asyncio
    async def test_parses_wrapped_payload(self):
        source = ApiFeeSource()
        source._session = fake_session(FakeResponse(200, {
            "events": [{"signature": "s1", "timestamp": NOW, "amountSol": 2}],
        }))

        events = await source.detect()
        assert events[0].amount_sol == 2.0

    @pytest.mark.asyncio
    async def test_http_error_returns_empty(self):
        source = ApiFeeSource()
        source._session = fake_session(FakeResponse(503))

        assert await source.detect() == []

    @pytest.mark.asyncio
    async def test_network_error_returns_empty(self):
        source = ApiFeeSource()
        source._session = fake_session(error=aiohttp.ClientConnectionError("refused"))

        assert await source.detect() == []

    @pytest.mark.asyncio
    async def test_timeout_is_fee_source_error(self):
        source = ApiFeeSource(timeout_seconds=1.0)
        source._session = fake_session(error=asyncio.TimeoutError())

        with pytest.raises(FeeSourceError) as exc_info:
            await source._fetch()

        assert "timed out" in str(exc_info.value)
        assert await source.detect() == []

    @pytest.mark.asyncio
    async def test_invalid_json_is_fee_source_error(self):
        source = ApiFeeSource()
        source._session = fake_session(FakeResponse(200, json.JSONDecodeError("Expecting value", "<html>", 0)))

        with pytest.raises(FeeSourceError):
            await source._fetch()

        assert await source.detect() == []

    @pytest.mark.asyncio
    async def test_close(self):
        source = ApiFeeSource()
        session = fake_session(FakeResponse(200, []))
        source._session = session

        await source.close()
        session.close.assert_awaited_once()


# ============================================================
# FACTORY
# ============================================================

class TestCreateFeeSource:
    """Tests for fee source selection."""

    def test_mock(self):
        assert isinstance(create_fee_source("mock"), MockFeeSource)

    def test_api(self):
        source = create_fee_source(FeeEventSource.API, api_url="https://fees.test")
        assert isinstance(source, ApiFeeSource)
        assert source.api_url == "https://fees.test"

    def test_wallet_watcher(self, rpc_client):
        source = create_fee_source("wallet-watcher", rpc_client=rpc_client, fee_wallet=WALLET)
        assert isinstance(source, WalletWatcherFeeSource)

    def test_wallet_watcher_requires_wallet(self, rpc_client):
        with pytest.raises(MissingConfigError):
            create_fee_source("wallet-watcher", rpc_client=rpc_client)

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_fee_source("carrier-pigeon")
