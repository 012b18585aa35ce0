"""
Tests for blockchain market data, wallets, transactions and verification.
"""

from typing import get_args

import httpx
import pytest

from cafe_intel import blockchain
from cafe_intel.credentials import CredentialRegistry, Provider
from cafe_intel.errors import CallerInputError, ProviderPayloadError
from cafe_intel.models import IdentityType
from cafe_intel.synthetic import BASE_BLOCK_HEIGHT

from conftest import all_credentials, credentials_for, json_response, make_context


def etherscan_handler(request: httpx.Request) -> httpx.Response:
    """Minimal Etherscan + CoinGecko simulation keyed on module/action."""
    if request.url.host == "api.coingecko.com":
        return json_response({"ethereum": {
            "usd": 3100.0,
            "usd_24h_change": 1.5,
            "usd_24h_vol": 9_000_000_000,
            "usd_market_cap": 370_000_000_000,
        }})

    action = request.url.params["action"]
    if action == "eth_blockNumber":
        return json_response({"jsonrpc": "2.0", "id": 83, "result": "0x1312d00"})
    if action == "gasoracle":
        return json_response({"status": "1", "message": "OK", "result": {"ProposeGasPrice": "31"}})
    if action == "balance":
        return json_response({"status": "1", "message": "OK", "result": str(2 * 10 ** 18)})
    if action == "eth_getTransactionCount":
        return json_response({"jsonrpc": "2.0", "id": 1, "result": "0x5"})
    if action == "txlist":
        return json_response({"status": "1", "message": "OK", "result": [
            {"timeStamp": "1700000000", "hash": "0x01"},
            {"timeStamp": "1690000000", "hash": "0x02"},
        ]})
    if action == "eth_getCode":
        return json_response({"jsonrpc": "2.0", "id": 1, "result": "0x"})
    if action == "eth_getBlockByNumber":
        return json_response({"jsonrpc": "2.0", "id": 1, "result": {
            "number": "0x1312d00",
            "timestamp": "0x65000000",
            "transactions": [
                {"hash": f"0x{i:02x}", "from": "0xaa", "to": "0xbb", "value": "0x0"}
                for i in range(20)
            ],
        }})
    return httpx.Response(400)


class TestGetCoinId:
    """Test suite for get_coin_id()."""

    def test_known_networks(self):
        """Test CoinGecko ids for supported networks."""
        assert blockchain.get_coin_id("Polygon") == "matic-network"
        assert blockchain.get_coin_id("bitcoin") == "bitcoin"

    def test_unknown_defaults_to_ethereum(self):
        """Test that an unknown network maps to ethereum."""
        assert blockchain.get_coin_id("solana") == "ethereum"


class TestGetNetworkData:
    """Test suite for BlockchainService.get_network_data()."""

    @pytest.mark.asyncio
    async def test_mock_ethereum(self):
        """Test synthetic ethereum data without credentials."""
        context, transport = make_context(CredentialRegistry.empty())
        data = await blockchain.BlockchainService(context).get_network_data("ethereum")

        assert data.price > 0
        assert data.block_height >= BASE_BLOCK_HEIGHT
        assert data.gas_price is not None
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_mock_bitcoin_has_no_gas_price(self):
        """Test that non-ethereum networks carry no gas price."""
        context, _ = make_context(CredentialRegistry.empty())
        data = await blockchain.BlockchainService(context).get_network_data("bitcoin")

        assert data.gas_price is None
        assert data.network == "bitcoin"

    @pytest.mark.asyncio
    async def test_live_ethereum(self):
        """Test a live quote with Etherscan block height and gas price."""
        context, _ = make_context(
            credentials_for(Provider.COINGECKO, Provider.ETHERSCAN), etherscan_handler
        )
        data = await blockchain.BlockchainService(context).get_network_data("Ethereum")

        assert data.price == 3100.0
        assert data.volume == "9.0B"
        assert data.block_height == 0x1312d00
        assert data.gas_price == 31
        assert data.network == "ethereum"

    @pytest.mark.asyncio
    async def test_chain_values_fall_back_individually(self):
        """Test that a failing Etherscan keeps the live CoinGecko quote."""
        def handler(request):
            if request.url.host == "api.coingecko.com":
                return etherscan_handler(request)
            return httpx.Response(500)

        context, _ = make_context(credentials_for(Provider.COINGECKO, Provider.ETHERSCAN), handler)
        data = await blockchain.BlockchainService(context).get_network_data("ethereum")

        assert data.price == 3100.0
        assert data.block_height >= BASE_BLOCK_HEIGHT
        assert 20 <= data.gas_price < 70

    @pytest.mark.asyncio
    async def test_overflowing_gas_price_falls_back(self):
        """Test that a non-finite gas oracle answer yields a synthetic gas price."""
        def handler(request):
            if request.url.params.get("action") == "gasoracle":
                return json_response({"status": "1", "result": {"ProposeGasPrice": "1e400"}})
            return etherscan_handler(request)

        events = []
        context, _ = make_context(
            credentials_for(Provider.COINGECKO, Provider.ETHERSCAN), handler, reporter=events.append
        )
        data = await blockchain.BlockchainService(context).get_network_data("ethereum")

        assert data.price == 3100.0
        assert data.block_height == 0x1312d00
        assert 20 <= data.gas_price < 70
        assert [type(event.error) for event in events] == [ProviderPayloadError]

    @pytest.mark.asyncio
    async def test_coingecko_only_uses_synthetic_block_height(self):
        """Test that without an Etherscan key only CoinGecko is called."""
        context, transport = make_context(credentials_for(Provider.COINGECKO), etherscan_handler)
        data = await blockchain.BlockchainService(context).get_network_data("ethereum")

        assert data.price == 3100.0
        assert data.block_height >= BASE_BLOCK_HEIGHT
        assert transport.hosts() == ["api.coingecko.com"]


class TestVerifyIdentity:
    """Test suite for BlockchainService.verify_identity()."""

    @pytest.mark.asyncio
    async def test_masks_value(self):
        """Test that the echoed value is masked."""
        context, _ = make_context(CredentialRegistry.empty())
        result = await blockchain.BlockchainService(context).verify_identity(
            "email", "alice@example.com"
        )

        assert result.value == "al***@example.com"
        assert result.network == "ethereum"
        assert result.blockchain_hash.startswith("0x")
        assert len(result.blockchain_hash) == 66
        assert 70 <= result.trust_score < 100
        assert 80 <= result.confidence < 100

    @pytest.mark.asyncio
    async def test_live_anchor_uses_current_block(self):
        """Test that a live verification anchors to the current block."""
        context, _ = make_context(credentials_for(Provider.ETHERSCAN), etherscan_handler)
        result = await blockchain.BlockchainService(context).verify_identity(
            "wallet", "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"
        )

        assert result.status == "verified"
        assert result.block_height == 0x1312d00
        assert result.value == "0x742d...f44e"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("identity_type,value", [
        ("", "alice@example.com"),
        ("passport", "X123"),
        ("email", ""),
        ("phone", "   "),
    ])
    async def test_invalid_input(self, identity_type, value):
        """Test rejection of missing or unsupported input."""
        context, _ = make_context(CredentialRegistry.empty())
        with pytest.raises(CallerInputError):
            await blockchain.BlockchainService(context).verify_identity(identity_type, value)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("identity_type", get_args(IdentityType))
    async def test_every_identity_type_is_accepted(self, identity_type):
        """Test that the accepted types are exactly the IdentityType values."""
        context, _ = make_context(CredentialRegistry.empty())
        result = await blockchain.BlockchainService(context).verify_identity(identity_type, "someone")

        assert result.type == identity_type
        assert blockchain.IDENTITY_TYPES == ("email", "phone", "social", "wallet")


class TestAnalyzeWallet:
    """Test suite for BlockchainService.analyze_wallet()."""

    @pytest.mark.asyncio
    async def test_live_ethereum_wallet(self):
        """Test a wallet assembled from the four Etherscan answers."""
        context, transport = make_context(credentials_for(Provider.ETHERSCAN), etherscan_handler)
        wallet = await blockchain.BlockchainService(context).analyze_wallet("0xabc", "ethereum")

        assert wallet.balance == "2.0000 ETH"
        assert wallet.transaction_count == 5
        assert wallet.risk_score == 15
        assert wallet.first_seen <= wallet.last_activity
        assert wallet.is_contract is False
        assert len(transport.requests) == 4

    @pytest.mark.asyncio
    async def test_non_ethereum_is_synthetic(self):
        """Test that non-ethereum wallets are synthetic."""
        context, transport = make_context(all_credentials(), etherscan_handler)
        wallet = await blockchain.BlockchainService(context).analyze_wallet("bc1qxyz", "bitcoin")

        assert wallet.balance.endswith(" BTC")
        assert 0 <= wallet.risk_score <= 100
        assert wallet.first_seen <= wallet.last_activity
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_etherscan_error_text_falls_back(self):
        """Test that an Etherscan error answer falls back to synthetic data."""
        def handler(request):
            return json_response({"status": "0", "message": "NOTOK", "result": "Invalid API Key"})

        events = []
        context, _ = make_context(credentials_for(Provider.ETHERSCAN), handler, reporter=events.append)
        wallet = await blockchain.BlockchainService(context).analyze_wallet("0xabc", "ethereum")

        assert wallet.address == "0xabc"
        assert events[0].provider == "etherscan"

    @pytest.mark.asyncio
    async def test_throttled_code_lookup_is_not_a_contract_verdict(self):
        """Test that a rate-limit message from eth_getCode discards the live answer."""
        def handler(request):
            if request.url.params.get("action") == "eth_getCode":
                return json_response({"status": "0", "message": "NOTOK", "result": "Max rate limit reached"})
            return etherscan_handler(request)

        events = []
        context, _ = make_context(credentials_for(Provider.ETHERSCAN), handler, reporter=events.append)
        wallet = await blockchain.BlockchainService(context).analyze_wallet("0xabc", "ethereum")

        assert wallet.balance != "2.0000 ETH"
        assert [type(event.error) for event in events] == [ProviderPayloadError]


class TestRecentTransactions:
    """Test suite for BlockchainService.get_recent_transactions()."""

    @pytest.mark.asyncio
    async def test_synthetic_count_and_order(self):
        """Test synthetic transactions are newest first and honor the limit."""
        context, _ = make_context(CredentialRegistry.empty())
        transactions = await blockchain.BlockchainService(context).get_recent_transactions("polygon", 7)

        assert len(transactions) == 7
        timestamps = [tx.timestamp for tx in transactions]
        assert timestamps == sorted(timestamps, reverse=True)
        assert all(tx.status in ("confirmed", "pending", "failed") for tx in transactions)

    @pytest.mark.asyncio
    async def test_zero_limit(self):
        """Test that a zero limit returns no transactions."""
        context, _ = make_context(CredentialRegistry.empty())
        assert await blockchain.BlockchainService(context).get_recent_transactions("ethereum", 0) == []

    @pytest.mark.asyncio
    async def test_negative_limit(self):
        """Test that a negative limit is a caller error."""
        context, _ = make_context(CredentialRegistry.empty())
        with pytest.raises(CallerInputError):
            await blockchain.BlockchainService(context).get_recent_transactions("ethereum", -1)

    @pytest.mark.asyncio
    async def test_live_latest_block(self):
        """Test transactions read from the latest Etherscan block."""
        context, _ = make_context(credentials_for(Provider.ETHERSCAN), etherscan_handler)
        transactions = await blockchain.BlockchainService(context).get_recent_transactions("ethereum", 10)

        assert len(transactions) == 10
        assert all(tx.block == 0x1312d00 for tx in transactions)
