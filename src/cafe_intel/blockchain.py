"""
Blockchain data - market quotes, wallet analysis, recent transactions and
identity verification anchoring.

CoinGecko supplies prices, Etherscan supplies chain state. Individual chain
values (block height, gas price) fall back to synthetic values on their own
so a market quote is never discarded because a secondary lookup failed.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, get_args

import httpx

from cafe_intel import synthetic
from cafe_intel.context import ServiceContext, request_json
from cafe_intel.credentials import Provider
from cafe_intel.errors import CallerInputError
from cafe_intel.fallback import ProviderAttempt, attempt_in_order
from cafe_intel.masking import mask_sensitive_value
from cafe_intel.models import (
    BlockchainData,
    IdentityType,
    Transaction,
    VerificationResult,
    WalletAnalysis,
)
from cafe_intel.normalize import (
    build_wallet_analysis,
    normalize_coingecko,
    normalize_contract_code,
    normalize_etherscan_balance,
    normalize_etherscan_txlist,
    normalize_gas_oracle,
    normalize_hex_result,
    normalize_latest_block,
)
from cafe_intel.ratelimit import PROVIDER_LIMITS


COINGECKO_URL = "https://api.coingecko.com/api/v3"
ETHERSCAN_URL = "https://api.etherscan.io/api"

COIN_IDS = {
    "ethereum": "ethereum",
    "bitcoin": "bitcoin",
    "polygon": "matic-network",
}
DEFAULT_NETWORK = "ethereum"

IDENTITY_TYPES = get_args(IdentityType)

TXLIST_PAGE_SIZE = 100


def get_coin_id(network: str) -> str:
    return COIN_IDS.get(network.lower(), "ethereum")


class BlockchainService:
    def __init__(self, context: ServiceContext):
        self.context = context

    @property
    def _mock_mode(self) -> bool:
        return self.context.credentials.mock_mode.blockchain

    async def get_network_data(self, network: str) -> BlockchainData:
        """
        Market and chain snapshot for a network.

        Args:
            network: "ethereum", "bitcoin", "polygon" or any other name

        Returns:
            BlockchainData; gas_price is set for ethereum only
        """
        network = network.lower()
        return await attempt_in_order(
            "get_network_data",
            [
                ProviderAttempt(
                    name="coingecko",
                    invoke=lambda: self._network_from_coingecko(network),
                    provider=Provider.COINGECKO,
                    rate_limit=PROVIDER_LIMITS["coingecko"],
                ),
            ],
            lambda: synthetic.network_data(network, self.context.rng),
            context=self.context,
            mock_mode=self._mock_mode,
        )

    async def verify_identity(
        self,
        identity_type: IdentityType,
        value: str,
        network: Optional[str] = None,
    ) -> VerificationResult:
        """
        Anchor an identity verification and return its record.

        The echoed value is always masked.

        Args:
            identity_type: One of email, phone, social, wallet
            value: Identifier being verified
            network: Chain to anchor on (default ethereum)

        Raises:
            CallerInputError: If the type is unknown or the value is empty
        """
        if not identity_type:
            raise CallerInputError("Verification type is required.")
        if identity_type not in IDENTITY_TYPES:
            raise CallerInputError(
                f"Unsupported verification type '{identity_type}'. "
                f"Expected one of: {', '.join(IDENTITY_TYPES)}."
            )
        if not value or not value.strip():
            raise CallerInputError("Verification value is required.")

        network = (network or DEFAULT_NETWORK).lower()
        return await attempt_in_order(
            "verify_identity",
            [ProviderAttempt(
                name="verification-ledger",
                invoke=lambda: self._anchor_verification(identity_type, value, network),
            )],
            lambda: synthetic.verification_result(identity_type, value, network, self.context.rng),
            context=self.context,
            mock_mode=self._mock_mode,
        )

    async def analyze_wallet(self, address: str, network: str) -> WalletAnalysis:
        """Balance, activity and risk profile of a wallet. Etherscan for ethereum."""
        network = network.lower()
        attempts = []
        if network == "ethereum":
            attempts.append(ProviderAttempt(
                name="etherscan",
                invoke=lambda: self._ethereum_wallet(address),
                provider=Provider.ETHERSCAN,
                rate_limit=PROVIDER_LIMITS["etherscan"],
            ))

        return await attempt_in_order(
            "analyze_wallet",
            attempts,
            lambda: synthetic.wallet_analysis(address, network, self.context.rng),
            context=self.context,
            mock_mode=self._mock_mode,
        )

    async def get_recent_transactions(self, network: str, limit: int = 10) -> List[Transaction]:
        """
        Most recent transactions on a network.

        Raises:
            CallerInputError: If limit is negative
        """
        if limit < 0:
            raise CallerInputError("Transaction limit must not be negative.")

        network = network.lower()
        attempts = []
        if network == "ethereum":
            attempts.append(ProviderAttempt(
                name="etherscan",
                invoke=lambda: self._ethereum_transactions(limit),
                provider=Provider.ETHERSCAN,
                rate_limit=PROVIDER_LIMITS["etherscan"],
            ))

        return await attempt_in_order(
            "get_recent_transactions",
            attempts,
            lambda: synthetic.transactions(limit, self.context.rng),
            context=self.context,
            mock_mode=self._mock_mode,
        )

    # Etherscan sub-lookups, each with its own synthetic fallback

    def _etherscan_params(self, **params: Any) -> Dict[str, Any]:
        params["apikey"] = self.context.credentials.key_for(Provider.ETHERSCAN)
        return params

    async def _etherscan_get(self, client: httpx.AsyncClient, **params: Any) -> Any:
        return await request_json(
            client, "etherscan", "GET", ETHERSCAN_URL, params=self._etherscan_params(**params)
        )

    async def _current_block_height(self, network: str) -> int:
        async def from_etherscan() -> int:
            async with self.context.http_client() as client:
                payload = await self._etherscan_get(client, module="proxy", action="eth_blockNumber")
            return normalize_hex_result(payload)

        attempts = []
        if network == "ethereum":
            attempts.append(ProviderAttempt(
                name="etherscan",
                invoke=from_etherscan,
                provider=Provider.ETHERSCAN,
                rate_limit=PROVIDER_LIMITS["etherscan"],
            ))

        return await attempt_in_order(
            "block_height",
            attempts,
            lambda: synthetic.synthetic_block_height(self.context.rng),
            context=self.context,
            mock_mode=False,
        )

    async def _gas_price(self) -> int:
        async def from_etherscan() -> int:
            async with self.context.http_client() as client:
                payload = await self._etherscan_get(client, module="gastracker", action="gasoracle")
            return normalize_gas_oracle(payload)

        return await attempt_in_order(
            "gas_price",
            [ProviderAttempt(
                name="etherscan",
                invoke=from_etherscan,
                provider=Provider.ETHERSCAN,
                rate_limit=PROVIDER_LIMITS["etherscan"],
            )],
            lambda: synthetic.synthetic_gas_price(self.context.rng),
            context=self.context,
            mock_mode=False,
        )

    # Live provider calls

    async def _network_from_coingecko(self, network: str) -> BlockchainData:
        coin_id = get_coin_id(network)
        async with self.context.http_client() as client:
            payload = await request_json(
                client,
                "coingecko",
                "GET",
                f"{COINGECKO_URL}/simple/price",
                params={
                    "ids": coin_id,
                    "vs_currencies": "usd",
                    "include_24hr_change": "true",
                    "include_24hr_vol": "true",
                    "include_market_cap": "true",
                },
            )

        block_height = await self._current_block_height(network)
        gas_price = await self._gas_price() if network == "ethereum" else None
        return normalize_coingecko(payload, coin_id, network, block_height, gas_price)

    async def _anchor_verification(
        self, identity_type: IdentityType, value: str, network: str
    ) -> VerificationResult:
        rng = self.context.rng
        return VerificationResult(
            trust_score=rng.randrange(30) + 70,
            blockchain_hash=synthetic.random_hash(rng),
            network=network,
            block_height=await self._current_block_height(network),
            timestamp=datetime.now(timezone.utc).isoformat(),
            status="verified",
            type=identity_type,
            value=mask_sensitive_value(value),
            confidence=rng.randrange(20) + 80,
        )

    async def _ethereum_wallet(self, address: str) -> WalletAnalysis:
        async with self.context.http_client() as client:
            balance_wei = normalize_etherscan_balance(await self._etherscan_get(
                client, module="account", action="balance", address=address, tag="latest",
            ))
            transaction_count = normalize_hex_result(await self._etherscan_get(
                client, module="proxy", action="eth_getTransactionCount", address=address, tag="latest",
            ))
            transactions = normalize_etherscan_txlist(await self._etherscan_get(
                client,
                module="account",
                action="txlist",
                address=address,
                startblock=0,
                endblock=99999999,
                page=1,
                offset=TXLIST_PAGE_SIZE,
                sort="desc",
            ))
            is_contract = normalize_contract_code(await self._etherscan_get(
                client, module="proxy", action="eth_getCode", address=address, tag="latest",
            ))

        return build_wallet_analysis(address, balance_wei, transaction_count, transactions, is_contract)

    async def _ethereum_transactions(self, limit: int) -> List[Transaction]:
        async with self.context.http_client() as client:
            payload = await self._etherscan_get(
                client, module="proxy", action="eth_getBlockByNumber", tag="latest", boolean="true",
            )
        return normalize_latest_block(payload, limit)
