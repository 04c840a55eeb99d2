"""
Single-contract deployment from one wallet.

Checks the wallet balance first so that a doomed transaction is never
submitted, then creates one token contract with the generated name and
symbol. No retries happen here; the orchestrator decides what to do next.
"""

from typing import Optional

import structlog
from web3 import Web3

from ..chain.client import ChainClient
from ..errors import InsufficientFunds
from ..events import EventEmitter
from ..models.deployment import CompiledArtifact, DeployedContract, SigningIdentity, TokenSpec

logger = structlog.get_logger(__name__)

DEFAULT_MIN_BALANCE_WEI = 10 ** 12  # 0.000001 ETH


class DeploymentUnit:
    """Deploys one token contract per call."""

    def __init__(
        self,
        client: ChainClient,
        min_balance_wei: int = DEFAULT_MIN_BALANCE_WEI,
        emitter: Optional[EventEmitter] = None,
    ) -> None:
        self.client = client
        self.min_balance_wei = min_balance_wei
        self.emitter = emitter or EventEmitter()

    async def deploy_one(
        self,
        identity: SigningIdentity,
        token_spec: TokenSpec,
        artifact: CompiledArtifact,
        initial_supply: int,
    ) -> DeployedContract:
        """
        Deploy one token contract from ``identity``.

        Args:
            identity: Deploying wallet
            token_spec: Generated name and symbol
            artifact: Compiled token contract
            initial_supply: Supply in base units minted to the deployer

        Returns:
            Handle on the deployed contract

        Raises:
            InsufficientFunds: If the balance is below the minimum threshold
            TransactionFailed: If the node rejects or reverts the deployment
            TransportError: On network failure or confirmation timeout
        """
        balance = await self.client.get_balance(identity)
        self.emitter.info(
            f"Wallet {identity.short_address} balance: {Web3.from_wei(balance, 'ether')} ETH",
            wallet=identity.address,
            balance_wei=balance
        )

        if balance < self.min_balance_wei:
            raise InsufficientFunds(
                f"Balance too low to deploy from {identity.short_address}",
                address=identity.address,
                balance_wei=balance,
                required_wei=self.min_balance_wei,
            )

        self.emitter.info(
            f"Deploying token {token_spec.name.upper()} ({token_spec.symbol})...",
            wallet=identity.address
        )

        contract = await self.client.deploy(
            identity,
            artifact,
            (token_spec.name, token_spec.symbol, initial_supply),
        )

        logger.info(
            "Token deployed",
            wallet=identity.short_address,
            name=token_spec.name,
            symbol=token_spec.symbol,
            address=contract.address,
            tx_hash=contract.tx_hash
        )
        self.emitter.info(
            f"Deployed at: {contract.address[:8]}...",
            wallet=identity.address,
            contract=contract.address,
            tx_hash=contract.tx_hash
        )
        return contract
