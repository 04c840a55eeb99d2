"""
Chain client facade over an async RPC connection and a set of signing wallets.

Exposes the three chain operations the deployment engine needs (balance
queries, contract creation, state-mutating contract calls), each awaiting
on-chain confirmation under an explicit deadline. Every failure is mapped
onto the deployment error taxonomy so callers never see raw web3 errors.
"""

import asyncio
from typing import Any, Iterable, Optional, Sequence

import structlog
from aiohttp import ClientError
from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import ContractLogicError, TimeExhausted

from ..errors import DeploymentError, InsufficientFunds, TransactionFailed, TransportError
from ..models.deployment import (
    CompiledArtifact,
    DeployedContract,
    SigningIdentity,
    TransactionConfirmation,
)

logger = structlog.get_logger(__name__)

DEFAULT_CONFIRMATION_TIMEOUT = 120.0
DEFAULT_TOKEN_DECIMALS = 18

_FUNDS_MARKERS = ("insufficient funds", "insufficient balance")
_GAS_MARKERS = ("out of gas", "intrinsic gas too low", "gas required exceeds")


def classify_chain_error(exc: Exception, action: str) -> DeploymentError:
    """Map a web3/transport exception onto the deployment error taxonomy."""
    if isinstance(exc, DeploymentError):
        return exc

    message = str(exc)
    lowered = message.lower()

    if isinstance(exc, TimeExhausted):
        return TransportError(
            f"{action}: confirmation deadline expired",
            timed_out=True,
            context={"error": message},
        )

    if isinstance(exc, (ClientError, ConnectionError, OSError, asyncio.TimeoutError)):
        return TransportError(f"{action}: {message or type(exc).__name__}",
                              context={"error_type": type(exc).__name__})

    if any(marker in lowered for marker in _FUNDS_MARKERS):
        return InsufficientFunds(f"{action}: {message}")

    if isinstance(exc, ContractLogicError):
        return TransactionFailed(f"{action}: execution reverted", reason=message)

    if any(marker in lowered for marker in _GAS_MARKERS):
        return TransactionFailed(f"{action}: {message}", reason="out of gas")

    return TransactionFailed(f"{action}: {message}", reason=message,
                             context={"error_type": type(exc).__name__})


class ChainClient:
    """Thin facade over AsyncWeb3 and a fixed set of signing identities."""

    def __init__(
        self,
        w3: AsyncWeb3,
        identities: Iterable[SigningIdentity],
        confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
        gas_limit: Optional[int] = None,
    ) -> None:
        self.w3 = w3
        self.identities = tuple(identities)
        self.confirmation_timeout = confirmation_timeout
        self.gas_limit = gas_limit
        self._chain_id: Optional[int] = None

    async def get_balance(self, identity: SigningIdentity) -> int:
        """Return the wallet balance in wei."""
        try:
            return await self.w3.eth.get_balance(identity.address)
        except Exception as e:
            raise TransportError(
                f"Balance query failed for {identity.short_address}: {e}",
                context={"address": identity.address}
            ) from e

    async def deploy(
        self,
        identity: SigningIdentity,
        artifact: CompiledArtifact,
        constructor_args: Sequence[Any],
    ) -> DeployedContract:
        """Submit a contract-creation transaction and wait for its receipt."""
        action = f"deploy from {identity.short_address}"
        try:
            factory = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
            tx = await factory.constructor(*constructor_args).build_transaction(
                await self._tx_params(identity)
            )
            tx_hash = await self._sign_and_send(identity, tx)

            logger.info(
                "Awaiting deployment",
                wallet=identity.short_address,
                tx_hash=tx_hash[:10]
            )

            receipt = await self._wait_for_receipt(tx_hash)
        except DeploymentError:
            raise
        except Exception as e:
            raise classify_chain_error(e, action) from e

        address = receipt.get("contractAddress")
        if not address:
            raise TransactionFailed(f"{action}: receipt has no contract address",
                                    reason="no contract address", tx_hash=tx_hash)

        return DeployedContract(
            address=address,
            abi=artifact.abi,
            identity=identity,
            tx_hash=tx_hash,
        )

    async def call(
        self,
        contract: DeployedContract,
        identity: SigningIdentity,
        method: str,
        args: Sequence[Any],
    ) -> TransactionConfirmation:
        """Submit a state-mutating contract call and wait for confirmation."""
        action = f"{method} on {contract.address[:10]}"
        try:
            bound = self.w3.eth.contract(address=contract.address, abi=contract.abi)
            fn = getattr(bound.functions, method)(*args)
            tx = await fn.build_transaction(await self._tx_params(identity))
            tx_hash = await self._sign_and_send(identity, tx)
            receipt = await self._wait_for_receipt(tx_hash)
        except DeploymentError:
            raise
        except Exception as e:
            raise classify_chain_error(e, action) from e

        return TransactionConfirmation(
            tx_hash=tx_hash,
            block_number=receipt.get("blockNumber"),
            gas_used=receipt.get("gasUsed"),
        )

    async def decimals(self, contract: DeployedContract) -> int:
        """Read the token's declared decimal precision."""
        if not any(entry.get("name") == "decimals" for entry in contract.abi):
            return DEFAULT_TOKEN_DECIMALS
        try:
            bound = self.w3.eth.contract(address=contract.address, abi=contract.abi)
            return int(await bound.functions.decimals().call())
        except Exception as e:
            raise classify_chain_error(e, f"decimals on {contract.address[:10]}") from e

    async def _tx_params(self, identity: SigningIdentity) -> dict[str, Any]:
        if self._chain_id is None:
            self._chain_id = await self.w3.eth.chain_id

        params: dict[str, Any] = {
            "from": identity.address,
            "nonce": await self.w3.eth.get_transaction_count(identity.address, "pending"),
            "chainId": self._chain_id,
        }
        if self.gas_limit:
            params["gas"] = self.gas_limit
        return params

    async def _sign_and_send(self, identity: SigningIdentity, tx: dict[str, Any]) -> str:
        if identity.account is None:
            raise TransactionFailed(
                f"Wallet {identity.short_address} has no signing account",
                reason="missing signer"
            )
        signed = identity.account.sign_transaction(tx)
        tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(tx_hash)

    async def _wait_for_receipt(self, tx_hash: str) -> Any:
        receipt = await self.w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.confirmation_timeout
        )
        if receipt.get("status") == 0:
            raise TransactionFailed(
                f"Transaction {tx_hash[:10]} reverted",
                reason="reverted",
                tx_hash=tx_hash
            )
        return receipt


def load_identities(private_keys: Iterable[str]) -> list[SigningIdentity]:
    """Build signing identities from hex private keys."""
    return [SigningIdentity.from_account(Account.from_key(key.strip())) for key in private_keys]


def connect(
    rpc_url: str,
    private_keys: Iterable[str],
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
    gas_limit: Optional[int] = None,
    request_timeout: float = 60.0,
) -> ChainClient:
    """Create a ChainClient talking to ``rpc_url`` over HTTP."""
    w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout}))
    identities = load_identities(private_keys)

    logger.info(
        "Chain client created",
        rpc_url=rpc_url,
        wallets=[i.short_address for i in identities]
    )
    return ChainClient(w3, identities, confirmation_timeout=confirmation_timeout,
                       gas_limit=gas_limit)
