"""Pytest configuration and shared fixtures."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Sequence

import pytest

from tokenfleet.errors import TransactionFailed
from tokenfleet.events import BufferedEventSink, EventEmitter
from tokenfleet.models.deployment import (
    CompiledArtifact,
    DeployedContract,
    SigningIdentity,
    TransactionConfirmation,
)

DECIMALS_ABI = [
    {"type": "function", "name": "decimals", "inputs": [], "outputs": [{"type": "uint8"}]},
    {"type": "function", "name": "transfer", "inputs": [], "outputs": [{"type": "bool"}]},
]


class FakeChainClient:
    """In-memory stand-in for ChainClient recording every call."""

    def __init__(
        self,
        balance_wei: int = 10 ** 18,
        failing_deploys: Sequence[int] = (),
        failing_transfers: Sequence[int] = (),
        decimals: int = 18,
    ) -> None:
        self.balance_wei = balance_wei
        self.failing_deploys = set(failing_deploys)       # 1-based deploy call numbers
        self.failing_transfers = set(failing_transfers)   # 1-based transfer call numbers
        self.token_decimals = decimals
        self.deploy_calls: list[tuple[SigningIdentity, tuple]] = []
        self.transfer_calls: list[tuple[str, str, int]] = []

    async def get_balance(self, identity: SigningIdentity) -> int:
        return self.balance_wei

    async def deploy(self, identity: SigningIdentity, artifact: CompiledArtifact,
                     constructor_args: Sequence[Any]) -> DeployedContract:
        self.deploy_calls.append((identity, tuple(constructor_args)))
        number = len(self.deploy_calls)
        if number in self.failing_deploys:
            raise TransactionFailed(f"deploy #{number} reverted", reason="reverted")
        return DeployedContract(
            address=f"0x{number:040x}",
            abi=artifact.abi,
            identity=identity,
            tx_hash=f"0x{number:064x}",
        )

    async def call(self, contract: DeployedContract, identity: SigningIdentity,
                   method: str, args: Sequence[Any]) -> TransactionConfirmation:
        recipient, amount = args
        self.transfer_calls.append((contract.address, recipient, amount))
        number = len(self.transfer_calls)
        if number in self.failing_transfers:
            raise TransactionFailed(f"transfer #{number} reverted", reason="reverted")
        return TransactionConfirmation(tx_hash=f"0x{number:064x}", block_number=number)

    async def decimals(self, contract: DeployedContract) -> int:
        return self.token_decimals


class FakeClock:
    """Simulated clock: sleeping advances time instantly."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.current = start or datetime(2026, 1, 1, 9, 0, 0, tzinfo=timezone.utc)
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> None:
        self.current += delta

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += timedelta(seconds=seconds)
        await asyncio.sleep(0)


def make_identity(index: int) -> SigningIdentity:
    return SigningIdentity(address="0x" + f"{index:x}" * 40)


@pytest.fixture
def identities() -> list[SigningIdentity]:
    """Two wallets without signing accounts."""
    return [make_identity(1), make_identity(2)]


@pytest.fixture
def artifact() -> CompiledArtifact:
    return CompiledArtifact(abi=DECIMALS_ABI, bytecode="0x6080604052")


@pytest.fixture
def recipient_pool() -> list[str]:
    """Ten distinct recipient addresses."""
    return [f"0x{i:040x}" for i in range(100, 110)]


@pytest.fixture
def fake_client() -> FakeChainClient:
    return FakeChainClient()


@pytest.fixture
def buffer_sink() -> BufferedEventSink:
    return BufferedEventSink()


@pytest.fixture
def emitter(buffer_sink: BufferedEventSink) -> EventEmitter:
    return EventEmitter([buffer_sink])


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client_factory():
    """Build a FakeChainClient with custom failures."""
    return FakeChainClient


@pytest.fixture
def identity_factory():
    return make_identity
