"""Default configuration parameters for the deployment engine."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class ChainParams:
    """RPC endpoint and transaction submission parameters."""
    rpc_url: str = "https://huddle-testnet.rpc.caldera.xyz/http"
    confirmation_timeout_seconds: float = 120.0      # Deadline for receipt waits
    request_timeout_seconds: float = 60.0            # HTTP request timeout
    gas_limit: Optional[int] = None                  # None = estimate per tx


@dataclass(frozen=True)
class DeploymentParams:
    """Per-cycle deployment parameters."""
    batch_size: int = 5                              # Contracts per wallet per cycle
    initial_supply_tokens: int = 1000                # Minted to the deployer
    token_decimals: int = 18
    min_balance_eth: str = "0.000001"                # Skip wallets below this
    pacing_delay_ms: int = 3000                      # Pause between deployments
    solc_version: str = "0.8.20"
    contract_name: str = "Token"

    @property
    def initial_supply(self) -> int:
        return self.initial_supply_tokens * 10 ** self.token_decimals

    @property
    def min_balance_wei(self) -> int:
        return int(Decimal(self.min_balance_eth) * 10 ** 18)


@dataclass(frozen=True)
class DistributionParams:
    """Post-deployment distribution parameters."""
    sample_size: int = 7                             # Recipients per contract
    min_amount: int = 1                              # Whole tokens
    max_amount: int = 50


@dataclass(frozen=True)
class ScheduleParams:
    """Cycle scheduling parameters."""
    period_hours: float = 24.0
    countdown_tick_seconds: float = 1.0


@dataclass(frozen=True)
class AppConfig:
    """Complete engine configuration."""
    chain: ChainParams = field(default_factory=ChainParams)
    deployment: DeploymentParams = field(default_factory=DeploymentParams)
    distribution: DistributionParams = field(default_factory=DistributionParams)
    schedule: ScheduleParams = field(default_factory=ScheduleParams)


def get_default_config() -> AppConfig:
    """Get default engine configuration."""
    return AppConfig()
