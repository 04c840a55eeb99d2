"""Configuration validation utilities."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Sequence

from web3 import Web3

from .defaults import AppConfig


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


class ConfigValidator:
    """Validates configuration parameters and external inputs."""

    @staticmethod
    def validate_config(config: AppConfig) -> list[ValidationError]:
        """Validate all parameter sections."""
        errors = []

        if not config.chain.rpc_url.startswith(("http://", "https://")):
            errors.append(ValidationError(
                field="chain.rpc_url",
                message="Must be an http(s) URL",
                value=config.chain.rpc_url
            ))

        if config.chain.confirmation_timeout_seconds <= 0:
            errors.append(ValidationError(
                field="chain.confirmation_timeout_seconds",
                message="Must be a positive number",
                value=config.chain.confirmation_timeout_seconds
            ))

        deployment = config.deployment
        for name in ("batch_size", "initial_supply_tokens"):
            value = getattr(deployment, name)
            if not isinstance(value, int) or value <= 0:
                errors.append(ValidationError(
                    field=f"deployment.{name}",
                    message="Must be a positive integer",
                    value=value
                ))

        if not isinstance(deployment.token_decimals, int) or not 0 <= deployment.token_decimals <= 36:
            errors.append(ValidationError(
                field="deployment.token_decimals",
                message="Must be an integer between 0 and 36",
                value=deployment.token_decimals
            ))

        if not isinstance(deployment.pacing_delay_ms, int) or deployment.pacing_delay_ms < 0:
            errors.append(ValidationError(
                field="deployment.pacing_delay_ms",
                message="Must be a non-negative integer",
                value=deployment.pacing_delay_ms
            ))

        try:
            if Decimal(str(deployment.min_balance_eth)) < 0:
                raise InvalidOperation
        except InvalidOperation:
            errors.append(ValidationError(
                field="deployment.min_balance_eth",
                message="Must be a non-negative decimal amount",
                value=deployment.min_balance_eth
            ))

        distribution = config.distribution
        if not isinstance(distribution.sample_size, int) or distribution.sample_size <= 0:
            errors.append(ValidationError(
                field="distribution.sample_size",
                message="Must be a positive integer",
                value=distribution.sample_size
            ))

        if not (isinstance(distribution.min_amount, int) and isinstance(distribution.max_amount, int)) \
                or distribution.min_amount < 1 or distribution.min_amount > distribution.max_amount:
            errors.append(ValidationError(
                field="distribution.min_amount",
                message="Amount range must be integers with 1 <= min_amount <= max_amount",
                value=(distribution.min_amount, distribution.max_amount)
            ))

        if config.schedule.period_hours <= 0:
            errors.append(ValidationError(
                field="schedule.period_hours",
                message="Must be a positive number",
                value=config.schedule.period_hours
            ))

        if config.schedule.countdown_tick_seconds <= 0:
            errors.append(ValidationError(
                field="schedule.countdown_tick_seconds",
                message="Must be a positive number",
                value=config.schedule.countdown_tick_seconds
            ))

        return errors

    @staticmethod
    def validate_recipients(recipients: Sequence[str]) -> list[ValidationError]:
        """Validate the recipient pool: non-empty, well-formed addresses."""
        errors = []

        if not recipients:
            errors.append(ValidationError(
                field="recipients",
                message="Recipient pool must not be empty",
                value=[]
            ))

        for index, address in enumerate(recipients):
            if not Web3.is_address(address):
                errors.append(ValidationError(
                    field=f"recipients[{index}]",
                    message="Not a valid address",
                    value=address
                ))

        return errors

    @staticmethod
    def validate_private_keys(keys: Sequence[str]) -> list[ValidationError]:
        """Check private key shape without ever echoing key material."""
        errors = []

        if not keys:
            errors.append(ValidationError(
                field="private_keys",
                message="At least one private key is required",
                value=0
            ))

        for index, key in enumerate(keys):
            body = key[2:] if key.startswith("0x") else key
            if len(body) != 64 or any(c not in "0123456789abcdefABCDEF" for c in body):
                errors.append(ValidationError(
                    field=f"private_keys[{index}]",
                    message="Must be 32 bytes of hex",
                    value="<redacted>"
                ))

        return errors
