"""
Command line entry point.

    python -m tokenfleet run [--once] [--config-dir DIR] ...
    python -m tokenfleet validate [--config-dir DIR] ...
"""

import argparse
import asyncio
import signal
import sys
from datetime import timedelta
from pathlib import Path
from typing import Optional

import structlog

from .chain.client import connect
from .chain.compiler import ContractCompiler, load_contract_source
from .config.defaults import AppConfig
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator, ValidationError
from .deployment.deployer import DeploymentUnit
from .deployment.distributor import DistributionUnit
from .engine import CycleOrchestrator, CyclePolicy
from .errors import CompilationError, ConfigurationError
from .events import EventEmitter, FileEventSink, StdoutEventSink
from .logging.config import configure_logging
from .naming.generator import NameGenerator
from .scheduling.loop import SchedulerLoop

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_COMPILATION_FAILED = 1
EXIT_BAD_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tokenfleet",
        description="Deploy and distribute test tokens from a wallet fleet every 24 hours.",
    )
    parser.add_argument("--config-dir", type=Path, default=None,
                        help="Directory holding settings.yaml, .env and addresses.txt")
    parser.add_argument("--env-file", type=Path, default=None,
                        help="Path to the .env file providing PRIVATE_KEYS")
    parser.add_argument("--addresses", type=Path, default=None,
                        help="Recipient address list, one per line")
    parser.add_argument("--rpc-url", default=None, help="Override the chain RPC endpoint")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")

    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Start the deployment loop")
    run.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    run.add_argument("--contract", type=Path, default=None,
                     help="Solidity source to deploy instead of the bundled token")
    run.add_argument("--events-file", type=Path, default=None,
                     help="Also append log events to this JSONL file")
    run.add_argument("--events-format", choices=("pretty", "json"), default="pretty")

    sub.add_parser("validate", help="Check configuration and exit")
    return parser


def _cli_overrides(args: argparse.Namespace) -> dict:
    overrides: dict = {}
    if args.rpc_url:
        overrides["chain"] = {"rpc_url": args.rpc_url}
    return overrides


def _report(errors: list[ValidationError]) -> None:
    print(f"❌ Found {len(errors)} validation errors:", file=sys.stderr)
    for error in errors:
        print(f"  • {error.field}: {error.message} (value: {error.value})", file=sys.stderr)


def load_inputs(args: argparse.Namespace) -> tuple[AppConfig, list[str], list[str]]:
    """Load and validate configuration, private keys and recipients."""
    loader = ConfigLoader.create(args.config_dir)
    config = loader.load_config(_cli_overrides(args))
    private_keys = loader.load_private_keys(args.env_file)
    recipients = loader.load_recipients(args.addresses)

    errors = (
        ConfigValidator.validate_config(config)
        + ConfigValidator.validate_private_keys(private_keys)
        + ConfigValidator.validate_recipients(recipients)
    )
    if errors:
        raise ConfigurationError("Configuration is invalid", errors=errors)

    return config, private_keys, recipients


def build_emitter(args: argparse.Namespace) -> EventEmitter:
    emitter = EventEmitter([StdoutEventSink(format=args.events_format)])
    if args.events_file:
        emitter.add_sink(FileEventSink(str(args.events_file)))

    for sink in emitter.sinks:
        if not sink.health_check():
            logger.warning("Event sink unavailable", sink=sink.name, config=sink.config)
    return emitter


async def run_service(
    args: argparse.Namespace,
    config: AppConfig,
    private_keys: list[str],
    recipients: list[str],
) -> None:
    """Compile, connect, wire the components and run the scheduler."""
    compiler = ContractCompiler(
        contract_name=config.deployment.contract_name,
        solc_version=config.deployment.solc_version,
    )
    compiler.ensure_installed()
    artifact = compiler.compile(load_contract_source(args.contract))

    client = connect(
        config.chain.rpc_url,
        private_keys,
        confirmation_timeout=config.chain.confirmation_timeout_seconds,
        gas_limit=config.chain.gas_limit,
        request_timeout=config.chain.request_timeout_seconds,
    )
    emitter = build_emitter(args)

    orchestrator = CycleOrchestrator(
        name_generator=NameGenerator(),
        deployer=DeploymentUnit(client, config.deployment.min_balance_wei, emitter),
        distributor=DistributionUnit(
            client,
            amount_range=(config.distribution.min_amount, config.distribution.max_amount),
            emitter=emitter,
        ),
        artifact=artifact,
        recipient_pool=recipients,
        policy=CyclePolicy.from_config(config),
        emitter=emitter,
    )
    scheduler = SchedulerLoop(
        orchestrator,
        client.identities,
        period=timedelta(hours=config.schedule.period_hours),
        tick_seconds=config.schedule.countdown_tick_seconds,
        emitter=emitter,
        balance_fn=client.get_balance,
    )

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, scheduler.stop)
        except NotImplementedError:
            # add_signal_handler is unavailable on Windows event loops
            pass

    try:
        await scheduler.run(max_cycles=1 if args.once else None)
    finally:
        emitter.close()


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level, format_json=args.json_logs)

    try:
        config, private_keys, recipients = load_inputs(args)
    except ConfigurationError as e:
        logger.error("Configuration error", error=str(e), source=e.source)
        if e.errors:
            _report(e.errors)
        return EXIT_BAD_CONFIG

    if args.command == "validate":
        print(f"✅ Configuration is valid: {len(private_keys)} wallet(s), {len(recipients)} recipient(s)")
        return EXIT_OK

    try:
        asyncio.run(run_service(args, config, private_keys, recipients))
    except CompilationError as e:
        logger.error("Contract compilation failed", error=str(e), diagnostics=e.diagnostics)
        return EXIT_COMPILATION_FAILED

    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
