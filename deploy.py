"""
Contract Deployment - Main Entry Point
Deploys a compiled contract by name and prints its address

Usage:
    python deploy.py VaultETH --network bscTestnet
    python deploy.py DontBuyThisToken --network hardhat --timeout 0
"""

import os
import sys
import json
import asyncio
import argparse
from pathlib import Path
from typing import List, Optional, Sequence
from loguru import logger
from dotenv import load_dotenv

from blockchain.network_config import NetworkConfigError, NetworkRegistry
from deployment import DeploymentConfig, DeploymentOrchestrator, OutcomeReporter
from deployment.models import DEFAULT_CONFIRMATION_TIMEOUT, DEFAULT_POLL_INTERVAL

load_dotenv()


def configure_logging(verbose: bool = False):
    """Console sink always, file sink when DEPLOY_LOG_FILE is set"""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level="DEBUG" if verbose else "INFO"
    )

    log_file = os.getenv('DEPLOY_LOG_FILE')
    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
            level="DEBUG"
        )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Deploy a compiled contract by name")
    parser.add_argument("contract", help="Contract name, e.g. VaultETH or contracts/Vault.sol:VaultETH")
    parser.add_argument(
        "--network",
        default=os.getenv('HARDHAT_NETWORK'),
        help="Network name from the network config (default: config default_network)"
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to networks.json")
    parser.add_argument("--artifacts", type=Path, default=Path("artifacts"), help="Compiled artifacts directory")
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_CONFIRMATION_TIMEOUT,
        help="Seconds to wait for confirmation, 0 waits forever"
    )
    parser.add_argument("--poll-interval", type=float, default=DEFAULT_POLL_INTERVAL)
    parser.add_argument(
        "--constructor-args",
        default="[]",
        help="Constructor arguments as a JSON array"
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def parse_constructor_args(raw: str) -> List:
    try:
        args = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"--constructor-args is not valid JSON: {e}") from e

    if not isinstance(args, list):
        raise ValueError("--constructor-args must be a JSON array")

    return args


def build_config(args: argparse.Namespace) -> DeploymentConfig:
    """Assemble the explicit deployment config from CLI args and environment"""
    if args.timeout < 0:
        raise ValueError("--timeout must be >= 0")
    if args.poll_interval <= 0:
        raise ValueError("--poll-interval must be > 0")

    registry = NetworkRegistry.from_file(args.config)
    network = registry.get(args.network)

    return DeploymentConfig(
        network=network,
        artifacts_dir=args.artifacts,
        confirmation_timeout=args.timeout or None,
        poll_interval=args.poll_interval
    )


async def run(
    contract_name: str,
    config: DeploymentConfig,
    constructor_args: Sequence = (),
    reporter: Optional[OutcomeReporter] = None,
    w3=None
) -> int:
    """Deploy one contract and report it, returning the process exit status"""
    reporter = reporter or OutcomeReporter()
    orchestrator = DeploymentOrchestrator(config, w3=w3)

    result = await orchestrator.deploy(contract_name, constructor_args)
    return reporter.report(result)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)

    reporter = OutcomeReporter()

    try:
        config = build_config(args)
        constructor_args = parse_constructor_args(args.constructor_args)
    except (NetworkConfigError, ValueError) as e:
        return reporter.report_error(e)

    return asyncio.run(run(args.contract, config, constructor_args, reporter))


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
